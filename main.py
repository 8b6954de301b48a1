"""
main.py — Resilience Report Generator — CLI Entry Point.

Builds Board Reports, Contingency Plan documents and Exercise Packages from
the dashboard data source. Each document is generated in memory and written once, complete.

Usage:
    python main.py --board-report                          # full board pack
    python main.py --board-report --period annual --citations --raw-data
    python main.py --board-report --sections executive-summary five-capitals
    python main.py --contingency emergency-care            # all four plan sections
    python main.py --contingency emergency-care --contingency-section "Mutual Aid Agreements"
    python main.py --exercise ex-cyber-001                 # exercise facilitator pack
    python main.py --board-report --config custom.yaml --log-level DEBUG

Outputs (data/output/):
    {prefix}-board-report-{yyyy-mm-dd}.pdf
    {service}-contingency-plans.pdf
    {service}-{section}.pdf
    Exercise_{Exercise_Name}_{yyyy-mm-dd}.pdf
"""

import argparse
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path

import yaml

from resilience_report.assembler import (
    board_report_filename,
    contingency_plans_filename,
    contingency_section_filename,
    exercise_filename,
    generate_board_report,
    generate_contingency_plans_pdf,
    generate_contingency_section_pdf,
    generate_exercise_pdf,
    write_output,
)
from resilience_report.config import load_config
from resilience_report.errors import ReportGenerationError
from resilience_report.models import SECTION_IDS, ReportOptions
from resilience_report.report_data import (
    REPORT_PERIODS,
    collect_report_data,
    load_contingency_service,
    load_exercise_package,
    load_source,
)
from resilience_report.sections.contingency import PLAN_SECTIONS, plan_sections


def _configure_logging(log_dir: str = "logs", level: str = "INFO") -> None:
    """Configure rotating file handler + stream handler.

    Args:
        log_dir: Directory for log files.
        level: Log level string.
    """
    effective_level = os.environ.get("LOG_LEVEL", level).upper()
    numeric = getattr(logging, effective_level, logging.INFO)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file = Path(log_dir) / f"reports_{datetime.today().strftime('%Y%m%d')}.log"

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=7, encoding="utf-8"
    )
    fh.setFormatter(fmt)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(numeric)
    root.addHandler(fh)
    root.addHandler(sh)
    logging.getLogger("reportlab").setLevel(logging.WARNING)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="resilience-report",
        description="Resilience Report Generator — Board Report, Contingency Plan and Exercise Package PDFs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --board-report
  python main.py --board-report --period last-quarter --citations
  python main.py --contingency emergency-care
  python main.py --contingency emergency-care --contingency-section "Mutual Aid Agreements"
  python main.py --exercise ex-cyber-001
        """,
    )
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config.yaml (default: config.yaml)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--data", default=None,
                        help="Dashboard data source YAML (default: paths.source_data)")
    parser.add_argument("--output-dir", default=None,
                        help="Output directory (default: paths.output_dir)")

    board = parser.add_argument_group("Board Report")
    board.add_argument("--board-report", action="store_true",
                       help="Generate the Board Report PDF")
    board.add_argument("--period", default="current-quarter", choices=list(REPORT_PERIODS),
                       help="Reporting period (default: current-quarter)")
    board.add_argument("--sections", nargs="+", default=list(SECTION_IDS),
                       choices=list(SECTION_IDS), metavar="SECTION",
                       help="Sections to include (default: all)")
    board.add_argument("--citations", action="store_true",
                       help="Append the data sources & citations page")
    board.add_argument("--no-disclaimer", action="store_true",
                       help="Omit the demonstration disclaimer banner")
    board.add_argument("--raw-data", action="store_true",
                       help="Append the raw KRI data appendix")

    contingency = parser.add_argument_group("Contingency Plans")
    contingency.add_argument("--contingency", metavar="SERVICE_ID",
                             help="Generate contingency plans for an essential service")
    contingency.add_argument("--contingency-section", metavar="TITLE",
                             choices=[title for title, _ in PLAN_SECTIONS],
                             help="Only this plan section (default: all four)")

    exercise = parser.add_argument_group("Exercise Packages")
    exercise.add_argument("--exercise", metavar="EXERCISE_ID",
                          help="Generate the facilitator package for a scenario exercise")
    return parser.parse_args(argv)


def _log_progress(logger: logging.Logger):
    def on_progress(percent: int, message: str) -> None:
        logger.info("[%3d%%] %s", percent, message)
    return on_progress


def run_pipeline(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Generate the requested documents.

    Args:
        args: Parsed CLI arguments.
        logger: Configured logger.

    Returns:
        0 on success, 1 on error.
    """
    try:
        cfg = load_config(args.config) if Path(args.config).exists() else load_config()
        source = load_source(args.data or cfg["paths"]["source_data"])
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Could not load configuration or data source: %s", exc, exc_info=True)
        return 1

    output_dir = args.output_dir or cfg["paths"]["output_dir"]
    now = datetime.now()

    # -------------------------------------------------------------------------
    # Board Report
    # -------------------------------------------------------------------------
    if args.board_report:
        logger.info("=" * 65)
        logger.info("BOARD REPORT: %s", REPORT_PERIODS[args.period])
        logger.info("=" * 65)
        options = ReportOptions(
            include_citations=args.citations,
            include_disclaimer=not args.no_disclaimer,
            include_raw_data=args.raw_data,
        )
        try:
            data = collect_report_data(source, args.period, args.sections, options, now)
            pdf = generate_board_report(data, cfg, on_progress=_log_progress(logger))
            write_output(pdf, output_dir,
                         board_report_filename(cfg["organisation"]["file_prefix"], now.date()))
        except ReportGenerationError as exc:
            logger.error("Board report rejected: %s", exc)
            return 1
        except Exception as exc:
            logger.error("Board report generation failed: %s", exc, exc_info=True)
            return 1

    # -------------------------------------------------------------------------
    # Contingency Plans
    # -------------------------------------------------------------------------
    if args.contingency:
        logger.info("=" * 65)
        logger.info("CONTINGENCY PLANS: %s", args.contingency)
        logger.info("=" * 65)
        try:
            service = load_contingency_service(source, args.contingency)
            if args.contingency_section:
                content = dict(plan_sections(service))[args.contingency_section]
                pdf = generate_contingency_section_pdf(
                    service, args.contingency_section, content, cfg, now)
                filename = contingency_section_filename(service.name, args.contingency_section)
            else:
                pdf = generate_contingency_plans_pdf(
                    service, cfg, now, on_progress=_log_progress(logger))
                filename = contingency_plans_filename(service.name)
            write_output(pdf, output_dir, filename)
        except KeyError as exc:
            logger.error("Unknown service: %s", exc)
            return 1
        except Exception as exc:
            logger.error("Contingency plan generation failed: %s", exc, exc_info=True)
            return 1

    # -------------------------------------------------------------------------
    # Exercise Package
    # -------------------------------------------------------------------------
    if args.exercise:
        logger.info("=" * 65)
        logger.info("EXERCISE PACKAGE: %s", args.exercise)
        logger.info("=" * 65)
        try:
            package = load_exercise_package(source, args.exercise)
            pdf = generate_exercise_pdf(package, cfg, now, on_progress=_log_progress(logger))
            write_output(pdf, output_dir, exercise_filename(package.exercise.name, now.date()))
        except KeyError as exc:
            logger.error("Unknown exercise: %s", exc)
            return 1
        except ReportGenerationError as exc:
            logger.error("Exercise package rejected: %s", exc)
            return 1
        except Exception as exc:
            logger.error("Exercise package generation failed: %s", exc, exc_info=True)
            return 1

    logger.info("=" * 65)
    logger.info("GENERATION COMPLETE")
    logger.info("=" * 65)
    return 0


def main() -> None:
    """Parse args, configure logging, and generate documents."""
    args = _parse_args()

    try:
        log_dir = load_config(args.config)["paths"]["log_dir"]
    except (OSError, yaml.YAMLError):
        log_dir = "logs"

    _configure_logging(log_dir=log_dir, level=args.log_level)
    logger = logging.getLogger(__name__)

    if not (args.board_report or args.contingency or args.exercise):
        _parse_args(["--help"])

    logger.info(
        "Resilience Report Generator v1.0 | %s",
        datetime.today().strftime("%Y-%m-%d %H:%M:%S"),
    )
    sys.exit(run_pipeline(args, logger))


if __name__ == "__main__":
    main()
