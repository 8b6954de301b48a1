"""
assembler.py — Document Assembler.

Top-level driver for one generation call:

    1. Validate the input (fail fast, before any drawing)
    2. Create a private PageCanvas + Cursor
    3. Run each enabled section in order (progress + cancellation checks
       happen only between sections)
    4. Second pass: PageDecorator stamps headers/footers with "Page i of N"
    5. Serialize to PDF bytes

Every call owns its own canvas and cursor; nothing is kept between calls, so
concurrent generations for different requests are independent. Any error
aborts the call and the partially built document is discarded.

File naming helpers follow the established download names:
    {product}-board-report-{yyyy-MM-dd}.pdf
    {service-slug}-{section-slug}.pdf
    {service-slug}-contingency-plans.pdf
    Exercise_{Exercise_Name}_{yyyy-MM-dd}.pdf
"""

import asyncio
import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

from resilience_report.canvas import PageCanvas
from resilience_report.config import load_config
from resilience_report.decorator import BoardReportDecorator, ContingencyDecorator, ExerciseDecorator
from resilience_report.layout import Cursor
from resilience_report.models import (
    ContingencyService,
    ExercisePackage,
    ReportData,
    validate_exercise_package,
    validate_report_data,
)
from resilience_report.progress import CancellationToken, ProgressCallback, ProgressReporter
from resilience_report.sections.board import BoardReportComposer, plan_sections
from resilience_report.sections.contingency import ContingencyComposer, plan_sections as contingency_sections
from resilience_report.sections.exercise import ExerciseComposer, plan_sections as exercise_sections

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# File naming
# ---------------------------------------------------------------------------

def slugify(text: str) -> str:
    """Lower-case text and replace each whitespace run with a hyphen."""
    return _WHITESPACE.sub("-", text.strip().lower())


def board_report_filename(product: str, generated_on: date) -> str:
    return f"{product}-board-report-{generated_on.strftime('%Y-%m-%d')}.pdf"


def contingency_section_filename(service_name: str, section_title: str) -> str:
    return f"{slugify(service_name)}-{slugify(section_title)}.pdf"


def contingency_plans_filename(service_name: str) -> str:
    return f"{slugify(service_name)}-contingency-plans.pdf"


def exercise_filename(exercise_name: str, generated_on: date) -> str:
    return f"Exercise_{_WHITESPACE.sub('_', exercise_name.strip())}_{generated_on.strftime('%Y-%m-%d')}.pdf"


def write_output(payload: bytes, output_dir: str | Path, filename: str) -> Path:
    """Write generated bytes to output_dir/filename and return the path."""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / filename
    path.write_bytes(payload)
    logger.info("Saved %s (%d bytes)", path, len(payload))
    return path


# ---------------------------------------------------------------------------
# Board report
# ---------------------------------------------------------------------------

def build_board_document(
    data: ReportData,
    cfg: dict[str, Any] | None = None,
    progress: ProgressReporter | None = None,
    cancel_token: CancellationToken | None = None,
) -> PageCanvas:
    """Lay out and decorate a Board Report without serializing it.

    Args:
        data: Report data snapshot.
        cfg: Configuration dictionary; defaults to load_config().
        progress: Optional progress reporter.
        cancel_token: Optional token checked between sections.

    Returns:
        Finalized PageCanvas.

    Raises:
        ReportDataError: If data violates the input contract.
        GenerationCancelled: If cancel_token is set between sections.
    """
    validate_report_data(data)
    cfg = cfg or load_config()
    if progress is None:
        progress = ProgressReporter()
    page = cfg["report"]["page"]

    canvas = PageCanvas(title=f"{cfg['report']['title']} - {data.period}",
                        author=cfg["organisation"]["name"])
    cursor = Cursor(
        canvas,
        margin_top=page["content_top"],
        margin_bottom=page["bottom_reserve"],
        left=page["margin"],
        start_y=page["first_page_top"],
    )
    composer = BoardReportComposer(canvas, cursor, cfg, data)

    for step in plan_sections(composer):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(step.key)
        progress.emit(step.percent, step.message)
        if step.render is not None:
            step.render()

    if cancel_token is not None:
        cancel_token.raise_if_cancelled("finalize")
    progress.emit(98, "Finalizing report...")
    BoardReportDecorator(cfg, data.period, data.generated_date).decorate(canvas)
    return canvas


def generate_board_report(
    data: ReportData,
    cfg: dict[str, Any] | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
) -> bytes:
    """Generate a Board Report PDF.

    Args:
        data: Report data snapshot.
        cfg: Configuration dictionary; defaults to load_config().
        on_progress: Optional (percent, message) callback.
        cancel_token: Optional token checked between sections.

    Returns:
        PDF bytes.
    """
    progress = ProgressReporter(on_progress)
    logger.info("Generating board report for %s (%d section(s))", data.period, len(data.sections))
    canvas = build_board_document(data, cfg, progress, cancel_token)
    payload = canvas.serialize()
    progress.emit(100, "Report complete!")
    logger.info("Board report complete: %d page(s), %d bytes", canvas.page_count, len(payload))
    return payload


async def generate_board_report_async(
    data: ReportData,
    cfg: dict[str, Any] | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
) -> bytes:
    """Awaitable wrapper running generate_board_report in a worker thread."""
    return await asyncio.to_thread(generate_board_report, data, cfg, on_progress, cancel_token)


# ---------------------------------------------------------------------------
# Contingency plans
# ---------------------------------------------------------------------------

def _contingency_canvas(cfg: dict[str, Any], service: ContingencyService,
                        generated_at: datetime, title: str) -> ContingencyComposer:
    page = cfg["contingency"]["page"]
    canvas = PageCanvas(title=title, author=cfg["organisation"]["name"])
    cursor = Cursor(
        canvas,
        margin_top=page["content_top"],
        margin_bottom=page["bottom_reserve"],
        left=page["margin"],
        start_y=0,
    )
    return ContingencyComposer(canvas, cursor, cfg, service, generated_at)


def build_contingency_section_document(
    service: ContingencyService,
    section_title: str,
    section_content: str,
    cfg: dict[str, Any] | None = None,
    generated_at: datetime | None = None,
) -> PageCanvas:
    """Lay out and decorate a single contingency plan section."""
    cfg = cfg or load_config()
    generated_at = generated_at or datetime.now()
    composer = _contingency_canvas(cfg, service, generated_at,
                                   f"{service.name} - {section_title}")
    composer.single_section(section_title, section_content)
    label = f"{cfg['organisation']['name']} - {service.name} Contingency Plan"
    ContingencyDecorator(cfg, label).decorate(composer.canvas)
    return composer.canvas


def generate_contingency_section_pdf(
    service: ContingencyService,
    section_title: str,
    section_content: str,
    cfg: dict[str, Any] | None = None,
    generated_at: datetime | None = None,
) -> bytes:
    """PDF bytes for one contingency plan section."""
    canvas = build_contingency_section_document(service, section_title, section_content,
                                                cfg, generated_at)
    payload = canvas.serialize()
    logger.info("Contingency section '%s' for %s: %d page(s)",
                section_title, service.name, canvas.page_count)
    return payload


def build_contingency_plans_document(
    service: ContingencyService,
    cfg: dict[str, Any] | None = None,
    generated_at: datetime | None = None,
    progress: ProgressReporter | None = None,
    cancel_token: CancellationToken | None = None,
) -> PageCanvas:
    """Lay out and decorate the full contingency bundle for a service."""
    cfg = cfg or load_config()
    generated_at = generated_at or datetime.now()
    if progress is None:
        progress = ProgressReporter()
    composer = _contingency_canvas(cfg, service, generated_at,
                                   f"{service.name} - Contingency Plans")

    progress.emit(5, "Adding cover page...")
    composer.cover()
    sections = contingency_sections(service)
    for idx, (title, content) in enumerate(sections):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(title)
        progress.emit(10 + idx * 80 // len(sections), f"Adding {title}...")
        composer.plan_section(title, content, number=idx + 1, new_page=idx > 0, gap=8)

    if cancel_token is not None:
        cancel_token.raise_if_cancelled("finalize")
    progress.emit(98, "Finalizing document...")
    label = f"{cfg['organisation']['name']} - {service.name} Contingency Plans"
    ContingencyDecorator(cfg, label).decorate(composer.canvas)
    return composer.canvas


def generate_contingency_plans_pdf(
    service: ContingencyService,
    cfg: dict[str, Any] | None = None,
    generated_at: datetime | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
) -> bytes:
    """PDF bytes for every contingency plan section of a service."""
    progress = ProgressReporter(on_progress)
    canvas = build_contingency_plans_document(service, cfg, generated_at, progress, cancel_token)
    payload = canvas.serialize()
    progress.emit(100, "Document complete!")
    logger.info("Contingency plans for %s: %d page(s)", service.name, canvas.page_count)
    return payload


# ---------------------------------------------------------------------------
# Exercise packages
# ---------------------------------------------------------------------------

def build_exercise_document(
    package: ExercisePackage,
    cfg: dict[str, Any] | None = None,
    generated_at: datetime | None = None,
    progress: ProgressReporter | None = None,
    cancel_token: CancellationToken | None = None,
) -> PageCanvas:
    """Lay out and decorate an exercise package without serializing it.

    Raises:
        ReportDataError: If the package violates the input contract.
        GenerationCancelled: If cancel_token is set between sections.
    """
    validate_exercise_package(package)
    cfg = cfg or load_config()
    generated_at = generated_at or datetime.now()
    if progress is None:
        progress = ProgressReporter()
    page = cfg["exercise"]["page"]
    title = cfg["exercise"]["title"]

    canvas = PageCanvas(title=f"{package.exercise.name} - {title}", author=cfg["organisation"]["name"])
    cursor = Cursor(
        canvas,
        margin_top=page["content_top"],
        margin_bottom=page["bottom_reserve"],
        left=page["margin"],
        start_y=0,
    )
    composer = ExerciseComposer(canvas, cursor, cfg, package, generated_at)

    for step in exercise_sections(composer):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(step.key)
        progress.emit(step.percent, step.message)
        step.render()

    if cancel_token is not None:
        cancel_token.raise_if_cancelled("finalize")
    progress.emit(98, "Finalizing exercise package...")
    ExerciseDecorator(cfg, f"{package.exercise.name} | {title}").decorate(canvas)
    return canvas


def generate_exercise_pdf(
    package: ExercisePackage,
    cfg: dict[str, Any] | None = None,
    generated_at: datetime | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
) -> bytes:
    """PDF bytes for a facilitator's exercise package."""
    progress = ProgressReporter(on_progress)
    canvas = build_exercise_document(package, cfg, generated_at, progress, cancel_token)
    payload = canvas.serialize()
    progress.emit(100, "Exercise package complete!")
    logger.info("Exercise package '%s': %d page(s), %d bytes",
                package.exercise.name, canvas.page_count, len(payload))
    return payload
