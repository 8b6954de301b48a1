"""
board.py — Board Report section definitions.

Content of each Board Report section, and the fixed order in which enabled
sections are produced:

    Disclaimer -> Executive Summary -> Capital detail (one page each)
    -> Essential Services -> Scenario Testing -> Forward Look
    -> Citations -> Raw-data appendix

plan_sections() turns a ReportData into that ordered list of SectionSteps.
Sections that are not enabled are left out entirely, so they never open a
page. Each step carries the progress milestone announced before it runs.
"""

import logging
from typing import Any

from resilience_report.blocks import NumberedItem
from resilience_report.canvas import FONT, FONT_BOLD, PageCanvas
from resilience_report.composer import SectionComposer, SectionStep
from resilience_report.layout import Cursor
from resilience_report.models import (
    SECTION_ESSENTIAL_SERVICES,
    SECTION_EXECUTIVE_SUMMARY,
    SECTION_FIVE_CAPITALS,
    SECTION_FORWARD_LOOK,
    SECTION_SCENARIO_TESTING,
    CapitalSummary,
    ForwardLook,
    ReportData,
)

logger = logging.getLogger(__name__)

_SCENARIO_STATUS_LABELS = {"recent": "Recent", "due-soon": "Due Soon"}

# Section ids with a renderer; the remaining recognised ids are accepted but
# have no content yet.
RENDERED_SECTIONS = (
    SECTION_EXECUTIVE_SUMMARY,
    SECTION_FIVE_CAPITALS,
    SECTION_ESSENTIAL_SERVICES,
    SECTION_SCENARIO_TESTING,
    SECTION_FORWARD_LOOK,
)

CAPITALS_TABLE_WIDTHS = (40, 30, 30, 40)
KRI_TABLE_WIDTHS = (62, 27, 27, 27, 27)
SERVICES_TABLE_WIDTHS = (35, 25, 70, 35)
SCENARIOS_TABLE_WIDTHS = (70, 30, 30, 40)
RAW_DATA_TABLE_WIDTHS = (30, 56, 28, 28, 28)

CAPITALS_BASE_PERCENT = 30
CAPITAL_PERCENT_STEP = 8
CAPITALS_MAX_PERCENT = 70


def scenario_status_label(test_status: str) -> str:
    return _SCENARIO_STATUS_LABELS.get(test_status, "Overdue")


class BoardReportComposer(SectionComposer):
    """Section renderers for the Board Report.

    Args:
        canvas: Recording canvas for this generation call.
        cursor: Cursor over that canvas.
        cfg: Configuration dictionary.
        data: Validated report data.
    """

    def __init__(self, canvas: PageCanvas, cursor: Cursor, cfg: dict[str, Any], data: ReportData):
        super().__init__(canvas, cursor, cfg, margin=cfg["report"]["page"]["margin"])
        self.data = data
        self.report_cfg = cfg["report"]

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def disclaimer(self) -> None:
        """Outlined panel flagging the report as a demonstration."""
        lines = self.canvas.split_text(self.report_cfg["disclaimer"], self.content_width - 10, FONT, 8)
        height = max(25.0, 11 + len(lines) * 4 + 2)
        origin = self.cursor.reserve(height, gap=7)
        self.canvas.draw_rect(
            self.left, origin.y, self.content_width, height,
            fill=self.colours["light"], stroke=self.colours["primary"], tag="disclaimer",
        )
        self.canvas.draw_text(
            self.report_cfg["disclaimer_title"], self.left + 5, origin.y + 8,
            font=FONT_BOLD, size=10, colour=self.colours["dark"], tag="disclaimer",
        )
        for idx, line in enumerate(lines):
            self.canvas.draw_text(
                line, self.left + 5, origin.y + 14 + idx * 4,
                size=8, colour=self.colours["text"], tag="disclaimer",
            )

    def executive_summary(self) -> None:
        data = self.data
        self.banner("Executive Summary")
        self.subheading("Overall Resilience Status", keep_with_next=15)
        self.text(
            f"Aggregate Score: {data.aggregate_score:g}/100 "
            f"({data.aggregate_status}, {data.aggregate_trend})",
            gap=3,
        )
        self.narrative(data.executive_summary)

        self.subheading("Five Capitals Status Summary", keep_with_next=43)
        self.table(
            ["Capital", "Score", "Status", "Trend"],
            [[c.name, f"{c.score:g}/100", c.status, c.trend] for c in data.capitals],
            column_widths=CAPITALS_TABLE_WIDTHS,
            style=self.status_style(2),
            tag="capitals-table",
        )

        if data.critical_issues:
            self.subheading("Critical Issues for Board Attention")
            self.numbered_strings(data.critical_issues)
        if data.recommended_actions:
            self.subheading("Recommended Board Actions")
            self.numbered_strings(data.recommended_actions)

    def capital_detail(self, capital: CapitalSummary) -> None:
        """Full-page detail for one capital; always starts a new page."""
        self.banner(f"{capital.name} Capital", new_page=True)
        self.subheading("Current Status", keep_with_next=15)
        self.text(f"Score: {capital.score:g}/100 ({capital.status}, {capital.trend})", gap=3)
        self.narrative(capital.commentary)

        if capital.kris:
            self.subheading("Key Risk Indicators", keep_with_next=43)
            self.table(
                ["Metric", "Current", "Target", "Status", "Trend"],
                [[k.name, k.value, k.target, k.status, k.trend] for k in capital.kris],
                column_widths=KRI_TABLE_WIDTHS,
                style=self.status_style(3, font_size=8, row_height=7),
                tag="kri-table",
            )
        if capital.recent_changes:
            self.subheading("Recent Developments")
            self.bullet_list(capital.recent_changes[:3], size=9)
        if capital.risks:
            self.subheading("Key Risks")
            self.numbered_list(
                [NumberedItem(body=r.mitigation, label=r.description, number=idx)
                 for idx, r in enumerate(capital.risks, start=1)],
                size=9,
            )

    def essential_services(self) -> None:
        self.banner("Essential Services Status", new_page=True)
        self.subheading("Service Performance Summary", keep_with_next=16)
        self.table(
            ["Service", "Status", "Reason", "Last Updated"],
            [[s.name, s.status, s.reason, s.last_updated] for s in self.data.services or []],
            column_widths=SERVICES_TABLE_WIDTHS,
            style=self.status_style(1, font_size=8),
            tag="services-table",
        )

    def scenario_testing(self) -> None:
        self.banner("Scenario Testing & Learning", new_page=True)
        self.subheading("Recent Tests Conducted", keep_with_next=16)
        self.table(
            ["Scenario", "Last Tested", "Status", "Outcome"],
            [[s.name, s.last_tested, scenario_status_label(s.test_status), s.outcome]
             for s in self.data.scenarios or []],
            column_widths=SCENARIOS_TABLE_WIDTHS,
            style=self.table_style(font_size=8),
            tag="scenarios-table",
        )

    def _forward_look_content(self) -> ForwardLook:
        defaults = self.report_cfg["forward_look"]
        given = self.data.forward_look or ForwardLook()
        return ForwardLook(
            upcoming_tests=given.upcoming_tests or list(defaults.get("upcoming_tests", [])),
            emerging_risks=given.emerging_risks or list(defaults.get("emerging_risks", [])),
            board_actions=given.board_actions or list(defaults.get("board_actions", [])),
        )

    def forward_look(self) -> None:
        content = self._forward_look_content()
        self.banner("Forward Look & Recommendations", new_page=True)
        if content.upcoming_tests:
            self.subheading("Upcoming Resilience Tests")
            self.bullet_list(content.upcoming_tests, size=9, indent=3)
        if content.emerging_risks:
            self.subheading("Emerging Risks")
            self.bullet_list(content.emerging_risks, size=9, indent=3)
        if content.board_actions:
            self.subheading("Board Actions Required", keep_with_next=43)
            self.numbered_strings(content.board_actions)

    def citations(self) -> None:
        self.banner("Data Sources & Citations", new_page=True)
        citations = self.report_cfg["citations"]
        note = self.report_cfg.get("citations_note")
        for idx, citation in enumerate(citations):
            last = idx == len(citations) - 1
            self.text(citation, size=9, gap=5.5 if last and note else 0.5, tag="citation")
        if note:
            self.text(note, size=9, gap=0, colour=self.colours["grey"], tag="citation")

    def raw_data_appendix(self) -> None:
        """Every KRI across all capitals as one continuous table."""
        rows = [
            [capital.name, kri.name, kri.value, kri.target, kri.status]
            for capital in self.data.capitals
            for kri in capital.kris
        ]
        self.banner("Appendix: Raw KRI Data", new_page=True)
        if not rows:
            self.text("No key risk indicator data was supplied for this period.", size=9)
            return
        self.table(
            ["Capital", "Metric", "Current", "Target", "Status"],
            rows,
            column_widths=RAW_DATA_TABLE_WIDTHS,
            style=self.status_style(4, font_size=8, row_height=7),
            tag="raw-data-table",
        )


# ---------------------------------------------------------------------------
# Section plan
# ---------------------------------------------------------------------------

def plan_sections(composer: BoardReportComposer) -> list[SectionStep]:
    """Ordered steps for every enabled section of the report.

    Args:
        composer: Composer bound to the report data.

    Returns:
        SectionSteps in document order; disabled sections are absent.
    """
    data = composer.data
    steps: list[SectionStep] = []

    if data.options.include_disclaimer:
        steps.append(SectionStep("disclaimer", 5, "Adding disclaimer banner...", composer.disclaimer))

    if data.has_section(SECTION_EXECUTIVE_SUMMARY):
        steps.append(SectionStep(SECTION_EXECUTIVE_SUMMARY, 10, "Generating Executive Summary...",
                                 composer.executive_summary))

    if data.has_section(SECTION_FIVE_CAPITALS):
        steps.append(SectionStep(SECTION_FIVE_CAPITALS, CAPITALS_BASE_PERCENT,
                                 "Generating Five Capitals Analysis..."))
        for idx, capital in enumerate(data.capitals, start=1):
            percent = min(CAPITALS_BASE_PERCENT + idx * CAPITAL_PERCENT_STEP, CAPITALS_MAX_PERCENT)
            steps.append(SectionStep(
                f"{SECTION_FIVE_CAPITALS}:{capital.name}", percent,
                f"Processing {capital.name} Capital...",
                lambda capital=capital: composer.capital_detail(capital),
            ))

    if data.has_section(SECTION_ESSENTIAL_SERVICES) and data.services is not None:
        steps.append(SectionStep(SECTION_ESSENTIAL_SERVICES, 70, "Generating Essential Services Status...",
                                 composer.essential_services))

    if data.has_section(SECTION_SCENARIO_TESTING) and data.scenarios is not None:
        steps.append(SectionStep(SECTION_SCENARIO_TESTING, 80, "Generating Scenario Testing Summary...",
                                 composer.scenario_testing))

    if data.has_section(SECTION_FORWARD_LOOK):
        steps.append(SectionStep(SECTION_FORWARD_LOOK, 90, "Generating Forward Look...",
                                 composer.forward_look))

    if data.options.include_citations:
        steps.append(SectionStep("citations", 95, "Adding data source citations...", composer.citations))

    if data.options.include_raw_data:
        steps.append(SectionStep("raw-data", 96, "Adding raw data appendix...", composer.raw_data_appendix))

    for section_id in data.sections:
        if section_id not in RENDERED_SECTIONS:
            logger.debug("Section '%s' has no renderer; skipped", section_id)

    return steps
