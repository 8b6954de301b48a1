"""
contingency.py — Contingency Plan section definitions.

Two documents share this composer:

    Single section  — title band, service panel, one plan section
    Full bundle     — cover band, service info table, all four plan
                      sections (each after the first on a new page)

Plan text uses the same light markup as the board narrative and is drawn
through the shared classifier.
"""

import logging
from datetime import datetime
from typing import Any

from resilience_report.canvas import FONT, FONT_BOLD, WHITE, PageCanvas
from resilience_report.composer import SectionComposer
from resilience_report.layout import Cursor
from resilience_report.models import ContingencyService

logger = logging.getLogger(__name__)

PLAN_SECTIONS = (
    ("Service Degradation Protocols", "degradation_protocols"),
    ("Alternative Delivery Models", "alternative_delivery"),
    ("Mutual Aid Agreements", "mutual_aid"),
    ("Recovery Prioritisation Framework", "recovery_prioritisation"),
)

INFO_TABLE_WIDTHS = (50, 100)


def plan_sections(service: ContingencyService) -> list[tuple[str, str]]:
    """(title, content) pairs for the service's four plan sections."""
    return [(title, getattr(service.plans, attr) or "") for title, attr in PLAN_SECTIONS]


class ContingencyComposer(SectionComposer):
    """Section renderers for contingency plan documents.

    Args:
        canvas: Recording canvas for this generation call.
        cursor: Cursor over that canvas; expected to start at y=0 on page 1
            so the title band sits flush with the top edge.
        cfg: Configuration dictionary.
        service: Service whose plans are rendered.
        generated_at: Timestamp printed as "Document Generated".
    """

    def __init__(
        self,
        canvas: PageCanvas,
        cursor: Cursor,
        cfg: dict[str, Any],
        service: ContingencyService,
        generated_at: datetime,
    ):
        super().__init__(canvas, cursor, cfg, margin=cfg["contingency"]["page"]["margin"])
        self.service = service
        self.generated_at = generated_at

    def title_band(self, title: str, subtitle: str, *, height: float, title_size: float,
                   subtitle_size: float, gap: float) -> None:
        """Full-bleed coloured band across the top of the first page."""
        origin = self.cursor.reserve(height, gap=gap)
        self.canvas.draw_rect(0, origin.y, self.canvas.page_width, height,
                              fill=self.colours["primary"], tag="title-band")
        self.canvas.draw_text(title, self.left, origin.y + height * 0.5,
                              font=FONT_BOLD, size=title_size, colour=WHITE, tag="title-band")
        self.canvas.draw_text(subtitle, self.left, origin.y + height * 0.8,
                              font=FONT, size=subtitle_size, colour=WHITE, tag="title-band")

    def _label_value(self, label: str, value: str, x: float, y: float) -> None:
        colour = self.colours["text"]
        self.canvas.draw_text(label, x, y, font=FONT_BOLD, size=11, colour=colour, tag="service-panel")
        offset = self.canvas.measure_text(label + " ", FONT_BOLD, 11)
        self.canvas.draw_text(value, x + offset, y, font=FONT, size=11, colour=colour, tag="service-panel")

    def service_panel(self) -> None:
        """Outlined panel with service name, owner and generation time."""
        height = 25.0
        origin = self.cursor.reserve(height, gap=10)
        self.canvas.draw_rect(self.left, origin.y, self.content_width, height,
                              fill=self.colours["panel"], stroke=self.colours["primary"],
                              line_width=0.5, tag="service-panel")
        self._label_value("Service:", self.service.name, self.left + 5, origin.y + 8)
        self._label_value("Executive Owner:", self.service.executive_owner, self.left + 5, origin.y + 16)
        self._label_value(
            "Document Generated:",
            self.generated_at.strftime("%d %b %Y, %H:%M"),
            self.canvas.page_width / 2, origin.y + 8,
        )

    def info_table(self) -> None:
        status = self.service.status.replace("-", " ")
        rows = [
            ["Service", self.service.name],
            ["Executive Owner", self.service.executive_owner],
            ["Status", status[:1].upper() + status[1:]],
            ["Document Generated", self.generated_at.strftime("%d %B %Y")],
        ]
        self.table(
            None, rows,
            column_widths=INFO_TABLE_WIDTHS,
            style=self.table_style(border=None, font_size=10, row_height=9, padding=3,
                                   bold_first_column=True),
            gap=15,
            tag="info-table",
        )

    def plan_section(self, title: str, content: str, *, number: int | None = None,
                     new_page: bool = False, gap: float = 5.0) -> None:
        heading = f"{number}. {title}" if number is not None else title
        self.banner(heading, new_page=new_page, fill=self.colours["dark"], size=11, gap=gap)
        drawn = self.narrative(content)
        if not drawn:
            logger.debug("Plan section '%s' for %s has no content", title, self.service.name)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def single_section(self, title: str, content: str) -> None:
        self.title_band("CONTINGENCY PLAN", title, height=35, title_size=18, subtitle_size=12, gap=10)
        self.service_panel()
        self.plan_section(title, content)

    def cover(self) -> None:
        self.title_band("CONTINGENCY PLANS", self.service.name, height=50, title_size=24,
                        subtitle_size=16, gap=15)
        self.info_table()
