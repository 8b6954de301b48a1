"""
decorator.py — Page decorator (second pass).

Runs after every content page exists, when the total page count is finally
known, and stamps running headers and footers onto each page exactly once.
It then finalizes the canvas, so nothing can be drawn afterwards.

    BoardReportDecorator  — tall title header on page 1, compact header on
                            pages 2..N, three-part footer with "Page i of N"
    ContingencyDecorator  — footer rule, document label and "Page i of N"
    ExerciseDecorator     — centred "Page i of N", exercise label after the cover
"""

import abc
import logging
from typing import Any

from resilience_report.canvas import FONT_BOLD, PageCanvas
from resilience_report.config import hex_colour
from resilience_report.errors import DocumentFinalizedError

logger = logging.getLogger(__name__)


def page_label(number: int, total: int) -> str:
    return f"Page {number} of {total}"


class PageDecorator(abc.ABC):
    """Base second-pass decorator; subclasses draw the header and footer.

    Args:
        cfg: Configuration dictionary.
        margin: Left/right page margin in mm.
    """

    def __init__(self, cfg: dict[str, Any], margin: float):
        brand = cfg["report"]["brand"]
        self.primary = hex_colour(brand["primary"])
        self.grey = hex_colour(brand["grey"])
        self.margin = margin

    def decorate(self, canvas: PageCanvas) -> int:
        """Stamp every page once, then finalize the canvas.

        Returns:
            Total number of pages.

        Raises:
            DocumentFinalizedError: If the canvas was already finalized.
        """
        if canvas.finalized:
            raise DocumentFinalizedError("Document has already been decorated")
        total = canvas.page_count
        for index in range(total):
            canvas.set_page(index)
            number = index + 1
            self.draw_header(canvas, number, total)
            self.draw_footer(canvas, number, total)
            canvas.current_page.label = page_label(number, total)
        canvas.finalize()
        logger.debug("Decorated %d page(s)", total)
        return total

    def draw_header(self, canvas: PageCanvas, number: int, total: int) -> None:
        """No header by default."""

    @abc.abstractmethod
    def draw_footer(self, canvas: PageCanvas, number: int, total: int) -> None:
        """Draw the footer of page number out of total."""


class BoardReportDecorator(PageDecorator):
    """Headers and footers for the Board Report.

    Args:
        cfg: Configuration dictionary.
        period: Reporting period label shown on page 1.
        generated_date: Generation timestamp string shown on page 1.
    """

    def __init__(self, cfg: dict[str, Any], period: str, generated_date: str):
        super().__init__(cfg, margin=cfg["report"]["page"]["margin"])
        self.organisation = cfg["organisation"]["name"]
        self.title = cfg["report"]["title"]
        self.confidentiality = cfg["report"]["confidentiality"]
        self.attribution = cfg["report"]["attribution"]
        self.period = period
        self.generated_date = generated_date

    def draw_header(self, canvas: PageCanvas, number: int, total: int) -> None:
        left, right = self.margin, canvas.page_width - self.margin
        if number == 1:
            canvas.draw_text(self.organisation, left, 18, font=FONT_BOLD, size=12,
                             colour=self.primary, tag="header")
            canvas.draw_text(self.title, left, 30, font=FONT_BOLD, size=24,
                             colour=self.primary, tag="header")
            canvas.draw_text(f"Reporting Period: {self.period}", left, 40, size=10,
                             colour=self.grey, tag="header")
            canvas.draw_text(f"Generated: {self.generated_date}", right, 40, size=10,
                             colour=self.grey, align="right", tag="header")
            canvas.draw_line(left, 45, right, 45, colour=self.primary, width=1.0, tag="header")
        else:
            canvas.draw_text(self.title, left, 15, font=FONT_BOLD, size=10,
                             colour=self.primary, tag="header")
            canvas.draw_text(self.organisation, right, 15, size=8,
                             colour=self.grey, align="right", tag="header")
            canvas.draw_line(left, 18, right, 18, colour=self.primary, width=0.5, tag="header")

    def draw_footer(self, canvas: PageCanvas, number: int, total: int) -> None:
        y = canvas.page_height - 10
        canvas.draw_text(self.confidentiality, self.margin, y, size=8,
                         colour=self.grey, tag="footer")
        canvas.draw_text(page_label(number, total), canvas.page_width / 2, y, size=8,
                         colour=self.grey, align="center", tag="footer")
        canvas.draw_text(self.attribution, canvas.page_width - self.margin, y, size=8,
                         colour=self.grey, align="right", tag="footer")


class ContingencyDecorator(PageDecorator):
    """Footer-only decoration for contingency plan documents.

    Args:
        cfg: Configuration dictionary.
        document_label: Left footer text, e.g. "<org> - A&E Contingency Plans".
    """

    def __init__(self, cfg: dict[str, Any], document_label: str):
        super().__init__(cfg, margin=cfg["contingency"]["page"]["margin"])
        self.document_label = document_label

    def draw_footer(self, canvas: PageCanvas, number: int, total: int) -> None:
        bottom = canvas.page_height
        right = canvas.page_width - self.margin
        canvas.draw_line(self.margin, bottom - 15, right, bottom - 15,
                         colour=self.primary, width=0.5, tag="footer")
        canvas.draw_text(self.document_label, self.margin, bottom - 8, size=8,
                         colour=self.grey, tag="footer")
        canvas.draw_text(page_label(number, total), right, bottom - 8, size=8,
                         colour=self.grey, align="right", tag="footer")


class ExerciseDecorator(PageDecorator):
    """Centred page numbers on every page; document label from page 2 on.

    Args:
        cfg: Configuration dictionary.
        document_label: Left footer text, e.g. "<exercise> | Resilience Exercise Package".
    """

    def __init__(self, cfg: dict[str, Any], document_label: str):
        super().__init__(cfg, margin=cfg["exercise"]["page"]["margin"])
        self.document_label = document_label

    def draw_footer(self, canvas: PageCanvas, number: int, total: int) -> None:
        y = canvas.page_height - 7
        canvas.draw_text(page_label(number, total), canvas.page_width / 2, y, size=8,
                         colour=self.grey, align="center", tag="footer")
        if number > 1:
            canvas.draw_text(self.document_label, self.margin, y, size=8,
                             colour=self.grey, tag="footer")
