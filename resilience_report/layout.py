"""
layout.py — Cursor / pagination engine.

The Cursor is the single owner of "where does the next thing go". Callers
describe an atomic unit (one wrapped paragraph, one table row, one banner)
by its height and ask reserve() for a place to draw it:

    origin = cursor.reserve(height, gap=5)
    canvas.draw_text(..., origin.y + ...)

If the unit does not fit above the bottom reserve, a new page is started
first, so nothing is ever assigned an origin that overflows the page. After
reserving, y moves down by height + gap. The gap is trailing space only: it
never forces a page break by itself, so a section ending near the bottom of
a page does not leave a blank page behind.

One Cursor belongs to one generation call. It is never shared.
"""

import logging
from dataclasses import dataclass

from resilience_report.canvas import PageCanvas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteOrigin:
    """Where a reserved block starts. page_break is True if reserving it opened a page."""
    page_index: int
    x: float
    y: float
    page_break: bool = False


class Cursor:
    """Vertical write position over a PageCanvas.

    Args:
        canvas: Canvas whose pages the cursor walks.
        margin_top: Content top (mm) on every page opened by the cursor.
        margin_bottom: Space (mm) kept free at the bottom of every page.
        left: Left content edge (mm), reported in every WriteOrigin.
        start_y: Starting y on the current page; defaults to margin_top.
    """

    def __init__(
        self,
        canvas: PageCanvas,
        margin_top: float,
        margin_bottom: float,
        left: float = 0.0,
        start_y: float | None = None,
    ):
        self._canvas = canvas
        self.margin_top = margin_top
        self.margin_bottom = margin_bottom
        self.left = left
        self.page_height = canvas.page_height
        self.page_index = canvas.current_page_index
        self.y = margin_top if start_y is None else start_y
        self._page_used = False

    @property
    def limit(self) -> float:
        """Lowest y any reserved block may reach on a page."""
        return self.page_height - self.margin_bottom

    @property
    def remaining(self) -> float:
        return self.limit - self.y

    @property
    def usable_height(self) -> float:
        """Height available on a freshly opened page."""
        return self.limit - self.margin_top

    @property
    def at_page_top(self) -> bool:
        """True while nothing has been reserved on the current page."""
        return not self._page_used

    def fits(self, height: float) -> bool:
        return self.y + height <= self.limit

    def reserve(self, height: float, gap: float = 0.0, keep_with_next: float = 0.0) -> WriteOrigin:
        """Reserve vertical space for one atomic block.

        Args:
            height: Height of the block in mm.
            gap: Trailing space added after the block.
            keep_with_next: Extra space that must also fit on this page,
                so headings are not stranded at the foot of a page.

        Returns:
            WriteOrigin for the block.
        """
        if height < 0:
            raise ValueError(f"Cannot reserve a negative height ({height})")

        page_break = False
        if not self.fits(height + keep_with_next) and self._page_used:
            self.advance_page()
            page_break = True
        if not self.fits(height):
            logger.warning(
                "Block of %.1fmm exceeds the usable page height (%.1fmm); it will overflow",
                height, self.usable_height,
            )

        origin = WriteOrigin(self.page_index, self.left, self.y, page_break)
        self.y += height + gap
        self._page_used = True
        return origin

    def advance_page(self) -> int:
        """Open a new page and move to its content top.

        Returns:
            Index of the new page.
        """
        self.page_index = self._canvas.new_page()
        self.y = self.margin_top
        self._page_used = False
        logger.debug("Page break -> page %d", self.page_index + 1)
        return self.page_index
