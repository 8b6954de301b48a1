"""
composer.py — Shared section composer.

SectionComposer holds the drawing vocabulary every document type uses:
section banners, sub-headings, wrapped text, classified narrative blocks,
bullet and numbered lists, and tables. Each primitive sizes its content
first and then reserves exactly that height through the Cursor, so every
page-break decision is made in one place (layout.Cursor).

Concrete documents (sections/board.py, sections/contingency.py and
sections/exercise.py) subclass it and only decide *what* goes into each
section.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from resilience_report.blocks import (
    BulletList,
    ContentBlock,
    Heading,
    NumberedItem,
    NumberedList,
    Paragraph,
    parse_blocks,
)
from resilience_report.canvas import FONT, FONT_BOLD, FONT_ITALIC, WHITE, Colour, PageCanvas
from resilience_report.config import hex_colour
from resilience_report.layout import Cursor
from resilience_report.tables import TableResult, TableStyle, draw_table

logger = logging.getLogger(__name__)

BODY_SIZE = 10
LIST_INDENT = 5.0
ITEM_GAP = 2.0
LIST_GAP = 5.0
PARAGRAPH_GAP = 5.0
INTRO_GAP = 3.0
BULLET = "•"

# Display status -> brand colour key for coloured Status cells.
STATUS_COLOUR_KEYS = {
    "Green": "green",
    "Amber": "amber",
    "Red": "red",
    "Operational": "green",
    "Degraded": "amber",
    "At Risk": "red",
}


@dataclass(frozen=True)
class SectionStep:
    """One unit of a document: progress milestone plus renderer."""
    key: str
    percent: int
    message: str
    render: Callable[[], None] | None = None


class SectionComposer:
    """Drawing primitives over one canvas/cursor pair.

    Args:
        canvas: Recording canvas for this generation call.
        cursor: Cursor owning the vertical position on that canvas.
        cfg: Configuration dictionary (see config.load_config).
        margin: Left/right page margin in mm.
    """

    def __init__(self, canvas: PageCanvas, cursor: Cursor, cfg: dict[str, Any], margin: float):
        self.canvas = canvas
        self.cursor = cursor
        self.cfg = cfg
        self.left = margin
        self.content_width = canvas.page_width - 2 * margin
        self.colours: dict[str, Colour] = {
            name: hex_colour(value) for name, value in cfg["report"]["brand"].items()
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def line_height(size: float) -> float:
        """Line pitch in mm: 5mm for 10pt body text."""
        return size * 0.5

    def table_style(self, **overrides: Any) -> TableStyle:
        settings = {
            "header_fill": self.colours["primary"],
            "body_text": self.colours["text"],
            "border": self.colours["border"],
        }
        settings.update(overrides)
        return TableStyle(**settings)

    def status_style(self, column: int, **overrides: Any) -> TableStyle:
        """Table style whose Status column is coloured by RAG status."""
        colours = {label: self.colours[key] for label, key in STATUS_COLOUR_KEYS.items()}
        return self.table_style(status_column=column, status_colours=colours, **overrides)

    def start_new_page(self) -> bool:
        """Move to a fresh page unless the current one is still empty.

        Returns:
            True if a page was opened.
        """
        if self.cursor.at_page_top:
            return False
        self.cursor.advance_page()
        return True

    # ------------------------------------------------------------------
    # Titles
    # ------------------------------------------------------------------

    def banner(
        self,
        title: str,
        *,
        new_page: bool = False,
        fill: Colour | None = None,
        height: float = 10.0,
        size: float = 12,
        gap: float = 6.0,
        keep_with_next: float = 20.0,
    ) -> None:
        """Coloured bar across the content width with an uppercase title."""
        if new_page:
            self.start_new_page()
        origin = self.cursor.reserve(height, gap=gap, keep_with_next=keep_with_next)
        self.canvas.draw_rect(
            self.left, origin.y, self.content_width, height,
            fill=fill or self.colours["primary"], tag="banner",
        )
        self.canvas.draw_text(
            title.upper(), self.left + 5, origin.y + height * 0.68,
            font=FONT_BOLD, size=size, colour=WHITE, tag="banner",
        )

    def subheading(
        self,
        text: str,
        *,
        size: float = 12,
        height: float = 7.0,
        keep_with_next: float = 33.0,
        colour: Colour | None = None,
    ) -> None:
        origin = self.cursor.reserve(height, keep_with_next=keep_with_next)
        self.canvas.draw_text(
            text, self.left, self.canvas.baseline(origin.y, height),
            font=FONT_BOLD, size=size, colour=colour or self.colours["primary"], tag="subheading",
        )

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _draw_wrapped(
        self,
        lines: Sequence[str],
        x: float,
        *,
        font: str,
        size: float,
        colour: Colour,
        gap: float,
        tag: str = "",
    ) -> None:
        """Reserve and draw pre-wrapped lines as one block.

        A block taller than a whole page falls back to one reservation per
        line so it can flow across pages.
        """
        lh = self.line_height(size)
        total = len(lines) * lh
        if total <= self.cursor.usable_height:
            origin = self.cursor.reserve(total, gap=gap)
            for idx, line in enumerate(lines):
                self.canvas.draw_text(line, x, self.canvas.baseline(origin.y, lh, idx),
                                      font=font, size=size, colour=colour, tag=tag)
            return
        for idx, line in enumerate(lines):
            origin = self.cursor.reserve(lh, gap=gap if idx == len(lines) - 1 else 0.0)
            self.canvas.draw_text(line, x, self.canvas.baseline(origin.y, lh),
                                  font=font, size=size, colour=colour, tag=tag)

    def text(
        self,
        text: str,
        *,
        size: float = BODY_SIZE,
        bold: bool = False,
        italic: bool = False,
        indent: float = 0.0,
        gap: float = PARAGRAPH_GAP,
        colour: Colour | None = None,
        tag: str = "",
    ) -> None:
        """Wrap text to the content width and draw it as one block."""
        font = FONT_BOLD if bold else FONT_ITALIC if italic else FONT
        lines = self.canvas.split_text(text, self.content_width - indent, font, size)
        self._draw_wrapped(lines, self.left + indent, font=font, size=size,
                           colour=colour or self.colours["text"], gap=gap, tag=tag)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def bullet_list(
        self,
        items: Sequence[str],
        intro: str | None = None,
        *,
        size: float = BODY_SIZE,
        indent: float = LIST_INDENT,
        gap_after: float = LIST_GAP,
    ) -> None:
        if intro:
            self.text(intro, size=size, gap=INTRO_GAP)
        for idx, item in enumerate(items):
            last = idx == len(items) - 1
            self.text(f"{BULLET} {item}", size=size, indent=indent,
                      gap=ITEM_GAP + (gap_after if last else 0.0), tag="bullet")

    def numbered_item(self, item: NumberedItem, *, size: float = BODY_SIZE, gap: float = ITEM_GAP) -> None:
        """Draw one numbered entry; a label is emphasised with its body beside it."""
        prefix = f"{item.number}. " if item.number is not None else ""
        colour = self.colours["text"]
        if item.label is None:
            self.text(f"{prefix}{item.body}", size=size, gap=gap, tag="numbered")
        else:
            label = f"{prefix}{item.label}:"
            label_width = self.canvas.measure_text(label + " ", FONT_BOLD, size)
            body_width = self.content_width - label_width
            if body_width < self.content_width * 0.3:
                # Label too long to share a line with its body.
                self.text(label, size=size, bold=True, gap=0.0, tag="numbered")
                if item.body:
                    self.text(item.body, size=size, indent=LIST_INDENT, gap=gap, tag="numbered")
            else:
                lines = self.canvas.split_text(item.body, body_width, FONT, size) if item.body else [""]
                lh = self.line_height(size)
                whole = len(lines) * lh <= self.cursor.usable_height
                if whole:
                    top = self.cursor.reserve(len(lines) * lh, gap=gap).y
                for idx, line in enumerate(lines):
                    if whole:
                        line_top = top + idx * lh
                    else:
                        # Taller than a page: one reservation per line, label on the first.
                        last = idx == len(lines) - 1
                        line_top = self.cursor.reserve(lh, gap=gap if last else 0.0).y
                    baseline = self.canvas.baseline(line_top, lh)
                    if idx == 0:
                        self.canvas.draw_text(label, self.left, baseline,
                                              font=FONT_BOLD, size=size, colour=colour, tag="numbered")
                    self.canvas.draw_text(line, self.left + label_width, baseline,
                                          font=FONT, size=size, colour=colour, tag="numbered")
        for child in item.children:
            self.text(f"{BULLET} {child}", size=size, indent=2 * LIST_INDENT, gap=ITEM_GAP, tag="bullet")

    def numbered_list(
        self,
        items: Sequence[NumberedItem],
        *,
        size: float = BODY_SIZE,
        gap_after: float = LIST_GAP,
    ) -> None:
        for idx, item in enumerate(items):
            last = idx == len(items) - 1
            self.numbered_item(item, size=size, gap=ITEM_GAP + (gap_after if last else 0.0))

    def numbered_strings(self, items: Sequence[str], *, size: float = 9, gap_after: float = 6.0) -> None:
        """Number plain strings 1..N without label parsing."""
        self.numbered_list(
            [NumberedItem(body=text, number=idx) for idx, text in enumerate(items, start=1)],
            size=size, gap_after=gap_after,
        )

    # ------------------------------------------------------------------
    # Classified narrative
    # ------------------------------------------------------------------

    def draw_block(self, block: ContentBlock, *, size: float = BODY_SIZE) -> None:
        if isinstance(block, Heading):
            self.subheading(block.text, size=size + 1, height=8.0, keep_with_next=10.0,
                            colour=self.colours["text"])
        elif isinstance(block, BulletList):
            self.bullet_list(block.items, block.intro, size=size)
        elif isinstance(block, NumberedList):
            self.numbered_list(block.items, size=size)
        elif isinstance(block, Paragraph):
            self.text(block.text, size=size, gap=PARAGRAPH_GAP)
        else:
            raise TypeError(f"Unknown content block: {block!r}")

    def narrative(self, raw_text: str | None, *, size: float = BODY_SIZE) -> int:
        """Classify raw narrative text and draw every resulting block.

        Returns:
            Number of blocks drawn.
        """
        blocks = parse_blocks(raw_text)
        for block in blocks:
            self.draw_block(block, size=size)
        return len(blocks)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def table(
        self,
        header: Sequence[str] | None,
        rows: Sequence[Sequence[str]],
        *,
        column_widths: Sequence[float] | None = None,
        style: TableStyle | None = None,
        gap: float = 10.0,
        tag: str = "table",
    ) -> TableResult:
        return draw_table(
            self.canvas, self.cursor, header, rows,
            width=self.content_width,
            column_widths=column_widths,
            style=style or self.table_style(),
            gap=gap,
            tag=tag,
        )
