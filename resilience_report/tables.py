"""
tables.py — Table renderer.

Lays out an optional header row and body rows on a fixed row height, drawing
each row as a strip of TableCell commands. Rows are reserved one at a time
through the Cursor; a row that no longer fits is reserved together with a
copy of the header, so the page the Cursor opens for it starts with the
column labels and long tables carry them across pages.

The header is reserved together with the first body row, which keeps a lone
header from being stranded at the foot of a page.

Cell text is single-line: anything wider than its column is truncated with
an ellipsis. Row height never depends on content.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from resilience_report.canvas import FONT, FONT_BOLD, WHITE, Colour, PageCanvas, TableCell
from resilience_report.errors import TableLayoutError
from resilience_report.layout import Cursor

logger = logging.getLogger(__name__)

_ELLIPSIS = "..."


@dataclass(frozen=True)
class TableStyle:
    """Visual settings for one table."""
    header_fill: Colour = (0, 94, 184)
    header_text: Colour = WHITE
    body_text: Colour = (33, 43, 50)
    body_fill: Colour | None = None
    border: Colour | None = (200, 200, 200)
    row_height: float = 8.0
    font_size: float = 9.0
    padding: float = 2.0
    bold_first_column: bool = False
    # Body cells in status_column whose text is a key here get that colour, in bold.
    status_column: int | None = None
    status_colours: dict[str, Colour] = field(default_factory=dict)

    def body_cell(self, col: int, text: str) -> tuple[str, Colour]:
        """Font and text colour for one body cell."""
        if col == self.status_column and text in self.status_colours:
            return FONT_BOLD, self.status_colours[text]
        if self.bold_first_column and col == 0:
            return FONT_BOLD, self.body_text
        return FONT, self.body_text


@dataclass
class TableResult:
    """What the renderer did: pages touched and how often the header was drawn."""
    pages: list[int] = field(default_factory=list)
    header_draws: int = 0
    rows_drawn: int = 0


def resolve_column_widths(
    columns: int,
    total_width: float,
    column_widths: Sequence[float] | None = None,
) -> list[float]:
    """Return explicit widths, or split total_width equally.

    Raises:
        TableLayoutError: If explicit widths do not match the column count
            or are not positive.
    """
    if columns <= 0:
        raise TableLayoutError("A table needs at least one column")
    if column_widths is None:
        return [total_width / columns] * columns
    widths = list(column_widths)
    if len(widths) != columns:
        raise TableLayoutError(f"Got {len(widths)} column widths for {columns} columns")
    if any(w <= 0 for w in widths):
        raise TableLayoutError(f"Column widths must be positive: {widths}")
    if sum(widths) > total_width + 1e-6:
        logger.warning("Column widths (%.1fmm) exceed the content width (%.1fmm)", sum(widths), total_width)
    return widths


def fit_text(canvas: PageCanvas, text: str, width: float, font: str, size: float) -> str:
    """Truncate text with an ellipsis so it fits within width millimetres."""
    if canvas.measure_text(text, font, size) <= width:
        return text
    trimmed = text
    while trimmed and canvas.measure_text(trimmed + _ELLIPSIS, font, size) > width:
        trimmed = trimmed[:-1]
    return trimmed.rstrip() + _ELLIPSIS if trimmed else ""


def _draw_row(
    canvas: PageCanvas,
    cells: Sequence[str],
    x: float,
    y: float,
    widths: list[float],
    style: TableStyle,
    header: bool,
    tag: str,
) -> None:
    for col, (text, width) in enumerate(zip(cells, widths)):
        text = str(text)
        if header:
            font, colour = FONT_BOLD, style.header_text
        else:
            font, colour = style.body_cell(col, text)
        canvas.draw_cell(TableCell(
            x=x,
            y=y,
            width=width,
            height=style.row_height,
            text=fit_text(canvas, text, width - 2 * style.padding, font, style.font_size),
            font=font,
            size=style.font_size,
            text_colour=colour,
            fill=style.header_fill if header else style.body_fill,
            border=style.border,
            padding=style.padding,
            header=header,
            tag=tag,
        ))
        x += width


def draw_table(
    canvas: PageCanvas,
    cursor: Cursor,
    header: Sequence[str] | None,
    rows: Sequence[Sequence[str]],
    *,
    width: float,
    column_widths: Sequence[float] | None = None,
    style: TableStyle | None = None,
    gap: float = 0.0,
    tag: str = "table",
) -> TableResult:
    """Draw a table at the cursor, continuing across pages as needed.

    Args:
        canvas: Canvas to draw on.
        cursor: Cursor that owns the vertical position.
        header: Column labels, or None for a plain key/value table.
        rows: Body rows; each must have as many cells as there are columns.
        width: Available content width (mm), used when column_widths is None.
        column_widths: Explicit widths in mm.
        style: TableStyle; defaults to the standard grid style.
        gap: Space left below the table.
        tag: Tag stamped on every cell command.

    Returns:
        TableResult describing the layout.

    Raises:
        TableLayoutError: On mismatched row lengths or widths.
    """
    style = style or TableStyle()
    columns = len(header) if header is not None else (len(rows[0]) if rows else 0)
    if columns == 0:
        if header is None:
            return TableResult()
        raise TableLayoutError("A table needs at least one column")
    for idx, row in enumerate(rows):
        if len(row) != columns:
            raise TableLayoutError(f"Row {idx} has {len(row)} cells; expected {columns}")

    widths = resolve_column_widths(columns, width, column_widths)
    row_h = style.row_height
    result = TableResult()

    def _note_page(page_index: int) -> None:
        if not result.pages or result.pages[-1] != page_index:
            result.pages.append(page_index)

    start = 0
    if header is not None:
        first_block = row_h * (2 if rows else 1)
        origin = cursor.reserve(first_block, gap=gap if len(rows) <= 1 else 0.0)
        _draw_row(canvas, header, origin.x, origin.y, widths, style, True, tag)
        result.header_draws += 1
        if rows:
            _draw_row(canvas, rows[0], origin.x, origin.y + row_h, widths, style, False, tag)
            result.rows_drawn += 1
        _note_page(origin.page_index)
        start = 1

    for idx in range(start, len(rows)):
        row_gap = gap if idx == len(rows) - 1 else 0.0
        if header is not None and not cursor.fits(row_h):
            # The row spills over: reserve it together with a repeated header
            # so the continuation page opens with the column labels.
            origin = cursor.reserve(2 * row_h, gap=row_gap)
            _draw_row(canvas, header, origin.x, origin.y, widths, style, True, tag)
            result.header_draws += 1
            logger.debug("Table continued on page %d with repeated header", origin.page_index + 1)
            row_y = origin.y + row_h
        else:
            origin = cursor.reserve(row_h, gap=row_gap)
            row_y = origin.y
        _draw_row(canvas, rows[idx], origin.x, row_y, widths, style, False, tag)
        result.rows_drawn += 1
        _note_page(origin.page_index)

    return result
