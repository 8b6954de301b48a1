"""
canvas.py — Recording page canvas.

The layout engine never talks to a PDF library directly. It draws onto a
PageCanvas, which records an ordered list of draw commands per page:

    TextRun    — one line of text at a baseline position
    Rect       — filled and/or stroked rectangle
    Line       — straight rule
    TableCell  — bordered cell with a single line of text

Keeping the document as data is what makes the two-pass design possible:
the Page Decorator revisits every page after layout, once the total page
count is known, and tests can inspect exactly what landed on each page.

Coordinates are millimetres from the top-left corner of the page (y grows
downwards). Text measurement and wrapping use ReportLab's font metrics, and
serialize() replays the recorded commands onto a reportlab.pdfgen canvas.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Union

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as rl_canvas

from resilience_report.errors import DocumentFinalizedError

logger = logging.getLogger(__name__)

Colour = tuple[int, int, int]

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"
WHITE: Colour = (255, 255, 255)

# Baseline offset within a text line, as a fraction of the line height.
_BASELINE_RATIO = 0.7
_PT_TO_MM = 25.4 / 72


# ---------------------------------------------------------------------------
# Draw commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float  # baseline
    font: str
    size: float
    colour: Colour
    align: str = "left"  # 'left', 'center', 'right'
    tag: str = ""


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: Colour | None = None
    stroke: Colour | None = None
    line_width: float = 0.2
    tag: str = ""


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    colour: Colour
    width: float = 0.5
    tag: str = ""


@dataclass(frozen=True)
class TableCell:
    x: float
    y: float
    width: float
    height: float
    text: str
    font: str
    size: float
    text_colour: Colour
    fill: Colour | None = None
    border: Colour | None = None
    padding: float = 2.0
    header: bool = False
    tag: str = ""


DrawCommand = Union[TextRun, Rect, Line, TableCell]


@dataclass
class Page:
    """One page of the document: its number and its ordered draw commands."""
    number: int
    commands: list[DrawCommand] = field(default_factory=list)
    label: str | None = None  # "Page i of N", filled in by the decorator

    def texts(self, tag: str | None = None) -> list[str]:
        """Return the text of every TextRun/TableCell, optionally by tag."""
        return [
            cmd.text for cmd in self.commands
            if isinstance(cmd, (TextRun, TableCell)) and (tag is None or cmd.tag == tag)
        ]

    def tagged(self, tag: str) -> list[DrawCommand]:
        return [cmd for cmd in self.commands if cmd.tag == tag]


# ---------------------------------------------------------------------------
# Canvas
# ---------------------------------------------------------------------------

class PageCanvas:
    """Multi-page recording canvas with ReportLab metrics and serialization.

    Args:
        page_size: (width, height) in points, ReportLab style. Defaults to A4.
        title: PDF document title metadata.
        author: PDF author metadata.
    """

    def __init__(self, page_size: tuple[float, float] = A4, title: str = "", author: str = ""):
        self._page_size = page_size
        self.page_width = page_size[0] / mm
        self.page_height = page_size[1] / mm
        self.title = title
        self.author = author
        self.pages: list[Page] = [Page(number=1)]
        self._current = 0
        self.finalized = False

    # -- pages ---------------------------------------------------------------

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current_page_index(self) -> int:
        return self._current

    @property
    def current_page(self) -> Page:
        return self.pages[self._current]

    def new_page(self) -> int:
        """Append a blank page, make it current and return its index."""
        self._ensure_open()
        self.pages.append(Page(number=len(self.pages) + 1))
        self._current = len(self.pages) - 1
        return self._current

    def set_page(self, index: int) -> None:
        if not 0 <= index < len(self.pages):
            raise IndexError(f"Page index {index} out of range (0-{len(self.pages) - 1})")
        self._current = index

    def finalize(self) -> None:
        """Freeze the document; any later draw raises DocumentFinalizedError."""
        self._ensure_open()
        self.finalized = True

    def _ensure_open(self) -> None:
        if self.finalized:
            raise DocumentFinalizedError("Document has been finalized; no further drawing allowed")

    # -- text helpers ----------------------------------------------------------

    def measure_text(self, text: str, font: str = FONT, size: float = 10) -> float:
        """Width of text in millimetres."""
        return stringWidth(text, font, size) / mm

    def split_text(self, text: str, max_width: float, font: str = FONT, size: float = 10) -> list[str]:
        """Wrap text to max_width millimetres; always returns at least one line."""
        return simpleSplit(text, font, size, max_width * mm) or [""]

    @staticmethod
    def baseline(top: float, line_height: float, line_index: int = 0) -> float:
        """Baseline y of line_index in a block whose top edge is at top."""
        return top + line_height * (line_index + _BASELINE_RATIO)

    # -- drawing -----------------------------------------------------------------

    def _record(self, command: DrawCommand) -> None:
        self._ensure_open()
        self.pages[self._current].commands.append(command)

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        font: str = FONT,
        size: float = 10,
        colour: Colour = (0, 0, 0),
        align: str = "left",
        tag: str = "",
    ) -> None:
        self._record(TextRun(text, x, y, font, size, colour, align, tag))

    def draw_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        fill: Colour | None = None,
        stroke: Colour | None = None,
        line_width: float = 0.2,
        tag: str = "",
    ) -> None:
        self._record(Rect(x, y, width, height, fill, stroke, line_width, tag))

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        colour: Colour = (0, 0, 0),
        width: float = 0.5,
        tag: str = "",
    ) -> None:
        self._record(Line(x1, y1, x2, y2, colour, width, tag))

    def draw_cell(self, cell: TableCell) -> None:
        self._record(cell)

    # -- output ------------------------------------------------------------------

    def serialize(self) -> bytes:
        """Render every recorded page to PDF bytes.

        Returns:
            The complete PDF document.
        """
        buf = io.BytesIO()
        pdf = rl_canvas.Canvas(buf, pagesize=self._page_size, invariant=1)
        if self.title:
            pdf.setTitle(self.title)
        if self.author:
            pdf.setAuthor(self.author)

        for page in self.pages:
            for command in page.commands:
                self._render(pdf, command)
            pdf.showPage()
        pdf.save()

        payload = buf.getvalue()
        logger.debug("Serialized %d page(s) to %d bytes", len(self.pages), len(payload))
        return payload

    def _y(self, y: float) -> float:
        """Convert a top-down millimetre y to ReportLab's bottom-up points."""
        return self._page_size[1] - y * mm

    @staticmethod
    def _set_fill(pdf, colour: Colour) -> None:
        pdf.setFillColorRGB(colour[0] / 255, colour[1] / 255, colour[2] / 255)

    @staticmethod
    def _set_stroke(pdf, colour: Colour) -> None:
        pdf.setStrokeColorRGB(colour[0] / 255, colour[1] / 255, colour[2] / 255)

    def _render_text(self, pdf, run: TextRun) -> None:
        pdf.setFont(run.font, run.size)
        self._set_fill(pdf, run.colour)
        x, y = run.x * mm, self._y(run.y)
        if run.align == "center":
            pdf.drawCentredString(x, y, run.text)
        elif run.align == "right":
            pdf.drawRightString(x, y, run.text)
        else:
            pdf.drawString(x, y, run.text)

    def _render_rect(self, pdf, x, y, width, height, fill, stroke, line_width) -> None:
        if fill is None and stroke is None:
            return
        if fill is not None:
            self._set_fill(pdf, fill)
        if stroke is not None:
            self._set_stroke(pdf, stroke)
            pdf.setLineWidth(line_width * mm)
        pdf.rect(
            x * mm, self._y(y + height), width * mm, height * mm,
            fill=1 if fill is not None else 0,
            stroke=1 if stroke is not None else 0,
        )

    def _render(self, pdf, command: DrawCommand) -> None:
        if isinstance(command, TextRun):
            self._render_text(pdf, command)
        elif isinstance(command, Rect):
            self._render_rect(pdf, command.x, command.y, command.width, command.height,
                              command.fill, command.stroke, command.line_width)
        elif isinstance(command, Line):
            self._set_stroke(pdf, command.colour)
            pdf.setLineWidth(command.width * mm)
            pdf.line(command.x1 * mm, self._y(command.y1), command.x2 * mm, self._y(command.y2))
        elif isinstance(command, TableCell):
            self._render_rect(pdf, command.x, command.y, command.width, command.height,
                              command.fill, command.border, 0.1)
            if command.text:
                baseline = command.y + command.height / 2 + command.size * _PT_TO_MM * 0.35
                self._render_text(pdf, TextRun(
                    command.text, command.x + command.padding, baseline,
                    command.font, command.size, command.text_colour,
                ))
        else:
            raise TypeError(f"Unknown draw command: {command!r}")
