"""
test_canvas.py — Unit tests for the recording page canvas.

Tests cover:
    - Page geometry and page management
    - Text measurement and wrapping
    - Finalization
    - PDF serialization smoke test
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from resilience_report.canvas import FONT, FONT_BOLD, PageCanvas, Rect, TableCell, TextRun
from resilience_report.errors import DocumentFinalizedError


class TestPages:

    def test_a4_dimensions_in_mm(self):
        canvas = PageCanvas()
        assert canvas.page_width == pytest.approx(210, abs=0.1)
        assert canvas.page_height == pytest.approx(297, abs=0.1)

    def test_starts_with_one_page(self):
        canvas = PageCanvas()
        assert canvas.page_count == 1
        assert canvas.current_page.number == 1

    def test_new_page_becomes_current(self):
        canvas = PageCanvas()
        assert canvas.new_page() == 1
        canvas.draw_text("second", 10, 10)
        assert canvas.pages[1].texts() == ["second"]
        assert canvas.pages[0].texts() == []

    def test_set_page_out_of_range(self):
        with pytest.raises(IndexError):
            PageCanvas().set_page(3)

    def test_texts_filtered_by_tag(self):
        canvas = PageCanvas()
        canvas.draw_text("a", 0, 0, tag="banner")
        canvas.draw_text("b", 0, 0)
        canvas.draw_rect(0, 0, 10, 10, fill=(0, 0, 0), tag="banner")
        assert canvas.current_page.texts("banner") == ["a"]
        assert len(canvas.current_page.tagged("banner")) == 2


class TestTextHelpers:

    def test_bold_is_wider_than_regular(self):
        canvas = PageCanvas()
        assert canvas.measure_text("Resilience", FONT_BOLD, 10) > canvas.measure_text("Resilience", FONT, 10)

    def test_split_wraps_to_width(self):
        canvas = PageCanvas()
        text = "Registered nurse vacancies remain above tolerance and sickness absence rose " * 3
        lines = canvas.split_text(text, 80, FONT, 10)
        assert len(lines) > 1
        assert all(canvas.measure_text(line, FONT, 10) <= 80 + 0.01 for line in lines)

    def test_split_empty_text_gives_one_line(self):
        assert PageCanvas().split_text("", 80) == [""]

    def test_baseline_inside_line(self):
        assert PageCanvas.baseline(100, 5, 0) == pytest.approx(103.5)
        assert PageCanvas.baseline(100, 5, 2) == pytest.approx(113.5)


class TestFinalize:

    def test_draw_after_finalize_raises(self):
        canvas = PageCanvas()
        canvas.finalize()
        with pytest.raises(DocumentFinalizedError):
            canvas.draw_text("late", 0, 0)

    def test_new_page_after_finalize_raises(self):
        canvas = PageCanvas()
        canvas.finalize()
        with pytest.raises(DocumentFinalizedError):
            canvas.new_page()


class TestSerialize:

    def test_produces_pdf_bytes(self):
        canvas = PageCanvas(title="Test", author="Trust")
        canvas.draw_text("Hello", 20, 20, align="center")
        canvas.draw_rect(20, 30, 50, 10, fill=(0, 94, 184), stroke=(0, 0, 0))
        canvas.draw_line(20, 45, 190, 45)
        canvas.draw_cell(TableCell(20, 50, 40, 8, "Cell", FONT, 9, (0, 0, 0), border=(200, 200, 200)))
        canvas.new_page()
        canvas.draw_text("Right", 190, 20, align="right")
        payload = canvas.serialize()
        assert payload.startswith(b"%PDF")
        assert payload.rstrip().endswith(b"%%EOF")

    def test_serialization_is_deterministic(self):
        def build() -> bytes:
            canvas = PageCanvas(title="Same")
            canvas.draw_text("Identical", 20, 20)
            return canvas.serialize()
        assert build() == build()

    def test_commands_are_recorded_in_order(self):
        canvas = PageCanvas()
        canvas.draw_rect(0, 0, 1, 1)
        canvas.draw_text("t", 0, 0)
        assert [type(c) for c in canvas.current_page.commands] == [Rect, TextRun]
