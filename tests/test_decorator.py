"""
test_decorator.py — Unit tests for the second-pass page decorator.

Tests cover:
    - Page 1 header vs. pages 2..N header
    - "Page i of N" footers using the final page count
    - Finalization and double-decoration guard
    - Contingency footer
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from resilience_report.canvas import Line, PageCanvas, TextRun
from resilience_report.config import load_config
from resilience_report.decorator import (
    BoardReportDecorator,
    ContingencyDecorator,
    PageDecorator,
    page_label,
)
from resilience_report.errors import DocumentFinalizedError


def _three_pages() -> PageCanvas:
    canvas = PageCanvas()
    for idx in range(3):
        if idx:
            canvas.new_page()
        canvas.draw_text(f"content {idx + 1}", 20, 100)
    return canvas


def _header(canvas: PageCanvas, index: int) -> list:
    return canvas.pages[index].tagged("header")


@pytest.fixture
def cfg():
    return load_config()


class TestBoardHeaders:

    def test_page_one_header_is_taller_and_larger(self, cfg):
        canvas = _three_pages()
        BoardReportDecorator(cfg, "Q1 2026", "27 January 2026, 09:00").decorate(canvas)

        first = _header(canvas, 0)
        later = _header(canvas, 1)
        max_size = lambda cmds: max(c.size for c in cmds if isinstance(c, TextRun))
        rule = lambda cmds: next(c for c in cmds if isinstance(c, Line))

        assert max_size(first) == 24
        assert max_size(later) == 10
        assert rule(first).y1 > rule(later).y1
        assert rule(first).width > rule(later).width

    def test_page_one_header_shows_period_and_date(self, cfg):
        canvas = _three_pages()
        BoardReportDecorator(cfg, "Q1 2026", "27 January 2026, 09:00").decorate(canvas)
        texts = canvas.pages[0].texts("header")
        assert "Reporting Period: Q1 2026" in texts
        assert "Generated: 27 January 2026, 09:00" in texts

    def test_later_headers_identical(self, cfg):
        canvas = _three_pages()
        BoardReportDecorator(cfg, "Q1 2026", "now").decorate(canvas)
        assert _header(canvas, 1) == _header(canvas, 2)


class TestBoardFooters:

    def test_every_footer_uses_final_total(self, cfg):
        canvas = _three_pages()
        total = BoardReportDecorator(cfg, "Q1 2026", "now").decorate(canvas)
        assert total == 3
        for idx in range(3):
            texts = canvas.pages[idx].texts("footer")
            assert texts == [
                "Confidential - Board Use Only",
                f"Page {idx + 1} of 3",
                "Powered by ResilienC Framework",
            ]
            assert canvas.pages[idx].label == f"Page {idx + 1} of 3"

    def test_footer_centre_is_centred(self, cfg):
        canvas = _three_pages()
        BoardReportDecorator(cfg, "Q1 2026", "now").decorate(canvas)
        centre = [c for c in canvas.pages[0].tagged("footer") if c.text.startswith("Page")][0]
        assert centre.align == "center"
        assert centre.x == pytest.approx(canvas.page_width / 2)

    def test_content_is_left_untouched(self, cfg):
        canvas = _three_pages()
        BoardReportDecorator(cfg, "Q1 2026", "now").decorate(canvas)
        assert canvas.pages[1].commands[0] == TextRun("content 2", 20, 100, "Helvetica", 10, (0, 0, 0))


class TestFinalization:

    def test_canvas_finalized_after_decoration(self, cfg):
        canvas = _three_pages()
        BoardReportDecorator(cfg, "Q1 2026", "now").decorate(canvas)
        assert canvas.finalized
        with pytest.raises(DocumentFinalizedError):
            canvas.draw_text("late", 0, 0)

    def test_decorating_twice_raises(self, cfg):
        canvas = _three_pages()
        decorator = BoardReportDecorator(cfg, "Q1 2026", "now")
        decorator.decorate(canvas)
        with pytest.raises(DocumentFinalizedError):
            decorator.decorate(canvas)

    def test_page_label(self):
        assert page_label(2, 7) == "Page 2 of 7"

    def test_base_decorator_requires_a_footer(self, cfg):
        with pytest.raises(TypeError):
            PageDecorator(cfg, margin=20)


class TestContingencyFooter:

    def test_label_and_page_numbers(self, cfg):
        canvas = _three_pages()
        ContingencyDecorator(cfg, "Trust - Emergency Care Contingency Plans").decorate(canvas)
        for idx in range(3):
            assert canvas.pages[idx].texts("footer") == [
                "Trust - Emergency Care Contingency Plans",
                f"Page {idx + 1} of 3",
            ]
            assert canvas.pages[idx].tagged("header") == []

    def test_footer_rule_drawn(self, cfg):
        canvas = _three_pages()
        ContingencyDecorator(cfg, "label").decorate(canvas)
        rules = [c for c in canvas.pages[0].tagged("footer") if isinstance(c, Line)]
        assert len(rules) == 1
        assert rules[0].y1 == pytest.approx(canvas.page_height - 15)
