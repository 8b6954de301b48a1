"""
test_composer.py — Unit tests for the shared section composer.

Tests cover:
    - Wrapped text and labelled numbered items taller than a page
    - Status-coloured table styles
"""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from resilience_report.blocks import NumberedItem
from resilience_report.canvas import FONT_BOLD, PageCanvas, TextRun
from resilience_report.composer import SectionComposer
from resilience_report.config import hex_colour, load_config
from resilience_report.layout import Cursor

LONG_BODY = "Escalate to the regional coordination centre and confirm capacity. " * 80


@pytest.fixture
def cfg():
    return load_config()


def _composer(cfg) -> SectionComposer:
    canvas = PageCanvas()
    # limit = 297 - 30 = 267mm, usable page height = 247mm
    cursor = Cursor(canvas, margin_top=20, margin_bottom=30, left=20)
    return SectionComposer(canvas, cursor, cfg, margin=20)


def _runs(composer: SectionComposer, tag: str) -> list[tuple[int, TextRun]]:
    return [
        (idx, cmd) for idx, page in enumerate(composer.canvas.pages)
        for cmd in page.tagged(tag) if isinstance(cmd, TextRun)
    ]


class TestTallLabelledItem:

    def test_flows_across_pages_without_overflow(self, cfg, caplog):
        composer = _composer(cfg)
        with caplog.at_level(logging.WARNING):
            composer.numbered_item(NumberedItem(body=LONG_BODY.strip(), label="Stage one", number=1))
        runs = _runs(composer, "numbered")
        assert composer.canvas.page_count >= 2
        assert all(run.y <= composer.cursor.limit for _, run in runs)
        assert "exceeds the usable page height" not in caplog.text

    def test_label_drawn_once_beside_first_line(self, cfg):
        composer = _composer(cfg)
        composer.numbered_item(NumberedItem(body=LONG_BODY.strip(), label="Stage one", number=1))
        runs = _runs(composer, "numbered")
        labels = [(page, run) for page, run in runs if run.font == FONT_BOLD]
        assert [run.text for _, run in labels] == ["1. Stage one:"]
        page, label = labels[0]
        first_body = next(run for _, run in runs if run.font != FONT_BOLD)
        assert page == 0
        assert label.y == first_body.y
        assert first_body.x > label.x

    def test_short_item_stays_one_block(self, cfg):
        composer = _composer(cfg)
        composer.numbered_item(NumberedItem(body="Mutual aid call", label="Stage one", number=1), gap=2)
        assert composer.canvas.page_count == 1
        assert composer.cursor.y == pytest.approx(20 + 5 + 2)


class TestTallText:

    def test_paragraph_taller_than_page_flows(self, cfg):
        composer = _composer(cfg)
        composer.text(LONG_BODY)
        runs = _runs(composer, "")
        assert composer.canvas.page_count >= 2
        assert all(run.y <= composer.cursor.limit for _, run in runs)


class TestStatusStyle:

    def test_maps_rag_and_service_labels_to_brand_colours(self, cfg):
        style = _composer(cfg).status_style(2, font_size=8)
        brand = cfg["report"]["brand"]
        assert style.status_column == 2
        assert style.font_size == 8
        assert style.status_colours["Red"] == hex_colour(brand["red"])
        assert style.status_colours["At Risk"] == hex_colour(brand["red"])
        assert style.status_colours["Degraded"] == hex_colour(brand["amber"])
        assert style.status_colours["Operational"] == hex_colour(brand["green"])
