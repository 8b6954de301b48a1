"""
test_exercise.py — Tests for Exercise Package documents.

Tests cover:
    - Cover band, type badge and key-details box
    - Section order and page starts
    - Inject entries, evaluation table and debrief notes boxes
    - Footers, bottom reserve and progress milestones
    - Validation, cancellation and file naming
"""

import sys
from datetime import date, datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from resilience_report.assembler import build_exercise_document, exercise_filename, generate_exercise_pdf
from resilience_report.canvas import Line, Rect, TextRun
from resilience_report.config import load_config
from resilience_report.errors import GenerationCancelled, ReportDataError
from resilience_report.models import ExercisePackage
from resilience_report.progress import CancellationToken
from resilience_report.report_data import load_exercise_package, load_source
from resilience_report.sections.exercise import RESULT_BOXES, exercise_type_label

ROOT = Path(__file__).parent.parent
GENERATED_AT = datetime(2026, 1, 27, 9, 30)
ORG = "St. Mary's NHS Foundation Trust"
LABEL = "EPR Ransomware Attack | Resilience Exercise Package"


@pytest.fixture
def cfg():
    return load_config()


@pytest.fixture
def package() -> ExercisePackage:
    return load_exercise_package(load_source(ROOT / "data" / "sample_trust.yaml"), "ex-cyber-001")


@pytest.fixture
def canvas(package, cfg):
    return build_exercise_document(package, cfg, GENERATED_AT)


def _all(canvas, tag: str) -> list:
    return [cmd for page in canvas.pages for cmd in page.tagged(tag)]


def _banner_pages(canvas) -> dict[str, int]:
    return {text: idx for idx, page in enumerate(canvas.pages) for text in page.texts("banner")}


class TestCover:

    def test_cover_texts(self, canvas):
        assert canvas.pages[0].texts("exercise-cover") == [
            "Exercise Package",
            ORG,
            "EPR Ransomware Attack",
            "Desktop Exercise",
            "Ransomware Attack on EPR System",
        ]

    def test_band_flush_with_top(self, canvas):
        band = [c for c in canvas.pages[0].tagged("exercise-cover") if isinstance(c, Rect)][0]
        assert band.y == 0
        assert band.width == pytest.approx(canvas.page_width)

    def test_details_box(self, canvas):
        assert canvas.pages[0].texts("exercise-details") == [
            "Duration:", "3 hours",
            "Participants:", "6 roles",
            "Facilitator:", "Resilience Manager",
            "Category:", "Cyber",
        ]

    def test_generated_timestamp(self, canvas):
        assert canvas.pages[0].texts("exercise-generated") == ["Generated: 27 January 2026 09:30"]

    def test_type_label(self):
        assert exercise_type_label("simulation") == "Simulation Exercise"


class TestSections:

    def test_banner_order(self, canvas):
        banners = [text for page in canvas.pages for text in page.texts("banner")]
        assert banners == [
            "EXERCISE OBJECTIVES",
            "PARTICIPANTS",
            "MATERIALS REQUIRED",
            "FACILITATOR RESPONSIBILITIES",
            "SCENARIO INJECTS",
            "EVALUATION CRITERIA",
            "DEBRIEF DISCUSSION TEMPLATE",
        ]

    def test_plan_injects_and_evaluation_start_new_pages(self, canvas, cfg):
        pages = _banner_pages(canvas)
        assert pages["EXERCISE OBJECTIVES"] == 1
        assert pages["SCENARIO INJECTS"] > pages["FACILITATOR RESPONSIBILITIES"]
        assert pages["EVALUATION CRITERIA"] > pages["SCENARIO INJECTS"]
        top = cfg["exercise"]["page"]["content_top"]
        for title in ("EXERCISE OBJECTIVES", "SCENARIO INJECTS", "EVALUATION CRITERIA"):
            page = canvas.pages[pages[title]]
            first = next(c for c in page.tagged("banner") if isinstance(c, Rect))
            assert first.y == top

    def test_participants_table(self, canvas, package):
        texts = [t for page in canvas.pages for t in page.texts("participants-table")]
        assert texts[:2] == ["#", "Role"]
        assert texts[2:4] == ["1", "CEO"]
        assert len(texts) == 2 + 2 * len(package.exercise.participants)

    def test_facilitator_tasks_from_config(self, canvas, cfg):
        bullets = [t for page in canvas.pages for t in page.texts("bullet")]
        for task in cfg["exercise"]["facilitator_tasks"]:
            assert any(t.startswith(f"• {task[:20]}") for t in bullets)


class TestInjects:

    def test_one_marker_per_inject(self, canvas, package):
        markers = [t for page in canvas.pages for t in page.texts("inject-marker")]
        assert markers == [inject.time_marker for inject in package.injects]

    def test_separators_only_between_injects(self, canvas, package):
        separators = [c for c in _all(canvas, "separator") if isinstance(c, Line)]
        assert len(separators) == len(package.injects) - 1

    def test_prompts_quoted_in_italics(self, canvas):
        prompts = [c for c in _all(canvas, "prompt") if isinstance(c, TextRun)]
        assert prompts[0].text == '"What is your immediate response?"'
        assert {c.font for c in prompts} == {"Helvetica-Oblique"}
        assert len(prompts) == 12

    def test_expected_responses_listed(self, canvas):
        bullets = [t for page in canvas.pages for t in page.texts("bullet")]
        assert "• Activate Gold command" in bullets


class TestEvaluationAndDebrief:

    def test_result_boxes_per_criterion(self, canvas, package):
        texts = [t for page in canvas.pages for t in page.texts("evaluation-table")]
        assert texts[:4] == ["#", "Criterion", "Target", "Result"]
        assert texts.count(RESULT_BOXES) == len(package.evaluation_criteria)

    def test_notes_box_per_question(self, canvas, package):
        boxes = [c for c in _all(canvas, "notes-box") if isinstance(c, Rect)]
        assert len(boxes) == len(package.debrief_questions)

    def test_question_kept_with_its_notes_box(self, canvas):
        for page in canvas.pages:
            numbers = [c for c in page.tagged("debrief") if isinstance(c, Rect)]
            boxes = [c for c in page.tagged("notes-box") if isinstance(c, Rect)]
            assert len(numbers) == len(boxes)

    def test_numbered_questions(self, canvas):
        texts = [t for page in canvas.pages for t in page.texts("debrief")]
        assert texts[:2] == ["1", "How effective was the Gold command structure?"]


class TestFooters:

    def test_cover_has_page_number_only(self, canvas):
        assert canvas.pages[0].texts("footer") == [f"Page 1 of {canvas.page_count}"]

    def test_later_pages_carry_label(self, canvas):
        for idx, page in enumerate(canvas.pages[1:], start=2):
            assert page.texts("footer") == [f"Page {idx} of {canvas.page_count}", LABEL]

    def test_content_stays_above_bottom_reserve(self, canvas, cfg):
        limit = canvas.page_height - cfg["exercise"]["page"]["bottom_reserve"]
        for page in canvas.pages:
            for cmd in page.commands:
                if isinstance(cmd, TextRun) and cmd.tag not in ("footer", "exercise-generated"):
                    assert cmd.y <= limit


class TestGeneration:

    def test_progress_milestones(self, package, cfg):
        events = []
        generate_exercise_pdf(package, cfg, GENERATED_AT, on_progress=lambda p, m: events.append(p))
        assert events == [5, 20, 45, 70, 85, 98, 100]

    def test_cancellation(self, package, cfg):
        token = CancellationToken()

        def on_progress(percent, message):
            if percent == 45:
                token.cancel()

        with pytest.raises(GenerationCancelled) as excinfo:
            generate_exercise_pdf(package, cfg, GENERATED_AT, on_progress=on_progress, cancel_token=token)
        assert excinfo.value.stage == "evaluation-criteria"

    def test_unknown_type_rejected_before_drawing(self, package, cfg):
        package.exercise.type = "tabletop"
        events = []
        with pytest.raises(ReportDataError):
            generate_exercise_pdf(package, cfg, GENERATED_AT, on_progress=lambda p, m: events.append(p))
        assert events == []

    def test_blank_time_marker_rejected(self, package, cfg):
        package.injects[1].time_marker = "  "
        with pytest.raises(ReportDataError):
            build_exercise_document(package, cfg, GENERATED_AT)

    def test_same_bytes_twice(self, package, cfg):
        first = generate_exercise_pdf(package, cfg, GENERATED_AT)
        assert first.startswith(b"%PDF")
        assert first == generate_exercise_pdf(package, cfg, GENERATED_AT)

    def test_filename(self):
        assert exercise_filename("EPR Ransomware  Attack", date(2026, 1, 27)) == \
            "Exercise_EPR_Ransomware_Attack_2026-01-27.pdf"


class TestPackageFromDict:

    def test_missing_lists_become_empty(self):
        package = ExercisePackage.from_dict({
            "exercise": {"name": "Flood", "type": "live", "participants": None},
            "injects": None,
        })
        assert package.exercise.participants == []
        assert package.exercise.objectives == []
        assert package.injects == []
        assert package.debrief_questions == []

    def test_sparse_package_still_renders(self, cfg):
        package = ExercisePackage.from_dict({"exercise": {"name": "Flood", "type": "live"}})
        canvas = build_exercise_document(package, cfg, GENERATED_AT)
        assert "EVALUATION CRITERIA" in _banner_pages(canvas)
