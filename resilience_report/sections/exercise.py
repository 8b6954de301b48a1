"""
exercise.py — Exercise Package section definitions.

A facilitator's pack for one resilience exercise:

    Cover           — full-bleed title band, exercise name, type badge,
                      scenario and a key-details box
    Exercise plan   — objectives, participant roles table, materials and
                      facilitator responsibilities
    Scenario injects — one timed entry per inject with prompts and the
                      responses players are expected to give
    Evaluation      — criteria table with YES / PARTIAL / NO tick boxes
    Debrief         — numbered questions, each kept with its notes box

Cover, plan, injects and evaluation each start on a new page; the debrief
template follows the evaluation table.
"""

import logging
from datetime import datetime
from typing import Any

from resilience_report.canvas import FONT, FONT_BOLD, FONT_ITALIC, WHITE, Colour, PageCanvas
from resilience_report.composer import BODY_SIZE, BULLET, SectionComposer, SectionStep
from resilience_report.config import hex_colour
from resilience_report.layout import Cursor
from resilience_report.models import ExercisePackage

logger = logging.getLogger(__name__)

EXERCISE_TYPE_COLOURS = {"desktop": "2196F3", "live": "4CAF50", "simulation": "F44336"}
PARTICIPANT_TABLE_FIRST_WIDTH = 15
EVALUATION_TABLE_WIDTHS = (10, 80, 25, 55)
RESULT_BOXES = "[ ] YES  [ ] PARTIAL  [ ] NO"
MUTED: Colour = (150, 150, 150)
SUBTLE: Colour = (100, 100, 100)
PLACEHOLDER: Colour = (180, 180, 180)

COVER_BAND_HEIGHT = 40.0
DETAILS_BOX_HEIGHT = 50.0
NOTES_BOX_HEIGHT = 20.0
BADGE_SIZE = 8.0


def exercise_type_label(exercise_type: str) -> str:
    return f"{exercise_type[:1].upper()}{exercise_type[1:]} Exercise"


class ExerciseComposer(SectionComposer):
    """Section renderers for an exercise package.

    Args:
        canvas: Recording canvas for this generation call.
        cursor: Cursor over that canvas; starts at y=0 so the cover band is
            flush with the top edge.
        cfg: Configuration dictionary.
        package: Validated exercise package.
        generated_at: Timestamp printed on the cover.
    """

    def __init__(
        self,
        canvas: PageCanvas,
        cursor: Cursor,
        cfg: dict[str, Any],
        package: ExercisePackage,
        generated_at: datetime,
    ):
        super().__init__(canvas, cursor, cfg, margin=cfg["exercise"]["page"]["margin"])
        self.package = package
        self.exercise = package.exercise
        self.generated_at = generated_at
        self.organisation = cfg["organisation"]["name"]
        self.facilitator_tasks = list(cfg["exercise"].get("facilitator_tasks") or [])

    def _centred(self, text: str, *, width: float, font: str, size: float, colour: Colour,
                 gap: float, tag: str) -> None:
        """Wrap text to width and draw it centred on the page as one block."""
        lines = self.canvas.split_text(text, width, font, size)
        lh = self.line_height(size)
        origin = self.cursor.reserve(len(lines) * lh, gap=gap)
        for idx, line in enumerate(lines):
            self.canvas.draw_text(line, self.canvas.page_width / 2,
                                  self.canvas.baseline(origin.y, lh, idx),
                                  font=font, size=size, colour=colour, align="center", tag=tag)

    # ------------------------------------------------------------------
    # Cover
    # ------------------------------------------------------------------

    def cover(self) -> None:
        exercise = self.exercise
        centre = self.canvas.page_width / 2

        origin = self.cursor.reserve(COVER_BAND_HEIGHT, gap=20)
        self.canvas.draw_rect(0, origin.y, self.canvas.page_width, COVER_BAND_HEIGHT,
                              fill=self.colours["primary"], tag="exercise-cover")
        self.canvas.draw_text("Exercise Package", centre, origin.y + 22, font=FONT_BOLD, size=24,
                              colour=WHITE, align="center", tag="exercise-cover")
        self.canvas.draw_text(self.organisation, centre, origin.y + 32, size=12,
                              colour=WHITE, align="center", tag="exercise-cover")

        self._centred(exercise.name, width=self.content_width, font=FONT_BOLD, size=20,
                      colour=self.colours["dark"], gap=10, tag="exercise-cover")

        badge = self.cursor.reserve(10, gap=10)
        fill = hex_colour(EXERCISE_TYPE_COLOURS.get(exercise.type, self.cfg["report"]["brand"]["primary"]))
        self.canvas.draw_rect(centre - 30, badge.y, 60, 10, fill=fill, tag="exercise-cover")
        self.canvas.draw_text(exercise_type_label(exercise.type), centre, badge.y + 7, font=FONT_BOLD,
                              size=10, colour=WHITE, align="center", tag="exercise-cover")

        self._centred(exercise.scenario_name, width=self.content_width - 10, font=FONT, size=14,
                      colour=SUBTLE, gap=20, tag="exercise-cover")
        self.details_box()

        self.canvas.draw_text(
            f"Generated: {self.generated_at.strftime('%d %B %Y %H:%M')}",
            centre, self.canvas.page_height - 17, size=9, colour=MUTED, align="center",
            tag="exercise-generated",
        )

    def details_box(self) -> None:
        exercise = self.exercise
        category = exercise.scenario_category
        details = [
            ("Duration:", exercise.duration),
            ("Participants:", f"{len(exercise.participants)} roles"),
            ("Facilitator:", exercise.facilitator),
            ("Category:", category[:1].upper() + category[1:]),
        ]
        origin = self.cursor.reserve(DETAILS_BOX_HEIGHT, gap=10)
        self.canvas.draw_rect(self.left + 10, origin.y, self.content_width - 20, DETAILS_BOX_HEIGHT,
                              stroke=self.colours["primary"], line_width=0.5, tag="exercise-details")
        for idx, (label, value) in enumerate(details, start=1):
            y = origin.y + 12 * idx
            self.canvas.draw_text(label, self.left + 20, y, font=FONT_BOLD, size=10,
                                  colour=self.colours["text"], tag="exercise-details")
            self.canvas.draw_text(value, self.left + 65, y, size=10,
                                  colour=self.colours["text"], tag="exercise-details")

    # ------------------------------------------------------------------
    # Plan
    # ------------------------------------------------------------------

    def exercise_plan(self) -> None:
        exercise = self.exercise
        self.banner("Exercise Objectives", new_page=True)
        self.numbered_strings(exercise.objectives, size=BODY_SIZE)

        self.banner("Participants", keep_with_next=16)
        self.table(
            ["#", "Role"],
            [[str(idx), role] for idx, role in enumerate(exercise.participants, start=1)],
            column_widths=(PARTICIPANT_TABLE_FIRST_WIDTH, self.content_width - PARTICIPANT_TABLE_FIRST_WIDTH),
            style=self.table_style(font_size=10),
            tag="participants-table",
        )

        self.banner("Materials Required")
        self.bullet_list(exercise.materials_required)
        self.banner("Facilitator Responsibilities")
        self.bullet_list(self.facilitator_tasks)

    # ------------------------------------------------------------------
    # Injects
    # ------------------------------------------------------------------

    def _time_marker(self, marker: str) -> None:
        width = max(35.0, self.canvas.measure_text(marker, FONT_BOLD, 8) + 6)
        origin = self.cursor.reserve(BADGE_SIZE, gap=4, keep_with_next=40)
        self.canvas.draw_rect(self.left, origin.y, width, BADGE_SIZE,
                              fill=self.colours["primary"], tag="inject-marker")
        self.canvas.draw_text(marker, self.left + width / 2, origin.y + 5.5, font=FONT_BOLD, size=8,
                              colour=WHITE, align="center", tag="inject-marker")

    def scenario_injects(self) -> None:
        self.banner("Scenario Injects", new_page=True)
        injects = self.package.injects
        for idx, inject in enumerate(injects):
            self._time_marker(inject.time_marker)
            self.text(inject.description, gap=3, tag="inject")
            if inject.facilitator_prompts:
                self.text("Facilitator Prompts:", size=9, bold=True, gap=1, tag="inject")
                for prompt in inject.facilitator_prompts:
                    self.text(f'"{prompt}"', size=9, italic=True, indent=5, gap=1.5, tag="prompt")
            if inject.expected_responses:
                self.text("Expected Responses:", size=9, bold=True, gap=1, tag="inject")
                for response in inject.expected_responses:
                    self.text(f"{BULLET} {response}", size=9, indent=5, gap=1, tag="bullet")
            if idx < len(injects) - 1:
                origin = self.cursor.reserve(10)
                self.canvas.draw_line(self.left, origin.y + 5, self.left + self.content_width, origin.y + 5,
                                      colour=self.colours["border"], width=0.2, tag="separator")

    # ------------------------------------------------------------------
    # Evaluation and debrief
    # ------------------------------------------------------------------

    def evaluation_criteria(self) -> None:
        self.banner("Evaluation Criteria", new_page=True)
        self.table(
            ["#", "Criterion", "Target", "Result"],
            [[str(idx), c.criterion, c.target_outcome, RESULT_BOXES]
             for idx, c in enumerate(self.package.evaluation_criteria, start=1)],
            column_widths=EVALUATION_TABLE_WIDTHS,
            style=self.table_style(font_size=9),
            gap=20,
            tag="evaluation-table",
        )

    def debrief_question(self, number: int, question: str) -> None:
        """Numbered question kept on one page together with its notes box."""
        indent = 15
        size = BODY_SIZE
        lh = self.line_height(size)
        lines = self.canvas.split_text(question, self.content_width - indent, FONT_BOLD, size)
        box_offset = len(lines) * lh + 3
        origin = self.cursor.reserve(box_offset + NOTES_BOX_HEIGHT, gap=8)

        self.canvas.draw_rect(self.left, origin.y, BADGE_SIZE, BADGE_SIZE,
                              fill=self.colours["primary"], tag="debrief")
        self.canvas.draw_text(str(number), self.left + BADGE_SIZE / 2, origin.y + 5.5, font=FONT_BOLD,
                              size=8, colour=WHITE, align="center", tag="debrief")
        for idx, line in enumerate(lines):
            self.canvas.draw_text(line, self.left + indent, self.canvas.baseline(origin.y, lh, idx),
                                  font=FONT_BOLD, size=size, colour=self.colours["text"], tag="debrief")

        box_y = origin.y + box_offset
        self.canvas.draw_rect(self.left + indent, box_y, self.content_width - indent, NOTES_BOX_HEIGHT,
                              stroke=self.colours["border"], tag="notes-box")
        self.canvas.draw_text("Notes...", self.left + indent + 5, box_y + 5, font=FONT_ITALIC, size=8,
                              colour=PLACEHOLDER, tag="notes-box")

    def debrief_template(self) -> None:
        self.banner("Debrief Discussion Template", keep_with_next=35)
        for number, question in enumerate(self.package.debrief_questions, start=1):
            self.debrief_question(number, question)


def plan_sections(composer: ExerciseComposer) -> list[SectionStep]:
    """Ordered steps of an exercise package; every section is always present."""
    return [
        SectionStep("cover", 5, "Adding cover page...", composer.cover),
        SectionStep("exercise-plan", 20, "Adding exercise plan...", composer.exercise_plan),
        SectionStep("scenario-injects", 45, "Adding scenario injects...", composer.scenario_injects),
        SectionStep("evaluation-criteria", 70, "Adding evaluation criteria...", composer.evaluation_criteria),
        SectionStep("debrief", 85, "Adding debrief template...", composer.debrief_template),
    ]
