"""
models.py — Report input data model.

Plain dataclasses describing one snapshot of board-report data. They are
produced by report_data.collect_report_data (or by any host that already has
the figures) and consumed read-only by the generators.

Optional lists may be passed as None; they are normalised to empty lists so
the section renderers never have to guard against missing KRIs or changes.
Required top-level fields are checked by validate_report_data (and exercise
packages by validate_exercise_package) before any drawing happens.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from resilience_report.errors import ReportDataError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Recognised values
# ---------------------------------------------------------------------------

SECTION_EXECUTIVE_SUMMARY = "executive-summary"
SECTION_FIVE_CAPITALS = "five-capitals"
SECTION_ESSENTIAL_SERVICES = "essential-services"
SECTION_SCENARIO_TESTING = "scenario-testing"
SECTION_INVESTMENT_PROGRAMME = "investment-programme"
SECTION_REGULATORY_ASSURANCE = "regulatory-assurance"
SECTION_FORWARD_LOOK = "forward-look"

SECTION_IDS = (
    SECTION_EXECUTIVE_SUMMARY,
    SECTION_FIVE_CAPITALS,
    SECTION_ESSENTIAL_SERVICES,
    SECTION_SCENARIO_TESTING,
    SECTION_INVESTMENT_PROGRAMME,
    SECTION_REGULATORY_ASSURANCE,
    SECTION_FORWARD_LOOK,
)

STATUSES = ("Green", "Amber", "Red")
TRENDS = ("Improving", "Declining", "Stable")


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class ReportOptions:
    """Optional extras selected by the requester."""
    include_citations: bool = False
    include_disclaimer: bool = True
    include_raw_data: bool = False


@dataclass
class KRIRow:
    """One key risk indicator row in a capital's KRI table."""
    name: str
    value: str
    target: str
    status: str
    trend: str


@dataclass
class RiskEntry:
    description: str
    mitigation: str


@dataclass
class CapitalSummary:
    """Score, narrative and indicators for one of the five capitals."""
    name: str
    score: float
    status: str
    trend: str
    commentary: str = ""
    kris: list[KRIRow] = field(default_factory=list)
    recent_changes: list[str] = field(default_factory=list)
    risks: list[RiskEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.kris = list(self.kris or [])
        self.recent_changes = list(self.recent_changes or [])
        self.risks = list(self.risks or [])
        self.commentary = self.commentary or ""


@dataclass
class ServiceSummary:
    name: str
    status: str
    reason: str
    last_updated: str


@dataclass
class ScenarioSummary:
    name: str
    last_tested: str
    test_status: str  # 'recent', 'due-soon', 'overdue'
    outcome: str


@dataclass
class ForwardLook:
    """Forward-looking content; empty lists fall back to configured defaults."""
    upcoming_tests: list[str] = field(default_factory=list)
    emerging_risks: list[str] = field(default_factory=list)
    board_actions: list[str] = field(default_factory=list)


@dataclass
class ReportData:
    """Complete input snapshot for one board report."""
    period: str
    generated_date: str
    sections: list[str]
    options: ReportOptions
    aggregate_score: float
    aggregate_status: str
    aggregate_trend: str
    executive_summary: str
    capitals: list[CapitalSummary] = field(default_factory=list)
    critical_issues: list[str] = field(default_factory=list)
    recommended_actions: list[str] = field(default_factory=list)
    services: list[ServiceSummary] | None = None
    scenarios: list[ScenarioSummary] | None = None
    forward_look: ForwardLook | None = None

    def __post_init__(self) -> None:
        self.sections = list(self.sections or [])
        self.capitals = list(self.capitals or [])
        self.critical_issues = list(self.critical_issues or [])
        self.recommended_actions = list(self.recommended_actions or [])

    def has_section(self, section_id: str) -> bool:
        return section_id in self.sections

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ReportData":
        """Build a ReportData from a plain mapping (e.g. parsed YAML/JSON).

        Args:
            raw: Mapping with the snake_case field names of this class.

        Returns:
            ReportData instance (not yet validated).
        """
        capitals = [
            CapitalSummary(
                name=c["name"],
                score=c["score"],
                status=c["status"],
                trend=c["trend"],
                commentary=c.get("commentary", ""),
                kris=[KRIRow(**k) for k in c.get("kris") or []],
                recent_changes=c.get("recent_changes"),
                risks=[RiskEntry(**r) for r in c.get("risks") or []],
            )
            for c in raw.get("capitals") or []
        ]
        services = raw.get("services")
        scenarios = raw.get("scenarios")
        forward = raw.get("forward_look")
        return cls(
            period=raw.get("period", ""),
            generated_date=raw.get("generated_date", ""),
            sections=raw.get("sections"),
            options=ReportOptions(**(raw.get("options") or {})),
            aggregate_score=raw.get("aggregate_score", 0),
            aggregate_status=raw.get("aggregate_status", ""),
            aggregate_trend=raw.get("aggregate_trend", ""),
            executive_summary=raw.get("executive_summary", ""),
            capitals=capitals,
            critical_issues=raw.get("critical_issues"),
            recommended_actions=raw.get("recommended_actions"),
            services=[ServiceSummary(**s) for s in services] if services is not None else None,
            scenarios=[ScenarioSummary(**s) for s in scenarios] if scenarios is not None else None,
            forward_look=ForwardLook(**forward) if forward else None,
        )


@dataclass
class ContingencyPlans:
    """The four narrative plan sections, each in the light bold/list markup."""
    degradation_protocols: str = ""
    alternative_delivery: str = ""
    mutual_aid: str = ""
    recovery_prioritisation: str = ""


@dataclass
class ContingencyService:
    """An essential service and its contingency plans."""
    name: str
    executive_owner: str
    status: str
    plans: ContingencyPlans = field(default_factory=ContingencyPlans)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ContingencyService":
        return cls(
            name=raw["name"],
            executive_owner=raw.get("executive_owner", ""),
            status=raw.get("status", ""),
            plans=ContingencyPlans(**(raw.get("contingency_plans") or {})),
        )


# ---------------------------------------------------------------------------
# Exercise packages
# ---------------------------------------------------------------------------

EXERCISE_TYPES = ("desktop", "live", "simulation")


@dataclass
class Exercise:
    """A scenario exercise: what is tested, by whom and with what."""
    name: str
    type: str  # 'desktop', 'live', 'simulation'
    scenario_name: str
    scenario_category: str
    duration: str
    facilitator: str
    participants: list[str] = field(default_factory=list)
    objectives: list[str] = field(default_factory=list)
    materials_required: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.participants = list(self.participants or [])
        self.objectives = list(self.objectives or [])
        self.materials_required = list(self.materials_required or [])


@dataclass
class ExerciseInject:
    """One timed development delivered to players during the exercise."""
    time_marker: str
    description: str
    facilitator_prompts: list[str] = field(default_factory=list)
    expected_responses: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.facilitator_prompts = list(self.facilitator_prompts or [])
        self.expected_responses = list(self.expected_responses or [])


@dataclass
class EvaluationCriterion:
    criterion: str
    target_outcome: str


@dataclass
class ExercisePackage:
    """Everything a facilitator needs to run and debrief one exercise."""
    exercise: Exercise
    injects: list[ExerciseInject] = field(default_factory=list)
    evaluation_criteria: list[EvaluationCriterion] = field(default_factory=list)
    debrief_questions: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.injects = list(self.injects or [])
        self.evaluation_criteria = list(self.evaluation_criteria or [])
        self.debrief_questions = list(self.debrief_questions or [])

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ExercisePackage":
        ex = raw["exercise"]
        exercise = Exercise(
            name=ex.get("name", ""),
            type=ex.get("type", ""),
            scenario_name=ex.get("scenario_name", ""),
            scenario_category=ex.get("scenario_category", ""),
            duration=ex.get("duration", ""),
            facilitator=ex.get("facilitator", ""),
            participants=ex.get("participants"),
            objectives=ex.get("objectives"),
            materials_required=ex.get("materials_required"),
        )
        return cls(
            exercise=exercise,
            injects=[ExerciseInject(**i) for i in raw.get("injects") or []],
            evaluation_criteria=[EvaluationCriterion(**c) for c in raw.get("evaluation_criteria") or []],
            debrief_questions=raw.get("debrief_questions"),
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _check_score(label: str, score: Any, errors: list[str]) -> None:
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        errors.append(f"{label} must be a number, got {score!r}")
    elif not 0 <= score <= 100:
        errors.append(f"{label} must be within 0-100, got {score}")


def validate_report_data(data: ReportData) -> None:
    """Check the caller contract before any drawing begins.

    Args:
        data: ReportData to check.

    Raises:
        ReportDataError: Listing every violation found.
    """
    errors: list[str] = []

    if _is_blank(data.period):
        errors.append(f"period label is required, got {data.period!r}")
    if _is_blank(data.generated_date):
        errors.append(f"generated_date is required, got {data.generated_date!r}")
    if data.options is None:
        errors.append("options are required")

    unknown = [s for s in data.sections if s not in SECTION_IDS]
    if unknown:
        errors.append(f"unrecognised section id(s): {', '.join(unknown)}")

    _check_score("aggregate_score", data.aggregate_score, errors)

    for idx, capital in enumerate(data.capitals):
        label = f"capitals[{idx}] ({capital.name or 'unnamed'})"
        if _is_blank(capital.name):
            errors.append(f"{label}: name is required")
        _check_score(f"{label} score", capital.score, errors)
        if capital.status not in STATUSES:
            errors.append(f"{label}: status must be one of {', '.join(STATUSES)}, got {capital.status!r}")
        if capital.trend not in TRENDS:
            errors.append(f"{label}: trend must be one of {', '.join(TRENDS)}, got {capital.trend!r}")

    if errors:
        logger.error("Report data rejected with %d error(s)", len(errors))
        raise ReportDataError(errors)


def validate_exercise_package(package: ExercisePackage) -> None:
    """Check an exercise package before any drawing begins.

    Raises:
        ReportDataError: Listing every violation found.
    """
    errors: list[str] = []
    exercise = package.exercise
    if _is_blank(exercise.name):
        errors.append("exercise name is required")
    if exercise.type not in EXERCISE_TYPES:
        errors.append(f"exercise type must be one of {', '.join(EXERCISE_TYPES)}, got {exercise.type!r}")
    for idx, inject in enumerate(package.injects):
        if _is_blank(inject.time_marker):
            errors.append(f"injects[{idx}]: time_marker is required")

    if errors:
        logger.error("Exercise package rejected with %d error(s)", len(errors))
        raise ReportDataError(errors)
