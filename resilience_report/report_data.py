"""
report_data.py — Report data collection.

Turns a raw data source (the dashboard's capitals, alerts, services and
scenario library, as loaded from data/sample_trust.yaml) into the ReportData
snapshot the generator consumes:

    Aggregate:   rounded mean of capital scores, Green/Amber/Red status
    Narrative:   template-driven executive summary
    Capitals:    display status/trend, KRI rows, dated recent changes, risks
    Services:    display status and formatted last-updated timestamp
    Scenarios:   five most recently tested, with status label and outcome
    Issues:      first four red/amber alerts

Contingency services and exercise packages are looked up by id from the
same source.

The source mapping is read-only; every call builds a fresh ReportData.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from resilience_report.models import (
    SECTION_IDS,
    CapitalSummary,
    ContingencyService,
    ExercisePackage,
    ForwardLook,
    KRIRow,
    ReportData,
    ReportOptions,
    RiskEntry,
    ScenarioSummary,
    ServiceSummary,
)

logger = logging.getLogger(__name__)

REPORT_PERIODS: dict[str, str] = {
    "current-quarter": "Current Quarter (Q1 2026)",
    "last-quarter": "Last Quarter (Q4 2025)",
    "annual": "Annual Report (2025)",
}

_STATUS_DISPLAY = {"green": "Green", "amber": "Amber", "red": "Red"}
_TREND_DISPLAY = {"improving": "Improving", "declining": "Declining"}
_KRI_STATUS_BY_TREND = {"improving": "Green", "declining": "Red"}
_SERVICE_STATUS_DISPLAY = {"operational": "Operational", "degraded": "Degraded"}
_SCENARIO_OUTCOMES = {"recent": "Well-Managed", "due-soon": "Adequate"}

MAX_SCENARIOS = 5
MAX_CRITICAL_ISSUES = 4


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_source(path: str | Path) -> dict[str, Any]:
    """Load the raw dashboard data source from YAML.

    Args:
        path: Path to the source YAML file.

    Returns:
        Parsed mapping.
    """
    with open(path, "r", encoding="utf-8") as fh:
        source = yaml.safe_load(fh) or {}
    logger.info("Loaded data source %s (%d capitals)", path, len(source.get("capitals") or []))
    return source


def load_contingency_service(source: dict[str, Any], service_id: str) -> ContingencyService:
    """Find a service with contingency plans by id.

    Raises:
        KeyError: If no service has that id.
    """
    for raw in source.get("services") or []:
        if raw.get("id") == service_id:
            return ContingencyService.from_dict(raw)
    raise KeyError(f"No essential service with id '{service_id}'")


def load_exercise_package(source: dict[str, Any], exercise_id: str) -> ExercisePackage:
    """Find an exercise package by the id of its exercise.

    Raises:
        KeyError: If no exercise has that id.
    """
    for raw in source.get("exercises") or []:
        if (raw.get("exercise") or {}).get("id") == exercise_id:
            return ExercisePackage.from_dict(raw)
    raise KeyError(f"No exercise package with id '{exercise_id}'")


# ---------------------------------------------------------------------------
# Aggregates and formatting helpers
# ---------------------------------------------------------------------------

def aggregate_score(capitals: list[dict[str, Any]]) -> int:
    """Rounded mean of capital scores (0 when there are none)."""
    if not capitals:
        return 0
    return round(sum(c["score"] for c in capitals) / len(capitals))


def aggregate_status(score: float) -> str:
    if score >= 80:
        return "Green"
    if score >= 60:
        return "Amber"
    return "Red"


def _as_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value))


def _fmt_date(value: Any) -> str:
    parsed = _as_datetime(value)
    return parsed.strftime("%d %b %Y") if parsed else "Never"


def _fmt_datetime(value: Any) -> str:
    parsed = _as_datetime(value)
    return parsed.strftime("%d %b %Y, %H:%M") if parsed else ""


def generate_executive_summary(source: dict[str, Any]) -> str:
    """Board commentary on the overall position.

    Args:
        source: Raw data source.

    Returns:
        One paragraph of summary text.
    """
    capitals = source.get("capitals") or []
    score = aggregate_score(capitals)
    status = aggregate_status(score)
    summary = (
        f"The Trust's overall resilience position is {status.lower()}, "
        f"with an aggregate score of {score}/100. "
    )

    red = [c["name"] for c in capitals if c.get("status") == "red"]
    if red:
        plural = len(red) > 1
        summary += (
            f"Priority attention is required for {' and '.join(red)} "
            f"Capital{'s' if plural else ''}, which {'are' if plural else 'is'} "
            f"currently rated as vulnerable. "
        )

    at_risk = [s for s in source.get("services") or [] if s.get("status") == "at-risk"]
    if at_risk:
        summary += (
            f"{len(at_risk)} essential service{'s are' if len(at_risk) > 1 else ' is'} "
            f"currently at risk, requiring immediate attention."
        )
    return summary.strip()


# ---------------------------------------------------------------------------
# Section builders
# ---------------------------------------------------------------------------

def _capital_summary(raw: dict[str, Any]) -> CapitalSummary:
    kris = [
        KRIRow(
            name=k["name"],
            value=str(k.get("current_value", "")),
            target=str(k.get("target", "")),
            status=_KRI_STATUS_BY_TREND.get(k.get("trend"), "Amber"),
            trend=_TREND_DISPLAY.get(k.get("trend"), "Stable"),
        )
        for k in raw.get("kris") or []
    ]
    changes = [
        f"{_fmt_date(rc['date'])}: {rc['description']}"
        for rc in raw.get("recent_changes") or []
    ]
    risks = [RiskEntry(**r) for r in raw.get("risks") or []] or [
        RiskEntry(
            description=f"{raw['name']} resilience pressure",
            mitigation="Ongoing monitoring and improvement initiatives",
        )
    ]
    return CapitalSummary(
        name=raw["name"],
        score=raw["score"],
        status=_STATUS_DISPLAY.get(raw.get("status"), "Amber"),
        trend=_TREND_DISPLAY.get(raw.get("trend"), "Stable"),
        commentary=raw.get("explanation", ""),
        kris=kris,
        recent_changes=changes,
        risks=risks,
    )


def _service_summaries(source: dict[str, Any]) -> list[ServiceSummary]:
    return [
        ServiceSummary(
            name=s["name"],
            status=_SERVICE_STATUS_DISPLAY.get(s.get("status"), "At Risk"),
            reason=s.get("status_reason", ""),
            last_updated=_fmt_datetime(s.get("last_updated")),
        )
        for s in source.get("services") or []
    ]


def _scenario_summaries(source: dict[str, Any]) -> list[ScenarioSummary]:
    tested = [s for s in source.get("scenarios") or [] if s.get("last_tested")]
    tested.sort(key=lambda s: _as_datetime(s["last_tested"]), reverse=True)
    return [
        ScenarioSummary(
            name=s["name"],
            last_tested=_fmt_date(s["last_tested"]),
            test_status=s.get("test_status", "overdue"),
            outcome=_SCENARIO_OUTCOMES.get(s.get("test_status"), "Needs Review"),
        )
        for s in tested[:MAX_SCENARIOS]
    ]


def _critical_issues(source: dict[str, Any]) -> list[str]:
    return [
        a["title"] for a in source.get("alerts") or []
        if a.get("severity") in ("red", "amber")
    ][:MAX_CRITICAL_ISSUES]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def collect_report_data(
    source: dict[str, Any],
    period: str,
    sections: list[str] | None = None,
    options: ReportOptions | None = None,
    generated_at: datetime | None = None,
) -> ReportData:
    """Assemble a ReportData snapshot from the raw data source.

    Args:
        source: Raw data source mapping.
        period: Period id from REPORT_PERIODS, or a free-text period label.
        sections: Section ids to include; defaults to all.
        options: ReportOptions; defaults to disclaimer only.
        generated_at: Generation timestamp; defaults to now.

    Returns:
        ReportData ready for validation and generation.
    """
    capitals = source.get("capitals") or []
    score = aggregate_score(capitals)
    generated_at = generated_at or datetime.now()
    forward = source.get("forward_look")

    data = ReportData(
        period=REPORT_PERIODS.get(period, period),
        generated_date=generated_at.strftime("%d %B %Y, %H:%M"),
        sections=list(sections) if sections is not None else list(SECTION_IDS),
        options=options or ReportOptions(),
        aggregate_score=score,
        aggregate_status=aggregate_status(score),
        aggregate_trend=source.get("aggregate_trend", "Stable"),
        executive_summary=generate_executive_summary(source),
        capitals=[_capital_summary(c) for c in capitals],
        critical_issues=_critical_issues(source),
        recommended_actions=list(source.get("recommended_actions") or []),
        services=_service_summaries(source),
        scenarios=_scenario_summaries(source),
        forward_look=ForwardLook(**forward) if forward else None,
    )
    logger.info("Collected report data for %s: aggregate %d/100 (%s)",
                data.period, score, data.aggregate_status)
    return data
