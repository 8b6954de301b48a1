"""
test_report_data.py — Unit tests for report data collection.

Tests cover:
    - Aggregate score and status thresholds
    - Capital, KRI, service and scenario mapping
    - Critical issues selection
    - Executive summary phrasing
    - Contingency service and exercise package lookup
    - Loading the bundled sample data and config
"""

import sys
from datetime import date, datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from resilience_report.config import DEFAULT_CONFIG, hex_colour, load_config
from resilience_report.models import SECTION_IDS, ReportOptions, validate_report_data
from resilience_report.report_data import (
    REPORT_PERIODS,
    aggregate_score,
    aggregate_status,
    collect_report_data,
    generate_executive_summary,
    load_contingency_service,
    load_exercise_package,
    load_source,
)

ROOT = Path(__file__).parent.parent
GENERATED_AT = datetime(2026, 1, 27, 9, 30)


def _source() -> dict:
    return {
        "capitals": [
            {
                "name": "Human", "score": 58, "status": "red", "trend": "declining",
                "explanation": "Vacancies above tolerance.",
                "kris": [
                    {"name": "Vacancy rate", "current_value": "11.2%", "target": "<8%", "trend": "declining"},
                    {"name": "Training", "current_value": "88%", "target": ">90%", "trend": "improving"},
                    {"name": "Turnover", "current_value": "13%", "target": "<12%", "trend": "stable"},
                ],
                "recent_changes": [{"date": date(2026, 1, 20), "description": "Cohort started"}],
            },
            {"name": "Social", "score": 81, "status": "green", "trend": "stable"},
            {"name": "Financial", "score": 72, "status": "amber", "trend": "improving"},
        ],
        "alerts": [
            {"title": "A", "severity": "red"},
            {"title": "B", "severity": "green"},
            {"title": "C", "severity": "amber"},
            {"title": "D", "severity": "amber"},
            {"title": "E", "severity": "red"},
            {"title": "F", "severity": "red"},
        ],
        "services": [
            {"id": "emergency-care", "name": "Emergency Care", "status": "operational",
             "status_reason": "OK", "last_updated": datetime(2026, 1, 27, 8, 30),
             "executive_owner": "COO",
             "contingency_plans": {"mutual_aid": "- **City General**: 15 minutes"}},
            {"id": "surgery", "name": "Elective Surgery", "status": "degraded",
             "status_reason": "Beds", "last_updated": "2026-01-27T07:45:00"},
            {"id": "mental-health", "name": "Mental Health Crisis", "status": "at-risk",
             "status_reason": "Capacity", "last_updated": None},
        ],
        "scenarios": [
            {"name": f"S{i}", "last_tested": date(2025, i, 1), "test_status": status}
            for i, status in zip(range(1, 8), ["overdue", "overdue", "due-soon", "due-soon",
                                               "recent", "recent", "recent"])
        ] + [{"name": "Never tested", "test_status": "overdue"}],
        "recommended_actions": ["Act now"],
    }


class TestAggregates:

    def test_rounded_mean(self):
        assert aggregate_score([{"score": 58}, {"score": 81}, {"score": 72}]) == 70

    def test_no_capitals_scores_zero(self):
        assert aggregate_score([]) == 0

    @pytest.mark.parametrize("score,status", [(80, "Green"), (79.9, "Amber"), (60, "Amber"), (59, "Red")])
    def test_status_thresholds(self, score, status):
        assert aggregate_status(score) == status


class TestCollectReportData:

    def test_top_level_fields(self):
        data = collect_report_data(_source(), "current-quarter", generated_at=GENERATED_AT)
        assert data.period == REPORT_PERIODS["current-quarter"]
        assert data.generated_date == "27 January 2026, 09:30"
        assert data.sections == list(SECTION_IDS)
        assert data.options == ReportOptions()
        assert data.aggregate_score == 70
        assert data.aggregate_status == "Amber"
        assert data.aggregate_trend == "Stable"

    def test_unknown_period_used_as_label(self):
        data = collect_report_data(_source(), "Q1 2026", generated_at=GENERATED_AT)
        assert data.period == "Q1 2026"

    def test_capital_display_values(self):
        human = collect_report_data(_source(), "annual", generated_at=GENERATED_AT).capitals[0]
        assert (human.status, human.trend) == ("Red", "Declining")
        assert human.commentary == "Vacancies above tolerance."
        assert human.recent_changes == ["20 Jan 2026: Cohort started"]

    def test_kri_status_follows_trend(self):
        kris = collect_report_data(_source(), "annual", generated_at=GENERATED_AT).capitals[0].kris
        assert [(k.status, k.trend) for k in kris] == [
            ("Red", "Declining"), ("Green", "Improving"), ("Amber", "Stable"),
        ]

    def test_capital_without_risks_gets_default_risk(self):
        social = collect_report_data(_source(), "annual", generated_at=GENERATED_AT).capitals[1]
        assert len(social.risks) == 1
        assert social.kris == []

    def test_services_mapped(self):
        services = collect_report_data(_source(), "annual", generated_at=GENERATED_AT).services
        assert [s.status for s in services] == ["Operational", "Degraded", "At Risk"]
        assert services[0].last_updated == "27 Jan 2026, 08:30"
        assert services[1].last_updated == "27 Jan 2026, 07:45"
        assert services[2].last_updated == ""

    def test_five_most_recent_scenarios(self):
        scenarios = collect_report_data(_source(), "annual", generated_at=GENERATED_AT).scenarios
        assert [s.name for s in scenarios] == ["S7", "S6", "S5", "S4", "S3"]
        assert scenarios[0].last_tested == "01 Jul 2025"
        assert [s.outcome for s in scenarios] == [
            "Well-Managed", "Well-Managed", "Well-Managed", "Adequate", "Adequate",
        ]

    def test_critical_issues_first_four_red_or_amber(self):
        data = collect_report_data(_source(), "annual", generated_at=GENERATED_AT)
        assert data.critical_issues == ["A", "C", "D", "E"]

    def test_section_and_option_selection(self):
        options = ReportOptions(include_citations=True, include_disclaimer=False)
        data = collect_report_data(_source(), "annual", ["executive-summary"], options, GENERATED_AT)
        assert data.sections == ["executive-summary"]
        assert data.options is options

    def test_collected_data_passes_validation(self):
        validate_report_data(collect_report_data(_source(), "annual", generated_at=GENERATED_AT))

    def test_source_not_mutated(self):
        source = _source()
        before = repr(source)
        collect_report_data(source, "annual", generated_at=GENERATED_AT)
        assert repr(source) == before


class TestExecutiveSummary:

    def test_mentions_score_red_capital_and_at_risk_service(self):
        summary = generate_executive_summary(_source())
        assert "amber" in summary
        assert "70/100" in summary
        assert "Human Capital, which is currently rated as vulnerable" in summary
        assert "1 essential service is currently at risk" in summary

    def test_all_green(self):
        summary = generate_executive_summary({"capitals": [{"name": "Social", "score": 90, "status": "green"}]})
        assert summary == "The Trust's overall resilience position is green, with an aggregate score of 90/100."


class TestContingencyLookup:

    def test_finds_service_by_id(self):
        service = load_contingency_service(_source(), "emergency-care")
        assert service.name == "Emergency Care"
        assert service.executive_owner == "COO"
        assert service.plans.mutual_aid.startswith("- **City General**")
        assert service.plans.degradation_protocols == ""

    def test_unknown_id_raises_key_error(self):
        with pytest.raises(KeyError):
            load_contingency_service(_source(), "no-such-service")


class TestExerciseLookup:

    def _source(self) -> dict:
        return {"exercises": [
            {"exercise": {"id": "ex-flood", "name": "River Flood", "type": "live"},
             "injects": [{"time_marker": "T+0", "description": "Basement flooding"}]},
        ]}

    def test_finds_package_by_exercise_id(self):
        package = load_exercise_package(self._source(), "ex-flood")
        assert package.exercise.name == "River Flood"
        assert package.injects[0].facilitator_prompts == []
        assert package.evaluation_criteria == []

    def test_unknown_id_raises_key_error(self):
        with pytest.raises(KeyError):
            load_exercise_package(self._source(), "ex-missing")

    def test_no_exercises_raises_key_error(self):
        with pytest.raises(KeyError):
            load_exercise_package({}, "ex-flood")


class TestBundledFiles:

    def test_sample_data_collects_and_validates(self):
        source = load_source(ROOT / "data" / "sample_trust.yaml")
        data = collect_report_data(source, "current-quarter", generated_at=GENERATED_AT)
        validate_report_data(data)
        assert len(data.capitals) == 5
        assert data.aggregate_score == 70
        assert len(data.critical_issues) == 4
        assert len(data.scenarios) == 5

    def test_sample_contingency_service_has_all_plans(self):
        source = load_source(ROOT / "data" / "sample_trust.yaml")
        plans = load_contingency_service(source, "emergency-care").plans
        assert all([plans.degradation_protocols, plans.alternative_delivery,
                    plans.mutual_aid, plans.recovery_prioritisation])

    def test_config_file_merges_over_defaults(self):
        cfg = load_config(ROOT / "config.yaml")
        assert cfg["report"]["brand"]["primary"] == "005EB8"
        assert cfg["report"]["citations"] == DEFAULT_CONFIG["report"]["citations"]
        assert cfg["paths"]["output_dir"] == "data/output"

    def test_missing_config_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_override_replaces_nested_value_only(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("report:\n  title: Custom Title\n", encoding="utf-8")
        cfg = load_config(path)
        assert cfg["report"]["title"] == "Custom Title"
        assert cfg["report"]["confidentiality"] == DEFAULT_CONFIG["report"]["confidentiality"]

    def test_hex_colour(self):
        assert hex_colour("#005EB8") == (0, 94, 184)
