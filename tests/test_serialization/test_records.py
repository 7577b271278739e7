"""Tests for JSON-ready plan, report and setup records."""

from __future__ import annotations

import dataclasses
import json
from datetime import date

import pytest

from plan_builder.exceptions import InvalidPlanSetupError
from plan_builder.models.enums import (
    Discipline,
    DisciplineEmphasis,
    ProgramPolicy,
    RiskTolerance,
    WorkoutType,
)
from plan_builder.models.setup import RequestContext
from plan_builder.serialization import (
    draft_plan_to_dict,
    quality_report_to_dict,
    setup_from_dict,
    setup_to_dict,
    to_json_string,
)
from plan_builder.validation import evaluate


class TestPlanRecords:
    def test_week_shape(self, golden_plan) -> None:
        record = draft_plan_to_dict(golden_plan)
        week = record["weeks"][0]
        assert week["weekIndex"] == 0
        assert week["totalMinutes"] == 300
        assert len(week["sessions"]) == 4

    def test_session_shape(self, golden_plan) -> None:
        session = draft_plan_to_dict(golden_plan)["weeks"][0]["sessions"][-1]
        assert session["sessionId"] == "w0-d6-0"
        assert session["discipline"] == "bike"
        assert session["type"] == "endurance"
        assert session["locked"] is False
        detail = session["sessionDetail"]
        assert [b["blockType"] for b in detail["blocks"]] == ["warmup", "main", "cooldown"]
        assert detail["targets"]["primaryMetric"] == "zone"
        assert detail["blocks"][1]["intensity"]["zone"] == "Z2"
        assert {"short-on-time", "standard", "longer-window"} <= {
            v["label"] for v in detail["variants"]
        }

    def test_json_is_stable(self, golden_plan) -> None:
        text = to_json_string(draft_plan_to_dict(golden_plan))
        assert json.loads(text) == draft_plan_to_dict(golden_plan)
        assert to_json_string({"b": 1, "a": 2}, indent=None) == '{"a": 2, "b": 1}'


class TestQualityReportRecord:
    def test_shape(self, golden_setup, golden_plan) -> None:
        record = quality_report_to_dict(evaluate(golden_setup, golden_plan))
        assert record["passed"] is True
        assert record["hardViolations"] == []
        assert "weekly_minutes_in_band_rate" in record["metrics"]
        assert "taper_last_week_delta_minutes" in record["metrics"]

    def test_violation_codes_use_wire_names(self, golden_setup, golden_plan) -> None:
        setup = dataclasses.replace(golden_setup, allowed_weekdays=(1, 3, 5))
        record = quality_report_to_dict(evaluate(setup, golden_plan))
        assert record["hardViolations"][0]["code"] == "off-day-session"
        assert record["hardViolations"][0]["sessionId"].startswith("w0-d6")


class TestSetupRecords:
    def test_from_wire_values(self) -> None:
        setup = setup_from_dict({
            "allowed_weekdays": [1, 3, 5, 6],
            "weekly_minutes": 300,
            "start_date": "2026-02-02",
            "completion_date": "2026-05-11",
            "discipline_emphasis": "bike",
            "risk_tolerance": "HIGH",
            "program_policy": "couch-to-ironman-26",
            "request_context": {
                "experience_level": "intermediate",
                "time_windows": {"3": "am+pm"},
                "environment_tags": ["heat"],
            },
        })
        assert setup.allowed_weekdays == (1, 3, 5, 6)
        assert setup.start_date == date(2026, 2, 2)
        assert setup.discipline_emphasis == DisciplineEmphasis.BIKE
        assert setup.risk_tolerance == RiskTolerance.HIGH
        assert setup.program_policy == ProgramPolicy.COUCH_TO_IRONMAN_26
        assert setup.request_context.time_windows == ((3, "am+pm"),)
        assert setup.request_context.environment_tags == ("heat",)

    def test_round_trip(self, beginner_setup) -> None:
        setup = dataclasses.replace(
            beginner_setup,
            request_context=RequestContext(
                experience_level="Beginner",
                time_windows=((2, "pm"), (4, "am+pm")),
                equipment="road",
            ),
        )
        assert setup_from_dict(json.loads(json.dumps(setup_to_dict(setup)))) == setup

    def test_defaults(self) -> None:
        setup = setup_from_dict({"allowed_weekdays": [2]})
        assert setup.weekly_minutes == 0
        assert setup.program_policy is None
        assert setup.request_context == RequestContext()

    @pytest.mark.parametrize(
        "data, field_name",
        [
            ({"allowed_weekdays": [1], "risk_tolerance": "extreme"}, "risk_tolerance"),
            ({"allowed_weekdays": [1], "start_date": "02/02/2026"}, "start_date"),
            ({"allowed_weekdays": [1], "program_policy": 99}, "program_policy"),
            ({"allowed_weekdays": ["mon"]}, "allowed_weekdays"),
            ({"allowed_weekdays": [None]}, "allowed_weekdays"),
            ({"allowed_weekdays": [1], "weekly_minutes": "lots"}, "weekly_minutes"),
            ({"allowed_weekdays": [1], "weekly_minutes": {"mon": "x"}}, "weekly_minutes"),
            ({"allowed_weekdays": [1], "weekly_minutes_by_week": [200, "?"]}, "weekly_minutes_by_week"),
            ({"allowed_weekdays": [1], "weeks": "twelve"}, "weeks"),
            ({"allowed_weekdays": [1], "week_start": [1]}, "week_start"),
            (
                {"allowed_weekdays": [1], "request_context": {"time_windows": {"tue": "am"}}},
                "time_windows",
            ),
            (
                {"allowed_weekdays": [1], "request_context": {"time_windows": ["am"]}},
                "time_windows",
            ),
            (
                {"allowed_weekdays": [1], "request_context": {"available_time_minutes": "an hour"}},
                "available_time_minutes",
            ),
            (
                {"allowed_weekdays": [1], "discipline_split_targets": {"rowing": 1}},
                "discipline_split_targets",
            ),
            (
                {"allowed_weekdays": [1], "session_type_distribution": {"tempo": "most"}},
                "session_type_distribution",
            ),
        ],
    )
    def test_invalid_values(self, data, field_name) -> None:
        with pytest.raises(InvalidPlanSetupError) as exc_info:
            setup_from_dict(data)
        assert exc_info.value.field_name == field_name

    def test_unknown_keys(self) -> None:
        with pytest.raises(InvalidPlanSetupError, match="weekly_hours"):
            setup_from_dict({"allowed_weekdays": [1], "weekly_hours": 5})

    def test_per_day_weekly_minutes_are_summed(self) -> None:
        setup = setup_from_dict({
            "allowed_weekdays": [1, 3, 6],
            "weekly_minutes": {"mon": 60, "wed": 45, "sat": 120, "sun": None, "fri": -10},
        })
        assert setup.weekly_minutes == 225

    def test_coach_weights(self) -> None:
        setup = setup_from_dict({
            "allowed_weekdays": [1, 3, 6],
            "discipline_split_targets": {"swim": 20, "bike": 50, "run": 30},
            "session_type_distribution": [["threshold", 1], ["endurance", 3]],
        })
        assert setup.discipline_split_targets == (
            (Discipline.SWIM, 20.0), (Discipline.BIKE, 50.0), (Discipline.RUN, 30.0),
        )
        assert setup.session_type_distribution == (
            (WorkoutType.THRESHOLD, 1.0), (WorkoutType.ENDURANCE, 3.0),
        )
        record = setup_to_dict(setup)
        assert record["discipline_split_targets"] == {"swim": 20.0, "bike": 50.0, "run": 30.0}
        assert setup_from_dict(json.loads(json.dumps(record))) == setup
