"""Tests for the frozen data models and enum helpers."""

from __future__ import annotations

import dataclasses

import pytest

from plan_builder.models.enums import (
    HARD_VIOLATION_CODES,
    SOFT_VIOLATION_CODES,
    Discipline,
    VariantLabel,
    ViolationCode,
    WorkoutType,
    wire_name,
)
from plan_builder.models.plan import DraftPlan, Session, Week
from plan_builder.models.quality import RATE_NAMES, QualityRates, QualityReport
from plan_builder.models.session_detail import Explainability
from plan_builder.models.setup import PlanSetup, clamp_int
from plan_builder.models.violation import Violation


def _make_session(weekday: int, ordinal: int = 0, **overrides) -> Session:
    defaults = {
        "session_id": f"w0-d{weekday}-{ordinal}",
        "week_index": 0,
        "weekday": weekday,
        "ordinal": ordinal,
        "discipline": Discipline.RUN,
        "workout_type": WorkoutType.ENDURANCE,
        "duration_minutes": 40,
    }
    defaults.update(overrides)
    return Session(**defaults)


class TestPlanSetup:
    def test_caps_clamped_on_read(self) -> None:
        setup = PlanSetup(
            allowed_weekdays=(1,), max_intensity_days_per_week=9, max_doubles_per_week=-2,
        )
        assert setup.intensity_cap == 3
        assert setup.doubles_cap == 0

    def test_intensity_cap_never_below_one(self) -> None:
        setup = PlanSetup(allowed_weekdays=(1,), max_intensity_days_per_week=0)
        assert setup.intensity_cap == 1

    def test_target_prefers_per_week_sequence(self) -> None:
        setup = PlanSetup(
            allowed_weekdays=(1,), weekly_minutes=300, weekly_minutes_by_week=(200, 250),
        )
        assert setup.target_minutes_for_week(0) == 200
        assert setup.target_minutes_for_week(1) == 250
        assert setup.target_minutes_for_week(2) == 300

    def test_event_anchored_requires_completion_date(self, taper_setup, golden_setup) -> None:
        assert taper_setup.is_event_anchored
        assert not golden_setup.is_event_anchored

    def test_frozen(self, golden_setup) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            golden_setup.weekly_minutes = 10

    def test_clamp_int(self) -> None:
        assert clamp_int(5, 0, 3) == 3
        assert clamp_int(-1, 0, 3) == 0
        assert clamp_int(2, 0, 3) == 2


class TestWeek:
    def test_total_minutes(self) -> None:
        week = Week(week_index=0, sessions=(_make_session(1), _make_session(3, duration_minutes=60)))
        assert week.total_minutes == 100

    def test_doubled_weekdays(self) -> None:
        week = Week(
            week_index=0,
            sessions=(_make_session(1), _make_session(1, ordinal=1), _make_session(3)),
        )
        assert week.doubled_weekdays == frozenset({1})

    def test_intensity_weekdays_are_distinct_days(self) -> None:
        week = Week(
            week_index=0,
            sessions=(
                _make_session(2, workout_type=WorkoutType.TEMPO),
                _make_session(2, ordinal=1, workout_type=WorkoutType.THRESHOLD),
                _make_session(4, workout_type=WorkoutType.RECOVERY),
            ),
        )
        assert week.intensity_weekdays == frozenset({2})

    def test_draft_plan_iterates_in_order(self) -> None:
        plan = DraftPlan(weeks=(
            Week(week_index=0, sessions=(_make_session(1),)),
            Week(week_index=1, sessions=(_make_session(2), _make_session(4))),
        ))
        assert [s.weekday for s in plan.iter_sessions()] == [1, 2, 4]
        assert plan.total_sessions == 3


class TestViolationsAndReports:
    def test_hard_and_soft_codes_partition_all_codes(self) -> None:
        assert HARD_VIOLATION_CODES | SOFT_VIOLATION_CODES == frozenset(ViolationCode)
        assert not HARD_VIOLATION_CODES & SOFT_VIOLATION_CODES

    def test_minutes_out_of_band_is_soft(self) -> None:
        soft = Violation(ViolationCode.WEEKLY_MINUTES_OUT_OF_BOUNDS, "x", week_index=0)
        hard = Violation(ViolationCode.OFF_DAY_SESSION, "x", week_index=0)
        assert not soft.is_hard
        assert hard.is_hard

    def test_report_fails_with_any_hard_violation(self) -> None:
        hard = Violation(ViolationCode.MAX_DOUBLES_EXCEEDED, "x", week_index=0)
        assert QualityReport(score=100).passed
        assert not QualityReport(score=80, hard_violations=(hard,)).passed

    def test_rate_names_cover_eight_rates(self) -> None:
        assert len(RATE_NAMES) == 8
        assert "taper_last_week_delta_minutes" not in RATE_NAMES
        assert set(QualityRates().as_dict()) == set(RATE_NAMES) | {"taper_last_week_delta_minutes"}


class TestExplainability:
    def test_complete_when_all_fields_filled(self) -> None:
        ex = Explainability("a", "b", "c", "d", "e")
        assert ex.is_complete

    def test_blank_field_is_incomplete(self) -> None:
        ex = Explainability("a", "b", "   ", "d", "e")
        assert not ex.is_complete


class TestWireName:
    def test_lower_hyphenated(self) -> None:
        assert wire_name(VariantLabel.SHORT_ON_TIME) == "short-on-time"
        assert wire_name(ViolationCode.OFF_DAY_SESSION) == "off-day-session"
        assert wire_name(Discipline.RUN) == "run"
