"""Tests for DraftPlanGenerator: schedule shape, caps, safety rules, determinism."""

from __future__ import annotations

import dataclasses
from datetime import date

import pytest

from plan_builder.exceptions import InvalidPlanSetupError
from plan_builder.generator import DraftPlanGenerator, generate, pick_long_day
from plan_builder.models.enums import Discipline, DisciplineEmphasis, RiskTolerance, WorkoutType
from plan_builder.models.setup import RequestContext
from plan_builder.policies.profiles import (
    SAFE_PROFILE_ID,
    apply_policy_profile,
    resolve_policy_profile,
)
from plan_builder.serialization import draft_plan_to_dict, to_json_string
from plan_builder.validation import evaluate, validate


class TestGoldenPlan:
    def test_twelve_weeks_by_default(self, golden_plan) -> None:
        assert len(golden_plan.weeks) == 12
        assert [w.week_index for w in golden_plan.weeks] == list(range(12))

    def test_only_allowed_days(self, golden_plan, golden_setup) -> None:
        used = {s.weekday for s in golden_plan.iter_sessions()}
        assert used <= golden_setup.allowed_days
        assert not used & {0, 2, 4}

    def test_no_doubles(self, golden_plan) -> None:
        assert all(not w.doubled_weekdays for w in golden_plan.weeks)

    def test_first_week_layout(self, golden_plan) -> None:
        week = golden_plan.weeks[0]
        assert [(s.weekday, s.duration_minutes) for s in week.sessions] == [
            (1, 55), (3, 60), (5, 60), (6, 125),
        ]
        long_session = week.sessions[-1]
        assert long_session.discipline == Discipline.BIKE
        assert long_session.notes == "Long ride"

    def test_long_session_is_longest(self, golden_plan) -> None:
        for week in golden_plan.weeks:
            longest = max(week.sessions, key=lambda s: s.duration_minutes)
            assert longest.weekday == 6

    def test_every_session_has_detail_summing_to_duration(self, golden_plan) -> None:
        for session in golden_plan.iter_sessions():
            assert session.detail is not None
            assert session.detail.total_block_minutes == session.duration_minutes
            assert session.detail.explainability.is_complete

    def test_session_ids_unique(self, golden_plan) -> None:
        ids = [s.session_id for s in golden_plan.iter_sessions()]
        assert len(ids) == len(set(ids))

    def test_passes_quality_gate(self, golden_plan, golden_setup) -> None:
        report = evaluate(golden_setup, golden_plan)
        assert report.passed
        assert report.score >= 80
        assert report.rates.availability_adherence_rate == 1.0
        assert report.rates.non_consecutive_intensity_rate == 1.0


class TestDeterminism:
    def test_same_setup_same_plan(self, generator, golden_setup) -> None:
        first = to_json_string(draft_plan_to_dict(generator.generate(golden_setup)))
        second = to_json_string(draft_plan_to_dict(generator.generate(golden_setup)))
        assert first == second

    def test_module_level_generate(self, generator, taper_setup) -> None:
        assert generate(taper_setup) == generator.generate(taper_setup)


class TestBeginnerSafety:
    def test_runs_capped_in_first_four_weeks(self, generator, beginner_setup) -> None:
        plan = generator.generate(beginner_setup)
        for week in plan.weeks[:4]:
            for session in week.sessions:
                if session.discipline == Discipline.RUN:
                    assert session.duration_minutes <= 55

    def test_no_bricks_early(self, generator, beginner_setup) -> None:
        plan = generator.generate(beginner_setup)
        for week in plan.weeks[:4]:
            assert not any("Brick" in s.notes for s in week.sessions)

    def test_no_hard_violations(self, generator, beginner_setup) -> None:
        plan = generator.generate(beginner_setup)
        assert not [v for v in validate(beginner_setup, plan) if v.is_hard]

    def test_gentle_intensity_early(self, generator, beginner_setup) -> None:
        plan = generator.generate(beginner_setup)
        for week in plan.weeks[:4]:
            assert all(s.workout_type != WorkoutType.THRESHOLD for s in week.sessions)


class TestVolume:
    def test_taper_reduces_final_week(self, generator, taper_setup) -> None:
        plan = generator.generate(taper_setup)
        delta = evaluate(taper_setup, plan).rates.taper_last_week_delta_minutes
        assert delta is not None and delta <= 0
        assert plan.weeks[-1].total_minutes < plan.weeks[0].total_minutes

    def test_explicit_weekly_budgets(self, generator, make_setup) -> None:
        setup = make_setup(weeks=3, weekly_minutes_by_week=(200, 250, 300))
        plan = generator.generate(setup)
        assert [w.total_minutes for w in plan.weeks] == [200, 250, 300]

    def test_sessions_per_week_override(self, generator, make_setup) -> None:
        plan = generator.generate(make_setup(sessions_per_week=3))
        assert all(len(w.sessions) == 3 for w in plan.weeks)

    def test_zero_budget_and_no_days_gives_empty_weeks(self, generator, make_setup) -> None:
        plan = generator.generate(make_setup(allowed_weekdays=(), weekly_minutes=0))
        assert len(plan.weeks) == 12
        assert plan.total_sessions == 0


class TestDoubles:
    def test_within_cap(self, generator, taper_setup) -> None:
        plan = generator.generate(taper_setup)
        assert all(len(w.doubled_weekdays) <= 1 for w in plan.weeks)
        assert len(plan.weeks[0].sessions) == 6

    def test_easy_day_hosts_double(self, generator, taper_setup) -> None:
        plan = generator.generate(taper_setup)
        assert plan.weeks[0].doubled_weekdays == frozenset({2})

    def test_am_pm_window_preferred(self, generator, taper_setup) -> None:
        setup = dataclasses.replace(
            taper_setup, request_context=RequestContext(time_windows=((3, "am+pm"),)),
        )
        plan = generator.generate(setup)
        assert plan.weeks[0].doubled_weekdays == frozenset({3})

    def test_policy_override_removes_doubles(self, taper_setup) -> None:
        generator = DraftPlanGenerator(policy_overrides={SAFE_PROFILE_ID: {"max_doubles": 0}})
        plan = generator.generate(taper_setup)
        assert all(not w.doubled_weekdays for w in plan.weeks)


class TestCoachDistributions:
    def test_split_targets_replace_rotation(self, generator, make_setup) -> None:
        setup = make_setup(discipline_split_targets=((Discipline.SWIM, 3), (Discipline.RUN, 1)))
        plan = generator.generate(setup)
        for week in plan.weeks:
            # Long and brick sessions stay on the long day
            others = {s.discipline for s in week.sessions if s.weekday != 6}
            assert others <= {Discipline.SWIM, Discipline.RUN}
        assert not [v for v in validate(setup, plan) if v.is_hard]

    def test_split_targets_follow_weights(self, generator, make_setup) -> None:
        setup = make_setup(
            discipline_split_targets=((Discipline.SWIM, 0), (Discipline.BIKE, 1)),
        )
        plan = generator.generate(setup)
        assert {s.discipline for s in plan.iter_sessions()} == {Discipline.BIKE}

    def test_type_distribution_sets_intensity_type(self, generator, make_setup) -> None:
        setup = make_setup(session_type_distribution=((WorkoutType.THRESHOLD, 1.0),))
        week = generator.generate(setup).weeks[0]
        assert {s.workout_type for s in week.sessions if s.is_intensity} == {
            WorkoutType.THRESHOLD
        }

    def test_type_distribution_sets_easy_types(self, generator, make_setup) -> None:
        setup = make_setup(session_type_distribution=(
            (WorkoutType.ENDURANCE, 1.0), (WorkoutType.RECOVERY, 1.0),
        ))
        week = generator.generate(setup).weeks[0]
        easy = {s.workout_type for s in week.sessions if not s.is_intensity}
        assert easy <= {WorkoutType.ENDURANCE, WorkoutType.RECOVERY}
        assert {s.workout_type for s in week.sessions if s.is_intensity} == {WorkoutType.TEMPO}

    def test_beginner_weeks_stay_gentle(self, generator, beginner_setup) -> None:
        setup = dataclasses.replace(
            beginner_setup,
            session_type_distribution=((WorkoutType.THRESHOLD, 1.0),),
            discipline_split_targets=((Discipline.RUN, 1.0),),
        )
        plan = generator.generate(setup)
        for week in plan.weeks[:4]:
            assert all(s.workout_type != WorkoutType.THRESHOLD for s in week.sessions)
            assert all(s.duration_minutes <= 55 for s in week.sessions)
        assert not [v for v in validate(setup, plan) if v.is_hard]


def _sweep_setups() -> list[tuple[str, dict]]:
    day_sets = [(1, 3, 5, 6), (0, 2, 4, 6), (0, 1, 2, 3, 4, 5, 6), (2, 6), (6,)]
    caps = [(0, 0), (1, 1), (2, 3), (5, 9)]
    cases = []
    for emphasis in DisciplineEmphasis:
        for risk in RiskTolerance:
            for days in day_sets:
                for intensity_cap, doubles_cap in caps:
                    case_id = (
                        f"{emphasis.name.lower()}-{risk.name.lower()}-"
                        f"days{len(days)}-i{intensity_cap}-d{doubles_cap}"
                    )
                    cases.append((case_id, dict(
                        discipline_emphasis=emphasis,
                        risk_tolerance=risk,
                        allowed_weekdays=days,
                        max_intensity_days_per_week=intensity_cap,
                        max_doubles_per_week=doubles_cap,
                        weeks=6,
                        weekly_minutes=360,
                    )))
    return cases


_SWEEP = _sweep_setups()


class TestConstraintInvariants:
    @pytest.mark.parametrize("overrides", [c for _, c in _SWEEP], ids=[i for i, _ in _SWEEP])
    def test_generated_plan_respects_setup(self, generator, make_setup, overrides) -> None:
        setup = make_setup(**overrides)
        plan = generator.generate(setup)
        effective = apply_policy_profile(setup, resolve_policy_profile(setup))
        assert effective.intensity_cap <= setup.intensity_cap
        assert effective.doubles_cap <= setup.doubles_cap
        for week in plan.weeks:
            assert {s.weekday for s in week.sessions} <= setup.allowed_days
            assert len(week.doubled_weekdays) <= effective.doubles_cap
            assert len(week.intensity_weekdays) <= effective.intensity_cap
        assert evaluate(setup, plan).hard_violations == ()

    @pytest.mark.parametrize("risk", list(RiskTolerance))
    def test_coach_weights_respect_setup(self, generator, make_setup, risk) -> None:
        setup = make_setup(
            risk_tolerance=risk,
            allowed_weekdays=(0, 1, 2, 3, 4, 5, 6),
            max_doubles_per_week=2,
            discipline_split_targets=(
                (Discipline.STRENGTH, 2), (Discipline.RUN, 3), (Discipline.SWIM, 1),
            ),
            session_type_distribution=(
                (WorkoutType.THRESHOLD, 2), (WorkoutType.TECHNIQUE, 1),
            ),
        )
        plan = generator.generate(setup)
        for week in plan.weeks:
            assert len(week.doubled_weekdays) <= setup.doubles_cap
            assert len(week.intensity_weekdays) <= setup.intensity_cap
            assert all(
                s.discipline != Discipline.STRENGTH for s in week.sessions if s.is_intensity
            )
        assert evaluate(setup, plan).hard_violations == ()


class TestFailFast:
    @pytest.mark.parametrize(
        "overrides, field_name",
        [
            ({"allowed_weekdays": (1, 7)}, "allowed_weekdays"),
            ({"long_session_day": 9}, "long_session_day"),
            ({"week_start": -1}, "week_start"),
            ({"weekly_minutes": -30}, "weekly_minutes"),
            ({"allowed_weekdays": ()}, "allowed_weekdays"),
            ({"sessions_per_week": 0}, "sessions_per_week"),
            ({"weeks": 0}, "weeks"),
            ({"policy_profile_id": "coachkit-unknown-v1"}, "policy_profile_id"),
            (
                {"start_date": date(2026, 3, 2), "completion_date": date(2026, 2, 2)},
                "completion_date",
            ),
            (
                {"request_context": RequestContext(available_time_minutes=0)},
                "available_time_minutes",
            ),
            (
                {"session_type_distribution": ((WorkoutType.STRENGTH, 1.0),)},
                "session_type_distribution",
            ),
        ],
    )
    def test_rejected(self, generator, make_setup, overrides, field_name) -> None:
        with pytest.raises(InvalidPlanSetupError) as exc_info:
            generator.generate(make_setup(**overrides))
        assert exc_info.value.field_name == field_name


class TestPickLongDay:
    def test_preferred_day(self) -> None:
        assert pick_long_day((1, 3, 5), 3) == 3

    def test_saturday_then_sunday(self) -> None:
        assert pick_long_day((1, 3, 6), None) == 6
        assert pick_long_day((1, 3, 0), 4) == 0

    def test_fallback_last_day(self) -> None:
        assert pick_long_day((1, 2, 3), None) == 3
        assert pick_long_day((), 6) is None
