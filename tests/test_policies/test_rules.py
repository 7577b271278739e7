"""Tests for beginner, injury and taper signals, brick weeks and weighted sequences."""

from __future__ import annotations

from plan_builder.models.enums import (
    Discipline,
    DisciplineEmphasis,
    ProgramPolicy,
    RiskTolerance,
    WorkoutType,
)
from plan_builder.models.setup import RequestContext
from plan_builder.policies.rules import (
    KEY_SESSION_BANDS,
    TypeQueues,
    beginner_run_cap,
    build_weighted_sequence,
    discipline_sequence,
    has_injury_signal,
    in_beginner_window,
    is_beginner,
    is_brick_week,
    normalize_weights,
    session_type_queues,
    wants_taper,
)


class TestBeginnerDetection:
    def test_low_risk_is_beginner(self, make_setup) -> None:
        assert is_beginner(make_setup(risk_tolerance=RiskTolerance.LOW))

    def test_couch_program_is_beginner(self, make_setup) -> None:
        assert is_beginner(make_setup(program_policy=ProgramPolicy.COUCH_TO_IRONMAN_26))

    def test_half_to_full_is_not_beginner(self, make_setup) -> None:
        assert not is_beginner(make_setup(program_policy=ProgramPolicy.HALF_TO_FULL_MARATHON))

    def test_guidance_text(self, make_setup) -> None:
        assert is_beginner(make_setup(coach_guidance="Novice triathlete"))

    def test_experience_level(self, make_setup) -> None:
        setup = make_setup(request_context=RequestContext(experience_level="Beginner"))
        assert is_beginner(setup)

    def test_intermediate_med_risk_is_not_beginner(self, golden_setup) -> None:
        assert not is_beginner(golden_setup)


class TestSignals:
    def test_injury_from_guidance(self, make_setup) -> None:
        assert has_injury_signal(make_setup(coach_guidance="Some knee pain lately"))

    def test_injury_from_notes(self, make_setup) -> None:
        setup = make_setup(request_context=RequestContext(injury_notes="Sore calf"))
        assert has_injury_signal(setup)

    def test_no_injury(self, golden_setup) -> None:
        assert not has_injury_signal(golden_setup)

    def test_taper_from_guidance_or_event(self, make_setup, taper_setup, golden_setup) -> None:
        assert wants_taper(make_setup(coach_guidance="Please taper before the race"))
        assert wants_taper(taper_setup)
        assert not wants_taper(golden_setup)


class TestBeginnerRunCap:
    def test_cap_flat_in_safety_window(self) -> None:
        assert [beginner_run_cap(w) for w in range(4)] == [55, 55, 55, 55]
        assert in_beginner_window(3)
        assert not in_beginner_window(4)

    def test_cap_grows_after_window(self) -> None:
        assert beginner_run_cap(4) == 65
        assert beginner_run_cap(6) == 85


class TestBrickWeeks:
    def test_odd_weeks_for_multisport(self, make_setup) -> None:
        setup = make_setup(discipline_emphasis=DisciplineEmphasis.BALANCED)
        assert is_brick_week(setup, 1, beginner=False)
        assert not is_brick_week(setup, 2, beginner=False)

    def test_no_bricks_for_single_sport_emphasis(self, make_setup) -> None:
        setup = make_setup(discipline_emphasis=DisciplineEmphasis.RUN)
        assert not is_brick_week(setup, 1, beginner=False)

    def test_no_bricks_at_low_risk(self, make_setup) -> None:
        setup = make_setup(risk_tolerance=RiskTolerance.LOW)
        assert not is_brick_week(setup, 1, beginner=False)

    def test_beginners_wait_for_safety_window(self, make_setup) -> None:
        setup = make_setup(discipline_emphasis=DisciplineEmphasis.BALANCED)
        assert not is_brick_week(setup, 3, beginner=True)
        assert is_brick_week(setup, 5, beginner=True)


class TestKeySessionBands:
    def test_high_risk_allows_one_more(self) -> None:
        assert KEY_SESSION_BANDS[RiskTolerance.MED] == (2, 3)
        assert KEY_SESSION_BANDS[RiskTolerance.HIGH] == (2, 4)


class TestWeightedSequences:
    def test_normalize_skips_non_positive_and_merges_repeats(self) -> None:
        weights = [
            (Discipline.SWIM, 2), (Discipline.RUN, 0), (Discipline.BIKE, -1), (Discipline.RUN, 2),
        ]
        assert normalize_weights(weights) == [(Discipline.SWIM, 0.5), (Discipline.RUN, 0.5)]

    def test_normalize_without_positive_weights(self) -> None:
        assert normalize_weights([]) == []
        assert normalize_weights([(Discipline.RUN, 0)]) == []

    def test_heavier_key_spread_round_robin(self) -> None:
        weights = normalize_weights([(Discipline.RUN, 2), (Discipline.BIKE, 1)])
        assert build_weighted_sequence(weights, 6) == (
            Discipline.RUN, Discipline.BIKE, Discipline.RUN,
            Discipline.BIKE, Discipline.RUN, Discipline.RUN,
        )

    def test_overshoot_trimmed_by_name(self) -> None:
        weights = normalize_weights([(Discipline.RUN, 1), (Discipline.BIKE, 1)])
        assert build_weighted_sequence(weights, 5) == (
            Discipline.RUN, Discipline.BIKE, Discipline.RUN, Discipline.BIKE, Discipline.RUN,
        )

    def test_shortfall_topped_up_by_name(self) -> None:
        weights = normalize_weights(
            [(Discipline.SWIM, 1), (Discipline.RUN, 1), (Discipline.BIKE, 1)]
        )
        assert build_weighted_sequence(weights, 4) == (
            Discipline.BIKE, Discipline.RUN, Discipline.SWIM, Discipline.BIKE,
        )

    def test_empty_inputs(self) -> None:
        assert build_weighted_sequence([], 6) == ()
        assert build_weighted_sequence([(Discipline.RUN, 1.0)], 0) == ()

    def test_discipline_sequence_from_setup(self, make_setup) -> None:
        setup = make_setup(discipline_split_targets=((Discipline.SWIM, 30), (Discipline.RUN, 10)))
        assert discipline_sequence(setup, 4) == (
            Discipline.SWIM, Discipline.RUN, Discipline.SWIM, Discipline.SWIM,
        )
        assert discipline_sequence(make_setup(), 4) == ()

    def test_type_queues_split_by_slot_kind(self, make_setup) -> None:
        setup = make_setup(session_type_distribution=(
            (WorkoutType.TEMPO, 1.0), (WorkoutType.ENDURANCE, 1.0),
        ))
        queues = session_type_queues(setup)
        assert queues.intensity == (WorkoutType.TEMPO,) * 6
        assert queues.easy == (WorkoutType.ENDURANCE,) * 6

    def test_no_distribution_gives_empty_queues(self, golden_setup) -> None:
        assert session_type_queues(golden_setup) == TypeQueues()
