"""Regression scenario battery.

Nine named scenarios cover beginner, injury and travel, tight time budgets,
return from a break, an event taper, long multi-month builds and the three
policy profiles.  The golden scenario is the literal four-day bike setup.
Every scenario carries explicit thresholds (ratcheted against its policy
floors at evaluation time) and optional evidence assertions.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date

from plan_builder.harness.thresholds import ScenarioThresholds
from plan_builder.models.enums import (
    DisciplineEmphasis,
    ProgramPolicy,
    RiskTolerance,
    ViolationCode,
)
from plan_builder.models.setup import PlanSetup, RequestContext
from plan_builder.policies.profiles import (
    CONSERVATIVE_PROFILE_ID,
    PERFORMANCE_PROFILE_ID,
    SAFE_PROFILE_ID,
)


@dataclass(frozen=True)
class ScenarioEvidence:
    """Structural assertions on the generated plan beyond the rate thresholds."""

    min_week_count: int | None = None
    min_total_sessions: int | None = None
    max_sessions_on_any_day: int | None = None
    forbidden_hard_codes: frozenset[ViolationCode] = field(default_factory=frozenset)
    forbidden_soft_codes: frozenset[ViolationCode] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Scenario:
    scenario_id: str
    description: str
    setup: PlanSetup
    thresholds: ScenarioThresholds = field(default_factory=ScenarioThresholds)
    evidence: ScenarioEvidence = field(default_factory=ScenarioEvidence)


BASE_SETUP = PlanSetup(
    allowed_weekdays=(1, 2, 3, 4, 6),
    weekly_minutes=360,
    weeks=14,
    start_date=date(2026, 2, 2),
    completion_date=date(2026, 5, 11),
    discipline_emphasis=DisciplineEmphasis.BALANCED,
    risk_tolerance=RiskTolerance.MED,
    max_intensity_days_per_week=2,
    max_doubles_per_week=1,
    long_session_day=6,
    policy_profile_id=SAFE_PROFILE_ID,
)


def _setup(**overrides) -> PlanSetup:
    return dataclasses.replace(BASE_SETUP, **overrides)


_NO_DOUBLES_OR_OFF_DAYS = frozenset({
    ViolationCode.MAX_DOUBLES_EXCEEDED,
    ViolationCode.OFF_DAY_SESSION,
})
_NO_CAP_BREACHES = _NO_DOUBLES_OR_OFF_DAYS | {ViolationCode.MAX_INTENSITY_DAYS_EXCEEDED}
_NO_MINUTES_DRIFT = frozenset({ViolationCode.WEEKLY_MINUTES_OUT_OF_BOUNDS})

# Partial thresholds shared by the looser long-build scenarios
_LONG_BUILD = dict(
    max_soft_warnings=4,
    min_weekly_minutes_in_band_rate=0.9,
    min_no_long_then_intensity_rate=0.2,
)


SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        scenario_id="beginner-safe-5k",
        description="Beginner run focus with strict no-doubles and conservative ramp.",
        setup=_setup(
            discipline_emphasis=DisciplineEmphasis.RUN,
            risk_tolerance=RiskTolerance.LOW,
            max_intensity_days_per_week=1,
            max_doubles_per_week=0,
            weekly_minutes=220,
            weeks=10,
            completion_date=date(2026, 4, 13),
            program_policy=ProgramPolicy.COUCH_TO_5K,
            coach_guidance="Beginner athlete. Couch to 5k progression.",
            request_context=RequestContext(experience_level="Beginner"),
        ),
        thresholds=ScenarioThresholds(
            min_score=80,
            max_soft_warnings=5,
            min_weekly_minutes_in_band_rate=0.9,
            min_no_long_then_intensity_rate=0.2,
        ),
        evidence=ScenarioEvidence(
            min_week_count=10,
            min_total_sessions=30,
            max_sessions_on_any_day=1,
            forbidden_hard_codes=_NO_DOUBLES_OR_OFF_DAYS | {
                ViolationCode.BEGINNER_RUN_CAP_EXCEEDED,
                ViolationCode.BEGINNER_BRICK_TOO_EARLY,
            },
        ),
    ),
    Scenario(
        scenario_id="injury-and-travel-constrained",
        description="Injury + travel must downshift safely while maintaining session intent.",
        setup=_setup(
            weeks=12,
            completion_date=date(2026, 4, 27),
            weekly_minutes=320,
            max_intensity_days_per_week=1,
            max_doubles_per_week=0,
            coach_guidance=(
                "Mild achilles pain and travel for business on Mar 3-8. "
                "Keep consistency and avoid aggressive loading."
            ),
            request_context=RequestContext(injury_notes="Mild achilles pain"),
        ),
        evidence=ScenarioEvidence(
            min_week_count=12,
            min_total_sessions=40,
            max_sessions_on_any_day=1,
            forbidden_hard_codes=_NO_CAP_BREACHES,
            forbidden_soft_codes=_NO_MINUTES_DRIFT,
        ),
    ),
    Scenario(
        scenario_id="low-time-multisport",
        description="Limited time windows still preserve key-session structure with safe distribution.",
        setup=_setup(
            weekly_minutes=210,
            max_doubles_per_week=0,
            coach_guidance="Busy athlete with strict work schedule and short windows.",
            request_context=RequestContext(
                available_time_minutes=45,
                time_windows=((1, "am"), (2, "am"), (3, "pm"), (4, "pm"), (6, "am")),
            ),
        ),
        evidence=ScenarioEvidence(
            min_week_count=14,
            min_total_sessions=50,
            max_sessions_on_any_day=1,
            forbidden_hard_codes=_NO_DOUBLES_OR_OFF_DAYS,
            forbidden_soft_codes=_NO_MINUTES_DRIFT,
        ),
    ),
    Scenario(
        scenario_id="return-from-break",
        description="Athlete returning from time off should restart conservatively and avoid spikes.",
        setup=_setup(
            weeks=8,
            completion_date=date(2026, 3, 30),
            weekly_minutes=260,
            risk_tolerance=RiskTolerance.LOW,
            max_intensity_days_per_week=1,
            max_doubles_per_week=0,
            coach_guidance=(
                "Returning from 3 weeks off due to illness. "
                "Rebuild safely and avoid intensity stacking."
            ),
            request_context=RequestContext(
                experience_level="Intermediate",
                injury_notes="recent illness recovery",
            ),
        ),
        evidence=ScenarioEvidence(
            min_week_count=8,
            min_total_sessions=24,
            max_sessions_on_any_day=1,
            forbidden_hard_codes=_NO_DOUBLES_OR_OFF_DAYS | {
                ViolationCode.BEGINNER_RUN_CAP_EXCEEDED,
            },
            forbidden_soft_codes=_NO_MINUTES_DRIFT,
        ),
    ),
    Scenario(
        scenario_id="event-near-taper",
        description="Final pre-event block should trend down into taper while preserving intent.",
        setup=_setup(
            weeks=6,
            completion_date=date(2026, 3, 16),
            weekly_minutes=420,
            coach_guidance="Final block before event. Taper correctly in final two weeks.",
        ),
        thresholds=ScenarioThresholds(min_score=95, max_soft_warnings=1),
        evidence=ScenarioEvidence(
            min_week_count=6,
            min_total_sessions=24,
            max_sessions_on_any_day=2,
            forbidden_hard_codes=_NO_DOUBLES_OR_OFF_DAYS,
        ),
    ),
    Scenario(
        scenario_id="ironman-26w-policy-pack",
        description="26-week Ironman build should stay safety-compliant under higher volume profile.",
        setup=_setup(
            weeks=26,
            completion_date=date(2026, 8, 3),
            allowed_weekdays=(1, 2, 3, 4, 5, 6, 0),
            weekly_minutes=720,
            max_doubles_per_week=2,
            policy_profile_id=PERFORMANCE_PROFILE_ID,
            program_policy=ProgramPolicy.COUCH_TO_IRONMAN_26,
            coach_guidance="Long-course triathlon build. Keep run durability protected.",
            request_context=RequestContext(experience_level="Intermediate"),
        ),
        thresholds=ScenarioThresholds(min_score=88, **_LONG_BUILD),
        evidence=ScenarioEvidence(
            min_week_count=26,
            min_total_sessions=150,
            max_sessions_on_any_day=2,
            forbidden_hard_codes=_NO_CAP_BREACHES,
        ),
    ),
    Scenario(
        scenario_id="half-to-full-marathon-bridge",
        description="Half-to-full bridge should remain run-centric, progressive, and capped on intensity.",
        setup=_setup(
            weeks=18,
            completion_date=date(2026, 6, 8),
            allowed_weekdays=(1, 2, 4, 5, 0),
            weekly_minutes=460,
            discipline_emphasis=DisciplineEmphasis.RUN,
            program_policy=ProgramPolicy.HALF_TO_FULL_MARATHON,
            coach_guidance="Half marathon athlete progressing to full marathon safely.",
            request_context=RequestContext(experience_level="Intermediate"),
        ),
        thresholds=ScenarioThresholds(min_score=84, **_LONG_BUILD),
        evidence=ScenarioEvidence(
            min_week_count=18,
            min_total_sessions=90,
            max_sessions_on_any_day=2,
            forbidden_hard_codes=_NO_DOUBLES_OR_OFF_DAYS,
        ),
    ),
    Scenario(
        scenario_id="conservative-profile-zero-doubles",
        description=(
            "Conservative profile with strict no-doubles must stay single-session/day "
            "and in availability."
        ),
        setup=_setup(
            weeks=16,
            completion_date=date(2026, 5, 25),
            allowed_weekdays=(1, 2, 4, 6),
            weekly_minutes=280,
            discipline_emphasis=DisciplineEmphasis.RUN,
            risk_tolerance=RiskTolerance.LOW,
            max_intensity_days_per_week=1,
            max_doubles_per_week=0,
            policy_profile_id=CONSERVATIVE_PROFILE_ID,
            coach_guidance="Beginner-intermediate runner. Durability first, no doubles.",
            request_context=RequestContext(experience_level="Beginner"),
        ),
        thresholds=ScenarioThresholds(
            min_score=95,
            max_soft_warnings=1,
            min_weekly_minutes_in_band_rate=0.95,
        ),
        evidence=ScenarioEvidence(
            min_week_count=16,
            min_total_sessions=48,
            max_sessions_on_any_day=1,
            forbidden_hard_codes=_NO_DOUBLES_OR_OFF_DAYS | {
                ViolationCode.CONSECUTIVE_INTENSITY_DAYS,
            },
        ),
    ),
    Scenario(
        scenario_id="performance-profile-controlled-doubles",
        description="Performance profile allows doubles but must remain capped and avoid off-day drift.",
        setup=_setup(
            weeks=20,
            completion_date=date(2026, 6, 22),
            allowed_weekdays=(1, 2, 3, 4, 5, 6, 0),
            weekly_minutes=640,
            risk_tolerance=RiskTolerance.HIGH,
            max_doubles_per_week=2,
            policy_profile_id=PERFORMANCE_PROFILE_ID,
            coach_guidance=(
                "Advanced triathlete building race specificity while managing stress stacking."
            ),
            request_context=RequestContext(experience_level="Advanced"),
        ),
        thresholds=ScenarioThresholds(
            min_score=88,
            max_soft_warnings=4,
            min_weekly_minutes_in_band_rate=0.9,
            min_no_long_then_intensity_rate=0.9,
        ),
        evidence=ScenarioEvidence(
            min_week_count=20,
            min_total_sessions=120,
            max_sessions_on_any_day=2,
            forbidden_hard_codes=_NO_CAP_BREACHES,
        ),
    ),
)

GOLDEN_SCENARIO = Scenario(
    scenario_id="golden-bike-four-days",
    description="Four allowed days, no doubles, bike emphasis: nothing off-day, no doubles, score >= 80.",
    setup=PlanSetup(
        allowed_weekdays=(1, 3, 5, 6),
        weekly_minutes=300,
        max_intensity_days_per_week=2,
        max_doubles_per_week=0,
        discipline_emphasis=DisciplineEmphasis.BIKE,
        risk_tolerance=RiskTolerance.MED,
    ),
    thresholds=ScenarioThresholds(
        min_score=80,
        max_soft_warnings=5,
        min_weekly_minutes_in_band_rate=0.9,
        min_no_long_then_intensity_rate=0.2,
    ),
    evidence=ScenarioEvidence(
        max_sessions_on_any_day=1,
        forbidden_hard_codes=_NO_DOUBLES_OR_OFF_DAYS,
    ),
)

ALL_SCENARIOS: tuple[Scenario, ...] = SCENARIOS + (GOLDEN_SCENARIO,)


def get_scenario(scenario_id: str) -> Scenario:
    """Look up a scenario by id.

    Raises:
        KeyError: If no scenario has that id.
    """
    for scenario in ALL_SCENARIOS:
        if scenario.scenario_id == scenario_id:
            return scenario
    raise KeyError(f"Unknown scenario {scenario_id!r}")
