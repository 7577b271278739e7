"""Periodization math: plan length, phase allocation, taper and recovery weeks.

Weekly targets start from the setup's budget (explicit per-week sequence or
scalar).  Scalar budgets are then shaped by:
- a taper over the final two weeks of event-anchored plans, keyed by risk
  tolerance (Mujika & Padilla 2003; Bosquet et al. 2007)
- recovery (deload) weeks on the policy profile's cadence, never inside the
  taper window

References:
    Mujika & Padilla (2003), Scientific bases for precompetition tapering.
    Bosquet et al. (2007), Effects of tapering on performance: a meta-analysis.
    Issurin (2010), New horizons for the methodology and physiology of training
        periodization.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

from plan_builder.exceptions import InvalidPlanSetupError
from plan_builder.math.durations import round_half_up
from plan_builder.models.enums import (
    BASE_PHASE_SHARE,
    DAYS_PER_WEEK,
    DEFAULT_PLAN_WEEKS,
    MAX_PLAN_WEEKS,
    TAPER_WINDOW_WEEKS,
    TrainingPhase,
)
from plan_builder.models.setup import PlanSetup
from plan_builder.policies.profiles import PolicyProfile
from plan_builder.policies.rules import TAPER_MULTIPLIERS, wants_taper


@dataclass(frozen=True)
class PhaseSpec:
    """A contiguous run of weeks sharing one training phase."""

    phase: TrainingPhase
    start_week: int  # 0-indexed
    end_week: int  # inclusive
    duration_weeks: int


def compute_plan_weeks(start_date: date, completion_date: date) -> int:
    """Number of plan weeks needed to reach *completion_date*.

    Partial weeks count as a full week; the result is clamped to 1-52.

    Raises:
        InvalidPlanSetupError: If the completion date precedes the start date.
    """
    delta_days = (completion_date - start_date).days
    if delta_days < 0:
        raise InvalidPlanSetupError(
            f"Completion date {completion_date.isoformat()} is before "
            f"start date {start_date.isoformat()}",
            field_name="completion_date",
        )
    weeks = math.ceil(delta_days / DAYS_PER_WEEK)
    return max(1, min(MAX_PLAN_WEEKS, weeks))


def resolve_plan_weeks(setup: PlanSetup) -> int:
    """Plan length: explicit weeks, else dates, else the per-week budget, else 12.

    Raises:
        InvalidPlanSetupError: If explicit weeks are non-positive or the dates
            are reversed.
    """
    if setup.weeks is not None:
        if setup.weeks < 1:
            raise InvalidPlanSetupError(
                f"Plan must cover at least 1 week, got {setup.weeks}",
                field_name="weeks",
            )
        return min(MAX_PLAN_WEEKS, setup.weeks)
    if setup.start_date is not None and setup.completion_date is not None:
        return compute_plan_weeks(setup.start_date, setup.completion_date)
    if setup.weekly_minutes_by_week:
        return min(MAX_PLAN_WEEKS, len(setup.weekly_minutes_by_week))
    return DEFAULT_PLAN_WEEKS


def weeks_until_event(setup: PlanSetup, week_index: int, total_weeks: int) -> int | None:
    """Weeks from the start of *week_index* to the event, or None if no taper applies.

    With both dates set the distance is measured on the calendar (a week that
    starts within 7 days of the event is 1 week out); otherwise the plan end
    is taken as the event.
    """
    if not wants_taper(setup):
        return None
    if setup.start_date is not None and setup.completion_date is not None:
        week_start = setup.start_date + timedelta(days=DAYS_PER_WEEK * week_index)
        days_out = (setup.completion_date - week_start).days
        return max(1, math.ceil(days_out / DAYS_PER_WEEK))
    return total_weeks - week_index


def is_taper_week(setup: PlanSetup, week_index: int, total_weeks: int) -> bool:
    weeks_out = weeks_until_event(setup, week_index, total_weeks)
    return weeks_out is not None and weeks_out <= TAPER_WINDOW_WEEKS


def taper_multiplier(setup: PlanSetup, week_index: int, total_weeks: int) -> float:
    """Volume multiplier for taper weeks (1.0 outside the taper window)."""
    weeks_out = weeks_until_event(setup, week_index, total_weeks)
    if weeks_out is None or weeks_out > TAPER_WINDOW_WEEKS:
        return 1.0
    second_to_last, last = TAPER_MULTIPLIERS[setup.risk_tolerance]
    return last if weeks_out <= 1 else second_to_last


def allocate_phases(total_weeks: int, taper_weeks: int) -> list[PhaseSpec]:
    """Allocate BASE / BUILD / TAPER across the plan.

    TAPER takes the final *taper_weeks*; the rest is split 55/45 between
    BASE and BUILD (a single non-taper week is BASE).

    Args:
        total_weeks: Plan length in weeks (>= 1).
        taper_weeks: Weeks in the taper window.

    Returns:
        List of PhaseSpec in chronological order.

    Raises:
        ValueError: If total_weeks < 1.
    """
    if total_weeks < 1:
        raise ValueError(f"Plan must be at least 1 week, got {total_weeks}")

    taper_weeks = max(0, min(taper_weeks, total_weeks))
    remaining = total_weeks - taper_weeks
    if remaining >= 2:
        base_weeks = max(1, round(remaining * BASE_PHASE_SHARE))
        build_weeks = remaining - base_weeks
    else:
        base_weeks = remaining
        build_weeks = 0

    phases: list[PhaseSpec] = []
    current_week = 0
    for phase, duration in (
        (TrainingPhase.BASE, base_weeks),
        (TrainingPhase.BUILD, build_weeks),
        (TrainingPhase.TAPER, taper_weeks),
    ):
        if duration > 0:
            phases.append(PhaseSpec(
                phase=phase,
                start_week=current_week,
                end_week=current_week + duration - 1,
                duration_weeks=duration,
            ))
            current_week += duration
    return phases


def get_phase_for_week(week_index: int, phases: list[PhaseSpec]) -> TrainingPhase:
    """Phase containing *week_index* (0-indexed).

    Raises:
        ValueError: If the week is outside the plan range.
    """
    for spec in phases:
        if spec.start_week <= week_index <= spec.end_week:
            return spec.phase
    raise ValueError(
        f"Week {week_index} is outside plan range "
        f"(0-{phases[-1].end_week if phases else -1})"
    )


def is_recovery_week(
    week_index: int,
    total_weeks: int,
    every_n_weeks: int,
    taper_weeks: int = 0,
) -> bool:
    """Deload week on a fixed cadence, e.g. every 4th week (3 hard + 1 easy).

    Taper weeks carry their own reduction and are never recovery weeks.
    """
    if every_n_weeks < 2:
        return False
    if week_index >= total_weeks - taper_weeks:
        return False
    return (week_index + 1) % every_n_weeks == 0


def weekly_minutes_target(
    setup: PlanSetup,
    week_index: int,
    total_weeks: int,
    profile: PolicyProfile,
) -> int:
    """Target minutes the generator plans for *week_index*.

    Explicit per-week budgets are used as given.  Scalar budgets are scaled
    by the taper multiplier inside the taper window, or by the profile's
    recovery multiplier on recovery weeks.
    """
    budget = setup.target_minutes_for_week(week_index)
    if week_index < len(setup.weekly_minutes_by_week):
        return budget

    multiplier = taper_multiplier(setup, week_index, total_weeks)
    if multiplier == 1.0 and is_recovery_week(
        week_index,
        total_weeks,
        profile.recovery_every_n_weeks,
        count_taper_weeks(setup, total_weeks),
    ):
        multiplier = profile.recovery_multiplier
    return round_half_up(budget * multiplier)


def count_taper_weeks(setup: PlanSetup, total_weeks: int) -> int:
    return sum(1 for w in range(total_weeks) if is_taper_week(setup, w, total_weeks))
