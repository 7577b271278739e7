"""Constraint validator — detects safety and quality breaches in a draft plan.

Every check is independent and cumulative: one session can raise several
violations and nothing short-circuits.  Violations are returned as data and
never raised.
"""

from __future__ import annotations

import logging
import math

from plan_builder.models.enums import (
    BEGINNER_RUN_CAP_MINUTES,
    VALIDATOR_MINUTES_BAND,
    WEEKDAY_NAMES,
    Discipline,
    ViolationCode,
)
from plan_builder.models.plan import DraftPlan, Week
from plan_builder.models.setup import PlanSetup
from plan_builder.models.violation import Violation
from plan_builder.policies.rules import BRICK_PATTERN, in_beginner_window, is_beginner

logger = logging.getLogger(__name__)


def minutes_band(target: int, band: tuple[float, float]) -> tuple[int, int]:
    """Inclusive (low, high) minutes around *target* for a (min, max) ratio band."""
    low_ratio, high_ratio = band
    return math.floor(target * low_ratio), math.ceil(target * high_ratio)


def _weekday_label(weekday: int) -> str:
    if 0 <= weekday < len(WEEKDAY_NAMES):
        return WEEKDAY_NAMES[weekday]
    return str(weekday)


def _check_sessions(setup: PlanSetup, week: Week, beginner: bool) -> list[Violation]:
    violations: list[Violation] = []
    n = week.week_index + 1
    allowed = setup.allowed_days
    early = beginner and in_beginner_window(week.week_index)

    for session in week.sessions:
        if session.weekday not in allowed:
            violations.append(Violation(
                code=ViolationCode.OFF_DAY_SESSION,
                message=(
                    f"Week {n}: session scheduled on unavailable day "
                    f"({_weekday_label(session.weekday)})."
                ),
                week_index=week.week_index,
                session_id=session.session_id,
            ))
        if not early:
            continue
        if (
            session.discipline == Discipline.RUN
            and session.duration_minutes > BEGINNER_RUN_CAP_MINUTES
        ):
            violations.append(Violation(
                code=ViolationCode.BEGINNER_RUN_CAP_EXCEEDED,
                message=(
                    f"Week {n}: beginner run of {session.duration_minutes} min exceeds "
                    f"the {BEGINNER_RUN_CAP_MINUTES} min cap."
                ),
                week_index=week.week_index,
                session_id=session.session_id,
            ))
        if BRICK_PATTERN.search(session.notes):
            violations.append(Violation(
                code=ViolationCode.BEGINNER_BRICK_TOO_EARLY,
                message=f"Week {n}: brick session scheduled before week 5 for a beginner.",
                week_index=week.week_index,
                session_id=session.session_id,
            ))
    return violations


def _check_week(setup: PlanSetup, week: Week) -> list[Violation]:
    violations: list[Violation] = []
    n = week.week_index + 1

    doubles = len(week.doubled_weekdays)
    if doubles > setup.doubles_cap:
        violations.append(Violation(
            code=ViolationCode.MAX_DOUBLES_EXCEEDED,
            message=f"Week {n}: doubles used {doubles}, max allowed {setup.doubles_cap}.",
            week_index=week.week_index,
        ))

    intensity_days = len(week.intensity_weekdays)
    if intensity_days > setup.intensity_cap:
        violations.append(Violation(
            code=ViolationCode.MAX_INTENSITY_DAYS_EXCEEDED,
            message=(
                f"Week {n}: intensity days {intensity_days}, "
                f"max allowed {setup.intensity_cap}."
            ),
            week_index=week.week_index,
        ))

    target = setup.target_minutes_for_week(week.week_index)
    if target > 0:
        low, high = minutes_band(target, VALIDATOR_MINUTES_BAND)
        total = week.total_minutes
        if total < low or total > high:
            violations.append(Violation(
                code=ViolationCode.WEEKLY_MINUTES_OUT_OF_BOUNDS,
                message=(
                    f"Week {n}: planned {total} min outside expected band "
                    f"{low}-{high} min (target {target})."
                ),
                week_index=week.week_index,
            ))
    return violations


def validate(setup: PlanSetup, draft: DraftPlan) -> list[Violation]:
    """Check *draft* against the constraints in *setup*.

    Per session: off-day placement, and for beginners in weeks 0-3 the run
    cap and brick ban.  Per week: doubles cap, intensity-day cap and the
    55-110% weekly minutes band around the week's budget.

    Args:
        setup: The setup the plan was generated for.
        draft: The plan to check (possibly user-edited).

    Returns:
        Violations in week order; empty when the plan is clean.
    """
    beginner = is_beginner(setup)
    violations: list[Violation] = []
    for week in draft.weeks:
        violations.extend(_check_sessions(setup, week, beginner))
        violations.extend(_check_week(setup, week))

    if violations:
        logger.debug("Validator found %d violations", len(violations))
    return violations
