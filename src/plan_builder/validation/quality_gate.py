"""Quality gate evaluator — scores a draft plan and computes compliance rates.

Validator output is partitioned into hard violations (safety-critical, block
acceptance) and soft warnings (quality only).  Every hard violation surfaces
unchanged.  Rates are normalized to [0, 1] and feed both the go/no-go decision
and the regression harness.
"""

from __future__ import annotations

import logging
from typing import Sequence

from plan_builder.models.enums import (
    DAYS_PER_WEEK,
    EVALUATOR_MINUTES_BAND,
    HARD_VIOLATION_PENALTY,
    MAX_QUALITY_SCORE,
    SOFT_WARNING_PENALTY,
)
from plan_builder.models.plan import DraftPlan, Session, Week
from plan_builder.models.quality import QualityRates, QualityReport
from plan_builder.models.setup import PlanSetup
from plan_builder.models.violation import Violation
from plan_builder.policies.rules import (
    KEY_NOTES_PATTERN,
    KEY_SESSION_BANDS,
    LONG_OR_BRICK_PATTERN,
)
from plan_builder.validation.validator import minutes_band, validate

logger = logging.getLogger(__name__)


def _rate(passed: int, total: int) -> float:
    """Fraction passed; an empty population counts as fully compliant."""
    if total <= 0:
        return 1.0
    return passed / total


def is_key_session(session: Session) -> bool:
    """Tempo/threshold, or notes flag a long run/ride, brick or key session."""
    return session.is_intensity or bool(KEY_NOTES_PATTERN.search(session.notes))


def is_long_or_brick(session: Session) -> bool:
    return bool(LONG_OR_BRICK_PATTERN.search(session.notes))


def quality_score(hard_count: int, soft_count: int) -> int:
    """100 minus fixed penalties per hard violation and soft warning, floored at 0."""
    score = (
        MAX_QUALITY_SCORE
        - HARD_VIOLATION_PENALTY * hard_count
        - SOFT_WARNING_PENALTY * soft_count
    )
    return max(0, score)


def _positions(setup: PlanSetup, weekdays) -> list[int]:
    return sorted({(d - setup.week_start) % DAYS_PER_WEEK for d in weekdays})


def _minutes_in_band(setup: PlanSetup, week: Week) -> bool:
    target = setup.target_minutes_for_week(week.week_index)
    if target <= 0:
        return week.total_minutes == 0
    low, high = minutes_band(target, EVALUATOR_MINUTES_BAND)
    return low <= week.total_minutes <= high


def _key_band_ok(setup: PlanSetup, week: Week) -> bool:
    key_min, key_max = KEY_SESSION_BANDS[setup.risk_tolerance]
    count = sum(1 for s in week.sessions if is_key_session(s))
    return key_min <= count <= key_max


def _intensity_not_consecutive(setup: PlanSetup, week: Week) -> bool:
    positions = _positions(setup, week.intensity_weekdays)
    return all(b - a > 1 for a, b in zip(positions, positions[1:]))


def _no_intensity_after_long(setup: PlanSetup, week: Week) -> bool:
    long_positions = set(_positions(setup, (s.weekday for s in week.sessions if is_long_or_brick(s))))
    intensity_positions = _positions(setup, week.intensity_weekdays)
    return not any(p - 1 in long_positions for p in intensity_positions)


def compute_rates(setup: PlanSetup, draft: DraftPlan) -> QualityRates:
    """Normalized compliance rates for *draft*.

    Key-session band checks only count weeks that carry sessions; every other
    per-week rate counts all weeks.
    """
    weeks = draft.weeks
    sessions = list(draft.iter_sessions())
    active = [w for w in weeks if w.sessions]
    allowed = setup.allowed_days

    on_allowed = sum(1 for s in sessions if s.weekday in allowed)
    explained = sum(
        1
        for s in sessions
        if s.detail is not None
        and s.detail.explainability is not None
        and s.detail.explainability.is_complete
    )

    taper_delta = None
    if len(weeks) >= 2:
        taper_delta = weeks[-1].total_minutes - weeks[-2].total_minutes

    return QualityRates(
        weekly_minutes_in_band_rate=_rate(
            sum(1 for w in weeks if _minutes_in_band(setup, w)), len(weeks)
        ),
        key_session_band_pass_rate=_rate(
            sum(1 for w in active if _key_band_ok(setup, w)), len(active)
        ),
        non_consecutive_intensity_rate=_rate(
            sum(1 for w in weeks if _intensity_not_consecutive(setup, w)), len(weeks)
        ),
        no_long_then_intensity_rate=_rate(
            sum(1 for w in weeks if _no_intensity_after_long(setup, w)), len(weeks)
        ),
        availability_adherence_rate=_rate(on_allowed, len(sessions)),
        doubles_compliance_rate=_rate(
            sum(1 for w in weeks if len(w.doubled_weekdays) <= setup.doubles_cap),
            len(weeks),
        ),
        intensity_cap_compliance_rate=_rate(
            sum(1 for w in weeks if len(w.intensity_weekdays) <= setup.intensity_cap),
            len(weeks),
        ),
        explainability_coverage_rate=_rate(explained, len(sessions)),
        taper_last_week_delta_minutes=taper_delta,
    )


def evaluate(
    setup: PlanSetup,
    draft: DraftPlan,
    violations: Sequence[Violation] | None = None,
) -> QualityReport:
    """Score *draft* and partition its violations.

    Args:
        setup: The setup the plan was generated for.
        draft: The plan to evaluate.
        violations: Validator output, if already computed; validated here
            otherwise.

    Returns:
        A QualityReport with score, hard violations, soft warnings and rates.
    """
    if violations is None:
        violations = validate(setup, draft)
    hard = tuple(v for v in violations if v.is_hard)
    soft = tuple(v for v in violations if not v.is_hard)
    report = QualityReport(
        score=quality_score(len(hard), len(soft)),
        hard_violations=hard,
        soft_warnings=soft,
        rates=compute_rates(setup, draft),
    )
    logger.debug(
        "Quality gate: score %d, %d hard, %d soft", report.score, len(hard), len(soft),
    )
    return report
