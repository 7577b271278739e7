"""Plan setup — the read-only input to one generation call."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from plan_builder.models.enums import (
    MAX_DOUBLES_CAP,
    MAX_INTENSITY_DAYS_CAP,
    MIN_DOUBLES_CAP,
    MIN_INTENSITY_DAYS_CAP,
    MONDAY,
    Discipline,
    DisciplineEmphasis,
    ProgramPolicy,
    RiskTolerance,
    WorkoutType,
)


def clamp_int(value: int, low: int, high: int) -> int:
    """Clamp *value* into the inclusive range [low, high]."""
    return max(low, min(high, int(value)))


@dataclass(frozen=True)
class RequestContext:
    """Athlete-supplied context attached to a plan request.

    ``time_windows`` pairs a weekday index with a free-text window such as
    ``"am"``, ``"pm"`` or ``"am+pm"``.
    """

    experience_level: str = ""
    injury_notes: str = ""
    available_time_minutes: int | None = None
    time_windows: tuple[tuple[int, str], ...] = field(default_factory=tuple)
    equipment: str = ""                        # "trainer" | "road" | ""
    environment_tags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PlanSetup:
    """Athlete constraints for a multi-week plan.

    Weekdays use 0 = Sunday ... 6 = Saturday.  Caps are stored as supplied and
    clamped on read through ``intensity_cap`` / ``doubles_cap``.

    ``discipline_split_targets`` and ``session_type_distribution`` are optional
    coach weights (any positive scale) that replace the emphasis rotation and
    the default easy/intensity workout types when present.
    """

    allowed_weekdays: tuple[int, ...]
    weekly_minutes: int = 0
    weekly_minutes_by_week: tuple[int, ...] = field(default_factory=tuple)
    weeks: int | None = None
    start_date: date | None = None
    completion_date: date | None = None
    discipline_emphasis: DisciplineEmphasis = DisciplineEmphasis.BALANCED
    risk_tolerance: RiskTolerance = RiskTolerance.MED
    max_intensity_days_per_week: int = 2
    max_doubles_per_week: int = 0
    long_session_day: int | None = None
    program_policy: ProgramPolicy | None = None
    policy_profile_id: str | None = None
    coach_guidance: str = ""
    sessions_per_week: int | None = None       # Explicit override of the risk-based count
    week_start: int = MONDAY                   # First weekday of a plan week
    request_context: RequestContext = field(default_factory=RequestContext)
    discipline_split_targets: tuple[tuple[Discipline, float], ...] = field(default_factory=tuple)
    session_type_distribution: tuple[tuple[WorkoutType, float], ...] = field(default_factory=tuple)

    @property
    def intensity_cap(self) -> int:
        return clamp_int(
            self.max_intensity_days_per_week,
            MIN_INTENSITY_DAYS_CAP,
            MAX_INTENSITY_DAYS_CAP,
        )

    @property
    def doubles_cap(self) -> int:
        return clamp_int(self.max_doubles_per_week, MIN_DOUBLES_CAP, MAX_DOUBLES_CAP)

    @property
    def allowed_days(self) -> frozenset[int]:
        return frozenset(self.allowed_weekdays)

    @property
    def is_event_anchored(self) -> bool:
        return self.completion_date is not None

    def target_minutes_for_week(self, week_index: int) -> int:
        """Planned weekly budget before taper/recovery adjustments.

        The explicit per-week sequence wins where it covers *week_index*;
        otherwise the scalar budget applies.
        """
        if 0 <= week_index < len(self.weekly_minutes_by_week):
            return max(0, int(self.weekly_minutes_by_week[week_index]))
        return max(0, int(self.weekly_minutes))
