"""Draft plan models — weeks of scheduled sessions."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator

from plan_builder.models.enums import INTENSITY_TYPES, Discipline, WorkoutType
from plan_builder.models.session_detail import SessionDetail


@dataclass(frozen=True)
class Session:
    """A single scheduled session within a plan week.

    ``ordinal`` orders sessions sharing a weekday (0 = first session of the day).
    """

    session_id: str
    week_index: int
    weekday: int
    ordinal: int
    discipline: Discipline
    workout_type: WorkoutType
    duration_minutes: int
    notes: str = ""
    locked: bool = False
    detail: SessionDetail | None = None

    @property
    def is_intensity(self) -> bool:
        return self.workout_type in INTENSITY_TYPES


@dataclass(frozen=True)
class Week:
    """One plan week holding its sessions in calendar order."""

    week_index: int
    sessions: tuple[Session, ...] = field(default_factory=tuple)
    locked: bool = False

    @property
    def total_minutes(self) -> int:
        return sum(s.duration_minutes for s in self.sessions)

    @property
    def doubled_weekdays(self) -> frozenset[int]:
        """Weekdays carrying more than one session."""
        counts = Counter(s.weekday for s in self.sessions)
        return frozenset(day for day, n in counts.items() if n > 1)

    @property
    def intensity_weekdays(self) -> frozenset[int]:
        """Distinct weekdays carrying a tempo or threshold session."""
        return frozenset(s.weekday for s in self.sessions if s.is_intensity)


@dataclass(frozen=True)
class DraftPlan:
    """Ordered sequence of plan weeks produced by the generator."""

    weeks: tuple[Week, ...] = field(default_factory=tuple)

    def iter_sessions(self) -> Iterator[Session]:
        for week in self.weeks:
            yield from week.sessions

    @property
    def total_sessions(self) -> int:
        return sum(len(w.sessions) for w in self.weeks)
