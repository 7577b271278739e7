"""Policy rule tables — beginner detection, taper windows, rotations.

Policy-driven branching lives here as lookup tables keyed by risk tolerance,
program policy, emphasis and week index so new policies are additive.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Iterable, TypeVar

from plan_builder.math.durations import round_half_up
from plan_builder.models.enums import (
    BEGINNER_RUN_CAP_MINUTES,
    BEGINNER_RUN_CAP_STEP_MINUTES,
    BEGINNER_SAFETY_WEEKS,
    MIN_KEY_SESSIONS_PER_WEEK,
    Discipline,
    DisciplineEmphasis,
    ProgramPolicy,
    RiskTolerance,
    TrainingPhase,
    WorkoutType,
    wire_name,
)
from plan_builder.models.setup import PlanSetup

K = TypeVar("K", bound=IntEnum)


class SessionRole(IntEnum):
    """Role a session plays inside its week."""

    LONG = auto()
    BRICK = auto()
    INTENSITY = auto()
    EASY = auto()
    RECOVERY = auto()
    DOUBLE = auto()


# ---------------------------------------------------------------------------
# Text signals
# ---------------------------------------------------------------------------

BEGINNER_PATTERN = re.compile(r"\b(beginner|novice|couch)\b", re.IGNORECASE)
INJURY_PATTERN = re.compile(r"\b(injur\w*|pain\w*|niggle\w*|sore\w*)\b", re.IGNORECASE)
TAPER_PATTERN = re.compile(r"\btaper\w*\b", re.IGNORECASE)
BRICK_PATTERN = re.compile(r"\bbrick\b", re.IGNORECASE)
LONG_OR_BRICK_PATTERN = re.compile(r"\b(long (run|ride|swim)|brick)\b", re.IGNORECASE)
KEY_NOTES_PATTERN = re.compile(
    r"\b(long (run|ride|swim)|brick|key session)\b", re.IGNORECASE
)

BEGINNER_PROGRAMS = frozenset({
    ProgramPolicy.COUCH_TO_5K,
    ProgramPolicy.COUCH_TO_IRONMAN_26,
})


def is_beginner(setup: PlanSetup) -> bool:
    """Beginner-safety detection shared by the generator and validator.

    True when risk tolerance is low, a couch-to-X program is selected, or the
    guidance / experience text signals a beginner, novice or couch athlete.
    """
    if setup.risk_tolerance == RiskTolerance.LOW:
        return True
    if setup.program_policy in BEGINNER_PROGRAMS:
        return True
    text = f"{setup.coach_guidance} {setup.request_context.experience_level}"
    return bool(BEGINNER_PATTERN.search(text))


def has_injury_signal(setup: PlanSetup) -> bool:
    """Injury/pain mentioned in the guidance or request context."""
    ctx = setup.request_context
    if ctx.injury_notes.strip():
        return True
    return bool(INJURY_PATTERN.search(setup.coach_guidance))


def wants_taper(setup: PlanSetup) -> bool:
    """Plan should end with a taper: event-anchored or guidance asks for one."""
    return setup.is_event_anchored or bool(TAPER_PATTERN.search(setup.coach_guidance))


def in_beginner_window(week_index: int) -> bool:
    return week_index < BEGINNER_SAFETY_WEEKS


def beginner_run_cap(week_index: int) -> int:
    """Run duration cap for beginners, growing gently after the safety window."""
    if in_beginner_window(week_index):
        return BEGINNER_RUN_CAP_MINUTES
    extra_weeks = week_index - BEGINNER_SAFETY_WEEKS + 1
    return BEGINNER_RUN_CAP_MINUTES + BEGINNER_RUN_CAP_STEP_MINUTES * extra_weeks


# ---------------------------------------------------------------------------
# Volume and counts
# ---------------------------------------------------------------------------

# (second-to-last week, last week) multipliers of the weekly budget
TAPER_MULTIPLIERS: dict[RiskTolerance, tuple[float, float]] = {
    RiskTolerance.LOW: (0.85, 0.75),
    RiskTolerance.MED: (0.80, 0.70),
    RiskTolerance.HIGH: (0.75, 0.60),
}

SESSIONS_PER_WEEK: dict[RiskTolerance, int] = {
    RiskTolerance.LOW: 5,
    RiskTolerance.MED: 6,
    RiskTolerance.HIGH: 8,
}

# Inclusive (min, max) key sessions per week
KEY_SESSION_BANDS: dict[RiskTolerance, tuple[int, int]] = {
    RiskTolerance.LOW: (MIN_KEY_SESSIONS_PER_WEEK, 3),
    RiskTolerance.MED: (MIN_KEY_SESSIONS_PER_WEEK, 3),
    RiskTolerance.HIGH: (MIN_KEY_SESSIONS_PER_WEEK, 4),
}

# Relative share of the weekly minutes by session role
ROLE_WEIGHTS: dict[SessionRole, float] = {
    SessionRole.LONG: 2.2,
    SessionRole.BRICK: 2.0,
    SessionRole.INTENSITY: 1.0,
    SessionRole.EASY: 1.0,
    SessionRole.RECOVERY: 0.7,
    SessionRole.DOUBLE: 0.6,
}

DISCIPLINE_MAX_MINUTES: dict[Discipline, int] = {
    Discipline.RUN: 180,
    Discipline.BIKE: 240,
    Discipline.SWIM: 90,
    Discipline.STRENGTH: 60,
    Discipline.OTHER: 90,
}

# Polarized distribution: base work stays sub-threshold, build sharpens
# (Seiler 2010).
INTENSITY_TYPE_BY_PHASE: dict[tuple[RiskTolerance, TrainingPhase], WorkoutType] = {
    (RiskTolerance.LOW, TrainingPhase.BASE): WorkoutType.TEMPO,
    (RiskTolerance.LOW, TrainingPhase.BUILD): WorkoutType.TEMPO,
    (RiskTolerance.LOW, TrainingPhase.TAPER): WorkoutType.TEMPO,
    (RiskTolerance.MED, TrainingPhase.BASE): WorkoutType.TEMPO,
    (RiskTolerance.MED, TrainingPhase.BUILD): WorkoutType.THRESHOLD,
    (RiskTolerance.MED, TrainingPhase.TAPER): WorkoutType.TEMPO,
    (RiskTolerance.HIGH, TrainingPhase.BASE): WorkoutType.TEMPO,
    (RiskTolerance.HIGH, TrainingPhase.BUILD): WorkoutType.THRESHOLD,
    (RiskTolerance.HIGH, TrainingPhase.TAPER): WorkoutType.THRESHOLD,
}


# ---------------------------------------------------------------------------
# Discipline rotations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmphasisRotation:
    """Discipline rotation for each session role under one emphasis.

    ``long`` alternates by week index; the other tuples cycle per slot.
    """

    long: tuple[Discipline, ...]
    intensity: tuple[Discipline, ...]
    easy: tuple[Discipline, ...]
    doubles: tuple[Discipline, ...]
    multisport: bool


ROTATIONS: dict[DisciplineEmphasis, EmphasisRotation] = {
    DisciplineEmphasis.BALANCED: EmphasisRotation(
        long=(Discipline.BIKE, Discipline.RUN),
        intensity=(Discipline.BIKE, Discipline.RUN),
        easy=(Discipline.SWIM, Discipline.RUN, Discipline.BIKE, Discipline.SWIM),
        doubles=(Discipline.SWIM, Discipline.STRENGTH),
        multisport=True,
    ),
    DisciplineEmphasis.SWIM: EmphasisRotation(
        long=(Discipline.SWIM,),
        intensity=(Discipline.SWIM, Discipline.BIKE),
        easy=(Discipline.SWIM, Discipline.BIKE, Discipline.RUN),
        doubles=(Discipline.SWIM, Discipline.STRENGTH),
        multisport=False,
    ),
    DisciplineEmphasis.BIKE: EmphasisRotation(
        long=(Discipline.BIKE,),
        intensity=(Discipline.BIKE, Discipline.RUN),
        easy=(Discipline.BIKE, Discipline.RUN, Discipline.BIKE),
        doubles=(Discipline.RUN, Discipline.STRENGTH),
        multisport=True,
    ),
    DisciplineEmphasis.RUN: EmphasisRotation(
        long=(Discipline.RUN,),
        intensity=(Discipline.RUN,),
        easy=(Discipline.RUN, Discipline.RUN, Discipline.STRENGTH),
        doubles=(Discipline.STRENGTH, Discipline.RUN),
        multisport=False,
    ),
}

# Base workout type for easy-role sessions by discipline
EASY_TYPE_BY_DISCIPLINE: dict[Discipline, WorkoutType] = {
    Discipline.RUN: WorkoutType.ENDURANCE,
    Discipline.BIKE: WorkoutType.ENDURANCE,
    Discipline.SWIM: WorkoutType.TECHNIQUE,
    Discipline.STRENGTH: WorkoutType.STRENGTH,
    Discipline.OTHER: WorkoutType.ENDURANCE,
}

LONG_NOTES: dict[Discipline, str] = {
    Discipline.RUN: "Long run",
    Discipline.BIKE: "Long ride",
    Discipline.SWIM: "Long swim",
}

BRICK_NOTES = "Brick: long ride with a short run off the bike"
KEY_SESSION_NOTES = "Key session"
RECOVERY_NOTES = "Easy day after the long session"


def is_brick_week(setup: PlanSetup, week_index: int, beginner: bool) -> bool:
    """Odd weeks host a brick for multisport plans at med/high risk."""
    if not ROTATIONS[setup.discipline_emphasis].multisport:
        return False
    if setup.risk_tolerance == RiskTolerance.LOW:
        return False
    if beginner and in_beginner_window(week_index):
        return False
    return week_index % 2 == 1


# ---------------------------------------------------------------------------
# Coach-weighted distributions
# ---------------------------------------------------------------------------

# Workout types a session type distribution may weight, by slot kind
DISTRIBUTION_INTENSITY_TYPES = (WorkoutType.TEMPO, WorkoutType.THRESHOLD)
DISTRIBUTION_EASY_TYPES = (
    WorkoutType.TECHNIQUE,
    WorkoutType.ENDURANCE,
    WorkoutType.RECOVERY,
)
TYPE_QUEUE_LENGTH = 6


def normalize_weights(weights: Iterable[tuple[K, float]]) -> list[tuple[K, float]]:
    """Positive weights scaled to sum to 1, in first-seen key order.

    Repeated keys are summed; zero, negative and missing weights are ignored.
    Returns an empty list when no weight is positive.
    """
    merged: dict[K, float] = {}
    for key, weight in weights:
        if weight is None or not weight > 0:
            continue
        merged[key] = merged.get(key, 0.0) + float(weight)
    total = sum(merged.values())
    if total <= 0:
        return []
    return [(key, weight / total) for key, weight in merged.items()]


def build_weighted_sequence(
    weights: Iterable[tuple[K, float]], length: int
) -> tuple[K, ...]:
    """Interleaved sequence of *length* keys in proportion to *weights*.

    Algorithm:
    1. Give every key round(weight * length) slots
    2. Top up, or trim, the largest count (ties by wire name) until the
       counts sum to *length*
    3. Emit keys round-robin, largest count first, so heavy keys are spread
       rather than bunched
    """
    counts = {key: max(0, round_half_up(weight * length)) for key, weight in weights}
    if not counts or length <= 0:
        return ()

    def _largest_first() -> list[K]:
        return sorted(counts, key=lambda k: (-counts[k], wire_name(k)))

    while sum(counts.values()) < length:
        counts[_largest_first()[0]] += 1
    while sum(counts.values()) > length:
        counts[_largest_first()[0]] -= 1

    order = [k for k in _largest_first() if counts[k] > 0]
    remaining = dict(counts)
    sequence: list[K] = []
    while len(sequence) < length:
        for key in order:
            if remaining[key] > 0 and len(sequence) < length:
                sequence.append(key)
                remaining[key] -= 1
    return tuple(sequence)


@dataclass(frozen=True)
class TypeQueues:
    """Weighted workout-type queues for intensity and easy slots.

    An empty queue means the default type choice applies.
    """

    intensity: tuple[WorkoutType, ...] = ()
    easy: tuple[WorkoutType, ...] = ()


def discipline_sequence(setup: PlanSetup, length: int) -> tuple[Discipline, ...]:
    """Disciplines for *length* slots following the coach split targets."""
    return build_weighted_sequence(
        normalize_weights(setup.discipline_split_targets), length,
    )


def session_type_queues(setup: PlanSetup) -> TypeQueues:
    """Intensity and easy type queues from the coach type distribution.

    Weights are normalized over every type first, so a small tempo share
    stays small next to a large endurance share.
    """
    weights = normalize_weights(setup.session_type_distribution)
    return TypeQueues(
        intensity=build_weighted_sequence(
            [(t, w) for t, w in weights if t in DISTRIBUTION_INTENSITY_TYPES],
            TYPE_QUEUE_LENGTH,
        ),
        easy=build_weighted_sequence(
            [(t, w) for t, w in weights if t in DISTRIBUTION_EASY_TYPES],
            TYPE_QUEUE_LENGTH,
        ),
    )
