"""Session templates — intensity targets and stimulus text per workout type.

The builder splits every session into warmup / main / cooldown shares and
uses these templates for the target zone, RPE and the stimulus sentence that
feeds the explainability notes.
"""

from __future__ import annotations

from dataclasses import dataclass

from plan_builder.models.enums import (
    Discipline,
    FatigueState,
    PrimaryMetric,
    WorkoutType,
    Zone,
)


@dataclass(frozen=True)
class IntensityTemplate:
    """Target zone and RPE for the main work of a workout type.

    Attributes:
        zone: Target zone for main-set blocks.
        rpe: Target RPE (1-10) for main-set blocks.
        primary_metric: How effort is primarily prescribed.
        stimulus: Completes "This session is designed to ...".
        label: Title-case label used in the objective sentence.
    """

    zone: Zone
    rpe: int
    primary_metric: PrimaryMetric
    stimulus: str
    label: str


INTENSITY_TEMPLATES: dict[WorkoutType, IntensityTemplate] = {
    WorkoutType.RECOVERY: IntensityTemplate(
        zone=Zone.Z1,
        rpe=2,
        primary_metric=PrimaryMetric.RPE,
        stimulus="promote recovery while keeping light movement",
        label="Recovery",
    ),
    WorkoutType.TECHNIQUE: IntensityTemplate(
        zone=Zone.Z2,
        rpe=4,
        primary_metric=PrimaryMetric.RPE,
        stimulus="improve efficiency and movement quality at low fatigue cost",
        label="Technique",
    ),
    WorkoutType.ENDURANCE: IntensityTemplate(
        zone=Zone.Z2,
        rpe=4,
        primary_metric=PrimaryMetric.ZONE,
        stimulus="build aerobic durability with controlled effort",
        label="Endurance",
    ),
    WorkoutType.STRENGTH: IntensityTemplate(
        zone=Zone.Z2,
        rpe=5,
        primary_metric=PrimaryMetric.RPE,
        stimulus="build resilient strength that supports endurance loading",
        label="Strength",
    ),
    WorkoutType.TEMPO: IntensityTemplate(
        zone=Zone.Z3,
        rpe=6,
        primary_metric=PrimaryMetric.ZONE,
        stimulus="raise sustainable race-relevant pace",
        label="Tempo",
    ),
    WorkoutType.THRESHOLD: IntensityTemplate(
        zone=Zone.Z4,
        rpe=7,
        primary_metric=PrimaryMetric.ZONE,
        stimulus="lift threshold power and pace with controlled hard efforts",
        label="Threshold",
    ),
}

# Warmup and cooldown blocks are always easy
EASY_ZONE = Zone.Z1
EASY_RPE = 2

DISCIPLINE_LABELS: dict[Discipline, str] = {
    Discipline.RUN: "run",
    Discipline.BIKE: "bike",
    Discipline.SWIM: "swim",
    Discipline.STRENGTH: "strength",
    Discipline.OTHER: "cross-training",
}

# (fatigue, planned type) -> downgraded type
FATIGUE_DOWNGRADES: dict[tuple[FatigueState, WorkoutType], WorkoutType] = {
    (FatigueState.COOKED, WorkoutType.THRESHOLD): WorkoutType.RECOVERY,
    (FatigueState.COOKED, WorkoutType.TEMPO): WorkoutType.RECOVERY,
    (FatigueState.FATIGUED, WorkoutType.THRESHOLD): WorkoutType.TEMPO,
}


def get_template(workout_type: WorkoutType) -> IntensityTemplate:
    """Look up the intensity template for a workout type.

    Raises:
        KeyError: If no template exists for the type.
    """
    return INTENSITY_TEMPLATES[workout_type]


def downgrade_for_fatigue(
    workout_type: WorkoutType, fatigue: FatigueState | None
) -> WorkoutType:
    """Apply a fatigue-aware downgrade, or return the type unchanged."""
    if fatigue is None:
        return workout_type
    return FATIGUE_DOWNGRADES.get((fatigue, workout_type), workout_type)
