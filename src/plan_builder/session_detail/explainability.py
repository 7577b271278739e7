"""Explainability, cues and variants — the coach-facing text around a session."""

from __future__ import annotations

from plan_builder.models.enums import (
    FatigueState,
    VariantLabel,
    WorkoutType,
)
from plan_builder.models.session_detail import Explainability, Variant
from plan_builder.session_detail.templates import IntensityTemplate

_WHY_TODAY = (
    "It is placed to build adaptation now while protecting tomorrow's "
    "training quality and the week's recovery budget."
)
_UNLOCKS_NEXT = (
    "Completing this well supports progression into the next quality "
    "session and long-session durability."
)
_IF_MISSED = (
    "Skip catch-up intensity. Resume the plan at the next session and "
    "protect consistency for the week."
)
_IF_COOKED: dict[WorkoutType, str] = {
    WorkoutType.TEMPO: (
        "Drop one intensity level or shorten the work blocks, keeping form clean."
    ),
    WorkoutType.THRESHOLD: (
        "Drop one intensity level, reduce reps, or switch to steady aerobic work."
    ),
    WorkoutType.RECOVERY: "Swap for full rest or a short walk.",
}
_IF_COOKED_DEFAULT = "Shorten the session and keep the effort fully conversational."

_TYPE_CUES: dict[WorkoutType, str] = {
    WorkoutType.RECOVERY: "Keep it genuinely easy",
    WorkoutType.TECHNIQUE: "Quality over quantity on every rep",
    WorkoutType.ENDURANCE: "Smooth form, even effort",
    WorkoutType.STRENGTH: "Controlled tempo, full range",
    WorkoutType.TEMPO: "Settle into rhythm before pushing",
    WorkoutType.THRESHOLD: "Hard but repeatable, not all-out",
}
_FUELING_CUE = "Fuel and hydrate early for sessions over 60 min"
_PAIN_CUE = "Stop if you feel sharp pain"
FUELING_THRESHOLD_MINUTES = 60

SAFETY_NOTES = (
    "Avoid maximal efforts if you feel pain, dizziness, or unusual fatigue."
)


def build_explainability(
    template: IntensityTemplate, workout_type: WorkoutType
) -> Explainability:
    """All five explainability fields for a session of *workout_type*."""
    return Explainability(
        why_this=f"This session is designed to {template.stimulus}.",
        why_today=_WHY_TODAY,
        unlocks_next=_UNLOCKS_NEXT,
        if_missed=_IF_MISSED,
        if_cooked=_IF_COOKED.get(workout_type, _IF_COOKED_DEFAULT),
    )


def build_cues(workout_type: WorkoutType, duration_minutes: int) -> tuple[str, ...]:
    cues = [_TYPE_CUES[workout_type]]
    if duration_minutes > FUELING_THRESHOLD_MINUTES:
        cues.append(_FUELING_CUE)
    cues.append(_PAIN_CUE)
    return tuple(cues)


def build_variants(
    duration_minutes: int,
    equipment: str = "",
    environment_tags: tuple[str, ...] = (),
    fatigue: FatigueState | None = None,
) -> tuple[Variant, ...]:
    """Alternate-duration and context variants, one per label.

    Durations: short-on-time is 10 min shorter (20-45), longer-window adds
    15-25 min (up to 120 unless already longer).
    """
    standard = max(20, duration_minutes)
    variants = [
        Variant(
            label=VariantLabel.SHORT_ON_TIME,
            when_to_use="Use when the schedule is compressed but you still want the key stimulus.",
            duration_minutes=max(20, min(standard - 10, 45)),
            notes="Keep the warmup, shorten the main set, skip extras.",
        ),
        Variant(
            label=VariantLabel.STANDARD,
            when_to_use="Default execution for this week.",
            duration_minutes=standard,
        ),
        Variant(
            label=VariantLabel.LONGER_WINDOW,
            when_to_use="Use when you have extra time available.",
            duration_minutes=max(standard + 15, min(standard + 25, 120)),
            notes="Extend easy aerobic volume only, not the intensity.",
        ),
    ]

    equipment = equipment.strip().lower()
    if equipment == "trainer":
        variants.append(Variant(
            label=VariantLabel.TRAINER,
            when_to_use="Indoor setup or poor weather.",
            duration_minutes=standard,
            notes="Use controlled blocks and a fan; keep cadence steady.",
        ))
    elif equipment == "road":
        variants.append(Variant(
            label=VariantLabel.ROAD,
            when_to_use="Outdoor route with safe, uninterrupted sections.",
            duration_minutes=standard,
            notes="Choose a route that lets you hold the target effort.",
        ))

    tags = {t.strip().lower() for t in environment_tags}
    if "heat" in tags:
        variants.append(Variant(
            label=VariantLabel.HEAT_ADJUSTED,
            when_to_use="Hot or humid conditions.",
            duration_minutes=standard,
            notes="Lower the target effort slightly and prioritize hydration.",
        ))
    if "hills" in tags:
        variants.append(Variant(
            label=VariantLabel.HILLS_ADJUSTED,
            when_to_use="Hilly terrain.",
            duration_minutes=standard,
            notes="Ride or run by effort on climbs, not pace.",
        ))
    if fatigue in (FatigueState.FATIGUED, FatigueState.COOKED):
        variants.append(Variant(
            label=VariantLabel.FATIGUE_ADJUSTED,
            when_to_use="Use when fatigue is elevated.",
            duration_minutes=max(20, standard - 10),
            notes="Reduce reps or hold a steady aerobic effort instead.",
        ))

    seen: set[VariantLabel] = set()
    unique = []
    for variant in variants:
        if variant.label not in seen:
            seen.add(variant.label)
            unique.append(variant)
    return tuple(unique)
