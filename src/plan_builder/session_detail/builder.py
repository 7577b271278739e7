"""SessionDetailBuilder — turns a scheduled session into a structured workout.

Splits the session's duration into warmup / main / cooldown blocks using the
intensity templates, step-text tables and explainability helpers, then
normalizes block minutes to whole 5-minute steps that sum to the duration.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from plan_builder.math.durations import round_half_up
from plan_builder.models.enums import (
    COOLDOWN_SHARE,
    DRILL_MIN_MINUTES,
    DRILL_SHARE_OF_MAIN,
    MIN_SESSION_MINUTES,
    WARMUP_SHARE,
    BlockType,
    Discipline,
    FatigueState,
    PrimaryMetric,
    WorkoutType,
)
from plan_builder.models.session_detail import (
    Block,
    BlockIntensity,
    SessionDetail,
    SessionTargets,
)
from plan_builder.session_detail.explainability import (
    SAFETY_NOTES,
    build_cues,
    build_explainability,
    build_variants,
)
from plan_builder.session_detail.reflow import (
    check_session_detail,
    normalize_durations_to_total,
)
from plan_builder.session_detail.step_text import get_step_text
from plan_builder.session_detail.templates import (
    DISCIPLINE_LABELS,
    EASY_RPE,
    EASY_ZONE,
    downgrade_for_fatigue,
    get_template,
)


@dataclass(frozen=True)
class SessionContext:
    """Where a session sits in the plan and what the athlete has to hand."""

    week_index: int = 0
    weekday: int = 0
    ordinal: int = 0
    fatigue: FatigueState | None = None
    equipment: str = ""
    environment_tags: tuple[str, ...] = field(default_factory=tuple)
    available_time_minutes: int | None = None


def variation_seed(context: SessionContext, duration_minutes: int) -> int:
    """Seed for phrasing variety, derived from plan position and duration."""
    return (
        (context.week_index + 1) * 31
        + (context.weekday + 1) * 17
        + (context.ordinal + 1) * 11
        + duration_minutes
    )


def split_duration(total_minutes: int) -> tuple[int, int, int]:
    """Split a duration ~15% warmup / ~75% main / ~10% cooldown."""
    if total_minutes <= 0:
        return 0, 0, 0
    warmup = round_half_up(total_minutes * WARMUP_SHARE)
    cooldown = round_half_up(total_minutes * COOLDOWN_SHARE)
    main = max(0, total_minutes - warmup - cooldown)
    return warmup, main, cooldown


class SessionDetailBuilder:
    """Builds SessionDetail records for scheduled sessions.

    Usage::

        builder = SessionDetailBuilder()
        detail = builder.build(Discipline.RUN, WorkoutType.TEMPO, 50)
    """

    def build(
        self,
        discipline: Discipline,
        workout_type: WorkoutType,
        duration_minutes: int,
        context: SessionContext | None = None,
    ) -> SessionDetail:
        """Build a structured session detail.

        Algorithm:
        1. Cap the duration at the available time, if any, but never below
           20 minutes
        2. Downgrade the workout type for fatigue (cooked: tempo/threshold ->
           recovery; fatigued: threshold -> tempo)
        3. Split the duration ~15/75/10 into warmup / main / cooldown
        4. Swim technique sessions with >= 20 min of main set get a drill
           block; strength sessions use a strength block as the main work
        5. Attach intensity targets, step text, explainability, cues, variants
        6. Normalize block minutes so they sum exactly to the duration
        7. Check the block-structure invariants

        Args:
            discipline: Session discipline.
            workout_type: Planned workout type.
            duration_minutes: Target session duration.
            context: Plan position, fatigue and equipment context.

        Returns:
            A frozen SessionDetail.

        Raises:
            SessionDetailInvariantError: If the built detail breaks its
                structure or duration-sum invariants.
        """
        ctx = context or SessionContext()
        duration = max(0, int(duration_minutes))
        if ctx.available_time_minutes is not None and ctx.available_time_minutes > 0:
            duration = max(MIN_SESSION_MINUTES, min(duration, ctx.available_time_minutes))

        effective_type = downgrade_for_fatigue(workout_type, ctx.fatigue)
        template = get_template(effective_type)
        seed = variation_seed(ctx, duration)
        warmup_min, main_min, cooldown_min = split_duration(duration)

        easy = BlockIntensity(rpe=EASY_RPE, zone=EASY_ZONE)
        work = BlockIntensity(rpe=template.rpe, zone=template.zone)

        blocks: list[Block] = [
            Block(
                block_type=BlockType.WARMUP,
                steps=get_step_text(discipline, BlockType.WARMUP, effective_type, seed),
                duration_minutes=warmup_min,
                intensity=easy,
            )
        ]
        blocks.extend(self._build_work_blocks(
            discipline, effective_type, main_min, work, seed,
        ))
        blocks.append(Block(
            block_type=BlockType.COOLDOWN,
            steps=get_step_text(discipline, BlockType.COOLDOWN, effective_type, seed),
            duration_minutes=cooldown_min,
            intensity=easy,
        ))

        detail = SessionDetail(
            objective=f"{template.label} {DISCIPLINE_LABELS[discipline]} session",
            blocks=tuple(blocks),
            targets=SessionTargets(
                primary_metric=template.primary_metric,
                notes=self._target_notes(template.primary_metric, work),
            ),
            explainability=build_explainability(template, effective_type),
            variants=build_variants(
                duration,
                equipment=ctx.equipment,
                environment_tags=ctx.environment_tags,
                fatigue=ctx.fatigue,
            ),
            cues=build_cues(effective_type, duration),
            safety_notes=SAFETY_NOTES,
        )
        detail = normalize_durations_to_total(detail, duration)
        check_session_detail(detail, duration)
        return detail

    def _build_work_blocks(
        self,
        discipline: Discipline,
        workout_type: WorkoutType,
        main_min: int,
        intensity: BlockIntensity,
        seed: int,
    ) -> list[Block]:
        """Main work: optional swim drill block plus a main or strength block."""
        if discipline == Discipline.STRENGTH:
            return [Block(
                block_type=BlockType.STRENGTH,
                steps=get_step_text(discipline, BlockType.STRENGTH, workout_type, seed),
                duration_minutes=main_min,
                intensity=intensity,
            )]

        blocks: list[Block] = []
        if (
            discipline == Discipline.SWIM
            and workout_type == WorkoutType.TECHNIQUE
            and main_min >= 20
        ):
            drill_min = min(
                max(DRILL_MIN_MINUTES, round_half_up(main_min * DRILL_SHARE_OF_MAIN)),
                max(DRILL_MIN_MINUTES, main_min - 10),
            )
            blocks.append(Block(
                block_type=BlockType.DRILL,
                steps=get_step_text(discipline, BlockType.DRILL, workout_type, seed),
                duration_minutes=drill_min,
                intensity=BlockIntensity(rpe=intensity.rpe, notes="Technique focus"),
            ))
            main_min -= drill_min

        blocks.append(Block(
            block_type=BlockType.MAIN,
            steps=get_step_text(discipline, BlockType.MAIN, workout_type, seed),
            duration_minutes=main_min,
            intensity=intensity,
        ))
        return blocks

    @staticmethod
    def _target_notes(metric: PrimaryMetric, intensity: BlockIntensity) -> str:
        if metric == PrimaryMetric.ZONE and intensity.zone is not None:
            return f"Hold {intensity.zone.name} for the main work."
        return f"Keep the main work around RPE {intensity.rpe}/10."
