"""Step text — per-block instructions keyed by (Discipline, BlockType, WorkoutType).

Each key maps to a few equivalent phrasings; the builder picks one with a
seed derived from the session's position so wording varies across a plan
while staying deterministic.  A None discipline or workout type means
"default for any".
"""

from __future__ import annotations

from typing import Sequence

from plan_builder.models.enums import BlockType, Discipline, WorkoutType

# ---------------------------------------------------------------------------
# Step text lookup: (Discipline | None, BlockType, WorkoutType | None) -> phrasings
# ---------------------------------------------------------------------------

_STEPS: dict[tuple[Discipline | None, BlockType, WorkoutType | None], tuple[str, ...]] = {
    # --- Generic ---
    (None, BlockType.WARMUP, None): (
        "Easy build, gradually raise effort and loosen up.",
        "Start very easy and let the effort rise over the block.",
    ),
    (None, BlockType.MAIN, None): (
        "Steady aerobic work. Stay relaxed and controlled.",
        "Comfortable continuous effort, even pacing throughout.",
    ),
    (None, BlockType.COOLDOWN, None): (
        "Easy spin down, let breathing settle.",
        "Gentle easy effort to finish, then stretch lightly.",
    ),
    (None, BlockType.DRILL, None): (
        "Technique drills with full recovery between reps.",
    ),
    (None, BlockType.STRENGTH, None): (
        "Circuit: squats, lunges, glute bridges, planks. 2-3 rounds, controlled tempo.",
        "Single-leg strength and core: step-ups, split squats, side planks. 2-3 rounds.",
    ),

    # --- RUN ---
    (Discipline.RUN, BlockType.WARMUP, None): (
        "Easy jog building to steady, then 4 x 20s relaxed strides.",
        "10 min easy jog with leg swings and a few drills before the main set.",
    ),
    (Discipline.RUN, BlockType.MAIN, WorkoutType.RECOVERY): (
        "Very easy jog or run-walk. Conversational, short stride.",
    ),
    (Discipline.RUN, BlockType.MAIN, WorkoutType.ENDURANCE): (
        "Steady aerobic run. Conversational pace, relaxed cadence.",
        "Continuous easy run, nasal breathing where possible.",
    ),
    (Discipline.RUN, BlockType.MAIN, WorkoutType.TEMPO): (
        "Tempo blocks: 2-3 x 8-12 min comfortably hard with 2-3 min easy jog.",
        "Continuous tempo at controlled, comfortably hard effort.",
    ),
    (Discipline.RUN, BlockType.MAIN, WorkoutType.THRESHOLD): (
        "Threshold reps: 4-6 x 5 min hard but sustainable, 2 min easy jog between.",
        "Cruise intervals: 3-4 x 8 min at threshold, 2 min jog recovery.",
    ),
    (Discipline.RUN, BlockType.COOLDOWN, None): (
        "Easy jog to walk, then light calf and hip mobility.",
    ),

    # --- BIKE ---
    (Discipline.BIKE, BlockType.WARMUP, None): (
        "Easy spin building cadence, include 3 x 30s high-cadence efforts.",
        "Progressive spin from very easy to steady over the block.",
    ),
    (Discipline.BIKE, BlockType.MAIN, WorkoutType.RECOVERY): (
        "Very easy spin, light gear, high cadence.",
    ),
    (Discipline.BIKE, BlockType.MAIN, WorkoutType.ENDURANCE): (
        "Steady endurance riding, smooth pedalling, fuel every 20-30 min.",
        "Aerobic ride at conversational effort, hold a steady cadence.",
    ),
    (Discipline.BIKE, BlockType.MAIN, WorkoutType.TEMPO): (
        "Tempo: 3 x 10-15 min strong and steady, 3-5 min easy between.",
        "Sweet-spot blocks: 2 x 15-20 min controlled and strong.",
    ),
    (Discipline.BIKE, BlockType.MAIN, WorkoutType.THRESHOLD): (
        "Threshold intervals: 4-5 x 6-8 min hard, 3 min easy spin between.",
        "Over-unders: 3 x 9 min alternating just below and just above threshold.",
    ),
    (Discipline.BIKE, BlockType.COOLDOWN, None): (
        "Easy spin down, light gear.",
    ),

    # --- SWIM ---
    (Discipline.SWIM, BlockType.WARMUP, None): (
        "Easy mixed strokes with a few build lengths.",
        "Relaxed freestyle with bilateral breathing, build the last lengths.",
    ),
    (Discipline.SWIM, BlockType.DRILL, None): (
        "Drills: catch-up, fingertip drag, side kick. Focus on long, smooth strokes.",
        "Drill set: single-arm, sculling, 6-kick switch with easy recovery lengths.",
    ),
    (Discipline.SWIM, BlockType.MAIN, WorkoutType.RECOVERY): (
        "Easy continuous swim, long and relaxed strokes.",
    ),
    (Discipline.SWIM, BlockType.MAIN, WorkoutType.TECHNIQUE): (
        "Aerobic repeats with a technique focus: 6-10 x 100 easy-steady, 15-20s rest.",
        "Pull-buoy and paddles set at steady effort, hold stroke length.",
    ),
    (Discipline.SWIM, BlockType.MAIN, WorkoutType.ENDURANCE): (
        "Continuous aerobic swim, steady sighting every 6-8 strokes.",
        "Long steady repeats: 3-4 x 400 aerobic, 30s rest.",
    ),
    (Discipline.SWIM, BlockType.MAIN, WorkoutType.TEMPO): (
        "Steady-strong repeats: 5-8 x 200 at controlled effort, 20s rest.",
    ),
    (Discipline.SWIM, BlockType.MAIN, WorkoutType.THRESHOLD): (
        "Threshold repeats: 8-12 x 100 hard but repeatable, 15s rest.",
    ),
    (Discipline.SWIM, BlockType.COOLDOWN, None): (
        "Easy backstroke or choice, long relaxed strokes.",
    ),

    # --- STRENGTH ---
    (Discipline.STRENGTH, BlockType.WARMUP, None): (
        "Mobility flow: hips, ankles, thoracic spine. Light activation work.",
    ),
    (Discipline.STRENGTH, BlockType.COOLDOWN, None): (
        "Easy mobility and light stretching.",
    ),
}


def pick(items: Sequence[str], seed: int) -> str:
    """Deterministically pick one item using *seed*."""
    if not items:
        return ""
    return items[seed % len(items)]


def get_step_text(
    discipline: Discipline,
    block_type: BlockType,
    workout_type: WorkoutType | None,
    seed: int = 0,
) -> str:
    """Look up step text for a block.

    Tries (discipline, block, type), then (discipline, block, None), then
    (None, block, type), then the generic (None, block, None).
    """
    for key in (
        (discipline, block_type, workout_type),
        (discipline, block_type, None),
        (None, block_type, workout_type),
        (None, block_type, None),
    ):
        phrasings = _STEPS.get(key)
        if phrasings:
            return pick(phrasings, seed)
    return ""
