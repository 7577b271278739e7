"""Duration math: rounding helpers and weekly minutes allocation.

Weekly minutes are shared across sessions proportionally to role weights,
respecting per-session floors and caps, then humanized to 5-minute steps
while keeping the weekly total on target.
"""

from __future__ import annotations

import math
from typing import Sequence

from plan_builder.models.enums import DURATION_STEP_MINUTES, MIN_SESSION_MINUTES


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def round_to_step(value: float, step: int = DURATION_STEP_MINUTES) -> int:
    """Round *value* to the nearest multiple of *step* (never negative)."""
    step = max(1, int(step))
    return max(0, round_half_up(value / step) * step)


def _water_fill(
    total: float,
    weights: Sequence[float],
    floors: Sequence[float],
    caps: Sequence[float],
) -> list[float]:
    """Proportional split of *total* with per-item floors and caps.

    Items whose proportional share breaks a cap (then a floor) are pinned and
    the rest is re-split among the free items until nothing moves.
    """
    n = len(weights)
    pinned: dict[int, float] = {}
    while True:
        free = [i for i in range(n) if i not in pinned]
        if not free:
            return [pinned[i] for i in range(n)]
        remaining = total - sum(pinned.values())
        weight_sum = sum(weights[i] for i in free) or 1.0
        shares = {i: remaining * weights[i] / weight_sum for i in free}

        over = [i for i in free if shares[i] > caps[i]]
        if over:
            for i in over:
                pinned[i] = caps[i]
            continue
        under = [i for i in free if shares[i] < floors[i]]
        if under:
            for i in under:
                pinned[i] = floors[i]
            continue

        pinned.update(shares)
        return [pinned[i] for i in range(n)]


def allocate_minutes(
    total: int,
    weights: Sequence[float],
    caps: Sequence[int],
    anchor: int | None = None,
    floor: int = MIN_SESSION_MINUTES,
    step: int = DURATION_STEP_MINUTES,
) -> list[int]:
    """Split a weekly minutes budget into humanized session durations.

    Algorithm:
    1. Snap caps down to the step (never below the floor); when an anchor
       (the long session) is given, no other cap may exceed the anchor's cap
    2. Water-fill the budget by weight within [floor, cap]
    3. Round each share to the step and clamp back into [floor, cap]
    4. Nudge sessions one step at a time until the total matches the budget
       rounded to the step (non-anchor sessions move first)
    5. Swap durations if any session ended longer than the anchor

    When the floors or caps make the budget unreachable the closest feasible
    total is returned.

    Args:
        total: Weekly minutes budget.
        weights: Relative share per session.
        caps: Maximum minutes per session.
        anchor: Index of the session that must be the longest, if any.
        floor: Minimum minutes per session.
        step: Rounding increment in minutes.

    Returns:
        Durations in minutes, one per weight, each a multiple of *step*.
    """
    n = len(weights)
    if n == 0:
        return []
    if len(caps) != n:
        raise ValueError(f"Expected {n} caps, got {len(caps)}")

    floor = round_to_step(floor, step) or step
    snapped = [max(floor, (int(c) // step) * step) for c in caps]
    if anchor is not None:
        snapped = [
            c if i == anchor else min(c, snapped[anchor])
            for i, c in enumerate(snapped)
        ]

    shares = _water_fill(float(max(0, total)), weights, [floor] * n, snapped)
    values = [
        min(snapped[i], max(floor, round_to_step(shares[i], step)))
        for i in range(n)
    ]

    def _is_anchor(i: int) -> int:
        return 1 if i == anchor else 0

    diff = round_to_step(total, step) - sum(values)
    while diff >= step:
        growable = [i for i in range(n) if values[i] + step <= snapped[i]]
        if not growable:
            break
        i = min(growable, key=lambda j: (_is_anchor(j), values[j], j))
        values[i] += step
        diff -= step
    while diff <= -step:
        shrinkable = [i for i in range(n) if values[i] - step >= floor]
        if not shrinkable:
            break
        i = min(shrinkable, key=lambda j: (_is_anchor(j), -values[j], j))
        values[i] -= step
        diff += step

    if anchor is not None and n > 1:
        longest = max(
            (i for i in range(n) if i != anchor), key=lambda j: (values[j], -j)
        )
        if values[longest] > values[anchor]:
            values[longest], values[anchor] = values[anchor], values[longest]

    return values
