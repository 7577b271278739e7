"""Duration reflow — fit a SessionDetail's block minutes to a new total.

Minutes move in 5-minute steps.  The main block absorbs changes first, then
warmup and cooldown within their guardrails (warmup 5-20, cooldown 5-15,
main >= 10), and other blocks only once those are exhausted.  Any
non-multiple-of-5 remainder lands in the main block, so block minutes always
sum exactly to the requested total.  Blocks that arrive untimed keep no
minutes; blocks whose minutes are cut to 0 are dropped.
"""

from __future__ import annotations

import dataclasses
import re

from plan_builder.exceptions import SessionDetailInvariantError
from plan_builder.math.durations import round_to_step
from plan_builder.models.enums import (
    COOLDOWN_DEFAULT_MINUTES,
    COOLDOWN_MAX_MINUTES,
    COOLDOWN_MIN_MINUTES,
    DURATION_STEP_MINUTES,
    MAIN_MIN_MINUTES,
    MAX_DETAIL_MINUTES,
    SHORT_SESSION_FIXED_MINUTES,
    SHORT_SESSION_MINUTES,
    WARMUP_DEFAULT_MINUTES,
    WARMUP_MAX_MINUTES,
    WARMUP_MIN_MINUTES,
    BlockType,
    PrimaryMetric,
)
from plan_builder.models.session_detail import Block, SessionDetail

_STEP = DURATION_STEP_MINUTES
_WORK_BLOCKS = frozenset({BlockType.MAIN, BlockType.DRILL, BlockType.STRENGTH})
_MINUTES_SUFFIX = re.compile(r"\s*\(\s*\d+\s*min(?:utes)?\s*\)", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Structure checks
# ---------------------------------------------------------------------------


def structure_issues(detail: SessionDetail) -> list[str]:
    """List every block-structure rule *detail* breaks (empty when valid)."""
    issues: list[str] = []
    types = [b.block_type for b in detail.blocks]

    if types.count(BlockType.WARMUP) > 1:
        issues.append("more than one warmup block")
    if types.count(BlockType.COOLDOWN) > 1:
        issues.append("more than one cooldown block")
    if BlockType.MAIN not in types and BlockType.STRENGTH not in types:
        issues.append("no main or strength block")

    work = [i for i, t in enumerate(types) if t in _WORK_BLOCKS]
    if work:
        if BlockType.WARMUP in types and types.index(BlockType.WARMUP) > work[0]:
            issues.append("warmup after the first work block")
        for i, t in enumerate(types):
            if t == BlockType.COOLDOWN and i < work[-1]:
                issues.append("work block after cooldown")
                break

    metric = detail.targets.primary_metric
    intensities = [b.intensity for b in detail.blocks if b.intensity is not None]
    if metric == PrimaryMetric.RPE and not any(i.rpe is not None for i in intensities):
        issues.append("primary metric RPE but no block carries an RPE")
    if metric == PrimaryMetric.ZONE and not any(i.zone is not None for i in intensities):
        issues.append("primary metric ZONE but no block carries a zone")
    return issues


def check_session_detail(detail: SessionDetail, total_minutes: int | None = None) -> None:
    """Assert *detail* is well-formed and, if given, sums to *total_minutes*.

    Raises:
        SessionDetailInvariantError: On any structure or duration-sum breach.
    """
    issues = structure_issues(detail)
    if total_minutes is not None:
        has_minutes = any(b.duration_minutes is not None for b in detail.blocks)
        block_total = detail.total_block_minutes
        if (has_minutes or total_minutes > 0) and block_total != total_minutes:
            issues.append(
                f"block minutes sum to {block_total}, expected {total_minutes}"
            )
    if issues:
        raise SessionDetailInvariantError(
            f"Invalid session detail {detail.objective!r}: {'; '.join(issues)}",
            issues=tuple(issues),
        )


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _clean_objective(objective: str) -> str:
    cleaned = " ".join(_MINUTES_SUFFIX.sub("", objective).split())
    return cleaned or "Session"


def _primary_index(blocks: list[Block]) -> int:
    """Main block, else strength block, else the first non warmup/cooldown block."""
    for wanted in (BlockType.MAIN, BlockType.STRENGTH):
        for i, block in enumerate(blocks):
            if block.block_type == wanted:
                return i
    for i, block in enumerate(blocks):
        if block.block_type not in (BlockType.WARMUP, BlockType.COOLDOWN):
            return i
    return 0


def _roles(blocks: list[Block]) -> tuple[int, int | None, int | None]:
    """(main, warmup, cooldown) indices; warmup is the first, cooldown the last."""
    main = _primary_index(blocks)
    warmup = next(
        (i for i, b in enumerate(blocks) if b.block_type == BlockType.WARMUP), None
    )
    cooldown = next(
        (
            i
            for i in range(len(blocks) - 1, -1, -1)
            if blocks[i].block_type == BlockType.COOLDOWN
        ),
        None,
    )
    if warmup == main:
        warmup = None
    if cooldown == main:
        cooldown = None
    return main, warmup, cooldown


def _rebuild(
    detail: SessionDetail,
    blocks: list[Block],
    minutes: dict[int, int | None],
    keep_main: int,
) -> SessionDetail:
    """Apply *minutes* to *blocks*.

    Blocks missing from *minutes* or cut to 0 are dropped; a ``None`` entry
    keeps the block untimed.  The main block is always kept.
    """
    new_blocks = []
    for i, block in enumerate(blocks):
        value = minutes.get(i)
        if i != keep_main and (i not in minutes or value == 0):
            continue
        new_blocks.append(dataclasses.replace(block, duration_minutes=value or None))
    return dataclasses.replace(
        detail,
        objective=_clean_objective(detail.objective),
        blocks=tuple(new_blocks),
    )


def _fit_short(
    total: int, main: int, warmup: int | None, cooldown: int | None
) -> dict[int, int | None]:
    """Fixed 5-minute warmup/cooldown, the rest to main; other blocks drop out."""
    fixed = SHORT_SESSION_FIXED_MINUTES
    keep_warmup = warmup is not None
    keep_cooldown = cooldown is not None
    if keep_cooldown and total - fixed * (keep_warmup + keep_cooldown) < _STEP:
        keep_cooldown = False
    if keep_warmup and total - fixed * (keep_warmup + keep_cooldown) < _STEP:
        keep_warmup = False

    minutes: dict[int, int | None] = {}
    if keep_warmup:
        minutes[warmup] = fixed
    if keep_cooldown:
        minutes[cooldown] = fixed
    minutes[main] = total - fixed * (keep_warmup + keep_cooldown)
    return minutes


def _fit_standard(
    total: int,
    blocks: list[Block],
    main: int,
    warmup: int | None,
    cooldown: int | None,
) -> dict[int, int | None]:
    """Round to 5-minute steps within guardrails, then fix up the total."""
    minutes: dict[int, int | None] = {}
    for i, block in enumerate(blocks):
        current = block.duration_minutes
        if current is None:
            if i not in (main, warmup, cooldown):
                minutes[i] = None
            continue
        if current <= 0:
            continue
        value = max(_STEP, round_to_step(current))
        if i == warmup:
            value = min(WARMUP_MAX_MINUTES, max(WARMUP_MIN_MINUTES, value))
        elif i == cooldown:
            value = min(COOLDOWN_MAX_MINUTES, max(COOLDOWN_MIN_MINUTES, value))
        elif i == main:
            value = max(MAIN_MIN_MINUTES, value)
        minutes[i] = value

    if warmup is not None and warmup not in minutes:
        minutes[warmup] = WARMUP_DEFAULT_MINUTES
    if cooldown is not None and cooldown not in minutes:
        minutes[cooldown] = COOLDOWN_DEFAULT_MINUTES
    if main not in minutes:
        minutes[main] = max(MAIN_MIN_MINUTES, total - 15)

    delta = total - sum(m for m in minutes.values() if m is not None)
    if delta < 0:
        others = [
            i
            for i, m in minutes.items()
            if m is not None and i not in (main, warmup, cooldown)
        ]
        removal_order: list[tuple[int | None, int]] = [
            (main, MAIN_MIN_MINUTES),
            (warmup, WARMUP_MIN_MINUTES),
            (cooldown, COOLDOWN_MIN_MINUTES),
            *((i, _STEP) for i in others),
            *((i, 0) for i in others),
            (warmup, 0),
            (cooldown, 0),
        ]
        for idx, floor in removal_order:
            if idx is None:
                continue
            while delta < 0 and minutes[idx] - _STEP >= floor:
                minutes[idx] -= _STEP
                delta += _STEP

    # Remainder (including any whole steps still owed) goes to main
    minutes[main] += delta
    return minutes


def normalize_durations_to_total(detail: SessionDetail, total_minutes: int) -> SessionDetail:
    """Rewrite block minutes so they sum exactly to *total_minutes*.

    Algorithm:
    1. Clamp the total to 0-10000 minutes
    2. Total 0: every block but the main block drops out, main has no minutes
    3. Total under 30: fixed 5-minute warmup/cooldown, remainder to main,
       other blocks drop out
    4. Otherwise round every block to 5 minutes within guardrails, fill
       missing warmup (10) / cooldown (5) / main, keep other untimed blocks
       untimed, then remove surplus from main, warmup, cooldown and other
       timed blocks in that order and give any shortfall or remainder to main
    5. Strip "(NN min)" suffixes from the objective

    Args:
        detail: The session detail to normalize.
        total_minutes: Requested total duration.

    Returns:
        A new SessionDetail; the input is not modified.
    """
    total = max(0, min(MAX_DETAIL_MINUTES, int(total_minutes)))
    blocks = list(detail.blocks)
    if not blocks:
        blocks = [Block(block_type=BlockType.MAIN, steps="Main set")]

    main, warmup, cooldown = _roles(blocks)
    if total == 0:
        minutes: dict[int, int | None] = {}
    elif total < SHORT_SESSION_MINUTES:
        minutes = _fit_short(total, main, warmup, cooldown)
    else:
        minutes = _fit_standard(total, blocks, main, warmup, cooldown)
    return _rebuild(detail, blocks, minutes, keep_main=main)


def reflow_to_new_total(detail: SessionDetail, new_total_minutes: int) -> SessionDetail:
    """Move *detail* onto a new total duration, then normalize.

    Added time goes to the main block.  Removed time comes from main (down
    to 10), warmup (down to 5), cooldown (down to 5), then other blocks.
    Re-applying the same total is a no-op.

    Args:
        detail: The session detail to reflow.
        new_total_minutes: Requested total duration.

    Returns:
        A new, normalized SessionDetail.
    """
    new_total = max(0, min(MAX_DETAIL_MINUTES, int(new_total_minutes)))
    delta = new_total - detail.total_block_minutes
    if delta == 0 or new_total < SHORT_SESSION_MINUTES or not detail.blocks:
        return normalize_durations_to_total(detail, new_total)

    blocks = list(detail.blocks)
    main, warmup, cooldown = _roles(blocks)
    minutes = [max(0, b.duration_minutes or 0) for b in blocks]
    untimed = {i for i, b in enumerate(blocks) if b.duration_minutes is None}

    if delta > 0:
        minutes[main] += delta
    else:
        owed = -delta
        floors = [
            (main, MAIN_MIN_MINUTES),
            (warmup, WARMUP_MIN_MINUTES),
            (cooldown, COOLDOWN_MIN_MINUTES),
            *((i, 0) for i in range(len(blocks)) if i not in (main, warmup, cooldown)),
        ]
        for idx, floor in floors:
            if idx is None or owed == 0:
                continue
            take = min(owed, max(0, minutes[idx] - floor))
            minutes[idx] -= take
            owed -= take

    adjusted = dataclasses.replace(
        detail,
        blocks=tuple(
            dataclasses.replace(
                b, duration_minutes=None if i in untimed and m == 0 else max(0, m)
            )
            for i, (b, m) in enumerate(zip(blocks, minutes))
        ),
    )
    return normalize_durations_to_total(adjusted, new_total)
