"""Structured session detail — blocks, targets, explainability and variants."""

from __future__ import annotations

from dataclasses import dataclass, field

from plan_builder.models.enums import BlockType, PrimaryMetric, VariantLabel, Zone


@dataclass(frozen=True)
class BlockIntensity:
    """Effort target for a block: RPE (1-10) and/or a zone."""

    rpe: int | None = None
    zone: Zone | None = None
    notes: str = ""


@dataclass(frozen=True)
class Block:
    """One structural block of a session (warmup, main set, drills...)."""

    block_type: BlockType
    steps: str
    duration_minutes: int | None = None
    intensity: BlockIntensity | None = None


@dataclass(frozen=True)
class SessionTargets:
    primary_metric: PrimaryMetric = PrimaryMetric.RPE
    notes: str = ""


@dataclass(frozen=True)
class Explainability:
    """Coach-facing reasoning attached to every generated session."""

    why_this: str = ""
    why_today: str = ""
    unlocks_next: str = ""
    if_missed: str = ""
    if_cooked: str = ""

    @property
    def is_complete(self) -> bool:
        """True when all five fields carry non-blank text."""
        return all(
            text.strip()
            for text in (
                self.why_this,
                self.why_today,
                self.unlocks_next,
                self.if_missed,
                self.if_cooked,
            )
        )


@dataclass(frozen=True)
class Variant:
    """Alternate rendition of a session (shorter, longer, trainer...)."""

    label: VariantLabel
    when_to_use: str
    duration_minutes: int
    notes: str = ""


@dataclass(frozen=True)
class SessionDetail:
    """Complete structured description of a single session.

    Built by the SessionDetailBuilder.  Block durations, when present, sum to
    the owning session's duration.
    """

    objective: str
    blocks: tuple[Block, ...]
    targets: SessionTargets = field(default_factory=SessionTargets)
    explainability: Explainability | None = None
    variants: tuple[Variant, ...] = field(default_factory=tuple)
    cues: tuple[str, ...] = field(default_factory=tuple)
    safety_notes: str = ""

    @property
    def total_block_minutes(self) -> int:
        return sum(b.duration_minutes or 0 for b in self.blocks)
