"""Threshold bundles, policy-level floors and the ratchet rule.

Every scenario carries its own thresholds; the policy level of its setup
adds a floor bundle.  The effective thresholds take the stricter value of
the two field by field: the larger ``min_*`` and the smaller ``max_*``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from plan_builder.models.setup import PlanSetup
from plan_builder.policies.profiles import resolve_policy_profile


@dataclass(frozen=True)
class ScenarioThresholds:
    """Numeric pass/fail bounds for one evaluated plan."""

    min_score: int = 100
    max_hard_violations: int = 0
    max_soft_warnings: int = 0
    min_weekly_minutes_in_band_rate: float = 1.0
    min_key_session_band_pass_rate: float = 1.0
    min_non_consecutive_intensity_rate: float = 1.0
    min_no_long_then_intensity_rate: float = 1.0
    min_availability_adherence_rate: float = 1.0
    min_doubles_compliance_rate: float = 1.0
    min_intensity_cap_compliance_rate: float = 1.0
    min_explainability_coverage_rate: float = 1.0


POLICY_FLOORS: dict[str, ScenarioThresholds] = {
    "conservative": ScenarioThresholds(
        min_score=92,
        max_soft_warnings=1,
        min_weekly_minutes_in_band_rate=0.95,
    ),
    "safe": ScenarioThresholds(
        min_score=80,
        max_soft_warnings=5,
        min_weekly_minutes_in_band_rate=0.9,
        min_no_long_then_intensity_rate=0.2,
    ),
    "performance": ScenarioThresholds(
        min_score=86,
        max_soft_warnings=4,
        min_weekly_minutes_in_band_rate=0.85,
        min_no_long_then_intensity_rate=0.8,
    ),
}

# Aggregate scorecard floors across the whole battery
MIN_AVERAGE_SCORE = 90.0
MAX_TOTAL_HARD_VIOLATIONS = 0


def resolve_policy_level(setup: PlanSetup) -> str:
    """Policy level ("conservative" | "safe" | "performance") of a setup."""
    return resolve_policy_profile(setup).level


def ratchet(explicit: ScenarioThresholds, floors: ScenarioThresholds) -> ScenarioThresholds:
    """Merge two bundles keeping the stricter value of every field."""
    merged = {}
    for f in dataclasses.fields(ScenarioThresholds):
        a = getattr(explicit, f.name)
        b = getattr(floors, f.name)
        merged[f.name] = min(a, b) if f.name.startswith("max_") else max(a, b)
    return ScenarioThresholds(**merged)


def effective_thresholds(
    setup: PlanSetup, explicit: ScenarioThresholds
) -> tuple[str, ScenarioThresholds]:
    """Policy level of *setup* and its ratcheted thresholds."""
    level = resolve_policy_level(setup)
    return level, ratchet(explicit, POLICY_FLOORS[level])
