"""Planning policy profiles — named bundles of hard caps and recovery cadence.

A profile is resolved once per setup and the setup's caps are clamped to the
profile's hard caps before generation.  Overrides are passed explicitly by the
caller (see ``scheduler.config``); nothing here reads the environment.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from plan_builder.exceptions import InvalidPlanSetupError
from plan_builder.models.enums import RiskTolerance
from plan_builder.models.setup import PlanSetup, clamp_int


@dataclass(frozen=True)
class PolicyProfile:
    """Hard caps and recovery cadence for one planning policy level."""

    profile_id: str
    level: str                       # "conservative" | "safe" | "performance"
    max_intensity_days: int
    max_doubles: int
    recovery_every_n_weeks: int
    recovery_multiplier: float


CONSERVATIVE_PROFILE_ID = "coachkit-conservative-v1"
SAFE_PROFILE_ID = "coachkit-safe-v1"
PERFORMANCE_PROFILE_ID = "coachkit-performance-v1"

POLICY_PROFILES: dict[str, PolicyProfile] = {
    CONSERVATIVE_PROFILE_ID: PolicyProfile(
        profile_id=CONSERVATIVE_PROFILE_ID,
        level="conservative",
        max_intensity_days=1,
        max_doubles=0,
        recovery_every_n_weeks=3,
        recovery_multiplier=0.80,
    ),
    SAFE_PROFILE_ID: PolicyProfile(
        profile_id=SAFE_PROFILE_ID,
        level="safe",
        max_intensity_days=2,
        max_doubles=1,
        recovery_every_n_weeks=4,
        recovery_multiplier=0.84,
    ),
    PERFORMANCE_PROFILE_ID: PolicyProfile(
        profile_id=PERFORMANCE_PROFILE_ID,
        level="performance",
        max_intensity_days=3,
        max_doubles=2,
        recovery_every_n_weeks=4,
        recovery_multiplier=0.86,
    ),
}

_DEFAULT_PROFILE_BY_RISK: dict[RiskTolerance, str] = {
    RiskTolerance.LOW: CONSERVATIVE_PROFILE_ID,
    RiskTolerance.MED: SAFE_PROFILE_ID,
    RiskTolerance.HIGH: PERFORMANCE_PROFILE_ID,
}

_OVERRIDABLE_FIELDS = frozenset({
    "max_intensity_days",
    "max_doubles",
    "recovery_every_n_weeks",
    "recovery_multiplier",
})


def resolve_policy_profile(
    setup: PlanSetup,
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
) -> PolicyProfile:
    """Pick the policy profile for *setup* and apply any overrides.

    An explicit ``policy_profile_id`` wins; otherwise the profile follows
    risk tolerance (low -> conservative, high -> performance, else safe).

    Args:
        setup: The plan setup.
        overrides: Optional mapping of profile id -> partial field values.

    Returns:
        The resolved PolicyProfile.

    Raises:
        InvalidPlanSetupError: If the profile id is unknown or an override
            names an unknown field.
    """
    profile_id = setup.policy_profile_id or _DEFAULT_PROFILE_BY_RISK[setup.risk_tolerance]
    try:
        profile = POLICY_PROFILES[profile_id]
    except KeyError:
        raise InvalidPlanSetupError(
            f"Unknown policy profile {profile_id!r}; "
            f"expected one of {sorted(POLICY_PROFILES)}",
            field_name="policy_profile_id",
        ) from None

    patch = dict((overrides or {}).get(profile_id, {}))
    unknown = set(patch) - _OVERRIDABLE_FIELDS
    if unknown:
        raise InvalidPlanSetupError(
            f"Unknown policy override fields for {profile_id}: {sorted(unknown)}",
            field_name="policy_profile_id",
        )
    if patch:
        profile = dataclasses.replace(profile, **patch)
    return profile


def apply_policy_profile(setup: PlanSetup, profile: PolicyProfile) -> PlanSetup:
    """Return *setup* with its caps clamped to the profile's hard caps."""
    return dataclasses.replace(
        setup,
        max_intensity_days_per_week=clamp_int(
            setup.intensity_cap, 1, max(1, profile.max_intensity_days)
        ),
        max_doubles_per_week=clamp_int(
            setup.doubles_cap, 0, max(0, profile.max_doubles)
        ),
        policy_profile_id=profile.profile_id,
    )
