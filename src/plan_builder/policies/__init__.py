"""Planning policies — profiles and rule tables."""

from plan_builder.policies.profiles import (
    POLICY_PROFILES,
    PolicyProfile,
    apply_policy_profile,
    resolve_policy_profile,
)
from plan_builder.policies.rules import (
    has_injury_signal,
    is_beginner,
    wants_taper,
)

__all__ = [
    "POLICY_PROFILES",
    "PolicyProfile",
    "apply_policy_profile",
    "has_injury_signal",
    "is_beginner",
    "resolve_policy_profile",
    "wants_taper",
]
