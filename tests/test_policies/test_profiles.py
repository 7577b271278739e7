"""Tests for planning policy profile resolution and cap clamping."""

from __future__ import annotations

import pytest

from plan_builder.exceptions import InvalidPlanSetupError
from plan_builder.models.enums import RiskTolerance
from plan_builder.policies.profiles import (
    CONSERVATIVE_PROFILE_ID,
    PERFORMANCE_PROFILE_ID,
    POLICY_PROFILES,
    SAFE_PROFILE_ID,
    apply_policy_profile,
    resolve_policy_profile,
)


class TestResolvePolicyProfile:
    @pytest.mark.parametrize(
        "risk, expected",
        [
            (RiskTolerance.LOW, CONSERVATIVE_PROFILE_ID),
            (RiskTolerance.MED, SAFE_PROFILE_ID),
            (RiskTolerance.HIGH, PERFORMANCE_PROFILE_ID),
        ],
    )
    def test_default_follows_risk(self, make_setup, risk, expected) -> None:
        assert resolve_policy_profile(make_setup(risk_tolerance=risk)).profile_id == expected

    def test_explicit_id_wins(self, make_setup) -> None:
        setup = make_setup(
            risk_tolerance=RiskTolerance.LOW, policy_profile_id=PERFORMANCE_PROFILE_ID,
        )
        assert resolve_policy_profile(setup).level == "performance"

    def test_unknown_id_raises(self, make_setup) -> None:
        with pytest.raises(InvalidPlanSetupError) as exc_info:
            resolve_policy_profile(make_setup(policy_profile_id="coachkit-reckless-v9"))
        assert exc_info.value.field_name == "policy_profile_id"

    def test_overrides_applied(self, make_setup) -> None:
        profile = resolve_policy_profile(
            make_setup(), {SAFE_PROFILE_ID: {"max_doubles": 0, "recovery_every_n_weeks": 3}},
        )
        assert profile.max_doubles == 0
        assert profile.recovery_every_n_weeks == 3
        assert POLICY_PROFILES[SAFE_PROFILE_ID].max_doubles == 1

    def test_overrides_for_other_profiles_ignored(self, make_setup) -> None:
        profile = resolve_policy_profile(make_setup(), {PERFORMANCE_PROFILE_ID: {"max_doubles": 0}})
        assert profile == POLICY_PROFILES[SAFE_PROFILE_ID]

    def test_unknown_override_field_raises(self, make_setup) -> None:
        with pytest.raises(InvalidPlanSetupError):
            resolve_policy_profile(make_setup(), {SAFE_PROFILE_ID: {"max_naps": 2}})


class TestApplyPolicyProfile:
    def test_caps_clamped_to_profile(self, make_setup) -> None:
        setup = make_setup(max_intensity_days_per_week=3, max_doubles_per_week=3)
        clamped = apply_policy_profile(setup, POLICY_PROFILES[SAFE_PROFILE_ID])
        assert clamped.intensity_cap == 2
        assert clamped.doubles_cap == 1
        assert clamped.policy_profile_id == SAFE_PROFILE_ID

    def test_lower_setup_caps_kept(self, make_setup) -> None:
        setup = make_setup(max_intensity_days_per_week=1, max_doubles_per_week=0)
        clamped = apply_policy_profile(setup, POLICY_PROFILES[PERFORMANCE_PROFILE_ID])
        assert clamped.intensity_cap == 1
        assert clamped.doubles_cap == 0

    def test_conservative_allows_no_doubles(self, make_setup) -> None:
        setup = make_setup(max_doubles_per_week=2)
        clamped = apply_policy_profile(setup, POLICY_PROFILES[CONSERVATIVE_PROFILE_ID])
        assert clamped.doubles_cap == 0
