"""Custom exception hierarchy for the plan builder."""

from __future__ import annotations


class PlanBuilderError(Exception):
    """Base exception for all plan_builder errors."""


class InvalidPlanSetupError(PlanBuilderError, ValueError):
    """A PlanSetup is malformed or contradictory (no valid schedule exists)."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class SessionDetailInvariantError(PlanBuilderError, AssertionError):
    """A SessionDetail broke its block-structure or duration-sum invariant."""

    def __init__(self, message: str, issues: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.issues = issues


class ScenarioThresholdError(PlanBuilderError):
    """One or more regression scenarios missed their quality floors."""

    def __init__(self, message: str, failures: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.failures = failures
