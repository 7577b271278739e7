"""Deterministic training-plan builder.

Generates week-by-week draft plans from athlete constraints, validates them
against safety caps, scores them through a quality gate and builds a
structured workout for every session.  All computation is pure: no I/O,
no network, no global state.
"""

from plan_builder.exceptions import (
    InvalidPlanSetupError,
    PlanBuilderError,
    ScenarioThresholdError,
    SessionDetailInvariantError,
)
from plan_builder.generator import DraftPlanGenerator, generate
from plan_builder.session_detail import SessionDetailBuilder
from plan_builder.validation import evaluate, validate

__all__ = [
    "DraftPlanGenerator",
    "InvalidPlanSetupError",
    "PlanBuilderError",
    "ScenarioThresholdError",
    "SessionDetailBuilder",
    "SessionDetailInvariantError",
    "evaluate",
    "generate",
    "validate",
]
