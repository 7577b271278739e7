"""Plan validation — constraint validator and quality gate."""

from plan_builder.validation.quality_gate import compute_rates, evaluate
from plan_builder.validation.validator import validate

__all__ = ["compute_rates", "evaluate", "validate"]
