"""Regression harness — scenario battery, thresholds, scorecard and drift report."""

from plan_builder.harness.runner import (
    ScenarioResult,
    assert_scorecard,
    build_drift_report,
    evaluate_scenario,
    load_baseline,
    render_markdown,
    run_battery,
    scorecard_failures,
    scorecard_frame,
    summarize,
    write_reports,
)
from plan_builder.harness.scenarios import (
    ALL_SCENARIOS,
    GOLDEN_SCENARIO,
    SCENARIOS,
    Scenario,
    ScenarioEvidence,
    get_scenario,
)
from plan_builder.harness.thresholds import (
    POLICY_FLOORS,
    ScenarioThresholds,
    effective_thresholds,
    ratchet,
)

__all__ = [
    "ALL_SCENARIOS",
    "GOLDEN_SCENARIO",
    "POLICY_FLOORS",
    "SCENARIOS",
    "Scenario",
    "ScenarioEvidence",
    "ScenarioResult",
    "ScenarioThresholds",
    "assert_scorecard",
    "build_drift_report",
    "effective_thresholds",
    "evaluate_scenario",
    "get_scenario",
    "load_baseline",
    "ratchet",
    "render_markdown",
    "run_battery",
    "scorecard_failures",
    "scorecard_frame",
    "summarize",
    "write_reports",
]
