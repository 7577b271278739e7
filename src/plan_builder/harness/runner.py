"""Scenario evaluation, aggregate scorecard and drift report.

Each scenario is generated, validated and scored; its metrics are compared
with the ratcheted thresholds and evidence assertions.  The battery's rows
are collected into a pandas DataFrame from which the aggregate summary, the
per-policy summary and the drift against a baseline report are derived.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd

from plan_builder.exceptions import ScenarioThresholdError
from plan_builder.generator import DraftPlanGenerator
from plan_builder.harness.scenarios import ALL_SCENARIOS, Scenario
from plan_builder.harness.thresholds import (
    MAX_TOTAL_HARD_VIOLATIONS,
    MIN_AVERAGE_SCORE,
    ScenarioThresholds,
    effective_thresholds,
)
from plan_builder.models.enums import wire_name
from plan_builder.models.plan import DraftPlan
from plan_builder.models.quality import RATE_NAMES, QualityReport
from plan_builder.validation import evaluate, validate

logger = logging.getLogger(__name__)

DRIFT_KEYS: tuple[str, ...] = (
    "scenario_count",
    "avg_score",
    "min_score",
    *(f"avg_{name}" for name in RATE_NAMES),
)

REPORT_JSON_NAME = "plan-quality-report.json"
REPORT_MARKDOWN_NAME = "plan-quality-report.md"


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of evaluating one scenario."""

    scenario_id: str
    policy_level: str
    report: QualityReport
    thresholds: ScenarioThresholds
    week_count: int
    total_sessions: int
    max_sessions_on_any_day: int
    failures: tuple[str, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return not self.failures

    def as_row(self) -> dict[str, Any]:
        """Flat metrics row for the scorecard frame."""
        row: dict[str, Any] = {
            "scenario_id": self.scenario_id,
            "policy_level": self.policy_level,
            "score": self.report.score,
            "hard_violation_count": len(self.report.hard_violations),
            "soft_warning_count": len(self.report.soft_warnings),
            "week_count": self.week_count,
            "total_sessions": self.total_sessions,
            "passed": self.passed,
        }
        row.update(self.report.rates.as_dict())
        return row


# ---------------------------------------------------------------------------
# Scenario evaluation
# ---------------------------------------------------------------------------


def _max_sessions_on_any_day(draft: DraftPlan) -> int:
    most = 0
    for week in draft.weeks:
        counts = Counter(s.weekday for s in week.sessions)
        most = max([most, *counts.values()])
    return most


def threshold_failures(report: QualityReport, thresholds: ScenarioThresholds) -> list[str]:
    """Human-readable list of every threshold *report* misses."""
    failures = []
    if report.score < thresholds.min_score:
        failures.append(f"score {report.score} < {thresholds.min_score}")
    if len(report.hard_violations) > thresholds.max_hard_violations:
        failures.append(
            f"hard violations {len(report.hard_violations)} > {thresholds.max_hard_violations}"
        )
    if len(report.soft_warnings) > thresholds.max_soft_warnings:
        failures.append(
            f"soft warnings {len(report.soft_warnings)} > {thresholds.max_soft_warnings}"
        )
    for name in RATE_NAMES:
        value = getattr(report.rates, name)
        floor = getattr(thresholds, f"min_{name}")
        if value < floor:
            failures.append(f"{name} {value:.3f} < {floor}")
    return failures


def evidence_failures(scenario: Scenario, draft: DraftPlan, report: QualityReport) -> list[str]:
    evidence = scenario.evidence
    failures = []
    if evidence.min_week_count is not None and len(draft.weeks) < evidence.min_week_count:
        failures.append(f"week count {len(draft.weeks)} < {evidence.min_week_count}")
    if (
        evidence.min_total_sessions is not None
        and draft.total_sessions < evidence.min_total_sessions
    ):
        failures.append(
            f"total sessions {draft.total_sessions} < {evidence.min_total_sessions}"
        )
    busiest = _max_sessions_on_any_day(draft)
    if (
        evidence.max_sessions_on_any_day is not None
        and busiest > evidence.max_sessions_on_any_day
    ):
        failures.append(
            f"sessions on one day {busiest} > {evidence.max_sessions_on_any_day}"
        )
    hard_codes = {v.code for v in report.hard_violations}
    soft_codes = {v.code for v in report.soft_warnings}
    for code in sorted(hard_codes & evidence.forbidden_hard_codes):
        failures.append(f"forbidden hard violation {wire_name(code)}")
    for code in sorted(soft_codes & evidence.forbidden_soft_codes):
        failures.append(f"forbidden soft warning {wire_name(code)}")
    return failures


def evaluate_scenario(
    scenario: Scenario,
    generator: DraftPlanGenerator | None = None,
) -> ScenarioResult:
    """Generate, validate and score one scenario against its thresholds."""
    generator = generator or DraftPlanGenerator()
    draft = generator.generate(scenario.setup)
    report = evaluate(scenario.setup, draft, validate(scenario.setup, draft))
    level, thresholds = effective_thresholds(scenario.setup, scenario.thresholds)
    failures = threshold_failures(report, thresholds)
    failures.extend(evidence_failures(scenario, draft, report))

    result = ScenarioResult(
        scenario_id=scenario.scenario_id,
        policy_level=level,
        report=report,
        thresholds=thresholds,
        week_count=len(draft.weeks),
        total_sessions=draft.total_sessions,
        max_sessions_on_any_day=_max_sessions_on_any_day(draft),
        failures=tuple(failures),
    )
    if failures:
        logger.warning("Scenario %s failed: %s", scenario.scenario_id, "; ".join(failures))
    else:
        logger.debug("Scenario %s passed with score %d", scenario.scenario_id, report.score)
    return result


def run_battery(
    scenarios: Iterable[Scenario] = ALL_SCENARIOS,
    policy_overrides: Mapping[str, Mapping[str, Any]] | None = None,
) -> list[ScenarioResult]:
    """Evaluate every scenario with one generator."""
    generator = DraftPlanGenerator(policy_overrides=policy_overrides)
    results = [evaluate_scenario(s, generator) for s in scenarios]
    logger.info(
        "Evaluated %d scenarios, %d failed",
        len(results), sum(1 for r in results if not r.passed),
    )
    return results


# ---------------------------------------------------------------------------
# Scorecard
# ---------------------------------------------------------------------------


def scorecard_frame(results: Sequence[ScenarioResult]) -> pd.DataFrame:
    """One row per scenario with score, violation counts and every rate."""
    return pd.DataFrame.from_records([r.as_row() for r in results])


def _round(value: float, digits: int = 3) -> float:
    return float(np.round(float(value), digits))


def summarize(frame: pd.DataFrame) -> dict[str, float | int]:
    """Battery averages and extremes."""
    if frame.empty:
        summary: dict[str, float | int] = {
            "scenario_count": 0,
            "avg_score": 0.0,
            "min_score": 0.0,
        }
        summary.update({f"avg_{name}": 0.0 for name in RATE_NAMES})
        summary.update({"max_hard_violations": 0, "max_soft_warnings": 0})
        return summary

    summary = {
        "scenario_count": int(len(frame)),
        "avg_score": _round(frame["score"].mean()),
        "min_score": _round(frame["score"].min()),
    }
    for name in RATE_NAMES:
        summary[f"avg_{name}"] = _round(frame[name].mean())
    summary["max_hard_violations"] = int(frame["hard_violation_count"].max())
    summary["max_soft_warnings"] = int(frame["soft_warning_count"].max())
    return summary


def policy_summary(frame: pd.DataFrame) -> dict[str, dict[str, float | int]]:
    """Per policy level: scenario count, average/min score, worst violation counts."""
    if frame.empty:
        return {}
    grouped = frame.groupby("policy_level", sort=True).agg(
        scenario_count=("scenario_id", "count"),
        avg_score=("score", "mean"),
        min_score=("score", "min"),
        max_hard_violations=("hard_violation_count", "max"),
        max_soft_warnings=("soft_warning_count", "max"),
    )
    return {
        str(level): {
            "scenario_count": int(row["scenario_count"]),
            "avg_score": _round(row["avg_score"]),
            "min_score": _round(row["min_score"]),
            "max_hard_violations": int(row["max_hard_violations"]),
            "max_soft_warnings": int(row["max_soft_warnings"]),
        }
        for level, row in grouped.iterrows()
    }


def scorecard_failures(results: Sequence[ScenarioResult]) -> list[str]:
    """Per-scenario failures plus the aggregate floors of the battery."""
    failures = [
        f"{r.scenario_id}: {failure}" for r in results for failure in r.failures
    ]
    summary = summarize(scorecard_frame(results))
    if results and summary["avg_score"] < MIN_AVERAGE_SCORE:
        failures.append(f"average score {summary['avg_score']} < {MIN_AVERAGE_SCORE}")
    total_hard = sum(len(r.report.hard_violations) for r in results)
    if total_hard > MAX_TOTAL_HARD_VIOLATIONS:
        failures.append(f"hard violations across battery {total_hard} > {MAX_TOTAL_HARD_VIOLATIONS}")
    return failures


def assert_scorecard(results: Sequence[ScenarioResult]) -> None:
    """Raise if any scenario or the aggregate scorecard misses its floors.

    Raises:
        ScenarioThresholdError: Listing every failure.
    """
    failures = scorecard_failures(results)
    if failures:
        raise ScenarioThresholdError(
            f"{len(failures)} scorecard failure(s): " + "; ".join(failures),
            failures=tuple(failures),
        )


# ---------------------------------------------------------------------------
# Drift report
# ---------------------------------------------------------------------------


def load_baseline(path: str | Path | None) -> dict | None:
    """Read a previously written JSON report, or None if there is none."""
    if path is None:
        return None
    path = Path(path)
    if not path.exists():
        logger.info("No baseline report at %s", path)
        return None
    with open(path) as f:
        return json.load(f)


def drift_rows(
    summary: Mapping[str, float | int], baseline: Mapping[str, Any] | None
) -> list[dict[str, Any]]:
    """Per-metric current vs baseline values and rounded deltas."""
    base_summary = (baseline or {}).get("summary", {})
    rows = []
    for key in DRIFT_KEYS:
        current = float(summary.get(key, 0))
        base_value = base_summary.get(key)
        rows.append({
            "key": key,
            "current": _round(current),
            "baseline": None if base_value is None else _round(base_value),
            "delta": None if base_value is None else _round(current - float(base_value)),
        })
    return rows


def build_drift_report(
    results: Sequence[ScenarioResult],
    baseline: Mapping[str, Any] | None = None,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """JSON-ready report: summary, per-policy summary, scenarios and drift."""
    frame = scorecard_frame(results)
    summary = summarize(frame)
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "generated_at": generated_at.isoformat(),
        "has_baseline": baseline is not None,
        "summary": summary,
        "policy_summary": policy_summary(frame),
        "scenarios": [
            {
                "scenario_id": r.scenario_id,
                "policy_level": r.policy_level,
                "score": r.report.score,
                "hard_violation_count": len(r.report.hard_violations),
                "soft_warning_count": len(r.report.soft_warnings),
                "weekly_minutes_in_band_rate": _round(r.report.rates.weekly_minutes_in_band_rate),
                "key_session_band_pass_rate": _round(r.report.rates.key_session_band_pass_rate),
                "explainability_coverage_rate": _round(
                    r.report.rates.explainability_coverage_rate
                ),
                "taper_last_week_delta_minutes": r.report.rates.taper_last_week_delta_minutes,
                "week_count": r.week_count,
                "total_sessions": r.total_sessions,
                "failures": list(r.failures),
            }
            for r in results
        ],
        "drift": drift_rows(summary, baseline),
    }


def render_markdown(report: Mapping[str, Any]) -> str:
    """Markdown rendition of a drift report."""
    summary = report["summary"]
    lines = [
        "# Plan Quality Drift Report",
        "",
        f"Generated: {report['generated_at']}",
        "",
        "## Summary",
        "",
        f"- Scenarios: {summary['scenario_count']}",
        f"- Average score: {summary['avg_score']}",
        f"- Minimum score: {summary['min_score']}",
        f"- Max hard violations: {summary['max_hard_violations']}",
        f"- Max soft warnings: {summary['max_soft_warnings']}",
        "",
        "## Drift vs Baseline",
        "",
    ]
    if report.get("has_baseline"):
        lines.extend(["| Metric | Baseline | Current | Delta |", "| --- | ---: | ---: | ---: |"])
        for row in report["drift"]:
            baseline = "n/a" if row["baseline"] is None else row["baseline"]
            delta = "n/a" if row["delta"] is None else row["delta"]
            lines.append(f"| {row['key']} | {baseline} | {row['current']} | {delta} |")
    else:
        lines.append("- No baseline file found; deltas unavailable.")

    lines.extend([
        "",
        "## Policy Levels",
        "",
        "| Policy | Scenarios | Avg score | Min score | Max hard | Max soft |",
        "| --- | ---: | ---: | ---: | ---: | ---: |",
    ])
    for level, row in report["policy_summary"].items():
        lines.append(
            f"| {level} | {row['scenario_count']} | {row['avg_score']} | {row['min_score']} "
            f"| {row['max_hard_violations']} | {row['max_soft_warnings']} |"
        )

    lines.extend([
        "",
        "## Scenario Scores",
        "",
        "| Scenario | Score | Hard | Soft |",
        "| --- | ---: | ---: | ---: |",
    ])
    for row in report["scenarios"]:
        lines.append(
            f"| {row['scenario_id']} | {row['score']} | {row['hard_violation_count']} "
            f"| {row['soft_warning_count']} |"
        )
    lines.append("")
    return "\n".join(lines)


def write_reports(report: Mapping[str, Any], out_dir: str | Path) -> tuple[Path, Path]:
    """Write the JSON and markdown reports into *out_dir*; returns both paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / REPORT_JSON_NAME
    md_path = out_dir / REPORT_MARKDOWN_NAME
    with open(json_path, "w") as f:
        f.write(json.dumps(report, indent=2) + "\n")
    with open(md_path, "w") as f:
        f.write(render_markdown(report) + "\n")
    logger.info("Wrote reports to %s and %s", json_path, md_path)
    return json_path, md_path
