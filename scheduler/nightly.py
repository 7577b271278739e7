"""Nightly quality run — evaluates the scenario battery and writes drift reports.

Usage:
    python -m scheduler.nightly --once      # single run (for cron / CI)
    python -m scheduler.nightly --daemon    # APScheduler loop
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from plan_builder.exceptions import ScenarioThresholdError
from plan_builder.harness import (
    assert_scorecard,
    build_drift_report,
    load_baseline,
    run_battery,
    write_reports,
)

from scheduler.config import (
    BASELINE_PATH,
    LOG_LEVEL,
    NIGHTLY_HOUR,
    NIGHTLY_MINUTE,
    POLICY_OVERRIDES_JSON,
    REPORT_DIR,
)

logger = logging.getLogger(__name__)


def parse_policy_overrides(raw: str) -> dict[str, dict]:
    """Parse the policy-override JSON object (profile id -> partial fields).

    Raises:
        ValueError: If *raw* is not a JSON object of objects.
    """
    if not raw.strip():
        return {}
    data = json.loads(raw)
    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        raise ValueError("Policy overrides must be a JSON object of objects")
    return data


def nightly_job(
    report_dir: Path = REPORT_DIR,
    baseline_path: Path | None = BASELINE_PATH,
    policy_overrides: dict[str, dict] | None = None,
) -> bool:
    """Run the battery once, write the reports and check the scorecard.

    Returns:
        True when every scenario and the aggregate floors pass.
    """
    logger.info("Starting nightly quality run")
    results = run_battery(policy_overrides=policy_overrides)
    report = build_drift_report(results, baseline=load_baseline(baseline_path))
    json_path, md_path = write_reports(report, report_dir)
    logger.info(
        "Average score %.3f over %d scenarios (reports: %s, %s)",
        report["summary"]["avg_score"],
        report["summary"]["scenario_count"],
        json_path,
        md_path,
    )

    try:
        assert_scorecard(results)
    except ScenarioThresholdError as exc:
        for failure in exc.failures:
            logger.error("Scorecard failure: %s", failure)
        return False

    logger.info("Nightly quality run complete")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Plan builder nightly quality run")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--once", action="store_true", help="Run once and exit")
    group.add_argument("--daemon", action="store_true", help="Run as APScheduler daemon")
    parser.add_argument(
        "--report-dir", type=Path, default=REPORT_DIR, help="Directory for the reports",
    )
    parser.add_argument(
        "--baseline", type=Path, default=BASELINE_PATH, help="Baseline JSON report",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        overrides = parse_policy_overrides(POLICY_OVERRIDES_JSON)
    except ValueError as exc:
        logger.error("Invalid PLAN_BUILDER_POLICY_OVERRIDES: %s", exc)
        return 2

    if args.once:
        ok = nightly_job(args.report_dir, args.baseline, overrides)
        return 0 if ok else 1

    from apscheduler.schedulers.blocking import BlockingScheduler

    scheduler = BlockingScheduler()
    scheduler.add_job(
        nightly_job,
        "cron",
        hour=NIGHTLY_HOUR,
        minute=NIGHTLY_MINUTE,
        kwargs={
            "report_dir": args.report_dir,
            "baseline_path": args.baseline,
            "policy_overrides": overrides,
        },
        id="nightly_job",
    )
    logger.info(
        "Scheduler started — nightly run at %02d:%02d",
        NIGHTLY_HOUR,
        NIGHTLY_MINUTE,
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
