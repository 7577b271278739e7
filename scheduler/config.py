"""Environment-variable-based configuration for the nightly quality run."""

from __future__ import annotations

import os
from pathlib import Path

REPORT_DIR: Path = Path(os.environ.get("PLAN_BUILDER_REPORT_DIR", "reports"))
BASELINE_PATH: Path | None = (
    Path(os.environ["PLAN_BUILDER_BASELINE"])
    if os.environ.get("PLAN_BUILDER_BASELINE")
    else None
)
LOG_LEVEL: str = os.environ.get("PLAN_BUILDER_LOG_LEVEL", "INFO").upper()
NIGHTLY_HOUR: int = int(os.environ.get("PLAN_BUILDER_NIGHTLY_HOUR", "2"))
NIGHTLY_MINUTE: int = int(os.environ.get("PLAN_BUILDER_NIGHTLY_MINUTE", "0"))
POLICY_OVERRIDES_JSON: str = os.environ.get("PLAN_BUILDER_POLICY_OVERRIDES", "")
