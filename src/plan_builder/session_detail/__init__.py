"""Session detail — structured workouts for scheduled sessions."""

from plan_builder.session_detail.builder import SessionContext, SessionDetailBuilder
from plan_builder.session_detail.reflow import (
    check_session_detail,
    normalize_durations_to_total,
    reflow_to_new_total,
)

__all__ = [
    "SessionContext",
    "SessionDetailBuilder",
    "check_session_detail",
    "normalize_durations_to_total",
    "reflow_to_new_total",
]
