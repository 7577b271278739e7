"""JSON-ready records for plans, quality reports and setups.

Converts the frozen models into plain dicts/lists/strings/ints (the shape a
persistence layer stores) and loads PlanSetup records back.  Enum members
are written as lower-case hyphenated names (``short-on-time``).

All functions are pure (no I/O).
"""

from __future__ import annotations

import json
from datetime import date
from enum import IntEnum
from typing import Any, Mapping, TypeVar

from plan_builder.exceptions import InvalidPlanSetupError
from plan_builder.models.enums import (
    Discipline,
    DisciplineEmphasis,
    ProgramPolicy,
    RiskTolerance,
    WorkoutType,
    wire_name,
)
from plan_builder.models.plan import DraftPlan, Session, Week
from plan_builder.models.quality import QualityReport
from plan_builder.models.session_detail import Block, SessionDetail
from plan_builder.models.setup import PlanSetup, RequestContext
from plan_builder.models.violation import Violation

E = TypeVar("E", bound=IntEnum)


def _enum(member: IntEnum | None) -> str | None:
    return None if member is None else wire_name(member)


def _date(value: date | None) -> str | None:
    return None if value is None else value.isoformat()


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


def block_to_dict(block: Block) -> dict:
    result: dict[str, Any] = {
        "blockType": wire_name(block.block_type),
        "steps": block.steps,
        "durationMinutes": block.duration_minutes,
    }
    if block.intensity is not None:
        result["intensity"] = {
            "rpe": block.intensity.rpe,
            "zone": block.intensity.zone.name if block.intensity.zone else None,
            "notes": block.intensity.notes,
        }
    return result


def session_detail_to_dict(detail: SessionDetail) -> dict:
    ex = detail.explainability
    return {
        "objective": detail.objective,
        "blocks": [block_to_dict(b) for b in detail.blocks],
        "targets": {
            "primaryMetric": wire_name(detail.targets.primary_metric),
            "notes": detail.targets.notes,
        },
        "explainability": None if ex is None else {
            "whyThis": ex.why_this,
            "whyToday": ex.why_today,
            "unlocksNext": ex.unlocks_next,
            "ifMissed": ex.if_missed,
            "ifCooked": ex.if_cooked,
        },
        "variants": [
            {
                "label": wire_name(v.label),
                "whenToUse": v.when_to_use,
                "durationMinutes": v.duration_minutes,
                "notes": v.notes,
            }
            for v in detail.variants
        ],
        "cues": list(detail.cues),
        "safetyNotes": detail.safety_notes,
    }


def session_to_dict(session: Session) -> dict:
    return {
        "sessionId": session.session_id,
        "weekIndex": session.week_index,
        "weekday": session.weekday,
        "ordinal": session.ordinal,
        "discipline": wire_name(session.discipline),
        "type": wire_name(session.workout_type),
        "durationMinutes": session.duration_minutes,
        "notes": session.notes,
        "locked": session.locked,
        "sessionDetail": (
            session_detail_to_dict(session.detail) if session.detail is not None else None
        ),
    }


def week_to_dict(week: Week) -> dict:
    return {
        "weekIndex": week.week_index,
        "locked": week.locked,
        "totalMinutes": week.total_minutes,
        "sessions": [session_to_dict(s) for s in week.sessions],
    }


def draft_plan_to_dict(plan: DraftPlan) -> dict:
    """Convert a DraftPlan to a JSON-ready dict."""
    return {"weeks": [week_to_dict(w) for w in plan.weeks]}


# ---------------------------------------------------------------------------
# Quality reports
# ---------------------------------------------------------------------------


def violation_to_dict(violation: Violation) -> dict:
    return {
        "code": wire_name(violation.code),
        "message": violation.message,
        "weekIndex": violation.week_index,
        "sessionId": violation.session_id,
    }


def quality_report_to_dict(report: QualityReport) -> dict:
    """Convert a QualityReport to a JSON-ready dict (rates keep snake_case names)."""
    return {
        "score": report.score,
        "passed": report.passed,
        "hardViolations": [violation_to_dict(v) for v in report.hard_violations],
        "softWarnings": [violation_to_dict(v) for v in report.soft_warnings],
        "metrics": report.rates.as_dict(),
    }


# ---------------------------------------------------------------------------
# Setups
# ---------------------------------------------------------------------------


def _parse_enum(enum_cls: type[E], value: Any, field_name: str) -> E:
    """Accept a member, its wire name, its upper-case name or its int value."""
    if isinstance(value, enum_cls):
        return value
    try:
        if isinstance(value, int):
            return enum_cls(value)
        return enum_cls[str(value).strip().upper().replace("-", "_")]
    except (KeyError, ValueError):
        raise InvalidPlanSetupError(
            f"Unknown {enum_cls.__name__} value {value!r}", field_name=field_name,
        ) from None


def _parse_date(value: Any, field_name: str) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidPlanSetupError(
            f"Invalid ISO date {value!r}", field_name=field_name,
        ) from None


def _parse_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidPlanSetupError(
            f"Expected a whole number, got {value!r}", field_name=field_name,
        ) from None


def _parse_optional_int(value: Any, field_name: str) -> int | None:
    return None if value is None else _parse_int(value, field_name)


def _parse_weekly_minutes(value: Any) -> int:
    """A scalar budget, or a per-day mapping whose positive entries are summed."""
    if isinstance(value, Mapping):
        return sum(
            max(0, _parse_int(v, "weekly_minutes")) for v in value.values() if v is not None
        )
    return _parse_int(value, "weekly_minutes")


def _parse_weights(
    enum_cls: type[E], value: Any, field_name: str
) -> tuple[tuple[E, float], ...]:
    """Weights as a {name: weight} mapping or a list of pairs."""
    if not value:
        return ()
    items = value.items() if isinstance(value, Mapping) else value
    try:
        pairs = [(key, float(weight)) for key, weight in items]
    except (TypeError, ValueError):
        raise InvalidPlanSetupError(
            f"Malformed weights {value!r}", field_name=field_name,
        ) from None
    return tuple((_parse_enum(enum_cls, key, field_name), w) for key, w in pairs)


def _parse_time_windows(value: Any) -> tuple[tuple[int, str], ...]:
    """Time windows as a {weekday: window} mapping or a list of pairs."""
    if not value:
        return ()
    items = value.items() if isinstance(value, Mapping) else value
    try:
        pairs = [(day, window) for day, window in items]
    except (TypeError, ValueError):
        raise InvalidPlanSetupError(
            f"Malformed time windows {value!r}", field_name="time_windows",
        ) from None
    return tuple(sorted(
        (_parse_int(day, "time_windows"), str(window)) for day, window in pairs
    ))


def request_context_from_dict(data: Mapping[str, Any] | None) -> RequestContext:
    data = data or {}
    return RequestContext(
        experience_level=str(data.get("experience_level", "")),
        injury_notes=str(data.get("injury_notes", "")),
        available_time_minutes=_parse_optional_int(
            data.get("available_time_minutes"), "available_time_minutes",
        ),
        time_windows=_parse_time_windows(data.get("time_windows")),
        equipment=str(data.get("equipment", "")),
        environment_tags=tuple(str(t) for t in data.get("environment_tags", ())),
    )


_OPTIONAL_INT_FIELDS = ("weeks", "long_session_day", "sessions_per_week")
_INT_FIELDS = ("max_intensity_days_per_week", "max_doubles_per_week", "week_start")


def setup_from_dict(data: Mapping[str, Any]) -> PlanSetup:
    """Build a PlanSetup from a snake_case record.

    Enum fields accept wire names (``"couch-to-5k"``); dates accept ISO
    strings.  ``weekly_minutes`` may be a per-day mapping, which is summed.
    Split targets and the type distribution accept ``{name: weight}``
    mappings.  Missing fields take the PlanSetup defaults.

    Raises:
        InvalidPlanSetupError: On unknown enum values, malformed dates or
            numbers, or unknown keys.
    """
    known = set(PlanSetup.__dataclass_fields__)
    unknown = set(data) - known
    if unknown:
        raise InvalidPlanSetupError(f"Unknown setup fields: {sorted(unknown)}")

    kwargs: dict[str, Any] = dict(data)
    kwargs["allowed_weekdays"] = tuple(
        _parse_int(d, "allowed_weekdays") for d in data.get("allowed_weekdays", ())
    )
    if "weekly_minutes" in data:
        kwargs["weekly_minutes"] = _parse_weekly_minutes(data["weekly_minutes"])
    if "weekly_minutes_by_week" in data:
        kwargs["weekly_minutes_by_week"] = tuple(
            _parse_int(m, "weekly_minutes_by_week")
            for m in data["weekly_minutes_by_week"] or ()
        )
    for name in _OPTIONAL_INT_FIELDS:
        if name in data:
            kwargs[name] = _parse_optional_int(data[name], name)
    for name in _INT_FIELDS:
        if name in data:
            kwargs[name] = _parse_int(data[name], name)
    for name in ("start_date", "completion_date"):
        if name in data:
            kwargs[name] = _parse_date(data[name], name)
    if "discipline_emphasis" in data:
        kwargs["discipline_emphasis"] = _parse_enum(
            DisciplineEmphasis, data["discipline_emphasis"], "discipline_emphasis",
        )
    if "risk_tolerance" in data:
        kwargs["risk_tolerance"] = _parse_enum(
            RiskTolerance, data["risk_tolerance"], "risk_tolerance",
        )
    if data.get("program_policy") is not None:
        kwargs["program_policy"] = _parse_enum(
            ProgramPolicy, data["program_policy"], "program_policy",
        )
    if "request_context" in data:
        kwargs["request_context"] = request_context_from_dict(data["request_context"])
    if "discipline_split_targets" in data:
        kwargs["discipline_split_targets"] = _parse_weights(
            Discipline, data["discipline_split_targets"], "discipline_split_targets",
        )
    if "session_type_distribution" in data:
        kwargs["session_type_distribution"] = _parse_weights(
            WorkoutType, data["session_type_distribution"], "session_type_distribution",
        )
    return PlanSetup(**kwargs)


def setup_to_dict(setup: PlanSetup) -> dict:
    """Inverse of setup_from_dict."""
    ctx = setup.request_context
    return {
        "allowed_weekdays": list(setup.allowed_weekdays),
        "weekly_minutes": setup.weekly_minutes,
        "weekly_minutes_by_week": list(setup.weekly_minutes_by_week),
        "weeks": setup.weeks,
        "start_date": _date(setup.start_date),
        "completion_date": _date(setup.completion_date),
        "discipline_emphasis": wire_name(setup.discipline_emphasis),
        "risk_tolerance": wire_name(setup.risk_tolerance),
        "max_intensity_days_per_week": setup.max_intensity_days_per_week,
        "max_doubles_per_week": setup.max_doubles_per_week,
        "long_session_day": setup.long_session_day,
        "program_policy": _enum(setup.program_policy),
        "policy_profile_id": setup.policy_profile_id,
        "coach_guidance": setup.coach_guidance,
        "sessions_per_week": setup.sessions_per_week,
        "week_start": setup.week_start,
        "request_context": {
            "experience_level": ctx.experience_level,
            "injury_notes": ctx.injury_notes,
            "available_time_minutes": ctx.available_time_minutes,
            "time_windows": [list(pair) for pair in ctx.time_windows],
            "equipment": ctx.equipment,
            "environment_tags": list(ctx.environment_tags),
        },
        "discipline_split_targets": {
            wire_name(d): w for d, w in setup.discipline_split_targets
        },
        "session_type_distribution": {
            wire_name(t): w for t, w in setup.session_type_distribution
        },
    }


def to_json_string(record: Any, indent: int | None = 2) -> str:
    """Stable JSON text (sorted keys) for any record built by this module."""
    return json.dumps(record, indent=indent, sort_keys=True)
