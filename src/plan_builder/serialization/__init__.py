"""Serialization module — JSON-ready records for plans, reports and setups."""

from plan_builder.serialization.records import (
    draft_plan_to_dict,
    quality_report_to_dict,
    setup_from_dict,
    setup_to_dict,
    to_json_string,
)

__all__ = [
    "draft_plan_to_dict",
    "quality_report_to_dict",
    "setup_from_dict",
    "setup_to_dict",
    "to_json_string",
]
