"""Constraint violations emitted by the validator."""

from __future__ import annotations

from dataclasses import dataclass

from plan_builder.models.enums import HARD_VIOLATION_CODES, ViolationCode


@dataclass(frozen=True)
class Violation:
    """A single constraint breach found in a draft plan."""

    code: ViolationCode
    message: str
    week_index: int
    session_id: str | None = None

    @property
    def is_hard(self) -> bool:
        return self.code in HARD_VIOLATION_CODES
