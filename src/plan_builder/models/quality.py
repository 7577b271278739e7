"""Quality gate results — score, partitioned violations and compliance rates."""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from plan_builder.models.violation import Violation


@dataclass(frozen=True)
class QualityRates:
    """Normalized compliance rates, each in [0, 1].

    ``taper_last_week_delta_minutes`` is the exception: last week's total
    minus the previous week's total, or None for plans shorter than two weeks.
    """

    weekly_minutes_in_band_rate: float = 1.0
    key_session_band_pass_rate: float = 1.0
    non_consecutive_intensity_rate: float = 1.0
    no_long_then_intensity_rate: float = 1.0
    availability_adherence_rate: float = 1.0
    doubles_compliance_rate: float = 1.0
    intensity_cap_compliance_rate: float = 1.0
    explainability_coverage_rate: float = 1.0
    taper_last_week_delta_minutes: int | None = None

    def as_dict(self) -> dict[str, float | int | None]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


RATE_NAMES: tuple[str, ...] = tuple(
    f.name for f in fields(QualityRates) if f.name.endswith("_rate")
)


@dataclass(frozen=True)
class QualityReport:
    """Result of a quality-gate evaluation."""

    score: int
    hard_violations: tuple[Violation, ...] = field(default_factory=tuple)
    soft_warnings: tuple[Violation, ...] = field(default_factory=tuple)
    rates: QualityRates = field(default_factory=QualityRates)

    @property
    def passed(self) -> bool:
        """Go/no-go: a plan with any hard violation must not be accepted."""
        return not self.hard_violations
