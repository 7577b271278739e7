"""Data models for the plan builder."""

from plan_builder.models.enums import (
    BlockType,
    Discipline,
    DisciplineEmphasis,
    FatigueState,
    PrimaryMetric,
    ProgramPolicy,
    RiskTolerance,
    TrainingPhase,
    VariantLabel,
    ViolationCode,
    WorkoutType,
    Zone,
)
from plan_builder.models.plan import DraftPlan, Session, Week
from plan_builder.models.quality import QualityRates, QualityReport
from plan_builder.models.session_detail import (
    Block,
    BlockIntensity,
    Explainability,
    SessionDetail,
    SessionTargets,
    Variant,
)
from plan_builder.models.setup import PlanSetup, RequestContext
from plan_builder.models.violation import Violation

__all__ = [
    "Block",
    "BlockIntensity",
    "BlockType",
    "Discipline",
    "DisciplineEmphasis",
    "DraftPlan",
    "Explainability",
    "FatigueState",
    "PlanSetup",
    "PrimaryMetric",
    "ProgramPolicy",
    "QualityRates",
    "QualityReport",
    "RequestContext",
    "RiskTolerance",
    "Session",
    "SessionDetail",
    "SessionTargets",
    "TrainingPhase",
    "Variant",
    "VariantLabel",
    "Violation",
    "ViolationCode",
    "Week",
    "WorkoutType",
    "Zone",
]
