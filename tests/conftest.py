"""Shared test fixtures: plan setups, generator and session detail builder."""

from __future__ import annotations

import dataclasses
from datetime import date
from typing import Callable

import pytest

from plan_builder.generator import DraftPlanGenerator
from plan_builder.models.enums import DisciplineEmphasis, ProgramPolicy, RiskTolerance
from plan_builder.models.plan import DraftPlan
from plan_builder.models.setup import PlanSetup, RequestContext
from plan_builder.session_detail.builder import SessionDetailBuilder


@pytest.fixture
def golden_setup() -> PlanSetup:
    """Four allowed days (Mon/Wed/Fri/Sat), 300 min, bike emphasis, no doubles."""
    return PlanSetup(
        allowed_weekdays=(1, 3, 5, 6),
        weekly_minutes=300,
        max_intensity_days_per_week=2,
        max_doubles_per_week=0,
        discipline_emphasis=DisciplineEmphasis.BIKE,
        risk_tolerance=RiskTolerance.MED,
    )


@pytest.fixture
def beginner_setup() -> PlanSetup:
    """Couch-to-5k runner: 5 days, 220 min, low risk, 10 weeks to the event."""
    return PlanSetup(
        allowed_weekdays=(1, 2, 3, 4, 6),
        weekly_minutes=220,
        weeks=10,
        start_date=date(2026, 2, 2),
        completion_date=date(2026, 4, 13),
        discipline_emphasis=DisciplineEmphasis.RUN,
        risk_tolerance=RiskTolerance.LOW,
        max_intensity_days_per_week=1,
        max_doubles_per_week=0,
        long_session_day=6,
        program_policy=ProgramPolicy.COUCH_TO_5K,
        coach_guidance="Beginner athlete. Couch to 5k progression.",
        request_context=RequestContext(experience_level="Beginner"),
    )


@pytest.fixture
def taper_setup() -> PlanSetup:
    """Six weeks to an event with guidance asking for a taper."""
    return PlanSetup(
        allowed_weekdays=(1, 2, 3, 4, 6),
        weekly_minutes=420,
        weeks=6,
        start_date=date(2026, 2, 2),
        completion_date=date(2026, 3, 16),
        max_intensity_days_per_week=2,
        max_doubles_per_week=1,
        long_session_day=6,
        coach_guidance="Final block before event. Taper correctly in final two weeks.",
    )


@pytest.fixture
def make_setup(golden_setup: PlanSetup) -> Callable[..., PlanSetup]:
    """Factory: the golden setup with field overrides."""

    def _make(**overrides) -> PlanSetup:
        return dataclasses.replace(golden_setup, **overrides)

    return _make


@pytest.fixture
def generator() -> DraftPlanGenerator:
    return DraftPlanGenerator()


@pytest.fixture
def builder() -> SessionDetailBuilder:
    return SessionDetailBuilder()


@pytest.fixture
def golden_plan(generator: DraftPlanGenerator, golden_setup: PlanSetup) -> DraftPlan:
    return generator.generate(golden_setup)
