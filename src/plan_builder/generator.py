"""DraftPlanGenerator — turns a PlanSetup into a week-by-week DraftPlan.

Generation is pure and deterministic: the same setup always yields the same
plan.  Caps, availability and beginner-safety limits are enforced while
sessions are assigned, so a correctly generated plan passes the constraint
validator without hard violations.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping

from plan_builder.exceptions import InvalidPlanSetupError
from plan_builder.math.durations import allocate_minutes
from plan_builder.math.periodization import (
    PhaseSpec,
    allocate_phases,
    count_taper_weeks,
    get_phase_for_week,
    is_recovery_week,
    resolve_plan_weeks,
    weekly_minutes_target,
)
from plan_builder.models.enums import (
    DAYS_PER_WEEK,
    DURATION_STEP_MINUTES,
    MIN_SESSION_MINUTES,
    SATURDAY,
    SUNDAY,
    Discipline,
    TrainingPhase,
    WorkoutType,
)
from plan_builder.models.plan import DraftPlan, Session, Week
from plan_builder.models.setup import PlanSetup
from plan_builder.policies.profiles import (
    PolicyProfile,
    apply_policy_profile,
    resolve_policy_profile,
)
from plan_builder.policies.rules import (
    BRICK_NOTES,
    DISCIPLINE_MAX_MINUTES,
    DISTRIBUTION_EASY_TYPES,
    DISTRIBUTION_INTENSITY_TYPES,
    EASY_TYPE_BY_DISCIPLINE,
    INTENSITY_TYPE_BY_PHASE,
    KEY_SESSION_BANDS,
    KEY_SESSION_NOTES,
    LONG_NOTES,
    RECOVERY_NOTES,
    ROLE_WEIGHTS,
    ROTATIONS,
    SESSIONS_PER_WEEK,
    SessionRole,
    TypeQueues,
    beginner_run_cap,
    discipline_sequence,
    has_injury_signal,
    in_beginner_window,
    is_beginner,
    is_brick_week,
    session_type_queues,
)
from plan_builder.session_detail.builder import SessionContext, SessionDetailBuilder

logger = logging.getLogger(__name__)

_BOTH_WINDOWS = (re.compile(r"\bam\b", re.IGNORECASE), re.compile(r"\bpm\b", re.IGNORECASE))

# Lower rank = preferred host for a second session on the same day
_DOUBLE_HOST_RANK: dict[SessionRole, int] = {
    SessionRole.EASY: 0,
    SessionRole.RECOVERY: 1,
    SessionRole.INTENSITY: 2,
    SessionRole.LONG: 3,
    SessionRole.BRICK: 3,
    SessionRole.DOUBLE: 4,
}


@dataclass(frozen=True)
class _PlanContext:
    """Per-plan facts derived once from the setup."""

    setup: PlanSetup
    profile: PolicyProfile
    total_weeks: int
    taper_weeks: int
    phases: tuple[PhaseSpec, ...]
    days: tuple[int, ...]              # allowed weekdays in week order
    long_day: int | None
    beginner: bool
    injury: bool
    type_queues: TypeQueues

    def position(self, weekday: int) -> int:
        """Index of *weekday* within a plan week."""
        return (weekday - self.setup.week_start) % DAYS_PER_WEEK


@dataclass(frozen=True)
class _Slot:
    weekday: int
    ordinal: int
    role: SessionRole
    discipline: Discipline
    workout_type: WorkoutType
    notes: str
    cap_minutes: int


def check_setup(setup: PlanSetup) -> None:
    """Fail fast on setups for which no valid schedule exists.

    Raises:
        InvalidPlanSetupError: Describing the first problem found.
    """
    bad_days = [d for d in setup.allowed_weekdays if not 0 <= d < DAYS_PER_WEEK]
    if bad_days:
        raise InvalidPlanSetupError(
            f"Weekday indices must be 0-6, got {bad_days}",
            field_name="allowed_weekdays",
        )
    if setup.long_session_day is not None and not 0 <= setup.long_session_day < DAYS_PER_WEEK:
        raise InvalidPlanSetupError(
            f"Long-session day must be 0-6, got {setup.long_session_day}",
            field_name="long_session_day",
        )
    if not 0 <= setup.week_start < DAYS_PER_WEEK:
        raise InvalidPlanSetupError(
            f"Week start must be 0-6, got {setup.week_start}",
            field_name="week_start",
        )
    if setup.weekly_minutes < 0 or any(m < 0 for m in setup.weekly_minutes_by_week):
        raise InvalidPlanSetupError(
            "Weekly minutes cannot be negative", field_name="weekly_minutes",
        )
    wants_minutes = setup.weekly_minutes > 0 or any(
        m > 0 for m in setup.weekly_minutes_by_week
    )
    if wants_minutes and not setup.allowed_weekdays:
        raise InvalidPlanSetupError(
            "No allowed weekdays but a positive minutes budget was requested; "
            "no valid schedule exists",
            field_name="allowed_weekdays",
        )
    if setup.sessions_per_week is not None and setup.sessions_per_week < 1:
        raise InvalidPlanSetupError(
            f"Sessions per week must be at least 1, got {setup.sessions_per_week}",
            field_name="sessions_per_week",
        )
    available = setup.request_context.available_time_minutes
    if available is not None and available <= 0:
        raise InvalidPlanSetupError(
            f"Available time per session must be positive, got {available}",
            field_name="available_time_minutes",
        )
    allowed_types = set(DISTRIBUTION_INTENSITY_TYPES) | set(DISTRIBUTION_EASY_TYPES)
    bad_types = [t for t, _ in setup.session_type_distribution if t not in allowed_types]
    if bad_types:
        raise InvalidPlanSetupError(
            f"Session type distribution cannot weight {sorted(t.name for t in bad_types)}",
            field_name="session_type_distribution",
        )


def pick_long_day(days: tuple[int, ...], preferred: int | None) -> int | None:
    """Preferred day if allowed, else Saturday, else Sunday, else the last day."""
    if not days:
        return None
    for candidate in (preferred, SATURDAY, SUNDAY):
        if candidate is not None and candidate in days:
            return candidate
    return days[-1]


class DraftPlanGenerator:
    """Generates deterministic draft plans.

    Usage::

        generator = DraftPlanGenerator()
        plan = generator.generate(setup)
    """

    def __init__(
        self,
        builder: SessionDetailBuilder | None = None,
        policy_overrides: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self.builder = builder or SessionDetailBuilder()
        self.policy_overrides = policy_overrides

    def generate(self, setup: PlanSetup) -> DraftPlan:
        """Generate a draft plan for *setup*.

        Algorithm:
        1. Reject setups with no valid schedule (InvalidPlanSetupError)
        2. Resolve the policy profile and clamp caps to its hard caps
        3. Resolve plan length and allocate BASE / BUILD / TAPER phases
        4. For every week: compute the target minutes, choose session days,
           assign long / intensity / easy / recovery / double roles, pick
           disciplines and types, split the minutes, build session details

        Args:
            setup: Frozen athlete constraints.

        Returns:
            A frozen DraftPlan.

        Raises:
            InvalidPlanSetupError: For malformed or contradictory setups.
        """
        check_setup(setup)
        profile = resolve_policy_profile(setup, self.policy_overrides)
        effective = apply_policy_profile(setup, profile)
        total_weeks = resolve_plan_weeks(effective)
        taper_weeks = count_taper_weeks(effective, total_weeks)

        week_start = effective.week_start
        days = tuple(sorted(
            set(effective.allowed_weekdays),
            key=lambda d: (d - week_start) % DAYS_PER_WEEK,
        ))
        ctx = _PlanContext(
            setup=effective,
            profile=profile,
            total_weeks=total_weeks,
            taper_weeks=taper_weeks,
            phases=tuple(allocate_phases(total_weeks, taper_weeks)),
            days=days,
            long_day=pick_long_day(days, effective.long_session_day),
            beginner=is_beginner(effective),
            injury=has_injury_signal(effective),
            type_queues=session_type_queues(effective),
        )
        logger.debug(
            "Generating %d weeks with profile %s (beginner=%s, injury=%s)",
            total_weeks, profile.profile_id, ctx.beginner, ctx.injury,
        )

        weeks = tuple(self._build_week(ctx, w) for w in range(total_weeks))
        plan = DraftPlan(weeks=weeks)
        logger.info(
            "Generated draft plan: %d weeks, %d sessions, profile %s",
            len(weeks), plan.total_sessions, profile.profile_id,
        )
        return plan

    # ------------------------------------------------------------------
    # Week assembly
    # ------------------------------------------------------------------

    def _build_week(self, ctx: _PlanContext, week_index: int) -> Week:
        setup = ctx.setup
        target = weekly_minutes_target(setup, week_index, ctx.total_weeks, ctx.profile)
        count = self._session_count(ctx, target)
        if count == 0:
            logger.debug("Week %d: no sessions (target %d min)", week_index, target)
            return Week(week_index=week_index)

        phase = get_phase_for_week(week_index, list(ctx.phases))
        recovery = is_recovery_week(
            week_index, ctx.total_weeks, ctx.profile.recovery_every_n_weeks, ctx.taper_weeks,
        )

        primary_days = self._select_days(ctx, min(count, len(ctx.days)))
        roles = self._assign_roles(ctx, week_index, primary_days, recovery)
        double_days = self._pick_double_days(ctx, primary_days, roles, count - len(primary_days))

        slots = self._build_slots(ctx, week_index, phase, primary_days, roles, double_days)
        anchor = next(
            (i for i, s in enumerate(slots) if s.role in (SessionRole.LONG, SessionRole.BRICK)),
            None,
        )
        durations = allocate_minutes(
            target,
            [ROLE_WEIGHTS[s.role] for s in slots],
            [s.cap_minutes for s in slots],
            anchor=anchor,
        )

        sessions = []
        for slot, minutes in zip(slots, durations):
            detail = self.builder.build(
                slot.discipline,
                slot.workout_type,
                minutes,
                SessionContext(
                    week_index=week_index,
                    weekday=slot.weekday,
                    ordinal=slot.ordinal,
                    equipment=setup.request_context.equipment,
                    environment_tags=setup.request_context.environment_tags,
                ),
            )
            sessions.append(Session(
                session_id=f"w{week_index}-d{slot.weekday}-{slot.ordinal}",
                week_index=week_index,
                weekday=slot.weekday,
                ordinal=slot.ordinal,
                discipline=slot.discipline,
                workout_type=slot.workout_type,
                duration_minutes=minutes,
                notes=slot.notes,
                detail=detail,
            ))
        sessions.sort(key=lambda s: (ctx.position(s.weekday), s.ordinal))

        total = sum(durations)
        if abs(total - target) >= DURATION_STEP_MINUTES:
            logger.warning(
                "Week %d: session caps allow %d min against a target of %d min",
                week_index, total, target,
            )
        return Week(week_index=week_index, sessions=tuple(sessions))

    def _session_count(self, ctx: _PlanContext, target: int) -> int:
        """Sessions this week: risk-based (or explicit) count limited by slots and budget."""
        if target <= 0 or not ctx.days:
            return 0
        setup = ctx.setup
        wanted = setup.sessions_per_week or SESSIONS_PER_WEEK[setup.risk_tolerance]
        slots = len(ctx.days) + min(setup.doubles_cap, len(ctx.days))
        by_budget = max(1, target // MIN_SESSION_MINUTES)
        count = max(1, min(wanted, slots, by_budget))
        if count < wanted:
            log = logger.warning if setup.sessions_per_week else logger.debug
            log(
                "Scheduling %d of %d wanted sessions (slots=%d, budget allows %d)",
                count, wanted, slots, by_budget,
            )
        return count

    def _select_days(self, ctx: _PlanContext, count: int) -> tuple[int, ...]:
        """Long day first, then days spread as far apart as possible."""
        if count <= 0:
            return ()
        chosen = [ctx.long_day]
        candidates = [d for d in ctx.days if d != ctx.long_day]
        while len(chosen) < count and candidates:
            best = max(
                candidates,
                key=lambda d: (
                    min(abs(ctx.position(d) - ctx.position(c)) for c in chosen),
                    -ctx.position(d),
                ),
            )
            chosen.append(best)
            candidates.remove(best)
        return tuple(sorted(chosen, key=ctx.position))

    def _intensity_limit(self, ctx: _PlanContext, week_index: int, recovery: bool) -> int:
        setup = ctx.setup
        _, key_max = KEY_SESSION_BANDS[setup.risk_tolerance]
        limit = min(setup.intensity_cap, key_max - 1)
        if recovery or ctx.injury or (ctx.beginner and in_beginner_window(week_index)):
            limit = min(limit, 1)
        return limit

    def _assign_roles(
        self,
        ctx: _PlanContext,
        week_index: int,
        primary_days: tuple[int, ...],
        recovery: bool,
    ) -> dict[int, SessionRole]:
        """Long/brick on the long day, spaced intensity, recovery after the long day."""
        roles = {day: SessionRole.EASY for day in primary_days}
        long_day = ctx.long_day
        brick = is_brick_week(ctx.setup, week_index, ctx.beginner)
        roles[long_day] = SessionRole.BRICK if brick else SessionRole.LONG

        long_pos = ctx.position(long_day)
        after_long = next((d for d in primary_days if ctx.position(d) == long_pos + 1), None)

        limit = self._intensity_limit(ctx, week_index, recovery)
        picked: list[int] = []
        for day in primary_days:
            if len(picked) >= limit:
                break
            if day in (long_day, after_long):
                continue
            if any(abs(ctx.position(day) - ctx.position(p)) <= 1 for p in picked):
                continue
            picked.append(day)
            roles[day] = SessionRole.INTENSITY

        if after_long is not None:
            roles[after_long] = SessionRole.RECOVERY
        return roles

    def _pick_double_days(
        self,
        ctx: _PlanContext,
        primary_days: tuple[int, ...],
        roles: dict[int, SessionRole],
        wanted: int,
    ) -> tuple[int, ...]:
        """Days that receive a second session, within the doubles cap."""
        wanted = min(wanted, ctx.setup.doubles_cap, len(primary_days))
        if wanted <= 0:
            return ()
        windows = dict(ctx.setup.request_context.time_windows)

        def _rank(day: int) -> tuple[int, int, int]:
            window = windows.get(day, "")
            both = all(p.search(window) for p in _BOTH_WINDOWS)
            return (0 if both else 1, _DOUBLE_HOST_RANK[roles[day]], ctx.position(day))

        return tuple(sorted(primary_days, key=_rank)[:wanted])

    def _build_slots(
        self,
        ctx: _PlanContext,
        week_index: int,
        phase: TrainingPhase,
        primary_days: tuple[int, ...],
        roles: dict[int, SessionRole],
        double_days: tuple[int, ...],
    ) -> list[_Slot]:
        """Discipline, type, notes and duration cap for every session slot.

        Coach split targets, when given, replace the emphasis rotation for
        every slot except the brick; a type distribution replaces the default
        easy and intensity types.  Beginner and injury weeks keep TEMPO as
        the only intensity type either way.
        """
        setup = ctx.setup
        rotation = ROTATIONS[setup.discipline_emphasis]
        split = discipline_sequence(setup, len(primary_days) + len(double_days))
        queues = ctx.type_queues
        gentle = ctx.injury or (ctx.beginner and in_beginner_window(week_index))
        intensity_type = (
            WorkoutType.TEMPO
            if gentle
            else INTENSITY_TYPE_BY_PHASE[(setup.risk_tolerance, phase)]
        )

        def _pick(
            default: tuple[Discipline, ...], n: int, exclude: Discipline | None = None
        ) -> Discipline:
            pool = tuple(d for d in split if d != exclude) or default
            return pool[(n + week_index) % len(pool)]

        def _easy_type(discipline: Discipline, n: int) -> WorkoutType:
            if queues.easy and discipline not in (Discipline.SWIM, Discipline.STRENGTH):
                return queues.easy[(n + week_index) % len(queues.easy)]
            return EASY_TYPE_BY_DISCIPLINE[discipline]

        slots: list[_Slot] = []
        intensity_n = easy_n = double_n = 0
        for day in primary_days:
            role = roles[day]
            if role == SessionRole.LONG:
                long_pool = tuple(d for d in rotation.long if d in split) or rotation.long
                discipline = self._long_discipline(ctx, long_pool, week_index)
                workout_type = WorkoutType.ENDURANCE
                notes = LONG_NOTES.get(discipline, "Long session")
            elif role == SessionRole.BRICK:
                discipline = Discipline.BIKE
                workout_type = WorkoutType.ENDURANCE
                notes = BRICK_NOTES
            elif role == SessionRole.INTENSITY:
                discipline = _pick(rotation.intensity, intensity_n, exclude=Discipline.STRENGTH)
                workout_type = intensity_type
                if queues.intensity and not gentle:
                    workout_type = queues.intensity[
                        (intensity_n + week_index) % len(queues.intensity)
                    ]
                intensity_n += 1
                notes = KEY_SESSION_NOTES
            elif role == SessionRole.RECOVERY:
                pool = tuple(d for d in split + rotation.easy if d != Discipline.STRENGTH)
                discipline = pool[0]
                workout_type = WorkoutType.RECOVERY
                notes = RECOVERY_NOTES
            else:
                discipline = _pick(rotation.easy, easy_n)
                workout_type = _easy_type(discipline, easy_n)
                easy_n += 1
                notes = ""
            slots.append(self._slot(ctx, week_index, day, 0, role, discipline, workout_type, notes))

        for day in double_days:
            if split:
                discipline = split[(easy_n + double_n + week_index) % len(split)]
            else:
                discipline = rotation.doubles[double_n % len(rotation.doubles)]
            slots.append(self._slot(
                ctx, week_index, day, 1, SessionRole.DOUBLE,
                discipline, _easy_type(discipline, easy_n + double_n), "Second session",
            ))
            double_n += 1
        return slots

    @staticmethod
    def _long_discipline(
        ctx: _PlanContext, rotation: tuple[Discipline, ...], week_index: int
    ) -> Discipline:
        """Rotated long-session discipline; beginners keep long runs out of the safety window."""
        discipline = rotation[week_index % len(rotation)]
        if discipline == Discipline.RUN and ctx.beginner and in_beginner_window(week_index):
            discipline = next((d for d in rotation if d != Discipline.RUN), discipline)
        return discipline

    def _slot(
        self,
        ctx: _PlanContext,
        week_index: int,
        weekday: int,
        ordinal: int,
        role: SessionRole,
        discipline: Discipline,
        workout_type: WorkoutType,
        notes: str,
    ) -> _Slot:
        cap = DISCIPLINE_MAX_MINUTES[discipline]
        if ctx.beginner and discipline == Discipline.RUN:
            cap = min(cap, beginner_run_cap(week_index))
        available = ctx.setup.request_context.available_time_minutes
        if available is not None:
            cap = min(cap, available)
        return _Slot(
            weekday=weekday,
            ordinal=ordinal,
            role=role,
            discipline=discipline,
            workout_type=workout_type,
            notes=notes,
            cap_minutes=cap,
        )


def generate(
    setup: PlanSetup,
    policy_overrides: Mapping[str, Mapping[str, Any]] | None = None,
) -> DraftPlan:
    """Convenience wrapper around DraftPlanGenerator().generate()."""
    return DraftPlanGenerator(policy_overrides=policy_overrides).generate(setup)
