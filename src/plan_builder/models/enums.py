"""Enumerations and planning constants for the plan builder.

Closed variant sets are enums so that every lookup table keyed by them can be
checked for exhaustiveness.  Wire names are the lower-cased member names except
for ViolationCode, whose member names are the stable contract.
"""

from enum import IntEnum, auto


class Discipline(IntEnum):
    """Sport of a scheduled session."""

    RUN = auto()
    BIKE = auto()
    SWIM = auto()
    STRENGTH = auto()
    OTHER = auto()


class WorkoutType(IntEnum):
    """Session workout types ordered roughly by intensity."""

    RECOVERY = auto()
    TECHNIQUE = auto()
    ENDURANCE = auto()
    STRENGTH = auto()
    TEMPO = auto()
    THRESHOLD = auto()


class BlockType(IntEnum):
    """Structural block types inside a SessionDetail."""

    WARMUP = auto()
    MAIN = auto()
    DRILL = auto()
    STRENGTH = auto()
    COOLDOWN = auto()


class Zone(IntEnum):
    """Intensity zones (5-zone model)."""

    Z1 = 1
    Z2 = 2
    Z3 = 3
    Z4 = 4
    Z5 = 5


class PrimaryMetric(IntEnum):
    """How a session's effort is primarily prescribed."""

    RPE = auto()
    ZONE = auto()


class ViolationCode(IntEnum):
    """Constraint violation codes.  Member names are the stable wire codes."""

    OFF_DAY_SESSION = auto()
    MAX_DOUBLES_EXCEEDED = auto()
    MAX_INTENSITY_DAYS_EXCEEDED = auto()
    CONSECUTIVE_INTENSITY_DAYS = auto()  # Reserved: never emitted, avoided by generation
    WEEKLY_MINUTES_OUT_OF_BOUNDS = auto()
    BEGINNER_RUN_CAP_EXCEEDED = auto()
    BEGINNER_BRICK_TOO_EARLY = auto()


class RiskTolerance(IntEnum):
    """Athlete/coach appetite for training stress."""

    LOW = auto()
    MED = auto()
    HIGH = auto()


class DisciplineEmphasis(IntEnum):
    """Which discipline the plan leans towards."""

    BALANCED = auto()
    SWIM = auto()
    BIKE = auto()
    RUN = auto()


class ProgramPolicy(IntEnum):
    """Named program templates a setup can opt into."""

    COUCH_TO_5K = auto()
    COUCH_TO_IRONMAN_26 = auto()
    HALF_TO_FULL_MARATHON = auto()


class FatigueState(IntEnum):
    """Self-reported fatigue used for session downgrades."""

    FRESH = auto()
    NORMAL = auto()
    FATIGUED = auto()
    COOKED = auto()


class TrainingPhase(IntEnum):
    """Macrocycle phases used to pick the flavour of intensity work."""

    BASE = auto()
    BUILD = auto()
    TAPER = auto()


class VariantLabel(IntEnum):
    """Alternate-duration and context variants attached to a session."""

    SHORT_ON_TIME = auto()
    STANDARD = auto()
    LONGER_WINDOW = auto()
    TRAINER = auto()
    ROAD = auto()
    HEAT_ADJUSTED = auto()
    HILLS_ADJUSTED = auto()
    FATIGUE_ADJUSTED = auto()


def wire_name(member: IntEnum) -> str:
    """Lower-case, hyphenated wire name for an enum member (e.g. ``short-on-time``)."""
    return member.name.lower().replace("_", "-")


INTENSITY_TYPES = frozenset({WorkoutType.TEMPO, WorkoutType.THRESHOLD})

HARD_VIOLATION_CODES = frozenset({
    ViolationCode.OFF_DAY_SESSION,
    ViolationCode.MAX_DOUBLES_EXCEEDED,
    ViolationCode.MAX_INTENSITY_DAYS_EXCEEDED,
    ViolationCode.CONSECUTIVE_INTENSITY_DAYS,
    ViolationCode.BEGINNER_RUN_CAP_EXCEEDED,
    ViolationCode.BEGINNER_BRICK_TOO_EARLY,
})

SOFT_VIOLATION_CODES = frozenset({ViolationCode.WEEKLY_MINUTES_OUT_OF_BOUNDS})

# Weekday indices (0 = Sunday ... 6 = Saturday)
SUNDAY = 0
MONDAY = 1
SATURDAY = 6
DAYS_PER_WEEK = 7
WEEKDAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


# ---------------------------------------------------------------------------
# Caps and safety limits
# ---------------------------------------------------------------------------

MIN_INTENSITY_DAYS_CAP = 1
MAX_INTENSITY_DAYS_CAP = 3
MIN_DOUBLES_CAP = 0
MAX_DOUBLES_CAP = 3
MAX_PLAN_WEEKS = 52
DEFAULT_PLAN_WEEKS = 12

BEGINNER_RUN_CAP_MINUTES = 55
BEGINNER_SAFETY_WEEKS = 4  # Weeks 0-3 carry the beginner run cap and brick ban
BEGINNER_RUN_CAP_STEP_MINUTES = 10  # Weekly growth of the run cap after the safety window

# ---------------------------------------------------------------------------
# Weekly minutes bands
# ---------------------------------------------------------------------------

# Validator band: outside it a soft WEEKLY_MINUTES_OUT_OF_BOUNDS warning is raised
VALIDATOR_MINUTES_BAND = (0.55, 1.10)
# Looser band used only for the weekly-minutes-in-band scoring rate
EVALUATOR_MINUTES_BAND = (0.50, 1.20)

# ---------------------------------------------------------------------------
# Quality score
# ---------------------------------------------------------------------------

MAX_QUALITY_SCORE = 100
HARD_VIOLATION_PENALTY = 20
SOFT_WARNING_PENALTY = 3
MIN_KEY_SESSIONS_PER_WEEK = 2

# ---------------------------------------------------------------------------
# Session durations
# ---------------------------------------------------------------------------

DURATION_STEP_MINUTES = 5
MIN_SESSION_MINUTES = 20
MAX_DETAIL_MINUTES = 10_000

WARMUP_SHARE = 0.15
COOLDOWN_SHARE = 0.10
WARMUP_MIN_MINUTES = 5
WARMUP_MAX_MINUTES = 20
WARMUP_DEFAULT_MINUTES = 10
COOLDOWN_MIN_MINUTES = 5
COOLDOWN_MAX_MINUTES = 15
COOLDOWN_DEFAULT_MINUTES = 5
MAIN_MIN_MINUTES = 10
SHORT_SESSION_MINUTES = 30  # Below this, warmup/cooldown collapse to fixed 5 min
SHORT_SESSION_FIXED_MINUTES = 5
DRILL_MIN_MINUTES = 8
DRILL_SHARE_OF_MAIN = 0.3

# ---------------------------------------------------------------------------
# Periodization
# ---------------------------------------------------------------------------

# Final 1-2 weeks are reduced; volume cuts of 40-60% preserve fitness
# (Mujika & Padilla 2003).
TAPER_WINDOW_WEEKS = 2
BASE_PHASE_SHARE = 0.55
