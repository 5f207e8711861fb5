import enum
from typing import Dict, FrozenSet

from ..exceptions import InvalidTransitionError, ValidationError


class SlotStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CHECKED_IN = "checked-in"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class AppointmentType(str, enum.Enum):
    INITIAL = "initial"
    FOLLOW_UP = "follow-up"
    VIRTUAL = "virtual"
    IN_PERSON = "in-person"


ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.CHECKED_IN,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.CHECKED_IN: frozenset({
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.IN_PROGRESS: frozenset({AppointmentStatus.COMPLETED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

# Statuses whose appointment still holds its time slot and may be moved to another one
RESCHEDULABLE = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CHECKED_IN})

UPCOMING = (AppointmentStatus.SCHEDULED.value, AppointmentStatus.CHECKED_IN.value)


def parse_status(value: str) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status. Must be one of: {[s.value for s in AppointmentStatus]}")


def is_valid_transition(current: str, requested: str) -> bool:
    try:
        return AppointmentStatus(requested) in ALLOWED_TRANSITIONS[AppointmentStatus(current)]
    except (KeyError, ValueError):
        return False


def ensure_transition(current: str, requested: str) -> None:
    parse_status(requested)
    if not is_valid_transition(current, requested):
        raise InvalidTransitionError(current, requested)
