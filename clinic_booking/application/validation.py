import uuid
from datetime import datetime

from ..exceptions import ValidationError


def is_valid_id(value) -> bool:
    if not value or not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def validate_id(value, field: str) -> str:
    if not is_valid_id(value):
        raise ValidationError(f"Invalid format for {field}")
    return value


def validate_time_range(start_time: str, end_time: str) -> None:
    """Both times are HH:MM and the range is non-empty."""
    for label, value in (("start_time", start_time), ("end_time", end_time)):
        try:
            datetime.strptime(value, "%H:%M")
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {label} format. Use HH:MM")
    if end_time <= start_time:
        raise ValidationError("End time must be after start time")
