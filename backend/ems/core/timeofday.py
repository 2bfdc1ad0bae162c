import re
from datetime import time

from ems.core.logging import get_logger

logger = get_logger(__name__)

TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

DEFAULT_WORK_START = time(9, 0)
DEFAULT_WORK_END = time(17, 0)


def parse_time_of_day(value: str | time | None, default: time) -> time:
    """Parse ``H:MM`` or ``H:MM:SS``; anything else falls back to ``default``."""
    if isinstance(value, time):
        return value
    if value is None or value == "":
        return default

    match = TIME_OF_DAY.match(str(value).strip())
    if match:
        hour, minute, second = (int(part) if part else 0 for part in match.groups())
        if hour < 24 and minute < 60 and second < 60:
            return time(hour, minute, second)

    logger.warning("invalid_time_of_day", value=value, fallback=default.isoformat())
    return default
