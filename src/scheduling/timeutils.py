"""
Time and date helpers shared by the classifier and the slot generator.

Times of day are plain ``int`` minutes since midnight inside the engine;
``HH:MM`` strings and ``YYYY-MM-DD`` dates only appear at the boundary.
"""

import math
from datetime import date
from numbers import Real
from typing import Optional, Union

MINUTES_PER_DAY = 24 * 60

DateLike = Union[date, str]


def parse_time(value: Union[str, int]) -> int:
    """
    Convert an ``HH:MM`` string to minutes since midnight.

    Integers are accepted as already-converted minutes.

    Raises:
        ValueError: if the value is not a valid 24-hour time of day
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid time of day: {value!r}")
    if isinstance(value, int):
        minutes = value
    elif isinstance(value, str):
        hours_str, sep, minutes_str = value.strip().partition(":")
        if not sep or not hours_str.isdigit() or not minutes_str.isdigit():
            raise ValueError(f"Invalid time of day: {value!r}, expected HH:MM")
        hours, mins = int(hours_str), int(minutes_str)
        if hours > 23 or mins > 59:
            raise ValueError(f"Invalid time of day: {value!r}")
        minutes = hours * 60 + mins
    else:
        raise ValueError(f"Invalid time of day: {value!r}")

    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Time of day out of range: {value!r}")
    return minutes


def format_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded ``HH:MM``."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def parse_date(value: DateLike) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def weekday_index(day: date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: touching intervals do not overlap."""
    return start_a < end_b and end_a > start_b


def is_valid_duration(duration_minutes) -> bool:
    """
    A usable duration is a finite, positive, whole number of minutes.

    Anything else yields zero possible slots.
    """
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, Real):
        return False
    if not isinstance(duration_minutes, int):
        value = float(duration_minutes)
        if not math.isfinite(value) or not value.is_integer():
            return False
    return duration_minutes > 0


def aligned_windows(
    business_start: int,
    business_end: int,
    duration_minutes: int,
    step_minutes: Optional[int] = None,
):
    """
    Yield ``(start, end)`` windows aligned to opening time.

    Consecutive windows start ``step_minutes`` apart (the duration by
    default). Windows never extend past closing time; a trailing partial
    period is never produced.
    """
    duration = int(duration_minutes)
    step = int(step_minutes) if step_minutes else duration
    t = business_start
    while t <= business_end - duration:
        yield t, t + duration
        t += step
