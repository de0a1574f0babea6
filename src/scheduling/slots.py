"""
Slot Generation

Generates the discrete, duration-aligned slots that can still be booked
on a date. Slots start at opening time and step by the service duration,
so a 45-minute service always starts on a 45-minute boundary.
"""

from datetime import date, datetime
from typing import List, Optional

from src.models.availability import CandidateSlot, ServiceAvailabilityProfile, SlotCheck
from src.scheduling.classifier import (
    elapsed_cutoff,
    is_date_open,
    is_window_blocked,
    valid_bookings,
)
from src.scheduling.timeutils import (
    DateLike,
    aligned_windows,
    is_valid_duration,
    parse_date,
    parse_time,
)


def generate_slots(
    day: DateLike,
    profile: Optional[ServiceAvailabilityProfile],
    duration_minutes,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> List[CandidateSlot]:
    """
    List free slots on a date, ordered by start time.

    Args:
        day: date or ISO string
        profile: availability profile, ``None`` when the service is unknown
        duration_minutes: requested service duration
        today: reference date for past-date filtering
        now: when given, slots already started on ``now``'s date are dropped

    Returns:
        list[CandidateSlot], empty for closed dates or unusable durations
    """
    day = parse_date(day)
    if today is None and now is not None:
        today = now.date()

    if not is_date_open(day, profile, today=today):
        return []
    if not is_valid_duration(duration_minutes):
        return []

    duration = int(duration_minutes)
    hours = profile.business_hours
    bookings = valid_bookings(profile.bookings_on(day))
    cutoff = elapsed_cutoff(day, now)

    slots = []
    for start, end in aligned_windows(hours.start, hours.end, duration):
        if cutoff is not None and start < cutoff:
            continue
        if is_window_blocked(start, end, bookings):
            continue
        if end > hours.end:
            continue
        slots.append(CandidateSlot(start=start, end=end, duration_minutes=duration))

    return slots


def check_slot(
    day: DateLike,
    start,
    profile: Optional[ServiceAvailabilityProfile],
    duration_minutes,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
    max_alternatives: int = 3,
) -> SlotCheck:
    """
    Check whether a caller-chosen start time can be booked.

    The requested time does not need to be aligned; it only has to fit in
    business hours without overlapping a booking. When it does not fit,
    the free aligned slots nearest to it are offered instead.

    Args:
        day: date or ISO string
        start: requested start, ``HH:MM`` or minutes since midnight
        profile: availability profile, ``None`` when the service is unknown
        duration_minutes: requested service duration
        max_alternatives: maximum number of alternatives to return

    Returns:
        SlotCheck describing the outcome
    """
    day = parse_date(day)
    start = parse_time(start)
    if today is None and now is not None:
        today = now.date()

    valid = is_valid_duration(duration_minutes)
    duration = int(duration_minutes) if valid else 0
    is_available = False

    if valid and is_date_open(day, profile, today=today):
        hours = profile.business_hours
        end = start + duration
        cutoff = elapsed_cutoff(day, now)
        is_available = (
            hours.start <= start
            and end <= hours.end
            and (cutoff is None or start >= cutoff)
            and not is_window_blocked(start, end, valid_bookings(profile.bookings_on(day)))
        )

    alternatives: List[CandidateSlot] = []
    if not is_available and max_alternatives > 0:
        free = generate_slots(day, profile, duration_minutes, today=today, now=now)
        free.sort(key=lambda slot: (abs(slot.start - start), slot.start))
        alternatives = sorted(free[:max_alternatives], key=lambda slot: slot.start)

    return SlotCheck(
        date=day,
        start=start,
        duration_minutes=duration,
        is_available=is_available,
        alternatives=alternatives,
    )
