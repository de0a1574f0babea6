"""
Date Classifier

Classifies a calendar date for a service and a requested duration as
``available``, ``fully_booked`` or ``closed``.

Algorithm:
    1. Closed weekday, special closure or past date -> closed
    2. No whole duration-aligned window fits in business hours -> closed
    3. Count aligned windows overlapping at least one booking
    4. Every window blocked -> fully_booked, otherwise available
"""

from datetime import date, datetime
from typing import Iterable, List, Optional

from loguru import logger

from src.models.availability import DateStatus, Interval, ServiceAvailabilityProfile
from src.scheduling.timeutils import (
    DateLike,
    aligned_windows,
    is_valid_duration,
    overlaps,
    parse_date,
    weekday_index,
)


def is_date_open(
    day: DateLike,
    profile: Optional[ServiceAvailabilityProfile],
    *,
    today: Optional[date] = None,
) -> bool:
    """
    Check the calendar rules for a date, ignoring bookings.

    Args:
        day: date or ISO string to check
        profile: availability profile, ``None`` when the service is unknown
        today: reference date for past-date filtering (defaults to today)

    Returns:
        False on a closed weekday, a special closure, a past date, or a
        missing profile
    """
    if profile is None:
        return False

    day = parse_date(day)
    if today is None:
        today = date.today()

    if weekday_index(day) in profile.closed_days:
        return False
    if day.isoformat() in profile.special_closures:
        return False
    if day < today:
        return False
    return True


def total_possible_slots(profile: ServiceAvailabilityProfile, duration_minutes) -> int:
    """Number of whole duration-aligned windows inside business hours."""
    if not is_valid_duration(duration_minutes):
        return 0
    hours = profile.business_hours
    return max(0, (hours.end - hours.start) // int(duration_minutes))


def valid_bookings(bookings: Iterable[Interval]) -> List[Interval]:
    """Drop malformed intervals (start >= end); they cannot block anything."""
    result = []
    for booked in bookings:
        if not booked.is_well_formed:
            logger.debug(f"Ignoring malformed booked interval {booked.start}-{booked.end}")
            continue
        result.append(booked)
    return result


def is_window_blocked(start: int, end: int, bookings: Iterable[Interval]) -> bool:
    """A window is blocked if it overlaps at least one booking."""
    return any(overlaps(start, end, b.start, b.end) for b in bookings)


def elapsed_cutoff(day: date, now: Optional[datetime]) -> Optional[int]:
    """Minutes since midnight before which windows are in the past, if ``day`` is today."""
    if now is None or now.date() != day:
        return None
    return now.hour * 60 + now.minute


def classify_date(
    day: DateLike,
    profile: Optional[ServiceAvailabilityProfile],
    duration_minutes,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> DateStatus:
    """
    Classify a date for a service and duration.

    Args:
        day: date or ISO string to classify
        profile: availability profile, ``None`` when the service is unknown
        duration_minutes: requested service duration
        today: reference date for past-date filtering
        now: when given, windows already started on ``now``'s date count
            as blocked

    Returns:
        DateStatus for the date
    """
    day = parse_date(day)
    if today is None and now is not None:
        today = now.date()

    if not is_date_open(day, profile, today=today):
        return DateStatus.CLOSED

    total = total_possible_slots(profile, duration_minutes)
    if total <= 0:
        return DateStatus.CLOSED

    bookings = valid_bookings(profile.bookings_on(day))
    cutoff = elapsed_cutoff(day, now)
    hours = profile.business_hours

    blocked = 0
    for start, end in aligned_windows(hours.start, hours.end, duration_minutes):
        if cutoff is not None and start < cutoff:
            blocked += 1
        elif is_window_blocked(start, end, bookings):
            blocked += 1

    if blocked >= total:
        return DateStatus.FULLY_BOOKED
    return DateStatus.AVAILABLE
