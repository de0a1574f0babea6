"""
Staff-level availability.

A staff member works a weekly schedule and takes leave over inclusive
date ranges. Leave always wins over the schedule.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from loguru import logger

from src.config import STAFF_CALENDAR_STATUS_STYLES, STAFF_SLOT_STEP_MINUTES
from src.models.availability import (
    WEEKDAY_NAMES,
    Interval,
    StaffDateStatus,
    StaffDayAvailability,
    StaffMember,
    StaffSlot,
    WorkDay,
)
from src.scheduling.classifier import is_window_blocked, valid_bookings
from src.scheduling.overlay import DEFAULT_WINDOW_DAYS, build_marked_dates
from src.scheduling.timeutils import (
    DateLike,
    aligned_windows,
    is_valid_duration,
    parse_date,
    weekday_index,
)


def _weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[weekday_index(day)]


def _work_day(staff: StaffMember, day: date) -> Optional[WorkDay]:
    return staff.work_schedule.get(_weekday_name(day))


def is_on_leave(day: DateLike, staff: StaffMember) -> bool:
    """True if any leave range covers the date, bounds included."""
    day = parse_date(day)
    return any(leave.covers(day) for leave in staff.leave_dates)


def get_staff_availability(day: DateLike, staff: StaffMember) -> StaffDayAvailability:
    """
    Whether the staff member works on a date and during which hours.

    A weekday with no schedule entry is reported available without
    working hours, so no slots can be generated for it.
    """
    day = parse_date(day)
    weekday = _weekday_name(day)

    if is_on_leave(day, staff):
        return StaffDayAvailability(is_available=False, reason="Staff member is on leave")

    work_day = _work_day(staff, day)
    if work_day is None:
        logger.warning(f"Staff {staff.id} has no schedule for {weekday}")
        return StaffDayAvailability(
            is_available=True, reason=f"No {weekday} schedule data available"
        )

    if not work_day.is_working:
        return StaffDayAvailability(
            is_available=False, reason=f"Staff member doesn't work on {weekday}s"
        )

    return StaffDayAvailability(is_available=True, working_hours=work_day.hours)


def generate_staff_slots(
    day: DateLike,
    staff: StaffMember,
    duration_minutes,
    booked: Iterable[Interval] = (),
    step_minutes: int = STAFF_SLOT_STEP_MINUTES,
) -> List[StaffSlot]:
    """
    Every window of ``duration_minutes`` in the working day, starting
    ``step_minutes`` apart, flagged as free or booked.

    Returns an empty list when the staff member is not working.
    """
    if not is_valid_duration(duration_minutes):
        return []

    availability = get_staff_availability(day, staff)
    hours = availability.working_hours
    if not availability.is_available or hours is None:
        return []

    duration = int(duration_minutes)
    bookings = valid_bookings(booked)
    return [
        StaffSlot(
            start=start,
            end=end,
            duration_minutes=duration,
            available=not is_window_blocked(start, end, bookings),
        )
        for start, end in aligned_windows(
            hours.start, hours.end, duration, step_minutes=step_minutes
        )
    ]


def staff_date_status(
    day: DateLike, staff: StaffMember, *, today: Optional[date] = None
) -> StaffDateStatus:
    """Calendar state of a date: past and non-working days are unavailable."""
    day = parse_date(day)
    if today is None:
        today = date.today()

    if day < today:
        return StaffDateStatus.UNAVAILABLE
    if is_on_leave(day, staff):
        return StaffDateStatus.LEAVE

    work_day = _work_day(staff, day)
    if work_day is not None and work_day.is_working:
        return StaffDateStatus.AVAILABLE
    return StaffDateStatus.UNAVAILABLE


def build_staff_overlay(
    staff: StaffMember,
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    today: Optional[date] = None,
) -> Dict[str, StaffDateStatus]:
    """Staff status for every date from today to today + window_days - 1."""
    if today is None:
        today = date.today()
    return {
        day.isoformat(): staff_date_status(day, staff, today=today)
        for day in (today + timedelta(days=offset) for offset in range(max(0, window_days)))
    }


def build_staff_marked_dates(
    staff: StaffMember,
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    selected: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict[str, dict]:
    """Calendar decorations for a staff member's working calendar."""
    overlay = build_staff_overlay(staff, window_days, today=today)
    return build_marked_dates(overlay, selected, styles=STAFF_CALENDAR_STATUS_STYLES)
