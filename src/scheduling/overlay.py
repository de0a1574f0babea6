"""
Calendar overlay assembly over a rolling window of dates.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from src.config import CALENDAR_STATUS_STYLES, SELECTED_DATE_COLOR
from src.models.availability import DateStatus, ServiceAvailabilityProfile
from src.scheduling.classifier import classify_date, is_date_open

DEFAULT_WINDOW_DAYS = 60


def _window(today: date, window_days: int) -> List[date]:
    return [today + timedelta(days=offset) for offset in range(max(0, window_days))]


def build_overlay(
    profile: Optional[ServiceAvailabilityProfile],
    duration_minutes,
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Dict[str, DateStatus]:
    """
    Classify every date from today to today + window_days - 1.

    Returns:
        dict: ISO date -> DateStatus, in date order
    """
    if today is None:
        today = now.date() if now is not None else date.today()

    return {
        day.isoformat(): classify_date(
            day, profile, duration_minutes, today=today, now=now
        )
        for day in _window(today, window_days)
    }


def list_open_dates(
    profile: Optional[ServiceAvailabilityProfile],
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    today: Optional[date] = None,
) -> List[str]:
    """ISO dates in the window that are not closed by calendar rules."""
    if today is None:
        today = date.today()
    return [
        day.isoformat()
        for day in _window(today, window_days)
        if is_date_open(day, profile, today=today)
    ]


def build_marked_dates(
    overlay: Dict[str, Enum],
    selected: Optional[str] = None,
    styles: Optional[Dict[str, dict]] = None,
) -> Dict[str, dict]:
    """
    Turn an overlay into per-date calendar decorations.

    ``styles`` maps status values to decorations and defaults to the
    service calendar styles. The selected date is highlighted only when
    it can be booked.
    """
    if styles is None:
        styles = CALENDAR_STATUS_STYLES

    marks = {}
    for iso_date, status in overlay.items():
        marks[iso_date] = {"status": status.value, **styles[status.value]}

    if selected and selected in marks and not marks[selected]["disabled"]:
        marks[selected] = {
            **marks[selected],
            "selected": True,
            "selected_color": SELECTED_DATE_COLOR,
            "background_color": SELECTED_DATE_COLOR,
            "text_color": "white",
        }
    return marks
