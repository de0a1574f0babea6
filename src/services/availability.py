"""
Availability Service - Facade over the profile repository and the engine.

Fetches a service's profile once per query and runs the classifier,
slot generator or overlay on it. A missing profile degrades to "no
availability" instead of an error.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Union

from loguru import logger

from src.config import get_settings
from src.models.availability import (
    CandidateSlot,
    DateStatus,
    ServiceAvailabilityProfile,
    SlotCheck,
)
from src.scheduling.classifier import classify_date
from src.scheduling.overlay import build_marked_dates, build_overlay, list_open_dates
from src.scheduling.slots import check_slot, generate_slots
from src.scheduling.timeutils import DateLike
from src.services.profiles import (
    HttpProfileRepository,
    ProfileNotFoundError,
    ProfileRepository,
)


class AvailabilityService:
    """
    Answers calendar and slot queries for a service.
    """

    def __init__(self, repository: Optional[ProfileRepository] = None):
        self.settings = get_settings()
        self._repository = repository or HttpProfileRepository()

    @property
    def repository(self) -> ProfileRepository:
        return self._repository

    async def close(self) -> None:
        await self._repository.close()

    def _now(self) -> Optional[datetime]:
        if self.settings.hide_elapsed_slots_today:
            return datetime.now()
        return None

    async def get_profile(self, service_id: str) -> Optional[ServiceAvailabilityProfile]:
        """
        Fetch a profile, or ``None`` when the service has none.
        """
        try:
            return await self._repository.get_profile(service_id)
        except ProfileNotFoundError:
            logger.warning(f"No availability profile for service {service_id}")
            return None

    async def get_date_status(
        self, service_id: str, day: DateLike, duration_minutes: int
    ) -> DateStatus:
        """Classify one date for a service."""
        profile = await self.get_profile(service_id)
        return classify_date(day, profile, duration_minutes, now=self._now())

    async def get_calendar(
        self,
        service_id: str,
        duration_minutes: int,
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Dict[str, DateStatus]:
        """
        Build the rolling calendar overlay for a service.

        Args:
            service_id: Service to look up
            duration_minutes: Duration of the chosen option
            window_days: Number of days to cover (defaults to settings)
            today: First day of the window (defaults to today)

        Returns:
            dict: ISO date -> DateStatus
        """
        if window_days is None:
            window_days = self.settings.booking_window_days

        profile = await self.get_profile(service_id)
        overlay = build_overlay(
            profile, duration_minutes, window_days, today=today, now=self._now()
        )

        counts = {status: 0 for status in DateStatus}
        for status in overlay.values():
            counts[status] += 1
        logger.info(
            f"Calendar for service {service_id} ({duration_minutes} min): "
            f"{counts[DateStatus.AVAILABLE]} available, "
            f"{counts[DateStatus.FULLY_BOOKED]} fully booked, "
            f"{counts[DateStatus.CLOSED]} closed"
        )
        return overlay

    async def get_marked_dates(
        self,
        service_id: str,
        duration_minutes: int,
        selected: Optional[str] = None,
        window_days: Optional[int] = None,
    ) -> Dict[str, dict]:
        """Calendar decorations for the overlay, with an optional selected date."""
        overlay = await self.get_calendar(service_id, duration_minutes, window_days)
        return build_marked_dates(overlay, selected=selected)

    async def get_open_dates(
        self, service_id: str, window_days: Optional[int] = None
    ) -> List[str]:
        """Dates not closed by calendar rules, ignoring bookings."""
        if window_days is None:
            window_days = self.settings.booking_window_days
        profile = await self.get_profile(service_id)
        return list_open_dates(profile, window_days)

    async def get_slots(
        self, service_id: str, day: DateLike, duration_minutes: int
    ) -> List[CandidateSlot]:
        """
        List bookable slots for a service on a date.

        Returns:
            Ordered list of free slots, empty when nothing can be booked
        """
        profile = await self.get_profile(service_id)
        slots = generate_slots(day, profile, duration_minutes, now=self._now())
        logger.info(f"Found {len(slots)} free slots for service {service_id} on {day}")
        return slots

    async def check_time(
        self,
        service_id: str,
        day: DateLike,
        start: Union[str, int],
        duration_minutes: int,
        max_alternatives: int = 3,
    ) -> SlotCheck:
        """Check a requested start time and suggest alternatives when it is taken."""
        profile = await self.get_profile(service_id)
        return check_slot(
            day,
            start,
            profile,
            duration_minutes,
            now=self._now(),
            max_alternatives=max_alternatives,
        )


# Singleton instance for reuse
_availability_service: Optional[AvailabilityService] = None


def get_availability_service() -> AvailabilityService:
    """Get the singleton availability service instance."""
    global _availability_service
    if _availability_service is None:
        _availability_service = AvailabilityService()
    return _availability_service
