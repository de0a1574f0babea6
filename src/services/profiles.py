"""
Profile repositories - where availability profiles come from.

The engine depends only on ``ProfileRepository.get_profile``; the
in-memory repository backs tests and the local server, the HTTP
repository talks to the remote data platform.
"""

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from src.config import get_settings
from src.models.availability import ServiceAvailabilityProfile
from src.scheduling.timeutils import weekday_index


class ProfileNotFoundError(LookupError):
    """No availability profile exists for the requested service."""

    def __init__(self, service_id: str):
        super().__init__(f"No availability profile for service {service_id!r}")
        self.service_id = service_id


class ProfileRepository(ABC):
    """Source of availability profiles, keyed by service id."""

    @abstractmethod
    async def get_profile(self, service_id: str) -> ServiceAvailabilityProfile:
        """
        Fetch the profile for a service.

        Raises:
            ProfileNotFoundError: if the service has no profile
        """

    async def close(self) -> None:
        """Release any held resources."""


class InMemoryProfileRepository(ProfileRepository):
    """Profiles held in a dict; used by the local server and in tests."""

    def __init__(self, profiles: Optional[Iterable[ServiceAvailabilityProfile]] = None):
        self._profiles: Dict[str, ServiceAvailabilityProfile] = {}
        for profile in profiles or ():
            self.put(profile)

    def put(self, profile: ServiceAvailabilityProfile) -> None:
        self._profiles[profile.service_id] = profile

    def clear(self) -> None:
        self._profiles.clear()

    @property
    def profiles(self) -> Dict[str, ServiceAvailabilityProfile]:
        return self._profiles

    async def get_profile(self, service_id: str) -> ServiceAvailabilityProfile:
        try:
            return self._profiles[service_id]
        except KeyError:
            raise ProfileNotFoundError(service_id) from None


class HttpProfileRepository(ProfileRepository):
    """
    Async client for the platform's availability endpoint.

    Keeps one pooled ``httpx.AsyncClient`` for all requests.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.settings = get_settings()
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client with connection pooling."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.availability_api_url,
                timeout=httpx.Timeout(self.settings.availability_api_timeout),
                limits=httpx.Limits(
                    max_connections=self.settings.connection_pool_size,
                    max_keepalive_connections=self.settings.connection_pool_size // 2,
                ),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get_profile(self, service_id: str) -> ServiceAvailabilityProfile:
        client = await self._get_client()

        try:
            response = await client.get(f"/api/v1/services/{service_id}/availability")
            if response.status_code == 404:
                raise ProfileNotFoundError(service_id)
            response.raise_for_status()

            data = response.json()
            data.setdefault("service_id", service_id)
            profile = ServiceAvailabilityProfile.model_validate(data)

            logger.info(
                f"Fetched availability profile for service {service_id} "
                f"({len(profile.booked_slots)} dates with bookings)"
            )
            return profile

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error fetching availability profile: {e}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error fetching availability profile: {e}")
            raise
        except ValidationError as e:
            logger.error(f"Malformed availability profile for service {service_id}: {e}")
            raise


def _next_open_days(today: date, closed_days: Iterable[int], count: int):
    closed = set(closed_days)
    day = today + timedelta(days=1)
    found = []
    while len(found) < count:
        if weekday_index(day) not in closed:
            found.append(day)
        day += timedelta(days=1)
    return found


def build_sample_profiles(today: Optional[date] = None) -> Dict[str, ServiceAvailabilityProfile]:
    """
    Demo profiles for the three catalog services, with bookings placed on
    the next open days after ``today``.
    """
    if today is None:
        today = date.today()

    # Service 1: 09:00-18:00, closed Sundays, next two Saturdays closed
    d1 = _next_open_days(today, [0], 4)
    saturdays = [
        today + timedelta(days=offset)
        for offset in range(1, 15)
        if weekday_index(today + timedelta(days=offset)) == 6
    ][:2]
    fully_booked_45 = [
        {"start": "09:00", "end": "12:00"},
        {"start": "12:00", "end": "15:00"},
        {"start": "15:00", "end": "18:00"},
    ]
    manicure = {
        "service_id": "1",
        "business_hours": {"start": "09:00", "end": "18:00"},
        "closed_days": [0],
        "special_closures": [d.isoformat() for d in saturdays],
        "booked_slots": {
            d1[0].isoformat(): [
                {"start": "09:00", "end": "09:45"},
                {"start": "10:30", "end": "11:15"},
                {"start": "13:00", "end": "13:45"},
                {"start": "14:30", "end": "15:15"},
                {"start": "16:00", "end": "16:45"},
            ],
            d1[1].isoformat(): fully_booked_45,
            d1[2].isoformat(): [
                {"start": "11:00", "end": "11:45"},
                {"start": "15:00", "end": "15:45"},
            ],
            d1[3].isoformat(): [{"start": "13:00", "end": "13:45"}],
        },
    }

    # Service 2: 10:00-19:00, closed Sundays and Mondays
    d2 = _next_open_days(today, [0, 1], 2)
    hair = {
        "service_id": "2",
        "business_hours": {"start": "10:00", "end": "19:00"},
        "closed_days": [0, 1],
        "special_closures": [],
        "booked_slots": {
            d2[0].isoformat(): [
                {"start": "11:00", "end": "12:00"},
                {"start": "15:00", "end": "17:00"},
            ],
            d2[1].isoformat(): [
                {"start": f"{hour:02d}:00", "end": f"{hour + 1:02d}:00"}
                for hour in range(10, 19)
            ],
        },
    }

    # Service 3: 08:00-20:00, closed Sundays
    d3 = _next_open_days(today, [0], 1)
    massage = {
        "service_id": "3",
        "business_hours": {"start": "08:00", "end": "20:00"},
        "closed_days": [0],
        "special_closures": [],
        "booked_slots": {d3[0].isoformat(): [{"start": "09:00", "end": "10:00"}]},
    }

    return {
        data["service_id"]: ServiceAvailabilityProfile.model_validate(data)
        for data in (manicure, hair, massage)
    }
