"""
Shared fixtures for availability tests.
"""

from datetime import date

import pytest

from src.models.availability import ServiceAvailabilityProfile

# A Monday; 2025-07-19 is a Saturday and 2025-07-20 a Sunday
TODAY = date(2025, 7, 14)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_profile():
    """Factory building a profile from the platform's JSON shape."""

    def _make(
        start: str = "09:00",
        end: str = "18:00",
        closed_days=(),
        special_closures=(),
        booked_slots=None,
        service_id: str = "svc",
    ) -> ServiceAvailabilityProfile:
        return ServiceAvailabilityProfile.model_validate(
            {
                "service_id": service_id,
                "business_hours": {"start": start, "end": end},
                "closed_days": list(closed_days),
                "special_closures": list(special_closures),
                "booked_slots": booked_slots or {},
            }
        )

    return _make
