"""
Services layer for the BuzyBees availability engine.
"""

from .availability import AvailabilityService
from .booking import BookingGateway, BookingService
from .profiles import (
    HttpProfileRepository,
    InMemoryProfileRepository,
    ProfileNotFoundError,
    ProfileRepository,
)

__all__ = [
    "AvailabilityService",
    "BookingGateway",
    "BookingService",
    "HttpProfileRepository",
    "InMemoryProfileRepository",
    "ProfileNotFoundError",
    "ProfileRepository",
]
