"""
Data models for the BuzyBees availability engine.
"""

from .availability import (
    CandidateSlot,
    DateStatus,
    Interval,
    ServiceAvailabilityProfile,
    SlotCheck,
    LeaveRange,
    StaffDateStatus,
    StaffMember,
    WorkDay,
)
from .booking import BookingRequest, BookingResult

__all__ = [
    "CandidateSlot",
    "DateStatus",
    "Interval",
    "ServiceAvailabilityProfile",
    "SlotCheck",
    "LeaveRange",
    "StaffDateStatus",
    "StaffMember",
    "WorkDay",
    "BookingRequest",
    "BookingResult",
]
