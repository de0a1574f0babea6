"""
Availability-related data models.

Profiles are owned by the remote data platform; the engine treats them
as read-only snapshots.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Dict, FrozenSet, List, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)

from src.scheduling.timeutils import format_time, parse_time

# Minutes since midnight internally, HH:MM on the wire
TimeOfDay = Annotated[
    int,
    BeforeValidator(parse_time),
    PlainSerializer(format_time, return_type=str, when_used="json-unless-none"),
]


class DateStatus(str, Enum):
    """Calendar state of a single date for a given service and duration."""

    AVAILABLE = "available"
    FULLY_BOOKED = "fully_booked"
    CLOSED = "closed"


class Interval(BaseModel):
    """
    A start/end pair of times of day.

    Booked intervals come from external data and may be malformed
    (``start >= end``); they are kept and flagged rather than rejected.
    """

    model_config = ConfigDict(frozen=True)

    start: TimeOfDay
    end: TimeOfDay

    @property
    def is_well_formed(self) -> bool:
        return self.start < self.end

    @property
    def length_minutes(self) -> int:
        return self.end - self.start


BusinessHours = Interval


class ServiceAvailabilityProfile(BaseModel):
    """
    Business rules and existing bookings for one service.
    """

    model_config = ConfigDict(frozen=True)

    service_id: str = Field(default="", description="Service this profile belongs to")
    business_hours: BusinessHours = Field(description="Daily open/close window")
    closed_days: FrozenSet[int] = Field(
        default_factory=frozenset,
        description="Weekdays always closed (0=Sunday .. 6=Saturday)",
    )
    special_closures: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="ISO dates closed regardless of weekday",
    )
    booked_slots: Dict[str, List[Interval]] = Field(
        default_factory=dict,
        description="ISO date -> intervals already reserved",
    )

    def bookings_on(self, day: date) -> List[Interval]:
        """Booked intervals for a date, in input order."""
        return self.booked_slots.get(day.isoformat(), [])

    def to_wire(self) -> dict:
        """Serialize to the platform's JSON shape."""
        data = self.model_dump(mode="json")
        data["closed_days"] = sorted(self.closed_days)
        data["special_closures"] = sorted(self.special_closures)
        return data


class CandidateSlot(BaseModel):
    """
    One bookable interval, valid only for the date, service and duration
    it was generated from.
    """

    model_config = ConfigDict(frozen=True)

    start: TimeOfDay
    end: TimeOfDay
    duration_minutes: int = Field(gt=0)

    @model_validator(mode="after")
    def check_length(self) -> "CandidateSlot":
        if self.end - self.start != self.duration_minutes:
            raise ValueError("slot length must equal duration_minutes")
        return self

    @property
    def start_time(self) -> str:
        return format_time(self.start)

    @property
    def end_time(self) -> str:
        return format_time(self.end)


class SlotCheck(BaseModel):
    """
    Result of checking a specific requested start time.
    """

    date: date
    start: TimeOfDay
    duration_minutes: int
    is_available: bool = Field(description="Whether the requested time can be booked")
    alternatives: List[CandidateSlot] = Field(
        default_factory=list,
        description="Free slots closest to the requested time when it is taken",
    )


WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)


class StaffDateStatus(str, Enum):
    """Calendar state of a date for one staff member."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    LEAVE = "leave"


class WorkDay(BaseModel):
    """Working hours of a staff member on one weekday."""

    model_config = ConfigDict(frozen=True)

    is_working: bool = False
    start: TimeOfDay = 9 * 60
    end: TimeOfDay = 17 * 60

    @property
    def hours(self) -> Interval:
        return Interval(start=self.start, end=self.end)


class LeaveRange(BaseModel):
    """A leave period; both ``start_date`` and ``end_date`` are days off."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    start_date: date
    end_date: date
    type: str = "leave"

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class StaffMember(BaseModel):
    """
    A staff member's weekly schedule and leave.

    ``work_schedule`` is keyed by lower-case weekday name; a weekday
    missing from it has no known hours.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    work_schedule: Dict[str, WorkDay] = Field(default_factory=dict)
    leave_dates: List[LeaveRange] = Field(default_factory=list)


class StaffDayAvailability(BaseModel):
    """Whether a staff member works on a date, and during which hours."""

    is_available: bool
    working_hours: Optional[Interval] = None
    reason: Optional[str] = None


class StaffSlot(BaseModel):
    """A window in a staff member's working day, free or booked."""

    model_config = ConfigDict(frozen=True)

    start: TimeOfDay
    end: TimeOfDay
    duration_minutes: int = Field(gt=0)
    available: bool

    @property
    def start_time(self) -> str:
        return format_time(self.start)
