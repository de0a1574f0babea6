"""
Booking-related data models.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from src.models.availability import TimeOfDay
from src.scheduling.timeutils import format_time


class BookingRequest(BaseModel):
    """
    A customer's request to reserve a chosen slot.

    Built by the caller once a date, slot and service are picked; the
    engine never performs the write itself.
    """

    customer_id: str = Field(min_length=1, description="Customer identity")
    customer_name: Optional[str] = Field(default=None, max_length=200)
    service_id: str = Field(min_length=1, description="Service being booked")
    option_id: Optional[str] = Field(default=None, description="Chosen service option")
    booking_date: date = Field(description="Date of the appointment")
    start: TimeOfDay
    end: TimeOfDay
    notes: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def check_interval(self) -> "BookingRequest":
        if self.start >= self.end:
            raise ValueError("booking start must be before end")
        return self

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def formatted_time(self) -> str:
        """Human-readable date and time range."""
        return (
            f"{self.booking_date.strftime('%A %d %B %Y')} "
            f"{format_time(self.start)}-{format_time(self.end)}"
        )


class BookingResult(BaseModel):
    """
    Result of a booking attempt.
    """

    success: bool = Field(description="Whether booking was successful")
    booking_id: Optional[UUID] = Field(default=None, description="Booking confirmation ID")
    message: str = Field(description="Human-readable result message")
    error_code: Optional[str] = Field(default=None, description="Error code if failed")
