"""
Unit tests for the availability and booking models.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from src.models.availability import CandidateSlot, Interval, ServiceAvailabilityProfile
from src.models.booking import BookingRequest


class TestInterval:
    """Test interval parsing and serialization."""

    def test_times_are_stored_as_minutes(self):
        interval = Interval(start="10:30", end="11:15")
        assert interval.start == 630
        assert interval.end == 675
        assert interval.length_minutes == 45

    def test_times_serialize_as_hhmm(self):
        interval = Interval(start="09:00", end="09:45")
        assert interval.model_dump(mode="json") == {"start": "09:00", "end": "09:45"}

    def test_malformed_interval_is_kept_but_flagged(self):
        interval = Interval(start="12:00", end="11:00")
        assert interval.is_well_formed is False

    def test_invalid_time_is_rejected(self):
        with pytest.raises(ValidationError):
            Interval(start="25:00", end="26:00")


class TestServiceAvailabilityProfile:
    """Test profile parsing from the platform's JSON shape."""

    def test_parses_wire_format(self):
        profile = ServiceAvailabilityProfile.model_validate(
            {
                "service_id": "1",
                "business_hours": {"start": "09:00", "end": "18:00"},
                "closed_days": [0, 6],
                "special_closures": ["2025-07-19"],
                "booked_slots": {"2025-07-15": [{"start": "10:00", "end": "11:00"}]},
            }
        )
        assert profile.business_hours.start == 540
        assert profile.closed_days == frozenset({0, 6})
        assert "2025-07-19" in profile.special_closures
        assert profile.bookings_on(date(2025, 7, 15))[0].start == 600
        assert profile.bookings_on(date(2025, 7, 16)) == []

    def test_to_wire_round_trips_the_shape(self):
        wire = {
            "service_id": "2",
            "business_hours": {"start": "10:00", "end": "19:00"},
            "closed_days": [0, 1],
            "special_closures": ["2025-07-25"],
            "booked_slots": {"2025-07-15": [{"start": "11:00", "end": "12:00"}]},
        }
        assert ServiceAvailabilityProfile.model_validate(wire).to_wire() == wire

    def test_profile_is_immutable(self):
        profile = ServiceAvailabilityProfile(
            business_hours=Interval(start="09:00", end="18:00")
        )
        with pytest.raises(ValidationError):
            profile.service_id = "other"


class TestCandidateSlot:
    """Test candidate slot invariants."""

    def test_exposes_boundary_strings(self):
        slot = CandidateSlot(start=585, end=630, duration_minutes=45)
        assert slot.start_time == "09:45"
        assert slot.end_time == "10:30"

    def test_length_must_match_duration(self):
        with pytest.raises(ValidationError):
            CandidateSlot(start=540, end=600, duration_minutes=45)


class TestBookingRequest:
    """Test booking request validation."""

    def test_valid_request(self):
        request = BookingRequest(
            customer_id="cust-1",
            service_id="1",
            booking_date=date(2025, 7, 15),
            start="10:30",
            end="11:15",
        )
        assert request.duration_minutes == 45
        assert request.model_dump(mode="json")["start"] == "10:30"

    def test_start_must_precede_end(self):
        with pytest.raises(ValidationError):
            BookingRequest(
                customer_id="cust-1",
                service_id="1",
                booking_date=date(2025, 7, 15),
                start="11:00",
                end="11:00",
            )

    def test_customer_is_required(self):
        with pytest.raises(ValidationError):
            BookingRequest(
                customer_id="",
                service_id="1",
                booking_date=date(2025, 7, 15),
                start="10:00",
                end="11:00",
            )
