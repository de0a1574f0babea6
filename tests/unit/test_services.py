"""
Unit tests for the profile repositories, availability and booking services.

The remote platform is stubbed with ``httpx.MockTransport``.
"""

from datetime import date, timedelta
from uuid import uuid4

import httpx
import pytest

from src.models.availability import DateStatus
from src.models.booking import BookingRequest
from src.services.availability import AvailabilityService
from src.services.booking import BookingConflictError, BookingGateway, BookingService
from src.services.profiles import (
    HttpProfileRepository,
    InMemoryProfileRepository,
    ProfileNotFoundError,
    build_sample_profiles,
)

PROFILE_JSON = {
    "business_hours": {"start": "09:00", "end": "18:00"},
    "closed_days": [0],
    "special_closures": ["2025-07-19"],
    "booked_slots": {"2025-07-15": [{"start": "10:30", "end": "11:15"}]},
}


def _platform(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/v1/services/1/availability":
        return httpx.Response(200, json=PROFILE_JSON)
    if request.url.path == "/api/v1/services/boom/availability":
        return httpx.Response(500, json={"detail": "boom"})
    return httpx.Response(404, json={"detail": "Service availability not found"})


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


@pytest.fixture
def future_day() -> date:
    return date.today() + timedelta(days=3)


class TestInMemoryProfileRepository:
    """Test the in-memory repository."""

    @pytest.mark.asyncio
    async def test_returns_stored_profile(self, make_profile):
        profile = make_profile(service_id="1")
        repository = InMemoryProfileRepository([profile])

        assert await repository.get_profile("1") is profile

    @pytest.mark.asyncio
    async def test_unknown_service_raises(self):
        repository = InMemoryProfileRepository()

        with pytest.raises(ProfileNotFoundError) as exc_info:
            await repository.get_profile("missing")
        assert exc_info.value.service_id == "missing"


class TestHttpProfileRepository:
    """Test the HTTP repository against a stubbed platform."""

    @pytest.mark.asyncio
    async def test_parses_profile(self):
        repository = HttpProfileRepository(client=_mock_client(_platform))

        profile = await repository.get_profile("1")

        assert profile.service_id == "1"
        assert profile.business_hours.start == 540
        assert profile.closed_days == frozenset({0})
        await repository.close()

    @pytest.mark.asyncio
    async def test_404_is_profile_not_found(self):
        repository = HttpProfileRepository(client=_mock_client(_platform))

        with pytest.raises(ProfileNotFoundError):
            await repository.get_profile("unknown")

    @pytest.mark.asyncio
    async def test_server_error_propagates(self):
        repository = HttpProfileRepository(client=_mock_client(_platform))

        with pytest.raises(httpx.HTTPStatusError):
            await repository.get_profile("boom")


class TestAvailabilityService:
    """Test the availability facade."""

    @pytest.mark.asyncio
    async def test_calendar_for_known_service(self, make_profile, today):
        service = AvailabilityService(
            InMemoryProfileRepository([make_profile(service_id="1", closed_days=[0])])
        )

        calendar = await service.get_calendar("1", 45, window_days=7, today=today)

        assert len(calendar) == 7
        assert calendar["2025-07-20"] == DateStatus.CLOSED
        assert calendar["2025-07-15"] == DateStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_missing_profile_degrades_to_closed(self, today):
        service = AvailabilityService(InMemoryProfileRepository())

        calendar = await service.get_calendar("nope", 45, window_days=5, today=today)

        assert set(calendar.values()) == {DateStatus.CLOSED}
        assert await service.get_slots("nope", today, 45) == []
        assert await service.get_open_dates("nope", window_days=5) == []

    @pytest.mark.asyncio
    async def test_slots_for_future_date(self, make_profile, future_day):
        profile = make_profile(
            service_id="1",
            booked_slots={future_day.isoformat(): [{"start": "10:30", "end": "11:15"}]},
        )
        service = AvailabilityService(InMemoryProfileRepository([profile]))

        slots = await service.get_slots("1", future_day, 45)

        assert len(slots) == 11
        assert await service.get_date_status("1", future_day, 45) == DateStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_check_time(self, make_profile, future_day):
        profile = make_profile(
            service_id="1",
            booked_slots={future_day.isoformat(): [{"start": "10:30", "end": "11:15"}]},
        )
        service = AvailabilityService(InMemoryProfileRepository([profile]))

        check = await service.check_time("1", future_day, "10:30", 45)

        assert check.is_available is False
        assert len(check.alternatives) == 3

    @pytest.mark.asyncio
    async def test_marked_dates(self, make_profile):
        service = AvailabilityService(InMemoryProfileRepository([make_profile(service_id="1")]))

        marks = await service.get_marked_dates("1", 45, window_days=3)

        assert len(marks) == 3
        assert all(mark["status"] == "available" for mark in marks.values())


class TestBookingGateway:
    """Test booking submission to a stubbed platform."""

    def _request(self) -> BookingRequest:
        return BookingRequest(
            customer_id="cust-1",
            service_id="1",
            booking_date=date(2025, 7, 15),
            start="09:00",
            end="09:45",
        )

    @pytest.mark.asyncio
    async def test_returns_booking_id(self):
        booking_id = uuid4()
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent["body"] = request.content
            return httpx.Response(201, json={"booking_id": str(booking_id)})

        gateway = BookingGateway(client=_mock_client(handler))

        assert await gateway.submit(self._request()) == booking_id
        assert b'"start":"09:00"' in sent["body"].replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_conflict_raises(self):
        gateway = BookingGateway(
            client=_mock_client(lambda request: httpx.Response(409, json={"detail": "taken"}))
        )

        with pytest.raises(BookingConflictError):
            await gateway.submit(self._request())


class TestBookingService:
    """Test the booking flow."""

    def _service(self, make_profile, day: date, handler) -> BookingService:
        profile = make_profile(
            service_id="1",
            booked_slots={day.isoformat(): [{"start": "10:30", "end": "11:15"}]},
        )
        availability = AvailabilityService(InMemoryProfileRepository([profile]))
        return BookingService(availability, BookingGateway(client=_mock_client(handler)))

    def _request(self, day: date, start: str, end: str) -> BookingRequest:
        return BookingRequest(
            customer_id="cust-1",
            customer_name="Anna Andersson",
            service_id="1",
            option_id="opt_1_1",
            booking_date=day,
            start=start,
            end=end,
        )

    @pytest.mark.asyncio
    async def test_successful_booking(self, make_profile, future_day):
        booking_id = uuid4()
        service = self._service(
            make_profile,
            future_day,
            lambda request: httpx.Response(201, json={"booking_id": str(booking_id)}),
        )

        result = await service.book_appointment(self._request(future_day, "09:00", "09:45"))

        assert result.success is True
        assert result.booking_id == booking_id

    @pytest.mark.asyncio
    async def test_taken_slot_is_not_submitted(self, make_profile, future_day):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(201, json={"booking_id": str(uuid4())})

        service = self._service(make_profile, future_day, handler)

        result = await service.book_appointment(self._request(future_day, "10:30", "11:15"))

        assert result.success is False
        assert result.error_code == "SLOT_UNAVAILABLE"
        assert calls == []

    @pytest.mark.asyncio
    async def test_platform_conflict(self, make_profile, future_day):
        service = self._service(
            make_profile, future_day, lambda request: httpx.Response(409, json={})
        )

        result = await service.book_appointment(self._request(future_day, "09:00", "09:45"))

        assert result.success is False
        assert result.error_code == "BOOKING_CONFLICT"

    @pytest.mark.asyncio
    async def test_platform_failure(self, make_profile, future_day):
        service = self._service(
            make_profile, future_day, lambda request: httpx.Response(500, json={})
        )

        result = await service.book_appointment(self._request(future_day, "09:00", "09:45"))

        assert result.success is False
        assert result.error_code == "BOOKING_ERROR"


class TestSampleProfiles:
    """Test the demo profiles served by the local platform."""

    def test_three_services(self, today):
        profiles = build_sample_profiles(today)
        assert sorted(profiles) == ["1", "2", "3"]

    def test_bookings_are_in_the_future(self, today):
        for profile in build_sample_profiles(today).values():
            assert all(day > today.isoformat() for day in profile.booked_slots)
