"""
Availability API Server.

A FastAPI-based stand-in for the remote data platform: serves service
availability profiles, runs the availability engine for calendar and
slot queries, and records bookings.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel

from src.config import get_default_option, get_option_by_id, get_service_options, get_settings
from src.models.availability import (
    CandidateSlot,
    DateStatus,
    Interval,
    ServiceAvailabilityProfile,
    SlotCheck,
)
from src.models.booking import BookingRequest
from src.scheduling.classifier import is_date_open, is_window_blocked, valid_bookings
from src.scheduling.timeutils import parse_time
from src.services.availability import AvailabilityService
from src.services.profiles import (
    InMemoryProfileRepository,
    ProfileNotFoundError,
    build_sample_profiles,
)

# ============================================================================
# Data Models
# ============================================================================


class CalendarResponse(BaseModel):
    """Response model for calendar overlay queries."""

    service_id: str
    duration_minutes: int
    dates: Dict[str, DateStatus]


class SlotsResponse(BaseModel):
    """Response model for slot queries."""

    service_id: str
    date: date
    duration_minutes: int
    slots: List[CandidateSlot]
    total: int


class BookingResponse(BaseModel):
    """Response for an accepted booking."""

    success: bool
    booking_id: UUID
    service_id: str
    created_at: datetime


# ============================================================================
# In-Memory Data Store (Replace with a transactional database in production)
# ============================================================================


class AvailabilityStore:
    """
    In-memory profiles and bookings.

    Booking writes are serialized by a lock and re-checked against the
    latest profile, so two racing requests for the same interval cannot
    both succeed.
    """

    def __init__(self):
        self._repository = InMemoryProfileRepository()
        self._bookings: Dict[UUID, BookingRequest] = {}
        self._lock = asyncio.Lock()
        self._initialized = False

    # Public accessors for testing
    @property
    def repository(self) -> InMemoryProfileRepository:
        return self._repository

    @property
    def bookings(self) -> Dict[UUID, BookingRequest]:
        return self._bookings

    def _initialize_sample_profiles(self) -> None:
        """Load the demo profiles synchronously."""
        for profile in build_sample_profiles().values():
            self._repository.put(profile)
        self._initialized = True

    async def initialize(self) -> None:
        """Initialize with sample profile data."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return
            self._initialize_sample_profiles()
            logger.info(f"Initialized {len(self._repository.profiles)} availability profiles")

    def reset(self) -> None:
        self._repository.clear()
        self._bookings.clear()
        self._initialized = False

    async def get_profile(self, service_id: str) -> ServiceAvailabilityProfile:
        return await self._repository.get_profile(service_id)

    async def book(self, request: BookingRequest) -> Optional[UUID]:
        """
        Record a booking if its interval is still free.

        Returns:
            The new booking id, or None on conflict

        Raises:
            ProfileNotFoundError: if the service is unknown
            ValueError: if the date is closed or the interval is outside
                business hours
        """
        async with self._lock:
            profile = await self._repository.get_profile(request.service_id)
            hours = profile.business_hours

            if not is_date_open(request.booking_date, profile):
                raise ValueError("Service is closed on this date")
            if request.start < hours.start or request.end > hours.end:
                raise ValueError("Booking is outside business hours")

            existing = valid_bookings(profile.bookings_on(request.booking_date))
            if is_window_blocked(request.start, request.end, existing):
                return None

            key = request.booking_date.isoformat()
            booked_slots = dict(profile.booked_slots)
            booked_slots[key] = list(booked_slots.get(key, [])) + [
                Interval(start=request.start, end=request.end)
            ]
            self._repository.put(profile.model_copy(update={"booked_slots": booked_slots}))

            booking_id = uuid4()
            self._bookings[booking_id] = request
            return booking_id


# Global store instance
store = AvailabilityStore()

# Calendar and slot queries read the store through the engine service
availability_service = AvailabilityService(repository=store.repository)


# ============================================================================
# FastAPI Application
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Availability API Server")
    await store.initialize()
    yield
    logger.info("Shutting down Availability API Server")


app = FastAPI(
    title="BuzyBees Availability API",
    description="Service availability, calendar and booking API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _get_profile_or_404(service_id: str) -> ServiceAvailabilityProfile:
    try:
        return await store.get_profile(service_id)
    except ProfileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service availability not found",
        )


def _resolve_duration(
    service_id: str, duration: Optional[int], option_id: Optional[str]
) -> int:
    """Explicit duration wins, then the chosen option, then the default option."""
    if duration is not None:
        return duration
    option = get_option_by_id(option_id) if option_id else get_default_option(service_id)
    if option is None:
        raise HTTPException(
            status_code=422,
            detail="duration or a known option_id is required",
        )
    return option["duration_minutes"]


# ============================================================================
# API Endpoints
# ============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.get("/api/v1/services/{service_id}/options")
async def list_options(service_id: str):
    """List the bookable options of a service."""
    return {"service_id": service_id, "options": get_service_options(service_id)}


@app.get("/api/v1/services/{service_id}/availability")
async def get_availability_profile(service_id: str):
    """Raw business rules and booked intervals for a service."""
    profile = await _get_profile_or_404(service_id)
    return profile.to_wire()


@app.get("/api/v1/services/{service_id}/calendar", response_model=CalendarResponse)
async def get_calendar(
    service_id: str,
    duration: Optional[int] = Query(default=None, description="Service duration in minutes"),
    option_id: Optional[str] = Query(default=None, description="Service option ID"),
    window_days: Optional[int] = Query(default=None, ge=1, le=366),
):
    """
    Status of every date in the booking window.

    Unknown services come back with every date closed.
    """
    duration_minutes = _resolve_duration(service_id, duration, option_id)
    dates = await availability_service.get_calendar(service_id, duration_minutes, window_days)
    return CalendarResponse(
        service_id=service_id,
        duration_minutes=duration_minutes,
        dates=dates,
    )


@app.get("/api/v1/services/{service_id}/slots", response_model=SlotsResponse)
async def get_slots(
    service_id: str,
    date: date = Query(..., description="Date to list slots for (YYYY-MM-DD)"),
    duration: Optional[int] = Query(default=None, description="Service duration in minutes"),
    option_id: Optional[str] = Query(default=None, description="Service option ID"),
):
    """Free slots on a date, ordered by start time."""
    duration_minutes = _resolve_duration(service_id, duration, option_id)
    slots = await availability_service.get_slots(service_id, date, duration_minutes)
    return SlotsResponse(
        service_id=service_id,
        date=date,
        duration_minutes=duration_minutes,
        slots=slots,
        total=len(slots),
    )


@app.get("/api/v1/services/{service_id}/check", response_model=SlotCheck)
async def check_time(
    service_id: str,
    date: date = Query(..., description="Requested date (YYYY-MM-DD)"),
    time: str = Query(..., description="Requested start time (HH:MM)"),
    duration: Optional[int] = Query(default=None, description="Service duration in minutes"),
    option_id: Optional[str] = Query(default=None, description="Service option ID"),
):
    """Check a requested time and suggest alternatives when it is taken."""
    duration_minutes = _resolve_duration(service_id, duration, option_id)
    try:
        start = parse_time(time)
    except ValueError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e),
        )

    return await availability_service.check_time(service_id, date, start, duration_minutes)


@app.post(
    "/api/v1/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(request: BookingRequest):
    """
    Record a booking.

    Writes are arbitrated here: an interval overlapping an existing
    booking is rejected with 409.
    """
    try:
        booking_id = await store.book(request)
    except ProfileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service availability not found",
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    if booking_id is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Slot is already booked",
        )

    logger.info(
        f"Booking {booking_id} recorded for service {request.service_id} "
        f"on {request.booking_date}"
    )
    return BookingResponse(
        success=True,
        booking_id=booking_id,
        service_id=request.service_id,
        created_at=datetime.now(),
    )


# ============================================================================
# Run Server
# ============================================================================


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the availability API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.availability_server:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
