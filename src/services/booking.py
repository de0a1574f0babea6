"""
Booking Service - Submits a chosen slot to the persistence platform.

Availability is computed from a snapshot, so the service re-checks the
slot before submitting; the platform still arbitrates concurrent writes
and may answer with a conflict.
"""

from typing import Optional
from uuid import UUID

import httpx
from loguru import logger

from src.config import get_option_by_id, get_settings
from src.models.booking import BookingRequest, BookingResult
from src.scheduling.timeutils import format_time
from src.services.availability import AvailabilityService, get_availability_service


class BookingConflictError(Exception):
    """The platform rejected the booking because the interval is taken."""


class BookingGateway:
    """
    Async client for the platform's booking endpoint.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.settings = get_settings()
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.availability_api_url,
                timeout=httpx.Timeout(self.settings.availability_api_timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def submit(self, request: BookingRequest) -> UUID:
        """
        Post a booking request.

        Returns:
            The booking id assigned by the platform

        Raises:
            BookingConflictError: if the platform reports a conflict (409)
            httpx.HTTPError: on any other failure
        """
        client = await self._get_client()

        try:
            response = await client.post(
                "/api/v1/bookings", json=request.model_dump(mode="json")
            )
            response.raise_for_status()
            return UUID(response.json()["booking_id"])

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 409:
                logger.warning(
                    f"Booking conflict for service {request.service_id} "
                    f"on {request.booking_date}"
                )
                raise BookingConflictError(str(e)) from e
            logger.error(f"HTTP error submitting booking: {e}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error submitting booking: {e}")
            raise


class BookingService:
    """
    Service for confirming a chosen slot.
    """

    def __init__(
        self,
        availability_service: Optional[AvailabilityService] = None,
        gateway: Optional[BookingGateway] = None,
    ):
        self._availability_service = availability_service or get_availability_service()
        self._gateway = gateway or BookingGateway()

    async def book_appointment(self, request: BookingRequest) -> BookingResult:
        """
        Book an appointment - re-checks the slot then submits it.

        Args:
            request: The booking request built from the chosen slot

        Returns:
            BookingResult with success status
        """
        try:
            check = await self._availability_service.check_time(
                request.service_id,
                request.booking_date,
                format_time(request.start),
                request.duration_minutes,
                max_alternatives=0,
            )
            if not check.is_available:
                return BookingResult(
                    success=False,
                    message="This time is no longer available. Please choose another slot.",
                    error_code="SLOT_UNAVAILABLE",
                )

            booking_id = await self._gateway.submit(request)

            option = get_option_by_id(request.option_id) if request.option_id else None
            option_name = option["name"] if option else f"service {request.service_id}"

            logger.info("=" * 60)
            logger.info("BOOKING SUBMITTED")
            logger.info("=" * 60)
            logger.info(f"Booking ID: {booking_id}")
            logger.info(f"Customer: {request.customer_name or request.customer_id}")
            logger.info(f"Service: {option_name}")
            logger.info(f"Date/Time: {request.formatted_time}")
            logger.info(f"Duration: {request.duration_minutes} minutes")
            logger.info("=" * 60)

            return BookingResult(
                success=True,
                booking_id=booking_id,
                message=f"Appointment confirmed for {request.formatted_time}.",
            )

        except BookingConflictError:
            return BookingResult(
                success=False,
                message="This time was just booked by someone else. Please choose another slot.",
                error_code="BOOKING_CONFLICT",
            )
        except Exception as e:
            logger.error(f"Booking error: {e}")
            return BookingResult(
                success=False,
                message="Something went wrong. Please try again.",
                error_code="BOOKING_ERROR",
            )


# Singleton instance
_booking_service: Optional[BookingService] = None


def get_booking_service() -> BookingService:
    """Get the singleton booking service instance."""
    global _booking_service
    if _booking_service is None:
        _booking_service = BookingService()
    return _booking_service
