"""Booking completion for a stored checkout context."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from petotel.hotels.models import BookingData, CheckoutContext
from petotel.hotels.normalizer import build_booking_data, error_description
from petotel.services.liteapi_client import LiteApiClient, UpstreamError
from petotel.storage.session_store import CheckoutSessionStore

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired. Please start a new booking."
BOOKING_FAILED_MESSAGE = "Booking failed. Please contact support."
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response. Please contact support."
NETWORK_ERROR_MESSAGE = "Network error. Please try again or contact support."


class ConfirmationStatus(str, Enum):
    CONFIRMED = "confirmed"
    SESSION_EXPIRED = "session_expired"
    FAILED = "failed"


@dataclass
class ConfirmationResult:
    status: ConfirmationStatus
    booking: Optional[BookingData] = None
    error: Optional[str] = None
    context: Optional[CheckoutContext] = None

    def to_dict(self) -> dict[str, object]:
        guest = None
        if self.context is not None:
            guest = {
                "firstName": self.context.first_name,
                "lastName": self.context.last_name,
                "email": self.context.email,
                "petType": self.context.pet_type,
                "petCount": self.context.pet_count,
                "hotelName": self.context.hotel_name,
            }
        return {
            "status": self.status.value,
            "booking": self.booking.to_dict() if self.booking else None,
            "error": self.error,
            "guest": guest,
        }


def build_book_request(context: CheckoutContext) -> Dict[str, Any]:
    holder = {
        "firstName": context.first_name,
        "lastName": context.last_name,
        "email": context.email,
    }
    return {
        "prebookId": context.prebook_id,
        "holder": holder,
        "payment": {"method": "TRANSACTION_ID", "transactionId": context.transaction_id},
        "guests": [{"occupancyNumber": 1, **holder}],
    }


class ConfirmationFlow:
    """Completes one booking per instance.

    Callers arriving while an attempt is in flight share it, and a confirmed booking is
    returned as-is from then on. A failed or expired attempt is dropped once it settles
    so the next call reads the stored context again and retries the book call.
    """

    def __init__(self, client: LiteApiClient, store: CheckoutSessionStore, checkout_id: str) -> None:
        self.client = client
        self.store = store
        self.checkout_id = checkout_id
        self._attempt: Optional[asyncio.Task[ConfirmationResult]] = None

    @property
    def attempted(self) -> bool:
        return self._attempt is not None

    async def complete(self) -> ConfirmationResult:
        if self._attempt is None:
            self._attempt = asyncio.ensure_future(self._complete())
        attempt = self._attempt
        try:
            result = await asyncio.shield(attempt)
        except Exception:
            self._release(attempt)
            raise
        if result.status is not ConfirmationStatus.CONFIRMED:
            self._release(attempt)
        return result

    def _release(self, attempt: asyncio.Task[ConfirmationResult]) -> None:
        if self._attempt is attempt:
            self._attempt = None

    async def _complete(self) -> ConfirmationResult:
        context = await self.store.read(self.checkout_id)
        if context is None:
            logger.info("No checkout context for %s; session expired", self.checkout_id)
            return ConfirmationResult(ConfirmationStatus.SESSION_EXPIRED, error=SESSION_EXPIRED_MESSAGE)

        try:
            response = await self.client.book(build_book_request(context))
        except (UpstreamError, httpx.HTTPError) as exc:
            logger.warning("Book call for checkout %s failed: %s", self.checkout_id, exc)
            return ConfirmationResult(ConfirmationStatus.FAILED, error=NETWORK_ERROR_MESSAGE, context=context)

        if response.get("error"):
            return ConfirmationResult(
                ConfirmationStatus.FAILED,
                error=error_description(response) or BOOKING_FAILED_MESSAGE,
                context=context,
            )

        data = response.get("data")
        if not isinstance(data, dict) or not data:
            return ConfirmationResult(ConfirmationStatus.FAILED, error=UNEXPECTED_RESPONSE_MESSAGE, context=context)

        booking = build_booking_data(data)
        await self.store.delete(self.checkout_id)
        logger.info("Checkout %s confirmed as booking %s", self.checkout_id, booking.booking_id)
        return ConfirmationResult(ConfirmationStatus.CONFIRMED, booking=booking, context=context)
