"""Checkout state machine: prebook, guest details, payment.

The flow is strictly linear. ``start`` issues the prebook call and moves to
``details`` on success; ``submit_details`` validates the guest form and moves to
``payment``; ``enter_payment`` stores the checkout context and initializes the payment
widget exactly once. Prebook failures land in the terminal ``error`` step whose only
way out is navigating back to the hotel page.
"""
from __future__ import annotations

import logging
import re
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import httpx

from petotel.config.settings import Settings
from petotel.hotels.models import CheckoutContext, PrebookData
from petotel.hotels.normalizer import build_prebook_data, error_description
from petotel.services.liteapi_client import LiteApiClient, UpstreamError
from petotel.storage.session_store import CheckoutSessionStore, new_checkout_id

logger = logging.getLogger(__name__)

RATE_UNAVAILABLE_MESSAGE = (
    "This rate is no longer available. Please go back and select a different room."
)
PREBOOK_FAILED_MESSAGE = "Failed to prebook. Please try again."
NETWORK_ERROR_MESSAGE = "Network error. Please try again."
PAYMENT_INIT_FAILED_MESSAGE = "Failed to initialize payment. Please try again."

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


class CheckoutStep(str, Enum):
    PREBOOK = "prebook"
    DETAILS = "details"
    PAYMENT = "payment"
    ERROR = "error"


class CheckoutError(RuntimeError):
    """Base class for checkout flow failures."""


class InvalidTransitionError(CheckoutError):
    def __init__(self, action: str, step: CheckoutStep) -> None:
        super().__init__(f"Cannot {action} while checkout is in the '{step.value}' step")
        self.action = action
        self.step = step


class GuestDetailsError(ValueError):
    """Raised when the guest details form is incomplete."""


class PaymentInitError(CheckoutError):
    """Raised when the payment widget cannot be initialized."""


class OfferNotListedError(CheckoutError):
    """Raised when a selected offer is not among the offers shown for the hotel."""


@dataclass
class CheckoutRequest:
    """Parameters carried from the selected offer into checkout."""

    offer_id: str
    hotel_id: str
    checkin: str
    checkout: str
    adults: int = 2
    pet_type: str = "dog"
    pet_count: int = 1
    price: Optional[float] = None
    currency: Optional[str] = None
    room_name: str = ""
    hotel_name: str = ""

    def __post_init__(self) -> None:
        if not self.offer_id or not self.offer_id.strip():
            raise ValueError("offerId is required")

    def hotel_page_params(self) -> Dict[str, str]:
        return {
            "hotelId": self.hotel_id,
            "checkin": self.checkin,
            "checkout": self.checkout,
            "adults": str(self.adults),
            "petType": self.pet_type,
            "petCount": str(self.pet_count),
        }


@dataclass(frozen=True)
class GuestDetails:
    first_name: str
    last_name: str
    email: str

    @classmethod
    def parse(cls, first_name: Optional[str], last_name: Optional[str], email: Optional[str]) -> "GuestDetails":
        values = {
            "first_name": (first_name or "").strip(),
            "last_name": (last_name or "").strip(),
            "email": (email or "").strip(),
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise GuestDetailsError(f"Missing guest details: {', '.join(missing)}")
        if not _EMAIL_PATTERN.match(values["email"]):
            raise GuestDetailsError("email is not a valid address")
        return cls(**values)


PaymentInitializer = Callable[[PrebookData, str], Dict[str, Any]]


def payment_widget_config(settings: Settings) -> PaymentInitializer:
    """Return an initializer producing the browser payment widget configuration."""

    def _initialize(prebook: PrebookData, checkout_id: str) -> Dict[str, Any]:
        if not prebook.secret_key:
            raise PaymentInitError("Prebook response carried no payment secret key")
        return {
            "publicKey": settings.liteapi_public_key,
            "secretKey": prebook.secret_key,
            "returnUrl": settings.confirmation_url(checkout_id),
            "targetElement": "#payment-element",
            "appearance": {"theme": "flat"},
            "options": {"business": {"name": settings.business_name}},
        }

    return _initialize


class CheckoutFlow:
    """One checkout attempt for one selected offer."""

    def __init__(
        self,
        client: LiteApiClient,
        store: CheckoutSessionStore,
        request: CheckoutRequest,
        *,
        payment_initializer: PaymentInitializer,
        checkout_id: Optional[str] = None,
    ) -> None:
        self.client = client
        self.store = store
        self.request = request
        self.checkout_id = checkout_id or new_checkout_id()
        self._payment_initializer = payment_initializer
        self.step = CheckoutStep.PREBOOK
        self.prebook_data: Optional[PrebookData] = None
        self.guest: Optional[GuestDetails] = None
        self.error: Optional[str] = None
        self.payment_error: Optional[str] = None
        self.payment_config: Optional[Dict[str, Any]] = None
        self._payment_initialized = False

    def _require(self, step: CheckoutStep, action: str) -> None:
        if self.step is not step:
            raise InvalidTransitionError(action, self.step)

    def _fail(self, message: str) -> None:
        self.error = message
        self.step = CheckoutStep.ERROR

    async def start(self) -> CheckoutStep:
        """Issue the prebook request for the selected offer."""
        self._require(CheckoutStep.PREBOOK, "prebook")
        try:
            response = await self.client.prebook(self.request.offer_id)
        except (UpstreamError, httpx.HTTPError) as exc:
            logger.warning("Prebook for offer %s failed: %s", self.request.offer_id, exc)
            self._fail(NETWORK_ERROR_MESSAGE)
            return self.step

        if response.get("error"):
            self._fail(error_description(response) or RATE_UNAVAILABLE_MESSAGE)
            return self.step

        data = response.get("data")
        if not isinstance(data, dict) or not data:
            self._fail(PREBOOK_FAILED_MESSAGE)
            return self.step

        self.prebook_data = build_prebook_data(data)
        self.step = CheckoutStep.DETAILS
        logger.info(
            "Checkout %s prebooked offer %s as %s",
            self.checkout_id,
            self.request.offer_id,
            self.prebook_data.prebook_id,
        )
        return self.step

    def submit_details(
        self, first_name: Optional[str], last_name: Optional[str], email: Optional[str]
    ) -> CheckoutStep:
        self._require(CheckoutStep.DETAILS, "submit guest details")
        self.guest = GuestDetails.parse(first_name, last_name, email)
        self._payment_initialized = False
        self.step = CheckoutStep.PAYMENT
        return self.step

    def checkout_context(self) -> CheckoutContext:
        if self.prebook_data is None or self.guest is None:
            raise CheckoutError("Checkout context requires prebook data and guest details")
        return CheckoutContext(
            prebook_id=self.prebook_data.prebook_id,
            transaction_id=self.prebook_data.transaction_id,
            hotel_id=self.request.hotel_id,
            checkin=self.request.checkin,
            checkout=self.request.checkout,
            first_name=self.guest.first_name,
            last_name=self.guest.last_name,
            email=self.guest.email,
            hotel_name=self.request.hotel_name,
            pet_type=self.request.pet_type,
            pet_count=self.request.pet_count,
        )

    async def enter_payment(self) -> Optional[Dict[str, Any]]:
        """Store the checkout context and initialize payment, once per entry."""
        self._require(CheckoutStep.PAYMENT, "initialize payment")
        if self._payment_initialized:
            return self.payment_config
        context = self.checkout_context()
        self._payment_initialized = True
        self.payment_error = None

        try:
            await self.store.create(context, checkout_id=self.checkout_id)
            self.payment_config = self._payment_initializer(self.prebook_data, self.checkout_id)
        except (PaymentInitError, sqlite3.Error) as exc:
            logger.error("Payment initialization failed for checkout %s: %s", self.checkout_id, exc)
            self.payment_error = PAYMENT_INIT_FAILED_MESSAGE
            return None
        return self.payment_config

    async def retry_payment(self) -> Optional[Dict[str, Any]]:
        self._require(CheckoutStep.PAYMENT, "retry payment")
        if self.payment_error is None:
            return self.payment_config
        self._payment_initialized = False
        return await self.enter_payment()

    def to_dict(self) -> dict[str, object]:
        return {
            "checkoutId": self.checkout_id,
            "step": self.step.value,
            "error": self.error,
            "paymentError": self.payment_error,
            "hotelId": self.request.hotel_id,
            "hotelName": self.request.hotel_name,
            "roomName": self.request.room_name,
            "checkin": self.request.checkin,
            "checkout": self.request.checkout,
            "prebook": self.prebook_data.to_public_dict() if self.prebook_data else None,
            "payment": self.payment_config,
            "backToHotel": self.request.hotel_page_params() if self.step is CheckoutStep.ERROR else None,
        }
