"""Checkout and booking confirmation flows."""

from .confirmation import ConfirmationFlow, ConfirmationResult, ConfirmationStatus, build_book_request
from .machine import (
    CheckoutError,
    CheckoutFlow,
    CheckoutRequest,
    CheckoutStep,
    GuestDetails,
    GuestDetailsError,
    InvalidTransitionError,
    OfferNotListedError,
    PaymentInitError,
    payment_widget_config,
)

__all__ = [
    "CheckoutError",
    "CheckoutFlow",
    "CheckoutRequest",
    "CheckoutStep",
    "ConfirmationFlow",
    "ConfirmationResult",
    "ConfirmationStatus",
    "GuestDetails",
    "GuestDetailsError",
    "InvalidTransitionError",
    "OfferNotListedError",
    "PaymentInitError",
    "build_book_request",
    "payment_widget_config",
]
