"""Utilities to transform raw LiteAPI payloads into normalised records."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .models import (
    BookingData,
    HotelBrief,
    HotelDetail,
    HotelPolicy,
    HotelRoom,
    Place,
    PrebookData,
)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def first_total(retail_rate: Any) -> tuple[Optional[float], Optional[str]]:
    """Return ``(amount, currency)`` of the first ``retailRate.total`` entry."""
    totals = _as_list(_as_dict(retail_rate).get("total"))
    if not totals:
        return None, None
    entry = _as_dict(totals[0])
    return _to_float(entry.get("amount")), _optional_str(entry.get("currency"))


def cancellation_terms(policies: Any) -> tuple[str, Optional[str]]:
    """Return ``(refundable_tag, cancel_time)``; a missing block is non-refundable."""
    block = _as_dict(policies)
    tag = block.get("refundableTag") or "NRFN"
    infos = _as_list(block.get("cancelPolicyInfos"))
    cancel_time = _as_dict(infos[0]).get("cancelTime") if infos else None
    return str(tag), _optional_str(cancel_time)


def build_places(payload: Dict[str, Any]) -> List[Place]:
    places: List[Place] = []
    for entry in _as_list(_as_dict(payload).get("data")):
        entry = _as_dict(entry)
        place_id = entry.get("placeId") or entry.get("id")
        if not place_id:
            continue
        places.append(
            Place(
                place_id=str(place_id),
                display_name=str(entry.get("displayName") or entry.get("name") or ""),
                formatted_address=str(entry.get("formattedAddress") or ""),
            )
        )
    return places


def build_hotel_brief(entry: Dict[str, Any]) -> HotelBrief:
    tags = entry.get("tags")
    return HotelBrief(
        id=str(entry.get("id") or ""),
        name=_optional_str(entry.get("name")),
        main_photo=_optional_str(entry.get("main_photo")),
        address=_optional_str(entry.get("address")),
        rating=_to_float(entry.get("rating")),
        tags=[str(tag) for tag in tags] if isinstance(tags, list) else None,
        story=_optional_str(entry.get("story")),
    )


def build_hotel_briefs(entries: Iterable[Any]) -> Dict[str, HotelBrief]:
    briefs: Dict[str, HotelBrief] = {}
    for entry in entries or []:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        brief = build_hotel_brief(entry)
        briefs.setdefault(brief.id, brief)
    return briefs


def _build_policy(entry: Any) -> HotelPolicy:
    entry = _as_dict(entry)
    return HotelPolicy(
        name=_optional_str(entry.get("name")),
        description=_optional_str(entry.get("description")),
        pets_allowed=_optional_str(entry.get("pets_allowed")),
    )


def _build_room(entry: Any) -> HotelRoom:
    entry = _as_dict(entry)
    photos = [
        photo["url"]
        for photo in _as_list(entry.get("photos"))
        if isinstance(photo, dict) and photo.get("url")
    ]
    return HotelRoom(id=entry.get("id"), room_name=_optional_str(entry.get("roomName")), photos=photos)


def build_hotel_detail(payload: Dict[str, Any]) -> HotelDetail:
    """Build a :class:`HotelDetail` from the ``data`` object of the hotel endpoint."""
    location = _as_dict(payload.get("location"))
    images = [
        image["url"]
        for image in _as_list(payload.get("hotelImages"))
        if isinstance(image, dict) and image.get("url")
    ]
    pets_allowed = payload.get("petsAllowed")
    return HotelDetail(
        id=str(payload.get("id") or ""),
        name=str(payload.get("name") or ""),
        description=_optional_str(payload.get("hotelDescription")),
        important_information=_optional_str(payload.get("hotelImportantInformation")),
        main_photo=_optional_str(payload.get("main_photo")),
        images=images,
        city=_optional_str(payload.get("city")),
        country=_optional_str(payload.get("country")),
        address=_optional_str(payload.get("address")),
        facilities=[str(item) for item in _as_list(payload.get("hotelFacilities")) if item is not None],
        star_rating=_to_float(payload.get("starRating")),
        latitude=_to_float(location.get("latitude")),
        longitude=_to_float(location.get("longitude")),
        rooms=[_build_room(room) for room in _as_list(payload.get("rooms"))],
        policies=[_build_policy(policy) for policy in _as_list(payload.get("policies"))],
        pets_allowed=pets_allowed if isinstance(pets_allowed, bool) else None,
        raw=payload,
    )


def extract_hotel_detail(response: Dict[str, Any]) -> Optional[HotelDetail]:
    """Return the detail record from a hotel endpoint envelope, if any."""
    data = _as_dict(response).get("data")
    if not isinstance(data, dict) or not data:
        return None
    return build_hotel_detail(data)


def build_prebook_data(payload: Dict[str, Any]) -> PrebookData:
    refundable_tag, cancel_time = "NRFN", None
    room_types = _as_list(payload.get("roomTypes"))
    if room_types:
        rates = _as_list(_as_dict(room_types[0]).get("rates"))
        if rates:
            refundable_tag, cancel_time = cancellation_terms(_as_dict(rates[0]).get("cancellationPolicies"))
    return PrebookData(
        prebook_id=str(payload.get("prebookId") or ""),
        transaction_id=str(payload.get("transactionId") or ""),
        secret_key=str(payload.get("secretKey") or ""),
        offer_id=_optional_str(payload.get("offerId")),
        hotel_id=_optional_str(payload.get("hotelId")),
        price=_to_float(payload.get("price")),
        commission=_to_float(payload.get("commission")),
        currency=_optional_str(payload.get("currency")),
        payment_types=[str(item) for item in _as_list(payload.get("paymentTypes"))],
        refundable_tag=refundable_tag,
        cancel_time=cancel_time,
        raw=payload,
    )


def build_booking_data(payload: Dict[str, Any]) -> BookingData:
    hotel = _as_dict(payload.get("hotel"))
    refundable_tag: Optional[str] = None
    cancel_time: Optional[str] = None
    if payload.get("cancellationPolicies"):
        refundable_tag, cancel_time = cancellation_terms(payload.get("cancellationPolicies"))
    return BookingData(
        booking_id=str(payload.get("bookingId") or ""),
        status=_optional_str(payload.get("status")),
        hotel_confirmation_code=_optional_str(payload.get("hotelConfirmationCode")),
        checkin=_optional_str(payload.get("checkin")),
        checkout=_optional_str(payload.get("checkout")),
        hotel_id=_optional_str(hotel.get("hotelId")),
        hotel_name=_optional_str(hotel.get("name")),
        price=_to_float(payload.get("price")),
        currency=_optional_str(payload.get("currency")),
        refundable_tag=refundable_tag,
        cancel_time=cancel_time,
        raw=payload,
    )


def error_description(envelope: Dict[str, Any]) -> Optional[str]:
    """Return the human-readable description of an upstream error envelope."""
    error = _as_dict(envelope).get("error")
    if isinstance(error, str):
        return error.strip() or None
    if isinstance(error, dict):
        value = error.get("description")
        if isinstance(value, str) and value.strip():
            return value
    return None
