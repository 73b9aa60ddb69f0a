"""Room/offer grouping and representative pricing over rate search results."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import GroupedRoom, HotelRoom, RatePrice, RoomOffer
from .normalizer import cancellation_terms, first_total

logger = logging.getLogger(__name__)


def _iter_rates(rate_data: Dict[str, Any]) -> Iterable[tuple[Dict[str, Any], Dict[str, Any]]]:
    for room_type in rate_data.get("roomTypes") or []:
        if not isinstance(room_type, dict):
            continue
        for rate in room_type.get("rates") or []:
            if isinstance(rate, dict):
                yield room_type, rate


def build_offer(room_type: Dict[str, Any], rate: Dict[str, Any]) -> RoomOffer:
    retail_rate = rate.get("retailRate") or {}
    price, currency = first_total(retail_rate)
    taxes = retail_rate.get("taxesAndFees") if isinstance(retail_rate, dict) else None
    first_tax = taxes[0] if isinstance(taxes, list) and taxes and isinstance(taxes[0], dict) else {}
    refundable_tag, cancel_time = cancellation_terms(rate.get("cancellationPolicies"))
    tax_amount = first_tax.get("amount")
    return RoomOffer(
        offer_id=str(room_type.get("offerId") or ""),
        rate_name=rate.get("name"),
        board_name=rate.get("boardName"),
        price=price,
        currency=currency,
        taxes_included=bool(first_tax.get("included", False)),
        tax_amount=float(tax_amount) if isinstance(tax_amount, (int, float)) else None,
        refundable_tag=refundable_tag,
        cancel_time=cancel_time,
    )


def group_rooms(rate_data: Dict[str, Any], rooms: Sequence[HotelRoom] = ()) -> List[GroupedRoom]:
    """Group every rate plan of a hotel under its physical room.

    Groups are keyed by ``mappedRoomId`` and ordered by first appearance; offers keep
    upstream iteration order. Group metadata comes from the room catalog entry with
    the same id, falling back to the first rate's own name and no photo.
    """
    catalog = {room.id: room for room in reversed(rooms)}
    groups: Dict[Any, GroupedRoom] = {}
    for room_type, rate in _iter_rates(rate_data):
        mapped_room_id = rate.get("mappedRoomId")
        group = groups.get(mapped_room_id)
        if group is None:
            matching = catalog.get(mapped_room_id)
            group = GroupedRoom(
                mapped_room_id=mapped_room_id,
                room_name=(matching.room_name if matching else None) or rate.get("name"),
                room_photo=matching.photos[0] if matching and matching.photos else "",
            )
            groups[mapped_room_id] = group
        group.offers.append(build_offer(room_type, rate))
    logger.debug(
        "Grouped %s offers into %s rooms for hotel %s",
        sum(len(group.offers) for group in groups.values()),
        len(groups),
        rate_data.get("hotelId"),
    )
    return list(groups.values())


def representative_price(rate_data: Dict[str, Any]) -> Optional[RatePrice]:
    """Price of the first rate of the first room type; a first-observed price, not a minimum."""
    room_types = rate_data.get("roomTypes") or []
    if not room_types or not isinstance(room_types[0], dict):
        return None
    rates = room_types[0].get("rates") or []
    if not rates or not isinstance(rates[0], dict):
        return None
    first_rate = rates[0]
    price, currency = first_total(first_rate.get("retailRate"))
    refundable_tag, _ = cancellation_terms(first_rate.get("cancellationPolicies"))
    return RatePrice(
        price=price if price is not None else 0.0,
        currency=currency or "USD",
        refundable=refundable_tag == "RFN",
    )


def build_price_map(rate_items: Iterable[Dict[str, Any]]) -> Dict[str, RatePrice]:
    prices: Dict[str, RatePrice] = {}
    for item in rate_items:
        hotel_id = item.get("hotelId")
        price = representative_price(item)
        if hotel_id and price is not None:
            prices[str(hotel_id)] = price
    return prices
