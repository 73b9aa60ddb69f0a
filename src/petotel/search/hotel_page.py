"""Hotel detail view: detail and rates fetched together, offers grouped by room."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from petotel.checkout.machine import CheckoutRequest, OfferNotListedError
from petotel.config.settings import Settings
from petotel.hotels.models import GroupedRoom, HotelDetail, RoomOffer
from petotel.hotels.normalizer import extract_hotel_detail
from petotel.hotels.pet_policy import PetPolicy, advisory_for, resolve_for_hotel_page
from petotel.hotels.rates import group_rooms
from petotel.services.liteapi_client import LiteApiClient

from .payloads import SearchCriteria

logger = logging.getLogger(__name__)

HOTEL_NOT_FOUND_MESSAGE = "Hotel not found."
LOAD_FAILURE_MESSAGE = "Failed to load hotel details. Please try again."


@dataclass
class HotelPage:
    hotel_id: str
    hotel: Optional[HotelDetail] = None
    rooms: List[GroupedRoom] = field(default_factory=list)
    pet_policy: Optional[PetPolicy] = None
    error: Optional[str] = None

    @property
    def advisory(self) -> Optional[str]:
        return advisory_for(self.pet_policy) if self.pet_policy else None

    def find_offer(self, offer_id: str) -> Optional[tuple[GroupedRoom, RoomOffer]]:
        for room in self.rooms:
            for offer in room.offers:
                if offer.offer_id == offer_id:
                    return room, offer
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "hotelId": self.hotel_id,
            "hotel": self.hotel.to_dict() if self.hotel else None,
            "rooms": [room.to_dict() for room in self.rooms],
            "petPolicy": self.pet_policy.to_dict() if self.pet_policy else None,
            "advisory": self.advisory,
            "error": self.error,
        }


async def load_hotel_page(
    client: LiteApiClient,
    hotel_id: str,
    criteria: SearchCriteria,
    settings: Settings,
) -> HotelPage:
    page = HotelPage(hotel_id=hotel_id)
    try:
        detail_response, rates_response = await asyncio.gather(
            client.get_hotel_details(hotel_id),
            client.search_rates(criteria.to_hotel_payload(hotel_id, settings)),
        )
    except Exception:
        logger.exception("Failed to load hotel page for %s", hotel_id)
        page.error = LOAD_FAILURE_MESSAGE
        return page

    page.hotel = extract_hotel_detail(detail_response)
    if page.hotel is None:
        page.error = HOTEL_NOT_FOUND_MESSAGE
    page.pet_policy = resolve_for_hotel_page(page.hotel)

    rate_items = rates_response.get("data") or []
    if rate_items and isinstance(rate_items[0], dict):
        page.rooms = group_rooms(rate_items[0], page.hotel.rooms if page.hotel else ())
    logger.info("Hotel %s: %s rooms with offers", hotel_id, len(page.rooms))
    return page


def select_offer(page: HotelPage, offer_id: str, criteria: SearchCriteria) -> CheckoutRequest:
    """Build the checkout request for an offer shown on the page."""
    match = page.find_offer(offer_id)
    if match is None:
        raise OfferNotListedError(f"Offer '{offer_id}' is not listed for hotel {page.hotel_id}")
    room, offer = match
    return CheckoutRequest(
        offer_id=offer.offer_id,
        hotel_id=page.hotel_id,
        checkin=criteria.checkin.isoformat(),
        checkout=criteria.checkout.isoformat(),
        adults=criteria.adults,
        pet_type=criteria.pet_type,
        pet_count=criteria.pet_count,
        price=offer.price,
        currency=offer.currency,
        room_name=room.room_name or "",
        hotel_name=page.hotel.name if page.hotel else "",
    )
