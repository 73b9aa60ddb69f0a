"""Pet-friendly hotel listing: rate search, detail fan-out and card assembly."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from petotel.config.settings import Settings
from petotel.hotels.models import HotelBrief, HotelCard, HotelDetail, RatePrice
from petotel.hotels.normalizer import build_hotel_briefs, extract_hotel_detail
from petotel.hotels.pet_policy import LISTING_FALLBACK_TEXT, resolve_for_listing
from petotel.hotels.rates import build_price_map
from petotel.services.liteapi_client import LiteApiClient

from .payloads import SearchCriteria

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = (
    "No pet-friendly hotels found for your search. Try adjusting your dates or destination."
)
NO_PET_FRIENDLY_MESSAGE = (
    "No pet-friendly hotels found for your search. Try a different destination or use the "
    "vibe search with pet-related terms."
)
GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."


@dataclass
class SearchOutcome:
    cards: List[HotelCard] = field(default_factory=list)
    error: Optional[str] = None
    candidates: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "hotels": [card.to_dict() for card in self.cards],
            "error": self.error,
            "candidates": self.candidates,
        }


async def fetch_hotel_details(
    client: LiteApiClient, hotel_ids: Sequence[str]
) -> List[Optional[HotelDetail]]:
    """Fetch every detail record concurrently; a failed fetch yields ``None`` for that hotel only."""
    results = await asyncio.gather(
        *(client.get_hotel_details(hotel_id) for hotel_id in hotel_ids),
        return_exceptions=True,
    )
    details: List[Optional[HotelDetail]] = []
    for hotel_id, result in zip(hotel_ids, results):
        if isinstance(result, Exception):
            logger.warning("Hotel detail fetch failed for %s: %s", hotel_id, result)
            details.append(None)
        elif isinstance(result, BaseException):
            raise result
        else:
            details.append(extract_hotel_detail(result))
    return details


def build_card(
    hotel_id: str,
    detail: Optional[HotelDetail],
    brief: Optional[HotelBrief],
    price: Optional[RatePrice],
) -> Optional[HotelCard]:
    """Merge detail, brief and price into a card, or ``None`` if the hotel is not pet-friendly."""
    policy = resolve_for_listing(detail)
    if not policy.is_pet_friendly:
        return None

    photo = ""
    if detail is not None:
        photo = detail.main_photo or (detail.images[0] if detail.images else "")
    if not photo and brief is not None:
        photo = brief.main_photo or ""

    if detail is not None:
        address = detail.display_address()
    else:
        address = (brief.address if brief else None) or ""

    rating = (brief.rating if brief else None) or (detail.star_rating if detail else None) or 0

    return HotelCard(
        hotel_id=hotel_id,
        name=(detail.name if detail else None) or (brief.name if brief else None) or f"Hotel {hotel_id}",
        photo=photo,
        address=address,
        rating=rating,
        price=price.price if price else 0,
        currency=price.currency if price else "USD",
        pet_policy=policy.policy_text or LISTING_FALLBACK_TEXT,
        refundable=price.refundable if price else False,
        tags=brief.tags if brief else None,
        story=brief.story if brief else None,
    )


def build_cards(
    rate_items: Sequence[Dict[str, Any]],
    briefs: Dict[str, HotelBrief],
    details: Sequence[Optional[HotelDetail]],
) -> List[HotelCard]:
    prices = build_price_map(rate_items)
    cards: List[HotelCard] = []
    for item, detail in zip(rate_items, details):
        hotel_id = str(item.get("hotelId"))
        card = build_card(hotel_id, detail, briefs.get(hotel_id), prices.get(hotel_id))
        if card is not None:
            cards.append(card)
        else:
            logger.debug("Excluding hotel %s from listing: not pet-friendly", hotel_id)
    return cards


async def search_pet_friendly_hotels(
    client: LiteApiClient,
    criteria: SearchCriteria,
    settings: Settings,
) -> SearchOutcome:
    """Run the listing pipeline and return pet-friendly cards in rate-search order."""
    try:
        rates = await client.search_rates(criteria.to_listing_payload(settings))
        rate_items = [item for item in rates.get("data") or [] if isinstance(item, dict) and item.get("hotelId")]
        if not rate_items:
            return SearchOutcome(error=NO_RESULTS_MESSAGE)

        briefs = build_hotel_briefs(rates.get("hotels") or [])
        hotel_ids = [str(item["hotelId"]) for item in rate_items]
        logger.info("Fetching pet policies for %s hotels", len(hotel_ids))
        details = await fetch_hotel_details(client, hotel_ids)

        cards = build_cards(rate_items, briefs, details)
    except Exception:
        logger.exception("Listing search failed for %s", criteria.search_label())
        return SearchOutcome(error=GENERIC_FAILURE_MESSAGE)

    logger.info("%s of %s hotels are pet-friendly", len(cards), len(rate_items))
    if not cards:
        return SearchOutcome(error=NO_PET_FRIENDLY_MESSAGE, candidates=len(rate_items))
    return SearchOutcome(cards=cards, candidates=len(rate_items))
