"""Utilities for building LiteAPI rate search payloads."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from petotel.config.settings import Settings


@dataclass
class SearchCriteria:
    checkin: date
    checkout: date
    adults: int = 2
    place_id: Optional[str] = None
    place_name: Optional[str] = None
    vibe_query: Optional[str] = None
    pet_type: str = "dog"
    pet_count: int = 1

    def __post_init__(self) -> None:
        if self.checkout <= self.checkin:
            raise ValueError("checkout must be after checkin")
        if self.adults < 1:
            raise ValueError("adults must be at least 1")
        if self.pet_count < 1:
            raise ValueError("pet_count must be at least 1")

    def _base_payload(self, settings: Settings) -> Dict[str, Any]:
        return {
            "occupancies": [{"adults": self.adults}],
            "currency": settings.currency,
            "guestNationality": settings.guest_nationality,
            "checkin": self.checkin.isoformat(),
            "checkout": self.checkout.isoformat(),
            "roomMapping": True,
            "includeHotelData": True,
        }

    def to_listing_payload(self, settings: Settings) -> Dict[str, Any]:
        payload = self._base_payload(settings)
        payload["maxRatesPerHotel"] = settings.max_rates_per_hotel
        payload["facilities"] = [settings.pets_facility_id]
        vibe = (self.vibe_query or "").strip()
        if vibe:
            payload["aiSearch"] = f"{vibe} pet friendly"
        elif self.place_id:
            payload["placeId"] = self.place_id
        return payload

    def to_hotel_payload(self, hotel_id: str, settings: Settings) -> Dict[str, Any]:
        payload = self._base_payload(settings)
        payload["hotelIds"] = [hotel_id]
        return payload

    def search_label(self) -> str:
        if self.vibe_query:
            return f'"{self.vibe_query}"'
        return self.place_name or "your destination"
