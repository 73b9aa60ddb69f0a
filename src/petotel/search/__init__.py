"""Search listing and hotel page flows."""

from .hotel_page import HotelPage, load_hotel_page, select_offer
from .listing import SearchOutcome, fetch_hotel_details, search_pet_friendly_hotels
from .payloads import SearchCriteria

__all__ = [
    "HotelPage",
    "SearchCriteria",
    "SearchOutcome",
    "fetch_hotel_details",
    "load_hotel_page",
    "search_pet_friendly_hotels",
    "select_offer",
]
