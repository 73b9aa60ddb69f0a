"""Hotel domain models, normalization, pet-policy and rate helpers."""

from .models import (
    BookingData,
    CheckoutContext,
    GroupedRoom,
    HotelBrief,
    HotelCard,
    HotelDetail,
    HotelPolicy,
    HotelRoom,
    Place,
    PrebookData,
    RatePrice,
    RoomOffer,
)
from .normalizer import (
    build_booking_data,
    build_hotel_briefs,
    build_hotel_detail,
    build_places,
    build_prebook_data,
    error_description,
    extract_hotel_detail,
)
from .pet_policy import (
    PetPolicy,
    resolve_for_hotel_page,
    resolve_for_listing,
    resolve_pet_policy,
)
from .rates import build_price_map, group_rooms, representative_price

__all__ = [
    "BookingData",
    "CheckoutContext",
    "GroupedRoom",
    "HotelBrief",
    "HotelCard",
    "HotelDetail",
    "HotelPolicy",
    "HotelRoom",
    "PetPolicy",
    "Place",
    "PrebookData",
    "RatePrice",
    "RoomOffer",
    "build_booking_data",
    "build_hotel_briefs",
    "build_hotel_detail",
    "build_places",
    "build_prebook_data",
    "build_price_map",
    "error_description",
    "extract_hotel_detail",
    "group_rooms",
    "representative_price",
    "resolve_for_hotel_page",
    "resolve_for_listing",
    "resolve_pet_policy",
]
