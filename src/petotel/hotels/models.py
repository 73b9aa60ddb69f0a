"""Dataclasses for normalised hotel, rate and booking records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True, frozen=True)
class Place:
    """A place-search suggestion; its id feeds the rate search."""

    place_id: str
    display_name: str
    formatted_address: str

    def to_dict(self) -> dict[str, object]:
        return {
            "placeId": self.place_id,
            "displayName": self.display_name,
            "formattedAddress": self.formatted_address,
        }


@dataclass(slots=True)
class HotelBrief:
    """Lightweight summary from the rate search side channel."""

    id: str
    name: Optional[str] = None
    main_photo: Optional[str] = None
    address: Optional[str] = None
    rating: Optional[float] = None
    tags: Optional[List[str]] = None
    story: Optional[str] = None


@dataclass(slots=True)
class HotelPolicy:
    name: Optional[str] = None
    description: Optional[str] = None
    pets_allowed: Optional[str] = None


@dataclass(slots=True)
class HotelRoom:
    id: Any
    room_name: Optional[str] = None
    photos: List[str] = field(default_factory=list)


@dataclass(slots=True)
class HotelDetail:
    """Full hotel record; the only input to the pet-policy resolver."""

    id: str
    name: str
    description: Optional[str] = None
    important_information: Optional[str] = None
    main_photo: Optional[str] = None
    images: List[str] = field(default_factory=list)
    city: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    facilities: List[str] = field(default_factory=list)
    star_rating: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rooms: List[HotelRoom] = field(default_factory=list)
    policies: List[HotelPolicy] = field(default_factory=list)
    pets_allowed: Optional[bool] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def find_room(self, room_id: Any) -> Optional[HotelRoom]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def display_address(self) -> str:
        return ", ".join(part for part in (self.address, self.city) if part)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "hotelDescription": self.description,
            "hotelImportantInformation": self.important_information,
            "main_photo": self.main_photo,
            "hotelImages": list(self.images),
            "city": self.city,
            "country": self.country,
            "address": self.address,
            "hotelFacilities": list(self.facilities),
            "starRating": self.star_rating,
            "location": {"latitude": self.latitude, "longitude": self.longitude},
            "petsAllowed": self.pets_allowed,
        }


@dataclass(slots=True, frozen=True)
class RoomOffer:
    """A purchasable rate plan normalised from the rate search tree."""

    offer_id: str
    rate_name: Optional[str]
    board_name: Optional[str]
    price: Optional[float]
    currency: Optional[str]
    taxes_included: bool
    tax_amount: Optional[float]
    refundable_tag: str
    cancel_time: Optional[str]

    @property
    def refundable(self) -> bool:
        return self.refundable_tag == "RFN"

    def to_dict(self) -> dict[str, object]:
        return {
            "offerId": self.offer_id,
            "rateName": self.rate_name,
            "boardName": self.board_name,
            "price": self.price,
            "currency": self.currency,
            "taxesIncluded": self.taxes_included,
            "taxAmount": self.tax_amount,
            "refundableTag": self.refundable_tag,
            "cancelTime": self.cancel_time,
        }


@dataclass(slots=True)
class GroupedRoom:
    """A physical room and every offer mapped to it."""

    mapped_room_id: Any
    room_name: Optional[str]
    room_photo: str
    offers: List[RoomOffer] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "mappedRoomId": self.mapped_room_id,
            "roomName": self.room_name,
            "roomPhoto": self.room_photo,
            "offers": [offer.to_dict() for offer in self.offers],
        }


@dataclass(slots=True, frozen=True)
class RatePrice:
    """First observed price for a hotel. Not necessarily the cheapest."""

    price: float
    currency: str
    refundable: bool


@dataclass(slots=True)
class HotelCard:
    hotel_id: str
    name: str
    photo: str
    address: str
    rating: float
    price: float
    currency: str
    pet_policy: str
    refundable: bool
    tags: Optional[List[str]] = None
    story: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "hotelId": self.hotel_id,
            "name": self.name,
            "photo": self.photo,
            "address": self.address,
            "rating": self.rating,
            "price": self.price,
            "currency": self.currency,
            "tags": self.tags,
            "story": self.story,
            "petPolicy": self.pet_policy,
            "refundable": self.refundable,
        }


@dataclass(slots=True)
class PrebookData:
    """Locked, short-lived price quote. Consumed once by the book call."""

    prebook_id: str
    transaction_id: str
    secret_key: str
    offer_id: Optional[str] = None
    hotel_id: Optional[str] = None
    price: Optional[float] = None
    commission: Optional[float] = None
    currency: Optional[str] = None
    payment_types: List[str] = field(default_factory=list)
    refundable_tag: str = "NRFN"
    cancel_time: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_public_dict(self) -> dict[str, object]:
        """Fields safe to return to a browser; credentials are left out."""
        return {
            "offerId": self.offer_id,
            "hotelId": self.hotel_id,
            "price": self.price,
            "currency": self.currency,
            "paymentTypes": list(self.payment_types),
            "refundableTag": self.refundable_tag,
            "cancelTime": self.cancel_time,
        }


@dataclass(slots=True)
class BookingData:
    """Confirmed reservation returned by a successful book call."""

    booking_id: str
    status: Optional[str] = None
    hotel_confirmation_code: Optional[str] = None
    checkin: Optional[str] = None
    checkout: Optional[str] = None
    hotel_id: Optional[str] = None
    hotel_name: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    refundable_tag: Optional[str] = None
    cancel_time: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "bookingId": self.booking_id,
            "status": self.status,
            "hotelConfirmationCode": self.hotel_confirmation_code,
            "checkin": self.checkin,
            "checkout": self.checkout,
            "hotel": {"hotelId": self.hotel_id, "name": self.hotel_name},
            "price": self.price,
            "currency": self.currency,
            "refundableTag": self.refundable_tag,
            "cancelTime": self.cancel_time,
        }


@dataclass(slots=True, frozen=True)
class CheckoutContext:
    """Checkout state bridging the payment step and the confirmation step."""

    prebook_id: str
    transaction_id: str
    hotel_id: str
    checkin: str
    checkout: str
    first_name: str
    last_name: str
    email: str
    hotel_name: str = ""
    pet_type: str = "dog"
    pet_count: int = 1

    def to_dict(self) -> dict[str, object]:
        return {
            "prebookId": self.prebook_id,
            "transactionId": self.transaction_id,
            "hotelId": self.hotel_id,
            "checkin": self.checkin,
            "checkout": self.checkout,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "hotelName": self.hotel_name,
            "petType": self.pet_type,
            "petCount": self.pet_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CheckoutContext":
        return cls(
            prebook_id=str(data["prebookId"]),
            transaction_id=str(data["transactionId"]),
            hotel_id=str(data.get("hotelId") or ""),
            checkin=str(data.get("checkin") or ""),
            checkout=str(data.get("checkout") or ""),
            first_name=str(data.get("firstName") or ""),
            last_name=str(data.get("lastName") or ""),
            email=str(data.get("email") or ""),
            hotel_name=str(data.get("hotelName") or ""),
            pet_type=str(data.get("petType") or "dog"),
            pet_count=int(data.get("petCount") or 1),
        )
