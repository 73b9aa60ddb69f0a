"""API routes: upstream pass-through endpoints and storefront flows."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from petotel.checkout.confirmation import ConfirmationFlow, ConfirmationStatus
from petotel.checkout.machine import CheckoutFlow, payment_widget_config
from petotel.config.settings import Settings
from petotel.search.hotel_page import LOAD_FAILURE_MESSAGE, load_hotel_page, select_offer
from petotel.search.listing import search_pet_friendly_hotels
from petotel.search.payloads import SearchCriteria
from petotel.services.liteapi_client import LiteApiClient
from petotel.storage.session_store import CheckoutSessionStore

from .registry import FlowRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PrebookBody(_CamelModel):
    offer_id: Optional[str] = Field(default=None, alias="offerId")


class CheckoutStartBody(_CamelModel):
    offer_id: str = Field(alias="offerId", min_length=1)
    hotel_id: str = Field(alias="hotelId", min_length=1)
    checkin: date
    checkout: date
    adults: int = Field(default=2, ge=1)
    pet_type: str = Field(default="dog", alias="petType")
    pet_count: int = Field(default=1, ge=1, alias="petCount")


class GuestDetailsBody(_CamelModel):
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(request: Request) -> LiteApiClient:
    return request.app.state.client


def _store(request: Request) -> CheckoutSessionStore:
    return request.app.state.store


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _checkouts(request: Request) -> FlowRegistry[CheckoutFlow]:
    return request.app.state.checkouts


def _confirmations(request: Request) -> FlowRegistry[ConfirmationFlow]:
    return request.app.state.confirmations


def _criteria(
    checkin: date,
    checkout: date,
    adults: int,
    *,
    place_id: Optional[str] = None,
    place_name: Optional[str] = None,
    vibe_query: Optional[str] = None,
    pet_type: str = "dog",
    pet_count: int = 1,
) -> SearchCriteria:
    try:
        return SearchCriteria(
            checkin=checkin,
            checkout=checkout,
            adults=adults,
            place_id=place_id,
            place_name=place_name,
            vibe_query=vibe_query,
            pet_type=pet_type,
            pet_count=pet_count,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _get_flow(request: Request, checkout_id: str) -> CheckoutFlow:
    flow = _checkouts(request).get(checkout_id)
    if flow is None:
        raise HTTPException(status_code=404, detail="Checkout not found")
    return flow


# ---------------------------------------------------------------------------
# Pass-through endpoints
# ---------------------------------------------------------------------------


@router.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/api/places")
async def places(request: Request, q: Optional[str] = None) -> Dict[str, Any]:
    if not q:
        return {"data": []}
    return await _client(request).search_places(q)


@router.post("/api/rates")
async def rates(request: Request, body: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    return await _client(request).search_rates(body)


@router.get("/api/hotel")
async def hotel(request: Request, hotel_id: Optional[str] = Query(default=None, alias="hotelId")) -> Dict[str, Any]:
    if not hotel_id:
        raise HTTPException(status_code=400, detail="hotelId is required")
    return await _client(request).get_hotel_details(hotel_id)


@router.post("/api/prebook")
async def prebook(request: Request, body: PrebookBody) -> Dict[str, Any]:
    if not body.offer_id:
        raise HTTPException(status_code=400, detail="offerId is required")
    return await _client(request).prebook(body.offer_id)


@router.post("/api/book")
async def book(request: Request, body: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    return await _client(request).book(body)


# ---------------------------------------------------------------------------
# Storefront flows
# ---------------------------------------------------------------------------


@router.get("/api/search")
async def search(
    request: Request,
    checkin: date,
    checkout: date,
    adults: int = 2,
    place_id: Optional[str] = Query(default=None, alias="placeId"),
    place_name: Optional[str] = Query(default=None, alias="placeName"),
    vibe_query: Optional[str] = Query(default=None, alias="vibeQuery"),
    pet_type: str = Query(default="dog", alias="petType"),
    pet_count: int = Query(default=1, alias="petCount"),
) -> Dict[str, Any]:
    if not place_id and not (vibe_query and vibe_query.strip()):
        raise HTTPException(status_code=400, detail="placeId or vibeQuery is required")
    criteria = _criteria(
        checkin,
        checkout,
        adults,
        place_id=place_id,
        place_name=place_name,
        vibe_query=vibe_query,
        pet_type=pet_type,
        pet_count=pet_count,
    )
    outcome = await search_pet_friendly_hotels(_client(request), criteria, _settings(request))
    result = outcome.to_dict()
    result["searchLabel"] = criteria.search_label()
    return result


@router.get("/api/hotel-page")
async def hotel_page(
    request: Request,
    checkin: date,
    checkout: date,
    hotel_id: str = Query(alias="hotelId", min_length=1),
    adults: int = 2,
    pet_type: str = Query(default="dog", alias="petType"),
    pet_count: int = Query(default=1, alias="petCount"),
) -> Dict[str, Any]:
    criteria = _criteria(checkin, checkout, adults, pet_type=pet_type, pet_count=pet_count)
    page = await load_hotel_page(_client(request), hotel_id, criteria, _settings(request))
    return page.to_dict()


@router.post("/api/checkout")
async def start_checkout(request: Request, body: CheckoutStartBody) -> Dict[str, Any]:
    criteria = _criteria(
        body.checkin, body.checkout, body.adults, pet_type=body.pet_type, pet_count=body.pet_count
    )
    page = await load_hotel_page(_client(request), body.hotel_id, criteria, _settings(request))
    if page.error == LOAD_FAILURE_MESSAGE:
        raise HTTPException(status_code=502, detail=page.error)
    checkout_request = select_offer(page, body.offer_id, criteria)
    flow = CheckoutFlow(
        _client(request),
        _store(request),
        checkout_request,
        payment_initializer=payment_widget_config(_settings(request)),
    )
    _checkouts(request).add(flow)
    await flow.start()
    return flow.to_dict()


@router.get("/api/checkout/{checkout_id}")
async def get_checkout(request: Request, checkout_id: str) -> Dict[str, Any]:
    return _get_flow(request, checkout_id).to_dict()


@router.post("/api/checkout/{checkout_id}/details")
async def submit_details(request: Request, checkout_id: str, body: GuestDetailsBody) -> Dict[str, Any]:
    flow = _get_flow(request, checkout_id)
    flow.submit_details(body.first_name, body.last_name, body.email)
    return flow.to_dict()


@router.post("/api/checkout/{checkout_id}/payment")
async def enter_payment(request: Request, checkout_id: str) -> Dict[str, Any]:
    flow = _get_flow(request, checkout_id)
    if flow.payment_error:
        await flow.retry_payment()
    else:
        await flow.enter_payment()
    return flow.to_dict()


@router.post("/api/confirmation/{checkout_id}")
async def confirm(request: Request, checkout_id: str) -> Dict[str, Any]:
    confirmations = _confirmations(request)
    flow = confirmations.get(checkout_id)
    if flow is None:
        flow = confirmations.add(ConfirmationFlow(_client(request), _store(request), checkout_id))
    result = await flow.complete()
    if result.status is ConfirmationStatus.CONFIRMED:
        _checkouts(request).discard(checkout_id)
    elif not flow.attempted:
        confirmations.discard(checkout_id)
    return result.to_dict()
