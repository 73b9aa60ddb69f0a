"""Client for the LiteAPI hotel distribution endpoints."""
from __future__ import annotations

import json
import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Dict, Optional

import httpx

from petotel.config.settings import Settings

logger = logging.getLogger(__name__)


class UpstreamError(RuntimeError):
    """Raised when the upstream API answers with a non-2xx status and no error envelope."""

    def __init__(self, message: str, *, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class UpstreamTransportError(UpstreamError):
    """Raised when a request never completed or returned an unreadable body."""


class LiteApiClient(AbstractAsyncContextManager["LiteApiClient"]):
    """Thin async wrapper around place, rate, hotel, prebook and book endpoints.

    Successful calls return the upstream JSON unchanged. Structured business errors
    (``{"error": {...}}`` bodies) are returned as-is so callers can surface the
    upstream description; anything else that fails raises :class:`UpstreamError`.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._api_base = settings.api_base_url.rstrip("/")
        self._book_base = settings.book_base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=settings.http_timeout_s,
            headers=settings.api_headers(),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.aclose()

    async def search_places(self, query: str) -> Dict[str, Any]:
        if not query or not query.strip():
            return {"data": []}
        try:
            return await self._request(
                "GET",
                f"{self._api_base}/data/places",
                params={"textQuery": query},
            )
        except UpstreamError:
            logger.exception("Place search failed for query '%s'", query)
            return {"data": []}

    async def search_rates(self, body: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(
            "Searching rates (%s → %s) place=%s hotels=%s",
            body.get("checkin"),
            body.get("checkout"),
            body.get("placeId") or body.get("aiSearch"),
            len(body.get("hotelIds") or []),
        )
        return await self._request("POST", f"{self._api_base}/hotels/rates", json=body)

    async def get_hotel_details(self, hotel_id: str) -> Dict[str, Any]:
        logger.debug("Fetching hotel detail %s", hotel_id)
        return await self._request(
            "GET",
            f"{self._api_base}/data/hotel",
            params={"hotelId": hotel_id, "timeout": str(self._settings.hotel_detail_timeout_s)},
        )

    async def prebook(self, offer_id: str) -> Dict[str, Any]:
        logger.info("Prebooking offer %s", offer_id)
        return await self._request(
            "POST",
            f"{self._book_base}/rates/prebook",
            json={"usePaymentSdk": True, "offerId": offer_id},
        )

    async def book(self, body: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Booking prebook %s", body.get("prebookId"))
        return await self._request("POST", f"{self._book_base}/rates/book", json=body)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, url, params=params, json=json)
        except httpx.TransportError as exc:
            raise UpstreamTransportError(f"{method} {url} failed: {exc}") from exc

        text = response.text
        payload = _parse_json(text)
        if response.is_success:
            if payload is None:
                raise UpstreamTransportError(
                    f"{method} {url} returned a non-JSON body",
                    status=response.status_code,
                    body=text[:512],
                )
            return payload

        if payload is not None and payload.get("error"):
            logger.warning(
                "Upstream %s %s returned %s with error envelope: %s",
                method,
                url,
                response.status_code,
                payload["error"],
            )
            return payload
        raise UpstreamError(
            f"Upstream request failed ({response.status_code}): {text[:512]}",
            status=response.status_code,
            body=text[:512],
        )


def _parse_json(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None
