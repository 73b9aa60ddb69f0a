from __future__ import annotations

import json

import httpx
import pytest

from petotel.config.settings import Settings
from petotel.services import LiteApiClient, UpstreamError, UpstreamTransportError


def _settings(tmp_path) -> Settings:
    return Settings(
        liteapi_key="sand_test",
        api_base_url="https://api.test/v3.0",
        book_base_url="https://book.test/v3.0/",
        session_db_path=tmp_path / "sessions.sqlite3",
        log_dir=tmp_path / "logs",
    )


def _client(tmp_path, handler) -> LiteApiClient:
    return LiteApiClient(_settings(tmp_path), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_requests_carry_api_key_and_expected_bodies(tmp_path) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"ok": True}})

    async with _client(tmp_path, handler) as client:
        await client.prebook("offer-123")
        await client.get_hotel_details("lp1")
        await client.search_rates({"checkin": "2026-11-10", "hotelIds": ["lp1"]})

    prebook, detail, rates = seen
    assert prebook.url == httpx.URL("https://book.test/v3.0/rates/prebook")
    assert prebook.headers["X-API-Key"] == "sand_test"
    assert json.loads(prebook.content) == {"usePaymentSdk": True, "offerId": "offer-123"}
    assert detail.url.path == "/v3.0/data/hotel"
    assert detail.url.params["hotelId"] == "lp1"
    assert detail.url.params["timeout"] == "4"
    assert rates.method == "POST"
    assert rates.url.path == "/v3.0/hotels/rates"


@pytest.mark.asyncio
async def test_error_envelope_is_returned_verbatim(tmp_path) -> None:
    envelope = {"error": {"code": 4000, "description": "Rate no longer available"}}

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json=envelope)

    async with _client(tmp_path, handler) as client:
        response = await client.prebook("offer-123")

    assert response == envelope


@pytest.mark.asyncio
async def test_non_envelope_failure_raises_upstream_error(tmp_path) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Service Unavailable")

    async with _client(tmp_path, handler) as client:
        with pytest.raises(UpstreamError) as excinfo:
            await client.book({"prebookId": "PB-1"})

    assert excinfo.value.status == 503
    assert "Service Unavailable" in excinfo.value.body


@pytest.mark.asyncio
async def test_transport_failure_raises_transport_error(tmp_path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(tmp_path, handler) as client:
        with pytest.raises(UpstreamTransportError):
            await client.search_rates({"checkin": "2026-11-10"})


@pytest.mark.asyncio
async def test_non_json_success_body_is_a_transport_error(tmp_path) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    async with _client(tmp_path, handler) as client:
        with pytest.raises(UpstreamTransportError):
            await client.get_hotel_details("lp1")


@pytest.mark.asyncio
async def test_place_search_degrades_to_empty_list(tmp_path) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, text="boom")

    async with _client(tmp_path, handler) as client:
        assert await client.search_places("   ") == {"data": []}
        assert await client.search_places("Paris") == {"data": []}

    assert len(calls) == 1
    assert calls[0].url.params["textQuery"] == "Paris"
