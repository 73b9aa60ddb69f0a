"""FastAPI application for the PetOtel storefront API.

Run:
    uvicorn petotel.web.app:build_app --factory --port 8000
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from petotel.checkout.machine import CheckoutError, GuestDetailsError, InvalidTransitionError
from petotel.config.settings import Settings
from petotel.core.logging import configure_logging
from petotel.services.liteapi_client import LiteApiClient, UpstreamError
from petotel.storage.session_store import CheckoutSessionStore

from .registry import FlowRegistry
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    client: Optional[LiteApiClient] = None,
    store: Optional[CheckoutSessionStore] = None,
) -> FastAPI:
    """Build the application; ``client`` and ``store`` may be injected for tests."""
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_client = client is None
        app.state.client = client or LiteApiClient(settings)
        app.state.store = store or CheckoutSessionStore(settings.session_db_path, ttl_s=settings.session_ttl_s)
        await app.state.store.initialize()
        await app.state.store.purge_expired()
        try:
            yield
        finally:
            await app.state.store.close()
            if owns_client:
                await app.state.client.aclose()

    app = FastAPI(title="PetOtel Storefront API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.checkouts = FlowRegistry()
    app.state.confirmations = FlowRegistry()
    app.include_router(router)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
            messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
        return JSONResponse({"error": "; ".join(messages) or "Invalid request"}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(GuestDetailsError)
    async def _guest_details_error(_request: Request, exc: GuestDetailsError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(InvalidTransitionError)
    async def _transition_error(_request: Request, exc: InvalidTransitionError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=409)

    @app.exception_handler(CheckoutError)
    async def _checkout_error(_request: Request, exc: CheckoutError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=409)

    @app.exception_handler(UpstreamError)
    async def _upstream_error(_request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("Upstream failure surfaced to client: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=502)

    return app


def build_app() -> FastAPI:
    """Application factory wired to environment settings and logging."""
    settings = Settings()
    settings.ensure_directories()
    configure_logging(settings.log_level, settings.log_dir)
    return create_app(settings)


def run() -> None:
    """Entry point for the `petotel-api` console script."""
    import uvicorn

    uvicorn.run(build_app(), host="0.0.0.0", port=8000)
