from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from unifi_relay.errors import PayloadTooLargeError, RelayError
from unifi_relay.ingest import IngestHandler
from unifi_relay.settings import RelaySettings
from unifi_relay.signature import SIGNATURE_HEADER
from unifi_relay.store import StateStore
from unifi_relay.telegram import Notifier, TelegramConfig, TelegramNotifier


logger = structlog.get_logger("unifi-relay")


def _error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


def _declared_length(req: Request) -> int | None:
    raw = req.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def _read_capped(req: Request, limit: int) -> bytes:
    declared = _declared_length(req)
    if declared is not None and declared > limit:
        raise PayloadTooLargeError()
    buf = bytearray()
    async for chunk in req.stream():
        buf.extend(chunk)
        if len(buf) > limit:
            raise PayloadTooLargeError()
    return bytes(buf)


def create_app(settings: RelaySettings | None = None, *, notifier: Notifier | None = None) -> FastAPI:
    """
    Build the relay app. `notifier` replaces the Telegram client (tests inject
    a recorder here); otherwise a TelegramNotifier with its own httpx client
    is built here and the client is closed on shutdown.
    """
    settings = settings or RelaySettings()
    http_client: httpx.AsyncClient | None = None
    if notifier is None:
        http_client = httpx.AsyncClient(headers={"User-Agent": "UniFi Relay"})
        notifier = TelegramNotifier(
            http_client,
            TelegramConfig(bot_token=settings.telegram_bot_token, chat_id=settings.telegram_chat_id),
        )
    store = StateStore(settings.state_path)

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        app.state.settings.require()
        logger.info("Relay ready", state_path=str(store.path))
        try:
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()

    app = FastAPI(title="UniFi Relay", version="0.1.0", lifespan=_lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.handler = IngestHandler(shared_secret=settings.shared_secret, store=store, notifier=notifier)

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        return {"ok": True}

    @app.post("/ingest/unifi")
    async def ingest_unifi(req: Request) -> JSONResponse:
        try:
            raw = await _read_capped(req, int(app.state.settings.max_body_bytes))
            handler: IngestHandler = app.state.handler
            result = await handler.handle(raw, req.headers.get(SIGNATURE_HEADER))
        except RelayError as e:
            if e.status_code >= 500:
                logger.error("Ingest failed", error=e.error, kind=type(e).__name__)
            return _error_response(e.status_code, e.error)
        except Exception as e:
            # Decode errors and malformed fields land here; the message goes back as-is.
            logger.error("Ingest failed", error=str(e), kind=type(e).__name__)
            return _error_response(500, str(e) or type(e).__name__)
        return JSONResponse(status_code=200, content=result.to_response())

    return app
