from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from unifi_relay.errors import NotifyError


logger = structlog.get_logger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class Notifier(Protocol):
    async def send(self, text: str) -> None: ...


@dataclass(frozen=True)
class TelegramConfig:
    bot_token: str
    chat_id: str
    api_base: str = TELEGRAM_API_BASE


def _redact(text: str, token: str) -> str:
    if token:
        return text.replace(token, "<redacted>")
    return text


class TelegramNotifier:
    """Single sendMessage call per report. No retry, no chunking."""

    def __init__(self, client: httpx.AsyncClient, config: TelegramConfig) -> None:
        self.client = client
        self.config = config

    @property
    def url(self) -> str:
        return f"{self.config.api_base.rstrip('/')}/bot{self.config.bot_token}/sendMessage"

    async def send(self, text: str) -> None:
        form = {"chat_id": self.config.chat_id, "text": text}
        try:
            resp = await self.client.post(self.url, data=form)
        except httpx.HTTPError as e:
            msg = _redact(f"Telegram sendMessage failed: {type(e).__name__}: {e}", self.config.bot_token)
            logger.error("Telegram request error", error=msg)
            raise NotifyError(msg) from None

        body = _redact(resp.text, self.config.bot_token)
        if not resp.is_success:
            logger.error("Telegram rejected message", status=resp.status_code, body=body[:500])
            raise NotifyError(f"Telegram sendMessage failed: {resp.status_code} {body}", status=resp.status_code, body=body)

        data: Any
        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not data.get("ok"):
            logger.error("Telegram returned unexpected body", status=resp.status_code, body=body[:500])
            raise NotifyError(f"Telegram sendMessage failed: {resp.status_code} {body}", status=resp.status_code, body=body)

        result = data.get("result")
        message_id = result.get("message_id") if isinstance(result, dict) else None
        logger.info("Telegram message sent", message_id=message_id)
