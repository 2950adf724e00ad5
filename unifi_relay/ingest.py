from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from unifi_relay.errors import AuthError
from unifi_relay.report import format_report
from unifi_relay.schema import parse_payload
from unifi_relay.signature import verify_signature
from unifi_relay.store import StateEntry, StateStore
from unifi_relay.telegram import Notifier


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IngestResult:
    changed: bool

    def to_response(self) -> dict[str, bool]:
        return {"ok": True, "changed": self.changed}


class IngestHandler:
    """
    verify -> parse -> dedup -> format -> notify.

    Every gate raises its own error type (see unifi_relay.errors). State is
    persisted before the notification goes out and is not rolled back if it
    fails, so a report is notified at most once.
    """

    def __init__(self, *, shared_secret: str, store: StateStore, notifier: Notifier) -> None:
        self.shared_secret = shared_secret
        self.store = store
        self.notifier = notifier

    async def handle(self, raw_body: bytes, signature: str | None) -> IngestResult:
        if not verify_signature(self.shared_secret, raw_body, signature):
            logger.warning("Rejected report with invalid signature", has_signature=bool(signature))
            raise AuthError()

        payload = parse_payload(raw_body)
        entry = StateEntry(hash=payload.hash, ts=payload.ts)

        # File I/O runs off the event loop; the store lock covers read+write only.
        changed = await asyncio.to_thread(self.store.swap_if_changed, payload.state_key, entry)
        if not changed:
            logger.info("Report unchanged", site=payload.site, hash=payload.hash)
            return IngestResult(changed=False)

        logger.info("Report changed", site=payload.site, hash=payload.hash, devices=len(payload.devices))
        await self.notifier.send(format_report(payload))
        return IngestResult(changed=True)
