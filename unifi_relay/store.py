from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import structlog

from unifi_relay.errors import PersistError


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StateEntry:
    hash: str
    ts: str


def coerce_state(raw: Any) -> dict[str, StateEntry]:
    """
    Best-effort decode for state loaded from state.json.
    Drops entries that are not {hash: str, ts: str} objects.
    """
    if not isinstance(raw, dict):
        return {}

    out: dict[str, StateEntry] = {}
    for key, item in raw.items():
        if not isinstance(key, str) or not key:
            continue
        if not isinstance(item, dict):
            logger.warning("Dropping malformed state entry", key=key)
            continue
        h = item.get("hash")
        ts = item.get("ts")
        if not isinstance(h, str) or not isinstance(ts, str):
            logger.warning("Dropping malformed state entry", key=key)
            continue
        out[key] = StateEntry(hash=h, ts=ts)
    return out


class StateStore:
    """Last notified hash per site, persisted as one JSON object."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def read(self) -> dict[str, StateEntry]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("State file unreadable; starting empty", path=str(self.path), error=str(e))
            return {}
        try:
            raw = json.loads(text)
        except ValueError as e:
            logger.warning("State file is not valid JSON; starting empty", path=str(self.path), error=str(e))
            return {}
        return coerce_state(raw)

    def write(self, state: dict[str, StateEntry]) -> None:
        payload = {key: asdict(entry) for key, entry in state.items()}
        tmp = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise PersistError(f"state write failed: {e}") from e

    def swap_if_changed(self, key: str, entry: StateEntry) -> bool:
        """
        Store `entry` under `key` unless the stored hash already matches.
        Returns True when the state was written.
        """
        with self._lock:
            state = self.read()
            prev = state.get(key)
            if prev is not None and prev.hash == entry.hash:
                return False
            state[key] = entry
            self.write(state)
            return True
