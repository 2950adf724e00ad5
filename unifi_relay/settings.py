from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from unifi_relay.errors import ConfigError


STATE_FILENAME = "state.json"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return int(default)
    try:
        return int(str(raw).strip())
    except Exception:
        return int(default)


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return str(default)
    s = str(raw).strip()
    return s if s else str(default)


def _data_dir_default() -> str:
    # DATA_DIR is what the container image has always exported.
    raw = os.getenv("RELAY_DATA_DIR")
    if raw is not None and raw.strip():
        return raw.strip()
    return _env_str("DATA_DIR", "/data")


@dataclass(frozen=True)
class RelaySettings:
    # HMAC key shared with the reporting agent.
    shared_secret: str = field(default_factory=lambda: os.getenv("RELAY_SHARED_SECRET", "").strip())

    # Telegram delivery.
    telegram_bot_token: str = field(default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN", "").strip())
    telegram_chat_id: str = field(default_factory=lambda: os.getenv("TELEGRAM_CHAT_ID", "").strip())

    # Storage. The state file lives directly under this directory.
    data_dir: str = field(default_factory=_data_dir_default)

    # Listener.
    host: str = field(default_factory=lambda: _env_str("RELAY_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 5000))

    # Upload guardrail (same limit the agent has always been held to).
    max_body_bytes: int = field(default_factory=lambda: _env_int("RELAY_MAX_BODY_BYTES", 256 * 1024))

    log_level: str = field(default_factory=lambda: _env_str("LOG_LEVEL", "INFO").upper())

    @property
    def state_path(self) -> Path:
        return Path(self.data_dir) / STATE_FILENAME

    def missing(self) -> list[str]:
        """Names of required settings that are absent or unusable."""
        out: list[str] = []
        if not self.shared_secret:
            out.append("RELAY_SHARED_SECRET")
        if not self.telegram_bot_token:
            out.append("TELEGRAM_BOT_TOKEN")
        if not self.telegram_chat_id:
            out.append("TELEGRAM_CHAT_ID")
        if not str(self.data_dir or "").strip():
            out.append("RELAY_DATA_DIR")
        if not (0 < int(self.port) < 65536):
            out.append("PORT")
        return out

    def require(self) -> "RelaySettings":
        missing = self.missing()
        if missing:
            raise ConfigError(f"missing required settings: {', '.join(missing)}")
        return self
