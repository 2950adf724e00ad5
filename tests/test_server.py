from __future__ import annotations

import logging

import pytest

from unifi_relay import server
from unifi_relay.server import _resolve_level


@pytest.mark.parametrize(
    ("name", "level"),
    [("INFO", logging.INFO), ("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("nonsense", logging.INFO), ("", logging.INFO)],
)
def test_resolve_level(name: str, level: int) -> None:
    assert _resolve_level(name) == level


def test_main_refuses_to_start_without_required_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RELAY_SHARED_SECRET", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID"):
        monkeypatch.delenv(name, raising=False)

    def _fail_run(*args, **kwargs) -> None:
        raise AssertionError("uvicorn must not start")

    monkeypatch.setattr(server.uvicorn, "run", _fail_run)
    with pytest.raises(SystemExit) as exc_info:
        server.main()
    assert exc_info.value.code == 2
