"""Signed UniFi device reports in, Telegram summaries out (only when something changed)."""

from unifi_relay.app import create_app
from unifi_relay.settings import RelaySettings

__all__ = ["RelaySettings", "create_app"]
