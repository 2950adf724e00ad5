from __future__ import annotations

from unifi_relay.schema import DevicesPayload


ONLINE_MARKER = "🟢 ONLINE"
OFFLINE_MARKER = "🔴 OFFLINE"


def format_report(payload: DevicesPayload) -> str:
    online = sum(1 for d in payload.devices if d.online)
    total = len(payload.devices)

    # Names go in verbatim, in the order the agent sent them.
    device_lines = [f"- {d.name}: {ONLINE_MARKER if d.online else OFFLINE_MARKER}" for d in payload.devices]
    lines = [
        f"📶 UniFi Devices ({payload.site})",
        f"🔧 API mode: {payload.mode}",
        f"📊 Online: {online}/{total}",
        "",
        *device_lines,
    ]
    return "\n".join(lines)
