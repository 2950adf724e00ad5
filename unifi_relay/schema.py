from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictBool, StrictStr

from unifi_relay.errors import ValidationError


PAYLOAD_TYPE = "unifi.devices.v1"


# Strict scalars: "false" or 1 is not a boolean, 123 is not a name.
class Device(BaseModel):
    name: StrictStr
    online: StrictBool


class DevicesPayload(BaseModel):
    type: Literal["unifi.devices.v1"]
    ts: StrictStr
    site: StrictStr
    mode: StrictStr
    hash: StrictStr = Field(..., description="Agent-side fingerprint of the device set; compared, never recomputed")
    devices: list[Device]

    @property
    def state_key(self) -> str:
        return state_key_for(self.site)


def state_key_for(site: str) -> str:
    return f"unifi:{site}"


def parse_payload(raw: bytes) -> DevicesPayload:
    """
    Decode a verified request body.

    Decode errors, missing fields and wrongly typed fields propagate as-is;
    only a body whose `type` is not the devices report raises `ValidationError`.
    """
    data: Any = json.loads(raw.decode("utf-8"))
    if not isinstance(data, dict) or data.get("type") != PAYLOAD_TYPE:
        raise ValidationError()
    return DevicesPayload.model_validate(data)
