from __future__ import annotations

import binascii
import hashlib
import hmac


SIGNATURE_HEADER = "X-Signature"


def sign_body(secret: str, raw_body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), msg=raw_body, digestmod=hashlib.sha256).hexdigest()


def _unhex(value: str) -> bytes | None:
    try:
        return binascii.unhexlify(value)
    except (ValueError, TypeError):
        return None


def verify_signature(secret: str, raw_body: bytes, signature_hex: str | None) -> bool:
    """
    Check `signature_hex` against HMAC-SHA256(secret, raw_body).

    Both sides are decoded to bytes before `hmac.compare_digest`, so the only
    length check happens on the decoded digests. Never raises.
    """
    if not signature_hex:
        return False
    expected = _unhex(sign_body(secret, raw_body))
    provided = _unhex(str(signature_hex))
    if expected is None or provided is None:
        return False
    return hmac.compare_digest(expected, provided)
