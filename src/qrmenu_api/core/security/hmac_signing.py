"""HMAC helpers shared by request signing and callback verification."""

from __future__ import annotations

import base64
import hashlib
import hmac


def hmac_sha256_base64(message: str, key: str) -> str:
    """Return base64(HMAC-SHA256(key, message)) over UTF-8 bytes."""

    digest = hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def constant_time_equals(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


__all__ = ["constant_time_equals", "hmac_sha256_base64"]
