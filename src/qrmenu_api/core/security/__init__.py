"""Security primitives for tokens, randomness, and HMAC signing."""

from .hmac_signing import constant_time_equals, hmac_sha256_base64
from .randomness import random_int, random_numeric_code
from .tokens import decode_token, extract_bearer_token

__all__ = [
    "constant_time_equals",
    "decode_token",
    "extract_bearer_token",
    "hmac_sha256_base64",
    "random_int",
    "random_numeric_code",
]
