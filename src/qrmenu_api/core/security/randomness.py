"""Unpredictable random draws for codes and identifiers."""

from __future__ import annotations

import secrets


def random_int(low: int, high: int) -> int:
    """Return a uniform integer in ``[low, high]`` from the OS CSPRNG."""

    if high < low:
        raise ValueError("high must be greater than or equal to low")
    return low + secrets.randbelow(high - low + 1)


def random_numeric_code(digits: int = 6) -> str:
    """Return a ``digits``-long code without a leading zero.

    For six digits the draw covers 100000..999999 inclusive.
    """

    if digits <= 0:
        raise ValueError("Code length must be positive")
    return str(random_int(10 ** (digits - 1), 10**digits - 1))


__all__ = ["random_int", "random_numeric_code"]
