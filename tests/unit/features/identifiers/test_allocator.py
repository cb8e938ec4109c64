from __future__ import annotations

from collections.abc import Callable

import pytest

from qrmenu_api.features.identifiers import (
    IdentifierAllocator,
    IdentifierExhaustedError,
    format_identifier,
    is_valid_identifier,
)
from qrmenu_api.settings import Settings


def scripted_draw(*numbers: int) -> tuple[Callable[[int, int], int], list[tuple[int, int]]]:
    calls: list[tuple[int, int]] = []
    iterator = iter(numbers)

    def draw(low: int, high: int) -> int:
        calls.append((low, high))
        return next(iterator)

    return draw, calls


def test_allocate_returns_first_free_candidate() -> None:
    draw, calls = scripted_draw(5, 6)
    allocator = IdentifierAllocator(draw=draw)

    identifier = allocator.allocate({"SP000005"}.__contains__)

    assert identifier == "SP000006"
    assert calls == [(1, 999999), (1, 999999)]


def test_identifiers_are_zero_padded() -> None:
    draw, _ = scripted_draw(123)

    identifier = IdentifierAllocator(draw=draw).allocate(lambda candidate: False)

    assert identifier == "SP000123"
    assert is_valid_identifier(identifier)


def test_exhaustion_raises_after_attempt_budget() -> None:
    draw, calls = scripted_draw(*range(1, 20))
    allocator = IdentifierAllocator(draw=draw)

    with pytest.raises(IdentifierExhaustedError) as excinfo:
        allocator.allocate(lambda candidate: True)

    assert len(calls) == 10
    assert excinfo.value.attempts == 10
    assert excinfo.value.prefix == "SP"
    assert excinfo.value.sentinel == "SP000000"


def test_sentinel_fallback_is_opt_in() -> None:
    draw, calls = scripted_draw(*range(1, 20))
    allocator = IdentifierAllocator(max_attempts=3, draw=draw)

    assert allocator.allocate_or_sentinel(lambda candidate: True) == "SP000000"
    assert len(calls) == 3


def test_sentinel_fallback_returns_free_candidate_when_found() -> None:
    draw, _ = scripted_draw(42)

    assert IdentifierAllocator(draw=draw).allocate_or_sentinel(lambda c: False) == "SP000042"


def test_default_draw_stays_in_range() -> None:
    allocator = IdentifierAllocator()
    seen: set[str] = set()

    for _ in range(200):
        identifier = allocator.allocate(seen.__contains__)
        assert is_valid_identifier(identifier)
        assert identifier != allocator.sentinel
        seen.add(identifier)

    assert len(seen) == 200


@pytest.mark.parametrize("prefix", ["sp", "S", "SPX", "S1", "ŞP", ""])
def test_prefix_must_be_two_uppercase_ascii_letters(prefix: str) -> None:
    with pytest.raises(ValueError):
        IdentifierAllocator(prefix=prefix)


def test_max_attempts_must_be_positive() -> None:
    with pytest.raises(ValueError):
        IdentifierAllocator(max_attempts=0)


def test_format_identifier_bounds() -> None:
    assert format_identifier("SP", 999999) == "SP999999"
    with pytest.raises(ValueError):
        format_identifier("SP", 1_000_000)
    with pytest.raises(ValueError):
        format_identifier("SP", -1)


@pytest.mark.parametrize(
    "value,expected",
    [("SP000123", True), ("QR999999", True), ("sp000123", False), ("SP12345", False), ("SP0001234", False)],
)
def test_is_valid_identifier(value: str, expected: bool) -> None:
    assert is_valid_identifier(value) is expected


def test_from_settings() -> None:
    allocator = IdentifierAllocator.from_settings(
        Settings(_env_file=None, identifier_prefix="qr", identifier_max_attempts=3)
    )

    assert allocator.prefix == "QR"
    assert allocator.max_attempts == 3
    assert allocator.sentinel == "QR000000"
