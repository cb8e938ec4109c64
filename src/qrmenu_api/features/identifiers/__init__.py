"""Unique business identifiers such as payment order numbers."""

from .allocator import (
    IDENTIFIER_PATTERN,
    ExistsCheck,
    IdentifierAllocator,
    IdentifierExhaustedError,
    format_identifier,
    is_valid_identifier,
)
from .sql import column_exists_check

__all__ = [
    "IDENTIFIER_PATTERN",
    "ExistsCheck",
    "IdentifierAllocator",
    "IdentifierExhaustedError",
    "column_exists_check",
    "format_identifier",
    "is_valid_identifier",
]
