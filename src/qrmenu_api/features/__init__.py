"""Feature modules built on the core security primitives."""

__all__ = [
    "identifiers",
    "payments",
    "verification",
]
