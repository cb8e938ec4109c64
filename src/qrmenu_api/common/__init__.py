"""Common utilities and helpers shared by the core and feature modules."""

__all__ = [
    "exceptions",
    "logging",
    "middleware",
    "problem_details",
    "schema",
    "time",
]
