"""QR Menu security core: authorization, verification codes, order numbers, payment signing."""

__all__ = [
    "common",
    "core",
    "features",
    "settings",
]
