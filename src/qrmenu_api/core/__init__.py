"""Shared identity and access foundation layer.

This package holds the stable contracts and utilities that feature modules
depend on (auth, RBAC, security primitives, HTTP dependencies). Keep
dependencies pointed inwards here to avoid cross-feature coupling.
"""

__all__ = [
    "auth",
    "http",
    "rbac",
    "security",
]
