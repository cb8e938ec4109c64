from __future__ import annotations

from uuid import UUID

from qrmenu_api.core.auth import principal_from_claims

USER_ID = "5f0c6a0e-8d3c-4c61-9c55-1f2d3e4a5b6c"


def test_principal_from_standard_claims() -> None:
    principal = principal_from_claims({"sub": USER_ID, "email": "owner@example.com", "role": "Owner"})

    assert principal is not None
    assert principal.user_id == UUID(USER_ID)
    assert principal.email == "owner@example.com"
    assert principal.role_claim == "Owner"


def test_principal_from_uri_claims() -> None:
    principal = principal_from_claims(
        {
            "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier": USER_ID,
            "http://schemas.microsoft.com/ws/2008/06/identity/claims/role": "Dealer",
        }
    )

    assert principal is not None
    assert principal.user_id == UUID(USER_ID)
    assert principal.role_claim == "Dealer"
    assert principal.email is None


def test_unusable_subjects_yield_no_principal() -> None:
    assert principal_from_claims({}) is None
    assert principal_from_claims({"sub": "42"}) is None
    assert principal_from_claims({"sub": 42}) is None
