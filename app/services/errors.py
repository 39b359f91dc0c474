"""Failures reported by the session store.

Each subclass carries the OAuth ``error`` code the token endpoint
returns, so routers can translate without a lookup table.
"""

from __future__ import annotations


class SessionError(Exception):
    error_code = "invalid_request"


class InvalidGrant(SessionError):
    """Authorization code is unknown or was already redeemed."""

    error_code = "invalid_grant"


class InvalidClient(SessionError):
    """Code was issued to a different client_id."""

    error_code = "invalid_client"


class InvalidToken(SessionError):
    """Bearer credential was never issued by this process."""

    error_code = "invalid_token"
