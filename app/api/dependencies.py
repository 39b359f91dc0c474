from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from app.core.config import SETTINGS
from app.models.identity import IdentityRecord
from app.models.issued_token import IssuedToken
from app.services.errors import InvalidToken
from app.services.identity_generator import IdentityGenerator
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)

# Process-wide stores shared by the oauth and userinfo routers.
session_store = SessionStore(
    token_ttl_sec=SETTINGS.token_ttl_sec,
    issuer=SETTINGS.id_token_issuer,
)
identity_generator = IdentityGenerator()

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=_BEARER_CHALLENGE,
    )


def require_token(
    authorization: Annotated[str | None, Header()] = None,
) -> IssuedToken:
    """Resolve ``Authorization: Bearer <access_token>`` to its token set.

    Used as a FastAPI dependency on every endpoint that serves user data.
    """
    if not authorization:
        raise _unauthorized("unauthorized")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        logger.warning("Malformed Authorization header rejected")
        raise _unauthorized("invalid_token")

    try:
        return session_store.lookup_token(parts[1])
    except InvalidToken:
        logger.warning("Unknown bearer token rejected")
        raise _unauthorized("invalid_token") from None


def current_identity(
    token: Annotated[IssuedToken, Depends(require_token)],
) -> IdentityRecord:
    """The synthetic person behind the bearer token."""
    return identity_generator.get_or_create(token.subject_id)
