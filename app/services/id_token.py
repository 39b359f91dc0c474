"""Placeholder OpenID identity tokens.

ESIA clients expect an ``id_token`` next to the access token and usually
just split it and read the payload.  The token built here has the right
three-segment JWT shape (header.payload.signature, each segment base64url
encoded on its own) but the signature is a fixed string.

NOT VERIFIABLE: nothing signs these tokens.  Consumers must never treat
an id_token from this service as proof of identity; the access token plus
/userinfo is the only supported way to resolve a user.
"""

from __future__ import annotations

import json

import jwt
from jwt.utils import base64url_encode

_HEADER = {"alg": "RS256", "typ": "JWT"}
_SIGNATURE = b"mock_signature"


def _segment(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64url_encode(raw).decode("ascii")


def build_id_token(
    *,
    sub: str,
    aud: str,
    issued_at: int,
    ttl_sec: int,
    issuer: str,
) -> str:
    payload = {
        "sub": sub,
        "aud": aud,
        "iss": issuer,
        "iat": issued_at,
        "exp": issued_at + ttl_sec,
    }
    signature = base64url_encode(_SIGNATURE).decode("ascii")
    return f"{_segment(_HEADER)}.{_segment(payload)}.{signature}"


def peek_id_token(token: str) -> dict:
    """Return the claims of a placeholder id_token without verifying it.

    Raises jwt.DecodeError if the token is not three base64url segments
    of JSON.
    """
    return jwt.decode(token, options={"verify_signature": False})
