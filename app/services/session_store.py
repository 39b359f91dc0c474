"""In-memory authorization codes and issued tokens.

LIFECYCLE
----------
  issue_code  : authorize form submitted: a code is bound to the client,
                the redirect target and the phone number the operator typed.
  redeem_code : token exchange: the code is removed and a token set is
                created for the same subject.  A code works exactly once.
  lookup_token: any bearer-protected endpoint: access token → token set.

Nothing here expires.  Codes live until redeemed, tokens until the process
exits; ``expires_in`` is only reported to clients.

CONCURRENCY
------------
FastAPI runs sync endpoints in a thread pool, so two token requests for the
same code can really run at the same time.  One lock guards both maps; the
check-and-remove in redeem_code happens inside it, so the loser of a race
sees InvalidGrant exactly as if the code had never existed.
"""

from __future__ import annotations

import logging
import secrets
import threading
from datetime import UTC, datetime

from app.core.metrics import CODE_REDEMPTIONS, CODES_ISSUED, TOKEN_LOOKUPS
from app.models.authorization_code import AuthorizationCode
from app.models.issued_token import IssuedToken
from app.services.errors import InvalidClient, InvalidGrant, InvalidToken
from app.services.id_token import build_id_token

logger = logging.getLogger(__name__)

TOKEN_TYPE = "Bearer"
DEFAULT_TOKEN_TTL_SEC = 3600

# 32 random bytes = 256 bits, URL-safe base64 without padding
_TOKEN_BYTES = 32


def _now_ts() -> int:
    return int(datetime.now(UTC).timestamp())


def _new_secret() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)


class SessionStore:
    def __init__(
        self,
        *,
        token_ttl_sec: int = DEFAULT_TOKEN_TTL_SEC,
        issuer: str = "esia-mock",
    ) -> None:
        self._token_ttl_sec = token_ttl_sec
        self._issuer = issuer
        self._lock = threading.Lock()
        self._codes: dict[str, AuthorizationCode] = {}
        self._tokens: dict[str, IssuedToken] = {}

    def issue_code(
        self, client_id: str, redirect_uri: str, state: str, subject_id: str
    ) -> str:
        code = _new_secret()
        record = AuthorizationCode(
            code=code,
            client_id=client_id,
            redirect_uri=redirect_uri,
            state=state,
            subject_id=subject_id,
            created_at=_now_ts(),
        )
        with self._lock:
            self._codes[code] = record
        CODES_ISSUED.inc()
        logger.info(
            "Authorization code issued  client_id=%s code=%s…", client_id, code[:6]
        )
        return code

    def redeem_code(self, code: str, client_id: str) -> IssuedToken:
        """Exchange a code for a new token set.

        Raises InvalidGrant for an unknown or already redeemed code and
        InvalidClient when the code belongs to another client.  A client
        mismatch leaves the code in place.
        """
        with self._lock:
            record = self._codes.get(code)
            if record is None:
                CODE_REDEMPTIONS.labels(result="invalid_grant").inc()
                raise InvalidGrant("authorization code not found")
            if record.client_id != client_id:
                CODE_REDEMPTIONS.labels(result="invalid_client").inc()
                raise InvalidClient("client_id does not match authorization code")

            del self._codes[code]
            token = self._new_token(record)
            self._tokens[token.access_token] = token

        CODE_REDEMPTIONS.labels(result="success").inc()
        logger.info(
            "Token issued  client_id=%s access_token=%s…",
            client_id,
            token.access_token[:6],
        )
        return token

    def lookup_token(self, access_token: str) -> IssuedToken:
        with self._lock:
            token = self._tokens.get(access_token)
        if token is None:
            TOKEN_LOOKUPS.labels(result="invalid").inc()
            raise InvalidToken("access token not recognized")
        TOKEN_LOOKUPS.labels(result="valid").inc()
        return token

    def pending_codes(self) -> int:
        with self._lock:
            return len(self._codes)

    def issued_tokens(self) -> int:
        with self._lock:
            return len(self._tokens)

    def clear(self) -> None:
        with self._lock:
            self._codes.clear()
            self._tokens.clear()

    def _new_token(self, record: AuthorizationCode) -> IssuedToken:
        now = _now_ts()
        return IssuedToken(
            access_token=_new_secret(),
            refresh_token=_new_secret(),
            id_token=build_id_token(
                sub=record.subject_id,
                aud=record.client_id,
                issued_at=now,
                ttl_sec=self._token_ttl_sec,
                issuer=self._issuer,
            ),
            expires_in=self._token_ttl_sec,
            token_type=TOKEN_TYPE,
            subject_id=record.subject_id,
            created_at=now,
        )
