from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """Token set handed out by a successful code exchange.

    ``expires_in`` is reported to clients for protocol shape only; nothing
    expires tokens inside this process.
    """

    access_token: str
    refresh_token: str
    id_token: str
    expires_in: int
    token_type: str
    subject_id: str
    created_at: int
