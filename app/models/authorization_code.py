from __future__ import annotations

from dataclasses import dataclass

# •	code: str (opaque, URL-safe)
# •	client_id: str
# •	redirect_uri: str
# •	state: str (echoed back to the client)
# •	subject_id: str (phone number typed on the authorize form)
# •	created_at: int


@dataclass(frozen=True, slots=True)
class AuthorizationCode:
    code: str
    client_id: str
    redirect_uri: str
    state: str
    subject_id: str
    created_at: int
