from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IdentityRecord:
    """Synthetic person record served by /userinfo and /rs/prns.

    Field names are snake_case here; the API layer maps them onto the
    camelCase names ESIA clients expect.
    """

    oid: str
    first_name: str
    last_name: str
    middle_name: str
    birth_date: str
    gender: str
    snils: str
    inn: str
    email: str
    mobile: str
    trusted: bool
    verified: bool
    citizenship: str
    status: str
