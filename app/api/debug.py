"""Inspection endpoint for people running the mock.

Lists every identity generated so far, keyed by phone number, plus the
size of the code and token maps.  Unauthenticated.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from app.api.dependencies import identity_generator, session_store
from app.api.userinfo import PersonOut

router = APIRouter(tags=["debug"])


class DebugSnapshot(BaseModel):
    identity_count: int
    pending_codes: int
    issued_tokens: int
    identities: dict[str, PersonOut]


@router.get("/debug/identities", response_model=DebugSnapshot)
def list_identities() -> DebugSnapshot:
    records = identity_generator.get_all()
    return DebugSnapshot(
        identity_count=len(records),
        pending_codes=session_store.pending_codes(),
        issued_tokens=session_store.issued_tokens(),
        identities={
            phone: PersonOut.from_record(record) for phone, record in records.items()
        },
    )
