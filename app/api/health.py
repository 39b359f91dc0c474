"""Liveness and readiness probes.

/health answers "is the process alive" and reports how much state the
in-memory stores hold.  /ready always succeeds: there are no backing
services that could be down.
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from app.api.dependencies import identity_generator, session_store

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "stores": {
            "pending_codes": session_store.pending_codes(),
            "issued_tokens": session_store.issued_tokens(),
            "identities": identity_generator.count(),
        },
    }


@router.get("/ready")
def ready() -> Response:
    return Response(status_code=200)
