from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.api.dependencies import current_identity
from app.models.identity import IdentityRecord

logger = logging.getLogger(__name__)

router = APIRouter(tags=["userinfo"])


class PersonOut(BaseModel):
    """Identity in ESIA's JSON shape (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

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

    @classmethod
    def from_record(cls, record: IdentityRecord) -> PersonOut:
        return cls(
            oid=record.oid,
            first_name=record.first_name,
            last_name=record.last_name,
            middle_name=record.middle_name,
            birth_date=record.birth_date,
            gender=record.gender,
            snils=record.snils,
            inn=record.inn,
            email=record.email,
            mobile=record.mobile,
            trusted=record.trusted,
            verified=record.verified,
            citizenship=record.citizenship,
            status=record.status,
        )


@router.get("/userinfo", response_model=PersonOut)
def userinfo(
    identity: Annotated[IdentityRecord, Depends(current_identity)],
) -> PersonOut:
    logger.info("UserInfo served  oid=%s", identity.oid)
    return PersonOut.from_record(identity)


@router.get("/rs/prns/{oid}", response_model=PersonOut)
def get_person(
    oid: str,
    identity: Annotated[IdentityRecord, Depends(current_identity)],
) -> PersonOut:
    """Person lookup by oid.  A token only grants access to its own person."""
    if identity.oid != oid:
        logger.warning(
            "Person lookup denied: token oid=%s requested oid=%s", identity.oid, oid
        )
        raise HTTPException(status.HTTP_403_FORBIDDEN, "access_denied")
    logger.info("Person served  oid=%s", oid)
    return PersonOut.from_record(identity)
