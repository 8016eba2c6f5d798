"""Issuer, class and badge creation endpoints.

- POST /v1/issuer   — award.html, issuer.json, img.png (three commits)
- POST /v1/classes  — <Class>/class.json, <Class>/img.png (two commits)
- POST /v1/badges   — <Class>/<uid>.json (one commit)

Images travel in the request body, base64 encoded.  A body that is not
valid base64, or a class name that cannot be a directory, fails the
call with 422 before anything is committed.
A failure from GitHub is returned as 502; files committed before the
failure stay in the repository.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Base64Bytes, BaseModel, Field

from badge_issuer.api.dependencies import require_workflow
from badge_issuer.services.issuance import (
    BadgeInput,
    BadgeWorkflow,
    ClassInput,
    ImagePreconditionError,
    InvalidClassSegmentError,
    IssuerInput,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["issuance"])

# Shape of a class directory name as produced by class_segment()
_CLASS_SEGMENT_PATTERN = r"^[^\s/\\]+$"


class IssuerIn(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    description: str = ""
    image: Base64Bytes
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")


class IssuerOut(BaseModel):
    name: str
    url: str
    description: str
    image: str
    email: str


class ClassIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    image: Base64Bytes
    criteria: str = Field(min_length=1)


class ClassOut(BaseModel):
    name: str
    description: str
    image: str
    criteria: str
    issuer: str


class BadgeIn(BaseModel):
    class_name: str = Field(min_length=1, pattern=_CLASS_SEGMENT_PATTERN)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")


class RecipientOut(BaseModel):
    type: str
    hashed: bool
    identity: str


class VerifyOut(BaseModel):
    type: str
    url: str


class BadgeOut(BaseModel):
    uid: str
    recipient: RecipientOut
    badge: str
    issuedOn: int
    verify: VerifyOut


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except (ImagePreconditionError, InvalidClassSegmentError) as e:
        logger.warning("Rejected issuance: %s", e)
        raise HTTPException(
            status_code=422, detail=str(e)
        ) from None
    except FileExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=f"{e} already exists"
        ) from None
    except httpx.HTTPStatusError as e:
        logger.error(
            "GitHub rejected write: %s %s", e.response.status_code, e.request.url
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"remote store returned {e.response.status_code}",
        ) from None


@router.post("/issuer", response_model=IssuerOut, status_code=201)
async def create_issuer(
    body: IssuerIn,
    workflow: Annotated[BadgeWorkflow, Depends(require_workflow)],
) -> IssuerOut:
    with _store_errors():
        issuer = await workflow.create_issuer(
            IssuerInput(
                name=body.name,
                url=body.url,
                description=body.description,
                image=body.image,
                email=body.email,
            )
        )
    return IssuerOut(**issuer.to_document())


@router.post("/classes", response_model=ClassOut, status_code=201)
async def create_class(
    body: ClassIn,
    workflow: Annotated[BadgeWorkflow, Depends(require_workflow)],
) -> ClassOut:
    with _store_errors():
        badge_class = await workflow.create_class(
            ClassInput(
                name=body.name,
                description=body.description,
                image=body.image,
                criteria=body.criteria,
            )
        )
    return ClassOut(**badge_class.to_document())


@router.post("/badges", response_model=BadgeOut, status_code=201)
async def create_badge(
    body: BadgeIn,
    workflow: Annotated[BadgeWorkflow, Depends(require_workflow)],
) -> BadgeOut:
    with _store_errors():
        assertion = await workflow.create_badge(
            BadgeInput(name=body.class_name, email=body.email)
        )
    return BadgeOut.model_validate(assertion.to_document())
