from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from badge_issuer.api.dependencies import require_workflow
from badge_issuer.services.issuance import BadgeWorkflow

router = APIRouter(prefix="/v1", tags=["catalog"])


class CatalogClassOut(BaseModel):
    name: str
    badges: list[str]


class CatalogOut(BaseModel):
    has_issuer: bool
    classes: list[CatalogClassOut]


@router.get("/catalog", response_model=CatalogOut)
def get_catalog(
    workflow: Annotated[BadgeWorkflow, Depends(require_workflow)],
) -> CatalogOut:
    """Snapshot taken at startup; classes and badges issued since are not listed."""
    return CatalogOut.model_validate(workflow.catalog.to_dict())
