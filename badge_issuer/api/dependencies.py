from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from badge_issuer.models.catalog import StructuralError
from badge_issuer.services.issuance import BadgeWorkflow

logger = logging.getLogger(__name__)


def require_workflow(request: Request) -> BadgeWorkflow:
    """Return the workflow built at startup, or 503 when there is none.

    Used as a FastAPI dependency on every catalog/issuance endpoint.
    """
    workflow = getattr(request.app.state, "workflow", None)
    if isinstance(workflow, BadgeWorkflow):
        return workflow

    init_error = getattr(request.app.state, "init_error", None)
    if isinstance(init_error, StructuralError):
        detail = f"Repository is inconsistent: {init_error.reason}"
    else:
        detail = "Badge store is not configured"
    logger.warning("Workflow unavailable: %s", detail)
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
