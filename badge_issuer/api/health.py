"""Liveness and readiness.

/health answers 200 whenever the process can respond and reports
whether the catalog was reconciled.  /ready answers 503 until a
workflow exists, so a load balancer keeps traffic away from an instance
that cannot issue.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from badge_issuer.models.catalog import StructuralError
from badge_issuer.services.issuance import BadgeWorkflow

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    workflow = getattr(request.app.state, "workflow", None)
    init_error = getattr(request.app.state, "init_error", None)

    checks: dict[str, object] = {}
    if isinstance(workflow, BadgeWorkflow):
        checks["store"] = "ok"
        checks["issuer"] = workflow.catalog.has_issuer
        checks["classes"] = len(workflow.catalog.classes)
        overall = "ok"
    elif isinstance(init_error, StructuralError):
        checks["store"] = "inconsistent"
        checks["reason"] = init_error.reason
        overall = "degraded"
    else:
        checks["store"] = "not_configured"
        overall = "degraded"

    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready(request: Request) -> Response:
    if isinstance(getattr(request.app.state, "workflow", None), BadgeWorkflow):
        return Response(status_code=200)
    return Response(status_code=503)
