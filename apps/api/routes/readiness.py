"""Readiness routes — presentation surfaces report what they can render."""

from fastapi import APIRouter, Depends

from apps.api.schemas.diagnostics import ReadinessUpdate
from apps.api.services.diagnostic_service import DiagnosticService, get_diagnostic_service
from diagnostics import SurfaceReadiness

router = APIRouter(prefix="/readiness", tags=["readiness"])


@router.put("/{surface}")
async def report_readiness(
    surface: str,
    body: ReadinessUpdate,
    service: DiagnosticService = Depends(get_diagnostic_service),
):
    readiness = SurfaceReadiness(
        mounted=body.mounted,
        content_rendered=body.content_rendered,
        error_state=body.error_state,
        capabilities=frozenset(body.capabilities),
    )
    service.report_readiness(surface, readiness)
    return {"surface": surface, **readiness.to_dict()}
