"""Diagnostics routes — run root cause analysis, read and export reports."""

from fastapi import APIRouter, Depends, Query

from apps.api.exceptions import NotFoundException
from apps.api.services.diagnostic_service import DiagnosticService, get_diagnostic_service

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


@router.post("/run")
async def run_diagnostics(service: DiagnosticService = Depends(get_diagnostic_service)):
    """Probe every service and module and return a fresh report. Never errors on bad health."""
    report = await service.run_diagnosis()
    return report.to_dict()


@router.get("/latest")
async def latest_report(service: DiagnosticService = Depends(get_diagnostic_service)):
    if service.latest is None:
        raise NotFoundException("Report", "latest")
    return service.latest.to_dict()


@router.get("/latest/export")
async def export_latest_report(service: DiagnosticService = Depends(get_diagnostic_service)):
    """Latest report wrapped in a self-describing export document."""
    document = service.export_latest()
    if document is None:
        raise NotFoundException("Report", "latest")
    return document


@router.get("/reports")
async def list_reports(
    limit: int = Query(default=20, ge=1, le=100),
    service: DiagnosticService = Depends(get_diagnostic_service),
):
    """Archived export documents, newest first. Empty when archiving is off."""
    return service.list_archived(limit=limit)


@router.get("/reports/{report_id}")
async def get_report(report_id: str, service: DiagnosticService = Depends(get_diagnostic_service)):
    document = service.get_archived(report_id)
    if document is None:
        raise NotFoundException("Report", report_id)
    return document
