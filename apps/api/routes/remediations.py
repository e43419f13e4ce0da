"""Remediation routes — targeted fix and emergency recovery."""

from fastapi import APIRouter, Depends

from apps.api.exceptions import RemediationFailedException
from apps.api.schemas.diagnostics import FixOutcomeResponse, FixRequest
from apps.api.services.diagnostic_service import DiagnosticService, get_diagnostic_service
from remediation import FixOutcome, RemediationError

router = APIRouter(prefix="/remediations", tags=["remediations"])


def _outcome_to_response(outcome: FixOutcome) -> FixOutcomeResponse:
    return FixOutcomeResponse(**outcome.to_dict())


@router.post("/fix", response_model=FixOutcomeResponse)
async def apply_fix(
    body: FixRequest,
    service: DiagnosticService = Depends(get_diagnostic_service),
):
    """Apply one fix. Unknown fix descriptions succeed as a generic no-op."""
    try:
        outcome = await service.apply_fix(body.module, body.fix)
    except RemediationError as e:
        raise RemediationFailedException(e.module, e.message, e.fix)
    return _outcome_to_response(outcome)


@router.post("/emergency-recovery", response_model=FixOutcomeResponse)
async def emergency_recovery(service: DiagnosticService = Depends(get_diagnostic_service)):
    """Reset all engine-managed state. Safe to call during a total outage."""
    try:
        outcome = await service.emergency_recovery()
    except RemediationError as e:
        raise RemediationFailedException(e.module, e.message, e.fix)
    return _outcome_to_response(outcome)
