"""State routes — the host application mirrors its client state here."""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from apps.api.schemas.diagnostics import StateWrite, StateWriteResponse, StorageAvailability
from apps.api.services.diagnostic_service import DiagnosticService, get_diagnostic_service

router = APIRouter(prefix="/state", tags=["state"])

# Registered before /{key} so it is never treated as a state key
AVAILABILITY_PATH = "/_availability"


@router.put(AVAILABILITY_PATH, response_model=StorageAvailability)
async def report_storage_availability(
    body: StorageAvailability,
    service: DiagnosticService = Depends(get_diagnostic_service),
):
    """Mark the persistent store readable or unreachable for the next diagnosis."""
    service.set_storage_available(body.available)
    return StorageAvailability(available=service.store.available)


@router.put("/{key}", response_model=StateWriteResponse)
async def write_state(
    key: str,
    body: StateWrite,
    service: DiagnosticService = Depends(get_diagnostic_service),
):
    service.write_state(key, body.value, body.scope)
    return StateWriteResponse(key=key, scope=body.scope)


@router.delete("/{key}", response_model=StateWriteResponse)
async def delete_state(
    key: str,
    scope: Literal["storage", "session"] = Query(default="storage"),
    service: DiagnosticService = Depends(get_diagnostic_service),
):
    """Idempotent: deleting an absent key succeeds with removed=false."""
    removed = service.delete_state(key, scope)
    return StateWriteResponse(key=key, scope=scope, removed=removed)
