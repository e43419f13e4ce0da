from apps.api.schemas.diagnostics import (
    FixRequest, ReadinessUpdate, StateWrite, StorageAvailability,
    FixOutcomeResponse, StateWriteResponse,
)


__all__ = [
    # Requests
    "FixRequest", "ReadinessUpdate", "StateWrite", "StorageAvailability",
    # Responses
    "FixOutcomeResponse", "StateWriteResponse",
]
