from fastapi import Request
from fastapi.responses import JSONResponse

class PulsecheckException(Exception):
    """Base exception for Pulsecheck API errors."""

    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(PulsecheckException):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with id '{resource_id}' not found",
            status_code=404,
            details={"resource": resource, "id": resource_id},
        )


class RemediationFailedException(PulsecheckException):
    """A fix or emergency recovery raised (502 — the repair failed, not the request)."""

    def __init__(self, module: str, message: str, fix: str | None = None):
        super().__init__(
            message=f"Fix failed for {module}: {message}",
            status_code=502,
            details={"module": module, "fix": fix},
        )


async def pulsecheck_exception_handler(request: Request, exc: PulsecheckException) -> JSONResponse:
    """Converts our custom exceptions into clean JSON error responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.message,
                "details": exc.details,
            }
        },
    )
