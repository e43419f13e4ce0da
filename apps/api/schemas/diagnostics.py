"""Request/response schemas for diagnostics, remediation and host inputs."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ── Request Schemas ────────────────────────────────────

class FixRequest(BaseModel):
    """Apply one targeted fix to one module."""
    module: str = Field(min_length=1, max_length=100)
    fix: str = Field(min_length=1, max_length=500)


class ReadinessUpdate(BaseModel):
    """Readiness reported by a presentation surface."""
    mounted: bool = True
    content_rendered: bool = True
    error_state: bool = False
    capabilities: list[str] = Field(default_factory=list, description="e.g. sign-up-form, charts")


class StateWrite(BaseModel):
    """Host application writes one piece of client state."""
    value: str
    scope: Literal["storage", "session"] = "storage"


class StorageAvailability(BaseModel):
    """Host application reports whether its persistent store is readable."""
    available: bool


# ── Response Schemas ───────────────────────────────────

class FixOutcomeResponse(BaseModel):
    module: str
    fix: str
    action: str
    success: bool
    message: str
    applied_at: datetime


class StateWriteResponse(BaseModel):
    key: str
    scope: str
    removed: bool | None = None
