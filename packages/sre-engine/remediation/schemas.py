"""Remediation outcome types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

SYSTEM_MODULE = "system"
EMERGENCY_RECOVERY_FIX = "Emergency recovery"


class RemediationError(Exception):
    """A fix or emergency recovery failed. Carries the module it targeted."""

    def __init__(self, module: str, message: str, fix: str | None = None):
        self.module = module
        self.message = message
        self.fix = fix
        super().__init__(f"Fix failed for {module}: {message}")


@dataclass(frozen=True)
class FixOutcome:
    """Result of one remediation operation."""
    module: str
    fix: str
    action: str                      # Registry action name that ran
    success: bool
    message: str
    applied_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "module": self.module,
            "fix": self.fix,
            "action": self.action,
            "success": self.success,
            "message": self.message,
            "applied_at": self.applied_at.isoformat(),
        }
