"""Event schemas — lightweight messages flowing over the event bus.

These are NOT the report itself. They carry just enough for a subscriber
(an operator dashboard, a pager bridge) to decide whether to fetch the full
report or re-run diagnosis:

    ReportAssembler → DiagnosisCompletedEvent → EventBus → dashboard
    RemediationExecutor → RemediationEvent / RecoveryEvent → EventBus → audit log

Each event has:
- id: unique identifier (for deduplication)
- timestamp: when the event occurred
- source: who/what generated it
- payload: the actual data
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class EventType(str, Enum):
    """Types of events published by the diagnostics engine."""
    # Diagnosis lifecycle
    DIAGNOSIS_COMPLETED = "diagnosis.completed"      # Report finalized

    # Remediation lifecycle
    REMEDIATION_APPLIED = "remediation.applied"      # Targeted fix succeeded
    REMEDIATION_FAILED = "remediation.failed"        # Targeted fix raised

    # Emergency recovery
    RECOVERY_COMPLETED = "recovery.completed"
    RECOVERY_FAILED = "recovery.failed"


# Topic names (topic = Redis channel)
DIAGNOSIS_TOPIC = "diagnosis.completed"
REMEDIATION_TOPIC = "remediation"
RECOVERY_TOPIC = "recovery"


@dataclass
class BaseEvent:
    """Base event — all events inherit from this."""
    source: str                                          # "assembler", "executor", "api"
    event_type: EventType = None                         # Set by subclasses in __post_init__
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    metadata: dict = field(default_factory=dict)         # Extra context (request_id, etc.)

    def to_dict(self) -> dict:
        """Serialize for JSON transport over the event bus."""
        return {
            "id": self.id,
            "event_type": self.event_type.value,
            "source": self.source,
            "timestamp": self.timestamp,
            "metadata": self.metadata,
            "payload": self._payload_dict(),
        }

    def _payload_dict(self) -> dict:
        """Override in subclasses to add event-specific data."""
        return {}


@dataclass
class DiagnosisCompletedEvent(BaseEvent):
    """Summary of a finalized report."""
    report_id: str = ""
    overall_status: str = ""
    primary_root_cause: str = ""
    rollback_recommendation: bool = False
    immediate_action_count: int = 0

    def __post_init__(self):
        self.event_type = EventType.DIAGNOSIS_COMPLETED

    def _payload_dict(self) -> dict:
        return {
            "report_id": self.report_id,
            "overall_status": self.overall_status,
            "primary_root_cause": self.primary_root_cause,
            "rollback_recommendation": self.rollback_recommendation,
            "immediate_action_count": self.immediate_action_count,
        }


@dataclass
class RemediationEvent(BaseEvent):
    """A targeted fix was applied or failed."""
    module: str = ""
    fix: str = ""
    action: str = ""                        # Registry action that handled the fix
    success: bool = True
    message: str = ""

    def __post_init__(self):
        if self.event_type is None:
            self.event_type = (
                EventType.REMEDIATION_APPLIED if self.success else EventType.REMEDIATION_FAILED
            )

    def _payload_dict(self) -> dict:
        return {
            "module": self.module,
            "fix": self.fix,
            "action": self.action,
            "success": self.success,
            "message": self.message,
        }


@dataclass
class RecoveryEvent(BaseEvent):
    """Emergency recovery finished."""
    success: bool = True
    steps: list = field(default_factory=list)     # Step names that ran
    errors: list = field(default_factory=list)    # "step: message" per failed step

    def __post_init__(self):
        if self.event_type is None:
            self.event_type = (
                EventType.RECOVERY_COMPLETED if self.success else EventType.RECOVERY_FAILED
            )

    def _payload_dict(self) -> dict:
        return {
            "success": self.success,
            "steps": list(self.steps),
            "errors": list(self.errors),
        }
