"""RCA report data structures — not database models, just Python dataclasses.

A SystemRCAReport is built fresh for every diagnostic run and is immutable
once returned: every collection inside it is a tuple.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from diagnostics.schemas import ModuleRCAResult, ServiceHealthStatus


class OverallStatus(str, Enum):
    """System-wide status, ordered by severity (UNKNOWN sits outside the order)."""
    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    CRITICAL_FAILURE = "critical_failure"
    TOTAL_OUTAGE = "total_outage"
    UNKNOWN = "unknown"              # Synthesis itself failed


_SEVERITY = {
    OverallStatus.OPERATIONAL: 0,
    OverallStatus.DEGRADED: 1,
    OverallStatus.CRITICAL_FAILURE: 2,
    OverallStatus.TOTAL_OUTAGE: 3,
}


def severity_rank(status: OverallStatus) -> int:
    """Position in operational < degraded < critical_failure < total_outage.

    UNKNOWN has no rank and raises ValueError.
    """
    try:
        return _SEVERITY[status]
    except KeyError:
        raise ValueError(f"{status.value} has no severity rank") from None


@dataclass(frozen=True)
class RecoveryAction:
    """One planned remediation step."""
    action: str                      # What to do
    eta: str                         # e.g. "15-30 minutes"
    owner: str                       # "Ops/SRE" | "Engineering"

    def to_dict(self) -> dict:
        return {"action": self.action, "eta": self.eta, "owner": self.owner}

    @classmethod
    def from_dict(cls, data: dict) -> "RecoveryAction":
        return cls(action=data["action"], eta=data["eta"], owner=data["owner"])


@dataclass(frozen=True)
class RecoveryPlan:
    """Two-tier remediation plan."""
    immediate: tuple[RecoveryAction, ...] = ()
    short_term: tuple[RecoveryAction, ...] = ()

    def to_dict(self) -> dict:
        return {
            "immediate": [a.to_dict() for a in self.immediate],
            "short_term": [a.to_dict() for a in self.short_term],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RecoveryPlan":
        return cls(
            immediate=tuple(RecoveryAction.from_dict(a) for a in data.get("immediate") or ()),
            short_term=tuple(RecoveryAction.from_dict(a) for a in data.get("short_term") or ()),
        )


def _new_report_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class SystemRCAReport:
    """The single output of one diagnostic run."""
    overall_status: OverallStatus
    primary_root_cause: str
    estimated_recovery_time: str
    cascading_failures: tuple[str, ...] = ()
    critical_path: tuple[str, ...] = ()
    service_health: tuple[ServiceHealthStatus, ...] = ()
    module_analysis: tuple[ModuleRCAResult, ...] = ()
    immediate_actions: tuple[str, ...] = ()
    recovery_plan: RecoveryPlan = field(default_factory=RecoveryPlan)
    rollback_recommendation: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    report_id: str = field(default_factory=_new_report_id)

    def to_dict(self) -> dict:
        """Serialize to plain JSON-compatible types."""
        return {
            "report_id": self.report_id,
            "timestamp": self.timestamp.isoformat(),
            "overall_status": self.overall_status.value,
            "primary_root_cause": self.primary_root_cause,
            "cascading_failures": list(self.cascading_failures),
            "critical_path": list(self.critical_path),
            "service_health": [s.to_dict() for s in self.service_health],
            "module_analysis": [m.to_dict() for m in self.module_analysis],
            "immediate_actions": list(self.immediate_actions),
            "recovery_plan": self.recovery_plan.to_dict(),
            "rollback_recommendation": self.rollback_recommendation,
            "estimated_recovery_time": self.estimated_recovery_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SystemRCAReport":
        return cls(
            report_id=data["report_id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            overall_status=OverallStatus(data["overall_status"]),
            primary_root_cause=data["primary_root_cause"],
            cascading_failures=tuple(data.get("cascading_failures") or ()),
            critical_path=tuple(data.get("critical_path") or ()),
            service_health=tuple(
                ServiceHealthStatus.from_dict(s) for s in data.get("service_health") or ()
            ),
            module_analysis=tuple(
                ModuleRCAResult.from_dict(m) for m in data.get("module_analysis") or ()
            ),
            immediate_actions=tuple(data.get("immediate_actions") or ()),
            recovery_plan=RecoveryPlan.from_dict(data.get("recovery_plan") or {}),
            rollback_recommendation=bool(data.get("rollback_recommendation", False)),
            estimated_recovery_time=data["estimated_recovery_time"],
        )
