"""Health record data structures — not database models, just Python dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Layer(str, Enum):
    """Architectural layer a service or module belongs to."""
    FRONTEND = "frontend"
    MIDDLEWARE = "middleware"
    BACKEND = "backend"


class ServiceStatus(str, Enum):
    """Health of a foundational service."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    DOWN = "down"
    UNKNOWN = "unknown"              # Not sampled


class ModuleStatus(str, Enum):
    """Health of a functional module."""
    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    FAILED = "failed"
    UNKNOWN = "unknown"              # Not sampled


class Priority(str, Enum):
    """How urgently a module needs attention."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ServiceHealthStatus:
    """One sample of a foundational service."""
    service: str                     # "storage", "authentication", ...
    layer: Layer
    status: ServiceStatus
    details: str                     # Human-readable explanation
    critical_path: bool              # Can this service alone take the system down?
    last_check: datetime = field(default_factory=utcnow)
    latency: float | None = None     # Probe duration in ms
    error_rate: float | None = None  # Percentage
    error: str | None = None         # Captured exception/message

    def to_dict(self) -> dict:
        return {
            "service": self.service,
            "layer": self.layer.value,
            "status": self.status.value,
            "latency": self.latency,
            "error_rate": self.error_rate,
            "last_check": self.last_check.isoformat(),
            "error": self.error,
            "details": self.details,
            "critical_path": self.critical_path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ServiceHealthStatus":
        return cls(
            service=data["service"],
            layer=Layer(data["layer"]),
            status=ServiceStatus(data["status"]),
            details=data.get("details", ""),
            critical_path=bool(data.get("critical_path", False)),
            last_check=datetime.fromisoformat(data["last_check"]),
            latency=data.get("latency"),
            error_rate=data.get("error_rate"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class ModuleRCAResult:
    """Diagnosis of one functional module across its layers."""
    module: str
    layer: Layer                     # Dominant layer, for reporting
    status: ModuleStatus
    priority: Priority
    estimated_downtime: str          # e.g. "5-15 minutes"
    rollback_required: bool = False
    root_cause: str | None = None
    symptoms: tuple[str, ...] = ()
    fixes: tuple[str, ...] = ()
    faulted_layers: tuple[Layer, ...] = ()
    tags: tuple[str, ...] = ()       # Finding markers, e.g. "data-store"

    def to_dict(self) -> dict:
        return {
            "module": self.module,
            "layer": self.layer.value,
            "status": self.status.value,
            "root_cause": self.root_cause,
            "symptoms": list(self.symptoms),
            "fixes": list(self.fixes),
            "priority": self.priority.value,
            "estimated_downtime": self.estimated_downtime,
            "rollback_required": self.rollback_required,
            "faulted_layers": [layer.value for layer in self.faulted_layers],
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ModuleRCAResult":
        return cls(
            module=data["module"],
            layer=Layer(data["layer"]),
            status=ModuleStatus(data["status"]),
            priority=Priority(data["priority"]),
            estimated_downtime=data.get("estimated_downtime", ""),
            rollback_required=bool(data.get("rollback_required", False)),
            root_cause=data.get("root_cause"),
            symptoms=tuple(data.get("symptoms") or ()),
            fixes=tuple(data.get("fixes") or ()),
            faulted_layers=tuple(Layer(v) for v in data.get("faulted_layers") or ()),
            tags=tuple(data.get("tags") or ()),
        )
