"""Health diagnostics — probes, collectors and the snapshot they read."""

from .collector import Collector, ModuleDiagnosisCollector, ServiceHealthCollector
from .endpoint_checker import EndpointChecker, EndpointResult
from .probes import ProbeContext, ProbeError, default_module_probes, default_service_probes
from .schemas import (
    Layer,
    ModuleRCAResult,
    ModuleStatus,
    Priority,
    ServiceHealthStatus,
    ServiceStatus,
)
from .snapshot import EnvironmentSnapshot, SnapshotProvider, SurfaceReadiness

__all__ = [
    "Collector",
    "ModuleDiagnosisCollector",
    "ServiceHealthCollector",
    "EndpointChecker",
    "EndpointResult",
    "ProbeContext",
    "ProbeError",
    "default_module_probes",
    "default_service_probes",
    "Layer",
    "ModuleRCAResult",
    "ModuleStatus",
    "Priority",
    "ServiceHealthStatus",
    "ServiceStatus",
    "EnvironmentSnapshot",
    "SnapshotProvider",
    "SurfaceReadiness",
]
