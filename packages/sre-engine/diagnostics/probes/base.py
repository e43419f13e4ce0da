"""Base probe interface — one read-only health check against one target."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..endpoint_checker import EndpointChecker, EndpointResult
from ..schemas import (
    Layer,
    ModuleRCAResult,
    ModuleStatus,
    Priority,
    ServiceHealthStatus,
    ServiceStatus,
)
from ..snapshot import EnvironmentSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProbeError(Exception):
    """Raised inside a probe when its target is definitively broken."""


@dataclass(frozen=True)
class ProbeContext:
    """What a probe is allowed to look at."""
    snapshot: EnvironmentSnapshot
    endpoints: EndpointChecker


class BaseProbe(ABC, Generic[T]):
    """Abstract base class for probes.

    ``run()`` is the boundary: it enforces the timeout and converts any
    exception into a failure record, so nothing ever escapes a probe.
    """

    def __init__(self, timeout: float = 5.0, name: str | None = None):
        """
        Initialize probe.

        Args:
            timeout: Seconds before the probe is treated as failed
            name: Probe name for identification
        """
        self.timeout = timeout
        self.name = name or self.__class__.__name__

    @property
    @abstractmethod
    def target(self) -> str:
        """Name of the service or module this probe inspects."""

    @abstractmethod
    async def probe(self, ctx: ProbeContext) -> T:
        """Inspect the target and return its health record."""

    @abstractmethod
    def failure(self, error: str) -> T:
        """Build the record reported when the probe itself blew up."""

    def timed_out(self, error: str) -> T:
        """Build the record reported when the probe ran out of time."""
        return self.failure(error)

    async def run(self, ctx: ProbeContext) -> T:
        try:
            return await asyncio.wait_for(self.probe(ctx), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Probe %s timed out after %.1fs", self.name, self.timeout)
            return self.timed_out(f"Probe timed out after {self.timeout:g}s")
        except Exception as e:
            logger.warning("Probe %s failed: %s", self.name, e)
            return self.failure(str(e) or e.__class__.__name__)


# ── Service probes ────────────────────────────────────

@dataclass(frozen=True)
class ServiceCheck:
    """Verdict of a service inspection, before timing is attached."""
    status: ServiceStatus
    details: str
    error_rate: float | None = None
    error: str | None = None


class ServiceProbe(BaseProbe[ServiceHealthStatus]):
    """Probe for a foundational service."""

    service: str = ""
    layer: Layer = Layer.BACKEND
    critical_path: bool = True
    failure_details: str = "Service check failed"

    @property
    def target(self) -> str:
        return self.service

    @abstractmethod
    async def inspect(self, ctx: ProbeContext) -> ServiceCheck:
        """Decide the service status from the context."""

    async def probe(self, ctx: ProbeContext) -> ServiceHealthStatus:
        start = time.perf_counter()
        check = await self.inspect(ctx)
        latency = (time.perf_counter() - start) * 1000
        return ServiceHealthStatus(
            service=self.service,
            layer=self.layer,
            status=check.status,
            details=check.details,
            critical_path=self.critical_path,
            latency=latency,
            error_rate=check.error_rate,
            error=check.error,
        )

    def failure(self, error: str) -> ServiceHealthStatus:
        return ServiceHealthStatus(
            service=self.service,
            layer=self.layer,
            status=ServiceStatus.DOWN,
            details=self.failure_details,
            critical_path=self.critical_path,
            error=error,
        )


# ── Module probes ─────────────────────────────────────

_STATUS_RANK = {
    ModuleStatus.OPERATIONAL: 0,
    ModuleStatus.UNKNOWN: 1,
    ModuleStatus.DEGRADED: 2,
    ModuleStatus.FAILED: 3,
}

PROBE_HEADERS = {"X-Diagnostic-Probe": "1"}

TAG_UNREACHABLE = "api-unreachable"
TAG_MISSING_ROUTE = "api-missing-route"
TAG_DATA_STORE = "data-store"

_LAYER_LABEL = {
    Layer.FRONTEND: "Frontend",
    Layer.MIDDLEWARE: "Middleware",
    Layer.BACKEND: "Backend",
}


class ModuleFindings:
    """Symptoms and fixes accumulated across a module's layers.

    Status only ever escalates, so a mild finding recorded after a
    definitive failure cannot mask it.
    """

    def __init__(self):
        self.status = ModuleStatus.OPERATIONAL
        self.tags: set[str] = set()
        self._symptoms: list[str] = []
        self._fixes: list[str] = []
        self._layers: list[Layer] = []

    def record(
        self,
        layer: Layer,
        symptom: str,
        fix: str,
        status: ModuleStatus | None = None,
        tag: str | None = None,
    ) -> None:
        text = f"{_LAYER_LABEL[layer]}: {symptom}"
        if text not in self._symptoms:
            self._symptoms.append(text)
        if fix not in self._fixes:
            self._fixes.append(fix)
        if layer not in self._layers:
            self._layers.append(layer)
        if tag:
            self.tags.add(tag)
        if status is not None:
            self.escalate(status)

    def escalate(self, status: ModuleStatus) -> None:
        if _STATUS_RANK[status] > _STATUS_RANK[self.status]:
            self.status = status

    @property
    def symptoms(self) -> tuple[str, ...]:
        return tuple(self._symptoms)

    @property
    def fixes(self) -> tuple[str, ...]:
        return tuple(self._fixes)

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)


class ModuleProbe(BaseProbe[ModuleRCAResult]):
    """Probe for a functional module; inspects presentation, API and data layers."""

    module: str = ""
    layer: Layer = Layer.FRONTEND
    restart_fix: str = "Restart service"

    @property
    def target(self) -> str:
        return self.module

    @abstractmethod
    async def inspect(self, ctx: ProbeContext, findings: ModuleFindings) -> None:
        """Record symptoms for every layer; never stop at the first failure."""

    @abstractmethod
    def root_cause(self, findings: ModuleFindings) -> str:
        ...

    @abstractmethod
    def priority(self, status: ModuleStatus) -> Priority:
        ...

    def estimated_downtime(self, status: ModuleStatus) -> str:
        return "5-15 minutes"

    def rollback_required(self, findings: ModuleFindings) -> bool:
        return False

    def conclude(self, findings: ModuleFindings) -> ModuleRCAResult:
        status = findings.status
        return ModuleRCAResult(
            module=self.module,
            layer=self.layer,
            status=status,
            priority=Priority.LOW if status == ModuleStatus.OPERATIONAL else self.priority(status),
            estimated_downtime=self.estimated_downtime(status),
            rollback_required=self.rollback_required(findings),
            root_cause=self.root_cause(findings),
            symptoms=findings.symptoms,
            fixes=findings.fixes,
            faulted_layers=findings.layers,
            tags=tuple(sorted(findings.tags)),
        )

    async def check_api(
        self,
        ctx: ProbeContext,
        findings: ModuleFindings,
        method: str,
        path: str,
        not_found: tuple[str, str],
        unreachable: tuple[str, str],
        json: Any = None,
    ) -> EndpointResult:
        """Check that an API route exists; a 404 or no answer is a definitive failure.

        ``not_found`` and ``unreachable`` are (symptom, fix) pairs.
        """
        result = await ctx.endpoints.check(method, path, json=json, headers=PROBE_HEADERS)
        if not result.reachable:
            findings.record(Layer.MIDDLEWARE, *unreachable, ModuleStatus.FAILED, tag=TAG_UNREACHABLE)
        elif result.not_found:
            findings.record(Layer.MIDDLEWARE, *not_found, ModuleStatus.FAILED, tag=TAG_MISSING_ROUTE)
        return result

    async def probe(self, ctx: ProbeContext) -> ModuleRCAResult:
        findings = ModuleFindings()
        await self.inspect(ctx, findings)
        return self.conclude(findings)

    def failure(self, error: str) -> ModuleRCAResult:
        return ModuleRCAResult(
            module=self.module,
            layer=self.layer,
            status=ModuleStatus.FAILED,
            priority=self.priority(ModuleStatus.FAILED),
            estimated_downtime=self.estimated_downtime(ModuleStatus.FAILED),
            root_cause=f"{self.module} probe raised: {error}",
            symptoms=(f"Probe: {error}",),
            fixes=(self.restart_fix,),
            faulted_layers=(self.layer,),
        )

    def timed_out(self, error: str) -> ModuleRCAResult:
        return ModuleRCAResult(
            module=self.module,
            layer=self.layer,
            status=ModuleStatus.UNKNOWN,
            priority=self.priority(ModuleStatus.UNKNOWN),
            estimated_downtime=self.estimated_downtime(ModuleStatus.UNKNOWN),
            root_cause=f"{self.module} could not be sampled: {error}",
            symptoms=(f"Probe: {error}",),
            fixes=(self.restart_fix,),
        )
