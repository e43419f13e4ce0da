"""Root cause synthesis — one headline cause and overall severity from many signals.

Everything here is a pure function of the (services, modules) snapshot handed
in by the assembler: no I/O, no clock, no shared state.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from diagnostics.probes.modules import (
    BillingProbe,
    IdentityProbe,
    StrategyEngineProbe,
)
from diagnostics.probes.base import TAG_DATA_STORE
from diagnostics.probes.services import ApiGatewayProbe, StorageProbe
from diagnostics.schemas import (
    ModuleRCAResult,
    ModuleStatus,
    Priority,
    ServiceHealthStatus,
    ServiceStatus,
)

from .schemas import OverallStatus

# Structural dependencies, for operator context. Does not vary by run.
CRITICAL_PATH: tuple[str, ...] = (
    "User authentication → User session → Dashboard access",
    "Behavior input → Strategy processing → Strategy output",
    "Data storage → Analytics → Reporting",
    "Payment processing → Subscription management → Feature access",
)


@dataclass(frozen=True)
class SynthesisThresholds:
    """Heuristic cut-offs; inherited values, not tuned."""
    outage_down_services: int = 2        # Down critical-path services for total_outage
    outage_critical_modules: int = 2     # Critical failed modules for total_outage
    cascading_degraded_modules: int = 3  # Degraded modules for "cascading degradation"


DEFAULT_THRESHOLDS = SynthesisThresholds()


@dataclass(frozen=True)
class Synthesis:
    """Output of root cause synthesis."""
    overall_status: OverallStatus
    primary_root_cause: str
    cascading_failures: tuple[str, ...]
    critical_path: tuple[str, ...]


# ── Signal selectors ──────────────────────────────────

def down_critical_services(services: Sequence[ServiceHealthStatus]) -> list[ServiceHealthStatus]:
    return [s for s in services if s.critical_path and s.status == ServiceStatus.DOWN]


def failed_critical_modules(modules: Sequence[ModuleRCAResult]) -> list[ModuleRCAResult]:
    return [
        m for m in modules
        if m.priority == Priority.CRITICAL and m.status == ModuleStatus.FAILED
    ]


# ── Overall status ────────────────────────────────────

def determine_overall_status(
    services: Sequence[ServiceHealthStatus],
    modules: Sequence[ModuleRCAResult],
    thresholds: SynthesisThresholds = DEFAULT_THRESHOLDS,
) -> OverallStatus:
    """First matching rule wins."""
    down = len(down_critical_services(services))
    critical = len(failed_critical_modules(modules))

    if down >= thresholds.outage_down_services or critical >= thresholds.outage_critical_modules:
        return OverallStatus.TOTAL_OUTAGE
    if down >= 1 or critical >= 1:
        return OverallStatus.CRITICAL_FAILURE
    if (
        any(s.status == ServiceStatus.DEGRADED for s in services)
        or any(m.status == ModuleStatus.DEGRADED for m in modules)
    ):
        return OverallStatus.DEGRADED
    return OverallStatus.OPERATIONAL


# ── Primary root cause ────────────────────────────────

def identify_primary_root_cause(
    services: Sequence[ServiceHealthStatus],
    modules: Sequence[ModuleRCAResult],
    thresholds: SynthesisThresholds = DEFAULT_THRESHOLDS,
) -> str:
    down = down_critical_services(services)
    if down:
        names = ", ".join(s.service for s in down)
        return f"Critical infrastructure failure: {names} down"

    critical = failed_critical_modules(modules)
    if critical:
        first = critical[0]
        return first.root_cause or f"{first.module} failure"

    degraded = [m for m in modules if m.status == ModuleStatus.DEGRADED]
    if len(degraded) >= thresholds.cascading_degraded_modules:
        return "Cascading system degradation across multiple modules"

    return "System operational with minor issues"


# ── Cascading failures ────────────────────────────────

Predicate = Callable[[Sequence[ServiceHealthStatus], Sequence[ModuleRCAResult]], bool]


@dataclass(frozen=True)
class CascadeRule:
    """A known upstream failure and its fixed downstream-impact statements."""
    name: str
    applies: Predicate
    statements: tuple[str, ...]


def _module_failed(module: str) -> Predicate:
    def predicate(services, modules) -> bool:
        return any(m.module == module and m.status == ModuleStatus.FAILED for m in modules)
    return predicate


def _service_down(service: str) -> Predicate:
    def predicate(services, modules) -> bool:
        return any(s.service == service and s.status == ServiceStatus.DOWN for s in services)
    return predicate


def _data_layer_fault(services, modules) -> bool:
    if _service_down(StorageProbe.service)(services, modules):
        return True
    return any(TAG_DATA_STORE in m.tags for m in modules)


CASCADE_RULES: tuple[CascadeRule, ...] = (
    CascadeRule(
        name="identity",
        applies=_module_failed(IdentityProbe.module),
        statements=(
            "Authentication failure → All user-dependent modules affected",
            "User sessions → Dashboard and profile access blocked",
            "API authentication → Gateway rejects all backend requests",
        ),
    ),
    CascadeRule(
        name="strategy-engine",
        applies=_module_failed(StrategyEngineProbe.module),
        statements=(
            "Strategy engine failure → Strategy generation blocked",
            "Behavior logging → Core product functionality unavailable",
        ),
    ),
    CascadeRule(
        name="data-layer",
        applies=_data_layer_fault,
        statements=(
            "Data layer issues → Data persistence and retrieval affected",
            "User data → Profile and settings inaccessible",
        ),
    ),
    CascadeRule(
        name="billing",
        applies=_module_failed(BillingProbe.module),
        statements=(
            "Payment processing failure → Subscription management and feature access blocked",
        ),
    ),
    CascadeRule(
        name="api-gateway",
        applies=_service_down(ApiGatewayProbe.service),
        statements=(
            "API gateway outage → All module API surfaces unreachable",
        ),
    ),
)


def identify_cascading_failures(
    services: Sequence[ServiceHealthStatus],
    modules: Sequence[ModuleRCAResult],
    rules: Sequence[CascadeRule] = CASCADE_RULES,
) -> tuple[str, ...]:
    """Apply each rule once, in registry order."""
    statements: list[str] = []
    fired: set[str] = set()
    for rule in rules:
        if rule.name in fired or not rule.applies(services, modules):
            continue
        fired.add(rule.name)
        statements.extend(rule.statements)
    return tuple(statements)


def synthesize(
    services: Sequence[ServiceHealthStatus],
    modules: Sequence[ModuleRCAResult],
    thresholds: SynthesisThresholds = DEFAULT_THRESHOLDS,
) -> Synthesis:
    return Synthesis(
        overall_status=determine_overall_status(services, modules, thresholds),
        primary_root_cause=identify_primary_root_cause(services, modules, thresholds),
        cascading_failures=identify_cascading_failures(services, modules),
        critical_path=CRITICAL_PATH,
    )
