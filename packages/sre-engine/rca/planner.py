"""Recovery planning — immediate actions, a two-tier plan and a recovery estimate.

Pure: takes the collected records, returns a RecoveryBrief. No side effects.
"""

from dataclasses import dataclass
from typing import Sequence

from diagnostics.fixes import CLEAR_AUTH_CACHE, GENERIC_RESTART
from diagnostics.probes.modules import IdentityProbe
from diagnostics.schemas import (
    ModuleRCAResult,
    ModuleStatus,
    Priority,
    ServiceHealthStatus,
    ServiceStatus,
)

from .schemas import RecoveryAction, RecoveryPlan
from .synthesizer import failed_critical_modules

IMMEDIATE_OWNER = "Ops/SRE"
SHORT_TERM_OWNER = "Engineering"
STABILIZE_FALLBACK = "Monitor and optimize"


@dataclass(frozen=True)
class RecoveryWindows:
    """Recovery-time estimate strings, widest to narrowest."""
    multiple_critical: str = "30-60 minutes (multiple critical failures)"
    single_critical: str = "15-30 minutes (single critical failure)"
    degraded_only: str = "5-15 minutes (degraded services only)"


@dataclass(frozen=True)
class RecoveryBrief:
    immediate_actions: tuple[str, ...]
    recovery_plan: RecoveryPlan
    rollback_recommendation: bool
    estimated_recovery_time: str


def build_immediate_actions(
    services: Sequence[ServiceHealthStatus],
    modules: Sequence[ModuleRCAResult],
) -> tuple[str, ...]:
    actions = [
        f"IMMEDIATE: Restart {s.service} - {s.details}"
        for s in services if s.status == ServiceStatus.DOWN
    ]
    actions.extend(
        f"CRITICAL: Fix {m.module} - {m.root_cause or 'unknown cause'}"
        for m in failed_critical_modules(modules)
    )
    identity = next((m for m in modules if m.module == IdentityProbe.module), None)
    if identity is not None and identity.status != ModuleStatus.OPERATIONAL:
        actions.append(f"IMMEDIATE: {CLEAR_AUTH_CACHE}")
    return tuple(actions)


def build_recovery_plan(
    modules: Sequence[ModuleRCAResult],
    short_term_eta: str = "30-60 minutes",
) -> RecoveryPlan:
    immediate = []
    short_term = []
    for m in modules:
        first_fix = m.fixes[0] if m.fixes else None
        if m.priority == Priority.CRITICAL:
            immediate.append(RecoveryAction(
                action=f"Fix {m.module}: {first_fix or GENERIC_RESTART}",
                eta=m.estimated_downtime,
                owner=IMMEDIATE_OWNER,
            ))
        elif m.priority in (Priority.HIGH, Priority.MEDIUM):
            short_term.append(RecoveryAction(
                action=f"Stabilize {m.module}: {first_fix or STABILIZE_FALLBACK}",
                eta=short_term_eta,
                owner=SHORT_TERM_OWNER,
            ))
    return RecoveryPlan(immediate=tuple(immediate), short_term=tuple(short_term))


def estimate_recovery_time(
    modules: Sequence[ModuleRCAResult],
    windows: RecoveryWindows = RecoveryWindows(),
) -> str:
    """Tiered on the number of critical-priority failed modules."""
    critical = len(failed_critical_modules(modules))
    if critical >= 2:
        return windows.multiple_critical
    if critical == 1:
        return windows.single_critical
    return windows.degraded_only


def plan_recovery(
    services: Sequence[ServiceHealthStatus],
    modules: Sequence[ModuleRCAResult],
    short_term_eta: str = "30-60 minutes",
    windows: RecoveryWindows = RecoveryWindows(),
) -> RecoveryBrief:
    """Derive everything the operator needs to act on from one run's records."""
    return RecoveryBrief(
        immediate_actions=build_immediate_actions(services, modules),
        recovery_plan=build_recovery_plan(modules, short_term_eta),
        rollback_recommendation=any(m.rollback_required for m in modules),
        estimated_recovery_time=estimate_recovery_time(modules, windows),
    )
