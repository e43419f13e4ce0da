"""Report assembler — the orchestrator for one diagnostic run.

Steps:
1. Capture an environment snapshot
2. Run both collectors against it concurrently
3. Synthesize status / root cause / cascades
4. Plan recovery
5. Freeze everything into a SystemRCAReport
6. Notify observers

Callers always get a complete report back. Nothing here raises.
"""

import asyncio
import logging
from typing import Sequence

from diagnostics.collector import ModuleDiagnosisCollector, ServiceHealthCollector
from diagnostics.endpoint_checker import EndpointChecker
from diagnostics.probes.base import ProbeContext
from diagnostics.schemas import ModuleRCAResult, ServiceHealthStatus
from diagnostics.snapshot import EnvironmentSnapshot, SnapshotProvider

from .observers import ReportObserver
from .planner import RecoveryWindows, plan_recovery
from .schemas import OverallStatus, SystemRCAReport
from .synthesizer import CRITICAL_PATH, DEFAULT_THRESHOLDS, SynthesisThresholds, synthesize

logger = logging.getLogger(__name__)

UNKNOWN_RECOVERY_TIME = "unknown"


class ReportAssembler:
    """Builds a SystemRCAReport from the collectors' output."""

    def __init__(
        self,
        service_collector: ServiceHealthCollector,
        module_collector: ModuleDiagnosisCollector,
        snapshot_provider: SnapshotProvider,
        endpoints: EndpointChecker,
        observers: Sequence[ReportObserver] = (),
        thresholds: SynthesisThresholds = DEFAULT_THRESHOLDS,
        short_term_eta: str = "30-60 minutes",
        windows: RecoveryWindows = RecoveryWindows(),
    ):
        self.service_collector = service_collector
        self.module_collector = module_collector
        self.snapshot_provider = snapshot_provider
        self.endpoints = endpoints
        self.observers = list(observers)
        self.thresholds = thresholds
        self.short_term_eta = short_term_eta
        self.windows = windows

    def add_observer(self, observer: ReportObserver) -> None:
        self.observers.append(observer)

    async def perform_root_cause_analysis(self) -> SystemRCAReport:
        snapshot = await self._capture()
        ctx = ProbeContext(snapshot=snapshot, endpoints=self.endpoints)

        services, modules = await asyncio.gather(
            self.service_collector.collect(ctx),
            self.module_collector.collect(ctx),
        )

        report = self.build_report(services, modules)
        await self._notify(report)
        return report

    def build_report(
        self,
        services: Sequence[ServiceHealthStatus],
        modules: Sequence[ModuleRCAResult],
    ) -> SystemRCAReport:
        """Synthesize and plan; fall back to an UNKNOWN report if either raises."""
        services = tuple(services)
        modules = tuple(modules)
        try:
            synthesis = synthesize(services, modules, self.thresholds)
            brief = plan_recovery(services, modules, self.short_term_eta, self.windows)
        except Exception as e:
            logger.exception("Root cause synthesis failed")
            return SystemRCAReport(
                overall_status=OverallStatus.UNKNOWN,
                primary_root_cause=f"Root cause synthesis failed: {e}",
                estimated_recovery_time=UNKNOWN_RECOVERY_TIME,
                critical_path=CRITICAL_PATH,
                service_health=services,
                module_analysis=modules,
            )

        return SystemRCAReport(
            overall_status=synthesis.overall_status,
            primary_root_cause=synthesis.primary_root_cause,
            estimated_recovery_time=brief.estimated_recovery_time,
            cascading_failures=synthesis.cascading_failures,
            critical_path=synthesis.critical_path,
            service_health=services,
            module_analysis=modules,
            immediate_actions=brief.immediate_actions,
            recovery_plan=brief.recovery_plan,
            rollback_recommendation=brief.rollback_recommendation,
        )

    async def _capture(self) -> EnvironmentSnapshot:
        try:
            return await self.snapshot_provider.capture()
        except Exception:
            # Probes then see an unreadable store and nothing mounted
            logger.exception("Snapshot capture failed")
            return EnvironmentSnapshot(storage=None)

    async def _notify(self, report: SystemRCAReport) -> None:
        for observer in self.observers:
            try:
                await observer.notify(report)
            except Exception as e:
                logger.error(
                    "Observer %s failed for report %s: %s",
                    observer.__class__.__name__, report.report_id, e,
                )
