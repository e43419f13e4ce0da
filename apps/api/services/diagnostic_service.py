"""Diagnostic service — the API's handle on the engine.

This service:
1. Owns the StateStore the host application writes into
2. Runs root cause analysis and keeps the latest report
3. Applies targeted fixes and emergency recovery
4. Serializes fixes against report building (one at a time)

Architecture:
    POST /diagnostics/run  → DiagnosticService.run_diagnosis()
                           → ReportAssembler (collectors → synthesis → plan)
                           → observers (log, event bus, archive)
    POST /remediations/fix → DiagnosticService.apply_fix()
                           → RemediationExecutor → StateStore
"""

import asyncio
import logging
from typing import Optional

import httpx

from apps.api.config import settings
from diagnostics import (
    EndpointChecker,
    ModuleDiagnosisCollector,
    ServiceHealthCollector,
    SurfaceReadiness,
    default_module_probes,
    default_service_probes,
)
from events.bus import BaseEventBus
from rca import (
    ArchiveObserver,
    EventBusObserver,
    LoggingObserver,
    ReportArchive,
    ReportAssembler,
    SynthesisThresholds,
    SystemRCAReport,
    to_document,
)
from remediation import FixOutcome, RemediationExecutor, StateStore

logger = logging.getLogger(__name__)

STORAGE_SCOPE = "storage"
SESSION_SCOPE = "session"


class DiagnosticService:
    """Wires probes, assembler and executor around one StateStore."""

    def __init__(
        self,
        store: Optional[StateStore] = None,
        event_bus: Optional[BaseEventBus] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            store: State to inspect and repair (fresh StateStore if None)
            event_bus: Injected later via set_event_bus() in the app
            transport: httpx transport override for endpoint checks (tests)
        """
        self.store = store or StateStore()
        self._event_bus = event_bus
        self._lock = asyncio.Lock()
        self.latest: Optional[SystemRCAReport] = None
        self.archive: Optional[ReportArchive] = None

        self.endpoints = EndpointChecker(
            base_url=settings.target_base_url,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )
        self.assembler = ReportAssembler(
            service_collector=ServiceHealthCollector(
                default_service_probes(
                    timeout=settings.probe_timeout_seconds,
                    health_path=settings.gateway_health_path,
                    slow_threshold_ms=settings.slow_gateway_threshold_ms,
                ),
                max_concurrency=settings.max_concurrent_probes,
            ),
            module_collector=ModuleDiagnosisCollector(
                default_module_probes(timeout=settings.probe_timeout_seconds),
                max_concurrency=settings.max_concurrent_probes,
            ),
            snapshot_provider=self.store,
            endpoints=self.endpoints,
            observers=[LoggingObserver()],
            thresholds=SynthesisThresholds(
                outage_down_services=settings.outage_down_services,
                outage_critical_modules=settings.outage_critical_modules,
                cascading_degraded_modules=settings.cascading_degraded_modules,
            ),
            short_term_eta=settings.short_term_eta,
        )
        self.executor = RemediationExecutor(
            self.store,
            event_bus=event_bus,
            timeout=settings.remediation_timeout_seconds,
        )
        if event_bus is not None:
            self.assembler.add_observer(EventBusObserver(event_bus))

    def set_event_bus(self, event_bus: BaseEventBus):
        """Inject event bus after initialization."""
        self._event_bus = event_bus
        self.executor.event_bus = event_bus
        self.assembler.add_observer(EventBusObserver(event_bus))

    def enable_archive(self, directory: str):
        """Persist every finished report under ``directory``."""
        self.archive = ReportArchive(directory)
        self.assembler.add_observer(ArchiveObserver(self.archive))
        logger.info("Report archive enabled at %s", directory)

    # ── Diagnosis ─────────────────────────────────────

    async def run_diagnosis(self) -> SystemRCAReport:
        async with self._lock:
            report = await self.assembler.perform_root_cause_analysis()
            self.latest = report
            return report

    def export_latest(self) -> Optional[dict]:
        if self.latest is None:
            return None
        return to_document(self.latest)

    def list_archived(self, limit: int = 20) -> list[dict]:
        if self.archive is None:
            return []
        return self.archive.list_documents(limit=limit)

    def get_archived(self, report_id: str) -> Optional[dict]:
        if self.archive is None:
            return None
        return self.archive.get_document(report_id)

    # ── Remediation ───────────────────────────────────

    async def apply_fix(self, module: str, fix: str) -> FixOutcome:
        async with self._lock:
            return await self.executor.apply_targeted_fix(module, fix)

    async def emergency_recovery(self) -> FixOutcome:
        async with self._lock:
            return await self.executor.execute_emergency_recovery()

    # ── Host application inputs ───────────────────────

    def report_readiness(self, surface: str, readiness: SurfaceReadiness):
        self.store.readiness.report(surface, readiness)

    def write_state(self, key: str, value: str, scope: str = STORAGE_SCOPE):
        if scope == SESSION_SCOPE:
            self.store.session[key] = value
        else:
            self.store.set(key, value)

    def delete_state(self, key: str, scope: str = STORAGE_SCOPE) -> bool:
        if scope == SESSION_SCOPE:
            return self.store.session.pop(key, None) is not None
        return self.store.remove(key)

    def set_storage_available(self, available: bool):
        """The host reports whether its persistent store can be read at all."""
        if available != self.store.available:
            logger.warning("Persistent store reported %s", "available" if available else "unreachable")
        self.store.available = available

    async def close(self):
        """Close HTTP client."""
        await self.endpoints.close()
        logger.info("Diagnostic service closed")


# Singleton instance
diagnostic_service = DiagnosticService()


def get_diagnostic_service() -> DiagnosticService:
    """FastAPI dependency; tests override it with their own instance."""
    return diagnostic_service
