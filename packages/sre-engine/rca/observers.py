"""Report observers — side effects that run after a report is finalized.

Collectors, synthesis and planning stay pure; alerting, publishing and
archiving all happen here, strictly after the report exists.
"""

import asyncio
import logging
from typing import Protocol

from events.bus import BaseEventBus
from events.schemas import DIAGNOSIS_TOPIC, DiagnosisCompletedEvent

from .export import ReportArchive
from .schemas import OverallStatus, SystemRCAReport

logger = logging.getLogger(__name__)


class ReportObserver(Protocol):
    async def notify(self, report: SystemRCAReport) -> None:
        ...


_LEVELS = {
    OverallStatus.OPERATIONAL: logging.INFO,
    OverallStatus.DEGRADED: logging.WARNING,
    OverallStatus.CRITICAL_FAILURE: logging.ERROR,
    OverallStatus.TOTAL_OUTAGE: logging.CRITICAL,
    OverallStatus.UNKNOWN: logging.ERROR,
}


class LoggingObserver:
    """One log line per report, at a level matching its severity."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    async def notify(self, report: SystemRCAReport) -> None:
        self.log.log(
            _LEVELS[report.overall_status],
            "RCA %s: %s — %s (recovery %s, %d immediate actions%s)",
            report.report_id,
            report.overall_status.value,
            report.primary_root_cause,
            report.estimated_recovery_time,
            len(report.immediate_actions),
            ", rollback recommended" if report.rollback_recommendation else "",
        )
        for statement in report.cascading_failures:
            self.log.warning("RCA %s cascade: %s", report.report_id, statement)


class EventBusObserver:
    """Publishes a diagnosis.completed event for each report."""

    def __init__(self, event_bus: BaseEventBus, source: str = "assembler"):
        self.event_bus = event_bus
        self.source = source

    async def notify(self, report: SystemRCAReport) -> None:
        event = DiagnosisCompletedEvent(
            source=self.source,
            report_id=report.report_id,
            overall_status=report.overall_status.value,
            primary_root_cause=report.primary_root_cause,
            rollback_recommendation=report.rollback_recommendation,
            immediate_action_count=len(report.immediate_actions),
        )
        await self.event_bus.publish(DIAGNOSIS_TOPIC, event)


class ArchiveObserver:
    """Writes every report to a ReportArchive."""

    def __init__(self, archive: ReportArchive):
        self.archive = archive

    async def notify(self, report: SystemRCAReport) -> None:
        # File write runs off the event loop
        await asyncio.to_thread(self.archive.save, report)
