"""Root cause analysis — synthesis, recovery planning and report assembly."""

from .assembler import ReportAssembler
from .export import ExportFormatError, ReportArchive, from_document, to_document
from .observers import ArchiveObserver, EventBusObserver, LoggingObserver, ReportObserver
from .planner import RecoveryBrief, RecoveryWindows, plan_recovery
from .schemas import (
    OverallStatus,
    RecoveryAction,
    RecoveryPlan,
    SystemRCAReport,
    severity_rank,
)
from .synthesizer import CRITICAL_PATH, Synthesis, SynthesisThresholds, synthesize

__all__ = [
    "ReportAssembler",
    "ExportFormatError",
    "ReportArchive",
    "from_document",
    "to_document",
    "ArchiveObserver",
    "EventBusObserver",
    "LoggingObserver",
    "ReportObserver",
    "RecoveryBrief",
    "RecoveryWindows",
    "plan_recovery",
    "OverallStatus",
    "RecoveryAction",
    "RecoveryPlan",
    "SystemRCAReport",
    "severity_rank",
    "CRITICAL_PATH",
    "Synthesis",
    "SynthesisThresholds",
    "synthesize",
]
