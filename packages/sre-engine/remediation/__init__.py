"""Remediation — fix registry, executor and the state they act on."""

from .executor import RemediationExecutor
from .registry import FixRegistry, RegisteredFix, default_registry
from .schemas import FixOutcome, RemediationError
from .state import LifecycleSignals, ReadinessRegistry, StateCheckpoint, StateStore

__all__ = [
    "RemediationExecutor",
    "FixRegistry",
    "RegisteredFix",
    "default_registry",
    "FixOutcome",
    "RemediationError",
    "LifecycleSignals",
    "ReadinessRegistry",
    "StateCheckpoint",
    "StateStore",
]
