"""Event schemas and bus for the diagnostics engine."""

from .schemas import (
    DIAGNOSIS_TOPIC,
    RECOVERY_TOPIC,
    REMEDIATION_TOPIC,
    BaseEvent,
    DiagnosisCompletedEvent,
    EventType,
    RecoveryEvent,
    RemediationEvent,
)
from .bus import BaseEventBus, InMemoryEventBus, RedisEventBus, create_event_bus

__all__ = [
    # Schemas
    "EventType",
    "BaseEvent",
    "DiagnosisCompletedEvent",
    "RemediationEvent",
    "RecoveryEvent",
    "DIAGNOSIS_TOPIC",
    "REMEDIATION_TOPIC",
    "RECOVERY_TOPIC",
    # Bus
    "BaseEventBus",
    "RedisEventBus",
    "InMemoryEventBus",
    "create_event_bus",
]
