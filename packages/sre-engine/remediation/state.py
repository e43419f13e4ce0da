"""Process-local state the engine inspects and the executor repairs.

StateStore holds three kinds of transient state:
- storage: persisted client state (session token, current user, setup progress...)
- session: per-session scratch state
- caches: named in-memory cache namespaces ("auth", "strategy", ...)

Presentation surfaces report their readiness into a ReadinessRegistry.
LifecycleSignals carries the remount / reinitialize requests the executor
emits; the host application listens and acts on them.

StateStore is also the engine's SnapshotProvider: capture() freezes all of it
into an EnvironmentSnapshot for one diagnostic run.
"""

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from diagnostics.snapshot import EnvironmentSnapshot, SurfaceReadiness

logger = logging.getLogger(__name__)

REMOUNT = "remount"
REINITIALIZE = "reinitialize"

SignalListener = Callable[[str, int, str], Awaitable[None]]


class LifecycleSignals:
    """Generation counters plus listeners for remount / reinitialize."""

    def __init__(self):
        self.remount_generation = 0
        self.reinit_generation = 0
        self._listeners: list[SignalListener] = []

    def add_listener(self, listener: SignalListener) -> None:
        """Register an async callback(kind, generation, reason)."""
        self._listeners.append(listener)

    async def remount(self, reason: str = "") -> int:
        self.remount_generation += 1
        await self._emit(REMOUNT, self.remount_generation, reason)
        return self.remount_generation

    async def reinitialize(self, reason: str = "") -> int:
        self.reinit_generation += 1
        await self._emit(REINITIALIZE, self.reinit_generation, reason)
        return self.reinit_generation

    async def _emit(self, kind: str, generation: int, reason: str) -> None:
        logger.info("Lifecycle signal %s #%d (%s)", kind, generation, reason or "no reason")
        for listener in list(self._listeners):
            await listener(kind, generation, reason)


class ReadinessRegistry:
    """Latest readiness reported by each presentation surface."""

    def __init__(self):
        self._surfaces: dict[str, SurfaceReadiness] = {}

    def report(self, surface: str, readiness: SurfaceReadiness) -> None:
        self._surfaces[surface] = readiness

    def withdraw(self, surface: str) -> None:
        self._surfaces.pop(surface, None)

    def get(self, surface: str) -> SurfaceReadiness | None:
        return self._surfaces.get(surface)

    def snapshot(self) -> dict[str, SurfaceReadiness]:
        return dict(self._surfaces)


@dataclass(frozen=True)
class StateCheckpoint:
    storage: dict
    session: dict
    caches: dict = field(default_factory=dict)


class StateStore:
    """Single-writer transient state. Writers take ``lock``."""

    def __init__(
        self,
        storage: dict[str, str] | None = None,
        session: dict[str, str] | None = None,
        caches: dict[str, dict[str, Any]] | None = None,
        readiness: ReadinessRegistry | None = None,
        signals: LifecycleSignals | None = None,
    ):
        self.storage: dict[str, str] = dict(storage or {})
        self.session: dict[str, str] = dict(session or {})
        self.caches: dict[str, dict[str, Any]] = {
            name: dict(entries) for name, entries in (caches or {}).items()
        }
        self.readiness = readiness or ReadinessRegistry()
        self.signals = signals or LifecycleSignals()
        self.lock = asyncio.Lock()
        # False while the persistent store cannot be read
        self.available = True

    # ── Persisted keys ────────────────────────────────

    def get(self, key: str) -> str | None:
        return self.storage.get(key)

    def set(self, key: str, value: str) -> None:
        self.storage[key] = value

    def remove(self, key: str) -> bool:
        """Remove a key; False if it was already absent."""
        return self.storage.pop(key, None) is not None

    # ── Session / caches ──────────────────────────────

    def clear_session(self) -> int:
        count = len(self.session)
        self.session.clear()
        return count

    def cache(self, namespace: str) -> dict[str, Any]:
        return self.caches.setdefault(namespace, {})

    def clear_cache(self, namespace: str) -> int:
        """Empty one namespace; returns entries dropped (0 if unknown)."""
        entries = self.caches.get(namespace)
        if not entries:
            return 0
        count = len(entries)
        entries.clear()
        return count

    def clear_all_caches(self) -> int:
        return sum(self.clear_cache(name) for name in list(self.caches))

    # ── Checkpoint / restore ──────────────────────────

    def checkpoint(self) -> StateCheckpoint:
        return StateCheckpoint(
            storage=dict(self.storage),
            session=dict(self.session),
            caches=copy.deepcopy(self.caches),
        )

    def restore(self, checkpoint: StateCheckpoint) -> None:
        self.storage = dict(checkpoint.storage)
        self.session = dict(checkpoint.session)
        self.caches = copy.deepcopy(checkpoint.caches)

    # ── SnapshotProvider ──────────────────────────────

    async def capture(self) -> EnvironmentSnapshot:
        async with self.lock:
            return EnvironmentSnapshot(
                storage=dict(self.storage) if self.available else None,
                session=dict(self.session),
                surfaces=self.readiness.snapshot(),
            )
