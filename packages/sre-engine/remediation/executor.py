"""Remediation executor — targeted fixes and emergency recovery.

Both operations are fire-and-report: they change state, publish an event and
return a FixOutcome. Re-running diagnosis is how a caller observes the effect.
Only this module writes; every write happens under the store's lock.
"""

import asyncio
import logging

from diagnostics.snapshot import ENGINE_MANAGED_KEYS
from events.bus import BaseEventBus
from events.schemas import (
    RECOVERY_TOPIC,
    REMEDIATION_TOPIC,
    BaseEvent,
    RecoveryEvent,
    RemediationEvent,
)

from .registry import FixRegistry, default_registry
from .schemas import EMERGENCY_RECOVERY_FIX, SYSTEM_MODULE, FixOutcome, RemediationError
from .state import StateStore

logger = logging.getLogger(__name__)


class RemediationExecutor:
    """Applies fixes against a StateStore."""

    def __init__(
        self,
        store: StateStore,
        registry: FixRegistry | None = None,
        event_bus: BaseEventBus | None = None,
        timeout: float = 10.0,
    ):
        """
        Args:
            store: State to repair
            registry: Fix description → action mapping (default_registry() if None)
            event_bus: Where lifecycle events go; None disables publishing
            timeout: Seconds per operation, lock wait included
        """
        self.store = store
        self.registry = registry or default_registry()
        self.event_bus = event_bus
        self.timeout = timeout

    async def apply_targeted_fix(self, module: str, fix: str) -> FixOutcome:
        """Run the action registered for ``fix``.

        On failure the store is rolled back to its pre-fix checkpoint and
        RemediationError is raised. Safe to repeat.
        """
        registered = self.registry.resolve(fix)
        logger.info("Applying fix for %s: %r → %s", module, fix, registered.name)

        await self._acquire()
        try:
            checkpoint = self.store.checkpoint()
            try:
                message = await asyncio.wait_for(registered.action(self.store), self.timeout)
            except Exception as e:
                self.store.restore(checkpoint)
                reason = self._describe(e)
                logger.error("Fix %r for %s failed: %s", fix, module, reason)
                await self._publish(REMEDIATION_TOPIC, RemediationEvent(
                    source="executor", module=module, fix=fix,
                    action=registered.name, success=False, message=reason,
                ))
                raise RemediationError(module, reason, fix) from e
        finally:
            self.store.lock.release()

        outcome = FixOutcome(
            module=module, fix=fix, action=registered.name, success=True, message=message,
        )
        logger.info("Fix applied for %s: %s", module, message)
        await self._publish(REMEDIATION_TOPIC, RemediationEvent(
            source="executor", module=module, fix=fix,
            action=registered.name, success=True, message=message,
        ))
        return outcome

    async def execute_emergency_recovery(self) -> FixOutcome:
        """Return all engine-managed state to its initial condition.

        Reads nothing from diagnosis, so it works during a total outage.
        Every step runs even if an earlier one fails; failures are reported
        together. Steps are idempotent, so a retry is never blocked.
        """
        logger.warning("Executing emergency recovery")
        steps = [
            ("clear_engine_keys", self._clear_engine_keys),
            ("clear_session", self._clear_session),
            ("release_caches", self._release_caches),
            ("signal_reinitialize", self._signal_reinitialize),
        ]
        messages: list[str] = []
        errors: list[str] = []

        await self._acquire()
        try:
            for name, step in steps:
                try:
                    messages.append(await asyncio.wait_for(step(), self.timeout))
                except Exception as e:
                    logger.error("Emergency recovery step %s failed: %s", name, self._describe(e))
                    errors.append(f"{name}: {self._describe(e)}")
        finally:
            self.store.lock.release()

        await self._publish(RECOVERY_TOPIC, RecoveryEvent(
            source="executor",
            success=not errors,
            steps=[name for name, _ in steps],
            errors=errors,
        ))
        if errors:
            raise RemediationError(SYSTEM_MODULE, "; ".join(errors), EMERGENCY_RECOVERY_FIX)

        logger.info("Emergency recovery complete")
        return FixOutcome(
            module=SYSTEM_MODULE,
            fix=EMERGENCY_RECOVERY_FIX,
            action="emergency_recovery",
            success=True,
            message="; ".join(messages),
        )

    # ── Emergency recovery steps ──────────────────────

    async def _clear_engine_keys(self) -> str:
        removed = [key for key in ENGINE_MANAGED_KEYS if self.store.remove(key)]
        return f"Cleared {len(removed)} engine-managed keys"

    async def _clear_session(self) -> str:
        return f"Cleared {self.store.clear_session()} session entries"

    async def _release_caches(self) -> str:
        return f"Released {self.store.clear_all_caches()} cache entries"

    async def _signal_reinitialize(self) -> str:
        generation = await self.store.signals.reinitialize("emergency recovery")
        return f"Reinitialization signalled (generation {generation})"

    # ── Helpers ───────────────────────────────────────

    async def _acquire(self) -> None:
        try:
            await asyncio.wait_for(self.store.lock.acquire(), self.timeout)
        except asyncio.TimeoutError:
            raise RemediationError(
                SYSTEM_MODULE, f"state store busy for more than {self.timeout}s"
            ) from None

    def _describe(self, error: Exception) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return f"timed out after {self.timeout}s"
        return str(error) or error.__class__.__name__

    async def _publish(self, topic: str, event: BaseEvent) -> None:
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish(topic, event)
        except Exception as e:
            logger.error("Failed to publish %s event: %s", event.event_type.value, e)
