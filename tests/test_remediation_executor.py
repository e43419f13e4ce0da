"""Remediation executor — registry dispatch, idempotence, rollback on failure, emergency recovery."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from diagnostics import fixes
from diagnostics.snapshot import (
    AUTH_CACHE,
    BEHAVIOR_LOGS_KEY,
    CURRENT_USER_KEY,
    CURRENT_VIEW_KEY,
    ENGINE_MANAGED_KEYS,
    SESSION_TOKEN_KEY,
    SETUP_PROGRESS_KEY,
    STRATEGY_CACHE,
    SUBSCRIPTION_KEY,
)
from events.schemas import RECOVERY_TOPIC, REMEDIATION_TOPIC
from remediation import FixRegistry, RemediationError, RemediationExecutor, StateStore, default_registry


@pytest.fixture
def store() -> StateStore:
    s = StateStore(
        storage={
            SESSION_TOKEN_KEY: "tok",
            CURRENT_USER_KEY: '{"id": "u-1"}',
            SETUP_PROGRESS_KEY: "{broken",
            CURRENT_VIEW_KEY: "dashboard",
            SUBSCRIPTION_KEY: '{"plan": "pro"}',
        },
        session={"wizard_draft": "{}"},
        caches={AUTH_CACHE: {"jwks": "..."}, STRATEGY_CACHE: {"s-1": "..."}},
    )
    return s


@pytest.mark.asyncio
async def test_reset_setup_state_is_idempotent(store):
    executor = RemediationExecutor(store)
    first = await executor.apply_targeted_fix("guided-setup", fixes.CLEAR_SETUP_DATA)
    second = await executor.apply_targeted_fix("guided-setup", fixes.CLEAR_SETUP_DATA)
    assert first.success and second.success
    assert first.action == "reset_setup"
    assert store.get(SETUP_PROGRESS_KEY) is None
    assert second.message == "Guided setup progress already empty"


@pytest.mark.asyncio
async def test_clear_corrupted_session_signals_remount(store):
    listener = AsyncMock()
    store.signals.add_listener(listener)
    outcome = await RemediationExecutor(store).apply_targeted_fix("identity", fixes.CLEAR_CORRUPTED_SESSION)
    assert outcome.success
    assert store.get(SESSION_TOKEN_KEY) is None
    assert store.get(CURRENT_USER_KEY) is None
    assert store.signals.remount_generation == 1
    listener.assert_awaited_once_with("remount", 1, "session cleared")


@pytest.mark.asyncio
async def test_cache_fixes_clear_named_namespace_only(store):
    executor = RemediationExecutor(store)
    await executor.apply_targeted_fix("strategy-engine", fixes.RESTART_STRATEGY_SERVICE)
    assert store.caches[STRATEGY_CACHE] == {}
    assert store.caches[AUTH_CACHE] == {"jwks": "..."}


@pytest.mark.asyncio
async def test_init_behavior_logs_keeps_existing(store):
    executor = RemediationExecutor(store)
    await executor.apply_targeted_fix("strategy-engine", fixes.INIT_BEHAVIOR_LOGS)
    assert store.get(BEHAVIOR_LOGS_KEY) == "[]"
    store.set(BEHAVIOR_LOGS_KEY, '[{"id": 1}]')
    await executor.apply_targeted_fix("strategy-engine", fixes.INIT_BEHAVIOR_LOGS)
    assert store.get(BEHAVIOR_LOGS_KEY) == '[{"id": 1}]'


@pytest.mark.asyncio
async def test_unknown_fix_is_generic_success(store):
    before = store.checkpoint()
    outcome = await RemediationExecutor(store).apply_targeted_fix("billing", "Call the payment vendor")
    assert outcome.success
    assert outcome.action == "generic"
    assert store.checkpoint() == before


@pytest.mark.asyncio
async def test_failed_fix_restores_state_and_raises(store):
    async def half_apply(s: StateStore) -> str:
        s.remove(SESSION_TOKEN_KEY)
        raise RuntimeError("disk full")

    registry = FixRegistry()
    registry.register("Break things", "half_apply", half_apply)
    executor = RemediationExecutor(store, registry=registry)

    with pytest.raises(RemediationError) as exc_info:
        await executor.apply_targeted_fix("identity", "Break things")

    assert exc_info.value.module == "identity"
    assert "disk full" in str(exc_info.value)
    assert store.get(SESSION_TOKEN_KEY) == "tok"
    assert not store.lock.locked()


@pytest.mark.asyncio
async def test_hanging_fix_times_out(store):
    async def hang(s: StateStore) -> str:
        await asyncio.sleep(10)
        return "never"

    registry = FixRegistry()
    registry.register("Hang", "hang", hang)
    executor = RemediationExecutor(store, registry=registry, timeout=0.01)

    with pytest.raises(RemediationError, match="timed out"):
        await executor.apply_targeted_fix("reporting", "Hang")


@pytest.mark.asyncio
async def test_fix_events_published(store, event_bus):
    executor = RemediationExecutor(store, event_bus=event_bus)
    await executor.apply_targeted_fix("identity", fixes.RESTART_AUTH_SERVICE)
    topic, event = event_bus.published[-1]
    assert topic == REMEDIATION_TOPIC
    assert event["event_type"] == "remediation.applied"
    assert event["payload"]["module"] == "identity"


@pytest.mark.asyncio
async def test_emergency_recovery_resets_engine_state(store):
    outcome = await RemediationExecutor(store).execute_emergency_recovery()
    assert outcome.success
    assert outcome.module == "system"
    for key in ENGINE_MANAGED_KEYS:
        assert store.get(key) is None
    # Host-owned data survives
    assert store.get(SUBSCRIPTION_KEY) == '{"plan": "pro"}'
    assert store.session == {}
    assert all(entries == {} for entries in store.caches.values())
    assert store.signals.reinit_generation == 1


@pytest.mark.asyncio
async def test_emergency_recovery_twice_succeeds(store, event_bus):
    executor = RemediationExecutor(store, event_bus=event_bus)
    first = await executor.execute_emergency_recovery()
    second = await executor.execute_emergency_recovery()
    assert first.success and second.success
    assert [t for t, _ in event_bus.published] == [RECOVERY_TOPIC, RECOVERY_TOPIC]


@pytest.mark.asyncio
async def test_emergency_recovery_runs_every_step_and_reports_failures(store, event_bus):
    store.signals.add_listener(AsyncMock(side_effect=RuntimeError("shell gone")))
    executor = RemediationExecutor(store, event_bus=event_bus)

    with pytest.raises(RemediationError) as exc_info:
        await executor.execute_emergency_recovery()

    assert "signal_reinitialize" in exc_info.value.message
    # Earlier steps still applied
    assert store.get(SESSION_TOKEN_KEY) is None
    _, event = event_bus.published[-1]
    assert event["event_type"] == "recovery.failed"


@pytest.mark.asyncio
async def test_emergency_recovery_works_when_storage_unreadable(store):
    store.available = False
    outcome = await RemediationExecutor(store).execute_emergency_recovery()
    assert outcome.success


def test_default_registry_covers_probe_fixes():
    registry = default_registry()
    for fix in (fixes.FORCE_REMOUNT, fixes.CLEAR_CORRUPTED_SESSION, fixes.RESET_SETUP_STATE,
                fixes.CLEAR_AUTH_CACHE, fixes.RESTART_STRATEGY_SERVICE):
        assert fix in registry
    assert registry.resolve("anything else").name == "generic"
