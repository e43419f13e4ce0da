"""Fix registry — maps fix descriptions to remediation actions.

Adding a fix means registering an action; the executor never changes.
Unrecognised descriptions resolve to the generic action, which succeeds
without touching anything.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from diagnostics import fixes
from diagnostics.snapshot import (
    AUTH_CACHE,
    BEHAVIOR_LOGS_KEY,
    CURRENT_USER_KEY,
    SESSION_TOKEN_KEY,
    SETUP_PROGRESS_KEY,
    STRATEGY_CACHE,
)

from .state import StateStore

logger = logging.getLogger(__name__)

# An action mutates the store and returns a short human-readable message
FixAction = Callable[[StateStore], Awaitable[str]]


@dataclass(frozen=True)
class RegisteredFix:
    name: str
    action: FixAction


# ── Actions ───────────────────────────────────────────

async def signal_remount(store: StateStore) -> str:
    generation = await store.signals.remount("forced remount")
    return f"Remount signalled (generation {generation})"


async def clear_session_identity(store: StateStore) -> str:
    removed = [k for k in (SESSION_TOKEN_KEY, CURRENT_USER_KEY) if store.remove(k)]
    generation = await store.signals.remount("session cleared")
    return f"Cleared {len(removed)} session keys; remount signalled (generation {generation})"


async def reset_setup_progress(store: StateStore) -> str:
    if store.remove(SETUP_PROGRESS_KEY):
        return "Guided setup progress cleared"
    return "Guided setup progress already empty"


async def clear_auth_cache(store: StateStore) -> str:
    dropped = store.clear_cache(AUTH_CACHE)
    return f"Auth cache cleared ({dropped} entries)"


async def clear_auth_cache_and_session(store: StateStore) -> str:
    dropped = store.clear_cache(AUTH_CACHE)
    removed = [k for k in (SESSION_TOKEN_KEY, CURRENT_USER_KEY) if store.remove(k)]
    return f"Auth cache cleared ({dropped} entries), {len(removed)} session keys removed"


async def clear_strategy_cache(store: StateStore) -> str:
    dropped = store.clear_cache(STRATEGY_CACHE)
    return f"Strategy cache cleared ({dropped} entries)"


async def init_behavior_logs(store: StateStore) -> str:
    if store.get(BEHAVIOR_LOGS_KEY) is None:
        store.set(BEHAVIOR_LOGS_KEY, "[]")
        return "Behavior log store initialized"
    return "Behavior log store already present"


async def generic_fix(store: StateStore) -> str:
    return "Generic fix applied"


GENERIC = RegisteredFix("generic", generic_fix)


class FixRegistry:
    """fix description → RegisteredFix, with a generic fallback."""

    def __init__(self, fallback: RegisteredFix = GENERIC):
        self._fixes: dict[str, RegisteredFix] = {}
        self.fallback = fallback

    def register(self, fix: str, name: str, action: FixAction) -> None:
        if fix in self._fixes:
            logger.warning("Replacing action for fix %r", fix)
        self._fixes[fix] = RegisteredFix(name, action)

    def resolve(self, fix: str) -> RegisteredFix:
        return self._fixes.get(fix, self.fallback)

    def __contains__(self, fix: str) -> bool:
        return fix in self._fixes

    @property
    def known_fixes(self) -> list[str]:
        return list(self._fixes)


def default_registry() -> FixRegistry:
    registry = FixRegistry()
    registry.register(fixes.FORCE_REMOUNT, "remount", signal_remount)
    registry.register(fixes.CLEAR_CORRUPTED_SESSION, "clear_session", clear_session_identity)
    registry.register(fixes.RESET_SETUP_STATE, "reset_setup", reset_setup_progress)
    registry.register(fixes.CLEAR_SETUP_DATA, "reset_setup", reset_setup_progress)
    registry.register(fixes.RESTART_AUTH_SERVICE, "clear_auth_cache", clear_auth_cache)
    registry.register(fixes.CLEAR_AUTH_CACHE, "clear_auth_cache_and_session", clear_auth_cache_and_session)
    registry.register(fixes.RESTART_STRATEGY_SERVICE, "clear_strategy_cache", clear_strategy_cache)
    registry.register(fixes.INIT_BEHAVIOR_LOGS, "init_behavior_logs", init_behavior_logs)
    return registry
