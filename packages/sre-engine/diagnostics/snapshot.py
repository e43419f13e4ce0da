"""Read-only view of the environment that probes inspect.

Probes never reach into live state. The caller captures an EnvironmentSnapshot
(persisted client state, session state, presentation readiness) and passes it
to the collectors, so every probe in one run sees the same frozen picture.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Protocol

# ── Well-known state keys ─────────────────────────────
# Persisted client state written by the host application.

SESSION_TOKEN_KEY = "session_token"
CURRENT_USER_KEY = "current_user"
SETUP_PROGRESS_KEY = "setup_progress"
CURRENT_VIEW_KEY = "current_view"
SUBSCRIPTION_KEY = "subscription"
BEHAVIOR_LOGS_KEY = "behavior_logs"

# Keys owned by the engine; emergency recovery returns them to empty.
ENGINE_MANAGED_KEYS = (
    SESSION_TOKEN_KEY,
    CURRENT_USER_KEY,
    SETUP_PROGRESS_KEY,
    CURRENT_VIEW_KEY,
)

# Cache namespaces
AUTH_CACHE = "auth"
STRATEGY_CACHE = "strategy"

# ── Presentation surfaces ─────────────────────────────

APP_SHELL_SURFACE = "app-shell"
SIGN_IN_SURFACE = "sign-in"
SETUP_SURFACE = "setup-wizard"
BILLING_SURFACE = "billing"
STRATEGY_SURFACE = "strategy"
LIBRARY_SURFACE = "library"
DASHBOARD_SURFACE = "dashboard"


@dataclass(frozen=True)
class SurfaceReadiness:
    """Structured readiness signal reported by one presentation surface.

    Surfaces declare what they can do instead of having it inferred from
    rendered markup. ``capabilities`` holds names such as "sign-up-form" or
    "charts".
    """
    mounted: bool = False
    content_rendered: bool = False
    error_state: bool = False
    capabilities: frozenset[str] = frozenset()

    def has(self, capability: str) -> bool:
        return self.mounted and capability in self.capabilities

    def to_dict(self) -> dict:
        return {
            "mounted": self.mounted,
            "content_rendered": self.content_rendered,
            "error_state": self.error_state,
            "capabilities": sorted(self.capabilities),
        }


NOT_MOUNTED = SurfaceReadiness()


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Everything probes may look at, frozen at capture time.

    ``storage`` is None when the persistent store could not be read.
    """
    storage: Mapping[str, str] | None = field(default_factory=dict)
    session: Mapping[str, str] = field(default_factory=dict)
    surfaces: Mapping[str, SurfaceReadiness] = field(default_factory=dict)

    def __post_init__(self):
        # Wrap in read-only proxies; frozen dataclass needs object.__setattr__
        if self.storage is not None:
            object.__setattr__(self, "storage", MappingProxyType(dict(self.storage)))
        object.__setattr__(self, "session", MappingProxyType(dict(self.session)))
        object.__setattr__(self, "surfaces", MappingProxyType(dict(self.surfaces)))

    def surface(self, name: str) -> SurfaceReadiness:
        return self.surfaces.get(name, NOT_MOUNTED)

    def stored(self, key: str) -> str | None:
        if self.storage is None:
            return None
        return self.storage.get(key)


class SnapshotProvider(Protocol):
    """Anything that can capture an EnvironmentSnapshot."""

    async def capture(self) -> EnvironmentSnapshot:
        ...
