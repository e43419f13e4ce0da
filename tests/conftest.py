"""Pytest fixtures for API and engine tests.

Uses a minimal app with no-op lifespan to avoid Redis.
The target application is simulated: HTTP checks go through httpx.MockTransport
and client state lives in an in-process StateStore.
"""
from contextlib import asynccontextmanager

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apps.api.exceptions import PulsecheckException, pulsecheck_exception_handler
from apps.api.routes import diagnostics, health, readiness, remediations, state
from apps.api.services.diagnostic_service import DiagnosticService, get_diagnostic_service
from diagnostics import EndpointChecker, EnvironmentSnapshot, SurfaceReadiness
from diagnostics.probes import ProbeContext
from diagnostics.snapshot import (
    APP_SHELL_SURFACE,
    BEHAVIOR_LOGS_KEY,
    BILLING_SURFACE,
    CURRENT_USER_KEY,
    DASHBOARD_SURFACE,
    LIBRARY_SURFACE,
    SESSION_TOKEN_KEY,
    SETUP_SURFACE,
    SIGN_IN_SURFACE,
    STRATEGY_SURFACE,
    SUBSCRIPTION_KEY,
)
from events.bus import InMemoryEventBus
from remediation import StateStore

TARGET_URL = "http://target.test"

SURFACE_CAPABILITIES = {
    SIGN_IN_SURFACE: {"sign-up-form", "password-input", "oauth-providers"},
    SETUP_SURFACE: {"form-validation"},
    BILLING_SURFACE: {"payment-form", "subscription-summary"},
    STRATEGY_SURFACE: {"strategy-view", "behavior-log"},
    LIBRARY_SURFACE: {"resource-list", "content-filter", "resource-download"},
    DASHBOARD_SURFACE: {"dashboard-data", "charts"},
}


def _healthy_surfaces() -> dict[str, SurfaceReadiness]:
    surfaces = {APP_SHELL_SURFACE: SurfaceReadiness(mounted=True, content_rendered=True)}
    for name, capabilities in SURFACE_CAPABILITIES.items():
        surfaces[name] = SurfaceReadiness(
            mounted=True, content_rendered=True, capabilities=frozenset(capabilities)
        )
    return surfaces


def _healthy_storage() -> dict[str, str]:
    return {
        SESSION_TOKEN_KEY: "tok-123",
        CURRENT_USER_KEY: '{"id": "u-1", "email": "parent@test.com"}',
        SUBSCRIPTION_KEY: '{"plan": "pro"}',
        BEHAVIOR_LOGS_KEY: "[]",
    }


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"status": "ok"})


@pytest.fixture
def healthy_storage() -> dict[str, str]:
    """Persisted client state of a signed-in user with a subscription."""
    return _healthy_storage()


@pytest.fixture
def healthy_surfaces() -> dict[str, SurfaceReadiness]:
    """Every surface mounted with every capability."""
    return _healthy_surfaces()


@pytest.fixture
def healthy_snapshot() -> EnvironmentSnapshot:
    return EnvironmentSnapshot(storage=_healthy_storage(), surfaces=_healthy_surfaces())


@pytest.fixture
def make_endpoints():
    """Factory: EndpointChecker whose requests go to ``handler`` (200 for everything by default)."""
    def _make(handler=_ok) -> EndpointChecker:
        return EndpointChecker(base_url=TARGET_URL, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def make_context(make_endpoints, healthy_snapshot):
    """Factory: ProbeContext over a snapshot and an HTTP handler."""
    def _make(snapshot: EnvironmentSnapshot | None = None, handler=_ok) -> ProbeContext:
        return ProbeContext(snapshot=snapshot or healthy_snapshot, endpoints=make_endpoints(handler))
    return _make


@pytest.fixture
def healthy_store() -> StateStore:
    """StateStore mirroring a fully healthy host application."""
    store = StateStore(storage=_healthy_storage())
    for name, readiness in _healthy_surfaces().items():
        store.readiness.report(name, readiness)
    return store


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def service(healthy_store: StateStore, event_bus: InMemoryEventBus) -> DiagnosticService:
    """Diagnostic service over the healthy store; target answers 200 everywhere."""
    svc = DiagnosticService(store=healthy_store, transport=httpx.MockTransport(_ok))
    svc.set_event_bus(event_bus)
    return svc


@asynccontextmanager
async def noop_lifespan(app: FastAPI):
    """Minimal lifespan for tests — no Redis, no archive."""
    yield


@pytest.fixture
def test_app(service: DiagnosticService) -> FastAPI:
    """FastAPI app with every router, wired to the test diagnostic service."""
    app = FastAPI(lifespan=noop_lifespan)
    app.add_exception_handler(PulsecheckException, pulsecheck_exception_handler)
    app.include_router(health.router)
    app.include_router(diagnostics.router)
    app.include_router(remediations.router)
    app.include_router(readiness.router)
    app.include_router(state.router)
    app.dependency_overrides[get_diagnostic_service] = lambda: service
    return app


@pytest.fixture
def client(test_app: FastAPI):
    """TestClient for the minimal test app."""
    with TestClient(test_app) as c:
        yield c
