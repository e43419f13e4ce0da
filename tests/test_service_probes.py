"""Foundational service probes against synthetic snapshots and a mock target."""
import asyncio

import httpx
import pytest

from diagnostics import EnvironmentSnapshot, Layer, ServiceStatus, SurfaceReadiness
from diagnostics.probes import (
    ApiGatewayProbe,
    AuthenticationProbe,
    PresentationProbe,
    ServiceCheck,
    ServiceProbe,
    StorageProbe,
)
from diagnostics.snapshot import APP_SHELL_SURFACE, CURRENT_USER_KEY, SESSION_TOKEN_KEY


def _refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


# ── Storage ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_storage_healthy_with_user(make_context):
    record = await StorageProbe().run(make_context())
    assert record.service == "storage"
    assert record.status == ServiceStatus.HEALTHY
    assert record.critical_path is True
    assert record.latency is not None


@pytest.mark.asyncio
async def test_storage_degraded_without_user(make_context):
    ctx = make_context(EnvironmentSnapshot(storage={}))
    record = await StorageProbe().run(ctx)
    assert record.status == ServiceStatus.DEGRADED
    assert record.details == "No user data found"


@pytest.mark.asyncio
async def test_storage_down_when_unreadable(make_context):
    ctx = make_context(EnvironmentSnapshot(storage=None))
    record = await StorageProbe().run(ctx)
    assert record.status == ServiceStatus.DOWN
    assert record.error == "Persistent storage unreachable"
    assert record.details == "Storage connection failed"


# ── Authentication ───────────────────────────────────

@pytest.mark.asyncio
async def test_authentication_degraded_without_session(make_context):
    record = await AuthenticationProbe().run(make_context(EnvironmentSnapshot(storage={})))
    assert record.status == ServiceStatus.DEGRADED
    assert record.layer == Layer.MIDDLEWARE


@pytest.mark.asyncio
async def test_authentication_healthy_with_token_only(make_context):
    ctx = make_context(EnvironmentSnapshot(storage={SESSION_TOKEN_KEY: "t"}))
    record = await AuthenticationProbe().run(ctx)
    assert record.status == ServiceStatus.HEALTHY


# ── API gateway ──────────────────────────────────────

@pytest.mark.asyncio
async def test_gateway_healthy(make_context):
    record = await ApiGatewayProbe().run(make_context())
    assert record.status == ServiceStatus.HEALTHY
    assert record.error_rate == 0.0


@pytest.mark.asyncio
async def test_gateway_down_on_server_error(make_context):
    ctx = make_context(handler=lambda request: httpx.Response(503))
    record = await ApiGatewayProbe().run(ctx)
    assert record.status == ServiceStatus.DOWN
    assert record.error_rate == 100.0
    assert "503" in record.details


@pytest.mark.asyncio
async def test_gateway_down_when_unreachable(make_context):
    record = await ApiGatewayProbe().run(make_context(handler=_refused))
    assert record.status == ServiceStatus.DOWN
    assert record.details == "API gateway unreachable"
    assert "connection refused" in record.error


@pytest.mark.asyncio
async def test_gateway_degraded_when_slow(make_context):
    probe = ApiGatewayProbe(slow_threshold_ms=-1)
    record = await probe.run(make_context())
    assert record.status == ServiceStatus.DEGRADED


@pytest.mark.asyncio
async def test_gateway_uses_configured_health_path(make_context):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200)

    await ApiGatewayProbe(health_path="/healthz").run(make_context(handler=handler))
    assert seen == ["/healthz"]


# ── Presentation ─────────────────────────────────────

@pytest.mark.asyncio
async def test_presentation_down_when_root_not_mounted(make_context):
    record = await PresentationProbe().run(make_context(EnvironmentSnapshot()))
    assert record.status == ServiceStatus.DOWN
    assert record.details == "Root mount missing"


@pytest.mark.asyncio
async def test_presentation_degraded_without_content(make_context):
    snapshot = EnvironmentSnapshot(surfaces={APP_SHELL_SURFACE: SurfaceReadiness(mounted=True)})
    record = await PresentationProbe().run(make_context(snapshot))
    assert record.status == ServiceStatus.DEGRADED


@pytest.mark.asyncio
async def test_presentation_degraded_on_error_state(make_context):
    shell = SurfaceReadiness(mounted=True, content_rendered=True, error_state=True)
    snapshot = EnvironmentSnapshot(surfaces={APP_SHELL_SURFACE: shell})
    record = await PresentationProbe().run(make_context(snapshot))
    assert record.status == ServiceStatus.DEGRADED
    assert record.details == "Unhandled-error state visible"


# ── Probe boundary ───────────────────────────────────

class _HangingProbe(ServiceProbe):
    service = "hanging"

    async def inspect(self, ctx):
        await asyncio.sleep(10)
        return ServiceCheck(ServiceStatus.HEALTHY, "never")


class _ExplodingProbe(ServiceProbe):
    service = "exploding"

    async def inspect(self, ctx):
        raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_probe_timeout_becomes_down(make_context):
    record = await _HangingProbe(timeout=0.01).run(make_context())
    assert record.status == ServiceStatus.DOWN
    assert "timed out" in record.error


@pytest.mark.asyncio
async def test_probe_exception_becomes_down(make_context):
    record = await _ExplodingProbe().run(make_context())
    assert record.status == ServiceStatus.DOWN
    assert record.error == "boom"


def test_snapshot_is_read_only(healthy_snapshot):
    with pytest.raises(TypeError):
        healthy_snapshot.storage[CURRENT_USER_KEY] = "x"
