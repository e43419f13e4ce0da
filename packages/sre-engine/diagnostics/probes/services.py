"""Foundational service probes: storage, authentication, API gateway, presentation."""

from ..schemas import Layer, ServiceStatus
from ..snapshot import APP_SHELL_SURFACE, CURRENT_USER_KEY, SESSION_TOKEN_KEY
from .base import ProbeContext, ProbeError, ServiceCheck, ServiceProbe


class StorageProbe(ServiceProbe):
    """Is the persistent client-state store reachable, and does it hold a user?"""

    service = "storage"
    layer = Layer.BACKEND
    failure_details = "Storage connection failed"

    async def inspect(self, ctx: ProbeContext) -> ServiceCheck:
        if ctx.snapshot.storage is None:
            raise ProbeError("Persistent storage unreachable")

        if ctx.snapshot.stored(CURRENT_USER_KEY) is not None:
            return ServiceCheck(ServiceStatus.HEALTHY, "User data accessible")
        return ServiceCheck(ServiceStatus.DEGRADED, "No user data found")


class AuthenticationProbe(ServiceProbe):
    """Is there a usable session?"""

    service = "authentication"
    layer = Layer.MIDDLEWARE
    failure_details = "Authentication service unreachable"

    async def inspect(self, ctx: ProbeContext) -> ServiceCheck:
        token = ctx.snapshot.stored(SESSION_TOKEN_KEY)
        user = ctx.snapshot.stored(CURRENT_USER_KEY)
        if token is None and user is None:
            return ServiceCheck(ServiceStatus.DEGRADED, "No active user session")
        return ServiceCheck(ServiceStatus.HEALTHY, "Authentication service operational")


class ApiGatewayProbe(ServiceProbe):
    """Does the gateway answer its health path in time?"""

    service = "api-gateway"
    layer = Layer.MIDDLEWARE
    failure_details = "API gateway connection failed"

    def __init__(
        self,
        health_path: str = "/api/health",
        slow_threshold_ms: float = 2000.0,
        timeout: float = 5.0,
    ):
        super().__init__(timeout, name="ApiGateway")
        self.health_path = health_path
        self.slow_threshold_ms = slow_threshold_ms

    async def inspect(self, ctx: ProbeContext) -> ServiceCheck:
        result = await ctx.endpoints.check("GET", self.health_path)

        if not result.ok:
            return ServiceCheck(
                ServiceStatus.DOWN,
                "API gateway unreachable" if not result.reachable
                else f"API gateway returned HTTP {result.status_code}",
                error_rate=100.0,
                error=result.error,
            )
        if result.latency_ms > self.slow_threshold_ms:
            return ServiceCheck(
                ServiceStatus.DEGRADED,
                f"API gateway responding slowly ({result.latency_ms:.0f}ms)",
                error_rate=0.0,
            )
        return ServiceCheck(ServiceStatus.HEALTHY, "API gateway responding", error_rate=0.0)


class PresentationProbe(ServiceProbe):
    """Is the application shell mounted and rendering without an error state?"""

    service = "presentation-layer"
    layer = Layer.FRONTEND
    failure_details = "Presentation layer failed to load"

    async def inspect(self, ctx: ProbeContext) -> ServiceCheck:
        shell = ctx.snapshot.surface(APP_SHELL_SURFACE)

        if not shell.mounted:
            return ServiceCheck(ServiceStatus.DOWN, "Root mount missing")
        if not shell.content_rendered:
            return ServiceCheck(ServiceStatus.DEGRADED, "Application content not rendering")
        if shell.error_state:
            return ServiceCheck(ServiceStatus.DEGRADED, "Unhandled-error state visible")
        return ServiceCheck(ServiceStatus.HEALTHY, "Presentation layer loaded successfully")


def default_service_probes(
    timeout: float = 5.0,
    health_path: str = "/api/health",
    slow_threshold_ms: float = 2000.0,
) -> list[ServiceProbe]:
    """The fixed set of foundational services, in report order."""
    gateway = ApiGatewayProbe(health_path, slow_threshold_ms, timeout)
    return [
        StorageProbe(timeout, name="Storage"),
        AuthenticationProbe(timeout, name="Authentication"),
        gateway,
        PresentationProbe(timeout, name="Presentation"),
    ]
