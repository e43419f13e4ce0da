"""HTTP reachability checks against the target application's API surface.

Probes only care whether an endpoint exists and what shape of status code it
returns, never whether the payload is correct. Transport failures are folded
into the result rather than raised, so a probe can record "unreachable" as a
symptom and keep going.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointResult:
    """Outcome of a single HTTP check."""
    status_code: int | None          # None when the request never completed
    latency_ms: float
    error: str | None = None

    @property
    def reachable(self) -> bool:
        return self.status_code is not None

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    @property
    def server_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 500


class EndpointChecker:
    """Issues lightweight probe requests against a fixed base URL."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Root URL of the application being diagnosed
            timeout: Per-request timeout in seconds
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def check(
        self,
        method: str,
        path: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> EndpointResult:
        """Send one request and report status code and latency."""
        start = time.perf_counter()
        try:
            response = await self.client.request(method, path, json=json, headers=headers)
            latency_ms = (time.perf_counter() - start) * 1000
            logger.debug("%s %s → %s (%.1fms)", method, path, response.status_code, latency_ms)
            return EndpointResult(status_code=response.status_code, latency_ms=latency_ms)
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.debug("%s %s unreachable: %s", method, path, e)
            return EndpointResult(
                status_code=None,
                latency_ms=latency_ms,
                error=str(e) or e.__class__.__name__,
            )

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
