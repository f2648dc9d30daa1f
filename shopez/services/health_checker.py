# shopez/services/health_checker.py

"""Connectivity check for the catalog, identity, and cart services."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from shopez.config.settings import Settings

logger = logging.getLogger("shopez.health")

_HEALTH_TIMEOUT = 10  # seconds per endpoint
_SLOW_THRESHOLD_MS = 5000


@dataclass
class HealthResult:
    """Result of a single endpoint health check."""

    endpoint_id: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_endpoint(endpoint: dict[str, str]) -> HealthResult:
    """Probe one remote endpoint for reachability.

    Any HTTP answer below 500 counts as reachable: the identity and
    database endpoints reject anonymous requests with 4xx by design.
    """
    endpoint_id = endpoint["id"]
    start = time.monotonic()
    try:
        session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        try:
            resp = session.get(
                endpoint["url"],
                headers=Settings.DEFAULT_HEADERS,
                timeout=_HEALTH_TIMEOUT,
            )
        finally:
            session.close()
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code >= 500:
            return HealthResult(
                endpoint_id=endpoint_id,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        if elapsed_ms > _SLOW_THRESHOLD_MS:
            return HealthResult(
                endpoint_id=endpoint_id,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )

        return HealthResult(
            endpoint_id=endpoint_id,
            status="ok",
            latency_ms=elapsed_ms,
            message="" if resp.status_code < 400 else f"HTTP {resp.status_code}",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            endpoint_id=endpoint_id,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


class HealthChecker:
    """Runs concurrent probes against every configured endpoint."""

    def __init__(self) -> None:
        self.endpoints = Settings.HEALTH_ENDPOINTS

    async def check_all(self) -> list[HealthResult]:
        """Probe every registered endpoint concurrently."""
        tasks = [
            asyncio.to_thread(probe_endpoint, endpoint)
            for endpoint in self.endpoints
        ]
        results: list[HealthResult] = list(await asyncio.gather(*tasks))
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.endpoint_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
