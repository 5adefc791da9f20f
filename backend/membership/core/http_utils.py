"""
HTTP Utilities

Instrumented httpx client shared by the outbound integrations (identity
provider). Every request is counted and timed per service.
"""

import logging
import time
from typing import Optional

import httpx

from membership.core.metrics import (
    external_api_duration_seconds,
    external_api_errors_total,
    external_api_requests_total,
)

logger = logging.getLogger(__name__)


class InstrumentedAsyncClient:
    """
    A wrapper around httpx.AsyncClient that automatically records metrics.

    Usage:
        async with InstrumentedAsyncClient("Identity Provider", timeout=10.0) as client:
            response = await client.post(url, json=payload)
    """

    def __init__(
        self,
        service_name: str,
        timeout: float = 30.0,
        **kwargs,
    ):
        self.service_name = service_name
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout
        self._kwargs = kwargs

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, **self._kwargs)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "InstrumentedAsyncClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make an HTTP request with metrics. Transport errors propagate."""
        if self._client is None:
            raise RuntimeError("Client not started. Use 'async with' or call start().")

        start_time = time.time()
        external_api_requests_total.labels(service=self.service_name).inc()
        try:
            response = await self._client.request(method, url, **kwargs)
        except Exception as e:
            external_api_errors_total.labels(service=self.service_name).inc()
            logger.debug(f"{self.service_name} {method} {url} failed: {e}")
            raise
        external_api_duration_seconds.labels(service=self.service_name).observe(
            time.time() - start_time
        )
        if response.is_error:
            external_api_errors_total.labels(service=self.service_name).inc()
        return response

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)
