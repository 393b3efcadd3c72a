"""HTTP adapter for muroom API operations."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import APIError

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. GET requests are idempotent and retried
    on 5xx and transport errors; POST requests create resources and are
    sent exactly once.
    """

    max_retries = 3

    def __init__(
        self,
        base_url: str,
        timeout: float = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        return self._client

    async def post(self, endpoint: str, json: Dict) -> httpx.Response:
        client = self._require_client()
        logger.debug(f"POST {endpoint}")
        response = await client.post(endpoint, json=json)
        if response.status_code >= 400:
            raise APIError("POST", endpoint, response.status_code, _error_detail(response))
        return response

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        client = self._require_client()

        for attempt in range(self.max_retries):
            try:
                logger.debug(f"GET {endpoint} (attempt {attempt + 1})")
                response = await client.get(endpoint, params=params)

                if response.status_code >= 500 and attempt < self.max_retries - 1:
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue

                if response.status_code >= 400:
                    raise APIError("GET", endpoint, response.status_code, _error_detail(response))

                return response
            except (httpx.RequestError, httpx.TimeoutException) as exc:
                if attempt < self.max_retries - 1:
                    logger.warning(f"GET {endpoint} failed ({exc}), retrying")
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise

        raise RuntimeError(f"Failed to GET {endpoint} after {self.max_retries} attempts")
