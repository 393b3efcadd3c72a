"""
Storage writer - Single Responsibility: PUT bytes to pre-signed URLs.

Uses its own HTTP client so API headers and base URL never reach the
object store.
"""
import logging
from typing import Optional

import httpx

from ..errors import StorageWriteError

logger = logging.getLogger(__name__)


class PresignedStorageWriter:
    """
    Writes file bytes directly to object storage.

    Implements IStorageWriter protocol. Each call issues exactly one PUT;
    failures surface as StorageWriteError and are never retried here.
    """

    def __init__(
        self,
        timeout: float = 120,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def put(self, write_url: str, data: bytes, content_type: str, file_name: str = "") -> None:
        """
        Upload raw bytes to a pre-signed URL.

        Args:
            write_url: Pre-signed URL issued by the API
            data: File contents
            content_type: MIME type sent as Content-Type
            file_name: Used in error messages only

        Raises:
            StorageWriteError: transport failure or non-2xx answer
        """
        if not self._client:
            raise RuntimeError("PresignedStorageWriter not initialized. Use 'async with' context.")

        label = file_name or write_url.split("?", 1)[0]
        try:
            response = await self._client.put(
                write_url,
                content=data,
                headers={"Content-Type": content_type},
            )
        except httpx.HTTPError as exc:
            raise StorageWriteError(label, f"{type(exc).__name__}: {exc}") from exc

        if response.status_code >= 300:
            raise StorageWriteError(
                label,
                f"storage answered {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        logger.debug(f"Stored {label} ({len(data)} bytes)")
