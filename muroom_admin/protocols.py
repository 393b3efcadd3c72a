"""
Protocols (Interfaces) for Dependency Inversion.

Small, focused interfaces so the coordinator and flow can be driven by
test doubles.
"""
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .models import ImageCategory


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for API operations."""

    async def post(self, endpoint: str, json: Dict) -> Any:
        """POST request to API."""
        ...

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET request to API."""
        ...


@runtime_checkable
class IStorageWriter(Protocol):
    """Interface for direct writes to object storage."""

    async def put(self, write_url: str, data: bytes, content_type: str, file_name: str = "") -> None:
        """Write raw bytes to a pre-signed URL."""
        ...


@runtime_checkable
class IUploadUrlIssuer(Protocol):
    """Interface for requesting pre-signed upload URLs."""

    async def request_upload_url(
        self,
        file_name: str,
        category: ImageCategory,
        content_type: str,
    ) -> Any:
        """Return an object exposing ``write_url`` and ``object_key``."""
        ...


@runtime_checkable
class IStudioGateway(IUploadUrlIssuer, Protocol):
    """Upload-URL issuance plus studio creation."""

    async def create_studio(self, payload: Dict[str, Any]) -> Any:
        """Submit the composite studio payload."""
        ...
