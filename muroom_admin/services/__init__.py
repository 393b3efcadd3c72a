"""Services for the muroom admin client."""
from .api_client import HTTPAPIClient
from .repository import AdminRepository
from .storage import PresignedStorageWriter

__all__ = [
    "HTTPAPIClient",
    "AdminRepository",
    "PresignedStorageWriter",
]
