"""Core client - wires services and exposes admin workflows."""
from typing import Any, Optional

import httpx

from ..models import ClientConfig
from ..services.api_client import HTTPAPIClient
from ..services.repository import AdminRepository
from ..services.storage import PresignedStorageWriter
from ..use_cases.owners import GenerateNicknameUseCase, OwnerRegistration, RegisterOwnerUseCase
from ..use_cases.terms import CreateTermsUseCase, TermsDraft
from ..utils.events import EventEmitter
from .builder import CompositeSubmissionBuilder
from .coordinator import UploadCoordinator
from .flow import StudioCreationFlow


class AdminClient:
    """
    Entry point for muroom admin operations.

    Usage:
        async with AdminClient(ClientConfig(api_base_url=url)) as admin:
            options = await admin.repository.fetch_filter_options()

            form = StudioForm(...)
            form.uploads.select(ImageCategory.MAIN, LocalFile.from_path(path))
            receipt = await admin.studio_flow().submit(form)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        api_transport: Optional[httpx.AsyncBaseTransport] = None,
        storage_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client with configuration.

        Args:
            config: Client configuration
            api_transport: Optional httpx transport for API calls (tests)
            storage_transport: Optional httpx transport for storage PUTs (tests)
        """
        self._config = config or ClientConfig()
        self._api_transport = api_transport
        self._storage_transport = storage_transport
        self.events = EventEmitter()

        # Initialized in __aenter__
        self._api_client: Optional[HTTPAPIClient] = None
        self._storage: Optional[PresignedStorageWriter] = None
        self._repository: Optional[AdminRepository] = None
        self._coordinator: Optional[UploadCoordinator] = None

    async def __aenter__(self):
        self._api_client = HTTPAPIClient(
            self._config.api_base_url,
            timeout=self._config.timeout,
            transport=self._api_transport,
        )
        await self._api_client.__aenter__()

        self._storage = PresignedStorageWriter(
            timeout=self._config.storage_timeout,
            transport=self._storage_transport,
        )
        await self._storage.__aenter__()

        self._repository = AdminRepository(self._api_client)
        self._coordinator = UploadCoordinator(
            self._repository,
            self._storage,
            max_parallel=self._config.max_parallel_uploads,
            events=self.events,
        )
        return self

    async def __aexit__(self, *args):
        if self._storage:
            await self._storage.__aexit__(*args)
        if self._api_client:
            await self._api_client.__aexit__(*args)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def repository(self) -> AdminRepository:
        if self._repository is None:
            raise RuntimeError("AdminClient not initialized. Use 'async with' context.")
        return self._repository

    @property
    def coordinator(self) -> UploadCoordinator:
        if self._coordinator is None:
            raise RuntimeError("AdminClient not initialized. Use 'async with' context.")
        return self._coordinator

    def studio_flow(self, builder: Optional[CompositeSubmissionBuilder] = None) -> StudioCreationFlow:
        """Start a new studio creation flow sharing this client's services."""
        return StudioCreationFlow(self.repository, self.coordinator, builder)

    async def generate_nickname(self) -> str:
        return await GenerateNicknameUseCase(self.repository).execute()

    async def register_owner(self, nickname: str, phone_number: str) -> Any:
        registration = OwnerRegistration(nickname=nickname, phone_number=phone_number)
        return await RegisterOwnerUseCase(self.repository).execute(registration)

    async def create_terms(self, draft: TermsDraft) -> Any:
        return await CreateTermsUseCase(self.repository).execute(draft)
