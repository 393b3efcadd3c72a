"""
muroom-admin - operator client for the muroom studio-rental API.

Usage:
    from muroom_admin import AdminClient, ClientConfig, StudioForm, ImageCategory, LocalFile

    async with AdminClient(ClientConfig(api_base_url=url)) as admin:
        form = StudioForm(studio_name="Blue Note", owner_phone_number="01012345678")
        form.uploads.select(ImageCategory.MAIN, LocalFile.from_path(main_jpg))
        form.uploads.select(ImageCategory.BLUEPRINT, LocalFile.from_path(plan_png))

        flow = admin.studio_flow()
        receipt = await flow.submit(form)   # validate -> upload -> create

    # Owners and terms
    nickname = await admin.generate_nickname()
    await admin.register_owner(nickname, "010-1234-5678")
"""
from .errors import (
    APIError,
    MuroomError,
    ParseError,
    StorageWriteError,
    SubmissionError,
    UploadIncompleteError,
    UrlIssuanceError,
    ValidationError,
)
from .forms import AddressInfo, BuildingInfo, NearbyStation, RoomInfo, StudioForm
from .models import (
    DEFAULT_STUDIO_RULES,
    CategoryRule,
    ClientConfig,
    ImageCategory,
    LocalFile,
    UploadItem,
    UploadSet,
    UploadState,
)
from .orchestrator import (
    AdminClient,
    CompositeSubmissionBuilder,
    FlowState,
    StudioCreationFlow,
    SubmissionReceipt,
    UploadBatchResult,
    UploadCoordinator,
)
from .use_cases import TargetRole, TermsDraft, TermsType

__version__ = "0.3.0"
__all__ = [
    # Main
    "AdminClient",
    "ClientConfig",
    "StudioCreationFlow",
    "UploadCoordinator",
    "CompositeSubmissionBuilder",
    "FlowState",
    "SubmissionReceipt",
    "UploadBatchResult",
    # Forms
    "StudioForm",
    "AddressInfo",
    "BuildingInfo",
    "NearbyStation",
    "RoomInfo",
    "TermsDraft",
    "TermsType",
    "TargetRole",
    # Models
    "CategoryRule",
    "DEFAULT_STUDIO_RULES",
    "ImageCategory",
    "LocalFile",
    "UploadItem",
    "UploadSet",
    "UploadState",
    # Errors
    "MuroomError",
    "APIError",
    "UrlIssuanceError",
    "StorageWriteError",
    "ValidationError",
    "UploadIncompleteError",
    "SubmissionError",
    "ParseError",
]
