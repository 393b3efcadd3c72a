"""Orchestrator package - coordinates upload and submission workflows."""
from .builder import CompositeSubmissionBuilder
from .coordinator import UploadCoordinator
from .core import AdminClient
from .flow import StudioCreationFlow
from .models import FlowState, SubmissionReceipt, UploadBatchResult

__all__ = [
    "AdminClient",
    "CompositeSubmissionBuilder",
    "UploadCoordinator",
    "StudioCreationFlow",
    "FlowState",
    "SubmissionReceipt",
    "UploadBatchResult",
]
