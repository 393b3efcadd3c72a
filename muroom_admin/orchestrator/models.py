"""Orchestrator data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from ..models import UploadItem


class FlowState(Enum):
    """Steps of the studio creation flow."""
    EDITING = "editing"
    VALIDATING = "validating"
    UPLOADING = "uploading"
    SUBMITTING = "submitting"
    DONE = "done"


@dataclass
class UploadBatchResult:
    """Result of one coordinator run."""
    attempted: List[UploadItem] = field(default_factory=list)
    succeeded: List[UploadItem] = field(default_factory=list)
    failed: List[UploadItem] = field(default_factory=list)
    skipped: List[UploadItem] = field(default_factory=list)

    @property
    def all_success(self) -> bool:
        return not self.failed


@dataclass
class SubmissionReceipt:
    """What was sent to the create endpoint and what it answered."""
    payload: Dict[str, Any]
    response: Any = None
