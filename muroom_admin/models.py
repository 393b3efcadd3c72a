"""
Models for the muroom admin client.

Value objects are frozen dataclasses; upload items are the only mutable
records and are changed solely by the upload coordinator.
"""
import mimetypes
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .errors import ValidationError


class ImageCategory(Enum):
    """Semantic role of an uploaded studio image."""
    MAIN = "MAIN"
    BUILDING = "BUILDING"
    ROOM = "ROOM"
    BLUEPRINT = "BLUEPRINT"
    COMMON_OPTION = "COMMON_OPTION"
    INDIVIDUAL_OPTION = "INDIVIDUAL_OPTION"


class UploadState(Enum):
    """Lifecycle of a single selected file."""
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CategoryRule:
    """Cardinality constraint for one image category."""
    category: ImageCategory
    payload_key: str
    min_count: int = 0
    max_count: int = 10
    singleton: bool = False

    @property
    def required(self) -> bool:
        return self.min_count > 0


DEFAULT_STUDIO_RULES: Dict[ImageCategory, CategoryRule] = {
    rule.category: rule
    for rule in (
        CategoryRule(ImageCategory.MAIN, "mainImageKeys", min_count=1, max_count=3),
        CategoryRule(ImageCategory.BUILDING, "buildingImageKeys", max_count=4),
        CategoryRule(ImageCategory.ROOM, "roomImageKeys", max_count=20),
        CategoryRule(
            ImageCategory.BLUEPRINT, "blueprintImageKey",
            min_count=1, max_count=1, singleton=True,
        ),
        CategoryRule(ImageCategory.COMMON_OPTION, "commonOptionImageKeys", max_count=10),
        CategoryRule(ImageCategory.INDIVIDUAL_OPTION, "individualOptionImageKeys", max_count=10),
    )
}


@dataclass(frozen=True)
class LocalFile:
    """Immutable file selected by the operator."""
    name: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path) -> "LocalFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or "application/octet-stream",
            data=path.read_bytes(),
        )


@dataclass
class UploadItem:
    """A selected file and its upload progress."""
    file: LocalFile
    category: ImageCategory
    item_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: UploadState = UploadState.PENDING
    assigned_key: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == UploadState.SUCCEEDED

    @property
    def needs_upload(self) -> bool:
        return self.state in (UploadState.PENDING, UploadState.FAILED)

    def mark_in_flight(self) -> None:
        self.state = UploadState.IN_FLIGHT
        self.assigned_key = None
        self.error = None

    def mark_succeeded(self, object_key: str) -> None:
        if not object_key:
            raise ValueError(f"cannot mark {self.file.name} uploaded without an object key")
        self.state = UploadState.SUCCEEDED
        self.assigned_key = object_key
        self.error = None

    def mark_failed(self, error: str) -> None:
        # A half-finished upload must never leave a key behind.
        self.state = UploadState.FAILED
        self.assigned_key = None
        self.error = error


class UploadSet:
    """
    Ordered container of upload items for one form.

    Display order is selection order; singleton categories keep at most
    one item and a new selection replaces the previous one.
    """

    def __init__(self, rules: Optional[Dict[ImageCategory, CategoryRule]] = None):
        self._rules = rules or DEFAULT_STUDIO_RULES
        self._items: List[UploadItem] = []

    def __iter__(self) -> Iterator[UploadItem]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def rules(self) -> Dict[ImageCategory, CategoryRule]:
        return self._rules

    def select(self, category: ImageCategory, file: LocalFile) -> UploadItem:
        rule = self._rules[category]
        current = self.by_category(category)
        if rule.singleton:
            for item in current:
                self._items.remove(item)
        elif len(current) >= rule.max_count:
            raise ValidationError(
                [f"{category.value}: at most {rule.max_count} image(s) allowed"]
            )
        item = UploadItem(file=file, category=category)
        self._items.append(item)
        return item

    def remove(self, item_id: str) -> None:
        item = self.get(item_id)
        if item is None:
            raise KeyError(item_id)
        if item.state == UploadState.IN_FLIGHT:
            raise ValueError(f"{item.file.name} is being uploaded")
        self._items.remove(item)

    def get(self, item_id: str) -> Optional[UploadItem]:
        for item in self._items:
            if item.item_id == item_id:
                return item
        return None

    def reset(self) -> None:
        self._items.clear()

    def by_category(self, category: ImageCategory) -> List[UploadItem]:
        return [item for item in self._items if item.category == category]

    def in_state(self, *states: UploadState) -> List[UploadItem]:
        return [item for item in self._items if item.state in states]

    @property
    def failed(self) -> List[UploadItem]:
        return self.in_state(UploadState.FAILED)

    @property
    def all_succeeded(self) -> bool:
        return all(item.succeeded for item in self._items)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for the admin client."""
    api_base_url: str = "http://localhost:8080"
    timeout: float = 60.0
    storage_timeout: float = 120.0
    max_parallel_uploads: int = 4
    page_size: int = 10
