"""Exception hierarchy for muroom admin operations."""
from typing import Any, List, Optional, Sequence


class MuroomError(Exception):
    """Base class for every recoverable admin-client failure."""


class APIError(MuroomError):
    """The muroom API answered with a non-2xx status."""

    def __init__(self, method: str, endpoint: str, status_code: int, detail: Any = None):
        self.method = method
        self.endpoint = endpoint
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API error {status_code} on {method} {endpoint}: {detail}")


class UrlIssuanceError(MuroomError):
    """The backend refused to issue a pre-signed upload URL."""

    def __init__(self, file_name: str, category: str, reason: str):
        self.file_name = file_name
        self.category = category
        self.reason = reason
        super().__init__(f"upload URL not issued for {file_name} ({category}): {reason}")


class StorageWriteError(MuroomError):
    """The direct PUT to object storage failed."""

    def __init__(self, file_name: str, reason: str, status_code: Optional[int] = None):
        self.file_name = file_name
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"storage write failed for {file_name}: {reason}")


class ValidationError(MuroomError):
    """Required fields or image categories are missing."""

    def __init__(self, problems: Sequence[str]):
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "invalid input")


class UploadIncompleteError(MuroomError):
    """Some selected files could not be uploaded; each item keeps its own error."""

    def __init__(self, failed_items: Sequence[Any]):
        self.failed_items = list(failed_items)
        names = ", ".join(item.file.name for item in self.failed_items)
        super().__init__(f"{len(self.failed_items)} file(s) failed to upload: {names}")


class SubmissionError(MuroomError):
    """A create endpoint rejected the submitted payload."""

    def __init__(self, endpoint: str, body: str, status_code: Optional[int] = None):
        self.endpoint = endpoint
        self.body = body
        self.status_code = status_code
        status = f" ({status_code})" if status_code is not None else ""
        super().__init__(f"submission to {endpoint} failed{status}: {body}")


class ParseError(MuroomError):
    """A response body did not match the expected schema."""

    def __init__(self, context: str, detail: str):
        self.context = context
        self.detail = detail
        super().__init__(f"unexpected response from {context}: {detail}")
