"""Use cases for authoring legal terms documents."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Any, Optional

from ..errors import ValidationError

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")


class TermsType(Enum):
    TERMS_OF_USE = "TERMS_OF_USE"
    PRIVACY_COLLECTION = "PRIVACY_COLLECTION"
    PRIVACY_PROCESSING = "PRIVACY_PROCESSING"
    MARKETING_RECEIVE = "MARKETING_RECEIVE"


class TargetRole(Enum):
    OWNER = "OWNER"
    MUSICIAN = "MUSICIAN"


def strip_html(content: str) -> str:
    return _TAG_RE.sub("", content or "").strip()


@dataclass(frozen=True)
class TermsDraft:
    """A terms document as typed by the operator."""
    code: Optional[TermsType]
    target_role: Optional[TargetRole]
    title: str
    effective_date: str
    content: str
    effective_time: str = "00:00"
    is_mandatory: bool = True

    def problems(self) -> list[str]:
        problems = []
        if self.code is None:
            problems.append("code (terms type) is required")
        if self.target_role is None:
            problems.append("targetRole is required")
        if not self.title.strip():
            problems.append("title is required")
        if not self.effective_date or not self.effective_time:
            problems.append("effective date and time are required")
        else:
            try:
                self.effective_local()
            except ValueError:
                problems.append(
                    f"invalid effective date/time: {self.effective_date} {self.effective_time}"
                )
        if not strip_html(self.content):
            problems.append("content is required")
        return problems

    def effective_local(self) -> datetime:
        return datetime.strptime(f"{self.effective_date}T{self.effective_time}", "%Y-%m-%dT%H:%M")

    def effective_at(self, tz: Optional[tzinfo] = None) -> str:
        """Local effective date/time as UTC ISO-8601 with milliseconds and 'Z'."""
        local = self.effective_local()
        local = local.replace(tzinfo=tz) if tz is not None else local.astimezone()
        utc = local.astimezone(timezone.utc)
        return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"

    def to_payload(self, tz: Optional[tzinfo] = None) -> dict:
        return {
            "code": self.code.value,
            "targetRole": self.target_role.value,
            "isMandatory": self.is_mandatory,
            "title": self.title,
            "effectiveAt": self.effective_at(tz),
            "content": self.content,
        }


class CreateTermsUseCase:
    """Validate and publish a terms document."""

    def __init__(self, repository: Any, tz: Optional[tzinfo] = None):
        self._repository = repository
        self._tz = tz

    async def execute(self, draft: TermsDraft) -> Any:
        problems = draft.problems()
        if problems:
            raise ValidationError(problems)
        payload = draft.to_payload(self._tz)
        response = await self._repository.create_terms(payload)
        logger.info(f"Created terms '{draft.title}' effective {payload['effectiveAt']}")
        return response
