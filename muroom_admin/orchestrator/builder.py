"""Composite submission builder - turns a finished form into one payload."""
import logging
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..forms import StudioForm
from ..models import DEFAULT_STUDIO_RULES, CategoryRule, ImageCategory, UploadSet, UploadState

logger = logging.getLogger(__name__)


class CompositeSubmissionBuilder:
    """
    Validates a studio form and assembles the create payload.

    ``validate`` runs before any network call and checks form fields and
    how many files were selected per category. ``build`` runs after the
    uploads and additionally requires every selected file to be uploaded.
    """

    def __init__(self, rules: Optional[Dict[ImageCategory, CategoryRule]] = None):
        self._rules = rules or DEFAULT_STUDIO_RULES

    def selection_problems(self, uploads: UploadSet) -> List[str]:
        problems = []
        for category, rule in self._rules.items():
            count = len(uploads.by_category(category))
            if count < rule.min_count:
                problems.append(
                    f"{rule.payload_key}: at least {rule.min_count} image(s) required, {count} selected"
                )
            elif count > rule.max_count:
                problems.append(
                    f"{rule.payload_key}: at most {rule.max_count} image(s) allowed, {count} selected"
                )
        return problems

    def upload_problems(self, uploads: UploadSet) -> List[str]:
        problems = []
        for item in uploads:
            if item.state == UploadState.FAILED:
                problems.append(f"{item.file.name} ({item.category.value}): upload failed: {item.error}")
            elif item.state != UploadState.SUCCEEDED:
                problems.append(f"{item.file.name} ({item.category.value}): upload {item.state.value}")
        for category, rule in self._rules.items():
            uploaded = [i for i in uploads.by_category(category) if i.succeeded]
            if len(uploaded) < rule.min_count:
                problems.append(
                    f"{rule.payload_key}: {len(uploaded)} of {rule.min_count} required image(s) uploaded"
                )
        return problems

    def validate(self, form: StudioForm) -> None:
        """
        Check the form before uploading anything.

        Raises:
            ValidationError: listing every missing field and category
        """
        problems = form.missing_fields() + self.selection_problems(form.uploads)
        if problems:
            raise ValidationError(problems)

    def image_keys(self, uploads: UploadSet) -> Dict[str, Any]:
        """Group uploaded object keys by category in display order."""
        keys: Dict[str, Any] = {}
        for category, rule in self._rules.items():
            uploaded = [i.assigned_key for i in uploads.by_category(category) if i.succeeded]
            if rule.singleton:
                keys[rule.payload_key] = uploaded[-1] if uploaded else None
            else:
                keys[rule.payload_key] = uploaded
        return keys

    def build(self, form: StudioForm) -> Dict[str, Any]:
        """
        Assemble the composite create payload.

        Raises:
            ValidationError: form incomplete or any selected file not uploaded
        """
        problems = form.missing_fields() + self.upload_problems(form.uploads)
        if problems:
            raise ValidationError(problems)

        payload = form.to_payload()
        payload["imageKeys"] = self.image_keys(form.uploads)
        logger.debug(
            "Built studio payload with "
            + ", ".join(f"{k}={len(v) if isinstance(v, list) else 1}" for k, v in payload["imageKeys"].items() if v)
        )
        return payload
