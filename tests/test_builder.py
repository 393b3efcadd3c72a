"""Tests for the composite submission builder."""
import pytest

from conftest import make_file, make_form

from muroom_admin.errors import ValidationError
from muroom_admin.forms import StudioForm
from muroom_admin.models import CategoryRule, ImageCategory, UploadSet
from muroom_admin.orchestrator.builder import CompositeSubmissionBuilder


def _select(form, category, name, key=None):
    item = form.uploads.select(category, make_file(name))
    if key:
        item.mark_succeeded(key)
    return item


def test_validate_requires_main_and_blueprint(form):
    builder = CompositeSubmissionBuilder()
    with pytest.raises(ValidationError) as exc_info:
        builder.validate(form)
    problems = exc_info.value.problems
    assert "mainImageKeys: at least 1 image(s) required, 0 selected" in problems
    assert "blueprintImageKey: at least 1 image(s) required, 0 selected" in problems


def test_validate_collects_field_and_image_problems():
    builder = CompositeSubmissionBuilder()
    with pytest.raises(ValidationError) as exc_info:
        builder.validate(StudioForm(rooms=[]))
    problems = exc_info.value.problems
    assert "studioName is required" in problems
    assert "rooms: at least one room is required" in problems
    assert any(p.startswith("mainImageKeys") for p in problems)


def test_validate_passes_for_complete_selection(form):
    _select(form, ImageCategory.MAIN, "m1.jpg")
    _select(form, ImageCategory.BLUEPRINT, "plan.png")
    CompositeSubmissionBuilder().validate(form)


def test_image_keys_grouping(form):
    _select(form, ImageCategory.MAIN, "m1.jpg", "k/m1")
    _select(form, ImageCategory.ROOM, "r1.jpg", "k/r1")
    _select(form, ImageCategory.MAIN, "m2.jpg", "k/m2")
    _select(form, ImageCategory.BLUEPRINT, "plan.png", "k/plan")

    keys = CompositeSubmissionBuilder().image_keys(form.uploads)

    assert keys == {
        "mainImageKeys": ["k/m1", "k/m2"],
        "buildingImageKeys": [],
        "roomImageKeys": ["k/r1"],
        "blueprintImageKey": "k/plan",
        "commonOptionImageKeys": [],
        "individualOptionImageKeys": [],
    }


def test_singleton_without_upload_is_none():
    keys = CompositeSubmissionBuilder().image_keys(UploadSet())
    assert keys["blueprintImageKey"] is None
    assert keys["mainImageKeys"] == []


def test_build_refuses_unfinished_uploads(form):
    _select(form, ImageCategory.MAIN, "m1.jpg", "k/m1")
    plan = _select(form, ImageCategory.BLUEPRINT, "plan.png")
    plan.mark_failed("storage answered 403")

    with pytest.raises(ValidationError) as exc_info:
        CompositeSubmissionBuilder().build(form)

    assert "plan.png (BLUEPRINT): upload failed: storage answered 403" in exc_info.value.problems


def test_build_payload(form):
    _select(form, ImageCategory.MAIN, "m1.jpg", "k/m1")
    _select(form, ImageCategory.BLUEPRINT, "plan.png", "k/plan")

    payload = CompositeSubmissionBuilder().build(form)

    assert payload["studioName"] == "Blue Note"
    assert payload["imageKeys"]["mainImageKeys"] == ["k/m1"]
    assert payload["imageKeys"]["blueprintImageKey"] == "k/plan"


def test_custom_rules():
    rules = {
        ImageCategory.MAIN: CategoryRule(ImageCategory.MAIN, "mainImageKeys", min_count=2, max_count=3),
    }
    form = make_form(uploads=UploadSet(rules))
    _select(form, ImageCategory.MAIN, "m1.jpg")
    builder = CompositeSubmissionBuilder(rules)

    with pytest.raises(ValidationError, match="at least 2"):
        builder.validate(form)

    _select(form, ImageCategory.MAIN, "m2.jpg")
    builder.validate(form)
