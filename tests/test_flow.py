"""Tests for the studio creation flow."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from conftest import make_file

from muroom_admin.errors import StorageWriteError, SubmissionError, UploadIncompleteError, ValidationError
from muroom_admin.forms import StudioForm
from muroom_admin.models import ImageCategory, UploadState
from muroom_admin.orchestrator.coordinator import UploadCoordinator
from muroom_admin.orchestrator.flow import StudioCreationFlow
from muroom_admin.orchestrator.models import FlowState


def _issued(file_name, category, content_type):
    return SimpleNamespace(
        write_url=f"https://storage.test/{file_name}",
        object_key=f"{category.value}/{file_name}",
    )


def _build_flow():
    gateway = Mock()
    gateway.request_upload_url = AsyncMock(side_effect=_issued)
    gateway.create_studio = AsyncMock(return_value={"studioId": 42})
    storage = Mock()
    storage.put = AsyncMock(return_value=None)
    coordinator = UploadCoordinator(gateway, storage, max_parallel=3)
    flow = StudioCreationFlow(gateway, coordinator)
    return flow, gateway, storage


@pytest.mark.asyncio
async def test_two_main_and_one_blueprint(form):
    flow, gateway, storage = _build_flow()
    form.uploads.select(ImageCategory.MAIN, make_file("m1.jpg"))
    form.uploads.select(ImageCategory.MAIN, make_file("m2.jpg"))
    form.uploads.select(ImageCategory.BLUEPRINT, make_file("plan.png", "image/png"))

    receipt = await flow.submit(form)

    assert flow.state == FlowState.DONE
    gateway.create_studio.assert_awaited_once()
    payload = gateway.create_studio.await_args.args[0]
    assert payload["imageKeys"]["mainImageKeys"] == ["MAIN/m1.jpg", "MAIN/m2.jpg"]
    assert payload["imageKeys"]["blueprintImageKey"] == "BLUEPRINT/plan.png"
    assert receipt.payload is payload
    assert receipt.response == {"studioId": 42}


@pytest.mark.asyncio
async def test_incomplete_form_sends_nothing():
    flow, gateway, storage = _build_flow()
    form = StudioForm(rooms=[])
    form.uploads.select(ImageCategory.MAIN, make_file("m1.jpg"))
    form.uploads.select(ImageCategory.BLUEPRINT, make_file("plan.png"))

    with pytest.raises(ValidationError) as exc_info:
        await flow.submit(form)

    assert "rooms: at least one room is required" in exc_info.value.problems
    gateway.request_upload_url.assert_not_awaited()
    storage.put.assert_not_awaited()
    gateway.create_studio.assert_not_awaited()
    assert flow.state == FlowState.EDITING


@pytest.mark.asyncio
async def test_missing_blueprint_sends_nothing(form):
    flow, gateway, storage = _build_flow()
    form.uploads.select(ImageCategory.MAIN, make_file("m1.jpg"))

    with pytest.raises(ValidationError, match="blueprintImageKey"):
        await flow.submit(form)

    gateway.request_upload_url.assert_not_awaited()


@pytest.mark.asyncio
async def test_blueprint_failure_blocks_submission_and_retry_reuses_main(form):
    flow, gateway, storage = _build_flow()
    storage.put.side_effect = [None, StorageWriteError("plan.png", "storage answered 500", 500)]
    main = form.uploads.select(ImageCategory.MAIN, make_file("m1.jpg"))
    blueprint = form.uploads.select(ImageCategory.BLUEPRINT, make_file("plan.png"))

    with pytest.raises(UploadIncompleteError) as exc_info:
        await flow.submit(form)

    assert exc_info.value.failed_items == [blueprint]
    assert main.state == UploadState.SUCCEEDED
    assert blueprint.state == UploadState.FAILED
    gateway.create_studio.assert_not_awaited()
    assert flow.state == FlowState.EDITING

    storage.put.side_effect = None
    await flow.submit(form)

    assert flow.state == FlowState.DONE
    assert storage.put.await_count == 3
    retried = [c.args[0] for c in gateway.request_upload_url.await_args_list]
    assert retried == ["m1.jpg", "plan.png", "plan.png"]
    gateway.create_studio.assert_awaited_once()


@pytest.mark.asyncio
async def test_rejected_submission_is_not_resent(form):
    flow, gateway, storage = _build_flow()
    gateway.create_studio.side_effect = SubmissionError("/api/admin/studios", "duplicate studio", 409)
    form.uploads.select(ImageCategory.MAIN, make_file("m1.jpg"))
    form.uploads.select(ImageCategory.BLUEPRINT, make_file("plan.png"))

    with pytest.raises(SubmissionError):
        await flow.submit(form)

    gateway.create_studio.assert_awaited_once()
    assert flow.state == FlowState.EDITING
    assert form.uploads.all_succeeded

    # Resubmitting reuses the stored keys without uploading again.
    gateway.create_studio.side_effect = None
    await flow.submit(form)
    assert gateway.request_upload_url.await_count == 2
    assert gateway.create_studio.await_count == 2


@pytest.mark.asyncio
async def test_cannot_submit_twice_after_done(form):
    flow, gateway, _ = _build_flow()
    form.uploads.select(ImageCategory.MAIN, make_file("m1.jpg"))
    form.uploads.select(ImageCategory.BLUEPRINT, make_file("plan.png"))
    await flow.submit(form)

    with pytest.raises(RuntimeError):
        await flow.submit(form)

    flow.reset(form)
    assert flow.state == FlowState.EDITING
    assert len(form.uploads) == 0
