"""Tests for muroom-admin CLI commands."""
import json
import logging
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from muroom_admin import cli
from muroom_admin.cli import CLIError, _build_parser, _load_studio_form, run_cli
from muroom_admin.errors import StorageWriteError, SubmissionError
from muroom_admin.models import ImageCategory
from muroom_admin.orchestrator import StudioCreationFlow, UploadCoordinator
from muroom_admin.utils.events import EventEmitter


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logging.disable(logging.NOTSET)


def test_parser_studio_new_collects_images():
    args = _build_parser().parse_args(
        [
            "studios", "new", "form.json",
            "--main", "a.jpg", "b.jpg",
            "--main", "c.jpg",
            "--blueprint", "plan.png",
            "--yes",
        ]
    )
    assert args.main == [Path("a.jpg"), Path("b.jpg"), Path("c.jpg")]
    assert args.blueprint == Path("plan.png")
    assert args.room == []
    assert args.yes is True


def test_load_studio_form(tmp_path):
    form_path = tmp_path / "studio.json"
    form_path.write_text(
        json.dumps({"studioName": "Groove", "rooms": [{"roomName": "A"}]}),
        encoding="utf-8",
    )
    main = tmp_path / "main.jpg"
    main.write_bytes(b"jpeg")
    plan = tmp_path / "plan.png"
    plan.write_bytes(b"png")

    args = _build_parser().parse_args(
        ["studios", "new", str(form_path), "--main", str(main), "--blueprint", str(plan)]
    )
    form = _load_studio_form(args)

    assert form.studio_name == "Groove"
    assert [i.file.name for i in form.uploads.by_category(ImageCategory.MAIN)] == ["main.jpg"]
    assert form.uploads.by_category(ImageCategory.BLUEPRINT)[0].file.content_type == "image/png"


def test_load_studio_form_missing_image(tmp_path):
    form_path = tmp_path / "studio.json"
    form_path.write_text("{}", encoding="utf-8")
    args = _build_parser().parse_args(
        ["studios", "new", str(form_path), "--main", str(tmp_path / "missing.jpg")]
    )
    with pytest.raises(CLIError, match="does not exist"):
        _load_studio_form(args)


def test_run_cli_without_base_url(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MUROOM_API_BASE_URL", raising=False)
    assert run_cli(["options"]) == 1
    assert "MUROOM_API_BASE_URL" in capsys.readouterr().err


def test_run_cli_renders_validation_problems(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MUROOM_API_BASE_URL", "http://api.test")
    form_path = tmp_path / "studio.json"
    form_path.write_text(json.dumps({"rooms": []}), encoding="utf-8")

    rendered = []
    monkeypatch.setattr(cli, "render_problems", lambda title, problems: rendered.extend(problems))

    assert run_cli(["studios", "new", str(form_path), "--yes"]) == 1
    assert "rooms: at least one room is required" in rendered
    assert any(p.startswith("mainImageKeys") for p in rendered)


class FakeAdmin:
    def __init__(self):
        self.generate_nickname = AsyncMock(return_value="quiet-bass-17")
        self.register_owner = AsyncMock(return_value=None)
        self.create_terms = AsyncMock(return_value=None)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return None


@pytest.fixture
def fake_admin(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MUROOM_API_BASE_URL", "http://api.test")
    admin = FakeAdmin()
    monkeypatch.setattr(cli, "AdminClient", lambda config: admin)
    return admin


def test_owner_new_generates_nickname(fake_admin):
    assert run_cli(["owners", "new", "--phone", "010-1234-5678"]) == 0
    fake_admin.generate_nickname.assert_awaited_once()
    fake_admin.register_owner.assert_awaited_once_with("quiet-bass-17", "010-1234-5678")


def test_owner_new_with_nickname(fake_admin):
    assert run_cli(["owners", "new", "--phone", "01012345678", "--nickname", "loud-drum"]) == 0
    fake_admin.generate_nickname.assert_not_awaited()
    fake_admin.register_owner.assert_awaited_once_with("loud-drum", "01012345678")


def test_terms_new(fake_admin, tmp_path):
    content = tmp_path / "terms.html"
    content.write_text("<p>약관</p>", encoding="utf-8")

    code = run_cli(
        [
            "terms", "new",
            "--code", "PRIVACY_COLLECTION",
            "--role", "MUSICIAN",
            "--title", "개인정보 수집",
            "--date", "2026-12-01",
            "--content-file", str(content),
            "--optional",
            "--yes",
        ]
    )

    assert code == 0
    draft = fake_admin.create_terms.await_args.args[0]
    assert draft.is_mandatory is False
    assert draft.effective_time == "00:00"
    assert draft.content == "<p>약관</p>"


def test_terms_new_invalid_date(fake_admin, tmp_path):
    content = tmp_path / "terms.html"
    content.write_text("<p>약관</p>", encoding="utf-8")
    code = run_cli(
        [
            "terms", "new",
            "--code", "TERMS_OF_USE",
            "--role", "OWNER",
            "--title", "t",
            "--date", "tomorrow",
            "--content-file", str(content),
            "--yes",
        ]
    )
    assert code == 1
    fake_admin.create_terms.assert_not_awaited()


STUDIO_DOCUMENT = {
    "studioName": "Groove",
    "ownerPhoneNumber": "01012345678",
    "addressInfo": {"roadAddress": "서울 마포구 와우산로 1"},
    "buildingInfo": {"floorType": "GROUND", "restroomType": "INDOOR"},
    "rooms": [{"roomName": "A"}],
}


def _studio_args(tmp_path, document=None):
    form_path = tmp_path / "studio.json"
    form_path.write_text(json.dumps(document or STUDIO_DOCUMENT), encoding="utf-8")
    main = tmp_path / "m1.jpg"
    main.write_bytes(b"jpeg")
    plan = tmp_path / "plan.png"
    plan.write_bytes(b"png")
    return ["studios", "new", str(form_path), "--main", str(main), "--blueprint", str(plan)]


@pytest.mark.parametrize(
    "document, problem",
    [
        (dict(STUDIO_DOCUMENT, studioMinPrice="12,000"), "studioMinPrice must be a whole number, got '12,000'"),
        (dict(STUDIO_DOCUMENT, studioName=None), "studioName is required"),
        (dict(STUDIO_DOCUMENT, nearbyStations=[{"sequence": "1"}]), "nearbyStations[0].subwayStationId is required"),
    ],
)
def test_studio_new_reports_bad_documents(monkeypatch, tmp_path, document, problem):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MUROOM_API_BASE_URL", "http://api.test")
    rendered = []
    monkeypatch.setattr(cli, "render_problems", lambda title, problems: rendered.extend(problems))

    assert run_cli(_studio_args(tmp_path, document) + ["--yes"]) == 1
    assert problem in rendered


class FakeStudioAdmin:
    """Real flow and coordinator over mocked URL issuer, storage and create endpoint."""

    def __init__(self):
        self.events = EventEmitter()
        self.gateway = Mock()
        self.gateway.request_upload_url = AsyncMock(
            side_effect=lambda name, category, content_type: SimpleNamespace(
                write_url=f"https://bucket.test/{name}", object_key=f"{category.value}/{name}"
            )
        )
        self.gateway.create_studio = AsyncMock(return_value={"studioId": 9})
        self.storage = Mock()
        self.storage.put = AsyncMock(return_value=None)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return None

    def studio_flow(self, builder=None):
        coordinator = UploadCoordinator(self.gateway, self.storage, events=self.events)
        return StudioCreationFlow(self.gateway, coordinator, builder)

    def uploaded_names(self):
        return [c.args[0] for c in self.gateway.request_upload_url.await_args_list]


@pytest.fixture
def studio_admin(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MUROOM_API_BASE_URL", "http://api.test")
    admin = FakeStudioAdmin()
    monkeypatch.setattr(cli, "AdminClient", lambda config: admin)
    return admin


def _fail_blueprint_once(admin):
    failures = {"plan.png": 1}

    async def put(write_url, data, content_type, file_name=""):
        if failures.get(file_name):
            failures[file_name] -= 1
            raise StorageWriteError(file_name, "storage answered 500", status_code=500)

    admin.storage.put.side_effect = put


def test_studio_new_creates_studio(studio_admin, tmp_path):
    assert run_cli(_studio_args(tmp_path) + ["--yes"]) == 0
    studio_admin.gateway.create_studio.assert_awaited_once()
    payload = studio_admin.gateway.create_studio.await_args.args[0]
    assert payload["imageKeys"]["mainImageKeys"] == ["MAIN/m1.jpg"]
    assert payload["imageKeys"]["blueprintImageKey"] == "BLUEPRINT/plan.png"


def test_studio_new_upload_failure_with_yes_stops(studio_admin, tmp_path):
    _fail_blueprint_once(studio_admin)

    assert run_cli(_studio_args(tmp_path) + ["--yes"]) == 1

    studio_admin.gateway.create_studio.assert_not_awaited()
    assert sorted(studio_admin.uploaded_names()) == ["m1.jpg", "plan.png"]


def test_studio_new_rejected_submission_with_yes_is_not_resent(studio_admin, tmp_path):
    studio_admin.gateway.create_studio.side_effect = SubmissionError("/api/admin/studios", "duplicate", 409)

    assert run_cli(_studio_args(tmp_path) + ["--yes"]) == 1

    studio_admin.gateway.create_studio.assert_awaited_once()


def test_studio_new_confirmed_retry_uploads_only_failed_item(studio_admin, tmp_path, monkeypatch):
    _fail_blueprint_once(studio_admin)
    answers = []
    monkeypatch.setattr(cli, "_confirm", lambda question, assume_yes: answers.append(question) or True)

    assert run_cli(_studio_args(tmp_path)) == 0

    assert answers[0].startswith("Create studio")
    assert answers[1] == "Retry the failed uploads?"
    assert sorted(studio_admin.uploaded_names()) == ["m1.jpg", "plan.png", "plan.png"]
    assert studio_admin.storage.put.await_count == 3
    studio_admin.gateway.create_studio.assert_awaited_once()


def test_studio_new_declined_confirmation(studio_admin, tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "_confirm", lambda question, assume_yes: False)

    assert run_cli(_studio_args(tmp_path)) == 1

    studio_admin.gateway.request_upload_url.assert_not_awaited()
