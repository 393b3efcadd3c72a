"""Tests for console rendering helpers."""
import pytest

from conftest import make_file

from muroom_admin import cli_progress
from muroom_admin.cli_progress import UploadProgressDisplay, _human_size, format_price, render_upload_report
from muroom_admin.models import ImageCategory, UploadSet
from muroom_admin.utils.events import ITEM_COMPLETE, ITEM_FAIL, ITEM_START, EventEmitter


def test_format_price():
    assert format_price(12000) == "12,000원"
    assert format_price(0) == "0원"
    assert format_price(None) == "-"


def test_human_size():
    assert _human_size(512) == "512 B"
    assert _human_size(2048) == "2.00 KB"


@pytest.mark.asyncio
async def test_progress_display_counts_events(monkeypatch):
    lines = []
    monkeypatch.setattr(cli_progress, "_echo", lines.append)
    events = EventEmitter()
    display = UploadProgressDisplay()
    display.attach(events)

    uploads = UploadSet()
    ok = uploads.select(ImageCategory.MAIN, make_file("a.jpg"))
    bad = uploads.select(ImageCategory.BLUEPRINT, make_file("[plan].png"))
    bad.mark_failed("storage answered 403")

    await events.emit(ITEM_START, ok)
    await events.emit(ITEM_COMPLETE, ok)
    await events.emit(ITEM_FAIL, bad)

    assert display.stats == {"started": 1, "uploaded": 1, "failed": 1}
    assert "DONE" in lines[1]
    assert "cause=storage answered 403" in lines[2]
    assert "\\[plan].png" in lines[2]


def test_render_upload_report_lists_every_item():
    uploads = UploadSet()
    ok = uploads.select(ImageCategory.MAIN, make_file("a.jpg"))
    ok.mark_succeeded("studios/main/a.jpg")
    uploads.select(ImageCategory.ROOM, make_file("b.jpg")).mark_failed("timeout")

    with cli_progress.console.capture() as capture:
        render_upload_report(uploads)

    output = capture.get()
    assert "studios/main/a.jpg" in output
    assert "timeout" in output
    assert "failed" in output
