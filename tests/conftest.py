"""Shared fixtures for muroom-admin tests."""
import pytest

from muroom_admin.forms import AddressInfo, BuildingInfo, RoomInfo, StudioForm
from muroom_admin.models import LocalFile


def make_file(name: str, content_type: str = "image/jpeg") -> LocalFile:
    return LocalFile(name=name, content_type=content_type, data=f"bytes-of-{name}".encode())


def make_form(**overrides) -> StudioForm:
    """A studio form with every required field filled in and no images."""
    values = dict(
        studio_name="Blue Note",
        studio_min_price=12000,
        studio_max_price=20000,
        owner_phone_number="01012345678",
        address=AddressInfo(zip_code="04001", road_address="서울 마포구 와우산로 1"),
        building=BuildingInfo(floor_type="GROUND", floor_number=2, restroom_type="INDOOR"),
        rooms=[RoomInfo(room_name="A", width_mm=3000, height_mm=2500, room_base_price=15000)],
    )
    values.update(overrides)
    return StudioForm(**values)


@pytest.fixture
def form():
    return make_form()
