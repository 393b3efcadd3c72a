"""
Response schemas for the muroom API.

Every body read from the backend is validated here before use; a shape
mismatch raises :class:`ParseError` instead of leaking ``KeyError`` or
``None`` deep into the workflow.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .errors import ParseError


class ApiModel(BaseModel):
    """Base model reading camelCase JSON into snake_case attributes."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CodeDescription(ApiModel):
    code: str
    description: str


class OptionItem(ApiModel):
    id: Optional[int] = None
    code: str
    description: str
    icon_image_url: Optional[str] = None


class FilterOptions(ApiModel):
    floor_options: List[OptionItem] = []
    restroom_options: List[OptionItem] = []
    parking_fee_options: List[OptionItem] = []
    studio_common_options: List[OptionItem] = []
    studio_individual_options: List[OptionItem] = []
    unavailable_instrument_options: List[OptionItem] = []


class PresignedUpload(ApiModel):
    """Write URL and object key issued for one file."""
    write_url: str = Field(min_length=1, validation_alias=AliasChoices("url", "writeUrl"))
    object_key: str = Field(min_length=1, validation_alias=AliasChoices("fileKey", "objectKey"))


class PresignedUrlBatch(ApiModel):
    presigned_urls: List[PresignedUpload]


class SubwayLine(ApiModel):
    line_name: str
    line_color: Optional[str] = None


class StationInfo(ApiModel):
    station_id: int
    station_name: str
    lines: List[SubwayLine] = []
    distance_meters: Optional[float] = None


class NearbyStations(ApiModel):
    stations: List[StationInfo] = []


class NearbySubwayStationInfo(ApiModel):
    station_name: str
    lines: List[SubwayLine] = []
    walking_time_minutes: Optional[int] = None


class StudioSummary(ApiModel):
    studio_id: int
    studio_name: str
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    nearby_subway_station_info: Optional[NearbySubwayStationInfo] = None
    thumbnail_image_url: Optional[str] = None
    walking_time_minutes: Optional[int] = None
    longitude: Optional[float] = None
    latitude: Optional[float] = None


class Pagination(ApiModel):
    page_number: int
    page_size: int
    total_pages: int
    total_elements: int
    is_first: bool
    is_last: bool


class StudioPage(ApiModel):
    content: List[StudioSummary] = []
    pagination: Pagination


class NearbySubwayStation(ApiModel):
    station_name: str
    lines: List[SubwayLine] = []
    walking_time_minutes: Optional[int] = None


class StudioBaseInfo(ApiModel):
    studio_id: int
    studio_name: str
    road_name_address: Optional[str] = None
    lot_number_address: Optional[str] = None
    detailed_address: Optional[str] = None
    studio_min_price: Optional[int] = None
    studio_max_price: Optional[int] = None
    deposit_amount: Optional[int] = None
    nearby_subway_stations: List[NearbySubwayStation] = []


class StudioBuildingInfo(ApiModel):
    floor_type: Optional[CodeDescription] = None
    floor_number: Optional[int] = None
    has_restroom: Optional[bool] = None
    restroom_location: Optional[CodeDescription] = None
    restroom_gender: Optional[CodeDescription] = None
    parking_fee_type: Optional[CodeDescription] = None
    parking_fee_info: Optional[str] = None
    parking_spots: Optional[int] = None
    parking_location_name: Optional[str] = None
    parking_location_address: Optional[str] = None
    is_lodging_available: Optional[bool] = None
    has_fire_insurance: Optional[bool] = None


class StudioNotice(ApiModel):
    owner_nickname: Optional[str] = None
    owner_phone_number: Optional[str] = None
    introduction: Optional[str] = None
    is_identity_verified: bool = False


class StudioForbiddenInstruments(ApiModel):
    instruments: List[str] = []


class RoomItem(ApiModel):
    room_id: int
    room_name: str
    is_available: bool
    available_at: Optional[str] = None
    width_mm: Optional[int] = None
    height_mm: Optional[int] = None
    room_base_price: Optional[int] = None


class StudioRooms(ApiModel):
    rooms: List[RoomItem] = []


class StudioOptionItem(ApiModel):
    code: str
    description: str
    icon_image_key: Optional[str] = None


class StudioOptions(ApiModel):
    common_options: List[StudioOptionItem] = []
    individual_options: List[StudioOptionItem] = []


class StudioImages(ApiModel):
    main_image_keys: List[str] = []
    building_image_keys: List[str] = []
    room_image_keys: List[str] = []
    blueprint_image_key: Optional[str] = None
    common_option_image_keys: List[str] = []
    individual_option_image_keys: List[str] = []


class StudioDetail(ApiModel):
    studio_base_info: StudioBaseInfo
    studio_building_info: StudioBuildingInfo = StudioBuildingInfo()
    studio_notice: StudioNotice = StudioNotice()
    studio_forbidden_instruments: StudioForbiddenInstruments = StudioForbiddenInstruments()
    studio_rooms: StudioRooms = StudioRooms()
    studio_options: StudioOptions = StudioOptions()
    studio_images: StudioImages = StudioImages()


class TermsCode(ApiModel):
    code: str
    description: str
    required: bool = False


class TermItem(ApiModel):
    term_id: int
    code: TermsCode
    target_role: Optional[Any] = None
    title: Optional[str] = None
    version: str
    is_mandatory: bool
    effective_at: datetime


class TermContent(ApiModel):
    term_id: int
    content: str


def parse_data(payload: Any, annotation: Any, context: str, allow_bare: bool = False) -> Any:
    """
    Validate the ``data`` member of an API envelope.

    Args:
        payload: Decoded JSON body
        annotation: Model class or typing annotation for ``data``
        context: Endpoint description used in error messages
        allow_bare: Accept a body that is not wrapped in an envelope

    Raises:
        ParseError: body is not an envelope or ``data`` has the wrong shape
    """
    if isinstance(payload, dict) and "data" in payload:
        data = payload["data"]
    elif allow_bare:
        data = payload
    else:
        raise ParseError(context, "response is missing the 'data' envelope")

    if data is None:
        raise ParseError(context, "response 'data' is empty")

    try:
        return TypeAdapter(annotation).validate_python(data)
    except PydanticValidationError as exc:
        raise ParseError(context, str(exc)) from exc
