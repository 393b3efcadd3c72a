"""
Studio form state.

The form is an explicit container handed to the builder and the flow;
it owns the field values, nearby stations, rooms and the selected files.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import ValidationError
from .models import DEFAULT_STUDIO_RULES, CategoryRule, ImageCategory, UploadSet
from .schemas import StationInfo

MAX_NEARBY_STATIONS = 3


class _DocumentReader:
    """Reads loosely typed JSON values, recording a problem per bad field."""

    def __init__(self):
        self.problems: List[str] = []

    def section(self, data: Dict[str, Any], key: str, path: str = "") -> Dict[str, Any]:
        value = data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            self.problems.append(f"{path}{key} must be an object")
            return {}
        return value

    def items(self, data: Dict[str, Any], key: str) -> List[Any]:
        value = data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            self.problems.append(f"{key} must be a list")
            return []
        return value

    def text(self, data: Dict[str, Any], key: str, path: str = "") -> str:
        value = data.get(key)
        if value is None:
            return ""
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            self.problems.append(f"{path}{key} must be text")
            return ""
        return str(value)

    def number(self, data: Dict[str, Any], key: str, path: str = "") -> Optional[int]:
        value = data.get(key)
        if value is None or value == "":
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value.strip())
        self.problems.append(f"{path}{key} must be a whole number, got {value!r}")
        return None

    def flag(self, data: Dict[str, Any], key: str, default: bool, path: str = "") -> bool:
        value = data.get(key)
        if value is None:
            return default
        if not isinstance(value, bool):
            self.problems.append(f"{path}{key} must be true or false")
            return default
        return value

    def codes(self, data: Dict[str, Any], key: str) -> List[str]:
        return [str(code) for code in self.items(data, key)]


@dataclass
class AddressInfo:
    zip_code: str = ""
    road_address: str = ""
    jibun_address: str = ""
    detailed_address: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "zipCode": self.zip_code,
            "roadAddress": self.road_address,
            "jibunAddress": self.jibun_address,
            "detailedAddress": self.detailed_address,
        }

    @property
    def search_address(self) -> str:
        return self.road_address or self.jibun_address


@dataclass
class BuildingInfo:
    floor_type: str = ""
    floor_number: Optional[int] = None
    restroom_type: str = ""
    is_parking_available: bool = False
    is_lodging_available: bool = False
    has_fire_insurance: bool = False
    parking_fee_type: str = ""
    parking_fee_info: str = ""
    parking_spots: Optional[int] = None
    parking_location_name: str = ""
    parking_location_address: str = ""

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "floorType": self.floor_type,
            "floorNumber": self.floor_number,
            "restroomType": self.restroom_type,
            "isParkingAvailable": self.is_parking_available,
            "isLodgingAvailable": self.is_lodging_available,
            "hasFireInsurance": self.has_fire_insurance,
            "parkingFeeType": None,
            "parkingFeeInfo": None,
            "parkingSpots": None,
            "parkingLocationName": None,
            "parkingLocationAddress": None,
        }
        # Parking details only exist when parking is offered.
        if self.is_parking_available:
            payload.update(
                parkingFeeType=self.parking_fee_type or None,
                parkingFeeInfo=self.parking_fee_info or None,
                parkingSpots=self.parking_spots,
                parkingLocationName=self.parking_location_name or None,
                parkingLocationAddress=self.parking_location_address or None,
            )
        return payload


@dataclass
class NearbyStation:
    subway_station_id: str
    sequence: str
    station_name: Optional[str] = None
    distance_meters: Optional[float] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"subwayStationId": self.subway_station_id, "sequence": self.sequence}


@dataclass
class RoomInfo:
    room_name: str = ""
    is_available: bool = True
    available_at: str = ""
    width_mm: Optional[int] = None
    height_mm: Optional[int] = None
    room_base_price: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "roomName": self.room_name,
            "isAvailable": self.is_available,
            "availableAt": self.available_at or None,
            "widthMm": self.width_mm,
            "heightMm": self.height_mm,
            "roomBasePrice": self.room_base_price,
        }


@dataclass
class StudioForm:
    """Values of the studio creation form plus its selected images."""
    studio_name: str = ""
    studio_min_price: Optional[int] = None
    studio_max_price: Optional[int] = None
    deposit_amount: Optional[int] = None
    introduction: str = ""
    owner_phone_number: str = ""
    address: AddressInfo = field(default_factory=AddressInfo)
    building: BuildingInfo = field(default_factory=BuildingInfo)
    stations: List[NearbyStation] = field(default_factory=list)
    rooms: List[RoomInfo] = field(default_factory=lambda: [RoomInfo()])
    option_codes: List[str] = field(default_factory=list)
    forbidden_instrument_codes: List[str] = field(default_factory=list)
    uploads: UploadSet = field(default_factory=UploadSet)

    # --- stations ------------------------------------------------------

    def toggle_station(self, info: StationInfo) -> bool:
        """
        Select or deselect a nearby station candidate.

        Returns True when the station is now selected. Deselecting
        re-numbers the remaining stations so sequences stay 1..n.
        """
        station_id = str(info.station_id)
        if any(s.subway_station_id == station_id for s in self.stations):
            self.stations = [s for s in self.stations if s.subway_station_id != station_id]
            for index, station in enumerate(self.stations, 1):
                station.sequence = str(index)
            return False

        if len(self.stations) >= MAX_NEARBY_STATIONS:
            raise ValidationError([f"at most {MAX_NEARBY_STATIONS} nearby stations can be selected"])

        self.stations.append(
            NearbyStation(
                subway_station_id=station_id,
                sequence=str(len(self.stations) + 1),
                station_name=info.station_name,
                distance_meters=info.distance_meters,
            )
        )
        return True

    def clear_stations(self) -> None:
        self.stations = []

    # --- rooms ---------------------------------------------------------

    def add_room(self, room: Optional[RoomInfo] = None) -> RoomInfo:
        room = room or RoomInfo()
        self.rooms.append(room)
        return room

    def remove_room(self, index: int) -> None:
        del self.rooms[index]

    # --- validation and payload ---------------------------------------

    def missing_fields(self) -> List[str]:
        problems = []
        if not (self.studio_name or "").strip():
            problems.append("studioName is required")
        if not (self.owner_phone_number or "").strip():
            problems.append("ownerPhoneNumber is required")
        if not self.address.search_address:
            problems.append("addressInfo.roadAddress or addressInfo.jibunAddress is required")
        if not self.building.floor_type:
            problems.append("buildingInfo.floorType is required")
        if not self.building.restroom_type:
            problems.append("buildingInfo.restroomType is required")
        if self.building.is_parking_available and not self.building.parking_fee_type:
            problems.append("buildingInfo.parkingFeeType is required when parking is available")
        if (
            self.studio_min_price is not None
            and self.studio_max_price is not None
            and self.studio_min_price > self.studio_max_price
        ):
            problems.append("studioMinPrice must not exceed studioMaxPrice")
        if not self.rooms:
            problems.append("rooms: at least one room is required")
        for index, room in enumerate(self.rooms):
            if not (room.room_name or "").strip():
                problems.append(f"rooms[{index}].roomName is required")
        return problems

    def to_payload(self) -> Dict[str, Any]:
        """Form fields in wire format, without image keys."""
        return {
            "studioName": self.studio_name,
            "studioMinPrice": self.studio_min_price,
            "studioMaxPrice": self.studio_max_price,
            "depositAmount": self.deposit_amount,
            "introduction": self.introduction,
            "ownerPhoneNumber": self.owner_phone_number,
            "addressInfo": self.address.to_payload(),
            "buildingInfo": self.building.to_payload(),
            "nearbyStations": [s.to_payload() for s in self.stations],
            "optionCodes": list(self.option_codes),
            "forbiddenInstrumentCodes": list(self.forbidden_instrument_codes),
            "rooms": [r.to_payload() for r in self.rooms],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        rules: Optional[Dict[ImageCategory, CategoryRule]] = None,
    ) -> "StudioForm":
        """
        Build a form from a camelCase document (same keys as the payload).

        Raises:
            ValidationError: listing every field with the wrong type or shape
        """
        read = _DocumentReader()
        address = read.section(data, "addressInfo")
        building = read.section(data, "buildingInfo")

        stations = []
        raw_stations = read.items(data, "nearbyStations")
        if len(raw_stations) > MAX_NEARBY_STATIONS:
            read.problems.append(
                f"nearbyStations: at most {MAX_NEARBY_STATIONS} stations can be selected, got {len(raw_stations)}"
            )
        for index, entry in enumerate(raw_stations, 1):
            path = f"nearbyStations[{index - 1}]."
            if not isinstance(entry, dict):
                read.problems.append(f"nearbyStations[{index - 1}] must be an object")
                continue
            station_id = read.text(entry, "subwayStationId", path)
            if not station_id:
                read.problems.append(f"{path}subwayStationId is required")
                continue
            stations.append(NearbyStation(subway_station_id=station_id, sequence=str(len(stations) + 1)))

        rooms = []
        for index, entry in enumerate(read.items(data, "rooms")):
            path = f"rooms[{index}]."
            if not isinstance(entry, dict):
                read.problems.append(f"rooms[{index}] must be an object")
                continue
            rooms.append(
                RoomInfo(
                    room_name=read.text(entry, "roomName", path),
                    is_available=read.flag(entry, "isAvailable", True, path),
                    available_at=read.text(entry, "availableAt", path),
                    width_mm=read.number(entry, "widthMm", path),
                    height_mm=read.number(entry, "heightMm", path),
                    room_base_price=read.number(entry, "roomBasePrice", path),
                )
            )

        form = cls(
            studio_name=read.text(data, "studioName"),
            studio_min_price=read.number(data, "studioMinPrice"),
            studio_max_price=read.number(data, "studioMaxPrice"),
            deposit_amount=read.number(data, "depositAmount"),
            introduction=read.text(data, "introduction"),
            owner_phone_number=read.text(data, "ownerPhoneNumber"),
            address=AddressInfo(
                zip_code=read.text(address, "zipCode", "addressInfo."),
                road_address=read.text(address, "roadAddress", "addressInfo."),
                jibun_address=read.text(address, "jibunAddress", "addressInfo."),
                detailed_address=read.text(address, "detailedAddress", "addressInfo."),
            ),
            building=BuildingInfo(
                floor_type=read.text(building, "floorType", "buildingInfo."),
                floor_number=read.number(building, "floorNumber", "buildingInfo."),
                restroom_type=read.text(building, "restroomType", "buildingInfo."),
                is_parking_available=read.flag(building, "isParkingAvailable", False, "buildingInfo."),
                is_lodging_available=read.flag(building, "isLodgingAvailable", False, "buildingInfo."),
                has_fire_insurance=read.flag(building, "hasFireInsurance", False, "buildingInfo."),
                parking_fee_type=read.text(building, "parkingFeeType", "buildingInfo."),
                parking_fee_info=read.text(building, "parkingFeeInfo", "buildingInfo."),
                parking_spots=read.number(building, "parkingSpots", "buildingInfo."),
                parking_location_name=read.text(building, "parkingLocationName", "buildingInfo."),
                parking_location_address=read.text(building, "parkingLocationAddress", "buildingInfo."),
            ),
            stations=stations,
            rooms=rooms,
            option_codes=read.codes(data, "optionCodes"),
            forbidden_instrument_codes=read.codes(data, "forbiddenInstrumentCodes"),
            uploads=UploadSet(rules or DEFAULT_STUDIO_RULES),
        )
        if read.problems:
            raise ValidationError(read.problems)
        return form
