from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RoomStatus(str, Enum):
    available = "available"
    occupied = "occupied"
    reserved = "reserved"
    maintenance = "maintenance"


class CamelModel(BaseModel):
    """Serializes with camelCase keys; accepts either casing on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HotelRoom(CamelModel):
    id: str
    room_number: str
    room_type: str
    floor: int = 0
    capacity: int = 1
    price_per_night: float = 0
    facilities: list[str] = Field(default_factory=list)
    # Not validated: CSV imports pass unknown statuses through.
    status: str = RoomStatus.available.value
    created_at: str
    updated_at: str


class CreateRoomRequest(CamelModel):
    room_number: str | int | None = None
    room_type: str | None = None
    floor: int | None = None
    capacity: int | None = None
    facilities: list[str] = Field(default_factory=list)
    status: RoomStatus | None = None


class ImportRoom(CamelModel):
    room_number: str | int | None = None
    room_type: str | None = None
    floor: int | None = None
    capacity: int | None = None
    facilities: list[str] | None = None
    status: str | None = None


class ImportRoomsRequest(BaseModel):
    rooms: list[ImportRoom]


class RoomResponse(BaseModel):
    room: HotelRoom


class RoomListResponse(BaseModel):
    rooms: list[HotelRoom]


class ImportRoomsResponse(BaseModel):
    success: bool = True
    rooms: list[HotelRoom]
    message: str


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
