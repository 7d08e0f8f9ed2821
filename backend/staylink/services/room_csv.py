"""Room CSV transcoder — export rooms to CSV and parse uploaded CSV back.

The line parser handles quoted fields, embedded commas and doubled quotes,
but splits records on every newline, so quoted multi-line cells are not
supported.
"""

import csv
import io
import json
import logging
import random
import re
import string
import time
from datetime import date

from staylink.schemas.room import HotelRoom, RoomStatus, utc_timestamp

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    "Room ID",
    "Room Number",
    "Room Type",
    "Floor",
    "Capacity",
    "Facilities",
    "Status",
    "Created At",
    "Updated At",
]

FACILITY_SEPARATOR = "; "

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_ID_ALPHABET = string.digits + string.ascii_lowercase


# ---------- Export ----------

def rooms_to_csv(rooms: list[HotelRoom]) -> str:
    """Render rooms as CSV: bare header line, then every data cell quoted."""
    output = io.StringIO()
    output.write(",".join(EXPORT_HEADERS))
    if rooms:
        output.write("\n")
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerows(
            [
                room.id,
                room.room_number,
                room.room_type,
                room.floor,
                room.capacity,
                FACILITY_SEPARATOR.join(room.facilities),
                room.status,
                room.created_at,
                room.updated_at,
            ]
            for room in rooms
        )
    return output.getvalue().removesuffix("\n")


def export_filename(today: date | None = None) -> str:
    return f"hotel-rooms-{(today or date.today()).isoformat()}.csv"


# ---------- Import ----------

def split_csv_line(line: str) -> list[str]:
    """Split one CSV line into trimmed fields, honouring quotes."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current).strip())
    return fields


def _strip_outer_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def _parse_int(value: str) -> int:
    """Leading-integer parse; 0 when the value has no usable numeric prefix."""
    match = _INT_PREFIX.match(value)
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        # over the interpreter's int-conversion digit limit
        return 0


def parse_facilities_cell(value: str) -> list[str]:
    try:
        if value.startswith("[") and value.endswith("]"):
            return [str(item) for item in json.loads(value) if item is not None]
        if ";" in value:
            return [part.strip() for part in value.split(";") if part.strip()]
        return [value] if value else []
    except (ValueError, TypeError, RecursionError):
        return [part.strip() for part in value.split(",") if part.strip()]


def placeholder_room_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"RM-{int(time.time() * 1000)}-{suffix}"


def _apply_field(fields: dict, header: str, value: str) -> None:
    match header:
        case "id":
            fields["id"] = value
        case "room-number" | "room number":
            fields["room_number"] = value
        case "room-type" | "room type":
            fields["room_type"] = value
        case "floor":
            fields["floor"] = _parse_int(value)
        case "capacity":
            fields["capacity"] = _parse_int(value)
        case "amenities" | "facilities":
            fields["facilities"] = parse_facilities_cell(value)
        case "status":
            fields["status"] = value
        case "created_at" | "created at":
            fields["created_at"] = value
        case "updated_at" | "updated at":
            fields["updated_at"] = value


def parse_rooms_csv(text: str) -> list[HotelRoom]:
    """Parse CSV text into rooms.

    Rows with the wrong number of fields, or without a room number and room
    type, are dropped. Fewer than two non-blank lines yields ``[]``.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < 2:
        return []

    headers = [_strip_outer_quotes(h.strip()).lower() for h in split_csv_line(lines[0])]

    rooms: list[HotelRoom] = []
    skipped = 0
    for line in lines[1:]:
        values = split_csv_line(line)
        if len(values) != len(headers):
            skipped += 1
            continue

        fields: dict = {}
        for header, raw in zip(headers, values):
            value = _strip_outer_quotes(raw).replace('""', '"')
            _apply_field(fields, header, value)

        if not fields.get("room_number") or not fields.get("room_type"):
            skipped += 1
            continue

        rooms.append(HotelRoom(
            id=fields.get("id") or placeholder_room_id(),
            room_number=fields["room_number"],
            room_type=fields["room_type"],
            floor=fields.get("floor", 1),
            capacity=fields.get("capacity", 1),
            facilities=fields.get("facilities", []),
            status=fields.get("status") or RoomStatus.available.value,
            created_at=fields.get("created_at") or utc_timestamp(),
            updated_at=fields.get("updated_at") or utc_timestamp(),
        ))

    if skipped:
        logger.info(f"CSV import: {len(rooms)} rows parsed, {skipped} skipped")
    return rooms
