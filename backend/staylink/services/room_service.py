"""Room service — room inventory reads and writes against the rooms table."""

import logging
from typing import Callable

from staylink.config import settings
from staylink.data.sample_rooms import SAMPLE_ROOMS
from staylink.schemas.room import (
    CreateRoomRequest,
    HotelRoom,
    ImportRoom,
    RoomStatus,
    utc_timestamp,
)
from staylink.services.amenities_codec import decode_amenities, encode_amenities
from staylink.services.postgrest_client import (
    ARRAY_PARSE_CODE,
    RLS_VIOLATION_CODE,
    SCHEMA_CACHE_CODES,
    PostgrestClient,
    PostgrestError,
    create_anon_client,
    create_server_client,
)

logger = logging.getLogger(__name__)

FALLBACK_CODES = SCHEMA_CACHE_CODES | {ARRAY_PARSE_CODE}
INSERT_ROOM_FUNCTION = "insert_room"


class InvalidRoomError(ValueError):
    """Room payload rejected before reaching the data API."""


def map_db_row_to_room(row: dict) -> HotelRoom:
    """Convert a rooms row (table or ``rooms_view`` column names) to a HotelRoom."""
    room_number = row.get("room_number") or row.get("room-number")
    created_at = row.get("created_at") or utc_timestamp()
    return HotelRoom(
        id=str(row["id"]),
        room_number=str(room_number) if room_number else "",
        room_type=row.get("room_type") or row.get("room-type") or "",
        floor=row.get("floor") or 0,
        capacity=row.get("capacity") or 0,
        price_per_night=0,
        facilities=decode_amenities(row.get("amenities")),
        status=row.get("status") or RoomStatus.available.value,
        created_at=created_at,
        updated_at=created_at,
    )


def parse_room_number(value: str | int | None) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidRoomError("Room number must be a valid number")


def build_insert_row(
    room_number: str | int | None,
    room_type: str | None,
    floor: int | None = None,
    capacity: int | None = None,
    status: str | None = None,
    facilities: list[str] | None = None,
    default_floor: int = 1,
) -> dict:
    """Row for the rooms table; the table uses hyphenated column names."""
    return {
        "room-number": parse_room_number(room_number),
        "room-type": room_type or "",
        "floor": floor or default_floor,
        "capacity": capacity or 1,
        "status": status or RoomStatus.available.value,
        "amenities": encode_amenities(facilities or []),
    }


def describe_store_error(err: PostgrestError, has_service_key: bool) -> dict:
    """User-facing error payload for a failed write."""
    payload = {"error": err.message or "Failed to write rooms", "details": err.message, "code": err.code}

    if err.code in SCHEMA_CACHE_CODES:
        payload["error"] = (
            "PostgREST cannot find columns with hyphenated names. Reload the schema cache "
            "in the Supabase dashboard, or create the insert_room function."
        )
    elif err.code == ARRAY_PARSE_CODE:
        payload["error"] = (
            "PostgreSQL array parsing error. The amenities column is text[] and expects "
            "PostgreSQL array format."
        )
    elif err.code == RLS_VIOLATION_CODE:
        if has_service_key:
            payload["error"] = (
                "Row-Level Security policy violation. Service role key is set but RLS is "
                "still blocking. Check your RLS policies or disable RLS for this table."
            )
            payload["hint"] = "You may need to disable RLS for the rooms table or update your RLS policies"
        else:
            payload["error"] = (
                "Row-Level Security policy violation. Please set SUPABASE_SERVICE_ROLE_KEY."
            )
            payload["hint"] = "Add SUPABASE_SERVICE_ROLE_KEY to the environment and restart the server"
    return payload


class RoomService:
    """Room inventory operations with a tiered insert fallback."""

    def __init__(
        self,
        server_client_factory: Callable[[], PostgrestClient] = create_server_client,
        anon_client_factory: Callable[[], PostgrestClient] = create_anon_client,
        table: str | None = None,
    ):
        self._server_client_factory = server_client_factory
        self._anon_client_factory = anon_client_factory
        self._server_client: PostgrestClient | None = None
        self._anon_client: PostgrestClient | None = None
        self.table = table or settings.rooms_table

    def _server(self) -> PostgrestClient:
        if self._server_client is None:
            self._server_client = self._server_client_factory()
        return self._server_client

    def _anon(self) -> PostgrestClient:
        if self._anon_client is None:
            self._anon_client = self._anon_client_factory()
        return self._anon_client

    async def close(self):
        for client in (self._server_client, self._anon_client):
            if client is not None:
                await client.close()

    async def list_rooms(self) -> list[HotelRoom]:
        """All rooms, newest first."""
        rows = await self._server().select(self.table, order="created_at.desc")
        return [map_db_row_to_room(row) for row in rows]

    async def create_room(self, req: CreateRoomRequest) -> HotelRoom:
        if not req.room_number or not req.room_type:
            raise InvalidRoomError("Room number and room type are required")

        row = build_insert_row(
            req.room_number,
            req.room_type,
            floor=req.floor,
            capacity=req.capacity,
            status=req.status.value if req.status else None,
            facilities=req.facilities,
        )

        try:
            rows = await self._server().insert(self.table, row)
        except PostgrestError as err:
            if err.code not in FALLBACK_CODES:
                logger.error(f"Error creating room: {err.code} {err.message}; row={row}")
                raise
            rows = await self._insert_with_fallback(row, err)

        if not rows:
            raise PostgrestError(message="Insert returned no rows")
        return map_db_row_to_room(rows[0])

    async def _insert_with_fallback(self, row: dict, original: PostgrestError) -> list[dict]:
        """Retry a single-row insert after a schema-cache or array-parse error.

        Tier 2 re-posts the row with the anon key; tier 3 calls the
        ``insert_room`` database function when the schema cache is stale.
        The original error code is kept if every tier fails.
        """
        last_error = original

        if settings.supabase_anon_key:
            try:
                rows = await self._anon().insert(self.table, row)
                logger.info("Room inserted through REST fallback")
                return rows
            except PostgrestError as rest_err:
                logger.warning(f"REST fallback insert failed: {rest_err.code} {rest_err.message}")
                last_error = PostgrestError(
                    message=f"REST API insert failed: {rest_err.message}",
                    code=original.code or "PGRST204",
                    details=rest_err.details,
                    hint=rest_err.hint,
                    status_code=rest_err.status_code,
                )

        if original.code in SCHEMA_CACHE_CODES:
            try:
                result = await self._server().rpc(INSERT_ROOM_FUNCTION, {
                    "p_room_number": row["room-number"],
                    "p_room_type": row["room-type"],
                    "p_floor": row["floor"],
                    "p_capacity": row["capacity"],
                    "p_status": row["status"],
                    "p_amenities": row["amenities"],
                })
                logger.info(f"Room inserted through {INSERT_ROOM_FUNCTION}()")
                if isinstance(result, dict):
                    return [result]
                return result or []
            except PostgrestError as rpc_err:
                logger.warning(f"{INSERT_ROOM_FUNCTION}() fallback failed: {rpc_err.message}")

        logger.error(f"Error creating room: {last_error.code} {last_error.message}; row={row}")
        raise last_error

    async def import_rooms(self, rooms: list[ImportRoom | HotelRoom]) -> list[HotelRoom]:
        """Bulk insert rooms. Append-only: every row gets a new identity."""
        if not rooms:
            raise InvalidRoomError("Invalid rooms data")

        rows = [
            build_insert_row(
                room.room_number,
                room.room_type,
                floor=room.floor,
                capacity=room.capacity,
                status=room.status,
                facilities=room.facilities,
                default_floor=0,
            )
            for room in rooms
        ]
        inserted = await self._server().insert(self.table, rows)
        logger.info(f"Imported {len(inserted)} room(s)")
        return [map_db_row_to_room(row) for row in inserted]

    async def seed_rooms(self) -> list[HotelRoom]:
        rows = [
            build_insert_row(
                room["room_number"],
                room["room_type"],
                floor=room["floor"],
                capacity=room["capacity"],
                status=room["status"],
                facilities=room["facilities"],
            )
            for room in SAMPLE_ROOMS
        ]
        inserted = await self._server().insert(self.table, rows)
        logger.info(f"Seeded {len(inserted)} room(s)")
        return [map_db_row_to_room(row) for row in inserted]


room_service = RoomService()
