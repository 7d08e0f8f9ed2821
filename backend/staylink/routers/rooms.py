"""Rooms router — hotel room inventory, CSV import/export and seeding."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from staylink.config import settings
from staylink.dependencies import RequestContext, require_hotel_context
from staylink.schemas.room import (
    CreateRoomRequest,
    ImportRoomsRequest,
    ImportRoomsResponse,
    RoomListResponse,
    RoomResponse,
)
from staylink.services.postgrest_client import PostgrestError
from staylink.services.room_csv import export_filename, parse_rooms_csv, rooms_to_csv
from staylink.services.room_service import InvalidRoomError, describe_store_error, room_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _store_error_response(err: PostgrestError) -> JSONResponse:
    payload = describe_store_error(err, has_service_key=bool(settings.supabase_service_role_key))
    return JSONResponse(status_code=500, content=payload)


@router.get("", response_model=RoomListResponse)
async def list_rooms(ctx: RequestContext = Depends(require_hotel_context)):
    """List the organization's rooms, newest first."""
    try:
        rooms = await room_service.list_rooms()
    except PostgrestError as e:
        logger.error(f"Error fetching rooms: {e.code} {e.message}")
        raise HTTPException(status_code=500, detail="Failed to fetch rooms")
    return RoomListResponse(rooms=rooms)


@router.post("", status_code=201, response_model=RoomResponse)
async def create_room(
    req: CreateRoomRequest,
    ctx: RequestContext = Depends(require_hotel_context),
):
    try:
        room = await room_service.create_room(req)
    except InvalidRoomError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PostgrestError as e:
        return _store_error_response(e)
    return RoomResponse(room=room)


@router.post("/import", response_model=ImportRoomsResponse)
async def import_rooms(
    req: ImportRoomsRequest,
    ctx: RequestContext = Depends(require_hotel_context),
):
    """Bulk-create rooms from already parsed records."""
    try:
        rooms = await room_service.import_rooms(req.rooms)
    except InvalidRoomError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PostgrestError as e:
        logger.error(f"Error importing rooms: {e.code} {e.message}")
        return _store_error_response(e)
    return ImportRoomsResponse(
        rooms=rooms,
        message=f"Successfully imported {len(rooms)} room(s)",
    )


@router.post("/import/csv", response_model=ImportRoomsResponse)
async def import_rooms_csv(
    file: UploadFile = File(...),
    ctx: RequestContext = Depends(require_hotel_context),
):
    """Parse an uploaded CSV file and bulk-create its rooms."""
    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")

    parsed = parse_rooms_csv(text)
    if not parsed:
        raise HTTPException(status_code=400, detail="No valid room data found in CSV file")

    logger.info(f"CSV upload {file.filename!r}: {len(parsed)} room(s) parsed")
    try:
        rooms = await room_service.import_rooms(parsed)
    except InvalidRoomError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PostgrestError as e:
        logger.error(f"Error importing CSV rooms: {e.code} {e.message}")
        return _store_error_response(e)
    return ImportRoomsResponse(
        rooms=rooms,
        message=f"Successfully imported {len(rooms)} room(s)",
    )


@router.get("/export")
async def export_rooms_csv(ctx: RequestContext = Depends(require_hotel_context)):
    """Download all rooms as CSV."""
    try:
        rooms = await room_service.list_rooms()
    except PostgrestError as e:
        logger.error(f"Error fetching rooms for export: {e.code} {e.message}")
        raise HTTPException(status_code=500, detail="Failed to fetch rooms")

    return Response(
        content=rooms_to_csv(rooms),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
    )


@router.post("/seed", status_code=201)
async def seed_rooms(ctx: RequestContext = Depends(require_hotel_context)):
    """Insert the sample inventory."""
    try:
        rooms = await room_service.seed_rooms()
    except PostgrestError as e:
        logger.error(f"Error seeding rooms: {e.code} {e.message}")
        return _store_error_response(e)
    return {
        "message": f"Successfully seeded {len(rooms)} rooms",
        "rooms": [room.model_dump(by_alias=True) for room in rooms],
    }
