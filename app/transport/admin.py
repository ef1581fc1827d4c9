from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from app.domain.common.errors import NotFound

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/rooms")
async def list_rooms(request: Request):
    """
    List all active rooms (debug/admin).
    """
    engine = request.app.state.engine
    return {"rooms": await engine.list_rooms()}


@router.post("/rooms/{room_code}/close")
async def close_room(room_code: str, request: Request):
    """
    Force close a room (debug/admin). Deletes the snapshot and wakes long-pollers.
    """
    engine = request.app.state.engine
    try:
        await engine.close_room(room_code)
    except NotFound:
        raise HTTPException(status_code=404, detail="Room not found")

    return {"ok": True, "room_code": room_code.strip().upper()}
