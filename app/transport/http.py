# app/transport/http.py
from __future__ import annotations

import math
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from app.catalog.registry import list_games
from app.domain.common.errors import RoomError, ValidationFailed
from app.transport.protocols import InAction, InCreateRoom, InJoinRoom, OutError, OutRoomView

router = APIRouter(prefix="/api")

NO_STORE = {"Cache-Control": "no-store"}


def _error_response(e: RoomError) -> JSONResponse:
    err = OutError(code=e.code, kind=e.kind, message=e.message)
    return JSONResponse(err.model_dump(), status_code=e.status, headers=NO_STORE)


def _bad_message(e: Exception) -> JSONResponse:
    err = OutError(code="BAD_MESSAGE", kind="validation", message=str(e))
    return JSONResponse(err.model_dump(), status_code=400, headers=NO_STORE)


def _state(view: OutRoomView) -> JSONResponse:
    return JSONResponse({"state": view.model_dump()}, headers=NO_STORE)


async def _read_body(request: Request, model: type[BaseModel]) -> Any:
    """Parse + validate a JSON body. Raises ValueError (ValidationError included) if invalid."""
    raw = await request.json()
    if not isinstance(raw, dict):
        raise ValueError("Request body must be a JSON object")
    return model.model_validate(raw)


def _parse_since(raw: str) -> int:
    try:
        since = float(raw)
    except ValueError:
        raise ValidationFailed("BAD_VERSION", "Invalid version number.")
    if not math.isfinite(since):
        raise ValidationFailed("BAD_VERSION", "Invalid version number.")
    return max(0, math.floor(since))


@router.get("/games")
async def games():
    return {"games": [g.model_dump() for g in list_games()]}


@router.post("/rooms/create")
async def create_room(request: Request):
    try:
        msg: InCreateRoom = await _read_body(request, InCreateRoom)
    except (ValidationError, ValueError) as e:
        return _bad_message(e)

    try:
        view = await request.app.state.engine.create_room(msg)
    except RoomError as e:
        return _error_response(e)
    return _state(view)


@router.post("/rooms/join")
async def join_room(request: Request):
    try:
        msg: InJoinRoom = await _read_body(request, InJoinRoom)
    except (ValidationError, ValueError) as e:
        return _bad_message(e)

    try:
        view = await request.app.state.engine.join_room(msg)
    except RoomError as e:
        return _error_response(e)
    return _state(view)


@router.post("/rooms/{room_code}/action")
async def room_action(room_code: str, request: Request):
    try:
        msg: InAction = await _read_body(request, InAction)
    except (ValidationError, ValueError) as e:
        return _bad_message(e)

    try:
        view = await request.app.state.engine.perform_action(room_code, msg)
    except RoomError as e:
        return _error_response(e)
    return _state(view)


@router.get("/rooms/{room_code}/sync")
async def room_sync(room_code: str, request: Request, session_id: str = "", since: str = "0"):
    try:
        view = await request.app.state.sync.sync(
            room_code,
            session_id,
            _parse_since(since),
            is_disconnected=request.is_disconnected,
        )
    except RoomError as e:
        return _error_response(e)
    return _state(view)

