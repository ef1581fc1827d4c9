from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.catalog.registry import GameSummary, get_game
from app.domain.common.auto import apply_automatic_transitions
from app.domain.common.context import ActionContext, FactSource
from app.domain.common.errors import CapacityError, NotFound, RoomError
from app.domain.common.locks import RoomLocks
from app.domain.common.notifier import RoomNotifier
from app.domain.common.validation import (
    require_display_name,
    require_room_code,
    require_session_id,
    sanitize_password,
)
from app.domain.helpers.room_code import MAX_ROOM_CODE_ATTEMPTS, gen_room_code
from app.domain.lifecycle.handlers import build_new_room, handle_join
from app.domain.view import build_closed_room_view, build_room_view
from app.store.models import RoomSnapshot
from app.transport.dispatcher import dispatch_action
from app.transport.protocols import InAction, InCreateRoom, InJoinRoom, OutRoomView
from app.util.timeutil import now_ms

logger = logging.getLogger(__name__)

Mutation = Callable[[RoomSnapshot, ActionContext], None]


class RoomEngine:
    """
    Facade over the room store.
    Each call runs under the room's lock: load -> settle -> mutate -> settle -> commit.
    A commit is one store write with exactly one version bump, followed by a notify.
    """

    def __init__(
        self,
        repo,
        catalog: FactSource,
        *,
        locks: Optional[RoomLocks] = None,
        notifier: Optional[RoomNotifier] = None,
        clock: Callable[[], int] = now_ms,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repo
        self.catalog = catalog
        self.locks = locks or RoomLocks()
        self.notifier = notifier or RoomNotifier()
        self.clock = clock
        self.rng = rng or random.Random()

    # ---------- helpers ----------

    def _game_for(self, room: RoomSnapshot) -> GameSummary:
        game = get_game(room.game_id)
        if game is None:
            raise NotFound("GAME_NOT_FOUND", "Game not found.")
        return game

    def _context(self, game: GameSummary) -> ActionContext:
        return ActionContext(game=game, catalog=self.catalog, ts=self.clock(), rng=self.rng)

    async def _load(self, room_code: str) -> RoomSnapshot:
        room = await self.repo.get(room_code)
        if room is None:
            raise NotFound("ROOM_NOT_FOUND", "Room not found.")
        return room

    async def _commit(self, room: RoomSnapshot, before: Dict[str, Any], ts: int) -> bool:
        if room.model_dump() == before:
            return False
        room.version = before["version"] + 1
        room.updated_at = ts
        await self.repo.put(room)
        await self.notifier.notify(room.code)
        return True

    async def _delete(self, room_code: str, reason: str) -> None:
        await self.repo.delete(room_code)
        await self.notifier.discard(room_code)
        logger.info("room %s deleted (%s)", room_code, reason)

    async def _apply(self, room_code: str, pid: str, mutate: Mutation) -> OutRoomView:
        async with self.locks.hold(room_code):
            room = await self._load(room_code)
            game = self._game_for(room)
            ctx = self._context(game)
            before = room.model_dump()

            apply_automatic_transitions(room, game, ctx.ts)
            settled = room.model_copy(deep=True)
            try:
                mutate(room, ctx)
            except RoomError as e:
                logger.debug("room %s rejected action from %s: %s", room_code, pid, e.code)
                # Keep whatever the clock advanced, drop the failed mutation
                await self._commit(settled, before, ctx.ts)
                raise

            if not room.players:
                await self._delete(room_code, reason="empty")
                return build_closed_room_view(room_code, room.game_id)

            apply_automatic_transitions(room, game, ctx.ts)
            await self._commit(room, before, ctx.ts)
            return build_room_view(room, pid, game)

    # ---------- operations ----------

    async def create_room(self, msg: InCreateRoom) -> OutRoomView:
        pid = require_session_id(msg.session_id)
        name = require_display_name(msg.display_name)
        game = get_game(msg.game_id)
        if game is None:
            raise NotFound("GAME_NOT_FOUND", "Game not found.")

        for _ in range(MAX_ROOM_CODE_ATTEMPTS):
            code = gen_room_code(self.rng)
            async with self.locks.hold(code):
                if await self.repo.get(code) is not None:
                    continue
                room = build_new_room(
                    code=code,
                    game=game,
                    pid=pid,
                    name=name,
                    password=sanitize_password(msg.password),
                    language=msg.language,
                    ts=self.clock(),
                )
                await self.repo.put(room)
                logger.info("room %s created (game=%s)", code, game.id)
                return build_room_view(room, pid, game)

        raise CapacityError("NO_ROOM_CODE", "Unable to allocate a room code. Try again.")

    async def join_room(self, msg: InJoinRoom) -> OutRoomView:
        pid = require_session_id(msg.session_id)
        code = require_room_code(msg.room_code)
        name = require_display_name(msg.display_name)
        password = sanitize_password(msg.password)

        def mutate(room: RoomSnapshot, ctx: ActionContext) -> None:
            handle_join(room=room, pid=pid, name=name, password=password, ctx=ctx)

        return await self._apply(code, pid, mutate)

    async def perform_action(self, room_code: str, msg: InAction) -> OutRoomView:
        pid = require_session_id(msg.session_id)
        code = require_room_code(room_code)

        def mutate(room: RoomSnapshot, ctx: ActionContext) -> None:
            dispatch_action(room=room, pid=pid, action=msg.action, ctx=ctx)

        return await self._apply(code, pid, mutate)

    async def settle(self, room_code: str, session_id: str) -> Tuple[OutRoomView, bool]:
        """Apply due automatic transitions and render the view. Returns (view, transitioned)."""
        code = require_room_code(room_code)
        pid = require_session_id(session_id)
        async with self.locks.hold(code):
            room = await self._load(code)
            game = self._game_for(room)
            ts = self.clock()
            before = room.model_dump()
            apply_automatic_transitions(room, game, ts)
            changed = await self._commit(room, before, ts)
            return build_room_view(room, pid, game), changed

    async def close_room(self, room_code: str) -> None:
        code = require_room_code(room_code)
        async with self.locks.hold(code):
            await self._load(code)
            await self._delete(code, reason="closed by admin")

    async def list_rooms(self) -> List[Dict[str, Any]]:
        rooms: List[Dict[str, Any]] = []
        for code in await self.repo.list_codes():
            room = await self.repo.get(code)
            if room is None:
                continue
            rooms.append(
                {
                    "room_code": room.code,
                    "game_id": room.game_id,
                    "phase": room.phase,
                    "players": len(room.players),
                    "version": room.version,
                    "round_no": room.round.round_no if room.round else 0,
                    "updated_at": room.updated_at,
                    "created_at": room.created_at,
                }
            )
        return rooms
