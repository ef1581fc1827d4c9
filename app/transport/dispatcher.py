# app/transport/dispatcher.py
from __future__ import annotations

from typing import Callable, Dict

from app.domain.common.context import ActionContext
from app.domain.common.errors import ValidationFailed
from app.domain.common.validation import require_member
from app.domain.lifecycle.handlers import handle_leave
from app.domain.lobby.handlers import (
    handle_back_to_lobby,
    handle_play_again,
    handle_start_round,
    handle_update_settings,
)
from app.domain.round.handlers_discussion import (
    handle_end_discussion,
    handle_extend_discussion,
    handle_swap_card,
)
from app.domain.round.handlers_vote import (
    handle_answer_true_false,
    handle_cast_vote,
    handle_reveal_results,
)
from app.store.models import RoomSnapshot
from app.transport.protocols import (
    InAnswerTrueFalse,
    InBackToLobby,
    InCastVote,
    InEndDiscussion,
    InExtendDiscussion,
    InLeaveRoom,
    InPlayAgain,
    InRevealResults,
    InStartRound,
    InSwapCard,
    InUpdateSettings,
    RoomAction,
)

Handler = Callable[..., None]

# Closed mapping: every action variant routes to exactly one handler
_ACTION_HANDLERS: Dict[type, Handler] = {
    InUpdateSettings: handle_update_settings,
    InStartRound: handle_start_round,
    InPlayAgain: handle_play_again,
    InBackToLobby: handle_back_to_lobby,
    InEndDiscussion: handle_end_discussion,
    InExtendDiscussion: handle_extend_discussion,
    InSwapCard: handle_swap_card,
    InCastVote: handle_cast_vote,
    InAnswerTrueFalse: handle_answer_true_false,
    InRevealResults: handle_reveal_results,
    InLeaveRoom: handle_leave,
}


def handler_for(action: RoomAction) -> Handler:
    handler = _ACTION_HANDLERS.get(type(action))
    if handler is None:
        raise ValidationFailed("BAD_MESSAGE", f"Handler not implemented for type={action.type}")
    return handler


def dispatch_action(*, room: RoomSnapshot, pid: str, action: RoomAction, ctx: ActionContext) -> None:
    """
    Route one validated action to its domain handler.
    Every action except leave_room requires the caller to be a current member.

    NOTE: This file contains NO store access and NO game rules.
    """
    handler = handler_for(action)
    if not isinstance(action, InLeaveRoom):
        require_member(room, pid)
    handler(room=room, pid=pid, msg=action, ctx=ctx)
