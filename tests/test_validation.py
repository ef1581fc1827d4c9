import pytest

from app.domain.common.errors import Forbidden, ValidationFailed
from app.domain.common.validation import (
    MAX_NAME_LENGTH,
    is_host,
    is_member,
    require_display_name,
    require_host,
    require_member,
    require_room_code,
    require_session_id,
    sanitize_password,
)
from app.store.models import PlayerStore, RoomSnapshot


def _room():
    return RoomSnapshot(
        code="ABCDE",
        game_id="fact-or-fake",
        host_pid="p1",
        created_at=0,
        updated_at=0,
        players={
            "p1": PlayerStore(pid="p1", name="A", joined_at=0),
            "p2": PlayerStore(pid="p2", name="B", joined_at=1),
        },
    )


def test_is_host_and_member():
    room = _room()
    assert is_host(room.players["p1"], room) is True
    assert is_host(room.players["p2"], room) is False
    assert is_host(None, room) is False
    assert is_member(room, "p2") is True
    assert is_member(room, "p3") is False


def test_require_member_and_host():
    room = _room()
    assert require_member(room, "p2").name == "B"
    with pytest.raises(Forbidden):
        require_member(room, "p3")
    require_host(room, "p1")
    with pytest.raises(Forbidden):
        require_host(room, "p2")


def test_input_guards():
    assert require_session_id("  s1 ") == "s1"
    assert require_room_code(" abcde ") == "ABCDE"
    assert require_display_name("  " + "x" * 40) == "x" * MAX_NAME_LENGTH

    for guard, code in [
        (require_session_id, "NO_PID"),
        (require_room_code, "NO_ROOM_CODE"),
        (require_display_name, "NO_NAME"),
    ]:
        with pytest.raises(ValidationFailed) as exc:
            guard("   ")
        assert exc.value.code == code
        assert exc.value.status == 400


def test_sanitize_password():
    assert sanitize_password(None) is None
    assert sanitize_password("   ") is None
    assert sanitize_password(" pw ") == "pw"
