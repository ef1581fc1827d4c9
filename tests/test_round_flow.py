import asyncio
import random

import pytest

from app.catalog.models import FactCard, FactDeck
from app.domain.common.errors import CapacityError, Conflict, Forbidden, NotFound
from app.domain.engine import RoomEngine
from app.store.memory_repo import MemoryRepo
from app.transport.protocols import InAction, InCreateRoom, InJoinRoom


async def _room_with(engine, clock, pids, game_id="fact-or-fake", password=None):
    view = await engine.create_room(
        InCreateRoom(session_id=pids[0], display_name=pids[0].upper(), game_id=game_id, password=password)
    )
    for pid in pids[1:]:
        clock.advance(1_000)
        view = await engine.join_room(
            InJoinRoom(session_id=pid, room_code=view.room_code, display_name=pid.upper(), password=password)
        )
    return view.room_code


async def _act(engine, code, pid, **action):
    return await engine.perform_action(code, InAction.model_validate({"session_id": pid, "action": action}))


async def _imposters(repo, code):
    room = await repo.get(code)
    return [pid for pid, a in room.round.assignments.items() if a.role == "imposter"]


@pytest.mark.asyncio
async def test_full_round_trip(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    view = await _act(engine, code, "a", type="start_round")

    assert view.phase == "discussion"
    assert view.version == 4
    assert view.round.round_no == 1
    assert view.round.my_card
    assert view.round.discussion_ends_at == clock.now + 2 * 60_000
    assert view.round.imposters is None

    view = await _act(engine, code, "a", type="end_discussion")
    assert view.phase == "voting"

    (imposter,) = await _imposters(repo, code)
    truths = [pid for pid in ("a", "b", "c") if pid != imposter]
    for pid in truths:
        await _act(engine, code, pid, type="cast_vote", target_pid=imposter)
    view = await _act(engine, code, imposter, type="cast_vote", target_pid=truths[0])

    assert view.phase == "results"
    assert view.version == 8
    assert view.round.imposters == [imposter]
    assert view.round.vote_counts[imposter] == 2
    scores = {p.pid: p.score for p in view.players}
    assert scores == {truths[0]: 1, truths[1]: 1, imposter: 0}

    view = await _act(engine, code, "a", type="back_to_lobby")
    assert view.phase == "lobby"
    assert view.round is None
    assert (await repo.get(code)).round is None


@pytest.mark.asyncio
async def test_play_again_keeps_round_numbering(engine, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "a", type="end_discussion")
    await _act(engine, code, "a", type="reveal_results")

    view = await _act(engine, code, "a", type="play_again")
    assert view.phase == "discussion"
    assert view.round.round_no == 2


@pytest.mark.asyncio
async def test_reveal_twice_is_conflict(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "a", type="end_discussion")
    await _act(engine, code, "a", type="reveal_results")
    version = (await repo.get(code)).version

    with pytest.raises(Conflict):
        await _act(engine, code, "a", type="reveal_results")
    assert (await repo.get(code)).version == version


@pytest.mark.asyncio
async def test_host_only_and_member_only_actions(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])

    with pytest.raises(Forbidden) as exc:
        await _act(engine, code, "b", type="start_round")
    assert exc.value.code == "NOT_HOST"

    with pytest.raises(Forbidden) as exc:
        await _act(engine, code, "zz", type="start_round")
    assert exc.value.code == "NOT_IN_ROOM"

    assert (await repo.get(code)).version == 3


@pytest.mark.asyncio
async def test_start_needs_min_players(engine, clock):
    code = await _room_with(engine, clock, ["a", "b"])
    with pytest.raises(Conflict) as exc:
        await _act(engine, code, "a", type="start_round")
    assert exc.value.code == "NOT_ENOUGH_PLAYERS"


@pytest.mark.asyncio
async def test_join_rules(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"], password="secret")

    with pytest.raises(Forbidden):
        await engine.join_room(InJoinRoom(session_id="d", room_code=code, display_name="D", password="nope"))

    await _act(engine, code, "a", type="start_round")
    with pytest.raises(Conflict):
        await engine.join_room(InJoinRoom(session_id="d", room_code=code.lower(), display_name="D", password="secret"))

    view = await engine.join_room(
        InJoinRoom(session_id="b", room_code=code, display_name="  Bee  ", password=" secret ")
    )
    assert view.joined is True
    assert {p.pid: p.name for p in view.players}["b"] == "Bee"
    assert view.phase == "discussion"


@pytest.mark.asyncio
async def test_settings_are_clamped(engine, clock):
    code = await _room_with(engine, clock, ["a", "b", "c", "d"])
    view = await _act(engine, code, "a", type="update_settings", discussion_minutes=99, imposters=9, language="ru")

    assert view.settings.discussion_minutes == 5
    assert view.settings.imposters == 2
    assert view.language == "ru"


@pytest.mark.asyncio
async def test_leave_completes_voting(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c", "d"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "a", type="end_discussion")
    await _act(engine, code, "a", type="cast_vote", target_pid="b")
    await _act(engine, code, "b", type="cast_vote", target_pid="c")
    await _act(engine, code, "c", type="cast_vote", target_pid="a")
    assert (await repo.get(code)).phase == "voting"

    view = await _act(engine, code, "d", type="leave_room")
    assert view.joined is False

    room = await repo.get(code)
    assert room.phase == "results"
    assert "d" not in room.players
    assert room.round.result is not None


@pytest.mark.asyncio
async def test_leave_below_min_players_returns_to_lobby(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "c", type="leave_room")

    room = await repo.get(code)
    assert room.phase == "lobby"
    assert room.round is None


@pytest.mark.asyncio
async def test_host_handover_and_room_deletion(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])

    await _act(engine, code, "a", type="leave_room")
    assert (await repo.get(code)).host_pid == "b"

    await _act(engine, code, "b", type="leave_room")
    assert (await repo.get(code)).host_pid == "c"

    view = await _act(engine, code, "c", type="leave_room")
    assert view.version == 0
    assert view.message == "This room has closed."
    assert await repo.get(code) is None

    with pytest.raises(NotFound):
        await engine.settle(code, "c")


@pytest.mark.asyncio
async def test_discussion_times_out_into_voting(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "a", type="extend_discussion", seconds=5)

    clock.advance(2 * 60_000 + 10_000)
    view, transitioned = await engine.settle(code, "b")
    assert transitioned is False
    assert view.phase == "discussion"

    clock.advance(5_000)
    view, transitioned = await engine.settle(code, "b")
    assert transitioned is True
    assert view.phase == "voting"
    assert view.version == 6

    view, transitioned = await engine.settle(code, "b")
    assert transitioned is False
    assert view.version == 6


@pytest.mark.asyncio
async def test_every_commit_bumps_version_by_one(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    versions = [(await repo.get(code)).version]

    for pid, action in [
        ("a", {"type": "update_settings", "discussion_minutes": 3, "imposters": 1}),
        ("a", {"type": "start_round"}),
        ("b", {"type": "swap_card"}),
        ("a", {"type": "end_discussion"}),
        ("a", {"type": "reveal_results"}),
    ]:
        await _act(engine, code, pid, **action)
        versions.append((await repo.get(code)).version)

    assert versions == [3, 4, 5, 6, 7, 8]


@pytest.mark.asyncio
async def test_swap_card_counts_down(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    view = await _act(engine, code, "a", type="start_round")
    assert view.round.my_swaps_remaining == 2

    first = view.round.my_card
    view = await _act(engine, code, "a", type="swap_card")
    assert view.round.my_swaps_remaining == 1
    assert view.round.my_card != first
    room = await repo.get(code)
    assert room.recent_fact_ids == room.round.used_fact_ids

    await _act(engine, code, "a", type="swap_card")
    with pytest.raises(Conflict) as exc:
        await _act(engine, code, "a", type="swap_card")
    assert exc.value.code == "SWAP_LIMIT"


@pytest.mark.asyncio
async def test_self_vote_and_unknown_target(engine, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "a", type="end_discussion")

    with pytest.raises(Forbidden):
        await _act(engine, code, "b", type="cast_vote", target_pid="b")
    with pytest.raises(NotFound):
        await _act(engine, code, "b", type="cast_vote", target_pid="ghost")


@pytest.mark.asyncio
async def test_true_or_false_round(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b"], game_id="true-or-false")
    view = await _act(engine, code, "a", type="start_round")
    assert view.phase == "voting"
    assert view.round.discussion_ends_at is None

    with pytest.raises(Conflict):
        await _act(engine, code, "a", type="cast_vote", target_pid="b")

    correct = (await repo.get(code)).round.correct_answer
    wrong = "false" if correct == "true" else "true"
    view = await _act(engine, code, "a", type="answer_true_false", answer=correct)
    assert view.round.my_answer == correct
    assert view.round.correct_answer is None

    view = await _act(engine, code, "b", type="answer_true_false", answer=wrong)
    assert view.phase == "results"
    assert view.round.correct_answer == correct
    assert {p.pid: p.score for p in view.players} == {"a": 1, "b": 0}


@pytest.mark.asyncio
async def test_unknown_room(engine):
    with pytest.raises(NotFound):
        await _act(engine, "QQQQQ", "a", type="start_round")


@pytest.mark.asyncio
async def test_round_number_and_recent_facts_survive_lobby_return(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "a", type="end_discussion")
    await _act(engine, code, "a", type="reveal_results")
    first_ids = list((await repo.get(code)).round.used_fact_ids)

    await _act(engine, code, "a", type="back_to_lobby")
    room = await repo.get(code)
    assert room.round is None
    assert room.last_round_no == 1
    assert room.recent_fact_ids == first_ids

    view = await _act(engine, code, "a", type="start_round")
    assert view.round.round_no == 2

    rnd = (await repo.get(code)).round
    dealt = {a.fact_id for a in rnd.assignments.values()}
    assert rnd.used_fact_ids[: len(first_ids)] == first_ids
    assert not dealt & set(first_ids)


@pytest.mark.asyncio
async def test_round_number_survives_fallback_to_lobby(engine, repo, clock):
    code = await _room_with(engine, clock, ["a", "b", "c"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "c", type="leave_room")
    assert (await repo.get(code)).phase == "lobby"

    await engine.join_room(InJoinRoom(session_id="d", room_code=code, display_name="D"))
    view = await _act(engine, code, "a", type="start_round")
    assert view.round.round_no == 2


@pytest.mark.asyncio
async def test_settings_update_keeps_language_when_omitted(engine, clock):
    view = await engine.create_room(InCreateRoom(session_id="a", display_name="A", language="ru"))
    view = await _act(engine, view.room_code, "a", type="update_settings", discussion_minutes=3, imposters=1)

    assert view.language == "ru"
    assert view.settings.discussion_minutes == 3


class SlowRepo(MemoryRepo):
    """Yields to the event loop on every read and write."""

    async def get(self, room_code):
        await asyncio.sleep(0.001)
        return await super().get(room_code)

    async def put(self, room):
        await asyncio.sleep(0.001)
        await super().put(room)


@pytest.mark.asyncio
async def test_concurrent_votes_are_serialized(catalog, clock):
    repo = SlowRepo()
    engine = RoomEngine(repo, catalog, clock=clock, rng=random.Random(3))
    code = await _room_with(engine, clock, ["a", "b", "c", "d"])
    await _act(engine, code, "a", type="start_round")
    await _act(engine, code, "a", type="end_discussion")
    version = (await repo.get(code)).version

    await asyncio.gather(
        _act(engine, code, "a", type="cast_vote", target_pid="b"),
        _act(engine, code, "b", type="cast_vote", target_pid="c"),
        _act(engine, code, "c", type="cast_vote", target_pid="a"),
    )

    room = await repo.get(code)
    assert room.round.votes == {"a": "b", "b": "c", "c": "a"}
    assert room.version == version + 3
    assert room.phase == "voting"


@pytest.mark.asyncio
async def test_capacity_error_leaves_room_untouched(repo, clock, make_catalog):
    deck = FactDeck(
        real_facts=[FactCard(id="r1", category="X", text="Only one real card here.", kind="real")],
        fake_facts=[FactCard(id="f1", category="X", text="Only one fake card here.", kind="fake", correction="Fix.")],
    )
    engine = RoomEngine(repo, make_catalog(deck), clock=clock, rng=random.Random(1))
    code = await _room_with(engine, clock, ["a", "b", "c"])
    version = (await repo.get(code)).version

    with pytest.raises(CapacityError) as exc:
        await _act(engine, code, "a", type="start_round")
    assert exc.value.code == "NOT_ENOUGH_FACTS"

    room = await repo.get(code)
    assert room.phase == "lobby"
    assert room.round is None
    assert room.last_round_no == 0
    assert room.version == version
