"""
Tests for the in-memory room registry.
"""

import asyncio

import pytest

from server.registry import RoomRegistry
from server.settings import ServerSettings
from tycoon.events import EventType
from tycoon.exceptions import (
    NotYourTurnError,
    PlayerNotInRoomError,
    RoomNotFoundError,
    RoomStateError,
)
from tycoon.game import Phase
from tycoon.rules import parse_action


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def registry():
    return RoomRegistry(ServerSettings(seed=11))


@pytest.fixture
def started(registry):
    """A started two-player room: (registry, code, host, guest)."""

    async def setup():
        code, host = await registry.create_room("Alice")
        _, guest = await registry.join_room(code.lower(), "Bob")
        await registry.start_game(code, host.id)
        return code, host, guest

    code, host, guest = run(setup())
    return registry, code, host, guest


class TestRooms:
    def test_create_room(self, registry):
        code, host = run(registry.create_room("  Alice  "))
        assert len(code) == 6
        assert code == code.upper()
        int(code, 16)
        assert host.index == 0
        assert host.name == "Alice"

    def test_names_are_trimmed_and_cut(self, registry):
        _, host = run(registry.create_room("x" * 50))
        assert host.name == "x" * 20
        _, nameless = run(registry.create_room("   "))
        assert nameless.name == "Player 1"

    def test_join_assigns_indexes(self, registry):
        async def scenario():
            code, _ = await registry.create_room("Alice")
            _, bob = await registry.join_room(code, "Bob")
            _, cat = await registry.join_room(code, "Cat")
            return bob, cat

        bob, cat = run(scenario())
        assert (bob.index, cat.index) == (1, 2)

    def test_join_full_room(self, registry):
        async def scenario():
            code, _ = await registry.create_room("P0")
            for i in range(1, 5):
                await registry.join_room(code, f"P{i}")
            await registry.join_room(code, "P5")

        with pytest.raises(RoomStateError):
            run(scenario())

    def test_join_unknown_room(self, registry):
        with pytest.raises(RoomNotFoundError):
            run(registry.join_room("ABCDEF", "Bob"))

    def test_join_invalid_code(self, registry):
        with pytest.raises(RoomStateError):
            run(registry.join_room("ABC", "Bob"))

    def test_join_started_room(self, started):
        registry, code, _, _ = started
        with pytest.raises(RoomStateError):
            run(registry.join_room(code, "Late"))

    def test_view_requires_member(self, started):
        registry, code, host, _ = started
        view = run(registry.view_room(code, host.id))
        assert view["status"] == "playing"
        assert [p["name"] for p in view["players"]] == ["Alice", "Bob"]
        with pytest.raises(PlayerNotInRoomError):
            run(registry.view_room(code, "stranger"))


class TestStartGame:
    def test_only_host_starts(self, registry):
        async def scenario():
            code, _ = await registry.create_room("Alice")
            _, guest = await registry.join_room(code, "Bob")
            await registry.start_game(code, guest.id)

        with pytest.raises(PlayerNotInRoomError):
            run(scenario())

    def test_needs_two_players(self, registry):
        async def scenario():
            code, host = await registry.create_room("Alice")
            await registry.start_game(code, host.id)

        with pytest.raises(RoomStateError):
            run(scenario())

    def test_start_deals_game(self, started):
        registry, code, _, _ = started
        room = run(registry.get_room(code))
        assert room.status == "playing"
        assert room.game_state.phase == Phase.PLAYING
        assert [p.name for p in room.game_state.players] == ["Alice", "Bob"]
        assert room.log.get_events()[0].event_type == EventType.GAME_START

    def test_cannot_start_twice(self, started):
        registry, code, host, _ = started
        with pytest.raises(RoomStateError):
            run(registry.start_game(code, host.id))


class TestSubmitAction:
    def test_turn_ownership(self, started):
        registry, code, _, guest = started
        with pytest.raises(NotYourTurnError):
            run(registry.submit_action(code, guest.id, parse_action({"type": "endTurn"})))

    def test_unknown_player(self, started):
        registry, code, _, _ = started
        with pytest.raises(PlayerNotInRoomError):
            run(registry.submit_action(code, "nobody", parse_action({"type": "endTurn"})))

    def test_not_started(self, registry):
        async def scenario():
            code, host = await registry.create_room("Alice")
            await registry.submit_action(code, host.id, parse_action({"type": "endTurn"}))

        with pytest.raises(RoomStateError):
            run(scenario())

    def test_action_is_logged(self, started):
        registry, code, host, _ = started
        result = run(registry.submit_action(code, host.id, parse_action({"type": "production", "cardIndex": 0})))
        assert result.accepted
        room = run(registry.get_room(code))
        last = room.log.get_events()[-1]
        assert last.event_type == EventType.ACTION
        assert last.player_index == 0
        assert last.message.startswith("Played production card")

    def test_end_turn_not_logged(self, started):
        registry, code, host, _ = started
        room = run(registry.get_room(code))
        before = len(room.log)
        result = run(registry.submit_action(code, host.id, parse_action({"type": "endTurn"})))
        assert result.state.current_player_index == 1
        assert len(room.log) == before

    def test_rejected_action_reports_reason(self, started):
        registry, code, host, _ = started
        result = run(registry.submit_action(code, host.id, parse_action({"type": "discard", "commodity": "wheat"})))
        assert not result.accepted
        assert result.reason
        room = run(registry.get_room(code))
        assert room.undo_slot is None

    def test_apply_first(self, started):
        registry, code, host, _ = started
        first = parse_action({"type": "production", "cardIndex": 0})
        result = run(registry.submit_action(code, host.id, parse_action({"type": "endTurn"}), apply_first=first))
        assert result.accepted
        assert result.state.current_player_index == 1
        assert len(result.state.players[0].hand) == 3

    def test_auction_win_logged_and_cleared(self, started):
        registry, code, host, guest = started

        async def scenario():
            await registry.submit_action(code, host.id, parse_action({"type": "startAuction", "railroadIndex": 0}))
            room = await registry.get_room(code)
            min_bid = room.game_state.auction_railroad.min_bid
            await registry.submit_action(code, host.id, parse_action({"type": "placeBid", "amount": min_bid}))
            return await registry.submit_action(code, guest.id, parse_action({"type": "passAuction"}))

        result = run(scenario())
        assert result.state.last_auction_result is None
        assert result.state.current_player_index == 0
        room = run(registry.get_room(code))
        last = room.log.get_events()[-1]
        assert last.event_type == EventType.AUCTION_WON
        assert last.message.startswith("Alice won ")


class TestUndo:
    def test_undo_restores_previous_state(self, started):
        registry, code, host, _ = started
        room = run(registry.get_room(code))
        before = room.game_state
        log_length = len(room.log)
        run(registry.submit_action(code, host.id, parse_action({"type": "production", "cardIndex": 0})))
        restored = run(registry.undo(code, host.id))
        assert restored == before
        assert len(room.log) == log_length + 1
        assert room.log.get_events()[-1].event_type == EventType.UNDO

    def test_only_last_actor_can_undo(self, started):
        registry, code, host, guest = started
        run(registry.submit_action(code, host.id, parse_action({"type": "endTurn"})))
        with pytest.raises(NotYourTurnError):
            run(registry.undo(code, guest.id))

    def test_single_step(self, started):
        registry, code, host, _ = started
        run(registry.submit_action(code, host.id, parse_action({"type": "production", "cardIndex": 0})))
        run(registry.undo(code, host.id))
        with pytest.raises(RoomStateError):
            run(registry.undo(code, host.id))

    def test_nothing_to_undo(self, started):
        registry, code, host, _ = started
        with pytest.raises(RoomStateError):
            run(registry.undo(code, host.id))
