"""
Invariant checks over seeded random play.

Random actions are thrown at the engine; most are illegal and must leave
the state untouched, the rest must keep every invariant intact.
"""

import random

import pytest

from tycoon import GameConfig, Phase, apply_game_action, init_game, resolve_action
from tycoon.config import COMMODITIES, COMMODITY_PRICE_MAX, COMMODITY_PRICE_MIN
from tycoon.player import get_max_hand_size, get_max_storage, get_total_commodities
from tycoon.scoring import get_player_vp

TOTAL_PRODUCTION_CARDS = 70


def random_action(rng: random.Random) -> dict:
    commodity = rng.choice(COMMODITIES).value
    kind = rng.choice(
        [
            "production",
            "production",
            "sell",
            "discard",
            "buyBuilding",
            "upgradeBBuilding",
            "setActiveBpBuilding",
            "buyTown",
            "startAuction",
            "placeBid",
            "passAuction",
            "endTurn",
            "endTurn",
        ]
    )
    if kind == "production":
        return {"type": kind, "cardIndex": rng.randint(-1, 4)}
    if kind == "sell":
        return {"type": kind, "commodity": commodity, "quantity": rng.randint(0, 4)}
    if kind == "discard":
        return {"type": kind, "commodity": commodity}
    if kind == "buyBuilding":
        return {"type": kind, "buildingIndex": rng.randint(-1, 4)}
    if kind in ("upgradeBBuilding", "setActiveBpBuilding"):
        return {"type": kind, "buildingId": rng.choice(["wheat-field-b", "lumber-yard-b", "factory-x2-p", "bank"])}
    if kind == "buyTown":
        return {"type": kind, "useSpecific": rng.random() < 0.5}
    if kind == "startAuction":
        return {"type": kind, "railroadIndex": rng.randint(-1, 2)}
    if kind == "placeBid":
        return {"type": kind, "amount": rng.randint(0, 15)}
    return {"type": kind}


def check_invariants(state):
    assert (state.auction_railroad is None) == (state.phase != Phase.AUCTION)
    for c in COMMODITIES:
        assert COMMODITY_PRICE_MIN[c] <= state.market[c] <= COMMODITY_PRICE_MAX[c]
    for player in state.players:
        assert player.money >= 0
        assert all(n > 0 for n in player.commodities.values())
        assert len(player.hand) <= get_max_hand_size(player)
        assert get_player_vp(player) >= 0
    cards = len(state.production_deck) + len(state.production_discard)
    cards += sum(len(p.hand) for p in state.players)
    assert cards == TOTAL_PRODUCTION_CARDS
    if state.phase == Phase.AUCTION:
        assert len(state.auction_bids) == state.num_players
        assert not state.auction_passed[state.current_player_index]


def check_within_storage(player):
    assert get_total_commodities(player.commodities) <= get_max_storage(player), player.name


@pytest.mark.parametrize("seed", [1, 2, 3, 4])
def test_random_play_keeps_invariants(seed):
    rng = random.Random(seed)
    num_players = 2 + seed % 4
    state = init_game(num_players, [f"P{i}" for i in range(num_players)], GameConfig(seed=seed))
    check_invariants(state)
    turns = 0
    for _ in range(600):
        action = random_action(rng)
        before = state
        result = resolve_action(state, action)
        if not result.accepted:
            assert result.state is state
        state = result.state
        check_invariants(state)
        if result.accepted and action["type"] == "endTurn" and state.phase == Phase.PLAYING:
            turns += 1
            # The player who just ended, then everyone at the start of the next turn
            check_within_storage(state.players[before.current_player_index])
            for player in state.players:
                check_within_storage(player)
        if state.phase == Phase.GAMEOVER:
            break
    assert turns > 0


@pytest.mark.parametrize("seed", [5, 6])
def test_replay_is_deterministic(seed):
    """Same seed and same actions give the same final state."""

    def play():
        rng = random.Random(seed)
        state = init_game(3, ["A", "B", "C"], GameConfig(seed=seed))
        for _ in range(300):
            state = apply_game_action(state, random_action(rng))
        return state

    assert play() == play()
