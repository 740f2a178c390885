"""Shared test fixtures for Tycoon engine tests."""

from dataclasses import replace

import pytest

from tycoon import GameConfig, init_game
from tycoon.cards import ProductionCard, RailroadCard, TownCard, get_building_tile_by_id
from tycoon.config import Commodity


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def two_player_game(game_config):
    """Two-player game with fixed seed."""
    return init_game(2, ["Alice", "Bob"], game_config)


@pytest.fixture
def three_player_game(game_config):
    """Three-player game with fixed seed."""
    return init_game(3, ["Alice", "Bob", "Charlie"], game_config)


@pytest.fixture
def patch_player():
    """Return a helper that replaces fields of one player."""

    def _patch(state, index, **changes):
        return state.with_player(index, replace(state.players[index], **changes))

    return _patch


@pytest.fixture
def tile():
    """Return a helper that looks up a building tile, failing on unknown ids."""

    def _tile(tile_id):
        found = get_building_tile_by_id(tile_id)
        assert found is not None, tile_id
        return found

    return _tile


@pytest.fixture
def wheat_card():
    """Production card: 2 wheat, 1 wood, 1 coal; raises wheat."""
    return ProductionCard(
        id="test-card",
        production={Commodity.WHEAT: 2, Commodity.WOOD: 1, Commodity.COAL: 1},
        price_increase=(Commodity.WHEAT,),
    )


@pytest.fixture
def top_dog():
    return RailroadCard("rr-test-1", "top-dog", "Top Dog", 6, (4, 5, 6, 8))


@pytest.fixture
def fat_cat():
    return RailroadCard("rr-test-2", "fat-cat", "Fat Cat", 4, (3, 4, 5, 7))


@pytest.fixture
def testville():
    """Town costing 3 wood, or any 5 commodities."""
    return TownCard("t-test", "Testville", 3, {Commodity.WOOD: 3}, 5)
