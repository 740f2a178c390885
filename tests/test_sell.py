"""
Tests for selling commodities to the market.
"""

from dataclasses import replace

import pytest

from tycoon import Phase, action_production, action_sell
from tycoon.config import Commodity

W = Commodity.WHEAT
WOOD = Commodity.WOOD


@pytest.fixture
def game(two_player_game, patch_player):
    """Alice holds 3 wheat and wheat sells for $5."""
    market = dict(two_player_game.market)
    market[W] = 5
    game = replace(two_player_game, market=market)
    return patch_player(game, 0, commodities={W: 3})


class TestSell:
    def test_sell_updates_money_market_and_turn(self, game):
        after = action_sell(game, W, 2)
        alice = after.players[0]
        assert alice.money == 10 + 2 * 5
        assert alice.commodities == {W: 1}
        assert after.market[W] == 3
        assert after.sell_actions_this_turn == 1
        assert after.action_taken_this_turn

    def test_quantity_clamped_to_holdings(self, game):
        after = action_sell(game, W, 10)
        assert after.players[0].money == 10 + 3 * 5
        assert after.players[0].count(W) == 0
        assert after.market[W] == 2

    def test_price_floored_at_minimum(self, game):
        market = dict(game.market)
        market[W] = 2
        after = action_sell(replace(game, market=market), W, 3)
        assert after.market[W] == 1
        assert after.players[0].money == 10 + 3 * 2

    def test_nothing_to_sell_is_rejected(self, game):
        assert action_sell(game, WOOD, 1) is game

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity_rejected(self, game, quantity):
        assert action_sell(game, W, quantity) is game

    def test_rejected_outside_playing_phase(self, game):
        discarding = replace(game, phase=Phase.DISCARD_DOWN)
        assert action_sell(discarding, W, 1) is discarding

    def test_rejected_after_production(self, game):
        produced = action_production(game, 0)
        assert action_sell(produced, W, 1) is produced

    def test_unknown_commodity_rejected(self, game):
        assert action_sell(game, "gold", 1) is game


class TestSellBuildings:
    def test_trading_firm_pays_other_owners(self, game, patch_player, tile):
        game = patch_player(game, 1, buildings=(tile("lumber-wheat-trading-firm"),))
        after = action_sell(game, W, 2)
        assert after.players[1].money == 10 + 2

    def test_trading_firm_does_not_pay_seller(self, game, patch_player, tile):
        game = patch_player(game, 0, buildings=(tile("lumber-wheat-trading-firm"),))
        after = action_sell(game, W, 2)
        assert after.players[0].money == 10 + 2 * 5
        assert after.players[1].money == 10

    def test_trading_firm_for_other_commodities_pays_nothing(self, game, patch_player, tile):
        game = patch_player(game, 1, buildings=(tile("coal-iron-trading-firm"),))
        after = action_sell(game, W, 2)
        assert after.players[1].money == 10

    def test_export_company_raises_price(self, game, patch_player, tile):
        game = patch_player(game, 0, buildings=(tile("export-company"),))
        after = action_sell(game, W, 1, use_export_company=True)
        assert after.players[0].money == 10 + 8

    def test_export_company_capped_at_maximum(self, game, patch_player, tile):
        market = dict(game.market)
        market[W] = 11
        game = patch_player(replace(game, market=market), 0, buildings=(tile("export-company"),))
        after = action_sell(game, W, 1, use_export_company=True)
        assert after.players[0].money == 10 + 12

    def test_export_company_only_when_opted_in(self, game, patch_player, tile):
        game = patch_player(game, 0, buildings=(tile("export-company"),))
        after = action_sell(game, W, 1)
        assert after.players[0].money == 10 + 5

    def test_freight_company_allows_second_sell(self, game, patch_player, tile):
        game = patch_player(game, 0, buildings=(tile("freight-company"),), commodities={W: 3, WOOD: 2})
        first = action_sell(game, W, 1)
        assert not first.action_taken_this_turn
        assert first.sell_actions_this_turn == 1
        second = action_sell(first, WOOD, 1)
        assert second.action_taken_this_turn
        assert second.sell_actions_this_turn == 2
        assert action_sell(second, W, 1) is second

    def test_only_a_second_sell_after_freight_sell(self, game, patch_player, tile):
        game = patch_player(game, 0, buildings=(tile("freight-company"),))
        first = action_sell(game, W, 1)
        assert action_production(first, 0) is first
