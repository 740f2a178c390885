"""
Tests for game log messages.
"""

from dataclasses import replace

from tycoon import apply_game_action, format_action_message, parse_action
from tycoon.config import Commodity
from tycoon.game import AuctionResult
from tycoon.messages import format_auction_result


def message_for(state, data):
    action = parse_action(data)
    return format_action_message(action, apply_game_action(state, action), state)


class TestActionMessages:
    def test_production(self, two_player_game, patch_player, wheat_card):
        game = patch_player(two_player_game, 0, hand=(wheat_card,))
        message = message_for(game, {"type": "production", "cardIndex": 0, "commoditiesToTake": ["wheat", "wood", "coal"]})
        assert message == "Played production card: took Wheat, Wood, Coal, raised Wheat by $1"

    def test_production_default_selection(self, two_player_game, patch_player, wheat_card):
        game = patch_player(two_player_game, 0, hand=(wheat_card,))
        message = message_for(game, {"type": "production", "cardIndex": 0})
        assert message == "Played production card: took commodities, raised Wheat by $1"

    def test_production_with_trading_floor(self, two_player_game, patch_player, wheat_card, tile):
        game = patch_player(two_player_game, 0, hand=(wheat_card,), buildings=(tile("trading-floor"),))
        game = patch_player(game, 1, commodities={Commodity.IRON: 2})
        message = message_for(
            game,
            {
                "type": "production",
                "cardIndex": 0,
                "tradingFloorPurchase": {"fromPlayerIndex": 1, "commodity": "iron", "quantity": 2},
            },
        )
        assert message.endswith("; bought 2 Iron from Bob (Trading Floor)")

    def test_sell_and_discard(self, two_player_game):
        assert message_for(two_player_game, {"type": "sell", "commodity": "wheat", "quantity": 1}) == "Sold 1 Wheat"
        action = parse_action({"type": "discard", "commodity": "luxury"})
        assert format_action_message(action, two_player_game) == "Discarded Luxury"

    def test_sell_reports_units_actually_sold(self, two_player_game, patch_player):
        game = patch_player(two_player_game, 0, commodities={Commodity.WHEAT: 2})
        assert message_for(game, {"type": "sell", "commodity": "wheat", "quantity": 5}) == "Sold 2 Wheat"

    def test_buy_building(self, two_player_game, tile):
        game = replace(two_player_game, building_offer=(tile("wheat-field-b"),))
        assert message_for(game, {"type": "buyBuilding", "buildingIndex": 0}) == "Bought Wheat Field (B) for $4"

    def test_upgrade(self, two_player_game, patch_player, tile):
        game = patch_player(two_player_game, 0, buildings=(tile("wheat-field-b"),))
        message = message_for(game, {"type": "upgradeBBuilding", "buildingId": "wheat-field-b"})
        assert message == "Upgraded to Grain Farm (B)"

    def test_upgrade_from_after_state_only(self, two_player_game, patch_player, tile):
        after = patch_player(two_player_game, 0, buildings=(tile("grain-farm-b"),))
        action = parse_action({"type": "upgradeBBuilding", "buildingId": "wheat-field-b"})
        assert format_action_message(action, after) == "Upgraded to Grain Farm (B)"

    def test_buy_town(self, two_player_game, testville, patch_player):
        game = patch_player(replace(two_player_game, current_town=testville), 0, commodities={Commodity.WOOD: 3})
        assert message_for(game, {"type": "buyTown", "useSpecific": True}) == "Bought Testville (specific commodities)"
        assert message_for(game, {"type": "buyTown", "useSpecific": False}) == "Bought Testville (any commodities)"

    def test_auction_messages(self, two_player_game, top_dog):
        game = replace(two_player_game, railroad_offer=(top_dog,))
        assert message_for(game, {"type": "startAuction", "railroadIndex": 0}) == "Started auction for Top Dog"
        assert message_for(game, {"type": "placeBid", "amount": 7}) == "Bid $7"
        assert message_for(game, {"type": "passAuction"}) == "Passed on auction"

    def test_end_turn(self, two_player_game):
        assert message_for(two_player_game, {"type": "endTurn"}) == "Ended turn"

    def test_fallbacks_for_missing_details(self, two_player_game):
        assert message_for(two_player_game, {"type": "buyBuilding", "buildingIndex": 9}) == "Bought building"
        assert message_for(two_player_game, {"type": "startAuction", "railroadIndex": 9}) == "Started auction"
        assert message_for(two_player_game, {"type": "production", "cardIndex": 9}) == "Played production card"


class TestAuctionResultMessage:
    def test_winner_message(self, two_player_game):
        state = replace(two_player_game, last_auction_result=AuctionResult("Top Dog", 1, 9))
        assert format_auction_result(state) == "Bob won Top Dog for $9"

    def test_no_result(self, two_player_game):
        assert format_auction_result(two_player_game) is None
