"""
Human-readable log lines for actions.
"""

from typing import Optional

from tycoon.cards import get_building_tile_by_id
from tycoon.config import COMMODITY_NAMES
from tycoon.game import GameState
from tycoon.rules import GameAction


def _names(commodities) -> str:
    return ", ".join(COMMODITY_NAMES[c] for c in commodities)


def format_action_message(
    action: GameAction, state_after: GameState, state_before: Optional[GameState] = None
) -> str:
    """
    Describe an action for the game log.

    Details such as the card played or the building bought are looked up in
    ``state_before`` when given, since the action removes them.
    """
    state = state_before if state_before is not None else state_after

    if action.type == "production":
        hand = state.get_current_player().hand
        if not 0 <= action.card_index < len(hand):
            return "Played production card"
        card = hand[action.card_index]
        taken = _names(action.commodities_to_take) if action.commodities_to_take else "commodities"
        raised = _names(card.price_increase) if card.price_increase else "nothing"
        message = f"Played production card: took {taken}, raised {raised} by $1"
        tf = action.trading_floor_purchase
        if tf is not None and tf.quantity > 0 and 0 <= tf.from_player_index < len(state.players):
            seller = state.players[tf.from_player_index].name
            message += f"; bought {tf.quantity} {COMMODITY_NAMES[tf.commodity]} from {seller} (Trading Floor)"
        return message

    if action.type == "sell":
        sold = action.quantity
        if state_before is not None:
            # Sales are clamped to holdings
            sold = min(sold, state_before.get_current_player().count(action.commodity))
        return f"Sold {sold} {COMMODITY_NAMES[action.commodity]}"

    if action.type == "discard":
        return f"Discarded {COMMODITY_NAMES[action.commodity]}"

    if action.type == "buyBuilding":
        if 0 <= action.building_index < len(state.building_offer):
            building = state.building_offer[action.building_index]
            return f"Bought {building.name} for ${building.cost}"
        return "Bought building"

    if action.type == "upgradeBBuilding":
        owned = next(
            (b for b in state.get_current_player().buildings if b.id == action.building_id), None
        )
        if owned is not None and owned.bp_upgrade_to_id:
            level2 = get_building_tile_by_id(owned.bp_upgrade_to_id)
            return f"Upgraded to {level2.name}" if level2 else f"Upgraded {owned.name}"
        upgraded = next(
            (
                b
                for b in state_after.get_current_player().buildings
                if b.bp_upgrade_from_id == action.building_id
            ),
            None,
        )
        return f"Upgraded to {upgraded.name}" if upgraded else "Upgraded B building"

    if action.type == "setActiveBpBuilding":
        tile = get_building_tile_by_id(action.building_id)
        return f"Activated {tile.name}" if tile else "Changed active building"

    if action.type == "buyTown":
        if state.current_town is None:
            return "Bought town"
        how = "specific commodities" if action.use_specific else "any commodities"
        return f"Bought {state.current_town.name} ({how})"

    if action.type == "startAuction":
        if 0 <= action.railroad_index < len(state.railroad_offer):
            return f"Started auction for {state.railroad_offer[action.railroad_index].name}"
        return "Started auction"

    if action.type == "placeBid":
        return f"Bid ${action.amount}"

    if action.type == "passAuction":
        return "Passed on auction"

    if action.type == "endTurn":
        return "Ended turn"

    return "Performed action"


def format_auction_result(state: GameState) -> Optional[str]:
    """Log line for the auction that just resolved, if any."""
    result = state.last_auction_result
    if result is None:
        return None
    winner = state.players[result.winner_index].name
    return f"{winner} won {result.railroad_name} for ${result.amount}"
