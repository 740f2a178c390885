"""
High-level rules API: the action vocabulary and its dispatcher.

This module provides the public interface for applying a tagged action to
a game state, for callers such as the room service that receive actions
as JSON.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from tycoon.auction import bid, open_auction, pass_bid
from tycoon.config import Commodity
from tycoon.exceptions import IllegalActionError, InvalidActionError
from tycoon.game import (
    GameState,
    TradingFloorPurchase,
    buy_building,
    buy_town,
    discard,
    end_turn,
    produce,
    sell,
    set_active_bp_building,
    upgrade_b_building,
)

logger = logging.getLogger(__name__)


class ActionModel(BaseModel):
    """Base for actions. Fields accept snake_case or camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TradingFloorPurchaseModel(ActionModel):
    from_player_index: int
    commodity: Commodity
    quantity: int


class ProductionAction(ActionModel):
    type: Literal["production"] = "production"
    card_index: int
    commodities_to_take: Optional[List[Commodity]] = None
    trading_floor_purchase: Optional[TradingFloorPurchaseModel] = None


class SellAction(ActionModel):
    type: Literal["sell"] = "sell"
    commodity: Commodity
    quantity: int
    use_export_company: bool = False


class DiscardAction(ActionModel):
    type: Literal["discard"] = "discard"
    commodity: Commodity


class BuyBuildingAction(ActionModel):
    type: Literal["buyBuilding"] = "buyBuilding"
    building_index: int


class UpgradeBBuildingAction(ActionModel):
    type: Literal["upgradeBBuilding"] = "upgradeBBuilding"
    building_id: str


class SetActiveBpBuildingAction(ActionModel):
    type: Literal["setActiveBpBuilding"] = "setActiveBpBuilding"
    building_id: str


class BuyTownAction(ActionModel):
    type: Literal["buyTown"] = "buyTown"
    use_specific: bool
    commodities_to_spend: Optional[Dict[Commodity, int]] = None


class StartAuctionAction(ActionModel):
    type: Literal["startAuction"] = "startAuction"
    railroad_index: int


class PlaceBidAction(ActionModel):
    type: Literal["placeBid"] = "placeBid"
    amount: int


class PassAuctionAction(ActionModel):
    type: Literal["passAuction"] = "passAuction"


class EndTurnAction(ActionModel):
    type: Literal["endTurn"] = "endTurn"


GameAction = Annotated[
    Union[
        ProductionAction,
        SellAction,
        DiscardAction,
        BuyBuildingAction,
        UpgradeBBuildingAction,
        SetActiveBpBuildingAction,
        BuyTownAction,
        StartAuctionAction,
        PlaceBidAction,
        PassAuctionAction,
        EndTurnAction,
    ],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter = TypeAdapter(GameAction)

ACTION_TYPES = frozenset(
    {
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
    }
)


def parse_action(data: Mapping[str, Any]) -> GameAction:
    """
    Validate a plain mapping into a ``GameAction``.

    Raises:
        InvalidActionError: Unknown ``type`` tag or malformed fields
    """
    try:
        return _action_adapter.validate_python(data)
    except ValidationError as exc:
        raise InvalidActionError(f"Invalid action: {exc.errors(include_url=False)}") from exc


@dataclass(frozen=True)
class ActionResult:
    """Outcome of applying an action; ``state`` is the input state when rejected."""

    state: GameState
    accepted: bool
    reason: Optional[str] = None


def _dispatch(state: GameState, action: GameAction) -> GameState:
    if action.type == "production":
        purchase = None
        if action.trading_floor_purchase is not None:
            tf = action.trading_floor_purchase
            purchase = TradingFloorPurchase(tf.from_player_index, tf.commodity, tf.quantity)
        return produce(state, action.card_index, action.commodities_to_take, purchase)
    if action.type == "sell":
        return sell(state, action.commodity, action.quantity, action.use_export_company)
    if action.type == "discard":
        return discard(state, action.commodity)
    if action.type == "buyBuilding":
        return buy_building(state, action.building_index)
    if action.type == "upgradeBBuilding":
        return upgrade_b_building(state, action.building_id)
    if action.type == "setActiveBpBuilding":
        return set_active_bp_building(state, action.building_id)
    if action.type == "buyTown":
        return buy_town(state, action.use_specific, action.commodities_to_spend)
    if action.type == "startAuction":
        return open_auction(state, action.railroad_index)
    if action.type == "placeBid":
        return bid(state, action.amount)
    if action.type == "passAuction":
        return pass_bid(state)
    if action.type == "endTurn":
        return end_turn(state)
    raise InvalidActionError(f"Unknown action type: {action.type}")


def resolve_action(state: GameState, action: Union[GameAction, Mapping[str, Any]]) -> ActionResult:
    """
    Apply an action and report whether it was accepted.

    Args:
        state: Current game state
        action: A parsed ``GameAction`` or a plain mapping to parse

    A mapping with a known ``type`` but bad fields is rejected like any
    other illegal action.

    Returns:
        ActionResult with the new state, or the input state and a reason

    Raises:
        InvalidActionError: Missing or unknown ``type`` tag
    """
    if not isinstance(action, BaseModel):
        try:
            action = parse_action(action)
        except InvalidActionError as exc:
            if action.get("type") not in ACTION_TYPES:
                raise
            logger.debug(f"Rejected malformed {action['type']}: {exc}")
            return ActionResult(state=state, accepted=False, reason=str(exc))
    try:
        return ActionResult(state=_dispatch(state, action), accepted=True)
    except IllegalActionError as exc:
        logger.debug(f"Rejected {action.type}: {exc}")
        return ActionResult(state=state, accepted=False, reason=str(exc))


def apply_game_action(state: GameState, action: Union[GameAction, Mapping[str, Any]]) -> GameState:
    """Apply an action; an illegal action returns the input state unchanged."""
    return resolve_action(state, action).state
