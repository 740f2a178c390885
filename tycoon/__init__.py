"""
Tycoon Rules Engine

A deterministic, immutable-state implementation of the railroad tycoon
board game rules.
"""

from .auction import pass_auction, place_bid, start_auction
from .config import Commodity, GameConfig
from .game import (
    GameState,
    Phase,
    action_buy_building,
    action_buy_town,
    action_discard,
    action_end_turn,
    action_production,
    action_sell,
    action_set_active_bp_building,
    action_upgrade_b_building,
    init_game,
)
from .messages import format_action_message
from .player import (
    PlayerState,
    get_max_hand_size,
    get_max_production,
    get_max_storage,
    get_production_list,
    get_total_commodities,
)
from .rules import ActionResult, GameAction, apply_game_action, parse_action, resolve_action
from .scoring import compute_scores, get_winner
from .snapshot import deserialize_state, serialize_state

__all__ = [
    "ActionResult",
    "Commodity",
    "GameAction",
    "GameConfig",
    "GameState",
    "Phase",
    "PlayerState",
    "action_buy_building",
    "action_buy_town",
    "action_discard",
    "action_end_turn",
    "action_production",
    "action_sell",
    "action_set_active_bp_building",
    "action_upgrade_b_building",
    "apply_game_action",
    "compute_scores",
    "deserialize_state",
    "format_action_message",
    "get_max_hand_size",
    "get_max_production",
    "get_max_storage",
    "get_production_list",
    "get_total_commodities",
    "get_winner",
    "init_game",
    "parse_action",
    "pass_auction",
    "place_bid",
    "resolve_action",
    "serialize_state",
    "start_auction",
]
