"""
Game configuration settings and static market tables.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class Commodity(str, Enum):
    """Commodities produced, traded and spent on towns."""

    WHEAT = "wheat"
    WOOD = "wood"
    IRON = "iron"
    COAL = "coal"
    GOODS = "goods"
    LUXURY = "luxury"


# Fixed enumeration order used by every "first" / greedy rule.
COMMODITIES: Tuple[Commodity, ...] = (
    Commodity.WHEAT,
    Commodity.WOOD,
    Commodity.IRON,
    Commodity.COAL,
    Commodity.GOODS,
    Commodity.LUXURY,
)

COMMODITY_NAMES: Dict[Commodity, str] = {
    Commodity.WHEAT: "Wheat",
    Commodity.WOOD: "Wood",
    Commodity.IRON: "Iron",
    Commodity.COAL: "Coal",
    Commodity.GOODS: "Goods",
    Commodity.LUXURY: "Luxury",
}

COMMODITY_PRICE_MIN: Dict[Commodity, int] = {
    Commodity.WHEAT: 1,
    Commodity.WOOD: 1,
    Commodity.IRON: 2,
    Commodity.COAL: 2,
    Commodity.GOODS: 3,
    Commodity.LUXURY: 3,
}

COMMODITY_PRICE_MAX: Dict[Commodity, int] = {
    Commodity.WHEAT: 12,
    Commodity.WOOD: 12,
    Commodity.IRON: 13,
    Commodity.COAL: 13,
    Commodity.GOODS: 14,
    Commodity.LUXURY: 14,
}

INITIAL_MARKET: Dict[Commodity, int] = dict(COMMODITY_PRICE_MIN)

MIN_PLAYERS = 2
MAX_PLAYERS = 5

BASE_PRODUCTION = 3
BASE_HAND_SIZE = 3
BASE_STORAGE = 10

RAILROAD_OFFER_SIZE = 2
BUILDING_OFFER_SIZE = 4
INITIAL_B_OFFER_SIZE = 4

TOWN_RAILROAD_PAIR_BONUS = 2
MONEY_PER_VP_STEP = 20


@dataclass
class GameConfig:
    """Configuration for a game."""

    starting_money: int = 10
    starting_hand_size: int = BASE_HAND_SIZE

    seed: Optional[int] = None
