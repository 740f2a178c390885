"""
Card and building tile catalogs.

Production, railroad, town and building definitions are static tables
built once at import time. Deck factories only copy and shuffle them; all
randomness flows through the caller's ``random.Random``.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar
import random

from tycoon.config import COMMODITIES, INITIAL_B_OFFER_SIZE, Commodity

T = TypeVar("T")

WHEAT, WOOD, IRON, COAL, GOODS, LUXURY = COMMODITIES


@dataclass(frozen=True)
class ProductionCard:
    """A Price & Production card: commodities produced, prices raised."""

    id: str
    production: Dict[Commodity, int] = field(default_factory=dict)
    price_increase: Tuple[Commodity, ...] = ()

    def __repr__(self) -> str:
        return f"ProductionCard('{self.id}')"


@dataclass(frozen=True)
class RailroadCard:
    """One physical railroad card. Copies of a type share ``type_id``."""

    id: str
    type_id: str
    name: str
    min_bid: int
    # VP for the 1st, 2nd, 3rd and 4th owned copy of this type
    vp_schedule: Tuple[int, ...] = ()


@dataclass(frozen=True)
class TownCard:
    """A town, bought with either its exact cost or any mix of ``cost_any`` units."""

    id: str
    name: str
    vp: int
    cost_specific: Dict[Commodity, int] = field(default_factory=dict)
    cost_any: int = 0


@dataclass(frozen=True)
class BuildingTile:
    """
    A building tile. Each optional field switches on one effect.

    B/P tiles (``bp_tag``) are mutually exclusive: only one of them is
    effective per player. Level-1 B tiles link to their level-2 side via
    ``bp_upgrade_to_id``.
    """

    id: str
    name: str
    cost: int
    description: str = ""
    upgrade_cost: Optional[int] = None
    commodity_bonus: Optional[Commodity] = None
    bonus_value: Optional[int] = None
    production_limit: Optional[int] = None
    hand_size: Optional[int] = None
    storage_bonus: Optional[int] = None
    bp_tag: bool = False
    bp_level: Optional[int] = None
    bp_upgrade_to_id: Optional[str] = None
    bp_upgrade_from_id: Optional[str] = None
    any_commodity_bonus: Optional[int] = None
    trading_firm_commodities: Tuple[Commodity, ...] = ()
    auction_commission: Optional[int] = None
    town_cost_reduce: Optional[int] = None
    vp_per_town: Optional[int] = None
    vp_per_railroad: Optional[int] = None
    vp_per_20_money: Optional[int] = None
    vp_per_building: Optional[int] = None
    extra_sell_action: bool = False
    extra_building_purchase: bool = False
    sell_price_bonus: Optional[int] = None
    trading_floor: bool = False

    def __repr__(self) -> str:
        return f"BuildingTile('{self.id}')"


def shuffled(items: Sequence[T], rng: random.Random) -> Tuple[T, ...]:
    """Return a shuffled copy of ``items``. The only shuffle in the engine."""
    out = list(items)
    rng.shuffle(out)
    return tuple(out)


# ---------------------------------------------------------------------------
# Production cards
# ---------------------------------------------------------------------------

PRODUCTION_TEMPLATES: Tuple[Tuple[Dict[Commodity, int], Tuple[Commodity, ...]], ...] = (
    ({WHEAT: 2, WOOD: 1}, (WHEAT, WOOD)),
    ({WHEAT: 1, COAL: 2}, (COAL,)),
    ({WOOD: 2, IRON: 1}, (WOOD, IRON)),
    ({IRON: 2, COAL: 1}, (IRON,)),
    ({GOODS: 2, LUXURY: 1}, (GOODS, LUXURY)),
    ({WHEAT: 1, GOODS: 1, LUXURY: 1}, (LUXURY,)),
    ({WOOD: 1, IRON: 1, COAL: 1}, (IRON, COAL)),
    ({WHEAT: 1, WOOD: 1, GOODS: 1}, (WHEAT, GOODS)),
    ({COAL: 2, GOODS: 1}, (COAL, GOODS)),
    ({WHEAT: 2, IRON: 1}, (WHEAT,)),
    ({WOOD: 1, COAL: 1, LUXURY: 1}, (WOOD, LUXURY)),
    ({IRON: 1, GOODS: 2}, (IRON, GOODS)),
    ({WHEAT: 1, COAL: 2}, (WHEAT, COAL)),
    ({WOOD: 2, LUXURY: 1}, (WOOD,)),
    ({IRON: 1, COAL: 1, GOODS: 1}, (COAL,)),
    ({WHEAT: 1, WOOD: 1, IRON: 1}, (WHEAT, WOOD)),
    ({COAL: 1, GOODS: 1, LUXURY: 1}, (LUXURY,)),
    ({WHEAT: 2, COAL: 1}, (WHEAT, COAL)),
    ({WOOD: 1, IRON: 2}, (WOOD, IRON)),
    ({GOODS: 1, LUXURY: 2}, (GOODS, LUXURY)),
    ({WHEAT: 1, WOOD: 1, COAL: 1}, (WOOD,)),
    ({IRON: 1, COAL: 1, LUXURY: 1}, (IRON, LUXURY)),
    ({WHEAT: 1, GOODS: 2}, (WHEAT, GOODS)),
    ({WOOD: 2, GOODS: 1}, (WOOD, GOODS)),
    ({IRON: 2, LUXURY: 1}, (IRON, LUXURY)),
    # 4-5 unit cards: the producer keeps only their production limit
    ({WOOD: 3, IRON: 1, WHEAT: 1}, (WOOD, IRON)),
    ({WHEAT: 2, COAL: 2, GOODS: 1}, (WHEAT, COAL)),
    ({IRON: 2, COAL: 1, LUXURY: 1}, (IRON, LUXURY)),
    ({GOODS: 2, LUXURY: 2, WHEAT: 1}, (GOODS, LUXURY)),
    ({COAL: 2, WOOD: 2, IRON: 1}, (COAL, WOOD)),
    ({WHEAT: 2, WOOD: 1, GOODS: 1, LUXURY: 1}, (WHEAT, GOODS)),
    ({IRON: 1, COAL: 1, GOODS: 1, LUXURY: 1}, (IRON, COAL)),
    ({WOOD: 2, IRON: 2, COAL: 1}, (WOOD, IRON)),
    ({WHEAT: 3, WOOD: 1, COAL: 1}, (WHEAT,)),
    ({LUXURY: 2, GOODS: 2, COAL: 1}, (LUXURY, GOODS)),
)

PRODUCTION_COPIES = 2


def create_production_deck(rng: random.Random) -> Tuple[ProductionCard, ...]:
    """Create the Price & Production deck: two copies of each template, shuffled."""
    cards: List[ProductionCard] = []
    for production, price_increase in PRODUCTION_TEMPLATES:
        for _ in range(PRODUCTION_COPIES):
            cards.append(
                ProductionCard(
                    id=f"prod-{len(cards)}",
                    production=dict(production),
                    price_increase=price_increase,
                )
            )
    return shuffled(cards, rng)


# ---------------------------------------------------------------------------
# Railroads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RailroadType:
    """Template shared by the four physical copies of a railroad."""

    type_id: str
    name: str
    min_bid: int
    vp_schedule: Tuple[int, int, int, int]


RAILROAD_TYPES: Tuple[RailroadType, ...] = (
    RailroadType("top-dog", "Top Dog", 6, (4, 5, 6, 8)),
    RailroadType("tycoon-railroad", "Tycoon Railroad", 7, (4, 5, 7, 9)),
    RailroadType("big-bear", "Big Bear", 5, (3, 4, 6, 8)),
    RailroadType("fat-cat", "Fat Cat", 4, (3, 4, 5, 7)),
    RailroadType("sly-fox", "Sly Fox", 3, (2, 3, 5, 7)),
    RailroadType("skunk-works", "Skunk Works", 2, (2, 3, 4, 6)),
)

RAILROAD_COPIES = 4

# Type ids removed at or below the given player count.
RAILROAD_EXCLUSIONS: Tuple[Tuple[int, str], ...] = (
    (4, "skunk-works"),
    (3, "tycoon-railroad"),
    (2, "sly-fox"),
)


def railroad_types_for(num_players: int) -> Tuple[RailroadType, ...]:
    """Railroad types in play for a player count."""
    excluded = {type_id for limit, type_id in RAILROAD_EXCLUSIONS if num_players <= limit}
    return tuple(t for t in RAILROAD_TYPES if t.type_id not in excluded)


def create_railroad_deck(num_players: int, rng: random.Random) -> Tuple[RailroadCard, ...]:
    """Create the railroad deck for a player count: four copies per type in play."""
    cards: List[RailroadCard] = []
    for rtype in railroad_types_for(num_players):
        for _ in range(RAILROAD_COPIES):
            cards.append(
                RailroadCard(
                    id=f"rr-{len(cards)}",
                    type_id=rtype.type_id,
                    name=rtype.name,
                    min_bid=rtype.min_bid,
                    vp_schedule=rtype.vp_schedule,
                )
            )
    return shuffled(cards, rng)


# ---------------------------------------------------------------------------
# Towns
# ---------------------------------------------------------------------------

TOWNS: Tuple[TownCard, ...] = (
    TownCard("t-1", "Beaver Ford", 2, {WOOD: 2}, 4),
    TownCard("t-2", "Bridgewater", 2, {WHEAT: 2}, 4),
    TownCard("t-3", "Molehill", 2, {IRON: 2}, 4),
    TownCard("t-4", "Black Friar", 2, {COAL: 2}, 4),
    TownCard("t-5", "Foxwoods", 3, {WOOD: 3}, 5),
    TownCard("t-6", "Trinity", 3, {GOODS: 3}, 5),
    TownCard("t-7", "Newgate", 3, {WHEAT: 3}, 4),
    TownCard("t-8", "Marketshire", 3, {LUXURY: 3}, 5),
    TownCard("t-9", "Badger Downs", 4, {WHEAT: 4}, 6),
    TownCard("t-10", "Wild Grove", 4, {WOOD: 4}, 6),
    TownCard("t-11", "Dunmoor", 4, {COAL: 4}, 6),
    TownCard("t-12", "Bishop's Glen", 4, {IRON: 4}, 6),
    TownCard("t-13", "Land's End", 5, {LUXURY: 5}, 8),
    TownCard("t-14", "Drover Crossing", 5, {GOODS: 5}, 8),
    TownCard("t-15", "Canterbury Woods", 5, {WOOD: 5}, 8),
    TownCard("t-16", "River Ridge", 5, {WHEAT: 5}, 8),
)


def create_town_deck(num_players: int, rng: random.Random) -> Tuple[TownCard, ...]:
    """
    Create the town deck.

    Towns are stacked by increasing VP, shuffled within each VP tier, so
    the draw order never decreases in VP. Two-player games keep every
    other card.
    """
    deck: List[TownCard] = []
    for vp in sorted({t.vp for t in TOWNS}):
        deck.extend(shuffled([t for t in TOWNS if t.vp == vp], rng))
    if num_players == 2:
        deck = deck[::2]
    return tuple(deck)


# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------

BUILDING_TILES: Tuple[BuildingTile, ...] = (
    # B tiles: front side (+1) is dealt, back side (+2) is reached by upgrading
    BuildingTile(
        "wheat-field-b", "Wheat Field (B)", 4, "+1 Wheat",
        commodity_bonus=WHEAT, bonus_value=1, bp_tag=True, bp_level=1,
        upgrade_cost=5, bp_upgrade_to_id="grain-farm-b",
    ),
    BuildingTile(
        "grain-farm-b", "Grain Farm (B)", 9, "+2 Wheat",
        commodity_bonus=WHEAT, bonus_value=2, bp_tag=True, bp_level=2,
        bp_upgrade_from_id="wheat-field-b",
    ),
    BuildingTile(
        "lumber-yard-b", "Lumber Yard (B)", 4, "+1 Wood",
        commodity_bonus=WOOD, bonus_value=1, bp_tag=True, bp_level=1,
        upgrade_cost=5, bp_upgrade_to_id="saw-mill-b",
    ),
    BuildingTile(
        "saw-mill-b", "Saw Mill (B)", 9, "+2 Wood",
        commodity_bonus=WOOD, bonus_value=2, bp_tag=True, bp_level=2,
        bp_upgrade_from_id="lumber-yard-b",
    ),
    BuildingTile(
        "coal-deposit-b", "Coal Deposit (B)", 5, "+1 Coal",
        commodity_bonus=COAL, bonus_value=1, bp_tag=True, bp_level=1,
        upgrade_cost=7, bp_upgrade_to_id="coal-mine-b",
    ),
    BuildingTile(
        "coal-mine-b", "Coal Mine (B)", 12, "+2 Coal",
        commodity_bonus=COAL, bonus_value=2, bp_tag=True, bp_level=2,
        bp_upgrade_from_id="coal-deposit-b",
    ),
    BuildingTile(
        "iron-deposit-b", "Iron Deposit (B)", 5, "+1 Iron",
        commodity_bonus=IRON, bonus_value=1, bp_tag=True, bp_level=1,
        upgrade_cost=7, bp_upgrade_to_id="iron-mine-b",
    ),
    BuildingTile(
        "iron-mine-b", "Iron Mine (B)", 12, "+2 Iron",
        commodity_bonus=IRON, bonus_value=2, bp_tag=True, bp_level=2,
        bp_upgrade_from_id="iron-deposit-b",
    ),
    BuildingTile(
        "tool-die-b", "Tool & Die (B)", 6, "+1 Goods",
        commodity_bonus=GOODS, bonus_value=1, bp_tag=True, bp_level=1,
        upgrade_cost=9, bp_upgrade_to_id="loom-b",
    ),
    BuildingTile(
        "loom-b", "Loom (B)", 15, "+2 Goods",
        commodity_bonus=GOODS, bonus_value=2, bp_tag=True, bp_level=2,
        bp_upgrade_from_id="tool-die-b",
    ),
    BuildingTile(
        "vineyard-b", "Vineyard (B)", 6, "+1 Luxury",
        commodity_bonus=LUXURY, bonus_value=1, bp_tag=True, bp_level=1,
        upgrade_cost=9, bp_upgrade_to_id="glass-works-b",
    ),
    BuildingTile(
        "glass-works-b", "Glass Works (B)", 15, "+2 Luxury",
        commodity_bonus=LUXURY, bonus_value=2, bp_tag=True, bp_level=2,
        bp_upgrade_from_id="vineyard-b",
    ),
    BuildingTile(
        "machine-shop-b", "Machine Shop (B)", 30, "+1 Commodity of your choice",
        any_commodity_bonus=1, bp_tag=True, bp_level=1,
        upgrade_cost=30, bp_upgrade_to_id="water-mill-b",
    ),
    BuildingTile(
        "water-mill-b", "Water Mill (B)", 60, "+2 Commodities of your choice",
        any_commodity_bonus=2, bp_tag=True, bp_level=2,
        bp_upgrade_from_id="machine-shop-b",
    ),
    BuildingTile(
        "lumber-wheat-trading-firm", "Lumber/Wheat Trading Firm", 10,
        "You get $1/unit of Wood or Wheat that is sold by any player.",
        trading_firm_commodities=(WOOD, WHEAT),
    ),
    BuildingTile(
        "goods-luxury-trading-firm", "Goods/Luxury Trading Firm", 10,
        "You get $1/unit of Goods or Luxury that is sold by any player.",
        trading_firm_commodities=(GOODS, LUXURY),
    ),
    BuildingTile(
        "coal-iron-trading-firm", "Coal/Iron Trading Firm", 10,
        "You get $1/unit of Coal or Iron that is sold by any player.",
        trading_firm_commodities=(COAL, IRON),
    ),
    BuildingTile(
        "warehouse-x2", "Warehouse", 10,
        "You may store an extra 3 Commodity Tokens.",
        storage_bonus=3,
    ),
    BuildingTile(
        "construction-company", "Construction Company", 20,
        "You may perform two Purchase Building actions in one turn.",
        extra_building_purchase=True,
    ),
    BuildingTile(
        "freight-company", "Freight Company", 25,
        "You may sell 2 Commodities in one turn.",
        extra_sell_action=True,
    ),
    BuildingTile(
        "governors-mansion", "Governor's Mansion", 30,
        "Each Town Card you own is worth +1 VP at the end of the game.",
        vp_per_town=1,
    ),
    BuildingTile(
        "rail-baron", "Rail Baron", 30,
        "Each of your Railroad Cards is worth +1 VP at the end of the game.",
        vp_per_railroad=1,
    ),
    BuildingTile(
        "bank", "Bank", 30,
        "Each $20 that you have at the end of the game is worth +1 VP.",
        vp_per_20_money=1,
    ),
    BuildingTile(
        "auction-house", "Auction House", 15,
        "You get $5 commission for each auction that is held, paid by the bank.",
        auction_commission=5,
    ),
    BuildingTile(
        "smuggler", "Smuggler", 20,
        "Your hand limit of Price & Production cards is increased to 4.",
        hand_size=4,
    ),
    BuildingTile(
        "black-market", "Black Market", 30,
        "Your hand limit of Price & Production cards is increased to 5.",
        hand_size=5,
    ),
    BuildingTile(
        "brick-works", "Brick Works", 25,
        "You may build Towns with one fewer Commodity.",
        town_cost_reduce=1,
    ),
    BuildingTile(
        "mayors-office", "Mayor's Office", 30,
        "Each Building you own is worth +1 VP at the end of the game.",
        vp_per_building=1,
    ),
    BuildingTile(
        "trading-floor", "Trading Floor", 15,
        "When producing, you may also buy any number of one Commodity owned by "
        "one other player at the current market price. They may not refuse.",
        trading_floor=True,
    ),
    BuildingTile(
        "export-company", "Export Company", 30,
        "When selling, you may raise the price by $3 (up to the board maximum).",
        sell_price_bonus=3,
    ),
    BuildingTile(
        "cottage-industry-p", "Cottage Industry (P)", 30,
        "You may produce up to four Commodity Tokens from a Production card.",
        production_limit=4, bp_tag=True,
    ),
    BuildingTile(
        "factory-x2-p", "Factory (P)", 40,
        "You may produce up to five Commodity Tokens from a Production card.",
        production_limit=5, bp_tag=True,
    ),
)

_TILES_BY_ID: Dict[str, BuildingTile] = {t.id: t for t in BUILDING_TILES}

# Level-1 B tiles (7 types); four are dealt per game.
B_LEVEL1_TILES: Tuple[BuildingTile, ...] = tuple(
    t for t in BUILDING_TILES if t.bp_level == 1 and t.bp_upgrade_to_id
)

NON_BP_TILES: Tuple[BuildingTile, ...] = tuple(t for t in BUILDING_TILES if not t.bp_tag)

DOUBLE_POOL_IDS: Tuple[str, ...] = ("warehouse-x2",)
# P tiles shuffled into the stack, with their copy counts
STACK_P_TILES: Tuple[Tuple[str, int], ...] = (("factory-x2-p", 2),)


def get_building_tile_by_id(tile_id: str) -> Optional[BuildingTile]:
    """Look up any building tile by id, including level-2 B sides. None if unknown."""
    return _TILES_BY_ID.get(tile_id)


def create_building_deck_for_game(
    rng: random.Random,
) -> Tuple[Tuple[BuildingTile, ...], Tuple[BuildingTile, ...]]:
    """
    Deal the buildings for one game.

    Returns:
        (initial_offer, building_stack): four random level-1 B tiles, and the
        shuffled stack of non-B/P tiles (double copies included) plus the
        Factory (P) tiles.
    """
    initial_offer = shuffled(B_LEVEL1_TILES, rng)[:INITIAL_B_OFFER_SIZE]

    stack: List[BuildingTile] = []
    for tile in NON_BP_TILES:
        stack.append(tile)
        if tile.id in DOUBLE_POOL_IDS:
            stack.append(tile)
    for tile_id, copies in STACK_P_TILES:
        stack.extend([_TILES_BY_ID[tile_id]] * copies)

    return initial_offer, shuffled(stack, rng)
