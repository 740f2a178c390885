"""
Main game engine and state transitions.

``GameState`` is immutable: every rule below takes a state and returns a
new one. Strict rules raise ``IllegalActionError`` with a reason; the
``action_*`` functions wrap them so that an illegal action returns the
input state unchanged.
"""

import functools
import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from tycoon.cards import (
    BuildingTile,
    ProductionCard,
    RailroadCard,
    TownCard,
    create_building_deck_for_game,
    create_production_deck,
    create_railroad_deck,
    create_town_deck,
    get_building_tile_by_id,
    shuffled,
)
from tycoon.config import (
    BUILDING_OFFER_SIZE,
    COMMODITIES,
    COMMODITY_PRICE_MAX,
    COMMODITY_PRICE_MIN,
    INITIAL_MARKET,
    MAX_PLAYERS,
    MIN_PLAYERS,
    RAILROAD_OFFER_SIZE,
    Commodity,
    GameConfig,
)
from tycoon.exceptions import IllegalActionError
from tycoon.player import (
    PlayerState,
    adjust_commodities,
    get_effective_buildings,
    get_max_hand_size,
    get_max_production,
    get_max_storage,
    get_production_list,
    get_total_commodities,
    get_town_cost_reduce,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Phase(str, Enum):
    """Phases of the turn state machine."""

    PLAYING = "playing"
    AUCTION = "auction"
    DISCARD_DOWN = "discardDown"
    GAMEOVER = "gameover"


@dataclass(frozen=True)
class AuctionResult:
    """Outcome of the auction that just resolved, kept for log consumers."""

    railroad_name: str
    winner_index: int
    amount: int


@dataclass(frozen=True)
class TradingFloorPurchase:
    """Forced purchase made with a Trading Floor before producing."""

    from_player_index: int
    commodity: Commodity
    quantity: int


@dataclass(frozen=True)
class GameState:
    """
    Represents the complete state of a game.

    Player index is identity. ``auction_railroad`` is set exactly while the
    phase is ``AUCTION``.
    """

    phase: Phase
    players: Tuple[PlayerState, ...]
    current_player_index: int
    market: Dict[Commodity, int]
    production_deck: Tuple[ProductionCard, ...]
    production_discard: Tuple[ProductionCard, ...]
    railroad_deck: Tuple[RailroadCard, ...]
    railroad_offer: Tuple[RailroadCard, ...]
    town_deck: Tuple[TownCard, ...]
    current_town: Optional[TownCard]
    building_stack: Tuple[BuildingTile, ...]
    building_offer: Tuple[BuildingTile, ...]
    num_players: int
    rng_seed: int = 0

    # Auction sub-state
    auction_railroad: Optional[RailroadCard] = None
    auction_starter_index: int = 0
    auction_bids: Tuple[int, ...] = ()
    auction_passed: Tuple[bool, ...] = ()
    last_auction_result: Optional[AuctionResult] = None

    # Turn bookkeeping
    action_taken_this_turn: bool = False
    pending_draw_count: int = 0
    building_purchases_this_turn: int = 0
    sell_actions_this_turn: int = 0

    def get_current_player(self) -> PlayerState:
        """Get the player the game is waiting for."""
        return self.players[self.current_player_index]

    def with_player(self, index: int, player: PlayerState) -> "GameState":
        """Return a copy with one player replaced."""
        players = list(self.players)
        players[index] = player
        return replace(self, players=tuple(players))

    def with_current_player(self, player: PlayerState) -> "GameState":
        return self.with_player(self.current_player_index, player)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def _starting_commodities(num_players: int) -> List[Dict[Commodity, int]]:
    """
    Player i is owed i + 1 units, one each of distinct commodities.

    Commodities are handed out once each, in enumeration order. Once all
    six are gone later players get nothing, so no two players share one.
    """
    remaining = list(COMMODITIES)
    result: List[Dict[Commodity, int]] = []
    for index in range(num_players):
        owned = {c: 1 for c in remaining[: index + 1]}
        del remaining[: index + 1]
        result.append(owned)
    return result


def init_game(
    num_players: int, names: Sequence[str], config: Optional[GameConfig] = None
) -> GameState:
    """
    Create the initial state for a new game.

    Args:
        num_players: Number of players, 2 to 5
        names: Player names in seat order (extra names are ignored)
        config: Optional configuration (starting money, seed)

    Returns:
        The first state, in the ``PLAYING`` phase with player 0 to act
    """
    if not MIN_PLAYERS <= num_players <= MAX_PLAYERS:
        raise ValueError(f"Game requires {MIN_PLAYERS}-{MAX_PLAYERS} players, got {num_players}")
    if len(names) < num_players:
        raise ValueError("Every player needs a name")

    config = config or GameConfig()
    rng = random.Random(config.seed)

    production_deck = list(create_production_deck(rng))
    hand_size = config.starting_hand_size
    players = []
    for index, commodities in enumerate(_starting_commodities(num_players)):
        hand = tuple(production_deck[:hand_size])
        del production_deck[:hand_size]
        players.append(
            PlayerState(
                name=names[index],
                money=config.starting_money,
                commodities=commodities,
                hand=hand,
            )
        )

    railroad_deck = create_railroad_deck(num_players, rng)
    town_deck = create_town_deck(num_players, rng)
    building_offer, building_stack = create_building_deck_for_game(rng)

    state = GameState(
        phase=Phase.PLAYING,
        players=tuple(players),
        current_player_index=0,
        market=dict(INITIAL_MARKET),
        production_deck=tuple(production_deck),
        production_discard=(),
        railroad_deck=railroad_deck[RAILROAD_OFFER_SIZE:],
        railroad_offer=railroad_deck[:RAILROAD_OFFER_SIZE],
        town_deck=town_deck[1:],
        current_town=town_deck[0] if town_deck else None,
        building_stack=building_stack,
        building_offer=building_offer,
        num_players=num_players,
        rng_seed=rng.getrandbits(32),
    )
    logger.info(f"Initialized {num_players}-player game (seed={config.seed})")
    return state


# ---------------------------------------------------------------------------
# Shared validation helpers
# ---------------------------------------------------------------------------


def lenient(rule: Callable[..., GameState]) -> Callable[..., GameState]:
    """Wrap a strict rule so an illegal action returns the input state unchanged."""

    @functools.wraps(rule)
    def wrapper(state: GameState, *args, **kwargs) -> GameState:
        try:
            return rule(state, *args, **kwargs)
        except IllegalActionError as exc:
            logger.debug(f"Rejected {rule.__name__}: {exc}")
            return state

    return wrapper


def require_phase(state: GameState, phase: Phase) -> None:
    if state.phase != phase:
        raise IllegalActionError(f"not allowed in phase '{state.phase.value}'")


def require_turn_open(state: GameState, kind: str) -> None:
    """
    Check the one-action-per-turn gate.

    A Freight Company or Construction Company keeps the turn open after the
    first sell or purchase, but only for a second action of the same kind.
    """
    if state.action_taken_this_turn:
        raise IllegalActionError("action already taken this turn")
    if state.sell_actions_this_turn and kind != "sell":
        raise IllegalActionError("only a second sell is allowed this turn")
    if state.building_purchases_this_turn and kind != "buyBuilding":
        raise IllegalActionError("only a second building purchase is allowed this turn")


def pick(items: Sequence[T], index: object, what: str) -> T:
    """Return ``items[index]`` for a valid non-negative index."""
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
        raise IllegalActionError(f"no {what} at index {index!r}")
    return items[index]


def as_commodity(value: Union[Commodity, str]) -> Commodity:
    try:
        return Commodity(value)
    except ValueError:
        raise IllegalActionError(f"unknown commodity {value!r}") from None


def as_amount(value: object, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise IllegalActionError(f"{what} must be an integer")
    return value


def _raise_price(market: Mapping[Commodity, int], commodity: Commodity) -> Dict[Commodity, int]:
    out = dict(market)
    out[commodity] = min(COMMODITY_PRICE_MAX[commodity], out[commodity] + 1)
    return out


def draw_cards(state: GameState, player_index: int, count: int) -> GameState:
    """
    Draw production cards into a player's hand.

    An empty deck is rebuilt by shuffling the discard pile with the state's
    seed, so the draw is deterministic given the state. Drawing stops at
    the hand limit or when both piles are empty.
    """
    player = state.players[player_index]
    deck = list(state.production_deck)
    discard = list(state.production_discard)
    hand = list(player.hand)
    seed = state.rng_seed
    room = max(0, get_max_hand_size(player) - len(hand))

    for _ in range(min(count, room)):
        if not deck:
            if not discard:
                break
            rng = random.Random(seed)
            deck = list(shuffled(discard, rng))
            discard = []
            seed = rng.getrandbits(32)
            logger.debug(f"Reshuffled {len(deck)} production cards into the deck")
        hand.append(deck.pop(0))

    state = replace(
        state,
        production_deck=tuple(deck),
        production_discard=tuple(discard),
        rng_seed=seed,
    )
    return state.with_player(player_index, replace(player, hand=tuple(hand)))


# ---------------------------------------------------------------------------
# Production
# ---------------------------------------------------------------------------


def _trading_floor_buy(state: GameState, purchase: TradingFloorPurchase) -> GameState:
    buyer_index = state.current_player_index
    buyer = state.players[buyer_index]
    if not any(b.trading_floor for b in get_effective_buildings(buyer)):
        raise IllegalActionError("Trading Floor purchase requires a Trading Floor")

    seller_index = purchase.from_player_index
    if seller_index == buyer_index:
        raise IllegalActionError("cannot buy from yourself")
    seller = pick(state.players, seller_index, "player")
    commodity = as_commodity(purchase.commodity)
    quantity = as_amount(purchase.quantity, "quantity")
    if quantity > seller.count(commodity):
        raise IllegalActionError("seller does not hold that many units")

    # Current price, before the production card raises it
    cost = state.market[commodity] * quantity
    if buyer.money < cost:
        raise IllegalActionError("cannot afford Trading Floor purchase")

    seller = replace(
        seller,
        money=seller.money + cost,
        commodities=adjust_commodities(seller.commodities, commodity, -quantity),
    )
    buyer = replace(
        buyer,
        money=buyer.money - cost,
        commodities=adjust_commodities(buyer.commodities, commodity, quantity),
    )
    return state.with_player(seller_index, seller).with_player(buyer_index, buyer)


def _units_to_take(
    card: ProductionCard, max_production: int, requested: Optional[Sequence[Commodity]]
) -> List[Commodity]:
    """Units granted by a card: an explicit pick of exactly the limit, else the first units."""
    if requested and len(requested) == max_production:
        chosen = [as_commodity(c) for c in requested]
        for c in COMMODITIES:
            if chosen.count(c) > card.production.get(c, 0):
                raise IllegalActionError(f"card does not produce that much {c.value}")
        return chosen
    return list(get_production_list(card)[:max_production])


def produce(
    state: GameState,
    card_index: int,
    commodities_to_take: Optional[Sequence[Commodity]] = None,
    trading_floor_purchase: Optional[TradingFloorPurchase] = None,
) -> GameState:
    """Play a production card from the current player's hand."""
    require_phase(state, Phase.PLAYING)
    require_turn_open(state, "production")
    card = pick(state.get_current_player().hand, card_index, "card in hand")

    if trading_floor_purchase is not None and as_amount(trading_floor_purchase.quantity, "quantity") > 0:
        state = _trading_floor_buy(state, trading_floor_purchase)

    player = state.get_current_player()
    take = _units_to_take(card, get_max_production(player), commodities_to_take)

    commodities = dict(player.commodities)
    buildings = get_effective_buildings(player)
    bonus_tile = next((b for b in buildings if b.commodity_bonus is not None), None)
    if bonus_tile is not None:
        commodities = adjust_commodities(
            commodities, bonus_tile.commodity_bonus, bonus_tile.bonus_value or 1
        )
    any_tile = next((b for b in buildings if b.any_commodity_bonus), None)
    if any_tile is not None:
        # Players do not pick: the bonus is always the first commodity
        commodities = adjust_commodities(commodities, COMMODITIES[0], any_tile.any_commodity_bonus)
    for c in take:
        commodities = adjust_commodities(commodities, c, 1)

    market = dict(state.market)
    for c in card.price_increase:
        market = _raise_price(market, c)

    hand = player.hand[:card_index] + player.hand[card_index + 1:]
    state = state.with_current_player(replace(player, commodities=commodities, hand=hand))
    return replace(
        state,
        market=market,
        production_discard=state.production_discard + (card,),
        action_taken_this_turn=True,
        pending_draw_count=state.pending_draw_count + 1,
    )


# ---------------------------------------------------------------------------
# Market
# ---------------------------------------------------------------------------


def sell(
    state: GameState,
    commodity: Commodity,
    quantity: int,
    use_export_company: bool = False,
) -> GameState:
    """
    Sell up to ``quantity`` units of a commodity to the market.

    The quantity is clamped to holdings. Trading Firm owners other than the
    seller earn $1 per unit sold.
    """
    require_phase(state, Phase.PLAYING)
    require_turn_open(state, "sell")
    commodity = as_commodity(commodity)
    seller_index = state.current_player_index
    player = state.get_current_player()
    sold = min(as_amount(quantity, "quantity"), player.count(commodity))
    if sold <= 0:
        raise IllegalActionError(f"no {commodity.value} to sell")

    price = state.market[commodity]
    buildings = get_effective_buildings(player)
    if use_export_company:
        export = next((b for b in buildings if b.sell_price_bonus is not None), None)
        if export is not None:
            price = min(COMMODITY_PRICE_MAX[commodity], price + export.sell_price_bonus)

    market = dict(state.market)
    market[commodity] = max(COMMODITY_PRICE_MIN[commodity], market[commodity] - sold)

    sell_count = state.sell_actions_this_turn + 1
    has_freight = any(b.extra_sell_action for b in buildings)

    state = state.with_current_player(
        replace(
            player,
            money=player.money + price * sold,
            commodities=adjust_commodities(player.commodities, commodity, -sold),
        )
    )
    for index, other in enumerate(state.players):
        if index == seller_index:
            continue
        if any(commodity in b.trading_firm_commodities for b in get_effective_buildings(other)):
            state = state.with_player(index, replace(other, money=other.money + sold))

    return replace(
        state,
        market=market,
        sell_actions_this_turn=sell_count,
        action_taken_this_turn=not (has_freight and sell_count < 2),
    )


def discard(state: GameState, commodity: Commodity) -> GameState:
    """Drop one unit while over storage capacity; play resumes once back within it."""
    require_phase(state, Phase.DISCARD_DOWN)
    commodity = as_commodity(commodity)
    player = state.get_current_player()
    if player.count(commodity) <= 0:
        raise IllegalActionError(f"no {commodity.value} to discard")

    player = replace(player, commodities=adjust_commodities(player.commodities, commodity, -1))
    state = state.with_current_player(player)
    if get_total_commodities(player.commodities) <= get_max_storage(player):
        state = replace(state, phase=Phase.PLAYING)
    return state


# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------


def buy_building(state: GameState, building_index: int) -> GameState:
    """Buy a building from the offer."""
    require_phase(state, Phase.PLAYING)
    require_turn_open(state, "buyBuilding")
    tile = pick(state.building_offer, building_index, "building in offer")
    player = state.get_current_player()
    if player.money < tile.cost:
        raise IllegalActionError(f"cannot afford {tile.name}")

    active_id = player.active_bp_building_id
    if tile.bp_tag and active_id is None:
        active_id = tile.id
    player = replace(
        player,
        money=player.money - tile.cost,
        buildings=player.buildings + (tile,),
        active_bp_building_id=active_id,
    )
    purchases = state.building_purchases_this_turn + 1
    has_construction = any(b.extra_building_purchase for b in get_effective_buildings(player))

    state = replace(
        state.with_current_player(player),
        building_offer=state.building_offer[:building_index] + state.building_offer[building_index + 1:],
        building_purchases_this_turn=purchases,
        action_taken_this_turn=not (has_construction and purchases < 2),
    )
    if tile.hand_size is not None:
        # A larger hand limit is filled right away
        state = draw_cards(state, state.current_player_index, get_max_hand_size(player) - len(player.hand))
    return state


def upgrade_b_building(state: GameState, building_id: str) -> GameState:
    """Flip an owned level-1 B building to its level-2 side, in place."""
    require_phase(state, Phase.PLAYING)
    require_turn_open(state, "upgradeBBuilding")
    player = state.get_current_player()
    position = next((i for i, b in enumerate(player.buildings) if b.id == building_id), None)
    if position is None:
        raise IllegalActionError(f"building {building_id!r} not owned")
    building = player.buildings[position]
    if not building.bp_tag or building.bp_level != 1 or not building.bp_upgrade_to_id:
        raise IllegalActionError(f"{building.name} cannot be upgraded")
    upgrade_cost = building.upgrade_cost or 0
    if player.money < upgrade_cost:
        raise IllegalActionError(f"cannot afford upgrade of {building.name}")
    level2 = get_building_tile_by_id(building.bp_upgrade_to_id)
    if level2 is None:
        raise IllegalActionError(f"unknown upgrade target {building.bp_upgrade_to_id!r}")

    buildings = list(player.buildings)
    buildings[position] = level2
    active_id = player.active_bp_building_id
    if active_id == building_id:
        active_id = level2.id
    player = replace(
        player,
        money=player.money - upgrade_cost,
        buildings=tuple(buildings),
        active_bp_building_id=active_id,
    )
    return replace(state.with_current_player(player), action_taken_this_turn=True)


def set_active_bp_building(state: GameState, building_id: str) -> GameState:
    """Choose which owned B/P building is effective. Free, and allowed at any time."""
    if state.phase == Phase.GAMEOVER:
        raise IllegalActionError("game is over")
    player = state.get_current_player()
    building = next((b for b in player.buildings if b.id == building_id), None)
    if building is None or not building.bp_tag:
        raise IllegalActionError(f"no owned B/P building {building_id!r}")
    return state.with_current_player(replace(player, active_bp_building_id=building_id))


# ---------------------------------------------------------------------------
# Towns
# ---------------------------------------------------------------------------


def _pay_specific(player: PlayerState, town: TownCard, reduce: int) -> Dict[Commodity, int]:
    if not town.cost_specific:
        raise IllegalActionError(f"{town.name} has no specific cost")
    commodities = dict(player.commodities)
    for c in COMMODITIES:
        need = max(0, town.cost_specific.get(c, 0) - reduce)
        if need > player.count(c):
            raise IllegalActionError(f"not enough {c.value} for {town.name}")
        commodities = adjust_commodities(commodities, c, -need)
    return commodities


def _pay_any(
    player: PlayerState,
    town: TownCard,
    reduce: int,
    commodities_to_spend: Optional[Mapping[Commodity, int]],
) -> Dict[Commodity, int]:
    if town.cost_any <= 0:
        raise IllegalActionError(f"{town.name} has no any-commodity cost")
    need = max(0, town.cost_any - reduce)
    commodities = dict(player.commodities)

    if commodities_to_spend is not None:
        spend = {as_commodity(c): as_amount(n, "amount") for c, n in commodities_to_spend.items()}
        if any(n < 0 for n in spend.values()) or sum(spend.values()) != need:
            raise IllegalActionError(f"must spend exactly {need} commodities")
        for c, n in spend.items():
            if n > player.count(c):
                raise IllegalActionError(f"not enough {c.value}")
            commodities = adjust_commodities(commodities, c, -n)
        return commodities

    # No mix given: drain in commodity order
    left = need
    for c in COMMODITIES:
        used = min(left, commodities.get(c, 0))
        commodities = adjust_commodities(commodities, c, -used)
        left -= used
    if left > 0:
        raise IllegalActionError(f"not enough commodities for {town.name}")
    return commodities


def buy_town(
    state: GameState,
    use_specific: bool,
    commodities_to_spend: Optional[Mapping[Commodity, int]] = None,
) -> GameState:
    """Buy the current town with its specific cost or with any mix of commodities."""
    require_phase(state, Phase.PLAYING)
    require_turn_open(state, "buyTown")
    town = state.current_town
    if town is None:
        raise IllegalActionError("no town available")

    player = state.get_current_player()
    reduce = get_town_cost_reduce(player)
    if use_specific:
        commodities = _pay_specific(player, town, reduce)
    else:
        commodities = _pay_any(player, town, reduce, commodities_to_spend)

    player = replace(player, commodities=commodities, towns=player.towns + (town,))
    return replace(
        state.with_current_player(player),
        current_town=state.town_deck[0] if state.town_deck else None,
        town_deck=state.town_deck[1:],
        action_taken_this_turn=True,
    )


# ---------------------------------------------------------------------------
# End of turn
# ---------------------------------------------------------------------------


def is_game_end_triggered(state: GameState) -> bool:
    """Railroads or towns are exhausted."""
    railroads_gone = not state.railroad_deck and not state.railroad_offer
    towns_gone = not state.town_deck and state.current_town is None
    return railroads_gone or towns_gone


def end_turn(state: GameState) -> GameState:
    """
    End the current player's turn.

    Checks the game-end triggers first. Otherwise draws the owed cards,
    enters discard-down if the player is over capacity (without advancing),
    or refills the building offer and passes the turn on.
    """
    if state.phase == Phase.GAMEOVER:
        raise IllegalActionError("game is over")
    if is_game_end_triggered(state):
        logger.info("Game over: railroad or town supply exhausted")
        return replace(state, phase=Phase.GAMEOVER)
    require_phase(state, Phase.PLAYING)

    index = state.current_player_index
    state = draw_cards(replace(state, pending_draw_count=0), index, state.pending_draw_count)

    player = state.players[index]
    if get_total_commodities(player.commodities) > get_max_storage(player):
        return replace(state, phase=Phase.DISCARD_DOWN)

    refill = BUILDING_OFFER_SIZE - len(state.building_offer)
    offer = state.building_offer + state.building_stack[:max(0, refill)]
    stack = state.building_stack[max(0, refill):]

    return replace(
        state,
        building_offer=offer,
        building_stack=stack,
        current_player_index=(index + 1) % state.num_players,
        action_taken_this_turn=False,
        building_purchases_this_turn=0,
        sell_actions_this_turn=0,
    )


def clear_last_auction_result(state: GameState) -> GameState:
    """Drop the transient auction outcome once it has been logged."""
    if state.last_auction_result is None:
        return state
    return replace(state, last_auction_result=None)


# Lenient forms: illegal actions return the input state unchanged

action_production = lenient(produce)
action_sell = lenient(sell)
action_discard = lenient(discard)
action_buy_building = lenient(buy_building)
action_upgrade_b_building = lenient(upgrade_b_building)
action_set_active_bp_building = lenient(set_active_bp_building)
action_buy_town = lenient(buy_town)
action_end_turn = lenient(end_turn)
