"""
Player state and derived values.

Every building effect is read through ``get_effective_buildings`` so that
only one B/P building applies per player.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from tycoon.cards import BuildingTile, ProductionCard, RailroadCard, TownCard
from tycoon.config import (
    BASE_HAND_SIZE,
    BASE_PRODUCTION,
    BASE_STORAGE,
    COMMODITIES,
    Commodity,
)


@dataclass(frozen=True)
class PlayerState:
    """Represents the complete state of a player in the game."""

    name: str
    money: int
    commodities: Dict[Commodity, int] = field(default_factory=dict)
    hand: Tuple[ProductionCard, ...] = ()
    railroads: Tuple[RailroadCard, ...] = ()
    towns: Tuple[TownCard, ...] = ()
    buildings: Tuple[BuildingTile, ...] = ()
    active_bp_building_id: Optional[str] = None

    def count(self, commodity: Commodity) -> int:
        """Units of a commodity held (absent means zero)."""
        return self.commodities.get(commodity, 0)

    def owns_building(self, tile_id: str) -> bool:
        return any(b.id == tile_id for b in self.buildings)

    def __repr__(self) -> str:
        return (
            f"PlayerState(name='{self.name}', money={self.money}, "
            f"goods={get_total_commodities(self.commodities)}, hand={len(self.hand)})"
        )


def adjust_commodities(
    commodities: Mapping[Commodity, int], commodity: Commodity, delta: int
) -> Dict[Commodity, int]:
    """Return a new commodity mapping with ``delta`` applied; empty entries are dropped."""
    out = dict(commodities)
    count = out.get(commodity, 0) + delta
    if count > 0:
        out[commodity] = count
    else:
        out.pop(commodity, None)
    return out


def get_effective_buildings(player: PlayerState) -> List[BuildingTile]:
    """
    Buildings whose effects apply: every non-B/P building plus exactly one
    B/P building (the active one if set and owned, else the first owned).
    """
    non_bp = [b for b in player.buildings if not b.bp_tag]
    bp = [b for b in player.buildings if b.bp_tag]
    if not bp:
        return non_bp
    active = next((b for b in bp if b.id == player.active_bp_building_id), bp[0])
    return non_bp + [active]


def get_max_production(player: PlayerState) -> int:
    """Units a player may take from one production card (3, 4 or 5)."""
    tile = next(
        (b for b in get_effective_buildings(player) if b.production_limit is not None),
        None,
    )
    if tile is not None and tile.production_limit in (4, 5):
        return tile.production_limit
    return BASE_PRODUCTION


def get_max_hand_size(player: PlayerState) -> int:
    """Hand limit of production cards (3, 4 or 5)."""
    sizes = [b.hand_size for b in get_effective_buildings(player) if b.hand_size is not None]
    for size in (5, 4):
        if size in sizes:
            return size
    return BASE_HAND_SIZE


def get_max_storage(player: PlayerState) -> int:
    """
    Commodity storage capacity.

    Every owned building adds one slot, storage buildings add their bonus
    on top.
    """
    capacity = BASE_STORAGE + len(player.buildings)
    warehouse = next(
        (b for b in get_effective_buildings(player) if b.storage_bonus is not None),
        None,
    )
    if warehouse is not None:
        capacity += warehouse.storage_bonus
    return capacity


def get_total_commodities(commodities: Mapping[Commodity, int]) -> int:
    """Total units across all commodities."""
    return sum(commodities.get(c, 0) for c in COMMODITIES)


def get_production_list(card: ProductionCard) -> Tuple[Commodity, ...]:
    """Flatten a card's production to one entry per unit, in commodity order."""
    units: List[Commodity] = []
    for c in COMMODITIES:
        units.extend([c] * card.production.get(c, 0))
    return tuple(units)


def get_town_cost_reduce(player: PlayerState) -> int:
    tile = next(
        (b for b in get_effective_buildings(player) if b.town_cost_reduce is not None),
        None,
    )
    return tile.town_cost_reduce if tile is not None else 0
