"""
Victory point scoring and winner selection.
"""

from collections import Counter
from typing import List, NamedTuple, Optional, Sequence

from tycoon.cards import RailroadCard
from tycoon.config import MONEY_PER_VP_STEP, TOWN_RAILROAD_PAIR_BONUS
from tycoon.game import GameState, Phase
from tycoon.player import PlayerState


class PlayerScore(NamedTuple):
    player_index: int
    vp: int
    money: int


def get_railroad_vp(railroads: Sequence[RailroadCard]) -> int:
    """Each type scores its schedule: the k-th copy owned earns ``vp_schedule[k]``."""
    counts = Counter(r.type_id for r in railroads)
    schedules = {}
    for r in railroads:
        schedules.setdefault(r.type_id, r.vp_schedule)
    return sum(sum(schedules[type_id][:count]) for type_id, count in counts.items())


def get_player_vp(player: PlayerState) -> int:
    """
    Total victory points for a player.

    Town VP, railroad schedules, a bonus per town/railroad pair, one point
    per building, then the multipliers of every owned building.
    """
    towns = len(player.towns)
    railroads = len(player.railroads)
    buildings = len(player.buildings)

    vp = sum(t.vp for t in player.towns) + get_railroad_vp(player.railroads)
    vp += TOWN_RAILROAD_PAIR_BONUS * min(towns, railroads)
    vp += buildings
    for b in player.buildings:
        vp += (b.vp_per_town or 0) * towns
        vp += (b.vp_per_railroad or 0) * railroads
        vp += (b.vp_per_20_money or 0) * (player.money // MONEY_PER_VP_STEP)
        vp += (b.vp_per_building or 0) * buildings
    return vp


def compute_scores(state: GameState) -> List[PlayerScore]:
    return [PlayerScore(i, get_player_vp(p), p.money) for i, p in enumerate(state.players)]


def get_winner(state: GameState) -> Optional[int]:
    """Index of the winner once the game is over: most VP, then most money."""
    if state.phase != Phase.GAMEOVER:
        return None
    best = max(compute_scores(state), key=lambda s: (s.vp, s.money, -s.player_index))
    return best.player_index
