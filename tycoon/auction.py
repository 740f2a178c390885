"""
Railroad auctions.

The player who starts an auction places the minimum bid and opens the
bidding. Players then bid or pass in seat order until at most one bidder
remains. Whatever the outcome, control returns to the starter afterwards.
"""

import logging
from dataclasses import replace

from tycoon.exceptions import IllegalActionError
from tycoon.game import (
    AuctionResult,
    GameState,
    Phase,
    as_amount,
    lenient,
    pick,
    require_phase,
    require_turn_open,
)
from tycoon.player import get_effective_buildings

logger = logging.getLogger(__name__)


def open_auction(state: GameState, railroad_index: int) -> GameState:
    """Put a railroad from the offer up for auction."""
    require_phase(state, Phase.PLAYING)
    require_turn_open(state, "startAuction")
    if state.auction_railroad is not None:
        raise IllegalActionError("an auction is already running")
    card = pick(state.railroad_offer, railroad_index, "railroad in offer")
    starter = state.current_player_index
    if state.players[starter].money < card.min_bid:
        raise IllegalActionError(f"cannot afford minimum bid of ${card.min_bid}")

    players = []
    for player in state.players:
        house = next(
            (b for b in get_effective_buildings(player) if b.auction_commission is not None),
            None,
        )
        if house is not None:
            player = replace(player, money=player.money + house.auction_commission)
        players.append(player)

    return replace(
        state,
        players=tuple(players),
        phase=Phase.AUCTION,
        auction_railroad=card,
        auction_starter_index=starter,
        auction_bids=tuple(card.min_bid if i == starter else 0 for i in range(state.num_players)),
        auction_passed=(False,) * state.num_players,
        action_taken_this_turn=True,
    )


def bid(state: GameState, amount: int) -> GameState:
    """Raise the current bidder's bid and move to the next bidder."""
    require_phase(state, Phase.AUCTION)
    card = state.auction_railroad
    if card is None:
        raise IllegalActionError("no auction running")
    amount = as_amount(amount, "bid")
    index = state.current_player_index
    if amount < card.min_bid:
        raise IllegalActionError(f"bid must be at least ${card.min_bid}")
    if state.players[index].money < amount:
        raise IllegalActionError("cannot afford bid")
    best_other = max(
        (
            b
            for i, (b, passed) in enumerate(zip(state.auction_bids, state.auction_passed))
            if i != index and not passed
        ),
        default=0,
    )
    if amount <= best_other:
        raise IllegalActionError(f"bid must beat ${best_other}")

    bids = list(state.auction_bids)
    bids[index] = amount
    return next_auction_turn(replace(state, auction_bids=tuple(bids)))


def pass_bid(state: GameState) -> GameState:
    """Drop the current bidder out of the auction."""
    require_phase(state, Phase.AUCTION)
    passed = list(state.auction_passed)
    passed[state.current_player_index] = True
    return next_auction_turn(replace(state, auction_passed=tuple(passed)))


def next_auction_turn(state: GameState) -> GameState:
    """
    Resolve the auction if at most one bidder is left, else hand the bid to
    the next player who has not passed.
    """
    still_in = [i for i, passed in enumerate(state.auction_passed) if not passed]
    if len(still_in) > 1:
        index = (state.current_player_index + 1) % state.num_players
        while state.auction_passed[index]:
            index = (index + 1) % state.num_players
        return replace(state, current_player_index=index)

    card = state.auction_railroad
    winner = None
    best = card.min_bid - 1
    for i in still_in:
        if state.auction_bids[i] > best:
            best = state.auction_bids[i]
            winner = i

    starter = state.auction_starter_index
    result = None
    offer = state.railroad_offer
    deck = state.railroad_deck
    if winner is not None:
        player = state.players[winner]
        state = state.with_player(
            winner,
            replace(player, money=player.money - best, railroads=player.railroads + (card,)),
        )
        result = AuctionResult(railroad_name=card.name, winner_index=winner, amount=best)
        offer = tuple(r for r in offer if r.id != card.id)
        if deck:
            offer, deck = offer + deck[:1], deck[1:]
        logger.debug(f"{player.name} won {card.name} for ${best}")
    else:
        logger.debug(f"No winner for {card.name}")

    return replace(
        state,
        phase=Phase.PLAYING,
        railroad_offer=offer,
        railroad_deck=deck,
        auction_railroad=None,
        auction_bids=(),
        auction_passed=(),
        last_auction_result=result,
        current_player_index=starter,
        action_taken_this_turn=winner == starter,
    )


start_auction = lenient(open_auction)
place_bid = lenient(bid)
pass_auction = lenient(pass_bid)
