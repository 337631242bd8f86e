"""
Rule engine protocol and the shared Blackjack-family pieces.

Every game type is served by an object with the same three capabilities:
start a game, apply a player action, and report results. Engines hold no
per-game state; everything lives on the Game they are handed.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, Iterable, Protocol, Sequence

from ..engine_core.action import Action, ActionResult, ErrorCode
from ..engine_core.cards import Card, Rank
from ..engine_core.state import Game, GameStatus, GameType, NO_ACTIVE_PLAYER

BLACKJACK_TARGET = 21
DEALER_STANDS_ON = 17


class RuleEngine(Protocol):
    """Capabilities every variant provides."""
    game_type: GameType

    def start(self, game: Game) -> ActionResult: ...

    def apply(self, game: Game, action: Action) -> ActionResult: ...

    def results(self, game: Game) -> ActionResult: ...


class Outcome(str, Enum):
    """Per-player result of a Blackjack-family game."""
    BUST = "bust"
    BLACKJACK = "blackjack"
    WIN = "win"
    PUSH = "push"
    LOSE = "lose"


def soft_total(cards: Iterable[Card]) -> int:
    """
    Best total for a hand: aces count 11 and drop to 1 one at a time
    while the hand would otherwise bust.
    """
    total = 0
    aces = 0
    for card in cards:
        total += card.blackjack_value
        if card.rank == Rank.ACE:
            aces += 1
    while aces > 0 and total > BLACKJACK_TARGET:
        total -= 10
        aces -= 1
    return total


def decide_outcome(
    player_value: int,
    player_busted: bool,
    player_blackjack: bool,
    dealer_value: int,
    dealer_blackjack: bool,
) -> Outcome:
    """
    Settle one player against the dealer.

    Checks run in order: bust, natural against a non-natural dealer,
    dealer bust, then the totals.
    """
    if player_busted:
        return Outcome.BUST
    if player_blackjack and not dealer_blackjack:
        return Outcome.BLACKJACK
    if dealer_value > BLACKJACK_TARGET:
        return Outcome.WIN
    if player_value > dealer_value:
        return Outcome.WIN
    if player_value == dealer_value:
        return Outcome.PUSH
    return Outcome.LOSE


def play_dealer(
    game: Game,
    hole_index: int,
    hand_value: Callable[[Sequence[Card]], int],
) -> int:
    """
    Run the dealer's automatic turn and return the dealer's final total.

    Reveals the hole card, draws face up while the total is below 17,
    and stops early if the deck runs out.
    """
    dealer = game.dealer
    if 0 <= hole_index < len(dealer.hand):
        dealer.hand[hole_index].face_up = True

    value = hand_value(dealer.hand)
    while value < DEALER_STANDS_ON:
        if game.deal_to_player(dealer.player_id, face_up=True) is None:
            break
        value = hand_value(dealer.hand)

    dealer.busted = value > BLACKJACK_TARGET
    dealer.standing = not dealer.busted
    game.finish()
    game.current_player = NO_ACTIVE_PLAYER
    return value


def require_status(game: Game, status: GameStatus, message: str) -> ActionResult | None:
    """Return a WRONG_PHASE failure unless the game is in `status`."""
    if game.status != status:
        return ActionResult.failure(message, ErrorCode.WRONG_PHASE, game=game)
    return None
