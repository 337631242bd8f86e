"""
Blackjack - Dealer against every seated player.

Flow:
1. start: two rounds of cards; players face up, dealer hole card face down
2. hit / stand: players act; each stand moves the cursor on
3. When the cursor passes the last seat, the dealer plays automatically
4. results: bust, blackjack, win, push or lose per player

Hit is not restricted to the player at the cursor; any seated player
may draw while the game is in progress.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Sequence

from ..engine_core.action import Action, ActionType, ActionResult, ErrorCode
from ..engine_core.cards import Card
from ..engine_core.state import DEALER_ID, Game, GameStatus, GameType
from .base import BLACKJACK_TARGET, Outcome, decide_outcome, play_dealer, require_status, soft_total

logger = logging.getLogger(__name__)

# The first card dealt to the dealer stays face down
HOLE_CARD_INDEX = 0


def hand_value(cards: Sequence[Card]) -> tuple[int, bool]:
    """Return (best total, is natural blackjack)."""
    total = soft_total(cards)
    return total, total == BLACKJACK_TARGET and len(cards) == 2


def _total(cards: Sequence[Card]) -> int:
    return hand_value(cards)[0]


@dataclass
class BlackjackRules:
    """
    Stateless Blackjack engine.

    All state is on the Game passed to each call.
    """
    game_type: GameType = GameType.BLACKJACK

    def start(self, game: Game) -> ActionResult:
        """
        Deal the opening hands.

        One card to every player then one to the dealer, twice. If the deck
        runs dry partway the game is left as dealt so far and the call fails.
        """
        error = require_status(game, GameStatus.WAITING, "Game already started")
        if error:
            return error
        if not game.players:
            return ActionResult.failure("No players in game", ErrorCode.NO_PLAYERS, game=game)

        game.start()
        game.current_player = 0

        for round_number in range(2):
            for player in game.players:
                if game.deal_to_player(player.player_id, face_up=True) is None:
                    return self._exhausted(game)
            if game.deal_to_player(DEALER_ID, face_up=round_number > 0) is None:
                return self._exhausted(game)

        logger.info("Blackjack game %s started with %d player(s)", game.game_id, game.num_players)
        return ActionResult.ok(game, message="Blackjack game started")

    def apply(self, game: Game, action: Action) -> ActionResult:
        """Apply a hit or stand."""
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"Blackjack does not support {action.action_type.value}",
                ErrorCode.UNSUPPORTED_ACTION,
                game=game,
            )
        return handler(game, action)

    def results(self, game: Game) -> ActionResult:
        """Settle every player against the dealer. Only valid once finished."""
        error = require_status(game, GameStatus.FINISHED, "Game not finished")
        if error:
            return error

        dealer_value, dealer_blackjack = hand_value(game.dealer.hand)
        outcomes: dict[str, Outcome] = {}
        for player in game.players:
            value, blackjack = hand_value(player.hand)
            outcomes[player.player_id] = decide_outcome(
                player_value=value,
                player_busted=player.busted or value > BLACKJACK_TARGET,
                player_blackjack=blackjack,
                dealer_value=dealer_value,
                dealer_blackjack=dealer_blackjack,
            )

        return ActionResult.ok(
            game,
            data={
                "results": outcomes,
                "dealer_value": dealer_value,
                "dealer_blackjack": dealer_blackjack,
            },
        )

    def _get_handler(self, action_type: ActionType):
        handlers = {
            ActionType.HIT: self._handle_hit,
            ActionType.STAND: self._handle_stand,
        }
        return handlers.get(action_type)

    def _handle_hit(self, game: Game, action: Action) -> ActionResult:
        player = game.get_player(action.player_id or "")
        if player is None or player.is_dealer:
            return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)

        error = require_status(game, GameStatus.IN_PROGRESS, "Game is not in progress")
        if error:
            return error

        card = game.deal_to_player(player.player_id, face_up=True)
        if card is None:
            return ActionResult.failure(
                "No cards remaining in deck", ErrorCode.DECK_EXHAUSTED, game=game, player=player
            )

        value, _ = hand_value(player.hand)
        if value > BLACKJACK_TARGET:
            player.busted = True

        return ActionResult.ok(
            game,
            player=player,
            card=card,
            data={"hand_value": value, "busted": player.busted},
        )

    def _handle_stand(self, game: Game, action: Action) -> ActionResult:
        player = game.get_player(action.player_id or "")
        if player is None or player.is_dealer:
            return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)

        error = require_status(game, GameStatus.IN_PROGRESS, "Game is not in progress")
        if error:
            return error

        player.standing = True
        game.current_player += 1
        if game.current_player >= game.num_players:
            dealer_value = play_dealer(game, HOLE_CARD_INDEX, _total)
            logger.info("Blackjack game %s finished, dealer total %d", game.game_id, dealer_value)

        return ActionResult.ok(game, player=player, data={"hand_value": _total(player.hand)})

    def _exhausted(self, game: Game) -> ActionResult:
        logger.warning("Deck exhausted while dealing game %s", game.game_id)
        return ActionResult.failure("Not enough cards in deck", ErrorCode.DECK_EXHAUSTED, game=game)
