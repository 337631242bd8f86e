"""
Glitchjack - Blackjack played with a randomly composed deck.

Differences from Blackjack:
- Every deck is 52 cards drawn at random from the standard set, so a
  shoe may hold five Aces of Hearts and no sevens at all
- Opening deal: all players, dealer (face up), all players, dealer hole card
- Strict turn order: only the player at the cursor may act, and after each
  move the cursor skips players who are standing or busted
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random
from typing import Sequence

from ..engine_core.action import Action, ActionType, ActionResult, ErrorCode
from ..engine_core.cards import Card, DeckType
from ..engine_core.deck import Deck
from ..engine_core.state import DEALER_ID, Game, GameStatus, GameType, Player
from .base import BLACKJACK_TARGET, Outcome, decide_outcome, play_dealer, require_status, soft_total

logger = logging.getLogger(__name__)

# The dealer's second card is the hole card
HOLE_CARD_INDEX = 1


def glitchjack_hand_value(cards: Sequence[Card]) -> int:
    """
    Hand total for Glitchjack.

    Duplicate cards are just cards: each is scored on its rank, with the
    usual flexible aces.
    """
    return soft_total(cards)


def is_glitchjack_blackjack(cards: Sequence[Card]) -> bool:
    return len(cards) == 2 and glitchjack_hand_value(cards) == BLACKJACK_TARGET


def new_glitchjack_deck(num_decks: int = 1, rng: random.Random | None = None) -> Deck:
    """Build `num_decks` random decks, concatenated and shuffled."""
    return Deck.create(num_decks, DeckType.GLITCH, rng=rng)


@dataclass
class GlitchjackRules:
    """Stateless Glitchjack engine."""
    game_type: GameType = GameType.GLITCHJACK

    def start(self, game: Game) -> ActionResult:
        """Clear the table and deal the opening hands, players before dealer."""
        error = require_status(game, GameStatus.WAITING, "Game already started")
        if error:
            return error
        if not game.players:
            return ActionResult.failure("No players in game", ErrorCode.NO_PLAYERS, game=game)

        game.reset_hands()

        for dealer_face_up in (True, False):
            for player in game.players:
                if game.deal_to_player(player.player_id, face_up=True) is None:
                    return self._exhausted(game, "Not enough cards in deck")
            if game.deal_to_player(DEALER_ID, face_up=dealer_face_up) is None:
                return self._exhausted(game, "Not enough cards for dealer")

        game.start()
        game.current_player = 0

        logger.info("Glitchjack game %s started with %d player(s)", game.game_id, game.num_players)
        return ActionResult.ok(game, message="Glitchjack game started")

    def apply(self, game: Game, action: Action) -> ActionResult:
        """Validate turn order, then hit or stand."""
        if action.action_type not in (ActionType.HIT, ActionType.STAND):
            return ActionResult.failure(
                f"Glitchjack does not support {action.action_type.value}",
                ErrorCode.UNSUPPORTED_ACTION,
                game=game,
            )

        error = require_status(game, GameStatus.IN_PROGRESS, "Game not in progress")
        if error:
            return error

        player = game.get_player(action.player_id or "")
        if player is None or player.is_dealer:
            return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)

        validation_error = self._validate_turn(game, player)
        if validation_error:
            return validation_error

        if action.action_type == ActionType.HIT:
            return self._handle_hit(game, player)
        return self._handle_stand(game, player)

    def results(self, game: Game) -> ActionResult:
        """Settle every player against the dealer. Only valid once finished."""
        error = require_status(game, GameStatus.FINISHED, "Game not finished")
        if error:
            return error

        dealer_value = glitchjack_hand_value(game.dealer.hand)
        dealer_blackjack = is_glitchjack_blackjack(game.dealer.hand)

        outcomes: dict[str, Outcome] = {}
        for player in game.players:
            outcomes[player.player_id] = decide_outcome(
                player_value=glitchjack_hand_value(player.hand),
                player_busted=player.busted,
                player_blackjack=is_glitchjack_blackjack(player.hand),
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

    def _validate_turn(self, game: Game, player: Player) -> ActionResult | None:
        """
        The player must still be in the hand and sit at the cursor.

        The check compares IDs at the cursor index, so removing a seat
        mid-hand shifts whose turn it is.
        """
        if player.standing or player.busted:
            return ActionResult.failure(
                "Player already finished", ErrorCode.PLAYER_FINISHED, game=game, player=player
            )
        active = game.active_player
        if active is None or active.player_id != player.player_id:
            return ActionResult.failure(
                "Not player's turn", ErrorCode.NOT_YOUR_TURN, game=game, player=player
            )
        return None

    def _handle_hit(self, game: Game, player: Player) -> ActionResult:
        card = game.deal_to_player(player.player_id, face_up=True)
        if card is None:
            return ActionResult.failure(
                "No cards left in deck", ErrorCode.DECK_EXHAUSTED, game=game, player=player
            )

        value = glitchjack_hand_value(player.hand)
        if value > BLACKJACK_TARGET:
            player.busted = True
            self._advance_to_next_player(game)

        return ActionResult.ok(
            game,
            player=player,
            card=card,
            data={"hand_value": value, "busted": player.busted},
        )

    def _handle_stand(self, game: Game, player: Player) -> ActionResult:
        player.standing = True
        self._advance_to_next_player(game)
        return ActionResult.ok(
            game,
            player=player,
            data={"hand_value": glitchjack_hand_value(player.hand)},
        )

    def _advance_to_next_player(self, game: Game) -> None:
        """Move to the next player still in the hand, or play the dealer."""
        for i in range(game.current_player + 1, game.num_players):
            candidate = game.players[i]
            if not candidate.standing and not candidate.busted:
                game.current_player = i
                return

        dealer_value = play_dealer(game, HOLE_CARD_INDEX, glitchjack_hand_value)
        logger.info("Glitchjack game %s finished, dealer total %d", game.game_id, dealer_value)

    def _exhausted(self, game: Game, message: str) -> ActionResult:
        logger.warning("Deck exhausted while dealing game %s", game.game_id)
        return ActionResult.failure(message, ErrorCode.DECK_EXHAUSTED, game=game)
