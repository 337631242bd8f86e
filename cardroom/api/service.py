"""
Game Service - Business logic layer between the transport and the engine.

The service:
1. Looks games up in the registry
2. Holds the game's lock while it is mutated
3. Picks the rule engine for the game's type
4. Returns an ActionResult for every call

This layer is framework-agnostic; the FastAPI app is one consumer, the
CLI is another.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import time

from ..engine_core.action import Action, ActionResult, ErrorCode
from ..engine_core.cards import DeckType
from ..engine_core.state import Game, GameType, DEFAULT_MAX_PLAYERS
from ..games import get_rules
from ..session import GameRegistry

BLACKJACK_FAMILY = frozenset({GameType.BLACKJACK, GameType.GLITCHJACK})


@dataclass
class GameService:
    """
    Entry points for every game operation.

    Usage:
        service = GameService()
        game = service.create_game(num_decks=2)
        service.add_player(game.game_id, "Alice")
        service.start_game(game.game_id)
        service.stand(game.game_id, player_id)
        service.get_results(game.game_id)
    """
    registry: GameRegistry = field(default_factory=GameRegistry)
    started_at: float = field(default_factory=time.time)

    # =========================================================================
    # Registry operations
    # =========================================================================

    def create_game(
        self,
        num_decks: int = 1,
        deck_type: DeckType = DeckType.STANDARD,
        game_type: GameType = GameType.BLACKJACK,
        max_players: int = DEFAULT_MAX_PLAYERS,
    ) -> Game:
        return self.registry.create_game(
            num_decks=num_decks,
            deck_type=deck_type,
            game_type=game_type,
            max_players=max_players,
        )

    def create_glitchjack_game(self, num_decks: int = 1, max_players: int = DEFAULT_MAX_PLAYERS) -> Game:
        return self.create_game(num_decks, DeckType.GLITCH, GameType.GLITCHJACK, max_players)

    def create_cribbage_game(self) -> Game:
        return self.create_game(1, DeckType.STANDARD, GameType.CRIBBAGE, 2)

    def get_game(self, game_id: str) -> ActionResult:
        game = self.registry.get_game(game_id)
        if game is None:
            return _game_not_found(game_id)
        return ActionResult.ok(game)

    def delete_game(self, game_id: str) -> bool:
        return self.registry.delete_game(game_id)

    def list_games(self) -> list[str]:
        return self.registry.list_games()

    def game_count(self) -> int:
        return self.registry.game_count()

    def cleanup_old_games(self, max_age_seconds: float) -> int:
        return self.registry.cleanup_old_games(max_age_seconds)

    def deck_types(self) -> list[dict[str, Any]]:
        return [
            {
                "name": deck_type.value,
                "description": deck_type.description,
                "cards_per_deck": deck_type.cards_per_deck,
            }
            for deck_type in DeckType
        ]

    def stats(self) -> dict[str, Any]:
        return {
            "uptime_seconds": round(time.time() - self.started_at, 3),
            "active_games": self.registry.game_count(),
        }

    # =========================================================================
    # Table operations
    # =========================================================================

    def add_player(self, game_id: str, name: str) -> ActionResult:
        def op(game: Game) -> ActionResult:
            player = game.add_player(name)
            if player is None:
                return ActionResult.failure(
                    f"Game is full ({game.max_players} players)", ErrorCode.ROSTER_FULL, game=game
                )
            return ActionResult.ok(game, player=player, message=f"{name} joined")

        return self._with_game(game_id, op)

    def remove_player(self, game_id: str, player_id: str) -> ActionResult:
        def op(game: Game) -> ActionResult:
            if game.game_type == GameType.CRIBBAGE and game.is_in_progress:
                return ActionResult.failure(
                    "Cannot leave a cribbage game in progress", ErrorCode.WRONG_PHASE, game=game
                )
            if not game.remove_player(player_id):
                return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)
            return ActionResult.ok(game, message="Player removed")

        return self._with_game(game_id, op)

    def deal_card(self, game_id: str) -> ActionResult:
        """Deal one face-up card off the table."""
        def op(game: Game) -> ActionResult:
            card = game.deck.deal()
            if card is None:
                return _deck_exhausted(game)
            card.face_up = True
            return ActionResult.ok(game, card=card)

        return self._with_game(game_id, op)

    def deal_cards(self, game_id: str, count: int) -> ActionResult:
        """Deal `count` face-up cards; all or nothing."""
        def op(game: Game) -> ActionResult:
            cards = game.deck.deal_many(count)
            if cards is None:
                return ActionResult.failure(
                    f"Requested {count} cards but only {game.deck.remaining_cards()} remain",
                    ErrorCode.DECK_EXHAUSTED,
                    game=game,
                )
            for card in cards:
                card.face_up = True
            return ActionResult.ok(game, cards=cards)

        return self._with_game(game_id, op)

    def deal_to_player(self, game_id: str, player_id: str, face_up: bool = True) -> ActionResult:
        def op(game: Game) -> ActionResult:
            player = game.get_player(player_id)
            if player is None:
                return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)
            card = game.deal_to_player(player_id, face_up)
            if card is None:
                return _deck_exhausted(game, player)
            return ActionResult.ok(game, player=player, card=card)

        return self._with_game(game_id, op)

    def discard(self, game_id: str, pile_id: str, player_id: str, card_index: int) -> ActionResult:
        def op(game: Game) -> ActionResult:
            player = game.get_player(player_id)
            if player is None:
                return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)
            pile = game.get_discard_pile(pile_id)
            if pile is None:
                return ActionResult.failure(
                    f"Discard pile {pile_id} not found", ErrorCode.PILE_NOT_FOUND, game=game, player=player
                )
            card = game.discard(player_id, pile_id, card_index)
            if card is None:
                return ActionResult.failure(
                    f"Invalid card index: {card_index}", ErrorCode.INVALID_MOVE, game=game, player=player
                )
            return ActionResult.ok(game, player=player, pile=pile, card=card)

        return self._with_game(game_id, op)

    def shuffle_deck(self, game_id: str) -> ActionResult:
        def op(game: Game) -> ActionResult:
            game.deck.shuffle()
            return ActionResult.ok(game, message="Deck shuffled")

        return self._with_game(game_id, op)

    def reset_deck(
        self,
        game_id: str,
        num_decks: int | None = None,
        deck_type: DeckType | None = None,
    ) -> ActionResult:
        """Rebuild the deck, optionally changing the deck count and type."""
        def op(game: Game) -> ActionResult:
            if deck_type is not None:
                game.deck.reset_with_decks_and_type(num_decks or game.deck.num_decks, deck_type)
            elif num_decks is not None:
                game.deck.reset_with_decks(num_decks)
            else:
                game.deck.reset()
            return ActionResult.ok(game, message="Deck reset")

        return self._with_game(game_id, op)

    # =========================================================================
    # Rule engine operations
    # =========================================================================

    def start_game(self, game_id: str) -> ActionResult:
        return self._with_game(game_id, lambda game: get_rules(game.game_type).start(game))

    def hit(self, game_id: str, player_id: str) -> ActionResult:
        return self._blackjack_action(game_id, Action.hit(player_id))

    def stand(self, game_id: str, player_id: str) -> ActionResult:
        return self._blackjack_action(game_id, Action.stand(player_id))

    def get_results(self, game_id: str) -> ActionResult:
        return self._with_game(game_id, lambda game: get_rules(game.game_type).results(game))

    def cribbage_deal(self, game_id: str) -> ActionResult:
        return self._cribbage_action(game_id, Action.deal())

    def cribbage_discard(self, game_id: str, player_id: str, card_indices: list[int]) -> ActionResult:
        return self._cribbage_action(game_id, Action.discard(player_id, card_indices))

    def cribbage_play(self, game_id: str, player_id: str, card_index: int) -> ActionResult:
        return self._cribbage_action(game_id, Action.play(player_id, card_index))

    def cribbage_go(self, game_id: str, player_id: str) -> ActionResult:
        return self._cribbage_action(game_id, Action.go(player_id))

    def cribbage_show(self, game_id: str) -> ActionResult:
        return self._cribbage_action(game_id, Action.show())

    def cribbage_state(self, game_id: str) -> ActionResult:
        """The game with its cribbage sub-state; fails before the first deal."""
        def op(game: Game) -> ActionResult:
            if game.game_type != GameType.CRIBBAGE:
                return ActionResult.failure(
                    f"Not a cribbage game ({game.game_type.value})", ErrorCode.WRONG_GAME_TYPE, game=game
                )
            if game.cribbage_state is None:
                return ActionResult.failure("Cribbage game not started", ErrorCode.WRONG_PHASE, game=game)
            return ActionResult.ok(game, data={"phase": game.cribbage_state.phase})

        return self._with_game(game_id, op)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _with_game(self, game_id: str, op: Callable[[Game], ActionResult]) -> ActionResult:
        """Run `op` on a game while holding that game's lock."""
        game = self.registry.get_game(game_id)
        if game is None:
            return _game_not_found(game_id)
        with game.lock:
            return op(game)

    def _blackjack_action(self, game_id: str, action: Action) -> ActionResult:
        def op(game: Game) -> ActionResult:
            if game.game_type not in BLACKJACK_FAMILY:
                return ActionResult.failure(
                    f"Not a blackjack game ({game.game_type.value})", ErrorCode.WRONG_GAME_TYPE, game=game
                )
            return get_rules(game.game_type).apply(game, action)

        return self._with_game(game_id, op)

    def _cribbage_action(self, game_id: str, action: Action) -> ActionResult:
        def op(game: Game) -> ActionResult:
            if game.game_type != GameType.CRIBBAGE:
                return ActionResult.failure(
                    f"Not a cribbage game ({game.game_type.value})", ErrorCode.WRONG_GAME_TYPE, game=game
                )
            return get_rules(game.game_type).apply(game, action)

        return self._with_game(game_id, op)


def _game_not_found(game_id: str) -> ActionResult:
    return ActionResult.failure(f"Game {game_id} not found", ErrorCode.GAME_NOT_FOUND)


def _deck_exhausted(game: Game, player=None) -> ActionResult:
    return ActionResult.failure("No cards remaining in deck", ErrorCode.DECK_EXHAUSTED, game=game, player=player)
