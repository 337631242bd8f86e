"""
Action System - Player actions, error codes and results.

Actions represent:
1. Blackjack-family moves (hit, stand)
2. Cribbage moves (deal, discard to crib, play, go, show)

Every engine call returns an ActionResult. Expected failures (unknown
player, wrong phase, empty deck) are reported through it, never raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .cards import Card
    from .deck import DiscardPile
    from .state import Game, Player


class ActionType(Enum):
    """Types of actions a player can take."""
    # Blackjack family
    HIT = "hit"
    STAND = "stand"

    # Cribbage
    DEAL = "deal"
    DISCARD = "discard"
    PLAY = "play"
    GO = "go"
    SHOW = "show"


class ErrorCode(str, Enum):
    """Structured failure reasons."""
    # Not found
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    PILE_NOT_FOUND = "PILE_NOT_FOUND"

    # Preconditions
    WRONG_PHASE = "WRONG_PHASE"
    WRONG_GAME_TYPE = "WRONG_GAME_TYPE"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    ROSTER_FULL = "ROSTER_FULL"
    NO_PLAYERS = "NO_PLAYERS"
    PLAYER_FINISHED = "PLAYER_FINISHED"
    INVALID_MOVE = "INVALID_MOVE"
    UNSUPPORTED_ACTION = "UNSUPPORTED_ACTION"

    # Resources
    DECK_EXHAUSTED = "DECK_EXHAUSTED"

    @property
    def is_not_found(self) -> bool:
        return self in {
            ErrorCode.GAME_NOT_FOUND,
            ErrorCode.PLAYER_NOT_FOUND,
            ErrorCode.PILE_NOT_FOUND,
        }


@dataclass
class ActionPayload:
    """
    Parameters for an action.

    Different action types use different fields; the rule engine
    validates what it needs.
    """
    player_id: str | None = None
    card_index: int | None = None
    card_indices: list[int] | None = None


@dataclass
class Action:
    """An action to apply to a game."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @property
    def player_id(self) -> str | None:
        return self.payload.player_id

    @classmethod
    def hit(cls, player_id: str) -> Action:
        return cls(ActionType.HIT, ActionPayload(player_id=player_id))

    @classmethod
    def stand(cls, player_id: str) -> Action:
        return cls(ActionType.STAND, ActionPayload(player_id=player_id))

    @classmethod
    def deal(cls) -> Action:
        """Factory for dealing the next cribbage hand."""
        return cls(ActionType.DEAL)

    @classmethod
    def discard(cls, player_id: str, card_indices: list[int]) -> Action:
        """Factory for discarding two cards to the crib."""
        return cls(
            ActionType.DISCARD,
            ActionPayload(player_id=player_id, card_indices=list(card_indices)),
        )

    @classmethod
    def play(cls, player_id: str, card_index: int) -> Action:
        return cls(ActionType.PLAY, ActionPayload(player_id=player_id, card_index=card_index))

    @classmethod
    def go(cls, player_id: str) -> Action:
        return cls(ActionType.GO, ActionPayload(player_id=player_id))

    @classmethod
    def show(cls) -> Action:
        return cls(ActionType.SHOW)


@dataclass
class ActionResult:
    """
    Outcome of an engine or service call.

    Contains:
    - Whether the call succeeded
    - The game it acted on (also on failure, when the game exists)
    - Whatever the call produced (player, card(s), pile, extra data)
    - A human-readable reason and error code on failure
    """
    success: bool
    game: Game | None = None
    player: Player | None = None
    card: Card | None = None
    cards: list[Card] = field(default_factory=list)
    pile: DiscardPile | None = None
    data: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    error: str | None = None
    error_code: ErrorCode | None = None

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode,
        game: Game | None = None,
        player: Player | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, game=game, player=player, error=error, error_code=error_code)

    @classmethod
    def ok(cls, game: Game | None = None, message: str = "", **kwargs: Any) -> ActionResult:
        """Create a success result."""
        return cls(success=True, game=game, message=message, **kwargs)
