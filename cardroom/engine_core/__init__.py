"""
Engine Core - Cards, decks, players and the game aggregate.

The core is the data model every rule engine works on:
1. Cards and deck types
2. Decks and discard piles
3. Players and the Game aggregate
4. Actions and their results
"""

from .cards import Card, Suit, Rank, DeckType, generate_deck_name
from .deck import Deck, DiscardPile, build_cards
from .state import (
    Game,
    GameStatus,
    GameType,
    Player,
    DEALER_ID,
    NO_ACTIVE_PLAYER,
    DEFAULT_MAX_PLAYERS,
    MAIN_DISCARD_PILE,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode

__all__ = [
    "Card",
    "Suit",
    "Rank",
    "DeckType",
    "generate_deck_name",
    "Deck",
    "DiscardPile",
    "build_cards",
    "Game",
    "GameStatus",
    "GameType",
    "Player",
    "DEALER_ID",
    "NO_ACTIVE_PLAYER",
    "DEFAULT_MAX_PLAYERS",
    "MAIN_DISCARD_PILE",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
]
