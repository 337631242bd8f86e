"""
Cards - Suits, ranks, deck types and the playing card itself.

A card's identity (rank and suit) is fixed once it is created. The only
field that changes during play is `face_up`, which hides a card from the
table (e.g. the dealer's hole card).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any
import random


class Suit(IntEnum):
    """The four traditional suits."""
    HEARTS = 0
    DIAMONDS = 1
    CLUBS = 2
    SPADES = 3

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


class Rank(IntEnum):
    """Card ranks. Ace is low (1), King is 13."""
    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def display_name(self) -> str:
        if self in FACE_RANKS or self == Rank.ACE:
            return self.name.capitalize()
        return str(int(self))


FACE_RANKS = frozenset({Rank.JACK, Rank.QUEEN, Rank.KING})


class DeckType(str, Enum):
    """Card composition rules for a deck."""
    STANDARD = "standard"
    SPANISH21 = "spanish21"
    GLITCH = "glitch"

    @property
    def description(self) -> str:
        return _DECK_DESCRIPTIONS[self]

    @property
    def cards_per_deck(self) -> int:
        if self == DeckType.SPANISH21:
            return 48
        return 52

    @classmethod
    def parse(cls, value: str | None) -> DeckType:
        """
        Parse a user-supplied deck type.

        Accepts several spellings; anything unrecognised is a standard deck.
        """
        if not value:
            return cls.STANDARD
        return _DECK_TYPE_ALIASES.get(value.strip().lower(), cls.STANDARD)


_DECK_DESCRIPTIONS = {
    DeckType.STANDARD: "Traditional 52-card deck with all ranks from Ace to King in all four suits",
    DeckType.SPANISH21: "Spanish 21 deck with 48 cards - all 10s removed",
    DeckType.GLITCH: "52 cards drawn at random from the standard set - duplicates are possible",
}

_DECK_TYPE_ALIASES = {
    "standard": DeckType.STANDARD,
    "normal": DeckType.STANDARD,
    "regular": DeckType.STANDARD,
    "spanish21": DeckType.SPANISH21,
    "spanish_21": DeckType.SPANISH21,
    "spanish-21": DeckType.SPANISH21,
    "glitch": DeckType.GLITCH,
    "glitchjack": DeckType.GLITCH,
    "random": DeckType.GLITCH,
}


@dataclass
class Card:
    """
    A single playing card.

    `attributes` carries free-form data for non-standard cards and is
    empty for everything the built-in decks produce.
    """
    rank: Rank
    suit: Suit
    face_up: bool = False
    attributes: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.rank.display_name} of {self.suit.display_name}"

    @property
    def value(self) -> int:
        return int(self.rank)

    @property
    def blackjack_value(self) -> int:
        """Point value in Blackjack; aces count 11 here and are softened by the hand."""
        if self.rank in FACE_RANKS:
            return 10
        if self.rank == Rank.ACE:
            return 11
        return int(self.rank)

    @property
    def cribbage_value(self) -> int:
        """Counting value in Cribbage (faces 10, ace 1)."""
        if self.rank in FACE_RANKS:
            return 10
        return int(self.rank)

    def same_card(self, other: Card) -> bool:
        return self.rank == other.rank and self.suit == other.suit


# Friendly deck names, e.g. "Lucky Dragon"
DECK_NAME_ADJECTIVES = [
    "Amazing", "Bright", "Clever", "Daring", "Eager", "Friendly", "Gentle", "Happy", "Jolly", "Kind",
    "Lucky", "Magic", "Noble", "Peaceful", "Quick", "Royal", "Smart", "Trusty", "Unique", "Wise",
    "Brave", "Calm", "Golden", "Mighty", "Mystic", "Radiant", "Swift", "Vibrant", "Wild", "Zealous",
]

DECK_NAME_NOUNS = [
    "Dragon", "Phoenix", "Eagle", "Tiger", "Lion", "Wolf", "Bear", "Fox", "Hawk", "Owl",
    "Star", "Moon", "Sun", "Cloud", "River", "Ocean", "Mountain", "Forest", "Garden", "Castle",
    "Knight", "Wizard", "Hero", "Captain", "Guardian", "Crown", "Crystal", "Thunder", "Comet", "Spark",
]


def generate_deck_name(rng: random.Random | None = None) -> str:
    """Pick a random adjective + noun name for a deck."""
    rng = rng or random
    return f"{rng.choice(DECK_NAME_ADJECTIVES)} {rng.choice(DECK_NAME_NOUNS)}"
