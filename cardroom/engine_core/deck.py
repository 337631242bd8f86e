"""
Deck - The draw pile and discard piles.

Design principles:
- Dealing takes from the top (index 0) and never raises; an empty deck
  returns None so callers can treat exhaustion as a normal condition
- Reset rebuilds the full composition for a deck type and count
- Randomness comes from an injectable random.Random for reproducible tests
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random

from .cards import Card, DeckType, Rank, Suit, generate_deck_name


def build_cards(
    num_decks: int,
    deck_type: DeckType,
    rng: random.Random | None = None,
) -> list[Card]:
    """
    Build the card list for `num_decks` decks of `deck_type`.

    Standard and Spanish 21 decks come back in suit/rank order. Glitch decks
    draw every card at random from the 52 standard combinations.
    """
    num_decks = max(num_decks, 1)
    rng = rng or random.Random()
    cards: list[Card] = []

    for _ in range(num_decks):
        if deck_type == DeckType.GLITCH:
            for _ in range(deck_type.cards_per_deck):
                cards.append(Card(
                    rank=Rank(rng.randint(1, 13)),
                    suit=Suit(rng.randrange(4)),
                ))
            continue

        for suit in Suit:
            for rank in Rank:
                if deck_type == DeckType.SPANISH21 and rank == Rank.TEN:
                    continue
                cards.append(Card(rank=rank, suit=suit))

    return cards


@dataclass
class Deck:
    """
    An ordered draw pile built from one or more decks.

    `cards[0]` is the top of the deck.
    """
    deck_type: DeckType = DeckType.STANDARD
    num_decks: int = 1
    cards: list[Card] = field(default_factory=list)
    name: str = ""
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @classmethod
    def create(
        cls,
        num_decks: int = 1,
        deck_type: DeckType = DeckType.STANDARD,
        rng: random.Random | None = None,
    ) -> Deck:
        """Create a full deck. Glitch decks are shuffled after generation."""
        deck = cls(deck_type=deck_type, rng=rng or random.Random())
        deck.name = generate_deck_name(deck.rng)
        deck.reset_with_decks_and_type(num_decks, deck_type)
        return deck

    def deal(self) -> Card | None:
        """Remove and return the top card, or None when the deck is empty."""
        if not self.cards:
            return None
        return self.cards.pop(0)

    def deal_many(self, count: int) -> list[Card] | None:
        """Deal `count` cards, or nothing at all if fewer remain."""
        if count < 0 or count > self.remaining_cards():
            return None
        dealt = self.cards[:count]
        del self.cards[:count]
        return dealt

    def shuffle(self) -> None:
        """Shuffle the undealt cards in place."""
        self.rng.shuffle(self.cards)

    def reset(self) -> None:
        """Restore the full deck for the current type and count."""
        self.reset_with_decks_and_type(self.num_decks, self.deck_type)

    def reset_with_decks(self, num_decks: int) -> None:
        self.reset_with_decks_and_type(num_decks, self.deck_type)

    def reset_with_decks_and_type(self, num_decks: int, deck_type: DeckType) -> None:
        """Rebuild the deck from scratch, dropping dealt and shuffled state."""
        self.num_decks = max(num_decks, 1)
        self.deck_type = deck_type
        self.cards = build_cards(self.num_decks, deck_type, self.rng)
        if deck_type == DeckType.GLITCH:
            self.shuffle()

    def remaining_cards(self) -> int:
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards

    @property
    def full_size(self) -> int:
        """Number of cards in a fresh deck of this type and count."""
        return self.deck_type.cards_per_deck * self.num_decks


@dataclass
class DiscardPile:
    """A named, append-only pile of discarded cards."""
    pile_id: str
    name: str
    cards: list[Card] = field(default_factory=list)

    def add_card(self, card: Card) -> None:
        self.cards.append(card)

    def add_cards(self, cards: list[Card]) -> None:
        self.cards.extend(cards)

    def top_card(self) -> Card | None:
        return self.cards[-1] if self.cards else None

    def take_top_card(self) -> Card | None:
        """Remove and return the most recently discarded card."""
        if not self.cards:
            return None
        return self.cards.pop()

    def size(self) -> int:
        return len(self.cards)

    def clear(self) -> list[Card]:
        """Empty the pile, returning what was on it."""
        cards, self.cards = self.cards, []
        return cards
