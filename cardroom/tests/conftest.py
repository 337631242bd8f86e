"""
Pytest fixtures for Cardroom tests.
"""

import random

import pytest

from ..engine_core.cards import Card, Rank, Suit
from ..engine_core.state import Game, GameType
from ..session import GameRegistry
from ..api.service import GameService


def make_card(rank: Rank, suit: Suit = Suit.SPADES, face_up: bool = False) -> Card:
    """Build a card; dealing sets face_up, so stacked decks start face down."""
    return Card(rank=rank, suit=suit, face_up=face_up)


def stack_deck(game: Game, cards: list[Card]) -> None:
    """Replace the draw pile so the next deals come out in `cards` order."""
    game.deck.cards = list(cards)


def filler(count: int) -> list[Card]:
    """Low cards to pad a stacked deck."""
    return [make_card(Rank.TWO, Suit.CLUBS) for _ in range(count)]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def registry() -> GameRegistry:
    return GameRegistry()


@pytest.fixture
def service() -> GameService:
    return GameService()


@pytest.fixture
def blackjack_game(rng) -> Game:
    """Waiting blackjack game with an unshuffled deck and no players."""
    return Game.create(game_type=GameType.BLACKJACK, rng=rng)


@pytest.fixture
def glitchjack_game(rng) -> Game:
    from ..engine_core.cards import DeckType
    return Game.create(deck_type=DeckType.GLITCH, game_type=GameType.GLITCHJACK, rng=rng)


@pytest.fixture
def cribbage_game(rng) -> Game:
    """Waiting cribbage game with two seated players."""
    game = Game.create(game_type=GameType.CRIBBAGE, max_players=2, rng=rng)
    game.add_player("Dealer Dan")
    game.add_player("Pone Pat")
    return game
