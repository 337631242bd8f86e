"""
Tests for cards, deck types and decks.

Tests:
- Card values and names
- Deck composition per type
- Dealing, shuffling and resetting
- Discard piles
"""

import random
from collections import Counter

import pytest

from ..engine_core.cards import Card, DeckType, Rank, Suit, generate_deck_name
from ..engine_core.deck import Deck, DiscardPile, build_cards
from .conftest import make_card


class TestCard:
    """Tests for Card."""

    def test_display_name(self):
        assert str(make_card(Rank.ACE, Suit.SPADES)) == "Ace of Spades"
        assert str(make_card(Rank.TEN, Suit.HEARTS)) == "10 of Hearts"
        assert str(make_card(Rank.QUEEN, Suit.DIAMONDS)) == "Queen of Diamonds"

    def test_blackjack_values(self):
        assert make_card(Rank.ACE).blackjack_value == 11
        assert make_card(Rank.SEVEN).blackjack_value == 7
        for rank in (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING):
            assert make_card(rank).blackjack_value == 10

    def test_cribbage_values(self):
        assert make_card(Rank.ACE).cribbage_value == 1
        assert make_card(Rank.KING).cribbage_value == 10
        assert make_card(Rank.FIVE).cribbage_value == 5

    def test_same_card_ignores_face(self):
        assert make_card(Rank.TWO, Suit.CLUBS).same_card(make_card(Rank.TWO, Suit.CLUBS, face_up=True))
        assert not make_card(Rank.TWO, Suit.CLUBS).same_card(make_card(Rank.TWO, Suit.HEARTS))


class TestDeckType:
    """Tests for DeckType parsing and sizes."""

    @pytest.mark.parametrize("value,expected", [
        ("standard", DeckType.STANDARD),
        ("Spanish21", DeckType.SPANISH21),
        ("spanish-21", DeckType.SPANISH21),
        ("glitch", DeckType.GLITCH),
        ("random", DeckType.GLITCH),
        ("pinochle", DeckType.STANDARD),
        (None, DeckType.STANDARD),
    ])
    def test_parse(self, value, expected):
        assert DeckType.parse(value) == expected

    def test_cards_per_deck(self):
        assert DeckType.STANDARD.cards_per_deck == 52
        assert DeckType.SPANISH21.cards_per_deck == 48
        assert DeckType.GLITCH.cards_per_deck == 52

    def test_descriptions(self):
        for deck_type in DeckType:
            assert deck_type.description


class TestDeckName:

    def test_two_words(self):
        assert len(generate_deck_name().split()) == 2

    def test_seeded_names_repeat(self):
        assert generate_deck_name(random.Random(7)) == generate_deck_name(random.Random(7))


class TestDeck:
    """Tests for Deck."""

    def test_standard_deck_is_complete(self):
        deck = Deck.create()
        assert deck.remaining_cards() == 52
        assert len({(c.rank, c.suit) for c in deck.cards}) == 52
        assert deck.name

    def test_standard_deck_starts_in_order(self):
        deck = Deck.create()
        top = deck.cards[0]
        assert (top.rank, top.suit) == (Rank.ACE, Suit.HEARTS)

    def test_multiple_decks(self):
        deck = Deck.create(num_decks=2)
        assert deck.remaining_cards() == 104
        counts = Counter((c.rank, c.suit) for c in deck.cards)
        assert set(counts.values()) == {2}

    def test_spanish21_has_no_tens(self):
        deck = Deck.create(deck_type=DeckType.SPANISH21)
        assert deck.remaining_cards() == 48
        assert all(c.rank != Rank.TEN for c in deck.cards)

    def test_glitch_deck_size(self, rng):
        deck = Deck.create(num_decks=3, deck_type=DeckType.GLITCH, rng=rng)
        assert deck.remaining_cards() == 156
        assert all(Rank.ACE <= c.rank <= Rank.KING for c in deck.cards)

    def test_new_cards_are_face_down(self):
        assert all(not c.face_up for c in build_cards(1, DeckType.STANDARD))

    def test_deal_takes_top_card(self):
        deck = Deck.create()
        top = deck.cards[0]
        assert deck.deal() is top
        assert deck.remaining_cards() == 51

    @pytest.mark.parametrize("deck_type", list(DeckType))
    @pytest.mark.parametrize("num_decks", [1, 2])
    @pytest.mark.parametrize("count", [0, 1, 7, 48])
    def test_remaining_after_deals(self, rng, deck_type, num_decks, count):
        deck = Deck.create(num_decks=num_decks, deck_type=deck_type, rng=rng)
        assert deck.remaining_cards() == deck.full_size

        for _ in range(count):
            assert deck.deal() is not None

        assert deck.remaining_cards() == deck.full_size - count

    def test_deal_empty_returns_none(self):
        deck = Deck.create()
        deck.cards = []
        assert deck.deal() is None
        assert deck.is_empty()

    def test_deal_many_is_all_or_nothing(self):
        deck = Deck.create()
        assert deck.deal_many(53) is None
        assert deck.remaining_cards() == 52

        cards = deck.deal_many(5)
        assert len(cards) == 5
        assert deck.remaining_cards() == 47

    def test_shuffle_keeps_cards(self, rng):
        deck = Deck.create(rng=rng)
        before = Counter((c.rank, c.suit) for c in deck.cards)
        order = [(c.rank, c.suit) for c in deck.cards]

        deck.shuffle()

        assert Counter((c.rank, c.suit) for c in deck.cards) == before
        assert [(c.rank, c.suit) for c in deck.cards] != order

    def test_reset_restores_full_deck(self):
        deck = Deck.create(num_decks=2)
        deck.deal_many(30)
        deck.reset()
        assert deck.remaining_cards() == 104

    def test_reset_with_decks(self):
        deck = Deck.create()
        deck.reset_with_decks(2)
        assert deck.remaining_cards() == 104
        deck.reset_with_decks(0)
        assert deck.remaining_cards() == 52
        assert deck.num_decks == 1

    def test_reset_with_decks_and_type(self):
        deck = Deck.create()
        deck.reset_with_decks_and_type(1, DeckType.SPANISH21)
        assert deck.deck_type == DeckType.SPANISH21
        assert deck.remaining_cards() == 48
        assert deck.full_size == 48


class TestDiscardPile:

    def test_add_and_take(self):
        pile = DiscardPile(pile_id="main", name="Main")
        first, second = make_card(Rank.TWO), make_card(Rank.THREE)
        pile.add_cards([first, second])

        assert pile.size() == 2
        assert pile.top_card() is second
        assert pile.take_top_card() is second
        assert pile.top_card() is first

    def test_empty_pile(self):
        pile = DiscardPile(pile_id="main", name="Main")
        assert pile.top_card() is None
        assert pile.take_top_card() is None

    def test_clear(self):
        pile = DiscardPile(pile_id="main", name="Main")
        pile.add_card(make_card(Rank.KING))
        assert len(pile.clear()) == 1
        assert pile.size() == 0
