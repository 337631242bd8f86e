"""
Game State - Players, hands and the game aggregate.

Design principles:
- Mutable in place: rule engines change a Game directly
- Game-agnostic: variant rules live in cardroom.games, not here
- Failure is a value: lookups and deals return None/False instead of raising

The Game does not lock itself. Callers that share a Game between threads
must hold `game.lock` around mutations (the service layer does this).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING
import random
import threading
import time
import uuid

from .cards import Card, DeckType
from .deck import Deck, DiscardPile

if TYPE_CHECKING:
    from ..games.cribbage.state import CribbageState


DEALER_ID = "dealer"

# Cursor value meaning no seated player is active
NO_ACTIVE_PLAYER = -1

DEFAULT_MAX_PLAYERS = 6
MAIN_DISCARD_PILE = "main"


class GameStatus(str, Enum):
    """High-level game status. Only ever moves forward."""
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class GameType(str, Enum):
    """Games the engine knows how to run."""
    BLACKJACK = "blackjack"
    GLITCHJACK = "glitchjack"
    CRIBBAGE = "cribbage"

    @classmethod
    def parse(cls, value: str | None) -> GameType:
        if not value:
            return cls.BLACKJACK
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.BLACKJACK


_STATUS_ORDER = {
    GameStatus.WAITING: 0,
    GameStatus.IN_PROGRESS: 1,
    GameStatus.FINISHED: 2,
}


@dataclass
class Player:
    """
    A seat at the table (or the dealer).

    The hand only grows until it is cleared, except when a card is
    removed by index for a discard or a cribbage play.
    """
    player_id: str
    name: str
    hand: list[Card] = field(default_factory=list)
    standing: bool = False
    busted: bool = False

    @property
    def is_dealer(self) -> bool:
        return self.player_id == DEALER_ID

    def add_card(self, card: Card) -> None:
        self.hand.append(card)

    def remove_card(self, index: int) -> Card | None:
        """Remove the card at `index`, or return None for a bad index."""
        if index < 0 or index >= len(self.hand):
            return None
        return self.hand.pop(index)

    def hand_size(self) -> int:
        return len(self.hand)

    def clear_hand(self) -> list[Card]:
        cards, self.hand = self.hand, []
        return cards

    def reset_for_round(self) -> None:
        self.clear_hand()
        self.standing = False
        self.busted = False


@dataclass
class Game:
    """
    One play session: deck, dealer, seated players and turn cursor.

    `current_player` is an index into `players` or NO_ACTIVE_PLAYER.
    Removing a player does not fix the cursor up; callers re-validate it.
    """
    game_id: str
    game_type: GameType = GameType.BLACKJACK
    status: GameStatus = GameStatus.WAITING
    deck: Deck = field(default_factory=Deck.create)
    dealer: Player = field(default_factory=lambda: Player(player_id=DEALER_ID, name="Dealer"))
    players: list[Player] = field(default_factory=list)
    discard_piles: dict[str, DiscardPile] = field(default_factory=dict)
    max_players: int = DEFAULT_MAX_PLAYERS
    current_player: int = 0

    # Variant sub-state (Cribbage only)
    cribbage_state: CribbageState | None = None

    created_at: float = field(default_factory=time.time)
    last_used: float = field(default_factory=time.time)

    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    # Metadata
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        num_decks: int = 1,
        deck_type: DeckType = DeckType.STANDARD,
        game_type: GameType = GameType.BLACKJACK,
        max_players: int = DEFAULT_MAX_PLAYERS,
        rng: random.Random | None = None,
    ) -> Game:
        """Create a waiting game with a fresh (unshuffled) deck and a main discard pile."""
        game = cls(
            game_id=str(uuid.uuid4()),
            game_type=game_type,
            deck=Deck.create(num_decks, deck_type, rng=rng),
            max_players=max_players,
        )
        game.add_discard_pile(MAIN_DISCARD_PILE, "Main Discard Pile")
        return game

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def touch(self) -> None:
        """Refresh the last-used timestamp."""
        self.last_used = time.time()

    def set_status(self, status: GameStatus) -> bool:
        """Move the status forward. Returns False for a backwards move."""
        if _STATUS_ORDER[status] < _STATUS_ORDER[self.status]:
            return False
        self.status = status
        return True

    def start(self) -> bool:
        """waiting -> in_progress. A game with no players cannot start."""
        if not self.players or self.status != GameStatus.WAITING:
            return False
        return self.set_status(GameStatus.IN_PROGRESS)

    def finish(self) -> bool:
        return self.set_status(GameStatus.FINISHED)

    @property
    def is_in_progress(self) -> bool:
        return self.status == GameStatus.IN_PROGRESS

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    # -------------------------------------------------------------------------
    # Players
    # -------------------------------------------------------------------------

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def active_player(self) -> Player | None:
        """The player at the cursor, or None if the cursor is off the roster."""
        if 0 <= self.current_player < len(self.players):
            return self.players[self.current_player]
        return None

    def add_player(self, name: str) -> Player | None:
        """Seat a new player. Returns None when the table is full."""
        if len(self.players) >= self.max_players:
            return None
        player = Player(player_id=str(uuid.uuid4()), name=name)
        self.players.append(player)
        return player

    def get_player(self, player_id: str) -> Player | None:
        """Get a player by ID; "dealer" resolves to the dealer."""
        if player_id == DEALER_ID:
            return self.dealer
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int:
        """Seat index for a player, or NO_ACTIVE_PLAYER if not seated."""
        for i, p in enumerate(self.players):
            if p.player_id == player_id:
                return i
        return NO_ACTIVE_PLAYER

    def remove_player(self, player_id: str) -> bool:
        index = self.player_index(player_id)
        if index == NO_ACTIVE_PLAYER:
            return False
        del self.players[index]
        return True

    def reset_hands(self) -> None:
        """Clear every hand (dealer included) and the round flags."""
        for p in self.players:
            p.reset_for_round()
        self.dealer.reset_for_round()

    # -------------------------------------------------------------------------
    # Cards
    # -------------------------------------------------------------------------

    def deal_to_player(self, player_id: str, face_up: bool) -> Card | None:
        """
        Deal the top card to a player (or the dealer).

        Returns None if the player is unknown or the deck is empty.
        """
        player = self.get_player(player_id)
        if player is None:
            return None
        card = self.deck.deal()
        if card is None:
            return None
        card.face_up = face_up
        player.add_card(card)
        return card

    def add_discard_pile(self, pile_id: str, name: str) -> DiscardPile | None:
        """Create a discard pile. Returns None if the ID is taken."""
        if pile_id in self.discard_piles:
            return None
        pile = DiscardPile(pile_id=pile_id, name=name)
        self.discard_piles[pile_id] = pile
        return pile

    def get_discard_pile(self, pile_id: str) -> DiscardPile | None:
        return self.discard_piles.get(pile_id)

    def discard(self, player_id: str, pile_id: str, card_index: int) -> Card | None:
        """Move a card from a player's hand onto a discard pile."""
        player = self.get_player(player_id)
        pile = self.get_discard_pile(pile_id)
        if player is None or pile is None:
            return None
        card = player.remove_card(card_index)
        if card is None:
            return None
        pile.add_card(card)
        return card
