"""
Cribbage state - Phase tracking, crib, the count and the pegboard.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ...engine_core.cards import Card
from ...engine_core.state import NO_ACTIVE_PLAYER

WINNING_SCORE = 121
MAX_COUNT = 31
HAND_SIZE = 6
KEEP_SIZE = 4


class CribbagePhase(str, Enum):
    """Phases of a cribbage hand."""
    DEAL = "deal"
    DISCARD = "discard"
    PLAY = "play"
    SHOW = "show"
    FINISHED = "finished"


@dataclass
class CribbageState:
    """
    Everything Cribbage tracks beyond the shared Game.

    `kept_hands` holds each seat's four cards after the discard, because
    the hands themselves empty out during the play.
    """
    num_players: int = 2
    phase: CribbagePhase = CribbagePhase.DEAL
    dealer: int = 0
    crib: list[Card] = field(default_factory=list)
    starter: Card | None = None
    played_cards: list[Card] = field(default_factory=list)
    play_total: int = 0
    play_count: int = 0
    player_scores: list[int] = field(default_factory=list)
    game_score: int = WINNING_SCORE
    last_to_play: int = NO_ACTIVE_PLAYER
    kept_hands: list[list[Card]] = field(default_factory=list)
    winner: int | None = None

    def __post_init__(self):
        if not self.player_scores:
            self.player_scores = [0] * self.num_players
        if not self.kept_hands:
            self.kept_hands = [[] for _ in range(self.num_players)]

    @property
    def non_dealer(self) -> int:
        return (self.dealer + 1) % self.num_players

    def award(self, seat: int, points: int) -> None:
        """Peg points for a seat; the first seat to reach the target wins."""
        if points <= 0:
            return
        self.player_scores[seat] += points
        if self.winner is None and self.player_scores[seat] >= self.game_score:
            self.winner = seat

    def clear_hand_state(self) -> None:
        """Forget the crib, starter and count between hands."""
        self.crib = []
        self.starter = None
        self.played_cards = []
        self.play_total = 0
        self.play_count = 0
        self.last_to_play = NO_ACTIVE_PLAYER
        self.kept_hands = [[] for _ in range(self.num_players)]
