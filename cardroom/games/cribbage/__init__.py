"""
Cribbage - Rules, per-game state and scoring.
"""

from .rules import CribbageRules
from .scoring import score_hand, score_breakdown, score_pegging
from .state import CribbagePhase, CribbageState, WINNING_SCORE

__all__ = [
    "CribbageRules",
    "CribbagePhase",
    "CribbageState",
    "WINNING_SCORE",
    "score_hand",
    "score_breakdown",
    "score_pegging",
]
