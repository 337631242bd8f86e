"""
Games - Rule engines selected by game type.

Each engine implements the RuleEngine protocol (start, apply, results)
over the shared Game aggregate. Look one up with get_rules().
"""

from ..engine_core.state import GameType
from .base import RuleEngine, Outcome, soft_total
from .blackjack import BlackjackRules, hand_value
from .glitchjack import GlitchjackRules, glitchjack_hand_value, new_glitchjack_deck
from .cribbage import CribbageRules, CribbagePhase, CribbageState

RULE_ENGINES: dict[GameType, RuleEngine] = {
    GameType.BLACKJACK: BlackjackRules(),
    GameType.GLITCHJACK: GlitchjackRules(),
    GameType.CRIBBAGE: CribbageRules(),
}


def get_rules(game_type: GameType) -> RuleEngine:
    """Rule engine for a game type. Raises KeyError for an unregistered type."""
    return RULE_ENGINES[game_type]


__all__ = [
    "RuleEngine",
    "Outcome",
    "soft_total",
    "BlackjackRules",
    "hand_value",
    "GlitchjackRules",
    "glitchjack_hand_value",
    "new_glitchjack_deck",
    "CribbageRules",
    "CribbagePhase",
    "CribbageState",
    "RULE_ENGINES",
    "get_rules",
]
