"""
API Module - HTTP interface to the card room.

Clients:
1. Create a game and seat players
2. Start it and play (hit/stand, or the cribbage phases)
3. Read snapshots and results

All state lives in the process; there are no accounts or persistence.
"""

from .service import GameService
from .schemas import (
    # Requests
    CreateGameRequest,
    AddPlayerRequest,
    DealRequest,
    DealToPlayerRequest,
    DiscardRequest,
    ResetDeckRequest,
    CribbageDiscardRequest,
    CribbagePlayRequest,
    # Responses
    GameResponse,
    ActionResponse,
    DealResponse,
    ResultsResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    PlayerInfo,
    CribbageInfo,
)
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "AddPlayerRequest",
    "DealRequest",
    "DealToPlayerRequest",
    "DiscardRequest",
    "ResetDeckRequest",
    "CribbageDiscardRequest",
    "CribbagePlayRequest",
    # Responses
    "GameResponse",
    "ActionResponse",
    "DealResponse",
    "ResultsResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "PlayerInfo",
    "CribbageInfo",
    # Service
    "GameService",
    "create_app",
]
