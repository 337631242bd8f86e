"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the JSON contract of the HTTP adapter.

Error Codes (see cardroom.engine_core.action.ErrorCode):
- GAME_NOT_FOUND / PLAYER_NOT_FOUND / PILE_NOT_FOUND: 404
- WRONG_PHASE, WRONG_GAME_TYPE, NOT_YOUR_TURN, ROSTER_FULL, NO_PLAYERS,
  PLAYER_FINISHED, INVALID_MOVE, UNSUPPORTED_ACTION, DECK_EXHAUSTED: 400
"""

from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.action import ErrorCode


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A card as shown on the table. Face-down cards hide rank and suit."""
    face_up: bool
    rank: Optional[int] = None
    suit: Optional[str] = None
    name: Optional[str] = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class PlayerInfo(BaseModel):
    """A seat (or the dealer)."""
    player_id: str
    name: str
    hand: list[CardInfo] = Field(default_factory=list)
    hand_size: int = 0
    visible_value: Optional[int] = Field(
        None, description="Blackjack total of the face-up cards (blackjack games only)"
    )
    standing: bool = False
    busted: bool = False


class DeckInfo(BaseModel):
    name: str
    deck_type: str
    num_decks: int
    remaining_cards: int
    full_size: int


class DiscardPileInfo(BaseModel):
    pile_id: str
    name: str
    size: int = 0
    top_card: Optional[CardInfo] = None


class CribbageInfo(BaseModel):
    """Cribbage sub-state."""
    phase: str
    dealer: int
    crib_size: int = 0
    starter: Optional[CardInfo] = None
    played_cards: list[CardInfo] = Field(default_factory=list)
    play_total: int = 0
    play_count: int = 0
    scores: list[int] = Field(default_factory=list)
    game_score: int = 121
    winner: Optional[int] = None


class GameResponse(BaseModel):
    """Full snapshot of a game."""
    game_id: str
    game_type: str
    status: str
    deck: DeckInfo
    dealer: PlayerInfo
    players: list[PlayerInfo] = Field(default_factory=list)
    discard_piles: list[DiscardPileInfo] = Field(default_factory=list)
    max_players: int
    current_player: int = Field(description="Seat index, or -1 when no player is active")
    created_at: float
    last_used: float
    cribbage: Optional[CribbageInfo] = None


# =============================================================================
# Requests
# =============================================================================

class CreateGameRequest(BaseModel):
    num_decks: int = Field(1, ge=1, le=8)
    deck_type: str = Field("standard", description="standard, spanish21 or glitch")
    game_type: str = Field("blackjack", description="blackjack, glitchjack or cribbage")
    max_players: Optional[int] = Field(None, ge=1, le=10)


class AddPlayerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class DealRequest(BaseModel):
    count: int = Field(1, ge=1, le=416)


class DealToPlayerRequest(BaseModel):
    face_up: bool = True


class DiscardRequest(BaseModel):
    player_id: str
    card_index: int = Field(..., ge=0)


class ResetDeckRequest(BaseModel):
    num_decks: Optional[int] = Field(None, ge=1, le=8)
    deck_type: Optional[str] = None


class CribbageDiscardRequest(BaseModel):
    card_indices: list[int] = Field(..., min_length=2, max_length=2)


class CribbagePlayRequest(BaseModel):
    card_index: int = Field(..., ge=0)


# =============================================================================
# Responses
# =============================================================================

class ActionResponse(BaseModel):
    """Result of a game action: the updated game plus what the action produced."""
    message: str = ""
    game: GameResponse
    player: Optional[PlayerInfo] = None
    card: Optional[CardInfo] = None
    data: dict[str, Any] = Field(default_factory=dict)


class DealResponse(BaseModel):
    game_id: str
    cards: list[CardInfo] = Field(default_factory=list)
    remaining_cards: int


class ResultsResponse(BaseModel):
    game_id: str
    game_type: str
    status: str
    data: dict[str, Any] = Field(default_factory=dict, description="Outcomes (blackjack) or pegboard (cribbage)")
    game: GameResponse


class GameListResponse(BaseModel):
    games: list[str] = Field(default_factory=list)
    count: int = 0


class DeleteGameResponse(BaseModel):
    success: bool
    game_id: str


class DeckTypeInfo(BaseModel):
    name: str
    description: str
    cards_per_deck: int


class DeckTypesResponse(BaseModel):
    deck_types: list[DeckTypeInfo] = Field(default_factory=list)


class StatsResponse(BaseModel):
    service: str = "cardroom"
    version: str
    environment: str
    uptime_seconds: float
    active_games: int


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str


class ErrorResponse(BaseModel):
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None
