"""
FastAPI Application - REST API for the card room.

Endpoints:
    GET    /api/v1/health                          Health check
    GET    /api/v1/stats                           Uptime and active games
    GET    /api/v1/deck-types                      Supported deck compositions
    POST   /api/v1/games                           Create game
    GET    /api/v1/games                           List game IDs
    GET    /api/v1/games/{id}                      Game snapshot
    DELETE /api/v1/games/{id}                      Delete game
    POST   /api/v1/games/{id}/players              Add player
    DELETE /api/v1/games/{id}/players/{pid}        Remove player
    POST   /api/v1/games/{id}/shuffle              Shuffle deck
    POST   /api/v1/games/{id}/reset                Rebuild deck
    POST   /api/v1/games/{id}/deal                 Deal cards face up
    POST   /api/v1/games/{id}/deal/player/{pid}    Deal one card to a player
    POST   /api/v1/games/{id}/discard/{pile}       Discard from a hand
    POST   /api/v1/games/{id}/start                Start the game
    POST   /api/v1/games/{id}/hit/{pid}            Blackjack hit
    POST   /api/v1/games/{id}/stand/{pid}          Blackjack stand
    GET    /api/v1/games/{id}/results              Results / pegboard
    POST   /api/v1/games/{id}/cribbage/deal        Deal the next hand
    POST   /api/v1/games/{id}/cribbage/discard/{pid}  Discard two to the crib
    POST   /api/v1/games/{id}/cribbage/play/{pid}  Lay a card on the count
    POST   /api/v1/games/{id}/cribbage/go/{pid}    Declare go
    POST   /api/v1/games/{id}/cribbage/show        Score hands and crib
    GET    /api/v1/games/{id}/cribbage/state       Cribbage sub-state

Handlers are plain functions so FastAPI runs them in its thread pool; the
service takes each game's lock and responses are built while holding it.
Failures come back as ErrorResponse with 404 for not-found codes and 400
for everything else.
"""

from contextlib import asynccontextmanager
from typing import Optional, Union
import logging

from .. import __version__, config
from ..engine_core.action import ActionResult, ErrorCode
from ..engine_core.cards import Card, DeckType
from ..engine_core.state import Game, GameType, Player
from ..games import glitchjack_hand_value, soft_total
from ..session import GameSweeper

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional GameService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Body
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import GameService, BLACKJACK_FAMILY
    from .schemas import (
        # Request models
        CreateGameRequest,
        AddPlayerRequest,
        DealRequest,
        DealToPlayerRequest,
        DiscardRequest,
        ResetDeckRequest,
        CribbageDiscardRequest,
        CribbagePlayRequest,
        # Response models
        GameResponse,
        ActionResponse,
        DealResponse,
        ResultsResponse,
        GameListResponse,
        DeleteGameResponse,
        DeckTypesResponse,
        DeckTypeInfo,
        StatsResponse,
        HealthResponse,
        ErrorResponse,
        # Nested models
        CardInfo,
        PlayerInfo,
        DeckInfo,
        DiscardPileInfo,
        CribbageInfo,
    )

    game_service = service or GameService()

    @asynccontextmanager
    async def lifespan(app):
        sweeper = GameSweeper(
            game_service.registry,
            max_age_seconds=config.MAX_GAME_AGE_SECONDS,
            interval_seconds=config.CLEANUP_INTERVAL_SECONDS,
        )
        sweeper.start()
        logger.info(
            "Game sweeper started (max age %ds, every %ds)",
            config.MAX_GAME_AGE_SECONDS, config.CLEANUP_INTERVAL_SECONDS,
        )
        try:
            yield
        finally:
            sweeper.stop()

    app = FastAPI(
        title="Cardroom API",
        description="""
Multiplayer card table service: Blackjack, Glitchjack and Cribbage.

## Error Codes

| Code | Status | Description |
|------|--------|-------------|
| `GAME_NOT_FOUND` | 404 | Game does not exist |
| `PLAYER_NOT_FOUND` | 404 | Player is not seated at the game |
| `PILE_NOT_FOUND` | 404 | Discard pile does not exist |
| `WRONG_PHASE` | 400 | Action not valid in the current status or phase |
| `WRONG_GAME_TYPE` | 400 | Action belongs to another game type |
| `NOT_YOUR_TURN` | 400 | Another player is at the cursor |
| `ROSTER_FULL` | 400 | No free seat |
| `NO_PLAYERS` | 400 | Game cannot start without players |
| `PLAYER_FINISHED` | 400 | Player already stood or busted |
| `INVALID_MOVE` | 400 | Bad card index or illegal play |
| `UNSUPPORTED_ACTION` | 400 | Game type has no such action |
| `DECK_EXHAUSTED` | 400 | Not enough cards left |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_from_result(result: ActionResult) -> JSONResponse:
        error_code = result.error_code or ErrorCode.INVALID_MOVE
        details = None
        if result.game is not None:
            details = {"game_id": result.game.game_id, "status": result.game.status.value}
            if result.player is not None:
                details["player_id"] = result.player.player_id
        return make_error_response(
            error_code,
            result.error or "Request failed",
            status_code=404 if error_code.is_not_found else 400,
            details=details,
        )

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(status="healthy", version=__version__)

    @app.get(
        "/api/v1/stats",
        response_model=StatsResponse,
        tags=["System"],
        summary="Service statistics",
    )
    def stats() -> StatsResponse:
        return StatsResponse(
            version=__version__,
            environment=config.CARDROOM_ENV,
            **game_service.stats(),
        )

    @app.get(
        "/api/v1/deck-types",
        response_model=DeckTypesResponse,
        tags=["System"],
        summary="List supported deck types",
    )
    def deck_types() -> DeckTypesResponse:
        return DeckTypesResponse(
            deck_types=[DeckTypeInfo(**info) for info in game_service.deck_types()]
        )

    @app.get("/", tags=["System"])
    def root():
        """Root endpoint with API info."""
        return {
            "name": "Cardroom API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameResponse,
        tags=["Games"],
        summary="Create a new game",
    )
    def create_game(request: Optional[CreateGameRequest] = Body(None)) -> GameResponse:
        """
        Create a new game.

        Unknown deck types fall back to `standard` and unknown game types to
        `blackjack`. Glitchjack always plays with glitch decks; Cribbage
        always seats two.
        """
        request = request or CreateGameRequest()
        game = game_service.create_game(
            num_decks=request.num_decks,
            deck_type=DeckType.parse(request.deck_type),
            game_type=GameType.parse(request.game_type),
            max_players=request.max_players or config.DEFAULT_MAX_PLAYERS,
        )
        return _convert_game(game)

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List active games",
    )
    def list_games() -> GameListResponse:
        games = game_service.list_games()
        return GameListResponse(games=games, count=len(games))

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get a game snapshot",
    )
    def get_game(game_id: str) -> Union[GameResponse, JSONResponse]:
        result = game_service.get_game(game_id)
        if not result.success:
            return error_from_result(result)
        return _convert_game(result.game)

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=DeleteGameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Delete a game",
    )
    def delete_game(game_id: str) -> Union[DeleteGameResponse, JSONResponse]:
        if not game_service.delete_game(game_id):
            return make_error_response(
                ErrorCode.GAME_NOT_FOUND, f"Game {game_id} not found", status_code=404
            )
        return DeleteGameResponse(success=True, game_id=game_id)

    # =========================================================================
    # Table Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/players",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Table"],
        summary="Add a player",
    )
    def add_player(game_id: str, request: AddPlayerRequest) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.add_player(game_id, request.name))

    @app.delete(
        "/api/v1/games/{game_id}/players/{player_id}",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Table"],
        summary="Remove a player",
    )
    def remove_player(game_id: str, player_id: str) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.remove_player(game_id, player_id))

    @app.post(
        "/api/v1/games/{game_id}/shuffle",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Table"],
        summary="Shuffle the remaining deck",
    )
    def shuffle_deck(game_id: str) -> Union[GameResponse, JSONResponse]:
        result = game_service.shuffle_deck(game_id)
        if not result.success:
            return error_from_result(result)
        return _convert_game(result.game)

    @app.post(
        "/api/v1/games/{game_id}/reset",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Table"],
        summary="Rebuild the deck",
    )
    def reset_deck(
        game_id: str,
        request: Optional[ResetDeckRequest] = Body(None),
    ) -> Union[GameResponse, JSONResponse]:
        """Rebuild the deck unshuffled, optionally with a new count or type."""
        request = request or ResetDeckRequest()
        deck_type = DeckType.parse(request.deck_type) if request.deck_type else None
        result = game_service.reset_deck(game_id, request.num_decks, deck_type)
        if not result.success:
            return error_from_result(result)
        return _convert_game(result.game)

    @app.post(
        "/api/v1/games/{game_id}/deal",
        response_model=DealResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Table"],
        summary="Deal cards face up",
    )
    def deal_cards(
        game_id: str,
        request: Optional[DealRequest] = Body(None),
    ) -> Union[DealResponse, JSONResponse]:
        """Deal `count` cards off the top. Nothing is dealt if too few remain."""
        request = request or DealRequest()
        result = game_service.deal_cards(game_id, request.count)
        if not result.success:
            return error_from_result(result)
        return DealResponse(
            game_id=game_id,
            cards=[_convert_card(card) for card in result.cards],
            remaining_cards=result.game.deck.remaining_cards(),
        )

    @app.post(
        "/api/v1/games/{game_id}/deal/player/{player_id}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Table"],
        summary="Deal one card to a player",
    )
    def deal_to_player(
        game_id: str,
        player_id: str,
        request: Optional[DealToPlayerRequest] = Body(None),
    ) -> Union[ActionResponse, JSONResponse]:
        request = request or DealToPlayerRequest()
        return _action_response(game_service.deal_to_player(game_id, player_id, request.face_up))

    @app.post(
        "/api/v1/games/{game_id}/discard/{pile_id}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Table"],
        summary="Move a card from a hand to a discard pile",
    )
    def discard(game_id: str, pile_id: str, request: DiscardRequest) -> Union[ActionResponse, JSONResponse]:
        return _action_response(
            game_service.discard(game_id, pile_id, request.player_id, request.card_index)
        )

    # =========================================================================
    # Blackjack Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/start",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Start the game",
    )
    def start_game(game_id: str) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.start_game(game_id))

    @app.post(
        "/api/v1/games/{game_id}/hit/{player_id}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Draw a card",
    )
    def hit(game_id: str, player_id: str) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.hit(game_id, player_id))

    @app.post(
        "/api/v1/games/{game_id}/stand/{player_id}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Stand",
    )
    def stand(game_id: str, player_id: str) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.stand(game_id, player_id))

    @app.get(
        "/api/v1/games/{game_id}/results",
        response_model=ResultsResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Game results",
    )
    def get_results(game_id: str) -> Union[ResultsResponse, JSONResponse]:
        """Per-player outcomes for blackjack games; the pegboard for cribbage."""
        result = game_service.get_results(game_id)
        if not result.success:
            return error_from_result(result)
        game = result.game
        return ResultsResponse(
            game_id=game.game_id,
            game_type=game.game_type.value,
            status=game.status.value,
            data=result.data,
            game=_convert_game(game),
        )

    # =========================================================================
    # Cribbage Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/cribbage/deal",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Cribbage"],
        summary="Deal the next hand",
    )
    def cribbage_deal(game_id: str) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.cribbage_deal(game_id))

    @app.post(
        "/api/v1/games/{game_id}/cribbage/discard/{player_id}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Cribbage"],
        summary="Discard two cards to the crib",
    )
    def cribbage_discard(
        game_id: str,
        player_id: str,
        request: CribbageDiscardRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        return _action_response(
            game_service.cribbage_discard(game_id, player_id, request.card_indices)
        )

    @app.post(
        "/api/v1/games/{game_id}/cribbage/play/{player_id}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Cribbage"],
        summary="Lay a card on the count",
    )
    def cribbage_play(
        game_id: str,
        player_id: str,
        request: CribbagePlayRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        return _action_response(
            game_service.cribbage_play(game_id, player_id, request.card_index)
        )

    @app.post(
        "/api/v1/games/{game_id}/cribbage/go/{player_id}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Cribbage"],
        summary="Declare go",
    )
    def cribbage_go(game_id: str, player_id: str) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.cribbage_go(game_id, player_id))

    @app.post(
        "/api/v1/games/{game_id}/cribbage/show",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Cribbage"],
        summary="Score both hands and the crib",
    )
    def cribbage_show(game_id: str) -> Union[ActionResponse, JSONResponse]:
        return _action_response(game_service.cribbage_show(game_id))

    @app.get(
        "/api/v1/games/{game_id}/cribbage/state",
        response_model=CribbageInfo,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Cribbage"],
        summary="Cribbage phase, count and pegboard",
    )
    def cribbage_state(game_id: str) -> Union[CribbageInfo, JSONResponse]:
        result = game_service.cribbage_state(game_id)
        if not result.success:
            return error_from_result(result)
        with result.game.lock:
            return _convert_cribbage(result.game)

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _action_response(result: ActionResult) -> Union[ActionResponse, JSONResponse]:
        if not result.success:
            return error_from_result(result)
        with result.game.lock:
            return ActionResponse(
                message=result.message,
                game=_convert_game(result.game),
                player=_convert_player(result.game, result.player) if result.player else None,
                card=_convert_card(result.card) if result.card else None,
                data=result.data,
            )

    def _convert_card(card: Card) -> CardInfo:
        """Face-down cards keep their secret: rank, suit and name are omitted."""
        if not card.face_up:
            return CardInfo(face_up=False)
        return CardInfo(
            face_up=True,
            rank=int(card.rank),
            suit=card.suit.display_name,
            name=str(card),
            attributes=dict(card.attributes),
        )

    def _visible_value(game: Game, player: Player) -> Optional[int]:
        if game.game_type not in BLACKJACK_FAMILY:
            return None
        visible = [card for card in player.hand if card.face_up]
        if game.game_type == GameType.GLITCHJACK:
            return glitchjack_hand_value(visible)
        return soft_total(visible)

    def _convert_player(game: Game, player: Player) -> PlayerInfo:
        return PlayerInfo(
            player_id=player.player_id,
            name=player.name,
            hand=[_convert_card(card) for card in player.hand],
            hand_size=player.hand_size(),
            visible_value=_visible_value(game, player),
            standing=player.standing,
            busted=player.busted,
        )

    def _convert_cribbage(game: Game) -> Optional[CribbageInfo]:
        state = game.cribbage_state
        if state is None:
            return None
        return CribbageInfo(
            phase=state.phase.value,
            dealer=state.dealer,
            crib_size=len(state.crib),
            starter=_convert_card(state.starter) if state.starter else None,
            played_cards=[_convert_card(card) for card in state.played_cards],
            play_total=state.play_total,
            play_count=state.play_count,
            scores=list(state.player_scores),
            game_score=state.game_score,
            winner=state.winner,
        )

    def _convert_game(game: Game) -> GameResponse:
        """Snapshot the game while holding its lock."""
        with game.lock:
            return _snapshot_game(game)

    def _snapshot_game(game: Game) -> GameResponse:
        return GameResponse(
            game_id=game.game_id,
            game_type=game.game_type.value,
            status=game.status.value,
            deck=DeckInfo(
                name=game.deck.name,
                deck_type=game.deck.deck_type.value,
                num_decks=game.deck.num_decks,
                remaining_cards=game.deck.remaining_cards(),
                full_size=game.deck.full_size,
            ),
            dealer=_convert_player(game, game.dealer),
            players=[_convert_player(game, player) for player in game.players],
            discard_piles=[
                DiscardPileInfo(
                    pile_id=pile.pile_id,
                    name=pile.name,
                    size=pile.size(),
                    top_card=_convert_card(pile.top_card()) if pile.top_card() else None,
                )
                for pile in game.discard_piles.values()
            ],
            max_players=game.max_players,
            current_player=game.current_player,
            created_at=game.created_at,
            last_used=game.last_used,
            cribbage=_convert_cribbage(game),
        )

    return app


# For running directly: uvicorn cardroom.api.app:app
app = create_app()
