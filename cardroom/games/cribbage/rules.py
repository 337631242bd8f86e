"""
Cribbage - Two-player game to 121.

Each hand runs through four phases:
1. Discard: six cards each, two go face down to the dealer's crib
2. Play: players alternate laying cards, pegging as the count climbs to 31
3. Show: hands and crib are scored with the starter card
4. Deal: the deal passes and a new hand is dealt

The game finishes as soon as either seat reaches 121.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ...engine_core.action import Action, ActionType, ActionResult, ErrorCode
from ...engine_core.cards import Rank
from ...engine_core.state import Game, GameStatus, GameType, Player, NO_ACTIVE_PLAYER
from ..base import require_status
from .scoring import score_breakdown, score_pegging
from .state import CribbagePhase, CribbageState, HAND_SIZE, KEEP_SIZE, MAX_COUNT

logger = logging.getLogger(__name__)

REQUIRED_PLAYERS = 2
HIS_HEELS_POINTS = 2


@dataclass
class CribbageRules:
    """
    Stateless Cribbage engine.

    Per-game state lives on `game.cribbage_state`.
    """
    game_type: GameType = GameType.CRIBBAGE

    def start(self, game: Game) -> ActionResult:
        """Set up the pegboard and deal the first hand."""
        if game.num_players != REQUIRED_PLAYERS:
            return ActionResult.failure(
                "Cribbage requires exactly 2 players",
                ErrorCode.NO_PLAYERS if not game.players else ErrorCode.INVALID_MOVE,
                game=game,
            )
        error = require_status(game, GameStatus.WAITING, "Game already started")
        if error:
            return error

        game.start()
        game.cribbage_state = CribbageState(num_players=REQUIRED_PLAYERS)

        dealt = self._deal_hands(game, fresh_deck=False)
        if not dealt.success:
            return dealt

        logger.info("Cribbage game %s started", game.game_id)
        return ActionResult.ok(game, message="Cribbage game started")

    def apply(self, game: Game, action: Action) -> ActionResult:
        """Dispatch a cribbage action."""
        state = game.cribbage_state
        if state is None or not game.is_in_progress:
            return ActionResult.failure("Cribbage game not in progress", ErrorCode.WRONG_PHASE, game=game)
        if game.num_players != REQUIRED_PLAYERS:
            return ActionResult.failure("Cribbage requires exactly 2 players", ErrorCode.INVALID_MOVE, game=game)

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"Cribbage does not support {action.action_type.value}",
                ErrorCode.UNSUPPORTED_ACTION,
                game=game,
            )
        return handler(game, state, action)

    def results(self, game: Game) -> ActionResult:
        """Current pegboard, phase and winner (if any)."""
        state = game.cribbage_state
        if state is None:
            return ActionResult.failure("Cribbage game not started", ErrorCode.WRONG_PHASE, game=game)

        scores = {
            player.player_id: state.player_scores[i]
            for i, player in enumerate(game.players)
            if i < len(state.player_scores)
        }
        winner = None
        if state.winner is not None and state.winner < game.num_players:
            winner = game.players[state.winner].player_id

        return ActionResult.ok(
            game,
            data={
                "phase": state.phase,
                "scores": scores,
                "winner": winner,
                "dealer": state.dealer,
                "play_total": state.play_total,
            },
        )

    def _get_handler(self, action_type: ActionType):
        handlers = {
            ActionType.DEAL: self._handle_deal,
            ActionType.DISCARD: self._handle_discard,
            ActionType.PLAY: self._handle_play,
            ActionType.GO: self._handle_go,
            ActionType.SHOW: self._handle_show,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Deal
    # =========================================================================

    def _handle_deal(self, game: Game, state: CribbageState, action: Action) -> ActionResult:
        if state.phase != CribbagePhase.DEAL:
            return ActionResult.failure("Not in deal phase", ErrorCode.WRONG_PHASE, game=game)
        return self._deal_hands(game)

    def _deal_hands(self, game: Game, fresh_deck: bool = True) -> ActionResult:
        """
        Six cards each, non-dealer to act.

        Later hands rebuild and shuffle the deck; the opening hand is dealt
        from the deck as the game was created.
        """
        state = game.cribbage_state
        for player in game.players:
            player.clear_hand()
        state.clear_hand_state()

        if fresh_deck:
            game.deck.reset()
            game.deck.shuffle()

        for _ in range(HAND_SIZE):
            for player in game.players:
                if game.deal_to_player(player.player_id, face_up=True) is None:
                    logger.warning("Deck exhausted while dealing cribbage game %s", game.game_id)
                    return ActionResult.failure("Not enough cards in deck", ErrorCode.DECK_EXHAUSTED, game=game)

        state.phase = CribbagePhase.DISCARD
        game.current_player = state.non_dealer
        return ActionResult.ok(game, message="Hand dealt")

    # =========================================================================
    # Discard
    # =========================================================================

    def _handle_discard(self, game: Game, state: CribbageState, action: Action) -> ActionResult:
        if state.phase != CribbagePhase.DISCARD:
            return ActionResult.failure("Not in discard phase", ErrorCode.WRONG_PHASE, game=game)

        player, seat = self._seat(game, action.player_id)
        if player is None:
            return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)

        indices = action.payload.card_indices or []
        if len(indices) != 2 or len(set(indices)) != 2:
            return ActionResult.failure("Must discard exactly 2 cards", ErrorCode.INVALID_MOVE, game=game, player=player)
        if len(player.hand) != HAND_SIZE:
            return ActionResult.failure(
                "Player must have 6 cards to discard", ErrorCode.INVALID_MOVE, game=game, player=player
            )
        for index in indices:
            if index < 0 or index >= len(player.hand):
                return ActionResult.failure(
                    f"Invalid card index: {index}", ErrorCode.INVALID_MOVE, game=game, player=player
                )

        # Highest index first so earlier removals don't shift later ones
        for index in sorted(indices, reverse=True):
            card = player.remove_card(index)
            card.face_up = False
            state.crib.append(card)
        state.kept_hands[seat] = list(player.hand)

        if len(state.crib) < KEEP_SIZE:
            return ActionResult.ok(game, player=player, message="Waiting for the other discard")

        starter = game.deck.deal()
        if starter is None:
            return ActionResult.failure("No cards remaining for starter", ErrorCode.DECK_EXHAUSTED, game=game)
        starter.face_up = True
        state.starter = starter

        points = 0
        if starter.rank == Rank.JACK:
            points = HIS_HEELS_POINTS
            state.award(state.dealer, points)
            if self._check_winner(game, state):
                return ActionResult.ok(game, player=player, card=starter, data={"his_heels": points})

        state.phase = CribbagePhase.PLAY
        game.current_player = state.non_dealer
        return ActionResult.ok(game, player=player, card=starter, data={"his_heels": points})

    # =========================================================================
    # Play
    # =========================================================================

    def _handle_play(self, game: Game, state: CribbageState, action: Action) -> ActionResult:
        if state.phase != CribbagePhase.PLAY:
            return ActionResult.failure("Not in play phase", ErrorCode.WRONG_PHASE, game=game)

        player, seat = self._seat(game, action.player_id)
        if player is None:
            return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)
        if seat != game.current_player:
            return ActionResult.failure("Not your turn", ErrorCode.NOT_YOUR_TURN, game=game, player=player)

        index = action.payload.card_index
        if index is None or index < 0 or index >= len(player.hand):
            return ActionResult.failure("Invalid card index", ErrorCode.INVALID_MOVE, game=game, player=player)

        new_total = state.play_total + player.hand[index].cribbage_value
        if new_total > MAX_COUNT:
            return ActionResult.failure("Card would exceed 31", ErrorCode.INVALID_MOVE, game=game, player=player)

        card = player.remove_card(index)
        state.played_cards.append(card)
        state.play_total = new_total
        state.play_count += 1
        state.last_to_play = seat

        points = score_pegging(state.played_cards, state.play_total)
        state.award(seat, points)
        if self._check_winner(game, state):
            return ActionResult.ok(game, player=player, card=card, data={"points": points})

        if new_total == MAX_COUNT or self._all_hands_empty(game):
            self._end_count(game, state)
            self._check_winner(game, state)
        else:
            game.current_player = (seat + 1) % game.num_players

        return ActionResult.ok(
            game,
            player=player,
            card=card,
            data={"points": points, "play_total": state.play_total},
        )

    def _handle_go(self, game: Game, state: CribbageState, action: Action) -> ActionResult:
        if state.phase != CribbagePhase.PLAY:
            return ActionResult.failure("Not in play phase", ErrorCode.WRONG_PHASE, game=game)

        player, seat = self._seat(game, action.player_id)
        if player is None:
            return ActionResult.failure("Player not found", ErrorCode.PLAYER_NOT_FOUND, game=game)
        if seat != game.current_player:
            return ActionResult.failure("Not your turn", ErrorCode.NOT_YOUR_TURN, game=game, player=player)
        if self._can_play(player, state):
            return ActionResult.failure(
                "You must play a card if possible", ErrorCode.INVALID_MOVE, game=game, player=player
            )

        opponent_seat = (seat + 1) % game.num_players
        if self._can_play(game.players[opponent_seat], state):
            game.current_player = opponent_seat
            return ActionResult.ok(game, player=player, message="Go")

        # Nobody can play: the count ends and the last card scores
        self._end_count(game, state)
        self._check_winner(game, state)
        return ActionResult.ok(game, player=player, message="Go - count reset")

    def _end_count(self, game: Game, state: CribbageState) -> None:
        """
        Close out the current count.

        The last player to lay a card pegs 1 unless the count hit 31
        exactly (those points were already scored with the card).
        """
        if state.play_total != MAX_COUNT and state.last_to_play != NO_ACTIVE_PLAYER:
            state.award(state.last_to_play, 1)

        last = state.last_to_play
        state.play_total = 0
        state.played_cards = []
        state.last_to_play = NO_ACTIVE_PLAYER

        if self._all_hands_empty(game):
            state.phase = CribbagePhase.SHOW
            game.current_player = state.non_dealer
            return

        # The player after the last to lay leads the next count
        first = (last + 1) % game.num_players if last != NO_ACTIVE_PLAYER else state.non_dealer
        for offset in range(game.num_players):
            seat = (first + offset) % game.num_players
            if game.players[seat].hand:
                game.current_player = seat
                return

    # =========================================================================
    # Show
    # =========================================================================

    def _handle_show(self, game: Game, state: CribbageState, action: Action) -> ActionResult:
        if state.phase != CribbagePhase.SHOW:
            return ActionResult.failure("Not in show phase", ErrorCode.WRONG_PHASE, game=game)

        scores: dict[str, object] = {}
        non_dealer = state.non_dealer
        for seat in (non_dealer, state.dealer):
            breakdown = score_breakdown(state.kept_hands[seat], state.starter)
            state.award(seat, breakdown["total"])
            scores[game.players[seat].player_id] = breakdown["total"]

        crib = score_breakdown(state.crib, state.starter, is_crib=True)
        state.award(state.dealer, crib["total"])
        scores["crib"] = crib["total"]

        if self._check_winner(game, state):
            scores["winner"] = game.players[state.winner].player_id
            return ActionResult.ok(game, data={"scores": scores})

        state.dealer = state.non_dealer
        state.phase = CribbagePhase.DEAL
        for player in game.players:
            player.clear_hand()
        state.clear_hand_state()
        game.current_player = NO_ACTIVE_PLAYER

        return ActionResult.ok(game, data={"scores": scores})

    # =========================================================================
    # Helpers
    # =========================================================================

    def _seat(self, game: Game, player_id: str | None) -> tuple[Player | None, int]:
        seat = game.player_index(player_id or "")
        if seat == NO_ACTIVE_PLAYER:
            return None, seat
        return game.players[seat], seat

    def _can_play(self, player: Player, state: CribbageState) -> bool:
        return any(state.play_total + c.cribbage_value <= MAX_COUNT for c in player.hand)

    def _all_hands_empty(self, game: Game) -> bool:
        return all(not p.hand for p in game.players)

    def _check_winner(self, game: Game, state: CribbageState) -> bool:
        """Finish the game if a seat has reached the target."""
        if state.winner is None:
            return False
        state.phase = CribbagePhase.FINISHED
        game.finish()
        game.current_player = NO_ACTIVE_PLAYER
        logger.info(
            "Cribbage game %s won by seat %d with %d points",
            game.game_id, state.winner, state.player_scores[state.winner],
        )
        return True
