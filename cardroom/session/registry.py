"""
Game Registry - Creates and tracks concurrent games.

LIFECYCLE:
1. create_game -> new Game in `waiting`, stored under a fresh UUID
2. get_game -> lookup; refreshes the game's last-used time
3. delete_game, or cleanup_old_games sweeps games idle for too long

PERSISTENCE:
- None. Games live in memory for the life of the process.

LOCKING:
- Reads (get_game, list_games, game_count) share the lock
- Writes (create_game, delete_game, cleanup_old_games) hold it alone
- The registry does not lock individual games; see Game.lock
"""

from __future__ import annotations
import logging
import random
import threading
import time

from ..engine_core.cards import DeckType
from ..engine_core.state import Game, GameType, DEFAULT_MAX_PLAYERS
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)

CRIBBAGE_PLAYERS = 2


class GameRegistry:
    """
    Thread-safe map of game ID to Game.

    Create one per application and pass it to whatever needs it.
    """

    def __init__(self):
        self._games: dict[str, Game] = {}
        self._lock = ReadWriteLock()
        # Readers refresh timestamps concurrently; this serialises those writes
        self._touch_lock = threading.Lock()

    def create_game(
        self,
        num_decks: int = 1,
        deck_type: DeckType = DeckType.STANDARD,
        game_type: GameType = GameType.BLACKJACK,
        max_players: int = DEFAULT_MAX_PLAYERS,
        shuffle: bool = True,
        rng: random.Random | None = None,
    ) -> Game:
        """
        Create and register a new game.

        Args:
            num_decks: Decks combined into the shoe (values below 1 mean 1)
            deck_type: Composition; Glitchjack always uses glitch decks
            game_type: Rules the game will be played under
            max_players: Seat limit; Cribbage is always two
            shuffle: Shuffle the new deck before returning
            rng: Optional random source for the deck

        Returns:
            The new Game, status `waiting`
        """
        if game_type == GameType.GLITCHJACK:
            deck_type = DeckType.GLITCH
        if game_type == GameType.CRIBBAGE:
            max_players = CRIBBAGE_PLAYERS

        game = Game.create(
            num_decks=num_decks,
            deck_type=deck_type,
            game_type=game_type,
            max_players=max_players,
            rng=rng,
        )
        if shuffle:
            game.deck.shuffle()

        with self._lock.write():
            self._games[game.game_id] = game

        logger.info(
            "Created %s game %s (%d x %s deck, max %d players)",
            game_type.value, game.game_id, game.deck.num_decks, deck_type.value, max_players,
        )
        return game

    def get_game(self, game_id: str) -> Game | None:
        """Get a game by ID and mark it as used. None if unknown."""
        with self._lock.read():
            game = self._games.get(game_id)
            if game is not None:
                with self._touch_lock:
                    game.touch()
            return game

    def delete_game(self, game_id: str) -> bool:
        with self._lock.write():
            game = self._games.pop(game_id, None)
        if game is not None:
            logger.info("Deleted game %s", game_id)
        return game is not None

    def list_games(self) -> list[str]:
        """Snapshot of current game IDs."""
        with self._lock.read():
            return list(self._games)

    def game_count(self) -> int:
        with self._lock.read():
            return len(self._games)

    def cleanup_old_games(self, max_age_seconds: float) -> int:
        """
        Delete games not used within `max_age_seconds`.

        Returns the number of games removed.
        """
        cutoff = time.time() - max_age_seconds
        with self._lock.write():
            stale = [gid for gid, game in self._games.items() if game.last_used < cutoff]
            for game_id in stale:
                del self._games[game_id]

        if stale:
            logger.info("Cleaned up %d idle game(s)", len(stale))
        return len(stale)


class GameSweeper:
    """
    Background thread that periodically calls cleanup_old_games.

    Usage:
        sweeper = GameSweeper(registry, max_age_seconds=3600, interval_seconds=300)
        sweeper.start()
        ...
        sweeper.stop()
    """

    def __init__(self, registry: GameRegistry, max_age_seconds: float, interval_seconds: float):
        self.registry = registry
        self.max_age_seconds = max_age_seconds
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="game-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.registry.cleanup_old_games(self.max_age_seconds)
