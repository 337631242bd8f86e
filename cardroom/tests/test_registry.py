"""
Tests for the game registry, the reader/writer lock and the sweeper.

Tests:
- Create, get, delete, list
- Variant-specific creation rules
- Age-based cleanup
- Concurrent access
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from ..engine_core.cards import DeckType
from ..engine_core.state import GameStatus, GameType
from ..session import GameRegistry, GameSweeper, ReadWriteLock


class TestGameRegistry:

    def test_create_and_get(self, registry):
        game = registry.create_game(num_decks=2)

        assert game.status == GameStatus.WAITING
        assert game.deck.remaining_cards() == 104
        assert registry.get_game(game.game_id) is game

    def test_get_unknown(self, registry):
        assert registry.get_game("missing") is None

    def test_delete(self, registry):
        game = registry.create_game()
        assert registry.delete_game(game.game_id)
        assert registry.get_game(game.game_id) is None
        assert not registry.delete_game(game.game_id)

    def test_list_and_count(self, registry):
        ids = {registry.create_game().game_id for _ in range(3)}
        assert set(registry.list_games()) == ids
        assert registry.game_count() == 3

    def test_new_decks_are_shuffled(self, registry):
        game = registry.create_game()
        unshuffled = registry.create_game(shuffle=False)
        assert len(game.deck.cards) == len(unshuffled.deck.cards)
        assert [(c.rank, c.suit) for c in game.deck.cards] != [(c.rank, c.suit) for c in unshuffled.deck.cards]

    def test_spanish21_game(self, registry):
        game = registry.create_game(deck_type=DeckType.SPANISH21)
        assert game.deck.remaining_cards() == 48

    def test_glitchjack_forces_glitch_deck(self, registry):
        game = registry.create_game(deck_type=DeckType.STANDARD, game_type=GameType.GLITCHJACK)
        assert game.deck.deck_type == DeckType.GLITCH

    def test_cribbage_seats_two(self, registry):
        game = registry.create_game(game_type=GameType.CRIBBAGE, max_players=6)
        assert game.max_players == 2

    def test_get_refreshes_last_used(self, registry):
        game = registry.create_game()
        game.last_used = 0.0
        registry.get_game(game.game_id)
        assert game.last_used > 0.0


class TestCleanup:

    def test_removes_only_idle_games(self, registry):
        stale = registry.create_game()
        fresh = registry.create_game()
        stale.last_used = time.time() - 120

        removed = registry.cleanup_old_games(60)

        assert removed == 1
        assert registry.get_game(stale.game_id) is None
        assert registry.get_game(fresh.game_id) is fresh

    def test_zero_max_age_removes_everything_not_touched_now(self, registry):
        games = [registry.create_game() for _ in range(3)]
        for game in games:
            game.last_used -= 1

        assert registry.cleanup_old_games(0) == 3
        assert registry.game_count() == 0

    def test_nothing_to_remove(self, registry):
        registry.create_game()
        assert registry.cleanup_old_games(3600) == 0
        assert registry.game_count() == 1

    def test_sweeper_runs_cleanup(self, registry):
        game = registry.create_game()
        game.last_used = time.time() - 120
        sweeper = GameSweeper(registry, max_age_seconds=60, interval_seconds=0.01)

        sweeper.start()
        try:
            deadline = time.time() + 2
            while registry.game_count() and time.time() < deadline:
                time.sleep(0.01)
        finally:
            sweeper.stop()

        assert registry.game_count() == 0


class TestConcurrency:

    def test_concurrent_creates(self, registry):
        def create_many(_):
            return [registry.create_game().game_id for _ in range(10)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            batches = list(pool.map(create_many, range(8)))

        ids = [game_id for batch in batches for game_id in batch]
        assert len(set(ids)) == 80
        assert registry.game_count() == 80

    def test_concurrent_reads_and_deletes(self, registry):
        games = [registry.create_game() for _ in range(40)]

        def read(game):
            return registry.get_game(game.game_id)

        def delete(game):
            return registry.delete_game(game.game_id)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(read, games))
            deleted = list(pool.map(delete, games[:20]))

        assert all(deleted)
        assert registry.game_count() == 20


class TestReadWriteLock:

    def test_readers_share(self):
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=2)

        def reader():
            with lock.read():
                both_inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(2)

        assert not both_inside.broken

    def test_writer_waits_for_reader(self):
        lock = ReadWriteLock()
        written = threading.Event()

        def writer():
            with lock.write():
                written.set()

        lock.acquire_read()
        thread = threading.Thread(target=writer)
        thread.start()
        assert not written.wait(0.1)

        lock.release_read()
        assert written.wait(2)
        thread.join(2)
