"""
Tests for the HTTP API.

Tests:
- System endpoints
- Game lifecycle over HTTP
- Status code mapping for failures
- Hidden card masking
"""

import threading

import pytest
from fastapi.testclient import TestClient

from ..api import schemas
from ..api.app import create_app
from ..api.service import GameService

API = "/api/v1"


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def create_game(client, **body):
    response = client.post(f"{API}/games", json=body)
    assert response.status_code == 200
    return response.json()


def add_player(client, game_id, name):
    response = client.post(f"{API}/games/{game_id}/players", json={"name": name})
    assert response.status_code == 200
    return response.json()["player"]


class TestSystem:

    def test_health(self, client):
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_stats(self, client):
        create_game(client)
        data = client.get(f"{API}/stats").json()
        assert data["active_games"] == 1
        assert data["service"] == "cardroom"

    def test_deck_types(self, client):
        data = client.get(f"{API}/deck-types").json()
        sizes = {d["name"]: d["cards_per_deck"] for d in data["deck_types"]}
        assert sizes == {"standard": 52, "spanish21": 48, "glitch": 52}

    def test_root(self, client):
        assert client.get("/").json()["health"] == f"{API}/health"


class TestGames:

    def test_create_defaults(self, client):
        game = create_game(client)
        assert game["status"] == "waiting"
        assert game["game_type"] == "blackjack"
        assert game["deck"]["remaining_cards"] == 52
        assert game["current_player"] == 0
        assert [p["pile_id"] for p in game["discard_piles"]] == ["main"]

    def test_create_without_body(self, client):
        response = client.post(f"{API}/games")
        assert response.status_code == 200
        assert response.json()["deck"]["deck_type"] == "standard"

    def test_create_variants(self, client):
        assert create_game(client, deck_type="spanish21", num_decks=2)["deck"]["remaining_cards"] == 96
        assert create_game(client, game_type="glitchjack")["deck"]["deck_type"] == "glitch"
        assert create_game(client, game_type="cribbage")["max_players"] == 2

    def test_invalid_deck_count(self, client):
        response = client.post(f"{API}/games", json={"num_decks": 0})
        assert response.status_code == 422

    def test_get_and_list(self, client):
        game = create_game(client)
        assert client.get(f"{API}/games/{game['game_id']}").json()["game_id"] == game["game_id"]
        listing = client.get(f"{API}/games").json()
        assert listing == {"games": [game["game_id"]], "count": 1}

    def test_unknown_game_is_404(self, client):
        response = client.get(f"{API}/games/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "GAME_NOT_FOUND"

    def test_delete(self, client):
        game = create_game(client)
        response = client.delete(f"{API}/games/{game['game_id']}")
        assert response.json() == {"success": True, "game_id": game["game_id"]}
        assert client.delete(f"{API}/games/{game['game_id']}").status_code == 404


class TestTable:

    def test_add_player_validation(self, client):
        game = create_game(client)
        response = client.post(f"{API}/games/{game['game_id']}/players", json={"name": ""})
        assert response.status_code == 422

    def test_roster_full_is_400(self, client):
        game = create_game(client, max_players=1)
        add_player(client, game["game_id"], "Alice")
        response = client.post(f"{API}/games/{game['game_id']}/players", json={"name": "Bob"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "ROSTER_FULL"

    def test_remove_player(self, client):
        game = create_game(client)
        player = add_player(client, game["game_id"], "Alice")
        response = client.delete(f"{API}/games/{game['game_id']}/players/{player['player_id']}")
        assert response.status_code == 200
        assert response.json()["game"]["players"] == []

    def test_deal(self, client):
        game = create_game(client)
        data = client.post(f"{API}/games/{game['game_id']}/deal", json={"count": 3}).json()
        assert len(data["cards"]) == 3
        assert data["remaining_cards"] == 49

    def test_deal_too_many(self, client):
        game = create_game(client)
        response = client.post(f"{API}/games/{game['game_id']}/deal", json={"count": 60})
        assert response.status_code == 400
        assert response.json()["error_code"] == "DECK_EXHAUSTED"

    def test_face_down_card_is_masked(self, client):
        game = create_game(client)
        player = add_player(client, game["game_id"], "Alice")
        response = client.post(
            f"{API}/games/{game['game_id']}/deal/player/{player['player_id']}",
            json={"face_up": False},
        )
        card = response.json()["card"]
        assert card["face_up"] is False
        assert card["rank"] is None and card["suit"] is None

    def test_discard(self, client):
        game = create_game(client)
        player = add_player(client, game["game_id"], "Alice")
        client.post(f"{API}/games/{game['game_id']}/deal/player/{player['player_id']}")

        response = client.post(
            f"{API}/games/{game['game_id']}/discard/main",
            json={"player_id": player["player_id"], "card_index": 0},
        )

        assert response.status_code == 200
        piles = response.json()["game"]["discard_piles"]
        assert piles[0]["size"] == 1

    def test_discard_to_unknown_pile(self, client):
        game = create_game(client)
        player = add_player(client, game["game_id"], "Alice")
        response = client.post(
            f"{API}/games/{game['game_id']}/discard/side",
            json={"player_id": player["player_id"], "card_index": 0},
        )
        assert response.status_code == 404
        assert response.json()["error_code"] == "PILE_NOT_FOUND"

    def test_shuffle_and_reset(self, client):
        game = create_game(client)
        game_id = game["game_id"]
        client.post(f"{API}/games/{game_id}/deal", json={"count": 10})

        assert client.post(f"{API}/games/{game_id}/shuffle").json()["deck"]["remaining_cards"] == 42
        assert client.post(f"{API}/games/{game_id}/reset").json()["deck"]["remaining_cards"] == 52
        reset = client.post(f"{API}/games/{game_id}/reset", json={"num_decks": 2, "deck_type": "spanish21"})
        assert reset.json()["deck"]["remaining_cards"] == 96


class TestBlackjackFlow:

    def test_start_without_players(self, client):
        game = create_game(client)
        response = client.post(f"{API}/games/{game['game_id']}/start")
        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_PLAYERS"

    def test_full_round(self, client):
        game = create_game(client)
        game_id = game["game_id"]
        player = add_player(client, game_id, "Alice")

        started = client.post(f"{API}/games/{game_id}/start").json()["game"]
        hole = started["dealer"]["hand"][0]
        assert started["status"] == "in_progress"
        assert hole["face_up"] is False and hole["rank"] is None
        assert started["deck"]["remaining_cards"] == 48

        early = client.get(f"{API}/games/{game_id}/results")
        assert early.status_code == 400
        assert early.json()["error_code"] == "WRONG_PHASE"

        stood = client.post(f"{API}/games/{game_id}/stand/{player['player_id']}").json()["game"]
        assert stood["status"] == "finished"
        assert stood["current_player"] == -1
        assert all(card["face_up"] for card in stood["dealer"]["hand"])

        results = client.get(f"{API}/games/{game_id}/results").json()
        assert results["data"]["results"][player["player_id"]] in {"bust", "blackjack", "win", "push", "lose"}

    def test_hit_unknown_player(self, client):
        game = create_game(client)
        add_player(client, game["game_id"], "Alice")
        client.post(f"{API}/games/{game['game_id']}/start")
        response = client.post(f"{API}/games/{game['game_id']}/hit/nobody")
        assert response.status_code == 404
        assert response.json()["error_code"] == "PLAYER_NOT_FOUND"

    def test_hit_on_cribbage_game(self, client):
        game = create_game(client, game_type="cribbage")
        response = client.post(f"{API}/games/{game['game_id']}/hit/p1")
        assert response.status_code == 400
        assert response.json()["error_code"] == "WRONG_GAME_TYPE"


class TestCribbageFlow:

    def test_discard_round(self, client):
        game = create_game(client, game_type="cribbage")
        game_id = game["game_id"]
        dealer = add_player(client, game_id, "Dan")
        pone = add_player(client, game_id, "Pat")

        assert client.get(f"{API}/games/{game_id}/cribbage/state").status_code == 400

        client.post(f"{API}/games/{game_id}/start")
        state = client.get(f"{API}/games/{game_id}/cribbage/state").json()
        assert state["phase"] == "discard"
        assert state["scores"] == [0, 0]

        for player in (pone, dealer):
            response = client.post(
                f"{API}/games/{game_id}/cribbage/discard/{player['player_id']}",
                json={"card_indices": [0, 1]},
            )
            assert response.status_code == 200

        state = client.get(f"{API}/games/{game_id}/cribbage/state").json()
        assert state["phase"] == "play"
        assert state["crib_size"] == 4
        assert state["starter"]["face_up"] is True

    def test_discard_needs_two_indices(self, client):
        game = create_game(client, game_type="cribbage")
        game_id = game["game_id"]
        add_player(client, game_id, "Dan")
        pone = add_player(client, game_id, "Pat")
        client.post(f"{API}/games/{game_id}/start")

        response = client.post(
            f"{API}/games/{game_id}/cribbage/discard/{pone['player_id']}",
            json={"card_indices": [0]},
        )
        assert response.status_code == 422

    def test_show_in_wrong_phase(self, client):
        game = create_game(client, game_type="cribbage")
        game_id = game["game_id"]
        add_player(client, game_id, "Dan")
        add_player(client, game_id, "Pat")
        client.post(f"{API}/games/{game_id}/start")

        response = client.post(f"{API}/games/{game_id}/cribbage/show")
        assert response.status_code == 400
        assert response.json()["error_code"] == "WRONG_PHASE"


def test_app_uses_given_service():
    service = GameService()
    client = TestClient(create_app(service))
    game = client.post(f"{API}/games", json={}).json()
    assert service.get_game(game["game_id"]).success


class DepthLock:
    """Re-entrant lock that records how deeply it is held."""

    def __init__(self):
        self._lock = threading.RLock()
        self.depth = 0

    def __enter__(self):
        self._lock.acquire()
        self.depth += 1
        return self

    def __exit__(self, *exc_info):
        self.depth -= 1
        self._lock.release()


class TestSnapshots:

    def test_deck_reports_full_size(self, client):
        game = create_game(client, deck_type="spanish21", num_decks=2)
        client.post(f"{API}/games/{game['game_id']}/deal", json={"count": 5})

        deck = client.get(f"{API}/games/{game['game_id']}").json()["deck"]

        assert deck["full_size"] == 96
        assert deck["remaining_cards"] == 91

    def test_snapshot_built_under_game_lock(self, service, monkeypatch):
        game = service.create_game()
        alice = service.add_player(game.game_id, "Alice").player
        game.lock = DepthLock()
        depths = []
        real_deck_info = schemas.DeckInfo

        def recording_deck_info(**fields):
            depths.append(game.lock.depth)
            return real_deck_info(**fields)

        monkeypatch.setattr(schemas, "DeckInfo", recording_deck_info)
        client = TestClient(create_app(service))

        assert client.get(f"{API}/games/{game.game_id}").status_code == 200
        assert client.post(f"{API}/games/{game.game_id}/start").status_code == 200
        assert client.post(f"{API}/games/{game.game_id}/stand/{alice.player_id}").status_code == 200

        assert len(depths) == 3
        assert all(depth >= 1 for depth in depths)
        assert game.lock.depth == 0
