"""
Tests for FastAPI endpoints — integration tests for the SquashAnalyzer API.
"""

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from squash.api.app import app
from squash.api.routes_coaching import get_advice_generator, get_credential_store
from squash.api.routes_history import get_repository
from squash.config import settings
from squash.services.advice_generator import AdviceGenerator
from squash.services.credentials import InMemoryCredentialStore
from squash.services.llm_client import LLMClient
from squash.services.storage import MatchRepository, get_engine

BASE = "/api/v1/matches"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def match_id(client):
    r = client.post(f"{BASE}/", params={"player1_name": "Alice", "player2_name": "Bob"})
    return r.json()["id"]


def score(client, match_id, player, zone="front_left", shot_type="drive"):
    client.post(f"{BASE}/{match_id}/select-player", params={"player": player})
    client.post(f"{BASE}/{match_id}/select-zone", params={"zone": zone})
    return client.post(f"{BASE}/{match_id}/point", params={"shot_type": shot_type})


class TestHealthEndpoints:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"
        assert r.json()["app"] == "SquashAnalyzer"
        assert "X-Request-ID" in r.headers


class TestMatchLifecycle:
    def test_create_match(self, client):
        r = client.post(f"{BASE}/", params={
            "player1_name": "Ali", "player2_name": "Nour", "starting_server": "player2",
        })
        assert r.status_code == 201
        data = r.json()
        assert data["player1_name"] == "Ali"
        assert data["best_of"] == 5
        assert data["score_line"] == "0 - 0"
        assert data["current_game"]["server"] == "player2"
        assert data["current_game"]["scoring_step"] == "select_player"

    def test_blank_names_get_defaults(self, client):
        data = client.post(f"{BASE}/").json()
        assert data["player1_name"] == "Player 1"
        assert data["player2_name"] == "Player 2"

    def test_invalid_best_of(self, client):
        r = client.post(f"{BASE}/", params={"best_of": 4})
        assert r.status_code == 400

    def test_get_match(self, client, match_id):
        r = client.get(f"{BASE}/{match_id}")
        assert r.status_code == 200
        assert r.json()["id"] == match_id

    def test_not_found(self, client):
        assert client.get(f"{BASE}/nonexistent").status_code == 404
        assert client.post(f"{BASE}/nonexistent/undo").status_code == 404

    def test_next_game_only_after_game_over(self, client, match_id):
        r = client.post(f"{BASE}/{match_id}/next-game")
        assert r.json()["current_game_index"] == 0
        for _ in range(11):
            score(client, match_id, "player2")
        r = client.post(f"{BASE}/{match_id}/next-game")
        data = r.json()
        assert data["current_game_index"] == 1
        assert data["score_line"] == "0 - 1"
        assert data["current_game"]["server"] == "player2"

    def test_reset(self, client, match_id):
        score(client, match_id, "player1")
        data = client.post(f"{BASE}/{match_id}/reset").json()
        assert data["current_game"]["points"] == 0


class TestPointEntry:
    def test_full_entry(self, client, match_id):
        r = score(client, match_id, "player2", zone="back_right", shot_type="boast")
        assert r.status_code == 200
        body = r.json()
        assert body["point"]["scorer"] == "player2"
        assert body["point"]["zone"] == "back_right"
        assert body["point"]["shot_type"] == "boast"
        assert body["point"]["server"] == "player1"
        state = body["state"]["current_game"]
        assert state["player2_score"] == 1
        assert state["server"] == "player2"
        assert state["scoring_step"] == "select_player"

    def test_reselecting_player_cancels(self, client, match_id):
        client.post(f"{BASE}/{match_id}/select-player", params={"player": "player1"})
        r = client.post(f"{BASE}/{match_id}/select-player", params={"player": "player1"})
        assert r.json()["current_game"]["selected_player"] is None

    def test_zone_by_position(self, client, match_id):
        client.post(f"{BASE}/{match_id}/select-player", params={"player": "player1"})
        r = client.post(f"{BASE}/{match_id}/select-zone", params={"x": 0.1, "y": 0.9})
        assert r.json()["current_game"]["selected_zone"] == "back_left"

    def test_zone_requires_input(self, client, match_id):
        assert client.post(f"{BASE}/{match_id}/select-zone").status_code == 422

    def test_point_without_selection_is_noop(self, client, match_id):
        r = client.post(f"{BASE}/{match_id}/point", params={"shot_type": "drive"})
        assert r.status_code == 200
        assert r.json()["point"] is None
        assert r.json()["state"]["current_game"]["points"] == 0

    def test_back_and_clear(self, client, match_id):
        client.post(f"{BASE}/{match_id}/select-player", params={"player": "player1"})
        client.post(f"{BASE}/{match_id}/select-zone", params={"zone": "front_right"})
        r = client.post(f"{BASE}/{match_id}/back")
        assert r.json()["current_game"]["scoring_step"] == "select_zone"
        r = client.post(f"{BASE}/{match_id}/clear")
        assert r.json()["current_game"]["scoring_step"] == "select_player"

    def test_undo(self, client, match_id):
        score(client, match_id, "player2")
        data = client.post(f"{BASE}/{match_id}/undo").json()
        assert data["current_game"]["player2_score"] == 0
        assert data["current_game"]["server"] == "player1"

    def test_lets(self, client, match_id):
        r = client.post(f"{BASE}/{match_id}/let", params={"requested_by": "player2"})
        assert r.json()["let"]["requested_by"] == "player2"
        assert r.json()["state"]["current_game"]["lets"] == 1
        data = client.post(f"{BASE}/{match_id}/undo-let").json()
        assert data["current_game"]["lets"] == 0

    def test_invalid_enum(self, client, match_id):
        r = client.post(f"{BASE}/{match_id}/point", params={"shot_type": "smash"})
        assert r.status_code == 422


class TestAnalysisRoutes:
    def test_game_analysis(self, client, match_id):
        for _ in range(3):
            score(client, match_id, "player1", zone="front_left", shot_type="drop")
        score(client, match_id, "player2", zone="back_right", shot_type="drive")
        r = client.get(f"{BASE}/{match_id}/games/0/analysis")
        assert r.status_code == 200
        data = r.json()
        assert data["score"] == "3 - 1"
        assert data["zones"]["front_left"]["player1_won"] == 3
        assert data["zones"]["front_left"]["player1_win_pct"] == 100.0
        assert data["player1"]["best_zone"] == "front_left"
        assert data["player1"]["best_shot"] == "drop"
        assert data["player2"]["recommended_zones_against"] == ["front_left"]
        assert data["longest_point"] is not None

    def test_game_index_out_of_range(self, client, match_id):
        assert client.get(f"{BASE}/{match_id}/games/3/analysis").status_code == 400

    def test_match_analysis(self, client, match_id):
        score(client, match_id, "player2", shot_type="volley")
        data = client.get(f"{BASE}/{match_id}/analysis").json()
        assert data["games"] == ["0 - 1"]
        assert data["player2"]["most_effective_shot"] == "volley"
        assert data["player2"]["points_won"] == 1

    def test_local_advice(self, client, match_id):
        score(client, match_id, "player1", zone="front_left", shot_type="drop")
        score(client, match_id, "player2", zone="back_left", shot_type="lob")
        r = client.get(f"{BASE}/{match_id}/games/0/advice", params={"player": "player1"})
        data = r.json()
        assert [t["kind"] for t in data["tips"]] == ["warning", "success", "info"]
        assert data["top_shots"] == [{"shot_type": "drop", "count": 1}]


class TestMatchDefaults:
    def test_best_of_comes_from_settings(self, client):
        data = client.post(f"{BASE}/").json()
        assert data["best_of"] == settings.DEFAULT_BEST_OF

    def test_point_response_shape(self, client, match_id):
        body = score(client, match_id, "player1").json()
        assert set(body) == {"point", "state"}
        assert body["point"]["id"]
        assert body["state"]["id"] == match_id


# ── History ──────────────────────────────────────────────────────────────────

HISTORY = "/api/v1/history"


@pytest.fixture
def repository():
    engine = get_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    repository = MatchRepository(engine)
    app.dependency_overrides[get_repository] = lambda: repository
    yield repository
    app.dependency_overrides.pop(get_repository, None)


class TestHistoryRoutes:
    def test_save_and_list(self, client, repository, match_id):
        for _ in range(11):
            score(client, match_id, "player1")
        r = client.post(f"{HISTORY}/", params={"match_id": match_id})
        assert r.status_code == 201
        saved = r.json()
        assert saved["player1_name"] == "Alice"
        assert saved["score_line"] == "1 - 0"
        assert saved["games"] == ["11 - 0"]

        listing = client.get(f"{HISTORY}/").json()
        assert [m["id"] for m in listing] == [saved["id"]]

    def test_save_unknown_live_match(self, client, repository):
        assert client.post(f"{HISTORY}/", params={"match_id": "nope"}).status_code == 404

    def test_get_stored_match(self, client, repository, match_id):
        score(client, match_id, "player2", zone="back_left", shot_type="lob")
        stored_id = client.post(f"{HISTORY}/", params={"match_id": match_id}).json()["id"]
        data = client.get(f"{HISTORY}/{stored_id}").json()
        point = data["games"][0]["points"][0]
        assert point["zone"] == "back_left"
        assert point["shot_type"] == "lob"

    def test_restore_continues_play(self, client, repository, match_id):
        score(client, match_id, "player2")
        stored_id = client.post(f"{HISTORY}/", params={"match_id": match_id}).json()["id"]
        r = client.post(f"{HISTORY}/{stored_id}/restore")
        assert r.status_code == 201
        restored = r.json()
        assert restored["id"] != match_id
        assert restored["current_game"]["player2_score"] == 1
        assert restored["current_game"]["server"] == "player2"

        undone = client.post(f"{BASE}/{restored['id']}/undo").json()
        assert undone["current_game"]["player2_score"] == 0
        assert undone["current_game"]["server"] == "player1"

    def test_delete(self, client, repository, match_id):
        stored_id = client.post(f"{HISTORY}/", params={"match_id": match_id}).json()["id"]
        assert client.delete(f"{HISTORY}/{stored_id}").status_code == 204
        assert client.get(f"{HISTORY}/{stored_id}").status_code == 404
        assert client.delete(f"{HISTORY}/{stored_id}").status_code == 404
        assert client.get(f"{HISTORY}/").json() == []


# ── AI coach ─────────────────────────────────────────────────────────────────

COACH = "/api/v1/coach"


class ScriptedLLMClient(LLMClient):
    def __init__(self, content):
        self.content = content
        self.requests = 0

    async def chat(self, messages, system=None, temperature=0.7, max_tokens=500):
        self.requests += 1
        return self.content


@pytest.fixture
def credentials():
    store = InMemoryCredentialStore()
    app.dependency_overrides[get_credential_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_credential_store, None)


@pytest.fixture
def llm():
    llm = ScriptedLLMClient(json.dumps({
        "summary": "Strong front court game.",
        "strengths": ["Drops"],
        "weaknesses": [],
        "tactical_suggestions": ["Keep volleying"],
        "next_game_focus": "Pressure the back left",
    }))
    generator = AdviceGenerator(client_factory=lambda credential: llm)
    app.dependency_overrides[get_advice_generator] = lambda: generator
    yield llm
    app.dependency_overrides.pop(get_advice_generator, None)


class TestCoachingRoutes:
    def test_credential_lifecycle(self, client, credentials):
        assert client.get(f"{COACH}/credential").json() == {"configured": False}
        r = client.put(f"{COACH}/credential", json={"api_key": "sk-abc"})
        assert r.json() == {"configured": True}
        assert credentials.get() == "sk-abc"
        assert client.delete(f"{COACH}/credential").status_code == 204
        assert credentials.get() is None

    def test_blank_key_clears_credential(self, client, credentials):
        credentials.set("sk-old")
        r = client.put(f"{COACH}/credential", json={"api_key": "  "})
        assert r.json() == {"configured": False}

    def test_advice(self, client, credentials, llm, match_id):
        credentials.set("sk-abc")
        score(client, match_id, "player1", shot_type="drop")
        r = client.post(
            f"{COACH}/matches/{match_id}/games/0/advice", params={"player": "player1"}
        )
        assert r.status_code == 200
        data = r.json()
        assert data["failure"] is None
        assert data["advice"]["summary"] == "Strong front court game."
        assert data["advice"]["next_game_focus"] == "Pressure the back left"
        assert llm.requests == 1

    def test_advice_without_key(self, client, credentials, llm, match_id):
        r = client.post(
            f"{COACH}/matches/{match_id}/games/0/advice", params={"player": "player2"}
        )
        data = r.json()
        assert data["advice"] is None
        assert data["failure"]["kind"] == "invalid_credential"
        assert llm.requests == 0

    def test_advice_unknown_match_and_game(self, client, credentials, llm, match_id):
        url = f"{COACH}/matches/nope/games/0/advice"
        assert client.post(url, params={"player": "player1"}).status_code == 404
        url = f"{COACH}/matches/{match_id}/games/4/advice"
        assert client.post(url, params={"player": "player1"}).status_code == 400
