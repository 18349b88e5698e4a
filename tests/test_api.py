import random

import pytest
from fastapi.testclient import TestClient

from tilemerge.api import create_app
from tilemerge.config import GameSettings
from tilemerge.storage import MemoryStorageManager

from conftest import state_from_rows


@pytest.fixture
def make_client():
    def _make_client(rows=None, settings=None, **state_kwargs):
        game_state = state_from_rows(rows, **state_kwargs) if rows is not None else None
        storage = MemoryStorageManager(game_state=game_state)
        app = create_app(settings or GameSettings(), storage, random.Random(3))
        return TestClient(app), storage

    return _make_client


def test_state_of_a_fresh_game(make_client):
    client, _ = make_client()
    response = client.get("/game/state")

    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 0
    assert data["board_size"] == 4
    assert data["win_tile"] == 2048
    assert data["progress"] == 1
    assert not data["terminated"]
    assert sum(1 for row in data["board"] for value in row if value) == 2


def test_effective_move(make_client):
    client, storage = make_client([[0, 0, 2, 2], [0] * 4, [0] * 4, [0] * 4])
    response = client.post("/game/move", json={"direction": 3})

    assert response.status_code == 200
    data = response.json()
    assert data["move_was_effective"]
    assert data["board"][0][0] == 4
    assert data["score"] == 4
    assert data["best_score"] == 4
    assert data["message"] is None
    assert storage.get_game_state()["score"] == 4


def test_ineffective_move(make_client):
    board = [[2, 0, 0, 0], [4, 0, 0, 0], [0] * 4, [0] * 4]
    client, _ = make_client(board, score=8)
    data = client.post("/game/move", json={"direction": 3}).json()

    assert not data["move_was_effective"]
    assert data["board"] == board
    assert data["score"] == 8
    assert "not effective" in data["message"]


@pytest.mark.parametrize("body", [{"direction": 4}, {"direction": "LEFT"}, {}])
def test_invalid_move_request(make_client, body):
    client, _ = make_client()
    assert client.post("/game/move", json=body).status_code == 422


def test_win_then_keep_playing(make_client):
    client, _ = make_client([[1024, 1024, 0, 0], [0] * 4, [0] * 4, [0] * 4])

    data = client.post("/game/move", json={"direction": 3}).json()
    assert data["won"]
    assert data["terminated"]
    assert data["progress"] == 3
    assert data["message"] == "Congratulations! You won!"

    data = client.post("/game/move", json={"direction": 1}).json()
    assert not data["move_was_effective"]
    assert "Game has ended" in data["message"]

    data = client.post("/game/keep-playing").json()
    assert data["keep_playing"]
    assert not data["terminated"]

    data = client.post("/game/move", json={"direction": 1}).json()
    assert data["move_was_effective"]


def test_game_over(make_client):
    board = [
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [16, 4, 2, 4],
        [8, 16, 8, 0],
    ]
    client, storage = make_client(board)
    data = client.post("/game/move", json={"direction": 1}).json()

    assert data["over"]
    assert data["progress"] == 2
    assert data["message"] == "Game Over. No more valid moves."
    assert storage.get_game_state() is None


def test_new_game_resets_score(make_client):
    client, storage = make_client([[0, 0, 2, 2], [0] * 4, [0] * 4, [0] * 4])
    client.post("/game/move", json={"direction": 3})

    data = client.post("/game/new").json()

    assert data["score"] == 0
    assert data["best_score"] == 4
    assert sum(1 for row in data["board"] for value in row if value) == 2
    assert storage.get_game_state()["score"] == 0


def test_rate_limit(make_client):
    client, _ = make_client(settings=GameSettings(rate_limit="2/minute"))
    assert client.get("/game/state").status_code == 200
    assert client.get("/game/state").status_code == 200
    assert client.get("/game/state").status_code == 429
