import random
from typing import List, Optional

import pytest

from tilemerge.actuator import SnapshotActuator
from tilemerge.config import GameSettings
from tilemerge.core import Game
from tilemerge.events import InputManager
from tilemerge.storage import MemoryStorageManager


class SpyStorage(MemoryStorageManager):
    """Memory storage that counts writes."""

    def __init__(self, best_score: int = 0, game_state: Optional[dict] = None):
        super().__init__(best_score, game_state)
        self.state_writes = 0
        self.clears = 0

    def set_game_state(self, state: dict) -> None:
        self.state_writes += 1
        super().set_game_state(state)

    def clear_game_state(self) -> None:
        self.clears += 1
        super().clear_game_state()


def state_from_rows(rows: List[List[int]], score: int = 0, over: bool = False,
                    won: bool = False, keep_playing: bool = False) -> dict:
    """Builds a persisted game state from a board written as rows (0 = empty)."""
    size = len(rows)
    cells = [[rows[y][x] or None for y in range(size)] for x in range(size)]
    return {
        "grid": {"size": size, "cells": cells},
        "score": score,
        "over": over,
        "won": won,
        "keepPlaying": keep_playing,
    }


def count_tiles(game: Game) -> int:
    return sum(1 for row in game.grid.to_board() for value in row if value)


@pytest.fixture
def rng():
    return random.Random(2048)


@pytest.fixture
def make_game(rng):
    """Returns a factory for a running game, optionally resumed from a board."""

    def _make_game(rows: Optional[List[List[int]]] = None, best_score: int = 0,
                   settings: Optional[GameSettings] = None, **state_kwargs) -> Game:
        game_state = state_from_rows(rows, **state_kwargs) if rows is not None else None
        storage = SpyStorage(best_score=best_score, game_state=game_state)
        game = Game(SnapshotActuator(), InputManager(), storage, settings, rng)
        game.run()
        # Count only writes caused by what the test does next
        storage.state_writes = 0
        storage.clears = 0
        return game

    return _make_game
