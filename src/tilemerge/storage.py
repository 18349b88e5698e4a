# storage.py
# Persistence stores for the best score and the resumable game state.

import json
import logging
import os
import tempfile
from typing import List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

BEST_SCORE_KEY = "bestScore"
GAME_STATE_KEY = "gameState"


# --- Pydantic models for the persisted game state ---

class GridState(BaseModel):
    """Serialized board: `cells[x][y]` holds a tile value or None."""
    size: int = Field(..., ge=1, description="The dimension N of the N x N board.")
    cells: List[List[Optional[int]]] = Field(..., description="Tile values addressed cells[x][y].")

    @model_validator(mode="after")
    def check_cells(self) -> "GridState":
        if len(self.cells) != self.size or any(len(column) != self.size for column in self.cells):
            raise ValueError("Grid cells must be a size x size matrix.")
        for column in self.cells:
            for value in column:
                if value is not None and (value < 2 or value & (value - 1)):
                    raise ValueError(f"Tile value {value} is not a power of two >= 2.")
        return self


class GameState(BaseModel):
    """The complete persisted state of a game in progress."""
    model_config = ConfigDict(populate_by_name=True)

    grid: GridState
    score: int = Field(..., ge=0, description="Current score of the game.")
    over: bool = False
    won: bool = False
    keep_playing: bool = Field(default=False, alias="keepPlaying")


# --- Stores ---

class StorageManager(Protocol):
    """What the engine needs from durable storage."""

    def get_best_score(self) -> int: ...

    def set_best_score(self, score: int) -> None: ...

    def get_game_state(self) -> Optional[dict]: ...

    def set_game_state(self, state: dict) -> None: ...

    def clear_game_state(self) -> None: ...


class MemoryStorageManager:
    """Keeps everything in process memory. Nothing survives a restart."""

    def __init__(self, best_score: int = 0, game_state: Optional[dict] = None):
        self.best_score = best_score
        self.game_state = game_state

    def get_best_score(self) -> int:
        return self.best_score

    def set_best_score(self, score: int) -> None:
        self.best_score = score

    def get_game_state(self) -> Optional[dict]:
        return self.game_state

    def set_game_state(self, state: dict) -> None:
        self.game_state = state

    def clear_game_state(self) -> None:
        self.game_state = None


class JSONFileStorageManager:
    """
    Persists the best score and game state as two keys of one JSON file.

    Writes go through a temporary file in the same directory followed by
    `os.replace`, so the file is always either the old or the new content.
    A missing or unreadable file reads as empty storage.
    """

    def __init__(self, path: str):
        self.path = os.path.abspath(os.path.expanduser(path))

    def _read(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tilemerge-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get_best_score(self) -> int:
        try:
            return int(self._read().get(BEST_SCORE_KEY) or 0)
        except (TypeError, ValueError):
            return 0

    def set_best_score(self, score: int) -> None:
        data = self._read()
        data[BEST_SCORE_KEY] = score
        self._write(data)

    def get_game_state(self) -> Optional[dict]:
        return self._read().get(GAME_STATE_KEY) or None

    def set_game_state(self, state: dict) -> None:
        data = self._read()
        data[GAME_STATE_KEY] = state
        self._write(data)

    def clear_game_state(self) -> None:
        data = self._read()
        if data.pop(GAME_STATE_KEY, None) is not None:
            self._write(data)
