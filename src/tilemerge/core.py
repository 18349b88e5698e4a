# core.py
# This file is the rules engine: turn lifecycle, move resolution, scoring
# and win/loss detection on top of the tile grid.

import logging
import random
from enum import Enum, IntEnum
from typing import List, NamedTuple, Optional

from pydantic import ValidationError

from .actuator import Actuator, GameSummary
from .config import GameSettings
from .events import InputEvent, InputManager
from .grid import Grid
from .storage import GameState, StorageManager
from .tile import Position, Tile

logger = logging.getLogger(__name__)


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3


class Direction(IntEnum):
    """Represents the possible move directions, in input-event encoding."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3


VECTORS = {
    Direction.UP: Position(0, -1),
    Direction.RIGHT: Position(1, 0),
    Direction.DOWN: Position(0, 1),
    Direction.LEFT: Position(-1, 0),
}


class Traversals(NamedTuple):
    x: List[int]
    y: List[int]


class FarthestPosition(NamedTuple):
    farthest: Position  # Last empty cell reached along the vector
    next: Position  # Occupied or out-of-bounds cell just beyond it


# --- Move Helpers ---

def get_vector(direction: Direction) -> Position:
    """
    Maps a direction to its unit vector.
    Args:
        direction (Direction): The direction to move (0-3).
    Returns:
        Position: The (x, y) step for that direction.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    try:
        return VECTORS[Direction(direction)]
    except ValueError:
        raise ValueError(f"Invalid direction specified: {direction!r}") from None


def build_traversals(size: int, vector: Position) -> Traversals:
    """
    Builds the cell visitation order for a move.

    Both axes run 0..size-1, reversed on the axis the vector points along in
    the positive direction, so the cells farthest in the direction of travel
    are processed first.
    """
    traversals = Traversals(x=list(range(size)), y=list(range(size)))

    if vector.x == 1:
        traversals.x.reverse()
    if vector.y == 1:
        traversals.y.reverse()

    return traversals


def find_farthest_position(grid: Grid, cell: Position, vector: Position) -> FarthestPosition:
    """Walks from `cell` along `vector` through empty cells."""
    while True:
        previous = cell
        cell = Position(previous.x + vector.x, previous.y + vector.y)
        if not grid.cell_available(cell):
            return FarthestPosition(farthest=previous, next=cell)


def tile_matches_available(grid: Grid) -> bool:
    """
    Check if any two orthogonally adjacent tiles share a value.
    Args:
        grid (Grid): The board to check.
    Returns:
        bool: True if at least one merge is possible, False otherwise.
    """
    for x in range(grid.size):
        for y in range(grid.size):
            tile = grid.cell_content(Position(x, y))
            if tile is None:
                continue
            for vector in VECTORS.values():
                other = grid.cell_content(Position(x + vector.x, y + vector.y))
                if other is not None and other.value == tile.value:
                    return True
    return False


def moves_available(grid: Grid) -> bool:
    """A move is possible while a cell is empty or two neighbours can merge."""
    return grid.cells_available() or tile_matches_available(grid)


# --- Game Engine ---

class Game:
    """
    The game engine. Owns the grid, the score and the won/over flags, reacts
    to input events and publishes every accepted change to the presentation
    sink and the persistence store.

    States:
        in progress         over=False, won=False
        won, keep playing   won=True, is_playing=True
        terminated          over=True, or won=True and is_playing=False
    """

    def __init__(
        self,
        actuator: Actuator,
        input_manager: InputManager,
        storage: StorageManager,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.actuator = actuator
        self.input_manager = input_manager
        self.storage = storage
        self.settings = settings or GameSettings()
        self.rng = rng or random.Random()

        self.grid = Grid(self.settings.size)
        self.score = 0
        self.over = False
        self.won = False
        self.is_playing = False

    def run(self) -> None:
        """Subscribes to the input source and starts (or resumes) a game."""
        self.input_manager.on(InputEvent.MOVE, self.move)
        self.input_manager.on(InputEvent.RESTART, self.restart)
        self.input_manager.on(InputEvent.KEEP_PLAYING, self.keep_playing)

        self.setup()

    # --- Lifecycle ---

    def restart(self) -> None:
        logger.info("Restarting game")
        self.storage.clear_game_state()
        self.actuator.continue_game()
        self.setup()

    def keep_playing(self) -> None:
        self.is_playing = True
        self.actuator.continue_game()

    @property
    def is_game_terminated(self) -> bool:
        return self.over or (self.won and not self.is_playing)

    @property
    def progress(self) -> GameProgressState:
        if self.over:
            return GameProgressState.GAME_OVER
        if self.won:
            return GameProgressState.GAME_WON
        return GameProgressState.IN_PROGRESS

    def setup(self) -> None:
        """Resumes the persisted game if there is a valid one, otherwise starts fresh."""
        previous_state = self._load_state()

        if previous_state is not None:
            self.grid = Grid(previous_state.grid.size, previous_state.grid.cells)
            self.score = previous_state.score
            self.over = previous_state.over
            self.won = previous_state.won
            self.is_playing = previous_state.keep_playing
            logger.debug("Resumed game with score %d", self.score)
        else:
            self.grid = Grid(self.settings.size)
            self.score = 0
            self.over = False
            self.won = False
            self.is_playing = False
            self.add_start_tiles()

        self.actuate()

    def _load_state(self) -> Optional[GameState]:
        raw_state = self.storage.get_game_state()
        if not raw_state:
            return None
        try:
            return GameState.model_validate(raw_state)
        except ValidationError as e:
            logger.warning("Discarding malformed saved game: %s", e)
            self.storage.clear_game_state()
            return None

    def add_start_tiles(self) -> None:
        for _ in range(self.settings.start_tiles):
            self.add_random_tile()

    def add_random_tile(self) -> Optional[Tile]:
        """
        Adds a new tile (2, or 4 with the configured probability) to a random empty cell.
        Returns:
            Optional[Tile]: The tile placed, or None if the board is full.
        """
        if not self.grid.cells_available():
            return None

        value = 4 if self.rng.random() < self.settings.four_probability else 2
        tile = Tile(self.grid.random_available_cell(self.rng), value)
        self.grid.insert_tile(tile)
        return tile

    # --- Publishing ---

    def summary(self) -> GameSummary:
        return GameSummary(
            score=self.score,
            over=self.over,
            won=self.won,
            best_score=max(self.storage.get_best_score(), self.score),
            terminated=self.is_game_terminated,
        )

    def actuate(self) -> None:
        """Updates the best score, persists (or clears) the state and notifies the actuator."""
        if self.storage.get_best_score() < self.score:
            self.storage.set_best_score(self.score)

        if self.over:
            self.storage.clear_game_state()
        else:
            self.storage.set_game_state(self.serialize())

        self.actuator.actuate(self.grid, self.summary())

    def serialize(self) -> dict:
        return GameState(
            grid=self.grid.serialize(),
            score=self.score,
            over=self.over,
            won=self.won,
            keep_playing=self.is_playing,
        ).model_dump(by_alias=True)

    # --- Move Resolution ---

    def prepare_tiles(self) -> None:
        """Snapshots every tile position and drops last turn's merge provenance."""
        for column in self.grid.cells:
            for tile in column:
                if tile is not None:
                    tile.merged_from = None
                    tile.save_position()

    def move(self, direction: Direction) -> bool:
        """
        Slides every tile in the given direction, merging equal neighbours.

        On a change a random tile is spawned, the over flag re-evaluated and
        the new state published. A move that changes nothing is discarded.
        Args:
            direction (Direction): 0=up, 1=right, 2=down, 3=left.
        Returns:
            bool: True if the board changed, False otherwise (including when
                  the game is terminated).
        Raises:
            ValueError: If an invalid direction is specified.
        """
        vector = get_vector(direction)
        if self.is_game_terminated:
            return False

        traversals = build_traversals(self.grid.size, vector)
        moved = False

        self.prepare_tiles()

        for x in traversals.x:
            for y in traversals.y:
                cell = Position(x, y)
                tile = self.grid.cell_content(cell)
                if tile is None:
                    continue

                positions = find_farthest_position(self.grid, cell, vector)
                next_tile = self.grid.cell_content(positions.next)

                # Only one merger per destination cell per move
                if next_tile is not None and next_tile.value == tile.value and not next_tile.merged_from:
                    merged = Tile(positions.next, tile.value * 2)
                    merged.merged_from = [tile, next_tile]

                    self.grid.insert_tile(merged)
                    self.grid.remove_tile(tile)

                    tile.update_position(positions.next)

                    self.score += merged.value
                    if merged.value == self.settings.win_tile and not self.won:
                        self.won = True
                        logger.info("Reached the %d tile with score %d", merged.value, self.score)
                else:
                    self.grid.move_tile(tile, positions.farthest)

                if cell != tile.position:
                    moved = True  # Relocated or merged

        if not moved:
            logger.debug("Move %s did not change the board", Direction(direction).name)
            return False

        self.add_random_tile()

        if not moves_available(self.grid):
            self.over = True
            logger.info("Game over with score %d", self.score)

        self.actuate()
        return True
