# grid.py
# The N x N board of optional tile slots and the spatial queries over it.

import random
from typing import Callable, List, Optional, Sequence

from .tile import Position, Tile

Cells = List[List[Optional[Tile]]]


class Grid:
    """
    A square board addressed as `cells[x][y]`.

    Each slot holds at most one tile and every tile on the board is referenced
    by exactly one slot. Callers mutate the board only through `insert_tile`,
    `remove_tile` and `move_tile`.
    """

    def __init__(self, size: int, previous_state: Optional[Sequence[Sequence[Optional[int]]]] = None):
        """
        Args:
            size (int): Dimension N of the N x N board.
            previous_state: Optional serialized cells (`cells[x][y]` holding a
                            tile value or None) to rebuild the board from.
        Raises:
            ValueError: If size is not a positive integer.
        """
        if not isinstance(size, int) or size <= 0:
            raise ValueError("Grid size must be a positive integer.")
        self.size = size
        self.cells: Cells = self.from_state(previous_state) if previous_state else self.empty()

    def empty(self) -> Cells:
        return [[None] * self.size for _ in range(self.size)]

    def from_state(self, state: Sequence[Sequence[Optional[int]]]) -> Cells:
        cells = self.empty()
        for x in range(self.size):
            for y in range(self.size):
                value = state[x][y]
                if value:
                    cells[x][y] = Tile(Position(x, y), value)
        return cells

    # --- Queries ---

    def available_cells(self) -> List[Position]:
        """Returns the positions of all empty cells."""
        positions = []
        for x in range(self.size):
            for y in range(self.size):
                if self.cells[x][y] is None:
                    positions.append(Position(x, y))
        return positions

    def random_available_cell(self, rng: Optional[random.Random] = None) -> Position:
        """
        Picks one empty cell uniformly at random.
        Args:
            rng: Random source to draw from; the module-level generator if omitted.
        Returns:
            Position: The chosen empty cell.
        Raises:
            ValueError: If the board has no empty cell. Callers are expected
                        to check `cells_available()` first.
        """
        cells = self.available_cells()
        if not cells:
            raise ValueError("No available cells on the grid.")
        return (rng or random).choice(cells)

    def each_cell(self, callback: Callable[[int, int, Optional[Tile]], None]) -> None:
        for x in range(self.size):
            for y in range(self.size):
                callback(x, y, self.cells[x][y])

    def cells_available(self) -> bool:
        return any(tile is None for column in self.cells for tile in column)

    def cell_available(self, cell: Position) -> bool:
        return self.within_bounds(cell) and self.cell_content(cell) is None

    def cell_occupied(self, cell: Position) -> bool:
        return self.cell_content(cell) is not None

    def cell_content(self, cell: Position) -> Optional[Tile]:
        # Out-of-bounds reads are treated as empty rather than as an error.
        if self.within_bounds(cell):
            return self.cells[cell.x][cell.y]
        return None

    def within_bounds(self, position: Position) -> bool:
        return 0 <= position.x < self.size and 0 <= position.y < self.size

    # --- Mutation ---

    def insert_tile(self, tile: Tile) -> None:
        """Places a tile at its own position, replacing whatever occupied that slot."""
        self.cells[tile.x][tile.y] = tile

    def remove_tile(self, tile: Tile) -> None:
        self.cells[tile.x][tile.y] = None

    def move_tile(self, tile: Tile, position: Position) -> None:
        self.cells[tile.x][tile.y] = None
        self.cells[position.x][position.y] = tile
        tile.update_position(position)

    # --- Serialization ---

    def serialize(self) -> dict:
        """
        Serializes the board to `{size, cells}` with `cells[x][y]` holding a
        tile value or None. Tile identity and per-turn provenance are dropped.
        """
        return {
            "size": self.size,
            "cells": [[tile.value if tile else None for tile in column] for column in self.cells],
        }

    def to_board(self) -> List[List[int]]:
        """Returns the board as rows (`board[y][x]`) with 0 marking empty cells."""
        return [
            [self.cells[x][y].value if self.cells[x][y] else 0 for x in range(self.size)]
            for y in range(self.size)
        ]
