# tile.py
# A single numbered piece on the board and the coordinate type it lives at.

from typing import List, NamedTuple, Optional


class Position(NamedTuple):
    """A 0-indexed (x, y) cell coordinate. x is the column, y is the row."""
    x: int
    y: int


class Tile:
    """
    One numbered tile occupying a single grid cell.

    Besides its value and position a tile carries per-turn provenance:
    `previous_position` is the cell it started the current move from, and
    `merged_from` holds the two tiles it was created from if it is the result
    of a merge this turn. Both are presentation metadata and are reset at the
    start of every move.
    """

    def __init__(self, position: Position, value: int = 2):
        self.x, self.y = position
        self.value = value
        self.previous_position: Optional[Position] = None
        self.merged_from: Optional[List["Tile"]] = None

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    def save_position(self) -> None:
        """Remembers the current cell so the move can be traced afterwards."""
        self.previous_position = Position(self.x, self.y)

    def update_position(self, position: Position) -> None:
        self.x, self.y = position

    def serialize(self) -> dict:
        return {
            "position": {"x": self.x, "y": self.y},
            "value": self.value,
        }

    def __repr__(self) -> str:
        return f"Tile(value={self.value}, position=({self.x}, {self.y}))"
