"""Rules engine and front ends for the 2048 sliding-tile puzzle."""

from .core import Direction, Game, GameProgressState
from .grid import Grid
from .tile import Position, Tile

__version__ = "1.0.0"
