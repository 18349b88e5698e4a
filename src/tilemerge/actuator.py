# actuator.py
# Presentation sinks: whatever shows the board to the player.

from typing import Callable, List, Optional, Protocol

from pydantic import BaseModel, Field

from .grid import Grid


class GameSummary(BaseModel):
    """Result summary handed to the presentation layer with every actuation."""
    score: int = Field(..., ge=0, description="Current score of the game.")
    over: bool = Field(..., description="True once no move is possible.")
    won: bool = Field(..., description="True once the win tile has been reached.")
    best_score: int = Field(..., ge=0, description="Best score across all sessions.")
    terminated: bool = Field(..., description="True if the engine accepts no further moves.")


class Actuator(Protocol):
    def actuate(self, grid: Grid, summary: GameSummary) -> None: ...

    def continue_game(self) -> None: ...


class SnapshotActuator:
    """Remembers the most recent actuation instead of drawing anything."""

    def __init__(self):
        self.grid: Optional[Grid] = None
        self.summary: Optional[GameSummary] = None
        self.actuations = 0
        self.continuations = 0

    def actuate(self, grid: Grid, summary: GameSummary) -> None:
        self.grid = grid
        self.summary = summary
        self.actuations += 1

    def continue_game(self) -> None:
        self.continuations += 1


class ConsoleActuator:
    """Prints the board, score and won/lost banner to a terminal."""

    def __init__(self, write: Callable[[str], None] = print):
        self.write = write
        self.banner: Optional[str] = None

    def actuate(self, grid: Grid, summary: GameSummary) -> None:
        if summary.over:
            self.banner = "GAME OVER!"
        elif summary.won and summary.terminated:
            self.banner = "YOU WON! (C to keep playing, R to restart)"

        self.write(f"\nScore: {summary.score}\tBest: {summary.best_score}")
        if self.banner:
            self.write(self.banner)
        for line in self.render_board(grid.to_board()):
            self.write(line)
        self.write("-" * (grid.size * 6))  # Adjust width based on board size

    def continue_game(self) -> None:
        self.banner = None

    @staticmethod
    def render_board(board: List[List[int]]) -> List[str]:
        return ["\t".join(str(value) if value else "." for value in row) for row in board]
