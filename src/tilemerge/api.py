import logging
import random
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .actuator import SnapshotActuator
from .config import GameSettings, load_settings
from .core import Direction, Game, GameProgressState
from .events import InputManager
from .storage import JSONFileStorageManager, MemoryStorageManager, StorageManager

logger = logging.getLogger(__name__)

# --- Pydantic Models for API requests and responses ---

class GameStateData(BaseModel):
    """Represents the complete state of the hosted game."""
    board: List[List[int]] = Field(..., description="The N x N game board as rows, 0 marking an empty cell.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    best_score: int = Field(..., ge=0, description="Best score reached across all games.")
    progress: GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    over: bool = Field(..., description="True once no move is possible.")
    won: bool = Field(..., description="True once the win tile has been reached.")
    keep_playing: bool = Field(..., description="True if the player chose to continue after winning.")
    terminated: bool = Field(..., description="True if no further moves will be accepted.")
    win_tile: int = Field(..., gt=0, description="The tile value required to win this game instance.")
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    direction: Direction = Field(
        ...,
        description="Direction of the move (0=UP, 1=RIGHT, 2=DOWN, 3=LEFT)."
    )


class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )


def game_state_data(game: Game) -> dict:
    summary = game.summary()
    return dict(
        board=game.grid.to_board(),
        score=summary.score,
        best_score=summary.best_score,
        progress=game.progress,
        over=summary.over,
        won=summary.won,
        keep_playing=game.is_playing,
        terminated=summary.terminated,
        win_tile=game.settings.win_tile,
        board_size=game.grid.size,
    )


def create_app(
    settings: Optional[GameSettings] = None,
    storage: Optional[StorageManager] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    """
    Builds the HTTP front end around a single hosted game.

    Requests are the input source: each endpoint emits one input event and
    answers with the resulting state. The engine resumes whatever game the
    storage holds.
    """
    settings = settings or load_settings()
    if storage is None:
        if settings.storage_path:
            storage = JSONFileStorageManager(settings.storage_path)
        else:
            storage = MemoryStorageManager()

    # Initialize the rate limiter
    limiter = Limiter(key_func=get_remote_address)
    app = FastAPI(
        title="2048 Game API",
        description="An API for playing the 2048 game. "\
                    "The server hosts the game; every move is persisted so it can be resumed.",
        version="1.0.0"
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    input_manager = InputManager()
    actuator = SnapshotActuator()
    game = Game(actuator, input_manager, storage, settings, rng)
    game.run()
    app.state.game = game

    # --- API Endpoints ---

    @app.get("/game/state", response_model=GameStateData, summary="Get the Current Game State")
    @limiter.limit(settings.rate_limit)
    async def get_state(request: Request):
        return GameStateData(**game_state_data(game))

    @app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
    @limiter.limit(settings.rate_limit)
    async def start_new_game(request: Request):
        """
        Discards the current game and starts a fresh board with two random tiles.
        The best score is kept.
        """
        try:
            input_manager.restart()
            return GameStateData(**game_state_data(game))
        except Exception as e:
            logger.error("Unexpected error in /game/new: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")

    @app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
    @limiter.limit(settings.rate_limit)
    async def make_move(request: Request, request_data: MoveRequestData):
        """
        Processes a player's move in the game.

        The server will:
        1. Slide and merge every tile in the given `direction`.
        2. If the move changed the board, add a new random tile (2 or 4).
        3. Re-evaluate the game status and persist the new state.

        Returns the updated game state, whether the move was effective, and an optional message.
        """
        message_for_client: Optional[str] = None

        try:
            if game.is_game_terminated:
                message_for_client = "Game has ended; start a new game or keep playing."
                move_was_effective = False
            else:
                actuations_before = actuator.actuations
                input_manager.move(request_data.direction)
                # The engine only actuates when the board changed
                move_was_effective = actuator.actuations > actuations_before
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
        except Exception as e:
            logger.error("Unexpected error in /game/move: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

        if message_for_client is None:
            if not move_was_effective:
                message_for_client = "Move was not effective; board state unchanged by slide."
            elif game.over:
                message_for_client = "Game Over. No more valid moves."
            elif game.won and game.is_game_terminated:
                message_for_client = "Congratulations! You won!"

        return MoveResponseData(
            **game_state_data(game),
            move_was_effective=move_was_effective,
            message=message_for_client
        )

    @app.post("/game/keep-playing", response_model=GameStateData, summary="Keep Playing After a Win")
    @limiter.limit(settings.rate_limit)
    async def keep_playing(request: Request):
        input_manager.keep_playing()
        return GameStateData(**game_state_data(game))

    return app


app = create_app()
