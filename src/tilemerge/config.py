# config.py
# Runtime settings shared by the engine and both front ends.

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "TILEMERGE_"


class GameSettings(BaseModel):
    """Settings for a game engine and the front end hosting it."""
    size: int = Field(
        default=4,
        gt=1,  # Board size must be at least 2x2
        description="Size of the N x N game board (e.g., 4 for a 4x4 board)."
    )
    start_tiles: int = Field(
        default=2,
        ge=0,
        description="Number of random tiles placed on a fresh board."
    )
    win_tile: int = Field(
        default=2048,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )
    four_probability: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Probability that a spawned tile is a 4 instead of a 2."
    )
    storage_path: Optional[str] = Field(
        default=None,
        description="JSON file used to persist the game state and best score."
    )
    rate_limit: str = Field(
        default="100/minute",
        description="slowapi rate limit applied to every HTTP endpoint."
    )
    log_level: str = Field(
        default="WARNING",
        description="Level passed to logging.basicConfig by the front ends."
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> GameSettings:
    """
    Builds settings from `TILEMERGE_<FIELD>` environment variables.
    Args:
        environ: Mapping to read from; `os.environ` if omitted.
    Returns:
        GameSettings: Defaults overridden by any variables that are set.
    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    environ = os.environ if environ is None else environ
    overrides = {}
    for name in GameSettings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in environ:
            overrides[name] = environ[key]
    return GameSettings(**overrides)
