# cli_driver.py
# This file is intended to be run to play the game on the CLI.
# The saved game and best score live in a JSON file, so a session can be resumed.

import logging
import os
from typing import Callable, Optional

from .actuator import ConsoleActuator
from .config import GameSettings, load_settings
from .core import Direction, Game
from .events import InputManager
from .storage import JSONFileStorageManager

DEFAULT_STORAGE_PATH = os.path.join("~", ".tilemerge", "state.json")

KEY_BINDINGS = {
    'W': Direction.UP,
    'D': Direction.RIGHT,
    'S': Direction.DOWN,
    'A': Direction.LEFT,
}

PROMPT = "Enter move (W/A/S/D for Up/Left/Down/Right, R to restart, C to keep playing, Q to quit): "


class KeyboardInputManager(InputManager):
    """Turns typed commands into input events."""

    def handle_key(self, key: str) -> bool:
        """
        Dispatches one typed command.
        Args:
            key (str): The raw input line.
        Returns:
            bool: False if the player asked to quit, True otherwise.
        """
        key = key.strip().upper()
        if key == 'Q':
            return False

        if key in KEY_BINDINGS:
            self.move(KEY_BINDINGS[key])
        elif key == 'R':
            self.restart()
        elif key == 'C':
            self.keep_playing()
        else:
            print("Invalid input. Use W, A, S, D, R, C or Q.")
        return True


def main(settings: Optional[GameSettings] = None, read: Callable[[str], str] = input):
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    storage = JSONFileStorageManager(settings.storage_path or DEFAULT_STORAGE_PATH)
    input_manager = KeyboardInputManager()
    game = Game(ConsoleActuator(), input_manager, storage, settings)
    game.run()

    try:
        while input_manager.handle_key(read(PROMPT)):
            pass
    except (EOFError, KeyboardInterrupt):
        pass

    print("Quitting game.")


if __name__ == "__main__":
    main()
