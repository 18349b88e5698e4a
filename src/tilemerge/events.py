from collections import defaultdict
from enum import Enum
from typing import Any, Callable, DefaultDict, List


class InputEvent(Enum):
    """Discrete events an input source can deliver to the engine."""
    MOVE = "move"
    RESTART = "restart"
    KEEP_PLAYING = "keepPlaying"


class InputManager:
    """
    Delivers input events to subscribed callbacks, in subscription order.

    Front ends translate whatever they read (key presses, HTTP requests) into
    calls to `move`, `restart` and `keep_playing`.
    """

    def __init__(self):
        self._listeners: DefaultDict[InputEvent, List[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: InputEvent, callback: Callable[..., Any]) -> None:
        self._listeners[event].append(callback)

    def emit(self, event: InputEvent, data: Any = None) -> None:
        for callback in self._listeners.get(event, []):
            if data is None:
                callback()
            else:
                callback(data)

    def move(self, direction) -> None:
        self.emit(InputEvent.MOVE, direction)

    def restart(self) -> None:
        self.emit(InputEvent.RESTART)

    def keep_playing(self) -> None:
        self.emit(InputEvent.KEEP_PLAYING)
