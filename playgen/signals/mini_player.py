from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Union

from loguru import logger


class MiniPlayerCommand(str, Enum):
    RESTORE = "restore"
    CLOSE = "close"
    TOGGLE_PLAY = "toggle-play"
    NEXT = "next"
    PREV = "prev"


@dataclass
class MiniPlayerState:
    title: str = ""
    channel: str = ""
    thumbnail: str = ""
    is_playing: bool = False
    position: float = 0.0
    duration: float = 0.0


class CommandChannel:
    """
    Typed command relay from the mini-player to the main window.

    The main window registers one handler per command; the mini-player only
    ever calls send().
    """

    def __init__(self):
        self._handlers: Dict[MiniPlayerCommand, Callable[[], None]] = {}

    def register(self, command: MiniPlayerCommand, handler: Callable[[], None]) -> None:
        self._handlers[MiniPlayerCommand(command)] = handler

    def send(self, command: Union[MiniPlayerCommand, str]) -> bool:
        try:
            cmd = MiniPlayerCommand(command)
        except ValueError:
            logger.warning(f"Unknown mini-player command: {command!r}")
            return False

        handler = self._handlers.get(cmd)
        if handler is None:
            logger.debug(f"No handler registered for {cmd.value}")
            return False
        handler()
        return True
