"""
Audio backend capability: error types and the notifications a backend
delivers asynchronously. Kept free of libvlc so the engine can be driven by
any object with the same methods.
"""

from dataclasses import dataclass
from enum import Enum


class BackendError(Exception):
    """A load/play/pause call against the audio backend failed."""


class BackendInitError(BackendError):
    """The audio backend could not be initialized."""


class BackendEventKind(Enum):
    STOPPED = "stopped"
    TIME_CHANGED = "time_changed"


@dataclass(frozen=True)
class BackendEvent:
    kind: BackendEventKind
    elapsed_ms: int = 0


class MediaControlEvent(Enum):
    """OS media keys, mapped onto the same handlers as the keyboard."""

    PLAY = "play"
    PAUSE = "pause"
    TOGGLE = "toggle"
    NEXT = "next"
    PREVIOUS = "previous"
