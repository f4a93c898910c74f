"""
Playback Engine

Owns the play queue and the current index, drives the audio backend, and
reports every change as a notification. It runs its own loop: each pass
drains backend events, then commands, then sleeps for the poll interval.
Nothing outside this class touches the queue; other components keep copies
updated from the notifications.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

from musictui.core.backend import (
    BackendError,
    BackendEvent,
    BackendEventKind,
    MediaControlEvent,
)
from musictui.core.track import Track

logger = logging.getLogger("PlaybackEngine")


# ---------- status ----------
@dataclass(frozen=True)
class Playing:
    track: Track


@dataclass(frozen=True)
class Paused:
    track: Track


@dataclass(frozen=True)
class NoAudioSelected:
    pass


PlaybackStatus = Union[Playing, Paused, NoAudioSelected]


def derive_status(
    queue: Sequence[Track], playing_index: Optional[int], is_playing: bool
) -> PlaybackStatus:
    if playing_index is None or not 0 <= playing_index < len(queue):
        return NoAudioSelected()
    track = queue[playing_index]
    return Playing(track) if is_playing else Paused(track)


# ---------- commands ----------
@dataclass(frozen=True)
class SetQueueAndPlay:
    tracks: Tuple[Track, ...]


@dataclass(frozen=True)
class AppendAndPlay:
    tracks: Tuple[Track, ...]


@dataclass(frozen=True)
class SetAndPlay:
    index: int


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Previous:
    pass


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class Play:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Update:
    pass


@dataclass(frozen=True)
class VolumeUp:
    step: int = 5


@dataclass(frozen=True)
class VolumeDown:
    step: int = 5


@dataclass(frozen=True)
class Seek:
    seconds: float


PlayerCommand = Union[
    SetQueueAndPlay,
    AppendAndPlay,
    SetAndPlay,
    Next,
    Previous,
    TogglePause,
    Play,
    Pause,
    Update,
    VolumeUp,
    VolumeDown,
    Seek,
]


# ---------- notifications ----------
@dataclass(frozen=True)
class QueueChanged:
    queue: Tuple[Track, ...]
    playing_index: Optional[int]


@dataclass(frozen=True)
class Played:
    index: int


@dataclass(frozen=True)
class PausedAt:
    index: int


@dataclass(frozen=True)
class NextSong:
    index: int


@dataclass(frozen=True)
class PlayerEnded:
    pass


@dataclass(frozen=True)
class TimeChanged:
    elapsed_ms: int


@dataclass(frozen=True)
class PlayerInformation:
    queue: Tuple[Track, ...] = ()
    playing_index: Optional[int] = None
    elapsed_ms: int = 0
    is_playing: bool = False
    volume: int = 100

    @property
    def status(self) -> PlaybackStatus:
        return derive_status(self.queue, self.playing_index, self.is_playing)

    @property
    def current_track(self) -> Optional[Track]:
        if self.playing_index is None or not 0 <= self.playing_index < len(self.queue):
            return None
        return self.queue[self.playing_index]


PlayerNotification = Union[
    QueueChanged, Played, PausedAt, NextSong, PlayerEnded, TimeChanged, PlayerInformation
]


@dataclass(frozen=True)
class _MediaControl:
    event: MediaControlEvent


def _local_source(track: Track) -> str:
    path = track.local_path
    if path is None:
        raise BackendError(f"'{track.title}' has no local source")
    return path


class PlaybackEngine:
    """
    Queue + current index + backend.

    `playing_index` is None or a valid index into `queue` whenever a command
    or backend event has been fully handled.
    """

    def __init__(
        self,
        backend,
        notify: Callable[[PlayerNotification], None],
        *,
        resolver: Optional[Callable[[Track], str]] = None,
        poll_interval: float = 0.05,
    ):
        self._backend = backend
        self._notify = notify
        self._resolver = resolver or _local_source
        self._poll_interval = max(0.005, float(poll_interval))

        self._commands: "queue.Queue[PlayerCommand]" = queue.Queue()
        self._controls: "queue.Queue[_MediaControl]" = queue.Queue()

        self._queue: list[Track] = []
        self._playing_index: Optional[int] = None

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---------- inbound ----------
    def send(self, command: PlayerCommand) -> None:
        self._commands.put(command)

    def media_control(self, event: MediaControlEvent) -> None:
        """Entry point for OS media keys; may be called from any thread."""
        self._controls.put(_MediaControl(event))

    # ---------- loop ----------
    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="PlaybackEngine", daemon=True)
        self._thread.start()
        logger.info("Playback engine started")

    def stop(self) -> None:
        self._stop.set()
        t = self._thread
        if t:
            t.join(timeout=2.0)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.process_pending()
            except Exception:
                logger.exception("Unexpected error in playback loop")
            self._stop.wait(self._poll_interval)

    def process_pending(self) -> None:
        """Handle every queued backend event, media key and command, in that order."""
        events = getattr(self._backend, "events", None)
        if events is not None:
            while True:
                try:
                    event = events.get_nowait()
                except queue.Empty:
                    break
                self._handle_backend_event(event)

        while True:
            try:
                control = self._controls.get_nowait()
            except queue.Empty:
                break
            self._handle_media_control(control.event)

        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                break
            self.handle(command)

    # ---------- read-only views ----------
    @property
    def queue(self) -> Tuple[Track, ...]:
        return tuple(self._queue)

    @property
    def playing_index(self) -> Optional[int]:
        return self._playing_index

    def status(self) -> PlaybackStatus:
        return derive_status(self._queue, self._playing_index, self._is_playing())

    def information(self) -> PlayerInformation:
        return PlayerInformation(
            queue=tuple(self._queue),
            playing_index=self._playing_index,
            elapsed_ms=self._safe(self._backend.elapsed_ms, 0),
            is_playing=self._is_playing(),
            volume=self._safe(self._backend.volume, 0),
        )

    # ---------- dispatch ----------
    def handle(self, command: PlayerCommand) -> None:
        if isinstance(command, SetQueueAndPlay):
            self._set_queue_and_play(command.tracks)
        elif isinstance(command, AppendAndPlay):
            self._append_and_play(command.tracks)
        elif isinstance(command, SetAndPlay):
            self._set_and_play(command.index)
        elif isinstance(command, Next):
            self._next()
        elif isinstance(command, Previous):
            self._previous()
        elif isinstance(command, TogglePause):
            self._toggle_pause()
        elif isinstance(command, Play):
            self._play()
        elif isinstance(command, Pause):
            self._pause()
        elif isinstance(command, Update):
            self._emit(self.information())
        elif isinstance(command, (VolumeUp, VolumeDown)):
            step = command.step if isinstance(command, VolumeUp) else -command.step
            self._adjust_volume(step)
        elif isinstance(command, Seek):
            self._seek(command.seconds)
        else:
            logger.warning(f"Ignoring unknown command: {command!r}")

    def _handle_backend_event(self, event: BackendEvent) -> None:
        if event.kind == BackendEventKind.STOPPED:
            if self._playing_index is not None:
                self._next()
        elif event.kind == BackendEventKind.TIME_CHANGED:
            self._emit(TimeChanged(event.elapsed_ms))

    def _handle_media_control(self, event: MediaControlEvent) -> None:
        if event == MediaControlEvent.PLAY:
            self._play()
        elif event == MediaControlEvent.PAUSE:
            self._pause()
        elif event == MediaControlEvent.TOGGLE:
            self._toggle_pause()
        elif event == MediaControlEvent.NEXT:
            self._next()
        elif event == MediaControlEvent.PREVIOUS:
            self._previous()

    # ---------- transitions ----------
    def _set_queue_and_play(self, tracks: Sequence[Track]) -> None:
        self._queue = list(tracks)
        self._playing_index = None
        self._emit(QueueChanged(tuple(self._queue), None))
        if not self._queue:
            self._backend_call(self._backend.stop)
            return
        if self._load_index(0):
            self._play()
        else:
            self._backend_call(self._backend.stop)

    def _append_and_play(self, tracks: Sequence[Track]) -> None:
        if not tracks:
            return
        was_idle = self._playing_index is None
        first_new = len(self._queue)
        self._queue.extend(tracks)
        self._emit(QueueChanged(tuple(self._queue), self._playing_index))
        if was_idle and self._load_index(first_new):
            self._play()

    def _set_and_play(self, index: int) -> None:
        if not 0 <= index < len(self._queue):
            logger.debug(f"SetAndPlay({index}) ignored, queue has {len(self._queue)} tracks")
            return
        if self._load_index(index):
            self._play()

    def _next(self) -> None:
        if self._playing_index is None:
            return
        next_index = self._playing_index + 1
        if next_index >= len(self._queue):
            self._playing_index = None
            self._backend_call(self._backend.stop)
            self._emit(PlayerEnded())
            return
        if self._load_index(next_index):
            self._emit(NextSong(next_index))
            self._play()

    def _previous(self) -> None:
        if self._playing_index is None or self._playing_index == 0:
            return
        if self._load_index(self._playing_index - 1):
            self._play()

    def _toggle_pause(self) -> None:
        if self._playing_index is None:
            return
        if self._is_playing():
            self._pause()
        else:
            self._play()

    def _play(self) -> None:
        index = self._playing_index
        if index is None:
            return
        if self._backend_call(self._backend.play):
            self._emit(Played(index))

    def _pause(self) -> None:
        index = self._playing_index
        if index is None:
            return
        if self._backend_call(self._backend.pause):
            self._emit(PausedAt(index))

    def _adjust_volume(self, step: int) -> None:
        current = self._safe(self._backend.volume, 0)
        if self._backend_call(self._backend.set_volume, current + step):
            self._emit(self.information())

    def _seek(self, seconds: float) -> None:
        if self._playing_index is None:
            return
        self._backend_call(self._backend.seek, seconds)

    # ---------- primitives ----------
    def _load_index(self, index: int) -> bool:
        """Resolve and load queue[index]; the index only moves on success."""
        if not 0 <= index < len(self._queue):
            return False
        track = self._queue[index]
        try:
            source = self._resolver(track)
            self._backend.load(source)
        except BackendError as e:
            logger.error(f"Cannot load '{track.title}': {e}")
            return False
        self._playing_index = index
        logger.info(f"Loaded [{index}] {track.label()}")
        return True

    def _backend_call(self, func, *args) -> bool:
        try:
            func(*args)
        except BackendError as e:
            logger.error(f"Backend call {getattr(func, '__name__', func)} failed: {e}")
            return False
        return True

    def _is_playing(self) -> bool:
        return bool(self._safe(self._backend.is_playing, False))

    def _safe(self, func, default):
        try:
            return func()
        except BackendError as e:
            logger.debug(f"Backend query failed: {e}")
            return default

    def _emit(self, notification: PlayerNotification) -> None:
        try:
            self._notify(notification)
        except Exception:
            logger.exception("notify callback failed")
