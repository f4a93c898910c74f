import queue
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from musictui.core.backend import BackendError
from musictui.core.track import Local, Track


class FakeBackend:
    """In-memory stand-in for VLCBackend with failure injection."""

    def __init__(self):
        self.events = queue.Queue()
        self.loaded = []
        self.seeks = []
        self.stops = 0
        self.playing = False
        self.elapsed = 0
        self._volume = 100
        self.fail_sources = set()
        self.fail_play = False
        self.fail_pause = False

    def load(self, source):
        if source in self.fail_sources:
            raise BackendError(f"cannot open {source}")
        self.loaded.append(source)
        self.playing = False

    def play(self):
        if self.fail_play:
            raise BackendError("play failed")
        self.playing = True

    def pause(self):
        if self.fail_pause:
            raise BackendError("pause failed")
        self.playing = False

    def stop(self):
        self.stops += 1
        self.playing = False

    def is_playing(self):
        return self.playing

    def elapsed_ms(self):
        return self.elapsed

    def volume(self):
        return self._volume

    def set_volume(self, level):
        self._volume = max(0, min(100, int(level)))

    def seek(self, seconds):
        self.seeks.append(seconds)

    def cleanup(self):
        pass


def local_track(title, artist=None, path=None, album=None, duration_ms=180_000):
    return Track(
        title=title,
        artist=artist,
        album=album,
        duration_ms=duration_ms,
        origin=Local(path or f"/music/{title}.mp3"),
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def make_track():
    """Factory for local tracks; path defaults to /music/<title>.mp3."""
    return local_track


@pytest.fixture
def abc_tracks():
    return [local_track("A"), local_track("B"), local_track("C")]
