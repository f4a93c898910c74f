"""VLCBackend state mapping, with the libvlc player replaced by a fake."""

import pytest

vlc = pytest.importorskip("vlc")

try:
    from musictui.core.player import VLCBackend
except (ImportError, OSError, NotImplementedError):
    pytest.skip("libvlc not available", allow_module_level=True)


class FakeMediaPlayer:
    def __init__(self, state):
        self.state = state

    def get_state(self):
        return self.state


def backend_in(state):
    backend = VLCBackend.__new__(VLCBackend)
    backend._player = FakeMediaPlayer(state)
    return backend


class TestIsPlaying:
    @pytest.mark.parametrize("state", ["Opening", "Buffering", "Playing"])
    def test_loading_counts_as_playing(self, state):
        assert backend_in(getattr(vlc.State, state)).is_playing() is True

    @pytest.mark.parametrize("state", ["NothingSpecial", "Paused", "Stopped", "Ended", "Error"])
    def test_idle_states_are_not_playing(self, state):
        assert backend_in(getattr(vlc.State, state)).is_playing() is False
