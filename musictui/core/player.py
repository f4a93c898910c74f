"""
Audio Backend using VLC (python-vlc binding).

libvlc callbacks run on VLC's own thread; they only push BackendEvents onto
`events`, which the playback engine drains on its tick.
"""

import logging
import queue

import vlc

from musictui.core.backend import (
    BackendError,
    BackendEvent,
    BackendEventKind,
    BackendInitError,
)

logger = logging.getLogger("VLCBackend")


class VLCBackend:
    """Single media player on a private libvlc instance."""

    def __init__(self, volume: int = 100):
        logger.info("Initializing VLC backend")
        self.events: "queue.Queue[BackendEvent]" = queue.Queue()
        try:
            self._instance = vlc.Instance("--no-video", "--quiet", "--intf", "dummy")
            if self._instance is None:
                raise BackendInitError("libvlc returned no instance")
            self._player = self._instance.media_player_new()
        except BackendInitError:
            raise
        except Exception as e:
            raise BackendInitError(f"Cannot initialize libvlc: {e}") from e

        self._volume = 100
        self.set_volume(volume)

        # End of media is the only natural stop; set_media on a skip must not advance
        self._event_mgr = self._player.event_manager()
        self._event_mgr.event_attach(vlc.EventType.MediaPlayerEndReached, self._on_end)
        self._event_mgr.event_attach(
            vlc.EventType.MediaPlayerTimeChanged, self._on_time_changed
        )

    def get_backend_version(self) -> str:
        """Return libVLC version string if available."""
        try:
            version = vlc.libvlc_get_version() or b""
        except Exception:
            return ""
        if isinstance(version, bytes):
            return version.decode("utf-8", "replace")
        return str(version)

    def _on_end(self, event):
        logger.info("End of media reached")
        self.events.put(BackendEvent(BackendEventKind.STOPPED))

    def _on_time_changed(self, event):
        try:
            elapsed = event.u.new_time
        except AttributeError:
            elapsed = self._player.get_time()
        self.events.put(BackendEvent(BackendEventKind.TIME_CHANGED, max(0, elapsed or 0)))

    def load(self, source: str) -> None:
        """Set the media for a local path or URL without starting it."""
        logger.info(f"Loading: {source[:80]}")
        try:
            media = self._instance.media_new(source)
            if media is None:
                raise BackendError(f"Cannot open media: {source}")
            self._player.set_media(media)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to load {source}: {e}") from e

    def play(self) -> None:
        if self._player.play() == -1:
            raise BackendError("libvlc refused to play")
        self._player.audio_set_volume(self._volume)

    def pause(self) -> None:
        try:
            self._player.set_pause(True)
        except Exception as e:
            raise BackendError(f"Pause failed: {e}") from e

    def stop(self) -> None:
        try:
            self._player.stop()
        except Exception as e:
            logger.debug(f"Stop failed: {e}")

    def is_playing(self) -> bool:
        # A stream that is still opening or buffering counts as playing.
        try:
            return self._player.get_state() in (
                vlc.State.Opening,
                vlc.State.Buffering,
                vlc.State.Playing,
            )
        except Exception as e:
            logger.debug(f"State query failed: {e}")
            return False

    def elapsed_ms(self) -> int:
        return max(0, self._player.get_time() or 0)

    def volume(self) -> int:
        return self._volume

    def set_volume(self, level: int) -> None:
        self._volume = max(0, min(100, int(level)))
        try:
            self._player.audio_set_volume(self._volume)
        except Exception:
            pass

    def seek(self, seconds: float) -> None:
        try:
            current = self._player.get_time() or 0
            self._player.set_time(max(0, current + int(seconds * 1000)))
        except Exception as e:
            logger.debug(f"Seek failed: {e}")

    def cleanup(self):
        self.stop()
        try:
            self._player.release()
        except Exception:
            pass
        try:
            self._instance.release()
        except Exception:
            pass
