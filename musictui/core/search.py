"""
Remote Search

Looks up candidate tracks on YouTube and runs searches on a single worker
thread. A newer query cancels the one in flight: its results are dropped
even if the lookup itself cannot be interrupted.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import yt_dlp

from musictui.core.track import RemoteKnownUrl, RemoteUnresolved, Track

logger = logging.getLogger("SearchManager")


class SearchError(Exception):
    """The remote catalog lookup failed."""


@dataclass(frozen=True)
class SearchResults:
    query: str
    tracks: Tuple[Track, ...]


class YouTubeSearch:
    """Flat `ytsearch` lookups; stream URLs are resolved later, per track."""

    def __init__(self):
        self._null_logger = logging.getLogger("yt-dlp")
        self._null_logger.setLevel(logging.CRITICAL)
        self.ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "extract_flat": True,
            "skip_download": True,
            "logger": self._null_logger,
        }

    def search(self, query: str, limit: int = 15) -> List[Track]:
        q = (query or "").strip()
        if not q:
            return []
        try:
            with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
                info = ydl.extract_info(f"ytsearch{max(1, int(limit))}:{q}", download=False)
        except Exception as e:
            raise SearchError(f"Search failed for '{q}': {e}") from e
        return [self._entry_to_track(e) for e in (info or {}).get("entries") or [] if e]

    @staticmethod
    def _entry_to_track(entry: dict) -> Track:
        url = entry.get("webpage_url") or entry.get("url")
        if not url and entry.get("id"):
            url = f"https://www.youtube.com/watch?v={entry['id']}"
        origin = RemoteKnownUrl(url) if url else RemoteUnresolved()
        duration = entry.get("duration") or 0
        return Track(
            title=entry.get("title") or "Unknown",
            artist=entry.get("uploader") or entry.get("channel"),
            album=None,
            duration_ms=int(float(duration) * 1000),
            origin=origin,
        )


@dataclass
class _SearchTask:
    query: str
    cancel: threading.Event


class SearchManager:
    def __init__(
        self,
        searcher,
        on_results: Callable[[SearchResults], None],
        *,
        limit: int = 15,
        debounce_sec: float = 0.3,
    ):
        self._searcher = searcher
        self._on_results = on_results
        self._limit = limit
        self._debounce_sec = max(0.0, float(debounce_sec))

        self._lock = threading.RLock()
        self._cv = threading.Condition(self._lock)
        self._pending: Optional[_SearchTask] = None
        self._current: Optional[_SearchTask] = None

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    def stop(self) -> None:
        with self._cv:
            self._stop.set()
            self.cancel()
            self._cv.notify_all()
        t = self._thread
        if t:
            t.join(timeout=2.0)

    def submit(self, query: str) -> None:
        """Replace whatever is pending or running with `query`."""
        with self._cv:
            self.cancel()
            self._pending = _SearchTask(query, threading.Event())
            self._cv.notify_all()

    def cancel(self) -> None:
        with self._cv:
            if self._current:
                self._current.cancel.set()
            if self._pending:
                self._pending.cancel.set()
                self._pending = None

    def run_once(self, timeout: Optional[float] = None) -> bool:
        """Take the pending task, search, deliver. Returns False if none was pending."""
        with self._cv:
            if self._pending is None and not self._stop.is_set():
                self._cv.wait(timeout=timeout)
            task = self._pending
            if task is None or self._stop.is_set():
                return False

            # Debounce: a newer submit replaces this task while we wait
            if self._debounce_sec:
                self._cv.wait(timeout=self._debounce_sec)
                if self._pending is not task:
                    return True

            self._pending = None
            self._current = task

        try:
            tracks = self._searcher.search(task.query, self._limit)
        except Exception as e:
            logger.warning(f"Search '{task.query}' failed: {e}")
            tracks = []

        with self._lock:
            if self._current is task:
                self._current = None
            if task.cancel.is_set():
                logger.debug(f"Dropping results of cancelled search '{task.query}'")
                return True
            self._emit(SearchResults(task.query, tuple(tracks)))
        return True

    # ---- internals ----
    def _emit(self, results: SearchResults) -> None:
        try:
            self._on_results(results)
        except Exception:
            logger.exception("on_results callback failed")

    def _run(self) -> None:
        while not self._stop.is_set():
            self.run_once(timeout=0.5)
