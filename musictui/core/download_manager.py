"""
Download Manager

Single-threaded download queue for remote tracks with:
- dedupe (by URL)
- cancel token support (best-effort mid-download)
- events reported through a callback as plain dicts
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from yt_dlp.utils import DownloadCancelled

from musictui.core.track import RemoteCached, Track

logger = logging.getLogger("DownloadManager")


@dataclass(frozen=True)
class DownloadTask:
    track: Track
    url: Optional[str]


class DownloadManager:
    def __init__(
        self,
        downloader: Any,
        *,
        event_callback: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        self._downloader = downloader
        self._event_cb = event_callback or (lambda e: None)

        self._lock = threading.RLock()
        self._queue: "queue.Queue[DownloadTask]" = queue.Queue()
        self._queued_urls: set[str] = set()
        self._current_task: Optional[DownloadTask] = None
        self._current_cancel = threading.Event()

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    def stop(self, *, cancel_in_progress: bool = True) -> None:
        self._stop.set()
        if cancel_in_progress:
            self._current_cancel.set()
        t = self._thread
        if t:
            t.join(timeout=2.0)

    def enqueue(self, track: Track) -> bool:
        """
        Queue a remote track. Returns False for local, cached or duplicate ones.

        Catalog-only tracks are looked up on the worker, never here.
        """
        if not track.is_remote or isinstance(track.origin, RemoteCached):
            return False
        url = track.url

        with self._lock:
            if url is not None:
                if url in self._queued_urls:
                    return False
                if self._current_task and self._current_task.url == url:
                    return False
                if self._downloader.is_cached(url, title=track.title, artist=track.artist):
                    return False
                self._queued_urls.add(url)
        self._queue.put(DownloadTask(track, url))
        self._emit({"type": "queue", "track": track, "queue_size": self._queue.qsize()})
        return True

    def process_next(self, timeout: Optional[float] = None) -> bool:
        """Download one queued task. Returns False when nothing was queued."""
        try:
            task = self._queue.get(timeout=timeout) if timeout else self._queue.get_nowait()
        except queue.Empty:
            return False

        if task.url is None:
            url = self._downloader.find_url(task.track)
            if not url:
                self._emit({"type": "error", "track": task.track, "error": "no source found"})
                return True
            task = DownloadTask(task.track, url)

        with self._lock:
            self._queued_urls.discard(task.url)
            self._current_task = task
            self._current_cancel = threading.Event()
            cancel = self._current_cancel

        self._emit({"type": "start", "track": task.track})

        def progress_cb(percent: float, downloaded: int, total_bytes: int):
            if self._stop.is_set() or cancel.is_set():
                raise DownloadCancelled()

        try:
            path = self._downloader.download(
                task.url,
                progress_callback=progress_cb,
                title=task.track.title,
                artist=task.track.artist,
            )
            self._emit(
                {
                    "type": "complete",
                    "track": task.track,
                    "cached": RemoteCached(url=task.url, path=path),
                }
            )
        except DownloadCancelled:
            self._emit({"type": "canceled", "track": task.track})
        except Exception as e:
            logger.warning(f"Download failed for {task.url}: {e}")
            self._emit({"type": "error", "track": task.track, "error": str(e)})
        finally:
            with self._lock:
                self._current_task = None
        return True

    # ---- internals ----
    def _emit(self, event: Dict[str, Any]) -> None:
        try:
            self._event_cb(event)
        except Exception:
            logger.exception("event_callback failed")

    def _run(self) -> None:
        while not self._stop.is_set():
            self.process_next(timeout=0.5)
