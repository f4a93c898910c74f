"""
YouTube Source Resolution

Handles yt-dlp for turning remote tracks into something VLC can open:
direct stream URLs, cached audio files, or (for catalog-only tracks) a
video found by searching for the title.
"""

import hashlib
import logging
import random
import re
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Optional

import yt_dlp

from musictui.core.backend import BackendError
from musictui.core.track import (
    Local,
    RemoteCached,
    RemoteKnownUrl,
    RemoteUnresolved,
    Track,
)

logger = logging.getLogger("YouTubeDownloader")


class YouTubeDownloader:
    """Manages YouTube stream URL extraction and audio downloads."""

    MAX_RETRIES = 3

    @staticmethod
    def validate_url(url: str):
        """Ensure URL is valid, safe (http/https), and from YouTube."""
        if not url:
            raise ValueError("Empty URL")
        if not (url.startswith("http://") or url.startswith("https://")):
            raise ValueError("Invalid URL scheme: must be http or https")

        allowed_domains = ["youtube.com", "www.youtube.com", "youtu.be", "music.youtube.com"]
        if not any(domain in url for domain in allowed_domains):
            raise ValueError("Only YouTube URLs are allowed")

    def __init__(self, cache_dir: str = "cache"):
        self.cache_dir = Path(cache_dir).expanduser()
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        # Suppress yt-dlp console output completely
        self._null_logger = logging.getLogger("yt-dlp")
        self._null_logger.setLevel(logging.CRITICAL)

        self.ydl_opts_info = {
            "quiet": True,
            "no_warnings": True,
            "extract_flat": False,
            "logger": self._null_logger,
        }

        self.ydl_opts_download = {
            "format": "bestaudio[ext=m4a]/bestaudio/best",
            "quiet": True,
            "no_warnings": True,
            "noprogress": True,
            "logger": self._null_logger,
            "postprocessors": [
                {
                    "key": "FFmpegExtractAudio",
                    "preferredcodec": "m4a",
                }
            ],
        }

        logger.info("YouTubeDownloader initialized")

    def _extract_with_retry(self, url: str, opts: Dict) -> Dict:
        for attempt in range(self.MAX_RETRIES + 1):
            try:
                with yt_dlp.YoutubeDL(opts) as ydl:
                    return ydl.extract_info(url, download=False)
            except Exception as e:
                if attempt < self.MAX_RETRIES and (
                    "429" in str(e) or "too many requests" in str(e).lower()
                ):
                    wait = (attempt + 1) * 30 + random.uniform(1, 10)
                    logger.warning(f"HTTP 429. Retrying {url} in {wait:.1f}s...")
                    time.sleep(wait)
                    continue
                raise

    def get_stream_url(self, url: str) -> str:
        """
        Get direct streaming URL for immediate playback.

        Args:
            url: YouTube video URL

        Returns:
            Direct audio stream URL
        """
        self.validate_url(url)
        try:
            info = self._extract_with_retry(url, self.ydl_opts_info)
        except Exception as e:
            raise Exception(f"Failed to get stream URL from {url}: {e}")

        if not info:
            raise Exception(f"Failed to get stream URL from {url}: empty info")

        formats = info.get("formats", [])
        audio_formats = [f for f in formats if f.get("acodec") != "none" and f.get("url")]

        if audio_formats:
            audio_formats.sort(key=lambda x: x.get("abr") or 0, reverse=True)
            return audio_formats[0]["url"]

        return info.get("url")

    def find_url(self, track: Track) -> Optional[str]:
        """Bind a catalog-only track to the first matching video."""
        query = track.title if not track.artist else f"{track.artist} {track.title}"
        opts = self.ydl_opts_info.copy()
        opts["extract_flat"] = True
        try:
            info = self._extract_with_retry(f"ytsearch1:{query}", opts)
        except Exception as e:
            logger.warning(f"Lookup failed for '{query}': {e}")
            return None
        for entry in (info or {}).get("entries") or []:
            if entry and entry.get("id"):
                return f"https://www.youtube.com/watch?v={entry['id']}"
        return None

    def download(
        self,
        url: str,
        output_path: Optional[str] = None,
        progress_callback: Optional[Callable] = None,
        title: Optional[str] = None,
        artist: Optional[str] = None,
    ) -> str:
        """
        Download audio to cache.

        Args:
            url: YouTube video URL
            output_path: Custom output path (optional, uses cache by default)
            progress_callback: Function called with download progress
            title: Track title for naming (optional)
            artist: Artist name for naming (optional)

        Returns:
            Path to downloaded file
        """
        self.validate_url(url)

        if output_path is None:
            if title:
                safe_name = self._make_cache_filename(title, artist)
            else:
                safe_name = self._extract_video_id(url)
            output_path = str(self.cache_dir / f"{safe_name}.%(ext)s")

        opts = self.ydl_opts_download.copy()
        if progress_callback:
            opts["progress_hooks"] = [self._create_progress_hook(progress_callback)]
        opts["outtmpl"] = output_path

        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ydl.download([url])
        except yt_dlp.utils.DownloadCancelled:
            raise
        except Exception as e:
            raise Exception(f"Failed to download {url}: {e}")

        # Return actual file path (yt-dlp adds extension)
        return output_path.replace(".%(ext)s", ".m4a")

    def is_cached(
        self, url: str, title: Optional[str] = None, artist: Optional[str] = None
    ) -> Optional[str]:
        """Path to a cached copy of `url`, by title name or video id."""
        if title:
            cache_file = self.cache_dir / f"{self._make_cache_filename(title, artist)}.m4a"
            if cache_file.exists():
                return str(cache_file)

        cache_file = self.cache_dir / f"{self._extract_video_id(url)}.m4a"
        if cache_file.exists():
            return str(cache_file)
        return None

    def _make_cache_filename(self, title: str, artist: Optional[str] = None) -> str:
        """Create a safe filename from artist and title (alphanumeric + underscore only)."""
        if artist:
            name = f"{artist}__SEP__{title}"
        else:
            name = title

        name = re.sub(r"[^a-zA-Z0-9\s_]", "", name)
        name = name.replace("__SEP__", "_")
        name = re.sub(r"\s+", "_", name)
        name = re.sub(r"_+", "_", name)
        name = name.strip("_")

        # Limit length (filesystem limits)
        return name[:80] or "track"

    def _extract_video_id(self, url: str) -> str:
        """Extract video ID from YouTube URL or generate hash."""
        if "#" in url:
            url = url.split("#")[0]

        if "v=" in url:
            return url.split("v=")[1].split("&")[0]
        elif "youtu.be/" in url:
            return url.split("youtu.be/")[1].split("?")[0]
        return hashlib.md5(url.encode()).hexdigest()[:16]

    def _create_progress_hook(self, callback: Callable):
        """Create a progress hook for yt-dlp."""

        def hook(d):
            if d["status"] == "downloading":
                total = d.get("total_bytes") or d.get("total_bytes_estimate", 0)
                downloaded = d.get("downloaded_bytes", 0)
                if total > 0:
                    callback((downloaded / total) * 100, downloaded, total)
            elif d["status"] == "finished":
                callback(100, d.get("total_bytes", 0), d.get("total_bytes", 0))

        return hook


class SourceResolver:
    """
    Maps a Track to a path or URL the backend can load.

    A cached download always wins, even over a stream URL handed out earlier
    in the session. Catalog lookups and stream URLs are memoized. Any failure
    is reported as BackendError so the engine treats it like a failed load.
    """

    def __init__(self, downloader: Optional[YouTubeDownloader] = None):
        self.downloader = downloader
        self._lock = threading.Lock()
        self._urls: Dict[tuple, str] = {}
        self._streams: Dict[str, str] = {}

    def __call__(self, track: Track) -> str:
        origin = track.origin
        if isinstance(origin, (Local, RemoteCached)):
            return origin.path

        if self.downloader is None:
            raise BackendError(f"No resolver for remote track '{track.title}'")

        url = self._video_url(track)

        cached = self.downloader.is_cached(url, title=track.title, artist=track.artist)
        if cached:
            return cached

        with self._lock:
            stream = self._streams.get(url)
        if stream:
            return stream

        try:
            stream = self.downloader.get_stream_url(url)
        except Exception as e:
            raise BackendError(str(e)) from e
        if not stream:
            raise BackendError(f"Empty stream URL for '{track.title}'")

        with self._lock:
            self._streams[url] = stream
        return stream

    def _video_url(self, track: Track) -> str:
        origin = track.origin
        if isinstance(origin, RemoteKnownUrl):
            return origin.url
        if not isinstance(origin, RemoteUnresolved):
            raise BackendError(f"Unknown origin for '{track.title}'")

        with self._lock:
            url = self._urls.get(track.identity)
        if url:
            return url

        url = self.downloader.find_url(track)
        if not url:
            raise BackendError(f"No playable source found for '{track.title}'")
        with self._lock:
            self._urls[track.identity] = url
        return url
