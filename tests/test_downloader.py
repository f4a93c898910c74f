"""Source resolution and download queue, with yt-dlp replaced by fakes."""

import pytest

from musictui.core.backend import BackendError
from musictui.core.download_manager import DownloadManager
from musictui.core.downloader import SourceResolver, YouTubeDownloader
from musictui.core.track import (
    Local,
    RemoteCached,
    RemoteKnownUrl,
    RemoteUnresolved,
    Track,
)


class FakeDownloader:
    def __init__(self, cached=None, found="https://www.youtube.com/watch?v=found"):
        self.cached = cached or {}
        self.found = found
        self.lookups = []
        self.streams = []
        self.downloads = []
        self.fail_download = False

    def find_url(self, track):
        self.lookups.append(track.title)
        return self.found

    def is_cached(self, url, title=None, artist=None):
        return self.cached.get(url)

    def get_stream_url(self, url):
        self.streams.append(url)
        if url.endswith("broken"):
            raise Exception("format unavailable")
        return f"https://stream/{url[-5:]}"

    def download(self, url, progress_callback=None, title=None, artist=None):
        if self.fail_download:
            raise Exception("HTTP 403")
        if progress_callback:
            progress_callback(100, 10, 10)
        self.downloads.append(url)
        return f"/cache/{title}.m4a"


def known(title, url):
    return Track(title, artist="Artist", origin=RemoteKnownUrl(url))


class TestSourceResolver:
    def test_local_and_cached_tracks_use_their_path(self):
        resolver = SourceResolver()
        assert resolver(Track("L", origin=Local("/music/l.mp3"))) == "/music/l.mp3"
        assert resolver(Track("C", origin=RemoteCached("u", "/cache/c.m4a"))) == "/cache/c.m4a"

    def test_remote_without_downloader_fails(self):
        with pytest.raises(BackendError):
            SourceResolver()(known("R", "https://youtu.be/x"))

    def test_known_url_gets_stream_once(self):
        downloader = FakeDownloader()
        resolver = SourceResolver(downloader)
        track = known("R", "https://youtu.be/abcde")

        assert resolver(track) == "https://stream/abcde"
        assert resolver(track) == "https://stream/abcde"
        assert downloader.streams == ["https://youtu.be/abcde"]

    def test_cached_copy_wins_over_stream(self):
        downloader = FakeDownloader(cached={"https://youtu.be/abcde": "/cache/r.m4a"})
        resolver = SourceResolver(downloader)

        assert resolver(known("R", "https://youtu.be/abcde")) == "/cache/r.m4a"
        assert downloader.streams == []

    def test_download_made_after_streaming_is_used(self):
        downloader = FakeDownloader()
        resolver = SourceResolver(downloader)
        track = known("Song", "https://youtu.be/abcde")
        assert resolver(track) == "https://stream/abcde"

        downloader.cached["https://youtu.be/abcde"] = "/cache/Artist_Song.m4a"

        assert resolver(track) == "/cache/Artist_Song.m4a"
        assert downloader.streams == ["https://youtu.be/abcde"]

    def test_lookup_is_done_once_per_track(self):
        downloader = FakeDownloader()
        resolver = SourceResolver(downloader)
        track = Track("Lost", origin=RemoteUnresolved())

        resolver(track)
        downloader.cached["https://www.youtube.com/watch?v=found"] = "/cache/Lost.m4a"

        assert resolver(track) == "/cache/Lost.m4a"
        assert downloader.lookups == ["Lost"]

    def test_unresolved_track_is_looked_up(self):
        downloader = FakeDownloader()
        resolver = SourceResolver(downloader)

        source = resolver(Track("Lost", origin=RemoteUnresolved()))

        assert downloader.lookups == ["Lost"]
        assert source == "https://stream/found"

    def test_lookup_miss_is_a_backend_error(self):
        resolver = SourceResolver(FakeDownloader(found=None))
        with pytest.raises(BackendError):
            resolver(Track("Lost", origin=RemoteUnresolved()))

    def test_stream_failure_is_a_backend_error(self):
        resolver = SourceResolver(FakeDownloader())
        with pytest.raises(BackendError):
            resolver(known("R", "https://youtu.be/broken"))


class TestYouTubeDownloaderHelpers:
    @pytest.fixture
    def downloader(self, tmp_path):
        return YouTubeDownloader(cache_dir=str(tmp_path))

    def test_cache_filename_is_sanitized(self, downloader):
        assert downloader._make_cache_filename("Hey! You?", "The Band") == "The_Band_Hey_You"
        assert downloader._make_cache_filename("***") == "track"
        assert len(downloader._make_cache_filename("x" * 200)) == 80

    def test_video_id(self, downloader):
        assert downloader._extract_video_id("https://www.youtube.com/watch?v=abc&t=3") == "abc"
        assert downloader._extract_video_id("https://youtu.be/xyz?si=1") == "xyz"
        assert len(downloader._extract_video_id("https://example.com/a")) == 16

    def test_is_cached_by_title_or_id(self, downloader, tmp_path):
        url = "https://www.youtube.com/watch?v=abc"
        assert downloader.is_cached(url, title="Song", artist="Band") is None

        (tmp_path / "abc.m4a").touch()
        assert downloader.is_cached(url) == str(tmp_path / "abc.m4a")

        (tmp_path / "Band_Song.m4a").touch()
        assert downloader.is_cached(url, title="Song", artist="Band") == str(
            tmp_path / "Band_Song.m4a"
        )

    @pytest.mark.parametrize(
        "url",
        ["", "ftp://youtube.com/x", "https://example.com/watch?v=1"],
    )
    def test_validate_url_rejects(self, url):
        with pytest.raises(ValueError):
            YouTubeDownloader.validate_url(url)

    def test_validate_url_accepts_youtube(self):
        YouTubeDownloader.validate_url("https://music.youtube.com/watch?v=1")


class TestDownloadManager:
    def test_local_and_cached_tracks_are_refused(self):
        manager = DownloadManager(FakeDownloader())
        assert manager.enqueue(Track("L", origin=Local("/m/l.mp3"))) is False
        assert manager.enqueue(Track("C", origin=RemoteCached("u", "/c.m4a"))) is False

    def test_duplicates_are_refused(self):
        manager = DownloadManager(FakeDownloader())
        track = known("R", "https://youtu.be/one")
        assert manager.enqueue(track) is True
        assert manager.enqueue(track) is False

    def test_already_cached_url_is_refused(self):
        manager = DownloadManager(FakeDownloader(cached={"https://youtu.be/one": "/c.m4a"}))
        assert manager.enqueue(known("R", "https://youtu.be/one")) is False

    def test_download_reports_cached_origin(self):
        events = []
        downloader = FakeDownloader()
        manager = DownloadManager(downloader, event_callback=events.append)
        track = known("Song", "https://youtu.be/one")

        manager.enqueue(track)
        assert manager.process_next() is True

        assert [e["type"] for e in events] == ["queue", "start", "complete"]
        assert events[-1]["cached"] == RemoteCached("https://youtu.be/one", "/cache/Song.m4a")
        assert manager.process_next() is False

    def test_unresolved_track_is_looked_up_on_the_worker(self):
        events = []
        downloader = FakeDownloader()
        manager = DownloadManager(downloader, event_callback=events.append)

        manager.enqueue(Track("Lost", origin=RemoteUnresolved()))
        assert downloader.lookups == []

        manager.process_next()
        assert downloader.lookups == ["Lost"]
        assert downloader.downloads == ["https://www.youtube.com/watch?v=found"]

    def test_failed_lookup_reports_error(self):
        events = []
        manager = DownloadManager(FakeDownloader(found=None), event_callback=events.append)

        manager.enqueue(Track("Lost", origin=RemoteUnresolved()))
        manager.process_next()

        assert events[-1]["type"] == "error"

    def test_failed_download_reports_error(self):
        events = []
        downloader = FakeDownloader()
        downloader.fail_download = True
        manager = DownloadManager(downloader, event_callback=events.append)

        manager.enqueue(known("R", "https://youtu.be/one"))
        manager.process_next()

        assert events[-1]["type"] == "error"
        assert "403" in events[-1]["error"]

    def test_stopped_manager_cancels_download(self):
        events = []
        manager = DownloadManager(FakeDownloader(), event_callback=events.append)
        manager.enqueue(known("R", "https://youtu.be/one"))

        manager.stop()
        manager.process_next()

        assert events[-1]["type"] == "canceled"
