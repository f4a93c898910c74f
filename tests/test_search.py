"""Tests for remote search cancellation and result mapping (no network)."""

import threading
import time

from musictui.core.search import SearchManager, SearchResults, YouTubeSearch
from musictui.core.track import RemoteKnownUrl, RemoteUnresolved, Track


class BlockingSearcher:
    """Holds the query named `block_on` until released."""

    def __init__(self, block_on=None):
        self.block_on = block_on
        self.calls = []
        self.started = threading.Event()
        self.release = threading.Event()

    def search(self, query, limit=15):
        self.calls.append(query)
        if query == self.block_on:
            self.started.set()
            self.release.wait(2.0)
        return [Track(f"{query}-{i}", origin=RemoteUnresolved()) for i in range(2)]


class FailingSearcher:
    def search(self, query, limit=15):
        raise RuntimeError("network down")


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        time.sleep(0.01)
    return predicate()


class TestSearchManager:
    def test_newer_query_cancels_one_in_flight(self):
        searcher = BlockingSearcher(block_on="abc")
        results = []
        manager = SearchManager(searcher, results.append, debounce_sec=0)

        manager.submit("abc")
        worker = threading.Thread(target=manager.run_once)
        worker.start()
        assert searcher.started.wait(2.0)

        manager.submit("abcd")
        searcher.release.set()
        worker.join(2.0)

        assert results == []
        assert manager.run_once(timeout=0.1) is True
        assert [r.query for r in results] == ["abcd"]
        assert results[0].tracks[0].title == "abcd-0"

    def test_rapid_submits_are_debounced(self):
        searcher = BlockingSearcher()
        results = []
        manager = SearchManager(searcher, results.append, debounce_sec=0.2)
        manager.start()
        try:
            manager.submit("a")
            manager.submit("ab")
            assert wait_for(lambda: results)
        finally:
            manager.stop()

        assert searcher.calls == ["ab"]
        assert [r.query for r in results] == ["ab"]

    def test_failures_deliver_empty_results(self):
        results = []
        manager = SearchManager(FailingSearcher(), results.append, debounce_sec=0)

        manager.submit("abc")
        manager.run_once()

        assert results == [SearchResults("abc", ())]

    def test_cancel_drops_pending(self):
        searcher = BlockingSearcher()
        results = []
        manager = SearchManager(searcher, results.append, debounce_sec=0)

        manager.submit("abc")
        manager.cancel()

        assert manager.run_once(timeout=0.01) is False
        assert searcher.calls == []
        assert results == []

    def test_run_once_without_work(self):
        manager = SearchManager(BlockingSearcher(), lambda r: None, debounce_sec=0)
        assert manager.run_once(timeout=0.01) is False

    def test_callback_errors_are_contained(self):
        def on_results(results):
            raise RuntimeError("ui gone")

        manager = SearchManager(BlockingSearcher(), on_results, debounce_sec=0)
        manager.submit("x")
        assert manager.run_once() is True


class TestYouTubeSearch:
    def test_blank_query_returns_nothing(self):
        assert YouTubeSearch().search("   ") == []

    def test_entry_with_id_gets_watch_url(self):
        track = YouTubeSearch._entry_to_track(
            {"id": "abc123", "title": "Song", "uploader": "Band", "duration": 61.5}
        )
        assert track.origin == RemoteKnownUrl("https://www.youtube.com/watch?v=abc123")
        assert track.artist == "Band"
        assert track.duration_ms == 61500

    def test_entry_prefers_explicit_url(self):
        track = YouTubeSearch._entry_to_track(
            {"url": "https://youtu.be/zzz", "title": "Song", "channel": "Chan"}
        )
        assert track.url == "https://youtu.be/zzz"
        assert track.artist == "Chan"

    def test_entry_without_location_is_unresolved(self):
        track = YouTubeSearch._entry_to_track({"title": None})
        assert track.title == "Unknown"
        assert track.origin == RemoteUnresolved()
        assert track.duration_ms == 0
