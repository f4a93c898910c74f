import argparse
import queue
import sys
from pathlib import Path

from musictui import __version__
from musictui.config.i18n import set_language, t
from musictui.core.backend import BackendInitError
from musictui.core.config import ConfigManager
from musictui.core.download_manager import DownloadManager
from musictui.core.downloader import SourceResolver, YouTubeDownloader
from musictui.core.engine import PlaybackEngine
from musictui.core.folder_tree import FolderTree
from musictui.core.library import scan_library
from musictui.core.logger import setup_logging
from musictui.core.orchestrator import MediaDisplayType, Orchestrator, PlayerEvent
from musictui.core.search import SearchManager, YouTubeSearch


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="musictui", description="Terminal music player for local folders and YouTube"
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=str(Path.home()),
        help="directory to scan for audio files (default: home directory)",
    )
    parser.add_argument("--config-dir", default="config", help="where config.json lives")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--depth", type=int, default=None, help="folder scan depth")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = ConfigManager(args.config_dir)
    logger = setup_logging(
        config.get("logging.directory", "logs"),
        args.log_level or config.get("logging.level", "INFO"),
    )
    set_language(config.get("ui.language", "en"))

    # Audio backend first: without it there is nothing to do
    try:
        from musictui.core.player import VLCBackend

        backend = VLCBackend(volume=config.get("playback.volume", 100))
    except (BackendInitError, ImportError, OSError, NotImplementedError) as e:
        logger.critical("Audio backend unavailable: %s", e)
        print(f"\n❌ Audio backend unavailable: {e}")
        print("   Install VLC (libvlc) and python-vlc, then try again.")
        return 1
    logger.info(f"Audio backend: {backend.get_backend_version()}")

    root = Path(args.root).expanduser().resolve()
    depth = args.depth if args.depth is not None else config.get("library.scan_depth", 2)
    print(f"Scanning {root} ...")
    library, scanned = scan_library(
        root,
        extensions=config.get("library.extensions"),
        depth=depth,
        skip_hidden=config.get("library.skip_hidden", True),
    )
    tree = FolderTree(root)
    tree.insert_tracks(scanned)
    tree.visualize()

    # Dependency Injection Wiring
    inbound: "queue.Queue" = queue.Queue()
    download_events: "queue.Queue[dict]" = queue.Queue()

    downloader = YouTubeDownloader(cache_dir=config.get("cache.location", "cache"))
    engine = PlaybackEngine(
        backend,
        lambda notification: inbound.put(PlayerEvent(notification)),
        resolver=SourceResolver(downloader),
        poll_interval=config.get("playback.poll_interval_ms", 50) / 1000.0,
    )
    search_manager = SearchManager(
        YouTubeSearch(),
        inbound.put,
        limit=config.get("search.limit", 15),
        debounce_sec=config.get("search.debounce_ms", 300) / 1000.0,
    )
    download_manager = DownloadManager(downloader, event_callback=download_events.put)

    try:
        display_type = MediaDisplayType(config.get("ui.default_view", "songs"))
    except ValueError:
        display_type = MediaDisplayType.SONGS

    orchestrator = Orchestrator(
        library,
        tree,
        engine.send,
        submit_search=search_manager.submit,
        cancel_search=search_manager.cancel,
        request_download=download_manager.enqueue,
        keybindings=config.keybindings,
        volume_step=config.get("playback.volume_step", 5),
        seek_seconds=config.get("playback.seek_seconds", 10),
        show_queue=config.get("ui.show_queue", True),
        display_type=display_type,
    )

    # urwid is only needed once we actually draw
    from musictui.ui.app import MusicTUI

    app = MusicTUI(
        orchestrator,
        engine,
        inbound,
        download_events=download_events,
        tick=config.get("ui.tick_ms", 50) / 1000.0,
        update_interval=config.get("ui.update_interval_ms", 1000) / 1000.0,
        status_text=t("status.library", count=len(library), root=root),
    )

    engine.start()
    search_manager.start()
    download_manager.start()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        logger.critical("Critical Error: %s", e, exc_info=(type(e), e, e.__traceback__))
        print(f"\n❌ Critical Error: {e}")
        return 1
    finally:
        engine.stop()
        search_manager.stop()
        download_manager.stop()
        backend.cleanup()
        logger.info("MusicTUI stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
