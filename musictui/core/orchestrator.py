"""
Orchestrator

Single-threaded reducer between the keyboard, the playback engine and the
screen. It owns the browser cursors, the folder tree and a mirror of the
player state. Playback-derived fields change only when the engine says so;
sending a command never updates them directly.
"""

import logging
import queue
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from musictui.core.engine import (
    AppendAndPlay,
    Next,
    NextSong,
    PausedAt,
    PlayerCommand,
    PlayerEnded,
    PlayerInformation,
    PlayerNotification,
    Played,
    Previous,
    QueueChanged,
    Seek,
    SetAndPlay,
    SetQueueAndPlay,
    TimeChanged,
    TogglePause,
    VolumeDown,
    VolumeUp,
)
from musictui.core.folder_tree import FolderNode, FolderTree, Leaf
from musictui.core.library import LibraryIndex, SortBy
from musictui.core.search import SearchResults
from musictui.core.selection import SelectionCursor
from musictui.core.track import Track

logger = logging.getLogger("Orchestrator")


class Action(Enum):
    QUIT = "quit"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    SELECT = "select"
    SPACE = "space"
    NEXT_SONG = "next_song"
    PREVIOUS_SONG = "previous_song"
    SWITCH_WINDOW = "switch_window"
    BACKSPACE = "backspace"
    ESC = "esc"
    CHAR = "char"


class FocusedPane(Enum):
    MEDIA = "media"
    QUEUE = "queue"
    SEARCH = "search"


class MediaDisplayType(Enum):
    SONGS = "songs"
    FOLDERS = "folders"
    SEARCH = "search"


@dataclass(frozen=True)
class ActionEvent:
    action: Action
    char: Optional[str] = None


@dataclass(frozen=True)
class PlayerEvent:
    notification: PlayerNotification


ApplicationEvent = Union[ActionEvent, PlayerEvent, SearchResults]


@dataclass(frozen=True)
class RenderSnapshot:
    browser_title: str
    browser_labels: Tuple[str, ...]
    browser_selected: Optional[int]
    queue_labels: Tuple[str, ...]
    queue_selected: Optional[int]
    player: PlayerInformation
    focused: FocusedPane
    display_type: MediaDisplayType
    search_query: str
    show_queue: bool


SORT_CYCLE = [SortBy.TITLE, SortBy.ARTIST, SortBy.ALBUM]


class Orchestrator:
    def __init__(
        self,
        library: LibraryIndex,
        tree: FolderTree,
        send_command: Callable[[PlayerCommand], None],
        *,
        submit_search: Optional[Callable[[str], None]] = None,
        cancel_search: Optional[Callable[[], None]] = None,
        request_download: Optional[Callable[[Track], None]] = None,
        keybindings: Optional[Dict[str, str]] = None,
        volume_step: int = 5,
        seek_seconds: float = 10,
        show_queue: bool = True,
        display_type: MediaDisplayType = MediaDisplayType.SONGS,
    ):
        self.library = library
        self.tree = tree
        self._send = send_command
        self._submit_search = submit_search
        self._cancel_search = cancel_search
        self._request_download = request_download
        self._keymap: Dict[str, str] = {
            key: action for action, key in (keybindings or {}).items()
        }
        self.volume_step = volume_step
        self.seek_seconds = seek_seconds

        self.exit = False
        self.focused = FocusedPane.MEDIA
        self.display_type = display_type
        self.show_queue = show_queue
        self.sort_by = SortBy.TITLE
        self.search_query = ""

        self.songs: SelectionCursor[Track] = SelectionCursor(
            library.view(sort_by=self.sort_by)
        )
        self.queue_cursor: SelectionCursor[Track] = SelectionCursor()
        self.search_results: SelectionCursor[Track] = SelectionCursor()
        self.player = PlayerInformation()

        self._messages: List[Tuple[str, str]] = []

    # ---------- inbound ----------
    def drain(self, inbound: "queue.Queue[ApplicationEvent]") -> int:
        """Apply everything currently queued without waiting for more."""
        handled = 0
        while True:
            try:
                event = inbound.get_nowait()
            except queue.Empty:
                return handled
            self.handle(event)
            handled += 1

    def handle(self, event: ApplicationEvent) -> None:
        if isinstance(event, ActionEvent):
            self.handle_action(event.action, event.char)
        elif isinstance(event, PlayerEvent):
            self.handle_player_event(event.notification)
        elif isinstance(event, SearchResults):
            self.handle_search_results(event)
        else:
            logger.warning(f"Ignoring unknown event: {event!r}")

    def pop_messages(self) -> List[Tuple[str, str]]:
        messages, self._messages = self._messages, []
        return messages

    # ---------- player notifications ----------
    def handle_player_event(self, notification: PlayerNotification) -> None:
        if isinstance(notification, QueueChanged):
            self.player = replace(
                self.player,
                queue=notification.queue,
                playing_index=notification.playing_index,
            )
            self.queue_cursor.replace(notification.queue)
        elif isinstance(notification, Played):
            self.player = replace(
                self.player, playing_index=notification.index, is_playing=True
            )
            track = self.player.current_track
            if track:
                self._log(f"Playing: {track.label()}", "success")
        elif isinstance(notification, PausedAt):
            self.player = replace(
                self.player, playing_index=notification.index, is_playing=False
            )
        elif isinstance(notification, NextSong):
            self.player = replace(self.player, playing_index=notification.index)
        elif isinstance(notification, PlayerEnded):
            self.player = replace(
                self.player, playing_index=None, is_playing=False, elapsed_ms=0
            )
            self._log("Queue finished")
        elif isinstance(notification, TimeChanged):
            self.player = replace(self.player, elapsed_ms=notification.elapsed_ms)
        elif isinstance(notification, PlayerInformation):
            if notification.queue != self.queue_cursor.items:
                self.queue_cursor.replace(notification.queue)
            self.player = notification

    def handle_search_results(self, results: SearchResults) -> None:
        self.search_results.replace(results.tracks)
        self._log(f"Search '{results.query}': {len(results.tracks)} results")

    # ---------- actions ----------
    def handle_action(self, action: Action, char: Optional[str] = None) -> None:
        if action == Action.QUIT:
            self.exit = True
        elif action == Action.SWITCH_WINDOW:
            self._switch_window()
        elif action == Action.MOVE_UP:
            cursor = self._focused_cursor()
            if cursor is not None:
                cursor.move_up()
        elif action == Action.MOVE_DOWN:
            cursor = self._focused_cursor()
            if cursor is not None:
                cursor.move_down()
        elif action == Action.SELECT:
            self._select()
        elif action == Action.SPACE:
            if self.focused == FocusedPane.SEARCH:
                self._edit_query(self.search_query + " ")
            else:
                self._send(TogglePause())
        elif action == Action.NEXT_SONG:
            self._send(Next())
        elif action == Action.PREVIOUS_SONG:
            self._send(Previous())
        elif action == Action.BACKSPACE:
            if self.focused == FocusedPane.SEARCH:
                self._edit_query(self.search_query[:-1])
            elif (
                self.focused == FocusedPane.MEDIA
                and self.display_type == MediaDisplayType.FOLDERS
            ):
                self.tree.navigate_up()
        elif action == Action.ESC:
            if self.focused == FocusedPane.SEARCH:
                self.focused = FocusedPane.MEDIA
        elif action == Action.CHAR and char:
            if self.focused == FocusedPane.SEARCH:
                self._edit_query(self.search_query + char)
            else:
                self._handle_binding(self._keymap.get(char))

    def _handle_binding(self, name: Optional[str]) -> None:
        if name is None:
            return
        if name == "quit":
            self.exit = True
        elif name == "search":
            self.focused = FocusedPane.SEARCH
        elif name == "toggle_view":
            if self.display_type == MediaDisplayType.SONGS:
                self.display_type = MediaDisplayType.FOLDERS
            else:
                self.display_type = MediaDisplayType.SONGS
        elif name == "toggle_queue":
            self.show_queue = not self.show_queue
            if not self.show_queue and self.focused == FocusedPane.QUEUE:
                self.focused = FocusedPane.MEDIA
        elif name == "sort":
            self.sort_by = SORT_CYCLE[(SORT_CYCLE.index(self.sort_by) + 1) % len(SORT_CYCLE)]
            self.songs.replace(self.library.view(sort_by=self.sort_by))
            self._log(f"Sorted by {self.sort_by.value}")
        elif name == "add_to_queue":
            self._add_to_queue()
        elif name == "volume_up":
            self._send(VolumeUp(self.volume_step))
        elif name == "volume_down":
            self._send(VolumeDown(self.volume_step))
        elif name == "seek_forward":
            self._send(Seek(self.seek_seconds))
        elif name == "seek_backward":
            self._send(Seek(-self.seek_seconds))
        elif name == "go_root":
            if self.display_type == MediaDisplayType.FOLDERS:
                self.tree.navigate_root()
        elif name == "download":
            self._download_selected()

    def _switch_window(self) -> None:
        if self.focused == FocusedPane.MEDIA and self.show_queue:
            self.focused = FocusedPane.QUEUE
        else:
            self.focused = FocusedPane.MEDIA

    def _focused_cursor(self) -> Optional[SelectionCursor]:
        if self.focused == FocusedPane.QUEUE:
            return self.queue_cursor
        if self.focused == FocusedPane.MEDIA:
            return self._browser_cursor()
        return None

    def _browser_cursor(self) -> SelectionCursor:
        if self.display_type == MediaDisplayType.FOLDERS:
            return self.tree.cursor
        if self.display_type == MediaDisplayType.SEARCH:
            return self.search_results
        return self.songs

    def _select(self) -> None:
        if self.focused == FocusedPane.SEARCH:
            self.display_type = MediaDisplayType.SEARCH
            self.focused = FocusedPane.MEDIA
            return

        if self.focused == FocusedPane.QUEUE:
            index = self.queue_cursor.selected
            if index is not None:
                self._send(SetAndPlay(index))
            return

        if self.display_type == MediaDisplayType.SONGS:
            index = self.songs.selected
            if index is not None:
                self._send(SetQueueAndPlay(tuple(self.songs.split_rotated_at(index))))
        elif self.display_type == MediaDisplayType.FOLDERS:
            self._select_in_folder()
        elif self.display_type == MediaDisplayType.SEARCH:
            track = self.search_results.current()
            if track is not None:
                self._send(AppendAndPlay((track,)))

    def _select_in_folder(self) -> None:
        children = self.tree.cursor.items
        selected = self.tree.cursor.selected
        track = self.tree.resolve_selection()
        if track is None or selected is None:
            return
        # Play from the chosen track through the folder's other tracks
        leaves = SelectionCursor(c.track for c in children if isinstance(c, Leaf))
        position = sum(1 for c in children[:selected] if isinstance(c, Leaf))
        self._send(SetQueueAndPlay(tuple(leaves.split_rotated_at(position))))

    def _add_to_queue(self) -> None:
        if self.focused != FocusedPane.MEDIA:
            return
        if self.display_type == MediaDisplayType.FOLDERS:
            child = self.tree.selected()
            if isinstance(child, FolderNode):
                tracks = self.tree.leaf_tracks(child.identity)
            elif isinstance(child, Leaf):
                tracks = [child.track]
            else:
                tracks = []
        else:
            track = self._browser_cursor().current()
            tracks = [track] if track is not None else []
        if tracks:
            self._send(AppendAndPlay(tuple(tracks)))
            self._log(f"Queued {len(tracks)} track(s)")

    def _download_selected(self) -> None:
        if self._request_download is None or self.display_type != MediaDisplayType.SEARCH:
            return
        track = self.search_results.current()
        if track is not None and track.is_remote:
            self._request_download(track)
            self._log(f"Downloading: {track.label()}")

    def _edit_query(self, query: str) -> None:
        self.search_query = query
        if query.strip():
            if self._submit_search:
                self._submit_search(query)
        else:
            if self._cancel_search:
                self._cancel_search()
            self.search_results.replace([])

    def _log(self, message: str, style: str = "info") -> None:
        logger.info(message)
        self._messages.append((message, style))

    # ---------- rendering ----------
    def snapshot(self) -> RenderSnapshot:
        cursor = self._browser_cursor()
        if self.display_type == MediaDisplayType.FOLDERS:
            title = self.tree.current_folder().display_name
        elif self.display_type == MediaDisplayType.SEARCH:
            title = f"Search: {self.search_query}"
        else:
            title = f"Songs ({self.sort_by.value})"
        return RenderSnapshot(
            browser_title=title,
            browser_labels=tuple(cursor.labels()),
            browser_selected=cursor.selected,
            queue_labels=tuple(self.queue_cursor.labels()),
            queue_selected=self.queue_cursor.selected,
            player=self.player,
            focused=self.focused,
            display_type=self.display_type,
            search_query=self.search_query,
            show_queue=self.show_queue,
        )
