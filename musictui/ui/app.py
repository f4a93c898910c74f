"""
Main screen.

urwid collects keys and turns them into ActionEvents on the inbound queue;
a tick alarm drains that queue into the orchestrator and redraws from its
snapshot. Nothing here waits on the playback engine.
"""

import logging
import queue
import time
from typing import Any, Dict, Optional

import urwid

from musictui.config.i18n import t
from musictui.core.engine import PlaybackEngine, Update
from musictui.core.orchestrator import FocusedPane, Orchestrator, RenderSnapshot
from musictui.ui.keyboard import KeyboardHandler
from musictui.ui.views import LibraryView, NowPlayingView, QueueView
from musictui.ui.widgets import MessageLog, StatusBar

logger = logging.getLogger("MusicTUI")

QUEUE_WIDTH = 36

PALETTE = [
    ("status", "black", "dark cyan"),
    ("title", "yellow,bold", ""),
    ("highlight", "black", "yellow"),
    ("now_playing", "light green", ""),
    ("normal", "", ""),
    ("error", "light red,bold", ""),
    ("success", "light green", ""),
    ("info", "light blue", ""),
    ("search_active", "yellow", ""),
]


class MusicTUI:
    def __init__(
        self,
        orchestrator: Orchestrator,
        engine: PlaybackEngine,
        inbound: "queue.Queue",
        *,
        download_events: "Optional[queue.Queue[dict]]" = None,
        tick: float = 0.05,
        update_interval: float = 1.0,
        status_text: str = "",
    ):
        self.orchestrator = orchestrator
        self.engine = engine
        self.inbound = inbound
        self._download_events = download_events
        self.tick = max(0.01, tick)
        self.update_interval = update_interval
        self._last_update = 0.0
        self._tick_alarm = None
        self._show_queue = None

        # Widgets
        self.search_text = urwid.Text("")
        self.search_attr = urwid.AttrMap(self.search_text, "normal")
        self.search_box = urwid.LineBox(self.search_attr, title=t("pane.search"), title_align="left")
        self.library_view = LibraryView()
        self.queue_view = QueueView()
        self.now_playing = NowPlayingView()
        self.message_log = MessageLog(height=3)
        self.status = StatusBar(status_text)

        self.columns = urwid.Columns([self.library_view])
        body = urwid.Pile(
            [
                ("pack", self.search_box),
                ("weight", 1, self.columns),
                ("pack", self.now_playing),
            ]
        )
        footer = urwid.Pile(
            [
                ("fixed", 5, self.message_log),  # 3 lines text + 2 borders = 5 lines
                self.status,
            ]
        )
        self.frame = urwid.Frame(body=body, footer=footer)

        # Every key goes through the orchestrator, list widgets never see it
        self.loop = urwid.MainLoop(
            self.frame,
            palette=PALETTE,
            input_filter=self._input_filter,
            handle_mouse=False,
        )

    # ---------- input ----------
    def _input_filter(self, keys, raw):
        for key in keys:
            self.unhandled_input(key)
        return []

    def unhandled_input(self, key):
        event = KeyboardHandler.decode(key)
        if event is not None:
            logger.debug(f"[KEY] {key!r} -> {event.action.value}")
            self.inbound.put(event)

    # ---------- tick ----------
    def run(self):
        self.render()
        self._tick_alarm = self.loop.set_alarm_in(self.tick, self._on_tick)
        self.loop.run()

    def _on_tick(self, loop=None, user_data=None):
        # Clear the handle first to avoid duplicate scheduling if handler is slow
        self._tick_alarm = None
        try:
            self.orchestrator.drain(self.inbound)
            self._process_download_events()
            if self.orchestrator.exit:
                raise urwid.ExitMainLoop()

            now = time.monotonic()
            if now - self._last_update >= self.update_interval:
                self._last_update = now
                self.engine.send(Update())

            self.render()
        finally:
            if not self.orchestrator.exit:
                self._tick_alarm = self.loop.set_alarm_in(self.tick, self._on_tick)

    def _process_download_events(self):
        if self._download_events is None:
            return
        while True:
            try:
                event = self._download_events.get_nowait()
            except queue.Empty:
                break
            self._handle_download_event(event)

    def _handle_download_event(self, event: Dict[str, Any]):
        etype = event.get("type")
        track = event.get("track")
        label = track.label() if track is not None else "?"
        if etype == "start":
            self.message_log.log(f"Downloading {label}", "info")
        elif etype == "complete":
            self.message_log.log(f"Saved {label} to {event['cached'].path}", "success")
        elif etype == "error":
            self.message_log.log(f"Download failed: {label} ({event.get('error')})", "error")
        elif etype == "canceled":
            self.message_log.log(f"Download canceled: {label}", "info")

    # ---------- drawing ----------
    def render(self):
        snap = self.orchestrator.snapshot()
        for message, style in self.orchestrator.pop_messages():
            self.message_log.log(message, style)

        if snap.show_queue != self._show_queue:
            self._show_queue = snap.show_queue
            self._layout_columns(snap.show_queue)

        self._render_search(snap)
        self.library_view.render_snapshot(snap)
        if snap.show_queue:
            self.queue_view.render_snapshot(snap)
        self.now_playing.render_snapshot(snap.player)
        self.status.update_context(snap.focused.value)

    def _layout_columns(self, show_queue: bool):
        contents = [(self.library_view, self.columns.options("weight", 1))]
        if show_queue:
            contents.append((self.queue_view, self.columns.options("given", QUEUE_WIDTH)))
        self.columns.contents = contents

    def _render_search(self, snap: RenderSnapshot):
        focused = snap.focused == FocusedPane.SEARCH
        self.search_text.set_text(snap.search_query + ("_" if focused else ""))
        self.search_attr.set_attr_map({None: "search_active" if focused else "normal"})
        self.search_box.set_title(t("pane.search") + (t("pane.focused") if focused else ""))
