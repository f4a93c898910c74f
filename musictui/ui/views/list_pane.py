from typing import Optional, Sequence, Tuple

import urwid

from musictui.config.i18n import t
from musictui.core.orchestrator import FocusedPane, RenderSnapshot

NOW_PLAYING_MARK = "♪ "


class ListPane(urwid.WidgetWrap):
    """Titled list whose rows are rebuilt only when the labels change."""

    def __init__(self, title: str):
        self.walker = urwid.SimpleFocusListWalker([])
        self.listbox = urwid.ListBox(self.walker)
        self.box = urwid.LineBox(self.listbox, title=title, title_align="left")
        self._last: Optional[Tuple] = None
        super().__init__(self.box)

    def show(
        self,
        title: str,
        labels: Sequence[str],
        selected: Optional[int],
        focused: bool,
        marked: Optional[int] = None,
    ):
        key = (title, tuple(labels), selected, focused, marked)
        if key == self._last:
            return
        self._last = key

        self.box.set_title(title + (t("pane.focused") if focused else ""))
        rows = []
        for index, label in enumerate(labels):
            text = (NOW_PLAYING_MARK + label) if index == marked else label
            if index == selected and focused:
                style = "highlight"
            elif index == marked:
                style = "now_playing"
            else:
                style = "normal"
            rows.append(urwid.AttrMap(urwid.Text(text, wrap="clip"), style))
        if not rows:
            rows.append(urwid.Text(("info", t("list.empty"))))
        self.walker[:] = rows
        if selected is not None and selected < len(rows):
            # Keep the cursor row on screen
            self.walker.set_focus(selected)


class LibraryView(ListPane):
    def __init__(self):
        super().__init__(t("pane.media"))

    def render_snapshot(self, snap: RenderSnapshot):
        self.show(
            f"{t('pane.media')}: {snap.browser_title}",
            snap.browser_labels,
            snap.browser_selected,
            snap.focused == FocusedPane.MEDIA,
        )


class QueueView(ListPane):
    def __init__(self):
        super().__init__(t("pane.queue"))

    def render_snapshot(self, snap: RenderSnapshot):
        self.show(
            t("pane.queue"),
            snap.queue_labels,
            snap.queue_selected,
            snap.focused == FocusedPane.QUEUE,
            marked=snap.player.playing_index,
        )
