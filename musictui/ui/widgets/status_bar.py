"""
StatusBar Widget

Three-line status bar showing library info and contextual shortcuts.
"""

import urwid

from musictui.config.i18n import t


class StatusBar(urwid.WidgetWrap):
    """Three-line status bar: Info (Top) + Pane Shortcuts (Mid) + App Shortcuts (Bot)."""

    def __init__(self, context_text=""):
        self.top_line = urwid.Text(context_text, align="center")
        self.mid_line = urwid.Text(t("status.shortcuts_media"), align="center")
        self.bot_line = urwid.Text(t("status.shortcuts_app"), align="center")

        self._context = "media"

        self.pile = urwid.Pile(
            [
                urwid.AttrMap(self.top_line, "status"),
                urwid.AttrMap(self.mid_line, "status"),
                urwid.AttrMap(self.bot_line, "status"),
            ]
        )
        super().__init__(self.pile)

    def update_context(self, context: str):
        """Update shortcuts for the focused pane (media/queue/search)."""
        if context == self._context:
            return
        self._context = context
        if context == "search":
            self.mid_line.set_text(t("status.shortcuts_search"))
        else:
            self.mid_line.set_text(t("status.shortcuts_media"))
