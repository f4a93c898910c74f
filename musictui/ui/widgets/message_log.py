"""
MessageLog Widget

Scrolling log widget for displaying activity messages.
"""

import time
import urwid


class MessageLog(urwid.WidgetWrap):
    """Scrolling log of playback and search activity."""

    MAX_LINES = 50

    def __init__(self, height=3):
        self.height = height
        self.walker = urwid.SimpleListWalker([])
        self.listbox = urwid.ListBox(self.walker)
        self.box = urwid.LineBox(self.listbox)
        super().__init__(self.box)

    def log(self, message: str, style: str = "normal"):
        """Add a message to the log."""
        timestamp = time.strftime("%H:%M:%S")
        self.walker.append(urwid.Text((style, f"[{timestamp}] {message}")))
        if len(self.walker) > self.MAX_LINES:
            self.walker.pop(0)
        # Scroll to bottom
        self.listbox.set_focus(len(self.walker) - 1)
