"""UI Widgets Package

Reusable UI components shared by the main screen.
"""

from musictui.ui.widgets.status_bar import StatusBar
from musictui.ui.widgets.message_log import MessageLog

__all__ = ["StatusBar", "MessageLog"]
