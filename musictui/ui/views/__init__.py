"""Views drawn from the orchestrator's render snapshot."""

from musictui.ui.views.list_pane import LibraryView, QueueView
from musictui.ui.views.now_playing import NowPlayingView

__all__ = ["LibraryView", "QueueView", "NowPlayingView"]
