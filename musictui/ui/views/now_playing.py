import urwid

from musictui.config.i18n import t
from musictui.core.engine import Paused, Playing, PlayerInformation
from musictui.core.track import format_duration_ms

BAR_WIDTH = 40


def progress_bar(elapsed_ms: int, total_ms: int, width: int = BAR_WIDTH) -> str:
    if total_ms <= 0:
        return "[" + " " * width + "]"
    filled = int(width * min(1.0, max(0.0, elapsed_ms / total_ms)))
    return "[" + "=" * filled + " " * (width - filled) + "]"


class NowPlayingView(urwid.WidgetWrap):
    """Current track, play state, elapsed/total time and volume."""

    def __init__(self):
        self.info = urwid.Text("", wrap="clip")
        self.progress = urwid.Text("", wrap="clip")
        pile = urwid.Pile([self.info, self.progress])
        super().__init__(urwid.LineBox(pile))

    def render_snapshot(self, player: PlayerInformation):
        status = player.status
        volume = t("player.volume", volume=player.volume)
        if isinstance(status, (Playing, Paused)):
            track = status.track
            state = t("player.playing") if isinstance(status, Playing) else t("player.paused")
            self.info.set_text(
                [("title", track.title), f"  {track.artist or ''}  ", ("info", state)]
            )
            self.progress.set_text(
                f"{format_duration_ms(player.elapsed_ms)}/"
                f"{format_duration_ms(track.duration_ms)} "
                f"{progress_bar(player.elapsed_ms, track.duration_ms)}  {volume}"
            )
        else:
            self.info.set_text(("info", t("player.no_audio")))
            self.progress.set_text(volume)
