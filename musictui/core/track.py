"""
Track Model

A playable audio item plus where it comes from. Tracks are immutable once
created; the library de-duplicates them by (title, artist).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Local:
    path: str


@dataclass(frozen=True)
class RemoteKnownUrl:
    url: str


@dataclass(frozen=True)
class RemoteUnresolved:
    """Found in a catalog but not yet bound to a playable source."""


@dataclass(frozen=True)
class RemoteCached:
    url: str
    path: str


TrackOrigin = Union[Local, RemoteKnownUrl, RemoteUnresolved, RemoteCached]


@dataclass(frozen=True)
class Track:
    """Represents a single track."""

    title: str
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_ms: int = 0
    origin: TrackOrigin = RemoteUnresolved()

    @property
    def identity(self) -> Tuple[str, Optional[str]]:
        return (self.title, self.artist)

    @property
    def is_local(self) -> bool:
        return isinstance(self.origin, Local)

    @property
    def is_remote(self) -> bool:
        return not isinstance(self.origin, Local)

    @property
    def local_path(self) -> Optional[str]:
        """Path on disk for local and cached tracks."""
        if isinstance(self.origin, (Local, RemoteCached)):
            return self.origin.path
        return None

    @property
    def url(self) -> Optional[str]:
        if isinstance(self.origin, (RemoteKnownUrl, RemoteCached)):
            return self.origin.url
        return None

    @property
    def parent_path(self) -> Optional[Path]:
        if isinstance(self.origin, Local):
            return Path(self.origin.path).parent
        return None

    def label(self) -> str:
        if self.artist:
            return f"{self.title} - {self.artist}"
        return self.title


def format_duration_ms(ms: int) -> str:
    seconds = max(0, int(ms or 0)) // 1000
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
