"""
Library Index

Finds audio files under a root directory, reads their tags with Mutagen,
and keeps a flat catalog keyed by (title, artist).
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from mutagen import File as MutagenFile
from mutagen import MutagenError

from musictui.core.track import Local, Track

logger = logging.getLogger("Library")

DEFAULT_EXTENSIONS = (".mp3", ".ogg", ".wav", ".flac", ".m4a")


@dataclass(frozen=True)
class TrackMetadata:
    title: str
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_ms: int = 0


def get_tag_value(audio_file, tag_names: List[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
        if value:
            if isinstance(value, list):
                return str(value[0])
            return str(value)
    return None


def read_tags(path) -> Optional[TrackMetadata]:
    """
    Read title/artist/album/duration from an audio file.

    Returns None when Mutagen does not recognise the file or cannot read it.
    Untagged but valid audio gets its file name as title.
    """
    try:
        audio_file = MutagenFile(str(path))
    except (MutagenError, OSError) as e:
        logger.debug(f"Unreadable tags for {path}: {e}")
        return None
    if audio_file is None:
        return None

    # ID3 (MP3), MP4, and Vorbis/FLAC tag names
    title = get_tag_value(audio_file, ["TIT2", "\xa9nam", "TITLE", "title"])
    artist = get_tag_value(audio_file, ["TPE1", "\xa9ART", "ARTIST", "artist"])
    album = get_tag_value(audio_file, ["TALB", "\xa9alb", "ALBUM", "album"])

    duration_ms = 0
    info = getattr(audio_file, "info", None)
    length = getattr(info, "length", None)
    if length:
        duration_ms = int(length * 1000)

    return TrackMetadata(
        title=title or Path(path).stem,
        artist=artist,
        album=album,
        duration_ms=duration_ms,
    )


class FileFinder:
    """Collects audio file paths below a root directory."""

    def __init__(
        self,
        search_path,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        depth: int = 2,
        skip_hidden: bool = True,
    ):
        self.search_path = Path(search_path).expanduser()
        self.extensions = tuple(e.lower() for e in extensions)
        self.depth = depth
        self.skip_hidden = skip_hidden
        self.found_paths: List[Path] = []

    def find_paths(self) -> List[Path]:
        self.found_paths = []
        self._walk(self.search_path, self.depth)
        logger.info(f"Found {len(self.found_paths)} audio files under {self.search_path}")
        return self.found_paths

    def _walk(self, directory: Path, depth: int) -> None:
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"Skipping {directory}: {e}")
            return
        for entry in entries:
            if self.skip_hidden and entry.name.startswith("."):
                continue
            try:
                if entry.is_file():
                    if entry.name.lower().endswith(self.extensions):
                        self.found_paths.append(Path(entry.path))
                elif entry.is_dir() and depth > 0:
                    self._walk(Path(entry.path), depth - 1)
            except OSError:
                continue

    def create_tracks(self, reader=read_tags) -> List[Track]:
        tracks = []
        for path in self.found_paths:
            meta = reader(path)
            if meta is None:
                continue
            tracks.append(
                Track(
                    title=meta.title,
                    artist=meta.artist,
                    album=meta.album,
                    duration_ms=meta.duration_ms,
                    origin=Local(str(path)),
                )
            )
        return tracks


class SortBy(Enum):
    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


class FilterField(Enum):
    ALL = "all"
    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"


@dataclass(frozen=True)
class Filter:
    field: FilterField = FilterField.ALL
    text: str = ""

    def matches(self, track: Track) -> bool:
        needle = self.text.strip().lower()
        if not needle:
            return True
        if self.field == FilterField.ALL:
            values = [track.title, track.artist, track.album]
        else:
            values = [getattr(track, self.field.value)]
        return any(v and needle in v.lower() for v in values)


class LibraryIndex:
    """Flat catalog of discovered tracks, first entry wins per identity."""

    def __init__(self, tracks: Optional[Iterable[Track]] = None):
        self._tracks: Dict[Tuple[str, Optional[str]], Track] = {}
        for track in tracks or []:
            self.add(track)

    def add(self, track: Track) -> bool:
        if track.identity in self._tracks:
            logger.debug(f"Duplicate library entry ignored: {track.label()}")
            return False
        self._tracks[track.identity] = track
        return True

    def get(self, title: str, artist: Optional[str] = None) -> Optional[Track]:
        return self._tracks.get((title, artist))

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, track: Track) -> bool:
        return track.identity in self._tracks

    def tracks(self) -> List[Track]:
        return list(self._tracks.values())

    def view(
        self,
        sort_by: Optional[SortBy] = None,
        order: SortOrder = SortOrder.ASC,
        filter: Optional[Filter] = None,
    ) -> List[Track]:
        tracks = [t for t in self._tracks.values() if filter is None or filter.matches(t)]
        if sort_by is not None:
            tracks.sort(
                key=lambda t: (getattr(t, sort_by.value) or "").lower(),
                reverse=order == SortOrder.DESC,
            )
        return tracks


def scan_library(
    root,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    depth: int = 2,
    skip_hidden: bool = True,
    reader=read_tags,
) -> Tuple[LibraryIndex, List[Track]]:
    """
    Scan `root` and index what was found.

    Returns the de-duplicated index plus every scanned track; the folder view
    needs the latter, since two files may share a (title, artist).
    """
    finder = FileFinder(root, extensions=extensions, depth=depth, skip_hidden=skip_hidden)
    finder.find_paths()
    tracks = finder.create_tracks(reader)
    index = LibraryIndex(tracks)
    logger.info(f"Library indexed: {len(index)} tracks ({len(tracks)} files)")
    return index, tracks
