"""
Folder Tree

Hierarchical view of local tracks grouped by directory. The tree is built
from a flat scan (tracks may arrive in any order) and only ever grows during
a session. A path stack records which folder the browser is showing.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from musictui.core.selection import SelectionCursor
from musictui.core.track import Track

logger = logging.getLogger("FolderTree")


@dataclass
class Leaf:
    track: Track

    def label(self) -> str:
        return self.track.label()


@dataclass
class FolderNode:
    identity: Path
    display_name: str
    children: List["FolderChild"] = field(default_factory=list)

    def add_child(self, child: "FolderChild") -> None:
        """Folders go after existing folders and before any leaf."""
        if isinstance(child, FolderNode):
            position = 0
            while position < len(self.children) and isinstance(
                self.children[position], FolderNode
            ):
                position += 1
            self.children.insert(position, child)
        else:
            self.children.append(child)

    def child_folder(self, identity: Path) -> Optional["FolderNode"]:
        for child in self.children:
            if isinstance(child, FolderNode) and child.identity == identity:
                return child
        return None

    def insert_track_at_parent_path(self, track: Track, parent_path: Path) -> None:
        """
        Place `track` under the folder whose identity is `parent_path`,
        creating every missing folder between this node and that one.

        `parent_path` must be this node's identity or lie below it.
        """
        parent_path = Path(parent_path)
        if parent_path == self.identity:
            self.add_child(Leaf(track))
            return

        relative = parent_path.relative_to(self.identity)
        next_identity = self.identity / relative.parts[0]
        folder = self.child_folder(next_identity)
        if folder is None:
            folder = FolderNode(next_identity, next_identity.name)
            self.add_child(folder)
        folder.insert_track_at_parent_path(track, parent_path)

    def label(self) -> str:
        return f"[+] {self.display_name} ({len(self.children)})"


FolderChild = Union[FolderNode, Leaf]


class FolderTree:
    """Root folder, navigation stack and the cursor over the current folder."""

    def __init__(self, root: Path, name: Optional[str] = None):
        root = Path(root)
        self.root = FolderNode(root, name or root.name or str(root))
        self._path_stack: List[Path] = []
        self.cursor: SelectionCursor[FolderChild] = SelectionCursor()
        self._populate_cursor()

    # ---------- building ----------
    def insert_track_at_parent_path(self, track: Track, parent_path: Path) -> bool:
        try:
            self.root.insert_track_at_parent_path(track, Path(parent_path))
        except ValueError:
            logger.warning(
                f"Skipping '{track.title}': {parent_path} is outside {self.root.identity}"
            )
            return False
        return True

    def insert_tracks(self, tracks: Iterable[Track]) -> int:
        """Insert local tracks under their directories. Returns how many landed."""
        inserted = 0
        for track in tracks:
            parent = track.parent_path
            if parent is None:
                continue
            if self.insert_track_at_parent_path(track, parent):
                inserted += 1
        self._populate_cursor()
        return inserted

    # ---------- lookup ----------
    def find_folder(self, path: Path) -> Optional[FolderNode]:
        path = Path(path)
        node = self.root
        if path == node.identity:
            return node
        try:
            relative = path.relative_to(node.identity)
        except ValueError:
            return None
        identity = node.identity
        for part in relative.parts:
            identity = identity / part
            node = node.child_folder(identity)
            if node is None:
                return None
        return node

    def children_of(self, path: Path) -> List[FolderChild]:
        folder = self.find_folder(path)
        if folder is None:
            return []
        return list(folder.children)

    def leaf_tracks(self, path: Path) -> List[Track]:
        """Tracks directly inside `path`; sub-folders are not descended."""
        return [c.track for c in self.children_of(path) if isinstance(c, Leaf)]

    # ---------- navigation ----------
    @property
    def current_path(self) -> Path:
        if self._path_stack:
            return self._path_stack[-1]
        return self.root.identity

    @property
    def depth(self) -> int:
        return len(self._path_stack)

    def current_folder(self) -> FolderNode:
        folder = self.find_folder(self.current_path)
        # The stack only holds identities taken from existing children.
        assert folder is not None
        return folder

    def current_children(self) -> List[FolderChild]:
        return list(self.current_folder().children)

    def navigate_into(self, child_identity: Path) -> bool:
        child_identity = Path(child_identity)
        if self.current_folder().child_folder(child_identity) is None:
            logger.debug(f"Not a sub-folder of {self.current_path}: {child_identity}")
            return False
        self._path_stack.append(child_identity)
        self._populate_cursor()
        return True

    def navigate_up(self) -> None:
        if self._path_stack:
            self._path_stack.pop()
            self._populate_cursor()

    def navigate_root(self) -> None:
        self._path_stack.clear()
        self._populate_cursor()

    def move_up(self) -> None:
        self.cursor.move_up()

    def move_down(self) -> None:
        self.cursor.move_down()

    def selected(self) -> Optional[FolderChild]:
        return self.cursor.current()

    def resolve_selection(self) -> Optional[Track]:
        """
        Enter the selected folder, or hand back the selected track.

        The tree never starts playback itself; the caller decides what a
        returned track means.
        """
        child = self.cursor.current()
        if child is None:
            return None
        if isinstance(child, FolderNode):
            self.navigate_into(child.identity)
            return None
        return child.track

    def visualize(self) -> None:
        logger.debug(self.root.display_name)
        self._visualize_recursive(self.root.children, 1)

    def _visualize_recursive(self, nodes: List[FolderChild], depth: int) -> None:
        indent = "  " * depth
        for node in nodes:
            if isinstance(node, FolderNode):
                logger.debug(f"{indent}{node.label()}")
                self._visualize_recursive(node.children, depth + 1)
            else:
                logger.debug(f"{indent}- {node.track.title}")

    def _populate_cursor(self) -> None:
        self.cursor.replace(self.current_children())
