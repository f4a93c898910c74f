"""
MusicTUI - terminal audio player.

Indexes local audio files, browses them as a flat list or a folder tree,
and drives a VLC backend from a urwid interface.
"""

__version__ = "0.3.0"
