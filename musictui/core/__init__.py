"""Core playback, library and navigation components."""
