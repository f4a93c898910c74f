"""urwid front end."""
