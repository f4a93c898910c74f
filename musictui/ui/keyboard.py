"""
Keyboard decoding: urwid key names to orchestrator actions.

Printable characters are passed through as CHAR; what they mean depends on
which pane has focus, and only the orchestrator knows that.
"""

from typing import Optional

from musictui.core.orchestrator import Action, ActionEvent


class KeyboardHandler:
    KEYS = {
        "ctrl c": Action.QUIT,
        "up": Action.MOVE_UP,
        "page up": Action.MOVE_UP,
        "down": Action.MOVE_DOWN,
        "page down": Action.MOVE_DOWN,
        "enter": Action.SELECT,
        " ": Action.SPACE,
        "left": Action.PREVIOUS_SONG,
        "right": Action.NEXT_SONG,
        "tab": Action.SWITCH_WINDOW,
        "backspace": Action.BACKSPACE,
        "esc": Action.ESC,
    }

    @classmethod
    def decode(cls, key) -> Optional[ActionEvent]:
        # Ignore mouse events and other non-string keys
        if not isinstance(key, str):
            return None
        action = cls.KEYS.get(key)
        if action is not None:
            return ActionEvent(action)
        if len(key) == 1 and key.isprintable():
            return ActionEvent(Action.CHAR, key)
        return None
