import pytest

from musictui.core.orchestrator import Action, ActionEvent
from musictui.ui.keyboard import KeyboardHandler


class TestKeyboardHandler:
    @pytest.mark.parametrize(
        "key, action",
        [
            ("ctrl c", Action.QUIT),
            ("up", Action.MOVE_UP),
            ("down", Action.MOVE_DOWN),
            ("enter", Action.SELECT),
            (" ", Action.SPACE),
            ("left", Action.PREVIOUS_SONG),
            ("right", Action.NEXT_SONG),
            ("tab", Action.SWITCH_WINDOW),
            ("backspace", Action.BACKSPACE),
            ("esc", Action.ESC),
        ],
    )
    def test_named_keys(self, key, action):
        assert KeyboardHandler.decode(key) == ActionEvent(action)

    def test_printable_characters_pass_through(self):
        assert KeyboardHandler.decode("q") == ActionEvent(Action.CHAR, "q")
        assert KeyboardHandler.decode("ñ") == ActionEvent(Action.CHAR, "ñ")

    def test_unknown_keys_are_dropped(self):
        assert KeyboardHandler.decode("f5") is None
        assert KeyboardHandler.decode("meta x") is None

    def test_mouse_events_are_dropped(self):
        assert KeyboardHandler.decode(("mouse press", 1, 3, 4)) is None
