import pytest

from musictui.config import i18n
from musictui.config.i18n import get_language, set_language, t


@pytest.fixture(autouse=True)
def restore_language():
    previous = get_language()
    yield
    set_language(previous)


def test_english_default_strings():
    set_language("en")
    assert t("pane.queue") == "Queue"
    assert t("player.volume", volume=40) == "Vol 40%"


def test_spanish_strings():
    set_language("es")
    assert get_language() == "es"
    assert t("pane.queue") == "Cola"


def test_unknown_language_falls_back_to_english():
    set_language("xx")
    assert get_language() == "en"


def test_missing_key_returns_key():
    assert t("no.such.key") == "no.such.key"


def test_missing_format_argument_keeps_template():
    set_language("en")
    assert t("status.library", count=3) == i18n.STRINGS["en"]["status.library"]
