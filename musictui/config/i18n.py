"""
Internationalization (i18n) module for MusicTUI.

Provides a simple translation system with English and Spanish support.
Set MUSICTUI_LANG environment variable to change language (default: en).
"""

import os
from typing import Dict

# Default language (can be overridden by MUSICTUI_LANG env var)
LANG = os.environ.get("MUSICTUI_LANG", "en")

STRINGS: Dict[str, Dict[str, str]] = {
    # =========================================================================
    # ENGLISH (Default)
    # =========================================================================
    "en": {
        "pane.search": "Search",
        "pane.media": "Media",
        "pane.queue": "Queue",
        "pane.focused": "(*)",
        "player.playing": "Playing",
        "player.paused": "Paused",
        "player.no_audio": "No Audio",
        "player.volume": "Vol {volume}%",
        "status.library": "{count} tracks in {root}",
        "status.shortcuts_media": "Enter=Play  Space=Pause  ←/→=Prev/Next  Tab=Queue  V=Folders  A=Add  S=Sort",
        "status.shortcuts_app": "F=Search  W=Queue pane  +/-=Vol  [/]=Seek  D=Download  Q=Quit",
        "status.shortcuts_search": "Type to search  •  Enter=Show results  •  Esc=Back",
        "list.empty": "(empty)",
    },
    # =========================================================================
    # SPANISH
    # =========================================================================
    "es": {
        "pane.search": "Buscar",
        "pane.media": "Medios",
        "pane.queue": "Cola",
        "pane.focused": "(*)",
        "player.playing": "Reproduciendo",
        "player.paused": "En pausa",
        "player.no_audio": "Sin audio",
        "player.volume": "Vol {volume}%",
        "status.library": "{count} temas en {root}",
        "status.shortcuts_media": "Enter=Reproducir  Espacio=Pausa  ←/→=Ant/Sig  Tab=Cola  V=Carpetas  A=Agregar  S=Orden",
        "status.shortcuts_app": "F=Buscar  W=Panel cola  +/-=Vol  [/]=Saltar  D=Descargar  Q=Salir",
        "status.shortcuts_search": "Escribí para buscar  •  Enter=Ver resultados  •  Esc=Volver",
        "list.empty": "(vacío)",
    },
}


def t(key: str, **kwargs) -> str:
    """
    Translate a string key to the current language.

    Args:
        key: The translation key (e.g., "pane.queue")
        **kwargs: Optional format arguments

    Returns:
        Translated string, or the key itself if not found
    """
    lang_strings = STRINGS.get(LANG, STRINGS["en"])
    text = lang_strings.get(key, STRINGS["en"].get(key, key))

    if kwargs:
        try:
            text = text.format(**kwargs)
        except (KeyError, ValueError):
            pass

    return text


def set_language(lang: str):
    """Set the current language (en or es)."""
    global LANG
    LANG = lang if lang in STRINGS else "en"


def get_language() -> str:
    """Get the current language code."""
    return LANG
