"""
Configuration Management

Handles loading/saving settings and keybindings. Only settings are
persisted; the library and queue are rebuilt on every start.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger("ConfigManager")


DEFAULT_CONFIG: Dict[str, Any] = {
    "library": {
        "extensions": [".mp3", ".ogg", ".wav", ".flac", ".m4a"],
        "scan_depth": 2,
        "skip_hidden": True,
    },
    "playback": {
        "poll_interval_ms": 50,
        "volume": 100,
        "volume_step": 5,
        "seek_seconds": 10,
    },
    "ui": {
        "tick_ms": 50,
        "update_interval_ms": 1000,
        "show_queue": True,
        "default_view": "songs",
        "language": "en",
    },
    "search": {"limit": 15, "debounce_ms": 300},
    "cache": {"location": "cache"},
    "logging": {"level": "INFO", "directory": "logs"},
}

DEFAULT_KEYBINDINGS: Dict[str, str] = {
    "quit": "q",
    "search": "f",
    "toggle_view": "v",
    "sort": "s",
    "toggle_queue": "w",
    "add_to_queue": "a",
    "volume_up": "+",
    "volume_down": "-",
    "seek_forward": "]",
    "seek_backward": "[",
    "go_root": "~",
    "download": "d",
}


class ConfigManager:
    """Manages application configuration and keybindings."""

    def __init__(self, config_dir: str = "config"):
        self.config_dir = Path(config_dir).expanduser()
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "config.json"
        self.keybindings_file = self.config_dir / "keybindings.json"

        self.config: Dict[str, Any] = {}
        self.keybindings: Dict[str, str] = {}

        self.load_config()
        self.load_keybindings()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file, writing defaults when absent."""
        data = self._read_json(self.config_file)
        if data is None:
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            if not self.config_file.exists():
                self.save_config()
        else:
            self.config = self._merge(copy.deepcopy(DEFAULT_CONFIG), data)
        return self.config

    def save_config(self):
        """Save configuration to file."""
        self._write_json(self.config_file, self.config)

    def load_keybindings(self) -> Dict[str, str]:
        """Load keybindings from file, writing defaults when absent."""
        data = self._read_json(self.keybindings_file)
        self.keybindings = dict(DEFAULT_KEYBINDINGS)
        if data is None:
            if not self.keybindings_file.exists():
                self.save_keybindings()
        else:
            for action, key in data.items():
                if isinstance(key, str) and key:
                    self.keybindings[action] = key
        return self.keybindings

    def save_keybindings(self):
        """Save keybindings to file."""
        self._write_json(self.keybindings_file, self.keybindings)

    # Configuration getters
    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-notation key (e.g., 'playback.volume')."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set config value by dot-notation key."""
        keys = key.split(".")
        config = self.config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self.save_config()

    # Keybinding helpers
    def get_key_for_action(self, action: str) -> Optional[str]:
        """Get the key bound to an action."""
        return self.keybindings.get(action)

    def get_action_for_key(self, key: str) -> Optional[str]:
        """Get the action bound to a key."""
        for action, bound_key in self.keybindings.items():
            if bound_key == key:
                return action
        return None

    # ---- internals ----
    def _read_json(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load {path}: {e}; using defaults")
            return None
        if not isinstance(data, dict):
            logger.error(f"Ignoring {path}: top level is not an object")
            return None
        return data

    def _write_json(self, path: Path, data: Dict[str, Any]):
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning(f"Failed to write {path}: {e}")

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value
        return base
