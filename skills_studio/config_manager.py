"""
Config Manager - JSON config with dot-notation get/set
"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SKILLS_STUDIO_CONFIG"

DEFAULT_CONFIG = {
    "app": {
        "window_width": 1280,
        "window_height": 820,
        "window_x": -1,
        "window_y": -1,
        "export_dir": "",
    },
    "server": {
        "base_url": "http://localhost:3344",
        "load_timeout": 10,
        "save_timeout": 15,
    },
    "editor": {
        "font_family": "Consolas",
        "font_size": 13,
        "wrap_lines": True,
        "sync_delay_ms": 600,
    },
    "studio": {
        "reuse_clean_tabs": True,
    },
    "logging": {
        "level": "INFO",
        "directory": "logs",
    },
}


class ConfigManager:
    def __init__(self, config_path: Path = None):
        if config_path is None:
            env_path = os.environ.get(CONFIG_ENV_VAR, "")
            if env_path:
                config_path = Path(env_path)
            else:
                config_path = Path(__file__).parent.parent / "config" / "config.json"
        self._path = Path(os.path.expanduser(os.path.expandvars(str(config_path))))
        self._config = {}
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> bool:
        if self._path.exists():
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                # Merge with defaults so new keys are always present
                self._config = self._merge(DEFAULT_CONFIG, loaded)
                return True
            except (OSError, ValueError):
                logger.exception("Failed to load config from %s", self._path)
                self._config = self._merge(DEFAULT_CONFIG, {})
                return False
        else:
            self._config = self._merge(DEFAULT_CONFIG, {})
            self.save()
            return True

    def save(self) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)
            return True
        except OSError:
            logger.exception("Failed to save config to %s", self._path)
            return False

    def get(self, key: str, default=None):
        """Dot-notation get: config.get('server.base_url')"""
        parts = key.split(".")
        current = self._config
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def set(self, key: str, value) -> None:
        """Dot-notation set: config.set('server.base_url', 'http://host:3344')"""
        parts = key.split(".")
        current = self._config
        for part in parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def get_base_url(self) -> str:
        """Server root without a trailing slash."""
        raw = self.get("server.base_url", "") or DEFAULT_CONFIG["server"]["base_url"]
        return str(raw).rstrip("/")

    def get_timeouts(self) -> tuple[float, float]:
        """(load_timeout, save_timeout) in seconds, never below one second."""
        load = self._as_seconds(self.get("server.load_timeout"), 10)
        save = self._as_seconds(self.get("server.save_timeout"), 15)
        return load, save

    def get_log_level(self) -> int:
        name = str(self.get("logging.level", "INFO")).upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO

    def get_log_dir(self) -> Path:
        """Log directory; relative paths are taken from the config file's folder."""
        log_dir = Path(os.path.expanduser(str(self.get("logging.directory") or "logs")))
        return log_dir if log_dir.is_absolute() else self._path.parent / log_dir

    @staticmethod
    def _as_seconds(value, fallback: float) -> float:
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            return float(fallback)
        return max(seconds, 1.0)

    @staticmethod
    def _merge(defaults: dict, overrides: dict) -> dict:
        """Deep merge: overrides wins, but missing keys filled from defaults."""
        result = {
            k: ConfigManager._merge(v, {}) if isinstance(v, dict) else v
            for k, v in defaults.items()
        }
        for key, value in overrides.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._merge(result[key], value)
            else:
                result[key] = value
        return result
