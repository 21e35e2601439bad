"""Configuration management for MyFileManager."""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

from myfilemanager.core.logging import get_logger

log = get_logger(__name__)


class Config:
    """Application configuration manager."""

    DEFAULT_CONFIG = {
        "overwrite_existing": False,
        "max_workers": 1,
        "confirm_operations": True,
        "show_hidden": False,
        "start_path": None,
        "log_level": "INFO",
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".myfilemanager"
        self.config_file = self.config_dir / "config.json"
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root must be an object")
                self._config = {**self.DEFAULT_CONFIG, **data}
            except (json.JSONDecodeError, ValueError, OSError) as e:
                log.warning("Ignoring unreadable config %s: %s", self.config_file, e)
                self._config = self.DEFAULT_CONFIG.copy()
        else:
            self._config = self.DEFAULT_CONFIG.copy()

    def save(self) -> None:
        """Save configuration to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            log.warning("Could not save config %s: %s", self.config_file, e)

    def get(self, key: str, default=None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value
        self.save()

    @property
    def overwrite_existing(self) -> bool:
        return bool(self._config.get("overwrite_existing", False))

    @property
    def max_workers(self) -> int:
        try:
            return max(1, int(self._config.get("max_workers", 1)))
        except (TypeError, ValueError):
            return 1

    def get_start_path(self) -> str:
        """Directory the browser opens in."""
        path = self._config.get("start_path")
        if path and os.path.isdir(path):
            return path
        return str(Path.home())
