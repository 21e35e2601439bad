"""Central logging utilities.

The engine logs through named loggers under "myfilemanager". The front-end
calls setup_logging() once to send them to a rotating file that never crashes
the UI.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "myfilemanager"


def app_data_dir() -> Path:
    d = Path.home() / ".myfilemanager"
    d.mkdir(parents=True, exist_ok=True)
    return d


def log_path() -> Path:
    return app_data_dir() / "app.log"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)


def setup_logging(level: Union[int, str] = logging.INFO, path: Optional[Path] = None) -> None:
    """Configure a rotating file logger.

    - Never raises (must not crash the UI)
    - Single file: ~/.myfilemanager/app.log unless path is given
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)

    # Avoid duplicating handlers on restart
    if any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return

    try:
        p = path or log_path()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            p,
            maxBytes=2 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"Logging disabled: {e}", file=sys.stderr)
        return

    fh.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    fh.setLevel(level)
    root.addHandler(fh)

    # Also capture warnings and reduce silent failures
    logging.captureWarnings(True)


def install_excepthook() -> None:
    """Log uncaught exceptions to the app log."""

    def _hook(exc_type, exc, tb):
        get_logger().error("Uncaught exception", exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _hook
