from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

_LOGGER_NAMES = ("shell_core", "shell_bus")
_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"
_CONFIGURED = False
_HANDLER: Optional[logging.Handler] = None


class ShellLogHandler(logging.FileHandler):
    """File handler owned by configure_logging; replaced on reconfigure."""

    def __init__(self, log_path: Path) -> None:
        super().__init__(log_path, encoding="utf-8")
        self.setFormatter(logging.Formatter(_FORMAT))


def configure_logging(base_dir: Optional[Path] = None, level: int = logging.INFO) -> Dict[str, str]:
    global _CONFIGURED, _HANDLER
    root = base_dir or Path("data/roaming")
    log_dir = root / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "metashell.log"

    if base_dir is None:
        if not _CONFIGURED:
            _HANDLER = ShellLogHandler(log_path)
            _CONFIGURED = True
        handler = _HANDLER
    else:
        handler = ShellLogHandler(log_path)

    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False
        for existing in list(logger.handlers):
            if isinstance(existing, ShellLogHandler) and existing is not handler:
                logger.removeHandler(existing)
                existing.close()
        if handler not in logger.handlers:
            logger.addHandler(handler)

    return {
        "log_path": str(log_path),
        "format": "kv",
        "handlers": "file",
        "logger_names": ",".join(_LOGGER_NAMES),
    }


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAMES[0])
