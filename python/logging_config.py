"""
Logging setup for Watchlist Sync entry points

Library modules only create module loggers (``logging.getLogger(__name__)``)
and accept an injected logger; handlers are installed here, once, by the
CLI or the API server at startup.
"""

import logging
from pathlib import Path
from typing import Optional

from config_manager import LoggingConfig


def setup_logging(config: Optional[LoggingConfig] = None, level: Optional[str] = None) -> logging.Logger:
    """Install console and/or file handlers for the pipeline loggers

    Args:
        config: Logging section of the configuration (defaults if None)
        level: Optional level override (e.g. "DEBUG" from a --verbose flag)

    Returns:
        The root logger the handlers were attached to
    """
    config = config or LoggingConfig()
    log_level = getattr(logging, (level or config.level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)
    # Re-running setup (tests, uvicorn reload) must not duplicate output
    for handler in list(root.handlers):
        if getattr(handler, "_watchlist_sync", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(config.format)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler._watchlist_sync = True
        root.addHandler(file_handler)

    if config.console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        console_handler._watchlist_sync = True
        root.addHandler(console_handler)

    return root
