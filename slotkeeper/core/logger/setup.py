"""
Logger setup: attach the console and rotating JSON file handlers from config.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from slotkeeper.core.logger.config import LoggerConfig
from slotkeeper.core.logger.formatters import JsonFormatter, PlainConsoleFormatter

_default_config: Optional[LoggerConfig] = None


def configure(config: Optional[LoggerConfig] = None) -> logging.Logger:
    """
    Configure the slotkeeper root logger and return it.

    If config is None, uses LoggerConfig.from_env(). Safe to call more than
    once; existing handlers on the root are replaced.
    """
    global _default_config
    if config is None:
        config = LoggerConfig.from_env()
    _default_config = config

    level = getattr(logging, config.level.upper(), logging.INFO)
    root = logging.getLogger(config.root_name or "slotkeeper")
    root.setLevel(level)

    # Reconfiguration (tests, reload) must not stack handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if config.console:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(PlainConsoleFormatter())
        root.addHandler(console)

    if config.file_rotating and config.log_dir and config.log_dir.strip():
        try:
            os.makedirs(config.log_dir, exist_ok=True)
        except OSError:
            root.warning("Could not create log dir %s, skipping file handler", config.log_dir)
        else:
            path = os.path.join(config.log_dir, f"{config.log_file_basename}.log")
            file_handler = RotatingFileHandler(
                path,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(file_handler)

    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger for ``name``, configuring from env on first use.

    Scripts call this instead of configure(); library modules use
    logging.getLogger(__name__) and rely on the app to configure.
    """
    if _default_config is None:
        configure()
    return logging.getLogger(name)
