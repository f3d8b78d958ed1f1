"""
Project logger: rotating file (JSON) + console, configured once at startup.

Usage:
    from slotkeeper.core.logger import configure, LoggerConfig

    # Explicit
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/slotkeeper"))

    # Or from env: LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES, ...
    configure()

    logger = logging.getLogger(__name__)   # anywhere under slotkeeper.*
    logger.info("Started %s", appointment_id, extra={"context": {"scope": str(scope_id)}})
"""
from slotkeeper.core.logger.config import LoggerConfig
from slotkeeper.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from slotkeeper.core.logger.setup import configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
]
