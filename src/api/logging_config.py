"""Centralized logging configuration module"""

import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Whether already initialized
_initialized = False

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MAX_LOG_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 3


def write_session_separator(log_file: Path) -> None:
    """Mark the start of a server run in the log file"""
    with open(log_file, 'a', encoding='utf-8') as f:
        f.write("\n" + "=" * 100 + "\n")
        f.write(f"Server started at: {datetime.now().strftime(DATE_FORMAT)}\n")
        f.write("=" * 100 + "\n\n")


def setup_logging(level: Optional[str] = None, logs_dir: Optional[Path] = None, write_file: bool = True):
    """Configure console and rotating file logging for the arena server"""
    global _initialized

    if _initialized:
        return

    from .config import settings

    level_name = (level or settings.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    log_file = None
    if write_file:
        logs_dir = Path(logs_dir or settings.logs_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)
        log_file = logs_dir / "server.log"
        write_session_separator(log_file)

        # Rotates at 10MB, keeps 3 backups
        file_handler = RotatingFileHandler(
            log_file, maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT, encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # Configure root logger
    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    # Set log levels for specific modules
    logging.getLogger('src').setLevel(log_level)
    logging.getLogger('llm_interactions').setLevel(logging.INFO)

    # Reduce log level for third-party libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    _initialized = True

    logger = logging.getLogger(__name__)
    logger.info("=" * 80)
    logger.info("Logging system initialized (level=%s)", level_name)
    if log_file is not None:
        logger.info("Log file: %s (max 10MB per file, keep %s backups)", log_file.absolute(), BACKUP_COUNT)
    logger.info("=" * 80)
