"""
Logging configuration for the attendance service.
"""

import logging
import logging.handlers
from pathlib import Path


def setup_logging(app, log_level='INFO', log_file=None, max_log_size=10*1024*1024, backup_count=5):
    """
    Configure logging for the Flask app.

    Args:
        app: Flask app instance
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating log file; console only when None
        max_log_size: Maximum size of the log file in bytes
        backup_count: Number of rotated files to keep
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_log_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Drop handlers from a previous call
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    app.logger.setLevel(level)
    app.logger.info("Logging configured at level %s", logging.getLevelName(level))
