"""
Logging configuration for the recognize.im client and sample server.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict, List, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# HTTP transport and Flask access logs are noisy at INFO
QUIET_LOGGERS = ("urllib3", "werkzeug")


def _file_handler(log_file: str, formatter: logging.Formatter) -> Optional[logging.Handler]:
    """Rotating file handler, or None when the log file cannot be opened."""
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
    except OSError as e:
        print(f"Warning: Could not setup file logging: {e}")
        return None

    handler.setLevel(logging.INFO)
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configure root logging.

    Args:
        config: 'log_level', 'debug' and 'log_file'. A log_file of None
            (as used by the command-line tools) logs to the console only.
    """
    level_name = str(config.get("log_level") or "INFO").upper()
    level = logging.DEBUG if config.get("debug", False) else getattr(logging, level_name, logging.INFO)
    log_file = config.get("log_file", "logs/recognizeim.log")

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if log_file:
        file_handler = _file_handler(log_file, formatter)
        if file_handler:
            handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in handlers:
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
