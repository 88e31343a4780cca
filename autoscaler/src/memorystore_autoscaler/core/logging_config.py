#!/usr/bin/env python3
"""
Centralized logging configuration for the scaler
"""

import logging
import sys
from typing import Optional, Any, MutableMapping, Tuple
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to different log levels"""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        # Color a copy so file handlers sharing the record keep plain level names
        levelcolor = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{levelcolor}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


class ClusterLoggerAdapter(logging.LoggerAdapter):
    """
    Prefixes every message with the cluster it concerns and attaches the
    cluster identity to the record, so one invocation's lines can be
    filtered out of an aggregated log stream.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        prefix = f"{self.extra['project_id']}/{self.extra['region_id']}/{self.extra['cluster_id']}"
        return f"[{prefix}] {msg}", kwargs


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: str = DEFAULT_FORMAT,
    enable_colors: bool = True
) -> None:
    """
    Setup centralized logging configuration

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        log_format: Console record format
        enable_colors: Whether to enable colored output in console
    """

    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_format = log_format
    file_format = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"

    console_formatter = ColoredFormatter(console_format) if enable_colors else logging.Formatter(console_format)
    file_formatter = logging.Formatter(file_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    # Quieten chatty client libraries
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {level} level")
    if log_file:
        logger.info(f"Log file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_cluster_logger(logger: logging.Logger, cluster) -> ClusterLoggerAdapter:
    """Wrap a module logger with the identity of the given cluster"""
    return ClusterLoggerAdapter(logger, {
        "project_id": cluster.project_id,
        "region_id": cluster.region_id,
        "cluster_id": cluster.cluster_id,
    })
