"""Logging utilities for the NFT batch uploader.

This module centralizes logging setup for the application:

- Rotating file logging (daily rotation, UTF-8, backup retention)
- Optional colored console output for readability
- Periodic cleanup of older log files beyond the retention window
- Basic third-party logger tuning (``urllib3`` via config)

It also provides the tick/cross helpers used to report per-group validation
results and per-file write outcomes on the console.
"""
from __future__ import annotations

import logging
import os
import shutil
import sys
import time
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import (
    DEFAULT_LOG_FILENAME,
    DEFAULT_LOG_FOLDER,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_DIR,
)

LOGGER = logging.getLogger(__name__)


class ConsoleLogColors:
    """ANSI escape codes used to colorize console log output."""

    OKGREEN = "\033[92m"
    OKCYAN = "\033[96m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


TICK: str = f"{ConsoleLogColors.OKGREEN}✔{ConsoleLogColors.ENDC}"
CROSS: str = f"{ConsoleLogColors.FAIL}✗{ConsoleLogColors.ENDC}"


def log_tick(logger: logging.Logger, message: str, *args: Any) -> None:
    """Log a success line prefixed with a green tick."""
    logger.info(f"{TICK} {message}", *args)


def log_cross(logger: logging.Logger, message: str, *args: Any) -> None:
    """Log a failure line prefixed with a red cross."""
    logger.error(f"{CROSS} {message}", *args)


def maintain_log_files(
    log_dir: Union[str, Path],
    *,
    stem: Optional[str] = None,
    remove_logs_days: int = 7,
    backup_logs: bool = False,
) -> int:
    """Clean up log files in a directory with optional backup.

    Files strictly older than ``remove_logs_days`` are removed. When
    ``backup_logs`` is True, each selected file is first copied to a sibling
    ``<name>.bk`` path. I/O errors are logged and skipped.

    Args:
        log_dir (Union[str, Path]): Directory where log files reside.
        stem (Optional[str]): Only consider files whose names start with this
            stem. When None, ``*.log`` is used.
        remove_logs_days (int): Age threshold in days. Defaults to 7.
        backup_logs (bool): Copy to ``.bk`` before deletion. Defaults to False.

    Returns:
        int: Number of files removed.
    """
    removed_count = 0
    base_dir = Path(log_dir).resolve()
    if not base_dir.is_dir():
        return 0

    pattern = f"{stem}*" if stem else "*.log"
    cutoff_ts = time.time() - max(0, int(remove_logs_days)) * 24 * 60 * 60

    for p in base_dir.glob(pattern):
        if not p.is_file() or p.name.endswith(".bk"):
            continue
        try:
            if p.stat().st_mtime >= cutoff_ts:
                continue
            if backup_logs:
                shutil.copy2(p, Path(str(p) + ".bk"))
            p.unlink()
            removed_count += 1
            LOGGER.info("Removed old log file: %s", p)
        except OSError as e:
            LOGGER.error("Failed to remove old log %s: %s", p, e)
    return removed_count


def setup_logging(
    log_folder: str = DEFAULT_LOG_FOLDER,
    log_filename: str = DEFAULT_LOG_FILENAME,
    log_level: int = DEFAULT_LOG_LEVEL,
    enable_console_logging: bool = True,
    config: Optional[Dict[str, Any]] = None,
) -> logging.Logger:
    """Configure file and console logging for the application.

    Sets up a rotating file handler (daily rotation at midnight, UTF-8), an
    optional colored console handler, removes old log files according to
    ``config['logging']['log_maintenance']`` and tunes the ``urllib3`` logger
    from ``config['logging']['loggers']['urllib3']['level']``.

    Args:
        log_folder (str): Directory to store log files. ``APP_LOG_DIR`` wins
            when set.
        log_filename (str): Base filename for the log file.
        log_level (int): Minimum level for the root logger.
        enable_console_logging (bool): If True, also log to stdout with color.
        config (Optional[Dict[str, Any]]): Optional configuration mapping.

    Returns:
        logging.Logger: The configured root logger.
    """
    log_folder_path = Path(os.getenv(ENV_LOG_DIR) or log_folder).resolve()
    try:
        log_folder_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"ERROR: Could not create log folder at {log_folder_path}: {e}.", file=sys.stderr)

    log_file_path = log_folder_path / log_filename
    file_handler = TimedRotatingFileHandler(
        str(log_file_path), when="midnight", interval=1, backupCount=7, encoding="utf-8"
    )
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)-30s L%(lineno)-4d: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    file_handler.setLevel(log_level)

    # Root logger: clear prior handlers to avoid duplication
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    root_logger.addHandler(file_handler)

    if enable_console_logging:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            logging.Formatter(
                f"%(asctime)s {ConsoleLogColors.BOLD}[%(name)-25.25s]{ConsoleLogColors.ENDC} "
                f"{ConsoleLogColors.OKCYAN}%(levelname)-8s{ConsoleLogColors.ENDC}: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        console_handler.setLevel(log_level)
        root_logger.addHandler(console_handler)

    logging_cfg = (config or {}).get("logging") or {}
    lm_cfg = logging_cfg.get("log_maintenance") or {}
    maintain_log_files(
        log_folder_path,
        stem=Path(log_filename).stem,
        remove_logs_days=int(lm_cfg.get("remove_logs_days", 7)),
        backup_logs=bool(lm_cfg.get("backup_logs", False)),
    )

    level_str = ((logging_cfg.get("loggers") or {}).get("urllib3") or {}).get("level", "WARNING")
    logging.getLogger("urllib3").setLevel(getattr(logging, str(level_str).upper(), logging.WARNING))

    root_logger.info(
        "Logging initialized. File: %s | Level: %s",
        log_file_path,
        logging.getLevelName(root_logger.level),
    )
    return root_logger
