"""Logging setup.

Console handler always; when `log_dir` is given, also a file
`dirbind.log` rotated at midnight and kept for `retention_days` days.
Registers the TRACE level used by the naming client's observer.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler

from .env_settings import get_env

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Track our handlers so reconfiguration replaces them instead of stacking.
_file_handler: logging.Handler | None = None
_console_handler: logging.Handler | None = None


def parse_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    level_str = (level or "INFO").strip().upper()
    if level_str not in _LEVELS:
        level_str = "INFO"
    return TRACE if level_str == "TRACE" else getattr(logging, level_str)


def setup_logging(
    level: str | int | None = None,
    log_dir: str | None = None,
    retention_days: int = 30,
    logger_name: str = "dirbind",
) -> logging.Logger:
    """Configure the package logger; safe to call again with new settings.

    `level` and `log_dir` default to DIRBIND_LOG_LEVEL / DIRBIND_LOG_DIR.
    """
    global _file_handler, _console_handler

    if level is None or log_dir is None:
        env = get_env()
        if level is None:
            level = env.log_level
        if log_dir is None:
            log_dir = env.log_dir or None

    log_level = parse_level(level)
    retention_days = max(1, min(365, int(retention_days or 30)))
    logger = logging.getLogger(logger_name)

    for h in (_file_handler, _console_handler):
        if h is not None and h in logger.handlers:
            logger.removeHandler(h)
            h.close()
    _file_handler = None

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)
    _console_handler = ch

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = TimedRotatingFileHandler(
            os.path.join(log_dir, "dirbind.log"),
            when="midnight",
            interval=1,
            backupCount=retention_days,
            encoding="utf-8",
            utc=True,
        )
        fh.suffix = "%Y-%m-%d"
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)
        _file_handler = fh

    logger.setLevel(log_level)
    logging.getLogger("ldap3").setLevel(max(log_level, logging.WARNING))

    logger.debug("Logging configured: level=%s, dir=%s, retention=%d days",
                 logging.getLevelName(log_level), log_dir or "-", retention_days)
    return logger
