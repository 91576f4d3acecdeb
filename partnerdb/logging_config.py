"""
Logging configuration for Partner DB.

Single 'partnerdb' logger used across all modules.

  Log file : logs/partnerdb.log
  Rotation : 5 MB × 3 backups
  Level    : LOG_LEVEL env var (DEBUG / INFO / WARNING / ERROR / CRITICAL)
             defaults to INFO when unset

Usage
-----
    from partnerdb.logging_config import configure_logging, log_call

    # Once at startup (idempotent, safe to call multiple times):
    configure_logging()

    # On any function you want traced:
    @log_call
    def my_function(arg1, arg2):
        ...

Log format per line
-------------------
    2026-10-19 14:32:01 | INFO     | CALL contacts_list | args=(category='SALES')
    2026-10-19 14:32:01 | INFO     | OK   contacts_list | 42ms
    2026-10-19 14:32:01 | ERROR    | FAIL contacts_list | StoreError: connection refused | 3ms
"""

import functools
import logging
import logging.handlers
import os
import time
from pathlib import Path

_LOG_DIR = Path(__file__).parent.parent / "logs"
_LOG_FILE = _LOG_DIR / "partnerdb.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

# Keyword arguments whose values must never reach the log file
_REDACTED_KWARGS = {"password", "current_password", "data"}


def configure_logging() -> logging.Logger:
    """
    Set up the partnerdb logger. Idempotent; safe to call on every entry point.
    Returns the configured logger.
    """
    _LOG_DIR.mkdir(exist_ok=True)

    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger("partnerdb")

    # Guard: don't add duplicate handlers if already configured
    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.handlers.RotatingFileHandler(
        _LOG_FILE,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    return logger


def log_call(func):
    """
    Decorator: logs entry, clean exit, and exceptions for any function.

    - DEBUG on entry   : CALL <name> | args=(...)
    - INFO  on success : OK   <name> | <N>ms
    - ERROR on failure : FAIL <name> | ExcType: message | <N>ms   (then re-raises)

    Keyword arguments named password, current_password or data are logged as ***.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger("partnerdb")
        name = func.__name__
        start = time.perf_counter()

        # Build a readable argument string
        parts = [repr(a) for a in args] + [
            f"{k}=***" if k in _REDACTED_KWARGS else f"{k}={v!r}"
            for k, v in kwargs.items()
        ]
        arg_str = ", ".join(parts) if parts else "—"
        logger.debug(f"CALL {name} | args=({arg_str})")

        try:
            result = func(*args, **kwargs)
            ms = int((time.perf_counter() - start) * 1000)
            logger.info(f"OK   {name} | {ms}ms")
            return result
        except Exception as exc:
            ms = int((time.perf_counter() - start) * 1000)
            logger.error(f"FAIL {name} | {type(exc).__name__}: {exc} | {ms}ms")
            raise

    return wrapper
