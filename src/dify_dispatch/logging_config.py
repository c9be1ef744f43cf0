# src/dify_dispatch/logging_config.py
from __future__ import annotations
import logging, logging.handlers, sys
from pathlib import Path
from typing import Optional

LOG_FILENAME = "dify-dispatch.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def init_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Console logging on stderr (stdout carries response bodies), plus a rotating
    file under log_dir when given. Returns the log file path, if any.
    """
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    root = logging.getLogger()
    # Clear old handlers to support re-init in tests
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(lvl)

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
    ch.setLevel(lvl)
    root.addHandler(ch)

    log_path = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / LOG_FILENAME
        fh = logging.handlers.RotatingFileHandler(
            str(log_path), maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8", delay=True
        )
        fh.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
        fh.setLevel(lvl)
        root.addHandler(fh)

    # Reduce noise from noisy libs
    for noisy in ("asyncio", "aiohttp"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging initialized at %s", logging.getLevelName(lvl))
    return log_path
