# src/freelist/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "freelist"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep stderr readable for the embedding host:
    - per-row store chatter (DEBUG) stays in the file only
    - everything else from freelist passes through
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("freelist.tasks.") and record.levelno < logging.INFO:
            return False
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/freelist",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Configure the "freelist" logger with:
    - Console handler: filtered, on stderr
    - File handler: full logs in <log_dir>/freelist.log

    Only the library's own logger is touched; the host's root logger is left alone.
    Calling it again replaces the handlers instead of stacking duplicates.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "freelist.log"

    lib = logging.getLogger(_LOGGER_NAME)
    lib.setLevel(logging.DEBUG)

    for h in list(lib.handlers):
        lib.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    lib.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    lib.addHandler(fh)

    return lib
