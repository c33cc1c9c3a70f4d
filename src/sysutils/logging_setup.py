"""Logging configuration for sysutils entrypoints.

The package logger gets two handlers: a rotating log file that records
every operation (paths included, so it is created owner-only), and a
stderr handler that shows OS diagnostics the way the original extension
printed them.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path

_PACKAGE = "sysutils"
_LOG_BYTES = 1 * 1024 * 1024
_LOG_BACKUPS = 3
_LOG_MODE = 0o600

DEFAULT_LOG_FILE = Path.home() / ".config" / "sysutils" / "sysutils.log"

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s @%(funcName)s: %(message)s"
STDERR_FORMAT = "sysutils: %(levelname)s: %(message)s"


class PrivateRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """RotatingFileHandler whose files (including rollovers) are mode 0600."""

    def _open(self):
        fd = os.open(self.baseFilename, os.O_WRONLY | os.O_CREAT | os.O_APPEND, _LOG_MODE)
        return os.fdopen(fd, "a", encoding=self.encoding, errors=self.errors)


def stderr_level(*, debug: bool = False, quiet: bool = False) -> int:
    if quiet:
        return logging.ERROR
    if debug:
        return logging.DEBUG
    return logging.WARNING


def configure(
    log_file: Path = DEFAULT_LOG_FILE,
    *,
    debug: bool = False,
    quiet: bool = False,
    reconfigure: bool = False,
) -> None:
    """Attach handlers to the sysutils package logger.

    Idempotent unless *reconfigure* is True. *debug* records DEBUG traces
    (and echoes them to stderr); *quiet* limits stderr to errors.
    """
    pkg_logger = logging.getLogger(_PACKAGE)
    if pkg_logger.handlers and not reconfigure:
        return
    for handler in list(pkg_logger.handlers):
        handler.close()
        pkg_logger.removeHandler(handler)

    pkg_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = PrivateRotatingFileHandler(
            log_file,
            maxBytes=_LOG_BYTES,
            backupCount=_LOG_BACKUPS,
            encoding="utf-8",
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        pkg_logger.addHandler(fh)
    except OSError as exc:
        print(
            f"sysutils: WARNING: could not open log file {log_file}: {exc}",
            file=sys.stderr,
        )

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(stderr_level(debug=debug, quiet=quiet))
    sh.setFormatter(logging.Formatter(STDERR_FORMAT))
    pkg_logger.addHandler(sh)

    pkg_logger.propagate = False
