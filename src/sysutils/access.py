"""Advisory read/write/execute permission checks.

A passing check says nothing about a later open: the path can change in
between. Callers that need a guarantee should just attempt the operation.
"""

from __future__ import annotations

import errno
import logging
import os
from enum import Flag

from .errors import RequestError, ResourceError
from .paths import validate_component

logger = logging.getLogger(__name__)

DEFAULT_MODE = "r"


class AccessMode(Flag):
    READ = os.R_OK
    WRITE = os.W_OK
    EXECUTE = os.X_OK

    def __str__(self) -> str:
        return "".join(ch for ch, flag in _MODE_CHARS.items() if flag in self)


_MODE_CHARS: dict[str, AccessMode] = {
    "r": AccessMode.READ,
    "w": AccessMode.WRITE,
    "x": AccessMode.EXECUTE,
}


def parse_mode(mode: str | None = None) -> AccessMode:
    """Map a string over ``r``/``w``/``x`` to an AccessMode. Empty means read."""
    if mode is None or mode == "":
        mode = DEFAULT_MODE
    if not isinstance(mode, str):
        raise RequestError(f"mode must be a string, got {type(mode).__name__}")
    flags = AccessMode(0)
    for ch in mode:
        flag = _MODE_CHARS.get(ch)
        if flag is None:
            raise RequestError(f"invalid mode character {ch!r} in {mode!r} (expected r, w or x)")
        flags |= flag
    return flags


def check(path: str, mode: str | AccessMode | None = None) -> bool:
    """Return True if the process has *mode* access to *path*.

    Raises ResourceError carrying the OS errno when the path is missing,
    unreachable, or the access is denied.
    """
    flags = mode if isinstance(mode, AccessMode) else parse_mode(mode)
    validate_component(path, "path")
    try:
        os.stat(path)
    except OSError as exc:
        raise ResourceError.from_os_error(exc, "check_access") from exc
    if not os.access(path, flags.value):
        raise ResourceError(errno.EACCES, f"{os.strerror(errno.EACCES)} (mode {flags})", path, "check_access")
    logger.debug("access %s granted on %s", flags, path)
    return True
