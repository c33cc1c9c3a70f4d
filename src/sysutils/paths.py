"""Path joining and working-directory lookup."""

from __future__ import annotations

import errno
import logging
import os

from .errors import AllocationError, RequestError, ResourceError

logger = logging.getLogger(__name__)

# Fixed for the life of the process; pass sep= to path_join for the other convention.
SEPARATOR = os.sep

MAX_CWD_ATTEMPTS = 8


def validate_component(value: object, name: str) -> str:
    """Reject anything that cannot be handed to the OS as a path string."""
    if not isinstance(value, str):
        raise RequestError(f"{name} must be a string, got {type(value).__name__}")
    if not value:
        raise RequestError(f"{name} must not be empty")
    if "\0" in value:
        raise RequestError(f"{name} must not contain NUL bytes")
    return value


def path_join(first: str, last: str, *, sep: str = SEPARATOR) -> str:
    """Join two components with exactly one separator at the junction.

    This is a mechanical join: ``.``/``..`` segments and repeated separators
    inside either component are left alone.
    """
    validate_component(first, "first")
    validate_component(last, "last")
    if not sep:
        raise RequestError("separator must not be empty")
    try:
        if first.endswith(sep):
            return first + last
        return first + sep + last
    except MemoryError:
        raise AllocationError("path_join") from None


def current_directory() -> str:
    """Return the absolute path of the process working directory.

    ``os.getcwd`` grows its own buffer; ERANGE is only retried a bounded
    number of times in case the OS still reports it.
    """
    for attempt in range(1, MAX_CWD_ATTEMPTS + 1):
        try:
            return os.getcwd()
        except MemoryError:
            raise AllocationError("current_directory") from None
        except OSError as exc:
            if exc.errno == errno.ERANGE and attempt < MAX_CWD_ATTEMPTS:
                logger.debug("getcwd reported ERANGE (attempt %d), retrying", attempt)
                continue
            raise ResourceError.from_os_error(exc, "current_directory") from exc
    raise ResourceError(errno.ERANGE, os.strerror(errno.ERANGE), None, "current_directory")
