"""Host-facing entry points.

Each function validates its call shape first: a wrong argument type, an
empty path or an unknown mode character raises RequestError straight to
the caller, since that is a defect in the calling code. Anything the OS
refuses comes back as a failed Outcome instead, logged at WARNING.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from . import access, file_io, paths
from .errors import ResourceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[ResourceError] = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def errno(self) -> int | None:
        return self.error.errno if self.error is not None else None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""


def _run(operation: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    try:
        value = operation(*args, **kwargs)
    except ResourceError as exc:
        logger.warning("%s", exc)
        return Outcome(ok=False, error=exc)
    return Outcome(ok=True, value=value)


def check_access(path: str, mode: str = access.DEFAULT_MODE) -> Outcome[bool]:
    """Report whether *path* is accessible with *mode* (any of ``rwx``)."""
    flags = access.parse_mode(mode)
    paths.validate_component(path, "path")
    result = _run(access.check, path, flags)
    if not result:
        return Outcome(ok=False, value=False, error=result.error)
    return result


def current_directory() -> Outcome[str]:
    return _run(paths.current_directory)


def create_temp_file(directory: str | None = None, **options: Any) -> Outcome[str]:
    """Create a fresh 0600 file in *directory* (default: cwd) and return its path."""
    if directory is not None:
        paths.validate_component(directory, "directory")
    return _run(file_io.create_temp_file, directory, **options)


def remove_path(path: str) -> Outcome[bool]:
    paths.validate_component(path, "path")
    result = _run(file_io.remove_path, path)
    if not result:
        return Outcome(ok=False, value=False, error=result.error)
    return result
