"""Error taxonomy shared by every sysutils operation."""

from __future__ import annotations

import errno as _errno
import os


class SysutilsError(Exception):
    """Base class for all sysutils failures."""


class RequestError(SysutilsError, ValueError):
    """The caller asked for something malformed (bad type, bad mode char, empty path)."""


class ResourceError(SysutilsError, OSError):
    """The OS refused the operation. Always recoverable."""

    def __init__(self, err: int, message: str, filename: str | None = None, operation: str = "") -> None:
        if filename is None:
            super().__init__(err, message)
        else:
            super().__init__(err, message, filename)
        self.operation = operation

    @classmethod
    def from_os_error(cls, exc: OSError, operation: str) -> "ResourceError":
        err = exc.errno if exc.errno is not None else _errno.EIO
        message = exc.strerror or os.strerror(err)
        filename = exc.filename if exc.filename is not None else None
        return cls(err, message, filename, operation)

    @property
    def code(self) -> str:
        """Symbolic errno name, e.g. ``ENOENT``."""
        return _errno.errorcode.get(self.errno, str(self.errno))

    def __str__(self) -> str:
        prefix = f"{self.operation}: " if self.operation else ""
        if self.filename is not None:
            return f"{prefix}{self.strerror} <{self.filename}>"
        return f"{prefix}{self.strerror}"


class AllocationError(ResourceError):
    """Memory ran out while building a path."""

    def __init__(self, operation: str = "") -> None:
        super().__init__(_errno.ENOMEM, os.strerror(_errno.ENOMEM), None, operation)
