"""Secure file creation and removal with explicit permission control."""

from __future__ import annotations

import errno
import logging
import os
import secrets
import string
from pathlib import Path

from .config import DEFAULT_TEMP_PREFIX, DEFAULT_TEMP_WIDTH
from .errors import RequestError, ResourceError
from .paths import current_directory, path_join, validate_component

logger = logging.getLogger(__name__)

TEMP_FILE_MODE = 0o600
MIN_TEMP_WIDTH = 6
TMP_MAX = 10000

_NAME_ALPHABET = string.ascii_letters + string.digits + "_"

_CREATE_FLAGS = os.O_RDWR | os.O_CREAT | os.O_EXCL
for _flag in ("O_NOFOLLOW", "O_CLOEXEC", "O_BINARY", "O_NOINHERIT"):
    _CREATE_FLAGS |= getattr(os, _flag, 0)


def atomic_write(path: Path, data: bytes, mode: int = 0o600) -> None:
    """Write data atomically with explicit file permissions.

    Writes into a fresh temp file beside *path*, then atomically replaces
    the target.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = Path(create_temp_file(str(path.parent), prefix=f".{path.name}."))
    try:
        fd = os.open(str(tmp), os.O_WRONLY | os.O_TRUNC)
        try:
            os.write(fd, data)
        finally:
            os.close(fd)
        if mode != TEMP_FILE_MODE:
            os.chmod(tmp, mode)
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _random_name(prefix: str, width: int) -> str:
    return prefix + "".join(secrets.choice(_NAME_ALPHABET) for _ in range(width))


def create_temp_file(
    directory: str | None = None,
    *,
    prefix: str = DEFAULT_TEMP_PREFIX,
    width: int = DEFAULT_TEMP_WIDTH,
) -> str:
    """Create a new, empty, uniquely named file and return its path.

    The file is opened with O_CREAT|O_EXCL and mode 0o600 in one call, so
    the name is claimed atomically and the umask is never touched. A
    collision just draws another name. The descriptor is closed before
    returning; the caller owns the file from then on.
    """
    if not isinstance(prefix, str) or "\0" in prefix or "/" in prefix or os.sep in prefix:
        raise RequestError(f"invalid temp file prefix {prefix!r}")
    if not isinstance(width, int) or isinstance(width, bool) or width < MIN_TEMP_WIDTH:
        raise RequestError(f"temp file width must be an integer >= {MIN_TEMP_WIDTH}, got {width!r}")

    if directory is None:
        directory = current_directory()
    else:
        validate_component(directory, "directory")

    for _ in range(TMP_MAX):
        candidate = path_join(directory, _random_name(prefix, width))
        try:
            fd = os.open(candidate, _CREATE_FLAGS, TEMP_FILE_MODE)
        except FileExistsError:
            logger.debug("temp name collision on %s, retrying", candidate)
            continue
        except OSError as exc:
            raise ResourceError.from_os_error(exc, "create_temp_file") from exc
        try:
            os.close(fd)
        except OSError as exc:
            logger.warning("close failed for %s: %s", candidate, exc)
        logger.debug("created temp file %s", candidate)
        return candidate

    raise ResourceError(errno.EEXIST, "temp file name collisions exhausted", directory, "create_temp_file")


def remove_path(path: str) -> bool:
    """Remove one file, symlink or empty directory. Never recursive."""
    validate_component(path, "path")
    try:
        os.remove(path)
    except IsADirectoryError:
        _remove_directory(path)
    except PermissionError as exc:
        # Some platforms report EPERM/EACCES from unlink() on a directory.
        if not os.path.isdir(path) or os.path.islink(path):
            raise ResourceError.from_os_error(exc, "remove_path") from exc
        _remove_directory(path)
    except OSError as exc:
        raise ResourceError.from_os_error(exc, "remove_path") from exc
    logger.debug("removed %s", path)
    return True


def _remove_directory(path: str) -> None:
    try:
        os.rmdir(path)
    except OSError as exc:
        raise ResourceError.from_os_error(exc, "remove_path") from exc
