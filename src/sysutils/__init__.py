"""Filesystem utilities: access checks, cwd lookup, safe temp files, removal."""

from .api import Outcome, check_access, create_temp_file, current_directory, remove_path
from .errors import AllocationError, RequestError, ResourceError, SysutilsError

__all__ = [
    "AllocationError",
    "Outcome",
    "RequestError",
    "ResourceError",
    "SysutilsError",
    "check_access",
    "create_temp_file",
    "current_directory",
    "remove_path",
]
