"""Core types: results, exit codes, configuration and the Version value."""

from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok
from .version import Version, VersionError

__all__ = [
    "Err",
    "ErrorCode",
    "Ok",
    "Result",
    "Version",
    "VersionError",
    "is_err",
    "is_ok",
]
