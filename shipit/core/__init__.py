"""Core domain types: configuration, versions, results and errors."""

from .config import ReleaseConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok
from .version import BumpType, Version, parse_version

__all__ = [
    # config
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # version
    "BumpType",
    "Version",
    "parse_version",
]
