"""Core domain types and logic."""

from .config import Config, ConfigError, SentryConfig, UploadConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "SentryConfig",
    "UploadConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
