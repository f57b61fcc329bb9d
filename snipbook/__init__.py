"""Core package for the snipbook command snippet manager."""

from .config import Settings
from .exception_handler import (
    ArgumentError,
    EmptyInput,
    EmptyStore,
    ErrorHandler,
    InvalidInput,
    MalformedRecord,
    SnipbookError,
)
from .formatter import RenderMode, extract_command, render
from .picker import FuzzyPicker, PickerConfig
from .snippet import Record, SnippetStorage, decode, encode

__version__ = "0.1.0"

__all__ = [
    "ArgumentError",
    "EmptyInput",
    "EmptyStore",
    "ErrorHandler",
    "FuzzyPicker",
    "InvalidInput",
    "MalformedRecord",
    "PickerConfig",
    "Record",
    "RenderMode",
    "Settings",
    "SnipbookError",
    "SnippetStorage",
    "decode",
    "encode",
    "extract_command",
    "render",
    "__version__",
]
