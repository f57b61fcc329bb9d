import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, TextIO


LOGGER_NAME = "snipbook"


class SnipbookError(Exception):
    """Base class for every error reported to the user."""

    exit_code = 1


class EmptyStore(SnipbookError):
    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(
            f"no snippets saved yet in {self.path}; add one first with `snipbook add`"
        )


class MalformedRecord(SnipbookError):
    """A stored line that cannot be decoded into a record."""

    def __init__(self, line: str, line_number: Optional[int] = None, reason: str = ""):
        self.line = line
        self.line_number = line_number
        self.reason = reason or "expected TIMESTAMP|DESCRIPTION|COMMAND"
        location = f"line {line_number}" if line_number is not None else "record"
        super().__init__(f"malformed {location} ({self.reason}): {line!r}")


class ArgumentError(SnipbookError):
    exit_code = 2


class EmptyInput(SnipbookError):
    pass


class InvalidInput(SnipbookError):
    pass


class PickerUnavailable(SnipbookError):
    pass


class PickerError(SnipbookError):
    pass


class EditorError(SnipbookError):
    pass


class ErrorHandler:
    """Centralized error reporting and logging for the command line tool."""

    def __init__(self, log_level: str = "WARNING", prog: str = "snipbook", stream: Optional[TextIO] = None):
        self.prog = prog
        self.stream = stream
        self.logger = self._setup_logging(log_level)

    def _setup_logging(self, level: str) -> logging.Logger:
        """Configure the shared project logger."""
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def describe(self, error: BaseException) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "type": type(error).__name__,
            "message": str(error),
            "exit_code": getattr(error, "exit_code", 1),
        }
        if isinstance(error, MalformedRecord):
            info["line_number"] = error.line_number
            info["line"] = error.line
        return info

    def report(self, error: BaseException) -> int:
        """Log ``error``, print it with the program prefix and return the exit code."""
        info = self.describe(error)

        if isinstance(error, SnipbookError):
            self.logger.debug("%s: %s", info["type"], info["message"])
        else:
            self.logger.exception("Unexpected %s", info["type"])

        stream = self.stream or sys.stderr
        print(f"{self.prog}: {info['message']}", file=stream)
        return info["exit_code"]


__all__ = [
    "ArgumentError",
    "EditorError",
    "EmptyInput",
    "EmptyStore",
    "ErrorHandler",
    "InvalidInput",
    "LOGGER_NAME",
    "MalformedRecord",
    "PickerError",
    "PickerUnavailable",
    "SnipbookError",
]
