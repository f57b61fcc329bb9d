from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..exception_handler import EmptyInput, InvalidInput, MalformedRecord


DELIMITER = "|"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
LINE_BREAKS = ("\n", "\r")


class Record(BaseModel):
    """One stored snippet: ``timestamp|description|command``."""

    timestamp: str
    description: str
    command: str

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        # strptime alone accepts unpadded fields such as "2024-1-2 3:04:05"
        if datetime.strptime(value, TIMESTAMP_FORMAT).strftime(TIMESTAMP_FORMAT) != value:
            raise ValueError(f"timestamp must look like YYYY-MM-DD HH:MM:SS, got {value!r}")
        return value

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description is empty")
        if DELIMITER in value:
            raise ValueError(f"description must not contain {DELIMITER!r}")
        if any(brk in value for brk in LINE_BREAKS):
            raise ValueError("description must be a single line")
        return value

    @field_validator("command")
    @classmethod
    def _check_command(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("command is empty")
        if any(brk in value for brk in LINE_BREAKS):
            raise ValueError("command must be a single line")
        return value

    @property
    def created_at(self) -> datetime:
        return datetime.strptime(self.timestamp, TIMESTAMP_FORMAT)

    def to_line(self) -> str:
        return DELIMITER.join((self.timestamp, self.description, self.command))

    @classmethod
    def from_line(cls, line: str, *, line_number: int | None = None) -> "Record":
        return decode(line, line_number=line_number)

    @classmethod
    def create(cls, description: str, command: str, *, now: datetime | None = None) -> "Record":
        """Build a new record stamped with the local time, rejecting bad user input."""
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        try:
            return cls(timestamp=timestamp, description=description, command=command)
        except ValidationError as exc:
            raise _input_error(exc) from exc


def encode(timestamp: str, description: str, command: str) -> str:
    """Encode the three fields into a single store line (without line terminator)."""
    try:
        record = Record(timestamp=timestamp, description=description, command=command)
    except ValidationError as exc:
        raise _input_error(exc) from exc
    return record.to_line()


def decode(line: str, *, line_number: int | None = None) -> Record:
    """Decode one store line.

    Only the first two delimiters split fields, everything after the second one
    is the command, verbatim. Raises :class:`MalformedRecord` otherwise.
    """
    raw = line.rstrip("\r\n")
    fields = raw.split(DELIMITER, 2)
    if len(fields) < 3:
        found = len(fields) - 1
        raise MalformedRecord(
            raw,
            line_number,
            f"expected 2 '{DELIMITER}' delimiters, found {found}",
        )

    timestamp, description, command = fields
    try:
        return Record(timestamp=timestamp, description=description, command=command)
    except ValidationError as exc:
        raise MalformedRecord(raw, line_number, _first_message(exc)) from exc


def _first_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid value")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


def _input_error(exc: ValidationError) -> Exception:
    message = _first_message(exc)
    if message.endswith("is empty"):
        return EmptyInput(message)
    return InvalidInput(message)


__all__ = [
    "DELIMITER",
    "Record",
    "TIMESTAMP_FORMAT",
    "decode",
    "encode",
]
