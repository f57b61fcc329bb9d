"""Render records as a delimiter-separated, column aligned table."""

from __future__ import annotations

import enum
import shutil
import textwrap
from typing import Iterable, List, Sequence

from .snippet import DELIMITER, Record


HEADER = ("TIMESTAMP", "DESCRIPTION", "COMMAND")
SEPARATOR = f" {DELIMITER} "
MIN_COMMAND_WIDTH = 20


class RenderMode(enum.Enum):
    LIST = "list"
    FIND = "find"


def render(records: Iterable[Record], mode: RenderMode, *, width: int | None = None) -> str:
    """Render ``records`` under a header row.

    ``LIST`` wraps the command column to ``width`` (the terminal width by
    default). ``FIND`` keeps one line per record for the picker. In both modes
    the first two delimiters of a row are the field boundaries.
    """
    rows = [(r.timestamp, r.description, r.command) for r in records]
    ts_width = max(len(row[0]) for row in [HEADER, *rows])
    desc_width = max(len(row[1]) for row in [HEADER, *rows])

    lines = [_row(HEADER[0], HEADER[1], HEADER[2], ts_width, desc_width)]

    if mode is RenderMode.FIND:
        lines.extend(_row(ts, desc, cmd, ts_width, desc_width) for ts, desc, cmd in rows)
        return "\n".join(lines)

    if width is None:
        width = shutil.get_terminal_size().columns
    prefix_width = ts_width + desc_width + 2 * len(SEPARATOR)
    command_width = max(MIN_COMMAND_WIDTH, width - prefix_width)

    for ts, desc, cmd in rows:
        chunks = _wrap(cmd, command_width)
        lines.append(_row(ts, desc, chunks[0], ts_width, desc_width))
        lines.extend(_row("", "", chunk, ts_width, desc_width) for chunk in chunks[1:])

    return "\n".join(lines)


def extract_command(row: str) -> str:
    """Return the command field of a rendered ``FIND`` row, verbatim."""
    fields = row.rstrip("\r\n").split(DELIMITER, 2)
    if len(fields) < 3:
        return ""
    command = fields[2]
    if command.startswith(" "):
        command = command[1:]
    return command


def _row(ts: str, desc: str, cmd: str, ts_width: int, desc_width: int) -> str:
    return f"{ts:<{ts_width}}{SEPARATOR}{desc:<{desc_width}}{SEPARATOR}{cmd}"


def _wrap(command: str, width: int) -> Sequence[str]:
    if len(command) <= width:
        return [command]
    chunks: List[str] = textwrap.wrap(
        command,
        width=width,
        break_long_words=True,
        break_on_hyphens=False,
        expand_tabs=False,
        replace_whitespace=False,
        drop_whitespace=True,
    )
    return chunks or [command]


__all__ = ["HEADER", "RenderMode", "extract_command", "render"]
