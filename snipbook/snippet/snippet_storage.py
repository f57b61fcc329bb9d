from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterator, List

from ..exception_handler import EmptyStore, MalformedRecord
from .model import Record, decode


logger = logging.getLogger("snipbook")


class SnippetStorage:
    """Append-only flat file holding one record per line, oldest first.

    There is no locking: two invocations appending at the same time may
    interleave their lines.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def append(self, description: str, command: str, *, now: datetime | None = None) -> Record:
        """Stamp, encode and append a new snippet to the end of the store."""
        record = Record.create(description, command, now=now)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        prefix = "\n" if self._missing_final_newline() else ""
        with self.path.open("a", encoding="utf-8", newline="\n") as handle:
            handle.write(f"{prefix}{record.to_line()}\n")

        logger.debug("Appended snippet %r to %s", record.description, self.path)
        return record

    def is_empty(self) -> bool:
        return not self.path.is_file() or self.path.stat().st_size == 0

    def read_all(self) -> Iterator[Record]:
        """Return a lazy iterator over every stored record.

        Raises :class:`EmptyStore` right away when the file is absent or has zero
        bytes. A line that does not decode raises ``MalformedRecord`` carrying the
        offending line and its 1-based line number.
        """
        if self.is_empty():
            raise EmptyStore(self.path)
        return self._iter_records()

    def snapshot(self) -> List[Record]:
        """Read the whole store into memory before anything gets rendered."""
        records = list(self.read_all())
        logger.debug("Read %d snippets from %s", len(records), self.path)
        return records

    def open_for_manual_edit(self) -> Path:
        """Return the raw store path, creating an empty file when needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        return self.path

    def _iter_records(self) -> Iterator[Record]:
        # binary iteration splits on "\n" only, a stray "\r" stays inside its line
        with self.path.open("rb") as handle:
            for line_number, raw in enumerate(handle, start=1):
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise MalformedRecord(
                        raw.rstrip(b"\r\n").decode("utf-8", errors="replace"),
                        line_number,
                        "invalid UTF-8",
                    ) from exc
                yield decode(line, line_number=line_number)

    def _missing_final_newline(self) -> bool:
        if self.is_empty():
            return False
        with self.path.open("rb") as handle:
            handle.seek(-1, 2)
            return handle.read(1) != b"\n"


__all__ = ["SnippetStorage"]
