"""Interactive selection of a snippet through ``fzf``."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field

from .exception_handler import PickerError, PickerUnavailable
from .formatter import extract_command
from .snippet import DELIMITER


logger = logging.getLogger("snipbook")

# fzf exit statuses: 1 means no match, 130 means the user aborted.
CANCELLED_CODES = frozenset({1, 130})
HIGHLIGHTERS = ("bat", "batcat")


def detect_highlighter() -> str | None:
    for name in HIGHLIGHTERS:
        if shutil.which(name):
            return name
    return None


@dataclass(slots=True)
class PickerConfig:
    """Invocation settings for the external fuzzy finder."""

    executable: str = "fzf"
    theme: str = "ansi"
    preview_window: str = "down:3:wrap"
    prompt: str = "snipbook> "
    highlighter: str | None = field(default_factory=detect_highlighter)


class FuzzyPicker:
    """Compose the fzf command line, run it and pull the chosen command out."""

    def __init__(self, config: PickerConfig | None = None) -> None:
        self.config = config or PickerConfig()

    def preview_command(self) -> str:
        """Shell command fzf runs for the highlighted row.

        ``{3..}`` is everything from the command field on, so delimiters inside
        the command survive.
        """
        if self.config.highlighter:
            formatter = " ".join(
                [
                    shlex.quote(self.config.highlighter),
                    "--color=always",
                    "--style=plain",
                    "--paging=never",
                    "--language=sh",
                    f"--theme={shlex.quote(self.config.theme)}",
                    '--terminal-width="$FZF_PREVIEW_COLUMNS"',
                    "--wrap=character",
                ]
            )
        else:
            formatter = 'fold -s -w "$FZF_PREVIEW_COLUMNS"'
        return f"printf '%s\\n' {{3..}} | sed 's/^ //' | {formatter}"

    def build_command(self, query: str | None = None) -> list[str]:
        cmd = [
            self.config.executable,
            "--header-lines=1",
            f"--delimiter=\\{DELIMITER}",
            f"--prompt={self.config.prompt}",
            f"--preview={self.preview_command()}",
            f"--preview-window={self.config.preview_window}",
        ]
        if query:
            cmd.append(f"--query={query}")
        return cmd

    def select(self, table: str, query: str | None = None) -> str:
        """Let the user pick a row of ``table``; return its command.

        An empty string means nothing was chosen.
        """
        if shutil.which(self.config.executable) is None:
            raise PickerUnavailable(
                f"{self.config.executable} not found on PATH; install it to use `find`"
            )

        cmd = self.build_command(query)
        logger.debug("Running picker: %s", shlex.join(cmd))

        result = subprocess.run(
            cmd,
            input=table + "\n",
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            check=False,
        )

        if result.returncode in CANCELLED_CODES:
            logger.debug("Picker closed without a selection (exit %d)", result.returncode)
            return ""
        if result.returncode != 0:
            raise PickerError(
                f"{self.config.executable} exited with status {result.returncode}"
            )

        chosen = result.stdout.splitlines()
        if not chosen:
            return ""
        return extract_command(chosen[-1])


__all__ = ["CANCELLED_CODES", "FuzzyPicker", "PickerConfig", "detect_highlighter"]
