"""Interaction with the user's shell: prompts, editors and key bindings."""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Callable

from prompt_toolkit import prompt
from tqdm import tqdm

from .config import Settings
from .exception_handler import ArgumentError, EditorError, EmptyInput, InvalidInput
from .snippet import DELIMITER


logger = logging.getLogger("snipbook")

PromptFn = Callable[[str], str]

DESCRIPTION_PROMPT = "Description: "

SUPPORTED_SHELLS = ("bash", "zsh")

_BASH_TEMPLATE = """\
# snipbook key bindings for bash
__snipbook_add() {{
  local tmp
  tmp="$(mktemp)" || return
  printf '%s\\n' "$READLINE_LINE" > "$tmp"
  {prog} add --file "$tmp" --delete </dev/tty
}}
__snipbook_find() {{
  local selected
  selected="$({prog} find --query="$READLINE_LINE" </dev/tty)"
  if [ -n "$selected" ]; then
    READLINE_LINE="$selected"
    READLINE_POINT=${{#READLINE_LINE}}
  fi
}}
bind -x '"{add_binding}": __snipbook_add'
bind -x '"{find_binding}": __snipbook_find'
"""

_ZSH_TEMPLATE = """\
# snipbook key bindings for zsh
__snipbook_add() {{
  local tmp
  tmp="$(mktemp)" || return
  print -r -- "$BUFFER" > "$tmp"
  zle -I
  {prog} add --file "$tmp" --delete </dev/tty
  zle reset-prompt
}}
__snipbook_find() {{
  local selected
  zle -I
  selected="$({prog} find --query="$BUFFER" </dev/tty)"
  if [[ -n "$selected" ]]; then
    BUFFER="$selected"
    CURSOR=${{#BUFFER}}
  fi
  zle reset-prompt
}}
zle -N __snipbook_add
zle -N __snipbook_find
bindkey '{add_binding}' __snipbook_add
bindkey '{find_binding}' __snipbook_find
"""


def prompt_description(prompt_fn: PromptFn | None = None) -> str:
    """Ask for a one-line description until it can be stored.

    A description containing the field delimiter or a line break is refused and
    asked for again. A blank answer raises :class:`EmptyInput`.
    """
    ask = prompt_fn or prompt
    while True:
        answer = ask(DESCRIPTION_PROMPT).strip()
        if not answer:
            raise EmptyInput("description is empty, nothing saved")
        if DELIMITER in answer:
            tqdm.write(f"The description cannot contain {DELIMITER!r}, try again.", file=sys.stderr)
            continue
        if "\n" in answer or "\r" in answer:
            tqdm.write("The description must be a single line, try again.", file=sys.stderr)
            continue
        return answer


def read_command_file(path: Path | str, *, delete: bool = False) -> str:
    """Read a command saved to a file by the shell binding."""
    path = Path(path)
    try:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ArgumentError(f"command file not found: {path}") from exc

        command = text.rstrip("\r\n")
        if not command.strip():
            raise EmptyInput(f"command file {path} is empty, nothing saved")
        if "\n" in command or "\r" in command:
            raise InvalidInput(f"command file {path} holds more than one line")
        return command
    finally:
        if delete:
            path.unlink(missing_ok=True)
            logger.debug("Removed command file %s", path)


def open_in_editor(path: Path, editor: str) -> None:
    cmd = shlex.split(editor) + [str(path)]
    logger.debug("Opening %s with %s", path, cmd[0])
    try:
        result = subprocess.run(cmd, check=False)
    except FileNotFoundError as exc:
        raise EditorError(f"editor not found: {editor}") from exc

    if result.returncode != 0:
        raise EditorError(f"editor {editor!r} exited with status {result.returncode}")


def setup_script(settings: Settings, shell: str, *, prog: str = "snipbook") -> str:
    """Shell code that binds the add and find actions to the configured keys."""
    shell = Path(shell).name
    if shell not in SUPPORTED_SHELLS:
        raise ArgumentError(
            f"unsupported shell {shell!r}; choose one of: {', '.join(SUPPORTED_SHELLS)}"
        )

    for name, binding in (("add_binding", settings.add_binding), ("find_binding", settings.find_binding)):
        if not binding or "'" in binding or '"' in binding:
            raise InvalidInput(f"invalid key sequence for {name}: {binding!r}")

    template = _BASH_TEMPLATE if shell == "bash" else _ZSH_TEMPLATE
    return template.format(
        prog=prog,
        add_binding=settings.add_binding,
        find_binding=settings.find_binding,
    )


__all__ = [
    "DESCRIPTION_PROMPT",
    "SUPPORTED_SHELLS",
    "open_in_editor",
    "prompt_description",
    "read_command_file",
    "setup_script",
]
