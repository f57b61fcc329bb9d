"""Runtime settings: paths, key bindings and display theme."""

from __future__ import annotations

import logging
import os
import socket
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping


logger = logging.getLogger("snipbook")

APP_NAME = "snipbook"
CONFIG_FILENAME = "config"
STORE_FILENAME = "snippets.txt"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULTS: dict[str, str] = {
    "add_binding": r"\C-x\C-a",
    "find_binding": r"\C-x\C-f",
    "theme": "ansi",
}

_HEADER = """\
# snipbook configuration
# key=value pairs, one per line. Values may be quoted.
#   add_binding   key sequence that saves the current command line
#   find_binding  key sequence that opens the snippet picker
#   theme         syntax highlighting theme used in the picker preview
"""


def config_home(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    if env.get("SNIPBOOK_HOME"):
        return Path(env["SNIPBOOK_HOME"]).expanduser()
    xdg = env.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / APP_NAME


def config_file(env: Mapping[str, str] | None = None) -> Path:
    return config_home(env) / CONFIG_FILENAME


def store_path(env: Mapping[str, str] | None = None, *, hostname: str | None = None) -> Path:
    """Per-host store location, ``$SNIPBOOK_STORE`` wins when set."""
    env = os.environ if env is None else env
    if env.get("SNIPBOOK_STORE"):
        return Path(env["SNIPBOOK_STORE"]).expanduser()
    host = (hostname or socket.gethostname()).split(".", 1)[0] or "localhost"
    return config_home(env) / host / STORE_FILENAME


@dataclass(slots=True)
class Settings:
    """Key bindings and theme loaded from the key=value config file."""

    add_binding: str = DEFAULTS["add_binding"]
    find_binding: str = DEFAULTS["find_binding"]
    theme: str = DEFAULTS["theme"]

    @classmethod
    def load(cls, path: Path, *, materialize: bool = True) -> "Settings":
        """Read ``path``, writing a default file first when it does not exist."""
        if not path.exists():
            if materialize:
                write_defaults(path)
            return cls()

        values = parse_config(path.read_text(encoding="utf-8"), source=str(path))
        return cls(**values)

    def to_text(self) -> str:
        lines = [_HEADER]
        for field in fields(self):
            lines.append(f"{field.name}={_quote(getattr(self, field.name))}\n")
        return "".join(lines)


def parse_config(text: str, *, source: str = "<config>") -> dict[str, str]:
    """Parse ``key=value`` lines. Nothing in the file is ever executed."""
    known = set(DEFAULTS)
    values: dict[str, str] = {}

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            logger.warning("Ignoring %s:%d, expected key=value: %s", source, number, raw)
            continue

        key, value = (part.strip() for part in line.split("=", 1))
        if key not in known:
            logger.warning("Ignoring unknown config key %r in %s:%d", key, source, number)
            continue
        values[key] = _unquote(value)

    return values


def write_defaults(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(Settings().to_text(), encoding="utf-8")
    logger.debug("Wrote default configuration to %s", path)


def log_level(env: Mapping[str, str] | None = None, default: str = "WARNING") -> str:
    env = os.environ if env is None else env
    raw = env.get("SNIPBOOK_LOG_LEVEL")
    if not raw:
        return default
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        logger.warning("Invalid log level for SNIPBOOK_LOG_LEVEL: %s", raw)
        return default
    return level


def editor_command(env: Mapping[str, str] | None = None) -> str:
    env = os.environ if env is None else env
    return env.get("VISUAL") or env.get("EDITOR") or "vi"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _quote(value: str) -> str:
    if "'" in value:
        return f'"{value}"'
    return f"'{value}'"


__all__ = [
    "DEFAULTS",
    "Settings",
    "config_file",
    "config_home",
    "editor_command",
    "log_level",
    "parse_config",
    "store_path",
    "write_defaults",
]
