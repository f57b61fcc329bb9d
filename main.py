import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from prompt_toolkit import prompt
from tqdm import tqdm

from snipbook import __version__
from snipbook.config import Settings, config_file, editor_command, log_level, store_path
from snipbook.exception_handler import ArgumentError, EmptyInput, ErrorHandler
from snipbook.formatter import RenderMode, render
from snipbook.picker import FuzzyPicker, PickerConfig
from snipbook.shell import open_in_editor, prompt_description, read_command_file, setup_script
from snipbook.snippet import SnippetStorage


PROG = "snipbook"

logger = logging.getLogger("snipbook")


@dataclass
class Context:
    store: SnippetStorage
    settings: Settings
    env: Mapping[str, str]
    prompt_fn: Optional[Callable[[str], str]] = None
    picker: Optional[FuzzyPicker] = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Save shell commands with a description and pick them back with fzf",
    )
    parser.add_argument("--version", action="version", version=f"{PROG} {__version__}")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    add = commands.add_parser("add", help="Save a command (the description is always prompted)")
    add.add_argument(
        "--file",
        "-f",
        type=Path,
        help="Read the command from this file instead of the arguments",
    )
    add.add_argument(
        "--delete",
        action="store_true",
        help="Delete the file given with --file once it has been read",
    )
    add.add_argument(
        "words",
        nargs=argparse.REMAINDER,
        metavar="COMMAND",
        help="Command to save (prompted for when omitted)",
    )

    find = commands.add_parser("find", help="Pick a saved command and print it")
    find.add_argument(
        "--query",
        "-q",
        default=None,
        help="Initial query for the fuzzy finder",
    )

    commands.add_parser("list", aliases=["ls"], help="Print every saved command")
    commands.add_parser("edit", help="Open the snippet file in $VISUAL/$EDITOR")

    setup = commands.add_parser("setup", help="Print shell code installing the key bindings")
    setup.add_argument(
        "--shell",
        default=None,
        help="Target shell, bash or zsh (default: basename of $SHELL)",
    )

    commands.add_parser("help", help="Show this help")
    commands.add_parser("version", help="Show the version")

    return parser


def cmd_add(args: argparse.Namespace, ctx: Context) -> int:
    if args.delete and args.file is None:
        raise ArgumentError("--delete can only be used together with --file")
    if args.file is not None and args.words:
        raise ArgumentError("give the command either with --file or as arguments, not both")

    if args.file is not None:
        command = read_command_file(args.file, delete=args.delete)
    elif args.words:
        command = " ".join(args.words)
    else:
        ask = ctx.prompt_fn or prompt
        command = ask("Command: ").strip()
        if not command:
            raise EmptyInput("command is empty, nothing saved")

    tqdm.write(f"Command: {command}", file=sys.stderr)
    description = prompt_description(ctx.prompt_fn)
    record = ctx.store.append(description, command)
    tqdm.write(f"✅ Saved: {record.description}", file=sys.stderr)
    return 0


def cmd_find(args: argparse.Namespace, ctx: Context) -> int:
    records = ctx.store.snapshot()
    table = render(records, RenderMode.FIND)
    picker = ctx.picker or FuzzyPicker(PickerConfig(theme=ctx.settings.theme))
    selected = picker.select(table, query=args.query)
    if selected:
        print(selected)
    return 0


def cmd_list(args: argparse.Namespace, ctx: Context) -> int:
    records = ctx.store.snapshot()
    print(render(records, RenderMode.LIST))
    return 0


def cmd_edit(args: argparse.Namespace, ctx: Context) -> int:
    path = ctx.store.open_for_manual_edit()
    open_in_editor(path, editor_command(ctx.env))
    return 0


def cmd_setup(args: argparse.Namespace, ctx: Context) -> int:
    shell = args.shell or Path(ctx.env.get("SHELL", "bash")).name
    sys.stdout.write(setup_script(ctx.settings, shell, prog=PROG))
    return 0


def cmd_version(args: argparse.Namespace, ctx: Context) -> int:
    print(f"{PROG} {__version__}")
    return 0


COMMANDS = {
    "add": cmd_add,
    "find": cmd_find,
    "list": cmd_list,
    "ls": cmd_list,
    "edit": cmd_edit,
    "setup": cmd_setup,
    "version": cmd_version,
}


def run(
    argv: Optional[Sequence[str]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    prompt_fn: Optional[Callable[[str], str]] = None,
    picker: Optional[FuzzyPicker] = None,
) -> int:
    env = os.environ if env is None else env
    handler = ErrorHandler(log_level(env), prog=PROG)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "help":
        parser.print_help()
        return 0
    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    try:
        settings = Settings.load(config_file(env))
        ctx = Context(
            store=SnippetStorage(store_path(env)),
            settings=settings,
            env=env,
            prompt_fn=prompt_fn,
            picker=picker,
        )
        logger.debug("Running %s against %s", args.command, ctx.store.path)
        return COMMANDS[args.command](args, ctx)
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130
    except EOFError:
        return handler.report(EmptyInput("no input given, nothing saved"))
    except Exception as exc:
        return handler.report(exc)


def main() -> None:
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
