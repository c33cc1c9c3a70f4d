"""CLI for sysutils."""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import questionary
from rich.console import Console

from . import api
from . import config as cfg
from .access import DEFAULT_MODE
from .config import Scope
from .errors import RequestError
from .logging_setup import DEFAULT_LOG_FILE, configure

console = Console(stderr=True)
out = Console(highlight=False, soft_wrap=True, emoji=False)

EXIT_FAILED = 1
EXIT_USAGE = 2


class _NoTTYError(SystemExit):
    def __init__(self, flag: str) -> None:
        super().__init__(f"No TTY detected. Use {flag} to run non-interactively.")


def _is_tty() -> bool:
    return sys.stdin.isatty()


def _require_tty(flag: str) -> None:
    if not _is_tty():
        raise _NoTTYError(flag)


def _confirm(message: str, *, default: bool = False) -> bool:
    _require_tty("--yes")
    result = questionary.confirm(message, default=default).ask()
    if result is None:
        raise SystemExit(EXIT_FAILED)
    return result


def _clone_args(args: argparse.Namespace, **overrides: object) -> argparse.Namespace:
    values = vars(args).copy()
    values.update(overrides)
    return argparse.Namespace(**values)


def _resolve_scope(args: argparse.Namespace) -> Scope:
    if getattr(args, "project", False):
        return Scope.PROJECT
    return Scope.GLOBAL


def cmd_access(args: argparse.Namespace) -> int:
    outcome = api.check_access(args.path, args.mode)
    if not outcome:
        return EXIT_FAILED
    console.print(f"[green]{args.mode or DEFAULT_MODE}[/green] access granted: {args.path}")
    return 0


def cmd_cwd(_args: argparse.Namespace) -> int:
    outcome = api.current_directory()
    if not outcome:
        return EXIT_FAILED
    out.print(outcome.value, markup=False)
    return 0


def cmd_mktemp(args: argparse.Namespace) -> int:
    settings = args.settings
    prefix = args.prefix if args.prefix is not None else settings["temp_prefix"]
    width = args.width if args.width is not None else settings["temp_width"]
    outcome = api.create_temp_file(args.dir, prefix=prefix, width=width)
    if not outcome:
        return EXIT_FAILED
    out.print(outcome.value, markup=False)
    return 0


def cmd_rm(args: argparse.Namespace) -> int:
    if not args.yes and not _confirm(f"Remove {args.path}?"):
        return EXIT_FAILED
    outcome = api.remove_path(args.path)
    if not outcome:
        return EXIT_FAILED
    console.print(f"[green]Removed.[/green] {args.path}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    from rich.table import Table

    scope = _resolve_scope(args)
    if args.set:
        key, sep, raw = args.set.partition("=")
        if not sep or key not in cfg.KNOWN_KEYS:
            known = ", ".join(sorted(cfg.KNOWN_KEYS))
            console.print(f"[red]Expected KEY=VALUE with KEY one of: {known}[/red]")
            return EXIT_USAGE
        try:
            value = cfg.coerce_value(key, raw)
        except ValueError:
            console.print(f"[red]Invalid value for {key}: {raw!r}[/red]")
            return EXIT_USAGE
        data = cfg.load_raw_config(scope)
        data[key] = value
        cfg.save_config(data, scope)
        console.print(f"[green]Saved.[/green] {key}={value!r} in {cfg.config_path(scope)}")
        return 0

    table = Table(title="sysutils config")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in sorted(args.settings.items()):
        table.add_row(key, repr(value))
    console.print(table)
    return 0


def cmd_version(_args: argparse.Namespace) -> int:
    try:
        console.print(version("sysutils"))
    except PackageNotFoundError:
        console.print("unknown")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysutils",
        description="Filesystem utilities: access checks, cwd, safe temp files, removal",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only report errors on stderr")
    sub = parser.add_subparsers(dest="command")

    p_access = sub.add_parser("access", help="Check read/write/execute access to a path")
    p_access.add_argument("path")
    p_access.add_argument("--mode", "-m", default=DEFAULT_MODE,
                          help="Any combination of r, w, x (default: r)")

    sub.add_parser("cwd", help="Print the current working directory")

    p_mktemp = sub.add_parser("mktemp", help="Create a unique 0600 temp file and print its path")
    p_mktemp.add_argument("dir", nargs="?", default=None,
                          help="Target directory (default: current directory)")
    p_mktemp.add_argument("--prefix", help="File name prefix")
    p_mktemp.add_argument("--width", type=int, help="Number of random characters")

    p_rm = sub.add_parser("rm", help="Remove a file or an empty directory")
    p_rm.add_argument("path")
    p_rm.add_argument("--yes", "-y", action="store_true",
                      help="Remove without confirmation")

    p_config = sub.add_parser("config", help="Show or update configuration")
    group = p_config.add_mutually_exclusive_group()
    group.add_argument("--global", dest="global_", action="store_true",
                       help="Use global scope")
    group.add_argument("--project", action="store_true",
                       help="Use project scope")
    p_config.add_argument("--set", metavar="KEY=VALUE", help="Store a setting")

    sub.add_parser("version", help="Show version")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(0)

    settings = cfg.load_config()
    log_file = Path(settings["log_file"]) if settings.get("log_file") else DEFAULT_LOG_FILE
    configure(log_file, debug=args.debug or bool(settings.get("debug")), quiet=args.quiet)

    args = _clone_args(args, settings=settings)
    commands = {
        "access": cmd_access,
        "cwd": cmd_cwd,
        "mktemp": cmd_mktemp,
        "rm": cmd_rm,
        "config": cmd_config,
        "version": cmd_version,
    }
    try:
        rc = commands[args.command](args)
    except RequestError as exc:
        console.print(f"[red]{exc}[/red]")
        rc = EXIT_USAGE
    except OSError as exc:
        console.print(f"[red]{exc}[/red]")
        rc = EXIT_FAILED
    sys.exit(rc)


if __name__ == "__main__":
    main()
