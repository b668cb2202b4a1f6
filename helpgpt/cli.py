"""helpgpt command line.

Manage the stored API key, or run a script with the error hook installed.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import runpy
import sys

from rich import print as rprint

from helpgpt.config import DEFAULT_HIDDEN_MODULES
from helpgpt.credentials import SOURCE_ENVIRONMENT, CredentialStore
from helpgpt.reporter import install_error_hook


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="helpgpt",
        description="Styled tracebacks explained by a chat model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  helpgpt set-key sk-...          # store the API key in the preference file
  helpgpt status                  # show where the API key comes from
  helpgpt run script.py --flag    # run a script with the error hook installed
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    set_key = sub.add_parser("set-key", help="Store the API key (plaintext)")
    set_key.add_argument("key", help="The API key")
    sub.add_parser("clear-key", help="Remove the stored API key")
    sub.add_parser("status", help="Show where the API key is read from")

    run = sub.add_parser("run", help="Run a Python script with the error hook installed")
    run.add_argument("script", help="Path of the script")
    run.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the script")
    run.add_argument(
        "--no-reverse", action="store_true", help="Show the most recent frame last"
    )
    run.add_argument(
        "--max-frames", type=int, default=30, help="Frames shown before eliding (default: 30)"
    )
    run.add_argument(
        "--show-all-frames", action="store_true", help="Do not hide library frames"
    )
    return parser.parse_args(argv)


def _mask(key: str) -> str:
    return key[:3] + "…" + key[-4:] if len(key) > 10 else "…"


def _status(store: CredentialStore) -> int:
    source = store.source()
    if source is None:
        rprint("[yellow]No API key configured.[/yellow]")
        return 1
    where = f"${store.env_var}" if source == SOURCE_ENVIRONMENT else str(store.path)
    rprint(f"API key [bold]{_mask(store.get() or '')}[/bold] read from {where}")
    return 0


def _run(args: argparse.Namespace) -> int:
    install_error_hook(
        reverse_backtrace=not args.no_reverse,
        max_n_frames=args.max_frames,
        hide_frames=not args.show_all_frames,
        hidden_modules=(*DEFAULT_HIDDEN_MODULES, "helpgpt"),
    )
    sys.argv = [args.script, *args.args]
    sys.path.insert(0, str(Path(args.script).resolve().parent))
    # Uncaught exceptions propagate to the installed hook.
    runpy.run_path(args.script, run_name="__main__")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)
    store = CredentialStore()

    match args.command:
        case "set-key":
            store.set(args.key)
            rprint(f"[green]API key stored in {store.path}[/green]")
            return 0
        case "clear-key":
            store.clear()
            rprint("API key removed from the preference file.")
            return 0
        case "status":
            return _status(store)
        case "run":
            return _run(args)
    return 2
