"""CLI entry point and argument parsing"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional

import settings
from cli.cli_app import DocSyncCLI, EXIT_ERROR, SETTING_NAMES
from cli.debug_setup import setup_debug_console, setup_logging
from docsync import SettingsStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gdocs-sync",
        description="Push markdown documents to Google Docs",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--settings-file",
        default=None,
        help="Settings file path (default: from config)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    push_parser = subparsers.add_parser("push", help="Overwrite the Google Doc with a file's content")
    push_parser.add_argument("file", type=Path, help="Markdown file; its name is the document title")

    open_parser = subparsers.add_parser("open", help="Open the Google Doc for a file, creating it if needed")
    open_parser.add_argument("file", type=Path, help="Markdown file; its name is the document title")

    subparsers.add_parser("login", help="Authorize with Google if the cached token is not usable")
    subparsers.add_parser("logout", help="Clear the cached Google token")
    subparsers.add_parser("status", help="Show cached token status")

    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Show settings (secrets redacted)")
    set_parser = config_sub.add_parser("set", help="Change a setting")
    set_parser.add_argument("name", choices=sorted(SETTING_NAMES), help="Setting to change")
    set_parser.add_argument("value", nargs="?", default=None, help="New value")
    set_parser.add_argument("--file", type=Path, default=None, help="Read the value from a file")

    return parser


def run(cli: DocSyncCLI, args: argparse.Namespace) -> int:
    """Dispatch a parsed command"""
    if args.command == "push":
        return cli.push(args.file)
    if args.command == "open":
        return cli.open(args.file)
    if args.command == "login":
        return cli.login()
    if args.command == "logout":
        return cli.logout()
    if args.command == "status":
        return cli.status()
    if args.command == "config":
        if args.config_command == "show":
            return cli.show_config()
        return cli.set_config(args.name, args.value, args.file)
    return EXIT_ERROR


def main(argv: Optional[List[str]] = None):
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(settings.LOG_LEVEL, debug=args.debug, log_file=settings.DEBUG_LOG_FILE)
    console = setup_debug_console(args.debug, log_file=settings.DEBUG_LOG_FILE)

    cli = DocSyncCLI(console=console, settings_store=SettingsStore(args.settings_file))
    try:
        exit_code = run(cli, args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        exit_code = EXIT_ERROR
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        exit_code = EXIT_ERROR
    finally:
        cli.close()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
