#!/usr/bin/env python3
"""
UNIXPackage CLI

Command-line interface for installing, removing and querying packages.
"""

import argparse
import logging
import sys
from typing import List, Optional

from unixpackage import __version__
from unixpackage.common.exceptions import (
    CorruptStateError,
    InvalidConfigError,
    StorageError,
    UnixPackageError,
)
from unixpackage.common.logging_config import LogContext, setup_logging
from unixpackage.config import PackageConfig
from unixpackage.distribution import strategy_for
from unixpackage.manager import PackageManager

logger = logging.getLogger(__name__)

WELCOME = """\
UNIXPackage - lightweight UNIX package manager prototype

Usage:
  unixpackage <command> [arguments]

Try `unixpackage help` to see available commands."""

COMMANDS_HELP = """\
Commands:
  install <name>      Install a package from the default repository.
  remove <name>       Remove a package from the local store.
  list                List installed packages.
  search [query]      Search packages (empty query lists all).
  info <name>         Show details for a package.
  help                Display this message.

This prototype keeps state in {store_dir}."""


def print_error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def get_manager(config: PackageConfig) -> PackageManager:
    """Open the package store, exiting if it cannot be trusted."""
    try:
        return PackageManager.from_config(config)
    except CorruptStateError as e:
        print_error(e.message)
        print_error("Move the file aside or repair it before running another command.")
        sys.exit(1)
    except StorageError as e:
        print_error(f"Failed to initialize data directory: {e.reason}")
        sys.exit(1)


def _require_name(args, command: str) -> Optional[str]:
    name = (args.name or "").strip()
    if not name:
        print_error(f"{command} requires a package name.")
        return None
    return name


def cmd_install(args):
    """Install a package."""
    name = _require_name(args, "install")
    if name is None:
        return 1

    try:
        installed = args.manager.install(name)
    except UnixPackageError as e:
        print_error(e.message)
        return 1

    print(f"Installed {installed.name} {installed.version}")
    print(f"  {installed.install_location}")
    return 0


def cmd_remove(args):
    """Remove an installed package."""
    name = _require_name(args, "remove")
    if name is None:
        return 1

    try:
        removed = args.manager.remove(name)
    except UnixPackageError as e:
        print_error(e.message)
        return 1

    print(f"Removed {removed.name}")
    return 0


def cmd_list(args):
    """List installed packages."""
    packages = args.manager.list()

    if not packages:
        print("No packages installed yet. Try `unixpackage install <name>`.")
        return 0

    for pkg in packages:
        print(f"{pkg.name} {pkg.version} - installed {pkg.formatted_install_date}")
    return 0


def cmd_search(args):
    """Search the catalog."""
    query = args.query or ""
    matches = args.manager.search(query)

    if not matches:
        print(f'No packages matched "{query}".')
        return 0

    for pkg in matches:
        platforms = ", ".join(pkg.platform_names())
        print(f"{pkg.name} {pkg.version} [{platforms}]")
        print(f"  {pkg.description}")
    return 0


def cmd_info(args):
    """Show details for a package."""
    name = _require_name(args, "info")
    if name is None:
        return 1

    manager = args.manager
    available, installed = manager.info(name)

    if available:
        print(f"{available.name} {available.version}")
        print(available.description)
        print(f"Homepage: {available.homepage}")
        print(f"Platforms: {', '.join(available.platform_names())}")
        print(f"Distribution: {strategy_for(available.distribution).display_name}")
    else:
        print(f"No information found for {name}.")

    if installed:
        print(f"Installed at: {installed.formatted_install_date}")
        print(f"Location: {installed.install_location}")
    elif available:
        print("Install steps:")
        for i, step in enumerate(manager.install_steps(available.name), 1):
            print(f"  {i}. {step}")

    return 0


def cmd_help(args):
    """Show available commands."""
    print(COMMANDS_HELP.format(store_dir=args.config.data_dir))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unixpackage",
        description="Lightweight UNIX package manager prototype",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"UNIXPackage {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # install
    install_p = subparsers.add_parser("install", help="Install a package")
    install_p.add_argument("name", nargs="?", help="Package name")
    install_p.set_defaults(func=cmd_install)

    # remove
    remove_p = subparsers.add_parser(
        "remove", aliases=["uninstall"], help="Remove a package"
    )
    remove_p.add_argument("name", nargs="?", help="Package name")
    remove_p.set_defaults(func=cmd_remove)

    # list
    list_p = subparsers.add_parser("list", help="List installed packages")
    list_p.set_defaults(func=cmd_list)

    # search
    search_p = subparsers.add_parser("search", help="Search packages")
    search_p.add_argument("query", nargs="?", default="", help="Search query")
    search_p.set_defaults(func=cmd_search)

    # info
    info_p = subparsers.add_parser("info", help="Show package details")
    info_p.add_argument("name", nargs="?", help="Package name")
    info_p.set_defaults(func=cmd_info)

    # help
    help_p = subparsers.add_parser("help", help="Show available commands")
    help_p.set_defaults(func=cmd_help)

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        args.config = PackageConfig.from_env()
    except InvalidConfigError as e:
        print_error(e.message)
        return 1

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=args.config.log_file,
        json_logs=args.config.log_json,
    )
    logger.debug(f"Resolved configuration: {args.config}")

    with LogContext(command=args.command, package=getattr(args, "name", None)):
        # The store is opened before dispatch so a corrupt file stops every command
        args.manager = get_manager(args.config)

        if args.command is None:
            print(WELCOME)
            return 0

        return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
