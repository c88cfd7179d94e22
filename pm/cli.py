"""
pm CLI - Corvid platform manager.

Pacman-style interface for edition and database management.

Usage:
    pm -A <edition> [plugin ...]   Apply a license (edition + its plugins)
    pm -T                          Show edition status
    pm -C                          Cancel a pending or failed installation
    pm -F                          Finalize the pending installation after a restart
    pm -Q                          List installed plugins
    pm -Qi <plugin>                Show plugin info
    pm -M                          Run pending database migrations
    pm -Ml                         List migrations and whether they ran
    pm --init-config               Write a default configuration file
"""

import argparse
import sys

from corvid.edition.apply import BadRequestError
from corvid.edition.state import EditionStateError
from corvid.migration.step import MigrationError
from corvid.plugin.edition.errors import EditionInstallError
from corvid.plugin.repository import PluginError


class PMError(Exception):
    """Base exception for pm errors."""

    pass


# Errors reported as "Error: <message>" with exit code 1
EXPECTED_ERRORS = (
    PMError,
    BadRequestError,
    EditionStateError,
    EditionInstallError,
    MigrationError,
    PluginError,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with pacman-style flags."""
    parser = argparse.ArgumentParser(
        prog="pm",
        description="Corvid platform manager - editions, plugins and migrations",
        add_help=False,
    )

    ops = parser.add_mutually_exclusive_group()
    ops.add_argument("-A", "--apply", action="store_true", help="Apply a license")
    ops.add_argument("-T", "--status", action="store_true", help="Show edition status")
    ops.add_argument("-C", "--cancel", action="store_true", help="Cancel installation")
    ops.add_argument("-F", "--finalize", action="store_true", help="Finalize installation")
    ops.add_argument("-Q", "--query", action="store_true", help="Query installed plugins")
    ops.add_argument("-M", "--migrate", action="store_true", help="Run migrations")
    ops.add_argument("--init-config", action="store_true", help="Write default config")
    ops.add_argument("-h", "--help", action="store_true", help="Show help")

    # Sub-flags
    parser.add_argument("-i", "--info", action="store_true", help="Show info (-Qi)")
    parser.add_argument("-l", "--list", action="store_true", help="List only (-Ml)")

    # Common options
    parser.add_argument("--config", help="Configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    parser.add_argument("targets", nargs="*", help="Edition, plugin keys")

    return parser


def print_help():
    help_text = """
pm - Corvid platform manager

Usage:
    pm -A <edition> [plugin ...]   Apply a license (edition + its plugins)
    pm -T                          Show edition status
    pm -C                          Cancel a pending or failed installation
    pm -F                          Finalize the pending installation after a restart
    pm -Q                          List installed plugins
    pm -Qi <plugin>                Show plugin info
    pm -M                          Run pending database migrations
    pm -Ml                         List migrations and whether they ran
    pm --init-config               Write a default configuration file

Options:
    --config <file>                Configuration file (default: $CORVID_CONFIG
                                   or config/corvid.toml)
    -v, --verbose                  Verbose output
    -h, --help                     Show this help
"""
    print(help_text.strip())


def main(argv: list[str] | None = None) -> int:
    """Main entry point for pm CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        import corvid.config
        from corvid.log import setup_logging

        if args.config:
            corvid.config.set_config_file(args.config)

        if args.help or not (
            args.apply
            or args.status
            or args.cancel
            or args.finalize
            or args.query
            or args.migrate
            or args.init_config
        ):
            print_help()
            return 0

        if args.init_config:
            path = corvid.config.generate_default_config()
            print(f"Configuration written to {path}")
            return 0

        setup_logging(level="DEBUG" if args.verbose else None)

        if args.apply:
            from pm.commands.apply import apply_command

            return apply_command(args)

        elif args.status:
            from pm.commands.status import status_command

            return status_command(args)

        elif args.cancel:
            from pm.commands.cancel import cancel_command

            return cancel_command(args)

        elif args.finalize:
            from pm.commands.finalize import finalize_command

            return finalize_command(args)

        elif args.query:
            from pm.commands.query import query_command

            return query_command(args)

        elif args.migrate:
            from pm.commands.migrate import migrate_command

            return migrate_command(args)

    except EXPECTED_ERRORS as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
