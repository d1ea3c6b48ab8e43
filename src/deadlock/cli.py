"""
CLI entry point for deadlock.

Usage:
    deadlock list [path]               List all workarounds
    deadlock list --expired            Only expired workarounds
    deadlock list --active             Only active (non-expired) workarounds
    deadlock list --critical           Only workarounds expiring within 7 days
    deadlock list --json               Output as JSON
    deadlock check [path]              Exit 1 if any workaround is expired
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .config import load_config
from .exceptions import ConfigError, MarkerValidationError
from .reporting import Reporter
from .scanner import DeadlockScanner

logger = logging.getLogger(__name__)


def _scan(args):
    """Run the scanner for a command; returns results or None on error."""
    root = Path(args.path) if args.path else args.config.scan_path
    try:
        return DeadlockScanner(args.config).scan(root)
    except MarkerValidationError as e:
        where = f"{e.path}:{e.line}: " if e.path else ""
        print(f"{where}{e}", file=sys.stderr)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
    return None


def cmd_list(args):
    """List all technical debt workarounds."""
    if not args.json:
        print("Scanning for workarounds...")

    results = _scan(args)
    if results is None:
        return 1

    reporter = Reporter(results, window=args.config.critical_days)

    if args.json:
        selected = reporter.select(args.expired, args.active, args.critical)
        print(selected.render_json())
        return 0

    print("Scan complete.")

    if not results:
        print("No workarounds found.")
        print("Note: @workaround is supported on classes and methods only.")
        return 0

    selected = reporter.select(args.expired, args.active, args.critical)
    print(selected.render_stats())

    if not selected.results:
        print("No matching workarounds found.")
        return 0

    print(selected.render_table())
    return 0


def cmd_check(args):
    """Fail if any technical debt workaround is expired."""
    results = _scan(args)
    if results is None:
        return 1

    summary = Reporter(results).render_expired()
    if summary is None:
        print("No expired workarounds found.")
        return 0

    print(summary)
    return 1


def build_parser():
    parser = argparse.ArgumentParser(
        prog="deadlock",
        description="Track temporary workarounds and fail when they expire",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    deadlock list src/
    deadlock list --critical
    deadlock check src/
"""
    )
    parser.add_argument('--version', action='version', version=f'deadlock {__version__}')
    parser.add_argument('--config', metavar='FILE', help='YAML config file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # list
    list_p = subparsers.add_parser('list', help='List all technical debt workarounds')
    list_p.add_argument('path', nargs='?', help='Directory to scan (default: scan_path from config)')
    state = list_p.add_mutually_exclusive_group()
    state.add_argument('--expired', action='store_true', help='Show only expired workarounds')
    state.add_argument('--active', action='store_true', help='Show only active (non-expired) workarounds')
    list_p.add_argument('--critical', action='store_true',
                        help='Show only critical workarounds (expiring in <= 7 days)')
    list_p.add_argument('--json', action='store_true', help='Output as JSON')
    list_p.set_defaults(func=cmd_list)

    # check
    check_p = subparsers.add_parser('check', help='Fail if any workaround is expired')
    check_p.add_argument('path', nargs='?', help='Directory to scan (default: scan_path from config)')
    check_p.set_defaults(func=cmd_check)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        args.config = load_config(args.config, environ=os.environ)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
