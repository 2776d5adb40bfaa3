"""Main CLI entry point for packager."""

import argparse
import sys
from typing import Optional

from .commands import run_config


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the packager CLI."""
    parser = argparse.ArgumentParser(
        prog='packager',
        description='Declarative packaging runner'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run the commands of a configuration file')
    run_parser.add_argument(
        '-c', '--config',
        type=str,
        required=True,
        help='Path to configuration YAML file'
    )
    run_parser.add_argument(
        '-w', '--workdir',
        type=str,
        help='Working directory (default: directory of the configuration file)'
    )
    run_parser.add_argument(
        '--no-define',
        action='store_true',
        help='Decode the configuration without ${name} substitution'
    )
    run_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Load and validate without execution'
    )
    run_parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    run_parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    run_parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='info',
        help='Set log level'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command == 'run':
        return run_config(parsed_args)

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
