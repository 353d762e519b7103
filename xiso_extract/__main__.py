"""
Entry point for the Xbox disc image extraction utility.

Allows running as: python -m xiso_extract
"""

import argparse
import sys

from . import __version__
from .commands import cmd_extract, cmd_list
from .constants import BUFFER_SIZE
from .directory import STRATEGIES, STRATEGY_TREE
from .formatter import OutputFormatter
from .logging_config import setup_logging, QUIET, NORMAL, VERBOSE


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='xiso_extract',
        description='Extract or list the content of Xbox disc images (XISO)',
        epilog='OUT may be a local directory or an ftp://[user[:password]@]host[:port]/path URL.'
    )

    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('-x', '--extract', action='store_true',
                      help='Extract content of the ISO file (default)')
    mode.add_argument('-l', '--list', action='store_true',
                      help='List content of the ISO file')

    parser.add_argument('-o', '--out',
                        help='Output directory or FTP url to extract content to '
                             '(default: image path without extension)')
    parser.add_argument('-s', '--skip-update', action='store_true',
                        help='Skip System Update ($SystemUpdate) if present')
    parser.add_argument('--chunk-size', type=_positive_int, default=BUFFER_SIZE,
                        help=f'Bytes per read/write while extracting (default: {BUFFER_SIZE})')
    parser.add_argument('--strategy', choices=STRATEGIES, default=STRATEGY_TREE,
                        help='Directory decoding: follow tree pointers or scan every record')
    parser.add_argument('--json', action='store_true', help='Output in JSON format')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true',
                           help='Show detailed output')
    verbosity.add_argument('-q', '--quiet', action='store_true',
                           help='Suppress non-essential output')

    parser.add_argument('image', help='Path to the ISO file')
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Configure logging based on verbosity flags
    if args.quiet:
        setup_logging(level=QUIET)
    elif args.verbose:
        setup_logging(level=VERBOSE)
    else:
        setup_logging(level=NORMAL)

    formatter = OutputFormatter(json_mode=args.json, show_progress=not args.quiet)

    if args.list:
        return cmd_list(args, formatter)
    return cmd_extract(args, formatter)


if __name__ == '__main__':
    sys.exit(main())
