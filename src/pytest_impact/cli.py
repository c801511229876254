"""Command-line interface for change-impact test selection.

Prints the tests a change affects, given the changed files and a mapping
artifact.

Usage:
    git diff --name-only origin/main... | pytest-impact --map impact.json --changed-files -

    pytest-impact --map impact.json --format json --output selection.json src/auth/login.py

Exit Codes:
    0: Selection written
    2: Invalid input (missing files, bad JSON, empty mapping)
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import TYPE_CHECKING

from pytest_impact.config import load_config, merge_configs
from pytest_impact.reporting import JsonReporter, TextReporter
from pytest_impact.selection.mapping import load_changed_files, load_mapping, parse_changed_files
from pytest_impact.selection.selector import select


if TYPE_CHECKING:
    from pytest_impact.selection.selector import SelectionResult


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the pytest-impact command."""
    parser = argparse.ArgumentParser(
        prog='pytest-impact',
        description='Select the tests affected by a set of changed files.',
    )
    parser.add_argument(
        'paths',
        nargs='*',
        help='Changed file paths',
    )
    parser.add_argument(
        '--map',
        dest='mapping',
        default=None,
        help='Path to the prefix-to-tests mapping JSON (default: [tool.pytest-impact] mapping)',
    )
    parser.add_argument(
        '--changed-files',
        default=None,
        help='File listing changed paths, one per line, relative to the current directory ("-" reads stdin)',
    )
    parser.add_argument(
        '--max-files',
        type=int,
        default=None,
        help='Changed-file count at which every test is selected (default: 300)',
    )
    parser.add_argument(
        '--format',
        choices=('text', 'json'),
        default='text',
        help='Output format (default: text)',
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Write the report to this file instead of stdout',
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable debug logging',
    )
    return parser


def _collect_changed_files(args: argparse.Namespace) -> set[str]:
    changed = set(args.paths)
    if args.changed_files == '-':
        changed |= parse_changed_files(sys.stdin.read())
    elif args.changed_files is not None:
        changed |= load_changed_files(Path(args.changed_files))
    return changed


def _write_report(result: SelectionResult, output_format: str, output: Path | None) -> None:
    if output_format == 'json':
        reporter = JsonReporter()
        if output is not None:
            reporter.write_report(result, output)
        else:
            print(reporter.to_json(result))
    elif output is not None:
        with output.open('w', encoding='utf-8') as f:
            TextReporter(f).write_report(result)
    else:
        TextReporter().write_report(result)


def main(argv: list[str] | None = None) -> int:
    """Run test selection from the command line.

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        Exit code (0 = success, 2 = invalid input).
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    rootdir = Path.cwd()
    try:
        config = merge_configs(load_config(rootdir), cli_max_files=args.max_files, cli_mapping=args.mapping)
        if config.mapping is None:
            msg = 'No mapping given: pass --map or set [tool.pytest-impact] mapping'
            raise ValueError(msg)
        mapping = load_mapping(rootdir / config.mapping)
        changed = _collect_changed_files(args)
        result = select(changed, mapping, config.resolved_max_files)
    except (FileNotFoundError, ValueError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 2

    logger.info(
        'Selected %d tests for %d changed files (%s)',
        len(result.tests),
        result.changed_file_count,
        result.mode.value,
    )

    try:
        _write_report(result, args.format, args.output)
    except OSError as e:
        print(f'Error: cannot write {args.output}: {e.strerror}', file=sys.stderr)
        return 2

    return 0


if __name__ == '__main__':
    sys.exit(main())
