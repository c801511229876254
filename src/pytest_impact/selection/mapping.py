"""Loading of the prefix-to-tests mapping artifact.

The mapping is a JSON object whose keys are path prefixes and whose values
are lists of test identifiers:

    {
        "src/auth/": ["tests/small/auth", "tests/medium/test_login.py"],
        "src/shipping/": ["tests/small/shipping"]
    }

Key order is preserved, so the first prefix listed wins when several
prefixes match the same path.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


logger = logging.getLogger(__name__)


def load_mapping(path: Path) -> dict[str, list[str]]:
    """Load a prefix-to-tests mapping from a JSON file.

    Args:
        path: Path to the JSON mapping artifact.

    Returns:
        Dictionary mapping path prefixes to test identifiers, in file order.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON is invalid or not shaped as prefix -> list of strings,
            or the path cannot be read.
    """
    text = _read_text(path, 'Mapping file')
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f'Invalid JSON in {path}: {e}') from e

    if not isinstance(data, dict):
        raise ValueError(f'Expected a JSON object in {path}, got {type(data).__name__}')

    mapping: dict[str, list[str]] = {}
    for prefix, tests in data.items():
        if not isinstance(tests, list) or not all(isinstance(test, str) for test in tests):
            raise ValueError(f'Mapping entry {prefix!r} in {path} must be a list of strings')
        mapping[prefix] = tests

    logger.debug('Loaded %d prefixes from %s', len(mapping), path)
    return mapping


def load_changed_files(path: Path) -> set[str]:
    """Read changed file paths, one per line.

    Blank lines and surrounding whitespace are ignored.

    Args:
        path: Path to a newline-delimited list of changed files.

    Returns:
        Set of changed file paths.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the path exists but cannot be read.
    """
    return parse_changed_files(_read_text(path, 'Changed files list'))


def parse_changed_files(text: str) -> set[str]:
    """Parse a newline-delimited list of changed files."""
    return {line.strip() for line in text.splitlines() if line.strip()}


def _read_text(path: Path, description: str) -> str:
    """Read a UTF-8 text file, reporting unreadable paths as invalid input.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        ValueError: If the path exists but cannot be read (a directory, no permission).
    """
    if not path.exists():
        raise FileNotFoundError(f'{description} not found: {path}')

    try:
        with path.open(encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise ValueError(f'{description} could not be read: {path}: {e.strerror}') from e
