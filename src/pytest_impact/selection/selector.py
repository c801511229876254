"""Change-impact test selection.

Given the files touched by a change and a mapping from path prefixes to the
test suites they affect, select the tests that must run. Selection is
safety-first: whenever the change cannot be attributed precisely, every test
known to the mapping is selected.

Example:
    >>> mapping = {'src/a/': ['T1', 'T2'], 'src/b/': ['T3']}
    >>> sorted(select_tests({'src/a/file.py'}, mapping))
    ['T1', 'T2']
    >>> sorted(select_tests({'src/a/file.py', 'docs/index.md'}, mapping))
    ['T1', 'T2', 'T3']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from pytest_impact.selection.mapping import load_mapping


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from pathlib import Path


# GitHub's pull request files API lists at most 300 files per pull request,
# so a diff of that size may be truncated.
DEFAULT_MAX_FILES = 300


class SelectionMode(Enum):
    """How the selected tests were derived.

    Attributes:
        PRECISE: Only tests reachable through matched prefixes.
        FULL_MAPPING: Every test in the mapping.
    """

    PRECISE = 'precise'
    FULL_MAPPING = 'full_mapping'


class EscalationReason(Enum):
    """Why a selection fell back to the full mapping."""

    NO_CHANGED_FILES = 'no_changed_files'
    TOO_MANY_CHANGED_FILES = 'too_many_changed_files'
    UNMAPPED_FILE = 'unmapped_file'


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of a single selection.

    Attributes:
        tests: Deduplicated test identifiers to run.
        mode: Whether the tests were attributed precisely or escalated.
        reason: Why the selection escalated, None in precise mode.
        changed_file_count: Number of distinct changed files considered.
        unmapped_file: The first file found without a matching prefix.
        matched_prefixes: Changed file to the prefix that claimed it (precise mode only).
    """

    tests: frozenset[str]
    mode: SelectionMode
    reason: EscalationReason | None = None
    changed_file_count: int = 0
    unmapped_file: str | None = None
    matched_prefixes: dict[str, str] = field(default_factory=dict)

    @property
    def is_escalated(self) -> bool:
        """Return True if the full mapping was selected."""
        return self.mode == SelectionMode.FULL_MAPPING


def _validate_mapping(mapping: Mapping[str, Sequence[str]] | None) -> None:
    if mapping is None:
        msg = 'The mappings dictionary cannot be None.'
        raise ValueError(msg)
    if not mapping:
        msg = 'The mappings dictionary does not contain any elements.'
        raise ValueError(msg)


def _validate_changed_files(changed_files: Iterable[str] | None) -> set[str]:
    if changed_files is None:
        msg = 'The set of files changed cannot be None.'
        raise ValueError(msg)
    if isinstance(changed_files, str):
        msg = 'The set of files changed must be a collection of paths, not a single string.'
        raise ValueError(msg)
    paths = list(changed_files)
    for path in paths:
        if path is None:
            msg = 'One or more of the elements in the set of changed files is None.'
            raise ValueError(msg)
        if not isinstance(path, str):
            msg = f'Changed file paths must be strings, got {type(path).__name__}.'
            raise ValueError(msg)
    return set(paths)


def full_mapping(mapping: Mapping[str, Sequence[str]]) -> set[str]:
    """Return every test identifier in the mapping.

    Args:
        mapping: Prefix to test identifiers mapping.

    Returns:
        Union of all mapping values.

    Raises:
        ValueError: If the mapping is None or empty.
    """
    _validate_mapping(mapping)
    tests: set[str] = set()
    for prefix_tests in mapping.values():
        tests.update(prefix_tests)
    return tests


def _match_prefix(path: str, mapping: Mapping[str, Sequence[str]]) -> str | None:
    """Return the first key of mapping that prefixes path."""
    for prefix in mapping:
        if path.startswith(prefix):
            return prefix
    return None


def select(
    changed_files: Iterable[str],
    mapping: Mapping[str, Sequence[str]],
    max_files: int = DEFAULT_MAX_FILES,
) -> SelectionResult:
    """Select the tests affected by a change, reporting how they were chosen.

    The selection escalates to the full mapping when no files changed, when
    at least ``max_files`` files changed, or when any changed file is not
    covered by a prefix. When a path matches several prefixes, the first in
    the mapping's iteration order wins.

    Args:
        changed_files: Paths touched by the change.
        mapping: Prefix to test identifiers mapping, in priority order.
        max_files: Change size at which precise selection is no longer trusted.

    Returns:
        SelectionResult with the tests and the mode used.

    Raises:
        ValueError: If the mapping is None or empty, changed_files is None or
            holds a None entry, or max_files is not positive.
    """
    _validate_mapping(mapping)
    files = _validate_changed_files(changed_files)
    if isinstance(max_files, bool) or not isinstance(max_files, int) or max_files < 1:
        msg = f'max_files must be a positive integer, got {max_files!r}.'
        raise ValueError(msg)

    if not files:
        return _escalate(mapping, EscalationReason.NO_CHANGED_FILES, 0)
    if len(files) >= max_files:
        return _escalate(mapping, EscalationReason.TOO_MANY_CHANGED_FILES, len(files))

    tests: set[str] = set()
    matched: dict[str, str] = {}
    # Sorted so the reported unmapped file is stable across runs.
    for path in sorted(files):
        prefix = _match_prefix(path, mapping)
        if prefix is None:
            return _escalate(mapping, EscalationReason.UNMAPPED_FILE, len(files), unmapped_file=path)
        matched[path] = prefix
        tests.update(mapping[prefix])

    return SelectionResult(
        tests=frozenset(tests),
        mode=SelectionMode.PRECISE,
        changed_file_count=len(files),
        matched_prefixes=matched,
    )


def _escalate(
    mapping: Mapping[str, Sequence[str]],
    reason: EscalationReason,
    changed_file_count: int,
    unmapped_file: str | None = None,
) -> SelectionResult:
    return SelectionResult(
        tests=frozenset(full_mapping(mapping)),
        mode=SelectionMode.FULL_MAPPING,
        reason=reason,
        changed_file_count=changed_file_count,
        unmapped_file=unmapped_file,
    )


def select_tests(
    changed_files: Iterable[str],
    mapping: Mapping[str, Sequence[str]],
    max_files: int = DEFAULT_MAX_FILES,
) -> set[str]:
    """Return the set of tests that must run for a change.

    See :func:`select` for the selection rules.
    """
    return set(select(changed_files, mapping, max_files).tests)


def select_tests_from_file(
    changed_files: Iterable[str],
    mapping_path: Path,
    max_files: int = DEFAULT_MAX_FILES,
) -> set[str]:
    """Select tests using a mapping stored as JSON on disk.

    Args:
        changed_files: Paths touched by the change.
        mapping_path: Path to the JSON mapping artifact.
        max_files: Change size at which precise selection is no longer trusted.

    Returns:
        Set of test identifiers to run.

    Raises:
        ValueError: If mapping_path or changed_files is None, or the mapping
            content is invalid.
        FileNotFoundError: If mapping_path does not exist.
    """
    if mapping_path is None:
        msg = 'The mappings file path cannot be None.'
        raise ValueError(msg)
    if not mapping_path.exists():
        msg = f'The file path provided for the mappings could not be found: {mapping_path}'
        raise FileNotFoundError(msg)
    if changed_files is None:
        msg = 'The list of files changed cannot be None.'
        raise ValueError(msg)
    return select_tests(changed_files, load_mapping(mapping_path), max_files)
