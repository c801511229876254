"""pytest plugin for change-impact test selection.

This module provides the pytest plugin hooks that deselect collected tests
a change cannot affect. Identifiers in the mapping are matched against node
ids, so a mapping value may name a directory (``tests/small/auth``), a file
(``tests/test_login.py``) or a single test (``tests/test_login.py::test_ok``), which
also selects its parametrized instances (``test_ok[1]``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from pytest_impact.config import load_config, merge_configs
from pytest_impact.selection.mapping import load_changed_files, load_mapping
from pytest_impact.selection.selector import select


if TYPE_CHECKING:
    from pytest_impact.selection.selector import SelectionResult


logger = logging.getLogger(__name__)

_result_key = pytest.StashKey['SelectionResult']()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for pytest-impact."""
    group = parser.getgroup('impact', 'change-impact test selection')
    group.addoption(
        '--impact',
        action='store_true',
        default=False,
        dest='impact',
        help='Only run tests affected by the changed files',
    )
    group.addoption(
        '--impact-map',
        action='store',
        default=None,
        dest='impact_map',
        help='Path to the prefix-to-tests mapping JSON',
    )
    group.addoption(
        '--impact-changed',
        action='store',
        default=None,
        dest='impact_changed',
        help='Comma-separated list of changed file paths',
    )
    group.addoption(
        '--impact-changed-file',
        action='store',
        default=None,
        dest='impact_changed_file',
        help='File listing changed paths, one per line (relative to the rootdir, like --impact-map)',
    )
    group.addoption(
        '--impact-max-files',
        action='store',
        type=int,
        default=None,
        dest='impact_max_files',
        help='Changed-file count at which every test is selected (default: 300)',
    )


def _parse_changed(value: str | None) -> set[str]:
    if not value:
        return set()
    return {path.strip() for path in value.split(',') if path.strip()}


def pytest_configure(config: pytest.Config) -> None:
    """Compute the selection when --impact is given."""
    if not config.option.impact:
        return

    rootdir = Path(config.rootpath)
    try:
        impact_config = merge_configs(
            load_config(rootdir),
            cli_max_files=config.option.impact_max_files,
            cli_mapping=config.option.impact_map,
        )
        if impact_config.mapping is None:
            msg = 'No mapping given: pass --impact-map or set [tool.pytest-impact] mapping'
            raise ValueError(msg)
        mapping = load_mapping(rootdir / impact_config.mapping)
        changed = _parse_changed(config.option.impact_changed)
        if config.option.impact_changed_file:
            changed |= load_changed_files(rootdir / config.option.impact_changed_file)
        result = select(changed, mapping, impact_config.resolved_max_files)
    except (FileNotFoundError, ValueError) as e:
        raise pytest.UsageError(f'pytest-impact: {e}') from e

    logger.debug('Impact selection: %s', result)
    config.stash[_result_key] = result


def pytest_report_header(config: pytest.Config) -> str | None:
    """Report the selection mode in the session header."""
    result = config.stash.get(_result_key, None)
    if result is None:
        return None
    line = f'impact: {result.mode.value} selection, {len(result.tests)} tests for {result.changed_file_count} changed files'
    if result.reason is not None:
        line += f' ({result.reason.value})'
    return line


def is_selected(nodeid: str, tests: frozenset[str]) -> bool:
    """Check whether a node id falls under any selected test identifier.

    Args:
        nodeid: The pytest node id of a collected item.
        tests: Selected test identifiers.

    Returns:
        True if nodeid equals an identifier, lies beneath it, or is one of
        its parametrized instances.
    """
    for test in tests:
        base = test.rstrip('/')
        if nodeid == base or nodeid.startswith((base + '/', base + '::', base + '[')):
            return True
    return False


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Deselect tests outside the impact selection."""
    result = config.stash.get(_result_key, None)
    if result is None:
        return

    selected: list[pytest.Item] = []
    deselected: list[pytest.Item] = []
    for item in items:
        if is_selected(item.nodeid, result.tests):
            selected.append(item)
        else:
            deselected.append(item)

    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = selected
