"""Change-impact test selection.

This module answers one question for a build pipeline: which tests must run
for this change? A precomputed mapping ties path prefixes to the test suites
they affect:

    mapping = {
        "src/auth/": ["tests/small/auth"],
        "src/shipping/": ["tests/small/shipping"],
    }

    # src/auth/login.py changed -> run tests/small/auth only

Whenever precise attribution cannot be trusted (no diff, an oversized diff,
or a file no prefix covers) every test in the mapping is selected.

Exports:
    select_tests: Select the tests for a set of changed files
    select: Same selection, with the mode and escalation reason
    SelectionResult: Outcome of a selection
    load_mapping: Load the mapping artifact from JSON
"""

from __future__ import annotations

from pytest_impact.selection.mapping import load_changed_files, load_mapping, parse_changed_files
from pytest_impact.selection.selector import (
    DEFAULT_MAX_FILES,
    EscalationReason,
    SelectionMode,
    SelectionResult,
    full_mapping,
    select,
    select_tests,
    select_tests_from_file,
)


__all__ = [
    'DEFAULT_MAX_FILES',
    'EscalationReason',
    'SelectionMode',
    'SelectionResult',
    'full_mapping',
    'load_changed_files',
    'load_mapping',
    'parse_changed_files',
    'select',
    'select_tests',
    'select_tests_from_file',
]
