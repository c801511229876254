"""Plain-text reporter for test selections.

Writes one test identifier per line, the format test runners and shell
pipelines (``xargs pytest``) consume directly.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO


if TYPE_CHECKING:
    from pytest_impact.selection.selector import SelectionResult


class TextReporter:
    """Reporter that writes selected tests as sorted lines.

    Attributes:
        output: The file-like object to write to.
    """

    def __init__(self, output: TextIO | None = None) -> None:
        """Initialize the text reporter.

        Args:
            output: File-like object to write to. Defaults to sys.stdout.
        """
        self.output = output or sys.stdout

    def write_report(self, result: SelectionResult) -> None:
        """Write the selected tests, one per line."""
        for test in sorted(result.tests):
            self.output.write(test + '\n')
