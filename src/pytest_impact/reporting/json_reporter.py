"""JSON reporter for test selections.

Produces machine-readable JSON output for CI pipelines that feed the
selected tests to a test runner.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from pathlib import Path

    from pytest_impact.selection.selector import SelectionResult


class JsonReporter:
    """Reporter that produces JSON output for CI integration.

    JSON structure:
        {
            "mode": "precise",
            "reason": null,
            "changed_file_count": 2,
            "unmapped_file": null,
            "tests": ["tests/small/auth", "tests/small/shipping"]
        }

    Tests are sorted so reports diff cleanly between runs.
    """

    def to_json(self, result: SelectionResult) -> str:
        """Convert a selection to a JSON string.

        Args:
            result: The SelectionResult to convert.

        Returns:
            Pretty-printed JSON string.
        """
        return json.dumps(self._build_report_data(result), indent=2)

    def write_report(self, result: SelectionResult, output_path: Path) -> None:
        """Write a selection report to a JSON file.

        Args:
            result: The SelectionResult to write.
            output_path: Path to the output JSON file.
        """
        output_path.write_text(self.to_json(result) + '\n')

    def _build_report_data(self, result: SelectionResult) -> dict[str, Any]:
        return {
            'mode': result.mode.value,
            'reason': result.reason.value if result.reason is not None else None,
            'changed_file_count': result.changed_file_count,
            'unmapped_file': result.unmapped_file,
            'tests': sorted(result.tests),
        }
