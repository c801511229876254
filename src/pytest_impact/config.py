"""Configuration loading for pytest-impact.

This module reads configuration from pyproject.toml [tool.pytest-impact]
section and provides sensible defaults when configuration is absent.
"""

from __future__ import annotations

from dataclasses import dataclass
import tomllib
from typing import TYPE_CHECKING

from pytest_impact.selection.selector import DEFAULT_MAX_FILES


if TYPE_CHECKING:
    from pathlib import Path


@dataclass
class ImpactConfig:
    """Configuration for pytest-impact.

    All fields are optional and default to None, meaning the CLI or plugin
    will use built-in defaults.

    Attributes:
        max_files: Changed-file count at which the full mapping is selected.
        mapping: Path to the JSON mapping artifact, relative to the project root.
    """

    max_files: int | None = None
    mapping: str | None = None

    @property
    def resolved_max_files(self) -> int:
        """Return the configured threshold, or the default when unset."""
        return self.max_files if self.max_files is not None else DEFAULT_MAX_FILES


def load_config(rootdir: Path) -> ImpactConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.pytest-impact] section from pyproject.toml in the
    given directory. Returns default configuration if the file or section
    does not exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        ImpactConfig with values from pyproject.toml or defaults.

    Raises:
        ValueError: If max-files is not an integer or mapping is not a non-empty string.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return ImpactConfig()

    with pyproject_path.open('rb') as f:
        data = tomllib.load(f)

    tool_config = data.get('tool', {}).get('pytest-impact', {})

    max_files = tool_config.get('max-files')
    if max_files is not None and (isinstance(max_files, bool) or not isinstance(max_files, int)):
        msg = f'[tool.pytest-impact] max-files must be an integer, got {max_files!r}'
        raise ValueError(msg)

    mapping = tool_config.get('mapping')
    if mapping is not None and (not isinstance(mapping, str) or not mapping.strip()):
        msg = f'[tool.pytest-impact] mapping must be a non-empty path string, got {mapping!r}'
        raise ValueError(msg)

    return ImpactConfig(
        max_files=max_files,
        mapping=mapping,
    )


def merge_configs(
    file_config: ImpactConfig,
    cli_max_files: int | None = None,
    cli_mapping: str | None = None,
) -> ImpactConfig:
    """Merge CLI arguments with file configuration.

    CLI arguments take precedence over pyproject.toml configuration.
    Empty strings are treated as not provided.

    Args:
        file_config: Configuration loaded from pyproject.toml.
        cli_max_files: Threshold from CLI (--max-files / --impact-max-files).
        cli_mapping: Mapping path from CLI (--map / --impact-map).

    Returns:
        ImpactConfig with CLI values overriding file config where provided.
    """
    max_files = cli_max_files if cli_max_files is not None else file_config.max_files

    mapping: str | None = None
    if cli_mapping and cli_mapping.strip():
        mapping = cli_mapping.strip()
    elif file_config.mapping is not None:
        mapping = file_config.mapping

    return ImpactConfig(max_files=max_files, mapping=mapping)
