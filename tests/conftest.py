"""Shared pytest configuration and fixtures for pytest-impact tests."""

from __future__ import annotations

import pytest


@pytest.fixture
def overlapping_mapping() -> dict[str, list[str]]:
    """Mapping whose first prefix also covers the second."""
    return {'src/': ['Tall'], 'src/a/': ['Ta']}
