"""Reporting module for pytest-impact selections.

Reporters render a SelectionResult for humans (one test per line) or for
machines (JSON with the selection mode and escalation reason).
"""

from pytest_impact.reporting.json_reporter import JsonReporter
from pytest_impact.reporting.text import TextReporter


__all__ = ['JsonReporter', 'TextReporter']
