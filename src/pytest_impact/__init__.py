"""pytest-impact: change-impact test selection for pytest.

Run only the tests a change can affect, and everything when in doubt.

pytest-impact reads a mapping from source path prefixes to the test suites
they affect and selects the tests to run for a set of changed files. When
the change cannot be attributed precisely, the whole mapping is selected.

Example:
    Print the tests to run for a change::

        $ git diff --name-only origin/main | pytest-impact --map impact.json --changed-files -

    Deselect unaffected tests in a pytest run::

        $ pytest --impact --impact-map impact.json --impact-changed src/auth/login.py
"""

from __future__ import annotations


__version__ = '0.3.0'
__all__ = ['__version__']
