"""Test package marker for the mailaccess suites.

What:
  Marks ``tests`` as a package so ``tests.unit`` and ``tests.e2e`` resolve
  deterministically when referenced explicitly.

Invariants & Safety:
  - Importing ``tests`` has no side effects; path setup lives in
    ``conftest.py``.
"""
