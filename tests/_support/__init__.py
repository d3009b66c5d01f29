"""
Test support utilities for quarry tests.

Table declarations and DB-API doubles that are imported by tests (and by
the CLI tests as ``module:TableClass`` targets), kept out of conftest.py so
they are importable as ``tests._support``.
"""
