"""pyc4 test suite."""
