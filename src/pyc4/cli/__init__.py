"""
pyc4 Command-Line Interface
===========================

This package provides command-line tools for pyc4:

- **c4cc**: compiler, writes an instruction listing
- **c4run**: runs a source file or a listing on the stack machine

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["c4cc", "c4run"]
