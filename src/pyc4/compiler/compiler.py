"""
C4 Compiler Main Module
=======================

This module provides the main compiler interface for C4.
It orchestrates the compilation process:

    Source → Lex → Parse → Instructions

Usage
-----
Command line:
    $ c4cc hello.c -o hello.lst

Programmatic:
    >>> from pyc4.compiler import compile_c
    >>> program = compile_c('printf(1 + 2);')

The compiler produces a tuple of stack machine instructions that the
StackMachine executes directly, or that can be written out as a listing.

Error Handling
--------------
Compilation stops at the first error. The error is raised as a
CompileError subclass carrying the offending token's index and location.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pyc4.compiler.lexer import CLexer
from pyc4.compiler.parser import CParser, DEFAULT_MAX_EXPRESSION_DEPTH
from pyc4.compiler.instructions import Instruction, format_listing

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        max_expression_depth: Maximum nesting of expression parsing.
                              Guards against unbounded recursion on
                              untrusted input.
    """
    max_expression_depth: int = DEFAULT_MAX_EXPRESSION_DEPTH

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            PYC4_MAX_DEPTH: Maximum expression nesting depth (positive integer)

        Returns:
            CompilerOptions with values from environment variables
        """
        options = cls()

        if depth := os.environ.get("PYC4_MAX_DEPTH"):
            try:
                value = int(depth)
            except ValueError:
                logger.warning(f"Ignoring invalid PYC4_MAX_DEPTH={depth!r}")
            else:
                if value > 0:
                    options.max_expression_depth = value
                else:
                    logger.warning(f"Ignoring non-positive PYC4_MAX_DEPTH={depth!r}")

        return options


class C4Compiler:
    """
    C4 compiler.

    This class provides the main interface for compiling C4 source
    code to stack machine instructions.

    Example:
        compiler = C4Compiler()
        result = compiler.compile_source("printf(42);")
        print(result.listing)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> "CompilerResult":
        """
        Compile source code to instructions.

        Args:
            source: Source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult containing the program and diagnostics

        Raises:
            CompileError: If compilation fails
        """
        lexer = CLexer(source, filename)
        parser = CParser(
            lexer.tokenize(),
            filename,
            source.splitlines(),
            max_depth=self.options.max_expression_depth,
        )
        instructions = parser.parse()

        result = CompilerResult(
            filename=filename,
            success=True,
            instructions=instructions,
            token_count=lexer.token_count,
        )
        logger.debug(
            f"Compiled {filename}: {result.token_count} tokens, "
            f"{len(instructions)} instructions"
        )
        return result

    def compile_file(self, filepath: str | Path) -> "CompilerResult":
        """
        Compile a source file to instructions.

        Args:
            filepath: Path to the source file

        Returns:
            CompilerResult containing the program and diagnostics

        Raises:
            CompileError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        instructions: The compiled program
        token_count: Number of tokens lexed, including EOF
    """
    filename: str = ""
    success: bool = False
    instructions: tuple[Instruction, ...] = field(default_factory=tuple)
    token_count: int = 0

    @property
    def listing(self) -> str:
        """The program in listing format."""
        return format_listing(self.instructions)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_c(source: str, filename: str = "<input>") -> tuple[Instruction, ...]:
    """
    Compile source code to instructions.

    This is the primary high-level interface for compiling C4.

    Args:
        source: Source code
        filename: Source filename for error messages

    Returns:
        The compiled program

    Raises:
        CompileError: If compilation fails

    Example:
        >>> [str(i) for i in compile_c("return 10 - 2 - 3;")]
        ['IMM 10', 'IMM 2', 'SUB', 'IMM 3', 'SUB', 'LEV']
    """
    return C4Compiler().compile_source(source, filename).instructions


def compile_file(
    filepath: str | Path,
    output_path: Optional[str | Path] = None,
) -> tuple[Instruction, ...]:
    """
    Compile a source file, optionally writing the listing.

    Args:
        filepath: Path to source file
        output_path: Optional path to write the listing

    Returns:
        The compiled program

    Raises:
        CompileError: If compilation fails
        FileNotFoundError: If source file not found
    """
    result = C4Compiler().compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.listing, encoding="utf-8")

    return result.instructions
