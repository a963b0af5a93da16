"""
pyc4 - A Tiny C-Like Expression Compiler and Stack Machine
==========================================================

This package compiles a small C-like language of printf and return
statements into instructions for a stack machine, and runs them.

Pipeline
--------
    source text → CLexer (tokens) → CParser (instructions) → StackMachine (output)

Main Components
---------------
- **compiler**: tokenizer, precedence-climbing parser, instruction set (c4cc)
- **vm**: stack machine interpreter (c4run)
- **pipeline**: one-call compile-and-run returning a structured result

Quick Start
-----------
Compile and run in one step:
    >>> from pyc4 import run_source
    >>> result = run_source("printf(2 + 3 * 4); return 10 - 2 - 3;")
    >>> result.output, result.exit_value
    ('14\\n', 5)

Or stage by stage:
    >>> from pyc4 import compile_c, StackMachine
    >>> machine = StackMachine(compile_c("printf(6 / 4);"))
    >>> machine.run().halted
    1
    True

Or use the command-line tools:
    $ c4cc hello.c -o hello.lst
    $ c4run hello.c
    $ c4run --listing hello.lst
"""

__version__ = "1.0.0"
__author__ = "pyc4 Contributors"

from pyc4.errors import (
    C4Error,
    ErrorKind,
    SourceLocation,
    MachineError,
    StackUnderflowError,
    StackOverflowError,
    DivisionByZeroError,
    ArithmeticOverflowError,
    UnknownInstructionError,
)
from pyc4.compiler import (
    C4Compiler,
    CompilerOptions,
    CompileError,
    CLexer,
    CParser,
    Instruction,
    Opcode,
    compile_c,
    format_listing,
    parse_listing,
)
from pyc4.vm import StackMachine, MachineOptions, MachineState
from pyc4.pipeline import RunResult, run_source, run_file

__all__ = [
    # Version
    "__version__",
    # Errors
    "C4Error",
    "ErrorKind",
    "SourceLocation",
    "CompileError",
    "MachineError",
    "StackUnderflowError",
    "StackOverflowError",
    "DivisionByZeroError",
    "ArithmeticOverflowError",
    "UnknownInstructionError",
    # Compiler
    "C4Compiler",
    "CompilerOptions",
    "CLexer",
    "CParser",
    "Instruction",
    "Opcode",
    "compile_c",
    "format_listing",
    "parse_listing",
    # Machine
    "StackMachine",
    "MachineOptions",
    "MachineState",
    # Pipeline
    "RunResult",
    "run_source",
    "run_file",
]
