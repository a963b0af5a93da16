"""
pyc4 Error Hierarchy
====================

This module defines the exception hierarchy shared by every stage of the
pyc4 pipeline. All exceptions inherit from C4Error, allowing callers to
catch any tokenizer, parser or interpreter failure with a single except
clause if desired.

Exception Hierarchy
-------------------
C4Error (base)
├── CompileError (see pyc4.compiler.errors)
│   ├── CSyntaxError - expected-token mismatches, malformed statements
│   │   └── LexicalError - unknown characters, oversized literals
│   └── CSemanticError - identifiers without storage
└── MachineError (stack machine faults)
    ├── StackUnderflowError - too few operands for an instruction
    ├── StackOverflowError - operand stack exceeded its configured depth
    ├── DivisionByZeroError - DIV or MOD with a zero divisor
    ├── ArithmeticOverflowError - result outside the signed 64-bit range
    └── UnknownInstructionError - instruction the machine cannot execute

Every error reports an ErrorKind so a driver can classify the failure
without inspecting the concrete class.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# Signed 64-bit range used for literals and arithmetic results
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


# =============================================================================
# Error Classification
# =============================================================================

class ErrorKind(Enum):
    """Broad category of a pipeline failure."""
    LEXICAL = "lexical"
    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    RUNTIME = "runtime"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Base Exception Class
# =============================================================================

class C4Error(Exception):
    """
    Base exception for all pyc4 errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch every pipeline failure with a single except clause:

        try:
            compile_c(source)
        except C4Error as e:
            print(f"{e.kind} error: {e}")
    """

    kind: ErrorKind = ErrorKind.SYNTAX


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Stack Machine Exceptions
# =============================================================================

class MachineError(C4Error):
    """
    Base exception for faults raised while executing instructions.

    Every machine fault is fatal to the running program. The instruction
    pointer and the offending instruction are kept so a driver can point
    at the exact place execution stopped.

    Attributes:
        message: The fault description
        ip: Index of the faulting instruction (None if not executing)
        instruction: The faulting instruction or raw value
        hint: A suggestion for fixing the program (optional)
    """

    kind = ErrorKind.RUNTIME

    def __init__(
        self,
        message: str,
        ip: Optional[int] = None,
        instruction: Any = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.ip = ip
        self.instruction = instruction
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the fault with the instruction position and optional hint.

        Example output:
            runtime error at instruction 4 (DIV): division by zero
            hint: check the divisor of the expression
        """
        if self.ip is not None:
            text = f"runtime error at instruction {self.ip}"
            if self.instruction is not None:
                text += f" ({self.instruction})"
            parts = [f"{text}: {self.message}"]
        else:
            parts = [f"runtime error: {self.message}"]

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class StackUnderflowError(MachineError):
    """
    Instruction executed with too few operands on the stack.

    Arithmetic instructions need two operands and PRTF needs one. A program
    produced by the parser never underflows, so this usually means a
    hand-written listing is malformed.
    """

    def __init__(
        self,
        mnemonic: str,
        required: int,
        available: int,
        ip: Optional[int] = None,
        instruction: Any = None,
    ):
        self.mnemonic = mnemonic
        self.required = required
        self.available = available

        word = "operand" if required == 1 else "operands"
        super().__init__(
            f"stack underflow: {mnemonic} needs {required} {word}, "
            f"{available} available",
            ip=ip,
            instruction=instruction,
        )


class StackOverflowError(MachineError):
    """Operand stack grew past the configured maximum depth."""

    def __init__(
        self,
        limit: int,
        ip: Optional[int] = None,
        instruction: Any = None,
    ):
        self.limit = limit
        super().__init__(
            f"stack overflow: more than {limit} operands",
            ip=ip,
            instruction=instruction,
            hint="raise max_stack_depth or split the expression",
        )


class DivisionByZeroError(MachineError):
    """
    DIV or MOD executed with a zero divisor.

    Raised instead of leaving the result to host arithmetic.
    """

    def __init__(
        self,
        mnemonic: str,
        ip: Optional[int] = None,
        instruction: Any = None,
    ):
        self.mnemonic = mnemonic
        operation = "modulo" if mnemonic == "MOD" else "division"
        super().__init__(
            f"{operation} by zero",
            ip=ip,
            instruction=instruction,
        )


class ArithmeticOverflowError(MachineError):
    """
    Arithmetic result does not fit in a signed 64-bit integer.

    Python integers never overflow, so the range is checked explicitly
    rather than wrapping or saturating.
    """

    def __init__(
        self,
        mnemonic: str,
        value: int,
        ip: Optional[int] = None,
        instruction: Any = None,
    ):
        self.mnemonic = mnemonic
        self.value = value
        super().__init__(
            f"arithmetic overflow: {mnemonic} result {value} does not fit "
            f"in 64 bits",
            ip=ip,
            instruction=instruction,
        )


class UnknownInstructionError(MachineError):
    """
    Instruction the machine does not recognize.

    Raised both when a listing line cannot be decoded and when the run
    loop meets something that is not a known instruction. The machine
    never silently skips an instruction.
    """

    def __init__(
        self,
        text: str,
        ip: Optional[int] = None,
        line: Optional[int] = None,
    ):
        self.text = text
        self.line = line
        message = f"unknown instruction '{text}'"
        if line is not None:
            message += f" on listing line {line}"
        super().__init__(message, ip=ip)
