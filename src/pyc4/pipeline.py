"""
End-to-End Pipeline
===================

Runs source text through the whole toolchain: lexer, parser and stack
machine. Unlike the individual stages, run_source() never raises a
C4Error; failures come back as a structured RunResult so a driver can
report them and pick an exit code.

Example:
    >>> result = run_source("printf(2 + 3 * 4);")
    >>> result.output
    '14\\n'
    >>> run_source("printf(2 + 3;").error_kind
    <ErrorKind.SYNTAX: 'syntax'>
"""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pyc4.errors import C4Error, ErrorKind
from pyc4.compiler.compiler import C4Compiler, CompilerOptions
from pyc4.compiler.errors import CompileError
from pyc4.compiler.instructions import Instruction
from pyc4.vm.machine import MachineOptions, StackMachine

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """
    Outcome of compiling and running a program.

    Attributes:
        success: True if the program compiled and ran without a fault
        output: Everything PRTF printed, one decimal per line
        exit_value: Value left by return, or None
        instructions: The compiled program (empty if compilation failed)
        error: The failure, if any
    """
    success: bool = False
    output: str = ""
    exit_value: Optional[int] = None
    instructions: tuple[Instruction, ...] = field(default_factory=tuple)
    error: Optional[C4Error] = None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    @property
    def token_index(self) -> Optional[int]:
        """Index of the offending token for compile errors."""
        if isinstance(self.error, CompileError):
            return self.error.token_index
        return None

    @property
    def output_lines(self) -> list[str]:
        return self.output.splitlines()


def run_source(
    source: str,
    filename: str = "<input>",
    compiler_options: Optional[CompilerOptions] = None,
    machine_options: Optional[MachineOptions] = None,
) -> RunResult:
    """
    Compile and run source code.

    A compile error produces no output at all. A runtime fault keeps the
    output printed before the fault.

    Args:
        source: Program source
        filename: Source filename for error messages
        compiler_options: Compiler configuration (defaults if None)
        machine_options: Machine configuration (defaults if None)

    Returns:
        RunResult describing the outcome
    """
    compiler = C4Compiler(compiler_options)
    try:
        compiled = compiler.compile_source(source, filename)
    except CompileError as e:
        logger.debug(f"Compilation of {filename} failed: {e.kind}")
        return RunResult(success=False, error=e)

    return run_program(compiled.instructions, machine_options)


def run_program(
    program: tuple[Instruction, ...],
    machine_options: Optional[MachineOptions] = None,
) -> RunResult:
    """
    Run an already compiled program, capturing its output.

    Returns:
        RunResult describing the outcome
    """
    buffer = io.StringIO()
    machine = StackMachine(program, machine_options, output=buffer)
    try:
        machine.run()
    except C4Error as e:
        logger.debug(f"Execution stopped at instruction {machine.state.ip}: {e.kind}")
        return RunResult(
            success=False,
            output=buffer.getvalue(),
            instructions=machine.program,
            error=e,
        )

    return RunResult(
        success=True,
        output=buffer.getvalue(),
        exit_value=machine.exit_value,
        instructions=machine.program,
    )


def run_file(
    filepath: str | Path,
    compiler_options: Optional[CompilerOptions] = None,
    machine_options: Optional[MachineOptions] = None,
) -> RunResult:
    """
    Compile and run a source file.

    Raises:
        FileNotFoundError: If the source file does not exist
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {filepath}")

    source = path.read_text(encoding="utf-8")
    return run_source(source, str(filepath), compiler_options, machine_options)
