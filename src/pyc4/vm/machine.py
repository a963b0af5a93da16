"""
Stack Machine Interpreter
=========================

Executes compiled instruction sequences against an operand stack.

Control flow is strictly linear: execution starts at instruction 0 and
moves forward one instruction at a time until LEV or the end of the
program. There are no jumps.

Arithmetic follows C semantics on signed 64-bit integers:
- DIV truncates toward zero, MOD takes the sign of the dividend
- a zero divisor raises DivisionByZeroError
- a result outside the 64-bit range raises ArithmeticOverflowError

Example:
    >>> from pyc4.compiler import compile_c
    >>> machine = StackMachine(compile_c("printf(2 + 3 * 4);"))
    >>> state = machine.run()
    14
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, TextIO

from pyc4.errors import (
    INT_MAX,
    INT_MIN,
    ArithmeticOverflowError,
    DivisionByZeroError,
    StackOverflowError,
    StackUnderflowError,
    UnknownInstructionError,
)
from pyc4.compiler.instructions import (
    Instruction,
    Opcode,
    OPCODE_TABLE,
    parse_listing,
)

logger = logging.getLogger(__name__)


# Default limit on operand stack depth
DEFAULT_MAX_STACK_DEPTH = 1024


@dataclass
class MachineOptions:
    """
    Stack machine configuration.

    Attributes:
        max_stack_depth: Maximum number of operands on the stack
        trace: Log every executed instruction at INFO level
    """
    max_stack_depth: int = DEFAULT_MAX_STACK_DEPTH
    trace: bool = False

    @classmethod
    def from_env(cls) -> "MachineOptions":
        """
        Create MachineOptions from environment variables.

        Environment variables (all optional):
            PYC4_MAX_STACK: Maximum operand stack depth (positive integer)
            PYC4_TRACE: Set to 1/true/yes to trace execution
        """
        options = cls()

        if depth := os.environ.get("PYC4_MAX_STACK"):
            try:
                value = int(depth)
            except ValueError:
                logger.warning(f"Ignoring invalid PYC4_MAX_STACK={depth!r}")
            else:
                if value > 0:
                    options.max_stack_depth = value
                else:
                    logger.warning(f"Ignoring non-positive PYC4_MAX_STACK={depth!r}")

        if trace := os.environ.get("PYC4_TRACE"):
            options.trace = trace.lower() in ("1", "true", "yes")

        return options


@dataclass
class MachineState:
    """
    Complete machine state.

    Attributes:
        ip: Index of the next instruction to execute
        stack: Operand stack, top at the end
        halted: True once LEV ran or the program ended
        steps: Number of instructions executed
    """
    ip: int = 0
    stack: list[int] = field(default_factory=list)
    halted: bool = False
    steps: int = 0


def _truncating_div(a: int, b: int) -> int:
    """Integer division truncated toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _truncating_mod(a: int, b: int) -> int:
    """Remainder matching _truncating_div (sign of the dividend)."""
    return a - b * _truncating_div(a, b)


# Binary arithmetic: second operand popped is the left operand
_ARITHMETIC: dict[Opcode, Callable[[int, int], int]] = {
    Opcode.ADD: lambda a, b: a + b,
    Opcode.SUB: lambda a, b: a - b,
    Opcode.MUL: lambda a, b: a * b,
    Opcode.DIV: _truncating_div,
    Opcode.MOD: _truncating_mod,
}


class StackMachine:
    """
    Stack-based interpreter for compiled programs.

    The program is fixed at construction and never modified. The operand
    stack is the only mutable runtime data, owned by this machine.

    Instrumentation:
        on_instruction(ip, instruction) -> bool is called before each
        instruction executes. Returning False stops execution without
        halting the machine, so run() can be called again to resume.

    Example:
        >>> machine = StackMachine(program)
        >>> machine.run()
        >>> print(machine.exit_value)

    Attributes:
        program: The instructions being executed
        options: Machine configuration
        output: Text stream PRTF writes to
        output_lines: Every line printed so far
    """

    def __init__(
        self,
        program: Iterable[Instruction],
        options: Optional[MachineOptions] = None,
        output: Optional[TextIO] = None,
    ):
        """
        Initialize the machine.

        Args:
            program: Instructions to execute
            options: Machine configuration (uses defaults if None)
            output: Stream for PRTF output (default: sys.stdout)
        """
        self.program: tuple = tuple(program)
        self.options = options or MachineOptions()
        self.output = output
        self.output_lines: list[str] = []
        self.state = MachineState()

        # on_instruction(ip, instruction) -> bool: return False to stop execution
        self.on_instruction: Optional[Callable[[int, Instruction], bool]] = None

    @classmethod
    def from_listing(
        cls,
        text: str,
        options: Optional[MachineOptions] = None,
        output: Optional[TextIO] = None,
    ) -> "StackMachine":
        """
        Create a machine from listing text.

        Raises:
            UnknownInstructionError: If a listing line does not decode
        """
        return cls(parse_listing(text), options, output)

    # ========================================
    # State Access
    # ========================================

    @property
    def stack(self) -> list[int]:
        return self.state.stack

    @property
    def halted(self) -> bool:
        return self.state.halted

    @property
    def exit_value(self) -> Optional[int]:
        """Top of stack once halted (the value of a return), else None."""
        if self.state.halted and self.state.stack:
            return self.state.stack[-1]
        return None

    def reset(self) -> None:
        """Clear the stack and output, and restart at instruction 0."""
        self.state = MachineState()
        self.output_lines = []

    # ========================================
    # Execution
    # ========================================

    def run(self) -> MachineState:
        """
        Execute until LEV, the end of the program, or a hook stop.

        Returns:
            The machine state after execution stops

        Raises:
            MachineError: On the first runtime fault
        """
        while not self.state.halted:
            if self.on_instruction is not None and self.state.ip < len(self.program):
                if not self.on_instruction(self.state.ip, self.program[self.state.ip]):
                    break
            self.step()

        return self.state

    def step(self) -> bool:
        """
        Execute exactly one instruction.

        Returns:
            False if the machine is halted after this step, True otherwise
        """
        state = self.state
        if state.halted:
            return False

        if state.ip >= len(self.program):
            state.halted = True
            logger.debug("End of program reached")
            return False

        ip = state.ip
        instruction = self.program[ip]

        if not isinstance(instruction, Instruction) or instruction.opcode not in OPCODE_TABLE:
            raise UnknownInstructionError(str(instruction), ip=ip)

        if self.options.trace:
            logger.info(f"{ip:04d}  {str(instruction):<24} stack={state.stack}")
        else:
            logger.debug(f"{ip:04d}  {instruction}")

        self._execute(ip, instruction)
        state.steps += 1

        if not state.halted:
            state.ip += 1
        return not state.halted

    def _execute(self, ip: int, instruction: Instruction) -> None:
        """Dispatch a single decoded instruction."""
        opcode = instruction.opcode
        self._require(ip, instruction)

        if opcode == Opcode.IMM:
            value = instruction.operand
            if not INT_MIN <= value <= INT_MAX:
                raise ArithmeticOverflowError("IMM", value, ip=ip, instruction=instruction)
            self._push(ip, instruction, value)

        elif opcode in _ARITHMETIC:
            b = self.state.stack.pop()
            a = self.state.stack.pop()
            if b == 0 and opcode in (Opcode.DIV, Opcode.MOD):
                raise DivisionByZeroError(instruction.mnemonic, ip=ip, instruction=instruction)
            result = _ARITHMETIC[opcode](a, b)
            if not INT_MIN <= result <= INT_MAX:
                raise ArithmeticOverflowError(
                    instruction.mnemonic, result, ip=ip, instruction=instruction
                )
            self._push(ip, instruction, result)

        elif opcode == Opcode.PRTF:
            self._print(self.state.stack.pop())

        elif opcode == Opcode.LEV:
            self.state.halted = True
            logger.debug(f"LEV at instruction {ip}, stack={self.state.stack}")

        else:
            raise UnknownInstructionError(str(instruction), ip=ip)

    def _require(self, ip: int, instruction: Instruction) -> None:
        """Check the stack holds enough operands for the instruction."""
        needed = OPCODE_TABLE[instruction.opcode].pops
        available = len(self.state.stack)
        if available < needed:
            raise StackUnderflowError(
                instruction.mnemonic, needed, available, ip=ip, instruction=instruction
            )

    def _push(self, ip: int, instruction: Instruction, value: int) -> None:
        if len(self.state.stack) >= self.options.max_stack_depth:
            raise StackOverflowError(self.options.max_stack_depth, ip=ip, instruction=instruction)
        self.state.stack.append(value)

    def _print(self, value: int) -> None:
        line = str(value)
        self.output_lines.append(line)
        stream = self.output if self.output is not None else sys.stdout
        stream.write(line + "\n")


# =============================================================================
# Convenience Functions
# =============================================================================

def execute(
    program: Iterable[Instruction],
    options: Optional[MachineOptions] = None,
    output: Optional[TextIO] = None,
) -> StackMachine:
    """
    Run a program to completion.

    Returns:
        The halted machine, for inspecting exit_value and output_lines

    Raises:
        MachineError: On the first runtime fault
    """
    machine = StackMachine(program, options, output)
    machine.run()
    return machine
