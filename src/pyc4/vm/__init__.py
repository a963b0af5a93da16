"""
Stack Machine
=============

Interpreter for programs produced by pyc4.compiler.

Example:
    >>> from pyc4.vm import StackMachine
    >>> machine = StackMachine.from_listing("IMM 7\\nIMM 5\\nSUB\\nPRTF\\n")
    >>> machine.run().halted
    2
    True
"""

from pyc4.vm.machine import (
    StackMachine,
    MachineOptions,
    MachineState,
    execute,
)

__all__ = [
    "StackMachine",
    "MachineOptions",
    "MachineState",
    "execute",
]
