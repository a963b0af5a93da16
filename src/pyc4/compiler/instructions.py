"""
Stack Machine Instruction Set
=============================

Defines the opcodes shared by the parser (which emits them) and the
stack machine (which executes them), together with the textual listing
format used to store and inspect compiled programs.

Opcode Overview:
    IMM n   push the immediate integer n
    ADD     pop b, pop a, push a + b
    SUB     pop b, pop a, push a - b
    MUL     pop b, pop a, push a * b
    DIV     pop b, pop a, push a / b (truncated toward zero)
    MOD     pop b, pop a, push a % b (sign of a)
    PRTF    pop a value and print it as a decimal line
    LEV     leave: halt execution immediately

Instructions are typed values (opcode plus optional integer operand)
decided at parse time. The listing format is only an interchange
encoding; the machine never re-parses instruction text while running.

Listing Format:
    ; comment lines and blank lines are ignored
    IMM 2
    IMM 3
    ADD
    PRTF
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, Optional, Tuple
import re

from pyc4.errors import UnknownInstructionError


# =============================================================================
# Opcode Definitions
# =============================================================================

class Opcode(Enum):
    """Stack machine operation codes."""
    IMM = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    PRTF = auto()
    LEV = auto()


class OpcodeCategory(Enum):
    """Categories of opcodes for documentation."""
    STACK = auto()        # Push values
    OPERATOR = auto()     # Binary arithmetic
    IO = auto()           # Output
    CONTROL = auto()      # Flow control


@dataclass(frozen=True)
class OpcodeInfo:
    """Information about an opcode."""
    opcode: Opcode
    mnemonic: str
    has_operand: bool
    pops: int
    pushes: int
    category: OpcodeCategory
    description: str


# =============================================================================
# Opcode Table
# =============================================================================

OPCODE_TABLE: Dict[Opcode, OpcodeInfo] = {
    Opcode.IMM: OpcodeInfo(Opcode.IMM, "IMM", True, 0, 1, OpcodeCategory.STACK,
                           "Push immediate integer"),
    Opcode.ADD: OpcodeInfo(Opcode.ADD, "ADD", False, 2, 1, OpcodeCategory.OPERATOR,
                           "Add top two stack values"),
    Opcode.SUB: OpcodeInfo(Opcode.SUB, "SUB", False, 2, 1, OpcodeCategory.OPERATOR,
                           "Subtract (second - top)"),
    Opcode.MUL: OpcodeInfo(Opcode.MUL, "MUL", False, 2, 1, OpcodeCategory.OPERATOR,
                           "Multiply"),
    Opcode.DIV: OpcodeInfo(Opcode.DIV, "DIV", False, 2, 1, OpcodeCategory.OPERATOR,
                           "Integer divide (second / top)"),
    Opcode.MOD: OpcodeInfo(Opcode.MOD, "MOD", False, 2, 1, OpcodeCategory.OPERATOR,
                           "Remainder (second % top)"),
    Opcode.PRTF: OpcodeInfo(Opcode.PRTF, "PRTF", False, 1, 0, OpcodeCategory.IO,
                            "Pop and print top of stack"),
    Opcode.LEV: OpcodeInfo(Opcode.LEV, "LEV", False, 0, 0, OpcodeCategory.CONTROL,
                           "Leave (halt execution)"),
}

# Mnemonic lookup for listing decoding
MNEMONICS: Dict[str, Opcode] = {info.mnemonic: op for op, info in OPCODE_TABLE.items()}

# Signed decimal operand of IMM
_OPERAND_PATTERN = re.compile(r"[+-]?[0-9]+")


def get_opcode_info(opcode: Opcode) -> OpcodeInfo:
    """Get information about an opcode."""
    return OPCODE_TABLE[opcode]


# =============================================================================
# Instruction
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    A single stack machine instruction.

    Attributes:
        opcode: The operation to perform
        operand: Immediate value for IMM, None for every other opcode
    """
    opcode: Opcode
    operand: Optional[int] = None

    def __post_init__(self):
        info = OPCODE_TABLE[self.opcode]
        if info.has_operand and not isinstance(self.operand, int):
            raise ValueError(f"{info.mnemonic} requires an integer operand")
        if not info.has_operand and self.operand is not None:
            raise ValueError(f"{info.mnemonic} takes no operand")

    def __str__(self) -> str:
        """Listing form, e.g. 'IMM 5' or 'ADD'."""
        if self.operand is not None:
            return f"{self.mnemonic} {self.operand}"
        return self.mnemonic

    @property
    def mnemonic(self) -> str:
        return OPCODE_TABLE[self.opcode].mnemonic

    @property
    def info(self) -> OpcodeInfo:
        return OPCODE_TABLE[self.opcode]


def imm(value: int) -> Instruction:
    """Build an IMM instruction."""
    return Instruction(Opcode.IMM, value)


# Shared operand-less instructions
ADD = Instruction(Opcode.ADD)
SUB = Instruction(Opcode.SUB)
MUL = Instruction(Opcode.MUL)
DIV = Instruction(Opcode.DIV)
MOD = Instruction(Opcode.MOD)
PRTF = Instruction(Opcode.PRTF)
LEV = Instruction(Opcode.LEV)


# =============================================================================
# Listing Encoding
# =============================================================================

def format_listing(program: Iterable[Instruction]) -> str:
    """
    Format a program as a listing, one instruction per line.

    Args:
        program: Instructions in execution order

    Returns:
        Listing text ending with a newline (empty string for no instructions)
    """
    lines = [str(instruction) for instruction in program]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def parse_instruction(text: str, line: Optional[int] = None) -> Instruction:
    """
    Decode one listing line into an instruction.

    Mnemonics are matched exactly (case-insensitive). IMM takes exactly
    one signed decimal operand, every other opcode takes none.

    Args:
        text: The instruction text, e.g. "IMM 5"
        line: Listing line number for error messages

    Returns:
        The decoded Instruction

    Raises:
        UnknownInstructionError: If the text is not a valid instruction
    """
    parts = text.split()
    if not parts:
        raise UnknownInstructionError(text, line=line)

    opcode = MNEMONICS.get(parts[0].upper())
    if opcode is None:
        raise UnknownInstructionError(text.strip(), line=line)

    operands = parts[1:]
    if OPCODE_TABLE[opcode].has_operand:
        if len(operands) != 1:
            raise UnknownInstructionError(text.strip(), line=line)
        if not _OPERAND_PATTERN.fullmatch(operands[0]):
            raise UnknownInstructionError(text.strip(), line=line)
        return Instruction(opcode, int(operands[0]))

    if operands:
        raise UnknownInstructionError(text.strip(), line=line)
    return Instruction(opcode)


def parse_listing(text: str) -> Tuple[Instruction, ...]:
    """
    Decode a whole listing.

    Blank lines and lines starting with ';' are skipped. Trailing
    '; comment' text after an instruction is also ignored.

    Args:
        text: Listing text

    Returns:
        Tuple of instructions in listing order

    Raises:
        UnknownInstructionError: On the first line that does not decode
    """
    program = []
    for line_number, raw in enumerate(text.splitlines(), start=1):
        code = raw.split(";", 1)[0].strip()
        if not code:
            continue
        program.append(parse_instruction(code, line=line_number))
    return tuple(program)
