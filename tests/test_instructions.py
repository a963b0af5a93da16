"""
Instruction Set Tests
=====================

Tests for the opcode table, the Instruction value type and the listing
format.
"""

import pytest
from pyc4.compiler.instructions import (
    Instruction,
    Opcode,
    OpcodeCategory,
    OPCODE_TABLE,
    MNEMONICS,
    get_opcode_info,
    format_listing,
    parse_instruction,
    parse_listing,
    imm,
    ADD,
    MUL,
    PRTF,
    LEV,
)
from pyc4.compiler import compile_c
from pyc4.errors import ErrorKind, UnknownInstructionError


# =============================================================================
# Opcode Table Tests
# =============================================================================

class TestOpcodeTable:
    """Test opcode metadata."""

    def test_every_opcode_described(self):
        assert set(OPCODE_TABLE) == set(Opcode)

    def test_mnemonics(self):
        assert set(MNEMONICS) == {"IMM", "ADD", "SUB", "MUL", "DIV", "MOD", "PRTF", "LEV"}

    def test_stack_effects(self):
        """Binary operators pop two and push one."""
        for opcode in (Opcode.ADD, Opcode.SUB, Opcode.MUL, Opcode.DIV, Opcode.MOD):
            info = get_opcode_info(opcode)
            assert (info.pops, info.pushes) == (2, 1)
            assert info.category == OpcodeCategory.OPERATOR
        assert (get_opcode_info(Opcode.IMM).pops, get_opcode_info(Opcode.IMM).pushes) == (0, 1)
        assert get_opcode_info(Opcode.PRTF).pops == 1
        assert get_opcode_info(Opcode.LEV).pops == 0

    def test_only_imm_has_operand(self):
        assert [op for op, info in OPCODE_TABLE.items() if info.has_operand] == [Opcode.IMM]


# =============================================================================
# Instruction Tests
# =============================================================================

class TestInstruction:
    """Test the Instruction value type."""

    def test_str(self):
        assert str(imm(5)) == "IMM 5"
        assert str(imm(-3)) == "IMM -3"
        assert str(ADD) == "ADD"

    def test_equality(self):
        assert imm(5) == Instruction(Opcode.IMM, 5)
        assert imm(5) != imm(6)
        assert Instruction(Opcode.MUL) == MUL

    def test_immutable(self):
        with pytest.raises(AttributeError):
            imm(1).operand = 2

    def test_imm_requires_operand(self):
        with pytest.raises(ValueError):
            Instruction(Opcode.IMM)

    def test_operator_rejects_operand(self):
        with pytest.raises(ValueError):
            Instruction(Opcode.ADD, 1)

    def test_mnemonic(self):
        assert PRTF.mnemonic == "PRTF"
        assert LEV.info.category == OpcodeCategory.CONTROL


# =============================================================================
# Listing Format Tests
# =============================================================================

class TestListing:
    """Test listing encoding and decoding."""

    def test_format(self):
        program = compile_c("printf(2 + 3 * 4);")
        assert format_listing(program) == "IMM 2\nIMM 3\nIMM 4\nMUL\nADD\nPRTF\n"

    def test_format_empty(self):
        assert format_listing(()) == ""

    def test_round_trip(self):
        """Formatting then decoding restores the program."""
        program = compile_c("printf(2 + 3 * 4); return 10 - 2 - 3;")
        assert parse_listing(format_listing(program)) == program

    def test_comments_and_blank_lines(self):
        text = "; computes 6\n\nIMM 2\n  IMM 3   ; operand\nMUL\n\nPRTF\n"
        assert parse_listing(text) == (imm(2), imm(3), MUL, PRTF)

    def test_case_insensitive(self):
        assert parse_instruction("imm 4") == imm(4)
        assert parse_instruction("Prtf") == PRTF

    def test_signed_operands(self):
        assert parse_instruction("IMM -12") == imm(-12)
        assert parse_instruction("IMM +12") == imm(12)

    @pytest.mark.parametrize("text", [
        "PUSH 1",       # unknown mnemonic
        "IMMX 1",       # prefix of a mnemonic is not enough
        "IMM",          # missing operand
        "IMM 1 2",      # extra operand
        "IMM x",        # non-numeric operand
        "IMM 1_000",    # digit separators are not decimal
        "ADD 1",        # operand on operand-less opcode
    ])
    def test_invalid_instruction(self, text):
        with pytest.raises(UnknownInstructionError) as exc_info:
            parse_instruction(text)
        assert exc_info.value.kind == ErrorKind.RUNTIME

    def test_error_reports_listing_line(self):
        with pytest.raises(UnknownInstructionError) as exc_info:
            parse_listing("IMM 1\nPRTF\nJMP 0\n")
        assert exc_info.value.line == 3
        assert "listing line 3" in str(exc_info.value)
