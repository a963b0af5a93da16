"""
C4 Parser Tests
===============

Tests for the precedence-climbing parser: instruction emission,
operator binding, statement forms and syntax errors.
"""

import pytest
from pyc4.compiler.lexer import CLexer, CToken, CTokenType
from pyc4.compiler.parser import (
    CParser,
    PRECEDENCE,
    get_precedence,
    parse_source,
)
from pyc4.compiler.instructions import (
    Instruction,
    Opcode,
    imm,
    ADD,
    SUB,
    MUL,
    DIV,
    MOD,
    PRTF,
    LEV,
)
from pyc4.compiler.errors import (
    CompileError,
    CSyntaxError,
    ExpressionTooDeepError,
    InvalidCharacterError,
    MissingTokenError,
    UndeclaredIdentifierError,
    UnexpectedTokenError,
    UnsupportedOperatorError,
    UnsupportedStatementError,
)
from pyc4.errors import ErrorKind


def listing(source: str) -> list[str]:
    """Compile and return instructions as text."""
    return [str(i) for i in parse_source(source)]


# =============================================================================
# Precedence Table Tests
# =============================================================================

class TestPrecedenceTable:
    """Test the binding precedence table."""

    def test_levels(self):
        """Spot-check each precedence level."""
        assert get_precedence(CTokenType.ASSIGN) == 1
        assert get_precedence(CTokenType.OR) == 2
        assert get_precedence(CTokenType.AND) == 3
        assert get_precedence(CTokenType.PIPE) == 4
        assert get_precedence(CTokenType.AMPERSAND) == 6
        assert get_precedence(CTokenType.EQ) == 7
        assert get_precedence(CTokenType.LE) == 8
        assert get_precedence(CTokenType.RSHIFT) == 9
        assert get_precedence(CTokenType.MINUS) == 10
        assert get_precedence(CTokenType.PERCENT) == 11

    def test_non_operators(self):
        """Tokens that are not binary operators have precedence 0."""
        for token_type in (CTokenType.SEMICOLON, CTokenType.RPAREN,
                           CTokenType.NUMBER, CTokenType.EOF,
                           CTokenType.INCREMENT):
            assert get_precedence(token_type) == 0

    def test_multiplicative_binds_tightest(self):
        assert max(PRECEDENCE.values()) == PRECEDENCE[CTokenType.STAR]


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Test instruction emission for expressions."""

    def test_single_literal(self):
        assert listing("printf(7);") == ["IMM 7", "PRTF"]

    def test_precedence(self):
        """Multiplication binds tighter than addition."""
        assert parse_source("printf(2 + 3 * 4);") == (
            imm(2), imm(3), imm(4), MUL, ADD, PRTF,
        )

    def test_precedence_left_operand(self):
        """Higher precedence on the left is emitted first."""
        assert listing("printf(2 * 3 + 4);") == [
            "IMM 2", "IMM 3", "MUL", "IMM 4", "ADD", "PRTF",
        ]

    def test_left_associative_subtraction(self):
        """Equal precedence operators associate to the left."""
        assert parse_source("return 10 - 2 - 3;") == (
            imm(10), imm(2), SUB, imm(3), SUB, LEV,
        )

    def test_left_associative_division(self):
        assert listing("printf(100 / 10 / 5);") == [
            "IMM 100", "IMM 10", "DIV", "IMM 5", "DIV", "PRTF",
        ]

    def test_mixed_multiplicative(self):
        assert parse_source("printf(7 % 4 * 2);") == (
            imm(7), imm(4), MOD, imm(2), MUL, PRTF,
        )

    def test_every_operator(self):
        """Each arithmetic operator emits its instruction."""
        for op, instruction in (("+", ADD), ("-", SUB), ("*", MUL),
                                ("/", DIV), ("%", MOD)):
            program = parse_source(f"printf(8 {op} 2);")
            assert program == (imm(8), imm(2), instruction, PRTF)

    def test_instructions_are_typed(self):
        """The parser emits Instruction values, not text."""
        program = parse_source("printf(1 + 2);")
        assert all(isinstance(i, Instruction) for i in program)
        assert program[0].opcode == Opcode.IMM
        assert program[0].operand == 1


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Test statement parsing."""

    def test_empty_program(self):
        """No statements means no instructions."""
        assert parse_source("") == ()
        assert parse_source("  \n\t") == ()

    def test_printf_then_return(self):
        """Statements are emitted in source order."""
        assert listing("printf(1 + 1); return 3 * 3;") == [
            "IMM 1", "IMM 1", "ADD", "PRTF",
            "IMM 3", "IMM 3", "MUL", "LEV",
        ]

    def test_multiline(self):
        source = "printf(1);\nprintf(2);\n"
        assert listing(source) == ["IMM 1", "PRTF", "IMM 2", "PRTF"]

    def test_parse_statement_returns_its_instructions(self):
        """parse_statement returns only what the statement emitted."""
        lexer = CLexer("printf(1); return 2;")
        parser = CParser(lexer.tokenize())
        assert parser.parse_statement() == [imm(1), PRTF]
        assert parser.parse_statement() == [imm(2), LEV]
        assert parser.instructions == [imm(1), PRTF, imm(2), LEV]

    def test_parse_expression_directly(self):
        parser = CParser(CLexer("1 + 2 * 3").tokenize())
        assert parser.parse_expression() == [imm(1), imm(2), imm(3), MUL, ADD]

    def test_tokens_consumed_lazily(self):
        """Only one token of lookahead is pulled past a statement."""
        lexer = CLexer("printf(1); return 2;")
        parser = CParser(lexer.tokenize())
        parser.parse_statement()
        # printf ( 1 ) ; plus the lookahead 'return'
        assert lexer.token_count == 6

    def test_token_list_without_eof(self):
        """A token sequence that ends without EOF is still accepted."""
        tokens = [
            CToken(CTokenType.RETURN, "return"),
            CToken(CTokenType.NUMBER, 4),
            CToken(CTokenType.SEMICOLON, ";"),
        ]
        assert CParser(tokens).parse() == (imm(4), LEV)

    def test_idempotent(self):
        """Parsing the same source twice gives identical programs."""
        source = "printf(2 + 3 * 4); return 10 - 2 - 3;"
        assert parse_source(source) == parse_source(source)


# =============================================================================
# Error Tests
# =============================================================================

class TestSyntaxErrors:
    """Test syntax error detection."""

    def test_missing_close_paren(self):
        """A missing ')' names the expected and found tokens."""
        with pytest.raises(MissingTokenError) as exc_info:
            parse_source("printf(2 + 3;", "test.c")
        error = exc_info.value
        assert error.kind == ErrorKind.SYNTAX
        assert error.expected == ")"
        assert error.found == ";"
        assert error.token_index == 5
        assert str(error).startswith(
            "test.c:1:13: error: expected ')' after printf argument, found ';' (token 5)"
        )

    def test_missing_open_paren(self):
        with pytest.raises(MissingTokenError) as exc_info:
            parse_source("printf 1);")
        assert exc_info.value.expected == "("
        assert exc_info.value.token_index == 1

    def test_missing_semicolon_after_printf(self):
        with pytest.raises(MissingTokenError) as exc_info:
            parse_source("printf(1) printf(2);")
        assert exc_info.value.expected == ";"
        assert exc_info.value.found == "printf"

    def test_missing_semicolon_after_return(self):
        """End of input is reported by name."""
        with pytest.raises(MissingTokenError) as exc_info:
            parse_source("return 1")
        assert exc_info.value.found == "end of input"

    def test_empty_printf(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("printf();")
        assert exc_info.value.found == ")"

    def test_trailing_operator(self):
        with pytest.raises(UnexpectedTokenError):
            parse_source("return 1 +;")

    def test_parenthesised_primary(self):
        """Parentheses do not group sub-expressions."""
        with pytest.raises(UnexpectedTokenError):
            parse_source("printf((1));")

    @pytest.mark.parametrize("source", ["int x;", "x;", "42;", ";", "if"])
    def test_unsupported_statement(self, source):
        with pytest.raises(UnsupportedStatementError) as exc_info:
            parse_source(source)
        assert exc_info.value.token_index == 0
        assert "printf" in str(exc_info.value)

    @pytest.mark.parametrize("operator", ["==", "!=", "<", ">=", "<<", "&&", "||", "|", "&", "="])
    def test_unsupported_operator(self, operator):
        """Operators without an instruction are rejected, not skipped."""
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            parse_source(f"printf(1 {operator} 2);")
        assert exc_info.value.operator == operator
        assert exc_info.value.token_index == 3

    def test_unsupported_operator_after_tighter_operand(self):
        """The operator is found after the tighter-binding operand completes."""
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            parse_source("printf(1 + 2 < 3);")
        assert exc_info.value.operator == "<"

    def test_errors_share_base(self):
        with pytest.raises(CompileError):
            parse_source("printf(")
        with pytest.raises(CSyntaxError):
            parse_source("printf(")


class TestCharacterAndIdentifierErrors:
    """Unknown characters and identifiers fail where they are used."""

    def test_unknown_character_operand(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            parse_source("printf(@);")
        assert exc_info.value.kind == ErrorKind.LEXICAL
        assert exc_info.value.token_index == 2

    def test_unknown_character_statement(self):
        with pytest.raises(InvalidCharacterError):
            parse_source("# 1;")

    def test_unknown_character_in_delimiter_position(self):
        """An unknown character where a delimiter belongs is still lexical."""
        with pytest.raises(InvalidCharacterError) as exc_info:
            parse_source("printf(1 @ 2);")
        assert exc_info.value.char == "@"
        assert exc_info.value.kind == ErrorKind.LEXICAL
        assert exc_info.value.token_index == 3

    def test_unknown_character_before_semicolon(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            parse_source("return 1 @;")
        assert exc_info.value.token_index == 2

    def test_identifier_operand(self):
        """Identifiers have no storage and are rejected."""
        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            parse_source("printf(x + 1);", "vars.c")
        error = exc_info.value
        assert error.kind == ErrorKind.SEMANTIC
        assert error.identifier == "x"
        assert "vars.c:1:8" in str(error)


class TestDepthLimit:
    """Test the expression nesting limit."""

    def test_limit_exceeded(self):
        with pytest.raises(ExpressionTooDeepError) as exc_info:
            parse_source("printf(1 + 2);", max_depth=1)
        assert exc_info.value.limit == 1

    def test_chain_stays_shallow(self):
        """Left-associative chains do not nest deeper with length."""
        source = "printf(" + " + ".join(["1"] * 200) + ");"
        program = parse_source(source, max_depth=2)
        assert len(program) == 200 + 199 + 1

    def test_mixed_levels(self):
        assert parse_source("printf(1 + 2 * 3);", max_depth=3)
        with pytest.raises(ExpressionTooDeepError):
            parse_source("printf(1 + 2 * 3);", max_depth=2)
