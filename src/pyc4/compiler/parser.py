"""
C4 Precedence-Climbing Parser
=============================

This module implements the parser for the C4 statement and expression
language. It pulls tokens from the lexer one at a time and emits a
linear sequence of stack machine instructions directly, without building
a syntax tree.

Grammar (Simplified EBNF)
-------------------------
program         ::= statement* EOF
statement       ::= printf_stmt | return_stmt
printf_stmt     ::= 'printf' '(' expr ')' ';'
return_stmt     ::= 'return' expr ';'
expr            ::= primary (binary_op expr)*      (precedence climbing)
primary         ::= NUMBER

Binding Precedence (higher binds tighter)
-----------------------------------------
1.  assignment     =
2.  logical_or     ||
3.  logical_and    &&
4.  bitwise_or     |
5.  bitwise_xor    (reserved, '^' is not tokenized)
6.  bitwise_and    &
7.  equality       == !=
8.  relational     < > <= >=
9.  shift          << >>
10. additive       + -
11. multiplicative * / %

Every level takes part in operator binding, but only the additive and
multiplicative operators generate instructions. Any other operator is
rejected with UnsupportedOperatorError.

Example Usage
-------------
>>> from pyc4.compiler.parser import parse_source
>>> for instruction in parse_source("printf(2 + 3 * 4);"):
...     print(instruction)
IMM 2
IMM 3
IMM 4
MUL
ADD
PRTF
"""

import logging
from typing import Iterable, Optional

from pyc4.compiler.lexer import CLexer, CToken, CTokenType
from pyc4.compiler.instructions import (
    Instruction,
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
    ExpressionTooDeepError,
    InvalidCharacterError,
    MissingTokenError,
    UndeclaredIdentifierError,
    UnexpectedTokenError,
    UnsupportedOperatorError,
    UnsupportedStatementError,
)

logger = logging.getLogger(__name__)


# Default limit on nested parse_expression calls
DEFAULT_MAX_EXPRESSION_DEPTH = 64


# =============================================================================
# Operator Tables
# =============================================================================

PRECEDENCE: dict[CTokenType, int] = {
    CTokenType.ASSIGN: 1,
    CTokenType.OR: 2,
    CTokenType.AND: 3,
    CTokenType.PIPE: 4,
    CTokenType.AMPERSAND: 6,
    CTokenType.EQ: 7,
    CTokenType.NE: 7,
    CTokenType.LT: 8,
    CTokenType.GT: 8,
    CTokenType.LE: 8,
    CTokenType.GE: 8,
    CTokenType.LSHIFT: 9,
    CTokenType.RSHIFT: 9,
    CTokenType.PLUS: 10,
    CTokenType.MINUS: 10,
    CTokenType.STAR: 11,
    CTokenType.SLASH: 11,
    CTokenType.PERCENT: 11,
}

# Operators with a code generation rule
BINARY_INSTRUCTIONS: dict[CTokenType, Instruction] = {
    CTokenType.PLUS: ADD,
    CTokenType.MINUS: SUB,
    CTokenType.STAR: MUL,
    CTokenType.SLASH: DIV,
    CTokenType.PERCENT: MOD,
}


def get_precedence(token_type: CTokenType) -> int:
    """Binding precedence of a token, 0 for tokens that are not operators."""
    return PRECEDENCE.get(token_type, 0)


class CParser:
    """
    Precedence-climbing parser for C4.

    Consumes a token stream and appends instructions to an append-only
    buffer. Parsing stops at the first error; there is no recovery.

    Attributes:
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
        max_depth: Limit on nested expression parsing
        instructions: Instructions emitted so far
    """

    def __init__(
        self,
        tokens: Iterable[CToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        max_depth: int = DEFAULT_MAX_EXPRESSION_DEPTH,
    ):
        """
        Initialize the parser.

        Args:
            tokens: Tokens from the lexer, consumed lazily
            filename: Source filename for error messages
            source_lines: Original source lines for error context
            max_depth: Maximum expression nesting depth
        """
        self.filename = filename
        self.source_lines = source_lines or []
        self.max_depth = max_depth
        self.instructions: list[Instruction] = []

        self._tokens = iter(tokens)
        self._current: Optional[CToken] = None
        self._depth = 0
        self._advance()

    # =========================================================================
    # Public Interface
    # =========================================================================

    def parse(self) -> tuple[Instruction, ...]:
        """
        Parse statements until the end of input.

        Returns:
            The whole program as an immutable tuple of instructions

        Raises:
            CompileError: On the first syntax or semantic error
        """
        while not self._at_end():
            self.parse_statement()

        logger.debug(f"Parsed {len(self.instructions)} instructions from {self.filename}")
        return tuple(self.instructions)

    def parse_statement(self) -> list[Instruction]:
        """
        Parse one printf or return statement.

        Returns:
            The instructions emitted for this statement
        """
        start = len(self.instructions)
        token = self._peek()

        if token.type == CTokenType.PRINTF:
            self._parse_printf_statement()
        elif token.type == CTokenType.RETURN:
            self._parse_return_statement()
        elif token.type == CTokenType.UNKNOWN:
            raise self._invalid_character(token)
        else:
            raise UnsupportedStatementError(
                token.text,
                location=token.location,
                source_line=self._get_source_line(token.line),
                token_index=token.index,
            )

        return self.instructions[start:]

    def parse_expression(self, min_precedence: int = 1) -> list[Instruction]:
        """
        Parse an expression by precedence climbing.

        The left operand is parsed first. Each following operator whose
        precedence is at least min_precedence is consumed, and its right
        operand is parsed with a threshold one above the operator's own
        precedence, which makes equal-precedence chains left-associative.

        Args:
            min_precedence: Lowest operator precedence this call may consume

        Returns:
            The instructions emitted for this expression
        """
        start = len(self.instructions)

        self._depth += 1
        try:
            if self._depth > self.max_depth:
                token = self._peek()
                raise ExpressionTooDeepError(
                    self.max_depth,
                    location=token.location,
                    source_line=self._get_source_line(token.line),
                    token_index=token.index,
                )

            self._parse_primary()

            while True:
                operator = self._peek()
                precedence = get_precedence(operator.type)
                if precedence == 0 or precedence < min_precedence:
                    break

                instruction = BINARY_INSTRUCTIONS.get(operator.type)
                if instruction is None:
                    raise UnsupportedOperatorError(
                        operator.text,
                        location=operator.location,
                        source_line=self._get_source_line(operator.line),
                        token_index=operator.index,
                    )

                self._advance()
                self.parse_expression(precedence + 1)
                self._emit(instruction)
        finally:
            self._depth -= 1

        return self.instructions[start:]

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _peek(self) -> CToken:
        """Look at the current token without consuming it."""
        return self._current

    def _at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._current.type == CTokenType.EOF

    def _advance(self) -> CToken:
        """Consume and return the current token. EOF is never consumed."""
        token = self._current
        if token is not None and token.type == CTokenType.EOF:
            return token
        self._current = next(self._tokens, None) or self._eof_after(token)
        return token

    def _eof_after(self, token: Optional[CToken]) -> CToken:
        """Synthesize an EOF token for a stream that ended without one."""
        if token is None:
            return CToken(CTokenType.EOF, None, filename=self.filename)
        return CToken(
            CTokenType.EOF,
            None,
            line=token.line,
            column=token.column + len(token.text),
            index=token.index + 1,
            filename=token.filename,
        )

    def _expect(self, token_type: CTokenType, expected: str, context: str) -> CToken:
        """
        Consume a token of the given type or raise MissingTokenError.

        An unknown character in place of the token is reported as
        InvalidCharacterError.

        Args:
            token_type: Required token type
            expected: Spelling of the required token for the message
            context: Where the token was required, e.g. "after printf"
        """
        token = self._peek()
        if token.type != token_type:
            if token.type == CTokenType.UNKNOWN:
                raise self._invalid_character(token)
            raise MissingTokenError(
                expected,
                token.text,
                location=token.location,
                source_line=self._get_source_line(token.line),
                token_index=token.index,
                context=context,
            )
        return self._advance()

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line text for error messages."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _invalid_character(self, token: CToken) -> InvalidCharacterError:
        return InvalidCharacterError(
            token.value,
            location=token.location,
            source_line=self._get_source_line(token.line),
            token_index=token.index,
        )

    # =========================================================================
    # Code Emission
    # =========================================================================

    def _emit(self, instruction: Instruction) -> None:
        self.instructions.append(instruction)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_printf_statement(self) -> None:
        """Parse printf ( expr ) ; and emit expr, PRTF."""
        self._advance()  # consume 'printf'
        self._expect(CTokenType.LPAREN, "(", "after printf")
        self.parse_expression()
        self._expect(CTokenType.RPAREN, ")", "after printf argument")
        self._expect(CTokenType.SEMICOLON, ";", "after printf()")
        self._emit(PRTF)
        logger.debug("Parsed printf statement")

    def _parse_return_statement(self) -> None:
        """Parse return expr ; and emit expr, LEV."""
        self._advance()  # consume 'return'
        self.parse_expression()
        self._expect(CTokenType.SEMICOLON, ";", "after return")
        self._emit(LEV)
        logger.debug("Parsed return statement")

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_primary(self) -> None:
        """Parse a primary expression (an integer literal)."""
        token = self._peek()

        if token.type == CTokenType.NUMBER:
            self._advance()
            self._emit(imm(token.value))
            return

        # Identifiers parse as operands but have no storage to load from
        if token.type == CTokenType.IDENTIFIER:
            raise UndeclaredIdentifierError(
                token.value,
                location=token.location,
                source_line=self._get_source_line(token.line),
                token_index=token.index,
            )

        if token.type == CTokenType.UNKNOWN:
            raise self._invalid_character(token)

        raise UnexpectedTokenError(
            token.text,
            expected="integer literal",
            location=token.location,
            source_line=self._get_source_line(token.line),
            token_index=token.index,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str,
    filename: str = "<input>",
    max_depth: int = DEFAULT_MAX_EXPRESSION_DEPTH,
) -> tuple[Instruction, ...]:
    """
    Parse source code into a program.

    This is a convenience function that combines lexing and parsing.

    Args:
        source: The source code
        filename: Source filename for error messages
        max_depth: Maximum expression nesting depth

    Returns:
        The program as a tuple of instructions

    Raises:
        CompileError: If lexing or parsing fails
    """
    lexer = CLexer(source, filename)
    parser = CParser(lexer.tokenize(), filename, source.splitlines(), max_depth)
    return parser.parse()
