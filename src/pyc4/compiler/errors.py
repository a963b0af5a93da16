"""
Compiler Error Hierarchy
========================

This module defines the exception hierarchy for the tokenizer and parser.
All exceptions inherit from CompileError, which itself inherits from
the base C4Error for consistent error handling across the package.

Exception Hierarchy
-------------------
CompileError (base for all compile-time errors)
├── CSyntaxError - parser syntax errors
│   ├── LexicalError - characters or literals the tokenizer cannot use
│   │   ├── InvalidCharacterError - unknown character reached the parser
│   │   └── IntegerLiteralOverflowError - literal exceeds 64 bits
│   ├── UnexpectedTokenError - token does not fit the grammar
│   ├── MissingTokenError - required delimiter not found
│   ├── UnsupportedStatementError - statement is not printf or return
│   ├── UnsupportedOperatorError - operator without code generation
│   └── ExpressionTooDeepError - nesting limit exceeded
└── CSemanticError - semantic errors
    └── UndeclaredIdentifierError - identifier without storage

Error Message Format
--------------------
All errors include source location information and follow this format:

    filename:line:column: error: description
        source_line_text
            ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    hello.c:1:13: error: expected ')' after printf argument, found ';' (token 5)
        printf(2 + 3;
                    ^
"""

from typing import Optional

from pyc4.errors import C4Error, ErrorKind, SourceLocation


# =============================================================================
# Base Compile Exception
# =============================================================================

class CompileError(C4Error):
    """
    Base exception for all compile-time errors.

    This class provides common functionality for error messages including
    source location tracking, the index of the offending token, source line
    context, and helpful hints.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        token_index: Position of the offending token in the token stream
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        self.token_index = token_index
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Creates a user-friendly error message that helps the programmer
        quickly identify and fix the issue. Example:

            hello.c:1:1: error: unsupported statement starting with 'x' (token 0)
                x;
                ^
            hint: statements must start with 'printf' or 'return'
        """
        parts = []

        message = self.message
        if self.token_index is not None:
            message = f"{message} (token {self.token_index})"

        # Location prefix: filename:line:column: error: message
        if self.location:
            parts.append(f"{self.location}: error: {message}")
        else:
            parts.append(f"error: {message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors
# =============================================================================

class CSyntaxError(CompileError):
    """
    Syntax error in source code.

    Raised when the parser encounters tokens that cannot be parsed
    according to the statement and expression grammar.

    Examples:
        - Missing '(' after printf
        - Missing semicolon after return
        - Statement that is neither printf nor return
    """

    kind = ErrorKind.SYNTAX


class LexicalError(CSyntaxError):
    """
    Error rooted in the character level of the source.

    The tokenizer itself is permissive: unknown characters become UNKNOWN
    tokens, and only turn into a LexicalError once the parser meets one.
    Oversized integer literals are rejected by the tokenizer directly.
    """

    kind = ErrorKind.LEXICAL


class InvalidCharacterError(LexicalError):
    """
    Unknown character where the parser needs a real token.

    Raised when an UNKNOWN token is found as an expression operand or
    statement leader.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
            token_index=token_index,
        )


class IntegerLiteralOverflowError(LexicalError):
    """
    Integer literal larger than the signed 64-bit maximum.

    Literals are rejected rather than saturated or wrapped.
    """

    def __init__(
        self,
        literal: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.literal = literal
        super().__init__(
            f"integer literal '{literal}' is too large",
            location=location,
            hint="literals must not exceed 9223372036854775807",
            source_line=source_line,
            token_index=token_index,
        )


class UnexpectedTokenError(CSyntaxError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that doesn't match
    the expected grammar rule.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
            token_index=token_index,
        )


class MissingTokenError(CSyntaxError):
    """
    Required token is missing.

    Raised when a required delimiter (like ';' or ')') is not found
    where expected. The message names both the expected delimiter and
    the token found in its place.
    """

    def __init__(
        self,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
        context: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found

        message = f"expected '{expected}'"
        if context:
            message += f" {context}"
        message += f", found '{found}'"

        super().__init__(
            message,
            location=location,
            source_line=source_line,
            token_index=token_index,
        )


class UnsupportedStatementError(CSyntaxError):
    """Statement that does not start with 'printf' or 'return'."""

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.found = found
        super().__init__(
            f"unsupported statement starting with '{found}'",
            location=location,
            hint="statements must start with 'printf' or 'return'",
            source_line=source_line,
            token_index=token_index,
        )


class UnsupportedOperatorError(CSyntaxError):
    """
    Operator that binds in expressions but has no instruction.

    Comparison, logical, bitwise, shift and assignment operators are
    recognized for precedence but only + - * / % generate code.
    """

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.operator = operator
        super().__init__(
            f"operator '{operator}' is not supported",
            location=location,
            hint="only +, -, *, / and % can be evaluated",
            source_line=source_line,
            token_index=token_index,
        )


class ExpressionTooDeepError(CSyntaxError):
    """Expression nesting exceeded the configured depth limit."""

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.limit = limit
        super().__init__(
            f"expression nesting exceeds {limit} levels",
            location=location,
            hint="raise max_expression_depth or simplify the expression",
            source_line=source_line,
            token_index=token_index,
        )


# =============================================================================
# Semantic Errors
# =============================================================================

class CSemanticError(CompileError):
    """
    Semantic error in source code.

    Raised when the code is syntactically correct but cannot be given
    a meaning by the compiler.
    """

    kind = ErrorKind.SEMANTIC


class UndeclaredIdentifierError(CSemanticError):
    """
    Reference to an identifier that has no storage.

    There is no symbol table, so every identifier used as an operand
    is reported instead of being replaced with a placeholder value.
    """

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"undeclared identifier '{identifier}'",
            location=location,
            hint="variables are not supported; use an integer literal",
            source_line=source_line,
            token_index=token_index,
        )
