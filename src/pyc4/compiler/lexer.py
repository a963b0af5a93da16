"""
C4 Lexer (Tokenizer)
====================

This module implements the tokenizer for the C4 expression language.
It converts source text into a lazy stream of tokens for the parser.

Token Categories
----------------
- Keywords: if, else, int, char, return, while, sizeof, printf
- Identifiers: letter or underscore, then letters, digits, underscores
- Numbers: decimal integer literals (signed 64-bit range)
- Operators: = == != < <= << > >= >> | || & && + ++ - -- * / %
- Delimiters: ( ) ;
- Unknown: any other character, passed through as an UNKNOWN token

The tokenizer never fails on an unrecognized character. It emits an
UNKNOWN token and lets the parser decide whether that is an error.
The only hard error is an integer literal too large for 64 bits.

Example Usage
-------------
>>> from pyc4.compiler.lexer import CLexer
>>> lexer = CLexer("printf(2 + 3);", "test.c")
>>> for token in lexer.tokenize():
...     print(token)
Token(PRINTF, 'printf', 1:1)
Token(LPAREN, '(', 1:7)
Token(NUMBER, 2, 1:8)
Token(PLUS, '+', 1:10)
Token(NUMBER, 3, 1:12)
Token(RPAREN, ')', 1:13)
Token(SEMICOLON, ';', 1:14)
Token(EOF, 1:15)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Iterator, Mapping, Optional
import string

from pyc4.errors import INT_MAX, SourceLocation
from pyc4.compiler.errors import IntegerLiteralOverflowError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class CTokenType(Enum):
    """
    Token types for the C4 language.

    Keywords are distinguished from identifiers to simplify parsing.
    """

    # === Structural Tokens ===
    EOF = auto()            # End of input

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # Variable/function names
    NUMBER = auto()         # Decimal integer literals

    # === Keywords ===
    IF = auto()             # if
    ELSE = auto()           # else
    INT = auto()            # int
    CHAR = auto()           # char
    RETURN = auto()         # return
    WHILE = auto()          # while
    SIZEOF = auto()         # sizeof
    PRINTF = auto()         # printf (built-in)

    # === Assignment and Comparison ===
    ASSIGN = auto()         # =
    EQ = auto()             # ==
    NE = auto()             # !=
    LT = auto()             # <
    LE = auto()             # <=
    GT = auto()             # >
    GE = auto()             # >=

    # === Shift, Logical and Bitwise ===
    LSHIFT = auto()         # <<
    RSHIFT = auto()         # >>
    OR = auto()             # ||
    AND = auto()            # &&
    PIPE = auto()           # |
    AMPERSAND = auto()      # &

    # === Arithmetic ===
    PLUS = auto()           # +
    INCREMENT = auto()      # ++
    MINUS = auto()          # -
    DECREMENT = auto()      # --
    STAR = auto()           # *
    SLASH = auto()          # /
    PERCENT = auto()        # %

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    SEMICOLON = auto()      # ;

    # === Catch-all ===
    UNKNOWN = auto()        # any unrecognized character


# =============================================================================
# Keyword Mapping
# =============================================================================

def build_keyword_table() -> Mapping[str, CTokenType]:
    """
    Build a fresh, read-only keyword table.

    Each lexer builds its own table, so no mutable keyword state is shared
    between lexer instances.
    """
    return MappingProxyType({
        "if": CTokenType.IF,
        "else": CTokenType.ELSE,
        "int": CTokenType.INT,
        "char": CTokenType.CHAR,
        "return": CTokenType.RETURN,
        "while": CTokenType.WHILE,
        "sizeof": CTokenType.SIZEOF,
        "printf": CTokenType.PRINTF,
    })


# Single characters that always map to one token
SINGLE_CHAR_TOKENS: dict[str, CTokenType] = {
    "*": CTokenType.STAR,
    "/": CTokenType.SLASH,
    "%": CTokenType.PERCENT,
    "(": CTokenType.LPAREN,
    ")": CTokenType.RPAREN,
    ";": CTokenType.SEMICOLON,
}

# First character -> (single token, {second character: double token})
# "!" has no single-character form and falls back to UNKNOWN.
DOUBLE_CHAR_TOKENS: dict[str, tuple[CTokenType, dict[str, CTokenType]]] = {
    "=": (CTokenType.ASSIGN, {"=": CTokenType.EQ}),
    "!": (CTokenType.UNKNOWN, {"=": CTokenType.NE}),
    "<": (CTokenType.LT, {"=": CTokenType.LE, "<": CTokenType.LSHIFT}),
    ">": (CTokenType.GT, {"=": CTokenType.GE, ">": CTokenType.RSHIFT}),
    "|": (CTokenType.PIPE, {"|": CTokenType.OR}),
    "&": (CTokenType.AMPERSAND, {"&": CTokenType.AND}),
    "+": (CTokenType.PLUS, {"+": CTokenType.INCREMENT}),
    "-": (CTokenType.MINUS, {"-": CTokenType.DECREMENT}),
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class CToken:
    """
    Represents a single token from source code.

    Two tokens are equal when their type and value match. The position
    fields are diagnostic metadata only and take no part in comparison
    or hashing.

    Attributes:
        type: The CTokenType classification
        value: Payload (int for numbers, name for identifiers, the
               character for UNKNOWN, the spelling otherwise, None for EOF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        index: Position in the token stream (0-indexed)
        filename: Name of the source file
    """
    type: CTokenType
    value: str | int | None
    line: int = field(default=1, compare=False)
    column: int = field(default=1, compare=False)
    index: int = field(default=0, compare=False)
    filename: str = field(default="<input>", compare=False)

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """Source spelling of the token, for messages."""
        if self.type == CTokenType.EOF:
            return "end of input"
        return str(self.value)


# =============================================================================
# Lexer Implementation
# =============================================================================

class CLexer:
    """
    Tokenizes C4 source code.

    Tokens are produced one at a time, with a single character of
    lookahead for two-character operators and no backtracking.

    Usage:
        lexer = CLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    or, pulling tokens on demand:

        token = lexer.next_token()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
        keywords: Read-only keyword table owned by this lexer
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    WHITESPACE = " \t\r\n"

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename
        self.keywords = build_keyword_table()

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

        # Number of tokens handed out so far
        self._token_count = 0

    def next_token(self) -> CToken:
        """
        Return the next token.

        Once the end of input is reached every further call returns
        another EOF token.

        Raises:
            IntegerLiteralOverflowError: If a literal exceeds 64 bits
        """
        self._skip_whitespace()

        if self._at_end():
            return self._make_token(CTokenType.EOF, None, self._line, self._column)

        return self._scan_token()

    @property
    def token_count(self) -> int:
        """Number of tokens produced so far, including EOF tokens."""
        return self._token_count

    def tokenize(self) -> Iterator[CToken]:
        """
        Generate tokens up to and including the first EOF token.

        Yields:
            CToken objects representing each lexical element
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == CTokenType.EOF:
                return

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Look at the current character. Empty string at end of source."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        Updates line and column tracking for error reporting.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _collect_while(self, allowed: str) -> str:
        """Consume characters while they belong to the allowed set."""
        chars = []
        while self._peek() and self._peek() in allowed:
            chars.append(self._advance())
        return "".join(chars)

    def _skip_whitespace(self) -> None:
        """Skip spaces, tabs, carriage returns and newlines."""
        while self._peek() and self._peek() in self.WHITESPACE:
            self._advance()

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: CTokenType,
        value: str | int | None,
        start_line: int,
        start_column: int,
    ) -> CToken:
        """Create a token and assign it the next stream index."""
        token = CToken(
            type=token_type,
            value=value,
            line=start_line,
            column=start_column,
            index=self._token_count,
            filename=self.filename,
        )
        self._token_count += 1
        return token

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> CToken:
        """Scan the next token from source."""
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        return self._scan_operator(start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> CToken:
        """
        Scan a decimal literal.

        Raises:
            IntegerLiteralOverflowError: If the value exceeds 2**63 - 1
        """
        # Capture the line before consuming, in case the literal ends the source
        source_line = self._get_current_line()
        digits = self._collect_while(string.digits)
        value = int(digits)

        if value > INT_MAX:
            raise IntegerLiteralOverflowError(
                digits,
                SourceLocation(self.filename, start_line, start_column),
                source_line,
                token_index=self._token_count,
            )

        return self._make_token(CTokenType.NUMBER, value, start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> CToken:
        """
        Scan an identifier or keyword.

        Keywords are distinguished by an exact lookup in the keyword table.
        """
        name = self._collect_while(self.IDENT_CHARS)

        keyword = self.keywords.get(name)
        if keyword is not None:
            return self._make_token(keyword, name, start_line, start_column)

        return self._make_token(CTokenType.IDENTIFIER, name, start_line, start_column)

    def _scan_operator(self, start_line: int, start_column: int) -> CToken:
        """
        Scan an operator, delimiter, or unknown character.

        Two-character operators are resolved with one character of
        lookahead after the first character is consumed.
        """
        char = self._advance()

        if char in DOUBLE_CHAR_TOKENS:
            single, doubles = DOUBLE_CHAR_TOKENS[char]
            second = self._peek()
            if second and second in doubles:
                self._advance()
                return self._make_token(
                    doubles[second], char + second, start_line, start_column
                )
            return self._make_token(single, char, start_line, start_column)

        token_type = SINGLE_CHAR_TOKENS.get(char, CTokenType.UNKNOWN)
        return self._make_token(token_type, char, start_line, start_column)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize_source(source: str, filename: str = "<input>") -> list[CToken]:
    """
    Tokenize a whole source string.

    Args:
        source: The source code
        filename: Source filename for error messages

    Returns:
        List of tokens ending with a single EOF token
    """
    return list(CLexer(source, filename).tokenize())
