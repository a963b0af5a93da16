"""
C4 Compiler
===========

Front end of the pyc4 toolchain: turns C4 source text into a linear
program for the stack machine.

Components
----------
- **lexer**: CLexer, a lazy tokenizer with one character of lookahead
- **parser**: CParser, a precedence-climbing parser that emits
  instructions directly
- **instructions**: the Opcode set and the listing format
- **compiler**: C4Compiler, the driver tying the stages together

Quick Start
-----------
>>> from pyc4.compiler import compile_c, format_listing
>>> print(format_listing(compile_c("printf(2 + 3 * 4);")), end="")
IMM 2
IMM 3
IMM 4
MUL
ADD
PRTF
"""

from pyc4.compiler.compiler import (
    C4Compiler,
    CompilerOptions,
    CompilerResult,
    compile_c,
    compile_file,
)
from pyc4.compiler.errors import (
    CompileError,
    CSyntaxError,
    CSemanticError,
    LexicalError,
    InvalidCharacterError,
    IntegerLiteralOverflowError,
    UnexpectedTokenError,
    MissingTokenError,
    UnsupportedStatementError,
    UnsupportedOperatorError,
    ExpressionTooDeepError,
    UndeclaredIdentifierError,
)
from pyc4.compiler.lexer import CLexer, CToken, CTokenType, tokenize_source
from pyc4.compiler.parser import CParser, parse_source
from pyc4.compiler.instructions import (
    Instruction,
    Opcode,
    format_listing,
    parse_instruction,
    parse_listing,
)

__all__ = [
    # Main API
    "C4Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_c",
    "compile_file",
    # Errors
    "CompileError",
    "CSyntaxError",
    "CSemanticError",
    "LexicalError",
    "InvalidCharacterError",
    "IntegerLiteralOverflowError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "UnsupportedStatementError",
    "UnsupportedOperatorError",
    "ExpressionTooDeepError",
    "UndeclaredIdentifierError",
    # Lexer
    "CLexer",
    "CToken",
    "CTokenType",
    "tokenize_source",
    # Parser
    "CParser",
    "parse_source",
    # Instructions
    "Instruction",
    "Opcode",
    "format_listing",
    "parse_instruction",
    "parse_listing",
]
