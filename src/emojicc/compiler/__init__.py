"""
emojicc Compiler
================

This package implements an ahead-of-time compiler for a small imperative
language written in emoji, targeting x86-64 assembly (AT&T syntax) linked
against the C library.

Pipeline
--------
    Source → Lexer → Collector → Annotator → Checker → Code Generator → Assembly

Each pass scans the full token list with its own cursor. Identifier
bindings live in a separate Annotations map, and the checker builds the
syntax tree once for the code generator to walk.

Usage
-----
>>> from emojicc.compiler import compile_emoji
>>> asm = compile_emoji('🆕 🔢 x 🔚 x ⬅ 2 ➕ 3 🔚 📄 x 🔚')

Language Summary
----------------
- Types: ☯ Boolean, 🔢 Integer, 🔤 String
- Statements: 🆕 declare, ⬅ assign, ❓/❌ if-else, 🔁 while, 📄 print,
  🔧 function, 📞 call, 🔀 swap, 🌘 ... 🌒 block
- Expressions: ↔ ➕ ➖ ✖ ➗, 🎲 random, 🚫 not, 👍/👎, digits, 💬text💬
"""

from emojicc.compiler.compiler import (
    CompilerOptions,
    CompilerResult,
    EmojiCompiler,
    compile_emoji,
    compile_file,
)
from emojicc.compiler.errors import (
    ArgumentCountError,
    CompileError,
    DeclarationError,
    DuplicateDeclarationError,
    GrammarError,
    InternalCompilerError,
    MalformedDeclarationError,
    MisplacedElseError,
    MissingTokenError,
    ParameterCollisionError,
    ParameterLimitError,
    ResolutionError,
    TypeCheckError,
    UndeclaredSymbolError,
    UnexpectedTokenError,
)
from emojicc.compiler.lexer import Lexer, tokenize
from emojicc.compiler.tokens import Token, TokenKind
from emojicc.compiler.types import VariableType, can_convert_to

__all__ = [
    # Compiler
    "EmojiCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_emoji",
    "compile_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    # Types
    "VariableType",
    "can_convert_to",
    # Errors
    "CompileError",
    "DeclarationError",
    "MalformedDeclarationError",
    "ParameterLimitError",
    "DuplicateDeclarationError",
    "ResolutionError",
    "UndeclaredSymbolError",
    "ParameterCollisionError",
    "GrammarError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "MisplacedElseError",
    "TypeCheckError",
    "ArgumentCountError",
    "InternalCompilerError",
]
