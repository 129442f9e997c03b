"""
emojicc - Ahead-of-Time Compiler for an Emoji Imperative Language
=================================================================

This package compiles programs written with emoji symbols into x86-64
assembly (AT&T syntax), then hands the assembly to the platform C
compiler driver to produce a native executable.

Main Components
---------------
- **compiler**: lexer, declaration collector, annotator, checker and
  code generator
- **toolchain**: runs the external assembler/linker
- **config**: build configuration (C compiler, flags, timeout)
- **cli**: the emjc command

Quick Start
-----------
Compile a program to assembly:
    >>> from emojicc import compile_emoji
    >>> asm = compile_emoji('🆕 🔢 x 🔚 x ⬅ 2 ➕ 3 🔚 📄 x 🔚')

Or use the command-line tool:
    $ emjc hello            # hello.emj -> hello.s -> ./hello
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from emojicc.compiler import (
    CompileError,
    CompilerOptions,
    CompilerResult,
    EmojiCompiler,
    compile_emoji,
    compile_file,
)
from emojicc.config import BuildConfig
from emojicc.errors import EmojiccError, SourceLocation, ToolchainError
from emojicc.toolchain import assemble_and_link

__all__ = [
    "__version__",
    "EmojiCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_emoji",
    "compile_file",
    "BuildConfig",
    "assemble_and_link",
    "EmojiccError",
    "CompileError",
    "ToolchainError",
    "SourceLocation",
]
