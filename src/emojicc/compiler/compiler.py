"""
emojicc Compiler Main Module
============================

This module provides the main compiler interface. It orchestrates the
complete compilation process:

    Source → Lex → Collect → Annotate → Check → Generate → Assembly

Usage
-----
Command line:
    $ emjc hello          # hello.emj -> hello.s -> hello

Programmatic:
    >>> from emojicc.compiler import compile_emoji
    >>> asm = compile_emoji('🆕 🔢 x 🔚 x ⬅ 2 ➕ 3 🔚 📄 x 🔚')

Compilation Pipeline
--------------------
1. **Lexical Analysis**: source text to a token list ending with END
2. **Declaration Collection**: global and function tables, storage section
3. **Annotation**: bind each identifier occurrence to its declaration
4. **Checking**: build the syntax tree and enforce the type rules
5. **Code Generation**: x86-64 assembly text

Error Handling
--------------
Compilation is fail-fast: the first CompileError propagates to the
caller and no assembly is produced.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from emojicc.compiler.annotator import Annotations, annotate
from emojicc.compiler.ast import ProgramNode
from emojicc.compiler.checker import check
from emojicc.compiler.codegen import DEFAULT_FUNCTION_TABLE_SIZE, generate
from emojicc.compiler.collector import collect_declarations
from emojicc.compiler.lexer import tokenize
from emojicc.compiler.tokens import Token
from emojicc.compiler.types import SymbolTables

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        output_comments: Include source statements as comments in assembly
        function_table_size: Bytes allocated for FuncTable at program start
    """
    output_comments: bool = True
    function_table_size: int = DEFAULT_FUNCTION_TABLE_SIZE


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        assembly: Generated assembly code
        tokens: Token list from the lexer
        tables: Global and function tables
        annotations: Identifier resolutions
        ast: The checked syntax tree
    """
    filename: str = ""
    success: bool = False
    assembly: str = ""
    tokens: list[Token] = field(default_factory=list)
    tables: Optional[SymbolTables] = None
    annotations: Optional[Annotations] = None
    ast: Optional[ProgramNode] = None

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class EmojiCompiler:
    """
    Compiler for the emoji language targeting x86-64.

    Example:
        compiler = EmojiCompiler()
        result = compiler.compile_file("hello.emj")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile emoji source code to assembly.

        Args:
            source: Source text
            filename: Source filename for error messages

        Returns:
            CompilerResult with the assembly and intermediate products

        Raises:
            CompileError: On the first error in any pass
        """
        result = CompilerResult(filename=filename)

        result.tokens = tokenize(source, filename)
        logger.debug(f"{filename}: lexed {result.token_count} tokens")

        result.tables, storage = collect_declarations(result.tokens)
        logger.debug(
            f"{filename}: {len(result.tables.globals)} globals, "
            f"{len(result.tables.functions)} functions"
        )

        result.annotations = annotate(result.tokens, result.tables)
        result.ast = check(result.tokens, result.annotations)

        result.assembly = generate(
            result.ast,
            storage,
            emit_comments=self.options.output_comments,
            function_table_size=self.options.function_table_size,
        )
        result.success = True

        logger.info(f"Compiled {filename}")
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile an emoji source file to assembly.

        Raises:
            CompileError: If compilation fails
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_emoji(source: str, filename: str = "<input>", output_comments: bool = True) -> str:
    """
    Compile emoji source code to x86-64 assembly.

    This is the primary high-level interface.

    Raises:
        CompileError: If compilation fails

    Example:
        >>> asm = compile_emoji('📄 💬hi💬 🔚')
    """
    compiler = EmojiCompiler(CompilerOptions(output_comments=output_comments))
    return compiler.compile_source(source, filename).assembly


def compile_file(filepath: str, output_path: Optional[str] = None) -> str:
    """
    Compile an emoji source file, optionally writing the assembly.

    Raises:
        CompileError: If compilation fails
        FileNotFoundError: If the source file does not exist
    """
    result = EmojiCompiler().compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.assembly, encoding="utf-8")

    return result.assembly
