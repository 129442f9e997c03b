"""
emojicc Error Hierarchy
=======================

This module defines the root of the exception hierarchy for emojicc.
All exceptions inherit from EmojiccError, allowing callers to catch every
toolchain-related error with a single except clause if desired.

Exception Hierarchy
-------------------
EmojiccError (base)
├── CompileError (see emojicc.compiler.errors)
│   ├── DeclarationError - malformed NEW/FUN headers, parameter limits
│   ├── ResolutionError - undeclared or colliding identifiers
│   ├── TypeCheckError - type rule violations
│   ├── GrammarError - statement and expression grammar violations
│   └── InternalCompilerError - broken invariants between passes
└── ToolchainError - the external assembler/linker failed

Design Philosophy
-----------------
Compilation errors capture the source location (filename, line, column) of
the offending token. The compiler is fail-fast: the first error aborts the
whole translation unit and no partial artifact is kept.

Error messages follow this format:
    filename:line:column: error: description
    near token N: upcoming tokens
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class EmojiccError(Exception):
    """
    Base exception for all emojicc errors.

    All exceptions raised by the compiler and its build tooling inherit
    from this class:

        try:
            compile_source(source)
        except EmojiccError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Columns count Unicode code points, not bytes, so an emoji occupies a
    single column even though it is several bytes of UTF-8.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# External Toolchain Errors
# =============================================================================

class ToolchainError(EmojiccError):
    """
    The external assembler/linker could not produce an executable.

    Raised when the C compiler driver is missing, exits with a non-zero
    status, or times out.

    Attributes:
        message: The error description
        command: The command line that was run (if any)
        stdout: Captured standard output
        stderr: Captured standard error
        return_code: Process exit status (None if it never ran)
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        stdout: str = "",
        stderr: str = "",
        return_code: Optional[int] = None,
    ):
        self.message = message
        self.command = command
        self.stdout = stdout
        self.stderr = stderr
        self.return_code = return_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.command:
            parts.append(f"  command: {self.command}")
        if self.return_code is not None:
            parts.append(f"  exit status: {self.return_code}")
        if self.stderr.strip():
            parts.append(self.stderr.rstrip())
        return "\n".join(parts)
