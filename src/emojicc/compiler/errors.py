"""
Compiler Error Hierarchy
========================

This module defines the exception hierarchy for the emojicc compiler
passes. All exceptions inherit from CompileError, which itself inherits
from the package-wide EmojiccError.

Exception Hierarchy
-------------------
CompileError (base for all compilation errors)
├── DeclarationError - raised by the declaration collector
│   ├── MalformedDeclarationError - missing type/name, unterminated list
│   ├── ParameterLimitError - more than six parameters
│   └── DuplicateDeclarationError - name declared twice
├── ResolutionError - raised by the annotator
│   ├── UndeclaredSymbolError - identifier found in no table
│   └── ParameterCollisionError - parameter aliases a global or function
├── GrammarError - raised by the checker while building the syntax tree
│   ├── UnexpectedTokenError - invalid statement-leading token
│   ├── MissingTokenError - required token absent
│   └── MisplacedElseError - second trailing else
├── TypeCheckError - raised by the checker's type rules
│   └── ArgumentCountError - call arity mismatch
└── InternalCompilerError - broken invariant between passes

Error Message Format
--------------------
Every error carries the failing cursor position and a short window of the
upcoming tokens:

    prog.emj:3:5: error: undeclared symbol 'y'
        near token 12: y ⬅ 2 ➕ 3
    hint: declare it with 🆕 or 🔧 before compiling

There is no error collection: the first error aborts the compilation.
"""

from typing import Optional, Sequence

from emojicc.errors import EmojiccError, SourceLocation


# Number of tokens shown after the failing position in error messages
WINDOW_SIZE = 5


# =============================================================================
# Base Compiler Exception
# =============================================================================

class CompileError(EmojiccError):
    """
    Base exception for all compilation errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        position: Cursor position (token index) at the failure
        window: Text of the failing token and the few that follow it
        hint: A suggestion for fixing the error
    """

    #: Pipeline stage that raises this family of errors
    stage = "compile"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        position: Optional[int] = None,
        window: Sequence[str] = (),
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.position = position
        self.window = list(window)
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, token window, and hint.

            prog.emj:3:5: error: undeclared symbol 'y'
                near token 12: y ⬅ 2 ➕ 3
            hint: declare it with 🆕 or 🔧 before compiling
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.position is not None:
            upcoming = " ".join(self.window) if self.window else "<end of input>"
            parts.append(f"    near token {self.position}: {upcoming}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Declaration Errors (pass 1)
# =============================================================================

class DeclarationError(CompileError):
    """
    Error in a NEW or FUN declaration header.

    Raised by the declaration collector before any identifier is resolved.
    """
    stage = "collect"


class MalformedDeclarationError(DeclarationError):
    """
    A declaration header is missing its type, its name, or its closing
    parenthesis.

    Example:
        🆕 x 🔚            // missing type
        🔧 f 🌜 🔢 n       // unterminated parameter list
    """
    pass


class ParameterLimitError(DeclarationError):
    """
    A function declares more parameters than there are argument registers.
    """

    def __init__(self, function_name: str, count: int, limit: int, **kwargs):
        self.function_name = function_name
        self.count = count
        self.limit = limit
        super().__init__(
            f"parameter limit exceeded: '{function_name}' declares {count} "
            f"parameters, at most {limit} are allowed",
            **kwargs,
        )


class DuplicateDeclarationError(DeclarationError):
    """
    A name is declared twice, or used both for a global and a function.
    """

    def __init__(
        self,
        identifier: str,
        original_location: Optional[SourceLocation] = None,
        **kwargs,
    ):
        self.identifier = identifier
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{identifier}' was first declared at {original_location}"

        super().__init__(f"duplicate declaration of '{identifier}'", hint=hint, **kwargs)


# =============================================================================
# Resolution Errors (pass 2)
# =============================================================================

class ResolutionError(CompileError):
    """
    An identifier occurrence cannot be bound to a declaration.
    """
    stage = "annotate"


class UndeclaredSymbolError(ResolutionError):
    """
    Reference to a name that is neither a global nor a function (nor a
    parameter of an enclosing function).
    """

    def __init__(self, identifier: str, **kwargs):
        self.identifier = identifier
        super().__init__(
            f"undeclared symbol '{identifier}'",
            hint="declare it with 🆕 or 🔧 before compiling",
            **kwargs,
        )


class ParameterCollisionError(ResolutionError):
    """
    A parameter name aliases a global, a function, or another parameter of
    the same function.
    """

    def __init__(self, identifier: str, other: str, **kwargs):
        self.identifier = identifier
        self.other = other
        super().__init__(
            f"parameter cannot share name with {other} '{identifier}'",
            **kwargs,
        )


# =============================================================================
# Grammar Errors (pass 3, tree construction)
# =============================================================================

class GrammarError(CompileError):
    """
    The token stream does not match the statement or expression grammar.
    """
    stage = "check"


class UnexpectedTokenError(GrammarError):
    """
    A token that cannot start (or continue) the construct being parsed.
    """

    def __init__(self, found: str, expected: Optional[str] = None, **kwargs):
        self.found = found
        self.expected = expected
        hint = f"expected {expected}" if expected else None
        super().__init__(f"unexpected token '{found}'", hint=hint, **kwargs)


class MissingTokenError(GrammarError):
    """
    A required token (terminator, parenthesis, brace) is absent.
    """

    def __init__(self, expected: str, **kwargs):
        self.expected = expected
        super().__init__(f"expected {expected}", **kwargs)


class MisplacedElseError(GrammarError):
    """
    An else with no if to attach to, such as a second trailing bare else.
    """

    def __init__(self, **kwargs):
        super().__init__(
            "misplaced else",
            hint="an if chain accepts at most one trailing ❌ without ❓",
            **kwargs,
        )


# =============================================================================
# Type Errors (pass 3, type propagation)
# =============================================================================

class TypeCheckError(CompileError):
    """
    A type rule is violated.

    Attributes:
        expected_type: Name of the type that was required (if any)
        actual_type: Name of the type that was found (if any)
    """
    stage = "check"

    def __init__(
        self,
        message: str,
        expected_type: Optional[str] = None,
        actual_type: Optional[str] = None,
        **kwargs,
    ):
        self.expected_type = expected_type
        self.actual_type = actual_type
        if expected_type and actual_type and "hint" not in kwargs:
            kwargs["hint"] = f"expected {expected_type}, got {actual_type}"
        super().__init__(message, **kwargs)


class ArgumentCountError(TypeCheckError):
    """
    A call passes a different number of arguments than the function declares.
    """

    def __init__(self, function_name: str, expected: int, actual: int, **kwargs):
        self.function_name = function_name
        self.expected = expected
        self.actual = actual
        word = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"'{function_name}' expects {expected} {word}, got {actual}",
            **kwargs,
        )


# =============================================================================
# Internal Errors
# =============================================================================

class InternalCompilerError(CompileError):
    """
    An invariant between passes was broken, e.g. an unresolved type
    reached the code generator. Always a compiler bug.
    """
    stage = "generate"
