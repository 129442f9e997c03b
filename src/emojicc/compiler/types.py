"""
Emoji Type System
=================

This module implements the three value types of the emoji language and
the rules that combine and convert them.

Supported Types
---------------
| Type    | Keyword | Machine representation              |
|---------|---------|-------------------------------------|
| Boolean | ☯       | 0 or 1 in a 64-bit cell             |
| Integer | 🔢      | signed 64-bit integer               |
| String  | 🔤      | pointer to a NUL-terminated buffer  |

UNRESOLVED is the placeholder for "not yet known" and must never survive
type checking.

Conversion Rules
----------------
can_convert_to(from, to) is deliberately asymmetric:

| from \\ to | Boolean | Integer | String |
|-----------|---------|---------|--------|
| Boolean   | yes     | yes     | yes    |
| Integer   | no      | yes     | yes    |
| String    | no      | no      | yes    |

It governs assignment, call arguments, branch/loop conditions and the
operand of 🎲.

Operator Rules
--------------
| Operator   | Result                                                     |
|------------|------------------------------------------------------------|
| ➕         | String if either is String, else Integer if either is Integer |
| ➖ ✖ ➗    | Integer; String operands are rejected                      |
| ↔          | Boolean; operand types must be identical                   |

Boolean ➕ Boolean has no defined result and is rejected.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from emojicc.compiler.errors import InternalCompilerError
from emojicc.compiler.tokens import TokenKind
from emojicc.errors import SourceLocation


# Argument registers of the System V calling convention bound the arity
MAX_PARAMETERS = 6


# =============================================================================
# Variable Types
# =============================================================================

class VariableType(Enum):
    """Static type of a variable or expression."""
    BOOLEAN = auto()
    INTEGER = auto()
    STRING = auto()
    UNRESOLVED = auto()

    def __str__(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_keyword(cls, kind: TokenKind) -> "VariableType":
        """Map a type keyword token kind (☯ 🔢 🔤) to its VariableType."""
        try:
            return _KEYWORD_TYPES[kind]
        except KeyError:
            raise ValueError(f"{kind.name} is not a type keyword") from None


_KEYWORD_TYPES = {
    TokenKind.BOOL: VariableType.BOOLEAN,
    TokenKind.INT: VariableType.INTEGER,
    TokenKind.STR: VariableType.STRING,
}


def can_convert_to(from_type: VariableType, to_type: VariableType) -> bool:
    """
    Return True if a value of from_type may be used where to_type is expected.

    Raises:
        InternalCompilerError: If either type is UNRESOLVED
    """
    if from_type == VariableType.UNRESOLVED or to_type == VariableType.UNRESOLVED:
        raise InternalCompilerError(
            f"cannot convert between {from_type} and {to_type}: type is unresolved"
        )

    if from_type == VariableType.BOOLEAN:
        return True
    if from_type == VariableType.INTEGER:
        return to_type != VariableType.BOOLEAN
    return to_type == VariableType.STRING


def plus_result(left: VariableType, right: VariableType) -> Optional[VariableType]:
    """
    Result type of ➕, or None when the combination has no defined result.
    """
    if VariableType.STRING in (left, right):
        return VariableType.STRING
    if VariableType.INTEGER in (left, right):
        return VariableType.INTEGER
    return None


def arithmetic_result(left: VariableType, right: VariableType) -> Optional[VariableType]:
    """
    Result type of ➖, ✖ and ➗, or None when a String operand is involved.
    """
    if VariableType.STRING in (left, right):
        return None
    return VariableType.INTEGER


def equality_result(left: VariableType, right: VariableType) -> Optional[VariableType]:
    """Result type of ↔, or None when the operand types differ."""
    if left != right:
        return None
    return VariableType.BOOLEAN


# =============================================================================
# Function Signatures and Symbol Tables
# =============================================================================

@dataclass(frozen=True)
class Parameter:
    """A declared function parameter."""
    name: str
    var_type: VariableType


@dataclass(frozen=True)
class FunctionSignature:
    """
    Declared shape of a function.

    Attributes:
        name: Function name
        parameters: Ordered parameter list (at most MAX_PARAMETERS)
    """
    name: str
    parameters: tuple[Parameter, ...] = ()

    @property
    def parameter_types(self) -> tuple[VariableType, ...]:
        return tuple(p.var_type for p in self.parameters)

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def __str__(self) -> str:
        params = ", ".join(f"{p.var_type} {p.name}" for p in self.parameters)
        return f"{self.name}({params})"


@dataclass(frozen=True)
class SymbolTables:
    """
    Global and function tables produced by the declaration collector.

    Both tables are frozen once the collector finishes; later passes only
    read them. Names are unique across both tables.

    Attributes:
        globals: Declared variable name -> VariableType, in declaration order
        functions: Declared function name -> FunctionSignature, in order
        locations: Name -> where it was declared (diagnostics only)
    """
    globals: dict[str, VariableType] = field(default_factory=dict)
    functions: dict[str, FunctionSignature] = field(default_factory=dict)
    locations: dict[str, SourceLocation] = field(default_factory=dict, compare=False)

    def is_declared(self, name: str) -> bool:
        return name in self.globals or name in self.functions
