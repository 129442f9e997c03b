"""
Identifier Annotator (Pass 2)
=============================

Second full scan over the token list. Every identifier occurrence is bound
to what it names: a global variable, a function, or a parameter of an
enclosing function.

Resolution Order
----------------
1. Parameters of the enclosing function declarations, innermost first
2. The global table
3. The function table

A parameter scope starts after the closing 🌛 of the parameter list and
covers exactly the function's body statement.

Parameter Lists
---------------
Names inside a parameter-declaration list are declarations, not uses, so
they are not resolved against outer scopes. They must not collide with a
global or a function name.

Annotations
-----------
Tokens are immutable. The result of this pass is an Annotations map from
token index to Resolution which the checker consults when it builds the
syntax tree.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Sequence

from emojicc.compiler.cursor import TokenCursor
from emojicc.compiler.errors import ParameterCollisionError, UndeclaredSymbolError
from emojicc.compiler.tokens import Token, TokenKind
from emojicc.compiler.types import FunctionSignature, SymbolTables, VariableType

logger = logging.getLogger(__name__)


BINARY_OPERATORS = frozenset({
    TokenKind.EQEQ,
    TokenKind.PLUS,
    TokenKind.MINUS,
    TokenKind.MUL,
    TokenKind.DIV,
})


# =============================================================================
# Resolutions
# =============================================================================

class SymbolKind(Enum):
    """What an identifier names."""
    GLOBAL = auto()
    FUNCTION = auto()
    PARAMETER = auto()


@dataclass(frozen=True)
class Resolution:
    """
    The declaration an identifier occurrence is bound to.

    Attributes:
        name: The identifier text
        kind: GLOBAL, FUNCTION or PARAMETER
        var_type: Variable type (UNRESOLVED for functions)
        signature: Function signature (functions only)
        owner: Name of the declaring function (parameters only)
    """
    name: str
    kind: SymbolKind
    var_type: VariableType = VariableType.UNRESOLVED
    signature: Optional[FunctionSignature] = None
    owner: Optional[str] = None

    @property
    def is_variable(self) -> bool:
        return self.kind in (SymbolKind.GLOBAL, SymbolKind.PARAMETER)


class Annotations:
    """
    Token index -> Resolution map produced by the annotator.
    """

    def __init__(self, resolutions: Optional[dict[int, Resolution]] = None):
        self._resolutions = dict(resolutions or {})

    def get(self, index: int) -> Optional[Resolution]:
        return self._resolutions.get(index)

    def __getitem__(self, index: int) -> Resolution:
        return self._resolutions[index]

    def __contains__(self, index: int) -> bool:
        return index in self._resolutions

    def __len__(self) -> int:
        return len(self._resolutions)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._resolutions))


@dataclass
class _ParameterScope:
    function: str
    parameters: dict[str, VariableType]
    end: int  # first token index past the function body


# =============================================================================
# Annotator
# =============================================================================

class Annotator:
    """
    Binds identifier tokens to declarations.

    Usage:
        annotations = Annotator(tokens, tables).annotate()
    """

    def __init__(self, tokens: Sequence[Token], tables: SymbolTables):
        self.tokens = tokens
        self.tables = tables
        self._cursor = TokenCursor(tokens)
        self._resolutions: dict[int, Resolution] = {}
        self._scopes: list[_ParameterScope] = []

    def annotate(self) -> Annotations:
        """
        Resolve every identifier in the token list.

        Raises:
            UndeclaredSymbolError: If a name resolves in no scope
            ParameterCollisionError: If a parameter aliases a global or function
        """
        self._cursor.reset()
        self._resolutions = {}
        self._scopes = []

        while not self._cursor.at_end():
            self._leave_finished_scopes()

            if self._cursor.check(TokenKind.FUN):
                self._annotate_function_header()
            elif self._cursor.current.is_identifier():
                self._resolve_current()
                self._cursor.advance()
            else:
                self._cursor.advance()

        logger.debug(f"Annotated {len(self._resolutions)} identifier occurrences")
        return Annotations(self._resolutions)

    # =========================================================================
    # Resolution
    # =========================================================================

    def _resolve_current(self) -> None:
        token = self._cursor.current
        resolution = self._lookup(token.value_str)
        if resolution is None:
            raise self._cursor.error(UndeclaredSymbolError, token.value_str)
        self._resolutions[self._cursor.position] = resolution

    def _lookup(self, name: str) -> Optional[Resolution]:
        for scope in reversed(self._scopes):
            if name in scope.parameters:
                return Resolution(
                    name,
                    SymbolKind.PARAMETER,
                    var_type=scope.parameters[name],
                    owner=scope.function,
                )

        if name in self.tables.globals:
            return Resolution(name, SymbolKind.GLOBAL, var_type=self.tables.globals[name])

        if name in self.tables.functions:
            return Resolution(name, SymbolKind.FUNCTION, signature=self.tables.functions[name])

        return None

    def _leave_finished_scopes(self) -> None:
        while self._scopes and self._scopes[-1].end <= self._cursor.position:
            self._scopes.pop()

    def _annotate_function_header(self) -> None:
        """
        🔧 <name> 🌜 <parameter list> 🌛, then open the parameter scope.

        The collector has already validated the header shape.
        """
        self._cursor.advance()  # 🔧

        if not self._cursor.current.is_identifier():
            return
        function = self._cursor.current.value_str
        self._resolve_current()
        self._cursor.advance()

        if not self._cursor.match(TokenKind.LPAREN):
            return

        parameters: dict[str, VariableType] = {}
        pending_type = VariableType.UNRESOLVED
        while not self._cursor.at_end() and not self._cursor.check(TokenKind.RPAREN):
            token = self._cursor.current
            if token.is_type_keyword():
                pending_type = VariableType.from_keyword(token.kind)
            elif token.is_identifier():
                self._declare_parameter(function, token, pending_type)
                parameters[token.value_str] = pending_type
            self._cursor.advance()

        self._cursor.match(TokenKind.RPAREN)

        body_end = self._statement_end(self._cursor.position)
        self._scopes.append(_ParameterScope(function, parameters, body_end))

    def _declare_parameter(self, function: str, token: Token, var_type: VariableType) -> None:
        name = token.value_str
        if name in self.tables.globals:
            raise self._cursor.error(ParameterCollisionError, name, "global")
        if name in self.tables.functions:
            raise self._cursor.error(ParameterCollisionError, name, "function")

        self._resolutions[self._cursor.position] = Resolution(
            name, SymbolKind.PARAMETER, var_type=var_type, owner=function
        )

    # =========================================================================
    # Statement Extent
    # =========================================================================
    # Just enough of the grammar to find where a function body ends. The
    # checker validates the structure later; here malformed input only has
    # to terminate.

    def _kind(self, index: int) -> TokenKind:
        if index >= len(self.tokens):
            return TokenKind.END
        return self.tokens[index].kind

    def _statement_end(self, index: int) -> int:
        kind = self._kind(index)

        if kind == TokenKind.END:
            return index

        if kind == TokenKind.LBRACE:
            return self._group_end(index, TokenKind.LBRACE, TokenKind.RBRACE)

        if kind == TokenKind.IF:
            index = self._statement_end(self._expression_end(index + 1))
            while self._kind(index) == TokenKind.ELSE:
                if self._kind(index + 1) != TokenKind.IF:
                    return self._statement_end(index + 1)
                index = self._statement_end(self._expression_end(index + 2))
            return index

        if kind == TokenKind.WHILE:
            return self._statement_end(self._expression_end(index + 1))

        if kind == TokenKind.FUN:
            index += 1
            while self._kind(index) not in (TokenKind.RPAREN, TokenKind.END):
                index += 1
            if self._kind(index) == TokenKind.RPAREN:
                index += 1
            return self._statement_end(index)

        # Simple statement: up to and including its 🔚
        while self._kind(index) not in (TokenKind.LEND, TokenKind.END, TokenKind.RBRACE):
            index += 1
        if self._kind(index) == TokenKind.LEND:
            index += 1
        return index

    def _expression_end(self, index: int) -> int:
        index = self._operand_end(index)
        while self._kind(index) in BINARY_OPERATORS:
            index = self._operand_end(index + 1)
        return index

    def _operand_end(self, index: int) -> int:
        while self._kind(index) == TokenKind.NOT:
            index += 1
        if self._kind(index) == TokenKind.RAND:
            index += 1
        if self._kind(index) == TokenKind.LPAREN:
            return self._group_end(index, TokenKind.LPAREN, TokenKind.RPAREN)
        if self._kind(index) == TokenKind.END:
            return index
        return index + 1

    def _group_end(self, index: int, opener: TokenKind, closer: TokenKind) -> int:
        """Index just past the closer matching the opener at index."""
        depth = 0
        while self._kind(index) != TokenKind.END:
            kind = self._kind(index)
            if kind == opener:
                depth += 1
            elif kind == closer:
                depth -= 1
                if depth == 0:
                    return index + 1
            index += 1
        return index


def annotate(tokens: Sequence[Token], tables: SymbolTables) -> Annotations:
    """Run the annotator over tokens."""
    return Annotator(tokens, tables).annotate()
