"""
Declaration Collector (Pass 1)
==============================

One forward scan over the token list that records every declaration, so
that globals and functions may be referenced before the point where they
are declared.

Recognised Headers
------------------
    🆕 <type> <name>
    🔧 <name> 🌜 [<type> <name> [📎]]* 🌛

Every other token is skipped uninterpreted; statement structure is the
checker's business.

Outputs
-------
- SymbolTables: global table and function table, frozen afterwards
- The storage section of the assembly: the fixed preamble followed by a
  zero-initialized cell for each global, each function's entry address
  and each parameter

Errors
------
- MalformedDeclarationError: missing type, missing name, unterminated
  parameter list
- ParameterLimitError: more than six parameters
- DuplicateDeclarationError: a name declared twice (globals and functions
  share one namespace), or a repeated parameter name
"""

import logging
from typing import Sequence

from emojicc.compiler.cursor import TokenCursor
from emojicc.compiler.errors import (
    DuplicateDeclarationError,
    MalformedDeclarationError,
    ParameterLimitError,
)
from emojicc.compiler.naming import function_label, global_label, parameter_label
from emojicc.compiler.tokens import Token, TokenKind
from emojicc.compiler.types import (
    MAX_PARAMETERS,
    FunctionSignature,
    Parameter,
    SymbolTables,
    VariableType,
)

logger = logging.getLogger(__name__)


# Fixed head of the storage section
STORAGE_PREAMBLE = [
    "        .data",
    "argc_:",
    "        .quad   0",
    "Format_ints:",
    '        .asciz  "%ld\\n"',
    "Format_strings:",
    '        .asciz  "%s\\n"',
    "FuncTable:",
    "        .quad   0",
    "FuncCall:",
    "        .quad   0",
]


class DeclarationCollector:
    """
    Collects NEW and FUN declarations into symbol tables.

    Usage:
        collector = DeclarationCollector(tokens)
        tables, storage = collector.collect()

    Attributes:
        tokens: Token list from the lexer
    """

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = tokens
        self._cursor = TokenCursor(tokens)
        self._globals: dict[str, VariableType] = {}
        self._functions: dict[str, FunctionSignature] = {}
        self._locations = {}
        self._storage: list[str] = []

    def collect(self) -> tuple[SymbolTables, str]:
        """
        Scan the whole token list.

        Returns:
            Tuple of (symbol tables, storage section text)

        Raises:
            DeclarationError: On the first malformed declaration
        """
        self._cursor.reset()
        self._storage = list(STORAGE_PREAMBLE)

        while not self._cursor.at_end():
            if self._cursor.check(TokenKind.NEW):
                self._collect_global()
            elif self._cursor.check(TokenKind.FUN):
                self._collect_function()
            else:
                self._cursor.advance()

        logger.debug(
            f"Collected {len(self._globals)} globals and {len(self._functions)} functions"
        )

        tables = SymbolTables(
            globals=dict(self._globals),
            functions=dict(self._functions),
            locations=dict(self._locations),
        )
        return tables, "\n".join(self._storage) + "\n"

    # =========================================================================
    # Header Parsing
    # =========================================================================

    def _collect_global(self) -> None:
        """🆕 <type> <name>"""
        self._cursor.advance()  # 🆕

        var_type = self._expect_type("found 🆕 without a type")
        name_token = self._expect_name("🆕 declaration is missing a name")
        name = name_token.value_str

        self._declare(name, name_token)
        self._globals[name] = var_type

        self._storage.append(f"# 🆕 {var_type} {name}")
        self._emit_cell(global_label(name))

    def _collect_function(self) -> None:
        """🔧 <name> 🌜 [<type> <name> [📎]]* 🌛"""
        self._cursor.advance()  # 🔧

        name_token = self._expect_name("🔧 declaration is missing a name")
        name = name_token.value_str

        if not self._cursor.match(TokenKind.LPAREN):
            raise self._cursor.error(
                MalformedDeclarationError,
                f"expected 🌜 after function name '{name}'",
            )

        parameters: list[Parameter] = []
        seen: dict[str, Token] = {}
        while not self._cursor.match(TokenKind.RPAREN):
            if self._cursor.at_end():
                raise self._cursor.error(
                    MalformedDeclarationError,
                    f"unterminated parameter list of '{name}'",
                    hint="close the list with 🌛",
                )

            param_type = self._expect_type(f"expected a parameter type in '{name}'")
            param_token = self._expect_name(f"parameter of '{name}' is missing a name")
            param_name = param_token.value_str

            if param_name in seen:
                raise self._cursor.error(
                    DuplicateDeclarationError,
                    param_name,
                    original_location=seen[param_name].location,
                    token=param_token,
                )
            seen[param_name] = param_token

            parameters.append(Parameter(param_name, param_type))
            if len(parameters) > MAX_PARAMETERS:
                raise self._cursor.error(
                    ParameterLimitError,
                    name,
                    len(parameters),
                    MAX_PARAMETERS,
                    token=param_token,
                )

            self._cursor.match(TokenKind.COMMA)

        self._declare(name, name_token)
        signature = FunctionSignature(name, tuple(parameters))
        self._functions[name] = signature

        self._storage.append(f"# 🔧 {signature}")
        self._emit_cell(function_label(name))
        for param in parameters:
            self._emit_cell(parameter_label(name, param.name))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _expect_type(self, message: str) -> VariableType:
        token = self._cursor.peek()
        if not token.is_type_keyword():
            raise self._cursor.error(MalformedDeclarationError, message)
        self._cursor.advance()
        return VariableType.from_keyword(token.kind)

    def _expect_name(self, message: str) -> Token:
        token = self._cursor.peek()
        if not token.is_identifier():
            raise self._cursor.error(MalformedDeclarationError, message)
        return self._cursor.advance()

    def _declare(self, name: str, token: Token) -> None:
        """Reserve name in the shared global/function namespace."""
        if name in self._globals or name in self._functions:
            raise self._cursor.error(
                DuplicateDeclarationError,
                name,
                original_location=self._locations.get(name),
                token=token,
            )
        self._locations[name] = token.location

    def _emit_cell(self, label: str) -> None:
        self._storage.append(f"{label}:")
        self._storage.append("        .quad   0")


def collect_declarations(tokens: Sequence[Token]) -> tuple[SymbolTables, str]:
    """Run the declaration collector over tokens."""
    return DeclarationCollector(tokens).collect()
