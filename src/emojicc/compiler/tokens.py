"""
Token Definitions
=================

Token kinds and the immutable Token record shared by every compiler pass.

Tokens are created once by the lexer and never modified afterwards.
Identifier resolution is kept out of the token itself: the annotator
records it in a separate map keyed by token index (see annotator.py).
"""

from dataclasses import dataclass
from enum import Enum, auto

from emojicc.errors import SourceLocation


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    Lexical categories of the emoji language.

    Reserved symbols map one-to-one onto most of these kinds. The remaining
    kinds (INTEGER, STRING, ID, NAME, END) are produced by scanning runs of
    non-reserved symbols or by reaching the end of the input.
    """

    # === Structural ===
    END = auto()            # End of input

    # === Literals and names ===
    INTEGER = auto()        # Digit run
    STRING = auto()         # 💬...💬
    TRUE = auto()           # 👍
    FALSE = auto()          # 👎
    ID = auto()             # Name scanned in defining/defined mode
    NAME = auto()           # Name scanned in default mode

    # === Type keywords ===
    BOOL = auto()           # ☯
    INT = auto()            # 🔢
    STR = auto()            # 🔤

    # === Statement keywords ===
    NEW = auto()            # 🆕
    FUN = auto()            # 🔧
    CALL = auto()           # 📞
    IF = auto()             # ❓
    ELSE = auto()           # ❌
    WHILE = auto()          # 🔁
    PRINT = auto()          # 📄
    SWAP = auto()           # 🔀

    # === Operators ===
    ASSIGN = auto()         # ⬅
    EQEQ = auto()           # ↔
    PLUS = auto()           # ➕
    MINUS = auto()          # ➖
    MUL = auto()            # ✖
    DIV = auto()            # ➗
    RAND = auto()           # 🎲
    NOT = auto()            # 🚫

    # === Delimiters ===
    LPAREN = auto()         # 🌜
    RPAREN = auto()         # 🌛
    LBRACE = auto()         # 🌘
    RBRACE = auto()         # 🌒
    COMMA = auto()          # 📎
    LEND = auto()           # 🔚


TYPE_KEYWORDS = frozenset({TokenKind.BOOL, TokenKind.INT, TokenKind.STR})

IDENTIFIER_KINDS = frozenset({TokenKind.ID, TokenKind.NAME})

# Kinds after which the lexer enters "defined" mode
VALUE_KINDS = frozenset({
    TokenKind.INTEGER,
    TokenKind.STRING,
    TokenKind.TRUE,
    TokenKind.FALSE,
    TokenKind.NAME,
})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical element.

    Attributes:
        kind: The TokenKind classification
        value_int: Integer payload (INTEGER literals)
        value_str: Text payload (STRING literals and names)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed, in code points)
        filename: Name of the source file
    """
    kind: TokenKind
    value_int: int = 0
    value_str: str = ""
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.kind == TokenKind.INTEGER:
            return f"Token({self.kind.name}, {self.value_int}, {self.line}:{self.column})"
        if self.kind in (TokenKind.STRING, TokenKind.ID, TokenKind.NAME):
            return f"Token({self.kind.name}, {self.value_str!r}, {self.line}:{self.column})"
        return f"Token({self.kind.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """Render the token the way it would appear in source."""
        # Imported here: symbols imports this module for TokenKind
        from emojicc.compiler.symbols import QUOTE, SYMBOL_FOR_KIND

        if self.kind == TokenKind.INTEGER:
            return str(self.value_int)
        if self.kind == TokenKind.STRING:
            return f"{QUOTE}{self.value_str}{QUOTE}"
        if self.kind in IDENTIFIER_KINDS:
            return self.value_str
        if self.kind == TokenKind.END:
            return "<end of input>"
        return SYMBOL_FOR_KIND.get(self.kind, self.kind.name)

    def is_identifier(self) -> bool:
        """Return True for ID and NAME tokens."""
        return self.kind in IDENTIFIER_KINDS

    def is_type_keyword(self) -> bool:
        """Return True for ☯, 🔢 and 🔤."""
        return self.kind in TYPE_KEYWORDS
