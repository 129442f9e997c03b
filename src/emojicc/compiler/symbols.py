"""
Source Symbol Classification
============================

This module is the character-classification oracle used by the lexer.
It maps reserved source symbols to token kinds and answers the questions
the lexer asks about a single code point: is it whitespace, a format mark,
the string quote, or the start of a digit symbol.

Reserved Symbols
----------------
| Symbol | Kind   | Symbol | Kind    | Symbol | Kind    |
|--------|--------|--------|---------|--------|---------|
| ❓     | IF     | ❌     | ELSE    | 🔁     | WHILE   |
| 📄     | PRINT  | 📞     | CALL    | 🔧     | FUN     |
| 🆕     | NEW    | 🔚     | LEND    | 📎     | COMMA   |
| 🌘     | LBRACE | 🌒     | RBRACE  | 🌜     | LPAREN  |
| 🌛     | RPAREN | ⬅      | ASSIGN  | ↔      | EQEQ    |
| ➕     | PLUS   | ➖     | MINUS   | ✖      | MUL     |
| ➗     | DIV    | 🎲     | RAND    | 🚫     | NOT     |
| 🔀     | SWAP   | ☯      | BOOL    | 🔢     | INT     |
| 🔤     | STR    | 👍     | TRUE    | 👎     | FALSE   |

The string quote 💬 is reserved but produces no token of its own.

Digits
------
A digit symbol is an ASCII digit optionally followed by the emoji
presentation selector (U+FE0F) and/or the combining keycap (U+20E3), so
``7``, ``7⃣`` and ``7️⃣`` all denote seven.
"""

from emojicc.compiler.tokens import TokenKind


# =============================================================================
# Reserved Symbol Table
# =============================================================================

RESERVED: dict[str, TokenKind] = {
    # Control flow
    "❓": TokenKind.IF,
    "❌": TokenKind.ELSE,
    "🔁": TokenKind.WHILE,
    "📄": TokenKind.PRINT,
    "📞": TokenKind.CALL,
    "🔧": TokenKind.FUN,
    "🔀": TokenKind.SWAP,

    # Declarations and types
    "🆕": TokenKind.NEW,
    "☯": TokenKind.BOOL,
    "🔢": TokenKind.INT,
    "🔤": TokenKind.STR,

    # Delimiters
    "🌘": TokenKind.LBRACE,
    "🌒": TokenKind.RBRACE,
    "🌜": TokenKind.LPAREN,
    "🌛": TokenKind.RPAREN,
    "🔚": TokenKind.LEND,
    "📎": TokenKind.COMMA,

    # Operators
    "⬅": TokenKind.ASSIGN,
    "↔": TokenKind.EQEQ,
    "➕": TokenKind.PLUS,
    "➖": TokenKind.MINUS,
    "✖": TokenKind.MUL,
    "➗": TokenKind.DIV,
    "🎲": TokenKind.RAND,
    "🚫": TokenKind.NOT,

    # Boolean literals
    "👍": TokenKind.TRUE,
    "👎": TokenKind.FALSE,
}

# Reverse table, used to render tokens back to source text in diagnostics
SYMBOL_FOR_KIND: dict[TokenKind, str] = {kind: symbol for symbol, kind in RESERVED.items()}

QUOTE = "💬"

# Presentation selectors and the zero-width joiner: never significant
FORMAT_MARKS = frozenset("\ufe0f\ufe0e\u200d")

KEYCAP = "\u20e3"

DIGITS = "0123456789"


# =============================================================================
# Classification Functions
# =============================================================================

def is_reserved(char: str) -> bool:
    """Return True if char maps to a token kind (or is the quote)."""
    return char in RESERVED or char == QUOTE


def is_skippable(char: str) -> bool:
    """Return True for whitespace and format marks between tokens."""
    return char.isspace() or char in FORMAT_MARKS


def is_digit(char: str) -> bool:
    """Return True if char starts a digit symbol."""
    return char != "" and char in DIGITS


def digit_symbol_length(text: str, pos: int) -> int:
    """
    Return how many code points the digit symbol at pos occupies.

    The leading digit is followed by an optional U+FE0F and an optional
    keycap combiner. Returns 0 if there is no digit at pos.
    """
    if pos >= len(text) or not is_digit(text[pos]):
        return 0
    length = 1
    if pos + length < len(text) and text[pos + length] == "\ufe0f":
        length += 1
    if pos + length < len(text) and text[pos + length] == KEYCAP:
        length += 1
    return length


def is_name_char(char: str) -> bool:
    """
    Return True if char may appear inside an identifier run.

    Identifier runs stop at whitespace, reserved symbols and the quote.
    """
    return char != "" and not char.isspace() and not is_reserved(char)
