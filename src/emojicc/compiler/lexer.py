"""
Emoji Lexer (Tokenizer)
=======================

This module converts emoji source text into a finite list of tokens
terminated by an END token.

Token Categories
----------------
- Reserved symbols: one symbol, one token kind (see symbols.py)
- Integers: runs of digit symbols, e.g. ``4️⃣2️⃣`` → 42
- Strings: text between two 💬 quotes
- Names: maximal runs of non-reserved, non-whitespace symbols

Lexer Modes
-----------
The lexer is stateful across a declaration:

| Mode     | Entered after        | A name run becomes |
|----------|----------------------|--------------------|
| DEFAULT  | anything else        | NAME               |
| DEFINING | a type keyword       | ID                 |
| DEFINED  | a value token        | ID                 |

DEFINED collapses back to DEFAULT on the next token, DEFINING persists
until a name is scanned.

Error Behaviour
---------------
The lexer never raises. Malformed input degenerates to the longest token
that can be read at the current position; an unterminated string simply
runs to the end of the input.

Example Usage
-------------
>>> from emojicc.compiler.lexer import Lexer
>>> for token in Lexer("🆕 🔢 x 🔚").tokenize():
...     print(token)
Token(NEW, 1:1)
Token(INT, 1:3)
Token(ID, 'x', 1:5)
Token(LEND, 1:7)
Token(END, 1:8)
"""

import logging
from enum import Enum, auto
from typing import Iterator

from emojicc.compiler import symbols
from emojicc.compiler.tokens import Token, TokenKind, VALUE_KINDS

logger = logging.getLogger(__name__)


class LexerMode(Enum):
    """Lexer state across a declaration."""
    DEFAULT = auto()
    DEFINING = auto()
    DEFINED = auto()


class Lexer:
    """
    Tokenizes emoji source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source text being tokenized
        filename: Name of the source file (for diagnostics)
        mode: Current LexerMode
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self.mode = LexerMode.DEFAULT

        # Current position in source, in code points
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source text.

        Yields:
            Token objects, always ending with a single END token
        """
        count = 0
        while True:
            self._skip_whitespace()
            if self._at_end():
                break

            token = self._scan_token()
            self._update_mode(token.kind)
            count += 1
            yield token

        logger.debug(f"Lexed {count} tokens from {self.filename}")
        yield self._make_token(TokenKind.END, self._line, self._column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look at a character without advancing; empty string past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume one character, keeping line and column up to date."""
        if self._at_end():
            return ""
        char = self.source[self._pos]
        self._pos += 1
        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return char

    def _skip_whitespace(self) -> None:
        """Skip whitespace and format marks (variation selectors, joiners)."""
        while not self._at_end() and symbols.is_skippable(self._peek()):
            self._advance()

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        kind: TokenKind,
        line: int,
        column: int,
        value_int: int = 0,
        value_str: str = "",
    ) -> Token:
        return Token(
            kind=kind,
            value_int=value_int,
            value_str=value_str,
            line=line,
            column=column,
            filename=self.filename,
        )

    def _update_mode(self, kind: TokenKind) -> None:
        """
        Advance the declaration state machine after emitting a token.

        Order matters: a DEFINED mode is spent by whatever token follows
        it, but a value token immediately re-enters DEFINED.
        """
        if kind in (TokenKind.BOOL, TokenKind.INT, TokenKind.STR):
            self.mode = LexerMode.DEFINING
        elif self.mode == LexerMode.DEFINED:
            self.mode = LexerMode.DEFAULT

        if kind in VALUE_KINDS:
            self.mode = LexerMode.DEFINED

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        line, column = self._line, self._column
        char = self._peek()

        kind = symbols.RESERVED.get(char)
        if kind is not None:
            self._advance()
            return self._make_token(kind, line, column)

        if symbols.is_digit(char):
            return self._scan_integer(line, column)

        if char == symbols.QUOTE:
            return self._scan_string(line, column)

        return self._scan_name(line, column)

    def _scan_integer(self, line: int, column: int) -> Token:
        """
        Scan a run of digit symbols, accumulating base 10 left to right.
        """
        value = 0
        while True:
            length = symbols.digit_symbol_length(self.source, self._pos)
            if length == 0:
                break
            value = value * 10 + int(self._peek())
            for _ in range(length):
                self._advance()

        return self._make_token(TokenKind.INTEGER, line, column, value_int=value)

    def _scan_string(self, line: int, column: int) -> Token:
        """
        Scan a 💬-quoted string literal.

        The payload is exactly the text strictly between the quotes. A
        missing closing quote takes the rest of the input.
        """
        self._advance()  # opening quote

        chars = []
        while not self._at_end() and self._peek() != symbols.QUOTE:
            chars.append(self._advance())

        if self._at_end():
            logger.debug(f"Unterminated string at {self.filename}:{line}:{column}")
        else:
            self._advance()  # closing quote

        return self._make_token(TokenKind.STRING, line, column, value_str="".join(chars))

    def _scan_name(self, line: int, column: int) -> Token:
        """
        Scan a maximal run of name symbols.

        Format marks inside the run are dropped, so ``❤`` and ``❤️`` name
        the same variable.
        """
        chars = []
        while symbols.is_name_char(self._peek()):
            char = self._advance()
            if char not in symbols.FORMAT_MARKS:
                chars.append(char)

        name = "".join(chars)

        if self.mode in (LexerMode.DEFINING, LexerMode.DEFINED):
            self.mode = LexerMode.DEFAULT
            return self._make_token(TokenKind.ID, line, column, value_str=name)

        return self._make_token(TokenKind.NAME, line, column, value_str=name)


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize source text into a list ending with END."""
    return list(Lexer(source, filename).tokenize())
