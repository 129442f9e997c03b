"""
Token Cursor
============

A position into the token list, shared by the collector, the annotator
and the parser. Each pass creates its own cursor; the position only moves
forward within a pass and starts from zero for the next one.
"""

from typing import Optional, Sequence

from emojicc.compiler.errors import CompileError, WINDOW_SIZE
from emojicc.compiler.tokens import Token, TokenKind


class TokenCursor:
    """
    Forward-only cursor over a token list ending with END.

    Attributes:
        tokens: The token list (never modified)
        position: Index of the current token
    """

    def __init__(self, tokens: Sequence[Token]):
        if not tokens or tokens[-1].kind != TokenKind.END:
            raise ValueError("token list must end with an END token")
        self.tokens = tokens
        self.position = 0

    def reset(self) -> None:
        """Rewind to the first token."""
        self.position = 0

    @property
    def current(self) -> Token:
        """The token at the cursor."""
        return self.peek()

    def peek(self, offset: int = 0) -> Token:
        """Look ahead without consuming; positions past the end yield END."""
        pos = self.position + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def advance(self) -> Token:
        """Consume and return the current token. END is never consumed."""
        token = self.peek()
        if token.kind != TokenKind.END:
            self.position += 1
        return token

    def at_end(self) -> bool:
        return self.peek().kind == TokenKind.END

    def check(self, *kinds: TokenKind) -> bool:
        """Return True if the current token is one of kinds."""
        return self.peek().kind in kinds

    def match(self, *kinds: TokenKind) -> Optional[Token]:
        """Consume the current token if it is one of kinds."""
        if self.check(*kinds):
            return self.advance()
        return None

    def window(self, size: int = WINDOW_SIZE) -> list[str]:
        """Source text of the current token and the ones after it."""
        end = min(self.position + size, len(self.tokens) - 1)
        return [token.text for token in self.tokens[self.position:end]]

    def error(self, error_class: type[CompileError], *args, token: Optional[Token] = None, **kwargs) -> CompileError:
        """
        Build an error of error_class located at the cursor.

        Args:
            error_class: CompileError subclass to instantiate
            token: Token to report the location of (default: current)
        """
        token = token or self.peek()
        return error_class(
            *args,
            location=token.location,
            position=self.position,
            window=self.window(),
            **kwargs,
        )
