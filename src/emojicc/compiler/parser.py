"""
Emoji Recursive Descent Parser
==============================

Grammar half of the checker pass (pass 3). Walks the annotated token
list with its own cursor and builds the syntax tree that both the type
checker and the code generator use.

Grammar (Simplified EBNF)
-------------------------
program     ::= statement*
statement   ::= block | declaration | assignment | if_stmt | while_stmt
              | print_stmt | function | call | swap
block       ::= '🌘' statement* '🌒'
declaration ::= '🆕' type IDENT '🔚'
assignment  ::= IDENT '⬅' expr '🔚'
if_stmt     ::= '❓' expr statement ('❌' '❓' expr statement)* ('❌' statement)?
while_stmt  ::= '🔁' expr statement
print_stmt  ::= '📄' expr '🔚'
function    ::= '🔧' IDENT '🌜' (type IDENT '📎'?)* '🌛' statement
call        ::= '📞' IDENT '🌜' (expr ('📎' expr)*)? '🌛' '🔚'
swap        ::= '🔀' IDENT IDENT '🔚'

Expression Precedence (lowest to highest)
-----------------------------------------
1. equality        ↔
2. additive        ➕ ➖
3. multiplicative  ✖ ➗
4. primary         literal, IDENT, 🌜 expr 🌛, 🎲 🌜 expr 🌛, 🚫 primary

All binary operators are left-associative.

Sequence Termination
--------------------
A statement sequence ends at 🌒 or at END. At top level a 🌒 has no
matching 🌘; inside a block END means the 🌒 is missing. Both are fatal.
"""

import logging
from typing import Sequence

from emojicc.compiler.annotator import Annotations
from emojicc.compiler.ast import (
    AssignmentStatement,
    BinaryExpression,
    BinaryOperator,
    BlockStatement,
    BooleanLiteral,
    CallStatement,
    DeclarationStatement,
    Expression,
    FunctionDeclaration,
    IdentifierExpression,
    IfStatement,
    IntegerLiteral,
    NotExpression,
    PrintStatement,
    ProgramNode,
    RandomExpression,
    Statement,
    StringLiteral,
    SwapStatement,
    WhileStatement,
)
from emojicc.compiler.cursor import TokenCursor
from emojicc.compiler.errors import (
    GrammarError,
    InternalCompilerError,
    MisplacedElseError,
    MissingTokenError,
    UnexpectedTokenError,
)
from emojicc.compiler.tokens import Token, TokenKind
from emojicc.compiler.types import VariableType

logger = logging.getLogger(__name__)


_ADDITIVE = {
    TokenKind.PLUS: BinaryOperator.ADD,
    TokenKind.MINUS: BinaryOperator.SUBTRACT,
}

_MULTIPLICATIVE = {
    TokenKind.MUL: BinaryOperator.MULTIPLY,
    TokenKind.DIV: BinaryOperator.DIVIDE,
}


class Parser:
    """
    Recursive descent parser for the emoji language.

    The first grammar violation raises; there is no error recovery.

    Attributes:
        tokens: Token list from the lexer
        annotations: Identifier resolutions from the annotator
    """

    def __init__(self, tokens: Sequence[Token], annotations: Annotations):
        self.tokens = tokens
        self.annotations = annotations
        self._cursor = TokenCursor(tokens)

    def parse(self) -> ProgramNode:
        """
        Parse the token list into a ProgramNode.

        Raises:
            GrammarError: On the first grammar violation
        """
        self._cursor.reset()
        program = ProgramNode(self._cursor.current.location, token_index=0)

        while not self._cursor.at_end():
            if self._cursor.check(TokenKind.RBRACE):
                raise self._cursor.error(
                    GrammarError,
                    "unmatched brace",
                    hint="this 🌒 closes no 🌘",
                )
            program.statements.append(self._parse_statement())

        logger.debug(f"Parsed {len(program.statements)} top-level statements")
        return program

    # =========================================================================
    # Token Helpers
    # =========================================================================

    def _node_args(self) -> dict:
        """Location and token index of the current token, for node construction."""
        return {
            "location": self._cursor.current.location,
            "token_index": self._cursor.position,
        }

    def _expect(self, kind: TokenKind, description: str) -> Token:
        token = self._cursor.match(kind)
        if token is None:
            raise self._cursor.error(MissingTokenError, description)
        return token

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement(self) -> Statement:
        kind = self._cursor.current.kind

        if kind == TokenKind.LBRACE:
            return self._parse_block()
        if kind == TokenKind.NEW:
            return self._parse_declaration()
        if kind == TokenKind.IF:
            return self._parse_if_statement()
        if kind == TokenKind.ELSE:
            raise self._cursor.error(MisplacedElseError)
        if kind == TokenKind.WHILE:
            return self._parse_while_statement()
        if kind == TokenKind.PRINT:
            return self._parse_print_statement()
        if kind == TokenKind.FUN:
            return self._parse_function()
        if kind == TokenKind.CALL:
            return self._parse_call()
        if kind == TokenKind.SWAP:
            return self._parse_swap()
        if self._cursor.current.is_identifier():
            return self._parse_assignment()
        if kind == TokenKind.END:
            raise self._cursor.error(MissingTokenError, "a statement")

        raise self._cursor.error(
            UnexpectedTokenError,
            self._cursor.current.text,
            expected="a statement",
        )

    def _parse_block(self) -> BlockStatement:
        block = BlockStatement(**self._node_args())
        self._cursor.advance()  # 🌘

        while not self._cursor.match(TokenKind.RBRACE):
            if self._cursor.at_end():
                raise self._cursor.error(
                    GrammarError,
                    "missing closing brace",
                    hint=f"the 🌘 at {block.location} is never closed",
                )
            block.statements.append(self._parse_statement())

        return block

    def _parse_declaration(self) -> DeclarationStatement:
        node_args = self._node_args()
        self._cursor.advance()  # 🆕

        # Header shape already validated by the declaration collector
        type_token = self._cursor.advance()
        name_token = self._cursor.advance()
        self._expect(TokenKind.LEND, "🔚 after declaration")

        return DeclarationStatement(
            **node_args,
            name=name_token.value_str,
            var_type=VariableType.from_keyword(type_token.kind),
        )

    def _parse_assignment(self) -> AssignmentStatement:
        node_args = self._node_args()
        target = self._parse_identifier()
        self._expect(TokenKind.ASSIGN, f"⬅ after '{target.name}'")
        value = self._parse_expression()
        self._expect(TokenKind.LEND, "🔚 after assignment")
        return AssignmentStatement(**node_args, target=target, value=value)

    def _parse_if_statement(self) -> IfStatement:
        """
        ❓ expr stmt (❌ ❓ expr stmt)* (❌ stmt)?

        The else-if chain becomes nested IfStatements. A second bare ❌ after
        the final else is rejected.
        """
        node = self._parse_conditional()
        tail = node

        while self._cursor.match(TokenKind.ELSE):
            if self._cursor.check(TokenKind.IF):
                nested = self._parse_conditional()
                tail.else_branch = nested
                tail = nested
                continue

            tail.else_branch = self._parse_statement()
            if self._cursor.check(TokenKind.ELSE):
                raise self._cursor.error(MisplacedElseError)
            break

        return node

    def _parse_conditional(self) -> IfStatement:
        """❓ expr stmt"""
        node_args = self._node_args()
        self._cursor.advance()  # ❓
        condition = self._parse_expression()
        then_branch = self._parse_statement()
        return IfStatement(**node_args, condition=condition, then_branch=then_branch)

    def _parse_while_statement(self) -> WhileStatement:
        node_args = self._node_args()
        self._cursor.advance()  # 🔁
        condition = self._parse_expression()
        body = self._parse_statement()
        return WhileStatement(**node_args, condition=condition, body=body)

    def _parse_print_statement(self) -> PrintStatement:
        node_args = self._node_args()
        self._cursor.advance()  # 📄
        value = self._parse_expression()
        self._expect(TokenKind.LEND, "🔚 after 📄 expression")
        return PrintStatement(**node_args, value=value)

    def _parse_function(self) -> FunctionDeclaration:
        node_args = self._node_args()
        self._cursor.advance()  # 🔧

        name = self._parse_identifier()
        if name.resolution is None or name.resolution.signature is None:
            raise InternalCompilerError(f"function '{name.name}' has no signature")

        # Parameter list already validated by the declaration collector
        self._expect(TokenKind.LPAREN, "🌜 after function name")
        while not self._cursor.match(TokenKind.RPAREN):
            if self._cursor.at_end():
                raise self._cursor.error(MissingTokenError, "🌛 to close the parameter list")
            self._cursor.advance()

        body = self._parse_statement()
        return FunctionDeclaration(
            **node_args,
            name=name.name,
            signature=name.resolution.signature,
            body=body,
        )

    def _parse_call(self) -> CallStatement:
        node_args = self._node_args()
        self._cursor.advance()  # 📞

        function = self._parse_identifier()
        self._expect(TokenKind.LPAREN, f"🌜 after '{function.name}'")

        arguments: list[Expression] = []
        if not self._cursor.check(TokenKind.RPAREN):
            arguments.append(self._parse_expression())
            while self._cursor.match(TokenKind.COMMA):
                arguments.append(self._parse_expression())

        self._expect(TokenKind.RPAREN, "🌛 to close the argument list")
        self._expect(TokenKind.LEND, "🔚 after call")
        return CallStatement(**node_args, function=function, arguments=arguments)

    def _parse_swap(self) -> SwapStatement:
        node_args = self._node_args()
        self._cursor.advance()  # 🔀
        left = self._parse_identifier()
        right = self._parse_identifier()
        self._expect(TokenKind.LEND, "🔚 after swap")
        return SwapStatement(**node_args, left=left, right=right)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """equality ::= additive ('↔' additive)*"""
        left = self._parse_additive()
        while self._cursor.check(TokenKind.EQEQ):
            node_args = self._node_args()
            self._cursor.advance()
            right = self._parse_additive()
            left = BinaryExpression(
                **node_args, operator=BinaryOperator.EQUAL, left=left, right=right
            )
        return left

    def _parse_additive(self) -> Expression:
        left = self._parse_multiplicative()
        while self._cursor.current.kind in _ADDITIVE:
            node_args = self._node_args()
            operator = _ADDITIVE[self._cursor.advance().kind]
            right = self._parse_multiplicative()
            left = BinaryExpression(**node_args, operator=operator, left=left, right=right)
        return left

    def _parse_multiplicative(self) -> Expression:
        left = self._parse_primary()
        while self._cursor.current.kind in _MULTIPLICATIVE:
            node_args = self._node_args()
            operator = _MULTIPLICATIVE[self._cursor.advance().kind]
            right = self._parse_primary()
            left = BinaryExpression(**node_args, operator=operator, left=left, right=right)
        return left

    def _parse_primary(self) -> Expression:
        token = self._cursor.current
        node_args = self._node_args()

        if token.kind == TokenKind.INTEGER:
            self._cursor.advance()
            return IntegerLiteral(**node_args, value=token.value_int)

        if token.kind == TokenKind.STRING:
            self._cursor.advance()
            return StringLiteral(**node_args, value=token.value_str)

        if token.kind in (TokenKind.TRUE, TokenKind.FALSE):
            self._cursor.advance()
            return BooleanLiteral(**node_args, value=token.kind == TokenKind.TRUE)

        if token.is_identifier():
            return self._parse_identifier()

        if token.kind == TokenKind.LPAREN:
            self._cursor.advance()
            expr = self._parse_expression()
            self._expect(TokenKind.RPAREN, "🌛 to close the parenthesized expression")
            return expr

        if token.kind == TokenKind.RAND:
            self._cursor.advance()
            self._expect(TokenKind.LPAREN, "🌜 after 🎲")
            operand = self._parse_expression()
            self._expect(TokenKind.RPAREN, "🌛 to close 🎲")
            return RandomExpression(**node_args, operand=operand)

        if token.kind == TokenKind.NOT:
            self._cursor.advance()
            return NotExpression(**node_args, operand=self._parse_primary())

        if token.kind == TokenKind.END:
            raise self._cursor.error(MissingTokenError, "an expression")

        raise self._cursor.error(UnexpectedTokenError, token.text, expected="an expression")

    def _parse_identifier(self) -> IdentifierExpression:
        token = self._cursor.current
        if not token.is_identifier():
            if token.kind == TokenKind.END:
                raise self._cursor.error(MissingTokenError, "an identifier")
            raise self._cursor.error(UnexpectedTokenError, token.text, expected="an identifier")

        resolution = self.annotations.get(self._cursor.position)
        if resolution is None:
            raise InternalCompilerError(
                f"identifier '{token.value_str}' at {token.location} was never annotated"
            )

        node_args = self._node_args()
        self._cursor.advance()
        return IdentifierExpression(**node_args, name=token.value_str, resolution=resolution)


def parse(tokens: Sequence[Token], annotations: Annotations) -> ProgramNode:
    """Build the syntax tree for an annotated token list."""
    return Parser(tokens, annotations).parse()
