"""
Emoji Type Checker (Pass 3)
===========================

Builds the syntax tree (see parser.py) and then propagates and enforces
types over it. Every expression node leaves this pass with a concrete
resolved_type; the code generator relies on that.

Type Rules
----------
| Construct            | Rule                                              |
|----------------------|---------------------------------------------------|
| ❓ / 🔁 condition     | must convert to Boolean                           |
| id ⬅ expr            | expr must convert to the variable's type         |
| 📞 f(args)           | arity must match; each arg converts to its param |
| 🔀 a b               | a and b must have identical types                 |
| 🎲 🌜 e 🌛           | e must convert to Integer; result Integer         |
| 🚫 e                 | e must convert to Boolean; result Boolean         |
| ➕ ➖ ✖ ➗ ↔          | see types.py                                      |

A function name is never a value: it may only appear after 🔧 or 📞.
"""

import logging
from typing import Optional, Sequence

from emojicc.compiler.annotator import Annotations, SymbolKind
from emojicc.compiler.ast import (
    ASTNode,
    ASTVisitor,
    AssignmentStatement,
    BinaryExpression,
    BinaryOperator,
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
    StringLiteral,
    SwapStatement,
    WhileStatement,
)
from emojicc.compiler.cursor import TokenCursor
from emojicc.compiler.errors import ArgumentCountError, CompileError, TypeCheckError
from emojicc.compiler.parser import parse
from emojicc.compiler.tokens import Token
from emojicc.compiler.types import (
    VariableType,
    arithmetic_result,
    can_convert_to,
    equality_result,
    plus_result,
)

logger = logging.getLogger(__name__)


_ARITHMETIC_SYMBOLS = {
    BinaryOperator.SUBTRACT: "➖",
    BinaryOperator.MULTIPLY: "✖",
    BinaryOperator.DIVIDE: "➗",
}


class TypeChecker(ASTVisitor):
    """
    Propagates and checks types over a syntax tree.

    Usage:
        TypeChecker(tokens).check(program)

    Attributes:
        tokens: Token list the tree was built from (for error windows)
    """

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = tokens
        self._cursor = TokenCursor(tokens)

    def check(self, program: ProgramNode) -> ProgramNode:
        """
        Type-check program in place and return it.

        Raises:
            TypeCheckError: On the first type rule violation
        """
        self.visit(program)
        logger.debug("Type check passed")
        return program

    def _error(self, error_class: type[CompileError], node: ASTNode, *args, **kwargs) -> CompileError:
        """Build an error located at node's leading token."""
        if node.token_index is None:
            return error_class(*args, location=node.location, **kwargs)
        self._cursor.position = node.token_index
        return self._cursor.error(error_class, *args, **kwargs)

    def _require(
        self,
        expr: Expression,
        target: VariableType,
        message: str,
        node: Optional[ASTNode] = None,
    ) -> VariableType:
        """Type expr and require it to convert to target."""
        actual = self.visit(expr)
        if not can_convert_to(actual, target):
            raise self._error(
                TypeCheckError,
                node or expr,
                message,
                expected_type=str(target),
                actual_type=str(actual),
            )
        return actual

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_DeclarationStatement(self, node: DeclarationStatement):
        pass

    def visit_AssignmentStatement(self, node: AssignmentStatement):
        target = node.target
        if not target.resolution.is_variable:
            raise self._error(TypeCheckError, target, f"cannot assign to function '{target.name}'")

        target.resolved_type = target.resolution.var_type
        self._require(
            node.value,
            target.resolved_type,
            f"cannot assign to {target.resolved_type} variable '{target.name}'",
        )

    def visit_IfStatement(self, node: IfStatement):
        self._require(node.condition, VariableType.BOOLEAN, "condition must evaluate to boolean")
        self.visit(node.then_branch)
        if node.else_branch is not None:
            self.visit(node.else_branch)

    def visit_WhileStatement(self, node: WhileStatement):
        self._require(node.condition, VariableType.BOOLEAN, "condition must evaluate to boolean")
        self.visit(node.body)

    def visit_PrintStatement(self, node: PrintStatement):
        self.visit(node.value)

    def visit_FunctionDeclaration(self, node: FunctionDeclaration):
        self.visit(node.body)

    def visit_CallStatement(self, node: CallStatement):
        callee = node.function
        if callee.resolution.kind != SymbolKind.FUNCTION:
            raise self._error(TypeCheckError, callee, f"'{callee.name}' is not a function")

        signature = callee.resolution.signature
        if len(node.arguments) != signature.arity:
            raise self._error(
                ArgumentCountError,
                node,
                callee.name,
                signature.arity,
                len(node.arguments),
            )

        for index, (arg, param) in enumerate(zip(node.arguments, signature.parameters), 1):
            self._require(
                arg,
                param.var_type,
                f"argument {index} of '{callee.name}' must convert to {param.var_type} "
                f"parameter '{param.name}'",
            )

    def visit_SwapStatement(self, node: SwapStatement):
        left = self.visit(node.left)
        right = self.visit(node.right)
        if left != right:
            raise self._error(
                TypeCheckError,
                node,
                f"cannot swap {left} '{node.left.name}' with {right} '{node.right.name}'",
                expected_type=str(left),
                actual_type=str(right),
            )

    # =========================================================================
    # Expressions
    # =========================================================================
    # Each visit returns the expression's type after recording it.

    def visit_IntegerLiteral(self, node: IntegerLiteral) -> VariableType:
        node.resolved_type = VariableType.INTEGER
        return node.resolved_type

    def visit_StringLiteral(self, node: StringLiteral) -> VariableType:
        node.resolved_type = VariableType.STRING
        return node.resolved_type

    def visit_BooleanLiteral(self, node: BooleanLiteral) -> VariableType:
        node.resolved_type = VariableType.BOOLEAN
        return node.resolved_type

    def visit_IdentifierExpression(self, node: IdentifierExpression) -> VariableType:
        if not node.resolution.is_variable:
            raise self._error(
                TypeCheckError,
                node,
                f"function '{node.name}' cannot be used as a value",
                hint=f"call it with 📞 {node.name} 🌜 ... 🌛 🔚",
            )
        node.resolved_type = node.resolution.var_type
        return node.resolved_type

    def visit_BinaryExpression(self, node: BinaryExpression) -> VariableType:
        left = self.visit(node.left)
        right = self.visit(node.right)

        if node.operator == BinaryOperator.ADD:
            result = plus_result(left, right)
            if result is None:
                raise self._error(
                    TypeCheckError,
                    node,
                    "unresolved type",
                    hint=f"➕ is not defined for {left} and {right}",
                )
        elif node.operator == BinaryOperator.EQUAL:
            result = equality_result(left, right)
            if result is None:
                raise self._error(
                    TypeCheckError,
                    node,
                    "↔ operands must have identical types",
                    expected_type=str(left),
                    actual_type=str(right),
                )
        else:
            result = arithmetic_result(left, right)
            if result is None:
                symbol = _ARITHMETIC_SYMBOLS[node.operator]
                raise self._error(
                    TypeCheckError,
                    node,
                    f"operator {symbol} cannot be applied to String",
                )

        node.resolved_type = result
        return result

    def visit_RandomExpression(self, node: RandomExpression) -> VariableType:
        self._require(node.operand, VariableType.INTEGER, "🎲 bound must evaluate to integer", node)
        node.resolved_type = VariableType.INTEGER
        return node.resolved_type

    def visit_NotExpression(self, node: NotExpression) -> VariableType:
        self._require(node.operand, VariableType.BOOLEAN, "🚫 operand must evaluate to boolean", node)
        node.resolved_type = VariableType.BOOLEAN
        return node.resolved_type


def check(tokens: Sequence[Token], annotations: Annotations) -> ProgramNode:
    """
    Run the checker pass: build the syntax tree, then type-check it.

    Returns:
        The checked ProgramNode

    Raises:
        GrammarError: If the tokens do not form a program
        TypeCheckError: If a type rule is violated
    """
    program = parse(tokens, annotations)
    return TypeChecker(tokens).check(program)
