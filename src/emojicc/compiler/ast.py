"""
Emoji Syntax Tree Definitions
=============================

This module defines the syntax tree built by the checker pass. The tree
is constructed once, type-checked in place (every expression receives a
resolved_type) and then walked by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node, the top-level statement sequence
├── Statements
│   ├── BlockStatement - 🌘 ... 🌒
│   ├── DeclarationStatement - 🆕 type id 🔚
│   ├── AssignmentStatement - id ⬅ expr 🔚
│   ├── IfStatement - ❓ expr stmt [❌ stmt]
│   ├── WhileStatement - 🔁 expr stmt
│   ├── PrintStatement - 📄 expr 🔚
│   ├── FunctionDeclaration - 🔧 id 🌜 params 🌛 stmt
│   ├── CallStatement - 📞 id 🌜 args 🌛 🔚
│   └── SwapStatement - 🔀 id id 🔚
└── Expressions
    ├── BinaryExpression - ↔ ➕ ➖ ✖ ➗
    ├── RandomExpression - 🎲 🌜 expr 🌛
    ├── NotExpression - 🚫 expr
    ├── IdentifierExpression - variable (or misused function) reference
    ├── IntegerLiteral
    ├── StringLiteral
    └── BooleanLiteral - 👍 / 👎

Design Notes
------------
- All nodes are dataclasses
- Each node stores the location of its leading token
- Identifier nodes carry the Resolution recorded by the annotator
- An else-if chain is a nested IfStatement in else_branch
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional

from emojicc.compiler.annotator import Resolution
from emojicc.compiler.types import FunctionSignature, VariableType
from emojicc.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all syntax tree nodes.

    Attributes:
        location: Source location of the node's leading token
        token_index: Index of that token in the token list
    """
    location: SourceLocation
    token_index: Optional[int] = field(default=None, compare=False)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


@dataclass
class Expression(ASTNode):
    """
    Base class for all expression nodes.

    Attributes:
        resolved_type: The value type (set during type checking)
    """
    resolved_type: VariableType = field(default=VariableType.UNRESOLVED, compare=False)


@dataclass
class Statement(ASTNode):
    """Base class for all statement nodes."""
    pass


@dataclass
class ProgramNode(ASTNode):
    """
    Root node: the top-level statement sequence.

    Attributes:
        statements: Statements in program order
    """
    statements: list[Statement] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class BlockStatement(Statement):
    """Brace-delimited statement sequence."""
    statements: list[Statement] = field(default_factory=list)


@dataclass
class DeclarationStatement(Statement):
    """
    Global variable declaration.

    Storage was already allocated by the declaration collector; the node
    generates no code.
    """
    name: str = ""
    var_type: VariableType = VariableType.UNRESOLVED


@dataclass
class AssignmentStatement(Statement):
    """
    Attributes:
        target: The assigned identifier
        value: The value expression
    """
    target: "IdentifierExpression" = None
    value: Expression = None


@dataclass
class IfStatement(Statement):
    """
    Attributes:
        condition: Branch condition
        then_branch: Statement run when the condition holds
        else_branch: Optional statement (or nested IfStatement) otherwise
    """
    condition: Expression = None
    then_branch: Statement = None
    else_branch: Optional[Statement] = None


@dataclass
class WhileStatement(Statement):
    condition: Expression = None
    body: Statement = None


@dataclass
class PrintStatement(Statement):
    value: Expression = None


@dataclass
class FunctionDeclaration(Statement):
    """
    Function definition.

    Attributes:
        name: Function name
        signature: Signature recorded by the declaration collector
        body: The single body statement
    """
    name: str = ""
    signature: FunctionSignature = None
    body: Statement = None


@dataclass
class CallStatement(Statement):
    """
    Attributes:
        function: Identifier naming the callee
        arguments: Argument expressions in call order
    """
    function: "IdentifierExpression" = None
    arguments: list[Expression] = field(default_factory=list)


@dataclass
class SwapStatement(Statement):
    """Exchange the values of two variables."""
    left: "IdentifierExpression" = None
    right: "IdentifierExpression" = None


# =============================================================================
# Expression Nodes
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator types."""
    EQUAL = auto()      # ↔
    ADD = auto()        # ➕
    SUBTRACT = auto()   # ➖
    MULTIPLY = auto()   # ✖
    DIVIDE = auto()     # ➗


@dataclass
class BinaryExpression(Expression):
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass
class RandomExpression(Expression):
    """🎲 🌜 bound 🌛: a pseudo-random integer in [0, bound)."""
    operand: Expression = None


@dataclass
class NotExpression(Expression):
    """🚫 operand: Boolean negation."""
    operand: Expression = None


@dataclass
class IdentifierExpression(Expression):
    """
    Reference to a declared name.

    Attributes:
        name: The identifier text
        resolution: What the annotator bound this occurrence to
    """
    name: str = ""
    resolution: Optional[Resolution] = field(default=None, compare=False)


@dataclass
class IntegerLiteral(Expression):
    value: int = 0


@dataclass
class StringLiteral(Expression):
    value: str = ""


@dataclass
class BooleanLiteral(Expression):
    value: bool = False


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for syntax tree visitors.

    Subclasses override visit_* methods for the node types they handle.

    Usage:
        class MyVisitor(ASTVisitor):
            def visit_PrintStatement(self, node):
                ...

        MyVisitor().visit(program)
    """

    def visit(self, node: ASTNode) -> Any:
        """Dispatch to visit_<ClassName>, falling back to generic_visit."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

_OPERATOR_SYMBOLS = {
    BinaryOperator.EQUAL: "↔",
    BinaryOperator.ADD: "➕",
    BinaryOperator.SUBTRACT: "➖",
    BinaryOperator.MULTIPLY: "✖",
    BinaryOperator.DIVIDE: "➗",
}


class ASTPrinter(ASTVisitor):
    """
    Pretty printer for syntax tree debugging (emjc --ast).

    Usage:
        output = ASTPrinter().print(program)
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the tree and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        self.output.append(f"{'  ' * self.indent_level}{text}")

    def _nested(self, label: str, node: ASTNode) -> None:
        self._emit(label)
        self.indent_level += 1
        self.visit(node)
        self.indent_level -= 1

    def visit_ProgramNode(self, node: ProgramNode):
        self._emit("Program")
        self.indent_level += 1
        for stmt in node.statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_BlockStatement(self, node: BlockStatement):
        self._emit("Block")
        self.indent_level += 1
        for stmt in node.statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_DeclarationStatement(self, node: DeclarationStatement):
        self._emit(f"Declare: {node.var_type} {node.name}")

    def visit_AssignmentStatement(self, node: AssignmentStatement):
        self._emit(f"Assign: {node.target.name} ⬅ {self.format_expression(node.value)}")

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If ({self.format_expression(node.condition)})")
        self.indent_level += 1
        self._nested("Then:", node.then_branch)
        if node.else_branch:
            self._nested("Else:", node.else_branch)
        self.indent_level -= 1

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit(f"While ({self.format_expression(node.condition)})")
        self.indent_level += 1
        self.visit(node.body)
        self.indent_level -= 1

    def visit_PrintStatement(self, node: PrintStatement):
        self._emit(f"Print: {self.format_expression(node.value)}")

    def visit_FunctionDeclaration(self, node: FunctionDeclaration):
        self._emit(f"Function: {node.signature}")
        self.indent_level += 1
        self.visit(node.body)
        self.indent_level -= 1

    def visit_CallStatement(self, node: CallStatement):
        args = ", ".join(self.format_expression(arg) for arg in node.arguments)
        self._emit(f"Call: {node.function.name}({args})")

    def visit_SwapStatement(self, node: SwapStatement):
        self._emit(f"Swap: {node.left.name} 🔀 {node.right.name}")

    def format_expression(self, expr: Expression) -> str:
        """Convert an expression to its string representation."""
        if isinstance(expr, IntegerLiteral):
            return str(expr.value)
        if isinstance(expr, StringLiteral):
            return f"💬{expr.value}💬"
        if isinstance(expr, BooleanLiteral):
            return "👍" if expr.value else "👎"
        if isinstance(expr, IdentifierExpression):
            return expr.name
        if isinstance(expr, BinaryExpression):
            op = _OPERATOR_SYMBOLS[expr.operator]
            return f"({self.format_expression(expr.left)} {op} {self.format_expression(expr.right)})"
        if isinstance(expr, RandomExpression):
            return f"🎲({self.format_expression(expr.operand)})"
        if isinstance(expr, NotExpression):
            return f"🚫{self.format_expression(expr.operand)}"
        return "?"
