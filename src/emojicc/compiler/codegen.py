"""
x86-64 Code Generator (Pass 4)
==============================

This module generates AT&T-syntax x86-64 assembly from the checked syntax
tree. The output is linked against the C library by the platform C
compiler driver.

Code Generation Strategy
------------------------
The generator uses a simple stack-based evaluation model:

1. Every expression leaves its value in %rax (the accumulator)
2. For binary operations the left value is pushed, the right value is
   evaluated into %rax and moved to %rcx, and the left value is popped
   back into %rax
3. Every variable lives in a fixed 8-byte cell in .data, addressed
   RIP-relative so the executable may be position independent

Register Usage
--------------
| Register          | Usage                                         |
|-------------------|-----------------------------------------------|
| %rax              | Accumulator, expression results               |
| %rcx              | Right operand of binary operations            |
| %rdx              | Sign extension and remainder of division      |
| %rdi %rsi %rdx    | Arguments, in order, for calls                |
| %rcx %r8 %r9      |                                               |
| %rbx              | Saved stack pointer around C library calls    |
| %r12 %r13 %r14    | Scratch in the string helper routines         |

Value Representation
--------------------
Booleans are 0 or 1, integers are signed 64-bit, strings are pointers to
NUL-terminated buffers. Boolean values convert to integers unchanged;
integers and booleans convert to strings through emj_itoa.

Functions
---------
A function declaration is executable: it stores the address of its body
into the function's cell and jumps over the body. A call marshals its
arguments into the System V registers and calls through the cell. The
body saves its parameter cells on the stack before overwriting them, so
recursive calls see their own arguments, and restores them before ret.

Calling a function whose declaration has not executed yet jumps through
a zero cell and crashes at run time.

Generated Layout
----------------
    .data       storage section from the declaration collector
    .text       main: prologue, statements, epilogue
                emj_itoa / emj_concat when used
    .data       helper formats and the string literal pool
"""

import logging
from typing import Optional

from emojicc.compiler.annotator import SymbolKind
from emojicc.compiler.ast import (
    ASTPrinter,
    ASTVisitor,
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
    StringLiteral,
    SwapStatement,
    WhileStatement,
)
from emojicc.compiler.errors import InternalCompilerError
from emojicc.compiler.naming import function_label, global_label, parameter_label
from emojicc.compiler.types import VariableType

logger = logging.getLogger(__name__)


# System V integer argument registers, in order
ARGUMENT_REGISTERS = ("%rdi", "%rsi", "%rdx", "%rcx", "%r8", "%r9")

# Bytes requested from malloc for the function table at startup
DEFAULT_FUNCTION_TABLE_SIZE = 16000

# Buffer for a decimal 64-bit integer: sign, 19 digits, NUL
ITOA_BUFFER_SIZE = 24

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def _to_int64(value: int) -> int:
    """Wrap an arbitrarily large literal to a signed 64-bit value."""
    return ((value - _INT64_MIN) % (1 << 64)) + _INT64_MIN


class CodeGenerator(ASTVisitor):
    """
    Generates x86-64 assembly from a checked syntax tree.

    Usage:
        gen = CodeGenerator(storage)
        asm = gen.generate(program)

    Attributes:
        storage: Storage section text from the declaration collector
        emit_comments: Annotate statements with their source form
        function_table_size: Bytes allocated for FuncTable at startup
    """

    def __init__(
        self,
        storage: str,
        emit_comments: bool = True,
        function_table_size: int = DEFAULT_FUNCTION_TABLE_SIZE,
    ):
        self.storage = storage
        self.emit_comments = emit_comments
        self.function_table_size = function_table_size
        self._printer = ASTPrinter()
        self._reset()

    def _reset(self) -> None:
        self._output: list[str] = []
        self._label_counter = 0
        self._strings: dict[str, str] = {}
        self._uses_itoa = False
        self._uses_concat = False

    def generate(self, program: ProgramNode) -> str:
        """
        Generate the complete assembly file.

        Args:
            program: Checked syntax tree

        Returns:
            Assembly source text

        Raises:
            InternalCompilerError: If an expression has no resolved type
        """
        self._reset()

        self._output.extend(self.storage.rstrip("\n").split("\n"))
        self._emit_prologue()
        for stmt in program.statements:
            self.visit(stmt)
        self._emit_epilogue()
        self._emit_helpers()
        self._emit_data_pool()
        self._emit("")
        self._emit('        .section .note.GNU-stack,"",@progbits')

        logger.debug(
            f"Generated {len(self._output)} lines, {self._label_counter} labels, "
            f"{len(self._strings)} string literals"
        )
        return "\n".join(self._output) + "\n"

    # =========================================================================
    # Output Helpers
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line of assembly."""
        self._output.append(line)

    def _emit_comment(self, comment: str) -> None:
        if self.emit_comments:
            self._emit(f"        # {comment}")

    def _emit_label(self, label: str) -> None:
        self._emit(f"{label}:")

    def _emit_instruction(self, mnemonic: str, operand: str = "") -> None:
        """Emit an instruction with optional operands."""
        if operand:
            self._emit(f"        {mnemonic:<8}{operand}")
        else:
            self._emit(f"        {mnemonic}")

    def _new_label(self, prefix: str) -> str:
        """Generate a unique local label."""
        self._label_counter += 1
        return f".L{prefix}_{self._label_counter}"

    def _emit_external_call(self, symbol: str, variadic: bool = False) -> None:
        """
        Call a C library routine with the stack aligned to 16 bytes.

        %rbx is callee-saved, so it carries the original stack pointer
        across the call.
        """
        self._emit_instruction("pushq", "%rbx")
        self._emit_instruction("movq", "%rsp, %rbx")
        self._emit_instruction("andq", "$-16, %rsp")
        if variadic:
            self._emit_instruction("movq", "$0, %rax")
        self._emit_instruction("call", f"{symbol}@PLT")
        self._emit_instruction("movq", "%rbx, %rsp")
        self._emit_instruction("popq", "%rbx")

    def _cell(self, ident: IdentifierExpression) -> str:
        """RIP-relative operand of a variable's storage cell."""
        resolution = ident.resolution
        if resolution.kind == SymbolKind.PARAMETER:
            return f"{parameter_label(resolution.owner, ident.name)}(%rip)"
        if resolution.kind == SymbolKind.GLOBAL:
            return f"{global_label(ident.name)}(%rip)"
        raise InternalCompilerError(
            f"'{ident.name}' is not a variable",
            location=ident.location,
        )

    # =========================================================================
    # Prologue and Epilogue
    # =========================================================================

    def _emit_prologue(self) -> None:
        self._emit("")
        self._emit("        .text")
        self._emit("        .globl  main")
        self._emit_label("main")
        self._emit_instruction("movq", "%rdi, argc_(%rip)")
        self._emit_instruction("movq", f"${self.function_table_size}, %rdi")
        self._emit_external_call("malloc")
        self._emit_instruction("movq", "%rax, FuncTable(%rip)")

    def _emit_epilogue(self) -> None:
        self._emit_instruction("movq", "$0, %rax")
        self._emit_instruction("ret")

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_BlockStatement(self, node: BlockStatement):
        for stmt in node.statements:
            self.visit(stmt)

    def visit_DeclarationStatement(self, node: DeclarationStatement):
        self._emit_comment(f"🆕 {node.var_type} {node.name}")

    def visit_AssignmentStatement(self, node: AssignmentStatement):
        self._emit_comment(f"{node.target.name} ⬅ {self._printer.format_expression(node.value)}")
        self._emit_value(node.value, node.target.resolved_type)
        self._emit_instruction("movq", f"%rax, {self._cell(node.target)}")

    def visit_IfStatement(self, node: IfStatement):
        self._emit_comment(f"❓ {self._printer.format_expression(node.condition)}")
        else_label = self._new_label("if_else")
        done_label = self._new_label("if_done")

        self._emit_expression(node.condition)
        self._emit_instruction("cmpq", "$0, %rax")
        self._emit_instruction("je", else_label)
        self.visit(node.then_branch)
        self._emit_instruction("jmp", done_label)
        self._emit_label(else_label)
        if node.else_branch is not None:
            self.visit(node.else_branch)
        self._emit_label(done_label)

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit_comment(f"🔁 {self._printer.format_expression(node.condition)}")
        top_label = self._new_label("while_top")
        done_label = self._new_label("while_done")

        self._emit_label(top_label)
        self._emit_expression(node.condition)
        self._emit_instruction("cmpq", "$0, %rax")
        self._emit_instruction("je", done_label)
        self.visit(node.body)
        self._emit_instruction("jmp", top_label)
        self._emit_label(done_label)

    def visit_PrintStatement(self, node: PrintStatement):
        self._emit_comment(f"📄 {self._printer.format_expression(node.value)}")
        self._emit_expression(node.value)

        if node.value.resolved_type == VariableType.STRING:
            template = "Format_strings"
        else:
            template = "Format_ints"

        self._emit_instruction("movq", "%rax, %rsi")
        self._emit_instruction("leaq", f"{template}(%rip), %rdi")
        self._emit_external_call("printf", variadic=True)

    def visit_FunctionDeclaration(self, node: FunctionDeclaration):
        """
        Store the body's address into the function cell, then skip the body.

                leaq    .Lfun_body_N(%rip), %rax
                movq    %rax, fun_f(%rip)
                jmp     .Lfun_end_M
            .Lfun_body_N:
                (save parameter cells, load argument registers)
                (body)
                (restore parameter cells)
                ret
            .Lfun_end_M:
        """
        self._emit_comment(f"🔧 {node.signature}")
        body_label = self._new_label("fun_body")
        end_label = self._new_label("fun_end")
        cells = [
            f"{parameter_label(node.name, param.name)}(%rip)"
            for param in node.signature.parameters
        ]

        self._emit_instruction("leaq", f"{body_label}(%rip), %rax")
        self._emit_instruction("movq", f"%rax, {function_label(node.name)}(%rip)")
        self._emit_instruction("jmp", end_label)

        self._emit_label(body_label)
        for cell in cells:
            self._emit_instruction("pushq", cell)
        for register, cell in zip(ARGUMENT_REGISTERS, cells):
            self._emit_instruction("movq", f"{register}, {cell}")

        self.visit(node.body)

        for cell in reversed(cells):
            self._emit_instruction("popq", cell)
        self._emit_instruction("ret")
        self._emit_label(end_label)

    def visit_CallStatement(self, node: CallStatement):
        args = ", ".join(self._printer.format_expression(arg) for arg in node.arguments)
        self._emit_comment(f"📞 {node.function.name}({args})")

        signature = node.function.resolution.signature
        for arg, param in zip(node.arguments, signature.parameters):
            self._emit_value(arg, param.var_type)
            self._emit_instruction("pushq", "%rax")

        for register in reversed(ARGUMENT_REGISTERS[:len(node.arguments)]):
            self._emit_instruction("popq", register)

        self._emit_instruction("call", f"*{function_label(node.function.name)}(%rip)")

    def visit_SwapStatement(self, node: SwapStatement):
        self._emit_comment(f"🔀 {node.left.name} {node.right.name}")
        left = self._cell(node.left)
        right = self._cell(node.right)
        self._emit_instruction("movq", f"{left}, %rax")
        self._emit_instruction("movq", f"{right}, %rcx")
        self._emit_instruction("movq", f"%rcx, {left}")
        self._emit_instruction("movq", f"%rax, {right}")

    # =========================================================================
    # Expressions
    # =========================================================================

    def _emit_expression(self, expr: Expression) -> None:
        """Evaluate expr into %rax."""
        if expr.resolved_type == VariableType.UNRESOLVED:
            raise InternalCompilerError(
                f"unresolved type reached code generation: "
                f"{self._printer.format_expression(expr)}",
                location=expr.location,
            )
        self.visit(expr)

    def _emit_value(self, expr: Expression, target: VariableType) -> None:
        """Evaluate expr into %rax, converted to target."""
        self._emit_expression(expr)
        self._emit_conversion(expr.resolved_type, target)

    def _emit_conversion(self, source: VariableType, target: VariableType) -> None:
        # Boolean -> Integer is the identity on 0/1
        if target == VariableType.STRING and source != VariableType.STRING:
            self._uses_itoa = True
            self._emit_instruction("movq", "%rax, %rdi")
            self._emit_instruction("call", "emj_itoa")

    def visit_IntegerLiteral(self, node: IntegerLiteral):
        value = _to_int64(node.value)
        if -(1 << 31) <= value < (1 << 31):
            self._emit_instruction("movq", f"${value}, %rax")
        else:
            self._emit_instruction("movabsq", f"${value}, %rax")

    def visit_BooleanLiteral(self, node: BooleanLiteral):
        self._emit_instruction("movq", f"${int(node.value)}, %rax")

    def visit_StringLiteral(self, node: StringLiteral):
        label = self._strings.get(node.value)
        if label is None:
            label = self._new_label("str")
            self._strings[node.value] = label
        self._emit_instruction("leaq", f"{label}(%rip), %rax")

    def visit_IdentifierExpression(self, node: IdentifierExpression):
        self._emit_instruction("movq", f"{self._cell(node)}, %rax")

    def visit_NotExpression(self, node: NotExpression):
        self._emit_expression(node.operand)
        self._emit_instruction("xorq", "$1, %rax")

    def visit_RandomExpression(self, node: RandomExpression):
        """rand() modulo the bound, which the remainder of idivq leaves in %rdx."""
        self._emit_value(node.operand, VariableType.INTEGER)
        self._emit_instruction("pushq", "%rax")
        self._emit_external_call("rand")
        self._emit_instruction("movslq", "%eax, %rax")
        self._emit_instruction("popq", "%rcx")
        self._emit_instruction("cqto")
        self._emit_instruction("idivq", "%rcx")
        self._emit_instruction("movq", "%rdx, %rax")

    def visit_BinaryExpression(self, node: BinaryExpression):
        if node.operator == BinaryOperator.ADD and node.resolved_type == VariableType.STRING:
            self._emit_concatenation(node)
            return

        self._emit_expression(node.left)
        self._emit_instruction("pushq", "%rax")
        self._emit_expression(node.right)
        self._emit_instruction("movq", "%rax, %rcx")
        self._emit_instruction("popq", "%rax")

        if node.operator == BinaryOperator.ADD:
            self._emit_instruction("addq", "%rcx, %rax")
        elif node.operator == BinaryOperator.SUBTRACT:
            self._emit_instruction("subq", "%rcx, %rax")
        elif node.operator == BinaryOperator.MULTIPLY:
            self._emit_instruction("imulq", "%rcx, %rax")
        elif node.operator == BinaryOperator.DIVIDE:
            self._emit_instruction("cqto")
            self._emit_instruction("idivq", "%rcx")
        elif node.left.resolved_type == VariableType.STRING:
            self._emit_instruction("movq", "%rax, %rdi")
            self._emit_instruction("movq", "%rcx, %rsi")
            self._emit_external_call("strcmp")
            self._emit_instruction("testl", "%eax, %eax")
            self._emit_instruction("sete", "%al")
            self._emit_instruction("movzbq", "%al, %rax")
        else:
            self._emit_instruction("subq", "%rcx, %rax")
            self._emit_instruction("sete", "%al")
            self._emit_instruction("movzbq", "%al, %rax")

    def _emit_concatenation(self, node: BinaryExpression) -> None:
        self._uses_concat = True
        self._emit_value(node.left, VariableType.STRING)
        self._emit_instruction("pushq", "%rax")
        self._emit_value(node.right, VariableType.STRING)
        self._emit_instruction("movq", "%rax, %rsi")
        self._emit_instruction("popq", "%rdi")
        self._emit_instruction("call", "emj_concat")

    # =========================================================================
    # Runtime Helpers and Data Pool
    # =========================================================================

    def _emit_helpers(self) -> None:
        if self._uses_itoa:
            self._emit_itoa()
        if self._uses_concat:
            self._emit_concat()

    def _emit_itoa(self) -> None:
        """emj_itoa(%rdi = value) -> %rax = fresh decimal string."""
        self._emit("")
        self._emit_label("emj_itoa")
        self._emit_instruction("pushq", "%r12")
        self._emit_instruction("pushq", "%r13")
        self._emit_instruction("movq", "%rdi, %r12")
        self._emit_instruction("movq", f"${ITOA_BUFFER_SIZE}, %rdi")
        self._emit_external_call("malloc")
        self._emit_instruction("movq", "%rax, %r13")
        self._emit_instruction("movq", "%rax, %rdi")
        self._emit_instruction("leaq", "Format_itoa(%rip), %rsi")
        self._emit_instruction("movq", "%r12, %rdx")
        self._emit_external_call("sprintf", variadic=True)
        self._emit_instruction("movq", "%r13, %rax")
        self._emit_instruction("popq", "%r13")
        self._emit_instruction("popq", "%r12")
        self._emit_instruction("ret")

    def _emit_concat(self) -> None:
        """emj_concat(%rdi = left, %rsi = right) -> %rax = fresh left+right."""
        self._emit("")
        self._emit_label("emj_concat")
        self._emit_instruction("pushq", "%r12")
        self._emit_instruction("pushq", "%r13")
        self._emit_instruction("pushq", "%r14")
        self._emit_instruction("movq", "%rdi, %r12")
        self._emit_instruction("movq", "%rsi, %r13")
        self._emit_external_call("strlen")
        self._emit_instruction("movq", "%rax, %r14")
        self._emit_instruction("movq", "%r13, %rdi")
        self._emit_external_call("strlen")
        self._emit_instruction("leaq", "1(%r14,%rax), %rdi")
        self._emit_external_call("malloc")
        self._emit_instruction("movq", "%rax, %r14")
        self._emit_instruction("movq", "%rax, %rdi")
        self._emit_instruction("movq", "%r12, %rsi")
        self._emit_external_call("strcpy")
        self._emit_instruction("movq", "%r14, %rdi")
        self._emit_instruction("movq", "%r13, %rsi")
        self._emit_external_call("strcat")
        self._emit_instruction("movq", "%r14, %rax")
        self._emit_instruction("popq", "%r14")
        self._emit_instruction("popq", "%r13")
        self._emit_instruction("popq", "%r12")
        self._emit_instruction("ret")

    def _emit_data_pool(self) -> None:
        if not (self._strings or self._uses_itoa):
            return

        self._emit("")
        self._emit("        .data")
        if self._uses_itoa:
            self._emit_label("Format_itoa")
            self._emit_instruction(".asciz", '"%ld"')

        for value, label in self._strings.items():
            self._emit_label(label)
            data = list(value.encode("utf-8")) + [0]
            for start in range(0, len(data), 16):
                chunk = ", ".join(str(byte) for byte in data[start:start + 16])
                self._emit_instruction(".byte", chunk)


def generate(
    program: ProgramNode,
    storage: str,
    emit_comments: bool = True,
    function_table_size: int = DEFAULT_FUNCTION_TABLE_SIZE,
) -> str:
    """Generate assembly for a checked program."""
    return CodeGenerator(storage, emit_comments, function_table_size).generate(program)
