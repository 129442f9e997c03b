# =============================================================================
# test_codegen.py - Code Generator Unit Tests
# =============================================================================
# Tests for the x86-64 code generator.
#
# Test coverage includes:
#   - main prologue and epilogue
#   - Expression evaluation for every operator
#   - Control flow labels
#   - Function cells, argument registers and recursion support
#   - String literal pool and runtime helpers
#   - Comment emission and internal invariants
# =============================================================================

import pytest

from emojicc.compiler.annotator import annotate
from emojicc.compiler.ast import IntegerLiteral, PrintStatement, ProgramNode
from emojicc.compiler.checker import check
from emojicc.compiler.codegen import CodeGenerator, generate
from emojicc.compiler.collector import collect_declarations
from emojicc.compiler.errors import InternalCompilerError
from emojicc.compiler.lexer import tokenize
from emojicc.errors import SourceLocation


# =============================================================================
# Helper Functions
# =============================================================================

def compile_to_asm(source: str, **options) -> str:
    """Run every pass and return the assembly text."""
    options.setdefault("emit_comments", False)
    tokens = tokenize(source, "<test>")
    tables, storage = collect_declarations(tokens)
    program = check(tokens, annotate(tokens, tables))
    return generate(program, storage, **options)


def lines(asm: str) -> list:
    """Non-blank assembly lines with whitespace runs collapsed."""
    return [" ".join(line.split()) for line in asm.splitlines() if line.strip()]


def compile_lines(source: str, **options) -> list:
    return lines(compile_to_asm(source, **options))


def contains_sequence(haystack: list, needle: list) -> bool:
    """True if needle occurs as a contiguous run in haystack."""
    for start in range(len(haystack) - len(needle) + 1):
        if haystack[start:start + len(needle)] == needle:
            return True
    return False


# =============================================================================
# Layout Tests
# =============================================================================

class TestLayout:

    def test_starts_with_storage(self):
        asm = compile_to_asm("📄 1 🔚")
        assert asm.splitlines()[0] == "        .data"
        assert "argc_:" in lines(asm)

    def test_prologue(self):
        output = compile_lines("")
        assert contains_sequence(output, [
            ".text",
            ".globl main",
            "main:",
            "movq %rdi, argc_(%rip)",
            "movq $16000, %rdi",
            "pushq %rbx",
            "movq %rsp, %rbx",
            "andq $-16, %rsp",
            "call malloc@PLT",
            "movq %rbx, %rsp",
            "popq %rbx",
            "movq %rax, FuncTable(%rip)",
        ])

    def test_epilogue(self):
        output = compile_lines("")
        assert contains_sequence(output, ["movq %rax, FuncTable(%rip)", "movq $0, %rax", "ret"])

    def test_function_table_size(self):
        output = compile_lines("", function_table_size=64)
        assert "movq $64, %rdi" in output

    def test_ends_with_stack_note(self):
        output = compile_lines("📄 💬x💬 🔚")
        assert output[-1] == '.section .note.GNU-stack,"",@progbits'

    def test_output_ends_with_newline(self):
        assert compile_to_asm("").endswith("\n")

    def test_global_cell_emitted_once(self):
        output = compile_lines("🆕 🔢 x 🔚 x ⬅ 1 🔚 x ⬅ 2 🔚")
        assert output.count("var_78:") == 1


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:

    def test_scenario_a(self):
        output = compile_lines("🆕 🔢 x 🔚 x ⬅ 2 ➕ 3 🔚 📄 x 🔚")
        assert contains_sequence(output, [
            "movq $2, %rax",
            "pushq %rax",
            "movq $3, %rax",
            "movq %rax, %rcx",
            "popq %rax",
            "addq %rcx, %rax",
            "movq %rax, var_78(%rip)",
            "movq var_78(%rip), %rax",
            "movq %rax, %rsi",
            "leaq Format_ints(%rip), %rdi",
        ])

    def test_print_integer_is_variadic_call(self):
        output = compile_lines("📄 1 🔚")
        assert contains_sequence(output, [
            "andq $-16, %rsp",
            "movq $0, %rax",
            "call printf@PLT",
        ])

    def test_print_string_format(self):
        output = compile_lines("📄 💬hi💬 🔚")
        assert "leaq Format_strings(%rip), %rdi" in output

    def test_print_boolean_uses_integer_format(self):
        output = compile_lines("📄 👍 🔚")
        assert contains_sequence(output, ["movq $1, %rax", "movq %rax, %rsi", "leaq Format_ints(%rip), %rdi"])

    def test_if_else_labels(self):
        output = compile_lines("❓ 👍 📄 1 🔚 ❌ 📄 2 🔚")
        assert contains_sequence(output, ["movq $1, %rax", "cmpq $0, %rax", "je .Lif_else_1"])
        assert "jmp .Lif_done_2" in output
        assert output.index(".Lif_else_1:") < output.index("movq $2, %rax") < output.index(".Lif_done_2:")

    def test_if_without_else(self):
        output = compile_lines("❓ 👎 📄 1 🔚")
        assert contains_sequence(output, [".Lif_else_1:", ".Lif_done_2:"])

    def test_while_labels(self):
        output = compile_lines("🔁 👎 📄 1 🔚")
        assert contains_sequence(output, [
            ".Lwhile_top_1:",
            "movq $0, %rax",
            "cmpq $0, %rax",
            "je .Lwhile_done_2",
        ])
        assert contains_sequence(output, ["jmp .Lwhile_top_1", ".Lwhile_done_2:"])

    def test_labels_are_unique(self):
        output = compile_lines("❓ 👍 📄 1 🔚 ❓ 👍 📄 2 🔚 🔁 👎 🌘🌒")
        labels = [line for line in output if line.startswith(".L") and line.endswith(":")]
        assert len(labels) == len(set(labels)) == 6

    def test_swap(self):
        output = compile_lines("🆕 🔢 a 🔚 🆕 🔢 b 🔚 🔀 a b 🔚")
        assert contains_sequence(output, [
            "movq var_61(%rip), %rax",
            "movq var_62(%rip), %rcx",
            "movq %rcx, var_61(%rip)",
            "movq %rax, var_62(%rip)",
        ])

    def test_boolean_into_integer_is_unchanged(self):
        output = compile_lines("🆕 🔢 x 🔚 x ⬅ 👍 🔚")
        assert contains_sequence(output, ["movq $1, %rax", "movq %rax, var_78(%rip)"])
        assert "emj_itoa:" not in output

    def test_integer_into_string_converts(self):
        output = compile_lines("🆕 🔤 s 🔚 s ⬅ 42 🔚")
        assert contains_sequence(output, [
            "movq $42, %rax",
            "movq %rax, %rdi",
            "call emj_itoa",
            "movq %rax, var_73(%rip)",
        ])
        assert "emj_itoa:" in output


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:

    @pytest.mark.parametrize("symbol,instructions", [
        ("➖", ["subq %rcx, %rax"]),
        ("✖", ["imulq %rcx, %rax"]),
        ("➗", ["cqto", "idivq %rcx"]),
    ])
    def test_arithmetic(self, symbol, instructions):
        output = compile_lines(f"📄 7 {symbol} 2 🔚")
        assert contains_sequence(output, ["movq %rax, %rcx", "popq %rax", *instructions])

    def test_integer_equality(self):
        output = compile_lines("📄 1 ↔ 2 🔚")
        assert contains_sequence(output, [
            "subq %rcx, %rax",
            "sete %al",
            "movzbq %al, %rax",
        ])

    def test_string_equality(self):
        output = compile_lines("📄 💬a💬 ↔ 💬b💬 🔚")
        assert contains_sequence(output, [
            "movq %rax, %rdi",
            "movq %rcx, %rsi",
            "pushq %rbx",
            "movq %rsp, %rbx",
            "andq $-16, %rsp",
            "call strcmp@PLT",
            "movq %rbx, %rsp",
            "popq %rbx",
            "testl %eax, %eax",
            "sete %al",
            "movzbq %al, %rax",
        ])

    def test_concatenation(self):
        output = compile_lines("📄 💬n=💬 ➕ 5 🔚")
        assert contains_sequence(output, [
            "movq $5, %rax",
            "movq %rax, %rdi",
            "call emj_itoa",
            "movq %rax, %rsi",
            "popq %rdi",
            "call emj_concat",
        ])
        assert "emj_concat:" in output
        assert "emj_itoa:" in output
        assert "Format_itoa:" in output

    def test_concatenate_two_strings_needs_no_itoa(self):
        output = compile_lines("📄 💬a💬 ➕ 💬b💬 🔚")
        assert "emj_concat:" in output
        assert "emj_itoa:" not in output

    def test_not(self):
        output = compile_lines("📄 🚫 👍 🔚")
        assert contains_sequence(output, ["movq $1, %rax", "xorq $1, %rax"])

    def test_random(self):
        output = compile_lines("📄 🎲 🌜 6 🌛 🔚")
        assert contains_sequence(output, [
            "movq $6, %rax",
            "pushq %rax",
            "pushq %rbx",
            "movq %rsp, %rbx",
            "andq $-16, %rsp",
            "call rand@PLT",
            "movq %rbx, %rsp",
            "popq %rbx",
            "movslq %eax, %rax",
            "popq %rcx",
            "cqto",
            "idivq %rcx",
            "movq %rdx, %rax",
        ])

    def test_large_integer_literal(self):
        output = compile_lines("📄 9999999999 🔚")
        assert "movabsq $9999999999, %rax" in output

    def test_literal_wraps_to_64_bits(self):
        output = compile_lines("📄 18446744073709551615 🔚")
        assert "movq $-1, %rax" in output

    def test_int32_boundary(self):
        output = compile_lines("📄 2147483647 ➕ 2147483648 🔚")
        assert "movq $2147483647, %rax" in output
        assert "movabsq $2147483648, %rax" in output


# =============================================================================
# String Pool Tests
# =============================================================================

class TestStringPool:

    def test_literal_bytes(self):
        output = compile_lines("📄 💬hi💬 🔚")
        assert "leaq .Lstr_1(%rip), %rax" in output
        assert contains_sequence(output, [".Lstr_1:", ".byte 104, 105, 0"])

    def test_duplicate_literals_share_label(self):
        output = compile_lines("📄 💬hi💬 🔚 📄 💬hi💬 🔚")
        assert output.count(".Lstr_1:") == 1
        assert output.count("leaq .Lstr_1(%rip), %rax") == 2

    def test_utf8_encoding(self):
        output = compile_lines("📄 💬é💬 🔚")
        assert ".byte 195, 169, 0" in output

    def test_long_literal_split(self):
        output = compile_lines(f"📄 💬{'a' * 20}💬 🔚")
        start = output.index(".Lstr_1:")
        assert output[start + 1] == ".byte " + ", ".join(["97"] * 16)
        assert output[start + 2] == ".byte 97, 97, 97, 97, 0"

    def test_no_pool_without_strings(self):
        output = compile_lines("📄 1 🔚")
        assert not any(line.startswith(".Lstr") for line in output)
        assert "Format_itoa:" not in output
        assert "emj_concat:" not in output


# =============================================================================
# Function Tests
# =============================================================================

class TestFunctions:

    SOURCE = "🔧 f 🌜 🔢 a 📎 🔢 b 🌛 🌘🌒 📞 f 🌜 1 📎 2 🌛 🔚"

    def test_declaration_stores_entry(self):
        output = compile_lines(self.SOURCE)
        assert contains_sequence(output, [
            "leaq .Lfun_body_1(%rip), %rax",
            "movq %rax, fun_66(%rip)",
            "jmp .Lfun_end_2",
            ".Lfun_body_1:",
        ])

    def test_body_saves_and_loads_parameters(self):
        output = compile_lines(self.SOURCE)
        assert contains_sequence(output, [
            ".Lfun_body_1:",
            "pushq par_66__61(%rip)",
            "pushq par_66__62(%rip)",
            "movq %rdi, par_66__61(%rip)",
            "movq %rsi, par_66__62(%rip)",
            "popq par_66__62(%rip)",
            "popq par_66__61(%rip)",
            "ret",
            ".Lfun_end_2:",
        ])

    def test_call_marshals_arguments(self):
        output = compile_lines(self.SOURCE)
        assert contains_sequence(output, [
            "movq $1, %rax",
            "pushq %rax",
            "movq $2, %rax",
            "pushq %rax",
            "popq %rsi",
            "popq %rdi",
            "call *fun_66(%rip)",
        ])

    def test_call_without_arguments(self):
        output = compile_lines("🔧 g 🌜🌛 🌘🌒 📞 g 🌜🌛 🔚")
        assert "call *fun_67(%rip)" in output
        assert not any(line.startswith("popq %r") and "di" in line for line in output)

    def test_parameter_read(self):
        output = compile_lines("🔧 f 🌜 🔢 n 🌛 📄 n 🔚")
        assert "movq par_66__6e(%rip), %rax" in output

    def test_argument_converted_to_parameter_type(self):
        output = compile_lines("🔧 f 🌜 🔤 s 🌛 🌘🌒 📞 f 🌜 7 🌛 🔚")
        assert contains_sequence(output, [
            "movq $7, %rax",
            "movq %rax, %rdi",
            "call emj_itoa",
            "pushq %rax",
            "popq %rdi",
        ])

    def test_six_argument_registers(self):
        params = " ".join(f"🔢 p{i}" for i in range(6))
        args = " 📎 ".join(str(i) for i in range(6))
        output = compile_lines(f"🔧 f 🌜 {params} 🌛 🌘🌒 📞 f 🌜 {args} 🌛 🔚")
        assert contains_sequence(output, [
            "popq %r9", "popq %r8", "popq %rcx", "popq %rdx", "popq %rsi", "popq %rdi",
        ])


# =============================================================================
# Comment and Invariant Tests
# =============================================================================

class TestComments:

    def test_comments_on(self):
        output = compile_lines("🆕 🔢 x 🔚 x ⬅ 1 ➕ 2 🔚", emit_comments=True)
        assert "# x ⬅ (1 ➕ 2)" in output
        assert "# 🆕 Integer x" in output

    def test_comments_off(self):
        output = compile_lines("📄 1 🔚 🔁 👎 🌘🌒", emit_comments=False)
        assert not any(line.startswith("#") for line in output)


class TestInvariants:

    def test_unresolved_expression_raises(self):
        location = SourceLocation("<test>", 1, 1)
        program = ProgramNode(location, statements=[
            PrintStatement(location, value=IntegerLiteral(location, value=1)),
        ])
        _, storage = collect_declarations(tokenize(""))
        with pytest.raises(InternalCompilerError) as exc_info:
            CodeGenerator(storage).generate(program)
        assert "unresolved type reached code generation" in str(exc_info.value)

    def test_generate_is_repeatable(self):
        tokens = tokenize("📄 💬a💬 ➕ 1 🔚 ❓ 👍 📄 2 🔚")
        tables, storage = collect_declarations(tokens)
        program = check(tokens, annotate(tokens, tables))
        generator = CodeGenerator(storage)
        assert generator.generate(program) == generator.generate(program)
