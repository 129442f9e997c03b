#!/usr/bin/env python3
"""
emojicc Compiler Demo
=====================

This script demonstrates how to use the emojicc library to:
1. Compile an emoji program to assembly
2. Inspect the tokens and the checked syntax tree
3. Report a compile error
4. Assemble and link the result with the platform C compiler

Usage:
    source .venv/bin/activate
    python examples/compiler_demo.py
"""

from pathlib import Path

from emojicc import BuildConfig, CompileError, EmojiCompiler, ToolchainError, assemble_and_link
from emojicc.compiler.ast import ASTPrinter


def main():
    source_path = Path(__file__).with_name("factorial.emj")
    output_dir = Path("trash")
    output_dir.mkdir(exist_ok=True)

    # ==========================================================================
    # 1. Compile to assembly
    # ==========================================================================
    compiler = EmojiCompiler()
    result = compiler.compile_file(str(source_path))

    print(f"Compiled {source_path.name}")
    print(f"  Tokens: {result.token_count}")
    print(f"  Globals: {', '.join(result.tables.globals)}")
    print(f"  Functions: {', '.join(str(sig) for sig in result.tables.functions.values())}")

    # ==========================================================================
    # 2. Inspect the syntax tree
    # ==========================================================================
    print("\nSyntax tree:")
    print(ASTPrinter().print(result.ast))

    # ==========================================================================
    # 3. Compile errors carry a location and a token window
    # ==========================================================================
    try:
        compiler.compile_source("🆕 🔤 s 🔚 ❓ s 📄 1 🔚", "broken.emj")
    except CompileError as e:
        print(f"\nExpected failure in the {e.stage} pass:")
        print(e)

    # ==========================================================================
    # 4. Assemble and link
    # ==========================================================================
    asm_path = output_dir / "factorial.s"
    asm_path.write_text(result.assembly, encoding="utf-8")

    try:
        exe_path = assemble_and_link(asm_path, output_dir / "factorial", BuildConfig.from_env())
        print(f"\nBuilt {exe_path}")
    except ToolchainError as e:
        print(f"\nCould not link: {e}")


if __name__ == "__main__":
    main()
