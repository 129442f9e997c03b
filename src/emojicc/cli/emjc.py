"""
emjc - Emoji Compiler Command-Line Interface
============================================

Compiles an emoji program to x86-64 assembly and links it into a native
executable with the platform C compiler driver.

Usage Examples
--------------
Build an executable:
    $ emjc hello            # hello.emj -> hello.s -> ./hello

Assembly only:
    $ emjc -S hello         # hello.emj -> hello.s

Debugging the front end:
    $ emjc --tokens hello
    $ emjc --ast hello

Verbose mode:
    $ emjc -v hello
"""

import logging
from typing import Optional

import click

from emojicc import __version__
from emojicc.cli.errors import handle_cli_exception
from emojicc.compiler import CompilerOptions, EmojiCompiler
from emojicc.config import BuildConfig
from emojicc.toolchain import assemble_and_link

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("name")
@click.option(
    "-S", "--asm-only",
    is_flag=True,
    help="Stop after writing NAME.s, do not assemble or link",
)
@click.option(
    "--cc",
    default=None,
    help="C compiler driver used to assemble and link (default: $EMOJICC_CC or gcc)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token list and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the checked syntax tree and exit (for debugging)",
)
@click.option(
    "--no-comments",
    is_flag=True,
    help="Omit source statements as comments in the assembly",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="emjc")
def main(
    name: str,
    asm_only: bool,
    cc: Optional[str],
    tokens: bool,
    ast: bool,
    no_comments: bool,
    verbose: bool,
) -> None:
    """
    Compile an emoji program to a native executable.

    NAME is the program's base name: NAME.emj is read, NAME.s is written
    and the executable NAME is produced. A trailing .emj is accepted.

    \b
    Examples:
        emjc hello              # hello.emj -> hello.s -> hello
        emjc hello.emj          # same
        emjc -S hello           # stop after hello.s
        emjc --cc clang hello   # link with clang
    """
    setup_logging(verbose)

    config = BuildConfig.from_env()
    if cc:
        config.cc = cc

    source_path = config.source_path(name)
    asm_path = config.asm_path(name)
    exe_path = config.executable_path(name)

    try:
        if verbose:
            click.echo(f"Compiling {source_path}...")

        compiler = EmojiCompiler(CompilerOptions(output_comments=not no_comments))
        result = compiler.compile_file(str(source_path))

        if tokens:
            for token in result.tokens:
                click.echo(repr(token))
            return

        if ast:
            from emojicc.compiler.ast import ASTPrinter
            click.echo(ASTPrinter().print(result.ast))
            return

        asm_path.write_text(result.assembly, encoding="utf-8")

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens")
            click.echo(
                f"Declared: {len(result.tables.globals)} globals, "
                f"{len(result.tables.functions)} functions"
            )
            click.echo(f"Wrote {len(result.assembly)} bytes to {asm_path}")

        if asm_only:
            click.echo(f"Compiled {source_path} -> {asm_path}")
            return

        assemble_and_link(asm_path, exe_path, config)
        click.echo(f"Compiled {source_path} -> {exe_path}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
