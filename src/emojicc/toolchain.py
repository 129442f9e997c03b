"""
External Assembler and Linker
=============================

The generated assembly is turned into an executable by the platform C
compiler driver, which assembles it and links it against the C library
(printf, malloc, rand and the string routines):

    gcc prog.s -o prog

The driver's output is captured; any failure is reported as a
ToolchainError carrying the command line and the captured stderr.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from emojicc.config import BuildConfig
from emojicc.errors import ToolchainError

logger = logging.getLogger(__name__)


def build_command(asm_path: Path, output_path: Path, config: BuildConfig) -> list[str]:
    """Command line that assembles and links asm_path into output_path."""
    return [config.cc, *config.cflags, str(asm_path), "-o", str(output_path)]


def assemble_and_link(
    asm_path: Path,
    output_path: Path,
    config: Optional[BuildConfig] = None,
) -> Path:
    """
    Assemble and link a generated assembly file.

    Args:
        asm_path: The .s file to build
        output_path: Where to write the executable
        config: Build configuration (defaults from the environment)

    Returns:
        Path of the executable

    Raises:
        ToolchainError: If the driver is missing, fails, or times out
    """
    config = config or BuildConfig.from_env()
    cmd = build_command(asm_path, output_path, config)
    command_line = " ".join(cmd)
    logger.debug(f"Running: {command_line}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=config.timeout,
        )
    except subprocess.TimeoutExpired:
        raise ToolchainError(
            f"{config.cc} timed out after {config.timeout}s building {asm_path}",
            command=command_line,
        )
    except FileNotFoundError:
        raise ToolchainError(
            f"{config.cc} not found - is a C compiler installed?",
            command=command_line,
        )

    if result.returncode != 0:
        raise ToolchainError(
            f"Assembly failed for {asm_path}",
            command=command_line,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
        )

    logger.debug(f"Linked {output_path}")
    return output_path
