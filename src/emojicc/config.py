"""
Build Configuration
===================

Settings for the stages that run outside the compiler proper: where
sources and assembly live, and how the platform C compiler driver is
invoked to assemble and link. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (applied by the CLI on top of from_env())
"""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class BuildConfig:
    """
    Configuration for turning assembly into an executable.

    Attributes:
        cc: C compiler driver used as assembler and linker (default: "gcc")
        cflags: Extra arguments passed to the driver before the inputs
        timeout: Seconds to wait for the driver (default: 60)
        source_suffix: Extension of emoji source files
        asm_suffix: Extension of generated assembly files
    """

    cc: str = "gcc"
    cflags: List[str] = field(default_factory=list)
    timeout: int = 60
    source_suffix: str = ".emj"
    asm_suffix: str = ".s"

    @classmethod
    def from_env(cls) -> "BuildConfig":
        """
        Create a BuildConfig from environment variables.

        Environment variables (all optional):
            EMOJICC_CC: C compiler driver (e.g. "clang")
            EMOJICC_CFLAGS: Extra driver arguments, shell-quoted
            EMOJICC_TIMEOUT: Driver timeout in seconds (integer)
        """
        config = cls()

        if cc := os.environ.get("EMOJICC_CC"):
            config.cc = cc

        if cflags := os.environ.get("EMOJICC_CFLAGS"):
            config.cflags = shlex.split(cflags)

        if timeout := os.environ.get("EMOJICC_TIMEOUT"):
            try:
                config.timeout = int(timeout)
            except ValueError:
                pass  # Ignore invalid values

        return config

    def source_path(self, name: str) -> Path:
        """NAME -> NAME.emj (an existing suffix is kept)."""
        path = Path(name)
        if path.suffix == self.source_suffix:
            return path
        return path.with_name(path.name + self.source_suffix)

    def asm_path(self, name: str) -> Path:
        path = self.executable_path(name)
        return path.with_name(path.name + self.asm_suffix)

    def executable_path(self, name: str) -> Path:
        """NAME or NAME.emj -> NAME."""
        path = Path(name)
        if path.suffix == self.source_suffix:
            return path.with_suffix("")
        return path
