"""
Assembly Symbol Naming
======================

Emoji identifiers are not valid assembler symbols, so every declared name
is mangled into the hexadecimal code points of its characters:

    x      -> var_78
    🐱     -> var_1f431
    f(n)   -> fun_66, par_66__6e

Mangled names are injective (code points are joined with '_' and the
function/parameter halves with '__'), so distinct identifiers never share
a storage cell.
"""


def _encode(name: str) -> str:
    return "_".join(f"{ord(char):x}" for char in name)


def global_label(name: str) -> str:
    """Storage cell of a global variable."""
    return f"var_{_encode(name)}"


def function_label(name: str) -> str:
    """Entry-address cell of a function."""
    return f"fun_{_encode(name)}"


def parameter_label(function: str, name: str) -> str:
    """Storage cell of a parameter of function."""
    return f"par_{_encode(function)}__{_encode(name)}"
