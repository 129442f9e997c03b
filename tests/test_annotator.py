# =============================================================================
# test_annotator.py - Identifier Annotator Unit Tests
# =============================================================================
# Tests for pass 2: binding identifier occurrences to globals, functions
# and parameters.
# =============================================================================

import pytest

from emojicc.compiler.annotator import Annotations, SymbolKind, annotate
from emojicc.compiler.collector import collect_declarations
from emojicc.compiler.errors import ParameterCollisionError, UndeclaredSymbolError
from emojicc.compiler.lexer import tokenize
from emojicc.compiler.types import VariableType


# =============================================================================
# Helper Functions
# =============================================================================

def annotate_source(source: str):
    """Run lexer, collector and annotator; return (tokens, annotations)."""
    tokens = tokenize(source, "<test>")
    tables, _ = collect_declarations(tokens)
    return tokens, annotate(tokens, tables)


def resolutions_of(source: str, name: str) -> list:
    """Resolutions of every occurrence of name, in source order."""
    tokens, annotations = annotate_source(source)
    return [
        annotations[i]
        for i, token in enumerate(tokens)
        if token.is_identifier() and token.value_str == name
    ]


# =============================================================================
# Global and Function Resolution
# =============================================================================

class TestGlobalResolution:

    def test_global_variable(self):
        tokens, annotations = annotate_source("🆕 🔢 x 🔚 x ⬅ 1 🔚")
        resolution = annotations[4]
        assert resolution.kind == SymbolKind.GLOBAL
        assert resolution.var_type == VariableType.INTEGER
        assert resolution.is_variable

    def test_every_identifier_annotated(self):
        tokens, annotations = annotate_source("🆕 🔢 x 🔚 x ⬅ x ➕ 1 🔚 📄 x 🔚")
        identifier_positions = [i for i, t in enumerate(tokens) if t.is_identifier()]
        assert all(i in annotations for i in identifier_positions)
        assert len(annotations) == len(identifier_positions)

    def test_use_before_declaration(self):
        """Globals are visible before the point of declaration."""
        resolutions = resolutions_of("x ⬅ 1 🔚 🆕 🔢 x 🔚", "x")
        assert resolutions[0].kind == SymbolKind.GLOBAL

    def test_function_reference(self):
        resolutions = resolutions_of("📞 f 🌜🌛 🔚 🔧 f 🌜🌛 🌘🌒", "f")
        assert all(r.kind == SymbolKind.FUNCTION for r in resolutions)
        assert resolutions[0].signature.name == "f"
        assert not resolutions[0].is_variable

    def test_tokens_not_mutated(self):
        tokens, _ = annotate_source("🆕 🔢 x 🔚 x ⬅ 1 🔚")
        assert tokens == tokenize("🆕 🔢 x 🔚 x ⬅ 1 🔚", "<test>")

    def test_undeclared_symbol(self):
        with pytest.raises(UndeclaredSymbolError) as exc_info:
            annotate_source("y ⬅ 1 🔚")
        error = exc_info.value
        assert "undeclared symbol 'y'" in str(error)
        assert error.stage == "annotate"
        assert error.position == 0


# =============================================================================
# Parameter Scopes
# =============================================================================

class TestParameters:

    def test_parameter_in_body(self):
        tokens, annotations = annotate_source("🔧 f 🌜 🔢 n 🌛 📄 n 🔚")
        resolution = annotations[7]
        assert resolution.kind == SymbolKind.PARAMETER
        assert resolution.owner == "f"
        assert resolution.var_type == VariableType.INTEGER

    def test_parameter_declaration_annotated(self):
        _, annotations = annotate_source("🔧 f 🌜 🔤 s 🌛 🌘🌒")
        assert annotations[4].kind == SymbolKind.PARAMETER
        assert annotations[4].var_type == VariableType.STRING

    def test_parameter_in_block_body(self):
        resolutions = resolutions_of("🔧 f 🌜 🔢 n 🌛 🌘 📄 n 🔚 📄 n ➕ 1 🔚 🌒", "n")
        assert [r.kind for r in resolutions] == [SymbolKind.PARAMETER] * 3

    def test_parameter_out_of_scope_after_body(self):
        with pytest.raises(UndeclaredSymbolError):
            annotate_source("🔧 f 🌜 🔢 n 🌛 📄 n 🔚 📄 n 🔚")

    def test_scope_ends_after_else_branch(self):
        with pytest.raises(UndeclaredSymbolError):
            annotate_source("🔧 f 🌜 ☯ b 🌛 ❓ b 📄 1 🔚 ❌ 📄 b 🔚 📄 b 🔚")

    def test_scope_covers_else_branch(self):
        resolutions = resolutions_of("🔧 f 🌜 ☯ b 🌛 ❓ b 📄 1 🔚 ❌ 📄 b 🔚", "b")
        assert resolutions[-1].kind == SymbolKind.PARAMETER

    def test_scope_covers_while_body(self):
        resolutions = resolutions_of("🔧 f 🌜 ☯ b 🌛 🔁 🚫 b 🌘 📄 b 🔚 🌒", "b")
        assert [r.kind for r in resolutions] == [SymbolKind.PARAMETER] * 3

    def test_nested_function_shadows(self):
        source = "🔧 f 🌜 🔢 n 🌛 🌘 🔧 g 🌜 🔤 n 🌛 📄 n 🔚 📄 n 🔚 🌒"
        resolutions = resolutions_of(source, "n")
        inner_use, outer_use = resolutions[2], resolutions[3]
        assert inner_use.owner == "g"
        assert inner_use.var_type == VariableType.STRING
        assert outer_use.owner == "f"
        assert outer_use.var_type == VariableType.INTEGER

    def test_globals_visible_in_body(self):
        resolutions = resolutions_of("🆕 🔢 r 🔚 🔧 f 🌜 🔢 n 🌛 r ⬅ n 🔚", "r")
        assert resolutions[-1].kind == SymbolKind.GLOBAL

    def test_recursive_call_resolves_function(self):
        resolutions = resolutions_of("🔧 f 🌜 🔢 n 🌛 📞 f 🌜 n 🌛 🔚", "f")
        assert [r.kind for r in resolutions] == [SymbolKind.FUNCTION] * 2


# =============================================================================
# Collision Errors
# =============================================================================

class TestCollisions:

    def test_parameter_shares_global_name(self):
        with pytest.raises(ParameterCollisionError) as exc_info:
            annotate_source("🆕 🔢 n 🔚 🔧 f 🌜 🔢 n 🌛 🌘🌒")
        assert "parameter cannot share name with global 'n'" in str(exc_info.value)

    def test_parameter_shares_function_name(self):
        with pytest.raises(ParameterCollisionError) as exc_info:
            annotate_source("🔧 g 🌜🌛 🌘🌒 🔧 f 🌜 🔢 g 🌛 🌘🌒")
        assert exc_info.value.other == "function"

    def test_parameter_named_like_own_function(self):
        with pytest.raises(ParameterCollisionError):
            annotate_source("🔧 f 🌜 🔢 f 🌛 🌘🌒")


# =============================================================================
# Annotations Container
# =============================================================================

class TestAnnotations:

    def test_iteration_is_sorted(self):
        _, annotations = annotate_source("🆕 🔢 x 🔚 x ⬅ x 🔚")
        assert list(annotations) == [2, 4, 6]

    def test_get_missing(self):
        assert Annotations().get(3) is None
        assert len(Annotations()) == 0
