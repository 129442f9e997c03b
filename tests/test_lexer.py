# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the emoji lexer/tokenizer.
#
# Test coverage includes:
#   - Reserved symbol recognition
#   - Integer literals from plain and keycap digits
#   - String literals, including unterminated ones
#   - Name runs and format-mark handling
#   - The DEFAULT / DEFINING / DEFINED mode machine
#   - Source locations and the END sentinel
# =============================================================================

import pytest

from emojicc.compiler.lexer import Lexer, LexerMode, tokenize
from emojicc.compiler.symbols import RESERVED
from emojicc.compiler.tokens import TokenKind


# =============================================================================
# Helper Functions
# =============================================================================

def lex(source: str) -> list:
    """Tokenize and drop the trailing END token."""
    tokens = tokenize(source, "<test>")
    assert tokens[-1].kind == TokenKind.END
    return tokens[:-1]


def kinds(source: str) -> list:
    return [t.kind for t in lex(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source produces only END."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.END

    def test_whitespace_only(self):
        """Whitespace of any kind produces no tokens."""
        assert lex("  \t\n  \u3000 ") == []

    @pytest.mark.parametrize("symbol,kind", sorted(RESERVED.items(), key=lambda item: item[1].name))
    def test_reserved_symbol(self, symbol, kind):
        """Every reserved symbol maps to its own kind."""
        tokens = lex(symbol)
        assert len(tokens) == 1
        assert tokens[0].kind == kind

    def test_exactly_one_end(self):
        """The token list ends with exactly one END token."""
        tokens = tokenize("📄 1 🔚 📄 2 🔚")
        assert [t.kind for t in tokens].count(TokenKind.END) == 1
        assert tokens[-1].kind == TokenKind.END

    def test_reserved_symbols_need_no_spaces(self):
        """Reserved symbols delimit themselves."""
        assert kinds("📄1🔚") == [TokenKind.PRINT, TokenKind.INTEGER, TokenKind.LEND]

    def test_presentation_selector_after_symbol(self):
        """A trailing U+FE0F on a reserved symbol is ignored."""
        assert kinds("⬅\ufe0f") == [TokenKind.ASSIGN]


# =============================================================================
# Integer Literal Tests
# =============================================================================

class TestIntegers:
    """Test digit-run scanning."""

    def test_single_digit(self):
        tokens = lex("7")
        assert tokens[0].kind == TokenKind.INTEGER
        assert tokens[0].value_int == 7

    def test_digit_run_is_base_ten(self):
        """d1 d2 ... dn lexes to the sum of di * 10^(n-i)."""
        assert lex("1234")[0].value_int == 1234

    def test_leading_zeros(self):
        assert lex("007")[0].value_int == 7

    def test_keycap_digits(self):
        """Keycap digits (digit, U+FE0F, U+20E3) denote their digit."""
        tokens = lex("4\ufe0f\u20e32\ufe0f\u20e3")
        assert len(tokens) == 1
        assert tokens[0].value_int == 42

    def test_keycap_without_selector(self):
        assert lex("4\u20e32\u20e3")[0].value_int == 42

    def test_mixed_digit_forms(self):
        assert lex("1\ufe0f\u20e305")[0].value_int == 105

    def test_whitespace_splits_runs(self):
        tokens = lex("1 2")
        assert [t.value_int for t in tokens] == [1, 2]

    def test_large_literal(self):
        """Literals are not bounded by the lexer."""
        assert lex("99999999999999999999")[0].value_int == 99999999999999999999


# =============================================================================
# String Literal Tests
# =============================================================================

class TestStrings:
    """Test 💬-quoted string literals."""

    def test_simple_string(self):
        tokens = lex("💬hello💬")
        assert tokens[0].kind == TokenKind.STRING
        assert tokens[0].value_str == "hello"

    def test_string_keeps_spaces(self):
        """The payload is exactly the run between the quotes."""
        assert lex("💬 hello  world 💬")[0].value_str == " hello  world "

    def test_reserved_symbols_inside_string(self):
        tokens = lex("💬➕🔚💬")
        assert len(tokens) == 1
        assert tokens[0].value_str == "➕🔚"

    def test_empty_string(self):
        assert lex("💬💬")[0].value_str == ""

    def test_unterminated_string_runs_to_end(self):
        """A missing closing quote is not an error."""
        tokens = lex("📄 💬abc 🔚")
        assert tokens[-1].kind == TokenKind.STRING
        assert tokens[-1].value_str == "abc 🔚"

    def test_tokens_after_string(self):
        assert kinds("📄 💬hi💬 🔚") == [TokenKind.PRINT, TokenKind.STRING, TokenKind.LEND]


# =============================================================================
# Name Tests
# =============================================================================

class TestNames:
    """Test identifier runs."""

    def test_emoji_name(self):
        tokens = lex("🐱")
        assert tokens[0].kind == TokenKind.NAME
        assert tokens[0].value_str == "🐱"

    def test_name_is_maximal_run(self):
        assert lex("🐱🐶")[0].value_str == "🐱🐶"

    def test_ascii_name(self):
        assert lex("counter")[0].value_str == "counter"

    def test_name_with_digits(self):
        """Digits inside a run belong to the name."""
        assert lex("x1")[0].value_str == "x1"

    def test_name_stops_at_reserved_symbol(self):
        assert kinds("x➕y") == [TokenKind.NAME, TokenKind.PLUS, TokenKind.NAME]

    def test_format_marks_dropped_from_names(self):
        """❤ with or without U+FE0F is the same identifier."""
        plain = lex("❤")[0].value_str
        selected = lex("❤\ufe0f")[0].value_str
        assert plain == selected == "❤"

    def test_zero_width_joiner_dropped(self):
        assert lex("👩\u200d💻")[0].value_str == "👩💻"


# =============================================================================
# Lexer Mode Tests
# =============================================================================

class TestModes:
    """Test the declaration state machine."""

    def test_name_after_type_keyword_is_id(self):
        assert kinds("🔢 x") == [TokenKind.INT, TokenKind.ID]

    def test_name_in_default_mode_is_name(self):
        assert kinds("📄 x") == [TokenKind.PRINT, TokenKind.NAME]

    def test_declaration_then_use(self):
        assert kinds("🆕 🔢 x 🔚 x") == [
            TokenKind.NEW, TokenKind.INT, TokenKind.ID, TokenKind.LEND, TokenKind.NAME,
        ]

    def test_name_after_value_is_id(self):
        """A name right after a value token is scanned in DEFINED mode."""
        assert kinds("🔀 a b") == [TokenKind.SWAP, TokenKind.NAME, TokenKind.ID]

    def test_defined_collapses_on_next_token(self):
        assert kinds("a ➕ b") == [TokenKind.NAME, TokenKind.PLUS, TokenKind.NAME]

    def test_defining_persists_until_name(self):
        lexer = Lexer("🔢")
        list(lexer.tokenize())
        assert lexer.mode == LexerMode.DEFINING

    def test_value_enters_defined(self):
        lexer = Lexer("42")
        list(lexer.tokenize())
        assert lexer.mode == LexerMode.DEFINED

    def test_parameter_list(self):
        assert kinds("🌜 🔢 a 📎 🔤 b 🌛") == [
            TokenKind.LPAREN, TokenKind.INT, TokenKind.ID, TokenKind.COMMA,
            TokenKind.STR, TokenKind.ID, TokenKind.RPAREN,
        ]

    def test_both_identifier_kinds_are_identifiers(self):
        tokens = lex("🔢 a b")
        assert tokens[1].is_identifier()
        assert lex("📄 a")[1].is_identifier()


# =============================================================================
# Location Tests
# =============================================================================

class TestLocations:
    """Test line/column tracking."""

    def test_columns_count_code_points(self):
        tokens = tokenize("🆕 🔢 x 🔚")
        assert [t.column for t in tokens] == [1, 3, 5, 7, 8]

    def test_lines(self):
        tokens = lex("📄 1 🔚\n📄 2 🔚")
        assert tokens[3].line == 2
        assert tokens[3].column == 1

    def test_filename_in_location(self):
        token = tokenize("📄", "prog.emj")[0]
        assert str(token.location) == "prog.emj:1:1"

    def test_token_text_round_trips_symbols(self):
        assert [t.text for t in lex("x ⬅ 2 🔚")] == ["x", "⬅", "2", "🔚"]

    def test_lexer_never_raises(self):
        """Arbitrary input always lexes to a finite list."""
        tokens = tokenize("💬💬💬 🌛🌛 ❌❌ \u20e3\ufe0f 9\u20e3 abc💬")
        assert tokens[-1].kind == TokenKind.END
