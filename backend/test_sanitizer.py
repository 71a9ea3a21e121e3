"""Label sanitizer: every output must sit safely between Mermaid quotes."""

import logging

import pytest

from conceptmap.dsl.mermaid import LineKind, classify_line
from conceptmap.dsl.sanitizer import (
    MAX_LABEL_LENGTH,
    PLACEHOLDER,
    sanitize,
    sanitize_or_default,
)


def test_accents_preserved():
    assert sanitize("José María") == "José María"


def test_brackets_replaced_not_deleted():
    assert sanitize("a[b]c") == "a(b)c"


def test_quotes_escaped():
    assert sanitize('He said "hi"') == 'He said \\"hi\\"'


@pytest.mark.parametrize("value", ["", "   ", "\n\r\n", None, 42, ["x"]])
def test_blank_or_non_string_becomes_placeholder(value):
    assert sanitize(value) == PLACEHOLDER


def test_line_breaks_collapse_to_space():
    assert sanitize("one\r\ntwo\nthree\rfour") == "one two three four"


def test_backslash_escaped_before_quote():
    # a\"  ->  a\\\"
    assert sanitize('a\\"') == 'a\\\\\\"'
    assert sanitize("C:\\temp") == "C:\\\\temp"


def test_control_characters_removed_tab_kept():
    assert sanitize("a\x00b\x07c\x7fd\te") == "abcd\te"


def test_structural_characters_replaced():
    assert sanitize("{x|y}<z>") == "(xIy)(z)"
    assert sanitize("<b>bold</b>") == "(b)bold(/b)"


def test_symbols_and_emoji_untouched():
    text = "E = mc² ≠ €5 🚀 光合作用"
    assert sanitize(text) == text


def test_nfc_normalization():
    assert sanitize("Jose\u0301") == "Jos\u00e9"


def test_surrounding_whitespace_trimmed():
    assert sanitize("  photosynthesis \n") == "photosynthesis"


def test_long_text_truncated():
    result = sanitize("x" * 250)
    assert len(result) == MAX_LABEL_LENGTH
    assert result == "x" * 197 + "..."


def test_truncation_never_leaves_dangling_backslash():
    # The escaped backslash pair straddles the cut point
    result = sanitize("a" * 196 + "\\" + "b" * 10)
    assert result == "a" * 196 + "..."


def test_deterministic():
    text = 'Mixed "input" [with] {stuff} | and\nlines'
    assert sanitize(text) == sanitize(text)


@pytest.mark.parametrize("text", [
    'He said "hi"',
    "trailing backslash \\",
    "<script>alert('x')</script>",
    "[[nested]] {{braces}} ||pipes||",
    "line one\nline two",
    "\"\"\"",
    "\\\"\\\"",
    "😀" * 300,
])
def test_output_forms_a_valid_node_label(text):
    token = classify_line(f'A["{sanitize(text)}"]', 1)
    assert token.kind == LineKind.NODE


def test_modification_logged_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="conceptmap.dsl.sanitizer"):
        sanitize("a[b]c")
    assert any("[SANITIZE]" in record.getMessage() for record in caplog.records)


def test_unchanged_text_not_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="conceptmap.dsl.sanitizer"):
        sanitize("plain")
    assert not caplog.records


def test_sanitize_or_default():
    assert sanitize_or_default(None, "relates to") == "relates to"
    assert sanitize_or_default("   ", "relates to") == "relates to"
    assert sanitize_or_default("leads to", "relates to") == "leads to"
