#!/usr/bin/env python3
"""
Tests for inline span formatting and the math formatter.
"""

import os
import re
import sys

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from render.inline import format_inline, inline_text
from render.math_format import MathFormatter, format_math
from render.symbols import MATH_SYMBOLS

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def test_greek_letters():
    assert format_math("\\alpha + \\beta") == "α + β"


def test_unknown_command_stays_literal():
    assert format_math("\\zzz") == "\\zzz"
    assert format_math("\\zzz + \\pi") == "\\zzz + π"


def test_longest_command_wins():
    assert format_math("x \\in A, \\infty") == "x ∈ A, ∞"


def test_fraction():
    assert format_math("\\frac{a}{b}") == "(a)/(b)"
    assert format_math("\\frac{x^{2}}{y}") == "(x²)/(y)"


def test_super_and_subscripts():
    assert format_math("x^2 + y^{10}") == "x² + y¹⁰"
    assert format_math("a_1 + a_{n}") == "a₁ + aₙ"


def test_unmappable_script_left_literal():
    assert format_math("x^{\\alpha}") == "x^α"
    assert format_math("x_q") == "x_q"


def test_square_root():
    assert format_math("\\sqrt{x}") == "√(x)"
    assert format_math("\\sqrt 2") == "√2"


def test_braces_and_whitespace():
    assert format_math("  {a}   +  {{b}} ") == "a + b"
    assert format_math("\\{a\\}") == "{a}"


def test_custom_tables_are_used():
    formatter = MathFormatter(symbols={"foo": "F"})
    assert formatter.format("\\foo \\alpha") == "F \\alpha"
    assert MATH_SYMBOLS["alpha"] == "α"


def test_plain_mode_strips_markers():
    assert format_inline("**bold** and *it* and __b2__", False) == "bold and it and b2"
    assert format_inline("`x = 1` ~~gone~~", False) == "x = 1 gone"


def test_links_plain():
    assert format_inline("see [docs](http://x.io)", False) == "see docs (http://x.io)"


def test_snake_case_is_not_italic():
    assert format_inline("my_var_name and snake_case stay", False) == "my_var_name and snake_case stay"


def test_escaped_markers():
    assert format_inline("\\*not italic\\*", False) == "*not italic*"


def test_inline_math():
    assert format_inline("area $\\pi r^2$ and \\(x_1\\)", False) == "area π r² and x₁"


def test_dollar_amounts_are_not_math():
    assert format_inline("costs $5 and $10", False) == "costs $5 and $10"


def test_code_is_not_reformatted():
    assert format_inline("`**raw**`", False) == "**raw**"


def test_color_code_span_is_padded():
    out = format_inline("`x`", True)
    assert ANSI_RE.sub("", out) == " x "


def test_nested_bold_code_does_not_leak():
    out = format_inline("**bold `code` tail** after", True)
    assert ANSI_RE.sub("", out) == "bold  code  tail after"
    assert out.endswith("\x1b[0m after")
    # every opening code is matched by a reset
    opens = [m for m in ANSI_RE.findall(out) if m != "\x1b[0m"]
    assert len(opens) == out.count("\x1b[0m")


def test_inline_text_spans():
    text = inline_text("a **b** c", True)
    assert text.plain == "a b c"
    assert [(s.start, s.end, s.style) for s in text.spans] == [(2, 3, "inline.bold")]
