"""Inline span formatting (bold, italic, code, links, strikethrough, math).

The input is scanned once from left to right. At each cursor position the
candidate spans are tried in a fixed order and the first one that matches
consumes its run; anything else is copied through as plain text. Code
spans are literal, the other emphasis spans are lexed recursively.
"""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from rich.text import Text

from render.math_format import format_math
from render.styles import serialize


MATH_PAREN_RE = re.compile(r"\\\((.+?)\\\)")
MATH_DOLLAR_RE = re.compile(r"\$(?=\S)([^$\n]+?)(?<=\S)\$")
BOLD_STAR_RE = re.compile(r"\*\*(.+?)\*\*")
BOLD_UNDER_RE = re.compile(r"(?<!\w)__(.+?)__(?!\w)")
ITALIC_STAR_RE = re.compile(r"(?<![\w*])\*([^*]+)\*(?![\w*])")
ITALIC_UNDER_RE = re.compile(r"(?<![\w_])_([^_]+)_(?![\w_])")
CODE_RE = re.compile(r"`([^`]+)`")
LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
STRIKE_RE = re.compile(r"~~(.+?)~~")

TRIGGERS = frozenset("\\$*_`[~")
ESCAPABLE = frozenset("\\`*_{}[]()#+-.!~|$>")

Token = Tuple[Text, int]


class InlineLexer:
    """Builds a styled ``rich.text.Text`` from one line of inline markup."""

    def __init__(self, use_color: bool = True, math: Callable[[str], str] = format_math) -> None:
        self.use_color = use_color
        self.math = math
        self._matchers: List[Callable[[str, int], Optional[Token]]] = [
            self._math,
            self._bold,
            self._italic,
            self._code,
            self._link,
            self._strike,
        ]

    def lex(self, source: str) -> Text:
        out = Text()
        plain: List[str] = []
        i = 0
        n = len(source)
        while i < n:
            ch = source[i]
            token = self._match(source, i) if ch in TRIGGERS else None
            if token is None:
                if ch == "\\" and i + 1 < n and source[i + 1] in ESCAPABLE:
                    plain.append(source[i + 1])
                    i += 2
                else:
                    plain.append(ch)
                    i += 1
                continue
            if plain:
                out.append("".join(plain))
                plain = []
            text, i = token
            out.append_text(text)
        if plain:
            out.append("".join(plain))
        return out

    def _match(self, source: str, pos: int) -> Optional[Token]:
        for matcher in self._matchers:
            token = matcher(source, pos)
            if token is not None:
                return token
        return None

    def _math(self, source: str, pos: int) -> Optional[Token]:
        m = MATH_PAREN_RE.match(source, pos) or MATH_DOLLAR_RE.match(source, pos)
        if not m:
            return None
        return Text(self.math(m.group(1)), style="inline.math"), m.end()

    def _nested(self, m: Optional[re.Match], style: str) -> Optional[Token]:
        if not m:
            return None
        inner = self.lex(m.group(1))
        inner.stylize(style)
        return inner, m.end()

    def _bold(self, source: str, pos: int) -> Optional[Token]:
        m = BOLD_STAR_RE.match(source, pos) or BOLD_UNDER_RE.match(source, pos)
        return self._nested(m, "inline.bold")

    def _italic(self, source: str, pos: int) -> Optional[Token]:
        m = ITALIC_STAR_RE.match(source, pos) or ITALIC_UNDER_RE.match(source, pos)
        return self._nested(m, "inline.italic")

    def _code(self, source: str, pos: int) -> Optional[Token]:
        m = CODE_RE.match(source, pos)
        if not m:
            return None
        code = m.group(1)
        if self.use_color:
            return Text(f" {code} ", style="inline.code"), m.end()
        return Text(code), m.end()

    def _link(self, source: str, pos: int) -> Optional[Token]:
        m = LINK_RE.match(source, pos)
        if not m:
            return None
        text = Text(m.group(1), style="inline.link")
        text.append(" ")
        text.append(f"({m.group(2)})", style="inline.url")
        return text, m.end()

    def _strike(self, source: str, pos: int) -> Optional[Token]:
        return self._nested(STRIKE_RE.match(source, pos), "inline.strike")


_LEXERS = {True: InlineLexer(True), False: InlineLexer(False)}


def inline_text(text: str, use_color: bool = True) -> Text:
    """Lex inline markup into a styled Text for further composition."""
    return _LEXERS[bool(use_color)].lex(text)


def format_inline(text: str, use_color: bool = True) -> str:
    """Format inline markdown to an ANSI string, or to plain text when use_color is False."""
    return serialize(inline_text(text, use_color), use_color)
