"""Convert LaTeX-style math snippets to a Unicode approximation."""
from __future__ import annotations

import re
from typing import Mapping, Optional

from render.symbols import MATH_SYMBOLS, SUBSCRIPTS, SUPERSCRIPTS


# One level of nested braces is allowed inside \frac and \sqrt arguments.
_GROUP = r"\{((?:[^{}]|\{[^{}]*\})+)\}"

FRAC_RE = re.compile(r"\\frac\s*" + _GROUP + r"\s*" + _GROUP)
SUP_GROUP_RE = re.compile(r"\^\{([^{}]+)\}")
SUP_CHAR_RE = re.compile(r"\^([A-Za-z0-9])")
SUB_GROUP_RE = re.compile(r"_\{([^{}]+)\}")
SUB_CHAR_RE = re.compile(r"_([A-Za-z0-9])")
SQRT_GROUP_RE = re.compile(r"\\sqrt\s*" + _GROUP)
SQRT_BARE_RE = re.compile(r"\\sqrt\s+([A-Za-z0-9])")
COMMAND_RE = re.compile(r"\\([A-Za-z]+|[^A-Za-z\s]| )")
BRACES_RE = re.compile(r"\{([^{}]*)\}")
WHITESPACE_RE = re.compile(r"\s+")

# Private-use placeholders keep escaped braces out of the brace-stripping pass.
_OPEN_BRACE = "\ue000"
_CLOSE_BRACE = "\ue001"


class MathFormatter:
    """Applies the rewrite passes in a fixed order, each exactly once."""

    def __init__(
        self,
        symbols: Mapping[str, str] = MATH_SYMBOLS,
        superscripts: Mapping[str, str] = SUPERSCRIPTS,
        subscripts: Mapping[str, str] = SUBSCRIPTS,
    ) -> None:
        self.symbols = symbols
        self.superscripts = superscripts
        self.subscripts = subscripts

    def format(self, latex: str) -> str:
        result = FRAC_RE.sub(r"(\1)/(\2)", latex)

        result = self._scripts(result, SUP_GROUP_RE, SUP_CHAR_RE, self.superscripts)
        result = self._scripts(result, SUB_GROUP_RE, SUB_CHAR_RE, self.subscripts)

        result = SQRT_GROUP_RE.sub(r"√(\1)", result)
        result = SQRT_BARE_RE.sub(r"√\1", result)

        result = COMMAND_RE.sub(self._command, result)

        previous: Optional[str] = None
        while previous != result:
            previous = result
            result = BRACES_RE.sub(r"\1", result)
        result = result.replace(_OPEN_BRACE, "{").replace(_CLOSE_BRACE, "}")

        return WHITESPACE_RE.sub(" ", result).strip()

    @staticmethod
    def _scripts(text: str, group_re: re.Pattern, char_re: re.Pattern, table: Mapping[str, str]) -> str:
        def group(match: re.Match) -> str:
            content = match.group(1)
            if all(c in table for c in content):
                return "".join(table[c] for c in content)
            return match.group(0)

        def single(match: re.Match) -> str:
            return table.get(match.group(1), match.group(0))

        return char_re.sub(single, group_re.sub(group, text))

    def _command(self, match: re.Match) -> str:
        name = match.group(1)
        if name == "{":
            return _OPEN_BRACE
        if name == "}":
            return _CLOSE_BRACE
        mapped = self.symbols.get(name)
        return match.group(0) if mapped is None else mapped


_DEFAULT = MathFormatter()


def format_math(latex: str) -> str:
    """Convert a math expression (delimiters already removed) to Unicode text.

    Unknown commands are left in place, e.g. ``format_math("\\zzz")`` returns
    ``"\\zzz"``.
    """
    return _DEFAULT.format(latex)
