"""Named styles and ANSI serialisation for rendered lines."""
from __future__ import annotations

import io

from rich.console import Console
from rich.text import Text
from rich.theme import Theme


HEADING_STYLES = (
    "heading.1", "heading.2", "heading.3",
    "heading.4", "heading.5", "heading.6",
)

STYLES = {
    "heading.1": "bold bright_cyan",
    "heading.2": "bold bright_blue",
    "heading.3": "bold bright_magenta",
    "heading.4": "bold cyan",
    "heading.5": "bold blue",
    "heading.6": "bold magenta",
    "hr": "dim",
    "quote.border": "dim",
    "quote": "italic",
    "list.bullet": "green",
    "list.number": "yellow",
    "task.done": "green",
    "task.open": "dim",
    "code.frame": "dim",
    "code.id": "green",
    "code.gutter": "bright_black",
    "code.text": "bright_white",
    "inline.bold": "bold",
    "inline.italic": "italic",
    "inline.code": "white on bright_black",
    "inline.math": "bright_magenta",
    "inline.link": "underline cyan",
    "inline.url": "dim",
    "inline.strike": "dim strike",
    "table.border": "dim",
    "table.record": "bold cyan",
    "table.label": "dim",
    "output.frame": "dim",
    "output.empty": "bright_black",
    "output.log": "white",
    "output.info": "cyan",
    "output.warn": "yellow",
    "output.error": "red",
    "output.result": "green",
}

THEME = Theme(STYLES)


def render_ansi(text: Text) -> str:
    """Serialise a styled Text to a single line of ANSI-coded output.

    Every styled segment carries its own start code and reset, so nested
    spans cannot leave an open style behind.
    """
    buf = io.StringIO()
    tmp = Console(
        file=buf,
        force_terminal=True,
        color_system="standard",
        theme=THEME,
        soft_wrap=True,
        width=10_000,
        highlight=False,
        markup=False,
        emoji=False,
        legacy_windows=False,
    )
    tmp.print(text, end="")
    return buf.getvalue()


def serialize(text: Text, use_color: bool) -> str:
    return render_ansi(text) if use_color else text.plain
