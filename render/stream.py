"""Streaming Markdown renderer.

Text arrives in arbitrary chunks (a chunk may end mid-line, mid-fence or
mid-escape). Complete lines are classified and rendered as soon as they are
available; the trailing partial line waits for the next chunk or flush().
Rendered lines go to a sink callable, one call per output line.
"""
from __future__ import annotations

import logging
import re
import shutil
import sys
import textwrap
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from rich.text import Text

from render.config import RendererOptions
from render.inline import inline_text
from render.styles import HEADING_STYLES, serialize
from render.table import TableLayout

if TYPE_CHECKING:
    from runner.models import ExecutionResult

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]

FENCE_RE = re.compile(r"^\s*```\s*([^\s`]*)")
SEPARATOR_RE = re.compile(r"^(?=.*-)\|?[-:|\s]+\|[-:|\s]+\|?$")
HEADER_RE = re.compile(r"^(#{1,6})\s+(.+)")
HR_RE = re.compile(r"^\s*[-*_]{3,}\s*$")
QUOTE_RE = re.compile(r"^\s*>\s?(.*)")
TASK_RE = re.compile(r"^(\s*)[-*+]\s+\[([ xX])\]\s+(.*)")
UL_RE = re.compile(r"^(\s*)[-*+]\s+(.+)")
OL_RE = re.compile(r"^(\s*)(\d+[.)])\s+(.+)")

MAX_BLANK_RUN = 2
RULE_WIDTH = 40
FOOTER_RULE = "─" * 11


class Mode(Enum):
    NORMAL = "normal"
    IN_CODE_BLOCK = "in_code_block"
    IN_TABLE = "in_table"


@dataclass
class CapturedBlock:
    """An executable fenced block. ``source`` and ``id`` never change after capture."""

    id: int
    language: str
    source: str
    result: Optional["ExecutionResult"] = None


def _stdout_sink(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


class StreamRenderer:
    """Renders a Markdown stream to a sink, one complete line at a time.

    Not thread-safe: one writer per renderer.
    """

    def __init__(self, options: Optional[RendererOptions] = None, *, sink: Optional[Sink] = None, **kwargs) -> None:
        self.options = options or RendererOptions(**kwargs)
        self.sink: Sink = sink or self.options.on_line or _stdout_sink
        self._blocks: Dict[int, CapturedBlock] = {}
        self._next_block_id = 0
        self.reset()

    @property
    def use_color(self) -> bool:
        return self.options.use_color

    # ---------------- Stream API ----------------
    def write(self, chunk: str) -> None:
        """Buffer ``chunk`` and render every line it completes."""
        if not chunk:
            return
        self.buffer += chunk
        if "\n" not in self.buffer:
            return
        *lines, self.buffer = self.buffer.split("\n")
        for line in lines:
            self._render_line(line)

    def flush(self) -> None:
        """Render the trailing partial line and close any open table or code block."""
        if self.buffer:
            line, self.buffer = self.buffer, ""
            self._render_line(line)
        if self.mode is Mode.IN_TABLE:
            self._render_table()
        if self.mode is Mode.IN_CODE_BLOCK:
            self._close_code_block()

    def reset(self) -> None:
        """Drop all in-flight state. Captured blocks are kept for later /run requests."""
        self.buffer = ""
        self.mode = Mode.NORMAL
        self.table_rows: List[str] = []
        self.blank_run = 0
        self._code_tag = ""
        self._code_lines: List[str] = []

    # ---------------- Block API ----------------
    def list_blocks(self) -> List[CapturedBlock]:
        return [self._blocks[k] for k in sorted(self._blocks)]

    def get_block(self, block_id: int) -> Optional[CapturedBlock]:
        return self._blocks.get(block_id)

    def clear_blocks(self) -> None:
        self._blocks.clear()

    # ---------------- Line classification ----------------
    def _emit(self, text) -> None:
        if isinstance(text, Text):
            text = serialize(text, self.use_color)
        self.sink(text + "\n")

    def _is_table_line(self, stripped: str) -> bool:
        if SEPARATOR_RE.match(stripped) or stripped.startswith("|"):
            return True
        return self.mode is Mode.IN_TABLE and "|" in stripped

    def _render_line(self, line: str) -> None:
        if line.endswith("\r"):
            line = line[:-1]
        stripped = line.strip()

        if self.mode is Mode.IN_TABLE and not (stripped and self._is_table_line(stripped)):
            self._render_table()

        fence = FENCE_RE.match(line)
        if fence:
            self.blank_run = 0
            if self.mode is Mode.IN_CODE_BLOCK:
                self._close_code_block()
            else:
                self._open_code_block(fence.group(1))
            return

        if self.mode is Mode.IN_CODE_BLOCK:
            self.blank_run = 0
            self._code_lines.append(line + "\n")
            code = Text("│ ", style="code.gutter")
            code.append(line, style="code.text")
            self._emit(code)
            return

        if not stripped:
            self.blank_run += 1
            if self.blank_run <= MAX_BLANK_RUN:
                self._emit("")
            return
        self.blank_run = 0

        if self._is_table_line(stripped):
            if not SEPARATOR_RE.match(stripped):
                self.table_rows.append(line)
            self.mode = Mode.IN_TABLE
            return

        self._emit(self._render_block_line(line))

    def _render_block_line(self, line: str) -> Text:
        header = HEADER_RE.match(line)
        if header:
            level = len(header.group(1))
            text = Text(f"{header.group(1)} ")
            text.append_text(inline_text(header.group(2), self.use_color))
            text.stylize(HEADING_STYLES[level - 1])
            return text

        if HR_RE.match(line):
            return Text("─" * RULE_WIDTH, style="hr")

        quote = QUOTE_RE.match(line)
        if quote:
            body = inline_text(quote.group(1), self.use_color)
            body.stylize("quote")
            text = Text("│", style="quote.border")
            text.append(" ")
            text.append_text(body)
            return text

        task = TASK_RE.match(line)
        if task:
            indent, mark, body = task.groups()
            text = Text(indent)
            if not self.use_color:
                text.append("[x]" if mark.lower() == "x" else "[ ]")
            elif mark.lower() == "x":
                text.append("✓", style="task.done")
            else:
                text.append("○", style="task.open")
            text.append(" ")
            text.append_text(inline_text(body, self.use_color))
            return text

        bullet = UL_RE.match(line)
        if bullet:
            text = Text(bullet.group(1))
            text.append("•", style="list.bullet")
            text.append(" ")
            text.append_text(inline_text(bullet.group(2), self.use_color))
            return text

        ordered = OL_RE.match(line)
        if ordered:
            text = Text(ordered.group(1))
            text.append(ordered.group(2), style="list.number")
            text.append(" ")
            text.append_text(inline_text(ordered.group(3), self.use_color))
            return text

        return inline_text(line, self.use_color)

    # ---------------- Tables ----------------
    def _terminal_width(self) -> int:
        if self.options.width:
            return self.options.width
        return shutil.get_terminal_size((80, 24)).columns

    def _render_table(self) -> None:
        rows, self.table_rows = self.table_rows, []
        self.mode = Mode.NORMAL
        if not rows:
            return
        for line in TableLayout(self._terminal_width(), self.use_color).render(rows):
            self._emit(line)

    # ---------------- Code blocks ----------------
    def _open_code_block(self, tag: str) -> None:
        self.mode = Mode.IN_CODE_BLOCK
        self._code_tag = tag
        self._code_lines = []
        header = Text(f"─── {tag or 'code'}", style="code.frame")
        if self.options.is_executable(tag):
            header.append(f" [{self._next_block_id}]", style="code.id")
        header.append(" ───", style="code.frame")
        self._emit(header)

    def _close_code_block(self) -> None:
        tag, lines = self._code_tag, self._code_lines
        self.mode = Mode.NORMAL
        self._code_tag = ""
        self._code_lines = []

        source = textwrap.dedent("".join(lines)).strip()
        footer = Text(FOOTER_RULE, style="code.frame")
        if source and self.options.is_executable(tag):
            block = CapturedBlock(id=self._next_block_id, language=tag, source=source)
            self._blocks[block.id] = block
            self._next_block_id += 1
            logger.debug("captured %s block %d (%d chars)", tag, block.id, len(source))
            footer.append(" ")
            footer.append(f"▶ /run {block.id}", style="code.id")
        self._emit(footer)


def format_markdown(text: str, use_color: bool = True, **kwargs) -> str:
    """Render a whole document in one call and return the output."""
    parts: List[str] = []
    renderer = StreamRenderer(RendererOptions(use_color=use_color, **kwargs), sink=parts.append)
    renderer.write(text)
    renderer.flush()
    return "".join(parts)
