"""Table layout: boxed grid, or a vertical list when the grid cannot fit."""
from __future__ import annotations

import logging
from typing import List

from rich import box
from rich.cells import cell_len
from rich.text import Text

from render.inline import inline_text
from render.styles import serialize

logger = logging.getLogger(__name__)

MIN_NATURAL_WIDTH = 3
MIN_COLUMN_CAP = 15
TABLE_MARGIN = 4
MAX_TABLE_WIDTH = 120
RECORD_RULE_WIDTH = 40

BOX = box.SQUARE


def parse_row(row: str) -> List[str]:
    """Split a raw ``| a | b |`` row into trimmed cells.

    The empty outer cells produced by a leading or trailing pipe are dropped.
    """
    stripped = row.strip()
    cells = [c.strip() for c in stripped.split("|")]
    if stripped.startswith("|") and cells:
        cells.pop(0)
    if stripped.endswith("|") and len(stripped) > 1 and cells:
        cells.pop()
    return cells


def wrap_text(text: str, width: int) -> List[str]:
    """Greedy word wrap; a word wider than ``width`` stays whole on its own line."""
    if cell_len(text) <= width:
        return [text]
    lines: List[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif cell_len(current) + 1 + cell_len(word) <= width:
            current += " " + word
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines or [""]


class TableLayout:
    """Lays out collected table rows for a given terminal width."""

    def __init__(self, width: int = 80, use_color: bool = True) -> None:
        self.width = width
        self.use_color = use_color

    @property
    def budget(self) -> int:
        return min(self.width - TABLE_MARGIN, MAX_TABLE_WIDTH)

    def render(self, raw_rows: List[str]) -> List[str]:
        """Return the rendered lines (without terminators) for ``raw_rows``."""
        rows = [parse_row(r) for r in raw_rows]
        col_count = max((len(r) for r in rows), default=0)
        if col_count == 0:
            return []
        rows = [r + [""] * (col_count - len(r)) for r in rows]

        natural = [
            max([MIN_NATURAL_WIDTH] + [cell_len(r[i]) for r in rows])
            for i in range(col_count)
        ]
        total = sum(natural) + col_count * 3 + 1
        if total > self.budget and col_count > 2:
            logger.debug("table %dx%d needs %d columns of %d, using list layout",
                         len(rows), col_count, total, self.budget)
            return self.render_list(rows)

        cap = (self.budget - col_count * 3 - 1) // col_count
        widths = [min(w, max(cap, MIN_COLUMN_CAP)) for w in natural]
        logger.debug("table %dx%d grid widths %s", len(rows), col_count, widths)
        return self.render_grid(rows, widths)

    def _line(self, text: Text) -> str:
        return serialize(text, self.use_color)

    def _border(self, line: str) -> str:
        return self._line(Text(line, style="table.border"))

    def render_grid(self, rows: List[List[str]], widths: List[int]) -> List[str]:
        padded = [w + 2 for w in widths]
        out = [self._border(BOX.get_top(padded))]
        for index, row in enumerate(rows):
            wrapped = [wrap_text(cell, widths[i]) for i, cell in enumerate(row)]
            height = max(len(cell_lines) for cell_lines in wrapped)
            for line_no in range(height):
                line = Text(BOX.mid_left, style="table.border")
                for i, cell_lines in enumerate(wrapped):
                    cell = inline_text(cell_lines[line_no] if line_no < len(cell_lines) else "", self.use_color)
                    line.append(" ")
                    line.append_text(cell)
                    line.append(" " * max(0, widths[i] - cell.cell_len) + " ")
                    edge = BOX.mid_right if i == len(wrapped) - 1 else BOX.mid_vertical
                    line.append(edge, style="table.border")
                out.append(self._line(line))
            if index == 0 and len(rows) > 1:
                out.append(self._border(BOX.get_row(padded, level="head")))
        out.append(self._border(BOX.get_bottom(padded)))
        return out

    def render_list(self, rows: List[List[str]]) -> List[str]:
        headers = rows[0]
        records = rows[1:] or rows[:1]
        out: List[str] = []
        for index, record in enumerate(records):
            if index > 0:
                out.append(self._border("─" * RECORD_RULE_WIDTH))
            if record[0]:
                title = inline_text(record[0], self.use_color)
                title.stylize("table.record")
                out.append(self._line(title))
            for i in range(1, len(record)):
                value = record[i]
                if not value.strip():
                    continue
                label = headers[i] if i < len(headers) and headers[i] else f"Column {i + 1}"
                line = Text("  ")
                line.append(f"{label}:", style="table.label")
                line.append(" ")
                line.append_text(inline_text(value, self.use_color))
                out.append(self._line(line))
        return out
