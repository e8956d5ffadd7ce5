"""Terminal presentation of an ExecutionResult."""
from __future__ import annotations

from typing import List

from rich.text import Text

from render.styles import serialize
from runner.models import OUTPUT_KINDS, ExecutionResult

KIND_PREFIX = {"error": "✗ ", "warn": "⚠ ", "info": "ℹ "}


def format_output(result: ExecutionResult, use_color: bool = True) -> str:
    """Render a result as a framed block of lines (no trailing newline)."""
    lines: List[Text] = [Text("┌── Output ──", style="output.frame")]
    if not result.output:
        line = Text("│ ", style="output.frame")
        line.append("(no output)", style="output.empty")
        lines.append(line)
    for record in result.output:
        style = f"output.{record.kind}" if record.kind in OUTPUT_KINDS else "output.log"
        for index, chunk in enumerate(record.text.split("\n")):
            line = Text("│ ", style="output.frame")
            prefix = KIND_PREFIX.get(record.kind, "") if index == 0 else ""
            line.append(prefix + chunk, style=style)
            lines.append(line)
    lines.append(Text(f"└── ⏱ {result.duration_ms}ms ──", style="output.frame"))
    return "\n".join(serialize(line, use_color) for line in lines)
