"""Renderer options."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Optional

DEFAULT_EXECUTABLE_TAGS = frozenset({"python", "py", "python3", "py3"})
DEFAULT_RUN_TIMEOUT_MS = 5000


def normalize_tags(tags: Iterable[str]) -> FrozenSet[str]:
    return frozenset(t.strip().lower() for t in tags if t and t.strip())


@dataclass
class RendererOptions:
    """Options recognised by StreamRenderer.

    ``on_line`` overrides the default sink (stdout). ``width`` overrides the
    detected terminal width used for table layout.
    """

    use_color: bool = True
    enable_code_execution: bool = True
    on_line: Optional[Callable[[str], None]] = None
    executable_tags: FrozenSet[str] = DEFAULT_EXECUTABLE_TAGS
    width: Optional[int] = None
    run_timeout_ms: int = DEFAULT_RUN_TIMEOUT_MS

    def __post_init__(self) -> None:
        self.executable_tags = normalize_tags(self.executable_tags)

    @classmethod
    def from_env(cls, **overrides) -> "RendererOptions":
        """Build options from environment variables, then apply keyword overrides.

        Recognised: NO_COLOR, MDTERM_NO_EXEC, MDTERM_WIDTH, MDTERM_RUN_TIMEOUT_MS,
        MDTERM_EXEC_TAGS (comma separated).
        """
        values = {}
        if os.getenv("NO_COLOR"):
            values["use_color"] = False
        if os.getenv("MDTERM_NO_EXEC"):
            values["enable_code_execution"] = False
        width = os.getenv("MDTERM_WIDTH")
        if width and width.isdigit():
            values["width"] = int(width)
        timeout = os.getenv("MDTERM_RUN_TIMEOUT_MS")
        if timeout and timeout.isdigit():
            values["run_timeout_ms"] = int(timeout)
        tags = os.getenv("MDTERM_EXEC_TAGS")
        if tags:
            values["executable_tags"] = frozenset(tags.split(","))
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def is_executable(self, tag: str) -> bool:
        return self.enable_code_execution and tag.lower() in self.executable_tags
