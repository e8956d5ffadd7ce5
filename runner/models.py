"""Result types produced by the snippet runner."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

OUTPUT_KINDS = ("log", "info", "warn", "error", "result")


@dataclass
class OutputRecord:
    kind: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "text": self.text}


@dataclass
class ExecutionResult:
    """Outcome of one snippet run.

    ``output`` keeps console records in call order; a final expression value
    is appended as a ``result`` record. ``duration_ms`` is wall clock from
    invocation until completion or abort.
    """

    success: bool
    output: List[OutputRecord] = field(default_factory=list)
    duration_ms: int = 0
    error: Optional[str] = None

    @property
    def timed_out(self) -> bool:
        return bool(self.error) and self.error.startswith("Execution timed out")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], duration_ms: int) -> "ExecutionResult":
        """Rebuild a result from the plain dict a worker process sends back."""
        return cls(
            success=bool(payload.get("success")),
            output=[OutputRecord(r["kind"], r["text"]) for r in payload.get("output", [])],
            duration_ms=duration_ms,
            error=payload.get("error"),
        )
