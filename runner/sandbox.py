"""Snippet execution engine.

Each run happens in a freshly spawned worker process. The host waits for the
worker to report it is ready, then gives the snippet ``timeout_ms`` to finish
and terminates the process if it does not. Whatever the snippet does
(infinite loop, runaway recursion, raising), the host gets an
ExecutionResult back and can start the next run immediately.
"""
from __future__ import annotations

import ast
import logging
import multiprocessing
import time
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

from render.config import DEFAULT_RUN_TIMEOUT_MS
from runner.capabilities import Capabilities, SandboxConsole, build_namespace, check_source
from runner.models import ExecutionResult, OutputRecord
from runner.values import format_value

if TYPE_CHECKING:
    from render.stream import StreamRenderer

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT_S = 30.0
RESULT_PREFIX = "→ "


class Interpreter(Protocol):
    def evaluate(self, source: str, capabilities: Capabilities, timeout_ms: int) -> ExecutionResult:
        ...


def execute(source: str, capabilities: Capabilities = Capabilities()) -> Dict[str, Any]:
    """Run ``source`` in the current process against a fresh capability namespace.

    Statements run in order; when the last statement is an expression its
    value becomes the result. Returns a plain dict so it can be pickled.
    """
    console = SandboxConsole()
    try:
        tree = ast.parse(source, filename="<snippet>", mode="exec")
        check_source(tree)
        tail = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            tail = ast.Expression(body=tree.body.pop().value)
        namespace = build_namespace(console, capabilities)
        exec(compile(tree, "<snippet>", "exec"), namespace)
        value = eval(compile(tail, "<snippet>", "eval"), namespace) if tail is not None else None
        if value is not None:
            console.records.append(OutputRecord("result", RESULT_PREFIX + format_value(value)))
        success, error = True, None
    except Exception as exc:
        console.records.append(OutputRecord("error", f"{type(exc).__name__}: {exc}"))
        success, error = False, str(exc)
    return {
        "success": success,
        "output": [r.to_dict() for r in console.records],
        "error": error,
    }


def _worker(conn, source: str, capabilities: Capabilities) -> None:
    conn.send(("ready", None))
    conn.send(("done", execute(source, capabilities)))
    conn.close()


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _failure(message: str, started: float) -> ExecutionResult:
    return ExecutionResult(
        success=False,
        output=[OutputRecord("error", message)],
        duration_ms=_elapsed_ms(started),
        error=message.split(": ", 1)[-1],
    )


class ProcessInterpreter:
    """Runs each snippet in its own process so a timeout can always be enforced."""

    def __init__(self, start_method: str = "spawn", startup_timeout: float = STARTUP_TIMEOUT_S) -> None:
        self.start_method = start_method
        self.startup_timeout = startup_timeout

    def evaluate(self, source: str, capabilities: Capabilities, timeout_ms: int) -> ExecutionResult:
        started = time.monotonic()
        ctx = multiprocessing.get_context(self.start_method)
        reader, writer = ctx.Pipe(duplex=False)
        proc = ctx.Process(target=_worker, args=(writer, source, capabilities), daemon=True)
        proc.start()
        writer.close()
        logger.debug("snippet worker %s started", proc.pid)
        try:
            if not reader.poll(self.startup_timeout):
                logger.warning("snippet worker %s did not start within %.0fs", proc.pid, self.startup_timeout)
                return _failure("RuntimeError: Sandbox worker failed to start", started)
            reader.recv()
            if not reader.poll(timeout_ms / 1000.0):
                logger.warning("snippet timed out after %d ms, terminating worker %s", timeout_ms, proc.pid)
                return _failure(f"TimeoutError: Execution timed out after {timeout_ms} ms", started)
            _, payload = reader.recv()
            return ExecutionResult.from_payload(payload, _elapsed_ms(started))
        except EOFError:
            proc.join(1)
            logger.warning("snippet worker %s exited with code %s", proc.pid, proc.exitcode)
            return _failure(f"RuntimeError: Sandbox worker exited unexpectedly (exit code {proc.exitcode})", started)
        finally:
            reader.close()
            if proc.is_alive():
                proc.terminate()
            proc.join(1)
            if proc.is_alive():
                proc.kill()
                proc.join()


class SnippetRunner:
    """Runs snippets through an Interpreter and never lets an exception escape."""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_RUN_TIMEOUT_MS,
        interpreter: Optional[Interpreter] = None,
        capabilities: Optional[Capabilities] = None,
    ) -> None:
        self.timeout_ms = timeout_ms
        self.interpreter = interpreter or ProcessInterpreter()
        self.capabilities = capabilities or Capabilities()

    def run(self, source: str, timeout_ms: Optional[int] = None) -> ExecutionResult:
        started = time.monotonic()
        timeout = self.timeout_ms if timeout_ms is None else timeout_ms
        try:
            return self.interpreter.evaluate(source, self.capabilities, timeout)
        except Exception as e:
            logger.warning("snippet interpreter failed: %s", e)
            return _failure(f"{type(e).__name__}: {e}", started)


def run_block(renderer: "StreamRenderer", block_id: int, runner: Optional[SnippetRunner] = None) -> Optional[ExecutionResult]:
    """Run a captured block by id and store the result on it. Unknown ids return None."""
    block = renderer.get_block(block_id)
    if block is None:
        return None
    runner = runner or SnippetRunner(timeout_ms=renderer.options.run_timeout_ms)
    block.result = runner.run(block.source)
    return block.result
