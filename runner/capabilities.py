"""The capability set a snippet is allowed to touch.

A snippet sees a ``console`` object whose methods append OutputRecords, a
``print`` routed to ``console.log``, a few pure helper namespaces and an
allow-listed subset of builtins. Everything that reaches the host
(files, imports, dynamic evaluation, introspection) is replaced by a stub
that raises SandboxViolation.
"""
from __future__ import annotations

import ast
import builtins
import collections
import datetime
import json
import math
from dataclasses import dataclass
from time import perf_counter
from types import SimpleNamespace
from typing import Any, Callable, Dict, FrozenSet, List

from runner.models import OutputRecord
from runner.values import format_value


class SandboxViolation(PermissionError):
    """Raised inside a snippet that reaches for a capability it was not given."""


SAFE_BUILTINS = frozenset({
    "abs", "all", "any", "ascii", "bin", "bool", "bytearray", "bytes",
    "callable", "chr", "classmethod", "complex", "dict", "divmod",
    "enumerate", "filter", "float", "format", "frozenset", "hash", "hex",
    "int", "isinstance", "issubclass", "iter", "len", "list", "map", "max",
    "min", "next", "object", "oct", "ord", "pow", "property", "range",
    "repr", "reversed", "round", "set", "slice", "sorted", "staticmethod",
    "str", "sum", "super", "tuple", "zip", "__build_class__",
    # exceptions
    "ArithmeticError", "AssertionError", "AttributeError", "BaseException",
    "Exception", "IndexError", "KeyError", "LookupError", "NameError",
    "NotImplementedError", "OverflowError", "RecursionError", "RuntimeError",
    "StopIteration", "TypeError", "ValueError", "ZeroDivisionError",
})

# builtin name -> name used in the error message
DENIED_BUILTINS = {
    "open": "open",
    "__import__": "import",
    "exec": "exec",
    "eval": "eval",
    "compile": "compile",
    "input": "input",
    "globals": "globals",
    "locals": "locals",
    "vars": "vars",
    "dir": "dir",
    "getattr": "getattr",
    "setattr": "setattr",
    "delattr": "delattr",
    "type": "type",
    "memoryview": "memoryview",
    "exit": "exit",
    "quit": "quit",
    "breakpoint": "breakpoint",
    "help": "help",
}

DEFAULT_MODULES = frozenset({"math", "json", "datetime", "collections"})


def _public(module) -> SimpleNamespace:
    return SimpleNamespace(**{k: getattr(module, k) for k in dir(module) if not k.startswith("_")})


MODULE_FACTORIES: Dict[str, Callable[[], SimpleNamespace]] = {
    "math": lambda: _public(math),
    "json": lambda: SimpleNamespace(dumps=json.dumps, loads=json.loads, JSONDecodeError=json.JSONDecodeError),
    "datetime": lambda: SimpleNamespace(
        date=datetime.date,
        datetime=datetime.datetime,
        time=datetime.time,
        timedelta=datetime.timedelta,
        timezone=datetime.timezone,
    ),
    "collections": lambda: SimpleNamespace(
        Counter=collections.Counter,
        OrderedDict=collections.OrderedDict,
        defaultdict=collections.defaultdict,
        deque=collections.deque,
        namedtuple=collections.namedtuple,
    ),
}


@dataclass(frozen=True)
class Capabilities:
    """Names a snippet may use. Picklable so it can cross into a worker process."""

    builtins: FrozenSet[str] = SAFE_BUILTINS
    modules: FrozenSet[str] = DEFAULT_MODULES


class SandboxConsole:
    """Console-style output handler that records instead of writing anywhere."""

    def __init__(self) -> None:
        self.records: List[OutputRecord] = []
        self._timers: Dict[str, float] = {}

    def _push(self, kind: str, args) -> None:
        self.records.append(OutputRecord(kind, " ".join(format_value(a) for a in args)))

    def log(self, *args: Any) -> None:
        self._push("log", args)

    def info(self, *args: Any) -> None:
        self._push("info", args)

    def warn(self, *args: Any) -> None:
        self._push("warn", args)

    def error(self, *args: Any) -> None:
        self._push("error", args)

    def assert_(self, condition: Any, *args: Any) -> None:
        if not condition:
            self._push("error", ("Assertion failed:",) + args if args else ("Assertion failed",))

    def clear(self) -> None:
        self.records.clear()

    def table(self, data: Any) -> None:
        self._push("log", (data,))

    def time(self, label: str = "default") -> None:
        self._timers[label] = perf_counter()

    def time_end(self, label: str = "default") -> None:
        started = self._timers.pop(label, None)
        if started is None:
            self._push("warn", (f"Timer '{label}' does not exist",))
            return
        self._push("log", (f"{label}: {(perf_counter() - started) * 1000:.3f}ms",))

    timeEnd = time_end

    def trace(self, *args: Any) -> None:
        self._push("log", ("Trace:",) + args)

    def print(self, *args: Any, sep: str = " ", end: str = "\n", **_ignored: Any) -> None:
        self.records.append(OutputRecord("log", sep.join(format_value(a) for a in args)))


def _denied(label: str) -> Callable[..., Any]:
    def blocked(*args: Any, **kwargs: Any) -> Any:
        raise SandboxViolation(f"{label} is not allowed in sandbox")

    blocked.__name__ = label
    return blocked


def build_namespace(console: SandboxConsole, capabilities: Capabilities = Capabilities()) -> Dict[str, Any]:
    """Globals for one snippet run."""
    safe = {name: getattr(builtins, name) for name in capabilities.builtins if hasattr(builtins, name)}
    for name, label in DENIED_BUILTINS.items():
        safe[name] = _denied(label)
    safe["print"] = console.print

    namespace: Dict[str, Any] = {"__builtins__": safe, "__name__": "__snippet__", "console": console}
    for module in sorted(capabilities.modules):
        factory = MODULE_FACTORIES.get(module)
        if factory is not None:
            namespace[module] = factory()
    return namespace


ALLOWED_DUNDERS = frozenset({"__init__", "__name__", "__doc__"})

# Frame, code and traceback handles lead back to the host's globals and builtins.
INTROSPECTION_ATTRS = frozenset({
    "gi_frame", "gi_code", "gi_yieldfrom",
    "cr_frame", "cr_code", "cr_await", "cr_origin",
    "ag_frame", "ag_code", "ag_await",
    "f_back", "f_globals", "f_locals", "f_builtins", "f_code", "f_trace",
    "tb_frame", "tb_next",
    "func_globals", "func_code",
})


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name not in ALLOWED_DUNDERS


def check_source(tree: ast.AST) -> None:
    """Reject dunder names, introspection attributes and dunder string keys before anything runs."""
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and (_is_dunder(node.attr) or node.attr in INTROSPECTION_ATTRS):
            raise SandboxViolation(f"attribute {node.attr} is not allowed in sandbox")
        if isinstance(node, ast.Name) and _is_dunder(node.id):
            raise SandboxViolation(f"name {node.id} is not allowed in sandbox")
        if isinstance(node, ast.Constant) and isinstance(node.value, str) and _is_dunder(node.value):
            raise SandboxViolation(f"string {node.value!r} is not allowed in sandbox")
