#!/usr/bin/env python3
"""
Tests for snippet value formatting.
"""

import os
import sys

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from runner.values import format_value


class Point:
    def __init__(self):
        self.x = 1
        self.tags = {"a"}


def named():
    pass


def test_scalars():
    assert format_value(None) == "None"
    assert format_value("text") == "text"
    assert format_value(3) == "3"
    assert format_value(2.5) == "2.5"
    assert format_value(True) == "True"


def test_short_sequences():
    assert format_value([1, "a", None]) == "[1, a, None]"
    assert format_value((1,)) == "(1)"
    assert format_value({7}) == "{7}"
    assert format_value([[1, 2], []]) == "[[1, 2], []]"


def test_long_sequence_is_previewed():
    assert format_value(list(range(12))) == "list(12) [0, 1, 2, 3, 4, ...]"
    assert format_value(tuple(range(11))) == "tuple(11) (0, 1, 2, 3, 4, ...)"


def test_exceptions():
    assert format_value(ValueError("bad")) == "ValueError: bad"


def test_callables():
    assert format_value(named) == "[Function: named]"
    assert format_value(lambda: 1) == "[Function: anonymous]"


def test_dicts_and_objects_as_json():
    assert format_value({"a": 1}) == '{\n  "a": 1\n}'
    assert format_value(Point()) == '{\n  "x": 1,\n  "tags": [\n    "a"\n  ]\n}'


def test_long_objects_are_truncated():
    out = format_value({"k": "x" * 600})
    assert len(out) == 503
    assert out.endswith("...")


def test_unserialisable_value_never_raises():
    assert format_value({(1, 2): 3}) == "[Object]"
