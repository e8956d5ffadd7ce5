#!/usr/bin/env python3
"""
Tests for renderer options and environment configuration.
"""

import os
import sys

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from render.config import DEFAULT_RUN_TIMEOUT_MS, RendererOptions

ENV_VARS = ("NO_COLOR", "MDTERM_NO_EXEC", "MDTERM_WIDTH", "MDTERM_RUN_TIMEOUT_MS", "MDTERM_EXEC_TAGS")


def _clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clean_env(monkeypatch)
    options = RendererOptions.from_env()
    assert options.use_color is True
    assert options.enable_code_execution is True
    assert options.width is None
    assert options.run_timeout_ms == DEFAULT_RUN_TIMEOUT_MS
    assert options.is_executable("Python")
    assert not options.is_executable("bash")


def test_environment_values(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("MDTERM_NO_EXEC", "1")
    monkeypatch.setenv("MDTERM_WIDTH", "100")
    monkeypatch.setenv("MDTERM_RUN_TIMEOUT_MS", "250")
    options = RendererOptions.from_env()
    assert options.use_color is False
    assert options.enable_code_execution is False
    assert options.width == 100
    assert options.run_timeout_ms == 250
    assert not options.is_executable("python")


def test_invalid_numbers_are_ignored(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("MDTERM_WIDTH", "wide")
    monkeypatch.setenv("MDTERM_RUN_TIMEOUT_MS", "-5")
    options = RendererOptions.from_env()
    assert options.width is None
    assert options.run_timeout_ms == DEFAULT_RUN_TIMEOUT_MS


def test_overrides_win_over_environment(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("MDTERM_WIDTH", "100")
    options = RendererOptions.from_env(width=60, use_color=None)
    assert options.width == 60
    assert options.use_color is True


def test_executable_tags_are_normalised(monkeypatch):
    _clean_env(monkeypatch)
    monkeypatch.setenv("MDTERM_EXEC_TAGS", " Python , sh ,")
    options = RendererOptions.from_env()
    assert options.executable_tags == frozenset({"python", "sh"})
    assert options.is_executable("SH")
    assert RendererOptions(executable_tags={"PY"}).executable_tags == frozenset({"py"})
