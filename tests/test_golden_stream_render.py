#!/usr/bin/env python3
"""
Golden tests: recorded SSE frames replayed through the text extractor, the
renderer and the command line entry point.
"""

import os
import sys

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from render.config import RendererOptions
from render.stream import StreamRenderer
from util.sse_client import iter_text_chunks

import md_cli

EXPECTED = (
    "Intro line 1\n"
    "line 2\n"
    "\n"
    "─── python [0] ───\n"
    "│ print('hi')\n"
    "─────────── ▶ /run 0\n"
    "Final para.\n"
    "\n"
)


def _replay(frames):
    out = []
    renderer = StreamRenderer(RendererOptions(use_color=False, width=80), sink=out.append)
    md_cli.render_stream(renderer, iter_text_chunks(frames))
    return "".join(out), renderer


def test_golden_anthropic_stream():
    frames = [
        '{"type":"message_start","message":{"model":"claude"}}',
        '{"type":"content_block_delta","delta":{"type":"text_delta","text":"Intro line 1\\n"}}',
        '{"type":"content_block_delta","delta":{"type":"text_delta","text":"line 2\\n\\n"}}',
        '{"type":"content_block_delta","delta":{"type":"text_delta","text":"```pyt"}}',
        '{"type":"content_block_delta","delta":{"type":"text_delta","text":"hon\\nprint(\'hi\')\\n"}}',
        '{"type":"content_block_delta","delta":{"type":"text_delta","text":"```\\n"}}',
        '{"type":"content_block_delta","delta":{"type":"text_delta","text":"Final para.\\n\\n"}}',
        '{"type":"message_stop"}',
    ]

    text, renderer = _replay(frames)

    assert text == EXPECTED
    assert renderer.get_block(0).source == "print('hi')"


def test_golden_openai_stream():
    frames = [
        '{"id":"x","choices":[{"index":0,"delta":{"role":"assistant","content":"Intro line 1\\n"}}]}',
        '{"id":"y","choices":[{"index":0,"delta":{"content":"line 2\\n\\n```python\\n"}}]}',
        '{"id":"z","choices":[{"index":0,"delta":{"content":"print(\'hi\')\\n```\\nFinal"}}]}',
        '{"id":"w","choices":[{"index":0,"delta":{"content":" para.\\n\\n"},"finish_reason":"stop"}]}',
        "[DONE]",
    ]

    text, _ = _replay(frames)

    assert text == EXPECTED


def test_cli_renders_file_and_runs_block(tmp_path, capsys):
    source = tmp_path / "doc.md"
    source.write_text("# Demo\n```python\nx = 20\nx + 1\n```\n", encoding="utf-8")

    code = md_cli.main([str(source), "--no-color", "--width", "80", "--run", "0"])

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("# Demo\n─── python [0] ───\n│ x = 20\n│ x + 1\n")
    assert "│ → 21" in out


def test_cli_missing_file(tmp_path, capsys):
    code = md_cli.main([str(tmp_path / "missing.md"), "--no-color"])
    assert code == 1
    assert "Cannot read" in capsys.readouterr().err
