#!/usr/bin/env python3
"""
Test script for SSE client functionality.
"""

import sys
import os
import json
from unittest.mock import MagicMock, Mock

import pytest
import requests

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from util.sse_client import extract_text, iter_sse_lines, iter_text_chunks


def _session(lines, method="get"):
    mock_response = Mock()
    mock_response.iter_lines.return_value = lines
    mock_response.raise_for_status.return_value = None

    mock_session = Mock()
    context = MagicMock()
    context.__enter__.return_value = mock_response
    context.__exit__.return_value = None
    getattr(mock_session, method).return_value = context
    return mock_session, mock_response


def test_sse_lines_basic():
    """Test basic SSE line parsing."""
    session, _ = _session(["data: Hello world", "data: Second line", "", "data: Third line"])

    lines = list(iter_sse_lines("http://test.com", session=session))

    assert lines == ["Hello world", "Second line", "Third line"]
    session.get.assert_called_once_with(
        "http://test.com", json=None, params=None, stream=True, timeout=60.0
    )


def test_sse_lines_data_prefix_stripping():
    """Test that 'data:' prefix is properly stripped."""
    session, _ = _session([
        "data: Content with spaces",
        "data:No space after colon",
        "data:   Multiple spaces",
        "event: some-event",  # Non-data line
        "data: Final line",
    ])

    lines = list(iter_sse_lines("http://test.com", session=session))

    assert lines == ["Content with spaces", "No space after colon", "Multiple spaces", "event: some-event", "Final line"]


def test_sse_lines_skips_blank_and_comment_lines():
    session, _ = _session(["data: Line 1", "", None, ": keep-alive", "data: Line 2"])

    assert list(iter_sse_lines("http://test.com", session=session)) == ["Line 1", "Line 2"]


def test_sse_lines_post_sends_json_body():
    session, _ = _session(["data: ok"], method="post")

    lines = list(iter_sse_lines("http://test.com", method="POST", json_body={"prompt": "hi"}, session=session))

    assert lines == ["ok"]
    _, kwargs = session.post.call_args
    assert kwargs["json"] == {"prompt": "hi"}
    assert kwargs["stream"] is True
    session.get.assert_not_called()


def test_sse_lines_http_error_propagates():
    session, response = _session([])
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")

    with pytest.raises(requests.HTTPError):
        list(iter_sse_lines("http://test.com", session=session))


class TestExtractText:
    def test_anthropic_text_delta(self):
        event = {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "Hi"}}
        assert extract_text(event) == "Hi"

    def test_anthropic_non_text_delta(self):
        event = {"type": "content_block_delta", "delta": {"type": "input_json_delta", "partial_json": "{"}}
        assert extract_text(event) == ""

    def test_openai_chunk(self):
        event = {"choices": [{"delta": {"content": "a"}}, {"delta": {}}]}
        assert extract_text(event) == "a"

    def test_bare_text(self):
        assert extract_text({"text": "plain"}) == "plain"

    def test_unknown_shapes(self):
        assert extract_text({"type": "ping"}) == ""
        assert extract_text([1, 2]) == ""
        assert extract_text({"text": 3}) == ""


class TestTextChunks:
    def test_json_events_become_text(self):
        lines = [
            json.dumps({"type": "message_start"}),
            json.dumps({"type": "content_block_delta", "delta": {"type": "text_delta", "text": "# Ti"}}),
            json.dumps({"type": "content_block_delta", "delta": {"type": "text_delta", "text": "tle\n"}}),
            json.dumps({"type": "message_stop"}),
            json.dumps({"text": "ignored"}),
        ]
        assert list(iter_text_chunks(lines)) == ["# Ti", "tle\n"]

    def test_done_marker_stops(self):
        lines = [json.dumps({"choices": [{"delta": {"content": "x"}}]}), "[DONE]", json.dumps({"text": "y"})]
        assert list(iter_text_chunks(lines)) == ["x"]

    def test_non_json_passes_through_as_a_line(self):
        assert list(iter_text_chunks(["plain text", "more"])) == ["plain text\n", "more\n"]
