"""Read Markdown text chunks from a server-sent-events endpoint."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Iterator, Optional

import requests

DONE_MARKER = "[DONE]"


def iter_sse_lines(
    url: str,
    *,
    method: str = "GET",
    json_body: Optional[dict] = None,
    params: Optional[Dict[str, str]] = None,
    timeout: float = 60.0,
    session: Optional[requests.Session] = None,
) -> Iterator[str]:
    """Yield SSE data payloads from an HTTP response.

    Strips the leading "data:" prefix and skips keep-alive blank lines and
    ``:`` comment lines.
    """
    sse_session = session or requests.Session()
    req = sse_session.post if method.upper() == "POST" else sse_session.get
    with req(url, json=json_body, params=params, stream=True, timeout=timeout) as r:
        r.raise_for_status()
        for raw in r.iter_lines(decode_unicode=True):
            if not raw or raw.startswith(":"):
                continue
            yield raw[5:].lstrip() if raw.startswith("data:") else raw


def extract_text(event: Any) -> str:
    """Pull the text delta out of one decoded event.

    Understands Anthropic-style ``content_block_delta`` events, OpenAI-style
    ``choices[].delta.content`` chunks and bare ``{"text": ...}`` objects.
    """
    if not isinstance(event, dict):
        return ""
    if event.get("type") == "content_block_delta":
        delta = event.get("delta") or {}
        if delta.get("type") == "text_delta":
            return delta.get("text") or ""
        return ""
    choices = event.get("choices")
    if isinstance(choices, list):
        return "".join(((c or {}).get("delta") or {}).get("content") or "" for c in choices)
    text = event.get("text")
    return text if isinstance(text, str) else ""


def iter_text_chunks(lines: Iterable[str]) -> Iterator[str]:
    """Turn SSE data payloads into Markdown text chunks.

    JSON payloads are decoded with extract_text(); anything that is not JSON
    is passed through as literal text, followed by a newline.
    """
    for data in lines:
        if data == DONE_MARKER:
            break
        try:
            event = json.loads(data)
        except json.JSONDecodeError:
            yield data + "\n"
            continue
        if isinstance(event, dict) and event.get("type") == "message_stop":
            break
        text = extract_text(event)
        if text:
            yield text
