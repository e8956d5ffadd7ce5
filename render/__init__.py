"""Streaming Markdown rendering for the terminal."""
