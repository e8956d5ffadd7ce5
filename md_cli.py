#!/usr/bin/env python3
"""
md-cli: render Markdown to the terminal as it streams in, then run its code blocks

Sources
- a file path, or "-" for stdin (read in small chunks)
- --url: a server-sent-events endpoint; JSON text deltas are rendered as they arrive

Python fenced blocks are captured while rendering. Run them afterwards with
--run N / --run all, or interactively with --interactive (/run, /blocks, /help, /exit).
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Iterator, List, Optional, TextIO

import requests
from prompt_toolkit import prompt
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from render.config import RendererOptions
from render.stream import StreamRenderer
from runner.sandbox import SnippetRunner
from util.command_helpers import handle_run_command, handle_special_commands, should_exit_from_input
from util.sse_client import iter_sse_lines, iter_text_chunks

CHUNK_SIZE = 256
PROMPT_TEXT = "md> "
console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def iter_file_chunks(stream: TextIO, size: int = CHUNK_SIZE) -> Iterator[str]:
    return iter(lambda: stream.read(size), "")


def render_stream(renderer: StreamRenderer, chunks: Iterable[str]) -> None:
    for chunk in chunks:
        renderer.write(chunk)
    renderer.flush()


def interactive_loop(renderer: StreamRenderer, runner: SnippetRunner, use_color: bool) -> None:
    console.print("[dim]Type /help for commands, /exit to quit.[/dim]")
    while True:
        try:
            user_input: Optional[str] = prompt(PROMPT_TEXT)
        except (EOFError, KeyboardInterrupt):
            user_input = None
        if should_exit_from_input(user_input):
            break
        if not user_input.strip():
            continue
        if not handle_special_commands(user_input, renderer, runner, console, use_color):
            console.print("[yellow]Unknown command. Type /help for commands.[/yellow]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="md-cli", description="Stream Markdown to the terminal and run its code blocks")
    parser.add_argument("source", nargs="?", default="-", help="Markdown file to render, or - for stdin (default)")
    parser.add_argument("--url", help="Render text streamed from an SSE endpoint instead of a file")
    parser.add_argument("--post", action="store_true", help="Use POST instead of GET for --url")
    parser.add_argument("--no-color", action="store_true", help="Plain text output without ANSI styling")
    parser.add_argument("--no-exec", action="store_true", help="Do not capture runnable code blocks")
    parser.add_argument("--width", type=int, help="Terminal width used for table layout")
    parser.add_argument("--timeout-ms", type=int, help="Per-run snippet timeout in milliseconds")
    parser.add_argument("--run", metavar="ID", help="After rendering, run block ID (or 'all')")
    parser.add_argument("--interactive", "-i", action="store_true", help="Open a /run prompt after rendering")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    options = RendererOptions.from_env(
        use_color=False if args.no_color else None,
        enable_code_execution=False if args.no_exec else None,
        width=args.width,
        run_timeout_ms=args.timeout_ms,
    )
    renderer = StreamRenderer(options)
    runner = SnippetRunner(timeout_ms=options.run_timeout_ms)

    try:
        if args.url:
            lines = iter_sse_lines(args.url, method="POST" if args.post else "GET")
            render_stream(renderer, iter_text_chunks(lines))
        elif args.source == "-":
            render_stream(renderer, iter_file_chunks(sys.stdin))
        else:
            with open(args.source, encoding="utf-8") as fh:
                render_stream(renderer, iter_file_chunks(fh))
    except requests.RequestException as e:
        renderer.flush()
        err_console.print(f"[red]Stream failed: {escape(str(e))}[/red]")
        return 1
    except OSError as e:
        err_console.print(f"[red]Cannot read {escape(args.source)}: {escape(str(e))}[/red]")
        return 1

    if args.run is not None:
        handle_run_command(f"/run {args.run}", renderer, runner, console, options.use_color)
    if args.interactive:
        interactive_loop(renderer, runner, options.use_color)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
