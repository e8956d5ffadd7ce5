"""Command handling for the interactive prompt (/run, /blocks, /help, /exit)."""
from __future__ import annotations

from typing import Optional

from rich.markup import escape
from rich.text import Text

from render.stream import CapturedBlock, StreamRenderer
from runner.display import format_output
from runner.sandbox import SnippetRunner, run_block

PREVIEW_WIDTH = 50
PREVIEW_LINES = 10


def should_exit_from_input(user_input: Optional[str]) -> bool:
    """Check if user input indicates they want to exit."""
    if user_input is None:
        return True
    return user_input.strip().lower() in {"/exit", "/quit"}


def show_help_message(console) -> None:
    """Display help message with all available commands."""
    console.print("\n[bold cyan]Available Commands:[/bold cyan]")
    console.print("  [bold green]/run[/bold green]          - List runnable code blocks")
    console.print("  [bold green]/run[/bold green] <id>     - Run one code block")
    console.print("  [bold green]/run all[/bold green]      - Run every code block in order")
    console.print("  [bold green]/blocks[/bold green]       - Show the source of every code block")
    console.print("  [bold green]/help[/bold green]         - Show this help message")
    console.print("  [bold green]/exit[/bold green]         - Quit the program")
    console.print()


def _first_line_preview(block: CapturedBlock) -> str:
    first = block.source.split("\n")[0]
    if len(first) > PREVIEW_WIDTH:
        return first[:PREVIEW_WIDTH] + "..."
    return first


def list_blocks(renderer: StreamRenderer, console) -> None:
    blocks = renderer.list_blocks()
    if not blocks:
        console.print("[yellow]No runnable code blocks found.[/yellow]")
        return
    console.print("\n[bold]Available Code Blocks[/bold]")
    console.print("─" * 40)
    for block in blocks:
        console.print(Text.assemble((f"  [{block.id}]", "cyan"), f" {block.language}: {_first_line_preview(block)}"))
    console.print("\n[dim]Usage: /run <block_id> or /run all[/dim]\n")


def show_blocks(renderer: StreamRenderer, console) -> None:
    blocks = renderer.list_blocks()
    console.print("\n[bold]Code Blocks[/bold]")
    console.print("─" * 40)
    if not blocks:
        console.print("[dim]  No runnable code blocks found.[/dim]")
        return
    for block in blocks:
        console.print(Text(f"\n[{block.id}] {block.language}", style="bold cyan"))
        console.print("[dim]" + "─" * 30 + "[/dim]")
        lines = block.source.split("\n")
        for line in lines[:PREVIEW_LINES]:
            console.print(Text(f"  {line}"))
        if len(lines) > PREVIEW_LINES:
            console.print(f"[dim]  ... ({len(lines) - PREVIEW_LINES} more lines)[/dim]")


def execute_block(renderer: StreamRenderer, block_id: int, runner: SnippetRunner, console, use_color: bool = True) -> None:
    result = run_block(renderer, block_id, runner)
    if result is None:
        console.print(f"[yellow]Invalid block ID: {block_id}. Use /run to see available blocks.[/yellow]")
        return
    console.print(Text.from_ansi(format_output(result, use_color)))


def handle_run_command(user_input: str, renderer: StreamRenderer, runner: SnippetRunner, console, use_color: bool = True) -> bool:
    """Handle ``/run``, ``/run <id>`` and ``/run all``. Returns True if the input was a run command."""
    parts = user_input.strip().split()
    if not parts or parts[0].lower() != "/run":
        return False

    if len(parts) == 1:
        list_blocks(renderer, console)
        return True

    arg = parts[1].lower()
    if arg == "all":
        blocks = renderer.list_blocks()
        if not blocks:
            console.print("[yellow]No runnable code blocks found.[/yellow]")
            return True
        for block in blocks:
            console.print(Text(f"\n[{block.id}] {block.language}", style="cyan"))
            execute_block(renderer, block.id, runner, console, use_color)
        return True

    try:
        block_id = int(arg)
    except ValueError:
        console.print(f"[yellow]Invalid block ID: {escape(parts[1])}. Use /run to see available blocks.[/yellow]")
        return True
    execute_block(renderer, block_id, runner, console, use_color)
    return True


def handle_special_commands(user_input: Optional[str], renderer: StreamRenderer, runner: SnippetRunner, console, use_color: bool = True) -> bool:
    """Handle /help, /blocks and /run. Returns True if the command was handled."""
    if user_input is None:
        return True
    command = user_input.strip().lower()
    if command == "/help":
        show_help_message(console)
        return True
    if command == "/blocks":
        show_blocks(renderer, console)
        return True
    return handle_run_command(user_input, renderer, runner, console, use_color)
