import json
from typing import Any

from rich.console import Console

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_value(value: Any) -> None:
    if isinstance(value, str):
        console.print(value, markup=False)
        return
    console.print(json.dumps(value, default=str), markup=False)


def print_miss(key: str) -> None:
    err_console.print(f"[yellow]Miss:[/yellow] {key}")


def print_result(action: str, ok: bool, detail: str = "") -> None:
    suffix = f" {detail}" if detail else ""
    if ok:
        console.print(f"[bold green]{action}[/bold green]{suffix}")
    else:
        err_console.print(f"[red bold]{action} failed[/red bold]{suffix}")
