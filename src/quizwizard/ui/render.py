"""Render helpers for the quizwizard CLI."""

from __future__ import annotations

from typing import Mapping, Sequence
import sys

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from quizwizard.ui.console import get_console


def _panel(body: Text | Group, *, title: str | None = None, border_style: str = "border") -> Panel:
    return Panel(
        body,
        title=Text(title, style="step") if title else None,
        title_align="left",
        box=box.ROUNDED,
        border_style=border_style,
        padding=(0, 2),
        expand=True,
    )


def render_banner(title: str, subtitle: str, *, state_path: str | None = None) -> None:
    """Opening panel, optionally naming the file that progress is saved to."""
    lines = [Text(subtitle, style="subtitle")]
    if state_path:
        lines.append(Text(f"Progress is saved to {state_path}", style="info"))
    console = get_console()
    console.print(_panel(Group(*lines), title=title))
    console.print()


def step_trail(position: int, total: int) -> Text:
    """Filled dots for finished and current steps, hollow for the rest."""
    trail = Text()
    for index in range(1, total + 1):
        trail.append("●" if index <= position else "○", style="step" if index == position else "subtitle")
        if index < total:
            trail.append(" ")
    return trail


def render_step_header(
    position: int | None,
    total: int | None,
    title: str,
    description: str,
) -> None:
    content: list[Text] = []
    if position is not None and total:
        panel_title = f"{title} ({position} of {total})"
        content.append(step_trail(position, total))
    else:
        panel_title = title
    if description:
        content.append(Text(description, style="subtitle"))
    get_console().print(_panel(Group(*content), title=panel_title))


def render_gap(*, after_prompt: bool) -> None:
    # Piped input does not echo the newline, so prompts need an extra blank line.
    extra = 0 if sys.stdin.isatty() or not after_prompt else 1
    get_console().line(1 + extra)


def render_info(text: str) -> None:
    console = get_console()
    console.print(text, style="info", markup=False)


def render_warning(text: str) -> None:
    console = get_console()
    console.print(text, style="warning", markup=False)


def render_notice(text: str) -> None:
    get_console().print(_panel(Text(text, style="warning")))


def render_success(text: str) -> None:
    console = get_console()
    console.print(text, style="success", markup=False)


def render_error(text: str, *, hint: str | None = None) -> None:
    body = Text(text, style="error")
    if hint:
        body.append(f"\n{hint}", style="subtitle")
    get_console().print(_panel(body, border_style="error"))


def render_summary_table(rows: Mapping[str, str] | Sequence[tuple[str, str]], title: str = "Summary") -> None:
    console = get_console()
    table = Table(
        show_header=False,
        box=None,
        pad_edge=False,
    )
    table.add_column(style="label", no_wrap=True, justify="right")
    table.add_column(style="value")

    items = rows.items() if hasattr(rows, "items") else rows
    for key, value in items:
        label = Text(str(key), style="label")
        value_text = Text(str(value), style="value")
        if str(key).lower() in {"output", "state file"}:
            value_text.stylize("path")
        table.add_row(label, value_text)

    panel = Panel(
        table,
        title=Text(title, style="step"),
        title_align="left",
        border_style="border",
        box=box.ROUNDED,
        padding=(0, 2),
        expand=True,
    )
    console.print()
    console.print(panel)


def render_validation_panel(title: str, issues: Sequence[str], *, style: str) -> None:
    console = get_console()
    lines = []
    for issue in issues:
        lines.append(Text(f"- {issue}", style=style))
    panel = Panel(
        Group(*lines),
        title=Text(title, style="step"),
        title_align="left",
        box=box.ROUNDED,
        border_style="border",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)


def render_rows_table(
    title: str,
    rows: Sequence[Mapping[str, str]],
    *,
    highlight_column: str | None = None,
    footer: str | None = None,
) -> None:
    """Render homogeneous rows as a headed table; column order follows the first row."""
    console = get_console()
    group_items: list = []
    if rows:
        table = Table(show_header=True, box=None, pad_edge=False)
        headers = list(rows[0].keys())
        for header in headers:
            table.add_column(str(header), style="label", no_wrap=True)
        for row in rows:
            cells = []
            for header in headers:
                value = str(row.get(header, ""))
                cells.append(Text(value, style="break" if header == highlight_column and value else "value"))
            table.add_row(*cells)
        group_items.append(table)
    else:
        group_items.append(Text("n/a", style="dim"))
    if footer:
        group_items.extend([Text(""), Text(footer, style="subtitle")])

    panel = Panel(
        Group(*group_items),
        title=Text(title, style="step"),
        title_align="left",
        box=box.ROUNDED,
        border_style="border",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)
