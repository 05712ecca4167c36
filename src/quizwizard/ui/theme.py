"""Rich theme for the quizwizard CLI."""

from __future__ import annotations

from rich.theme import Theme

THEME = Theme(
    {
        "accent": "magenta",
        "title": "bold magenta",
        "subtitle": "dim",
        "step": "bold magenta",
        "border": "magenta",
        "info": "dim",
        "warning": "dark_orange3",
        "success": "green3",
        "error": "bold red3",
        "label": "dim",
        "value": "white",
        "path": "cyan",
        "break": "italic cyan",
    }
)
