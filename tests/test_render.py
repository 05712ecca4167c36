from __future__ import annotations

import pytest

from quizwizard.ui.render import render_error, render_step_header, step_trail


def test_step_trail_marks_current_position() -> None:
    assert step_trail(2, 5).plain == "● ● ○ ○ ○"
    assert step_trail(5, 5).plain == "● ● ● ● ●"


def test_step_header_shows_position(capsys: pytest.CaptureFixture[str]) -> None:
    render_step_header(3, 5, "Fundraising extras", "Optional paid extras.")
    out = capsys.readouterr().out
    assert "Fundraising extras (3 of 5)" in out


def test_render_error_includes_hint(capsys: pytest.CaptureFixture[str]) -> None:
    render_error("Unknown template 'nope'.", hint="Run 'quizwizard templates list' to see template ids.")
    out = capsys.readouterr().out
    assert "Unknown template 'nope'." in out
    assert "templates list" in out
