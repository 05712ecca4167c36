"""CLI entrypoint for quizwizard."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from quizwizard.catalog import Catalog, load_catalog
from quizwizard.schedule import BreakStrategy, estimate_setup, estimate_template, filter_templates
from quizwizard.schedule.browse import ALL
from quizwizard.schedule.builder import build_round_definitions
from quizwizard.settings import Settings, load_dotenv
from quizwizard.storage import JsonFileStorage
from quizwizard.store import ConfigStore
from quizwizard.ui.console import configure_logging
from quizwizard.ui.render import (
    render_banner,
    render_error,
    render_info,
    render_notice,
    render_rows_table,
    render_success,
    render_summary_table,
    render_validation_panel,
    render_warning,
)
from quizwizard.validation import validate_setup
from quizwizard.wizard import WizardContext, WizardStep, run_wizard as run_wizard_flow
from quizwizard.wizard.steps import round_rows, setup_summary, template_rows

app = typer.Typer(add_completion=False, help="Guided setup for multi-round fundraising quizzes.")
templates_app = typer.Typer(add_completion=False, help="Browse the quiz template catalog.")
state_app = typer.Typer(add_completion=False, help="Inspect or clear the saved setup.")
app.add_typer(templates_app, name="templates")
app.add_typer(state_app, name="state")


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Quiz setup wizard CLI."""
    configure_logging(verbose)
    load_dotenv()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def _load_settings() -> Settings:
    settings = Settings.from_env()
    for note in settings.notes:
        render_notice(note)
    return settings


def _load_catalog(settings: Settings) -> Catalog:
    catalog = load_catalog(
        round_types_path=settings.round_types_path,
        templates_path=settings.templates_path,
        extras_path=settings.extras_path,
    )
    for note in catalog.notes:
        render_notice(note)
    return catalog


def _open_store(settings: Settings) -> ConfigStore:
    return ConfigStore.open(JsonFileStorage(settings.state_path))


def _parse_breaks(value: str | None, settings: Settings) -> BreakStrategy:
    if value is None:
        return settings.break_strategy
    try:
        return BreakStrategy(value.strip().lower())
    except ValueError as exc:
        render_error(f"Unknown break strategy '{value}'.", hint="Use tag-aware or legacy.")
        raise typer.Exit(code=1) from exc


@app.command("run")
def run_wizard(
    output: str = typer.Option("quiz.config.json", "--output", "-o", help="Where to write the final config."),
    breaks: Optional[str] = typer.Option(None, "--breaks", help="Break strategy: tag-aware or legacy."),
) -> None:
    """Interactive wizard that builds a quiz config."""
    settings = _load_settings()
    render_banner("quizwizard", "Fundraising quiz setup", state_path=str(settings.state_path))
    catalog = _load_catalog(settings)
    store = _open_store(settings)
    if store.get_step() != WizardStep.SETUP or store.get_config():
        render_info(f"Resuming saved setup at step '{store.get_step().value}'.")

    context = WizardContext(
        store=store,
        catalog=catalog,
        break_strategy=_parse_breaks(breaks, settings),
        output_path=Path(output).expanduser(),
    )
    context = run_wizard_flow(context)
    if context.exported_config is None:
        render_error("Wizard finished without writing a config.")
        raise typer.Exit(code=1)

    estimate = context.exported_config.get("duration_estimate") or {}
    render_summary_table(
        {
            "Output": str(context.output_path),
            "Template": str(context.exported_config.get("selected_template")),
            "Rounds": str(len(context.exported_config.get("round_definitions") or [])),
            "Estimate": f"≈{estimate.get('total_minutes')} minutes",
        }
    )


@templates_app.command("list")
def templates_list(
    audience: str = typer.Option(ALL, "--audience", help="Audience tag, e.g. 'Family Friendly'."),
    topic: str = typer.Option(ALL, "--topic", help="Topic tag, e.g. 'Sport'."),
    difficulty: str = typer.Option(ALL, "--difficulty", help="Easy, Medium or Hard."),
    duration: str = typer.Option(ALL, "--duration", help="Duration tag, e.g. '≈60m'."),
    breaks: Optional[str] = typer.Option(None, "--breaks", help="Break strategy: tag-aware or legacy."),
) -> None:
    """List templates; with no filter, the most popular ones."""
    settings = _load_settings()
    catalog = _load_catalog(settings)
    strategy = _parse_breaks(breaks, settings)
    shown = filter_templates(
        catalog.list_templates(),
        audience=audience,
        topic=topic,
        difficulty=difficulty,
        duration=duration,
    )
    if not shown:
        render_warning("No templates match those filters.")
        return
    render_rows_table("Templates", template_rows(shown, catalog, strategy))


@templates_app.command("show")
def templates_show(
    template_id: str = typer.Argument(..., help="Template id."),
    breaks: Optional[str] = typer.Option(None, "--breaks", help="Break strategy: tag-aware or legacy."),
) -> None:
    """Show a template's rounds and estimated running time."""
    settings = _load_settings()
    catalog = _load_catalog(settings)
    strategy = _parse_breaks(breaks, settings)
    template = catalog.get_template(template_id)
    if template is None:
        render_error(f"Unknown template '{template_id}'.", hint="Run 'quizwizard templates list' to see template ids.")
        raise typer.Exit(code=1)

    estimate = estimate_template(template, catalog, strategy)
    render_summary_table(
        {
            "Name": template.name,
            "Description": template.description,
            "Difficulty": template.difficulty.value,
            "Tags": ", ".join(template.tags) or "-",
        },
        title=template.id,
    )
    render_rows_table(
        "Rounds",
        round_rows(build_round_definitions(template, catalog), catalog, estimate),
        highlight_column="Break",
        footer=f"Estimated total: ≈{estimate.total_minutes} minutes ({strategy.value} breaks)",
    )


@state_app.command("show")
def state_show(
    as_json: bool = typer.Option(False, "--json", help="Print the raw snapshot."),
) -> None:
    """Show the saved in-progress setup."""
    settings = _load_settings()
    store = _open_store(settings)
    if as_json:
        typer.echo(json.dumps(store.to_snapshot(), indent=2, sort_keys=True, ensure_ascii=False))
        return

    catalog = _load_catalog(settings)
    config = store.get_config()
    session_ids = store.get_session_ids()
    summary = {
        "State file": str(settings.state_path),
        "Step": store.get_step().value,
        "Room id": session_ids.get("room_id") or "-",
        "Host id": session_ids.get("host_id") or "-",
    }
    summary.update(setup_summary(config, estimate_setup(config, catalog, settings.break_strategy)))
    render_summary_table(summary, title="Saved setup")


@state_app.command("reset")
def state_reset(
    keep_ids: bool = typer.Option(False, "--keep-ids", help="Keep room and host ids."),
) -> None:
    """Clear the saved setup and return to the first step."""
    store = _open_store(_load_settings())
    store.reset_config(keep_session_ids=keep_ids)
    render_success("Setup reset.")


@state_app.command("purge")
def state_purge(
    keep_ids: bool = typer.Option(False, "--keep-ids", help="Keep room and host ids in memory."),
) -> None:
    """Delete the saved setup file."""
    settings = _load_settings()
    store = _open_store(settings)
    store.purge(keep_session_ids=keep_ids)
    render_success(f"Removed {settings.state_path}.")


@state_app.command("validate")
def state_validate() -> None:
    """Validate the saved setup without running the wizard."""
    settings = _load_settings()
    catalog = _load_catalog(settings)
    store = _open_store(settings)
    result = validate_setup(store.get_config(), catalog)

    errors = [str(issue) for issue in result.errors]
    warnings = [str(issue) for issue in result.warnings]

    if errors:
        render_validation_panel("INVALID", errors, style="error")
        raise typer.Exit(code=1)

    if warnings:
        render_validation_panel("VALID (with warnings)", warnings, style="warning")
    else:
        render_validation_panel("VALID", ["No issues found."], style="success")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
