"""Wizard steps and registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import typer

from quizwizard.catalog import CUSTOM_TEMPLATE_ID, Catalog
from quizwizard.models import Difficulty, QuizTemplate, RoundDefinition
from quizwizard.schedule import (
    BreakStrategy,
    DurationEstimate,
    create_round_definition,
    default_custom_rounds,
    estimate_setup,
    estimate_template,
    filter_templates,
)
from quizwizard.schedule.browse import ALL, collect_filter_options
from quizwizard.storage import write_json
from quizwizard.ui.render import (
    render_error,
    render_info,
    render_rows_table,
    render_step_header,
    render_success,
    render_summary_table,
    render_validation_panel,
    render_warning,
)
from quizwizard.validation import MAX_PRIZES, PAYMENT_METHODS, ValidationResult, validate_setup, validate_step
from quizwizard.wizard.state import StepNavigation, WizardContext, WizardStep

CURRENCY_SYMBOLS = ["€", "£", "$"]

StepHandler = Callable[[WizardContext, StepNavigation], None]


@dataclass(frozen=True)
class Step:
    step: WizardStep
    title: str
    description: str
    handler: StepHandler


_REGISTRY: dict[WizardStep, Step] = {}


def register_step(step: Step) -> None:
    _REGISTRY[step.step] = step


def get_step(step: WizardStep) -> Step:
    return _REGISTRY[step]


def run_step(
    step: WizardStep,
    context: WizardContext,
    navigation: StepNavigation,
    *,
    position: int | None = None,
    total: int | None = None,
) -> None:
    registered = get_step(step)
    render_step_header(position, total, registered.title, registered.description)
    registered.handler(context, navigation)


def _prompt_choice(prompt: str, choices: list[str], default: str, *, show_choices: bool = True) -> str:
    normalized_choices = {choice.lower(): choice for choice in choices}
    label = f"{prompt} ({'/'.join(choices)})" if show_choices else prompt
    while True:
        response = typer.prompt(label, default=default)
        normalized = response.strip().lower()
        if normalized in normalized_choices:
            return normalized_choices[normalized]
        render_warning(f"Invalid choice: {response}. Choose from {', '.join(choices)}.")


def _prompt_text(prompt: str, default: str = "", *, required: bool = True) -> str:
    while True:
        response = typer.prompt(prompt, default=default, show_default=bool(default))
        if response.strip() or not required:
            return response.strip()
        render_warning("A value is required.")


def _prompt_int(prompt: str, default: int, min_value: int = 1, max_value: int | None = None) -> int:
    while True:
        response = typer.prompt(prompt, default=str(default))
        try:
            value = int(response)
        except ValueError:
            render_warning("Please enter an integer.")
            continue
        if value < min_value:
            render_warning(f"Value must be >= {min_value}.")
            continue
        if max_value is not None and value > max_value:
            render_warning(f"Value must be <= {max_value}.")
            continue
        return value


def _prompt_float(prompt: str, default: float, min_value: float = 0.0) -> float:
    while True:
        response = typer.prompt(prompt, default=str(default))
        try:
            value = float(response)
        except ValueError:
            render_warning("Please enter a number.")
            continue
        if value < min_value:
            render_warning(f"Value must be >= {min_value}.")
            continue
        return value


def _prompt_yes_no(prompt: str, default: bool = False) -> bool:
    default_value = "y" if default else "n"
    while True:
        response = typer.prompt(f"{prompt} (y/n)", default=default_value)
        normalized = response.strip().lower()
        if normalized in {"y", "yes"}:
            return True
        if normalized in {"n", "no"}:
            return False
        render_warning("Please enter y or n.")


def _render_issues(result: ValidationResult) -> None:
    if result.errors:
        render_validation_panel("Fix before continuing", [str(issue) for issue in result.errors], style="error")
    if result.warnings:
        render_validation_panel("Warnings", [str(issue) for issue in result.warnings], style="warning")


def _finish_step(context: WizardContext, navigation: StepNavigation, step: WizardStep) -> None:
    choices = ["next"]
    if navigation.on_back is not None:
        choices.append("back")
    if navigation.on_reset_to_first is not None:
        choices.append("restart")
    action = _prompt_choice("Continue", choices, "next")

    if action == "back" and navigation.on_back is not None:
        navigation.on_back()
        return
    if action == "restart" and navigation.on_reset_to_first is not None:
        if _prompt_yes_no("Discard this setup and start over?", default=False):
            context.store.reset_config(keep_session_ids=True)
            navigation.on_reset_to_first()
        return

    result = validate_step(step, context.store.get_config(), context.catalog)
    _render_issues(result)
    if result.ok:
        navigation.on_next()


def _estimate(context: WizardContext) -> DurationEstimate:
    return estimate_setup(context.store.get_config(), context.catalog, context.break_strategy)


def round_rows(rounds: list[RoundDefinition], catalog: Catalog, estimate: DurationEstimate) -> list[dict[str, str]]:
    minutes = estimate.display_round_minutes
    rows = []
    for index, round_def in enumerate(rounds):
        definition = catalog.get_round_type(round_def.round_type)
        config = round_def.config
        if config.total_time_seconds and config.time_per_question is None:
            pacing = f"{config.total_time_seconds}s total"
        else:
            pacing = f"{config.questions_per_round or 0} x {config.time_per_question or 0}s"
        rows.append(
            {
                "#": str(round_def.round_number),
                "Type": definition.name if definition else round_def.round_type,
                "Category": round_def.category or "-",
                "Difficulty": round_def.difficulty or "-",
                "Pacing": pacing,
                "Minutes": f"{minutes[index]:.1f}" if index < len(minutes) else "-",
                "Break": "15m break" if round_def.round_number in estimate.break_positions else "",
            }
        )
    return rows


def template_rows(
    templates: list[QuizTemplate],
    catalog: Catalog,
    strategy: BreakStrategy = BreakStrategy.TAG_AWARE,
) -> list[dict[str, str]]:
    rows = []
    for template in templates:
        estimate = estimate_template(template, catalog, strategy)
        rows.append(
            {
                "Id": template.id,
                "Name": template.name,
                "Difficulty": template.difficulty.value,
                "Rounds": str(len(template.rounds)),
                "Audience": ", ".join(template.audiences) or "-",
                "Estimate": f"≈{estimate.total_minutes}m",
            }
        )
    return rows


def _render_rounds(context: WizardContext) -> None:
    estimate = _estimate(context)
    rows = round_rows(context.store.get_rounds(), context.catalog, estimate)
    render_rows_table(
        "Rounds",
        rows,
        highlight_column="Break",
        footer=f"Estimated total: ≈{estimate.total_minutes} minutes ({len(estimate.break_positions)} breaks)",
    )


def step_setup(context: WizardContext, navigation: StepNavigation) -> None:
    config = context.store.get_config()
    host_name = _prompt_text("Host name", str(config.get("host_name") or ""))
    entry_fee = _prompt_float("Entry fee (0 for free)", float(config.get("entry_fee") or 0))
    currency = _prompt_choice("Currency", CURRENCY_SYMBOLS, str(config.get("currency_symbol") or CURRENCY_SYMBOLS[0]))
    payment_method = _prompt_choice(
        "Payment method",
        list(PAYMENT_METHODS),
        str(config.get("payment_method") or PAYMENT_METHODS[0]),
    )
    event_date_time = _prompt_text(
        "Event date and time (optional, e.g. 2026-11-20T19:30)",
        str(config.get("event_date_time") or ""),
        required=False,
    )
    context.store.update_config(
        {
            "host_name": host_name,
            "entry_fee": entry_fee,
            "currency_symbol": currency,
            "payment_method": payment_method,
            "event_date_time": event_date_time or None,
        }
    )
    _finish_step(context, navigation, WizardStep.SETUP)


def step_templates(context: WizardContext, navigation: StepNavigation) -> None:
    catalog = context.catalog
    templates = catalog.list_templates()
    filters = {"audience": ALL, "topic": ALL, "difficulty": ALL, "duration": ALL}
    if _prompt_yes_no("Filter templates?", default=False):
        options = collect_filter_options(templates)
        filters["audience"] = _prompt_choice("Audience", options.audiences, ALL)
        filters["topic"] = _prompt_choice("Topic", options.topics, ALL)
        filters["difficulty"] = _prompt_choice("Difficulty", options.difficulties, ALL)
        filters["duration"] = _prompt_choice("Duration", options.durations, ALL)

    shown = filter_templates(templates, **filters)
    if not shown:
        render_warning("No templates match those filters; showing all templates.")
        shown = templates
    render_rows_table("Templates", template_rows(shown, catalog, context.break_strategy))

    config = context.store.get_config()
    current = config.get("selected_template")
    choices = [template.id for template in templates] + [CUSTOM_TEMPLATE_ID]
    default = current if current in choices else shown[0].id
    selected = _prompt_choice(
        f"Template id (from the table, or '{CUSTOM_TEMPLATE_ID}')",
        choices,
        default,
        show_choices=False,
    )

    if selected != current or not config.get("round_definitions"):
        selection = context.store.set_template(selected, catalog)
        if selection.is_custom:
            render_info("Custom quiz selected. Rounds are configured in the next step.")
        else:
            render_success(f"Loaded {len(selection.rounds)} rounds from {selected}.")
    _render_rounds(context)
    _finish_step(context, navigation, WizardStep.TEMPLATES)


def step_rounds(context: WizardContext, navigation: StepNavigation) -> None:
    catalog = context.catalog
    store = context.store
    if not store.get_rounds():
        store.replace_rounds(default_custom_rounds(catalog))

    round_type_ids = [definition.id for definition in catalog.list_round_types()]
    while True:
        _render_rounds(context)
        action = _prompt_choice("Rounds", ["add", "edit", "remove", "done"], "done")
        if action == "done":
            break
        rounds = store.get_rounds()
        if action == "add":
            round_type = _prompt_choice("Round type", round_type_ids, round_type_ids[0])
            if not store.add_round(create_round_definition(round_type, len(rounds) + 1, catalog)):
                render_warning("Maximum number of rounds reached.")
            continue

        number = _prompt_int("Round number", len(rounds), min_value=1, max_value=len(rounds))
        if action == "remove":
            if not store.remove_round(number - 1):
                render_warning("A quiz needs at least one round.")
            continue

        target = rounds[number - 1]
        categories = catalog.categories_for(target.round_type)
        if categories:
            category = _prompt_choice("Category", categories, target.category if target.category in categories else categories[0])
        else:
            category = _prompt_text("Category", target.category or "")
        difficulty_choices = [item.value for item in Difficulty]
        difficulty = _prompt_choice(
            "Difficulty",
            difficulty_choices,
            target.difficulty if target.difficulty in difficulty_choices else Difficulty.MEDIUM.value,
        )
        extras = {
            extra.id: _prompt_yes_no(f"Enable {extra.name}?", default=target.enabled_extras.get(extra.id, False))
            for extra in catalog.list_extras(target.round_type)
        }
        store.update_round(number - 1, category=category, difficulty=difficulty, enabled_extras=extras)

    _finish_step(context, navigation, WizardStep.ROUNDS)


def step_fundraising(context: WizardContext, navigation: StepNavigation) -> None:
    store = context.store
    for extra in context.catalog.list_extras():
        config = store.get_config()
        enabled = bool((config.get("fundraising_options") or {}).get(extra.id))
        wanted = _prompt_yes_no(f"{extra.name}: {extra.description}", default=enabled)
        if wanted != enabled:
            store.toggle_extra(extra.id)
        if wanted:
            price = (config.get("fundraising_prices") or {}).get(extra.id) or 1.0
            store.set_extra_price(extra.id, _prompt_float(f"{extra.name} price", float(price)))
        else:
            store.set_extra_price(extra.id, None)
    _finish_step(context, navigation, WizardStep.FUNDRAISING)


def step_prizes(context: WizardContext, navigation: StepNavigation) -> None:
    existing = {
        prize.get("place"): prize
        for prize in context.store.get_config().get("prizes") or []
        if isinstance(prize, dict)
    }
    count = _prompt_int("Number of prizes", len(existing) or 1, min_value=0, max_value=MAX_PRIZES)
    prizes = []
    for place in range(1, count + 1):
        previous = existing.get(place, {})
        prize: dict[str, Any] = {
            "place": place,
            "description": _prompt_text(f"Prize {place} description", str(previous.get("description") or "")),
        }
        sponsor = _prompt_text(f"Prize {place} sponsor (optional)", str(previous.get("sponsor") or ""), required=False)
        if sponsor:
            prize["sponsor"] = sponsor
        value = _prompt_float(f"Prize {place} value (0 if none)", float(previous.get("value") or 0))
        if value > 0:
            prize["value"] = value
        prizes.append(prize)
    context.store.replace_field("prizes", prizes)
    _finish_step(context, navigation, WizardStep.PRIZES)


def step_review(context: WizardContext, navigation: StepNavigation) -> None:
    config = context.store.get_config()
    estimate = _estimate(context)
    render_summary_table(setup_summary(config, estimate), title="Review")
    _render_rounds(context)
    _finish_step(context, navigation, WizardStep.REVIEW)


def setup_summary(config: dict[str, Any], estimate: DurationEstimate) -> dict[str, str]:
    entry_fee = config.get("entry_fee")
    extras = [key for key, enabled in (config.get("fundraising_options") or {}).items() if enabled]
    return {
        "Host": str(config.get("host_name") or "-"),
        "Entry fee": f"{config.get('currency_symbol') or ''}{entry_fee}" if entry_fee else "Free",
        "Payment": str(config.get("payment_method") or "-"),
        "Template": str(config.get("selected_template") or "-"),
        "Rounds": str(len(config.get("round_definitions") or [])),
        "Extras": ", ".join(extras) or "(none)",
        "Prizes": str(len(config.get("prizes") or [])),
        "Breaks": ", ".join(f"after round {position}" for position in estimate.break_positions) or "(none)",
        "Estimate": f"≈{estimate.total_minutes} minutes",
    }


def export_config(context: WizardContext) -> dict[str, Any]:
    config = context.store.get_config()
    estimate = estimate_setup(config, context.catalog, context.break_strategy)
    return {**config, "duration_estimate": estimate.to_dict()}


def complete_setup(context: WizardContext) -> bool:
    """Write the final config and purge the saved setup; False keeps the wizard on review."""
    result = validate_setup(context.store.get_config(), context.catalog)
    if not result.ok:
        _render_issues(result)
        return False
    exported = export_config(context)
    try:
        write_json(context.output_path, exported)
    except OSError as exc:
        render_error(f"Failed to write {context.output_path}: {exc}")
        return False
    context.exported_config = exported
    context.store.purge(keep_session_ids=True)
    render_success(f"Wrote {context.output_path}.")
    return True


register_step(Step(WizardStep.SETUP, "Event setup", "Host, entry fee and payment details.", step_setup))
register_step(Step(WizardStep.TEMPLATES, "Template", "Pick a ready-made quiz or build a custom one.", step_templates))
register_step(Step(WizardStep.ROUNDS, "Rounds", "Add, edit or remove rounds.", step_rounds))
register_step(Step(WizardStep.FUNDRAISING, "Fundraising extras", "Optional paid extras and their prices.", step_fundraising))
register_step(Step(WizardStep.PRIZES, "Prizes", "Up to three prizes for the winners.", step_prizes))
register_step(Step(WizardStep.REVIEW, "Review", "Confirm the configuration.", step_review))
