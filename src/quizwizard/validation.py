"""Setup config validation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from quizwizard.catalog import CUSTOM_TEMPLATE_ID, Catalog
from quizwizard.models import Difficulty, RoundConfig
from quizwizard.schedule.builder import MAX_ROUNDS, MIN_ROUNDS

MAX_PRIZES = 3
PAYMENT_METHODS = ("cash_or_card", "web3")

# Config keys owned by each wizard step.
STEP_PATHS: dict[str, tuple[str, ...]] = {
    "setup": ("host_name", "entry_fee", "currency_symbol", "payment_method", "event_date_time"),
    "templates": ("selected_template",),
    "rounds": ("round_definitions",),
    "fundraising": ("fundraising_options", "fundraising_prices"),
    "prizes": ("prizes",),
}


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]

    @property
    def ok(self) -> bool:
        return not self.errors

    def for_paths(self, prefixes: tuple[str, ...]) -> "ValidationResult":
        def keep(issue: ValidationIssue) -> bool:
            return any(issue.path == prefix or issue.path.startswith(f"{prefix}[") or issue.path.startswith(f"{prefix}.") for prefix in prefixes)

        return ValidationResult(
            errors=[issue for issue in self.errors if keep(issue)],
            warnings=[issue for issue in self.warnings if keep(issue)],
        )


def validate_step(step: Any, config: dict[str, Any], catalog: Catalog | None = None) -> ValidationResult:
    """Issues that block leaving ``step``; the review step checks everything."""
    result = validate_setup(config, catalog)
    prefixes = STEP_PATHS.get(str(getattr(step, "value", step)))
    if prefixes is None:
        return result
    return result.for_paths(prefixes)


def validate_setup(config: dict[str, Any], catalog: Catalog | None = None) -> ValidationResult:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    host_name = config.get("host_name")
    if not isinstance(host_name, str) or not host_name.strip():
        errors.append(ValidationIssue("host_name", "Host name is required."))

    entry_fee = config.get("entry_fee")
    if entry_fee is None:
        warnings.append(ValidationIssue("entry_fee", "No entry fee set; the quiz is free to join."))
    else:
        _require_non_negative_number(entry_fee, "entry_fee", errors)
        if not config.get("currency_symbol"):
            warnings.append(ValidationIssue("currency_symbol", "Currency symbol missing."))

    payment_method = config.get("payment_method")
    if payment_method is not None and payment_method not in PAYMENT_METHODS:
        errors.append(ValidationIssue("payment_method", f"Unsupported payment method '{payment_method}'."))

    event_date_time = config.get("event_date_time")
    if event_date_time:
        try:
            datetime.fromisoformat(str(event_date_time))
        except ValueError:
            errors.append(ValidationIssue("event_date_time", "Use ISO format, e.g. 2026-11-20T19:30."))

    selected = config.get("selected_template")
    if not isinstance(selected, str) or not selected:
        errors.append(ValidationIssue("selected_template", "Choose a template or a custom quiz."))
    elif catalog is not None and selected != CUSTOM_TEMPLATE_ID and catalog.get_template(selected) is None:
        warnings.append(ValidationIssue("selected_template", f"Template '{selected}' is not in the catalog."))

    _validate_rounds(config.get("round_definitions"), catalog, errors, warnings)
    _validate_fundraising(config, errors, warnings)
    _validate_prizes(config.get("prizes"), errors, warnings)

    return ValidationResult(errors=errors, warnings=warnings)


def _validate_rounds(
    rounds: Any,
    catalog: Catalog | None,
    errors: list[ValidationIssue],
    warnings: list[ValidationIssue],
) -> None:
    path_prefix = "round_definitions"
    if not isinstance(rounds, list):
        errors.append(ValidationIssue(path_prefix, "Must be a list."))
        return
    if len(rounds) < MIN_ROUNDS:
        errors.append(ValidationIssue(path_prefix, f"Configure at least {MIN_ROUNDS} round."))
        return
    if len(rounds) > MAX_ROUNDS:
        errors.append(ValidationIssue(path_prefix, f"At most {MAX_ROUNDS} rounds are allowed."))

    difficulties = {item.value for item in Difficulty}
    for index, item in enumerate(rounds):
        item_path = f"{path_prefix}[{index}]"
        if not isinstance(item, dict):
            errors.append(ValidationIssue(item_path, "Round must be an object."))
            continue
        if item.get("roundNumber") != index + 1:
            errors.append(ValidationIssue(f"{item_path}.roundNumber", f"Expected round number {index + 1}."))
        round_type = item.get("roundType")
        if not isinstance(round_type, str) or not round_type:
            errors.append(ValidationIssue(f"{item_path}.roundType", "Missing round type."))
        elif catalog is not None and catalog.get_round_type(round_type) is None:
            warnings.append(ValidationIssue(f"{item_path}.roundType", f"Unknown round type '{round_type}'; fallback timing applies."))
        if not item.get("category"):
            errors.append(ValidationIssue(f"{item_path}.category", "Pick a category."))
        difficulty = item.get("difficulty")
        if not difficulty:
            errors.append(ValidationIssue(f"{item_path}.difficulty", "Pick a difficulty."))
        elif difficulty not in difficulties:
            errors.append(ValidationIssue(f"{item_path}.difficulty", f"Unsupported difficulty '{difficulty}'."))
        config = item.get("config")
        if not isinstance(config, dict) or not RoundConfig.from_dict(config).has_positive_pacing():
            warnings.append(ValidationIssue(f"{item_path}.config", "No positive pacing; round type defaults apply."))


def _validate_fundraising(
    config: dict[str, Any],
    errors: list[ValidationIssue],
    warnings: list[ValidationIssue],
) -> None:
    options = config.get("fundraising_options") or {}
    prices = config.get("fundraising_prices") or {}
    if not isinstance(options, dict):
        errors.append(ValidationIssue("fundraising_options", "Must be an object."))
        options = {}
    if not isinstance(prices, dict):
        errors.append(ValidationIssue("fundraising_prices", "Must be an object."))
        prices = {}

    for key, price in prices.items():
        _require_positive_number(price, f"fundraising_prices.{key}", errors)
    for key, enabled in options.items():
        if enabled and key not in prices:
            warnings.append(ValidationIssue(f"fundraising_prices.{key}", "Extra enabled without a price."))


def _validate_prizes(prizes: Any, errors: list[ValidationIssue], warnings: list[ValidationIssue]) -> None:
    if prizes is None or prizes == []:
        warnings.append(ValidationIssue("prizes", "No prizes configured."))
        return
    if not isinstance(prizes, list):
        errors.append(ValidationIssue("prizes", "Must be a list."))
        return
    if len(prizes) > MAX_PRIZES:
        errors.append(ValidationIssue("prizes", f"At most {MAX_PRIZES} prizes are allowed."))

    places: set[int] = set()
    for index, prize in enumerate(prizes):
        item_path = f"prizes[{index}]"
        if not isinstance(prize, dict):
            errors.append(ValidationIssue(item_path, "Prize must be an object."))
            continue
        place = prize.get("place")
        if not isinstance(place, int) or isinstance(place, bool) or not 1 <= place <= MAX_PRIZES:
            errors.append(ValidationIssue(f"{item_path}.place", f"Place must be between 1 and {MAX_PRIZES}."))
        elif place in places:
            errors.append(ValidationIssue(f"{item_path}.place", f"Duplicate prize for place {place}."))
        else:
            places.add(place)
        description = prize.get("description")
        if not isinstance(description, str) or not description.strip():
            errors.append(ValidationIssue(f"{item_path}.description", "Describe the prize."))
        value = prize.get("value")
        if value is not None:
            _require_non_negative_number(value, f"{item_path}.value", errors)
    if places and 1 not in places:
        errors.append(ValidationIssue("prizes", "A first-place prize is required."))


def _require_positive_number(value: Any, path: str, errors: list[ValidationIssue]) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        errors.append(ValidationIssue(path, "Must be a positive number."))


def _require_non_negative_number(value: Any, path: str, errors: list[ValidationIssue]) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        errors.append(ValidationIssue(path, "Must be a non-negative number."))
