"""Round schedule generation: builder, duration estimator and template browsing."""

from quizwizard.schedule.browse import collect_filter_options, filter_templates, pick_most_popular
from quizwizard.schedule.builder import (
    MAX_ROUNDS,
    MIN_ROUNDS,
    TemplateSelection,
    build_round_definitions,
    build_template_selection,
    create_round_definition,
    default_custom_rounds,
    renumber_rounds,
)
from quizwizard.schedule.duration import (
    BREAK_MINUTES,
    BreakStrategy,
    DurationEstimate,
    break_positions,
    estimate_duration,
    estimate_setup,
    estimate_template,
    round_minutes,
)

__all__ = [
    "BREAK_MINUTES",
    "BreakStrategy",
    "DurationEstimate",
    "MAX_ROUNDS",
    "MIN_ROUNDS",
    "TemplateSelection",
    "break_positions",
    "build_round_definitions",
    "build_template_selection",
    "collect_filter_options",
    "create_round_definition",
    "default_custom_rounds",
    "estimate_duration",
    "estimate_setup",
    "estimate_template",
    "filter_templates",
    "pick_most_popular",
    "renumber_rounds",
    "round_minutes",
]
