"""Template filtering and default ordering for the template picker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from quizwizard.models import QuizTemplate

ALL = "All"

POPULAR_DURATIONS = frozenset({"≈55m", "≈60m", "≈65m", "≈70m"})
POPULAR_AUDIENCES = frozenset({"Family Friendly", "Adults"})


@dataclass(frozen=True)
class FilterOptions:
    audiences: list[str]
    topics: list[str]
    difficulties: list[str]
    durations: list[str]


def collect_filter_options(templates: Sequence[QuizTemplate]) -> FilterOptions:
    audiences: set[str] = set()
    topics: set[str] = set()
    durations: set[str] = set()
    difficulties: set[str] = set()
    for template in templates:
        difficulties.add(template.difficulty.value)
        audiences.update(template.audiences)
        topics.update(template.topics)
        durations.update(template.durations)
    return FilterOptions(
        audiences=[ALL, *sorted(audiences)],
        topics=[ALL, *sorted(topics)],
        difficulties=[ALL, *sorted(difficulties)],
        durations=[ALL, *sorted(durations)],
    )


def popularity_score(template: QuizTemplate) -> int:
    score = 0
    if template.difficulty.value == "Medium":
        score += 3
    if POPULAR_DURATIONS.intersection(template.durations):
        score += 2
    if POPULAR_AUDIENCES.intersection(template.audiences):
        score += 2
    if any(topic.startswith("Mixed") or topic.startswith("General") for topic in template.topics):
        score += 1
    return score


def pick_most_popular(templates: Sequence[QuizTemplate], limit: int = 8) -> list[QuizTemplate]:
    return sorted(templates, key=popularity_score, reverse=True)[:limit]


def filter_templates(
    templates: Sequence[QuizTemplate],
    *,
    audience: str = ALL,
    topic: str = ALL,
    difficulty: str = ALL,
    duration: str = ALL,
    popular_limit: int = 8,
) -> list[QuizTemplate]:
    """Templates matching every active filter; the most popular ones when no filter is set."""
    active = any(value != ALL for value in (audience, topic, difficulty, duration))
    candidates = list(templates) if active else pick_most_popular(templates, popular_limit)
    results = []
    for template in candidates:
        if audience != ALL and audience not in template.audiences:
            continue
        if topic != ALL and topic not in template.topics:
            continue
        if difficulty != ALL and template.difficulty.value.lower() != difficulty.lower():
            continue
        if duration != ALL and duration not in template.durations:
            continue
        results.append(template)
    return results
