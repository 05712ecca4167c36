from __future__ import annotations

from conftest import make_template
from quizwizard.catalog import Catalog
from quizwizard.models import TemplateDifficulty
from quizwizard.schedule import collect_filter_options, filter_templates, pick_most_popular
from quizwizard.schedule.browse import ALL, popularity_score


def test_filter_options_start_with_all(catalog: Catalog) -> None:
    options = collect_filter_options(catalog.list_templates())
    for values in (options.audiences, options.topics, options.difficulties, options.durations):
        assert values[0] == ALL
        assert values[1:] == sorted(values[1:])
    assert "Kids" in options.audiences
    assert options.difficulties == [ALL, "Easy", "Hard", "Medium"]


def test_popularity_score() -> None:
    popular = make_template(
        ["general_trivia"],
        difficulty=TemplateDifficulty.MEDIUM,
        tags=("Audience: Adults", "Topic: General", "Duration: ≈60m"),
    )
    niche = make_template(["general_trivia"], difficulty=TemplateDifficulty.HARD, tags=("Audience: Teens", "Duration: ≈90m"))
    assert popularity_score(popular) == 8
    assert popularity_score(niche) == 0


def test_no_filter_returns_most_popular(catalog: Catalog) -> None:
    templates = catalog.list_templates()
    shown = filter_templates(templates)
    assert shown == pick_most_popular(templates)
    assert len(shown) == 8
    scores = [popularity_score(template) for template in shown]
    assert scores == sorted(scores, reverse=True)


def test_filters_combine(catalog: Catalog) -> None:
    shown = filter_templates(catalog.list_templates(), audience="Kids", difficulty="easy")
    assert shown
    for template in shown:
        assert "Kids" in template.audiences
        assert template.difficulty == TemplateDifficulty.EASY


def test_filter_without_matches(catalog: Catalog) -> None:
    assert filter_templates(catalog.list_templates(), topic="Astrophysics") == []
