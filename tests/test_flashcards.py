from datetime import datetime, timedelta

import pytest

from srs_core.errors import ConfigurationError
from srs_core.flashcards import CardFilter, CardIdGenerator, SortStrategy, priority_score
from srs_core.fsrs.constants import CardPhase


def test_id_generator_is_monotonic():
    generate = CardIdGenerator(start=5)
    assert [generate(), generate(), generate()] == [5, 6, 7]


def test_id_generator_seeds_from_clock(clock, now):
    generate = CardIdGenerator(clock=clock)
    assert generate() == int(now.timestamp() * 1000)


def test_id_generator_needs_start_or_clock():
    with pytest.raises(ConfigurationError):
        CardIdGenerator()


def test_create_cards_unique_ids(manager, now):
    cards = manager.create_cards(["huis", "boom", "fiets"])

    assert [c.id for c in cards] == [1000, 1001, 1002]
    assert [c.word for c in cards] == ["huis", "boom", "fiets"]
    assert all(c.phase == CardPhase.NEW and c.due_date == now for c in cards)


def test_reset_card_keeps_identity(manager, make_card, now):
    card = make_card(id=9, word="kat", stability=40.0, difficulty=8.0, review_count=12, lapses=3, interval=40)
    reset = manager.reset_card(card)

    assert (reset.id, reset.word) == (9, "kat")
    assert reset.phase == CardPhase.NEW
    assert (reset.stability, reset.difficulty) == (2.5, 2.5)
    assert (reset.interval, reset.lapses, reset.review_count) == (0, 0, 0)
    assert reset.due_date == now


def test_reset_cards(manager, make_card):
    reset = manager.reset_cards([make_card(), make_card()])
    assert all(card.phase == CardPhase.NEW for card in reset)


def test_suspend_and_resume(manager, make_card, now):
    card = make_card(stability=12.0, difficulty=6.0)
    suspended = manager.suspend_card(card)

    assert suspended.due_date == now + timedelta(days=365)
    assert (suspended.stability, suspended.difficulty) == (12.0, 6.0)
    assert manager.suspend_card(card, days=3).due_date == now + timedelta(days=3)
    assert manager.resume_card(suspended).due_date == now


def test_lifecycle_with_naive_now_stays_comparable(manager, service, make_card):
    naive = datetime(2024, 3, 1, 12, 0)
    card = make_card(due_in_days=-1)

    reset = manager.reset_card(card, now=naive)
    suspended = manager.suspend_card(card, days=3, now=naive)
    resumed = manager.resume_card(suspended, now=naive)

    for updated in (reset, suspended, resumed):
        assert updated.due_date.tzinfo is not None
        assert updated.last_review.tzinfo is not None

    assert not service.is_due(suspended)
    assert service.is_due(resumed, now=naive + timedelta(minutes=1))
    assert service.get_due_cards([reset, suspended, resumed], naive + timedelta(minutes=1)) == [reset, resumed]
    assert manager.sort_cards([suspended, resumed], SortStrategy.PRIORITY, now=naive) == [resumed, suspended]


def test_filter_due_and_difficulty(manager, make_card):
    match = make_card(due_in_days=-2, difficulty=6.0)
    boundary = make_card(due_in_days=0, difficulty=5.0)
    too_easy = make_card(due_in_days=-2, difficulty=4.0)
    not_due = make_card(due_in_days=2, difficulty=9.0)

    result = manager.filter_cards(
        [match, boundary, too_easy, not_due],
        CardFilter(due_only=True, min_difficulty=5.0),
    )
    assert result == [match, boundary]


def test_filter_false_flags_do_not_constrain(manager, make_card):
    cards = [make_card(due_in_days=5), make_card(due_in_days=-5)]
    assert manager.filter_cards(cards, CardFilter(due_only=False, overdue_only=False)) == cards


def test_filter_overdue_and_phases(manager, make_card):
    overdue = make_card(due_in_days=-3)
    just_due = make_card(due_in_days=-1)
    new_overdue = make_card(phase=CardPhase.NEW, due_in_days=-3)

    assert manager.filter_cards([overdue, just_due], CardFilter(overdue_only=True)) == [overdue]
    assert manager.filter_cards(
        [overdue, new_overdue],
        CardFilter(phases=frozenset({CardPhase.NEW})),
    ) == [new_overdue]


def test_filter_stability_range(manager, make_card):
    cards = [make_card(stability=s) for s in (1.0, 5.0, 20.0)]
    result = manager.filter_cards(cards, CardFilter(min_stability=2.0, max_stability=10.0))
    assert [c.stability for c in result] == [5.0]


def test_sort_priority(manager, make_card):
    easy = make_card(due_in_days=-10, difficulty=2.0)
    hard = make_card(due_in_days=-10, difficulty=8.0)
    upcoming = make_card(due_in_days=3, difficulty=10.0)

    assert manager.sort_cards([upcoming, easy, hard], SortStrategy.PRIORITY) == [hard, easy, upcoming]


def test_priority_score(make_card, now):
    assert priority_score(make_card(due_in_days=-10, difficulty=8.0), now) == pytest.approx(-10.8)


@pytest.mark.parametrize("strategy, attribute, reverse", [
    (SortStrategy.DIFFICULTY_ASC, "difficulty", False),
    (SortStrategy.DIFFICULTY_DESC, "difficulty", True),
    (SortStrategy.STABILITY_ASC, "stability", False),
    (SortStrategy.STABILITY_DESC, "stability", True),
    (SortStrategy.REVIEW_COUNT_DESC, "review_count", True),
    (SortStrategy.DUE_DATE_ASC, "due_date", False),
])
def test_sort_strategies(manager, make_card, strategy, attribute, reverse):
    cards = [
        make_card(difficulty=4.0, stability=9.0, review_count=2, due_in_days=1),
        make_card(difficulty=9.0, stability=1.0, review_count=7, due_in_days=-4),
        make_card(difficulty=1.0, stability=3.0, review_count=0, due_in_days=6),
    ]
    result = manager.sort_cards(cards, strategy)
    values = [getattr(card, attribute) for card in result]
    assert values == sorted(values, reverse=reverse)


def test_sort_is_stable(manager, make_card):
    first = make_card(difficulty=5.0)
    second = make_card(difficulty=5.0)
    assert manager.sort_cards([first, second], SortStrategy.DIFFICULTY_DESC) == [first, second]


def test_card_analytics(manager, make_card):
    card = make_card(stability=10.0, last_review_days_ago=5, due_in_days=-2)
    analytics = manager.get_card_analytics(card)

    assert analytics.card_id == card.id
    assert analytics.days_since_last_review == 5
    assert analytics.next_review_in == -2
    assert analytics.estimated_retention == pytest.approx(0.6065, abs=1e-4)
    assert len(analytics.next_review_options) == 4


def test_batch_analysis(manager, make_card):
    cards = [
        make_card(difficulty=2.0, due_in_days=-3),
        make_card(difficulty=5.0, due_in_days=0),
        make_card(difficulty=7.0, due_in_days=4, phase=CardPhase.NEW),
        make_card(difficulty=8.0, due_in_days=10),
    ]
    result = manager.batch_analyze_cards(cards)

    assert result.total_cards == 4
    assert result.average_difficulty == pytest.approx(5.5)
    assert result.difficulty_distribution == {"Easy": 1, "Medium": 1, "Hard": 2}
    assert result.phase_distribution == {CardPhase.REVIEW: 3, CardPhase.NEW: 1}
    assert result.cards_needing_review == 2
    assert result.overdue_cards == 1


def test_batch_analysis_empty(manager):
    result = manager.batch_analyze_cards([])
    assert result.total_cards == 0
    assert result.average_retention == 0.0
    assert result.difficulty_distribution == {}
