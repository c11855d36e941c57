from datetime import timedelta

import pytest

from srs_core.fsrs import database
from srs_core.fsrs.constants import CardPhase, Rating, State


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cards.db'}")
    database.init_db()
    yield database
    database.dispose_engines()


def test_card_round_trip(store, make_card):
    card = make_card(word="fiets", stability=12.5, difficulty=6.25, review_count=4, lapses=1, interval=9)
    store.save_card(card)

    loaded = store.load_card(card.id)
    assert loaded == card
    assert loaded.due_date.utcoffset() == card.due_date.utcoffset()


def test_load_missing_card(store):
    assert store.load_card(123) is None


def test_batch_save_updates_existing(store, make_card):
    first, second = make_card(), make_card()
    store.batch_save_cards([first, second])
    store.batch_save_cards([second.model_copy(update={"phase": CardPhase.RELEARNING, "lapses": 2})])

    cards = store.load_all_cards()
    assert [c.id for c in cards] == sorted([first.id, second.id])
    assert cards[1].phase == CardPhase.RELEARNING
    assert cards[1].lapses == 2


def test_get_due_cards(store, make_card, now):
    later = make_card(due_in_days=2)
    overdue = make_card(due_in_days=-4)
    due_now = make_card(due_in_days=0)
    store.batch_save_cards([later, overdue, due_now])

    assert store.get_due_cards(now) == [overdue, due_now]
    assert len(store.get_due_cards(now + timedelta(days=3))) == 3


def test_review_log_round_trip(store, service):
    card = service.create_new_card(5)
    logs = [grade.log for grade in service.get_grade_options(card)[:2]]
    store.batch_log_review_events(logs, session_id="abc")

    events = store.get_recent_events(limit=10)
    assert [e["rating"] for e in events] == [Rating.HARD, Rating.AGAIN]
    assert all(e["card_id"] == 5 for e in events)
    assert events[0]["state"] == State.NEW
    assert events[0]["session_id"] == "abc"
    assert events[0]["review_time"] == logs[0].review_time
    assert store.get_recent_events(card_id=99) == []


def test_reset_db(store, make_card):
    store.save_card(make_card())
    store.reset_db()
    assert store.load_all_cards() == []
