"""
Database - card store I/O operations

Handles all database operations for flash cards and review logs.
Uses SQLAlchemy ORM against the URL in DATABASE_URL.

This module handles ONLY database I/O.
Scheduling logic lives in the scheduler and service modules.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from srs_core.fsrs.constants import CardPhase, Rating, State
from srs_core.fsrs.memory_state import ReviewLog
from srs_core.fsrs.models import Base, FlashCardRecord, ReviewLogRecord
from srs_core.fsrs.timeutils import ensure_aware, is_card_due
from srs_core.schemas import FlashCard
from srs_core.settings import get_database_url

logger = logging.getLogger(__name__)

_engines: dict[str, Engine] = {}


def get_engine() -> Engine:
    """
    Get the SQLAlchemy engine for the configured database.

    One engine is kept per URL. Server databases get a connection pool;
    SQLite uses SQLAlchemy's default pool.

    Returns:
        SQLAlchemy Engine instance

    Raises:
        ConfigurationError: if DATABASE_URL is not set
    """
    db_url = get_database_url()
    engine = _engines.get(db_url)
    if engine is None:
        if db_url.startswith("sqlite"):
            engine = create_engine(db_url, echo=False)
        else:
            engine = create_engine(
                db_url,
                pool_size=5,           # Keep 5 connections open
                max_overflow=10,       # Allow up to 10 extra connections
                pool_pre_ping=True,    # Verify connections before use
                echo=False
            )
        _engines[db_url] = engine
    return engine


def get_session() -> Session:
    """
    Get a SQLAlchemy session for database operations.

    Returns:
        SQLAlchemy Session instance
    """
    SessionLocal = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return SessionLocal()


def dispose_engines():
    """Close every cached engine (e.g. between tests)."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()


def init_db():
    """
    Create the tables if they don't exist.

    Safe to call multiple times.
    """
    Base.metadata.create_all(get_engine())


def reset_db():
    """
    DANGEROUS: Delete all data and recreate tables.

    All cards and review history will be lost!
    """
    engine = get_engine()
    Base.metadata.drop_all(engine)
    logger.warning("All card store tables dropped")
    init_db()


# ---- Conversion ----

def _to_flash_card(record: FlashCardRecord) -> FlashCard:
    return FlashCard(
        id=record.id,
        word=record.word,
        stability=record.stability,
        difficulty=record.difficulty,
        interval=record.interval,
        lapses=record.lapses,
        review_count=record.review_count,
        due_date=datetime.fromisoformat(record.due_date),
        last_review=datetime.fromisoformat(record.last_review),
        phase=CardPhase(record.phase),
    )


def _apply_card(record: FlashCardRecord, card: FlashCard):
    record.word = card.word
    record.stability = card.stability
    record.difficulty = card.difficulty
    record.interval = card.interval
    record.lapses = card.lapses
    record.review_count = card.review_count
    record.due_date = card.due_date.isoformat()
    record.last_review = card.last_review.isoformat()
    record.phase = int(card.phase)


def _upsert_card(session: Session, card: FlashCard):
    record = session.get(FlashCardRecord, card.id)
    if record is None:
        record = FlashCardRecord(id=card.id)
        session.add(record)
    _apply_card(record, card)


# ---- Cards ----

def save_card(card: FlashCard):
    """
    Save a card (insert or update).

    Args:
        card: FlashCard to save
    """
    session = get_session()
    try:
        _upsert_card(session, card)
        session.commit()
    finally:
        session.close()


def batch_save_cards(cards: Iterable[FlashCard]):
    """
    Save multiple cards in a single database transaction.

    Args:
        cards: FlashCards to save
    """
    cards = list(cards)
    if not cards:
        return

    session = get_session()
    try:
        for card in cards:
            _upsert_card(session, card)
        session.commit()
    finally:
        session.close()


def load_card(card_id: int) -> Optional[FlashCard]:
    """
    Load a card from the database.

    Args:
        card_id: Card identifier

    Returns:
        FlashCard if found, None otherwise
    """
    session = get_session()
    try:
        record = session.get(FlashCardRecord, card_id)
        if record is None:
            return None
        return _to_flash_card(record)
    finally:
        session.close()


def load_all_cards() -> list[FlashCard]:
    """
    Load every stored card, ordered by id.
    """
    session = get_session()
    try:
        records = session.query(FlashCardRecord).order_by(FlashCardRecord.id).all()
        return [_to_flash_card(record) for record in records]
    finally:
        session.close()


def get_due_cards(now: datetime) -> list[FlashCard]:
    """
    Get stored cards due at ``now``.

    Due dates carry their own offsets, so the comparison happens on
    parsed datetimes rather than in SQL.

    Returns:
        Due FlashCards, earliest due first
    """
    now = ensure_aware(now)
    due = [card for card in load_all_cards() if is_card_due(card, now)]
    due.sort(key=lambda card: card.due_date)
    return due


# ---- Review logs ----

def batch_log_review_events(logs: Iterable[ReviewLog], session_id: Optional[str] = None):
    """
    Log committed reviews in a single database transaction.

    Args:
        logs: ReviewLog entries (``card_id`` set by the service)
        session_id: Optional learning session id
    """
    logs = list(logs)
    if not logs:
        return

    session = get_session()
    try:
        for log in logs:
            session.add(ReviewLogRecord(
                card_id=log.card_id,
                rating=int(log.rating),
                elapsed_days=log.elapsed_days,
                scheduled_days=log.scheduled_days,
                review_time=log.review_time.isoformat(),
                state=int(log.state),
                session_id=session_id,
            ))
        session.commit()
    finally:
        session.close()


def get_recent_events(limit: int = 10, card_id: Optional[int] = None) -> list[dict]:
    """
    Get recent review events.

    Args:
        limit: Maximum number of events to return
        card_id: Restrict to one card

    Returns:
        List of recent events (newest first)
    """
    session = get_session()
    try:
        query = session.query(ReviewLogRecord)
        if card_id is not None:
            query = query.filter(ReviewLogRecord.card_id == card_id)
        events = query.order_by(ReviewLogRecord.id.desc()).limit(limit).all()

        return [
            {
                "id": event.id,
                "card_id": event.card_id,
                "rating": Rating(event.rating),
                "elapsed_days": event.elapsed_days,
                "scheduled_days": event.scheduled_days,
                "review_time": datetime.fromisoformat(event.review_time),
                "state": State(event.state),
                "session_id": event.session_id,
            }
            for event in events
        ]
    finally:
        session.close()
