"""
SQLAlchemy ORM Models for the card store

Defines FlashCardRecord and ReviewLogRecord. Timestamps are stored as
ISO-8601 strings so zone offsets survive SQLite.
"""

from sqlalchemy import BigInteger, Column, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class FlashCardRecord(Base):
    """
    Persistent memory state of one flash card.
    """
    __tablename__ = 'flash_cards'

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    word = Column(String(255), nullable=True)

    # Memory model
    stability = Column(Float, nullable=False)
    difficulty = Column(Float, nullable=False)
    interval = Column(Integer, nullable=False, default=0)  # Days

    # Review tracking
    lapses = Column(Integer, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    due_date = Column(String(64), nullable=False)
    last_review = Column(String(64), nullable=False)
    phase = Column(Integer, nullable=False)  # 0=NEW, 1=RELEARNING, 2=REVIEW

    def __repr__(self):
        return f"<FlashCardRecord(id={self.id}, phase={self.phase}, due={self.due_date})>"


class ReviewLogRecord(Base):
    """
    Log entry for one committed review.
    """
    __tablename__ = 'review_logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    card_id = Column(BigInteger, nullable=True)

    rating = Column(Integer, nullable=False)  # 0=AGAIN, 1=HARD, 2=GOOD, 3=EASY
    elapsed_days = Column(Integer, nullable=False)
    scheduled_days = Column(Integer, nullable=False)
    review_time = Column(String(64), nullable=False)
    state = Column(Integer, nullable=False)  # Scheduler state before the review

    # Session context (optional, for analytics)
    session_id = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<ReviewLogRecord(id={self.id}, card={self.card_id}, rating={self.rating})>"
