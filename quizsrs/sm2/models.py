"""
SQLAlchemy ORM Models for the Schedule Database

Defines the ReviewScheduleRow model. Timestamps are stored as epoch seconds
so every backend reads them back timezone-aware.
"""

from sqlalchemy import Column, Float, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ReviewScheduleRow(Base):
    """
    Persistent SM-2 schedule for a single quiz item.

    Primary key is (user_id, item_id); group_id tags the item for
    group-scoped stats and resets.
    """
    __tablename__ = 'review_schedule'

    # Primary key: composite of user_id and item_id
    user_id = Column(String(255), primary_key=True, nullable=False)
    item_id = Column(String(255), primary_key=True, nullable=False)

    group_id = Column(String(255), nullable=False)

    # Scheduling parameters
    next_review_due_at = Column(Float, nullable=False)  # Epoch seconds
    interval_seconds = Column(Float, nullable=False)
    ease_factor = Column(Float, nullable=False)

    # Review tracking
    consecutive_correct = Column(Integer, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    last_reviewed_at = Column(Float, nullable=True)  # Epoch seconds, NULL until first review

    # Metadata
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)

    __table_args__ = (
        Index('idx_review_schedule_group', 'user_id', 'group_id'),
        Index('idx_review_schedule_due', 'user_id', 'next_review_due_at'),
    )

    def __repr__(self):
        return f"<ReviewScheduleRow({self.user_id}, {self.item_id}, group={self.group_id})>"
