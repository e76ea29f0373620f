from sqlalchemy import Column, Boolean, Date, DateTime, ForeignKey, Uuid, UniqueConstraint, true
from sqlalchemy.sql import func
import uuid

from app.db.base import Base


class StreakEvent(Base):
    """One row per user per UTC day with an accepted submission.

    The unique constraint is what makes the streak advance at most once a day.
    """
    __tablename__ = "streak_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    event_date = Column(Date, nullable=False)
    success = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    __table_args__ = (
        UniqueConstraint("user_id", "event_date", name="uq_streak_events_user_day"),
    )

    def __repr__(self) -> str:
        return f"<StreakEvent user_id={self.user_id} event_date={self.event_date}>"
