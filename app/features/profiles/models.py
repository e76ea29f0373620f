from sqlalchemy import Column, String, Date, DateTime, Integer, Uuid, CheckConstraint
from sqlalchemy.sql import func
import uuid

from app.db.base import Base


class Profile(Base):
    """User row; `id` mirrors the Supabase auth user id. Streak columns live here."""
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(32), nullable=False, server_default="user")
    current_streak = Column(Integer, nullable=False, server_default="0")
    longest_streak = Column(Integer, nullable=False, server_default="0")
    streak_last_success = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    __table_args__ = (
        CheckConstraint("longest_streak >= current_streak", name="ck_profiles_longest_ge_current"),
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} email={self.email} streak={self.current_streak}/{self.longest_streak}>"
