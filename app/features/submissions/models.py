from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Uuid, CheckConstraint, Index
from sqlalchemy.sql import func
import uuid

from app.db.base import Base


class Submission(Base):
    """Append-only log of submit actions; rows are never updated."""
    __tablename__ = "submissions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    problem_id = Column(Uuid, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True)
    language = Column(String(32), nullable=False)
    code = Column(Text, nullable=False)
    result = Column(String(32), nullable=False, server_default="PENDING")
    score = Column(Integer, nullable=False, server_default="0")
    runtime_ms = Column(Integer, nullable=False, server_default="0")
    output = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    __table_args__ = (
        CheckConstraint("result IN ('PENDING', 'ACCEPTED', 'WRONG_ANSWER', 'ERROR')", name="ck_submissions_result"),
        CheckConstraint("score >= 0 AND score <= 100", name="ck_submissions_score"),
        Index("ix_submissions_user_submitted_at", "user_id", "submitted_at"),
    )

    def __repr__(self) -> str:
        return f"<Submission id={self.id} user_id={self.user_id} result={self.result}>"
