from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.sql import func
import uuid

from app.db.base import Base


class Problem(Base):
    """Owned by the problem/admin feature; declared here so test cases can reference it."""
    __tablename__ = "problems"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TestCase(Base):
    __tablename__ = "test_cases"
    __test__ = False  # keep pytest from collecting the model

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    problem_id = Column(Uuid, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(16), nullable=False)
    input = Column(Text, nullable=False, server_default="")
    expected_output = Column(Text, nullable=False, server_default="")
    order = Column(Integer, nullable=False, server_default="0")
    __table_args__ = (
        CheckConstraint("kind IN ('SAMPLE', 'HIDDEN')", name="ck_test_cases_kind"),
    )

    def __repr__(self) -> str:
        return f"<TestCase id={self.id} problem_id={self.problem_id} kind={self.kind} order={self.order}>"
