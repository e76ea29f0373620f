from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_SCORE = 100


class OverallResult(str, Enum):
    ACCEPTED = "accepted"
    WRONG_ANSWER = "wrong_answer"
    ERROR = "error"


class PublicStatus(str, Enum):
    ACCEPTED = "accepted"
    WRONG_ANSWER = "wrong_answer"
    ERROR = "error"
    RUNNING = "running"


class TestCaseOutcome(BaseModel):
    """Per-test-case result; derived, only the aggregate is persisted."""
    __test__ = False
    model_config = ConfigDict(frozen=True)

    test_case_id: str
    order: int = 0
    passed: bool
    actual_output: str = ""
    runtime_ms: float = 0.0
    status_id: Optional[int] = None
    status_description: Optional[str] = None
    error: Optional[str] = None


class SubmissionVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_result: OverallResult
    aggregate_score: int = 0
    total_runtime_ms: float = 0.0
    outcomes: List[TestCaseOutcome] = Field(default_factory=list)
    message: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.overall_result is OverallResult.ACCEPTED

    @property
    def joined_output(self) -> str:
        return "\n".join(outcome.actual_output for outcome in self.outcomes)


class TestCaseResult(BaseModel):
    __test__ = False

    passed: bool
    input: str = ""
    output: str = ""
    expected: str = ""
    runtime: Optional[float] = None


class JudgeResponse(BaseModel):
    status: PublicStatus
    runtime: float = 0.0
    score: Optional[int] = None
    message: Optional[str] = None
    submission_id: Optional[str] = None
    test_case_results: List[TestCaseResult] = Field(default_factory=list)


class JudgeRequest(BaseModel):
    code: str
    language: str
    problem_id: str

    @model_validator(mode="after")
    def ensure_payload(self) -> "JudgeRequest":
        if not self.problem_id or not self.problem_id.strip():
            raise ValueError("problem_id is required")
        return self
