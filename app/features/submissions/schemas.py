from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.features.judging.schemas import OverallResult


class SubmissionResult(str, Enum):
	PENDING = "PENDING"
	ACCEPTED = "ACCEPTED"
	WRONG_ANSWER = "WRONG_ANSWER"
	ERROR = "ERROR"

	@classmethod
	def from_overall(cls, overall: OverallResult) -> "SubmissionResult":
		return {
			OverallResult.ACCEPTED: cls.ACCEPTED,
			OverallResult.WRONG_ANSWER: cls.WRONG_ANSWER,
			OverallResult.ERROR: cls.ERROR,
		}[overall]


class SubmissionSchema(BaseModel):
	id: str
	user_id: str
	problem_id: str
	language: str
	code: str
	result: SubmissionResult
	score: int = 0
	runtime_ms: int = 0
	output: Optional[str] = None  # opaque text blob
	submitted_at: Optional[datetime] = None


class Pagination(BaseModel):
	page: int
	limit: int
	total: int
	pages: int


class SubmissionPage(BaseModel):
	submissions: List[SubmissionSchema] = Field(default_factory=list)
	pagination: Pagination
