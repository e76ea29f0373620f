from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from app.common.exceptions import PersistenceFailure
from app.features.judging.schemas import SubmissionVerdict
from app.features.streaks.service import StreakService, streak_service
from app.features.submissions.repository import SubmissionsRepository, submissions_repository
from app.features.submissions.schemas import Pagination, SubmissionPage, SubmissionResult, SubmissionSchema

logger = logging.getLogger("submissions.service")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_schema(row: Dict[str, Any]) -> SubmissionSchema:
    return SubmissionSchema(
        id=str(row.get("id")),
        user_id=str(row.get("user_id")),
        problem_id=str(row.get("problem_id")),
        language=str(row.get("language") or ""),
        code=str(row.get("code") or ""),
        result=row.get("result") or SubmissionResult.PENDING,
        score=int(row.get("score") or 0),
        runtime_ms=int(row.get("runtime_ms") or 0),
        output=row.get("output"),
        submitted_at=row.get("submitted_at"),
    )


class SubmissionRecorder:
    """Persists verdicts and fires the streak side effect.

    Recording the submission and updating the streak fail independently: the
    first is fatal to the submit action, the second is only logged.
    """

    def __init__(
        self,
        repository: SubmissionsRepository = submissions_repository,
        streaks: StreakService = streak_service,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.streaks = streaks
        self._clock = clock

    async def record_submission(
        self,
        user_id: str,
        problem_id: str,
        language: str,
        code: str,
        verdict: SubmissionVerdict,
    ) -> SubmissionSchema:
        payload = {
            "user_id": user_id,
            "problem_id": problem_id,
            "language": language,
            "code": code,
            "result": SubmissionResult.from_overall(verdict.overall_result).value,
            "score": verdict.aggregate_score,
            "runtime_ms": int(round(verdict.total_runtime_ms)),
            "output": verdict.joined_output or verdict.message,
            "submitted_at": self._clock().isoformat(),
        }
        try:
            row = await self.repository.insert(payload)
        except Exception as exc:
            logger.exception("Failed to record submission user_id=%s problem_id=%s", user_id, problem_id)
            raise PersistenceFailure(
                "Failed to save submission",
                {"user_id": user_id, "problem_id": problem_id},
            ) from exc
        if not row:
            raise PersistenceFailure("Failed to save submission: no row returned", {"user_id": user_id})
        submission = _to_schema(row)
        logger.info(
            "submission.recorded id=%s user_id=%s problem_id=%s result=%s score=%d",
            submission.id,
            user_id,
            problem_id,
            submission.result.value,
            submission.score,
        )

        if verdict.accepted:
            try:
                await self.streaks.register_success(user_id)
            except Exception:
                logger.exception("Error updating user streak user_id=%s", user_id)
        return submission

    async def list_submissions(
        self,
        user_id: str,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        problem_id: Optional[str] = None,
        result: Optional[str] = None,
    ) -> SubmissionPage:
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)
        result_filter = None
        if result and result.lower() != "all":
            result_filter = SubmissionResult(result.upper()).value
        rows, total = await self.repository.list_for_user(
            user_id,
            offset=(page - 1) * limit,
            limit=limit,
            problem_id=problem_id,
            result=result_filter,
        )
        return SubmissionPage(
            submissions=[_to_schema(row) for row in rows],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )


submission_recorder = SubmissionRecorder()

__all__ = ["submission_recorder", "SubmissionRecorder"]
