from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.common.deps import CurrentUser, get_current_user
from app.features.submissions.schemas import SubmissionPage
from app.features.submissions.service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SubmissionRecorder, submission_recorder

router = APIRouter(prefix="/submissions", tags=["submissions"])


def get_submission_recorder() -> SubmissionRecorder:
	return submission_recorder


@router.get("", response_model=SubmissionPage)
async def list_my_submissions(
	page: int = Query(1, ge=1),
	limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
	problem_id: Optional[str] = Query(None),
	result: Optional[str] = Query(None, description="ACCEPTED, WRONG_ANSWER, ERROR, PENDING or all"),
	current_user: CurrentUser = Depends(get_current_user),
	recorder: SubmissionRecorder = Depends(get_submission_recorder),
):
	try:
		return await recorder.list_submissions(
			current_user.id,
			page=page,
			limit=limit,
			problem_id=problem_id,
			result=result,
		)
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
