from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.common.deps import CurrentUser, get_current_user
from app.common.exceptions import JudgeError, http_status_for
from app.features.judging.schemas import JudgeRequest, JudgeResponse
from app.features.judging.service import JudgeService, get_judge_service

logger = logging.getLogger("judging.endpoints")

router = APIRouter(prefix="/judge", tags=["judge"])


def _raise_http(exc: JudgeError, action: str) -> None:
    code = http_status_for(exc)
    if code >= 500:
        logger.warning("%s failed status=%d error=%s context=%s", action, code, type(exc).__name__, exc.context)
    raise HTTPException(status_code=code, detail=exc.message) from exc


@router.post("/run", response_model=JudgeResponse, summary="Run code against the first sample test case")
async def run_code(
    payload: JudgeRequest,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    service: JudgeService = Depends(get_judge_service),
):
    try:
        return await service.run(
            payload.code,
            payload.language,
            payload.problem_id,
            is_cancelled=request.is_disconnected,
        )
    except JudgeError as exc:
        _raise_http(exc, "judge.run")


@router.post("/submit", response_model=JudgeResponse, summary="Judge code against every test case and record it")
async def submit_code(
    payload: JudgeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: JudgeService = Depends(get_judge_service),
):
    try:
        return await service.submit(payload.code, payload.language, payload.problem_id, current_user.id)
    except JudgeError as exc:
        _raise_http(exc, "judge.submit")
