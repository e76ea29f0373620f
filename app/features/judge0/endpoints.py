from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from app.common.exceptions import JudgeError, http_status_for
from app.features.judge0.languages import SUPPORTED_LANGUAGES, resolve_language_id
from app.features.judge0.schemas import (
    STATUS_DESCRIPTIONS,
    CodeSubmissionCreate,
    ExecutionHandle,
    ExecutionRequest,
    ExecutionResult,
    Judge0Status,
    LanguageInfo,
)
from app.features.judge0.service import Judge0Service, get_judge0_service

logger = logging.getLogger("judge0.endpoints")

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

public_router = APIRouter(prefix="/judge0", tags=["judge0-public"])
protected_router = APIRouter(prefix="/judge0", tags=["judge0-protected"])


@public_router.get("/languages", response_model=List[LanguageInfo])
async def get_supported_languages():
    return list(SUPPORTED_LANGUAGES)


@public_router.get("/statuses", response_model=List[Judge0Status])
async def get_submission_statuses():
    return [Judge0Status(id=int(status_id), description=text) for status_id, text in STATUS_DESCRIPTIONS.items()]


@protected_router.post("/submit", response_model=ExecutionHandle, summary="Submit one execution, return its token")
async def submit_code(submission: CodeSubmissionCreate, service: Judge0Service = Depends(get_judge0_service)):
    try:
        language_id = resolve_language_id(submission.language) if submission.language else submission.language_id
        request = ExecutionRequest(
            language_id=language_id,
            source_code=submission.source_code,
            stdin=submission.stdin,
            expected_output=submission.expected_output,
        )
        return await service.submit(request)
    except JudgeError as exc:
        raise HTTPException(status_code=http_status_for(exc), detail=exc.message) from exc


@protected_router.get("/result", response_model=ExecutionResult, summary="Fetch one execution result by token")
async def get_execution_result(
    token: str = Query(..., min_length=1),
    service: Judge0Service = Depends(get_judge0_service),
):
    try:
        return await service.fetch_result(ExecutionHandle(token=token))
    except JudgeError as exc:
        raise HTTPException(status_code=http_status_for(exc), detail=exc.message) from exc
