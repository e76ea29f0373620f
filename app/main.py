"""FastAPI entrypoint: middleware, routers and meta endpoints."""

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.common.deps import get_current_user
from app.common.exceptions import JudgeError, http_status_for
from app.core.config import get_settings
from app.features.judge0.endpoints import protected_router as judge0_protected_router
from app.features.judge0.endpoints import public_router as judge0_public_router
from app.features.judging.endpoints import router as judge_router
from app.features.streaks.endpoints import router as streaks_router
from app.features.submissions.endpoints import router as submissions_router

_settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if _settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("request")

app = FastAPI(title=_settings.app_name)
_START_TIME = datetime.now(timezone.utc)


# ------------------------
# CORS Setup
# ------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allow_origins,
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------
# Request context
# ------------------------
@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = req_id
    logger.info("request.start id=%s %s %s", req_id, request.method, request.url.path)
    t0 = perf_counter()
    response = await call_next(request)
    ms = int((perf_counter() - t0) * 1000)
    response.headers["X-Request-Id"] = req_id
    logger.info("request.end id=%s status=%d ms=%d", req_id, response.status_code, ms)
    return response


@app.exception_handler(JudgeError)
async def judge_error_handler(request: Request, exc: JudgeError):
    # routers translate their own errors; this catches anything that slipped through
    code = http_status_for(exc)
    logger.warning("unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=code, content={"detail": exc.message})


# ------------------------
# Routers
# ------------------------
protected_deps = [Depends(get_current_user)]

app.include_router(judge0_public_router)
app.include_router(judge0_protected_router, dependencies=protected_deps)
app.include_router(judge_router)
app.include_router(submissions_router)
app.include_router(streaks_router)


# ------------------------
# Meta endpoints
# ------------------------
@app.get("/", tags=["meta"], summary="API Root")
async def root():
    return {
        "name": _settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "health": "/healthz",
    }


@app.get("/healthz", tags=["meta"], summary="Liveness / readiness probe")
async def healthz() -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    judge0_ready = bool(_settings.judge0_api_url)
    supabase_ready = bool(_settings.supabase_url and _settings.supabase_key)

    return {
        "status": "ok" if judge0_ready and supabase_ready else "degraded",
        "time_utc": now.isoformat(),
        "uptime_seconds": round((now - _START_TIME).total_seconds(), 2),
        "version": os.getenv("APP_VERSION", "dev"),
        "environment": "debug" if _settings.debug else "prod",
        "components": {
            "supabase": "configured" if supabase_ready else "missing-config",
            "judge0": "configured" if judge0_ready else "missing-config",
        },
        "polling": {
            "max_attempts": _settings.judge_poll_max_attempts,
            "interval_ms": _settings.judge_poll_interval_ms,
            "parallel_test_cases": _settings.judge_parallel_test_cases,
        },
    }
