"""Shared FastAPI dependencies for authentication and context."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.db.supabase import get_supabase
from app.features.profiles.repository import profile_repository


logger = logging.getLogger("auth.deps")
security = HTTPBearer(auto_error=True)


class CurrentUser(BaseModel):
    """Minimal user identity shared across endpoints."""
    id: str
    email: Optional[str] = None
    role: str = "user"


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """Resolve the bearer token through Supabase Auth and return the user.

    Steps:
      1. Validate bearer token via Supabase Auth
      2. Ensure a matching profiles row (auto-provision)
      3. Return typed minimal identity object
    """
    client = await get_supabase()
    token = credentials.credentials
    try:
        t0 = time.perf_counter()
        whoami_timeout = float(os.getenv("AUTH_WHOAMI_TIMEOUT", "5"))
        auth_user = await asyncio.wait_for(client.auth.get_user(token), timeout=whoami_timeout)
        ms = int((time.perf_counter() - t0) * 1000)
        if ms > 50:
            logger.info("auth.get_user_ms=%d", ms)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required") from exc

    if not auth_user or not auth_user.user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    sup_user = auth_user.user
    email = sup_user.email or (sup_user.user_metadata or {}).get("email")
    profile = await profile_repository.ensure_profile(
        str(sup_user.id), email or "", (sup_user.user_metadata or {}).get("full_name")
    )
    current = CurrentUser(id=str(sup_user.id), email=email, role=profile.get("role") or "user")

    request_id = getattr(request.state, "request_id", None)
    logger.info(
        "auth_resolved user_id=%s role=%s request_id=%s path=%s",
        current.id,
        current.role,
        request_id,
        request.url.path,
    )
    return current
