from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from postgrest.exceptions import APIError

from app.common.cache import read_cache
from app.db.supabase import get_supabase, timed_execute

logger = logging.getLogger("profiles.repository")


class ProfileRepository:
    _TABLE = "profiles"

    def __init__(self, client_getter: Callable[[], Awaitable[Any]] = get_supabase):
        self._client_getter = client_getter

    async def get_by_id(self, profile_id: str) -> Optional[Dict[str, Any]]:
        client = await self._client_getter()
        resp = await timed_execute(
            client.table(self._TABLE).select("id, email, full_name, role").eq("id", profile_id).limit(1).execute(),
            op="profiles.select_by_id",
        )
        rows = resp.data or []
        return rows[0] if rows else None

    async def ensure_profile(self, profile_id: str, email: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        """Return the profile row, creating it on first sight (idempotent)."""
        key = f"profiles:id:{profile_id}"
        cached = read_cache.get(key)
        if cached is not None:
            return cached
        row = await self.get_by_id(profile_id)
        if row is None:
            client = await self._client_getter()
            record = {"id": profile_id, "email": email, "full_name": full_name, "role": "user"}
            try:
                resp = await timed_execute(client.table(self._TABLE).insert(record).execute(), op="profiles.insert")
                row = (resp.data or [record])[0]
                logger.info("profile.provisioned id=%s", profile_id)
            except APIError as exc:
                # lost a race with a concurrent first request
                logger.debug("profile insert conflict id=%s code=%s", profile_id, exc.code)
                row = await self.get_by_id(profile_id)
                if row is None:
                    raise
        read_cache.set(key, row)
        return row


profile_repository = ProfileRepository()

__all__ = ["profile_repository", "ProfileRepository"]
