from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from postgrest.exceptions import APIError

from app.db.supabase import get_supabase, is_invalid_input, timed_execute


class SubmissionsRepository:
    """Append-only access to the submissions table."""

    _TABLE = "submissions"

    def __init__(self, client_getter: Callable[[], Awaitable[Any]] = get_supabase):
        self._client_getter = client_getter

    async def insert(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        client = await self._client_getter()
        resp = await timed_execute(client.table(self._TABLE).insert(payload).execute(), op="submissions.insert")
        rows = resp.data or []
        return rows[0] if rows else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        offset: int,
        limit: int,
        problem_id: Optional[str] = None,
        result: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        client = await self._client_getter()
        query = client.table(self._TABLE).select("*", count="exact").eq("user_id", user_id)
        if problem_id:
            query = query.eq("problem_id", problem_id)
        if result:
            query = query.eq("result", result)
        try:
            resp = await timed_execute(
                query.order("submitted_at", desc=True).range(offset, offset + limit - 1).execute(),
                op="submissions.list_for_user",
            )
        except APIError as exc:
            if is_invalid_input(exc):
                raise ValueError(f"invalid filter value: {exc.message}") from exc
            raise
        rows = resp.data or []
        total = resp.count if resp.count is not None else len(rows)
        return rows, int(total)


submissions_repository = SubmissionsRepository()

__all__ = ["submissions_repository", "SubmissionsRepository"]
