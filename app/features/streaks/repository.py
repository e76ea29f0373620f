from __future__ import annotations

import logging
from datetime import date
from typing import Any, Awaitable, Callable, Optional

from postgrest.exceptions import APIError

from app.db.supabase import get_supabase, timed_execute
from app.features.streaks.schemas import StreakState

logger = logging.getLogger("streaks.repository")

_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: APIError) -> bool:
    if getattr(exc, "code", None) == _UNIQUE_VIOLATION:
        return True
    text = " ".join(str(part) for part in (exc.message, getattr(exc, "details", None)) if part).lower()
    return "duplicate key" in text or "uq_streak_events_user_day" in text


class StreakRepository:
    """streak_events rows plus the streak columns on profiles."""

    _EVENT_TABLE = "streak_events"
    _PROFILE_TABLE = "profiles"

    def __init__(self, client_getter: Callable[[], Awaitable[Any]] = get_supabase):
        self._client_getter = client_getter

    async def try_record_day(self, user_id: str, day: date) -> bool:
        """Insert the (user, day) event; False if the day was already recorded.

        Relies on the UNIQUE(user_id, event_date) constraint, so concurrent
        accepted submissions cannot both win.
        """
        client = await self._client_getter()
        try:
            await timed_execute(
                client.table(self._EVENT_TABLE)
                .insert({"user_id": user_id, "event_date": day.isoformat(), "success": True})
                .execute(),
                op="streak_events.insert",
            )
        except APIError as exc:
            if _is_unique_violation(exc):
                logger.debug("streak day already recorded user_id=%s day=%s", user_id, day)
                return False
            raise
        return True

    async def forget_day(self, user_id: str, day: date) -> None:
        """Drop the (user, day) event so the day can be counted again."""
        client = await self._client_getter()
        await timed_execute(
            client.table(self._EVENT_TABLE)
            .delete()
            .eq("user_id", user_id)
            .eq("event_date", day.isoformat())
            .execute(),
            op="streak_events.delete",
        )

    async def get_state(self, user_id: str) -> Optional[StreakState]:
        client = await self._client_getter()
        resp = await timed_execute(
            client.table(self._PROFILE_TABLE)
            .select("current_streak, longest_streak, streak_last_success")
            .eq("id", user_id)
            .limit(1)
            .execute(),
            op="profiles.select_streak",
        )
        rows = resp.data or []
        if not rows:
            return None
        row = rows[0]
        last = row.get("streak_last_success")
        return StreakState(
            current_streak=int(row.get("current_streak") or 0),
            longest_streak=int(row.get("longest_streak") or 0),
            last_success_date=date.fromisoformat(str(last)[:10]) if last else None,
        )

    async def save_state(self, user_id: str, state: StreakState) -> None:
        client = await self._client_getter()
        await timed_execute(
            client.table(self._PROFILE_TABLE)
            .update(
                {
                    "current_streak": state.current_streak,
                    "longest_streak": state.longest_streak,
                    "streak_last_success": state.last_success_date.isoformat() if state.last_success_date else None,
                }
            )
            .eq("id", user_id)
            .execute(),
            op="profiles.update_streak",
        )


streak_repository = StreakRepository()

__all__ = ["streak_repository", "StreakRepository"]
