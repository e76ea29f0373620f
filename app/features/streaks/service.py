from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from app.features.streaks.repository import StreakRepository, streak_repository
from app.features.streaks.schemas import StreakState

logger = logging.getLogger("streaks.service")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utc_day(moment: datetime) -> date:
    """UTC-midnight-truncated calendar day; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date()


def advance_streak(state: StreakState, today: date) -> StreakState:
    """Apply one successful day.

    Consecutive days extend the run; a gap restarts it at 1. The longest
    streak never decreases.
    """
    last = state.last_success_date
    if last is not None and last >= today:
        return state
    if last is not None and last == today - timedelta(days=1):
        current = state.current_streak + 1
    elif last is None:
        current = state.current_streak + 1
    else:
        current = 1
    return StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_success_date=today,
    )


class StreakService:
    def __init__(
        self,
        repository: StreakRepository = streak_repository,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self._clock = clock

    async def register_success(self, user_id: str) -> Optional[StreakState]:
        """Advance the user's streak at most once per UTC day.

        Returns the new state, or None when today was already counted.
        """
        today = utc_day(self._clock())
        if not await self.repository.try_record_day(user_id, today):
            return None
        try:
            state = await self.repository.get_state(user_id)
            if state is None:
                logger.warning("streak day recorded for user_id=%s but no profile row exists", user_id)
                return None
            new_state = advance_streak(state, today)
            await self.repository.save_state(user_id, new_state)
        except Exception:
            # the profile never advanced, so the day must stay claimable
            await self._release_day(user_id, today)
            raise
        logger.info(
            "streak.advanced user_id=%s current=%d longest=%d day=%s",
            user_id,
            new_state.current_streak,
            new_state.longest_streak,
            today,
        )
        return new_state

    async def _release_day(self, user_id: str, day: date) -> None:
        try:
            await self.repository.forget_day(user_id, day)
        except Exception:
            logger.exception("could not release streak day user_id=%s day=%s", user_id, day)

    async def get_streak(self, user_id: str) -> StreakState:
        return await self.repository.get_state(user_id) or StreakState()


streak_service = StreakService()

__all__ = ["streak_service", "StreakService", "advance_streak", "utc_day"]
