from __future__ import annotations

from fastapi import APIRouter, Depends

from app.common.deps import CurrentUser, get_current_user
from app.features.streaks.schemas import StreakState
from app.features.streaks.service import StreakService, streak_service

router = APIRouter(prefix="/streaks", tags=["streaks"])


def get_streak_service() -> StreakService:
    return streak_service


@router.get("/me", response_model=StreakState)
async def get_my_streak(
    current_user: CurrentUser = Depends(get_current_user),
    service: StreakService = Depends(get_streak_service),
):
    return await service.get_streak(current_user.id)
