from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StreakState(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_streak: int = 0
    longest_streak: int = 0
    last_success_date: Optional[date] = None
