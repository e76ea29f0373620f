# Import all models here so Alembic can discover them
from app.db.base import Base

from app.features.profiles.models import Profile
from app.features.problems.models import Problem, TestCase
from app.features.submissions.models import Submission
from app.features.streaks.models import StreakEvent

__all__ = [
    "Base",
    "Profile",
    "Problem",
    "TestCase",
    "Submission",
    "StreakEvent",
]
