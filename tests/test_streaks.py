from datetime import date, datetime, timedelta, timezone

import pytest
from postgrest.exceptions import APIError

from app.features.streaks.repository import StreakRepository
from app.features.streaks.schemas import StreakState
from app.features.streaks.service import StreakService, advance_streak, utc_day
from fakesupabase import FakeSupabase

pytestmark = pytest.mark.anyio

USER = "11111111-1111-1111-1111-111111111111"


class Clock:
    def __init__(self, moment):
        self.moment = moment

    def __call__(self):
        return self.moment

    def advance(self, **kwargs):
        self.moment = self.moment + timedelta(**kwargs)


def _setup(moment, **profile):
    db = FakeSupabase(
        tables={
            "profiles": [
                {
                    "id": USER,
                    "current_streak": profile.get("current", 0),
                    "longest_streak": profile.get("longest", 0),
                    "streak_last_success": profile.get("last"),
                }
            ]
        }
    )
    clock = Clock(moment)
    return db, clock, StreakService(StreakRepository(db.getter), clock=clock)


def test_utc_day_truncates_in_utc():
    late_evening_minus_5 = datetime(2026, 3, 1, 22, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert utc_day(late_evening_minus_5) == date(2026, 3, 2)
    assert utc_day(datetime(2026, 3, 1, 23, 59)) == date(2026, 3, 1)


def test_advance_streak_rules():
    today = date(2026, 3, 10)
    assert advance_streak(StreakState(), today) == StreakState(current_streak=1, longest_streak=1, last_success_date=today)

    yesterday = StreakState(current_streak=4, longest_streak=4, last_success_date=today - timedelta(days=1))
    assert advance_streak(yesterday, today).current_streak == 5

    gap = StreakState(current_streak=4, longest_streak=9, last_success_date=today - timedelta(days=3))
    after_gap = advance_streak(gap, today)
    assert after_gap.current_streak == 1
    assert after_gap.longest_streak == 9

    same_day = StreakState(current_streak=2, longest_streak=2, last_success_date=today)
    assert advance_streak(same_day, today) is same_day


async def test_two_successes_same_utc_day_count_once():
    db, clock, service = _setup(datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc))

    first = await service.register_success(USER)
    clock.advance(hours=15)
    second = await service.register_success(USER)

    assert first.current_streak == 1
    assert second is None
    profile = db.tables["profiles"][0]
    assert profile["current_streak"] == 1
    assert profile["streak_last_success"] == "2026-03-10"
    assert len(db.tables["streak_events"]) == 1


async def test_consecutive_days_extend_and_longest_never_decreases():
    db, clock, service = _setup(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))
    longest_seen = []

    for step in (1, 1, 1, 3, 1):
        state = await service.register_success(USER)
        longest_seen.append(state.longest_streak)
        assert state.longest_streak >= state.current_streak
        clock.advance(days=step)

    assert longest_seen == sorted(longest_seen)
    assert db.tables["profiles"][0]["longest_streak"] == 4
    assert db.tables["profiles"][0]["current_streak"] == 1
    state = await service.register_success(USER)
    assert state.current_streak == 2
    assert state.longest_streak == 4


async def test_existing_streak_continues_from_profile():
    _, _, service = _setup(datetime(2026, 3, 10, 1, 0, tzinfo=timezone.utc), current=6, longest=6, last="2026-03-09")
    state = await service.register_success(USER)
    assert state == StreakState(current_streak=7, longest_streak=7, last_success_date=date(2026, 3, 10))


async def test_missing_profile_returns_none():
    db = FakeSupabase()
    service = StreakService(StreakRepository(db.getter), clock=lambda: datetime(2026, 3, 10, tzinfo=timezone.utc))
    assert await service.register_success(USER) is None


async def test_get_streak_defaults_to_zero():
    db = FakeSupabase()
    service = StreakService(StreakRepository(db.getter))
    assert await service.get_streak(USER) == StreakState()


async def test_repository_reraises_non_unique_errors():
    db = FakeSupabase()
    db.fail_tables["streak_events"] = APIError({"code": "42501", "message": "permission denied"})
    with pytest.raises(APIError):
        await StreakRepository(db.getter).try_record_day(USER, date(2026, 3, 10))


class FlakyRepository(StreakRepository):
    """Fails the first profile update, then behaves."""

    def __init__(self, client_getter):
        super().__init__(client_getter)
        self.save_failures = 1

    async def save_state(self, user_id, state):
        if self.save_failures:
            self.save_failures -= 1
            raise RuntimeError("Supabase profiles.update_streak timed out after 5.0s")
        await super().save_state(user_id, state)


async def test_failed_profile_update_leaves_day_claimable():
    db = FakeSupabase(
        tables={"profiles": [{"id": USER, "current_streak": 5, "longest_streak": 5, "streak_last_success": "2026-03-09"}]}
    )
    clock = Clock(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc))
    service = StreakService(FlakyRepository(db.getter), clock=clock)

    with pytest.raises(RuntimeError):
        await service.register_success(USER)
    assert db.tables["streak_events"] == []
    assert db.tables["profiles"][0]["current_streak"] == 5

    clock.advance(hours=2)
    retried = await service.register_success(USER)
    assert retried == StreakState(current_streak=6, longest_streak=6, last_success_date=date(2026, 3, 10))

    clock.advance(days=1)
    nxt = await service.register_success(USER)
    assert nxt.current_streak == 7
    assert len(db.tables["streak_events"]) == 2


async def test_forget_day_removes_only_that_day():
    db = FakeSupabase()
    repo = StreakRepository(db.getter)
    await repo.try_record_day(USER, date(2026, 3, 9))
    await repo.try_record_day(USER, date(2026, 3, 10))

    await repo.forget_day(USER, date(2026, 3, 10))

    assert [row["event_date"] for row in db.tables["streak_events"]] == ["2026-03-09"]
    assert await repo.try_record_day(USER, date(2026, 3, 10)) is True
