import pytest

from app.common.exceptions import ExecutionTimeout, PollCancelled, ServiceUnavailable
from app.features.judge0.poller import Poller
from app.features.judge0.schemas import ExecutionHandle, ExecutionResult

pytestmark = pytest.mark.anyio

HANDLE = ExecutionHandle(token="tok")


class ScriptedSource:
    """Returns the scripted status ids in order, repeating the last one."""

    def __init__(self, *status_ids):
        self.status_ids = list(status_ids)
        self.calls = 0

    async def fetch_result(self, handle):
        index = min(self.calls, len(self.status_ids) - 1)
        self.calls += 1
        status_id = self.status_ids[index]
        if isinstance(status_id, Exception):
            raise status_id
        return ExecutionResult.from_judge0({"status": {"id": status_id}, "stdout": "out"}, token=handle.token)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


async def test_returns_first_terminal_result():
    source = ScriptedSource(1, 2, 2, 3)
    sleep = RecordingSleep()
    result = await Poller(source, interval_ms=250, sleep=sleep).wait_for_completion(HANDLE)

    assert result.status_id == 3
    assert source.calls == 4
    assert sleep.delays == [0.25, 0.25, 0.25]


async def test_terminal_on_first_fetch_never_sleeps():
    sleep = RecordingSleep()
    result = await Poller(ScriptedSource(6), sleep=sleep).wait_for_completion(HANDLE)
    assert result.status_id == 6
    assert sleep.delays == []


async def test_times_out_after_exactly_max_attempts():
    source = ScriptedSource(2)
    sleep = RecordingSleep()
    with pytest.raises(ExecutionTimeout) as exc:
        await Poller(source, max_attempts=5, interval_ms=10, sleep=sleep).wait_for_completion(HANDLE)

    assert source.calls == 5
    assert len(sleep.delays) == 4
    assert exc.value.context == {"token": "tok", "attempts": 5}


async def test_call_arguments_override_defaults():
    source = ScriptedSource(1)
    sleep = RecordingSleep()
    with pytest.raises(ExecutionTimeout):
        await Poller(source, max_attempts=30, interval_ms=1000, sleep=sleep).wait_for_completion(
            HANDLE, max_attempts=2, interval_ms=5
        )
    assert source.calls == 2
    assert sleep.delays == [0.005]


async def test_source_errors_propagate_unchanged():
    source = ScriptedSource(1, ServiceUnavailable("down"))
    with pytest.raises(ServiceUnavailable):
        await Poller(source, sleep=RecordingSleep()).wait_for_completion(HANDLE)
    assert source.calls == 2


async def test_cancellation_stops_before_next_sleep():
    source = ScriptedSource(1)
    sleep = RecordingSleep()
    checks = []

    async def is_cancelled():
        checks.append(True)
        return len(checks) >= 2

    with pytest.raises(PollCancelled):
        await Poller(source, sleep=sleep).wait_for_completion(HANDLE, is_cancelled=is_cancelled)

    assert source.calls == 2
    assert len(sleep.delays) == 1


async def test_cancel_check_not_consulted_once_resolved():
    async def is_cancelled():
        raise AssertionError("should not be called")

    result = await Poller(ScriptedSource(3), sleep=RecordingSleep()).wait_for_completion(
        HANDLE, is_cancelled=is_cancelled
    )
    assert result.accepted
