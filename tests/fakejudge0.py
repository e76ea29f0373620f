"""Scripted stand-in for the Judge0 client."""

import asyncio

from app.features.judge0.schemas import ExecutionHandle, ExecutionResult


async def no_sleep(seconds):
    return None


class FakeJudge0:
    """Echo judge: a case passes when stdin equals expected output.

    ``script`` maps stdin to a status id (kept pending forever when 2), or an
    exception raised on submit; ``delays`` maps stdin to a fetch latency.
    """

    def __init__(self, script=None, delays=None, runtime="0.010"):
        self.script = script or {}
        self.delays = delays or {}
        self.runtime = runtime
        self.submitted = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def submit(self, request):
        self.submitted.append(request)
        outcome = self.script.get(request.stdin)
        if isinstance(outcome, Exception):
            raise outcome
        return ExecutionHandle(token=f"{request.stdin}|{request.expected_output}")

    async def fetch_result(self, handle):
        stdin, expected = handle.token.split("|")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(stdin, 0))
        finally:
            self.in_flight -= 1
        status_id = self.script.get(stdin)
        if status_id is None:
            status_id = 3 if stdin == expected else 4
        return ExecutionResult.from_judge0(
            {"status": {"id": status_id}, "stdout": stdin, "time": self.runtime},
            token=handle.token,
        )
