"""Bounded retry-until-terminal loop over Judge0 results."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional, Protocol

from app.common.exceptions import ExecutionTimeout, PollCancelled
from app.features.judge0.schemas import ExecutionHandle, ExecutionResult

logger = logging.getLogger("judge0.poller")

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_MS = 1000

Sleep = Callable[[float], Awaitable[None]]
CancelCheck = Callable[[], Awaitable[bool]]


class ResultSource(Protocol):
    async def fetch_result(self, handle: ExecutionHandle) -> ExecutionResult: ...


class PollState(str, enum.Enum):
    POLLING = "polling"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class Poller:
    """Fixed-interval poller.

    ``sleep`` must yield the event loop (default ``asyncio.sleep``); tests pass
    a recording coroutine instead. Errors raised by the result source propagate
    unchanged.
    """

    def __init__(
        self,
        source: ResultSource,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        sleep: Optional[Sleep] = None,
    ):
        self.source = source
        self.max_attempts = max(1, int(max_attempts))
        self.interval_ms = max(0, int(interval_ms))
        self._sleep: Sleep = sleep or asyncio.sleep

    async def wait_for_completion(
        self,
        handle: ExecutionHandle,
        max_attempts: Optional[int] = None,
        interval_ms: Optional[int] = None,
        *,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> ExecutionResult:
        attempts_allowed = self.max_attempts if max_attempts is None else max(1, int(max_attempts))
        interval_s = (self.interval_ms if interval_ms is None else max(0, int(interval_ms))) / 1000.0

        state = PollState.POLLING
        attempt = 0
        result: Optional[ExecutionResult] = None
        while state is PollState.POLLING:
            result = await self.source.fetch_result(handle)
            attempt += 1
            if result.is_terminal:
                state = PollState.RESOLVED
            elif attempt >= attempts_allowed:
                state = PollState.TIMED_OUT
            elif is_cancelled is not None and await is_cancelled():
                state = PollState.CANCELLED
            else:
                await self._sleep(interval_s)

        if state is PollState.RESOLVED:
            logger.debug("poll.resolved token=%s attempts=%d status_id=%s", handle.token, attempt, result.status_id)
            return result
        if state is PollState.CANCELLED:
            logger.info("poll.cancelled token=%s attempts=%d", handle.token, attempt)
            raise PollCancelled("Polling cancelled by caller", {"token": handle.token, "attempts": attempt})
        logger.warning("poll.timeout token=%s attempts=%d", handle.token, attempt)
        raise ExecutionTimeout(
            "Submission timeout: Maximum polling attempts reached",
            {"token": handle.token, "attempts": attempt},
        )


__all__ = ["Poller", "PollState", "DEFAULT_MAX_ATTEMPTS", "DEFAULT_INTERVAL_MS"]
