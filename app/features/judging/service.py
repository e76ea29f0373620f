from __future__ import annotations

import logging
from typing import Optional

from app.common.exceptions import InvalidRequest, NoTestCases, ProblemNotFound
from app.core.config import Settings, get_settings
from app.features.judge0.languages import get_language
from app.features.judge0.poller import CancelCheck, Poller
from app.features.judge0.service import Judge0Service, get_judge0_service
from app.features.judging.aggregator import VerdictAggregator
from app.features.judging.formatter import format_run, format_verdict
from app.features.judging.schemas import JudgeResponse
from app.features.problems.repository import ProblemsRepository, problems_repository
from app.features.problems.schemas import TestCaseKind
from app.features.submissions.service import SubmissionRecorder, submission_recorder

logger = logging.getLogger("judging.service")


class JudgeService:
    """The run and submit actions exposed to the page layer.

    Callers supply an already authenticated user id; no auth happens here.
    """

    def __init__(
        self,
        aggregator: VerdictAggregator,
        problems: ProblemsRepository = problems_repository,
        recorder: SubmissionRecorder = submission_recorder,
    ):
        self.aggregator = aggregator
        self.problems = problems
        self.recorder = recorder

    @staticmethod
    def _validate(code: str, language: str) -> str:
        if not code or not code.strip():
            raise InvalidRequest("source code is required")
        lang = get_language(language)
        if lang is None:
            raise InvalidRequest(f"Unsupported language: {language!r}", {"language": language})
        return lang.key

    async def _require_problem(self, problem_id: str) -> None:
        if not await self.problems.problem_exists(problem_id):
            raise ProblemNotFound("Problem not found", {"problem_id": problem_id})

    async def run(
        self,
        code: str,
        language: str,
        problem_id: str,
        *,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> JudgeResponse:
        """Execute against the first sample case only. Nothing is persisted."""
        language_key = self._validate(code, language)
        await self._require_problem(problem_id)
        samples = await self.problems.list_test_cases(problem_id, kind=TestCaseKind.SAMPLE)
        if not samples:
            raise NoTestCases("No sample test cases available for this problem", {"problem_id": problem_id})
        sample = samples[0]
        verdict = await self.aggregator.run_test_suite(code, language_key, [sample], is_cancelled=is_cancelled)
        logger.info("run.done problem_id=%s language=%s result=%s", problem_id, language_key, verdict.overall_result.value)
        return format_run(verdict, sample)

    async def submit(self, code: str, language: str, problem_id: str, user_id: str) -> JudgeResponse:
        """Execute every test case, record the submission whatever the verdict."""
        language_key = self._validate(code, language)
        await self._require_problem(problem_id)
        test_cases = await self.problems.list_test_cases(problem_id)
        if not test_cases:
            raise NoTestCases("No test cases available for this problem", {"problem_id": problem_id})
        verdict = await self.aggregator.run_test_suite(code, language_key, test_cases)
        submission = await self.recorder.record_submission(user_id, problem_id, language_key, code, verdict)
        return format_verdict(verdict, test_cases, submission_id=submission.id)


def build_judge_service(
    settings: Optional[Settings] = None,
    client: Optional[Judge0Service] = None,
) -> JudgeService:
    settings = settings or get_settings()
    client = client or get_judge0_service()
    poller = Poller(
        client,
        max_attempts=settings.judge_poll_max_attempts,
        interval_ms=settings.judge_poll_interval_ms,
    )
    return JudgeService(VerdictAggregator(client, poller, settings=settings))


_judge_service: Optional[JudgeService] = None


def get_judge_service() -> JudgeService:
    global _judge_service
    if _judge_service is None:
        _judge_service = build_judge_service()
    return _judge_service


__all__ = ["JudgeService", "build_judge_service", "get_judge_service"]
