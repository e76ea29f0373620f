"""Runs a test suite against Judge0 and reduces it to one verdict."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from app.common.exceptions import InvalidRequest, JudgeError, PollCancelled
from app.core.config import Settings, get_settings
from app.features.judge0.languages import resolve_language_id
from app.features.judge0.poller import CancelCheck, Poller
from app.features.judge0.schemas import ExecutionRequest
from app.features.judge0.service import Judge0Service
from app.features.judging.schemas import MAX_SCORE, OverallResult, SubmissionVerdict, TestCaseOutcome
from app.features.problems.schemas import TestCaseSchema

logger = logging.getLogger("judging.aggregator")


def reduce_outcomes(outcomes: Sequence[TestCaseOutcome]) -> SubmissionVerdict:
    """Accepted only if every outcome passed; binary score; runtimes are summed."""
    all_passed = bool(outcomes) and all(outcome.passed for outcome in outcomes)
    return SubmissionVerdict(
        overall_result=OverallResult.ACCEPTED if all_passed else OverallResult.WRONG_ANSWER,
        aggregate_score=MAX_SCORE if all_passed else 0,
        total_runtime_ms=sum(outcome.runtime_ms for outcome in outcomes),
        outcomes=list(outcomes),
    )


def error_verdict(message: str, outcomes: Sequence[TestCaseOutcome] = ()) -> SubmissionVerdict:
    return SubmissionVerdict(
        overall_result=OverallResult.ERROR,
        aggregate_score=0,
        total_runtime_ms=sum(outcome.runtime_ms for outcome in outcomes),
        outcomes=list(outcomes),
        message=message,
    )


class VerdictAggregator:
    def __init__(
        self,
        client: Judge0Service,
        poller: Poller,
        *,
        settings: Optional[Settings] = None,
        parallel: Optional[bool] = None,
        concurrency: Optional[int] = None,
    ):
        settings = settings or get_settings()
        self.client = client
        self.poller = poller
        self.parallel = settings.judge_parallel_test_cases if parallel is None else parallel
        self.concurrency = max(1, concurrency or settings.judge_test_case_concurrency)

    async def _run_case(
        self,
        code: str,
        language_id: int,
        test_case: TestCaseSchema,
        is_cancelled: Optional[CancelCheck],
    ) -> TestCaseOutcome:
        request = ExecutionRequest(
            language_id=language_id,
            source_code=code,
            stdin=test_case.input,
            expected_output=test_case.expected_output,
        )
        try:
            handle = await self.client.submit(request)
            result = await self.poller.wait_for_completion(handle, is_cancelled=is_cancelled)
        except PollCancelled:
            raise
        except JudgeError as exc:
            logger.warning("Test case %s failed: %s", test_case.id, exc.message)
            return TestCaseOutcome(
                test_case_id=test_case.id,
                order=test_case.order,
                passed=False,
                actual_output=exc.message,
                runtime_ms=0.0,
                error=type(exc).__name__,
            )
        return TestCaseOutcome(
            test_case_id=test_case.id,
            order=test_case.order,
            passed=result.accepted,
            actual_output=result.stdout or "",
            runtime_ms=result.runtime_ms,
            status_id=result.status_id,
            status_description=result.status_description,
        )

    async def _run_sequential(self, code, language_id, cases, is_cancelled) -> List[TestCaseOutcome]:
        outcomes: List[TestCaseOutcome] = []
        for test_case in cases:
            outcomes.append(await self._run_case(code, language_id, test_case, is_cancelled))
        return outcomes

    async def _run_parallel(self, code, language_id, cases, is_cancelled) -> List[TestCaseOutcome]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _bounded(test_case: TestCaseSchema) -> TestCaseOutcome:
            async with semaphore:
                return await self._run_case(code, language_id, test_case, is_cancelled)

        tasks = [asyncio.ensure_future(_bounded(case)) for case in cases]
        try:
            # gather keeps input order, whatever order the tasks finish in
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def run_test_suite(
        self,
        code: str,
        language: str,
        test_cases: Sequence[TestCaseSchema],
        *,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> SubmissionVerdict:
        """Execute every test case and aggregate.

        A failing case never short-circuits the rest. Per-case transport errors
        become failed outcomes; anything that breaks the suite as a whole yields
        an ``error`` verdict. Bad input raises InvalidRequest before any call.
        """
        if not code or not code.strip():
            raise InvalidRequest("source code is required")
        language_id = resolve_language_id(language)
        if not test_cases:
            return error_verdict("No test cases available for this problem")

        ordered = sorted(test_cases, key=lambda case: case.order)
        runner = self._run_parallel if self.parallel and len(ordered) > 1 else self._run_sequential
        try:
            outcomes = await runner(code, language_id, ordered, is_cancelled)
        except PollCancelled:
            raise
        except Exception as exc:
            logger.exception("Test suite aborted language=%s cases=%d", language, len(ordered))
            return error_verdict(str(exc) or type(exc).__name__)

        verdict = reduce_outcomes(outcomes)
        logger.info(
            "suite.done language=%s cases=%d passed=%d result=%s runtime_ms=%.1f",
            language,
            len(outcomes),
            sum(1 for outcome in outcomes if outcome.passed),
            verdict.overall_result.value,
            verdict.total_runtime_ms,
        )
        return verdict


__all__ = ["VerdictAggregator", "reduce_outcomes", "error_verdict"]
