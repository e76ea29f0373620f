"""Shapes verdicts for the UI: four public states, raw Judge0 ids never leave here."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from app.features.judge0.schemas import ExecutionResult, Judge0StatusId, is_terminal
from app.features.judging.schemas import (
    JudgeResponse,
    OverallResult,
    PublicStatus,
    SubmissionVerdict,
    TestCaseOutcome,
    TestCaseResult,
)
from app.features.problems.schemas import TestCaseSchema

_OVERALL_TO_PUBLIC: Dict[OverallResult, PublicStatus] = {
    OverallResult.ACCEPTED: PublicStatus.ACCEPTED,
    OverallResult.WRONG_ANSWER: PublicStatus.WRONG_ANSWER,
    OverallResult.ERROR: PublicStatus.ERROR,
}


def public_status(status_id: Optional[int]) -> PublicStatus:
    if status_id is not None and not is_terminal(status_id):
        return PublicStatus.RUNNING
    if status_id == Judge0StatusId.ACCEPTED:
        return PublicStatus.ACCEPTED
    if status_id == Judge0StatusId.WRONG_ANSWER:
        return PublicStatus.WRONG_ANSWER
    return PublicStatus.ERROR


def _row(outcome: TestCaseOutcome, test_case: Optional[TestCaseSchema], reveal_hidden: bool) -> TestCaseResult:
    if test_case is not None and not test_case.is_sample and not reveal_hidden:
        # stdout is the user's own; input and expected stay private
        return TestCaseResult(passed=outcome.passed, output=outcome.actual_output, runtime=round(outcome.runtime_ms))
    return TestCaseResult(
        passed=outcome.passed,
        input=test_case.input if test_case else "",
        output=outcome.actual_output,
        expected=test_case.expected_output if test_case else "",
        runtime=round(outcome.runtime_ms),
    )


def format_verdict(
    verdict: SubmissionVerdict,
    test_cases: Sequence[TestCaseSchema],
    *,
    submission_id: Optional[str] = None,
    reveal_hidden: bool = False,
) -> JudgeResponse:
    """Full-suite response. Hidden cases only report pass/fail unless ``reveal_hidden``."""
    by_id = {case.id: case for case in test_cases}
    rows = [_row(outcome, by_id.get(outcome.test_case_id), reveal_hidden) for outcome in verdict.outcomes]
    if not rows and verdict.message:
        return format_error(verdict.message)
    return JudgeResponse(
        status=_OVERALL_TO_PUBLIC[verdict.overall_result],
        runtime=round(verdict.total_runtime_ms),
        score=verdict.aggregate_score,
        message=verdict.message,
        submission_id=submission_id,
        test_case_results=rows,
    )


def format_run(verdict: SubmissionVerdict, test_case: TestCaseSchema) -> JudgeResponse:
    """Single sample run: the public state follows that one execution's status."""
    if not verdict.outcomes:
        return format_error(verdict.message or "Execution failed", test_case)
    outcome = verdict.outcomes[0]
    if outcome.error:
        return format_error(outcome.actual_output, test_case)
    return JudgeResponse(
        status=public_status(outcome.status_id),
        runtime=outcome.runtime_ms,
        test_case_results=[_row(outcome, test_case, reveal_hidden=True)],
    )


def format_snapshot(result: ExecutionResult, test_case: Optional[TestCaseSchema] = None) -> JudgeResponse:
    """In-flight (or just finished) poll snapshot; ``running`` is never persisted."""
    status = public_status(result.status_id)
    return JudgeResponse(
        status=status,
        runtime=result.runtime_ms,
        test_case_results=[
            TestCaseResult(
                passed=result.accepted,
                input=test_case.input if test_case else "",
                output=result.stdout or "",
                expected=test_case.expected_output if test_case else "",
            )
        ],
    )


def format_error(message: str, test_case: Optional[TestCaseSchema] = None) -> JudgeResponse:
    return JudgeResponse(
        status=PublicStatus.ERROR,
        runtime=0,
        message=message,
        test_case_results=[
            TestCaseResult(
                passed=False,
                input=test_case.input if test_case else "",
                output=message,
                expected=test_case.expected_output if test_case else "",
            )
        ],
    )


__all__ = ["public_status", "format_verdict", "format_run", "format_snapshot", "format_error"]
