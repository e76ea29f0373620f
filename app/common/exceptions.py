"""Exception hierarchy for the judging core.

All exceptions inherit from JudgeError.

Hierarchy:
    JudgeError (base)
    ├── InvalidRequest        ← missing code/language, rejected before any network call
    ├── ServiceUnavailable    ← Judge0 unreachable or answered non-2xx
    ├── SubmissionNotFound    ← token unknown to Judge0
    ├── ExecutionTimeout      ← polling exhausted max attempts
    ├── PollCancelled         ← caller went away while polling
    ├── PersistenceFailure    ← Supabase write failed
    ├── ProblemNotFound
    └── NoTestCases
"""

from __future__ import annotations

from typing import Any


class JudgeError(Exception):
    """Base exception for judging errors with structured context.

    Attributes:
        message: Human-readable error message
        context: Dictionary of structured error context for logging
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InvalidRequest(JudgeError):
    """Execution request is missing required fields."""


class ServiceUnavailable(JudgeError):
    """Execution service could not be reached or returned an error status."""


class SubmissionNotFound(JudgeError):
    """Execution service does not know the token."""


class ExecutionTimeout(JudgeError):
    """Submission did not reach a terminal state within the polling budget."""


class PollCancelled(JudgeError):
    """Polling abandoned because the initiating request was cancelled."""


class PersistenceFailure(JudgeError):
    """Recording a submission or streak update failed."""


class ProblemNotFound(JudgeError):
    pass


class NoTestCases(JudgeError):
    pass


__all__ = [
    "JudgeError",
    "InvalidRequest",
    "ServiceUnavailable",
    "SubmissionNotFound",
    "ExecutionTimeout",
    "PollCancelled",
    "PersistenceFailure",
    "ProblemNotFound",
    "NoTestCases",
    "http_status_for",
]


_HTTP_STATUS = {
    InvalidRequest: 400,
    ProblemNotFound: 404,
    SubmissionNotFound: 404,
    NoTestCases: 422,
    PollCancelled: 499,
    PersistenceFailure: 500,
    ServiceUnavailable: 502,
    ExecutionTimeout: 504,
}


def http_status_for(exc: JudgeError) -> int:
    for cls in type(exc).__mro__:
        if cls in _HTTP_STATUS:
            return _HTTP_STATUS[cls]
    return 500
