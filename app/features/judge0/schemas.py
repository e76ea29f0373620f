from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Judge0StatusId(IntEnum):
    IN_QUEUE = 1
    PROCESSING = 2
    ACCEPTED = 3
    WRONG_ANSWER = 4
    TIME_LIMIT_EXCEEDED = 5
    COMPILATION_ERROR = 6
    RUNTIME_ERROR = 7
    INTERNAL_ERROR = 8
    EXCEEDED_WALL_TIME_LIMIT = 9
    MEMORY_LIMIT_EXCEEDED = 10
    RUNTIME_SIGNAL = 11
    RUNTIME_ERROR_NON_ZERO_EXIT = 12


STATUS_DESCRIPTIONS: Dict[int, str] = {
    Judge0StatusId.IN_QUEUE: "In Queue",
    Judge0StatusId.PROCESSING: "Processing",
    Judge0StatusId.ACCEPTED: "Accepted",
    Judge0StatusId.WRONG_ANSWER: "Wrong Answer",
    Judge0StatusId.TIME_LIMIT_EXCEEDED: "Time Limit Exceeded",
    Judge0StatusId.COMPILATION_ERROR: "Compilation Error",
    Judge0StatusId.RUNTIME_ERROR: "Runtime Error",
    Judge0StatusId.INTERNAL_ERROR: "Internal Error",
    Judge0StatusId.EXCEEDED_WALL_TIME_LIMIT: "Wall Time Limit Exceeded",
    Judge0StatusId.MEMORY_LIMIT_EXCEEDED: "Memory Limit Exceeded",
    Judge0StatusId.RUNTIME_SIGNAL: "Runtime Signal",
    Judge0StatusId.RUNTIME_ERROR_NON_ZERO_EXIT: "Runtime Error (Non-zero Exit)",
}

_PENDING_STATUSES = frozenset({Judge0StatusId.IN_QUEUE, Judge0StatusId.PROCESSING})


def describe_status(status_id: Optional[int]) -> str:
    if status_id is None:
        return "Unknown Status"
    return STATUS_DESCRIPTIONS.get(status_id, "Unknown Status")


def is_terminal(status_id: Optional[int]) -> bool:
    """Terminal iff neither queued nor processing."""
    return status_id is not None and status_id not in _PENDING_STATUSES


class ExecutionRequest(BaseModel):
    """One unit of work for Judge0. Required fields are checked by the client."""
    model_config = ConfigDict(frozen=True)

    language_id: Optional[int] = None
    source_code: Optional[str] = None
    stdin: str = ""
    expected_output: str = ""
    cpu_time_limit: Optional[str] = None
    memory_limit: Optional[str] = None
    wall_time_limit: Optional[str] = None

    @field_validator("cpu_time_limit", "memory_limit", "wall_time_limit", mode="before")
    @classmethod
    def _stringify_limit(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)


class ExecutionHandle(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class ExecutionResult(BaseModel):
    token: Optional[str] = None
    status_id: Optional[int] = None
    status_description: str = ""
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None
    time: Optional[str] = None
    memory: Optional[int] = None

    @classmethod
    def from_judge0(cls, payload: Dict[str, Any], token: Optional[str] = None) -> "ExecutionResult":
        """Build from a raw Judge0 body (``status`` may be a dict or flattened)."""
        status = payload.get("status")
        status_id = payload.get("status_id")
        description = payload.get("status_description")
        if isinstance(status, dict):
            status_id = status.get("id", status_id)
            description = status.get("description") or description
        try:
            status_id = int(status_id) if status_id is not None else None
        except (TypeError, ValueError):
            status_id = None
        raw_time = payload.get("time")
        return cls(
            token=payload.get("token") or token,
            status_id=status_id,
            status_description=description or describe_status(status_id),
            stdout=payload.get("stdout"),
            stderr=payload.get("stderr"),
            compile_output=payload.get("compile_output"),
            message=payload.get("message"),
            time=str(raw_time) if raw_time is not None else None,
            memory=payload.get("memory"),
        )

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status_id)

    @property
    def accepted(self) -> bool:
        return self.status_id == Judge0StatusId.ACCEPTED

    @property
    def runtime_ms(self) -> float:
        if not self.time:
            return 0.0
        try:
            return float(self.time) * 1000.0
        except ValueError:
            return 0.0


class LanguageInfo(BaseModel):
    id: int
    key: str
    name: str
    extension: str


class Judge0Status(BaseModel):
    id: int
    description: str


class CodeSubmissionCreate(BaseModel):
    """Raw pass-through body. ``language`` (name) wins over ``language_id`` when both are set."""
    source_code: str
    language: Optional[str] = None
    language_id: Optional[int] = None
    stdin: str = ""
    expected_output: str = ""
