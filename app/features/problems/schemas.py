from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class TestCaseKind(str, Enum):
    __test__ = False

    SAMPLE = "sample"
    HIDDEN = "hidden"


class TestCaseSchema(BaseModel):
    """A problem's test case. Sample cases are shown before submission; hidden ones never are."""
    __test__ = False
    model_config = ConfigDict(frozen=True)

    id: str
    kind: TestCaseKind
    input: str = ""
    expected_output: str = ""
    order: int = 0

    @field_validator("kind", mode="before")
    @classmethod
    def _normalise_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def is_sample(self) -> bool:
        return self.kind is TestCaseKind.SAMPLE
