from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from postgrest.exceptions import APIError

from app.db.supabase import get_supabase, is_invalid_input, timed_execute
from app.features.problems.schemas import TestCaseKind, TestCaseSchema

logger = logging.getLogger("problems.repository")


class ProblemsRepository:
    """Read-only access to problems and their test cases (owned by the problem feature).

    A problem id Postgres cannot parse names no problem, so it reads as
    missing instead of surfacing the driver error.
    """

    _PROBLEM_TABLE = "problems"
    _TEST_CASE_TABLE = "test_cases"

    def __init__(self, client_getter: Callable[[], Awaitable[Any]] = get_supabase):
        self._client_getter = client_getter

    async def problem_exists(self, problem_id: str) -> bool:
        client = await self._client_getter()
        try:
            resp = await timed_execute(
                client.table(self._PROBLEM_TABLE).select("id").eq("id", problem_id).limit(1).execute(),
                op="problems.select_by_id",
            )
        except APIError as exc:
            if is_invalid_input(exc):
                logger.info("malformed problem_id=%r", problem_id)
                return False
            raise
        return bool(resp.data)

    async def list_test_cases(self, problem_id: str, *, kind: Optional[TestCaseKind] = None) -> List[TestCaseSchema]:
        client = await self._client_getter()
        query = client.table(self._TEST_CASE_TABLE).select("*").eq("problem_id", problem_id)
        if kind is not None:
            query = query.eq("kind", kind.value.upper())
        try:
            resp = await timed_execute(query.order("order").execute(), op="test_cases.select_by_problem")
        except APIError as exc:
            if is_invalid_input(exc):
                return []
            raise
        rows: List[Dict[str, Any]] = resp.data or []
        cases = [
            TestCaseSchema(
                id=str(row.get("id")),
                kind=row.get("kind") or TestCaseKind.HIDDEN,
                input=row.get("input") or "",
                expected_output=row.get("expected_output") or "",
                order=int(row.get("order") or 0),
            )
            for row in rows
        ]
        # stable sort: ties keep insertion order
        cases.sort(key=lambda case: case.order)
        logger.debug("problem_id=%s test_cases=%d", problem_id, len(cases))
        return cases


problems_repository = ProblemsRepository()

__all__ = ["problems_repository", "ProblemsRepository"]
