import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from app.common.exceptions import InvalidRequest, ServiceUnavailable, SubmissionNotFound
from app.core.config import Settings, get_settings
from .schemas import ExecutionHandle, ExecutionRequest, ExecutionResult


def _mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    masked = {}
    for k, v in (headers or {}).items():
        if k.lower() in ("x-rapidapi-key",):
            masked[k] = "[REDACTED]"
        else:
            masked[k] = v
    return masked


class Judge0Service:
    """Thin async client over the Judge0 REST API.

    Every call is a network round trip; nothing is cached locally so each poll
    re-queries upstream.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connect_retries: int = 3,
    ):
        self.settings = settings or get_settings()
        base = (self.settings.judge0_api_url or "").strip()
        if base and not base.startswith(("http://", "https://")):
            # assume http if scheme omitted
            base = "http://" + base
        self.base_url = base.rstrip("/")
        self.headers = {"Content-Type": "application/json"}
        if self.settings.judge0_api_key:
            host = self.settings.judge0_host or urlparse(self.base_url).hostname or ""
            self.headers.update({
                "X-RapidAPI-Key": self.settings.judge0_api_key,
                "X-RapidAPI-Host": host,
            })
        self._transport = transport
        self._logger = logging.getLogger("judge0.service")
        # at least one attempt is always made
        self.connect_retries = max(1, connect_retries)
        self.retry_backoff_s = 0.5

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Perform one HTTP request against Judge0.

        Connection failures are retried a few times with linear backoff, then
        surfaced as ServiceUnavailable, as are read timeouts and other transport
        errors.
        """
        if not self.base_url:
            raise ServiceUnavailable("Judge0 base URL is not configured (JUDGE0_API_URL).")
        if not path.startswith("/"):
            path = "/" + path
        url = self.base_url + path
        self._logger.debug("Judge0 request: %s %s headers=%s", method, url, _mask_headers(self.headers))
        timeout = httpx.Timeout(connect=3.0, read=self.settings.judge0_timeout_s, write=5.0, pool=5.0)
        attempt = 0
        while True:
            attempt += 1
            try:
                async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                    return await client.request(method, url, headers=self.headers, **kwargs)
            except (httpx.ConnectTimeout, httpx.ConnectError) as e:
                if attempt < self.connect_retries:
                    await asyncio.sleep(self.retry_backoff_s * attempt)
                    continue
                raise ServiceUnavailable(
                    f"Failed to connect to Judge0 at {self.base_url}: {e}",
                    {"url": url, "attempts": attempt},
                ) from e
            except httpx.HTTPError as e:
                raise ServiceUnavailable(f"Judge0 request failed: {e}", {"url": url}) from e

    def _build_payload(self, request: ExecutionRequest) -> Dict[str, Any]:
        return {
            "language_id": int(request.language_id),
            "source_code": request.source_code,
            "stdin": request.stdin or "",
            "expected_output": request.expected_output or "",
            "cpu_time_limit": request.cpu_time_limit or self.settings.judge0_cpu_time_limit,
            "memory_limit": request.memory_limit or self.settings.judge0_memory_limit,
            "wall_time_limit": request.wall_time_limit or self.settings.judge0_wall_time_limit,
        }

    async def submit(self, request: ExecutionRequest) -> ExecutionHandle:
        if not request.language_id or not request.source_code or not request.source_code.strip():
            raise InvalidRequest("language_id and source_code are required")
        response = await self._request(
            "POST",
            "/submissions?base64_encoded=false&wait=false",
            json=self._build_payload(request),
        )
        if not response.is_success:
            self._logger.error("Judge0 submit failed: %s %s", response.status_code, response.text[:300])
            raise ServiceUnavailable(
                f"Judge0 API error: {response.status_code} - {response.text[:200]}",
                {"status_code": response.status_code},
            )
        try:
            token = response.json().get("token")
        except ValueError as e:
            raise ServiceUnavailable(f"Failed to parse Judge0 submit response: {e}") from e
        if not token:
            raise ServiceUnavailable("Judge0 returned an empty token")
        self._logger.debug("Judge0 accepted submission token=%s language_id=%s", token, request.language_id)
        return ExecutionHandle(token=token)

    async def fetch_result(self, handle: ExecutionHandle) -> ExecutionResult:
        response = await self._request("GET", f"/submissions/{handle.token}?base64_encoded=false")
        if response.status_code == 404:
            raise SubmissionNotFound(f"Unknown Judge0 token: {handle.token}", {"token": handle.token})
        if not response.is_success:
            raise ServiceUnavailable(
                f"Failed to get result: {response.status_code} body={response.text[:200]}",
                {"status_code": response.status_code, "token": handle.token},
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise ServiceUnavailable(f"Failed to parse Judge0 result: {e}") from e
        return ExecutionResult.from_judge0(payload, token=handle.token)


_default_service: Optional[Judge0Service] = None


def get_judge0_service() -> Judge0Service:
    """FastAPI dependency provider; components take the client by constructor."""
    global _default_service
    if _default_service is None:
        _default_service = Judge0Service()
    return _default_service
