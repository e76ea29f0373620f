import json

import httpx
import pytest

from app.common.exceptions import InvalidRequest, ServiceUnavailable, SubmissionNotFound
from app.core.config import Settings
from app.features.judge0.schemas import ExecutionHandle, ExecutionRequest
from app.features.judge0.service import Judge0Service

pytestmark = pytest.mark.anyio


def _settings(**overrides):
    settings = Settings()
    settings.judge0_api_url = "http://judge0.test"
    settings.judge0_api_key = ""
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


def _service(handler, **overrides):
    service = Judge0Service(_settings(**overrides), transport=httpx.MockTransport(handler))
    service.retry_backoff_s = 0
    return service


async def test_submit_posts_payload_and_returns_token():
    captured = {}

    def handler(request: httpx.Request):
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"token": "tok-1"})

    service = _service(handler)
    handle = await service.submit(ExecutionRequest(language_id=71, source_code="print(1)", stdin="5", expected_output="1"))

    assert handle.token == "tok-1"
    assert captured["url"] == "http://judge0.test/submissions?base64_encoded=false&wait=false"
    body = captured["body"]
    assert body["language_id"] == 71
    assert body["stdin"] == "5"
    assert body["expected_output"] == "1"
    assert body["cpu_time_limit"] == "2.0"
    assert body["memory_limit"] == "128000"
    assert body["wall_time_limit"] == "5.0"


async def test_submit_uses_request_limits_over_defaults():
    captured = {}

    def handler(request: httpx.Request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"token": "tok"})

    service = _service(handler)
    await service.submit(ExecutionRequest(language_id=71, source_code="x", cpu_time_limit=1, memory_limit=64000))

    assert captured["body"]["cpu_time_limit"] == "1"
    assert captured["body"]["memory_limit"] == "64000"


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"language_id": None, "source_code": "print(1)"},
        {"language_id": 71, "source_code": None},
        {"language_id": 71, "source_code": "   "},
    ],
)
async def test_submit_rejects_incomplete_request_without_network(request_kwargs):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={"token": "never"})

    with pytest.raises(InvalidRequest):
        await _service(handler).submit(ExecutionRequest(**request_kwargs))
    assert calls == []


async def test_submit_non_2xx_is_service_unavailable():
    service = _service(lambda request: httpx.Response(503, text="overloaded"))
    with pytest.raises(ServiceUnavailable) as exc:
        await service.submit(ExecutionRequest(language_id=71, source_code="x"))
    assert exc.value.context["status_code"] == 503


async def test_submit_without_token_is_service_unavailable():
    service = _service(lambda request: httpx.Response(201, json={}))
    with pytest.raises(ServiceUnavailable):
        await service.submit(ExecutionRequest(language_id=71, source_code="x"))


async def test_connect_errors_are_retried_then_surface():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("refused", request=request)

    service = _service(handler)
    with pytest.raises(ServiceUnavailable) as exc:
        await service.submit(ExecutionRequest(language_id=71, source_code="x"))
    assert len(attempts) == service.connect_retries
    assert exc.value.context["attempts"] == service.connect_retries


async def test_zero_retries_still_makes_one_attempt():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("refused", request=request)

    service = Judge0Service(_settings(), transport=httpx.MockTransport(handler), connect_retries=0)
    with pytest.raises(ServiceUnavailable) as exc:
        await service.submit(ExecutionRequest(language_id=71, source_code="x"))
    assert service.connect_retries == 1
    assert len(attempts) == 1
    assert exc.value.context["attempts"] == 1


async def test_connect_error_recovers_on_retry():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(201, json={"token": "tok"})

    handle = await _service(handler).submit(ExecutionRequest(language_id=71, source_code="x"))
    assert handle.token == "tok"
    assert len(attempts) == 2


async def test_read_timeout_is_service_unavailable_without_retry():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ServiceUnavailable):
        await _service(handler).fetch_result(ExecutionHandle(token="tok"))
    assert len(attempts) == 1


async def test_fetch_result_parses_nested_status():
    def handler(request: httpx.Request):
        assert request.url.path == "/submissions/tok"
        assert request.url.params["base64_encoded"] == "false"
        return httpx.Response(
            200,
            json={
                "stdout": "3\n",
                "time": "0.012",
                "memory": 3200,
                "status": {"id": 3, "description": "Accepted"},
            },
        )

    result = await _service(handler).fetch_result(ExecutionHandle(token="tok"))

    assert result.token == "tok"
    assert result.status_id == 3
    assert result.status_description == "Accepted"
    assert result.stdout == "3\n"
    assert result.accepted is True
    assert result.is_terminal is True
    assert result.runtime_ms == pytest.approx(12.0)


async def test_fetch_result_unknown_status_gets_fallback_description():
    service = _service(lambda request: httpx.Response(200, json={"status": {"id": 42}}))
    result = await service.fetch_result(ExecutionHandle(token="tok"))
    assert result.status_description == "Unknown Status"


async def test_fetch_result_404_is_not_found():
    service = _service(lambda request: httpx.Response(404, json={"error": "not found"}))
    with pytest.raises(SubmissionNotFound):
        await service.fetch_result(ExecutionHandle(token="missing"))


async def test_fetch_result_500_is_service_unavailable():
    service = _service(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(ServiceUnavailable):
        await service.fetch_result(ExecutionHandle(token="tok"))


async def test_rapidapi_headers_only_when_key_configured():
    seen = []

    def handler(request: httpx.Request):
        seen.append(dict(request.headers))
        return httpx.Response(201, json={"token": "tok"})

    await _service(handler).submit(ExecutionRequest(language_id=71, source_code="x"))
    await _service(handler, judge0_api_key="secret", judge0_host="judge0.example").submit(
        ExecutionRequest(language_id=71, source_code="x")
    )

    assert "x-rapidapi-key" not in seen[0]
    assert seen[1]["x-rapidapi-key"] == "secret"
    assert seen[1]["x-rapidapi-host"] == "judge0.example"


async def test_missing_base_url_is_service_unavailable():
    service = _service(lambda request: httpx.Response(201, json={"token": "tok"}), judge0_api_url="")
    with pytest.raises(ServiceUnavailable):
        await service.submit(ExecutionRequest(language_id=71, source_code="x"))
