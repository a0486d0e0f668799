import pytest
from starlette.responses import Response
from structlog.testing import capture_logs

from usermanagement.infrastructure.api.middleware import AuditLoggingStage, RequestPipeline


async def no_content_app(scope, receive, send):
    await Response(status_code=204)(scope, receive, send)


def entries(logs, direction):
    return [entry for entry in logs if entry.get("direction") == direction]


@pytest.mark.asyncio
async def test_incoming_and_outgoing_entries(call_asgi):
    pipeline = RequestPipeline(no_content_app, [AuditLoggingStage()])

    with capture_logs() as logs:
        await call_asgi(pipeline, path="/api/users", method="DELETE")

    incoming = entries(logs, "incoming")
    outgoing = entries(logs, "outgoing")
    assert len(incoming) == 1
    assert len(outgoing) == 1
    assert incoming[0]["method"] == "DELETE"
    assert incoming[0]["path"] == "/api/users"
    assert outgoing[0]["status_code"] == 204


@pytest.mark.asyncio
async def test_sensitive_headers_are_dropped(call_asgi):
    """Authorization and cookie headers are removed, not masked."""
    pipeline = RequestPipeline(no_content_app, [AuditLoggingStage()])

    with capture_logs() as logs:
        await call_asgi(
            pipeline,
            headers={
                "Authorization": "Bearer xyz",
                "Cookie": "session=abc123",
                "X-Custom": "visible",
            },
        )

    headers = entries(logs, "incoming")[0]["headers"]
    assert "authorization" not in headers
    assert "cookie" not in headers
    assert headers["x-custom"] == "visible"
    assert "xyz" not in repr(logs)
    assert "abc123" not in repr(logs)


@pytest.mark.asyncio
async def test_excluded_headers_are_configurable(call_asgi):
    pipeline = RequestPipeline(no_content_app, [AuditLoggingStage(["X-Api-Key"])])

    with capture_logs() as logs:
        await call_asgi(pipeline, headers={"X-Api-Key": "k-123", "Accept": "application/json"})

    headers = entries(logs, "incoming")[0]["headers"]
    assert "x-api-key" not in headers
    assert headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(call_asgi):
    pipeline = RequestPipeline(no_content_app, [AuditLoggingStage()])

    result = await call_asgi(pipeline, headers={"X-Correlation-ID": "req-42"})

    assert result.headers["x-correlation-id"] == "req-42"


@pytest.mark.asyncio
async def test_correlation_id_is_generated(call_asgi):
    pipeline = RequestPipeline(no_content_app, [AuditLoggingStage()])

    result = await call_asgi(pipeline)

    assert result.headers["x-correlation-id"].startswith("cid_")


@pytest.mark.asyncio
async def test_outgoing_logged_when_downstream_fails(call_asgi):
    async def failing_app(scope, receive, send):
        raise RuntimeError("boom")

    pipeline = RequestPipeline(failing_app, [AuditLoggingStage()])

    with capture_logs() as logs:
        with pytest.raises(RuntimeError):
            await call_asgi(pipeline)

    outgoing = entries(logs, "outgoing")
    assert len(outgoing) == 1
    assert outgoing[0]["status_code"] is None
