"""Helpers for driving ASGI middleware directly."""

import json

import pytest


class ASGICall:
    """Result of sending one HTTP request through an ASGI app."""

    def __init__(self, messages: list[dict]) -> None:
        self.messages = messages

    @property
    def start(self) -> dict:
        return next(m for m in self.messages if m["type"] == "http.response.start")

    @property
    def status(self) -> int:
        return self.start["status"]

    @property
    def headers(self) -> dict[str, str]:
        return {k.decode("latin-1"): v.decode("latin-1") for k, v in self.start["headers"]}

    @property
    def body(self) -> bytes:
        return b"".join(m.get("body", b"") for m in self.messages if m["type"] == "http.response.body")

    def json(self):
        return json.loads(self.body)


def make_scope(path: str = "/", method: str = "GET", headers: dict[str, str] | None = None) -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "client": ("127.0.0.1", 50000),
        "server": ("testserver", 80),
    }


@pytest.fixture
def call_asgi():
    async def _call(app, path="/", method="GET", headers=None, messages=None) -> ASGICall:
        sent = [] if messages is None else messages

        async def receive():
            return {"type": "http.request", "body": b"", "more_body": False}

        async def send(message):
            sent.append(message)

        await app(make_scope(path, method, headers), receive, send)
        return ASGICall(sent)

    return _call
