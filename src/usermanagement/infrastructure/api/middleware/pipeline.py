"""Request pipeline composed from an ordered list of stages.

A single ASGI middleware runs every stage in order around the application.
Each stage receives the shared per-request ``PipelineContext`` and a
``call_next`` continuation; not calling it short-circuits the rest of the
chain. The context records whether the response has started, so no stage
ever writes over a response that is already on the wire.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from usermanagement.core.logging import clear_context


class PipelineContext:
    """Mutable per-request state threaded through every stage."""

    def __init__(self, scope: Scope, receive: Receive, send: Send) -> None:
        self.scope = scope
        self.receive = receive
        self._send = send
        self.request = Request(scope, receive)
        self.response_started = False
        self.status_code: int | None = None
        self.response_headers: dict[str, str] = {}

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.url.path

    async def send(self, message: Message) -> None:
        """Forward a message to the client, recording the response start."""
        if message["type"] == "http.response.start":
            self.response_started = True
            self.status_code = message["status"]
            if self.response_headers:
                message.setdefault("headers", [])
                headers = MutableHeaders(scope=message)
                for name, value in self.response_headers.items():
                    headers[name] = value
        await self._send(message)

    async def respond(self, response: Response) -> bool:
        """Send a complete response unless one has already started.

        Returns:
            True if the response was written, False if it was too late.
        """
        if self.response_started:
            return False
        await response(self.scope, self.receive, self.send)
        return True


CallNext = Callable[[PipelineContext], Awaitable[None]]


class PipelineStage(ABC):
    """One step of the request pipeline."""

    @abstractmethod
    async def handle(self, context: PipelineContext, call_next: CallNext) -> None:
        """Process the request, calling ``call_next`` to continue the chain."""


class RequestPipeline:
    """ASGI middleware that dispatches HTTP requests through ordered stages."""

    def __init__(self, app: ASGIApp, stages: Sequence[PipelineStage]) -> None:
        self.app = app
        self.stages = tuple(stages)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self._dispatch(PipelineContext(scope, receive, send), 0)
        finally:
            # Prevent logging context leaking between requests
            clear_context()

    async def _dispatch(self, context: PipelineContext, index: int) -> None:
        if index == len(self.stages):
            await self.app(context.scope, context.receive, context.send)
            return

        async def call_next(ctx: PipelineContext) -> None:
            await self._dispatch(ctx, index + 1)

        await self.stages[index].handle(context, call_next)
