"""Bearer token authentication stage.

Every route requires a valid bearer token unless its endpoint is explicitly
marked with ``allow_anonymous``. Failed authentication short-circuits the
pipeline with a 401 problem response that never says why.
"""

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from starlette.routing import Match

from usermanagement.core.logging import get_logger
from usermanagement.infrastructure.api.middleware.pipeline import (
    CallNext,
    PipelineContext,
    PipelineStage,
)
from usermanagement.infrastructure.api.schemas.problem_details import ProblemDetails
from usermanagement.infrastructure.auth.token_types import Rejected
from usermanagement.infrastructure.auth.token_verifier import TokenVerifier

logger = get_logger(__name__)

ANONYMOUS_ATTRIBUTE = "allow_anonymous"

F = TypeVar("F", bound=Callable[..., Any])


def allow_anonymous(endpoint: F) -> F:
    """Mark a route endpoint as reachable without authentication.

    Apply it below the router decorator::

        @router.get("/health")
        @allow_anonymous
        async def health(): ...
    """
    setattr(endpoint, ANONYMOUS_ATTRIBUTE, True)
    return endpoint


def mark_anonymous_paths(app: Any, paths: Iterable[str | None]) -> None:
    """Mark already registered routes (e.g. the generated docs) as anonymous."""
    wanted = {path for path in paths if path}
    for route in app.router.routes:
        if getattr(route, "path", None) in wanted:
            allow_anonymous(route.endpoint)


def unauthorized_problem(path: str) -> ProblemDetails:
    return ProblemDetails(title="Unauthorized", status=401, instance=path)


class AuthenticationStage(PipelineStage):
    """Validates bearer tokens in front of route dispatch."""

    def __init__(self, verifier: TokenVerifier) -> None:
        self.verifier = verifier

    def allows_anonymous(self, context: PipelineContext) -> bool:
        """Whether the route this request resolves to is marked anonymous.

        Requests that match no route are treated as protected.
        """
        app = context.scope.get("app")
        router = getattr(app, "router", None)
        if router is None:
            return False

        partial = None
        for route in router.routes:
            match, _ = route.matches(context.scope)
            if match == Match.FULL:
                return bool(getattr(getattr(route, "endpoint", None), ANONYMOUS_ATTRIBUTE, False))
            if match == Match.PARTIAL and partial is None:
                partial = route
        if partial is not None:
            return bool(getattr(getattr(partial, "endpoint", None), ANONYMOUS_ATTRIBUTE, False))
        return False

    @staticmethod
    def is_preflight(context: PipelineContext) -> bool:
        headers = context.request.headers
        return (
            context.method == "OPTIONS"
            and "origin" in headers
            and "access-control-request-method" in headers
        )

    async def handle(self, context: PipelineContext, call_next: CallNext) -> None:
        if self.is_preflight(context) or self.allows_anonymous(context):
            await call_next(context)
            return

        result = self.verifier.authenticate(context.request.headers.get("authorization"))

        if isinstance(result, Rejected):
            logger.info(
                "Authentication failed",
                reason=result.reason.value,
                method=context.method,
                path=context.path,
            )
            problem = unauthorized_problem(context.path)
            await context.respond(problem.to_response(headers={"WWW-Authenticate": "Bearer"}))
            return

        context.scope.setdefault("state", {})["identity"] = result.identity
        await call_next(context)
