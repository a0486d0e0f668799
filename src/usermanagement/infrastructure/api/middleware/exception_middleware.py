"""Exception containment stage.

Outermost stage of the request pipeline. Any exception escaping the rest of
the chain is logged in full and turned into a uniform 500 problem response.
Exception messages and tracebacks reach the client only in diagnostic mode.
"""

import traceback

from usermanagement.core.config import Settings
from usermanagement.core.logging import get_logger
from usermanagement.infrastructure.api.middleware.pipeline import (
    CallNext,
    PipelineContext,
    PipelineStage,
)
from usermanagement.infrastructure.api.schemas.problem_details import ProblemDetails

logger = get_logger(__name__)

UNEXPECTED_ERROR_TITLE = "An unexpected error occurred."


class ExceptionContainmentStage(PipelineStage):
    """Converts unhandled exceptions into structured 500 responses."""

    def __init__(self, settings: Settings) -> None:
        self.diagnostic_mode = settings.is_diagnostic_mode

    async def handle(self, context: PipelineContext, call_next: CallNext) -> None:
        try:
            await call_next(context)
        except Exception as exc:
            logger.error(
                "Unhandled exception processing request",
                method=context.method,
                path=context.path,
                exc_type=type(exc).__name__,
                error=str(exc),
                exc_info=exc,
            )
            if context.response_started:
                # Too late for a clean error body; let the server abort the connection.
                raise
            problem = self.build_problem(context, exc)
            await context.respond(problem.to_response(media_type="application/json"))

    def build_problem(self, context: PipelineContext, exc: Exception) -> ProblemDetails:
        """Build the problem body for an exception."""
        if not self.diagnostic_mode:
            return ProblemDetails(
                title=UNEXPECTED_ERROR_TITLE,
                status=500,
                instance=context.path,
            )
        return ProblemDetails(
            title=UNEXPECTED_ERROR_TITLE,
            status=500,
            detail=str(exc) or type(exc).__name__,
            instance=context.path,
            exception="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
        )
