"""Request/response audit logging stage.

Logs one "incoming" entry before the rest of the chain runs and one
"outgoing" entry with the final status code after it finishes. Sensitive
request headers are dropped from the entry, not masked. The body is never
read.
"""

from collections.abc import Iterable

from usermanagement.core.logging import (
    bind_correlation_id,
    get_logger,
    new_correlation_id,
)
from usermanagement.infrastructure.api.middleware.pipeline import (
    CallNext,
    PipelineContext,
    PipelineStage,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
DEFAULT_EXCLUDED_HEADERS = ("authorization", "cookie")


class AuditLoggingStage(PipelineStage):
    """Emits structured incoming/outgoing entries for every request."""

    def __init__(self, excluded_headers: Iterable[str] = DEFAULT_EXCLUDED_HEADERS) -> None:
        self.excluded_headers = frozenset(name.lower() for name in excluded_headers)

    def loggable_headers(self, context: PipelineContext) -> dict[str, str]:
        """Request headers with the excluded keys removed.

        Repeated headers are joined with ", ".
        """
        headers: dict[str, str] = {}
        for raw_name, raw_value in context.scope.get("headers") or []:
            name = raw_name.decode("latin-1").lower()
            if name in self.excluded_headers:
                continue
            value = raw_value.decode("latin-1")
            headers[name] = f"{headers[name]}, {value}" if name in headers else value
        return headers

    async def handle(self, context: PipelineContext, call_next: CallNext) -> None:
        correlation_id = context.request.headers.get(CORRELATION_HEADER) or new_correlation_id()
        bind_correlation_id(correlation_id)
        context.response_headers[CORRELATION_HEADER] = correlation_id

        logger.info(
            "Incoming request",
            direction="incoming",
            method=context.method,
            path=context.path,
            headers=self.loggable_headers(context),
        )

        try:
            await call_next(context)
        finally:
            logger.info(
                "Outgoing response",
                direction="outgoing",
                method=context.method,
                path=context.path,
                status_code=context.status_code,
            )
