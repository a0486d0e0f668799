"""Request pipeline and its stages."""

from usermanagement.infrastructure.api.middleware.audit_logging_middleware import (
    AuditLoggingStage,
)
from usermanagement.infrastructure.api.middleware.authentication_middleware import (
    AuthenticationStage,
    allow_anonymous,
    mark_anonymous_paths,
)
from usermanagement.infrastructure.api.middleware.exception_middleware import (
    ExceptionContainmentStage,
)
from usermanagement.infrastructure.api.middleware.pipeline import (
    PipelineContext,
    PipelineStage,
    RequestPipeline,
)

__all__ = [
    "AuditLoggingStage",
    "AuthenticationStage",
    "ExceptionContainmentStage",
    "PipelineContext",
    "PipelineStage",
    "RequestPipeline",
    "allow_anonymous",
    "mark_anonymous_paths",
]
