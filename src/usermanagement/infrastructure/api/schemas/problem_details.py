"""Structured error responses (RFC 7807 problem details).

Field names are camelCased on the wire and unset optional fields are left
out entirely. Extension members are passed as extra keyword arguments.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from starlette.responses import JSONResponse

PROBLEM_JSON = "application/problem+json"


class ProblemDetails(BaseModel):
    """Error body returned for 400, 401 and 500 responses."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    title: str
    status: int
    detail: str | None = None
    instance: str

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_response(
        self,
        media_type: str = PROBLEM_JSON,
        headers: dict[str, str] | None = None,
    ) -> JSONResponse:
        return JSONResponse(
            content=self.to_dict(),
            status_code=self.status,
            media_type=media_type,
            headers=headers,
        )
