"""Shared Pydantic schemas for Versalles."""

from typing import Any, Literal, Optional

from pydantic import BaseModel
from starlette.responses import JSONResponse


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "versalles"


class ViolationResponse(BaseModel):
    field: str
    message: str


class StatusResponse(BaseModel):
    """Envelope every JSON endpoint answers with."""

    status: Literal["success", "error"] = "success"
    message: Optional[str] = None
    data: Optional[Any] = None
    violations: Optional[list[ViolationResponse]] = None


def success(data: Any = None, message: str | None = None) -> StatusResponse:
    return StatusResponse(status="success", data=data, message=message)


def internal_error_response() -> JSONResponse:
    """Generic 500 envelope; the underlying error never reaches the client."""
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Internal server error"},
    )
