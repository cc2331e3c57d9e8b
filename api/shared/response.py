from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ResponseModel(BaseModel):
    """Envelope fields shared by every JSON response."""

    success: bool = Field(default=True, description="Whether the request succeeded")
    message: str = Field(default="Success", description="Response message", examples=["Success"])


class ErrorResponse(ResponseModel):
    """Error body returned by the exception handlers."""

    success: bool = Field(default=False)
    error_code: str = Field(description="Machine readable error code")
    trace_id: Optional[str] = Field(default=None, description="Request trace identifier")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")

    @classmethod
    def build(
        cls,
        *,
        error_code: str,
        message: str,
        trace_id: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> "ErrorResponse":
        return cls(
            success=False,
            error_code=error_code,
            message=message,
            trace_id=trace_id,
            details=details or None,
        )
