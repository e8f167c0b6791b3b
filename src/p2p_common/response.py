"""Unified API response wrapper.

All API endpoints return this format:
{
    "success": true,
    "code": 0,             // 0=success, non-0=error code
    "message": "success",
    "<payload key>": ...,  // e.g. "order", "orders", "deal_completed"
    "timestamp": "...",
    "request_id": "..."
}

Errors add "kind" (validation/permission/state/conflict/not_found/transient)
and carry no payload keys.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiResponse(BaseModel):
    # Payload keys are flattened into the body next to the envelope fields
    model_config = ConfigDict(extra="allow")

    success: bool = True
    code: int = 0
    message: str = "success"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(**payload: Any) -> ApiResponse:
    return ApiResponse(success=True, code=0, message="success", **payload)


def error_response(code: int, message: str, kind: str) -> ApiResponse:
    return ApiResponse(success=False, code=code, message=message, kind=kind)
