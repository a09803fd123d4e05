"""
Response envelopes shared by every endpoint.

Success: {"success": true, "message": ..., "data": ..., "meta": {"timestamp": ...}}
Error:   {"success": false, "message": ..., "code": ..., "details": ...}
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ResponseMeta(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope"""
    success: bool = True
    message: str = "Success"
    data: Optional[T] = None
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


class ErrorResponse(BaseModel):
    """Error envelope"""
    success: bool = False
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None
