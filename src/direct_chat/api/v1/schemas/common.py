from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
