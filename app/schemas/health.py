"""Health probe 응답 스키마."""

from typing import Literal

from pydantic import BaseModel


class LivenessResponse(BaseModel):
    status: Literal["alive"] = "alive"
    timestamp: str


class ReadinessResponse(BaseModel):
    """준비 상태. not_ready일 때만 error 포함."""

    status: Literal["ready", "not_ready"]
    timestamp: str
    database: Literal["connected", "disconnected"]
    error: str | None = None
