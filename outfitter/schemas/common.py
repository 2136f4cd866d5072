"""Common schema module."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    status: str = "error"
    error_code: str
    detail: str
    context: dict[str, Any] = Field(default_factory=dict)


class RepairReportResponse(BaseModel):
    processed: int
    repaired: list[int]
    unchanged: list[int]
    failed: list[dict[str, Any]]
