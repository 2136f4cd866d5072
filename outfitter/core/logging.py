"""Structured logging helpers shared by API handlers and worker tasks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class LogContext:
    """Normalized context fields expected in structured logs."""

    outfitter_id: str | None = None
    actor: str | None = None
    contract_id: int | None = None
    hunt_id: int | None = None
    task_id: str | None = None


def build_log_event(event: str, context: LogContext, **fields: Any) -> dict[str, Any]:
    """Build a normalized structured log payload."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "outfitter_id": context.outfitter_id,
        "actor": context.actor,
        "contract_id": context.contract_id,
        "hunt_id": context.hunt_id,
        "task_id": context.task_id,
    }
    payload.update(fields)
    return payload
