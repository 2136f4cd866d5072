"""Lifecycle hooks for queue task execution."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from outfitter.core.logging import LogContext, build_log_event


def _context(context: dict[str, Any]) -> LogContext:
    outfitter_id = context.get("outfitter_id")
    return LogContext(
        outfitter_id=str(outfitter_id) if outfitter_id is not None else None,
        actor=context.get("actor"),
        contract_id=context.get("contract_id"),
        hunt_id=context.get("hunt_id"),
        task_id=context.get("task_id"),
    )


def before_task(task_key: str, context: dict[str, Any]) -> dict[str, Any]:
    """Build pre-task log payload."""
    return build_log_event(event="task.start", context=_context(context), task_key=task_key)


def after_task(task_key: str, context: dict[str, Any], status: str, **fields: Any) -> dict[str, Any]:
    """Build post-task log payload."""
    return build_log_event(
        event="task.finish",
        context=_context(context),
        task_key=task_key,
        status=status,
        finished_at=datetime.now(timezone.utc).isoformat(),
        **fields,
    )
