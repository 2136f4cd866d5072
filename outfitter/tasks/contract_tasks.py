"""Background jobs over hunt contracts."""

from __future__ import annotations

import logging
from typing import Any

from outfitter.database.db import get_db_session
from outfitter.services.contract_service import ContractService
from outfitter.tasks.celery_app import celery_app
from outfitter.tasks.hooks import after_task, before_task

logger = logging.getLogger(__name__)

REPAIR_TASK_KEY = "contracts.repair_bills"


def run_bill_repair(
    outfitter_id: int | None = None,
    contract_ids: list[int] | None = None,
    task_id: str | None = None,
) -> dict[str, Any]:
    """Re-materialize stored bills; one contract failing never stops the batch."""
    context = {"outfitter_id": outfitter_id, "actor": "system", "task_id": task_id}
    logger.info("task.start", extra=before_task(task_key=REPAIR_TASK_KEY, context=context))
    with get_db_session() as session:
        report = ContractService(db=session).repair_bills(contract_ids, outfitter_id=outfitter_id)
    result = report.to_dict()
    status = "succeeded" if not report.failed else "partial"
    logger.info(
        "task.finish",
        extra=after_task(
            task_key=REPAIR_TASK_KEY,
            context=context,
            status=status,
            repaired=len(report.repaired),
            failed=len(report.failed),
        ),
    )
    return {"status": status, **result}


@celery_app.task(bind=True, name=REPAIR_TASK_KEY)
def repair_contract_bills(
    self,
    outfitter_id: int | None = None,
    contract_ids: list[int] | None = None,
) -> dict[str, Any]:
    return run_bill_repair(outfitter_id=outfitter_id, contract_ids=contract_ids, task_id=self.request.id)
