import logging

from graph.state import AutofillState
from services.errors import AutofillError
from services.reconciliation import ReconciliationEngine

log = logging.getLogger(__name__)


async def scan_node(state: AutofillState, engine: ReconciliationEngine = None) -> dict:
    """予定勤務時間と既存記録から未入力日を求めるノード"""
    try:
        missing = await engine.scan(state["credentials"], state["month"], state["year"])
    except AutofillError as e:
        log.error("Scan failed: %s", e)
        return {"action_taken": "error", "error_stage": "scan", "error_message": str(e)}

    if not missing:
        return {"missing_dates": [], "action_taken": "nothing_missing"}
    if state["scan_only"]:
        return {"missing_dates": missing, "action_taken": "scanned"}
    return {"missing_dates": missing}
