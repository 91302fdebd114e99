import logging

from graph.state import AutofillState
from services.errors import AutofillError
from services.fill_orchestrator import FillOrchestrator
from services.reconciliation import select_dates

log = logging.getLogger(__name__)


async def fill_node(state: AutofillState, orchestrator: FillOrchestrator = None) -> dict:
    """選択された未入力日に勤怠を登録するノード"""
    dates = select_dates(state["missing_dates"], state["wanted_dates"])
    try:
        result = await orchestrator.fill(state["credentials"], dates, state["intervals"])
    except AutofillError as e:
        log.error("Fill failed: %s", e)
        return {"action_taken": "error", "error_stage": "fill", "error_message": str(e)}

    return {
        "completed": result.completed,
        "failed": result.failed,
        "total": result.total,
        "action_taken": "filled",
    }
