# sage_insights/api/v1/insights.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from sage_insights.api.v1.schemas import Lab, LabStatsResponse
from sage_insights.core.session import Session, require_session
from sage_insights.services.backend_client import BackendError
from sage_insights.web.dashboard import ViewRegistry
from sage_insights.web.pages import get_registry

router = APIRouter(prefix="/insights", tags=["insights"])
logger = logging.getLogger("insights")


# ============================================================
# GET /insights/labs
# ============================================================
@router.get("/labs", response_model=List[Lab])
async def list_labs(
    session: Session = Depends(require_session),
    registry: ViewRegistry = Depends(get_registry),
):
    try:
        return await registry.client.get_labs_for_user(session.user_id)
    except BackendError:
        logger.exception("Failed to fetch labs for user %s", session.user_id)
        raise HTTPException(status_code=502, detail="Failed to load labs")


# ============================================================
# GET /insights/labs/{lab_id}/stats
# ============================================================
@router.get("/labs/{lab_id}/stats", response_model=LabStatsResponse)
async def lab_stats(
    lab_id: str,
    session: Session = Depends(require_session),
    registry: ViewRegistry = Depends(get_registry),
):
    """
    Select ``lab_id`` for this user and return freshly computed stats.

    ``stats`` is null when a selection of another lab overtook this request.
    """
    view = registry.get(session.user_id)
    await view.select_lab(lab_id)

    current = view.selected_lab_id == lab_id
    return LabStatsResponse(
        lab_id=lab_id,
        stats=view.stats if current else None,
        machines=view.machines if current else [],
        notifications=view.notifier.drain(),
    )
