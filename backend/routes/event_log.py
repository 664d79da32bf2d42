"""
PRINT CRM - Routes Event Log (audit trail)
"""

from fastapi import APIRouter, Query
from typing import Optional

from services.event_logger import list_events

router = APIRouter(prefix="/event-log", tags=["EventLog"])


@router.get("")
async def list_event_log(
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    skip: int = Query(0, ge=0)
):
    """Liste les events avec filtres"""
    return await list_events(action, entity_type, entity_id, limit, skip)
