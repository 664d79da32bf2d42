"""
PRINT CRM - Event Logger

Journal d'audit des actions sensibles (changement de statut commande,
conversion de lead, assignation, paiement).
Une seule fonction à appeler depuis n'importe quelle route/service.
"""

import uuid
from typing import Optional, Dict, Any
from config import db, now_iso


async def log_event(
    action: str,
    entity_type: str,
    entity_id: str,
    user: str = "system",
    details: dict = None,
    related: dict = None
):
    """
    Write a single event to the event_log collection.

    Args:
        action: e.g. order_status_change, lead_convert, lead_assign, payment_add
        entity_type: lead | order | customer | payment | quotation
        entity_id: ID of the primary entity
        user: who performed the action
        details: free-form dict (old_status, new_status, amount, etc.)
        related: linked entity IDs (lead_id, customer_id, order_id, etc.)
    """
    await db.event_log.insert_one({
        "id": str(uuid.uuid4()),
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "user": user,
        "details": details or {},
        "related": related or {},
        "created_at": now_iso()
    })


async def list_events(
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = 100,
    skip: int = 0
) -> Dict[str, Any]:
    query = {}
    if action:
        query["action"] = action
    if entity_type:
        query["entity_type"] = entity_type
    if entity_id:
        query["entity_id"] = entity_id

    events = await db.event_log.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(skip).limit(limit).to_list(limit)
    total = await db.event_log.count_documents(query)

    return {"events": events, "count": len(events), "total": total}
