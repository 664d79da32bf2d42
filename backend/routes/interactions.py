"""
PRINT CRM - Routes Interactions (appels, messages, rendez-vous sur un lead)
"""

from fastapi import APIRouter, HTTPException, Query
import uuid

from config import db, now_iso
from models import InteractionCreate

router = APIRouter(prefix="/interaction-logs", tags=["Interactions"])


@router.get("")
async def list_interactions(lead_id: str, limit: int = Query(100, ge=1, le=500)):
    logs = await db.interaction_logs.find({"lead_id": lead_id}, {"_id": 0}).sort(
        "occurred_at", -1
    ).to_list(limit)
    return {"interactions": logs, "count": len(logs)}


@router.get("/{log_id}")
async def get_interaction(log_id: str):
    log = await db.interaction_logs.find_one({"id": log_id}, {"_id": 0})
    if not log:
        raise HTTPException(status_code=404, detail="Interaction non trouvée")
    return log


@router.post("")
async def create_interaction(data: InteractionCreate):
    """
    Enregistre une interaction et met à jour last_contacted_at du lead.
    lead_status optionnel: fait avancer le lead dans l'entonnoir.
    """
    lead = await db.leads.find_one({"id": data.lead_id}, {"_id": 0})
    if not lead:
        raise HTTPException(status_code=404, detail="Lead non trouvé")

    payload = data.model_dump(mode="json")
    lead_status = payload.pop("lead_status", None)
    occurred_at = payload.get("occurred_at") or now_iso()

    log = {
        "id": str(uuid.uuid4()),
        **payload,
        "customer_id": payload.get("customer_id") or lead.get("converted_customer_id"),
        "sales_id": payload.get("sales_id") or lead.get("assigned_sales_id"),
        "occurred_at": occurred_at,
        "created_at": now_iso()
    }
    await db.interaction_logs.insert_one(log)
    log.pop("_id", None)

    lead_update = {"last_contacted_at": occurred_at, "updated_at": now_iso()}
    if lead_status:
        lead_update["status"] = lead_status
    await db.leads.update_one({"id": data.lead_id}, {"$set": lead_update})

    return {"success": True, "interaction": log}


@router.delete("/{log_id}")
async def delete_interaction(log_id: str):
    result = await db.interaction_logs.delete_one({"id": log_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Interaction non trouvée")
    return {"success": True}
