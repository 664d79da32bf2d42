"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Routes Leads                                                    ║
║                                                                              ║
║  CRUD leads + conversion en client / commande                                ║
║  Toute création de lead déclenche l'auto-assignation                         ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import uuid
import logging

from config import db, now_iso, search_regex
from models import (
    LeadCreate,
    LeadUpdate,
    ConvertWithOrder,
    LeadOrderCreate,
    VALID_LEAD_STATUSES,
    LEAD_STATUS_LABELS,
)
from services.sales_allocation import auto_assign_lead
from services.lead_conversion import (
    LeadConversionError,
    convert_to_customer,
    convert_with_order,
    create_order_from_lead,
)
from services.event_logger import log_event

logger = logging.getLogger("leads")

router = APIRouter(prefix="/leads", tags=["Leads"])


async def _enrich_lead(lead: dict) -> dict:
    """Ajoute le libellé du statut et les noms source / campagne / groupe produit / commercial"""
    lead["status_label"] = LEAD_STATUS_LABELS.get(lead.get("status"), lead.get("status"))
    if lead.get("source_id"):
        source = await db.lead_sources.find_one({"id": lead["source_id"]}, {"_id": 0, "name": 1, "type": 1})
        lead["source"] = source
    if lead.get("campaign_id"):
        campaign = await db.campaigns.find_one({"id": lead["campaign_id"]}, {"_id": 0, "name": 1, "code": 1})
        lead["campaign"] = campaign
    if lead.get("interested_product_group_id"):
        group = await db.product_groups.find_one(
            {"id": lead["interested_product_group_id"]}, {"_id": 0, "name": 1, "code": 1}
        )
        lead["product_group"] = group
    if lead.get("assigned_sales_id"):
        sales = await db.sales_employees.find_one(
            {"id": lead["assigned_sales_id"]}, {"_id": 0, "full_name": 1, "employee_code": 1}
        )
        lead["sales_employee"] = sales
    return lead


async def insert_lead(data: dict) -> dict:
    """Insère un lead en status "new" puis lance l'auto-assignation"""
    now = now_iso()
    lead = {
        "id": str(uuid.uuid4()),
        "full_name": data["full_name"],
        "phone": data["phone"],
        "email": data.get("email"),
        "demand": data.get("demand"),
        "source_id": data.get("source_id"),
        "campaign_id": data.get("campaign_id"),
        "customer_group": data.get("customer_group"),
        "interested_product_group_id": data.get("interested_product_group_id"),
        "source_label": data.get("source_label"),
        "status": "new",
        "assigned_sales_id": None,
        "assigned_at": None,
        "assignment_method": None,
        "last_contacted_at": None,
        "is_converted": False,
        "converted_at": None,
        "converted_customer_id": None,
        "created_at": now,
        "updated_at": now
    }
    await db.leads.insert_one(lead)
    lead.pop("_id", None)

    await auto_assign_lead(lead["id"])
    return await db.leads.find_one({"id": lead["id"]}, {"_id": 0})


@router.get("")
async def list_leads(
    status: Optional[str] = None,
    source_id: Optional[str] = None,
    assigned_sales_id: Optional[str] = None,
    is_converted: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    """Liste les leads (plus récents d'abord)"""
    query = {}
    if status:
        if status not in VALID_LEAD_STATUSES:
            raise HTTPException(status_code=400, detail=f"Statut invalide: {status}")
        query["status"] = status
    if source_id:
        query["source_id"] = source_id
    if assigned_sales_id:
        query["assigned_sales_id"] = assigned_sales_id
    if is_converted is not None:
        query["is_converted"] = is_converted
    if search:
        query["$or"] = [
            {"full_name": search_regex(search)},
            {"phone": search_regex(search)},
            {"email": search_regex(search)}
        ]

    leads = await db.leads.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(offset).limit(limit).to_list(limit)
    total = await db.leads.count_documents(query)

    for lead in leads:
        await _enrich_lead(lead)

    return {"data": leads, "count": total}


@router.get("/{lead_id}")
async def get_lead(lead_id: str):
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    if not lead:
        raise HTTPException(status_code=404, detail="Lead non trouvé")
    return await _enrich_lead(lead)


@router.post("")
async def create_lead(data: LeadCreate):
    """Crée un lead (status new) et l'assigne automatiquement"""
    lead = await insert_lead(data.model_dump(mode="json"))
    return {"success": True, "lead": lead}


@router.put("/{lead_id}")
async def update_lead(lead_id: str, data: LeadUpdate):
    """
    Met à jour un lead.

    Assignation manuelle: assigned_at posé, méthode "manual" par défaut.
    """
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    if not lead:
        raise HTTPException(status_code=404, detail="Lead non trouvé")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}

    new_sales = update_data.get("assigned_sales_id")
    if new_sales and new_sales != lead.get("assigned_sales_id"):
        sales = await db.sales_employees.find_one({"id": new_sales}, {"_id": 0})
        if not sales:
            raise HTTPException(status_code=400, detail="Commercial introuvable")
        update_data["assigned_at"] = now_iso()
        update_data.setdefault("assignment_method", "manual")
        await log_event(
            action="lead_assign",
            entity_type="lead",
            entity_id=lead_id,
            details={"method": update_data["assignment_method"]},
            related={"sales_employee_id": new_sales}
        )

    update_data["updated_at"] = now_iso()
    await db.leads.update_one({"id": lead_id}, {"$set": update_data})

    updated = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    return {"success": True, "lead": updated}


@router.delete("/{lead_id}")
async def delete_lead(lead_id: str):
    """Supprime un lead et ses interactions / logs d'assignation"""
    lead = await db.leads.find_one({"id": lead_id})
    if not lead:
        raise HTTPException(status_code=404, detail="Lead non trouvé")

    await db.interaction_logs.delete_many({"lead_id": lead_id})
    await db.assignment_logs.delete_many({"lead_id": lead_id})
    await db.leads.delete_one({"id": lead_id})

    logger.info(f"[LEADS] Lead {lead_id} supprimé")
    return {"success": True}


@router.get("/{lead_id}/assignments")
async def list_lead_assignments(lead_id: str):
    """Historique des assignations d'un lead"""
    logs = await db.assignment_logs.find({"lead_id": lead_id}, {"_id": 0}).sort(
        "created_at", -1
    ).to_list(100)
    return {"assignments": logs, "count": len(logs)}


# ==================== CONVERSION ====================

@router.post("/{lead_id}/convert")
async def convert_lead(lead_id: str):
    """Convertit un lead en client (retrouvé par téléphone ou créé)"""
    try:
        return await convert_to_customer(lead_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LeadConversionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{lead_id}/convert-with-order")
async def convert_lead_with_order(lead_id: str, data: ConvertWithOrder):
    """Lead "closed" → client + commande pending + fichiers brief"""
    try:
        return await convert_with_order(
            lead_id,
            order_data=data.order.model_dump(mode="json"),
            customer_data=data.customer.model_dump(mode="json") if data.customer else None,
            files=[f.model_dump(mode="json") for f in data.files]
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LeadConversionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{lead_id}/orders")
async def create_lead_order(lead_id: str, data: LeadOrderCreate):
    """Crée une commande pour le client issu de ce lead"""
    try:
        return await create_order_from_lead(lead_id, data.model_dump(mode="json"))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
