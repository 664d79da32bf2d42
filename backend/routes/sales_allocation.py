"""
PRINT CRM - Routes Règles d'allocation des leads
"""

from fastapi import APIRouter, HTTPException
from typing import Optional
import uuid

from config import db, now_iso, generate_code
from models import AllocationRuleCreate, AllocationRuleUpdate
from services.sales_allocation import auto_distribute

router = APIRouter(prefix="/sales-allocation", tags=["Sales"])


@router.get("/rules")
async def list_rules(is_active: Optional[bool] = None):
    query = {}
    if is_active is not None:
        query["is_active"] = is_active
    rules = await db.sales_allocation_rules.find(query, {"_id": 0}).sort("created_at", 1).to_list(500)
    return {"rules": rules, "count": len(rules)}


@router.get("/rules/{rule_id}")
async def get_rule(rule_id: str):
    rule = await db.sales_allocation_rules.find_one({"id": rule_id}, {"_id": 0})
    if not rule:
        raise HTTPException(status_code=404, detail="Règle non trouvée")
    return rule


@router.post("/rules")
async def create_rule(data: AllocationRuleCreate):
    if not data.customer_group and not data.product_group_ids:
        raise HTTPException(
            status_code=400,
            detail="Une règle doit cibler un groupe client ou au moins un groupe produit"
        )

    rule = {
        "id": str(uuid.uuid4()),
        "rule_code": generate_code("SP"),
        **data.model_dump(mode="json"),
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.sales_allocation_rules.insert_one(rule)
    rule.pop("_id", None)
    return {"success": True, "rule": rule}


@router.put("/rules/{rule_id}")
async def update_rule(rule_id: str, data: AllocationRuleUpdate):
    rule = await db.sales_allocation_rules.find_one({"id": rule_id})
    if not rule:
        raise HTTPException(status_code=404, detail="Règle non trouvée")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.sales_allocation_rules.update_one({"id": rule_id}, {"$set": update_data})

    updated = await db.sales_allocation_rules.find_one({"id": rule_id}, {"_id": 0})
    return {"success": True, "rule": updated}


@router.delete("/rules/{rule_id}")
async def deactivate_rule(rule_id: str):
    result = await db.sales_allocation_rules.update_one(
        {"id": rule_id},
        {"$set": {"is_active": False, "updated_at": now_iso()}}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Règle non trouvée")
    return {"success": True}


@router.post("/auto-distribute")
async def run_auto_distribute():
    """Distribue tous les leads non assignés"""
    return await auto_distribute()
