"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Routes Commerciaux                                              ║
║                                                                              ║
║  CRUD commerciaux, ordre round robin, spécialisations par groupe produit     ║
║  Suppression = désactivation (is_active=False)                               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, HTTPException
from typing import Optional
import uuid

from config import db, now_iso, generate_code
from models import SalesEmployeeCreate, SalesEmployeeUpdate, ReorderRequest, SpecializationUpsert
from services.sales_allocation import reset_daily_counts

router = APIRouter(prefix="/sales-employees", tags=["Sales"])


@router.get("")
async def list_sales_employees(is_active: Optional[bool] = None):
    query = {}
    if is_active is not None:
        query["is_active"] = is_active
    employees = await db.sales_employees.find(query, {"_id": 0}).sort(
        "round_robin_order", 1
    ).to_list(500)
    return {"employees": employees, "count": len(employees)}


@router.post("/reorder")
async def reorder_sales_employees(data: ReorderRequest):
    """Réordonne la file round robin"""
    for item in data.items:
        await db.sales_employees.update_one(
            {"id": item.id},
            {"$set": {"round_robin_order": item.round_robin_order, "updated_at": now_iso()}}
        )
    return {"success": True, "updated": len(data.items)}


@router.post("/reset-daily-counts")
async def reset_daily_lead_counts():
    updated = await reset_daily_counts()
    return {"success": True, "updated": updated}


@router.get("/{employee_id}")
async def get_sales_employee(employee_id: str):
    employee = await db.sales_employees.find_one({"id": employee_id}, {"_id": 0})
    if not employee:
        raise HTTPException(status_code=404, detail="Commercial non trouvé")
    employee["specializations"] = await db.sales_specializations.find(
        {"sales_employee_id": employee_id}, {"_id": 0}
    ).to_list(100)
    return employee


@router.post("")
async def create_sales_employee(data: SalesEmployeeCreate):
    """Crée un commercial en dernière position du round robin"""
    last = await db.sales_employees.find({}, {"_id": 0, "round_robin_order": 1}).sort(
        "round_robin_order", -1
    ).limit(1).to_list(1)
    next_order = (last[0].get("round_robin_order", 0) + 1) if last else 1

    employee = {
        "id": str(uuid.uuid4()),
        "employee_code": generate_code("NV"),
        **data.model_dump(mode="json"),
        "round_robin_order": next_order,
        "daily_lead_count": 0,
        "total_lead_count": 0,
        "last_assigned_at": None,
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.sales_employees.insert_one(employee)
    employee.pop("_id", None)
    return {"success": True, "employee": employee}


@router.put("/{employee_id}")
async def update_sales_employee(employee_id: str, data: SalesEmployeeUpdate):
    employee = await db.sales_employees.find_one({"id": employee_id})
    if not employee:
        raise HTTPException(status_code=404, detail="Commercial non trouvé")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.sales_employees.update_one({"id": employee_id}, {"$set": update_data})

    updated = await db.sales_employees.find_one({"id": employee_id}, {"_id": 0})
    return {"success": True, "employee": updated}


@router.delete("/{employee_id}")
async def deactivate_sales_employee(employee_id: str):
    result = await db.sales_employees.update_one(
        {"id": employee_id},
        {"$set": {"is_active": False, "updated_at": now_iso()}}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Commercial non trouvé")
    return {"success": True}


@router.get("/{employee_id}/orders")
async def list_employee_orders(employee_id: str):
    orders = await db.orders.find({"sales_employee_id": employee_id}, {"_id": 0}).sort(
        "created_at", -1
    ).to_list(500)
    return {"orders": orders, "count": len(orders)}


# ==================== SPÉCIALISATIONS ====================

@router.get("/{employee_id}/specializations")
async def list_specializations(employee_id: str):
    specs = await db.sales_specializations.find(
        {"sales_employee_id": employee_id}, {"_id": 0}
    ).to_list(100)
    for spec in specs:
        spec["product_group"] = await db.product_groups.find_one(
            {"id": spec["product_group_id"]}, {"_id": 0, "name": 1, "code": 1}
        )
    return {"specializations": specs, "count": len(specs)}


@router.put("/{employee_id}/specializations")
async def upsert_specialization(employee_id: str, data: SpecializationUpsert):
    """Ajoute ou met à jour la spécialisation d'un commercial sur un groupe produit"""
    if not await db.sales_employees.find_one({"id": employee_id}):
        raise HTTPException(status_code=404, detail="Commercial non trouvé")
    if not await db.product_groups.find_one({"id": data.product_group_id}):
        raise HTTPException(status_code=400, detail="Groupe produit introuvable")

    key = {"sales_employee_id": employee_id, "product_group_id": data.product_group_id}
    existing = await db.sales_specializations.find_one(key)
    if existing:
        await db.sales_specializations.update_one(key, {"$set": {"is_primary": data.is_primary}})
    else:
        await db.sales_specializations.insert_one({
            "id": str(uuid.uuid4()),
            **key,
            "is_primary": data.is_primary,
            "created_at": now_iso()
        })

    spec = await db.sales_specializations.find_one(key, {"_id": 0})
    return {"success": True, "specialization": spec}


@router.delete("/{employee_id}/specializations/{product_group_id}")
async def remove_specialization(employee_id: str, product_group_id: str):
    result = await db.sales_specializations.delete_one(
        {"sales_employee_id": employee_id, "product_group_id": product_group_id}
    )
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Spécialisation non trouvée")
    return {"success": True}
