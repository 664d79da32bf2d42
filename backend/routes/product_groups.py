"""
PRINT CRM - Routes Groupes de produits
"""

from fastapi import APIRouter, HTTPException
import uuid

from config import db, now_iso, generate_code
from models import ProductGroupCreate, ProductGroupUpdate

router = APIRouter(prefix="/product-groups", tags=["Catalog"])


@router.get("")
async def list_product_groups(include_inactive: bool = False):
    """Groupes actifs, triés par nom"""
    query = {} if include_inactive else {"is_active": True}
    groups = await db.product_groups.find(query, {"_id": 0}).sort("name", 1).to_list(500)
    return {"product_groups": groups, "count": len(groups)}


@router.get("/{group_id}")
async def get_product_group(group_id: str):
    group = await db.product_groups.find_one({"id": group_id}, {"_id": 0})
    if not group:
        raise HTTPException(status_code=404, detail="Groupe produit non trouvé")
    return group


@router.get("/{group_id}/sales-employees")
async def list_group_sales(group_id: str):
    """Commerciaux actifs spécialisés sur ce groupe (principaux d'abord)"""
    specs = await db.sales_specializations.find({"product_group_id": group_id}, {"_id": 0}).to_list(500)
    primary = {s["sales_employee_id"]: s.get("is_primary", False) for s in specs}

    employees = await db.sales_employees.find(
        {"id": {"$in": list(primary.keys())}, "is_active": True}, {"_id": 0}
    ).to_list(500)
    for emp in employees:
        emp["is_primary"] = primary.get(emp["id"], False)
    employees.sort(key=lambda e: (not e["is_primary"], e.get("round_robin_order", 0)))

    return {"employees": employees, "count": len(employees)}


@router.post("")
async def create_product_group(data: ProductGroupCreate):
    group = {
        "id": str(uuid.uuid4()),
        **data.model_dump(mode="json"),
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    if not group.get("code"):
        group["code"] = generate_code("PG")

    existing = await db.product_groups.find_one({"code": group["code"]})
    if existing:
        raise HTTPException(status_code=400, detail=f"Code groupe déjà utilisé: {group['code']}")

    await db.product_groups.insert_one(group)
    group.pop("_id", None)
    return {"success": True, "product_group": group}


@router.put("/{group_id}")
async def update_product_group(group_id: str, data: ProductGroupUpdate):
    group = await db.product_groups.find_one({"id": group_id})
    if not group:
        raise HTTPException(status_code=404, detail="Groupe produit non trouvé")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.product_groups.update_one({"id": group_id}, {"$set": update_data})

    updated = await db.product_groups.find_one({"id": group_id}, {"_id": 0})
    return {"success": True, "product_group": updated}


@router.delete("/{group_id}")
async def deactivate_product_group(group_id: str):
    result = await db.product_groups.update_one(
        {"id": group_id},
        {"$set": {"is_active": False, "updated_at": now_iso()}}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Groupe produit non trouvé")
    return {"success": True}
