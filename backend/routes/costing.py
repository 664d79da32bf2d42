"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Routes Coûts (matériaux & main d'oeuvre)                        ║
║                                                                              ║
║  Tables de prix utilisées par le calcul des devis                            ║
║  Une main d'oeuvre référence TOUJOURS un groupe produit ET un matériau       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, HTTPException
from typing import Optional
import uuid

from config import db, now_iso
from models import MaterialCreate, MaterialUpdate, LaborCostCreate, LaborCostUpdate

router = APIRouter(tags=["Catalog"])


# ==================== MATÉRIAUX ====================

@router.get("/materials")
async def list_materials(product_group_id: Optional[str] = None, active_only: bool = True):
    query = {}
    if product_group_id:
        query["product_group_id"] = product_group_id
    if active_only:
        query["is_active"] = True
    materials = await db.materials.find(query, {"_id": 0}).sort("element_name", 1).to_list(1000)
    return {"materials": materials, "count": len(materials)}


@router.get("/materials/{material_id}")
async def get_material(material_id: str):
    material = await db.materials.find_one({"id": material_id}, {"_id": 0})
    if not material:
        raise HTTPException(status_code=404, detail="Matériau non trouvé")
    return material


@router.post("/materials")
async def create_material(data: MaterialCreate):
    if data.product_group_id and not await db.product_groups.find_one({"id": data.product_group_id}):
        raise HTTPException(status_code=400, detail="Groupe produit introuvable")

    material = {
        "id": str(uuid.uuid4()),
        **data.model_dump(mode="json"),
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.materials.insert_one(material)
    material.pop("_id", None)
    return {"success": True, "material": material}


@router.put("/materials/{material_id}")
async def update_material(material_id: str, data: MaterialUpdate):
    if not await db.materials.find_one({"id": material_id}):
        raise HTTPException(status_code=404, detail="Matériau non trouvé")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.materials.update_one({"id": material_id}, {"$set": update_data})

    updated = await db.materials.find_one({"id": material_id}, {"_id": 0})
    return {"success": True, "material": updated}


@router.delete("/materials/{material_id}")
async def delete_material(material_id: str):
    used = await db.labor_costs.count_documents({"material_id": material_id})
    if used > 0:
        raise HTTPException(
            status_code=400,
            detail=f"Matériau utilisé par {used} coût(s) de main d'oeuvre"
        )
    result = await db.materials.delete_one({"id": material_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Matériau non trouvé")
    return {"success": True}


# ==================== MAIN D'OEUVRE ====================

async def _check_labor_refs(product_group_id: Optional[str], material_id: Optional[str]):
    if product_group_id and not await db.product_groups.find_one({"id": product_group_id}):
        raise HTTPException(status_code=400, detail="Groupe produit introuvable")
    if material_id and not await db.materials.find_one({"id": material_id}):
        raise HTTPException(status_code=400, detail="Matériau introuvable")


@router.get("/labor-costs")
async def list_labor_costs(
    product_group_id: Optional[str] = None,
    material_id: Optional[str] = None,
    active_only: bool = True
):
    query = {}
    if product_group_id:
        query["product_group_id"] = product_group_id
    if material_id:
        query["material_id"] = material_id
    if active_only:
        query["is_active"] = True
    labor_costs = await db.labor_costs.find(query, {"_id": 0}).sort("action", 1).to_list(1000)
    return {"labor_costs": labor_costs, "count": len(labor_costs)}


@router.get("/labor-costs/{labor_id}")
async def get_labor_cost(labor_id: str):
    labor = await db.labor_costs.find_one({"id": labor_id}, {"_id": 0})
    if not labor:
        raise HTTPException(status_code=404, detail="Coût de main d'oeuvre non trouvé")
    return labor


@router.post("/labor-costs")
async def create_labor_cost(data: LaborCostCreate):
    await _check_labor_refs(data.product_group_id, data.material_id)

    labor = {
        "id": str(uuid.uuid4()),
        **data.model_dump(mode="json"),
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.labor_costs.insert_one(labor)
    labor.pop("_id", None)
    return {"success": True, "labor_cost": labor}


@router.put("/labor-costs/{labor_id}")
async def update_labor_cost(labor_id: str, data: LaborCostUpdate):
    if not await db.labor_costs.find_one({"id": labor_id}):
        raise HTTPException(status_code=404, detail="Coût de main d'oeuvre non trouvé")
    await _check_labor_refs(data.product_group_id, data.material_id)

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.labor_costs.update_one({"id": labor_id}, {"$set": update_data})

    updated = await db.labor_costs.find_one({"id": labor_id}, {"_id": 0})
    return {"success": True, "labor_cost": updated}


@router.delete("/labor-costs/{labor_id}")
async def delete_labor_cost(labor_id: str):
    result = await db.labor_costs.delete_one({"id": labor_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Coût de main d'oeuvre non trouvé")
    return {"success": True}
