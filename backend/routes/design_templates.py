"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Routes Bibliothèque de templates design                         ║
║                                                                              ║
║  Templates réutilisables (sac, boîte, carte, étiquette)                      ║
║  Création possible depuis les rendus (result) d'une commande                 ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import uuid

from config import db, now_iso, search_regex
from models import DesignTemplateCreate, DesignTemplateUpdate, TemplateFromOrder, TemplateType
from services.google_drive import view_url

router = APIRouter(prefix="/design-templates", tags=["Design"])


@router.get("")
async def list_templates(
    type: Optional[TemplateType] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    is_public: Optional[bool] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    query = {}
    if type:
        query["type"] = type.value
    if category:
        query["category"] = category
    if is_public is not None:
        query["is_public"] = is_public
    if search:
        query["$or"] = [
            {"name": search_regex(search)},
            {"customer_name": search_regex(search)},
            {"description": search_regex(search)}
        ]

    templates = await db.design_templates.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(offset).limit(limit).to_list(limit)
    total = await db.design_templates.count_documents(query)
    return {"data": templates, "count": total}


@router.get("/stats")
async def template_stats():
    """Total, répartition par type, 5 derniers templates"""
    by_type = {}
    for t in TemplateType:
        by_type[t.value] = await db.design_templates.count_documents({"type": t.value})
    recent = await db.design_templates.find({}, {"_id": 0}).sort("created_at", -1).to_list(5)
    return {
        "total": await db.design_templates.count_documents({}),
        "by_type": by_type,
        "recent": recent
    }


@router.post("/from-order")
async def create_template_from_order(data: TemplateFromOrder):
    """Crée un template à partir des fichiers rendus d'une commande"""
    order = await db.orders.find_one({"id": data.order_id}, {"_id": 0})
    if not order:
        raise HTTPException(status_code=404, detail="Commande non trouvée")

    results = await db.design_files.find(
        {"order_id": data.order_id, "file_category": "result"}, {"_id": 0}
    ).sort("created_at", -1).to_list(100)
    if not results:
        raise HTTPException(status_code=400, detail="Aucun fichier rendu sur cette commande")

    customer = await db.customers.find_one({"id": order.get("customer_id")}, {"_id": 0}) or {}
    thumbnail = next((f["thumbnail_url"] for f in results if f.get("thumbnail_url")), None)

    template = {
        "id": str(uuid.uuid4()),
        "name": data.name,
        "description": order.get("description"),
        "type": data.type.value,
        "category": data.category,
        "tags": data.tags,
        "thumbnail_url": thumbnail,
        "file_urls": [view_url(f["google_drive_id"]) for f in results],
        "dimensions": (order.get("specifications") or {}).get("dimensions"),
        "paper_weight": (order.get("specifications") or {}).get("paper_weight"),
        "customer_name": customer.get("full_name"),
        "customer_phone": customer.get("phone"),
        "source_order_id": data.order_id,
        "notes": None,
        "is_public": data.is_public,
        "usage_count": 0,
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.design_templates.insert_one(template)
    template.pop("_id", None)
    return {"success": True, "template": template}


@router.get("/{template_id}")
async def get_template(template_id: str):
    template = await db.design_templates.find_one({"id": template_id}, {"_id": 0})
    if not template:
        raise HTTPException(status_code=404, detail="Template non trouvé")
    return template


@router.post("")
async def create_template(data: DesignTemplateCreate):
    template = {
        "id": str(uuid.uuid4()),
        **data.model_dump(mode="json"),
        "usage_count": 0,
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.design_templates.insert_one(template)
    template.pop("_id", None)
    return {"success": True, "template": template}


@router.put("/{template_id}")
async def update_template(template_id: str, data: DesignTemplateUpdate):
    if not await db.design_templates.find_one({"id": template_id}):
        raise HTTPException(status_code=404, detail="Template non trouvé")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.design_templates.update_one({"id": template_id}, {"$set": update_data})

    updated = await db.design_templates.find_one({"id": template_id}, {"_id": 0})
    return {"success": True, "template": updated}


@router.post("/{template_id}/use")
async def increment_usage(template_id: str):
    result = await db.design_templates.update_one(
        {"id": template_id},
        {"$inc": {"usage_count": 1}, "$set": {"updated_at": now_iso()}}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Template non trouvé")
    template = await db.design_templates.find_one({"id": template_id}, {"_id": 0})
    return {"success": True, "usage_count": template.get("usage_count", 0)}


@router.delete("/{template_id}")
async def delete_template(template_id: str):
    result = await db.design_templates.delete_one({"id": template_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Template non trouvé")
    return {"success": True}
