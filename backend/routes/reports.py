"""
PRINT CRM - Routes KPI commerciaux & rapports marketing

Deux tables de saisie simples, mêmes opérations: liste paginée avec
recherche, lecture, création, mise à jour, suppression.
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import uuid

from config import db, now_iso, search_regex
from models import KpiCreate, KpiUpdate, MarketingReportCreate, MarketingReportUpdate

router = APIRouter(tags=["Reports"])


async def _search(collection, field: str, search: Optional[str], limit: int, offset: int) -> dict:
    query = {field: search_regex(search)} if search else {}
    docs = await collection.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(offset).limit(limit).to_list(limit)
    total = await collection.count_documents(query)
    return {"data": docs, "count": total}


async def _insert(collection, payload: dict) -> dict:
    doc = {"id": str(uuid.uuid4()), **payload, "created_at": now_iso(), "updated_at": now_iso()}
    await collection.insert_one(doc)
    doc.pop("_id", None)
    return doc


async def _update(collection, doc_id: str, payload: dict, not_found: str) -> dict:
    if not await collection.find_one({"id": doc_id}):
        raise HTTPException(status_code=404, detail=not_found)
    update_data = {k: v for k, v in payload.items() if v is not None}
    update_data["updated_at"] = now_iso()
    await collection.update_one({"id": doc_id}, {"$set": update_data})
    return await collection.find_one({"id": doc_id}, {"_id": 0})


# ==================== KPI ====================

@router.get("/kpis")
async def list_kpis(
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    return await _search(db.kpis, "ho_ten", search, limit, offset)


@router.get("/kpis/{kpi_id}")
async def get_kpi(kpi_id: str):
    kpi = await db.kpis.find_one({"id": kpi_id}, {"_id": 0})
    if not kpi:
        raise HTTPException(status_code=404, detail="KPI non trouvé")
    return kpi


@router.post("/kpis")
async def create_kpi(data: KpiCreate):
    return {"success": True, "kpi": await _insert(db.kpis, data.model_dump(mode="json"))}


@router.put("/kpis/{kpi_id}")
async def update_kpi(kpi_id: str, data: KpiUpdate):
    kpi = await _update(db.kpis, kpi_id, data.model_dump(mode="json"), "KPI non trouvé")
    return {"success": True, "kpi": kpi}


@router.delete("/kpis/{kpi_id}")
async def delete_kpi(kpi_id: str):
    result = await db.kpis.delete_one({"id": kpi_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="KPI non trouvé")
    return {"success": True}


# ==================== RAPPORTS MARKETING ====================

@router.get("/marketing-reports")
async def list_marketing_reports(
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    return await _search(db.marketing_reports, "ho_va_ten", search, limit, offset)


@router.get("/marketing-reports/{report_id}")
async def get_marketing_report(report_id: str):
    report = await db.marketing_reports.find_one({"id": report_id}, {"_id": 0})
    if not report:
        raise HTTPException(status_code=404, detail="Rapport non trouvé")
    return report


@router.post("/marketing-reports")
async def create_marketing_report(data: MarketingReportCreate):
    report = await _insert(db.marketing_reports, data.model_dump(mode="json"))
    return {"success": True, "report": report}


@router.put("/marketing-reports/{report_id}")
async def update_marketing_report(report_id: str, data: MarketingReportUpdate):
    report = await _update(db.marketing_reports, report_id, data.model_dump(mode="json"), "Rapport non trouvé")
    return {"success": True, "report": report}


@router.delete("/marketing-reports/{report_id}")
async def delete_marketing_report(report_id: str):
    result = await db.marketing_reports.delete_one({"id": report_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Rapport non trouvé")
    return {"success": True}
