"""
PRINT CRM - Routes Devis (báo giá)
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional

from config import db
from models import QuotationCreate
from services.quotation_pricing import QuotationError, create_quotation

router = APIRouter(prefix="/quotations", tags=["Quotations"])


@router.get("")
async def list_quotations(
    lead_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    query = {}
    if lead_id:
        query["lead_id"] = lead_id
    if customer_id:
        query["customer_id"] = customer_id

    quotations = await db.quotations.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(offset).limit(limit).to_list(limit)
    total = await db.quotations.count_documents(query)
    return {"data": quotations, "count": total}


@router.get("/{quotation_id}")
async def get_quotation(quotation_id: str):
    quotation = await db.quotations.find_one({"id": quotation_id}, {"_id": 0})
    if not quotation:
        raise HTTPException(status_code=404, detail="Devis non trouvé")
    return quotation


@router.post("")
async def create_quotation_route(data: QuotationCreate):
    """Calcule les prix, fige les éléments de coût et enregistre le devis"""
    try:
        quotation = await create_quotation(data.model_dump(mode="json"))
    except QuotationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "quotation": quotation}


@router.delete("/{quotation_id}")
async def delete_quotation(quotation_id: str):
    result = await db.quotations.delete_one({"id": quotation_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Devis non trouvé")
    return {"success": True}
