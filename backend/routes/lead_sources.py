"""
PRINT CRM - Routes Sources de leads & Campagnes
"""

from fastapi import APIRouter, HTTPException
from typing import Optional
import uuid

from config import db, now_iso, generate_api_key
from models import LeadSourceCreate, LeadSourceUpdate, CampaignCreate, CampaignUpdate

router = APIRouter(tags=["Sources"])


# ==================== SOURCES ====================

@router.get("/lead-sources")
async def list_sources(active_only: bool = False):
    query = {"is_active": True} if active_only else {}
    sources = await db.lead_sources.find(query, {"_id": 0}).sort("created_at", -1).to_list(500)
    return {"sources": sources, "count": len(sources)}


@router.get("/lead-sources/{source_id}")
async def get_source(source_id: str):
    source = await db.lead_sources.find_one({"id": source_id}, {"_id": 0})
    if not source:
        raise HTTPException(status_code=404, detail="Source non trouvée")
    return source


@router.post("/lead-sources")
async def create_source(data: LeadSourceCreate):
    """Crée une source. Une clé API webhook est générée si absente."""
    source = {
        "id": str(uuid.uuid4()),
        **data.model_dump(mode="json"),
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    if not source.get("api_key"):
        source["api_key"] = generate_api_key()

    await db.lead_sources.insert_one(source)
    source.pop("_id", None)
    return {"success": True, "source": source}


@router.put("/lead-sources/{source_id}")
async def update_source(source_id: str, data: LeadSourceUpdate):
    source = await db.lead_sources.find_one({"id": source_id})
    if not source:
        raise HTTPException(status_code=404, detail="Source non trouvée")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.lead_sources.update_one({"id": source_id}, {"$set": update_data})

    updated = await db.lead_sources.find_one({"id": source_id}, {"_id": 0})
    return {"success": True, "source": updated}


@router.post("/lead-sources/{source_id}/rotate-key")
async def rotate_source_key(source_id: str):
    source = await db.lead_sources.find_one({"id": source_id})
    if not source:
        raise HTTPException(status_code=404, detail="Source non trouvée")

    new_key = generate_api_key()
    await db.lead_sources.update_one(
        {"id": source_id},
        {"$set": {"api_key": new_key, "updated_at": now_iso()}}
    )
    return {"success": True, "api_key": new_key}


@router.delete("/lead-sources/{source_id}")
async def delete_source(source_id: str):
    result = await db.lead_sources.delete_one({"id": source_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Source non trouvée")
    return {"success": True}


# ==================== CAMPAGNES ====================

@router.get("/campaigns")
async def list_campaigns(source_id: Optional[str] = None):
    query = {"source_id": source_id} if source_id else {}
    campaigns = await db.campaigns.find(query, {"_id": 0}).sort("created_at", -1).to_list(500)
    return {"campaigns": campaigns, "count": len(campaigns)}


@router.get("/campaigns/{campaign_id}")
async def get_campaign(campaign_id: str):
    campaign = await db.campaigns.find_one({"id": campaign_id}, {"_id": 0})
    if not campaign:
        raise HTTPException(status_code=404, detail="Campagne non trouvée")
    return campaign


@router.post("/campaigns")
async def create_campaign(data: CampaignCreate):
    source = await db.lead_sources.find_one({"id": data.source_id})
    if not source:
        raise HTTPException(status_code=400, detail="Source introuvable")

    campaign = {
        "id": str(uuid.uuid4()),
        **data.model_dump(mode="json"),
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.campaigns.insert_one(campaign)
    campaign.pop("_id", None)
    return {"success": True, "campaign": campaign}


@router.put("/campaigns/{campaign_id}")
async def update_campaign(campaign_id: str, data: CampaignUpdate):
    campaign = await db.campaigns.find_one({"id": campaign_id})
    if not campaign:
        raise HTTPException(status_code=404, detail="Campagne non trouvée")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}
    update_data["updated_at"] = now_iso()
    await db.campaigns.update_one({"id": campaign_id}, {"$set": update_data})

    updated = await db.campaigns.find_one({"id": campaign_id}, {"_id": 0})
    return {"success": True, "campaign": updated}


@router.delete("/campaigns/{campaign_id}")
async def delete_campaign(campaign_id: str):
    result = await db.campaigns.delete_one({"id": campaign_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Campagne non trouvée")
    return {"success": True}
