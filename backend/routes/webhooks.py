"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Webhooks plateformes                                            ║
║                                                                              ║
║  POST /api/webhooks/{facebook|zalo|tiktok|website}                           ║
║  Header x-api-key = clé d'une source ACTIVE du même type                     ║
║  Le lead est créé en "new" puis auto-assigné                                 ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, HTTPException, Header
from typing import Optional, Literal
import logging

from config import db
from models import WebhookLead
from routes.leads import insert_lead

logger = logging.getLogger("webhooks")

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

WebhookPlatform = Literal["facebook", "zalo", "tiktok", "website"]


async def resolve_source(platform: str, api_key: Optional[str]) -> dict:
    """Retrouve la source active correspondant à la clé API"""
    if not api_key:
        raise HTTPException(status_code=400, detail="API key is required")

    source = await db.lead_sources.find_one(
        {"type": platform, "api_key": api_key, "is_active": True},
        {"_id": 0}
    )
    if not source:
        logger.warning(f"[WEBHOOK] Clé API invalide pour {platform}")
        raise HTTPException(status_code=400, detail=f"Clé API invalide ou source {platform} inactive")
    return source


@router.post("/{platform}")
async def receive_lead(
    platform: WebhookPlatform,
    data: WebhookLead,
    x_api_key: Optional[str] = Header(None)
):
    source = await resolve_source(platform, x_api_key)

    campaign_id = None
    if data.campaign_code:
        campaign = await db.campaigns.find_one(
            {"code": data.campaign_code, "source_id": source["id"], "is_active": True},
            {"_id": 0, "id": 1}
        )
        if campaign:
            campaign_id = campaign["id"]

    lead = await insert_lead({
        "full_name": data.full_name,
        "phone": data.phone,
        "email": data.email,
        "demand": data.demand,
        "customer_group": data.customer_group,
        "source_id": source["id"],
        "campaign_id": campaign_id,
        "source_label": data.source_label or f"{platform}_webhook",
    })

    logger.info(f"[WEBHOOK] Lead {lead['id']} reçu via {platform} ({source.get('name')})")

    return {
        "success": True,
        "lead_id": lead["id"],
        "message": "Lead created successfully"
    }
