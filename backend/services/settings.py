"""
PRINT CRM - Service Settings

Gestion des parametres systeme dynamiques.
Collection: settings (chaque doc identifie par key)

Settings disponibles:
- company_profile: en-tete societe repris sur les devis
"""

import logging
from typing import Optional, Dict, Any
from config import db, now_iso

logger = logging.getLogger("settings")


async def get_setting(key: str) -> Optional[Dict]:
    """Recupere un setting par sa cle"""
    doc = await db.settings.find_one({"key": key}, {"_id": 0})
    return doc


async def upsert_setting(key: str, data: Dict[str, Any], updated_by: str = "system") -> Dict:
    """Cree ou met a jour un setting"""
    data["key"] = key
    data["updated_at"] = now_iso()
    data["updated_by"] = updated_by

    existing = await db.settings.find_one({"key": key})
    if existing:
        await db.settings.update_one({"key": key}, {"$set": data})
    else:
        data["created_at"] = now_iso()
        await db.settings.insert_one(data)

    result = await db.settings.find_one({"key": key}, {"_id": 0})
    return result


# ---- Company profile ----

DEFAULT_COMPANY_PROFILE = {
    "name": "",
    "representative_name": "",
    "representative_title": "",
    "address": "",
    "phone": "",
    "email": "",
    "tax_code": "",
    "website": "",
    "logo_url": "",
}


async def get_company_profile() -> Dict:
    """Retourne le profil societe (avec defaults)"""
    doc = await get_setting("company_profile")
    if not doc:
        return dict(DEFAULT_COMPANY_PROFILE)
    return {**DEFAULT_COMPANY_PROFILE, **doc}


async def update_company_profile(data: Dict[str, Any], updated_by: str = "system") -> Dict:
    current = await get_company_profile()
    current.update({k: v for k, v in data.items() if v is not None})
    logger.info(f"[SETTINGS] company_profile mis a jour par {updated_by}")
    return await upsert_setting("company_profile", current, updated_by)
