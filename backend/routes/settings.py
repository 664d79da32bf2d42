"""
PRINT CRM - Routes Settings (profil société)
"""

from fastapi import APIRouter

from models import CompanyProfileUpdate
from services.settings import get_company_profile, update_company_profile

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/company-profile")
async def read_company_profile():
    return await get_company_profile()


@router.put("/company-profile")
async def write_company_profile(data: CompanyProfileUpdate):
    profile = await update_company_profile(data.model_dump())
    return {"success": True, "company_profile": profile}
