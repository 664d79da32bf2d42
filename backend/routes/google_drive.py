"""
PRINT CRM - Routes Google Drive (parsing de liens uniquement)
"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import List

from services.google_drive import parse_multiple

router = APIRouter(prefix="/google-drive", tags=["Design"])


class DriveLinks(BaseModel):
    urls: List[str]


@router.post("/parse")
async def parse_drive_links(data: DriveLinks):
    """Extrait les file ids des liens reconnus, ignore les autres"""
    files = parse_multiple(data.urls)
    return {
        "files": files,
        "count": len(files),
        "invalid_count": len(data.urls) - len(files)
    }
