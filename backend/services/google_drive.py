"""
PRINT CRM - Google Drive links

Extraction d'un file id depuis les différents formats de liens Drive
collés par les designers, et construction des URLs miniature / aperçu.
Aucun appel réseau: les fichiers restent stockés sur Drive.
"""

import re
from typing import Optional, Dict, List
from urllib.parse import unquote

DRIVE_PATTERNS = [
    re.compile(r'/file/d/([a-zA-Z0-9_-]+)'),
    re.compile(r'lh3\.googleusercontent\.com/d/([a-zA-Z0-9_-]+)'),
    re.compile(r'[?&]id=([a-zA-Z0-9_-]+)'),
]

BARE_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{20,50}$')

ZERO_WIDTH_CHARS = re.compile('[\u200b-\u200d\ufeff]')


def thumbnail_url(file_id: str, size: int = 400) -> str:
    return f"https://drive.google.com/thumbnail?id={file_id}&sz=w{size}"


def view_url(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view"


def extract_file_id(raw: str) -> Optional[str]:
    if not raw:
        return None

    cleaned = ZERO_WIDTH_CHARS.sub('', raw).strip()
    cleaned = re.sub(r'\s+', '', cleaned)
    cleaned = unquote(cleaned)

    for pattern in DRIVE_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            return match.group(1)

    if BARE_ID_PATTERN.match(cleaned):
        return cleaned

    return None


def parse_file_url(raw: str) -> Optional[Dict[str, str]]:
    """
    Parse un lien (ou un id brut) Google Drive.

    Returns:
        {file_id, thumbnail_url, view_url} ou None si non reconnu
    """
    file_id = extract_file_id(raw)
    if not file_id:
        return None
    return {
        "file_id": file_id,
        "thumbnail_url": thumbnail_url(file_id),
        "view_url": view_url(file_id),
    }


def parse_multiple(inputs: List[str]) -> List[Dict[str, str]]:
    """Parse une liste de liens, ignore ceux non reconnus"""
    parsed = (parse_file_url(raw) for raw in inputs)
    return [p for p in parsed if p]
