"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Modèle Lead                                                     ║
║                                                                              ║
║  RÈGLES FONDAMENTALES:                                                       ║
║  1. Un lead entre toujours en status "new" puis est auto-assigné             ║
║  2. Entonnoir: new → calling → no_answer/quoted → closed/rejected            ║
║  3. Seul un lead "closed" non converti peut générer une commande             ║
║  4. Téléphone normalisé au format VN (0XXXXXXXXX)                            ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from enum import Enum

from config import normalize_phone_vn


class LeadStatus(str, Enum):
    NEW = "new"
    CALLING = "calling"
    NO_ANSWER = "no_answer"
    QUOTED = "quoted"
    CLOSED = "closed"
    REJECTED = "rejected"


VALID_LEAD_STATUSES = [s.value for s in LeadStatus]

LEAD_STATUS_LABELS = {
    "new": "Mới",
    "calling": "Đang gọi",
    "no_answer": "Không nghe máy",
    "quoted": "Đã báo giá",
    "closed": "Đã chốt",
    "rejected": "Từ chối",
}


class AssignmentMethod(str, Enum):
    MANUAL = "manual"
    PRODUCT_BASED = "product_based"
    ROUND_ROBIN = "round_robin"


def _check_phone(v):
    if v is None:
        return v
    status, normalized = normalize_phone_vn(v)
    if status == "invalid":
        raise ValueError(normalized)
    return normalized


class LeadCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    phone: str
    email: Optional[str] = None
    demand: Optional[str] = None
    source_id: Optional[str] = None
    campaign_id: Optional[str] = None
    customer_group: Optional[str] = None
    interested_product_group_id: Optional[str] = None
    source_label: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class LeadUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    email: Optional[str] = None
    demand: Optional[str] = None
    status: Optional[LeadStatus] = None
    source_id: Optional[str] = None
    campaign_id: Optional[str] = None
    customer_group: Optional[str] = None
    interested_product_group_id: Optional[str] = None
    assigned_sales_id: Optional[str] = None
    assignment_method: Optional[AssignmentMethod] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class CustomerOverride(BaseModel):
    """Données client saisies au moment de la conversion (prioritaires sur le lead)"""
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    company_name: Optional[str] = None
    tax_code: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class ConversionOrder(BaseModel):
    description: str = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    unit: str = "cái"
    product_group_id: Optional[str] = None
    expected_delivery: Optional[str] = None


class ConversionFile(BaseModel):
    google_drive_id: str
    file_name: str
    file_type: Optional[str] = None
    file_size_bytes: Optional[int] = None
    thumbnail_url: Optional[str] = None


class ConvertWithOrder(BaseModel):
    customer: Optional[CustomerOverride] = None
    order: ConversionOrder
    files: List[ConversionFile] = []


class LeadOrderCreate(BaseModel):
    """Commande créée directement depuis un lead (sans passer par closed)"""
    product_group_id: Optional[str] = None
    description: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)
    unit: str = "cái"
    unit_price: float = Field(0, ge=0)
    specifications: Optional[dict] = None
    expected_delivery: Optional[str] = None


# ==================== SOURCES & CAMPAGNES ====================

class SourceType(str, Enum):
    FACEBOOK = "facebook"
    ZALO = "zalo"
    TIKTOK = "tiktok"
    WEBSITE = "website"
    REFERRAL = "referral"
    OTHER = "other"


class LeadSourceCreate(BaseModel):
    type: SourceType
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    api_key: Optional[str] = None
    webhook_url: Optional[str] = None
    is_active: bool = True


class LeadSourceUpdate(BaseModel):
    type: Optional[SourceType] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    api_key: Optional[str] = None
    webhook_url: Optional[str] = None
    is_active: Optional[bool] = None


class CampaignCreate(BaseModel):
    source_id: str
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    is_active: bool = True


class CampaignUpdate(BaseModel):
    source_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class WebhookLead(BaseModel):
    """Payload reçu d'une plateforme (Facebook, Zalo, TikTok, site web)"""
    full_name: str = Field(..., min_length=1, max_length=100)
    phone: str
    email: Optional[str] = None
    demand: Optional[str] = None
    campaign_code: Optional[str] = None
    customer_group: Optional[str] = None
    source_label: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


# ==================== INTERACTIONS ====================

class InteractionType(str, Enum):
    MESSAGE = "message"
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    NOTE = "note"


class InteractionCreate(BaseModel):
    lead_id: str
    customer_id: Optional[str] = None
    sales_id: Optional[str] = None
    type: InteractionType
    content: str = Field(..., min_length=1, max_length=2000)
    summary: Optional[str] = Field(None, max_length=200)
    duration_seconds: Optional[int] = Field(None, ge=0)
    occurred_at: Optional[str] = None
    lead_status: Optional[LeadStatus] = None
