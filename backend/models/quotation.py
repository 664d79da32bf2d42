"""
Modèles devis (báo giá) et profil société
"""

from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from config import normalize_phone_vn


class MaterialLine(BaseModel):
    material_id: Optional[str] = None
    qty_per_product: float = 1
    factor: float = 1


class LaborLine(BaseModel):
    labor_cost_id: Optional[str] = None
    qty_per_product: float = 1
    factor: float = 1


class QuotationItemInput(BaseModel):
    product_name: Optional[str] = None
    description: Optional[str] = None
    quantity: float = Field(1, ge=0)
    unit: str = "cái"
    materials_lines: List[MaterialLine] = []
    labor_lines: List[LaborLine] = []


class QuotationCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    customer_address: Optional[str] = None
    lead_id: Optional[str] = None
    notes: Optional[str] = None
    valid_until: Optional[str] = None
    items: List[QuotationItemInput] = Field(..., min_length=1)

    @field_validator('customer_phone')
    @classmethod
    def validate_phone(cls, v):
        if not v or not v.strip():
            return None
        status, normalized = normalize_phone_vn(v)
        if status == "invalid":
            raise ValueError(normalized)
        return normalized


class CompanyProfileUpdate(BaseModel):
    name: Optional[str] = None
    representative_name: Optional[str] = None
    representative_title: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    tax_code: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
