"""
Modèles Client (client final ayant passé commande)
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from config import normalize_phone_vn


class CustomerCreate(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    tax_code: Optional[str] = None
    company_name: Optional[str] = None
    account_manager_id: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        status, normalized = normalize_phone_vn(v)
        if status == "invalid":
            raise ValueError(normalized)
        return normalized


class CustomerUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    tax_code: Optional[str] = None
    company_name: Optional[str] = None
    account_manager_id: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        if v is None:
            return v
        status, normalized = normalize_phone_vn(v)
        if status == "invalid":
            raise ValueError(normalized)
        return normalized
