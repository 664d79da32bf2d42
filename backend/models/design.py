"""
Modèles bibliothèque de templates design
"""

from typing import Optional, List
from pydantic import BaseModel, Field
from enum import Enum


class TemplateType(str, Enum):
    BAG = "bag"
    BOX = "box"
    CARD = "card"
    LABEL = "label"


class DesignTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    type: TemplateType
    category: Optional[str] = None
    tags: List[str] = []
    thumbnail_url: Optional[str] = None
    file_urls: List[str] = []
    dimensions: Optional[str] = None
    paper_weight: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    source_order_id: Optional[str] = None
    notes: Optional[str] = None
    is_public: bool = True


class DesignTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[TemplateType] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    thumbnail_url: Optional[str] = None
    file_urls: Optional[List[str]] = None
    dimensions: Optional[str] = None
    paper_weight: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None
    is_public: Optional[bool] = None


class TemplateFromOrder(BaseModel):
    order_id: str
    name: str = Field(..., min_length=1, max_length=200)
    type: TemplateType
    category: Optional[str] = None
    tags: List[str] = []
    is_public: bool = True
