"""
Modèles Commerciaux (sales) et règles d'allocation des leads
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class SalesEmployeeCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None
    is_active: bool = True


class SalesEmployeeUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None
    is_active: Optional[bool] = None
    round_robin_order: Optional[int] = Field(None, ge=0)


class ReorderItem(BaseModel):
    id: str
    round_robin_order: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    items: List[ReorderItem]


class SpecializationUpsert(BaseModel):
    product_group_id: str
    is_primary: bool = False


class AllocationRuleCreate(BaseModel):
    customer_group: Optional[str] = None
    product_group_ids: List[str] = []
    assigned_sales_ids: List[str] = Field(..., min_length=1)
    is_active: bool = True


class AllocationRuleUpdate(BaseModel):
    customer_group: Optional[str] = None
    product_group_ids: Optional[List[str]] = None
    assigned_sales_ids: Optional[List[str]] = None
    is_active: Optional[bool] = None
