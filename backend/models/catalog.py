"""
Modèles catalogue: groupes de produits, matériaux, coûts de main d'oeuvre
"""

from typing import Optional
from pydantic import BaseModel, Field


class ProductGroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True


class ProductGroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class MaterialCreate(BaseModel):
    product_group_id: Optional[str] = None
    element_name: str = Field(..., min_length=1, max_length=200)
    unit: str = Field(..., min_length=1, max_length=50)
    unit_price: float = Field(..., ge=0)
    total_cost: float = Field(0, ge=0)
    is_active: bool = True


class MaterialUpdate(BaseModel):
    product_group_id: Optional[str] = None
    element_name: Optional[str] = Field(None, min_length=1, max_length=200)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    unit_price: Optional[float] = Field(None, ge=0)
    total_cost: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class LaborCostCreate(BaseModel):
    action: str = Field(..., min_length=1, max_length=200)
    product_group_id: str
    material_id: str
    unit_cost: float = Field(..., ge=0)
    unit: Optional[str] = Field(None, max_length=50)
    is_active: bool = True


class LaborCostUpdate(BaseModel):
    action: Optional[str] = Field(None, min_length=1, max_length=200)
    product_group_id: Optional[str] = None
    material_id: Optional[str] = None
    unit_cost: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None
