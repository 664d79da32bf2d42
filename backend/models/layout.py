"""
Modèles d'entrée des calculateurs d'imposition (dimensions en cm, prix en VND)
"""

from typing import Optional, Literal
from pydantic import BaseModel, Field


class PrintLayoutInput(BaseModel):
    product_width: float = Field(10, gt=0)
    product_height: float = Field(15, gt=0)
    quantity: int = Field(1000, gt=0)
    paper_size: Optional[str] = None
    paper_width: Optional[float] = Field(None, gt=0)
    paper_height: Optional[float] = Field(None, gt=0)
    bleed: float = Field(0.3, ge=0)
    gap: float = Field(0.2, ge=0)
    margin: float = Field(0.5, ge=0)


class BoxInput(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    depth: float = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    has_inner_flaps: bool = True
    has_lamination: bool = False
    paper_size: Optional[str] = None
    bleed: float = Field(0.3, ge=0)
    gap: float = Field(0.2, ge=0)
    margin: float = Field(0.5, ge=0)
    paper_price_per_m2: float = Field(15000, ge=0)
    print_price_per_m2: float = Field(8000, ge=0)
    lamination_price_per_m2: float = Field(5000, ge=0)
    gluing_price_per_unit: float = Field(500, ge=0)
    cutting_price_per_unit: float = Field(300, ge=0)


class BagInput(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    depth: float = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    handle_type: Literal["none", "paper", "rope"] = "rope"
    has_lamination: bool = False
    has_bottom_reinforcement: bool = True
    paper_size: Optional[str] = None
    bleed: float = Field(0.3, ge=0)
    gap: float = Field(0.2, ge=0)
    margin: float = Field(0.5, ge=0)
    paper_price_per_m2: float = Field(12000, ge=0)
    print_price_per_m2: float = Field(6000, ge=0)
    lamination_price_per_m2: float = Field(5000, ge=0)
    handle_price_per_unit: float = Field(500, ge=0)
    gluing_price_per_unit: float = Field(300, ge=0)
    bottom_reinforcement_price: float = Field(1000, ge=0)
