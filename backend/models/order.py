"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Modèle Commande                                                 ║
║                                                                              ║
║  RÈGLES:                                                                     ║
║  - Une commande naît toujours en "pending"                                   ║
║  - Les changements de statut passent par order_state_machine                 ║
║  - final_amount = total - remise + taxe (si non fourni)                      ║
║  - Fichiers design: "request" (brief client) ou "result" (rendu designer)    ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Optional
from pydantic import BaseModel, Field
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    DESIGNING = "designing"
    APPROVED = "approved"
    PRINTING = "printing"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class OrderCreate(BaseModel):
    customer_id: str
    product_group_id: Optional[str] = None
    description: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)
    unit: str = "cái"
    specifications: Optional[dict] = None
    unit_price: float = Field(0, ge=0)
    total_amount: Optional[float] = Field(None, ge=0)
    discount: float = Field(0, ge=0)
    tax_amount: float = Field(0, ge=0)
    final_amount: Optional[float] = Field(None, ge=0)
    sales_employee_id: Optional[str] = None
    expected_delivery: Optional[str] = None


class OrderUpdate(BaseModel):
    product_group_id: Optional[str] = None
    description: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, ge=1)
    unit: Optional[str] = None
    specifications: Optional[dict] = None
    unit_price: Optional[float] = Field(None, ge=0)
    total_amount: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    tax_amount: Optional[float] = Field(None, ge=0)
    final_amount: Optional[float] = Field(None, ge=0)
    status: Optional[OrderStatus] = None
    sales_employee_id: Optional[str] = None
    expected_delivery: Optional[str] = None
    actual_delivery: Optional[str] = None


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    payment_method: str = "transfer"
    content: Optional[str] = None


class DesignFileCreate(BaseModel):
    google_drive_id: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    file_type: Optional[str] = None
    file_size_bytes: Optional[int] = Field(None, ge=0)
    thumbnail_url: Optional[str] = None
