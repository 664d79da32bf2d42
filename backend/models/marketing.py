"""
Modèles KPI commerciaux et rapports marketing (champs hérités des tableurs internes)
"""

from typing import Optional
from pydantic import BaseModel, Field


class KpiCreate(BaseModel):
    ho_ten: str = Field(..., min_length=1, max_length=100)
    bo_phan: Optional[str] = None
    kpi_thang: float = Field(0, ge=0)
    kpi_tuan: float = Field(0, ge=0)
    kpi_ngay: float = Field(0, ge=0)


class KpiUpdate(BaseModel):
    ho_ten: Optional[str] = Field(None, min_length=1, max_length=100)
    bo_phan: Optional[str] = None
    kpi_thang: Optional[float] = Field(None, ge=0)
    kpi_tuan: Optional[float] = Field(None, ge=0)
    kpi_ngay: Optional[float] = Field(None, ge=0)


class MarketingReportCreate(BaseModel):
    ho_va_ten: str = Field(..., min_length=1, max_length=100)
    page: Optional[str] = None
    cpqc: float = Field(0, ge=0)
    so_mess: int = Field(0, ge=0)
    so_don: int = Field(0, ge=0)
    cps: float = Field(0, ge=0)
    ti_le_chot: float = Field(0, ge=0)


class MarketingReportUpdate(BaseModel):
    ho_va_ten: Optional[str] = Field(None, min_length=1, max_length=100)
    page: Optional[str] = None
    cpqc: Optional[float] = Field(None, ge=0)
    so_mess: Optional[int] = Field(None, ge=0)
    so_don: Optional[int] = Field(None, ge=0)
    cps: Optional[float] = Field(None, ge=0)
    ti_le_chot: Optional[float] = Field(None, ge=0)
