"""
PRINT CRM - Routes Dashboard
"""

from fastapi import APIRouter

from services.dashboard import get_metrics, get_employee_kpis, get_chart_data, get_employee_ranking

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/metrics")
async def dashboard_metrics():
    return await get_metrics()


@router.get("/employee-kpis")
async def dashboard_employee_kpis():
    kpis = await get_employee_kpis()
    return {"employees": kpis, "count": len(kpis)}


@router.get("/chart")
async def dashboard_chart():
    return {"data": await get_chart_data()}


@router.get("/ranking")
async def dashboard_ranking():
    return await get_employee_ranking()
