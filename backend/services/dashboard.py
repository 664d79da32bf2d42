"""
PRINT CRM - Dashboard

Indicateurs globaux, KPI par commercial, courbe 7 jours avec moyenne
mobile sur 3 jours, classement top/bottom par chiffre d'affaires.
"""

import math
from datetime import datetime, timezone, timedelta
from typing import List, Dict, Any, Optional

from config import db, today_start_iso, REVENUE_TARGET

DAY_NAMES = ["T2", "T3", "T4", "T5", "T6", "T7", "CN"]  # weekday() 0 = lundi


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def moving_average(values: List[float], window: int = 3) -> List[float]:
    """Moyenne mobile arrière: fenêtre tronquée en début de série"""
    result = []
    for i in range(len(values)):
        chunk = values[max(0, i - window + 1):i + 1]
        result.append(round_half_up(sum(chunk) / len(chunk)))
    return result


def employee_kpi(employee: Dict, leads: int, orders: int, revenue: float, target: float) -> Dict[str, Any]:
    conversion_rate = (orders / leads * 100) if leads > 0 else 0
    progress = min(100, int(round_half_up(revenue / target * 100, 0))) if target > 0 else 0
    return {
        "id": employee["id"],
        "name": employee.get("full_name"),
        "employee_code": employee.get("employee_code"),
        "leads": leads,
        "orders": orders,
        "conversion_rate": round_half_up(conversion_rate),
        "revenue": revenue,
        "target": target,
        "progress_percent": progress,
    }


def rank_by_revenue(kpis: List[Dict], size: int = 3) -> Dict[str, List[Dict]]:
    ordered = sorted(kpis, key=lambda k: k["revenue"], reverse=True)
    return {
        "top3": ordered[:size],
        "bottom3": list(reversed(ordered[-size:])) if ordered else [],
    }


async def _sum_final_amount(query: Dict) -> float:
    orders = await db.orders.find(query, {"_id": 0, "final_amount": 1}).to_list(100000)
    return sum(o.get("final_amount") or 0 for o in orders)


async def get_metrics() -> Dict[str, Any]:
    today = today_start_iso()

    return {
        "leads": {
            "total": await db.leads.count_documents({}),
            "today": await db.leads.count_documents({"created_at": {"$gte": today}}),
            "converted": await db.leads.count_documents({"is_converted": True}),
        },
        "orders": {
            "total": await db.orders.count_documents({}),
            "today": await db.orders.count_documents({"created_at": {"$gte": today}}),
            "completed": await db.orders.count_documents({"status": "completed"}),
        },
        "revenue": {
            "total": await _sum_final_amount({}),
            "today": await _sum_final_amount({"created_at": {"$gte": today}}),
            "target": REVENUE_TARGET,
        },
    }


async def get_employee_kpis() -> List[Dict[str, Any]]:
    employees = await db.sales_employees.find({"is_active": True}, {"_id": 0}).sort(
        "round_robin_order", 1
    ).to_list(500)

    kpis = []
    for emp in employees:
        leads = await db.leads.count_documents({"assigned_sales_id": emp["id"]})
        orders = await db.orders.count_documents({"sales_employee_id": emp["id"]})
        revenue = await _sum_final_amount({"sales_employee_id": emp["id"]})
        kpis.append(employee_kpi(emp, leads, orders, revenue, REVENUE_TARGET))
    return kpis


async def get_chart_data(days: int = 7, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or datetime.now(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    data = []
    for offset in range(days - 1, -1, -1):
        start = today - timedelta(days=offset)
        end = start + timedelta(days=1)
        window = {"created_at": {"$gte": start.isoformat(), "$lt": end.isoformat()}}
        data.append({
            "name": DAY_NAMES[start.weekday()],
            "date": start.date().isoformat(),
            "leads": await db.leads.count_documents(window),
            "orders": await db.orders.count_documents(window),
        })

    lead_ma = moving_average([d["leads"] for d in data])
    order_ma = moving_average([d["orders"] for d in data])
    for point, l_ma, o_ma in zip(data, lead_ma, order_ma):
        point["lead_ma"] = l_ma
        point["order_ma"] = o_ma

    return data


async def get_employee_ranking() -> Dict[str, List[Dict]]:
    return rank_by_revenue(await get_employee_kpis())
