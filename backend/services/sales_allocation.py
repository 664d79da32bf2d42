"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Sales Allocation Engine                                         ║
║                                                                              ║
║  Distribution des leads non assignés aux commerciaux actifs                  ║
║                                                                              ║
║  PRIORITÉS:                                                                  ║
║  1. Règle active qui matche (groupe client / groupe produit)                 ║
║     → commercial de la règle le moins chargé (product_based)                 ║
║  2. Sinon commercial actif le moins chargé (round_robin)                     ║
║                                                                              ║
║  Charge = daily_lead_count, remis à 0 chaque nuit par le scheduler           ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import uuid
import logging
from typing import List, Optional, Dict, Any

from config import db, now_iso
from services.event_logger import log_event

logger = logging.getLogger("sales_allocation")

ELIGIBLE_LEAD_STATUSES = ["new", "calling"]

NO_ACTIVE_SALES_MESSAGE = "Không có nhân viên Sales nào đang hoạt động"


# ════════════════════════════════════════════════════════════════════════════
# MATCHING (fonctions pures)
# ════════════════════════════════════════════════════════════════════════════

def rule_matches(rule: Dict, lead: Dict) -> bool:
    """
    Une règle matche si le groupe client ET le groupe produit sont compatibles
    (vide d'un côté = compatible) et qu'au moins l'un des deux matche vraiment.
    """
    rule_group = rule.get("customer_group")
    lead_group = lead.get("customer_group")
    rule_products = rule.get("product_group_ids") or []
    lead_product = lead.get("interested_product_group_id")

    customer_group_ok = not rule_group or not lead_group or rule_group == lead_group
    product_group_ok = not lead_product or not rule_products or lead_product in rule_products

    specific = bool(
        (rule_group and lead_group and rule_group == lead_group)
        or (lead_product and lead_product in rule_products)
    )

    return customer_group_ok and product_group_ok and specific


def find_matching_rule(rules: List[Dict], lead: Dict) -> Optional[Dict]:
    for rule in rules:
        if rule_matches(rule, lead):
            return rule
    return None


def pick_least_loaded(employees: List[Dict]) -> Optional[Dict]:
    """Commercial avec le moins de leads aujourd'hui (ordre round robin en départage)"""
    if not employees:
        return None
    return min(
        employees,
        key=lambda e: (e.get("daily_lead_count", 0), e.get("round_robin_order", 0))
    )


def rule_reason(rule: Dict) -> str:
    info = []
    if rule.get("customer_group"):
        info.append(f"Nhóm KH: {rule['customer_group']}")
    if rule.get("product_group_ids"):
        info.append("Nhóm SP")
    return f"Phân bổ theo quy tắc: {rule.get('rule_code', '')} ({', '.join(info)})"


# ════════════════════════════════════════════════════════════════════════════
# ASSIGNATION
# ════════════════════════════════════════════════════════════════════════════

async def _active_sales(ids: Optional[List[str]] = None) -> List[Dict]:
    query = {"is_active": True}
    if ids is not None:
        query["id"] = {"$in": ids}
    return await db.sales_employees.find(query, {"_id": 0}).to_list(1000)


async def assign_lead_to_sales(lead_id: str, sales: Dict, method: str, reason: str) -> Dict[str, Any]:
    """Assigne un lead, incrémente les compteurs du commercial et trace l'assignation"""
    now = now_iso()

    await db.leads.update_one(
        {"id": lead_id},
        {"$set": {
            "assigned_sales_id": sales["id"],
            "assigned_at": now,
            "assignment_method": method,
            "updated_at": now
        }}
    )

    await db.sales_employees.update_one(
        {"id": sales["id"]},
        {
            "$inc": {"daily_lead_count": 1, "total_lead_count": 1},
            "$set": {"last_assigned_at": now}
        }
    )

    await db.assignment_logs.insert_one({
        "id": str(uuid.uuid4()),
        "lead_id": lead_id,
        "sales_employee_id": sales["id"],
        "method": method,
        "reason": reason,
        "created_at": now
    })

    await log_event(
        action="lead_assign",
        entity_type="lead",
        entity_id=lead_id,
        details={"method": method, "reason": reason},
        related={"sales_employee_id": sales["id"]}
    )

    logger.info(f"[ALLOCATION] Lead {lead_id} -> {sales.get('full_name')} ({method})")

    return {"lead_id": lead_id, "sales_employee_id": sales["id"], "method": method}


async def _select_sales_for_lead(lead: Dict, rules: List[Dict]) -> Optional[tuple]:
    rule = find_matching_rule(rules, lead)
    if rule and rule.get("assigned_sales_ids"):
        selected = pick_least_loaded(await _active_sales(rule["assigned_sales_ids"]))
        if selected:
            return selected, "product_based", rule_reason(rule)

    selected = pick_least_loaded(await _active_sales())
    if selected:
        return selected, "round_robin", "Phân bổ tự động theo vòng tròn (không khớp quy tắc)"
    return None


async def auto_assign_lead(lead_id: str) -> Optional[Dict[str, Any]]:
    """
    Assigne un seul lead (appelé à la création et par les webhooks).
    Ne fait rien si le lead est déjà assigné, converti ou hors new/calling.
    """
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    if not lead:
        return None
    if lead.get("assigned_sales_id") or lead.get("is_converted"):
        return None
    if lead.get("status") not in ELIGIBLE_LEAD_STATUSES:
        return None

    rules = await db.sales_allocation_rules.find({"is_active": True}, {"_id": 0}).to_list(500)
    selection = await _select_sales_for_lead(lead, rules)
    if not selection:
        logger.warning(f"[ALLOCATION] Lead {lead_id} non assigné: {NO_ACTIVE_SALES_MESSAGE}")
        return None

    sales, method, reason = selection
    return await assign_lead_to_sales(lead_id, sales, method, reason)


async def auto_distribute() -> Dict[str, Any]:
    """Distribue tous les leads non assignés (new/calling, non convertis)"""
    if not await _active_sales():
        return {
            "message": NO_ACTIVE_SALES_MESSAGE,
            "assigned_count": 0,
            "assigned_by_rule": 0,
            "assigned_by_round_robin": 0,
            "total_leads": 0
        }

    rules = await db.sales_allocation_rules.find({"is_active": True}, {"_id": 0}).sort(
        "created_at", 1
    ).to_list(500)

    leads = await db.leads.find({
        "assigned_sales_id": None,
        "status": {"$in": ELIGIBLE_LEAD_STATUSES},
        "is_converted": {"$ne": True}
    }, {"_id": 0}).to_list(10000)

    by_rule = 0
    by_round_robin = 0

    for lead in leads:
        selection = await _select_sales_for_lead(lead, rules)
        if not selection:
            continue
        sales, method, reason = selection
        await assign_lead_to_sales(lead["id"], sales, method, reason)
        if method == "product_based":
            by_rule += 1
        else:
            by_round_robin += 1

    logger.info(
        f"[ALLOCATION] {by_rule + by_round_robin}/{len(leads)} leads distribués "
        f"(règles={by_rule}, round_robin={by_round_robin})"
    )

    return {
        "message": "Đã phân bổ thành công",
        "assigned_count": by_rule + by_round_robin,
        "assigned_by_rule": by_rule,
        "assigned_by_round_robin": by_round_robin,
        "total_leads": len(leads)
    }


async def reset_daily_counts() -> int:
    """Remet à zéro daily_lead_count de tous les commerciaux"""
    result = await db.sales_employees.update_many({}, {"$set": {"daily_lead_count": 0}})
    logger.info(f"[ALLOCATION] Reset daily_lead_count: {result.modified_count} commerciaux")
    return result.modified_count
