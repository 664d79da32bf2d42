"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Lead Conversion                                                 ║
║                                                                              ║
║  Lead → Client (→ Commande)                                                  ║
║                                                                              ║
║  RÈGLES:                                                                     ║
║  - Un lead ne se convertit qu'une seule fois                                 ║
║  - Le client est retrouvé par téléphone avant d'être créé                    ║
║  - Conversion avec commande: lead "closed" obligatoire                       ║
║  - Après conversion: is_converted=True, status="closed"                      ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import uuid
import logging
from typing import Optional, Dict, Any, List

from config import db, now_iso, generate_code, normalize_phone_vn
from services.event_logger import log_event
from services.orders import create_order, add_design_file

logger = logging.getLogger("lead_conversion")


class LeadConversionError(Exception):
    """Raised when a lead cannot be converted"""
    pass


async def find_or_create_customer(data: Dict[str, Any]) -> Dict:
    """
    Retourne le client existant ayant ce téléphone, sinon le crée.

    data: full_name, phone, email, address, company_name, tax_code,
          account_manager_id, original_lead_id
    """
    phone = data.get("phone")
    if phone:
        status, normalized = normalize_phone_vn(phone)
        if status == "invalid":
            raise LeadConversionError(normalized)
        phone = normalized

        existing = await db.customers.find_one({"phone": phone}, {"_id": 0})
        if existing:
            return existing

    now = now_iso()
    customer = {
        "id": str(uuid.uuid4()),
        "customer_code": generate_code("KH"),
        "full_name": data.get("full_name", ""),
        "phone": phone,
        "email": data.get("email"),
        "address": data.get("address"),
        "company_name": data.get("company_name"),
        "tax_code": data.get("tax_code"),
        "account_manager_id": data.get("account_manager_id"),
        "original_lead_id": data.get("original_lead_id"),
        "created_at": now,
        "updated_at": now
    }
    await db.customers.insert_one(customer)
    customer.pop("_id", None)
    logger.info(f"[CUSTOMER] {customer['customer_code']} créé ({phone})")
    return customer


async def _get_lead(lead_id: str) -> Dict:
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    if not lead:
        raise LookupError("Lead non trouvé")
    return lead


async def _mark_converted(lead: Dict, customer_id: str, user: str, order_id: Optional[str] = None):
    now = now_iso()
    await db.leads.update_one(
        {"id": lead["id"]},
        {"$set": {
            "is_converted": True,
            "converted_at": now,
            "converted_customer_id": customer_id,
            "status": "closed",
            "updated_at": now
        }}
    )
    await db.interaction_logs.update_many(
        {"lead_id": lead["id"], "customer_id": None},
        {"$set": {"customer_id": customer_id}}
    )
    await log_event(
        action="lead_convert",
        entity_type="lead",
        entity_id=lead["id"],
        user=user,
        details={"previous_status": lead.get("status")},
        related={"customer_id": customer_id, "order_id": order_id}
    )
    logger.info(f"[CONVERSION] Lead {lead['id']} -> client {customer_id}")


async def convert_to_customer(lead_id: str, user: str = "system") -> Dict[str, Any]:
    lead = await _get_lead(lead_id)
    if lead.get("is_converted"):
        raise LeadConversionError("Lead déjà converti en client")

    customer = await find_or_create_customer({
        "full_name": lead.get("full_name"),
        "phone": lead.get("phone"),
        "email": lead.get("email"),
        "account_manager_id": lead.get("assigned_sales_id"),
        "original_lead_id": lead_id,
    })
    await _mark_converted(lead, customer["id"], user)

    return {"success": True, "customer": customer}


async def convert_with_order(
    lead_id: str,
    order_data: Dict[str, Any],
    customer_data: Optional[Dict[str, Any]] = None,
    files: Optional[List[Dict[str, Any]]] = None,
    user: str = "system"
) -> Dict[str, Any]:
    """
    Convertit un lead "closed" en client + commande pending,
    avec les fichiers brief (Google Drive) attachés en "request".
    """
    lead = await _get_lead(lead_id)
    if lead.get("status") != "closed" or lead.get("is_converted"):
        raise LeadConversionError("Chỉ có thể tạo đơn hàng cho lead đã chốt")

    overrides = {k: v for k, v in (customer_data or {}).items() if v}
    customer = await find_or_create_customer({
        "full_name": lead.get("full_name"),
        "phone": lead.get("phone"),
        "email": lead.get("email"),
        "account_manager_id": lead.get("assigned_sales_id"),
        "original_lead_id": lead_id,
        **overrides,
    })

    total_amount = order_data.get("total_amount") or 0
    order = await create_order({
        "customer_id": customer["id"],
        "product_group_id": order_data.get("product_group_id") or lead.get("interested_product_group_id"),
        "description": order_data.get("description"),
        "quantity": order_data.get("quantity") or 1,
        "unit": order_data.get("unit") or "cái",
        "total_amount": total_amount,
        "final_amount": total_amount,
        "sales_employee_id": lead.get("assigned_sales_id"),
        "expected_delivery": order_data.get("expected_delivery"),
        "lead_id": lead_id,
    }, user=user)

    design_files = []
    for f in files or []:
        design_files.append(await add_design_file(order["id"], f, "request", uploaded_by=user))

    await _mark_converted(lead, customer["id"], user, order_id=order["id"])

    return {
        "success": True,
        "customer": customer,
        "order": order,
        "design_files": design_files
    }


async def create_order_from_lead(lead_id: str, order_data: Dict[str, Any], user: str = "system") -> Dict[str, Any]:
    lead = await _get_lead(lead_id)

    customer_id = lead.get("converted_customer_id")
    customer = None
    if customer_id:
        customer = await db.customers.find_one({"id": customer_id}, {"_id": 0})
    if not customer:
        customer = await find_or_create_customer({
            "full_name": lead.get("full_name"),
            "phone": lead.get("phone"),
            "email": lead.get("email"),
            "account_manager_id": lead.get("assigned_sales_id"),
            "original_lead_id": lead_id,
        })

    order = await create_order({
        **order_data,
        "customer_id": customer["id"],
        "product_group_id": order_data.get("product_group_id") or lead.get("interested_product_group_id"),
        "sales_employee_id": lead.get("assigned_sales_id"),
        "lead_id": lead_id,
    }, user=user)

    if not lead.get("is_converted"):
        await _mark_converted(lead, customer["id"], user, order_id=order["id"])

    return {"success": True, "customer": customer, "order": order}
