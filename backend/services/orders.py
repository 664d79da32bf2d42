"""
PRINT CRM - Service Commandes

Création des commandes, changements de statut via la state machine,
paiements et statut de paiement dérivé.
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from config import db, now_iso, generate_code
from models.order import PaymentStatus
from services.event_logger import log_event
from services.order_state_machine import validate_status_transition

logger = logging.getLogger("orders")


def compute_final_amount(total_amount: float, discount: float = 0, tax_amount: float = 0) -> float:
    return max(total_amount - discount + tax_amount, 0)


async def create_order(data: Dict[str, Any], user: str = "system") -> Dict:
    """
    Insère une commande en status "pending".

    total_amount par défaut = quantity x unit_price
    final_amount par défaut = total - remise + taxe
    """
    quantity = data.get("quantity") or 1
    unit_price = data.get("unit_price") or 0
    total_amount = data.get("total_amount")
    if total_amount is None:
        total_amount = quantity * unit_price
    discount = data.get("discount") or 0
    tax_amount = data.get("tax_amount") or 0
    final_amount = data.get("final_amount")
    if final_amount is None:
        final_amount = compute_final_amount(total_amount, discount, tax_amount)

    now = now_iso()
    order = {
        "id": str(uuid.uuid4()),
        "order_code": generate_code("DH"),
        "customer_id": data["customer_id"],
        "product_group_id": data.get("product_group_id"),
        "description": data.get("description", ""),
        "quantity": quantity,
        "unit": data.get("unit") or "cái",
        "specifications": data.get("specifications") or {},
        "unit_price": unit_price,
        "total_amount": total_amount,
        "discount": discount,
        "tax_amount": tax_amount,
        "final_amount": final_amount,
        "status": "pending",
        "sales_employee_id": data.get("sales_employee_id"),
        "lead_id": data.get("lead_id"),
        "order_date": now,
        "expected_delivery": data.get("expected_delivery"),
        "actual_delivery": None,
        "created_at": now,
        "updated_at": now
    }

    await db.orders.insert_one(order)
    order.pop("_id", None)

    await log_event(
        action="order_create",
        entity_type="order",
        entity_id=order["id"],
        user=user,
        details={"order_code": order["order_code"], "final_amount": final_amount},
        related={"customer_id": order["customer_id"], "lead_id": order["lead_id"]}
    )
    logger.info(f"[ORDER] {order['order_code']} créée (client {order['customer_id']})")
    return order


async def change_order_status(order: Dict, new_status: str, user: str = "system") -> Dict[str, Any]:
    """
    Applique un changement de statut validé par la state machine.

    Raises:
        OrderTransitionError si la transition est interdite
    """
    current = order.get("status", "pending")
    validate_status_transition(current, new_status)

    update = {"status": new_status, "updated_at": now_iso()}
    if current == new_status:
        return update

    if new_status == "delivered" and not order.get("actual_delivery"):
        update["actual_delivery"] = now_iso()

    await log_event(
        action="order_status_change",
        entity_type="order",
        entity_id=order["id"],
        user=user,
        details={"old_status": current, "new_status": new_status},
        related={"customer_id": order.get("customer_id")}
    )
    logger.info(f"[ORDER_STATUS] {order.get('order_code')} {current} -> {new_status}")
    return update


# ════════════════════════════════════════════════════════════════════════════
# PAIEMENTS
# ════════════════════════════════════════════════════════════════════════════

def _parse_iso(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_payment_status(order: Dict, payments: List[Dict], now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Statut de paiement dérivé des paiements encaissés.

    overdue = solde restant après la date de livraison prévue
    """
    final_amount = order.get("final_amount") or 0
    paid = sum(p.get("amount", 0) for p in payments if p.get("status", "paid") == "paid")
    balance = max(final_amount - paid, 0)

    if paid > 0 and balance <= 0:
        status = PaymentStatus.PAID
    elif paid > 0:
        status = PaymentStatus.PARTIAL
    else:
        status = PaymentStatus.UNPAID

    if status != PaymentStatus.PAID and final_amount > 0:
        expected = _parse_iso(order.get("expected_delivery") or "")
        now = now or datetime.now(timezone.utc)
        if expected and expected < now:
            status = PaymentStatus.OVERDUE

    return {"paid_amount": paid, "balance": balance, "payment_status": status.value}


async def add_payment(order: Dict, amount: float, payment_method: str = "transfer",
                      content: Optional[str] = None, user: str = "system") -> Dict:
    now = now_iso()
    payment = {
        "id": str(uuid.uuid4()),
        "payment_code": generate_code("PAY"),
        "order_id": order["id"],
        "amount": amount,
        "payment_method": payment_method or "transfer",
        "status": "paid",
        "paid_at": now,
        "notes": content,
        "created_at": now
    }
    await db.payments.insert_one(payment)
    payment.pop("_id", None)

    await log_event(
        action="payment_add",
        entity_type="payment",
        entity_id=payment["id"],
        user=user,
        details={"amount": amount, "method": payment["payment_method"]},
        related={"order_id": order["id"], "customer_id": order.get("customer_id")}
    )
    logger.info(f"[PAYMENT] {payment['payment_code']} {amount} sur {order.get('order_code')}")
    return payment


# ════════════════════════════════════════════════════════════════════════════
# FICHIERS DESIGN
# ════════════════════════════════════════════════════════════════════════════

async def add_design_file(order_id: str, data: Dict[str, Any], category: str, uploaded_by: Optional[str] = None) -> Dict:
    """Référence un fichier Google Drive sur une commande (category: request | result)"""
    drive_id = data["google_drive_id"]
    design_file = {
        "id": str(uuid.uuid4()),
        "order_id": order_id,
        "file_name": data["file_name"],
        "file_type": data.get("file_type"),
        "file_size_bytes": data.get("file_size_bytes"),
        "google_drive_id": drive_id,
        "thumbnail_url": data.get("thumbnail_url"),
        "storage_path": f"gdrive://{drive_id}",
        "file_category": category,
        "uploaded_by": uploaded_by,
        "created_at": now_iso()
    }
    await db.design_files.insert_one(design_file)
    design_file.pop("_id", None)
    return design_file
