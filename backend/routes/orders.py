"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Routes Commandes                                                ║
║                                                                              ║
║  CRUD commandes + paiements + fichiers design (Google Drive)                 ║
║                                                                              ║
║  RÈGLES:                                                                     ║
║  - Tout changement de statut passe par order_state_machine                   ║
║  - Un fichier design ne se supprime que via sa commande                      ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import logging

from config import db, now_iso, search_regex
from models import OrderCreate, OrderUpdate, PaymentCreate, DesignFileCreate
from services.orders import (
    create_order,
    change_order_status,
    compute_payment_status,
    add_payment,
    add_design_file,
)
from services.order_state_machine import (
    OrderTransitionError,
    ORDER_STATUSES,
    ORDER_STATUS_LABELS,
    DESIGN_PENDING_STATUSES,
    get_allowed_transitions,
)

logger = logging.getLogger("orders")

router = APIRouter(prefix="/orders", tags=["Orders"])


async def _get_order_or_404(order_id: str) -> dict:
    order = await db.orders.find_one({"id": order_id}, {"_id": 0})
    if not order:
        raise HTTPException(status_code=404, detail="Commande non trouvée")
    return order


async def _enrich_order(order: dict) -> dict:
    order["customer"] = await db.customers.find_one(
        {"id": order.get("customer_id")}, {"_id": 0, "id": 1, "full_name": 1, "phone": 1, "customer_code": 1}
    )
    if order.get("sales_employee_id"):
        order["sales_employee"] = await db.sales_employees.find_one(
            {"id": order["sales_employee_id"]}, {"_id": 0, "full_name": 1, "employee_code": 1}
        )
    if order.get("product_group_id"):
        order["product_group"] = await db.product_groups.find_one(
            {"id": order["product_group_id"]}, {"_id": 0, "name": 1, "code": 1}
        )
    payments = await db.payments.find({"order_id": order["id"]}, {"_id": 0}).sort(
        "paid_at", -1
    ).to_list(100)
    order["payments"] = payments
    order.update(compute_payment_status(order, payments))
    order["status_label"] = ORDER_STATUS_LABELS.get(order.get("status"), order.get("status"))
    return order


@router.get("")
async def list_orders(
    status: Optional[str] = None,
    sales_employee_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    query = {}
    if status:
        if status not in ORDER_STATUSES:
            raise HTTPException(status_code=400, detail=f"Statut invalide: {status}")
        query["status"] = status
    if sales_employee_id:
        query["sales_employee_id"] = sales_employee_id
    if customer_id:
        query["customer_id"] = customer_id

    orders = await db.orders.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(offset).limit(limit).to_list(limit)
    total = await db.orders.count_documents(query)

    for order in orders:
        await _enrich_order(order)

    return {"data": orders, "count": total}


@router.get("/statuses")
async def list_statuses():
    """Statuts avec libellés et transitions autorisées"""
    return {
        "statuses": [
            {"value": s, "label": ORDER_STATUS_LABELS[s], "next": get_allowed_transitions(s)}
            for s in ORDER_STATUSES
        ]
    }


@router.get("/needs-design")
async def list_orders_needing_design():
    """Commandes en attente de design (pending / designing)"""
    orders = await db.orders.find(
        {"status": {"$in": DESIGN_PENDING_STATUSES}}, {"_id": 0}
    ).sort("created_at", -1).to_list(500)
    for order in orders:
        order["customer"] = await db.customers.find_one(
            {"id": order.get("customer_id")}, {"_id": 0, "full_name": 1, "phone": 1}
        )
        order["file_count"] = await db.design_files.count_documents({"order_id": order["id"]})
    return {"orders": orders, "count": len(orders)}


@router.get("/gallery")
async def design_gallery(
    search: Optional[str] = None,
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    """Galerie: une vignette (dernier fichier avec miniature) + nb de fichiers par commande"""
    query = {}
    if search:
        matching_customers = await db.customers.find(
            {"full_name": search_regex(search)}, {"_id": 0, "id": 1}
        ).to_list(1000)
        query["$or"] = [
            {"order_code": search_regex(search)},
            {"customer_id": {"$in": [c["id"] for c in matching_customers]}}
        ]

    orders = await db.orders.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(offset).limit(limit).to_list(limit)
    total = await db.orders.count_documents(query)

    items = []
    for order in orders:
        customer = await db.customers.find_one({"id": order.get("customer_id")}, {"_id": 0, "full_name": 1})
        thumbs = await db.design_files.find(
            {"order_id": order["id"], "thumbnail_url": {"$ne": None}}, {"_id": 0, "thumbnail_url": 1}
        ).sort("created_at", -1).limit(1).to_list(1)
        items.append({
            "id": order["id"],
            "order_code": order.get("order_code"),
            "customer_name": (customer or {}).get("full_name"),
            "thumbnail_url": thumbs[0]["thumbnail_url"] if thumbs else None,
            "file_count": await db.design_files.count_documents({"order_id": order["id"]}),
            "status": order.get("status"),
            "created_at": order.get("created_at"),
        })

    return {"orders": items, "total": total, "limit": limit, "offset": offset}


@router.get("/{order_id}")
async def get_order(order_id: str):
    """Commande + fichiers design séparés brief (request) / rendu (result)"""
    order = await _enrich_order(await _get_order_or_404(order_id))
    files = await db.design_files.find({"order_id": order_id}, {"_id": 0}).sort(
        "created_at", -1
    ).to_list(500)
    order["request_files"] = [f for f in files if f.get("file_category") == "request"]
    order["result_files"] = [f for f in files if f.get("file_category") == "result"]
    order["allowed_transitions"] = get_allowed_transitions(order.get("status"))
    return order


@router.post("")
async def create_order_route(data: OrderCreate):
    customer = await db.customers.find_one({"id": data.customer_id})
    if not customer:
        raise HTTPException(status_code=400, detail="Client introuvable")

    order = await create_order(data.model_dump(mode="json"))
    return {"success": True, "order": order}


@router.put("/{order_id}")
async def update_order(order_id: str, data: OrderUpdate):
    order = await _get_order_or_404(order_id)
    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}

    new_status = update_data.pop("status", None)
    if new_status:
        try:
            update_data.update(await change_order_status(order, new_status))
        except OrderTransitionError as e:
            raise HTTPException(status_code=400, detail=str(e))

    update_data["updated_at"] = now_iso()
    await db.orders.update_one({"id": order_id}, {"$set": update_data})

    updated = await db.orders.find_one({"id": order_id}, {"_id": 0})
    return {"success": True, "order": updated}


@router.get("/{order_id}/transitions")
async def get_order_transitions(order_id: str):
    order = await _get_order_or_404(order_id)
    status = order.get("status")
    return {
        "status": status,
        "allowed": [
            {"value": s, "label": ORDER_STATUS_LABELS[s]} for s in get_allowed_transitions(status)
        ]
    }


@router.delete("/{order_id}")
async def delete_order(order_id: str):
    await _get_order_or_404(order_id)
    await db.design_files.delete_many({"order_id": order_id})
    await db.payments.delete_many({"order_id": order_id})
    await db.orders.delete_one({"id": order_id})
    logger.info(f"[ORDER] {order_id} supprimée")
    return {"success": True}


# ==================== PAIEMENTS ====================

@router.get("/{order_id}/payments")
async def list_payments(order_id: str):
    order = await _get_order_or_404(order_id)
    payments = await db.payments.find({"order_id": order_id}, {"_id": 0}).sort(
        "paid_at", -1
    ).to_list(500)
    return {"payments": payments, **compute_payment_status(order, payments)}


@router.post("/{order_id}/payments")
async def create_payment(order_id: str, data: PaymentCreate):
    order = await _get_order_or_404(order_id)
    if order.get("status") == "cancelled":
        raise HTTPException(status_code=400, detail="Paiement impossible sur une commande annulée")

    payment = await add_payment(order, data.amount, data.payment_method, data.content)
    payments = await db.payments.find({"order_id": order_id}, {"_id": 0}).to_list(500)
    return {"success": True, "payment": payment, **compute_payment_status(order, payments)}


# ==================== FICHIERS DESIGN ====================

@router.post("/{order_id}/design-files")
async def add_request_file(order_id: str, data: DesignFileCreate):
    """Brief client (fichier "request")"""
    await _get_order_or_404(order_id)
    design_file = await add_design_file(order_id, data.model_dump(mode="json"), "request")
    return {"success": True, "file": design_file}


@router.post("/{order_id}/design-results")
async def add_design_result(order_id: str, data: DesignFileCreate):
    """Rendu designer (fichier "result")"""
    await _get_order_or_404(order_id)
    design_file = await add_design_file(order_id, data.model_dump(mode="json"), "result")
    return {"success": True, "file": design_file}


@router.delete("/{order_id}/design-files/{file_id}")
async def delete_design_file(order_id: str, file_id: str):
    result = await db.design_files.delete_one({"id": file_id, "order_id": order_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Fichier non trouvé pour cette commande")
    return {"success": True}
