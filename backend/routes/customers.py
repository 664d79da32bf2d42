"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Routes Clients                                                  ║
║                                                                              ║
║  CRUD des clients finaux                                                     ║
║  RÈGLES: téléphone unique, suppression refusée si commandes existantes       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import uuid

from config import db, now_iso, generate_code, search_regex
from models import CustomerCreate, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("")
async def list_customers(
    search: Optional[str] = None,
    account_manager_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    """Liste les clients, recherche sur nom / téléphone / code / email"""
    query = {}
    if account_manager_id:
        query["account_manager_id"] = account_manager_id
    if search:
        query["$or"] = [
            {"full_name": search_regex(search)},
            {"phone": search_regex(search)},
            {"customer_code": search_regex(search)},
            {"email": search_regex(search)}
        ]

    customers = await db.customers.find(query, {"_id": 0}).sort(
        "created_at", -1
    ).skip(offset).limit(limit).to_list(limit)
    total = await db.customers.count_documents(query)

    for customer in customers:
        customer["order_count"] = await db.orders.count_documents({"customer_id": customer["id"]})

    return {"data": customers, "count": total}


@router.get("/{customer_id}")
async def get_customer(customer_id: str):
    """Client + ses 10 dernières commandes"""
    customer = await db.customers.find_one({"id": customer_id}, {"_id": 0})
    if not customer:
        raise HTTPException(status_code=404, detail="Client non trouvé")

    customer["orders"] = await db.orders.find(
        {"customer_id": customer_id}, {"_id": 0}
    ).sort("created_at", -1).to_list(10)

    if customer.get("account_manager_id"):
        customer["account_manager"] = await db.sales_employees.find_one(
            {"id": customer["account_manager_id"]}, {"_id": 0, "full_name": 1, "employee_code": 1}
        )

    return customer


@router.post("")
async def create_customer(data: CustomerCreate):
    existing = await db.customers.find_one({"phone": data.phone})
    if existing:
        raise HTTPException(status_code=400, detail="Số điện thoại đã tồn tại")

    customer = {
        "id": str(uuid.uuid4()),
        "customer_code": generate_code("KH"),
        **data.model_dump(mode="json"),
        "original_lead_id": None,
        "created_at": now_iso(),
        "updated_at": now_iso()
    }
    await db.customers.insert_one(customer)
    customer.pop("_id", None)
    return {"success": True, "customer": customer}


@router.put("/{customer_id}")
async def update_customer(customer_id: str, data: CustomerUpdate):
    customer = await db.customers.find_one({"id": customer_id}, {"_id": 0})
    if not customer:
        raise HTTPException(status_code=404, detail="Client non trouvé")

    update_data = {k: v for k, v in data.model_dump(mode="json").items() if v is not None}

    new_phone = update_data.get("phone")
    if new_phone and new_phone != customer.get("phone"):
        duplicate = await db.customers.find_one({"phone": new_phone, "id": {"$ne": customer_id}})
        if duplicate:
            raise HTTPException(status_code=400, detail="Số điện thoại đã tồn tại")

    update_data["updated_at"] = now_iso()
    await db.customers.update_one({"id": customer_id}, {"$set": update_data})

    updated = await db.customers.find_one({"id": customer_id}, {"_id": 0})
    return {"success": True, "customer": updated}


@router.delete("/{customer_id}")
async def delete_customer(customer_id: str):
    customer = await db.customers.find_one({"id": customer_id})
    if not customer:
        raise HTTPException(status_code=404, detail="Client non trouvé")

    order_count = await db.orders.count_documents({"customer_id": customer_id})
    if order_count > 0:
        raise HTTPException(
            status_code=400,
            detail=f"Suppression impossible: {order_count} commande(s) liée(s) à ce client"
        )

    await db.interaction_logs.delete_many({"customer_id": customer_id})
    await db.customers.delete_one({"id": customer_id})
    return {"success": True}
