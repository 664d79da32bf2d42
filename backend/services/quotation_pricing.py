"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Quotation Pricing                                               ║
║                                                                              ║
║  Prix unitaire d'une ligne de devis =                                        ║
║     Σ matériau.unit_price × définition (ĐM) × coefficient (HS)               ║
║   + Σ main d'oeuvre.unit_cost × définition × coefficient                     ║
║                                                                              ║
║  RÈGLES:                                                                     ║
║  - Une ligne utilisée a au moins 1 matériau ET 1 main d'oeuvre               ║
║  - Toutes les sous-lignes doivent référencer un élément existant             ║
║  - Les noms/prix sont figés dans le devis (snapshot)                         ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import uuid
import logging
from typing import Dict, Any, List, Optional

from config import db, now_iso, generate_code
from services.event_logger import log_event
from services.lead_conversion import find_or_create_customer
from services.settings import get_company_profile

logger = logging.getLogger("quotations")

UNNAMED_ITEM = "(chưa đặt tên)"
FALLBACK_PRODUCT_NAME = "(Sản phẩm)"


class QuotationError(Exception):
    """Raised when a quotation cannot be built"""
    pass


def _num(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _fmt(value: float) -> str:
    value = _num(value)
    return str(int(value)) if value == int(value) else str(value)


def compute_unit_price(item: Dict, materials: Dict[str, Dict], labor_costs: Dict[str, Dict]) -> float:
    """Prix unitaire d'un produit à partir de ses lignes matériaux et main d'oeuvre"""
    total = 0.0
    for line in item.get("materials_lines") or []:
        material = materials.get(line.get("material_id")) or {}
        qty = max(0.0, _num(line.get("qty_per_product")))
        factor = max(0.0, _num(line.get("factor")))
        total += _num(material.get("unit_price")) * qty * factor
    for line in item.get("labor_lines") or []:
        labor = labor_costs.get(line.get("labor_cost_id")) or {}
        qty = max(0.0, _num(line.get("qty_per_product")))
        factor = max(0.0, _num(line.get("factor")))
        total += _num(labor.get("unit_cost")) * qty * factor
    return total


def is_used_item(item: Dict) -> bool:
    has_name = bool((item.get("product_name") or "").strip())
    has_material = any(l.get("material_id") for l in item.get("materials_lines") or [])
    has_labor = any(l.get("labor_cost_id") for l in item.get("labor_lines") or [])
    return has_name or has_material or has_labor


def validate_items(items: List[Dict]) -> List[Dict]:
    """
    Garde les lignes utilisées et vérifie qu'elles sont complètes.

    Raises:
        QuotationError avec le nom de la ligne fautive
    """
    used = [it for it in items if is_used_item(it)]
    if not used:
        raise QuotationError("Le devis ne contient aucune ligne")

    for it in used:
        name = (it.get("product_name") or "").strip() or UNNAMED_ITEM
        mats = it.get("materials_lines") or []
        labs = it.get("labor_lines") or []
        if not mats:
            raise QuotationError(f'Thiếu vật liệu cho dòng: "{name}".')
        if not labs:
            raise QuotationError(f'Thiếu công đoạn cho dòng: "{name}".')
        if any(not l.get("material_id") for l in mats):
            raise QuotationError(f'Có dòng vật liệu chưa chọn ở: "{name}".')
        if any(not l.get("labor_cost_id") for l in labs):
            raise QuotationError(f'Có dòng công đoạn chưa chọn ở: "{name}".')
    return used


def build_line(item: Dict, materials: Dict[str, Dict], labor_costs: Dict[str, Dict]) -> Dict[str, Any]:
    """Ligne imprimable: nom + détails matériaux / main d'oeuvre, quantité, prix, montant"""
    quantity = _num(item.get("quantity"))
    price = compute_unit_price(item, materials, labor_costs)

    details = []
    description = (item.get("description") or "").strip()
    if description:
        details.append(description)

    for ml in item.get("materials_lines") or []:
        material = materials.get(ml.get("material_id"))
        if not material:
            continue
        details.append(
            f"Vật liệu: {material.get('element_name')} | ĐM: {_fmt(ml.get('qty_per_product'))} "
            f"{material.get('unit', '')} × HS {_fmt(ml.get('factor'))}"
        )

    for ll in item.get("labor_lines") or []:
        labor = labor_costs.get(ll.get("labor_cost_id"))
        if not labor:
            continue
        details.append(
            f"Công đoạn: {labor.get('action')} | ĐM: {_fmt(ll.get('qty_per_product'))} "
            f"{labor.get('unit') or 'lần'} × HS {_fmt(ll.get('factor'))}"
        )

    product_name = (item.get("product_name") or "").strip()
    if not product_name:
        first_material = next(
            (materials.get(l.get("material_id")) for l in item.get("materials_lines") or [] if l.get("material_id")),
            None
        )
        first_labor = next(
            (labor_costs.get(l.get("labor_cost_id")) for l in item.get("labor_lines") or [] if l.get("labor_cost_id")),
            None
        )
        parts = [p for p in (
            (first_material or {}).get("element_name"),
            (first_labor or {}).get("action"),
        ) if p]
        product_name = " - ".join(parts) if parts else FALLBACK_PRODUCT_NAME

    name = f"{product_name}\n" + "\n".join(details) if details else product_name

    return {
        "name": name,
        "unit": item.get("unit") or "",
        "quantity": quantity,
        "price": price,
        "amount": quantity * price,
    }


def snapshot_item(item: Dict, materials: Dict[str, Dict], labor_costs: Dict[str, Dict]) -> Dict[str, Any]:
    """Copie de la ligne avec noms et prix des matériaux / main d'oeuvre au moment du devis"""
    materials_lines = []
    for ml in item.get("materials_lines") or []:
        material = materials.get(ml.get("material_id")) or {}
        materials_lines.append({
            **ml,
            "material_name": material.get("element_name"),
            "material_unit": material.get("unit"),
            "material_unit_price": material.get("unit_price"),
        })

    labor_lines = []
    for ll in item.get("labor_lines") or []:
        labor = labor_costs.get(ll.get("labor_cost_id")) or {}
        labor_lines.append({
            **ll,
            "labor_action": labor.get("action"),
            "labor_unit": labor.get("unit"),
            "labor_unit_cost": labor.get("unit_cost"),
        })

    return {
        **item,
        "unit_price": compute_unit_price(item, materials, labor_costs),
        "materials_lines": materials_lines,
        "labor_lines": labor_lines,
    }


async def _load_catalog(items: List[Dict]) -> tuple:
    material_ids = {l.get("material_id") for it in items for l in it.get("materials_lines") or []}
    labor_ids = {l.get("labor_cost_id") for it in items for l in it.get("labor_lines") or []}

    materials = await db.materials.find({"id": {"$in": list(material_ids)}}, {"_id": 0}).to_list(1000)
    labor_costs = await db.labor_costs.find({"id": {"$in": list(labor_ids)}}, {"_id": 0}).to_list(1000)

    materials_by_id = {m["id"]: m for m in materials}
    labor_by_id = {l["id"]: l for l in labor_costs}

    missing = [i for i in material_ids if i not in materials_by_id]
    missing += [i for i in labor_ids if i not in labor_by_id]
    if missing:
        raise QuotationError(f"Éléments de coût introuvables: {missing}")

    return materials_by_id, labor_by_id


async def create_quotation(data: Dict[str, Any], user: str = "system") -> Dict:
    """
    Construit et enregistre un devis: validation des lignes, calcul des prix,
    client retrouvé ou créé, profil société figé dans le document.
    """
    customer_name = (data.get("customer_name") or "").strip()
    if not customer_name:
        raise QuotationError("Vui lòng nhập tên khách hàng.")

    used = validate_items(data.get("items") or [])
    materials, labor_costs = await _load_catalog(used)

    lines = [build_line(it, materials, labor_costs) for it in used]
    subtotal = sum(l["amount"] for l in lines)

    lead_id = data.get("lead_id")
    lead: Optional[Dict] = None
    if lead_id:
        lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
        if not lead:
            raise QuotationError("Lead non trouvé")

    customer = None
    if lead and lead.get("converted_customer_id"):
        customer = await db.customers.find_one({"id": lead["converted_customer_id"]}, {"_id": 0})
    if not customer and data.get("customer_phone"):
        customer = await find_or_create_customer({
            "full_name": customer_name,
            "phone": data.get("customer_phone"),
            "email": data.get("customer_email"),
            "address": data.get("customer_address"),
            "original_lead_id": lead_id,
        })

    now = now_iso()
    quotation = {
        "id": str(uuid.uuid4()),
        "quotation_code": generate_code("BG"),
        "customer_id": customer["id"] if customer else None,
        "lead_id": lead_id,
        "customer": {
            "name": customer_name,
            "phone": data.get("customer_phone") or "",
            "email": data.get("customer_email") or "",
            "address": data.get("customer_address") or "",
        },
        "company": await get_company_profile(),
        "items": [snapshot_item(it, materials, labor_costs) for it in used],
        "lines": lines,
        "subtotal": subtotal,
        "total_amount": subtotal,
        "notes": data.get("notes") or "",
        "valid_until": data.get("valid_until"),
        "created_by": user,
        "created_at": now,
        "updated_at": now
    }
    quotation["company"].pop("_id", None)

    await db.quotations.insert_one(quotation)
    quotation.pop("_id", None)

    await log_event(
        action="quotation_create",
        entity_type="quotation",
        entity_id=quotation["id"],
        user=user,
        details={"quotation_code": quotation["quotation_code"], "total_amount": subtotal},
        related={"lead_id": lead_id, "customer_id": quotation["customer_id"]}
    )
    logger.info(f"[QUOTATION] {quotation['quotation_code']} total={subtotal}")
    return quotation
