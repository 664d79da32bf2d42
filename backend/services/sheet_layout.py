"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Sheet Layout Engine                                             ║
║                                                                              ║
║  Calcul d'imposition: combien de poses d'un produit à plat sur une feuille   ║
║                                                                              ║
║  RÈGLES:                                                                     ║
║  - Deux orientations seulement: normale (0°) et tournée (90°)               ║
║  - À égalité de poses, l'orientation normale gagne                           ║
║  - Jamais de nombre de poses négatif (0 = ne rentre pas)                     ║
║  - Toutes les dimensions en cm, surfaces en cm²                              ║
║                                                                              ║
║  Utilisé par les calculateurs: impression générique, boîte, sac papier       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import math
import logging
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger("sheet_layout")


class LayoutInputError(Exception):
    """Raised when layout inputs are out of range"""
    pass


class PaperSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    width: float
    height: float
    is_custom: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class LayoutResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    orientation: str
    cols: int
    rows: int
    ups_per_sheet: int
    used_area: float
    waste_area: float
    efficiency: float

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class LayoutComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    normal: LayoutResult
    rotated: LayoutResult
    best: LayoutResult

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


# ════════════════════════════════════════════════════════════════════════════
# CATALOGUES DE FORMATS
# ════════════════════════════════════════════════════════════════════════════

PRINT_PAPER_SIZES: List[PaperSize] = [
    PaperSize(name="A0", width=84.1, height=118.9),
    PaperSize(name="A1", width=59.4, height=84.1),
    PaperSize(name="A2", width=42, height=59.4),
    PaperSize(name="A3", width=29.7, height=42),
    PaperSize(name="A4", width=21, height=29.7),
    PaperSize(name="A5", width=14.8, height=21),
    PaperSize(name="65x92", width=65, height=92),
    PaperSize(name="70x100", width=70, height=100),
    PaperSize(name="79x109", width=79, height=109),
    PaperSize(name="85x120", width=85, height=120),
    PaperSize(name="61x86", width=61, height=86),
    PaperSize(name="52x76", width=52, height=76),
]

# Formats pour boîtes et sacs (du plus petit au plus grand)
DIE_CUT_PAPER_SIZES: List[PaperSize] = [
    PaperSize(name="A4", width=21, height=29.7),
    PaperSize(name="A3", width=29.7, height=42),
    PaperSize(name="A2", width=42, height=59.4),
    PaperSize(name="A1", width=59.4, height=84.1),
    PaperSize(name="65x86 cm", width=65, height=86),
    PaperSize(name="70x100 cm", width=70, height=100),
    PaperSize(name="79x109 cm", width=79, height=109),
    PaperSize(name="90x120 cm", width=90, height=120),
    PaperSize(name="100x140 cm", width=100, height=140),
]

CUSTOM_PAPER_NAME = "Đặc biệt"


def find_paper_size(name: str, sizes: List[PaperSize]) -> Optional[PaperSize]:
    for size in sizes:
        if size.name == name:
            return size
    return None


def recommend_paper_size(flat_width: float, flat_height: float, sizes: List[PaperSize]) -> PaperSize:
    """
    Premier format de la liste qui contient le produit à plat,
    dans un sens ou dans l'autre. Sinon format spécial à la taille du produit.
    """
    for size in sizes:
        fits_normal = flat_width <= size.width and flat_height <= size.height
        fits_rotated = flat_height <= size.width and flat_width <= size.height
        if fits_normal or fits_rotated:
            return size
    return PaperSize(name=CUSTOM_PAPER_NAME, width=flat_width, height=flat_height, is_custom=True)


# ════════════════════════════════════════════════════════════════════════════
# IMPOSITION
# ════════════════════════════════════════════════════════════════════════════

def _fit_count(available: float, step: float) -> int:
    if available <= 0 or step <= 0:
        return 0
    return int(math.floor(available / step))


def _layout(orientation: str, usable_w: float, usable_h: float, step_w: float, step_h: float,
            item_w: float, item_h: float, sheet_area: float) -> LayoutResult:
    cols = _fit_count(usable_w, step_w)
    rows = _fit_count(usable_h, step_h)
    ups = cols * rows
    used = ups * item_w * item_h if ups else 0.0
    efficiency = (used / sheet_area * 100) if sheet_area > 0 else 0.0
    return LayoutResult(
        orientation=orientation,
        cols=cols,
        rows=rows,
        ups_per_sheet=ups,
        used_area=used,
        waste_area=sheet_area - used,
        efficiency=efficiency,
    )


def compute_layout(
    sheet_width: float,
    sheet_height: float,
    item_width: float,
    item_height: float,
    margin: float = 0,
    bleed: float = 0,
    gap: float = 0,
) -> LayoutComparison:
    """
    Compare la pose normale et la pose tournée à 90° d'un produit sur une feuille.

    usable = feuille - 2 x marge
    pas    = produit + 2 x fond perdu + espacement
    """
    usable_w = sheet_width - 2 * margin
    usable_h = sheet_height - 2 * margin
    step_w = item_width + 2 * bleed + gap
    step_h = item_height + 2 * bleed + gap
    sheet_area = max(sheet_width, 0) * max(sheet_height, 0)

    if item_width <= 0 or item_height <= 0:
        step_w = step_h = 0

    normal = _layout("normal", usable_w, usable_h, step_w, step_h, item_width, item_height, sheet_area)
    rotated = _layout("rotated", usable_w, usable_h, step_h, step_w, item_width, item_height, sheet_area)
    best = normal if normal.ups_per_sheet >= rotated.ups_per_sheet else rotated

    return LayoutComparison(normal=normal, rotated=rotated, best=best)


def sheets_needed(quantity: int, ups_per_sheet: int) -> Optional[int]:
    """Nombre de feuilles pour une quantité. None si le produit ne rentre pas."""
    if ups_per_sheet <= 0:
        return None
    return int(math.ceil(quantity / ups_per_sheet))


def _require_positive(**values: float):
    for name, value in values.items():
        if value is None or value <= 0:
            raise LayoutInputError(f"{name} doit être > 0 (reçu: {value})")


def _require_non_negative(**values: float):
    for name, value in values.items():
        if value is not None and value < 0:
            raise LayoutInputError(f"{name} ne peut pas être négatif (reçu: {value})")


# ════════════════════════════════════════════════════════════════════════════
# CALCULATEUR GÉNÉRIQUE
# ════════════════════════════════════════════════════════════════════════════

def calculate_print_layout(
    product_width: float,
    product_height: float,
    quantity: int,
    paper_size: Optional[str] = None,
    paper_width: Optional[float] = None,
    paper_height: Optional[float] = None,
    bleed: float = 0.3,
    gap: float = 0.2,
    margin: float = 0.5,
) -> Dict[str, Any]:
    """Imposition d'un produit plat (flyer, carte, étiquette) sur un format d'impression"""
    _require_positive(product_width=product_width, product_height=product_height, quantity=quantity)
    _require_non_negative(bleed=bleed, gap=gap, margin=margin)

    if paper_size:
        paper = find_paper_size(paper_size, PRINT_PAPER_SIZES)
        if not paper:
            raise LayoutInputError(f"Format papier inconnu: {paper_size}")
    elif paper_width is not None or paper_height is not None:
        if paper_width is None or paper_height is None:
            raise LayoutInputError("paper_width et paper_height doivent être fournis ensemble")
        _require_positive(paper_width=paper_width, paper_height=paper_height)
        paper = PaperSize(name=CUSTOM_PAPER_NAME, width=paper_width, height=paper_height, is_custom=True)
    else:
        paper = find_paper_size("65x92", PRINT_PAPER_SIZES)

    comparison = compute_layout(
        paper.width, paper.height, product_width, product_height,
        margin=margin, bleed=bleed, gap=gap,
    )
    sheets = sheets_needed(quantity, comparison.best.ups_per_sheet)
    if sheets is None:
        logger.warning(f"[LAYOUT] Produit {product_width}x{product_height} hors format {paper.name}")

    return {
        "paper": paper.to_dict(),
        **comparison.to_dict(),
        "quantity": quantity,
        "sheets_needed": sheets,
        "fits": sheets is not None,
    }


# ════════════════════════════════════════════════════════════════════════════
# BOÎTE
# ════════════════════════════════════════════════════════════════════════════

def suggest_box_paper_weight(width: float, height: float, depth: float) -> int:
    """Grammage conseillé (g/m²) selon le volume et la plus grande dimension"""
    volume = width * height * depth
    largest = max(width, height, depth)
    if volume > 50000 or largest > 50:
        return 400
    if volume > 20000 or largest > 35:
        return 350
    if volume > 8000 or largest > 25:
        return 300
    return 250


def calculate_box(
    width: float,
    height: float,
    depth: float,
    quantity: int,
    has_inner_flaps: bool = True,
    has_lamination: bool = False,
    paper_size: Optional[str] = None,
    bleed: float = 0.3,
    gap: float = 0.2,
    margin: float = 0.5,
    paper_price_per_m2: float = 15000,
    print_price_per_m2: float = 8000,
    lamination_price_per_m2: float = 5000,
    gluing_price_per_unit: float = 500,
    cutting_price_per_unit: float = 300,
) -> Dict[str, Any]:
    """Surface à plat, imposition et coût d'une boîte pliante"""
    _require_positive(width=width, height=height, depth=depth, quantity=quantity)
    _require_non_negative(
        bleed=bleed, gap=gap, margin=margin,
        paper_price_per_m2=paper_price_per_m2, print_price_per_m2=print_price_per_m2,
        lamination_price_per_m2=lamination_price_per_m2,
        gluing_price_per_unit=gluing_price_per_unit, cutting_price_per_unit=cutting_price_per_unit,
    )

    faces = 2 * width * depth + 2 * width * height + 2 * depth * height
    inner_flaps = width * depth * 0.5 if has_inner_flaps else 0
    glue_tabs = faces * 0.10
    flat_area_cm2 = (faces + inner_flaps + glue_tabs) * 1.10
    flat_area_m2 = flat_area_cm2 / 10000

    flat_width = 2 * width + 2 * depth + 3 + 2 * bleed + gap
    flat_height = height + depth + 3 + 2 * bleed + gap

    if paper_size:
        paper = find_paper_size(paper_size, DIE_CUT_PAPER_SIZES)
        if not paper:
            raise LayoutInputError(f"Format papier inconnu: {paper_size}")
    else:
        paper = recommend_paper_size(flat_width, flat_height, DIE_CUT_PAPER_SIZES)

    comparison = compute_layout(paper.width, paper.height, flat_width, flat_height, margin=margin)
    sheets = sheets_needed(quantity, comparison.best.ups_per_sheet)

    material_m2 = flat_area_m2 * quantity * 1.05
    paper_cost = material_m2 * paper_price_per_m2
    print_cost = material_m2 * print_price_per_m2
    lamination_cost = material_m2 * lamination_price_per_m2 if has_lamination else 0
    gluing_cost = quantity * gluing_price_per_unit
    cutting_cost = quantity * cutting_price_per_unit
    total = paper_cost + print_cost + lamination_cost + gluing_cost + cutting_cost

    return {
        "flat_area_cm2": flat_area_cm2,
        "flat_area_m2": flat_area_m2,
        "flat_width": flat_width,
        "flat_height": flat_height,
        "paper": paper.to_dict(),
        "layout": comparison.to_dict(),
        "ups_per_sheet": comparison.best.ups_per_sheet,
        "sheets_needed": sheets,
        "material_m2": material_m2,
        "suggested_paper_weight": suggest_box_paper_weight(width, height, depth),
        "costs": {
            "paper": paper_cost,
            "print": print_cost,
            "lamination": lamination_cost,
            "gluing": gluing_cost,
            "cutting": cutting_cost,
            "total": total,
        },
        "quantity": quantity,
        "cost_per_unit": total / quantity,
    }


# ════════════════════════════════════════════════════════════════════════════
# SAC PAPIER
# ════════════════════════════════════════════════════════════════════════════

HANDLE_TYPES = ("none", "paper", "rope")


def suggest_bag_paper_weight(width: float, height: float, depth: float) -> int:
    volume = width * height * depth
    largest = max(width, height)
    if volume > 30000 or largest > 40:
        return 250
    if volume > 15000 or largest > 30:
        return 200
    if volume > 5000 or largest > 20:
        return 150
    return 120


def calculate_bag(
    width: float,
    height: float,
    depth: float,
    quantity: int,
    handle_type: str = "rope",
    has_lamination: bool = False,
    has_bottom_reinforcement: bool = True,
    paper_size: Optional[str] = None,
    bleed: float = 0.3,
    gap: float = 0.2,
    margin: float = 0.5,
    paper_price_per_m2: float = 12000,
    print_price_per_m2: float = 6000,
    lamination_price_per_m2: float = 5000,
    handle_price_per_unit: float = 500,
    gluing_price_per_unit: float = 300,
    bottom_reinforcement_price: float = 1000,
) -> Dict[str, Any]:
    """Surface à plat, imposition et coût d'un sac papier"""
    _require_positive(width=width, height=height, depth=depth, quantity=quantity)
    _require_non_negative(
        bleed=bleed, gap=gap, margin=margin,
        paper_price_per_m2=paper_price_per_m2, print_price_per_m2=print_price_per_m2,
        lamination_price_per_m2=lamination_price_per_m2, handle_price_per_unit=handle_price_per_unit,
        gluing_price_per_unit=gluing_price_per_unit, bottom_reinforcement_price=bottom_reinforcement_price,
    )
    if handle_type not in HANDLE_TYPES:
        raise LayoutInputError(f"Type de poignée invalide: {handle_type}. Valeurs: {list(HANDLE_TYPES)}")

    main_panels = width * height * 2
    side_gussets = depth * height * 2
    bottom = width * depth * 1.5
    top_fold = width * 3
    flat_area_cm2 = (main_panels + side_gussets + bottom + top_fold) * 1.15
    flat_area_m2 = flat_area_cm2 / 10000

    flat_width = 2 * width + 2 * depth + 5 + 2 * bleed + gap
    flat_height = height + depth + 5 + 2 * bleed + gap

    if paper_size:
        paper = find_paper_size(paper_size, DIE_CUT_PAPER_SIZES)
        if not paper:
            raise LayoutInputError(f"Format papier inconnu: {paper_size}")
    else:
        paper = recommend_paper_size(flat_width, flat_height, DIE_CUT_PAPER_SIZES)

    comparison = compute_layout(paper.width, paper.height, flat_width, flat_height, margin=margin)
    sheets = sheets_needed(quantity, comparison.best.ups_per_sheet)

    material_m2 = flat_area_m2 * quantity * 1.05
    paper_cost = material_m2 * paper_price_per_m2
    print_cost = material_m2 * print_price_per_m2
    lamination_cost = material_m2 * lamination_price_per_m2 if has_lamination else 0
    handle_cost = quantity * handle_price_per_unit if handle_type != "none" else 0
    gluing_cost = quantity * gluing_price_per_unit
    reinforcement_cost = quantity * bottom_reinforcement_price if has_bottom_reinforcement else 0
    total = paper_cost + print_cost + lamination_cost + handle_cost + gluing_cost + reinforcement_cost

    return {
        "flat_area_cm2": flat_area_cm2,
        "flat_area_m2": flat_area_m2,
        "flat_width": flat_width,
        "flat_height": flat_height,
        "paper": paper.to_dict(),
        "layout": comparison.to_dict(),
        "ups_per_sheet": comparison.best.ups_per_sheet,
        "sheets_needed": sheets,
        "material_m2": material_m2,
        "suggested_paper_weight": suggest_bag_paper_weight(width, height, depth),
        "costs": {
            "paper": paper_cost,
            "print": print_cost,
            "lamination": lamination_cost,
            "handle": handle_cost,
            "gluing": gluing_cost,
            "bottom_reinforcement": reinforcement_cost,
            "total": total,
        },
        "quantity": quantity,
        "cost_per_unit": total / quantity,
    }
