"""
PRINT CRM - Routes Calculateurs d'imposition (impression, boîte, sac)

Calcul pur, aucune écriture en base.
"""

from fastapi import APIRouter, HTTPException

from models import PrintLayoutInput, BoxInput, BagInput
from services.sheet_layout import (
    LayoutInputError,
    PRINT_PAPER_SIZES,
    DIE_CUT_PAPER_SIZES,
    calculate_print_layout,
    calculate_box,
    calculate_bag,
)

router = APIRouter(prefix="/layout", tags=["Layout"])


@router.get("/paper-sizes")
async def list_paper_sizes():
    return {
        "print": [p.to_dict() for p in PRINT_PAPER_SIZES],
        "die_cut": [p.to_dict() for p in DIE_CUT_PAPER_SIZES],
    }


@router.post("/print")
async def print_layout(data: PrintLayoutInput):
    try:
        return calculate_print_layout(**data.model_dump())
    except LayoutInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/box")
async def box_layout(data: BoxInput):
    try:
        return calculate_box(**data.model_dump())
    except LayoutInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/bag")
async def bag_layout(data: BagInput):
    try:
        return calculate_bag(**data.model_dump())
    except LayoutInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
