"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Order State Machine                                             ║
║                                                                              ║
║  RÈGLES STRICTES DE TRANSITION DE STATUT D'UNE COMMANDE                      ║
║                                                                              ║
║  pending → designing → approved → printing → completed → delivered           ║
║                                                                              ║
║  - Retour arrière d'une étape autorisé (sauf depuis delivered)               ║
║  - cancelled possible tant que la commande n'est pas terminée                ║
║  - delivered est TERMINAL                                                    ║
║  - cancelled ne peut que repartir en pending                                 ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import List

logger = logging.getLogger("order_state_machine")


# ════════════════════════════════════════════════════════════════════════════
# VALID STATE TRANSITIONS
# ════════════════════════════════════════════════════════════════════════════

ORDER_STATUSES = [
    "pending", "designing", "approved", "printing",
    "completed", "delivered", "cancelled",
]

ORDER_STATUS_LABELS = {
    "pending": "Chờ xử lý",
    "designing": "Đang thiết kế",
    "approved": "Đã duyệt",
    "printing": "Đang in",
    "completed": "Hoàn thành",
    "delivered": "Đã giao",
    "cancelled": "Đã hủy",
}

STATUS_TRANSITIONS = {
    "pending": ["designing", "cancelled"],
    "designing": ["approved", "pending", "cancelled"],
    "approved": ["printing", "designing", "cancelled"],
    "printing": ["completed", "approved", "cancelled"],
    "completed": ["delivered", "printing"],
    "delivered": [],  # TERMINAL
    "cancelled": ["pending"],  # Réouverture
}

# Statuts où la commande attend encore un travail de design
DESIGN_PENDING_STATUSES = ["pending", "designing"]


class OrderTransitionError(Exception):
    """Raised when an order status change is not allowed"""
    pass


def get_allowed_transitions(status: str) -> List[str]:
    return list(STATUS_TRANSITIONS.get(status, []))


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Valide qu'une transition de statut commande est autorisée.

    Même statut = no-op (autorisé).
    """
    if new_status not in ORDER_STATUSES:
        raise OrderTransitionError(f"Statut inconnu: '{new_status}'")

    if current_status == new_status:
        return True

    valid_next = get_allowed_transitions(current_status)
    if new_status not in valid_next:
        labels = ", ".join(ORDER_STATUS_LABELS[s] for s in valid_next) or "Không có"
        logger.warning(f"[ORDER_STATUS] Transition refusée {current_status} -> {new_status}")
        raise OrderTransitionError(
            f"Transition impossible de '{ORDER_STATUS_LABELS.get(current_status, current_status)}' "
            f"vers '{ORDER_STATUS_LABELS[new_status]}'. Transitions autorisées: {labels}"
        )

    return True
