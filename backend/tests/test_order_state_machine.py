"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Order State Machine Tests                                       ║
║                                                                              ║
║  1. Forward path pending → delivered                                         ║
║  2. One-step backward moves                                                  ║
║  3. delivered is terminal, cancelled only reopens to pending                 ║
║  4. Error message lists the allowed targets                                  ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import pytest

from services.order_state_machine import (
    ORDER_STATUSES,
    STATUS_TRANSITIONS,
    OrderTransitionError,
    get_allowed_transitions,
    validate_status_transition,
)


FORWARD_PATH = ["pending", "designing", "approved", "printing", "completed", "delivered"]


class TestTransitions:

    def test_every_status_has_an_entry(self):
        assert set(STATUS_TRANSITIONS) == set(ORDER_STATUSES)

    def test_forward_path(self):
        for current, nxt in zip(FORWARD_PATH, FORWARD_PATH[1:]):
            assert validate_status_transition(current, nxt)

    @pytest.mark.parametrize("current, previous", [
        ("designing", "pending"),
        ("approved", "designing"),
        ("printing", "approved"),
        ("completed", "printing"),
    ])
    def test_step_back(self, current, previous):
        assert validate_status_transition(current, previous)

    @pytest.mark.parametrize("status", ["pending", "designing", "approved", "printing"])
    def test_cancel_before_completion(self, status):
        assert validate_status_transition(status, "cancelled")

    def test_cannot_cancel_completed(self):
        with pytest.raises(OrderTransitionError):
            validate_status_transition("completed", "cancelled")

    def test_same_status_is_noop(self):
        assert validate_status_transition("printing", "printing")
        assert validate_status_transition("delivered", "delivered")

    def test_cannot_skip_steps(self):
        with pytest.raises(OrderTransitionError):
            validate_status_transition("pending", "printing")

    def test_delivered_is_terminal(self):
        assert get_allowed_transitions("delivered") == []
        for target in ORDER_STATUSES:
            if target == "delivered":
                continue
            with pytest.raises(OrderTransitionError):
                validate_status_transition("delivered", target)

    def test_cancelled_reopens_to_pending_only(self):
        assert get_allowed_transitions("cancelled") == ["pending"]
        with pytest.raises(OrderTransitionError):
            validate_status_transition("cancelled", "designing")

    def test_unknown_target_status(self):
        with pytest.raises(OrderTransitionError):
            validate_status_transition("pending", "shipped")


class TestErrorMessages:

    def test_lists_allowed_labels(self):
        with pytest.raises(OrderTransitionError) as exc:
            validate_status_transition("pending", "completed")
        assert "Đang thiết kế" in str(exc.value)
        assert "Đã hủy" in str(exc.value)

    def test_terminal_status_message(self):
        with pytest.raises(OrderTransitionError) as exc:
            validate_status_transition("delivered", "pending")
        assert "Không có" in str(exc.value)

    def test_allowed_transitions_is_a_copy(self):
        allowed = get_allowed_transitions("pending")
        allowed.append("delivered")
        assert "delivered" not in STATUS_TRANSITIONS["pending"]
