"""
Unit tests for utils/order_state_machine.py
"""

import pytest

from enums.order_status import OrderStatus
from utils.order_state_machine import OrderStateMachine


class TestTransitions:

    @pytest.mark.parametrize("from_status,to_status", [
        (OrderStatus.PENDING, OrderStatus.CONFIRMED),
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
        (OrderStatus.CONFIRMED, OrderStatus.PREPARING),
        (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
        (OrderStatus.PREPARING, OrderStatus.READY),
        (OrderStatus.READY, OrderStatus.COMPLETED),
    ])
    def test_valid_transitions(self, from_status, to_status):
        assert OrderStateMachine.is_valid_transition(from_status, to_status)

    @pytest.mark.parametrize("from_status,to_status", [
        (OrderStatus.PENDING, OrderStatus.READY),
        (OrderStatus.PREPARING, OrderStatus.CANCELLED),
        (OrderStatus.COMPLETED, OrderStatus.PENDING),
        (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
    ])
    def test_invalid_transitions(self, from_status, to_status):
        assert not OrderStateMachine.is_valid_transition(from_status, to_status)

    def test_same_status_is_a_no_op(self):
        assert OrderStateMachine.is_valid_transition(OrderStatus.READY, OrderStatus.READY)

    def test_valid_transitions_in_declaration_order(self):
        assert OrderStateMachine.get_valid_transitions(OrderStatus.PENDING) == [
            OrderStatus.CONFIRMED, OrderStatus.CANCELLED
        ]
        assert OrderStateMachine.get_valid_transitions(OrderStatus.COMPLETED) == []

    def test_final_statuses(self):
        assert OrderStateMachine.is_final_status(OrderStatus.COMPLETED)
        assert OrderStateMachine.is_final_status(OrderStatus.CANCELLED)
        assert not OrderStateMachine.is_final_status(OrderStatus.READY)


class TestValidateAndLog:

    def test_staff_transition_needs_staff_id(self):
        assert not OrderStateMachine.validate_and_log_transition(1, OrderStatus.CONFIRMED, OrderStatus.PREPARING,
                                                                 user_id=5)
        assert OrderStateMachine.validate_and_log_transition(1, OrderStatus.CONFIRMED, OrderStatus.PREPARING,
                                                             staff_id=2)

    def test_customer_may_cancel(self):
        assert OrderStateMachine.validate_and_log_transition(1, OrderStatus.PENDING, OrderStatus.CANCELLED,
                                                             user_id=5)

    def test_description_fallback(self):
        assert OrderStateMachine.get_transition_description(OrderStatus.READY, OrderStatus.PENDING) == \
            "Transition from ready to pending"
