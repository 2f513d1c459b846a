"""
Order State Machine for validating order status transitions and maintaining consistency.

This module implements a finite state machine to ensure valid order status transitions
and provide audit logging for all status changes.
"""

import logging
from typing import Dict, List, Optional, Set

from enums.order_status import OrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, requires_staff: bool = False,
                 description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.requires_staff = requires_staff
        self.description = description

    def __repr__(self):
        staff_flag = " (Staff)" if self.requires_staff else ""
        return f"{self.from_status.value} -> {self.to_status.value}{staff_flag}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions.

    Valid status transitions:
    - PENDING -> CONFIRMED (staff, or automatic on cash payment / gateway confirmation)
    - PENDING -> CANCELLED (customer or staff)
    - CONFIRMED -> PREPARING (staff)
    - CONFIRMED -> CANCELLED (customer or staff)
    - PREPARING -> READY (staff)
    - READY -> COMPLETED (staff)

    COMPLETED and CANCELLED are final.
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.CONFIRMED, requires_staff=True,
                              description="Order confirmed"),
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.CANCELLED,
                              description="Order cancelled before confirmation"),
        OrderStatusTransition(OrderStatus.CONFIRMED, OrderStatus.PREPARING, requires_staff=True,
                              description="Drinks are being made"),
        OrderStatusTransition(OrderStatus.CONFIRMED, OrderStatus.CANCELLED,
                              description="Confirmed order cancelled"),
        OrderStatusTransition(OrderStatus.PREPARING, OrderStatus.READY, requires_staff=True,
                              description="Order ready for pickup"),
        OrderStatusTransition(OrderStatus.READY, OrderStatus.COMPLETED, requires_staff=True,
                              description="Order handed over"),
    ]

    FINAL_STATUSES: Set[OrderStatus] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

    # Built lazily from VALID_TRANSITIONS
    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _staff_required_transitions: Set[tuple] = set()
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            if transition.requires_staff:
                cls._staff_required_transitions.add((transition.from_status, transition.to_status))
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        cls._build_transition_map()
        if from_status == to_status:
            return True
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def requires_staff(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        cls._build_transition_map()
        return (from_status, to_status) in cls._staff_required_transitions

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        """
        Get all valid next statuses from the current status.

        Args:
            from_status: Current order status

        Returns:
            List of valid next statuses, in declaration order
        """
        cls._build_transition_map()
        return [t.to_status for t in cls.VALID_TRANSITIONS if t.from_status == from_status]

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        return status in cls.FINAL_STATUSES

    @classmethod
    def validate_and_log_transition(cls, order_id: int, from_status: OrderStatus, to_status: OrderStatus,
                                    staff_id: Optional[int] = None, user_id: Optional[int] = None) -> bool:
        """
        Validate a status transition and log it.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current order status
            to_status: Desired new status
            staff_id: ID of the staff member performing the transition (if applicable)
            user_id: ID of the customer performing the transition (if applicable)

        Returns:
            True if transition is valid, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}")
            return False

        if cls.requires_staff(from_status, to_status) and staff_id is None:
            logger.error(f"Staff required for transition {from_status.value} -> {to_status.value} on order {order_id}")
            return False

        transition_desc = cls.get_transition_description(from_status, to_status)
        performer = f"staff {staff_id}" if staff_id else f"user {user_id}" if user_id else "system"
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                    f"by {performer}: {transition_desc}")
        return True
