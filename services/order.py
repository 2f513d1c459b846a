import json
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit
from enums.audit_action import AuditAction
from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from enums.payment_status import PaymentStatus
from enums.user_role import UserRole
from exceptions.cart import EmptyCartException
from exceptions.order import OrderNotFoundException, OrderOwnershipException, InvalidOrderStateException, \
    InvalidPaymentMethodException, InsufficientCashException
from exceptions.user import UserNotFoundException, PermissionDeniedException
from models.order import OrderDTO
from models.orderItem import OrderItemDTO
from models.user import UserDTO
from repositories.audit_log import AuditLogRepository
from repositories.order import OrderRepository
from repositories.user import UserRepository
from services.cart import CartService
from services.voucher import VoucherService
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)

STAFF_ROLES = (UserRole.ADMIN, UserRole.MANAGER, UserRole.STAFF)
CANCELLABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED)


class OrderService:

    @staticmethod
    def _parse_payment_method(payment_method: PaymentMethod | str) -> PaymentMethod:
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise InvalidPaymentMethodException(str(payment_method))
        if method not in PaymentMethod.get_checkout_options():
            raise InvalidPaymentMethodException(method.value)
        return method

    @staticmethod
    async def checkout(user_id: int,
                       payment_method: PaymentMethod | str,
                       session: AsyncSession | Session,
                       cash_amount: float | None = None,
                       voucher_code: str | None = None,
                       now: datetime | None = None) -> OrderDTO:
        """
        Turns the cart into an order.

        Every line is re-priced with the checkout clock, since promotion
        windows may have ended after the drink was added to the cart.

        cash: must cover the total, order is confirmed and paid, cart is cleared
        vnpay: order stays pending until the gateway confirms, cart is kept

        Raises:
            InvalidPaymentMethodException, EmptyCartException,
            VoucherNotFoundException, VoucherNotApplicableException,
            InsufficientCashException
        """
        if now is None:
            now = datetime.now()
        method = OrderService._parse_payment_method(payment_method)
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id=user_id)

        lines = await CartService.get_cart_lines(user_id, session, now)
        if len(lines) == 0:
            raise EmptyCartException(user_id)

        subtotal = sum(line.line_total for line in lines)
        discount = 0
        applied_code = None
        if voucher_code:
            voucher, discount = await VoucherService.apply_voucher(voucher_code, user, lines, subtotal, session, now)
            applied_code = voucher.code
        total = max(0, subtotal - discount)

        if method == PaymentMethod.CASH:
            if cash_amount is None or cash_amount < total:
                raise InsufficientCashException(total, cash_amount)
            status, payment_status = OrderStatus.CONFIRMED, PaymentStatus.PAID
        else:
            status, payment_status = OrderStatus.PENDING, PaymentStatus.PENDING

        order_items = [OrderItemDTO(
            product_id=line.product.id,
            product_name=line.product.name,
            size=line.size,
            topping_ids=json.dumps(sorted(topping.id for topping in line.toppings)),
            sugar_level=line.sugar_level,
            ice_level=line.ice_level,
            quantity=line.quantity,
            original_base_price=line.breakdown.original_base_price,
            final_base_price=line.breakdown.final_base_price,
            topping_total=line.breakdown.topping_total,
            price=line.breakdown.final_price,
            is_discounted=line.breakdown.is_discounted
        ) for line in lines]
        order_dto = OrderDTO(
            user_id=user_id,
            status=status,
            payment_status=payment_status,
            payment_method=method,
            total_price=total,
            original_price=subtotal,
            voucher_code=applied_code,
            discount_amount=discount,
            cash_amount=cash_amount if method == PaymentMethod.CASH else None,
            created_at=now
        )
        order_id = await OrderRepository.create(order_dto, order_items, session)
        if method == PaymentMethod.CASH:
            await CartService.clear_cart(user_id, session)
        await session_commit(session)
        logger.info(f"[Order] Order {order_id} created for user {user_id}: total={total}, "
                    f"discount={discount}, method={method.value}")
        return await OrderRepository.get_by_id(order_id, session)

    @staticmethod
    async def cancel_order(order_id: int, user: UserDTO, session: AsyncSession | Session,
                           now: datetime | None = None) -> OrderDTO:
        if now is None:
            now = datetime.now()
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.user_id != user.id and not user.is_admin:
            raise OrderOwnershipException(order_id, user.id)
        if order.status not in CANCELLABLE_STATUSES:
            raise InvalidOrderStateException(order_id, order.status.value,
                                             " or ".join(status.value for status in CANCELLABLE_STATUSES))

        OrderStateMachine.validate_and_log_transition(order_id, order.status, OrderStatus.CANCELLED,
                                                      staff_id=user.id if user.is_admin else None,
                                                      user_id=user.id)
        await OrderRepository.update_status(order_id, OrderStatus.CANCELLED, session,
                                            payment_status=PaymentStatus.FAILED, cancelled_at=now)
        await AuditLogRepository.create(user.id, AuditAction.ORDER_CANCEL, "order", order_id, session,
                                        details={"previous_status": order.status.value})
        await session_commit(session)
        return await OrderRepository.get_by_id(order_id, session)

    @staticmethod
    async def update_status(order_id: int, new_status: OrderStatus, actor: UserDTO,
                            session: AsyncSession | Session) -> OrderDTO:
        if actor.role not in STAFF_ROLES:
            raise PermissionDeniedException(actor.id, "update_order_status")
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if not OrderStateMachine.validate_and_log_transition(order_id, order.status, new_status, staff_id=actor.id):
            allowed = OrderStateMachine.get_valid_transitions(order.status)
            raise InvalidOrderStateException(order_id, order.status.value,
                                             " or ".join(status.value for status in allowed) or "none")

        payment_status = None
        if new_status == OrderStatus.COMPLETED and order.payment_status == PaymentStatus.PENDING:
            # Paid on pickup
            payment_status = PaymentStatus.PAID
        await OrderRepository.update_status(order_id, new_status, session, payment_status=payment_status)
        await AuditLogRepository.create(actor.id, AuditAction.ORDER_STATUS_CHANGE, "order", order_id, session,
                                        details={"from": order.status.value, "to": new_status.value})
        await session_commit(session)
        return await OrderRepository.get_by_id(order_id, session)

    @staticmethod
    async def get_orders_for_user(user_id: int, session: AsyncSession | Session) -> list[OrderDTO]:
        return await OrderRepository.get_by_user_id(user_id, session)
