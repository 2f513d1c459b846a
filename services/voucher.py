import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.discount_type import DiscountType
from exceptions.voucher import VoucherNotFoundException, VoucherNotApplicableException
from models.cartItem import CartLineDTO
from models.user import UserDTO
from models.voucher import VoucherDTO
from repositories.order import OrderRepository
from repositories.voucher import VoucherRepository
from services.pricing import round_half_up

logger = logging.getLogger(__name__)


class VoucherService:
    # Welcome voucher, usable once per account
    ONE_TIME_CODES = ("MANGUOIMOI",)

    @staticmethod
    def _matches_line(voucher: VoucherDTO, line: CartLineDTO) -> bool:
        if voucher.applicable_category and line.product.category.value != voucher.applicable_category:
            return False
        if voucher.applicable_size and line.size != voucher.applicable_size:
            return False
        return True

    @staticmethod
    async def check_applicable(voucher: VoucherDTO,
                               user: UserDTO,
                               lines: list[CartLineDTO],
                               session: AsyncSession | Session,
                               now: datetime) -> str | None:
        """
        Returns the reason the voucher cannot be used, or None when it can.

        Checks run in order: role, one-time code, special day, hour window,
        category/size presence in the cart.
        """
        if not voucher.is_active:
            return "inactive"

        roles = voucher.get_applicable_roles()
        if len(roles) > 0 and user.role not in roles:
            return f"only for roles: {', '.join(role.value for role in roles)}"

        if voucher.code in VoucherService.ONE_TIME_CODES:
            if await OrderRepository.has_used_voucher(user.id, voucher.code, session):
                return "already used"

        if voucher.special_day is not None:
            # special_day is stored with 0=Sunday
            current_day = (now.weekday() + 1) % 7
            if current_day != voucher.special_day:
                return f"only valid on day {voucher.special_day}"

        if voucher.start_hour is not None and voucher.end_hour is not None:
            if now.hour < voucher.start_hour or now.hour >= voucher.end_hour:
                return f"only valid from {voucher.start_hour}h to {voucher.end_hour}h"

        if voucher.applicable_category:
            if not any(VoucherService._matches_line(voucher, line) for line in lines):
                return f"no '{voucher.applicable_category}' items in cart"

        return None

    @staticmethod
    async def get_applicable_vouchers(user: UserDTO,
                                      lines: list[CartLineDTO],
                                      session: AsyncSession | Session,
                                      now: datetime | None = None) -> list[VoucherDTO]:
        if now is None:
            now = datetime.now()
        if len(lines) == 0:
            return []
        applicable = []
        for voucher in await VoucherRepository.get_active(session):
            reason = await VoucherService.check_applicable(voucher, user, lines, session, now)
            if reason is None:
                applicable.append(voucher)
            else:
                logger.debug(f"[Voucher] {voucher.code} not applicable for user {user.id}: {reason}")
        return applicable

    @staticmethod
    def calculate_discount(voucher: VoucherDTO, lines: list[CartLineDTO], subtotal: int) -> int:
        """
        PERCENTAGE: percent of the whole subtotal, or of the base prices
            (toppings excluded) of the lines in applicable_category
        FIXED_AMOUNT: discount_value
        SPECIAL_DAY_FIXED_PRICE: matching lines cost fixed_price per unit

        The discount never exceeds the subtotal and is never negative.
        """
        discount = 0
        match voucher.discount_type:
            case DiscountType.PERCENTAGE:
                if voucher.applicable_category:
                    applicable_total = sum(line.breakdown.original_base_price * line.quantity
                                           for line in lines
                                           if line.product.category.value == voucher.applicable_category)
                else:
                    applicable_total = subtotal
                discount = round_half_up(applicable_total * (voucher.discount_value or 0) / 100)
            case DiscountType.FIXED_AMOUNT:
                discount = round_half_up(voucher.discount_value or 0)
            case DiscountType.SPECIAL_DAY_FIXED_PRICE:
                fixed_price = voucher.fixed_price or 0
                discount = round_half_up(sum((line.breakdown.original_base_price - fixed_price) * line.quantity
                                             for line in lines
                                             if VoucherService._matches_line(voucher, line)))
        return min(max(discount, 0), subtotal)

    @staticmethod
    async def apply_voucher(code: str,
                            user: UserDTO,
                            lines: list[CartLineDTO],
                            subtotal: int,
                            session: AsyncSession | Session,
                            now: datetime) -> tuple[VoucherDTO, int]:
        """
        Raises:
            VoucherNotFoundException: unknown or inactive code
            VoucherNotApplicableException: a check in check_applicable() failed
        """
        voucher = await VoucherRepository.get_by_code(code, session)
        if voucher is None or not voucher.is_active:
            raise VoucherNotFoundException(code)
        reason = await VoucherService.check_applicable(voucher, user, lines, session, now)
        if reason is not None:
            raise VoucherNotApplicableException(voucher.code, reason)
        return voucher, VoucherService.calculate_discount(voucher, lines, subtotal)
