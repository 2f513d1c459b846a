import json
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit
from exceptions.cart import InvalidQuantityException, CartItemNotFoundException, ToppingNotInCartItemException
from exceptions.product import ProductUnavailableException
from models.cartItem import CartItemDTO, CartLineSelectionDTO, CartLineDTO, CartSummaryDTO
from models.product import ProductDTO
from repositories.cart_item import CartItemRepository
from repositories.product import ProductRepository
from services.pricing import PricingService
from services.product import ProductService

logger = logging.getLogger(__name__)


class CartService:

    @staticmethod
    def _resolve_size(product: ProductDTO, size: str | None) -> str | None:
        """Toppings have no size. Unknown sizes fall back to the first declared one."""
        if product.is_topping or len(product.sizes) == 0:
            return None
        labels = [product_size.size for product_size in product.sizes]
        if size in labels:
            return size
        return labels[0]

    @staticmethod
    async def _get_own_item(user_id: int, cart_item_id: int, session: AsyncSession | Session) -> CartItemDTO:
        cart_item = await CartItemRepository.get_by_id(cart_item_id, session)
        if cart_item is None or cart_item.user_id != user_id:
            raise CartItemNotFoundException(cart_item_id)
        return cart_item

    @staticmethod
    async def add_to_cart(user_id: int,
                          selection: CartLineSelectionDTO,
                          session: AsyncSession | Session,
                          now: datetime | None = None) -> CartItemDTO:
        """
        Adds a drink to the cart, merging it into an identical line if one exists.

        The stored price breakdown is provisional and only used for display.
        """
        if selection.quantity < 1:
            raise InvalidQuantityException(selection.quantity)
        product = await ProductService.get_by_id(selection.product_id, session)
        if not product.is_available:
            raise ProductUnavailableException(product.id)

        toppings = await ProductService.get_toppings_by_ids(selection.topping_ids, session)
        size = CartService._resolve_size(product, selection.size)
        breakdown = PricingService.compute_final_price(product, size, toppings, now)

        cart_item = CartItemDTO(
            user_id=user_id,
            product_id=product.id,
            size=size,
            topping_ids=json.dumps(sorted(topping.id for topping in toppings)),
            sugar_level=selection.sugar_level,
            ice_level=selection.ice_level,
            quantity=selection.quantity,
            price_breakdown=breakdown.model_dump_json()
        )
        existing = await CartItemRepository.find_matching_line(cart_item, session)
        if existing is not None:
            existing.quantity += selection.quantity
            existing.price_breakdown = cart_item.price_breakdown
            await CartItemRepository.update(existing, session)
            cart_item = existing
        else:
            cart_item.id = await CartItemRepository.create(cart_item, session)
        await session_commit(session)
        logger.info(f"[Cart] User {user_id} added product {product.id} x{selection.quantity}")
        return cart_item

    @staticmethod
    async def update_quantity(user_id: int, cart_item_id: int, quantity: int,
                              session: AsyncSession | Session) -> CartItemDTO | None:
        """Quantity <= 0 removes the line and returns None."""
        cart_item = await CartService._get_own_item(user_id, cart_item_id, session)
        if quantity <= 0:
            await CartItemRepository.remove_from_cart(cart_item.id, session)
            await session_commit(session)
            return None
        cart_item.quantity = quantity
        await CartItemRepository.update(cart_item, session)
        await session_commit(session)
        return cart_item

    @staticmethod
    async def remove_item(user_id: int, cart_item_id: int, session: AsyncSession | Session) -> None:
        cart_item = await CartService._get_own_item(user_id, cart_item_id, session)
        await CartItemRepository.remove_from_cart(cart_item.id, session)
        await session_commit(session)

    @staticmethod
    async def remove_topping(user_id: int, cart_item_id: int, topping_id: int,
                             session: AsyncSession | Session, now: datetime | None = None) -> CartItemDTO:
        cart_item = await CartService._get_own_item(user_id, cart_item_id, session)
        topping_ids = cart_item.get_topping_ids()
        if topping_id not in topping_ids:
            raise ToppingNotInCartItemException(cart_item_id, topping_id)
        topping_ids.remove(topping_id)

        product = await ProductService.get_by_id(cart_item.product_id, session)
        toppings = await ProductService.get_toppings_by_ids(topping_ids, session)
        breakdown = PricingService.compute_final_price(product, cart_item.size, toppings, now)
        cart_item.topping_ids = json.dumps(sorted(topping_ids))
        cart_item.price_breakdown = breakdown.model_dump_json()

        identical = await CartItemRepository.find_matching_line(cart_item, session)
        if identical is not None and identical.id != cart_item.id:
            identical.quantity += cart_item.quantity
            identical.price_breakdown = cart_item.price_breakdown
            await CartItemRepository.update(identical, session)
            await CartItemRepository.remove_from_cart(cart_item.id, session)
            cart_item = identical
        else:
            await CartItemRepository.update(cart_item, session)
        await session_commit(session)
        return cart_item

    @staticmethod
    async def get_cart_lines(user_id: int, session: AsyncSession | Session,
                             now: datetime | None = None) -> list[CartLineDTO]:
        """Every line is re-priced with `now`, the stored breakdown is ignored."""
        if now is None:
            now = datetime.now()
        cart_items = await CartItemRepository.get_by_user_id(user_id, session)
        lines = []
        for cart_item in cart_items:
            product = await ProductRepository.get_by_id(cart_item.product_id, session)
            if product is None:
                logger.warning(f"[Cart] Product {cart_item.product_id} of cart item {cart_item.id} no longer exists")
                continue
            toppings = await ProductService.get_toppings_by_ids(cart_item.get_topping_ids(), session)
            lines.append(CartLineDTO(
                cart_item_id=cart_item.id,
                product=product,
                size=cart_item.size,
                toppings=toppings,
                sugar_level=cart_item.sugar_level,
                ice_level=cart_item.ice_level,
                quantity=cart_item.quantity,
                breakdown=PricingService.compute_final_price(product, cart_item.size, toppings, now)
            ))
        return lines

    @staticmethod
    async def get_cart_summary(user_id: int, session: AsyncSession | Session,
                               now: datetime | None = None) -> CartSummaryDTO:
        lines = await CartService.get_cart_lines(user_id, session, now)
        return CartSummaryDTO(lines=lines, total_price=sum(line.line_total for line in lines))

    @staticmethod
    async def clear_cart(user_id: int, session: AsyncSession | Session) -> None:
        await CartItemRepository.clear_cart(user_id, session)
