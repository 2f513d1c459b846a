from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.cartItem import CartItem, CartItemDTO


class CartItemRepository:
    @staticmethod
    async def create(cart_item: CartItemDTO, session: AsyncSession | Session) -> int:
        cart_item = CartItem(**cart_item.model_dump(exclude_none=True, exclude={"id"}))
        session.add(cart_item)
        await session_flush(session)
        return cart_item.id

    @staticmethod
    async def get_by_id(cart_item_id: int, session: AsyncSession | Session) -> CartItemDTO | None:
        stmt = select(CartItem).where(CartItem.id == cart_item_id)
        cart_item = await session_execute(stmt, session)
        cart_item = cart_item.scalar()
        if cart_item is None:
            return None
        return CartItemDTO.model_validate(cart_item, from_attributes=True)

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession | Session) -> list[CartItemDTO]:
        stmt = select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.id)
        cart_items = await session_execute(stmt, session)
        return [CartItemDTO.model_validate(cart_item, from_attributes=True)
                for cart_item in cart_items.scalars().all()]

    @staticmethod
    async def find_matching_line(cart_item: CartItemDTO, session: AsyncSession | Session) -> CartItemDTO | None:
        """
        Same product, size, sugar, ice and toppings means the same line.
        topping_ids must already be the canonical (sorted) JSON encoding.
        """
        conditions = [
            CartItem.user_id == cart_item.user_id,
            CartItem.product_id == cart_item.product_id,
            CartItem.sugar_level == cart_item.sugar_level,
            CartItem.ice_level == cart_item.ice_level,
            CartItem.topping_ids == cart_item.topping_ids,
        ]
        if cart_item.size is None:
            conditions.append(CartItem.size.is_(None))
        else:
            conditions.append(CartItem.size == cart_item.size)
        stmt = select(CartItem).where(*conditions)
        existing = await session_execute(stmt, session)
        existing = existing.scalar()
        if existing is None:
            return None
        return CartItemDTO.model_validate(existing, from_attributes=True)

    @staticmethod
    async def update(cart_item: CartItemDTO, session: AsyncSession | Session) -> None:
        values = cart_item.model_dump(exclude_none=True, exclude={"id", "user_id"})
        stmt = update(CartItem).where(CartItem.id == cart_item.id).values(**values)
        await session_execute(stmt, session)

    @staticmethod
    async def remove_from_cart(cart_item_id: int, session: AsyncSession | Session) -> None:
        stmt = delete(CartItem).where(CartItem.id == cart_item_id)
        await session_execute(stmt, session)

    @staticmethod
    async def clear_cart(user_id: int, session: AsyncSession | Session) -> None:
        stmt = delete(CartItem).where(CartItem.user_id == user_id)
        await session_execute(stmt, session)
