from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.cart import CartItem, CartItemDTO


class CartRepository:
    @staticmethod
    async def add_item(cart_item: CartItemDTO, session: AsyncSession) -> int:
        item = CartItem(**cart_item.model_dump(exclude_none=True))
        session.add(item)
        await session_flush(session)
        return item.id

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> list[CartItemDTO]:
        stmt = select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.id)
        items = await session_execute(stmt, session)
        return [CartItemDTO.model_validate(item, from_attributes=True) for item in items.scalars().all()]

    @staticmethod
    async def clear(user_id: int, session: AsyncSession) -> int:
        stmt = delete(CartItem).where(CartItem.user_id == user_id)
        result = await session_execute(stmt, session)
        return result.rowcount
