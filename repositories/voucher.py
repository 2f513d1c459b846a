from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.voucher import Voucher, VoucherDTO


class VoucherRepository:
    @staticmethod
    async def get_by_code(code: str, session: AsyncSession | Session) -> VoucherDTO | None:
        stmt = select(Voucher).where(Voucher.code == code.strip().upper())
        voucher = await session_execute(stmt, session)
        voucher = voucher.scalar()
        if voucher is None:
            return None
        return VoucherDTO.model_validate(voucher, from_attributes=True)

    @staticmethod
    async def get_active(session: AsyncSession | Session) -> list[VoucherDTO]:
        stmt = select(Voucher).where(Voucher.is_active == True).order_by(Voucher.created_at.desc(), Voucher.id)
        vouchers = await session_execute(stmt, session)
        return [VoucherDTO.model_validate(voucher, from_attributes=True) for voucher in vouchers.scalars().all()]

    @staticmethod
    async def create(voucher_dto: VoucherDTO, session: AsyncSession | Session) -> int:
        voucher_data = voucher_dto.model_dump(exclude_none=True, exclude={"id", "created_at"})
        voucher_data["code"] = voucher_data["code"].strip().upper()
        voucher = Voucher(**voucher_data)
        session.add(voucher)
        await session_flush(session)
        return voucher.id
