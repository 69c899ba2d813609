"""Session Repository. DB 쿼리만 수행."""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.session import Session


async def create(
    session: AsyncSession, session_id: str, user_id: str, expires_at: datetime
) -> Session:
    row = Session(id=session_id, user_id=user_id, expires_at=expires_at)
    session.add(row)
    await session.flush()
    return row


async def get_by_id(session: AsyncSession, session_id: str) -> Session | None:
    result = await session.execute(select(Session).where(Session.id == session_id))
    return result.scalars().one_or_none()


async def delete_by_id(session: AsyncSession, session_id: str) -> None:
    await session.execute(delete(Session).where(Session.id == session_id))


async def update_expiry(
    session: AsyncSession, session_id: str, expires_at: datetime
) -> None:
    await session.execute(
        update(Session).where(Session.id == session_id).values(expires_at=expires_at)
    )
