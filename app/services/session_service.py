"""
세션 관리. DB(sessions 테이블)에 세션을 두고 쿠키에는 세션 id만 싣는다.
만료 절반 이하로 남으면 만료 시각을 연장(슬라이딩 세션).
"""

import base64
import logging
import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.session import Session
from app.repositories import session_repository

logger = logging.getLogger(__name__)

USER_ID_ENTROPY_BYTES = 10  # base32 16자
SESSION_ID_ENTROPY_BYTES = 25  # base32 40자


def generate_id(entropy_bytes: int) -> str:
    """랜덤 바이트 → 소문자 base32(패딩 제거). 5바이트당 8자."""
    raw = secrets.token_bytes(entropy_bytes)
    return base64.b32encode(raw).decode("ascii").rstrip("=").lower()


@dataclass(frozen=True)
class SessionCookie:
    """Set-Cookie 한 건. attributes는 Response.set_cookie 키워드 인자 그대로."""

    name: str
    value: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def apply(self, response: Response) -> None:
        response.set_cookie(self.name, self.value, **self.attributes)


class SessionManager:
    """세션 생성·검증·쿠키 발급. 설정값은 생성 시점에 고정."""

    def __init__(
        self,
        cookie_name: str,
        expires_in: timedelta,
        secure: bool,
    ) -> None:
        self.cookie_name = cookie_name
        self.expires_in = expires_in
        self.secure = secure

    async def create_session(self, db: AsyncSession, user_id: str) -> Session:
        expires_at = datetime.now(UTC) + self.expires_in
        return await session_repository.create(
            db, generate_id(SESSION_ID_ENTROPY_BYTES), user_id, expires_at
        )

    def create_session_cookie(self, session_id: str) -> SessionCookie:
        return SessionCookie(
            name=self.cookie_name,
            value=session_id,
            attributes={
                "max_age": int(self.expires_in.total_seconds()),
                "path": "/",
                "httponly": True,
                "samesite": "lax",
                "secure": self.secure,
            },
        )

    async def validate_session(
        self, db: AsyncSession, session_id: str | None
    ) -> Session | None:
        """
        유효 세션이면 반환. 없거나 만료면 None(만료 행은 삭제).
        남은 기간이 절반 미만이면 expires_at 연장.
        """
        if not session_id:
            return None
        row = await session_repository.get_by_id(db, session_id)
        if row is None:
            return None
        now = datetime.now(UTC)
        expires_at = row.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        if expires_at <= now:
            logger.debug("Session %s expired at %s", session_id[:8], expires_at)
            await session_repository.delete_by_id(db, session_id)
            return None
        if expires_at - now < self.expires_in / 2:
            row.expires_at = now + self.expires_in
            await session_repository.update_expiry(db, session_id, row.expires_at)
        return row


def get_session_manager() -> SessionManager:
    """FastAPI Depends용. 설정에서 SessionManager 구성."""
    secure = settings.session_cookie_secure
    if secure is None:
        secure = settings.is_production
    return SessionManager(
        cookie_name=settings.session_cookie_name,
        expires_in=timedelta(days=settings.session_expire_days),
        secure=secure,
    )
