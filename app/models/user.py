"""User 모델. GitHub OAuth 전용(github_id). 비밀번호 해시 없음."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.github_user_token import GitHubUserToken
    from app.models.session import Session

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


class User(Base):
    """유저. id는 16자 랜덤 식별자, github_id는 GitHub 숫자 id(유니크)."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    github_id: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)
    github_username: Mapped[str] = mapped_column(String(255), nullable=False)
    github_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    github_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
    )

    github_token: Mapped["GitHubUserToken | None"] = relationship(
        "GitHubUserToken", back_populates="user", uselist=False
    )
    sessions: Mapped[list["Session"]] = relationship("Session", back_populates="user")
