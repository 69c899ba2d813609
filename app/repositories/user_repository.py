"""User Repository. DB 쿼리만 수행."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.github import GitHubUser


async def get_by_github_id(session: AsyncSession, github_id: int) -> User | None:
    """GitHub 숫자 id로 유저 조회. insert/update 분기 전 반드시 이 조회를 거친다."""
    result = await session.execute(select(User).where(User.github_id == github_id))
    return result.scalars().one_or_none()


async def create_user(session: AsyncSession, user_id: str, profile: GitHubUser) -> User:
    """GitHub 프로필로 유저 INSERT. flush까지만, commit은 transaction()에서."""
    user = User(
        id=user_id,
        github_id=profile.id,
        github_username=profile.login,
        github_email=profile.email,
        github_name=profile.name,
    )
    session.add(user)
    await session.flush()
    return user
