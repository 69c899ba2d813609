"""GitHubUserToken Repository. ciphertext/iv는 항상 한 쌍으로 기록."""

from datetime import UTC, datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.crypto import EncryptedToken
from app.models.github_user_token import GitHubUserToken


async def create_token(
    session: AsyncSession, user_id: str, token: EncryptedToken
) -> GitHubUserToken:
    """신규 유저의 토큰 행 INSERT."""
    row = GitHubUserToken(ciphertext=token.ciphertext, iv=token.iv, user_id=user_id)
    session.add(row)
    await session.flush()
    return row


async def update_token_for_user(
    session: AsyncSession, user_id: str, token: EncryptedToken
) -> bool:
    """기존 유저의 토큰 행 덮어쓰기. 동시 로그인 시 마지막 쓰기가 남는다. 갱신 행이 없으면 False."""
    result = await session.execute(
        update(GitHubUserToken)
        .where(GitHubUserToken.user_id == user_id)
        .values(
            ciphertext=token.ciphertext,
            iv=token.iv,
            updated_at=datetime.now(UTC),
        )
    )
    return result.rowcount > 0
