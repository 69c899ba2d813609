"""Auth Service. GitHub OAuth callback 처리: state 검증, code 교환, allowlist, 토큰 암호화 저장, User upsert, 세션 발급."""

import logging
import secrets

from app.core.crypto import TokenCipher
from app.core.database import transaction
from app.models.session import Session
from app.repositories import github_token_repository, user_repository
from app.services.github_oauth import GitHubOAuthClient
from app.services.session_service import (
    USER_ID_ENTROPY_BYTES,
    SessionCookie,
    SessionManager,
    generate_id,
)

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Auth 관련 예외. Router에서 HTTP status로 변환."""

    pass


class InvalidOAuthStateError(AuthError):
    """code/state/state 쿠키 누락 또는 state 불일치(CSRF). 400."""

    pass


class AccessDeniedError(AuthError):
    """allowlist에 없는 GitHub 계정. 403, 메시지는 그대로 응답 body."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(
            f"Access denied: Your GitHub account (@{username}) is not authorized "
            "to access this instance. Please contact the administrator."
        )


def parse_allowed_users(raw: str | None) -> frozenset[str]:
    """쉼표 구분 allowlist → 소문자 set. 공백뿐이면 빈 set(= 제한 없음)."""
    if not raw or not raw.strip():
        return frozenset()
    return frozenset(u.strip().lower() for u in raw.split(",") if u.strip())


def ensure_user_allowed(username: str, allowed_users: frozenset[str]) -> None:
    if allowed_users and username.lower() not in allowed_users:
        raise AccessDeniedError(username)


def check_oauth_state(
    code: str | None, state: str | None, stored_state: str | None
) -> str:
    """code·state·state 쿠키 모두 있고 state가 정확히 일치해야 통과. code 반환."""
    if not code or not state or not stored_state:
        raise InvalidOAuthStateError("Missing code or state")
    if not secrets.compare_digest(state.encode("utf-8"), stored_state.encode("utf-8")):
        raise InvalidOAuthStateError("State mismatch")
    return code


async def get_current_session(
    session_id: str | None, sessions: SessionManager
) -> Session | None:
    """세션 쿠키가 가리키는 유효 세션. 쿠키 없으면 DB 조회 없이 None."""
    if not session_id:
        return None
    async with transaction() as db:
        return await sessions.validate_session(db, session_id)


async def github_login(
    code: str | None,
    state: str | None,
    stored_state: str | None,
    *,
    github: GitHubOAuthClient,
    sessions: SessionManager,
    cipher: TokenCipher,
    allowed_users: frozenset[str],
) -> SessionCookie:
    """
    GitHub OAuth callback 본 처리. 단계는 순서대로만 진행.
    1. state 검증(실패 시 외부 호출 없음)
    2. code → access token (거부 시 OAuthRequestError 전파)
    3. /user 프로필 조회
    4. allowlist 검사(설정 시)
    5. access token 암호화
    6. 한 트랜잭션 안에서 github_id로 조회 후 토큰 갱신 또는 User·토큰 INSERT, 세션 생성
    """
    code = check_oauth_state(code, state, stored_state)

    tokens = await github.exchange_code(code)
    profile = await github.fetch_profile(tokens.access_token)

    ensure_user_allowed(profile.login, allowed_users)

    encrypted = cipher.encrypt(tokens.access_token)

    async with transaction() as db:
        user = await user_repository.get_by_github_id(db, profile.id)
        if user is not None:
            user_id = user.id
            updated = await github_token_repository.update_token_for_user(
                db, user_id, encrypted
            )
            if not updated:
                # 토큰 행이 유실된 기존 유저. 1:1 관계 복구.
                await github_token_repository.create_token(db, user_id, encrypted)
        else:
            user_id = generate_id(USER_ID_ENTROPY_BYTES)
            await user_repository.create_user(db, user_id, profile)
            await github_token_repository.create_token(db, user_id, encrypted)
            logger.info("Created user %s for GitHub @%s", user_id, profile.login)
        session = await sessions.create_session(db, user_id)

    return sessions.create_session_cookie(session.id)
