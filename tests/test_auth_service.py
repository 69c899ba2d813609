"""Auth Service 단위 테스트. DB/GitHub 호출 없이 검증."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.crypto import TokenCipher
from app.schemas.github import GitHubTokenResponse, GitHubUser
from app.services.auth_service import (
    AccessDeniedError,
    InvalidOAuthStateError,
    check_oauth_state,
    ensure_user_allowed,
    get_current_session,
    github_login,
    parse_allowed_users,
)


def test_parse_allowed_users_normalizes() -> None:
    assert parse_allowed_users(" Alice, BOB ,,carol ") == frozenset({"alice", "bob", "carol"})


@pytest.mark.parametrize("raw", [None, "", "   ", " , ,"])
def test_parse_allowed_users_blank_means_no_restriction(raw) -> None:
    assert parse_allowed_users(raw) == frozenset()
    ensure_user_allowed("anyone", parse_allowed_users(raw))


def test_ensure_user_allowed_rejects_with_username_in_message() -> None:
    with pytest.raises(AccessDeniedError) as exc_info:
        ensure_user_allowed("Mallory", frozenset({"alice"}))
    assert exc_info.value.username == "Mallory"
    assert "@Mallory" in str(exc_info.value)


def test_check_oauth_state_exact_match() -> None:
    assert check_oauth_state("code-1", "s", "s") == "code-1"
    with pytest.raises(InvalidOAuthStateError):
        check_oauth_state("code-1", "S", "s")
    with pytest.raises(InvalidOAuthStateError):
        check_oauth_state("code-1", "s", None)


@pytest.mark.asyncio
async def test_github_login_state_mismatch_makes_no_calls(session_manager) -> None:
    github = MagicMock()
    github.exchange_code = AsyncMock()
    with pytest.raises(InvalidOAuthStateError):
        await github_login(
            "code",
            "state-a",
            "state-b",
            github=github,
            sessions=session_manager,
            cipher=TokenCipher("secret"),
            allowed_users=frozenset(),
        )
    github.exchange_code.assert_not_awaited()


@pytest.mark.asyncio
async def test_github_login_denied_before_encryption(session_manager) -> None:
    """allowlist 거부 시 암호화·DB 단계까지 가지 않음."""
    github = MagicMock()
    github.exchange_code = AsyncMock(return_value=GitHubTokenResponse(access_token="t"))
    github.fetch_profile = AsyncMock(return_value=GitHubUser(id=1, login="eve"))
    cipher = MagicMock()
    with pytest.raises(AccessDeniedError):
        await github_login(
            "code",
            "s",
            "s",
            github=github,
            sessions=session_manager,
            cipher=cipher,
            allowed_users=frozenset({"alice"}),
        )
    cipher.encrypt.assert_not_called()


@pytest.mark.asyncio
async def test_existing_user_without_token_row_gets_one(session_manager, fake_db, repos) -> None:
    repos.get_by_github_id.return_value = MagicMock(id="existinguser0001")
    repos.update_token_for_user.return_value = False
    github = MagicMock()
    github.exchange_code = AsyncMock(return_value=GitHubTokenResponse(access_token="t"))
    github.fetch_profile = AsyncMock(return_value=GitHubUser(id=7, login="alice"))

    cookie = await github_login(
        "code",
        "s",
        "s",
        github=github,
        sessions=session_manager,
        cipher=TokenCipher("secret"),
        allowed_users=frozenset(),
    )

    assert cookie.value == "sess-id"
    repos.create_user.assert_not_awaited()
    repos.create_token.assert_awaited_once()
    assert repos.create_token.await_args.args[1] == "existinguser0001"


@pytest.mark.asyncio
async def test_get_current_session_without_cookie_skips_db(session_manager, fake_db, repos) -> None:
    assert await get_current_session(None, session_manager) is None
    assert await get_current_session("", session_manager) is None
    repos.get_session.assert_not_awaited()
