"""Pytest fixtures. 테스트 시 DB·GitHub 없이 실행 가능하도록 환경 조정."""

import os
from contextlib import asynccontextmanager
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# 로컬 .env에 DATABASE_URL이 있어도 테스트는 DB 없이 부팅.
os.environ["DATABASE_URL"] = ""
os.environ["GITHUB_ALLOWED_USERS"] = ""
# Settings Fail-fast 대비: 테스트 시 필수 env 설정
os.environ.setdefault("GITHUB_CLIENT_ID", "test-github-client-id")
os.environ.setdefault("GITHUB_CLIENT_SECRET", "test-github-client-secret")
os.environ.setdefault("CRYPTO_KEY", "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY=")


@pytest.fixture
def app():
    from app.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """FastAPI TestClient. lifespan 미실행(DB 미초기화), 리다이렉트 추적 안 함."""
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """auth_service.transaction()을 DB 없는 세션으로 교체. 롤백 여부는 exited_with로 확인."""
    db = MagicMock(name="db")
    db.exited_with = None

    @asynccontextmanager
    async def _transaction():
        try:
            yield db
        except Exception as e:
            db.exited_with = e
            raise

    monkeypatch.setattr("app.services.auth_service.transaction", _transaction)
    return db


@pytest.fixture
def repos(monkeypatch: pytest.MonkeyPatch) -> SimpleNamespace:
    """Repository 함수 전부 AsyncMock. 기본: 신규 유저, 세션 쿠키 없음."""
    from app.repositories import github_token_repository, session_repository, user_repository

    mocks = SimpleNamespace(
        get_by_github_id=AsyncMock(return_value=None),
        create_user=AsyncMock(),
        create_token=AsyncMock(),
        update_token_for_user=AsyncMock(return_value=True),
        create_session=AsyncMock(return_value=SimpleNamespace(id="sess-id")),
        get_session=AsyncMock(return_value=None),
        delete_session=AsyncMock(),
        update_session_expiry=AsyncMock(),
    )
    monkeypatch.setattr(user_repository, "get_by_github_id", mocks.get_by_github_id)
    monkeypatch.setattr(user_repository, "create_user", mocks.create_user)
    monkeypatch.setattr(github_token_repository, "create_token", mocks.create_token)
    monkeypatch.setattr(
        github_token_repository, "update_token_for_user", mocks.update_token_for_user
    )
    monkeypatch.setattr(session_repository, "create", mocks.create_session)
    monkeypatch.setattr(session_repository, "get_by_id", mocks.get_session)
    monkeypatch.setattr(session_repository, "delete_by_id", mocks.delete_session)
    monkeypatch.setattr(session_repository, "update_expiry", mocks.update_session_expiry)
    return mocks


@pytest.fixture
def session_manager():
    from app.services.session_service import SessionManager

    return SessionManager(
        cookie_name="auth_session",
        expires_in=timedelta(days=30),
        secure=False,
    )
