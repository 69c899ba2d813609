"""Auth API. GitHub OAuth callback → 세션 쿠키."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from app.core.config import settings
from app.core.crypto import TokenCipher, get_token_cipher
from app.services.auth_service import (
    AccessDeniedError,
    InvalidOAuthStateError,
    get_current_session,
    github_login,
    parse_allowed_users,
)
from app.services.github_oauth import GitHubOAuthClient, OAuthRequestError, get_github_client
from app.services.session_service import SessionManager, get_session_manager

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.get("/github")
async def get_github_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    github: GitHubOAuthClient = Depends(get_github_client),
    sessions: SessionManager = Depends(get_session_manager),
    cipher: TokenCipher = Depends(get_token_cipher),
) -> Response:
    """
    GitHub OAuth redirect 수신.
    302 → / (세션 쿠키 설정) | 400 state·code 오류 또는 code 거부 | 403 allowlist 밖 | 500 그 외.
    이미 로그인된 세션이면 아무 처리 없이 / 로 보낸다.
    """
    try:
        current = await get_current_session(
            request.cookies.get(sessions.cookie_name), sessions
        )
        if current is not None:
            return RedirectResponse("/", status_code=302)

        cookie = await github_login(
            code,
            state,
            request.cookies.get(settings.github_oauth_state_cookie),
            github=github,
            sessions=sessions,
            cipher=cipher,
            allowed_users=parse_allowed_users(settings.github_allowed_users),
        )
    except InvalidOAuthStateError:
        return Response(status_code=400)
    except OAuthRequestError as e:
        logger.warning("GitHub rejected authorization code: %s", e)
        return Response(status_code=400)
    except AccessDeniedError as e:
        logger.info("GitHub login denied for @%s (not in allowlist)", e.username)
        return PlainTextResponse(str(e), status_code=403)
    except Exception:
        logger.exception("GitHub auth error")
        return Response(status_code=500)

    response = RedirectResponse("/", status_code=302)
    cookie.apply(response)
    return response
