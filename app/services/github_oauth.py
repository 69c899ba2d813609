"""GitHub OAuth 클라이언트. code → access token 교환, /user 프로필 조회."""

import logging

import httpx
from fastapi import Depends
from pydantic import ValidationError

from app.core.config import settings
from app.core.deps import get_httpx_client
from app.schemas.github import GitHubTokenResponse, GitHubUser

logger = logging.getLogger(__name__)

GITHUB_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"


class OAuthError(Exception):
    """GitHub OAuth 호출 예외 공통 베이스."""

    pass


class OAuthRequestError(OAuthError):
    """GitHub가 authorization code를 거부(만료·재사용·위조). 호출부에서 400으로 변환."""

    def __init__(self, code: str, description: str | None = None) -> None:
        self.code = code
        self.description = description
        super().__init__(f"{code}: {description}" if description else code)


class OAuthTransportError(OAuthError):
    """네트워크 오류 또는 해석 불가 응답. code 문제와 구분되는 일반 실패."""

    pass


class GitHubOAuthClient:
    """GitHub OAuth App 클라이언트. http_client는 lifespan 싱글톤을 주입받는다."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        redirect_uri: str | None = None,
    ) -> None:
        self._http = http_client
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri

    async def exchange_code(self, code: str) -> GitHubTokenResponse:
        """
        Authorization code를 access token으로 교환.
        GitHub는 잘못된 code에도 200 + {"error": "bad_verification_code"}를 돌려주므로
        error 필드로 거부 여부를 판단한다.
        """
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
        }
        if self._redirect_uri:
            data["redirect_uri"] = self._redirect_uri
        try:
            resp = await self._http.post(
                GITHUB_ACCESS_TOKEN_URL,
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.warning("GitHub token exchange network error: %s", e, exc_info=True)
            raise OAuthTransportError("GitHub token endpoint unreachable") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        # 5xx는 body에 error가 있어도 GitHub 장애. code 거부로 보지 않는다.
        if resp.status_code >= 500:
            logger.warning(
                "GitHub token exchange failed: status=%s error=%s", resp.status_code, error
            )
            raise OAuthTransportError(f"Unexpected token endpoint status {resp.status_code}")
        if error:
            raise OAuthRequestError(str(error), body.get("error_description"))
        if resp.status_code != 200:
            logger.warning(
                "GitHub token exchange failed: status=%s error=%s", resp.status_code, error
            )
            raise OAuthTransportError(f"Unexpected token endpoint status {resp.status_code}")

        try:
            return GitHubTokenResponse.model_validate(body)
        except ValidationError as e:
            raise OAuthTransportError("Invalid GitHub token response") from e

    async def fetch_profile(self, access_token: str) -> GitHubUser:
        """Bearer 토큰으로 /user 조회. 비정상 status는 httpx.HTTPStatusError 전파."""
        resp = await self._http.get(
            GITHUB_USER_URL,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
            },
        )
        resp.raise_for_status()
        return GitHubUser.model_validate(resp.json())


def get_github_client(
    http_client: httpx.AsyncClient = Depends(get_httpx_client),
) -> GitHubOAuthClient:
    """FastAPI Depends용. 설정값 + 공유 AsyncClient로 GitHubOAuthClient 구성."""
    return GitHubOAuthClient(
        http_client,
        client_id=settings.github_client_id,
        client_secret=settings.github_client_secret.get_secret_value(),
        redirect_uri=settings.github_redirect_uri,
    )
