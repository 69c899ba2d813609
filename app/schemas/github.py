"""GitHub OAuth·API 응답 Pydantic 스키마. model_validate로 검증 (cast 금지)."""

from pydantic import BaseModel, ConfigDict


class GitHubTokenResponse(BaseModel):
    """https://github.com/login/oauth/access_token 성공 응답."""

    access_token: str
    token_type: str = "bearer"
    scope: str | None = None


class GitHubUser(BaseModel):
    """
    https://api.github.com/user 응답 중 사용하는 필드.
    id는 문자열로 와도 숫자로 변환해 저장·비교한다.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    login: str
    email: str | None = None
    name: str | None = None
