"""환경 변수 기반 설정. pydantic-settings 사용."""

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """앱 설정. 환경변수에서 로드. 시크릿은 SecretStr로 마스킹, 필수 시크릿은 기본값 없음(Fail-fast)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    sentry_dsn: SecretStr | None = None
    environment: str = "development"  # Sentry/쿠키 secure 판단용. production, staging, development 등.

    database_url: str | None = None
    db_connect_retries: int = Field(5, ge=1, le=20)  # 부팅 시 연결 실패 재시도 횟수.
    db_connect_retry_interval_sec: float = Field(2.0, ge=0.5, le=60.0)  # 재시도 간격(초).

    # GitHub OAuth (필수: 기본값 없음 → 부팅 시점 Fail-fast)
    github_client_id: str
    github_client_secret: SecretStr
    github_redirect_uri: str | None = None
    # 로그인 허용 GitHub username 목록(쉼표 구분, 대소문자 무시). 비어 있으면 모든 GitHub 유저 허용.
    github_allowed_users: str = ""
    # 로그인 시작 단계에서 심어둔 CSRF state 쿠키 이름.
    github_oauth_state_cookie: str = "github_oauth_state"

    # GitHub access token 암호화 키. base64 16/24/32바이트 키 또는 임의 문자열(SHA-256 파생).
    crypto_key: SecretStr

    # 세션 쿠키
    session_cookie_name: str = "auth_session"
    session_expire_days: int = Field(30, ge=1, le=365)
    # None이면 production일 때만 Secure 속성 부여.
    session_cookie_secure: bool | None = None

    # CORS
    allowed_origins: str = ""

    @property
    def is_production(self) -> bool:
        return (self.environment or "").strip().lower() == "production"

    @model_validator(mode="after")
    def fail_fast_production(self: "Settings") -> "Settings":
        """프로덕션 환경 시 필수 변수 누락이면 부팅 거부(Fail-Fast)."""
        if not self.is_production:
            return self
        missing: list[str] = []
        if not (self.database_url or "").strip():
            missing.append("DATABASE_URL")
        if not (self.github_client_id or "").strip():
            missing.append("GITHUB_CLIENT_ID")
        if not (self.github_client_secret.get_secret_value() or "").strip():
            missing.append("GITHUB_CLIENT_SECRET")
        if not (self.crypto_key.get_secret_value() or "").strip():
            missing.append("CRYPTO_KEY")
        if missing:
            raise ValueError(
                f"Production environment requires these variables to be set: {', '.join(missing)}. "
                "Set them in Secret Manager or environment before boot."
            )
        return self


settings = Settings()
