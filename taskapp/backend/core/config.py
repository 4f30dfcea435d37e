# taskapp/backend/core/config.py
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 기본 앱 설정
    app_env: str = Field("dev", alias="APP_ENV")
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # DB (비어 있으면 로컬 SQLite 파일 사용)
    database_url: str = Field("", alias="DATABASE_URL")

    cors_allow_origins: str = Field(
        "http://localhost:3000,http://localhost:8000", alias="CORS_ALLOW_ORIGINS"
    )

    # 외부 인증 서비스 (GoTrue 호환 REST)
    auth_url: str = Field("", alias="AUTH_URL")
    auth_anon_key: str = Field("", alias="AUTH_ANON_KEY")
    # 설정되어 있으면 access token을 로컬에서 검증, 비어 있으면 /user 호출로 검증
    auth_jwt_secret: str = Field("", alias="AUTH_JWT_SECRET")
    auth_jwt_audience: str = Field("authenticated", alias="AUTH_JWT_AUDIENCE")
    auth_timeout_seconds: float = Field(10.0, alias="AUTH_TIMEOUT_SECONDS")

    # 세션 쿠키
    access_cookie_name: str = Field("sb-access-token", alias="ACCESS_COOKIE_NAME")
    refresh_cookie_name: str = Field("sb-refresh-token", alias="REFRESH_COOKIE_NAME")
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")

    # 가입 확인 메일의 리다이렉트 origin
    site_url: str = Field("http://localhost:8000", alias="SITE_URL")

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


settings = Settings()
