from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


LENDING_API_URLS: dict[str, str] = {
    "development": "https://dev-paisa108.tejsoft.com/",
    "staging": "https://staging-api.paisa108.com/api/",
    "production": "https://api.paisa108.com/api/",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    lending_api_base_url: str | None = Field(default=None, alias="LENDING_API_BASE_URL")
    lending_api_timeout_seconds: float = Field(default=15.0, alias="LENDING_API_TIMEOUT_SECONDS")

    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=480, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    session_timeout_minutes: int = Field(default=30, alias="SESSION_TIMEOUT_MINUTES")

    rate_limit_per_minute: int = Field(default=120, alias="RATE_LIMIT_PER_MINUTE")
    rate_limit_storage_uri: str | None = Field(default=None, alias="RATE_LIMIT_STORAGE_URI")
    login_attempt_limit: int = Field(default=5, alias="LOGIN_ATTEMPT_LIMIT")
    login_lockout_minutes: int = Field(default=15, alias="LOGIN_LOCKOUT_MINUTES")

    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:8080", "http://127.0.0.1:8080"],
        alias="ALLOWED_ORIGINS",
    )
    enable_hsts: bool = Field(default=False, alias="ENABLE_HSTS")
    content_security_policy: str | None = Field(default=None, alias="CONTENT_SECURITY_POLICY")
    content_security_policy_report_only: bool = Field(
        default=False, alias="CONTENT_SECURITY_POLICY_REPORT_ONLY"
    )

    storage_provider: Literal["local", "s3"] = Field(default="local", alias="STORAGE_PROVIDER")
    s3_bucket: str | None = Field(default=None, alias="S3_BUCKET")
    aws_region: str = Field(default="ap-south-1", alias="AWS_REGION")
    cognito_identity_pool_id: str | None = Field(default=None, alias="COGNITO_IDENTITY_POOL_ID")
    upload_max_bytes: int = Field(default=10 * 1024 * 1024, alias="UPLOAD_MAX_BYTES")
    local_upload_dir: str = Field(default="./uploads", alias="LOCAL_UPLOAD_DIR")
    public_base_url: str = Field(default="http://localhost:8000", alias="PUBLIC_BASE_URL")

    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    @property
    def resolved_lending_api_base_url(self) -> str:
        url = self.lending_api_base_url or LENDING_API_URLS.get(
            self.environment, LENDING_API_URLS["development"]
        )
        return url if url.endswith("/") else f"{url}/"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
