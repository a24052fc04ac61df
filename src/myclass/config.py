from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = Field("sqlite:///myclass.db")
    api_title: str = Field("MyClass API")
    log_level: str = Field("INFO")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    auto_create_tables: bool = Field(True)

    jwt_secret: str = Field("myclass_secret_key")
    jwt_algorithm: str = Field("HS256")
    access_token_expire_minutes: int = Field(60 * 24)
    bcrypt_rounds: int = Field(12)

    upload_dir: str = Field("uploads")
    max_upload_bytes: int = Field(100 * 1024 * 1024)

    reset_code_ttl_minutes: int = Field(60)
    # Development only: echo the reset code back in the API response.
    expose_reset_code: bool = Field(False)

    resend_api_key: str = Field("")
    email_from: str = Field("MyClass <onboarding@resend.dev>")
    email_timeout_seconds: float = Field(10.0)

    rate_limit_enabled: bool = Field(True)


settings = Settings()
