from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, PostgresDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    SERVICE_NAME: str = Field(default="bloom-chat")
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8100)
    # Semicolon separated, e.g. "http://localhost:3000;https://chat.example.com"
    ALLOWED_ORIGINS: str = Field(default="http://localhost:3000")
    SHUTDOWN_TIMEOUT: int = Field(default=10)

    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.ALLOWED_ORIGINS.split(";") if item.strip()]


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="bloom")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            password = data.get("POSTGRES_PASSWORD", "postgres")
            if isinstance(password, SecretStr):
                password = password.get_secret_value()
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=password,
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "bloom"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class CompletionSettings(CustomSettings):
    """Upstream chat-completion endpoint.

    Env vars:
    - COMPLETION_API_URL
    - COMPLETION_API_KEY (or AKASH_API_KEY)
    - DEFAULT_MODEL
    - COMPLETION_TIMEOUT_SECONDS
    """

    COMPLETION_API_URL: str = Field(
        default="https://chatapi.akash.network/api/v1/chat/completions"
    )
    COMPLETION_API_KEY: SecretStr = Field(
        default="",
        validation_alias=AliasChoices("COMPLETION_API_KEY", "AKASH_API_KEY"),
    )
    DEFAULT_MODEL: str = Field(default="Meta-Llama-3-1-8B-Instruct-FP8")
    COMPLETION_TIMEOUT_SECONDS: float = Field(default=60.0)


class IdentitySettings(CustomSettings):
    """How the caller's owner id is read from the request.

    The id is taken from the header first, then the cookie. A fresh id is
    issued as a cookie when neither is present.
    """

    USER_ID_HEADER: str = Field(default="user-id")
    USER_ID_COOKIE: str = Field(default="user_id")
    USER_COOKIE_MAX_AGE_DAYS: int = Field(default=5 * 365)
    USER_COOKIE_SECURE: bool = Field(default=True)


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    COMPLETION: CompletionSettings = Field(default_factory=CompletionSettings)
    IDENTITY: IdentitySettings = Field(default_factory=IdentitySettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()
