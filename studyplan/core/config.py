import secrets
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ASYNC_DB_PREFIXES = ("sqlite+aiosqlite://", "postgresql+asyncpg://")


class Settings(BaseSettings):
    """
    Process configuration, read from the environment and an optional .env.

    Unknown keys in .env are ignored so one file can serve several tools.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ---- service ----
    PROJECT_NAME: str = "Study Planner API"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:8081"])

    # ---- storage ----
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./studyplan.db",
        description="Async SQLAlchemy URL",
    )
    SQLALCHEMY_ECHO: bool = False

    # ---- tokens ----
    # A random key means tokens die with the process; set one in production.
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60, ge=1)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, ge=1)

    # ---- syllabus input ----
    MAX_FILE_SIZE_MB: int = Field(default=50, ge=1, le=500, description="Upload limit in megabytes")
    MAX_EXTRACTED_TEXT_CHARS: int = Field(
        default=10000,
        ge=100,
        description="Cleaned document text is cut to this length",
    )
    MIN_SYLLABUS_CHARS: int = Field(
        default=50,
        ge=1,
        description="Below this the text is not worth sending to the model",
    )

    # ---- chat-completion provider ----
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    LLM_MAX_TOKENS: int = Field(default=2000, ge=100, le=8192)
    LLM_TEMPERATURE: float = Field(default=0.3, ge=0.0, le=2.0)
    LLM_REQUEST_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0)
    EXTRACTION_MAX_INPUT_CHARS: int = Field(
        default=8000,
        ge=100,
        description="Prompt input is cut to this length",
    )

    # ---- review drafts ----
    REVIEW_DRAFT_MAX: int = Field(default=500, ge=1)
    REVIEW_DRAFT_TTL_SECONDS: int = Field(default=24 * 3600, ge=60)

    @property
    def MAX_FILE_SIZE_BYTES(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @field_validator("ALGORITHM")
    @classmethod
    def check_algorithm(cls, v: str) -> str:
        if not v.startswith("HS"):
            raise ValueError("Only HMAC (HS*) JWT algorithms are supported")
        return v

    @field_validator("DATABASE_URL")
    @classmethod
    def check_async_driver(cls, v: str) -> str:
        if not v.startswith(ASYNC_DB_PREFIXES):
            raise ValueError(f"DATABASE_URL must use an async driver: {', '.join(ASYNC_DB_PREFIXES)}")
        return v


settings = Settings()
