from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import secrets


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables or .env.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # Ignore extra fields in .env file
    )

    # -------------------------
    # Database
    # -------------------------
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./lms_quiz.db",
        description="SQLAlchemy async URL (postgresql+asyncpg://... in production)"
    )

    # -------------------------
    # Security / Auth
    # -------------------------
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # -------------------------
    # Application
    # -------------------------
    PROJECT_NAME: str = "LMS Quiz API"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    SQLALCHEMY_ECHO: bool = False
    DB_POOL_MIN_SIZE: Optional[int] = None
    DB_POOL_MAX_SIZE: Optional[int] = None

    # =========================================================
    # Quiz attempt rules
    # =========================================================
    # Students may only enroll this many minutes after the quiz starts.
    # 0 disables the limit (the quiz window alone applies).
    ENROLL_LATE_WINDOW_MINUTES: int = Field(
        default=15,
        ge=0,
        description="Minutes after quiz start during which enrollment is allowed"
    )

    SUBMIT_GRACE_SECONDS: int = Field(
        default=30,
        ge=0,
        description="Seconds after quiz end during which a submission is still accepted"
    )

    @field_validator("ALGORITHM")
    def validate_algorithm(cls, v):
        if not v or not isinstance(v, str):
            raise ValueError("ALGORITHM must be a non-empty string.")
        return v

    @field_validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()


settings = Settings()
