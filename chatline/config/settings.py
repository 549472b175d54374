"""Application settings using Pydantic BaseSettings."""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = "You are a helpful, friendly AI assistant. Keep responses concise."


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    environment: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    # Database
    database_url: str = Field(default="sqlite:///./data/chatline.db")
    auto_create_schema: bool = Field(default=True)

    # Provider (OpenAI-compatible, OpenRouter by default)
    provider_base_url: str = Field(default="https://openrouter.ai/api/v1")
    provider_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("provider_api_key", "openrouter_api_key"),
    )
    provider_model: str = Field(default="mistralai/mistral-7b-instruct:free")
    provider_max_tokens: int = Field(default=500, gt=0)
    provider_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    provider_timeout_seconds: int = Field(default=30, gt=0)
    provider_max_retries: int = Field(default=0, ge=0)
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)
    readiness_check_provider: bool = Field(default=True)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        vv = (v or "").strip().lower()
        if vv not in {"development", "staging", "production"}:
            raise ValueError("ENVIRONMENT must be one of: development, staging, production")
        return vv

    @field_validator("system_prompt")
    @classmethod
    def validate_system_prompt(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("SYSTEM_PROMPT must not be empty")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
