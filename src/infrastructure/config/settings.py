"""
Process configuration read from the environment (and a local .env file).

Settings are resolved once per process; tests build Settings(...) directly
or clear the cache with ``get_settings.cache_clear()``.
"""

import os
from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _optional(name: str) -> Optional[str]:
    raw = os.getenv(name, "").strip()
    return raw or None


def _csv(name: str, default: str) -> list[str]:
    raw = os.getenv(name) or default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    HOST: str = "0.0.0.0"
    PORT: int = Field(default=5000, ge=1, le=65535)
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    LOG_LEVEL: str = "INFO"
    AWS_DEFAULT_REGION: str = "us-east-1"
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"], min_length=1)

    LLM_ENABLED: bool = False
    BEDROCK_MODEL_ID: Optional[str] = None
    LLM_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=1.0)
    LLM_MAX_TOKENS: int = Field(default=2048, ge=1)

    MONGODB_URI: Optional[str] = None
    MONGODB_DATABASE: str = "trading_chatbot"

    QUOTE_CACHE_TTL_SECONDS: float = Field(default=60.0, gt=0)
    RATE_LIMIT_PER_MINUTE: int = Field(default=30, ge=1)
    MOCK_QUOTES_ENABLED: bool = False

    SECRETS_ARN: Optional[str] = None
    LANGFUSE_PUBLIC_KEY: Optional[str] = None

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def tracing_enabled(self) -> bool:
        return bool(self.LANGFUSE_PUBLIC_KEY)

    @classmethod
    def from_env(cls) -> "Settings":
        values = {
            "HOST": os.getenv("HOST", "0.0.0.0"),
            "PORT": os.getenv("PORT", "5000"),
            "ENVIRONMENT": os.getenv("ENVIRONMENT", "development").strip().lower(),
            "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").strip().upper(),
            "AWS_DEFAULT_REGION": os.getenv("AWS_DEFAULT_REGION", "us-east-1"),
            "CORS_ORIGINS": _csv("CORS_ORIGINS", "*"),
            "LLM_ENABLED": _flag("LLM_ENABLED"),
            "BEDROCK_MODEL_ID": _optional("BEDROCK_MODEL_ID"),
            "LLM_TEMPERATURE": os.getenv("LLM_TEMPERATURE", "0.7"),
            "LLM_MAX_TOKENS": os.getenv("LLM_MAX_TOKENS", "2048"),
            "MONGODB_URI": _optional("MONGODB_URI"),
            "MONGODB_DATABASE": os.getenv("MONGODB_DATABASE", "trading_chatbot"),
            "QUOTE_CACHE_TTL_SECONDS": os.getenv("QUOTE_CACHE_TTL_SECONDS", "60"),
            "RATE_LIMIT_PER_MINUTE": os.getenv("RATE_LIMIT_PER_MINUTE", "30"),
            "MOCK_QUOTES_ENABLED": _flag("MOCK_QUOTES_ENABLED"),
            "SECRETS_ARN": _optional("SECRETS_ARN"),
            "LANGFUSE_PUBLIC_KEY": _optional("LANGFUSE_PUBLIC_KEY"),
        }
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings.from_env()
